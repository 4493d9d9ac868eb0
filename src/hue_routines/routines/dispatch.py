"""Fire-and-forget delivery of light commands."""

from typing import Callable
import asyncio
import logging

from ..lights.bridge import LightController
from ..lights.command import CommandResult, DeviceCommand

logger = logging.getLogger(__name__)

FailureSink = Callable[[DeviceCommand, CommandResult], None]


class CommandDispatcher:
    """
    Send commands without making the caller wait for the bridge.

    Each command runs as its own task. Failures (a failed result or an
    exception from the controller) are logged and handed to an optional
    sink; they never reach the code that submitted the command.
    """

    def __init__(
        self,
        controller: LightController,
        on_failure: FailureSink | None = None,
    ):
        self.controller = controller
        self._on_failure = on_failure
        self._pending: set[asyncio.Task] = set()
        self.failures = 0

    def submit(self, command: DeviceCommand, context: str = "tick") -> asyncio.Task:
        """Start delivering a command. Must be called from a running event loop."""
        task = asyncio.get_running_loop().create_task(self._deliver(command, context))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    def submit_all(self, commands: list[DeviceCommand], context: str = "tick") -> None:
        for command in commands:
            self.submit(command, context)

    async def _deliver(self, command: DeviceCommand, context: str) -> CommandResult:
        try:
            result = await self.controller.set_light_state(command)
        except Exception as e:
            logger.exception("Unexpected error sending %s command to light %s", context, command.light_id)
            result = CommandResult(command.light_id, ok=False, error=str(e))

        if not result.ok:
            self.failures += 1
            logger.warning("%s error light %s: %s", context.capitalize(), command.light_id, result.error)
            if self._on_failure is not None:
                self._on_failure(command, result)
        return result

    @property
    def pending(self) -> int:
        """Commands still in flight."""
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for every in-flight command to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
