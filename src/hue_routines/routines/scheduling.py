"""Cancellable periodic task used to drive routine ticks."""

from typing import Awaitable, Callable
import asyncio
import logging

logger = logging.getLogger(__name__)


class PeriodicTask:
    """
    Call an async callback every `interval` seconds until cancelled.

    The first call happens one interval after creation. A callback that
    raises is logged and the schedule keeps going. cancel() stops future
    calls; when invoked from inside the callback, the current call is
    allowed to return normally.
    """

    def __init__(
        self,
        interval: float,
        callback: Callable[[], Awaitable[None]],
        name: str | None = None,
    ):
        if interval <= 0:
            raise ValueError(f"Interval must be positive, got {interval}")
        self.interval = interval
        self._callback = callback
        self._stopped = False
        self._task = asyncio.get_running_loop().create_task(self._run(), name=name)

    async def _run(self) -> None:
        while not self._stopped:
            await asyncio.sleep(self.interval)
            if self._stopped:
                break
            try:
                await self._callback()
            except Exception:
                logger.exception("Periodic task %s failed", self._task.get_name())

    def cancel(self) -> None:
        """Stop scheduling further calls. Idempotent."""
        if self._stopped:
            return
        self._stopped = True
        try:
            current = asyncio.current_task()
        except RuntimeError:
            # no running loop
            current = None
        if self._task is not current:
            self._task.cancel()

    @property
    def cancelled(self) -> bool:
        return self._stopped

    def done(self) -> bool:
        return self._task.done()
