"""Hue bridge REST client (v1 API)."""

from typing import Any, Protocol
import asyncio
import logging

import requests

from .command import CommandResult, DeviceCommand, LightReading

logger = logging.getLogger(__name__)


class LightController(Protocol):
    """What the routine scheduler needs from a bridge."""

    async def set_light_state(self, command: DeviceCommand) -> CommandResult:
        ...

    async def get_light_state(self, light_id: str) -> LightReading | None:
        ...


def _bridge_error(reply: Any) -> str | None:
    """Return the first error description in a bridge reply, if any."""
    if isinstance(reply, list):
        for item in reply:
            if isinstance(item, dict) and "error" in item:
                error = item["error"]
                if isinstance(error, dict):
                    return error.get("description", "unknown bridge error")
                return str(error)
    return None


class HueBridge:
    """
    Talk to a Hue bridge over its local REST API.

    Requests are blocking, so the async methods run them in a worker
    thread. Neither async method raises: failures come back as a failed
    CommandResult or a None reading.
    """

    def __init__(
        self,
        bridge_ip: str,
        username: str,
        timeout: float = 8.0,
        session: requests.Session | None = None,
    ):
        self.bridge_ip = bridge_ip
        self.username = username
        self.timeout = timeout
        self._session = session or requests.Session()

    @property
    def base_url(self) -> str:
        return f"http://{self.bridge_ip}/api/{self.username}"

    def put_light_state(self, light_id: str, payload: dict[str, Any]) -> Any:
        """PUT /lights/<id>/state and return the decoded reply."""
        response = self._session.put(
            f"{self.base_url}/lights/{light_id}/state",
            json=payload,
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()

    def get_light(self, light_id: str) -> Any:
        """GET /lights/<id> and return the decoded reply."""
        response = self._session.get(
            f"{self.base_url}/lights/{light_id}",
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()

    async def set_light_state(self, command: DeviceCommand) -> CommandResult:
        """Send a command; report the outcome instead of raising."""
        try:
            reply = await asyncio.to_thread(
                self.put_light_state, command.light_id, command.to_payload()
            )
        except (requests.RequestException, ValueError) as e:
            return CommandResult(command.light_id, ok=False, error=str(e))

        error = _bridge_error(reply)
        if error is not None:
            return CommandResult(command.light_id, ok=False, error=error)
        return CommandResult(command.light_id, ok=True)

    async def get_light_state(self, light_id: str) -> LightReading | None:
        """Read power and brightness, or None if the light can't be read."""
        try:
            reply = await asyncio.to_thread(self.get_light, light_id)
        except (requests.RequestException, ValueError) as e:
            logger.debug("Read failed for light %s: %s", light_id, e)
            return None

        state = reply.get("state") if isinstance(reply, dict) else None
        if not isinstance(state, dict) or "on" not in state:
            logger.debug("Unexpected reply for light %s: %r", light_id, reply)
            return None

        return LightReading(
            light_id=light_id,
            on=bool(state["on"]),
            brightness=state.get("bri"),
        )


class MockBridge:
    """
    In-memory bridge for testing and dry runs.

    Every command is recorded. Lights follow their commands, so reads
    return what was last sent unless a test overrides the reading.
    """

    def __init__(self):
        self.commands: list[DeviceCommand] = []
        self.reads: list[str] = []
        self.readings: dict[str, LightReading] = {}
        self.failing_lights: set[str] = set()
        self.unreadable_lights: set[str] = set()

    async def set_light_state(self, command: DeviceCommand) -> CommandResult:
        self.commands.append(command)
        if command.light_id in self.failing_lights:
            return CommandResult(command.light_id, ok=False, error="light unreachable")

        previous = self.readings.get(command.light_id)
        on = command.on if command.on is not None else (previous.on if previous else False)
        brightness = command.brightness
        if brightness is None and previous is not None:
            brightness = previous.brightness
        self.readings[command.light_id] = LightReading(command.light_id, on, brightness)
        return CommandResult(command.light_id, ok=True)

    async def get_light_state(self, light_id: str) -> LightReading | None:
        self.reads.append(light_id)
        if light_id in self.unreadable_lights:
            return None
        return self.readings.get(light_id)

    def set_reading(self, light_id: str, on: bool, brightness: int | None = None) -> None:
        """Simulate someone changing a light by hand."""
        self.readings[light_id] = LightReading(light_id, on, brightness)

    def commands_for(self, light_id: str) -> list[DeviceCommand]:
        return [c for c in self.commands if c.light_id == light_id]

    def clear(self) -> None:
        self.commands.clear()
        self.reads.clear()
