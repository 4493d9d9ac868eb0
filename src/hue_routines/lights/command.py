"""Light commands and readings exchanged with the bridge."""

from dataclasses import dataclass, field
from typing import Any

# State keys that carry color in the Hue v1 API
COLOR_KEYS = ("xy", "ct", "hue", "sat")


@dataclass(frozen=True)
class DeviceCommand:
    """
    One state change for one light.

    Attributes:
        light_id: Bridge light id
        on: Power state, or None to leave it untouched
        brightness: 0-254
        transition_time: Fade duration in deciseconds
        color: Native color fields (xy / ct / hue+sat)
        extra: Other literal state fields (alert, effect, ...)
    """
    light_id: str
    on: bool | None = True
    brightness: int | None = None
    transition_time: int | None = None
    color: dict[str, Any] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_state(cls, light_id: str, state: dict[str, Any]) -> "DeviceCommand":
        """
        Build a command from a literal Hue state payload.

        Power defaults to on when the payload sets brightness or color
        without saying anything about power.
        """
        state = dict(state)
        on = state.pop("on", None)
        brightness = state.pop("bri", None)
        transition_time = state.pop("transitiontime", None)
        color = {key: state.pop(key) for key in COLOR_KEYS if key in state}

        if on is None and (brightness is not None or color):
            on = True

        return cls(
            light_id=light_id,
            on=on,
            brightness=brightness,
            transition_time=transition_time,
            color=color,
            extra=state,
        )

    def to_payload(self) -> dict[str, Any]:
        """Render the body for PUT /lights/<id>/state."""
        payload: dict[str, Any] = dict(self.extra)
        if self.on is not None:
            payload["on"] = self.on
        if self.brightness is not None:
            payload["bri"] = self.brightness
        if self.transition_time is not None:
            payload["transitiontime"] = self.transition_time
        payload.update(self.color)
        return payload


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a set-state call. Failures are values, not exceptions."""
    light_id: str
    ok: bool
    error: str | None = None


@dataclass(frozen=True)
class LightReading:
    """Reported power/brightness of a light."""
    light_id: str
    on: bool
    brightness: int | None = None
