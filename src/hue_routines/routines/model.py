"""
Routine definitions.

A routine is a fixed-length timeline made of tracks:
- FadeTrack: lights follow brightness/color waypoints, interpolated per tick
- InstantTrack: one state change sent once when its time comes

All times are minutes from routine start, on the routine's nominal
duration. Runs with a different duration rescale them.
"""

from dataclasses import dataclass, field
from typing import Any, Union

from ..lights.color import ColorSpec


@dataclass(frozen=True)
class Waypoint:
    """A keyframe: brightness (0-254) and optional color at a point in time."""
    time: float
    brightness: int
    color: ColorSpec | None = None


@dataclass(frozen=True)
class FadeTrack:
    """Lights fading through a list of waypoints (ascending by time)."""
    lights: tuple[str, ...]
    waypoints: tuple[Waypoint, ...]

    @property
    def first(self) -> Waypoint:
        return self.waypoints[0]

    @property
    def last(self) -> Waypoint:
        return self.waypoints[-1]


@dataclass(frozen=True)
class InstantTrack:
    """A literal light state applied once at a given time."""
    lights: tuple[str, ...]
    time: float
    state: dict[str, Any] = field(default_factory=dict)

    @property
    def key(self) -> str:
        """Identifies this event within a run so it fires only once."""
        return f"instant_{','.join(self.lights)}_{self.time:g}"


Track = Union[FadeTrack, InstantTrack]


@dataclass(frozen=True)
class RoutineDefinition:
    """A named routine and its tracks."""
    name: str
    duration_minutes: float
    tracks: tuple[Track, ...] = ()
    override_detection: bool = True

    @property
    def fade_tracks(self) -> list[FadeTrack]:
        return [t for t in self.tracks if isinstance(t, FadeTrack)]
