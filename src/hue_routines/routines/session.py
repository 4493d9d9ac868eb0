"""State of a running routine."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from ..lights.color import round_half_up
from .model import RoutineDefinition
from .scheduling import PeriodicTask
from .tracks import time_scale


def iso_timestamp(seconds: float) -> str:
    """Epoch seconds -> "2024-01-01T06:00:00.000Z"."""
    stamp = datetime.fromtimestamp(seconds, tz=timezone.utc)
    return stamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class RoutineSession:
    """
    One run of a routine. Owned by RoutineManager.

    `routine` is the definition as it was when the run started, so edits
    to the routine store don't affect a run in progress.
    """
    routine_id: str
    routine: RoutineDefinition
    start_time: float               # epoch seconds
    duration_ms: float
    tick_interval_ms: float
    tick_count: int = 0
    last_expected_brightness: dict[str, int] = field(default_factory=dict)
    fired_instant_keys: set[str] = field(default_factory=set)
    timer: PeriodicTask | None = field(default=None, repr=False)

    @property
    def name(self) -> str:
        return self.routine.name

    @property
    def duration_minutes(self) -> float:
        return self.duration_ms / 60_000

    @property
    def time_scale(self) -> float:
        """Effective / nominal duration, shared by every track of the run."""
        return time_scale(self.duration_minutes, self.routine.duration_minutes)

    @property
    def end_time(self) -> float:
        return self.start_time + self.duration_ms / 1000

    def elapsed_ms(self, now: float) -> float:
        # measured from the start time on every call, never accumulated per tick
        return max(0.0, (now - self.start_time) * 1000)

    def progress(self, now: float) -> float:
        return min(1.0, self.elapsed_ms(now) / self.duration_ms)

    def status(self, now: float) -> "RoutineStatus":
        elapsed = self.elapsed_ms(now)
        remaining = max(0.0, self.duration_ms - elapsed)
        return RoutineStatus(
            active=True,
            routine_id=self.routine_id,
            name=self.name,
            progress_percent=round_half_up(self.progress(now) * 1000) / 10,
            elapsed_seconds=round_half_up(elapsed / 1000),
            remaining_seconds=round_half_up(remaining / 1000),
            tick_count=self.tick_count,
            started_at=iso_timestamp(self.start_time),
            ends_at=iso_timestamp(self.end_time),
        )


@dataclass(frozen=True)
class RoutineStatus:
    """Snapshot of a routine's run state."""
    active: bool
    routine_id: str | None = None
    name: str | None = None
    progress_percent: float = 0.0
    elapsed_seconds: int = 0
    remaining_seconds: int = 0
    tick_count: int = 0
    started_at: str | None = None
    ends_at: str | None = None

    @classmethod
    def inactive(cls) -> "RoutineStatus":
        return cls(active=False)

    def to_dict(self) -> dict[str, Any]:
        if not self.active:
            return {"active": False}
        return {
            "active": True,
            "id": self.routine_id,
            "name": self.name,
            "progress": self.progress_percent,
            "elapsed": self.elapsed_seconds,
            "remaining": self.remaining_seconds,
            "ticks": self.tick_count,
            "startedAt": self.started_at,
            "endsAt": self.ends_at,
        }


@dataclass(frozen=True)
class StartedRoutine:
    """Returned by RoutineManager.start()."""
    routine_id: str
    name: str
    duration_minutes: float
    ends_at: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.routine_id,
            "name": self.name,
            "duration": self.duration_minutes,
            "endsAt": self.ends_at,
        }
