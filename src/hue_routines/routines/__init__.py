"""Routine definitions, track processing and the session manager."""

from .dispatch import CommandDispatcher
from .manager import RoutineManager, RoutineNotFoundError
from .model import FadeTrack, InstantTrack, RoutineDefinition, Track, Waypoint
from .scheduling import PeriodicTask
from .session import RoutineSession, RoutineStatus, StartedRoutine
from .tracks import FadeFrame, Override, detect_override, fade_frame

__all__ = [
    "CommandDispatcher",
    "RoutineManager",
    "RoutineNotFoundError",
    "FadeTrack",
    "InstantTrack",
    "RoutineDefinition",
    "Track",
    "Waypoint",
    "PeriodicTask",
    "RoutineSession",
    "RoutineStatus",
    "StartedRoutine",
    "FadeFrame",
    "Override",
    "detect_override",
    "fade_frame",
]
