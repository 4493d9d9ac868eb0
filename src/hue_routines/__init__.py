"""
Waypoint-based lighting routines for Philips Hue.

- lights: color model and the bridge client
- config: configuration schema and loading
- routines: routine definitions, track processing, session manager
"""

from .lights import ColorSpec, DeviceCommand, HueBridge, MockBridge, preview_color
from .config import AppConfig, HueConfig, SchedulerConfig, configure_logging, load_config
from .routines import (
    RoutineDefinition,
    RoutineManager,
    RoutineNotFoundError,
    RoutineStatus,
    StartedRoutine,
)

__all__ = [
    "ColorSpec",
    "DeviceCommand",
    "HueBridge",
    "MockBridge",
    "preview_color",
    "AppConfig",
    "HueConfig",
    "SchedulerConfig",
    "configure_logging",
    "load_config",
    "RoutineDefinition",
    "RoutineManager",
    "RoutineNotFoundError",
    "RoutineStatus",
    "StartedRoutine",
]
