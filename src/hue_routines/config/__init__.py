"""Configuration schema and loading."""

from .schema import AppConfig, HueConfig, SchedulerConfig
from .loader import configure_logging, load_config, parse_routine, parse_routines

__all__ = [
    "AppConfig",
    "HueConfig",
    "SchedulerConfig",
    "configure_logging",
    "load_config",
    "parse_routine",
    "parse_routines",
]
