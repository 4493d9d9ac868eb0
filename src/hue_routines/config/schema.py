"""Configuration dataclasses."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ..routines.model import RoutineDefinition


@dataclass
class HueConfig:
    """Philips Hue bridge configuration."""
    bridge_ip: str
    username: str  # API key
    timeout: float = 8.0  # seconds per request


@dataclass
class SchedulerConfig:
    """Routine scheduler tuning."""
    tick_interval: float = 10.0      # seconds between ticks
    override_check_every: int = 3    # check for manual changes every N ticks
    override_tolerance: int = 20     # allowed brightness drift (0-254 scale)
    initial_transition: int = 20     # deciseconds, first waypoint on start
    final_transition: int = 10       # deciseconds, last waypoint on completion

    @property
    def tick_interval_ms(self) -> float:
        return self.tick_interval * 1000


@dataclass
class AppConfig:
    """Main application configuration."""
    hue: Optional[HueConfig] = None
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    routines: dict[str, "RoutineDefinition"] = field(default_factory=dict)
    log_level: str = "INFO"
