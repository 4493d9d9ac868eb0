"""Configuration file loading and routine parsing."""

from pathlib import Path
from typing import Any
import logging

import yaml

from ..lights.color import ColorSpec
from ..routines.model import FadeTrack, InstantTrack, RoutineDefinition, Track, Waypoint
from .schema import AppConfig, HueConfig, SchedulerConfig

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


def load_config(config_path: Path) -> AppConfig:
    """
    Load configuration from a YAML (or JSON) file.

    Raises:
        ValueError: If a routine definition is malformed
    """
    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    # Parse Hue config
    hue = None
    if data.get("hue"):
        hue_data = data["hue"]
        hue = HueConfig(
            bridge_ip=hue_data["bridge_ip"],
            username=hue_data["username"],
            timeout=hue_data.get("timeout", 8.0),
        )

    # Parse scheduler tuning
    sched_data = data.get("scheduler") or {}
    scheduler = SchedulerConfig(
        tick_interval=sched_data.get("tick_interval", 10.0),
        override_check_every=sched_data.get("override_check_every", 3),
        override_tolerance=sched_data.get("override_tolerance", 20),
        initial_transition=sched_data.get("initial_transition", 20),
        final_transition=sched_data.get("final_transition", 10),
    )
    if scheduler.tick_interval <= 0:
        raise ValueError("scheduler.tick_interval must be positive")

    return AppConfig(
        hue=hue,
        scheduler=scheduler,
        routines=parse_routines(data.get("routines") or {}),
        log_level=str(data.get("log_level", "INFO")).upper(),
    )


def parse_routines(data: dict[str, Any]) -> dict[str, RoutineDefinition]:
    """Parse a mapping of routine id -> routine definition."""
    _require_mapping("routines", data)
    return {str(routine_id): parse_routine(str(routine_id), body) for routine_id, body in data.items()}


def parse_routine(routine_id: str, data: dict[str, Any]) -> RoutineDefinition:
    """
    Parse one JSON-shaped routine definition.

    Expected keys: name, duration (minutes), override_detection
    (or overrideDetection, default true) and tracks.

    Raises:
        ValueError: If the definition is malformed
    """
    where = f"Routine '{routine_id}'"
    _require_mapping(where, data)

    duration = data.get("duration", 10)
    if not isinstance(duration, (int, float)) or duration <= 0:
        raise ValueError(f"{where}: duration must be a positive number of minutes")

    if "override_detection" in data:
        override_detection = bool(data["override_detection"])
    else:
        override_detection = data.get("overrideDetection") is not False

    tracks = tuple(
        _parse_track(f"{where} track {i}", track_data)
        for i, track_data in enumerate(_require_list(f"{where}: tracks", data.get("tracks") or []))
    )

    return RoutineDefinition(
        name=str(data.get("name", routine_id)),
        duration_minutes=float(duration),
        tracks=tracks,
        override_detection=override_detection,
    )


def _require_mapping(where: str, value: Any) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise ValueError(f"{where}: expected a mapping, got {type(value).__name__}")
    return value


def _require_list(where: str, value: Any) -> list[Any]:
    # a bare string would otherwise iterate character by character
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"{where} must be a list, got {type(value).__name__}")
    return list(value)


def _parse_lights(where: str, data: dict[str, Any]) -> tuple[str, ...]:
    lights = tuple(str(light_id) for light_id in _require_list(f"{where}: lights", data.get("lights") or []))
    if not lights:
        raise ValueError(f"{where}: needs at least one light")
    return lights


def _parse_time(where: str, value: Any) -> float:
    if not isinstance(value, (int, float)) or value < 0:
        raise ValueError(f"{where}: time must be a non-negative number of minutes, got {value!r}")
    return float(value)


def _parse_track(where: str, data: dict[str, Any]) -> Track:
    _require_mapping(where, data)
    track_type = data.get("type")

    if track_type == "fade":
        waypoints = tuple(
            _parse_waypoint(f"{where} waypoint {i}", wp)
            for i, wp in enumerate(_require_list(f"{where}: waypoints", data.get("waypoints") or []))
        )
        if not waypoints:
            raise ValueError(f"{where}: fade track needs at least one waypoint")
        for prev, nxt in zip(waypoints, waypoints[1:]):
            if nxt.time < prev.time:
                raise ValueError(f"{where}: waypoint times must be ascending")
        return FadeTrack(lights=_parse_lights(where, data), waypoints=waypoints)

    if track_type == "instant":
        state = data.get("state") or {}
        if not isinstance(state, dict):
            raise ValueError(f"{where}: state must be a mapping")
        return InstantTrack(
            lights=_parse_lights(where, data),
            time=_parse_time(where, data.get("time")),
            state=dict(state),
        )

    raise ValueError(f"{where}: unknown track type {track_type!r}")


def _parse_waypoint(where: str, data: dict[str, Any]) -> Waypoint:
    _require_mapping(where, data)
    brightness = data.get("bri")
    if not isinstance(brightness, int) or not 0 <= brightness <= 254:
        raise ValueError(f"{where}: bri must be an integer 0-254, got {brightness!r}")

    color = None
    if data.get("color"):
        try:
            color = ColorSpec.from_dict(data["color"])
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"{where}: invalid color: {e}") from e

    return Waypoint(
        time=_parse_time(where, data.get("time")),
        brightness=brightness,
        color=color,
    )


def configure_logging(level: str = "INFO") -> None:
    """Send log records to stderr in a compact one-line format."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
