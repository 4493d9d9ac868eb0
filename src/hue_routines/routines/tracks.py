"""
Per-tick track processing.

Turns a track definition plus the elapsed time of a run into the light
commands for that tick. Nothing here touches session state; the manager
applies the results.
"""

from collections.abc import Mapping
from dataclasses import dataclass
import logging

from ..lights.bridge import LightController
from ..lights.color import ColorSpec, interpolate_color, resolve_device_color, round_half_up
from ..lights.command import DeviceCommand
from .model import FadeTrack, InstantTrack, Waypoint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FadeFrame:
    """Interpolated fade state at one moment."""
    brightness: int
    color: ColorSpec | None
    t: float


@dataclass(frozen=True)
class Override:
    """A light that no longer looks like what the routine last sent it."""
    light_id: str
    expected: int
    actual: int | None
    turned_off: bool = False

    def describe(self) -> str:
        if self.turned_off:
            return f"light {self.light_id} turned off"
        return f"light {self.light_id} bri={self.actual} vs expected={self.expected}"


def time_scale(effective_minutes: float, nominal_minutes: float) -> float:
    """Factor applied to waypoint/event times when a run is shortened or stretched."""
    if nominal_minutes <= 0:
        return 1.0
    return effective_minutes / nominal_minutes


def _find_segment(
    waypoints: tuple[Waypoint, ...],
    elapsed: float,
    scale: float,
) -> tuple[Waypoint, Waypoint]:
    if elapsed < waypoints[0].time * scale:
        return waypoints[0], waypoints[1]

    for prev, nxt in zip(waypoints, waypoints[1:]):
        if prev.time * scale <= elapsed < nxt.time * scale:
            return prev, nxt

    # past the last waypoint
    return waypoints[-2], waypoints[-1]


def fade_frame(track: FadeTrack, elapsed_minutes: float, scale: float) -> FadeFrame | None:
    """
    Interpolate a fade track at elapsed_minutes.

    Args:
        track: The fade track
        elapsed_minutes: Time since the run started
        scale: Waypoint time scale (effective / nominal duration)

    Returns:
        The frame, or None for tracks with fewer than two waypoints
    """
    if len(track.waypoints) < 2:
        return None

    prev, nxt = _find_segment(track.waypoints, elapsed_minutes, scale)
    seg_start = prev.time * scale
    seg_end = nxt.time * scale

    if seg_end > seg_start:
        t = max(0.0, min(1.0, (elapsed_minutes - seg_start) / (seg_end - seg_start)))
    else:
        t = 1.0

    brightness = round_half_up(prev.brightness + (nxt.brightness - prev.brightness) * t)
    color = interpolate_color(prev.color, nxt.color, t)
    return FadeFrame(brightness=brightness, color=color, t=t)


def fade_commands(
    track: FadeTrack,
    frame: FadeFrame,
    transition_time: int,
) -> list[DeviceCommand]:
    """One command per light in the track for this frame."""
    color = resolve_device_color(frame.color)
    return [
        DeviceCommand(
            light_id=light_id,
            on=True,
            brightness=frame.brightness,
            transition_time=transition_time,
            color=color,
        )
        for light_id in track.lights
    ]


def waypoint_commands(
    track: FadeTrack,
    waypoint: Waypoint,
    transition_time: int,
) -> list[DeviceCommand]:
    """Commands that put every light of a track at a waypoint (start/finish)."""
    frame = FadeFrame(brightness=waypoint.brightness, color=waypoint.color, t=1.0)
    return fade_commands(track, frame, transition_time)


def tick_transition_time(tick_interval_ms: float) -> int:
    """Deciseconds a light should take to reach the next tick's state."""
    return round_half_up(tick_interval_ms / 100)


def instant_due(track: InstantTrack, elapsed_minutes: float, scale: float) -> bool:
    """True once the run has reached the track's (scaled) trigger time."""
    return elapsed_minutes >= track.time * scale


def instant_commands(track: InstantTrack) -> list[DeviceCommand]:
    return [DeviceCommand.from_state(light_id, track.state) for light_id in track.lights]


def is_override_check_tick(tick_count: int, every: int) -> bool:
    return every > 0 and tick_count % every == 0


async def detect_override(
    controller: LightController,
    lights: tuple[str, ...],
    expected: Mapping[str, int],
    tolerance: int = 20,
) -> Override | None:
    """
    Compare what the lights report against what the routine last sent.

    A light counts as overridden when it reports off, or when its
    brightness is more than `tolerance` away from the expected value.
    Lights that can't be read are treated as not overridden.
    """
    for light_id in lights:
        if light_id not in expected:
            continue

        try:
            reading = await controller.get_light_state(light_id)
        except Exception as e:
            logger.debug("Override check read failed for light %s: %s", light_id, e)
            continue
        if reading is None:
            continue

        want = expected[light_id]
        if not reading.on:
            return Override(light_id, want, reading.brightness, turned_off=True)
        if reading.brightness is not None and abs(reading.brightness - want) > tolerance:
            return Override(light_id, want, reading.brightness)

    return None
