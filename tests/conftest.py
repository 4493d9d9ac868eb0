"""Shared fixtures for routine tests."""

import pytest

from hue_routines.config import SchedulerConfig, parse_routines
from hue_routines.lights import MockBridge
from hue_routines.routines import RoutineManager

START = 1_700_000_000.0  # 2023-11-14T22:13:20Z


class FakeClock:
    """Manually advanced epoch-seconds clock."""

    def __init__(self, now: float = START):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float = 0.0, minutes: float = 0.0) -> None:
        self.now += seconds + minutes * 60


ROUTINES = {
    "sunrise": {
        "name": "Sunrise",
        "duration": 10,
        "override_detection": True,
        "tracks": [
            {
                "type": "fade",
                "lights": ["1"],
                "waypoints": [
                    {"time": 0, "bri": 1, "color": {"ct": 500}},
                    {"time": 10, "bri": 254, "color": {"ct": 150}},
                ],
            },
        ],
    },
    "evening": {
        "name": "Evening",
        "duration": 20,
        "override_detection": False,
        "tracks": [
            {
                "type": "fade",
                "lights": ["2", "3"],
                "waypoints": [
                    {"time": 0, "bri": 254, "color": {"xy": [0.3, 0.3]}},
                    {"time": 20, "bri": 54, "color": {"xy": [0.5, 0.4]}},
                ],
            },
            {
                "type": "instant",
                "lights": ["4"],
                "time": 5,
                "state": {"bri": 100, "ct": 400},
            },
            {
                "type": "instant",
                "lights": ["5"],
                "time": 15,
                "state": {"on": False},
            },
        ],
    },
}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def bridge():
    return MockBridge()


@pytest.fixture
def routines():
    return parse_routines(ROUTINES)


@pytest.fixture
def manager(routines, bridge, clock):
    return RoutineManager(routines, bridge, scheduler=SchedulerConfig(tick_interval=10.0), clock=clock)
