"""
Routine session manager.

Owns every running routine: starting and replacing runs, the periodic
tick that drives their tracks, completion, cancellation and status.

Lifecycle of a run:
    start() -> running -> completed (duration reached)
                       -> cancelled (cancel() or a manual override)

Every way out of the running state goes through _end(), which stops the
tick timer before the session leaves the registry.
"""

from collections.abc import Mapping
from typing import Callable
import logging
import time

from ..config.schema import AppConfig, SchedulerConfig
from ..lights.bridge import HueBridge, LightController
from .dispatch import CommandDispatcher, FailureSink
from .model import FadeTrack, InstantTrack, RoutineDefinition
from .scheduling import PeriodicTask
from .session import RoutineSession, RoutineStatus, StartedRoutine, iso_timestamp
from .tracks import (
    detect_override,
    fade_commands,
    fade_frame,
    instant_commands,
    instant_due,
    is_override_check_tick,
    tick_transition_time,
    waypoint_commands,
)

logger = logging.getLogger(__name__)


class RoutineNotFoundError(LookupError):
    """Raised when starting a routine id the store doesn't know."""

    def __init__(self, routine_id: str):
        super().__init__(f'Routine "{routine_id}" not found')
        self.routine_id = routine_id


class RoutineManager:
    """
    Runs routines against a light controller.

    All methods must be called from the event loop that runs the ticks;
    the session registry is only ever touched from that loop.

    Usage:
        manager = RoutineManager(routines, HueBridge(ip, key))
        started = manager.start("sunrise")
        manager.status("sunrise")
        manager.cancel("sunrise")
    """

    def __init__(
        self,
        routines: Mapping[str, RoutineDefinition],
        controller: LightController,
        scheduler: SchedulerConfig | None = None,
        clock: Callable[[], float] = time.time,
        on_failure: FailureSink | None = None,
    ):
        """
        Args:
            routines: Routine store, looked up on every start()
            controller: Bridge (or mock) the commands go to
            scheduler: Tick interval and override tuning
            clock: Returns the current time in epoch seconds
            on_failure: Called with (command, result) for every failed command
        """
        self.routines = routines
        self.controller = controller
        self.config = scheduler or SchedulerConfig()
        self.dispatcher = CommandDispatcher(controller, on_failure=on_failure)
        self._clock = clock
        self._sessions: dict[str, RoutineSession] = {}

    @classmethod
    def from_config(cls, config: AppConfig, **kwargs) -> "RoutineManager":
        """Build a manager talking to the configured Hue bridge."""
        if config.hue is None:
            raise ValueError("Hue bridge is not configured")
        bridge = HueBridge(
            bridge_ip=config.hue.bridge_ip,
            username=config.hue.username,
            timeout=config.hue.timeout,
        )
        return cls(config.routines, bridge, scheduler=config.scheduler, **kwargs)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def start(self, routine_id: str, test_duration_minutes: float | None = None) -> StartedRoutine:
        """
        Start a routine, replacing any run of the same routine.

        Args:
            routine_id: Key in the routine store
            test_duration_minutes: Run over this many minutes instead of the
                routine's own duration; waypoint times are rescaled to match

        Raises:
            RoutineNotFoundError: If the routine id is unknown
            ValueError: If the effective duration is not positive
        """
        routine = self.routines.get(routine_id)
        if routine is None:
            raise RoutineNotFoundError(routine_id)

        duration_minutes = test_duration_minutes or routine.duration_minutes
        if duration_minutes <= 0:
            raise ValueError(f"Duration must be positive, got {duration_minutes}")

        if routine_id in self._sessions:
            self.cancel(routine_id)

        session = RoutineSession(
            routine_id=routine_id,
            routine=routine,
            start_time=self._clock(),
            duration_ms=duration_minutes * 60_000,
            tick_interval_ms=self.config.tick_interval_ms,
        )

        for track in routine.fade_tracks:
            first = track.first
            self.dispatcher.submit_all(
                waypoint_commands(track, first, self.config.initial_transition),
                "initial set",
            )
            for light_id in track.lights:
                session.last_expected_brightness[light_id] = first.brightness

        session.timer = PeriodicTask(
            self.config.tick_interval,
            lambda: self._tick(session),
            name=f"routine:{routine_id}",
        )
        self._sessions[routine_id] = session

        logger.info(
            'Started "%s" (%g min)', routine.name, duration_minutes,
            extra={"routine_id": routine_id},
        )
        return StartedRoutine(
            routine_id=routine_id,
            name=routine.name,
            duration_minutes=duration_minutes,
            ends_at=iso_timestamp(session.end_time),
        )

    def cancel(self, routine_id: str) -> bool:
        """Stop a running routine. Returns whether one was running."""
        session = self._sessions.get(routine_id)
        if session is None:
            return False
        self._end(session)
        logger.info('Cancelled "%s"', session.name, extra={"routine_id": routine_id})
        return True

    def status(self, routine_id: str) -> RoutineStatus:
        session = self._sessions.get(routine_id)
        if session is None:
            return RoutineStatus.inactive()
        return session.status(self._clock())

    def active_statuses(self) -> list[RoutineStatus]:
        """Status of every running routine."""
        now = self._clock()
        return [session.status(now) for session in self._sessions.values()]

    def is_active(self, routine_id: str) -> bool:
        return routine_id in self._sessions

    async def tick(self, routine_id: str) -> bool:
        """
        Run one tick of a routine immediately.

        The timer calls this on its own; it is public so callers can step
        a routine deterministically. Returns False if it isn't running.
        """
        session = self._sessions.get(routine_id)
        if session is None:
            return False
        await self._tick(session)
        return True

    def close(self) -> None:
        """Cancel every running routine."""
        for routine_id in list(self._sessions):
            self.cancel(routine_id)

    # ------------------------------------------------------------------
    # Tick processing
    # ------------------------------------------------------------------

    def _is_running(self, session: RoutineSession) -> bool:
        return self._sessions.get(session.routine_id) is session

    def _end(self, session: RoutineSession) -> None:
        if session.timer is not None:
            session.timer.cancel()
        if self._is_running(session):
            del self._sessions[session.routine_id]

    async def _tick(self, session: RoutineSession) -> None:
        if not self._is_running(session):
            return

        session.tick_count += 1
        elapsed_ms = session.elapsed_ms(self._clock())

        if elapsed_ms >= session.duration_ms:
            self._complete(session)
            return

        elapsed_minutes = elapsed_ms / 60_000
        for track in session.routine.tracks:
            # an override or cancel earlier in this tick ends the run
            if not self._is_running(session):
                return
            if isinstance(track, FadeTrack):
                await self._process_fade(session, track, elapsed_minutes)
            elif isinstance(track, InstantTrack):
                self._process_instant(session, track, elapsed_minutes)

    def _complete(self, session: RoutineSession) -> None:
        for track in session.routine.fade_tracks:
            self.dispatcher.submit_all(
                waypoint_commands(track, track.last, self.config.final_transition),
                "final set",
            )
        self._end(session)
        logger.info(
            'Routine "%s" completed', session.name,
            extra={"routine_id": session.routine_id},
        )

    async def _process_fade(
        self,
        session: RoutineSession,
        track: FadeTrack,
        elapsed_minutes: float,
    ) -> None:
        frame = fade_frame(track, elapsed_minutes, session.time_scale)
        if frame is None:
            return

        if session.routine.override_detection and is_override_check_tick(
            session.tick_count, self.config.override_check_every
        ):
            override = await detect_override(
                self.controller,
                track.lights,
                session.last_expected_brightness,
                self.config.override_tolerance,
            )
            if not self._is_running(session):
                return
            if override is not None:
                logger.info(
                    "Override: %s, cancelling", override.describe(),
                    extra={"routine_id": session.routine_id},
                )
                self.cancel(session.routine_id)
                return

        transition = tick_transition_time(session.tick_interval_ms)
        for command in fade_commands(track, frame, transition):
            self.dispatcher.submit(command, "tick")
            session.last_expected_brightness[command.light_id] = frame.brightness

    def _process_instant(
        self,
        session: RoutineSession,
        track: InstantTrack,
        elapsed_minutes: float,
    ) -> None:
        if track.key in session.fired_instant_keys:
            return
        if not instant_due(track, elapsed_minutes, session.time_scale):
            return

        session.fired_instant_keys.add(track.key)
        self.dispatcher.submit_all(instant_commands(track), "instant event")
        logger.info(
            "Instant event at %gmin: lights [%s]", track.time, ",".join(track.lights),
            extra={"routine_id": session.routine_id},
        )
