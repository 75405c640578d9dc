"""
Session Controller
==================
Walks an expanded step sequence: the 3-2-1 countdown, the per-step
timer, pause/resume, auto-advance and navigation.

Structure:
    ``reduce()``         pure ``(state, steps, event) -> Transition``. All
                         branching lives here and in the timer and
                         navigation modules it delegates to.
    SessionController    the thin imperative shell around it. Owns the
                         step sequence, the single tick handle, the
                         pending auto-advance handle and the notifier.

Tick handling:
    The state's ``active_phase`` (none | countdown | main) decides which
    tick stream runs. The controller keeps exactly one handle for it and
    tears it down whenever the phase or step changes, so a countdown
    and the main timer can never tick at the same time.

Auto-advance:
    Completing a timed step with auto-advance on yields a command keyed
    by the step index. The controller schedules it after a short delay,
    cancels it on any navigation that takes effect (including a jump to
    the current step), reset or reload. The reducer also drops it at fire
    time if the index no longer matches.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from routine_player.config import Settings, get_settings
from routine_player.models.events import (
    AutoAdvanceDue,
    CountdownTick,
    GoToStep,
    NextStep,
    Pause,
    PreviousStep,
    Reset,
    Restart,
    Resume,
    ScheduleAutoAdvance,
    SessionEvent,
    SessionTick,
    Start,
    Toggle,
    Transition,
    UpdateSettings,
)
from routine_player.models.exercise import Exercise, RoutineConfig
from routine_player.models.session import ActivePhase, SessionSettings, SessionSettingsUpdate, SessionState
from routine_player.models.step import ExpandedStep, TimedStep
from routine_player.services import navigation, timer
from routine_player.services.expander import expand_exercises
from routine_player.services.navigation import NavigationController
from routine_player.services.notifier import Notifier
from routine_player.services.scheduler import Clock, ManualClock, TimerHandle
from routine_player.services.timer import TimerRules

logger = logging.getLogger(__name__)

_NAVIGATION = (NextStep, PreviousStep, GoToStep)


# ---------------------------------------------------------------------------
# Reducer
# ---------------------------------------------------------------------------

def reduce(
    state: SessionState,
    steps: Sequence[ExpandedStep],
    event: SessionEvent,
    rules: TimerRules = TimerRules(),
) -> Transition:
    """Apply *event* to *state* over *steps*."""
    step = steps[state.step_index] if state.step_index < len(steps) else None

    if isinstance(event, Start):
        return timer.start(state, step, rules)
    if isinstance(event, Pause):
        return timer.pause(state)
    if isinstance(event, Resume):
        return timer.resume(state, step, rules)
    if isinstance(event, Toggle):
        return timer.toggle(state, step, rules)
    if isinstance(event, Reset):
        return timer.reset(state)
    if isinstance(event, SessionTick):
        return timer.session_tick(state, step, rules)
    if isinstance(event, CountdownTick):
        return timer.countdown_tick(state, step, rules)
    if isinstance(event, NextStep):
        return navigation.next_step(state, steps, rules, is_auto_advance=event.is_auto_advance)
    if isinstance(event, PreviousStep):
        return navigation.previous_step(state)
    if isinstance(event, GoToStep):
        return navigation.go_to_step(state, steps, event.index)
    if isinstance(event, Restart):
        return navigation.restart(state)
    if isinstance(event, AutoAdvanceDue):
        if event.step_index != state.step_index:
            return timer.unchanged(state, f"stale auto-advance for step {event.step_index}")
        if not state.settings.auto_advance_enabled:
            return timer.unchanged(state, "auto-advance switched off")
        return navigation.next_step(state, steps, rules, is_auto_advance=True)
    if isinstance(event, UpdateSettings):
        return Transition(state=state.model_copy(update={"settings": event.settings}))
    raise TypeError(f"Unknown session event: {type(event).__name__}")


def default_session_settings(settings: Settings | None = None) -> SessionSettings:
    settings = settings or get_settings()
    return SessionSettings(
        sound_enabled=settings.default_sound_enabled,
        countdown_enabled=settings.default_countdown_enabled,
        auto_advance_enabled=settings.default_auto_advance_enabled,
    )


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------

class SessionController:
    """Holds one session and drives it from clock ticks and user events."""

    def __init__(
        self,
        clock: Clock,
        settings: Settings | None = None,
        session_settings: SessionSettings | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._rules = TimerRules.from_settings(self._settings)
        self._clock = clock
        self._notifier = notifier or Notifier()
        self._routine: Optional[RoutineConfig] = None
        self._steps: tuple[ExpandedStep, ...] = ()
        self._state = SessionState(settings=session_settings or default_session_settings(self._settings))
        self._ticker: Optional[TimerHandle] = None
        self._ticker_key: Optional[tuple[ActivePhase, int]] = None
        self._auto_advance: Optional[TimerHandle] = None
        self.navigation = NavigationController(self)

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def steps(self) -> tuple[ExpandedStep, ...]:
        return self._steps

    @property
    def routine(self) -> Optional[RoutineConfig]:
        return self._routine

    @property
    def notifier(self) -> Notifier:
        return self._notifier

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def current_step(self) -> Optional[ExpandedStep]:
        if self._state.step_index < len(self._steps):
            return self._steps[self._state.step_index]
        return None

    @property
    def remaining_seconds(self) -> Optional[int]:
        step = self.current_step
        if not isinstance(step, TimedStep):
            return None
        return max(step.duration - self._state.elapsed_seconds, 0)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self, routine: RoutineConfig | Iterable[Exercise]) -> SessionState:
        """Expand *routine* and start a fresh session at step 0.

        Settings carry over; position and timer state do not.
        """
        if not isinstance(routine, RoutineConfig):
            routine = RoutineConfig(exercises=list(routine))

        self._cancel_auto_advance()
        self._routine = routine
        self._steps = expand_exercises(routine.exercises)
        self._state = SessionState(total_steps=len(self._steps), settings=self._state.settings)
        self._sync_ticker()
        logger.info(
            "Loaded routine '%s': %d exercises expanded to %d steps",
            routine.title, len(routine.exercises), len(self._steps),
        )
        self._notifier.publish((), self._state)
        return self._state

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def dispatch(self, event: SessionEvent) -> SessionState:
        previous = self._state
        transition = reduce(previous, self._steps, event, self._rules)
        self._state = transition.state

        moved = self._state.step_index != previous.step_index
        renavigated = isinstance(event, _NAVIGATION) and self._state != previous
        if moved or renavigated or isinstance(event, (Reset, Restart)):
            self._cancel_auto_advance()
        self._sync_ticker()
        for command in transition.commands:
            self._schedule_auto_advance(command)

        if self._state != previous or transition.signals:
            logger.debug(
                "%s: step %d %s -> step %d %s",
                type(event).__name__,
                previous.step_index, previous.phase.value,
                self._state.step_index, self._state.phase.value,
            )
            self._notifier.publish(transition.signals, self._state if self._state != previous else None)
        return self._state

    def start(self) -> SessionState:
        return self.dispatch(Start())

    def pause(self) -> SessionState:
        return self.dispatch(Pause())

    def resume(self) -> SessionState:
        return self.dispatch(Resume())

    def toggle(self) -> SessionState:
        return self.dispatch(Toggle())

    def reset(self) -> SessionState:
        return self.dispatch(Reset())

    def update_settings(self, changes: SessionSettingsUpdate) -> SessionState:
        merged = self._state.settings.model_copy(update=changes.model_dump(exclude_none=True))
        return self.dispatch(UpdateSettings(settings=merged))

    # ------------------------------------------------------------------
    # Clock plumbing
    # ------------------------------------------------------------------

    def _sync_ticker(self) -> None:
        phase = self._state.active_phase
        key = None if phase == ActivePhase.NONE else (phase, self._state.step_index)
        if key == self._ticker_key:
            return

        if self._ticker is not None:
            self._ticker.cancel()
            self._ticker = None
        self._ticker_key = key

        interval = self._settings.tick_interval_seconds
        if phase == ActivePhase.COUNTDOWN:
            self._ticker = self._clock.call_every(interval, lambda: self.dispatch(CountdownTick()))
        elif phase == ActivePhase.MAIN:
            self._ticker = self._clock.call_every(interval, lambda: self.dispatch(SessionTick()))

    def _schedule_auto_advance(self, command: ScheduleAutoAdvance) -> None:
        self._cancel_auto_advance()

        def _fire() -> None:
            self._auto_advance = None
            self.dispatch(AutoAdvanceDue(step_index=command.step_index))

        self._auto_advance = self._clock.call_later(self._settings.auto_advance_delay_seconds, _fire)
        logger.debug("Auto-advance from step %d scheduled", command.step_index)

    def _cancel_auto_advance(self) -> None:
        if self._auto_advance is not None:
            self._auto_advance.cancel()
            self._auto_advance = None


# ---------------------------------------------------------------------------
# Singleton
# ---------------------------------------------------------------------------

_default_controller: SessionController | None = None


def get_session_controller() -> SessionController:
    global _default_controller
    if _default_controller is None:
        _default_controller = SessionController(clock=ManualClock())
    return _default_controller
