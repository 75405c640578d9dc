"""
Timer Transitions
=================
Pure countdown/run/pause transitions for the step currently on screen.

States (derived from SessionState, see ``Phase``):
    Idle       not started, paused, no countdown
    Countdown  3-2-1 pre-roll, ticking or frozen
    Running    main timer ticking
    Paused     main timer started, stopped
    Complete   past the last step

Only timed steps ever leave Idle. Anything that does not apply to the
current state (a tick while paused, start on a reps card, pause while
idle) is a no-op: UI events and ticks race each other, so these are
expected and silently absorbed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from routine_player.config import Settings
from routine_player.models.events import ScheduleAutoAdvance, Signal, SignalType, Transition
from routine_player.models.session import Phase, SessionState
from routine_player.models.step import ExpandedStep, TimedStep

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimerRules:
    countdown_seconds: int = 3
    warning_seconds: int = 3

    @classmethod
    def from_settings(cls, settings: Settings) -> TimerRules:
        return cls(
            countdown_seconds=settings.countdown_seconds,
            warning_seconds=settings.timer_warning_seconds,
        )


def unchanged(state: SessionState, reason: str) -> Transition:
    logger.debug("Ignored at step %d (%s): %s", state.step_index, state.phase.value, reason)
    return Transition(state=state)


def _timed(step: Optional[ExpandedStep]) -> Optional[TimedStep]:
    return step if isinstance(step, TimedStep) else None


def _warning(state: SessionState, step: Optional[ExpandedStep], rules: TimerRules) -> tuple[Signal, ...]:
    """Warning for the seconds left on a running timer, if inside the window."""
    timed = _timed(step)
    if timed is None:
        return ()
    remaining = timed.duration - state.elapsed_seconds
    if 0 < remaining <= rules.warning_seconds:
        return (Signal(SignalType.TIMER_WARNING, state.step_index, remaining),)
    return ()


# ---------------------------------------------------------------------------
# Starting
# ---------------------------------------------------------------------------

def begin(state: SessionState, step: TimedStep, rules: TimerRules) -> Transition:
    """Engage an idle timed step.

    Goes through the countdown when it is enabled and the step is not a
    rest; otherwise the main timer starts straight away.
    """
    if state.settings.countdown_enabled and not step.is_rest and rules.countdown_seconds > 0:
        n = rules.countdown_seconds
        new_state = state.model_copy(update={
            "countdown_seconds": n,
            "timer_started": False,
            "is_paused": False,
            "elapsed_seconds": 0,
        })
        return Transition(
            state=new_state,
            signals=(Signal(SignalType.COUNTDOWN_TICK, state.step_index, n),),
        )

    new_state = state.model_copy(update={
        "countdown_seconds": None,
        "timer_started": True,
        "is_paused": False,
    })
    return Transition(state=new_state, signals=_warning(new_state, step, rules))


def start(state: SessionState, step: Optional[ExpandedStep], rules: TimerRules) -> Transition:
    timed = _timed(step)
    if timed is None:
        return unchanged(state, "start needs a timed step")

    phase = state.phase
    if phase == Phase.IDLE:
        return begin(state, timed, rules)
    if phase in (Phase.PAUSED, Phase.COUNTDOWN):
        return resume(state, step, rules)
    return unchanged(state, "already running")


# ---------------------------------------------------------------------------
# Pause / resume / reset
# ---------------------------------------------------------------------------

def pause(state: SessionState) -> Transition:
    if state.phase in (Phase.RUNNING, Phase.COUNTDOWN) and not state.is_paused:
        return Transition(state=state.model_copy(update={"is_paused": True}))
    return unchanged(state, "nothing to pause")


def resume(state: SessionState, step: Optional[ExpandedStep], rules: TimerRules = TimerRules()) -> Transition:
    if _timed(step) is None:
        return unchanged(state, "resume needs a timed step")
    if state.phase in (Phase.PAUSED, Phase.COUNTDOWN) and state.is_paused:
        new_state = state.model_copy(update={"is_paused": False})
        signals = _warning(new_state, step, rules) if new_state.phase == Phase.RUNNING else ()
        return Transition(state=new_state, signals=signals)
    return unchanged(state, "nothing to resume")


def toggle(state: SessionState, step: Optional[ExpandedStep], rules: TimerRules) -> Transition:
    """Play/pause on a single control."""
    phase = state.phase
    if phase in (Phase.RUNNING, Phase.COUNTDOWN) and not state.is_paused:
        return pause(state)
    return start(state, step, rules)


def reset(state: SessionState) -> Transition:
    if state.is_complete:
        return unchanged(state, "reset after completion")
    return Transition(state=state.idle_at(state.step_index))


# ---------------------------------------------------------------------------
# Ticks
# ---------------------------------------------------------------------------

def countdown_tick(
    state: SessionState,
    step: Optional[ExpandedStep] = None,
    rules: TimerRules = TimerRules(),
) -> Transition:
    n = state.countdown_seconds
    if n is None or state.is_paused or state.is_complete:
        return unchanged(state, "countdown tick while countdown inactive")

    if n > 1:
        return Transition(
            state=state.model_copy(update={"countdown_seconds": n - 1}),
            signals=(Signal(SignalType.COUNTDOWN_TICK, state.step_index, n - 1),),
        )

    # 1 goes straight to the main timer; 0 is never shown
    new_state = state.model_copy(update={
        "countdown_seconds": None,
        "timer_started": True,
        "is_paused": False,
        "elapsed_seconds": 0,
    })
    return Transition(
        state=new_state,
        signals=(Signal(SignalType.COUNTDOWN_FINISHED, state.step_index),) + _warning(new_state, step, rules),
    )


def session_tick(state: SessionState, step: Optional[ExpandedStep], rules: TimerRules) -> Transition:
    timed = _timed(step)
    if state.phase != Phase.RUNNING or timed is None:
        return unchanged(state, "session tick while timer inactive")

    duration = timed.duration
    if state.elapsed_seconds >= duration:
        # Resumed after already finishing: stop again without a second completion
        return Transition(state=state.model_copy(update={"is_paused": True}))

    elapsed = state.elapsed_seconds + 1
    if elapsed >= duration:
        new_state = state.model_copy(update={"elapsed_seconds": elapsed, "is_paused": True})
        commands: tuple[ScheduleAutoAdvance, ...] = ()
        if state.settings.auto_advance_enabled:
            commands = (ScheduleAutoAdvance(step_index=state.step_index),)
        logger.debug("Step %d completed after %ds", state.step_index, elapsed)
        return Transition(
            state=new_state,
            signals=(Signal(SignalType.STEP_COMPLETED, state.step_index),),
            commands=commands,
        )

    signals: tuple[Signal, ...] = ()
    remaining = duration - elapsed
    if remaining <= rules.warning_seconds:
        signals = (Signal(SignalType.TIMER_WARNING, state.step_index, remaining),)
    return Transition(
        state=state.model_copy(update={"elapsed_seconds": elapsed}),
        signals=signals,
    )
