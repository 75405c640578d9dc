"""
Navigation
==========
Next / previous / go-to over the expanded step sequence.

Every move parks the session in Idle on the target step with the timer
cleared. The one exception is an automatic advance after a timed step
finishes: if auto-advance is on and the new step is timed, its timer is
engaged right away (countdown first, unless it is a rest step or the
countdown is disabled). Manual navigation never starts anything.

Out-of-range targets are no-ops, not errors.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

from routine_player.models.events import GoToStep, NextStep, PreviousStep, Restart, Signal, SignalType, Transition
from routine_player.models.session import SessionState
from routine_player.models.step import ExpandedStep, TimedStep
from routine_player.services.timer import TimerRules, begin, unchanged

if TYPE_CHECKING:
    from routine_player.services.session import SessionController

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Pure transitions
# ---------------------------------------------------------------------------

def next_step(
    state: SessionState,
    steps: Sequence[ExpandedStep],
    rules: TimerRules,
    is_auto_advance: bool = False,
) -> Transition:
    length = len(steps)
    if state.step_index >= length:
        return unchanged(state, "next past completion")

    target = state.step_index + 1
    if target >= length:
        logger.info("Routine complete after %d steps", length)
        return Transition(
            state=state.idle_at(length),
            signals=(Signal(SignalType.ROUTINE_COMPLETED, length),),
        )

    landed = state.idle_at(target)
    step = steps[target]
    if is_auto_advance and landed.settings.auto_advance_enabled and isinstance(step, TimedStep):
        return begin(landed, step, rules)
    return Transition(state=landed)


def previous_step(state: SessionState) -> Transition:
    if state.step_index <= 0:
        return unchanged(state, "previous at first step")
    return Transition(state=state.idle_at(state.step_index - 1))


def go_to_step(state: SessionState, steps: Sequence[ExpandedStep], index: int) -> Transition:
    if not 0 <= index < len(steps):
        return unchanged(state, f"go to out-of-range step {index}")
    return Transition(state=state.idle_at(index))


def restart(state: SessionState) -> Transition:
    return Transition(state=state.idle_at(0))


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------

class NavigationController:
    """Navigation calls routed through a SessionController."""

    def __init__(self, session: SessionController) -> None:
        self._session = session

    def next(self, is_auto_advance: bool = False) -> SessionState:
        return self._session.dispatch(NextStep(is_auto_advance=is_auto_advance))

    def previous(self) -> SessionState:
        return self._session.dispatch(PreviousStep())

    def go_to(self, index: int) -> SessionState:
        return self._session.dispatch(GoToStep(index=index))

    def restart(self) -> SessionState:
        return self._session.dispatch(Restart())
