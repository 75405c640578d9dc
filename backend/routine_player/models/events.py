"""
Session Events, Signals and Commands
====================================
Inputs to the session reducer (events), the named notifications it
raises for the audio collaborator (signals), and the deferred work it
asks its host to schedule (commands).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from routine_player.models.session import SessionSettings, SessionState


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Start:
    """Begin the current timed step: countdown first when enabled."""


@dataclass(frozen=True)
class Pause:
    pass


@dataclass(frozen=True)
class Resume:
    pass


@dataclass(frozen=True)
class Toggle:
    """The single play/pause control."""


@dataclass(frozen=True)
class Reset:
    pass


@dataclass(frozen=True)
class SessionTick:
    pass


@dataclass(frozen=True)
class CountdownTick:
    pass


@dataclass(frozen=True)
class NextStep:
    is_auto_advance: bool = False


@dataclass(frozen=True)
class PreviousStep:
    pass


@dataclass(frozen=True)
class GoToStep:
    index: int


@dataclass(frozen=True)
class Restart:
    pass


@dataclass(frozen=True)
class AutoAdvanceDue:
    """A scheduled auto-advance firing; stale unless *step_index* still matches."""

    step_index: int


@dataclass(frozen=True)
class UpdateSettings:
    settings: SessionSettings


SessionEvent = Union[
    Start, Pause, Resume, Toggle, Reset,
    SessionTick, CountdownTick,
    NextStep, PreviousStep, GoToStep, Restart,
    AutoAdvanceDue, UpdateSettings,
]


# ---------------------------------------------------------------------------
# Signals
# ---------------------------------------------------------------------------

class SignalType(str, Enum):
    COUNTDOWN_TICK = "countdown_tick"
    COUNTDOWN_FINISHED = "countdown_finished"
    TIMER_WARNING = "timer_warning"
    STEP_COMPLETED = "step_completed"
    ROUTINE_COMPLETED = "routine_completed"


@dataclass(frozen=True)
class Signal:
    type: SignalType
    step_index: int
    # Countdown number for COUNTDOWN_TICK, seconds remaining for TIMER_WARNING
    value: Optional[int] = None

    def as_dict(self) -> dict:
        return {"type": self.type.value, "step_index": self.step_index, "value": self.value}


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ScheduleAutoAdvance:
    step_index: int


# ---------------------------------------------------------------------------
# Transition
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Transition:
    """Result of applying one event: the next state plus side outputs."""

    state: SessionState
    signals: tuple[Signal, ...] = field(default_factory=tuple)
    commands: tuple[ScheduleAutoAdvance, ...] = field(default_factory=tuple)
