"""
Session Schemas
===============
Value types for a playback session. Every operation on a session
produces a new ``SessionState``; nothing here is mutated in place.

Key design decisions:
- ``countdown_seconds`` and ``timer_started`` never hold at the same
  time. While the 3-2-1 pre-roll runs the main timer has not started.
- ``step_index == total_steps`` is the synthetic "complete" position.
- ``phase`` and ``active_phase`` are derived, never stored, so they can
  not drift from the fields they summarise.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from routine_player.models.step import ExpandedStep


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Phase(str, Enum):
    IDLE = "idle"
    COUNTDOWN = "countdown"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETE = "complete"


class ActivePhase(str, Enum):
    """Which tick stream, if any, should currently be running."""

    NONE = "none"
    COUNTDOWN = "countdown"
    MAIN = "main"


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

class SessionSettings(BaseModel):
    """User toggles read on every transition decision."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    sound_enabled: bool = Field(default=False, alias="soundEnabled")
    countdown_enabled: bool = Field(default=False, alias="countdownEnabled")
    auto_advance_enabled: bool = Field(default=False, alias="autoAdvanceEnabled")


class SessionSettingsUpdate(BaseModel):
    """Partial settings payload; omitted fields keep their value."""

    model_config = ConfigDict(populate_by_name=True)

    sound_enabled: Optional[bool] = Field(default=None, alias="soundEnabled")
    countdown_enabled: Optional[bool] = Field(default=None, alias="countdownEnabled")
    auto_advance_enabled: Optional[bool] = Field(default=None, alias="autoAdvanceEnabled")


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------

class SessionState(BaseModel):
    """Position in the step sequence plus per-step timer state."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    step_index: int = Field(default=0, ge=0, alias="stepIndex")
    total_steps: int = Field(default=0, ge=0, alias="totalSteps")
    elapsed_seconds: int = Field(default=0, ge=0, alias="elapsedSeconds")
    countdown_seconds: Optional[int] = Field(default=None, ge=1, alias="countdownSeconds")
    is_paused: bool = Field(default=True, alias="isPaused")
    timer_started: bool = Field(default=False, alias="timerStarted")
    settings: SessionSettings = Field(default_factory=SessionSettings)

    @property
    def is_complete(self) -> bool:
        return self.step_index >= self.total_steps

    @computed_field  # type: ignore[prop-decorator]
    @property
    def phase(self) -> Phase:
        if self.is_complete:
            return Phase.COMPLETE
        if self.countdown_seconds is not None:
            return Phase.COUNTDOWN
        if self.timer_started:
            return Phase.PAUSED if self.is_paused else Phase.RUNNING
        return Phase.IDLE

    @property
    def active_phase(self) -> ActivePhase:
        """The tick stream the current state calls for.

        A frozen countdown and a paused main timer both need no ticks.
        """
        if self.is_complete or self.is_paused:
            return ActivePhase.NONE
        if self.countdown_seconds is not None:
            return ActivePhase.COUNTDOWN
        if self.timer_started:
            return ActivePhase.MAIN
        return ActivePhase.NONE

    def idle_at(self, index: int) -> SessionState:
        """Same session, parked at *index* with all timer state cleared."""
        return self.model_copy(update={
            "step_index": index,
            "elapsed_seconds": 0,
            "countdown_seconds": None,
            "is_paused": True,
            "timer_started": False,
        })


# ---------------------------------------------------------------------------
# Response
# ---------------------------------------------------------------------------

class SessionResponse(BaseModel):
    """Snapshot returned by every /api/v1/session endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    state: SessionState
    current_step: Optional[ExpandedStep] = Field(default=None, alias="currentStep")
    set_info: str = Field(default="", alias="setInfo")
    remaining_seconds: Optional[int] = Field(default=None, alias="remainingSeconds")
    progress_pct: float = Field(default=0.0, alias="progressPct")
    signals: list[dict] = Field(
        default_factory=list,
        description="Signals raised while handling this request, oldest first.",
    )
