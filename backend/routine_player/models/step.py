"""
Expanded Step Schemas
=====================
A step is one card the player shows: a single set of an exercise, a
combined "N sets of ..." reps card, or a rest period the expander
injected. Steps are frozen; a routine reload builds a new sequence.
"""

from __future__ import annotations

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

REST_STEP_NAME = "Rest"


class _StepBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    section: str
    name: str
    set_number: Optional[int] = Field(default=None, alias="setNumber")
    total_sets: Optional[int] = Field(default=None, alias="totalSets")
    instructions: Optional[str] = None
    feel: Optional[str] = None
    is_rest: bool = Field(default=False, alias="isRest")
    is_injected_rest: bool = Field(default=False, alias="isInjectedRest")


class TimedStep(_StepBase):
    """A step driven by the timer. Every rest step is a TimedStep."""

    type: Literal["timed"] = "timed"
    duration: int = Field(..., gt=0)
    rest_duration: Optional[int] = Field(default=None, alias="restDuration")


class RepsStep(_StepBase):
    """A step the user finishes at their own pace; the timer never runs."""

    type: Literal["reps"] = "reps"
    reps: str

    @property
    def is_combined(self) -> bool:
        """True for the single card standing in for every set."""
        return self.set_number is None


ExpandedStep = Annotated[Union[TimedStep, RepsStep], Field(discriminator="type")]


def rest_step(section: str, seconds: int) -> TimedStep:
    """Build an injected rest step of *seconds* under *section*."""
    return TimedStep(
        section=section,
        name=REST_STEP_NAME,
        duration=seconds,
        is_rest=True,
        is_injected_rest=True,
        rest_duration=seconds,
    )


# ---------------------------------------------------------------------------
# Response
# ---------------------------------------------------------------------------

class ExpansionResponse(BaseModel):
    """Returned by POST /api/v1/routines/expand."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    subtitle: str
    steps: list[ExpandedStep]
    total_steps: int = Field(..., alias="totalSteps")
    total_duration_seconds: int = Field(
        ...,
        alias="totalDurationSeconds",
        description="Sum of every timed step, rest included. Reps steps count as zero.",
    )
