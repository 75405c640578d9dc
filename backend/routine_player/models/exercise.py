"""
Exercise Schemas
================
Pydantic models for the routine description a user authors: a title,
a subtitle and an ordered list of exercises.

Key design decisions:
- Exercises are a tagged union on ``type`` ("timed" | "reps") so the
  expander can match exhaustively instead of probing optional fields.
- Rest fields are Optional and ``0`` is accepted. The expander treats
  ``0`` exactly like a missing value (no rest step is injected).
- ``sets`` is not range-checked here; a non-positive count expands to
  nothing rather than failing the whole routine.
"""

from __future__ import annotations

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Exercise variants
# ---------------------------------------------------------------------------

class _ExerciseBase(BaseModel):
    """Fields shared by every exercise variant."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    section: str = Field(..., description="Heading the exercise is grouped under, e.g. 'Warm-up'.")
    name: str
    sets: int = Field(..., description="Number of sets. Non-positive values expand to no steps.")
    instructions: Optional[str] = None
    feel: Optional[str] = Field(default=None, description="Cue for what the user should feel.")
    rest_between_sets: Optional[int] = Field(
        default=None,
        ge=0,
        alias="restBetweenSets",
        description="Seconds of rest injected between sets. 0 or null means none.",
    )
    rest_after_exercise: Optional[int] = Field(
        default=None,
        ge=0,
        alias="restAfterExercise",
        description="Seconds of rest injected after the final set. 0 or null means none.",
    )


class TimedExercise(_ExerciseBase):
    """An exercise held for a fixed number of seconds per set."""

    type: Literal["timed"] = "timed"
    duration: int = Field(..., gt=0, description="Seconds per set.")


class RepsExercise(_ExerciseBase):
    """An exercise counted in repetitions rather than time."""

    type: Literal["reps"] = "reps"
    reps: str = Field(..., description="Free text shown to the user, e.g. '10 reps'.")


Exercise = Annotated[Union[TimedExercise, RepsExercise], Field(discriminator="type")]


# ---------------------------------------------------------------------------
# Routine
# ---------------------------------------------------------------------------

class RoutineConfig(BaseModel):
    """A parsed routine, as handed over by the configuration loader."""

    title: str = ""
    subtitle: str = ""
    exercises: list[Exercise] = Field(default_factory=list)
