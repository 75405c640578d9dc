"""
Routine Expander
================
Turns the compact exercise list a user writes into the flat sequence of
steps the player walks one at a time.

Expansion rules, per exercise in input order:
    1. Timed: one step per set. Between sets (never after the last) a
       rest step is injected when ``rest_between_sets`` is set.
    2. Reps with ``rest_between_sets``: same per-set split as timed.
    3. Reps without it: a single combined "N sets of ..." step.
    4. After the final set, ``rest_after_exercise`` injects one more rest
       step regardless of rule 1-3.

A rest value of 0 is treated exactly like a missing one: no rest step.
A zero-second card would flash past and immediately complete.

The transformation is pure and total. Malformed input is rejected by the
pydantic models before it gets here; the only thing normalised here is a
non-positive set count, which expands to nothing.
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Sequence

from routine_player.models.exercise import Exercise, RepsExercise, TimedExercise
from routine_player.models.step import ExpandedStep, RepsStep, TimedStep, rest_step

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Expansion
# ---------------------------------------------------------------------------

def expand_exercises(exercises: Iterable[Exercise]) -> tuple[ExpandedStep, ...]:
    """Expand *exercises* into an immutable step sequence."""
    steps: list[ExpandedStep] = []
    for exercise in exercises:
        steps.extend(_expand_one(exercise))
    return tuple(steps)


def _expand_one(exercise: Exercise) -> Iterator[ExpandedStep]:
    if exercise.sets <= 0:
        logger.debug("Skipping '%s': %d sets expands to nothing", exercise.name, exercise.sets)
        return

    if isinstance(exercise, TimedExercise):
        yield from _per_set(exercise)
    elif isinstance(exercise, RepsExercise):
        if exercise.rest_between_sets:
            yield from _per_set(exercise)
        else:
            yield _content_step(exercise, set_number=None)
    else:  # pragma: no cover - the union is closed
        raise TypeError(f"Unknown exercise variant: {type(exercise).__name__}")

    if exercise.rest_after_exercise:
        yield rest_step(exercise.section, exercise.rest_after_exercise)


def _per_set(exercise: Exercise) -> Iterator[ExpandedStep]:
    for set_number in range(1, exercise.sets + 1):
        yield _content_step(exercise, set_number=set_number)
        if set_number < exercise.sets and exercise.rest_between_sets:
            yield rest_step(exercise.section, exercise.rest_between_sets)


def _content_step(exercise: Exercise, set_number: int | None) -> ExpandedStep:
    common = {
        "section": exercise.section,
        "name": exercise.name,
        "set_number": set_number,
        "total_sets": exercise.sets,
        "instructions": exercise.instructions,
        "feel": exercise.feel,
    }
    if isinstance(exercise, TimedExercise):
        return TimedStep(duration=exercise.duration, **common)
    return RepsStep(reps=exercise.reps, **common)


# ---------------------------------------------------------------------------
# Display helpers
# ---------------------------------------------------------------------------

def format_time(seconds: int) -> str:
    """Format *seconds* as ``M:SS``."""
    minutes, secs = divmod(max(seconds, 0), 60)
    return f"{minutes}:{secs:02d}"


def set_info(step: ExpandedStep) -> str:
    """Return the set caption for *step*, e.g. ``"Set 2 of 3"``.

    Rest steps have no caption. A combined reps step reads
    ``"3 sets of 10 reps"``.
    """
    if step.is_rest:
        return ""
    if isinstance(step, RepsStep) and step.is_combined:
        return f"{step.total_sets} sets of {step.reps}"
    if step.set_number and step.total_sets:
        return f"Set {step.set_number} of {step.total_sets}"
    return ""


def total_duration(steps: Sequence[ExpandedStep]) -> int:
    """Sum of every timed step's duration, rest included, in seconds."""
    return sum(step.duration for step in steps if isinstance(step, TimedStep))


def progress(index: int, total: int) -> float:
    """Percentage through the routine when showing step *index*."""
    if total == 0:
        return 0.0
    return (index + 1) / total * 100
