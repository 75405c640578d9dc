"""
Routines Router
===============
POST /api/v1/routines/expand: Expand a routine into its display steps.

Stateless: the body is validated by the RoutineConfig schema and the
expanded sequence is returned as-is. Nothing is stored.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, status

from routine_player.models.exercise import RoutineConfig
from routine_player.models.step import ExpansionResponse
from routine_player.services.expander import expand_exercises, total_duration

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/routines", tags=["routines"])


@router.post(
    "/expand",
    response_model=ExpansionResponse,
    status_code=status.HTTP_200_OK,
    summary="Expand a routine into steps",
    description=(
        "Split each exercise into per-set steps and inject the configured rest "
        "periods. Reps exercises without rest between sets stay a single step."
    ),
    responses={
        200: {"description": "Expanded step sequence"},
        422: {"description": "Validation error (unknown exercise type, missing duration, etc.)"},
    },
)
async def expand_routine(body: RoutineConfig) -> ExpansionResponse:
    """Expand a routine."""
    steps = expand_exercises(body.exercises)
    logger.debug("Expanded %d exercises into %d steps", len(body.exercises), len(steps))
    return ExpansionResponse(
        title=body.title,
        subtitle=body.subtitle,
        steps=list(steps),
        total_steps=len(steps),
        total_duration_seconds=total_duration(steps),
    )
