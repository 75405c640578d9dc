"""
Session Router
==============
Drives the single in-process playback session for a render client.

    POST  /api/v1/session/load          Load a routine, reset to step 0
    GET   /api/v1/session               Current snapshot
    POST  /api/v1/session/start|pause|resume|toggle|reset
    POST  /api/v1/session/next|previous|restart
    POST  /api/v1/session/goto/{index}
    PATCH /api/v1/session/settings
    POST  /api/v1/session/advance       Move the session clock forward

The session runs on a manual clock: the client owns real time and posts
``advance`` once a second. Every response carries the signals raised while
handling it, so the client can play the matching tones.

Out-of-range navigation and actions that do not apply to the current
state are not errors; the unchanged snapshot is returned.
"""

from __future__ import annotations

import logging
from typing import Callable

from fastapi import APIRouter, HTTPException, Query, status

from routine_player.models.events import Signal
from routine_player.models.exercise import RoutineConfig
from routine_player.models.session import SessionResponse, SessionSettingsUpdate
from routine_player.services.expander import progress, set_info
from routine_player.services.scheduler import ManualClock
from routine_player.services.session import SessionController, get_session_controller

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/session", tags=["session"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _require_routine(controller: SessionController) -> SessionController:
    """Raise HTTPException 409 if no routine has been loaded yet."""
    if controller.routine is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": "Load a routine before controlling the session", "code": "no_routine_loaded"},
        )
    return controller


def _snapshot(controller: SessionController, signals: list[Signal] | None = None) -> SessionResponse:
    state = controller.state
    step = controller.current_step
    if controller.routine is None:
        pct = 0.0
    elif step is None:
        pct = 100.0
    else:
        pct = progress(state.step_index, state.total_steps)
    return SessionResponse(
        title=controller.routine.title if controller.routine else "",
        state=state,
        current_step=step,
        set_info=set_info(step) if step is not None else "",
        remaining_seconds=controller.remaining_seconds,
        progress_pct=pct,
        signals=[s.as_dict() for s in signals or []],
    )


def _run(controller: SessionController, action: Callable[[], object]) -> SessionResponse:
    """Run *action* on the session, collecting the signals it raises."""
    raised: list[Signal] = []
    unsubscribe = controller.notifier.on_signal(raised.append)
    try:
        action()
    finally:
        unsubscribe()
    return _snapshot(controller, raised)


# ---------------------------------------------------------------------------
# Loading and reading
# ---------------------------------------------------------------------------

@router.post(
    "/load",
    response_model=SessionResponse,
    summary="Load a routine",
    description="Expand the routine and start a fresh session at step 0. Settings are kept.",
    responses={422: {"description": "Validation error in the routine body"}},
)
async def load_routine(body: RoutineConfig) -> SessionResponse:
    controller = get_session_controller()
    return _run(controller, lambda: controller.load(body))


@router.get("", response_model=SessionResponse, summary="Current session snapshot")
async def get_session() -> SessionResponse:
    return _snapshot(get_session_controller())


# ---------------------------------------------------------------------------
# Timer controls
# ---------------------------------------------------------------------------

@router.post("/start", response_model=SessionResponse, summary="Start the current timed step")
async def start() -> SessionResponse:
    controller = _require_routine(get_session_controller())
    return _run(controller, controller.start)


@router.post("/pause", response_model=SessionResponse, summary="Pause the timer or countdown")
async def pause() -> SessionResponse:
    controller = _require_routine(get_session_controller())
    return _run(controller, controller.pause)


@router.post("/resume", response_model=SessionResponse, summary="Resume the timer or countdown")
async def resume() -> SessionResponse:
    controller = _require_routine(get_session_controller())
    return _run(controller, controller.resume)


@router.post("/toggle", response_model=SessionResponse, summary="Play/pause")
async def toggle() -> SessionResponse:
    controller = _require_routine(get_session_controller())
    return _run(controller, controller.toggle)


@router.post("/reset", response_model=SessionResponse, summary="Reset the current step's timer")
async def reset() -> SessionResponse:
    controller = _require_routine(get_session_controller())
    return _run(controller, controller.reset)


# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------

@router.post("/next", response_model=SessionResponse, summary="Go to the next step")
async def next_step() -> SessionResponse:
    controller = _require_routine(get_session_controller())
    return _run(controller, controller.navigation.next)


@router.post("/previous", response_model=SessionResponse, summary="Go to the previous step")
async def previous_step() -> SessionResponse:
    controller = _require_routine(get_session_controller())
    return _run(controller, controller.navigation.previous)


@router.post("/goto/{index}", response_model=SessionResponse, summary="Jump to a step")
async def go_to_step(index: int) -> SessionResponse:
    controller = _require_routine(get_session_controller())
    return _run(controller, lambda: controller.navigation.go_to(index))


@router.post("/restart", response_model=SessionResponse, summary="Back to the first step")
async def restart() -> SessionResponse:
    controller = _require_routine(get_session_controller())
    return _run(controller, controller.navigation.restart)


# ---------------------------------------------------------------------------
# Settings and clock
# ---------------------------------------------------------------------------

@router.patch("/settings", response_model=SessionResponse, summary="Update session settings")
async def update_settings(body: SessionSettingsUpdate) -> SessionResponse:
    controller = get_session_controller()
    return _run(controller, lambda: controller.update_settings(body))


@router.post(
    "/advance",
    response_model=SessionResponse,
    summary="Advance the session clock",
    responses={409: {"description": "Session is not running on a manual clock"}},
)
async def advance(seconds: float = Query(default=1.0, gt=0, le=3600)) -> SessionResponse:
    controller = _require_routine(get_session_controller())
    clock = controller.clock
    if not isinstance(clock, ManualClock):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": "Session clock is not client-driven", "code": "clock_not_manual"},
        )
    return _run(controller, lambda: clock.advance(seconds))
