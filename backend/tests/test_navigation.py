"""
Tests for navigation
====================
Covers:
- next: moves one step, lands in Idle, clears timer state
- next from the last step: complete sentinel, routine_completed raised once
- next at completion: no-op
- next(auto): engages the new timed step (countdown / running), reps stay Idle
- next(auto) with auto-advance disabled: lands in Idle
- manual next never starts a countdown
- previous: lands in Idle, no-op at step 0, works from completion
- go_to: in range lands in Idle, out of range (incl. length) is a no-op
- restart: back to Idle at step 0 from completion

Run: pytest tests/test_navigation.py -v
"""

from __future__ import annotations

import pytest

from routine_player.config import Settings
from routine_player.models.events import SignalType
from routine_player.models.exercise import RepsExercise, RoutineConfig, TimedExercise
from routine_player.models.session import Phase, SessionSettings, SessionState
from routine_player.services.expander import expand_exercises
from routine_player.services.navigation import go_to_step, next_step, previous_step, restart
from routine_player.services.scheduler import ManualClock
from routine_player.services.session import SessionController
from routine_player.services.timer import TimerRules

_STEPS = expand_exercises([
    TimedExercise(section="Balance", name="Single-leg stand", sets=2, duration=5, rest_between_sets=10),
    RepsExercise(section="Strength", name="Calf raises", sets=3, reps="10 reps"),
])
_LENGTH = len(_STEPS)  # set1, rest, set2, reps
_RULES = TimerRules()

_AUTO_COUNTDOWN = SessionSettings(countdown_enabled=True, auto_advance_enabled=True)
_AUTO_ONLY = SessionSettings(auto_advance_enabled=True)


def _running(step_index: int = 0, settings: SessionSettings = SessionSettings()) -> SessionState:
    return SessionState(
        step_index=step_index,
        total_steps=_LENGTH,
        elapsed_seconds=3,
        is_paused=False,
        timer_started=True,
        settings=settings,
    )


def _assert_idle_at(state: SessionState, index: int) -> None:
    assert state.step_index == index
    assert state.phase == Phase.IDLE
    assert state.elapsed_seconds == 0
    assert state.is_paused is True
    assert state.countdown_seconds is None
    assert state.timer_started is False


# ---------------------------------------------------------------------------
# next
# ---------------------------------------------------------------------------

class TestNext:

    def test_manual_next_lands_idle(self):
        transition = next_step(_running(0), _STEPS, _RULES)
        _assert_idle_at(transition.state, 1)
        assert transition.signals == ()

    def test_manual_next_never_counts_down(self):
        transition = next_step(_running(1, _AUTO_COUNTDOWN), _STEPS, _RULES)
        _assert_idle_at(transition.state, 2)

    def test_next_from_last_step_completes(self):
        transition = next_step(_running(_LENGTH - 1), _STEPS, _RULES)

        assert transition.state.step_index == _LENGTH
        assert transition.state.phase == Phase.COMPLETE
        assert transition.state.timer_started is False
        assert transition.state.countdown_seconds is None
        assert [s.type for s in transition.signals] == [SignalType.ROUTINE_COMPLETED]

    def test_next_at_completion_is_noop(self):
        done = next_step(_running(_LENGTH - 1), _STEPS, _RULES).state
        transition = next_step(done, _STEPS, _RULES)
        assert transition.state == done
        assert transition.signals == ()

    def test_auto_next_into_timed_set_counts_down(self):
        transition = next_step(_running(1, _AUTO_COUNTDOWN), _STEPS, _RULES, is_auto_advance=True)

        assert transition.state.step_index == 2
        assert transition.state.phase == Phase.COUNTDOWN
        assert transition.state.countdown_seconds == 3
        assert [(s.type, s.value) for s in transition.signals] == [(SignalType.COUNTDOWN_TICK, 3)]

    def test_auto_next_into_rest_runs_directly(self):
        transition = next_step(_running(0, _AUTO_COUNTDOWN), _STEPS, _RULES, is_auto_advance=True)

        assert transition.state.step_index == 1
        assert transition.state.phase == Phase.RUNNING
        assert transition.state.elapsed_seconds == 0

    def test_auto_next_without_countdown_runs_directly(self):
        transition = next_step(_running(1, _AUTO_ONLY), _STEPS, _RULES, is_auto_advance=True)
        assert transition.state.phase == Phase.RUNNING
        assert transition.state.step_index == 2

    def test_auto_next_into_reps_lands_idle(self):
        transition = next_step(_running(2, _AUTO_COUNTDOWN), _STEPS, _RULES, is_auto_advance=True)
        _assert_idle_at(transition.state, 3)

    def test_auto_flag_ignored_when_setting_off(self):
        settings = SessionSettings(countdown_enabled=True, auto_advance_enabled=False)
        transition = next_step(_running(1, settings), _STEPS, _RULES, is_auto_advance=True)
        _assert_idle_at(transition.state, 2)


# ---------------------------------------------------------------------------
# previous
# ---------------------------------------------------------------------------

class TestPrevious:

    def test_previous_lands_idle(self):
        _assert_idle_at(previous_step(_running(2)).state, 1)

    def test_previous_at_first_step_is_noop(self):
        start = _running(0)
        assert previous_step(start).state == start

    def test_previous_from_completion(self):
        done = next_step(_running(_LENGTH - 1), _STEPS, _RULES).state
        _assert_idle_at(previous_step(done).state, _LENGTH - 1)


# ---------------------------------------------------------------------------
# go_to
# ---------------------------------------------------------------------------

class TestGoTo:

    @pytest.mark.parametrize("index", [0, 1, _LENGTH - 1])
    def test_in_range_lands_idle(self, index):
        _assert_idle_at(go_to_step(_running(2), _STEPS, index).state, index)

    @pytest.mark.parametrize("index", [-1, _LENGTH, _LENGTH + 5])
    def test_out_of_range_is_noop(self, index):
        start = _running(2)
        transition = go_to_step(start, _STEPS, index)
        assert transition.state == start
        assert transition.signals == ()


# ---------------------------------------------------------------------------
# restart and the controller
# ---------------------------------------------------------------------------

class TestRestart:

    def test_restart_from_completion(self):
        done = next_step(_running(_LENGTH - 1), _STEPS, _RULES).state
        _assert_idle_at(restart(done).state, 0)

    def test_settings_survive_navigation(self):
        state = restart(next_step(_running(0, _AUTO_COUNTDOWN), _STEPS, _RULES).state).state
        assert state.settings == _AUTO_COUNTDOWN

    def test_controller_facade_dispatches(self):
        controller = SessionController(clock=ManualClock(), settings=Settings())
        controller.load(RoutineConfig(exercises=[
            TimedExercise(section="Balance", name="Hold", sets=3, duration=5),
        ]))

        controller.navigation.next()
        controller.navigation.next()
        assert controller.state.step_index == 2
        controller.navigation.previous()
        assert controller.state.step_index == 1
        controller.navigation.go_to(7)
        assert controller.state.step_index == 1
        controller.navigation.go_to(2)
        controller.navigation.next()
        assert controller.state.phase == Phase.COMPLETE
        controller.navigation.restart()
        _assert_idle_at(controller.state, 0)
