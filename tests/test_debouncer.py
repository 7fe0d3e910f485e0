"""Tests for locationfix.debouncer module."""

import math

from conftest import NOW, make_sample
from locationfix.coordinator import CoordinatorState
from locationfix.debouncer import GeocodeAction, decide, is_stagnant


def _state(in_flight: bool, previous=None) -> CoordinatorState:
    return CoordinatorState(best_sample=previous, geocode_in_flight=in_flight)


class TestDecide:
    def test_launch_when_idle(self):
        action = decide(_state(False), make_sample(30.0), math.inf, False)
        assert action is GeocodeAction.LAUNCH

    def test_launch_when_idle_even_if_converged(self):
        action = decide(_state(False, make_sample(50.0)), make_sample(5.0), 20.0, True)
        assert action is GeocodeAction.LAUNCH

    def test_suppress_while_in_flight(self):
        action = decide(_state(True, make_sample(50.0)), make_sample(30.0), 15.0, False)
        assert action is GeocodeAction.SUPPRESS

    def test_force_relaunch_on_converged_move(self):
        action = decide(_state(True, make_sample(50.0)), make_sample(5.0), 12.5, True)
        assert action is GeocodeAction.FORCE_RELAUNCH

    def test_no_override_without_movement(self):
        previous = make_sample(50.0)
        action = decide(_state(True, previous), make_sample(5.0), 0.0, True)
        assert action is GeocodeAction.SUPPRESS

    def test_stagnation_while_in_flight(self):
        previous = make_sample(50.0, timestamp=NOW - 11)
        action = decide(_state(True, previous), make_sample(40.0), 0.5, False)
        assert action is GeocodeAction.STOP_STAGNATED

    def test_stagnation_wins_over_override(self):
        previous = make_sample(50.0, timestamp=NOW - 11)
        action = decide(_state(True, previous), make_sample(5.0), 0.5, True)
        assert action is GeocodeAction.STOP_STAGNATED

    def test_custom_thresholds(self):
        previous = make_sample(50.0, timestamp=NOW - 4)
        action = decide(
            _state(True, previous), make_sample(40.0), 2.0, False,
            min_distance=5.0, interval=3.0,
        )
        assert action is GeocodeAction.STOP_STAGNATED


class TestIsStagnant:
    def test_no_previous_sample(self):
        assert is_stagnant(None, make_sample(10.0), math.inf) is False

    def test_moved_too_far(self):
        previous = make_sample(10.0, timestamp=NOW - 30)
        assert is_stagnant(previous, make_sample(10.0), 1.0) is False

    def test_not_long_enough(self):
        previous = make_sample(10.0, timestamp=NOW - 10)
        assert is_stagnant(previous, make_sample(10.0), 0.0) is False

    def test_stagnant(self):
        previous = make_sample(10.0, timestamp=NOW - 10.5)
        assert is_stagnant(previous, make_sample(10.0), 0.99) is True
