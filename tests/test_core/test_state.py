import math

import numpy as np
import pytest

from optengine import IterState, Problem, TerminationReason
from optengine.core.problem import COUNT_KEYS


def test_defaults():
    state = IterState()
    assert state.param is None
    assert math.isinf(state.cost)
    assert math.isinf(state.best_cost)
    assert state.iter == 0
    assert set(state.counts) == set(COUNT_KEYS)
    assert not state.is_terminated()


def test_setters_keep_previous_values():
    state = IterState(param=np.array([1.0]))
    state.set_param(np.array([2.0])).set_cost(3)

    np.testing.assert_array_equal(state.prev_param, [1.0])
    np.testing.assert_array_equal(state.param, [2.0])
    assert state.cost == 3.0
    assert isinstance(state.cost, float)
    assert math.isinf(state.prev_cost)

    state.set_gradient("g1").set_gradient("g2")
    assert (state.prev_grad, state.grad) == ("g1", "g2")


def test_first_param_becomes_best_even_without_cost():
    state = IterState(param=np.array([1.0]))
    assert state.update()
    np.testing.assert_array_equal(state.best_param, [1.0])
    assert math.isinf(state.best_cost)


def test_update_tracks_best_and_copies_param():
    param = np.array([4.0])
    state = IterState(param=param, cost=16.0)
    state.update()

    param[0] = -1.0
    assert state.best_param[0] == 4.0

    state.set_param(np.array([2.0])).set_cost(4.0)
    state.increment_iter()
    assert state.update()
    assert state.best_cost == 4.0
    assert state.prev_best_cost == 16.0
    assert state.is_best()


def test_equal_cost_is_not_an_improvement():
    state = IterState(param=np.array([1.0]), cost=1.0)
    state.update()
    state.increment_iter()
    state.set_param(np.array([-1.0])).set_cost(1.0)

    assert not state.update()
    assert state.best_param[0] == 1.0
    assert state.no_improvement_iters == 1
    assert not state.is_best()


def test_small_improvement_below_min_delta_counts_as_stagnation():
    state = IterState(param=np.array([1.0]), cost=1.0)
    state.update(min_delta=0.1)
    state.increment_iter()
    state.set_param(np.array([0.99])).set_cost(0.99)

    assert state.update(min_delta=0.1)
    assert state.best_cost == 0.99
    assert state.no_improvement_iters == 1


def test_terminate_with_only_once():
    state = IterState()
    state.terminate_with(TerminationReason.MAX_ITERS_REACHED)
    assert state.is_terminated()
    with pytest.raises(ValueError):
        state.terminate_with(TerminationReason.ABORTED)


def test_record_counts_copies_problem_counters(quadratic):
    problem = Problem(quadratic)
    state = IterState()
    problem.cost(1.0)
    state.record_counts(problem)
    problem.cost(1.0)
    assert state.counts["cost_count"] == 1


def test_to_kv_order_and_time():
    state = IterState(param=1.0, cost=2.0)
    assert list(state.to_kv()) == [
        "iter",
        "cost",
        "best_cost",
        "prev_best_cost",
        "cost_count",
        "gradient_count",
        "hessian_count",
        "jacobian_count",
        "no_improvement_iters",
    ]
    state.time = 1.5
    assert state.to_kv()["time"] == 1.5


def test_snapshot_is_independent():
    state = IterState(param=np.array([1.0]), cost=1.0)
    snap = state.snapshot()
    state.param[0] = 5.0
    state.increment_iter()
    assert snap.param[0] == 1.0
    assert snap.iter == 0


def test_unscored_costs_keep_best_on_current_param():
    state = IterState(param=np.array([2.0]))
    state.update()
    state.increment_iter()
    state.set_param(np.array([1.0]))

    assert state.update()
    assert state.best_param[0] == 1.0
    assert state.no_improvement_iters == 0
    assert state.is_best()

    state.increment_iter()
    state.set_param(np.array([0.5])).set_cost(0.25)
    state.update()
    state.increment_iter()
    state.set_param(np.array([3.0]))
    state.cost = float("inf")

    assert not state.update()
    assert state.best_param[0] == 0.5
    assert state.no_improvement_iters == 1
