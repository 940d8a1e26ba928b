import numpy as np
import pytest
import torch

from optengine import (
    Budget,
    Executor,
    FunctionObjective,
    InvalidParameterError,
    IterState,
    Newton,
    ObjectiveNotImplementedError,
    TerminationReason,
)


def _run(objective, x0, solver=None, max_iters=50):
    return Executor(
        objective, solver or Newton(), IterState(param=x0), budget=Budget(max_iters=max_iters)
    ).run()


def test_newton_quadratic_is_exact_in_one_step(quadratic):
    result = _run(quadratic, np.array([1.0, 2.0]))

    assert result.reason is TerminationReason.SOLVER_CONVERGED
    assert result.state.iter == 2
    assert result.best_cost == 0.0
    assert result.best_param.tolist() == [0.0, 0.0]
    assert result.problem.counts == {
        "cost_count": 3,
        "gradient_count": 2,
        "hessian_count": 2,
        "jacobian_count": 0,
    }


def test_damped_newton_halves_the_distance(quadratic):
    result = _run(quadratic, np.array([4.0]), solver=Newton(gamma=0.5), max_iters=3)

    assert result.reason is TerminationReason.MAX_ITERS_REACHED
    assert result.state.param.tolist() == [0.5]


def test_newton_rosenbrock(rosenbrock_fns):
    fun, grad, hess = rosenbrock_fns
    result = _run(FunctionObjective(fun=fun, grad=grad, hess=hess), np.array([-1.2, 1.0]))

    assert result.best_cost < 1e-10
    np.testing.assert_allclose(result.best_param, [1.0, 1.0], atol=1e-5)


def test_newton_torch_parameters():
    objective = FunctionObjective(
        fun=lambda x: float(x @ x),
        grad=lambda x: 2 * x,
        hess=lambda x: 2 * torch.eye(x.shape[0], dtype=x.dtype),
    )
    result = _run(objective, torch.tensor([3.0, -1.0], dtype=torch.float64))

    assert result.reason is TerminationReason.SOLVER_CONVERGED
    assert isinstance(result.best_param, torch.Tensor)
    assert result.best_cost == 0.0


def test_singular_hessian_stops_run():
    objective = FunctionObjective(
        fun=lambda x: float(x[0] ** 2),
        grad=lambda x: np.array([2 * x[0], 0.0]),
        hess=lambda x: np.array([[2.0, 0.0], [0.0, 0.0]]),
    )
    result = _run(objective, np.array([1.0, 1.0]))

    assert result.reason is TerminationReason.SINGULAR_MATRIX
    assert result.state.iter == 1
    assert result.state.param.tolist() == [1.0, 1.0]


def test_newton_without_hessian_is_a_programming_error():
    objective = FunctionObjective(fun=lambda x: float(x @ x), grad=lambda x: 2 * x)
    with pytest.raises(ObjectiveNotImplementedError) as excinfo:
        _run(objective, np.array([1.0]))
    assert excinfo.value.kind == "hessian"
    assert excinfo.value.iteration == 1


@pytest.mark.parametrize("kwargs", [{"gamma": 0.0}, {"gamma": 1.5}, {"tol_grad": -1.0}])
def test_invalid_newton_configuration(kwargs):
    with pytest.raises(InvalidParameterError):
        Newton(**kwargs)
