import numpy as np
import pytest
import torch

from optengine import (
    BFGS,
    BacktrackingLineSearch,
    Budget,
    Executor,
    FunctionObjective,
    HagerZhangLineSearch,
    InvalidParameterError,
    IterState,
    ObserverMode,
    RecordingObserver,
    SteepestDescent,
    TerminationReason,
)
from optengine.solvers import DescentData


def himmelblau(x):
    return float((x[0] ** 2 + x[1] - 11) ** 2 + (x[0] + x[1] ** 2 - 7) ** 2)


def himmelblau_grad(x):
    return np.array(
        [
            4 * x[0] * (x[0] ** 2 + x[1] - 11) + 2 * (x[0] + x[1] ** 2 - 7),
            2 * (x[0] ** 2 + x[1] - 11) + 4 * x[1] * (x[0] + x[1] ** 2 - 7),
        ]
    )


def _run(objective, solver, x0, max_iters=100, **state_kwargs):
    return Executor(
        objective,
        solver,
        IterState(param=x0, **state_kwargs),
        budget=Budget(max_iters=max_iters),
    ).run()


def test_steepest_descent_quadratic_single_step(quadratic):
    result = _run(quadratic, SteepestDescent(BacktrackingLineSearch()), np.array([3.0, -1.0]))

    assert result.reason is TerminationReason.SOLVER_CONVERGED
    assert result.state.iter == 1
    assert result.best_cost == 0.0
    assert isinstance(result.state.extension, DescentData)
    assert result.state.extension.linesearch_reason is TerminationReason.LINE_SEARCH_CONDITION_MET


def test_steepest_descent_reduces_rosenbrock(rosenbrock_fns):
    fun, grad, _ = rosenbrock_fns
    x0 = np.array([-1.2, 1.0])
    result = _run(
        FunctionObjective(fun=fun, grad=grad),
        SteepestDescent(BacktrackingLineSearch()),
        x0,
        max_iters=500,
    )

    assert result.best_cost < fun(x0) / 2
    assert result.problem.count("gradient") >= result.state.iter


def test_steepest_descent_line_search_counts_accumulate(quadratic):
    observer = RecordingObserver()
    executor = Executor(
        quadratic,
        SteepestDescent(BacktrackingLineSearch()),
        IterState(param=np.array([3.0, -1.0])),
        budget=Budget(max_iters=5),
    )
    executor.add_observer(observer, ObserverMode.ALWAYS)
    result = executor.run()

    assert result.problem.counts["cost_count"] == 3
    assert result.problem.counts["gradient_count"] == 2
    assert observer.values("cost_count") == [3]
    assert observer.values("gradient_norm") == [0.0]


def test_bfgs_quadratic_with_hager_zhang():
    objective = FunctionObjective(fun=lambda x: float(x @ x), grad=lambda x: 2 * x)
    result = _run(
        objective,
        BFGS(HagerZhangLineSearch()),
        np.array([1.0, -2.0]),
        inv_hessian=np.eye(2),
    )

    assert result.reason is TerminationReason.SOLVER_CONVERGED
    assert result.best_cost < 1e-10


def test_bfgs_ill_conditioned_quadratic():
    scales = np.array([1.0, 10.0, 100.0])
    objective = FunctionObjective(
        fun=lambda x: float(np.sum(scales * x * x)),
        grad=lambda x: 2 * scales * x,
    )
    result = _run(objective, BFGS(BacktrackingLineSearch()), np.ones(3), max_iters=200)

    assert result.best_cost < 1e-10
    assert result.reason is not TerminationReason.MAX_ITERS_REACHED


def test_bfgs_rosenbrock(rosenbrock_fns):
    fun, grad, _ = rosenbrock_fns
    x0 = np.array([-1.2, 1.0])
    result = _run(
        FunctionObjective(fun=fun, grad=grad),
        BFGS(HagerZhangLineSearch()),
        x0,
        max_iters=300,
    )

    assert result.best_cost < fun(x0) / 10
    assert result.state.inv_hessian.shape == (2, 2)


def test_bfgs_himmelblau():
    result = _run(
        FunctionObjective(fun=himmelblau, grad=himmelblau_grad),
        BFGS(BacktrackingLineSearch()),
        np.array([1.0, 1.0]),
        max_iters=300,
    )
    assert result.best_cost < himmelblau(np.array([1.0, 1.0])) / 10


def test_bfgs_with_torch_parameters():
    def cost(x):
        return float((1 - x[0]) ** 2 + 10 * (x[1] - x[0] ** 2) ** 2)

    def gradient(x):
        return torch.stack(
            [
                -2 * (1 - x[0]) - 40 * x[0] * (x[1] - x[0] ** 2),
                20 * (x[1] - x[0] ** 2),
            ]
        )

    x0 = torch.tensor([-1.0, 2.0], dtype=torch.float64)
    result = _run(
        FunctionObjective(fun=cost, grad=gradient),
        BFGS(HagerZhangLineSearch()),
        x0,
        max_iters=300,
    )

    assert isinstance(result.best_param, torch.Tensor)
    assert result.best_param.dtype == torch.float64
    assert result.best_cost < cost(x0) / 10


@pytest.mark.parametrize(
    "factory",
    [
        lambda: SteepestDescent("not a line search"),
        lambda: SteepestDescent(BacktrackingLineSearch(), tol_grad=-1.0),
        lambda: SteepestDescent(BacktrackingLineSearch(), max_linesearch_iters=0),
        lambda: BFGS(object()),
        lambda: BFGS(BacktrackingLineSearch(), tol_cost=-1.0),
    ],
)
def test_invalid_configuration(factory):
    with pytest.raises(InvalidParameterError):
        factory()


def test_descent_solvers_report_configuration():
    kv = BFGS(BacktrackingLineSearch()).to_kv()
    assert kv["linesearch"] == "Backtracking line search"
    assert "tol_grad" in SteepestDescent(HagerZhangLineSearch()).to_kv()
