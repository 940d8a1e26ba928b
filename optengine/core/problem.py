"""Objective wrapper that counts evaluations.

Every cost, gradient, Hessian and Jacobian evaluation performed during a run
goes through :class:`Problem`, which forwards the call to the user objective
and charges exactly one evaluation of the matching kind per delegated call.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from .errors import EVALUATION_KINDS, ObjectiveError, ObjectiveNotImplementedError

CostFn = Callable[[Any], Any]
GradientFn = Callable[[Any], Any]
HessianFn = Callable[[Any], Any]
JacobianFn = Callable[[Any], Any]

COUNT_KEYS = tuple(f"{kind}_count" for kind in EVALUATION_KINDS)


@dataclass(frozen=True)
class FunctionObjective:
    """Objective assembled from plain callables.

    Only ``fun`` is required; each derivative is optional and its absence is
    reported through :meth:`supports`.
    """

    fun: CostFn
    grad: Optional[GradientFn] = None
    hess: Optional[HessianFn] = None
    jac: Optional[JacobianFn] = None
    dim: Optional[int] = None

    def supports(self, kind: str) -> bool:
        return self._callable(kind) is not None

    def cost(self, params: Any) -> Any:
        return self.fun(params)

    def gradient(self, params: Any) -> Any:
        return self._require("gradient")(params)

    def hessian(self, params: Any) -> Any:
        return self._require("hessian")(params)

    def jacobian(self, params: Any) -> Any:
        return self._require("jacobian")(params)

    def _callable(self, kind: str) -> Optional[Callable[[Any], Any]]:
        return {
            "cost": self.fun,
            "gradient": self.grad,
            "hessian": self.hess,
            "jacobian": self.jac,
        }[kind]

    def _require(self, kind: str) -> Callable[[Any], Any]:
        fn = self._callable(kind)
        if fn is None:
            raise ObjectiveNotImplementedError(
                f"FunctionObjective has no {kind} callable", kind=kind
            )
        return fn


class Problem:
    """Counting wrapper around a user objective.

    The objective is held by reference, so several problems may share a
    read-only objective definition. Counters only ever increase: each
    delegated call is charged before it is made, so an evaluation that raises
    is still counted. Asking for a capability the objective lacks raises
    :class:`ObjectiveNotImplementedError` and is not charged.
    """

    def __init__(self, objective: Any) -> None:
        if objective is None:
            raise ValueError("Problem requires an objective")
        self.objective = objective
        self._counts: Dict[str, int] = {key: 0 for key in COUNT_KEYS}

    @property
    def counts(self) -> Dict[str, int]:
        return dict(self._counts)

    def count(self, kind: str) -> int:
        return self._counts[f"{kind}_count"]

    def supports(self, kind: str) -> bool:
        """Return True if the objective provides the ``kind`` capability."""
        if kind not in EVALUATION_KINDS:
            raise ValueError(f"Unknown evaluation kind: {kind!r}")
        supports = getattr(self.objective, "supports", None)
        if callable(supports):
            return bool(supports(kind))
        return callable(getattr(self.objective, kind, None))

    def cost(self, params: Any) -> Any:
        return self._evaluate("cost", params)

    def gradient(self, params: Any) -> Any:
        return self._evaluate("gradient", params)

    def hessian(self, params: Any) -> Any:
        return self._evaluate("hessian", params)

    def jacobian(self, params: Any) -> Any:
        return self._evaluate("jacobian", params)

    def bulk_cost(self, params: Iterable[Any]) -> List[Any]:
        """Evaluate the cost at each parameter in order."""
        return [self.cost(p) for p in params]

    def restore_counts(self, counts: Mapping[str, int]) -> None:
        """Seed the counters from a checkpointed state.

        Raises:
            ValueError: If a restored counter is below the current value.
        """
        for key in COUNT_KEYS:
            value = int(counts.get(key, 0))
            if value < self._counts[key]:
                raise ValueError(
                    f"Cannot restore {key}={value}; counter is already "
                    f"{self._counts[key]}"
                )
            self._counts[key] = value

    def _evaluate(self, kind: str, params: Any) -> Any:
        if not self.supports(kind):
            raise ObjectiveNotImplementedError(
                f"Objective {type(self.objective).__name__} does not implement "
                f"{kind}",
                kind=kind,
            )
        self._counts[f"{kind}_count"] += 1
        try:
            return getattr(self.objective, kind)(params)
        except ObjectiveError as exc:
            if exc.kind is None:
                exc.kind = kind
            raise
        except Exception as exc:
            raise ObjectiveError(f"{type(exc).__name__}: {exc}", kind=kind) from exc

    def __repr__(self) -> str:
        counts = ", ".join(f"{k}={v}" for k, v in self._counts.items())
        return f"Problem({type(self.objective).__name__}, {counts})"


__all__ = ["COUNT_KEYS", "FunctionObjective", "Problem"]
