"""Observers receive key/value snapshots of a run.

Observers are independent: a failing observer is reported as an
:class:`ObserverError` and the remaining observers of the same round are still
notified.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, ClassVar, List, Optional, Protocol, Tuple, runtime_checkable

from ..logging import get_logger
from .errors import ObserverError
from .kv import KV
from .state import IterState

logger = get_logger(__name__)


@dataclass(frozen=True)
class ObserverMode:
    """
    Cadence at which an observer is notified of iterations.

    Use the ``NEVER``, ``ALWAYS`` and ``NEW_BEST`` constants or
    ``ObserverMode.every(n)``.
    """

    kind: str
    n: int = 1

    NEVER: ClassVar["ObserverMode"]
    ALWAYS: ClassVar["ObserverMode"]
    NEW_BEST: ClassVar["ObserverMode"]

    def __post_init__(self) -> None:
        if self.kind not in ("never", "always", "new_best", "every"):
            raise ValueError(f"Unknown observer mode: {self.kind!r}")
        if self.n < 1:
            raise ValueError(f"Observer cadence must be >= 1, got {self.n}")

    @classmethod
    def every(cls, n: int) -> "ObserverMode":
        return cls("every", n)

    def should_notify(self, state: IterState) -> bool:
        if self.kind == "always":
            return True
        if self.kind == "new_best":
            return state.is_best()
        if self.kind == "every":
            return state.iter % self.n == 0
        return False


ObserverMode.NEVER = ObserverMode("never")
ObserverMode.ALWAYS = ObserverMode("always")
ObserverMode.NEW_BEST = ObserverMode("new_best")


@runtime_checkable
class Observer(Protocol):
    """Interface of a reporting sink."""

    def observe_init(self, name: str, kv: KV) -> None:
        """Called once, after the solver is initialized."""
        ...

    def observe_iter(self, state: IterState, kv: KV) -> None:
        """Called after an iteration whose state is final."""
        ...


class Observers:
    """Fan-out of registered observers with their modes."""

    def __init__(self) -> None:
        self._entries: List[Tuple[Observer, ObserverMode]] = []

    def add(self, observer: Observer, mode: ObserverMode = ObserverMode.ALWAYS) -> None:
        if not isinstance(observer, Observer):
            raise TypeError(
                f"{type(observer).__name__} does not implement observe_init/observe_iter"
            )
        self._entries.append((observer, mode))

    def __len__(self) -> int:
        return len(self._entries)

    def notify_init(self, name: str, kv: KV) -> List[ObserverError]:
        errors = []
        for observer, mode in self._entries:
            if mode.kind == "never":
                continue
            error = _call(observer, "observe_init", name, kv, iteration=0)
            if error is not None:
                errors.append(error)
        return errors

    def notify_iter(self, state: IterState, kv: KV) -> List[ObserverError]:
        errors = []
        for observer, mode in self._entries:
            if not mode.should_notify(state):
                continue
            error = _call(observer, "observe_iter", state, kv, iteration=state.iter)
            if error is not None:
                errors.append(error)
        return errors


def _call(observer: Observer, method: str, *args: Any, iteration: int) -> Optional[ObserverError]:
    name = type(observer).__name__
    try:
        getattr(observer, method)(*args)
    except Exception as exc:
        error = ObserverError(
            f"{name}.{method} failed: {exc}", observer=name, iteration=iteration
        )
        error.__cause__ = exc
        logger.warning("%s", error)
        return error
    return None


class LoggingObserver:
    """Writes one log line per notification through ``optengine.logging``."""

    def __init__(self, level: int = logging.INFO, name: str = "observers") -> None:
        self.level = level
        self.logger = get_logger(name)

    def observe_init(self, name: str, kv: KV) -> None:
        self.logger.log(self.level, "%s %s", name, _format(kv))

    def observe_iter(self, state: IterState, kv: KV) -> None:
        self.logger.log(self.level, "iter %d %s", state.iter, _format(kv))


def _format(kv: KV) -> str:
    return ", ".join(f"{key}: {value}" for key, value in kv.items())


@dataclass
class RecordingObserver:
    """Keeps every notification in memory."""

    inits: List[Tuple[str, KV]] = field(default_factory=list)
    records: List[Tuple[int, KV]] = field(default_factory=list)

    def observe_init(self, name: str, kv: KV) -> None:
        self.inits.append((name, kv))

    def observe_iter(self, state: IterState, kv: KV) -> None:
        self.records.append((state.iter, kv))

    @property
    def iterations(self) -> List[int]:
        return [it for it, _ in self.records]

    def values(self, key: str) -> List[Any]:
        return [kv.get(key) for _, kv in self.records]


__all__ = [
    "LoggingObserver",
    "Observer",
    "ObserverMode",
    "Observers",
    "RecordingObserver",
]
