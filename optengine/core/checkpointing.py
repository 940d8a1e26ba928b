"""Checkpointing of ``(solver, state)`` pairs for crash recovery."""

from __future__ import annotations

import copy
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar, Optional, Protocol, Tuple, Union, runtime_checkable

import torch

from ..logging import get_logger
from .errors import CheckpointError
from .state import IterState

if TYPE_CHECKING:
    from .solver import Solver

logger = get_logger(__name__)


@dataclass(frozen=True)
class CheckpointingFrequency:
    """
    When the executor saves a checkpoint.

    Use the ``NEVER``, ``ALWAYS`` and ``FINAL`` constants or
    ``CheckpointingFrequency.every(n)``.
    """

    kind: str
    n: int = 1

    NEVER: ClassVar["CheckpointingFrequency"]
    ALWAYS: ClassVar["CheckpointingFrequency"]
    FINAL: ClassVar["CheckpointingFrequency"]

    def __post_init__(self) -> None:
        if self.kind not in ("never", "always", "final", "every"):
            raise ValueError(f"Unknown checkpointing frequency: {self.kind!r}")
        if self.n < 1:
            raise ValueError(f"Checkpoint cadence must be >= 1, got {self.n}")

    @classmethod
    def every(cls, n: int) -> "CheckpointingFrequency":
        return cls("every", n)

    def should_save(self, state: IterState) -> bool:
        """Whether to save after the iteration that produced ``state``."""
        if self.kind == "always":
            return True
        if self.kind == "every":
            return state.iter % self.n == 0
        if self.kind == "final":
            return state.is_terminated()
        return False


CheckpointingFrequency.NEVER = CheckpointingFrequency("never")
CheckpointingFrequency.ALWAYS = CheckpointingFrequency("always")
CheckpointingFrequency.FINAL = CheckpointingFrequency("final")


@runtime_checkable
class Checkpoint(Protocol):
    """Persists and restores ``(solver, state)`` pairs."""

    frequency: CheckpointingFrequency

    def save(self, solver: "Solver", state: IterState) -> None:
        ...

    def load(self) -> Optional[Tuple["Solver", IterState]]:
        """Return the saved pair, or None if nothing was saved yet."""
        ...


class FileCheckpoint:
    """
    Checkpoint stored as a single file written with ``torch.save``.

    The file is replaced atomically, so a crash during a save leaves the
    previous checkpoint intact.

    Args:
        directory: Directory holding the checkpoint file. Created on first
            save.
        name: File stem; the file is ``<directory>/<name>.ckpt``.
        frequency: Save cadence.
    """

    suffix = ".ckpt"

    def __init__(
        self,
        directory: Union[str, os.PathLike] = ".checkpoints",
        name: str = "solver",
        frequency: CheckpointingFrequency = CheckpointingFrequency.FINAL,
    ) -> None:
        if not name:
            raise ValueError("Checkpoint name must be non-empty")
        self.directory = Path(directory)
        self.name = name
        self.frequency = frequency

    @property
    def path(self) -> Path:
        return self.directory / f"{self.name}{self.suffix}"

    def save(self, solver: "Solver", state: IterState) -> None:
        payload = {"solver": copy.deepcopy(solver), "state": copy.deepcopy(state)}
        tmp_name = None
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.directory, prefix=f".{self.name}", suffix=".tmp"
            )
            with os.fdopen(fd, "wb") as fh:
                torch.save(payload, fh)
            os.replace(tmp_name, self.path)
        except Exception as exc:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise CheckpointError(
                f"Failed to save checkpoint to {self.path}: {exc}",
                iteration=state.iter,
            ) from exc
        logger.debug("Saved checkpoint %s at iteration %d", self.path, state.iter)

    def load(self) -> Optional[Tuple["Solver", IterState]]:
        if not self.path.exists():
            return None
        try:
            payload = torch.load(self.path, weights_only=False)
            solver = payload["solver"]
            state = payload["state"]
        except Exception as exc:
            raise CheckpointError(
                f"Failed to load checkpoint from {self.path}: {exc}"
            ) from exc
        if not isinstance(state, IterState):
            raise CheckpointError(
                f"Checkpoint {self.path} holds {type(state).__name__}, not IterState"
            )
        logger.info("Loaded checkpoint %s at iteration %d", self.path, state.iter)
        return solver, state


__all__ = ["Checkpoint", "CheckpointingFrequency", "FileCheckpoint"]
