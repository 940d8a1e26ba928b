"""Cooperative cancellation of a running optimization."""

from __future__ import annotations

import signal
import threading
from contextlib import contextmanager
from typing import Iterator


class CancellationToken:
    """Flag polled by the executor once per iteration boundary.

    Setting the flag never interrupts a solver mid-iteration; the run stops
    with ``TerminationReason.ABORTED`` at the next boundary.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    def reset(self) -> None:
        self._event.clear()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def __getstate__(self) -> dict:
        return {"cancelled": self.cancelled}

    def __setstate__(self, state: dict) -> None:
        self._event = threading.Event()
        if state.get("cancelled"):
            self._event.set()


@contextmanager
def interrupt_cancels(token: CancellationToken) -> Iterator[None]:
    """
    Route SIGINT to ``token`` for the duration of the block.

    Signal handlers can only be installed from the main thread; elsewhere the
    block runs without a handler.
    """
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def _handler(signum, frame) -> None:
        token.cancel()

    previous = signal.signal(signal.SIGINT, _handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


__all__ = ["CancellationToken", "interrupt_cancels"]
