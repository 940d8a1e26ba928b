import pickle
import signal
import threading

import pytest

from optengine import Budget, CancellationToken, Executor, IterState, TerminationReason
from optengine.core.cancellation import interrupt_cancels
from optengine.core.test_utils import HalvingSolver, Quadratic


def test_token_cancel_and_reset():
    token = CancellationToken()
    assert not token.cancelled
    token.cancel()
    assert token.cancelled
    token.reset()
    assert not token.cancelled


def test_token_pickles_with_its_flag():
    token = CancellationToken()
    token.cancel()
    assert pickle.loads(pickle.dumps(token)).cancelled


def test_token_cancelled_from_another_thread():
    token = CancellationToken()
    worker = threading.Thread(target=token.cancel)
    worker.start()
    worker.join()

    result = Executor(
        Quadratic(), HalvingSolver(), IterState(param=1.0), cancellation=token
    ).run()
    assert result.reason is TerminationReason.ABORTED


@pytest.mark.skipif(
    threading.current_thread() is not threading.main_thread(),
    reason="signal handlers need the main thread",
)
def test_sigint_cancels_token_and_restores_handler():
    previous = signal.getsignal(signal.SIGINT)
    token = CancellationToken()

    with interrupt_cancels(token):
        signal.raise_signal(signal.SIGINT)

    assert token.cancelled
    assert signal.getsignal(signal.SIGINT) is previous


def test_interrupt_is_ignored_outside_main_thread():
    token = CancellationToken()
    errors = []

    def target():
        try:
            with interrupt_cancels(token):
                pass
        except Exception as exc:
            errors.append(exc)

    worker = threading.Thread(target=target)
    worker.start()
    worker.join()
    assert errors == []


def test_executor_with_interrupt_handling_runs_normally():
    result = Executor(
        Quadratic(),
        HalvingSolver(),
        IterState(param=1.0),
        budget=Budget(max_iters=3),
        handle_interrupt=True,
    ).run()
    assert result.reason is TerminationReason.MAX_ITERS_REACHED
