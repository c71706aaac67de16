import threading

import pytest

from layerwise import backends


def _square(x):
    return x * x


@pytest.mark.parametrize("backend", [backends.Serial(), backends.ThreadPool(3)])
def test_process_returns_results_in_enqueue_order(backend):
    seen = []
    for x in range(6):
        backend.enqueue(_square, (x,), after=seen.append)
    assert len(backend) == 6

    assert backend.process() == [0, 1, 4, 9, 16, 25]
    assert sorted(seen) == [0, 1, 4, 9, 16, 25]
    assert len(backend) == 0
    assert backend.process() == []


def test_thread_pool_runs_tasks_off_the_calling_thread():
    backend = backends.ThreadPool(2)
    backend.enqueue(threading.get_ident)
    (ident,) = backend.process()
    assert ident != threading.get_ident()


def test_thread_pool_reraises_task_errors():
    def _fail():
        raise RuntimeError("boom")

    backend = backends.ThreadPool(2)
    backend.enqueue(_square, (2,))
    backend.enqueue(_fail)
    with pytest.raises(RuntimeError, match="boom"):
        backend.process()
    assert len(backend) == 0


def test_build_and_validation():
    assert isinstance(backends.build("serial"), backends.Serial)
    assert backends.build("threads", 2).workers == 2
    assert backends.ThreadPool.auto().workers >= 1
    with pytest.raises(ValueError):
        backends.ThreadPool(0)
    with pytest.raises(KeyError):
        backends.build("processes")
