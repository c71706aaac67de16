"""Task backends for fanning out independent units of work.

A backend collects callables with :meth:`enqueue`, then :meth:`process` runs
all of them, blocks until every one has finished and drains the queue. Tasks
must not share mutable state; the training loop itself never uses a backend.
"""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Callable, List, Sequence


@dataclass(frozen=True)
class _Task:
    function: Callable[..., Any]
    args: Sequence[Any] = ()
    after: Callable[[Any], None] | None = None


class Serial:
    """Run queued tasks one after another in the calling thread."""

    def __init__(self) -> None:
        self._queue: List[_Task] = []

    def enqueue(
        self,
        function: Callable[..., Any],
        args: Sequence[Any] = (),
        after: Callable[[Any], None] | None = None,
    ) -> None:
        self._queue.append(_Task(function, tuple(args), after))

    def process(self) -> List[Any]:
        results = []
        queue, self._queue = self._queue, []
        for task in queue:
            result = task.function(*task.args)
            if task.after is not None:
                task.after(result)
            results.append(result)
        return results

    def __len__(self) -> int:
        return len(self._queue)


@dataclass
class ThreadPool:
    """Run queued tasks on a pool of worker threads.

    Results come back in enqueue order. The first task exception is re-raised
    once every task has finished.
    """

    workers: int = 4
    _queue: List[_Task] = field(default_factory=list, init=False, repr=False)

    DEFAULT_WORKERS = 4

    def __post_init__(self) -> None:
        if self.workers < 1:
            raise ValueError(f"Number of workers must be greater than 0, {self.workers} given")

    @classmethod
    def auto(cls) -> "ThreadPool":
        return cls(os.cpu_count() or cls.DEFAULT_WORKERS)

    def enqueue(
        self,
        function: Callable[..., Any],
        args: Sequence[Any] = (),
        after: Callable[[Any], None] | None = None,
    ) -> None:
        self._queue.append(_Task(function, tuple(args), after))

    def process(self) -> List[Any]:
        queue, self._queue = self._queue, []
        results: List[Any] = [None] * len(queue)
        errors: List[BaseException] = []
        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            futures = {
                executor.submit(task.function, *task.args): offset
                for offset, task in enumerate(queue)
            }
            for future in as_completed(futures):
                offset = futures[future]
                try:
                    results[offset] = future.result()
                except Exception as exc:
                    errors.append(exc)
                    continue
                after = queue[offset].after
                if after is not None:
                    after(results[offset])
        if errors:
            raise errors[0]
        return results

    def __len__(self) -> int:
        return len(self._queue)


Backend = Serial | ThreadPool


def build(name: str, workers: int | None = None) -> Serial | ThreadPool:
    if name == "serial":
        return Serial()
    if name in {"threads", "thread_pool"}:
        return ThreadPool(workers) if workers else ThreadPool.auto()
    raise KeyError(f"Unknown backend {name!r}. Available backends: serial, threads")


__all__ = ["Backend", "Serial", "ThreadPool", "build"]
