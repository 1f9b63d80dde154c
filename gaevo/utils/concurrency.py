"""Scoped fork-join execution of independent per-individual work.

A :class:`Concurrency` scope collects every task submitted while it is open
and joins all of them when it closes, on every exit path. Tasks must write to
disjoint output slots; the scope gives no other synchronization.
"""

from __future__ import annotations

from concurrent.futures import Executor, Future, ThreadPoolExecutor
import os
from types import TracebackType
from typing import Any, Callable, Sequence, TypeVar

from loguru import logger

__all__ = ["CORES", "Concurrency", "create_executor"]

T = TypeVar("T")

CORES = os.cpu_count() or 1


def create_executor(max_workers: int | None) -> ThreadPoolExecutor | None:
    """Thread pool for *max_workers* > 1, otherwise ``None`` (serial execution)."""
    if max_workers is None or max_workers <= 1:
        return None
    executor = ThreadPoolExecutor(
        max_workers=max_workers, thread_name_prefix="gaevo-worker"
    )
    logger.debug("[Concurrency] Created ThreadPoolExecutor with {} workers", max_workers)
    return executor


def _partition(size: int, parts: int) -> list[int]:
    """Split ``range(size)`` into at most *parts* contiguous slices (bounds)."""
    parts = max(1, min(size, parts))
    bucket = size / parts
    return [round(i * bucket) for i in range(parts)] + [size]


class Concurrency:
    """Open a scope with ``Concurrency.start(executor)`` and use it as a context manager.

    With ``executor=None`` every task runs inline in the calling thread,
    which keeps single-threaded runs free of pool overhead.
    """

    def __init__(self, executor: Executor | None = None):
        self._executor = executor
        self._futures: list[Future[Any]] = []
        self._closed = False

    @classmethod
    def start(cls, executor: Executor | None = None) -> "Concurrency":
        return cls(executor)

    @property
    def is_serial(self) -> bool:
        return self._executor is None

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def submit(self, fn: Callable[..., T], *args: Any) -> Future[T]:
        """Schedule ``fn(*args)`` and return its future."""
        if self._closed:
            raise RuntimeError("Concurrency scope is already closed")

        if self._executor is None:
            future: Future[T] = Future()
            try:
                future.set_result(fn(*args))
            except Exception as exc:  # re-raised on join
                future.set_exception(exc)
        else:
            future = self._executor.submit(fn, *args)

        self._futures.append(future)
        return future

    def execute(self, fn: Callable[..., Any], *args: Any) -> None:
        self.submit(fn, *args)

    def execute_all(self, runnables: Sequence[Callable[[], Any]]) -> None:
        """Run zero-argument callables, batched into contiguous chunks."""
        if not runnables:
            return
        if self._executor is None:
            for runnable in runnables:
                self.submit(runnable)
            return

        bounds = _partition(len(runnables), (CORES + 1) * 2)
        for start, end in zip(bounds, bounds[1:]):
            if start < end:
                self.submit(_run_slice, runnables, start, end)

    # ------------------------------------------------------------------
    # Joining
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Wait for every submitted task; re-raise the first failure."""
        self._closed = True
        first_error: BaseException | None = None
        for future in self._futures:
            exc = future.exception()
            if exc is not None and first_error is None:
                first_error = exc
        self._futures.clear()

        if first_error is not None:
            raise first_error

    def __enter__(self) -> "Concurrency":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc is None:
            self.close()
            return

        # The body failed: still join every task, but keep the body's error.
        try:
            self.close()
        except Exception as task_exc:
            logger.error(
                "[Concurrency] Task failed while scope was unwinding: {}", task_exc
            )


def _run_slice(runnables: Sequence[Callable[[], Any]], start: int, end: int) -> None:
    for i in range(start, end):
        runnables[i]()

