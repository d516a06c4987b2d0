# image_scout/concurrency/forkjoin.py
"""
A small work-stealing fork/join pool.

* Every worker owns a deque: it pushes forked tasks on the right and pops from
  the right (LIFO); idle workers steal from the left of other deques (FIFO).
* Tasks submitted from outside the pool go to a shared submission queue.
* :meth:`ForkJoinTask.join` never just sleeps: a task that nobody started yet
  is run inline by the joiner, otherwise the joiner keeps executing other
  queued tasks until the awaited one completes. A bounded set of threads can
  therefore serve arbitrarily deep recursive joins.
"""
from __future__ import annotations

import os
import threading
from collections import deque
from typing import Any, Callable, Deque, Generic, List, Optional, TypeVar

from image_scout.logger import logger

__all__ = ["ForkJoinPool", "ForkJoinTask", "current_pool", "invoke_all"]

T = TypeVar("T")

_PENDING, _RUNNING, _DONE = range(3)
_IDLE_WAIT = 0.05
_HELP_WAIT = 0.001

_local = threading.local()


def current_pool() -> Optional["ForkJoinPool"]:
    """Pool the calling thread works for, if any."""
    return getattr(_local, "pool", None)


class ForkJoinTask(Generic[T]):
    """Unit of work that can be forked onto a pool and joined later."""

    __slots__ = ("_fn", "_args", "_state", "_lock", "_done", "_result", "_exc")

    def __init__(self, fn: Callable[..., T], *args: Any) -> None:
        self._fn = fn
        self._args = args
        self._state = _PENDING
        self._lock = threading.Lock()
        self._done = threading.Event()
        self._result: Optional[T] = None
        self._exc: Optional[BaseException] = None

    # ------------------------------------------------------------------ #
    # Execution                                                          #
    # ------------------------------------------------------------------ #

    def _claim(self) -> bool:
        with self._lock:
            if self._state != _PENDING:
                return False
            self._state = _RUNNING
            return True

    def try_execute(self) -> bool:
        """Runs the task in the calling thread unless someone already took it."""
        if not self._claim():
            return False
        try:
            self._result = self._fn(*self._args)
        except BaseException as exc:  # re-raised by join()
            self._exc = exc
        finally:
            self._state = _DONE
            self._done.set()
        return True

    def is_done(self) -> bool:
        return self._done.is_set()

    # ------------------------------------------------------------------ #
    # Fork / join                                                        #
    # ------------------------------------------------------------------ #

    def fork(self) -> "ForkJoinTask[T]":
        """Schedules the task on the current pool."""
        pool = current_pool()
        if pool is None:
            raise RuntimeError("fork() called outside of a ForkJoinPool worker")
        pool._push(self)
        return self

    def join(self) -> T:
        """Waits for the result, running or helping with queued work meanwhile.

        Threads outside any pool simply block until a worker completes the task.
        """
        pool = current_pool()
        if pool is None:
            self._done.wait()
        elif not self.try_execute():
            while not self._done.is_set():
                task = pool._poll()
                if task is not None:
                    task.try_execute()
                else:
                    self._done.wait(_HELP_WAIT)
        if self._exc is not None:
            raise self._exc
        return self._result  # type: ignore[return-value]


def invoke_all(*tasks: ForkJoinTask[T]) -> List[T]:
    """Forks all but the first task, runs the first inline, joins the rest in order."""
    if not tasks:
        return []
    for task in tasks[1:]:
        task.fork()
    return [task.join() for task in tasks]


class ForkJoinPool:
    """Fixed set of worker threads with per-worker deques and work stealing."""

    def __init__(self, parallelism: Optional[int] = None, *, name: str = "fj-worker") -> None:
        self.parallelism = parallelism or os.cpu_count() or 4
        if self.parallelism < 1:
            raise ValueError("parallelism must be >= 1")
        self._queues: List[Deque[ForkJoinTask[Any]]] = [deque() for _ in range(self.parallelism)]
        self._submissions: Deque[ForkJoinTask[Any]] = deque()
        self._signal = threading.Condition()
        self._shutdown = False
        self._threads = [
            threading.Thread(target=self._work, args=(i,), name=f"{name}-{i}", daemon=True)
            for i in range(self.parallelism)
        ]
        for thread in self._threads:
            thread.start()
        logger.debug("ForkJoinPool started with %d workers", self.parallelism)

    # ------------------------------------------------------------------ #
    # Queues                                                             #
    # ------------------------------------------------------------------ #

    def _push(self, task: ForkJoinTask[Any]) -> None:
        index = getattr(_local, "index", None)
        if current_pool() is self and index is not None:
            self._queues[index].append(task)
        else:
            self._submissions.append(task)
        with self._signal:
            self._signal.notify()

    def _poll(self) -> Optional[ForkJoinTask[Any]]:
        """Next runnable task: own deque (LIFO), submissions, then steal (FIFO)."""
        index = getattr(_local, "index", None)
        if current_pool() is self and index is not None:
            try:
                return self._queues[index].pop()
            except IndexError:
                pass
        try:
            return self._submissions.popleft()
        except IndexError:
            pass
        start = index or 0
        for offset in range(1, self.parallelism + 1):
            victim = self._queues[(start + offset) % self.parallelism]
            try:
                return victim.popleft()
            except IndexError:
                continue
        return None

    def _work(self, index: int) -> None:
        _local.pool = self
        _local.index = index
        while True:
            task = self._poll()
            if task is not None:
                task.try_execute()
                continue
            with self._signal:
                if self._shutdown:
                    return
                self._signal.wait(_IDLE_WAIT)

    # ------------------------------------------------------------------ #
    # Public API                                                         #
    # ------------------------------------------------------------------ #

    def submit(self, fn: Callable[..., T], *args: Any) -> ForkJoinTask[T]:
        if self._shutdown:
            raise RuntimeError("cannot submit to a pool that has been shut down")
        task = ForkJoinTask(fn, *args)
        self._push(task)
        return task

    def invoke(self, fn: Callable[..., T], *args: Any) -> T:
        """Runs *fn* on the pool and blocks the (outside) caller for the result."""
        return self.submit(fn, *args).join()

    def shutdown(self, wait: bool = True) -> None:
        with self._signal:
            self._shutdown = True
            self._signal.notify_all()
        if wait:
            for thread in self._threads:
                if thread is not threading.current_thread():
                    thread.join()

    def __enter__(self) -> "ForkJoinPool":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()
