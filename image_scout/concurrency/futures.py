# image_scout/concurrency/futures.py
"""
Continuation combinators over :class:`concurrent.futures.Future`.

A :class:`Promise` never blocks to wait for its inputs: each continuation is
registered with ``add_done_callback`` and submitted to the executor once its
predecessor settles. Failures travel down the chain unchanged, so the single
:meth:`Promise.join` at the end of a pipeline sees the first error raised
anywhere in it.
"""
from __future__ import annotations

from concurrent.futures import Executor, Future
from typing import Any, Callable, Generic, Iterable, Optional, TypeVar

__all__ = ["Promise"]

T = TypeVar("T")
U = TypeVar("U")
R = TypeVar("R")


def _settle(target: Future, fn: Callable[..., Any], *args: Any) -> None:
    """Completes *target* with ``fn(*args)`` or the exception it raised."""
    if not target.set_running_or_notify_cancel():
        return
    try:
        result = fn(*args)
    except BaseException as exc:
        target.set_exception(exc)
    else:
        target.set_result(result)


class Promise(Generic[T]):
    """Chainable handle to a value computed on an executor."""

    __slots__ = ("_future", "_executor")

    def __init__(self, future: Future, executor: Executor) -> None:
        self._future = future
        self._executor = executor

    # ------------------------------------------------------------------ #
    # Construction                                                       #
    # ------------------------------------------------------------------ #

    @classmethod
    def supply_async(cls, executor: Executor, fn: Callable[..., T], *args: Any) -> "Promise[T]":
        return cls(executor.submit(fn, *args), executor)

    @classmethod
    def completed(cls, executor: Executor, value: T) -> "Promise[T]":
        future: Future = Future()
        future.set_result(value)
        return cls(future, executor)

    @property
    def future(self) -> Future:
        return self._future

    def _schedule(self, target: Future, fn: Callable[..., Any], *args: Any) -> None:
        try:
            self._executor.submit(fn, *args)
        except RuntimeError as exc:
            # executor already shut down
            target.set_exception(exc)

    def _chain(self, on_value: Callable[[Future, T], None]) -> "Promise[Any]":
        target: Future = Future()

        def _done(source: Future) -> None:
            exc = source.exception()
            if exc is not None:
                target.set_exception(exc)
                return
            on_value(target, source.result())

        self._future.add_done_callback(_done)
        return Promise(target, self._executor)

    # ------------------------------------------------------------------ #
    # Combinators                                                        #
    # ------------------------------------------------------------------ #

    def then_apply(self, fn: Callable[[T], U]) -> "Promise[U]":
        """Promise of ``fn(value)``, computed on the executor."""

        def _on_value(target: Future, value: T) -> None:
            self._schedule(target, _settle, target, fn, value)

        return self._chain(_on_value)

    def then_compose(self, fn: Callable[[T], "Promise[U]"]) -> "Promise[U]":
        """Flattens a continuation that itself returns a promise."""

        def _forward(target: Future, inner: "Promise[U]") -> None:
            def _copy(done: Future) -> None:
                exc = done.exception()
                if exc is not None:
                    target.set_exception(exc)
                else:
                    target.set_result(done.result())

            inner.future.add_done_callback(_copy)

        def _run(target: Future, value: T) -> None:
            try:
                inner = fn(value)
            except BaseException as exc:
                target.set_exception(exc)
                return
            _forward(target, inner)

        def _on_value(target: Future, value: T) -> None:
            self._schedule(target, _run, target, value)

        return self._chain(_on_value)

    def then_combine(self, other: "Promise[U]", fn: Callable[[T, U], R]) -> "Promise[R]":
        """Promise of ``fn(self_value, other_value)`` once both settle."""

        def _on_value(target: Future, value: T) -> None:
            def _with_other(done: Future) -> None:
                exc = done.exception()
                if exc is not None:
                    target.set_exception(exc)
                else:
                    self._schedule(target, _settle, target, fn, value, done.result())

            other.future.add_done_callback(_with_other)

        return self._chain(_on_value)

    @classmethod
    def reduce(
        cls,
        executor: Executor,
        promises: Iterable["Promise[T]"],
        combiner: Callable[[T, T], T],
        identity: T,
    ) -> "Promise[T]":
        """Pairwise-combines *promises*; *combiner* must be associative and commutative."""
        result: Optional[Promise[T]] = None
        for promise in promises:
            result = promise if result is None else result.then_combine(promise, combiner)
        return result if result is not None else cls.completed(executor, identity)

    # ------------------------------------------------------------------ #
    # Waiting                                                            #
    # ------------------------------------------------------------------ #

    def join(self, timeout: Optional[float] = None) -> T:
        """Blocks for the value; meant for the outermost caller only."""
        return self._future.result(timeout)

    def done(self) -> bool:
        return self._future.done()
