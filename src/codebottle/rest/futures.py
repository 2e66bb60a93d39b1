"""Composition helpers for :class:`concurrent.futures.Future`.

The standard library futures have no ``then``; these helpers add it with
``add_done_callback`` so that a dependent fetch (a snippet, then one of its
revisions) is chained rather than joined. No helper here ever blocks a pool
thread while waiting on another pool task, which keeps small fixed-size
pools from starving.

Callbacks run on whichever thread completes the source future, usually a
pool worker, so *fn* arguments must be quick and thread-safe.
"""

from __future__ import annotations

import threading
from concurrent.futures import Future
from typing import Any, Callable, Iterable, Sequence, TypeVar

T = TypeVar("T")
U = TypeVar("U")


def completed(value: T) -> Future[T]:
    """Return a future already resolved with *value*."""
    future: Future[T] = Future()
    future.set_result(value)
    return future


def failed(exc: BaseException) -> Future[Any]:
    """Return a future already failed with *exc*."""
    future: Future[Any] = Future()
    future.set_exception(exc)
    return future


def _transfer(source: Future[Any], target: Future[Any]) -> bool:
    """Copy a failed or cancelled outcome of *source* into *target*.

    Returns ``True`` when *target* was settled.
    """
    if source.cancelled():
        target.cancel()
        return True
    exc = source.exception()
    if exc is not None:
        target.set_exception(exc)
        return True
    return False


def pipe(source: Future[T], target: Future[T]) -> None:
    """Settle *target* with whatever *source* settles with."""

    def _done(src: Future[T]) -> None:
        if not _transfer(src, target):
            target.set_result(src.result())

    source.add_done_callback(_done)


def then(future: Future[T], fn: Callable[[T], U]) -> Future[U]:
    """Map the result of *future* through *fn*.

    An exception raised by *fn* fails the returned future.
    """
    result: Future[U] = Future()

    def _done(src: Future[T]) -> None:
        if _transfer(src, result):
            return
        try:
            value = fn(src.result())
        except Exception as exc:
            result.set_exception(exc)
        else:
            result.set_result(value)

    future.add_done_callback(_done)
    return result


def compose(future: Future[T], fn: Callable[[T], Future[U]]) -> Future[U]:
    """Chain a future-returning *fn* onto *future* (``flatMap``)."""
    result: Future[U] = Future()

    def _done(src: Future[T]) -> None:
        if _transfer(src, result):
            return
        try:
            inner = fn(src.result())
        except Exception as exc:
            result.set_exception(exc)
        else:
            pipe(inner, result)

    future.add_done_callback(_done)
    return result


def gather(futures: Sequence[Future[T]]) -> Future[list[T]]:
    """Future of all results, in input order.

    Fails with the first exception observed; the remaining futures are left
    to run to completion.
    """
    result: Future[list[T]] = Future()
    if not futures:
        result.set_result([])
        return result

    lock = threading.Lock()
    remaining = [len(futures)]

    def _done(src: Future[T]) -> None:
        with lock:
            if result.done():
                return
            if _transfer(src, result):
                return
            remaining[0] -= 1
            if remaining[0] == 0:
                result.set_result([f.result() for f in futures])

    for future in futures:
        future.add_done_callback(_done)
    return result


def sequence(items: Iterable[T], fn: Callable[[T], Future[U]]) -> Future[list[U]]:
    """Run *fn* over *items* one at a time, each call after the previous settles.

    Already-settled futures are consumed in a loop rather than by nested
    callbacks, so long runs of cached results do not grow the stack.
    """
    pending = iter(items)
    results: list[U] = []
    outcome: Future[list[U]] = Future()

    def _advance(previous: Future[U] | None = None) -> None:
        while True:
            if previous is not None:
                if _transfer(previous, outcome):
                    return
                results.append(previous.result())
            try:
                item = next(pending)
            except StopIteration:
                outcome.set_result(results)
                return
            try:
                current = fn(item)
            except Exception as exc:
                outcome.set_exception(exc)
                return
            if not current.done():
                current.add_done_callback(_advance)
                return
            previous = current

    _advance()
    return outcome
