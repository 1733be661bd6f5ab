"""Deferred computation primitives on top of asyncio.

The execution protocol only needs four things from its async runtime:
creating a deferred computation, combining several awaitables, recognising
awaitable values and a cancellable timer. This module provides them on the
running event loop.
"""

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Generator, Iterable
from typing import Any, TypeVar

from unit_harness.errors import ContinuationError

Resolve = Callable[[Any], None]
Reject = Callable[[Any], None]
Progress = Callable[[Any], None]

T = TypeVar("T")


def create_deferred(
    executor: Callable[[Resolve, Reject, Progress], object],
    progress: Progress | None = None,
) -> asyncio.Future[Any]:
    """Create a future settled by ``executor`` through its callbacks.

    ``resolve`` and ``reject`` are safe to call from any thread and only the
    first settlement takes effect. An exception raised by ``executor`` itself
    rejects the future. A rejection value that is not an exception is
    wrapped in ``ContinuationError``.
    """
    loop = asyncio.get_running_loop()
    future: asyncio.Future[Any] = loop.create_future()

    def _resolve(value: Any) -> None:
        if not future.done():
            future.set_result(value)

    def _reject(error: Any) -> None:
        if not isinstance(error, BaseException):
            error = ContinuationError(error)
        if not future.done():
            future.set_exception(error)

    def resolve(value: Any = None) -> None:
        loop.call_soon_threadsafe(_resolve, value)

    def reject(error: Any) -> None:
        loop.call_soon_threadsafe(_reject, error)

    def notify(value: Any) -> None:
        if progress is not None:
            loop.call_soon_threadsafe(progress, value)

    try:
        executor(resolve, reject, notify)
    except Exception as exc:
        _reject(exc)
    return future


async def combine_all(awaitables: Iterable[Awaitable[T]]) -> list[T]:
    """Wait for every awaitable and return their results in order."""
    return list(await asyncio.gather(*awaitables))


def is_awaitable(value: Any) -> bool:
    """Check if ``value`` can be awaited or exposes a ``then`` continuation."""
    return inspect.isawaitable(value) or callable(getattr(value, "then", None))


def to_future(value: Any) -> asyncio.Future[Any]:
    """Adapt an awaitable or thenable value into a future on the running loop."""
    if inspect.isawaitable(value):
        return asyncio.ensure_future(value)
    return create_deferred(lambda resolve, reject, _: value.then(resolve, reject))


class Timer:
    """Future resolved after a delay, cancellable until it fires."""

    def __init__(self, milliseconds: float):
        loop = asyncio.get_running_loop()
        self.milliseconds = milliseconds
        self.future: asyncio.Future[None] = loop.create_future()
        self._handle = loop.call_later(milliseconds / 1000, self._fire)

    def _fire(self) -> None:
        if not self.future.done():
            self.future.set_result(None)

    def cancel(self) -> None:
        self._handle.cancel()
        self.future.cancel()

    @property
    def fired(self) -> bool:
        return self.future.done() and not self.future.cancelled()

    def __await__(self) -> Generator[Any, None, None]:
        return self.future.__await__()


def timer(milliseconds: float) -> Timer:
    """Start a timer that resolves after ``milliseconds``."""
    return Timer(milliseconds)
