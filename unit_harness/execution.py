"""Execution of a single test function.

A test body may finish in one of three ways, and each one is turned into a
single ``TestOutcome``:

- it returns a function taking exactly one argument: a continuation that is
  handed a ``done(error=None, value=None)`` callback;
- it returns an awaitable (coroutine, future, or an object with ``then``);
- it returns anything else, which counts as an immediate success.

Raising synchronously fails the test with the raised exception.
"""

import asyncio
import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from unit_harness import runtime
from unit_harness.errors import ContinuationError, TestTimeout
from unit_harness.models.outcome import TestOutcome

log = logging.getLogger(__name__)

Completion = Callable[..., None]


@dataclass(frozen=True)
class SyncSource:
    """The test body returned a plain value."""

    value: Any = None


@dataclass(frozen=True)
class CallbackSource:
    """The test body returned a continuation expecting a completion callback."""

    continuation: Callable[[Completion], Any]


@dataclass(frozen=True)
class AwaitableSource:
    """The test body returned an awaitable or thenable value."""

    awaitable: Any


OutcomeSource = SyncSource | CallbackSource | AwaitableSource


def classify_result(value: Any) -> OutcomeSource:
    """Decide how the value returned by a test body settles its outcome."""
    if callable(value) and _required_positional_count(value) == 1:
        return CallbackSource(value)
    if runtime.is_awaitable(value):
        return AwaitableSource(value)
    return SyncSource(value)


def _required_positional_count(function: Callable[..., Any]) -> int | None:
    try:
        signature = inspect.signature(function)
    except (TypeError, ValueError):
        return None
    return sum(
        1
        for parameter in signature.parameters.values()
        if parameter.kind
        in (parameter.POSITIONAL_ONLY, parameter.POSITIONAL_OR_KEYWORD)
        and parameter.default is parameter.empty
    )


@dataclass(eq=False)
class Settlement:
    """Pending -> Settled state machine for one test's outcome.

    The future resolves to ``None`` on success or to the failing error. Only
    the first settlement counts; later attempts are logged and ignored.
    """

    name: str
    future: asyncio.Future[BaseException | None]
    source_future: asyncio.Future[Any] | None = field(default=None, repr=False)

    @property
    def settled(self) -> bool:
        return self.future.done()

    def succeed(self) -> bool:
        return self._settle(None)

    def fail(self, error: BaseException) -> bool:
        return self._settle(error)

    def _settle(self, error: BaseException | None) -> bool:
        if self.future.done():
            log.warning(
                "Ignoring repeated settlement of test %r (error=%r)", self.name, error
            )
            return False
        self.future.set_result(error)
        return True

    def completion(self) -> Completion:
        """Build the ``done(error=None, value=None)`` callback for continuations."""
        loop = self.future.get_loop()

        def done(error: Any = None, value: Any = None) -> None:
            if error is not None:
                if not isinstance(error, BaseException):
                    error = ContinuationError(error)
                loop.call_soon_threadsafe(self.fail, error)
            else:
                loop.call_soon_threadsafe(self.succeed)

        return done

    def follow(self, source: asyncio.Future[Any]) -> None:
        """Settle from ``source`` once it completes."""
        self.source_future = source

        def on_done(completed: asyncio.Future[Any]) -> None:
            if self.settled:
                return
            if completed.cancelled():
                self.fail(asyncio.CancelledError(f"Test {self.name!r} was cancelled"))
            elif (error := completed.exception()) is not None:
                self.fail(error)
            else:
                self.succeed()

        source.add_done_callback(on_done)


async def execute_test(
    name: str,
    test: Callable[[], Any] | None,
    *,
    timeout_ms: float,
    timeout_continuations: bool = True,
) -> TestOutcome:
    """Run one test function and return its outcome.

    Args:
        name: Test name recorded on the outcome
        test: Test body, called with no arguments. ``None`` succeeds
            immediately, which is how absent lifecycle hooks are run
        timeout_ms: Bound for awaitable (and, by default, continuation)
            results, in milliseconds
        timeout_continuations: Whether continuation results are bound by
            ``timeout_ms`` too

    Returns:
        The settled outcome; failures carry the error that caused them

    """
    loop = asyncio.get_running_loop()
    started = loop.time()
    settlement = Settlement(name, loop.create_future())

    try:
        returned = test() if test is not None else None
    except Exception as exc:
        settlement.fail(exc)
    else:
        source = classify_result(returned)
        log.debug("Dispatching test %r as %s", name, type(source).__name__)
        _dispatch(source, settlement)
        bounded = isinstance(source, AwaitableSource) or (
            isinstance(source, CallbackSource) and timeout_continuations
        )
        if bounded:
            await _race_timeout(settlement, timeout_ms)

    error = await settlement.future
    return TestOutcome(
        name=name,
        success=error is None,
        error=error,
        duration=loop.time() - started,
    )


def _dispatch(source: OutcomeSource, settlement: Settlement) -> None:
    if isinstance(source, CallbackSource):
        try:
            source.continuation(settlement.completion())
        except Exception as exc:
            settlement.fail(exc)
    elif isinstance(source, AwaitableSource):
        try:
            settlement.follow(runtime.to_future(source.awaitable))
        except Exception as exc:
            settlement.fail(exc)
    else:
        settlement.succeed()


async def _race_timeout(settlement: Settlement, timeout_ms: float) -> None:
    if settlement.settled:
        return

    timer = runtime.timer(timeout_ms)
    try:
        await asyncio.wait(
            {settlement.future, timer.future},
            return_when=asyncio.FIRST_COMPLETED,
        )
    finally:
        timer.cancel()

    if not settlement.settled:
        log.warning("Test %r timed out after %sms", settlement.name, timeout_ms)
        settlement.fail(TestTimeout(timeout_ms))
        if settlement.source_future is not None:
            settlement.source_future.cancel()
