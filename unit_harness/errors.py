"""Errors raised by the harness and captured into test outcomes."""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from unit_harness.models.outcome import SuiteResult


class HarnessError(Exception):
    """Base class for harness errors."""


class AssertionFailure(AssertionError):
    """Raised by ``expect`` when the compared values are not equal."""

    def __init__(self, expected: Any, actual: Any, message: str | None = None):
        self.expected = expected
        self.actual = actual
        self.message = message or f"Expected '{expected}', received '{actual}'"
        super().__init__(self.message)


class TestTimeout(HarnessError):
    """Raised when an awaitable test does not settle within its bound."""

    __test__ = False

    def __init__(self, timeout_ms: float):
        self.timeout_ms = timeout_ms
        super().__init__(f"Test exceeded {timeout_ms / 1000:.15g} seconds")


class ContinuationError(HarnessError):
    """Wraps a non-exception error value passed to a completion callback."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(str(value))


class LifecycleHookError(HarnessError):
    """Raised when the ``initialize`` or ``cleanup`` hook fails."""

    def __init__(
        self,
        hook: str,
        error: BaseException | None,
        result: "SuiteResult | None" = None,
        cleanup_error: BaseException | None = None,
    ):
        self.hook = hook
        self.error = error
        self.result = result
        self.cleanup_error = cleanup_error
        super().__init__(f"Suite {hook} hook failed: {error}")


class SuiteNotFoundError(HarnessError):
    """Raised when a suite cannot be loaded by key or import path."""


class DuplicateOutcomeError(HarnessError):
    """Raised when a second outcome is recorded for the same test name."""
