"""Tests for the suite orchestrator."""

import asyncio
import logging
from typing import Any
from unittest.mock import Mock

import pytest

from unit_harness.config import HarnessConfig
from unit_harness.errors import DuplicateOutcomeError, LifecycleHookError
from unit_harness.models.outcome import SuiteResult, TestOutcome
from unit_harness.models.suite import TestSuite
from unit_harness.orchestrator import SuiteOrchestrator, resolve_suite, run
from unit_harness.testing.factories import TestOutcomeFactory


async def test_returns_empty_result_for_empty_suite() -> None:
    """Returns an empty result when there are no tests."""
    results = await run({})

    assert len(results) == 0
    assert results.name is None


async def test_records_every_test() -> None:
    """Every eligible test yields exactly one outcome."""

    def failing() -> None:
        raise RuntimeError("x")

    results = await run({"a": lambda: None, "b": failing})

    assert set(results) == {"a", "b"}
    assert results["a"].success
    assert not results["b"].success
    assert str(results["b"].error) == "x"


async def test_runs_tests_concurrently() -> None:
    """Both tests are in flight at the same time."""
    started: list[str] = []
    release = asyncio.Event()

    async def first() -> None:
        started.append("first")
        await release.wait()

    async def second() -> None:
        started.append("second")
        await asyncio.sleep(0)
        assert started == ["first", "second"]
        release.set()

    results = await run({"first": first, "second": second})

    assert results["first"].success
    assert results["second"].success


async def test_hooks_gate_the_tests() -> None:
    """Initialize runs before every test and cleanup after all of them."""
    events: list[str] = []

    async def initialize() -> None:
        await asyncio.sleep(0.01)
        events.append("initialize")

    async def slow() -> None:
        await asyncio.sleep(0.02)
        events.append("slow")

    def fast() -> None:
        events.append("fast")

    def cleanup() -> None:
        events.append("cleanup")

    results = await run(
        {"initialize": initialize, "slow": slow, "fast": fast, "cleanup": cleanup}
    )

    assert events[0] == "initialize"
    assert sorted(events[1:3]) == ["fast", "slow"]
    assert events[3] == "cleanup"
    assert "initialize" not in results
    assert "cleanup" not in results


async def test_initialize_failure_skips_tests_and_runs_cleanup() -> None:
    """A failing initialize raises after running cleanup, with no test run."""
    calls: list[str] = []

    def initialize() -> None:
        raise RuntimeError("no database")

    with pytest.raises(LifecycleHookError) as exc_info:
        await run(
            {
                "initialize": initialize,
                "test": lambda: calls.append("test"),
                "cleanup": lambda: calls.append("cleanup"),
            }
        )

    assert exc_info.value.hook == "initialize"
    assert str(exc_info.value.error) == "no database"
    assert calls == ["cleanup"]


async def test_cleanup_failure_after_initialize_failure_is_kept(
    caplog: pytest.LogCaptureFixture,
) -> None:
    """A cleanup that fails after initialize failed is logged and attached."""

    def initialize() -> None:
        raise RuntimeError("no database")

    def cleanup() -> None:
        raise RuntimeError("disk full")

    with caplog.at_level(logging.ERROR):
        with pytest.raises(LifecycleHookError) as exc_info:
            await run({"initialize": initialize, "test": lambda: None, "cleanup": cleanup})

    assert exc_info.value.hook == "initialize"
    assert str(exc_info.value.error) == "no database"
    assert str(exc_info.value.cleanup_error) == "disk full"
    assert "Suite cleanup failed after initialize failure: disk full" in caplog.text


async def test_initialize_failure_with_passing_cleanup_has_no_cleanup_error() -> None:
    """No cleanup error is attached when cleanup succeeds."""

    def initialize() -> None:
        raise RuntimeError("no database")

    with pytest.raises(LifecycleHookError) as exc_info:
        await run({"initialize": initialize, "cleanup": lambda: None})

    assert exc_info.value.cleanup_error is None


async def test_zero_timeout_entry_uses_default() -> None:
    """A zero timeout entry runs the suite with the default timeout."""
    results = await run({"timeout": 0, "t": lambda: None})

    assert results["t"].success is True


async def test_cleanup_failure_carries_results() -> None:
    """A failing cleanup raises with the completed results attached."""

    def cleanup() -> None:
        raise RuntimeError("disk full")

    with pytest.raises(LifecycleHookError) as exc_info:
        await run({"test": lambda: None, "cleanup": cleanup})

    assert exc_info.value.hook == "cleanup"
    assert exc_info.value.result is not None
    assert exc_info.value.result["test"].success


async def test_name_from_argument_or_suite() -> None:
    """Uses the explicit name, else the suite's own name."""
    named = await run("explicit", {"name": "ignored", "t": lambda: None})
    from_suite = await run({"name": "Suite label", "t": lambda: None})

    assert named.name == "explicit"
    assert from_suite.name == "Suite label"


async def test_suite_timeout_applies_to_tests() -> None:
    """The suite timeout bounds awaitable tests."""

    def hangs() -> asyncio.Future[None]:
        return asyncio.get_running_loop().create_future()

    results = await run({"timeout": 20, "hangs": hangs})

    assert "0.02" in str(results["hangs"].error)


async def test_progress_receives_every_outcome() -> None:
    """The observer sees each outcome as it settles."""
    seen: list[TestOutcome] = []

    results = await run({"a": lambda: None, "b": lambda: None}, progress=seen.append)

    assert {outcome.name for outcome in seen} == {"a", "b"}
    assert all(outcome is results[outcome.name] for outcome in seen)


async def test_progress_errors_do_not_break_the_run() -> None:
    """A failing observer is logged and the run completes."""
    observer = Mock(side_effect=RuntimeError("observer broke"))

    results = await run({"a": lambda: None}, progress=observer)

    assert results["a"].success
    observer.assert_called_once()


async def test_orchestrator_uses_config_for_continuations() -> None:
    """Continuation bounds follow the harness configuration."""

    def test() -> Any:
        loop = asyncio.get_running_loop()
        return lambda done: loop.call_later(0.03, done, None)

    suite = TestSuite(timeout=10, tests={"t": test})
    orchestrator = SuiteOrchestrator(
        config=HarnessConfig(timeout_continuations=False)
    )

    results = await orchestrator.run(suite)

    assert results["t"].success


def test_resolve_suite_requires_suite_after_name() -> None:
    """Raises when only a name is given."""
    with pytest.raises(TypeError):
        resolve_suite("just a name")


def test_resolve_suite_uses_default_timeout_from_config() -> None:
    """Mappings without a timeout take the configured default."""
    _, suite = resolve_suite(
        {"t": lambda: None}, config=HarnessConfig(default_timeout_ms=5)
    )

    assert suite.timeout == 5


def test_result_refuses_second_outcome_for_same_test() -> None:
    """Each slot is written exactly once."""
    results = SuiteResult()
    results.record(TestOutcomeFactory.build(name="t"))

    with pytest.raises(DuplicateOutcomeError):
        results.record(TestOutcomeFactory.build(name="t"))
