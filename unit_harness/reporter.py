"""Text and JSON rendering of suite results."""

import logging
import traceback
from collections.abc import Callable, Sequence
from typing import Any

from unit_harness.config import HarnessConfig
from unit_harness.models.outcome import SuiteResult, TestOutcome
from unit_harness.orchestrator import (
    ProgressObserver,
    SuiteLike,
    SuiteOrchestrator,
    resolve_suite,
)

log = logging.getLogger(__name__)

TextSink = Callable[[str], object]


def format_outcome(outcome: TestOutcome) -> str:
    """Render one outcome as ``Success: <name>`` or ``FAILED: <name>, <message>``."""
    if outcome.success:
        return f"Success: {outcome.name}"
    line = f"FAILED: {outcome.name}, {outcome.error}"
    if outcome.error is not None and outcome.error.__traceback__ is not None:
        line += "\n" + "".join(traceback.format_exception(outcome.error)).rstrip()
    return line


def format_summary(passed: int, failed: int) -> str:
    """Render the ``<passed>/<total> passed[, <failed> FAILED].`` line."""
    summary = f"{passed}/{passed + failed} passed"
    if failed:
        summary += f", {failed} FAILED"
    return summary + "."


def write_report(
    sink: TextSink, results: SuiteResult, test_names: Sequence[str]
) -> bool:
    """Write a report for ``results`` to ``sink`` in ``test_names`` order.

    Returns:
        True when none of the tests failed

    """
    if results.name:
        sink(results.name)

    passed = failed = 0
    for name in test_names:
        outcome = results[name]
        sink(format_outcome(outcome))
        if outcome.success:
            passed += 1
        else:
            failed += 1

    sink(format_summary(passed, failed))
    return failed == 0


def format_output(results: SuiteResult) -> dict[str, Any]:
    """Format suite results for JSON output."""
    all_results: list[dict[str, Any]] = [
        {
            "name": outcome.name,
            "success": outcome.success,
            "duration": outcome.duration,
            "error": str(outcome.error) if outcome.error is not None else None,
        }
        for outcome in results.values()
    ]

    return {
        "name": results.name,
        "total": len(all_results),
        "passed": results.passed,
        "failed": results.failed,
        "results": all_results,
    }


async def report(
    name_or_suite: str | SuiteLike,
    suite: SuiteLike | None = None,
    *,
    sink: TextSink = print,
    progress: ProgressObserver | None = None,
    config: HarnessConfig | None = None,
) -> bool:
    """Run a suite and write a text report of its results to ``sink``.

    Returns:
        True when every test succeeded, False otherwise

    Raises:
        Exception: Whatever made the run itself fail (for instance a
            ``LifecycleHookError``), after logging it

    """
    config = config or HarnessConfig()
    name, test_suite = resolve_suite(name_or_suite, suite, config)
    orchestrator = SuiteOrchestrator(config=config, progress=progress)

    try:
        results = await orchestrator.run(test_suite, name=name)
    except Exception as exc:
        log.error("ERROR: %s", exc, exc_info=exc)
        raise

    return write_report(sink, results, test_suite.test_names)
