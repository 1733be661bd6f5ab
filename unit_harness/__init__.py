"""Minimal unit test orchestration engine."""

from unit_harness.equality import equals, expect
from unit_harness.errors import AssertionFailure, LifecycleHookError, TestTimeout
from unit_harness.models.outcome import SuiteResult, TestOutcome
from unit_harness.models.suite import TestSuite, timeout
from unit_harness.orchestrator import run
from unit_harness.reporter import report

__all__ = [
    "AssertionFailure",
    "LifecycleHookError",
    "SuiteResult",
    "TestOutcome",
    "TestSuite",
    "TestTimeout",
    "equals",
    "expect",
    "report",
    "run",
    "timeout",
]
