"""Data model for suites and their outcomes."""

from unit_harness.models.outcome import SuiteResult, TestOutcome
from unit_harness.models.suite import TestSuite

__all__ = ["SuiteResult", "TestOutcome", "TestSuite"]
