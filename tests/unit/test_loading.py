"""Tests for suite loading module."""

import sys
from pathlib import Path

import pytest

from unit_harness.errors import SuiteNotFoundError
from unit_harness.loading import load_suite
from unit_harness.selfcheck import selfcheck_suite


def test_load_suite_by_entry_point() -> None:
    """Loads a registered suite by key."""
    assert load_suite("selfcheck") is selfcheck_suite


def test_load_suite_by_import_path(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Loads a suite from a module:attribute path."""
    (tmp_path / "loadable_suite.py").write_text(
        "suite = {'name': 'Loadable', 'works': lambda: None}\n"
    )
    monkeypatch.syspath_prepend(str(tmp_path))
    monkeypatch.delitem(sys.modules, "loadable_suite", raising=False)

    suite = load_suite("loadable_suite:suite")

    assert suite["name"] == "Loadable"


def test_load_suite_raises_for_unknown_key() -> None:
    """Raises SuiteNotFoundError listing the available suites."""
    with pytest.raises(SuiteNotFoundError) as exc_info:
        load_suite("unknown-suite")

    assert "unknown-suite" in str(exc_info.value)
    assert "Available suites" in str(exc_info.value)
    assert "selfcheck" in str(exc_info.value)


def test_load_suite_raises_for_missing_module() -> None:
    """Raises SuiteNotFoundError when the module cannot be imported."""
    with pytest.raises(SuiteNotFoundError, match="Cannot import module"):
        load_suite("no_such_module_here:suite")


def test_load_suite_raises_for_missing_attribute() -> None:
    """Raises SuiteNotFoundError when the attribute does not exist."""
    with pytest.raises(SuiteNotFoundError, match="has no attribute"):
        load_suite("unit_harness.selfcheck:missing")


def test_load_suite_rejects_non_suites() -> None:
    """Raises SuiteNotFoundError for objects that are not suites."""
    with pytest.raises(SuiteNotFoundError, match="not a suite"):
        load_suite("unit_harness.selfcheck:empty_test")
