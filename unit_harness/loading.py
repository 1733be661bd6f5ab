"""Loading of suites from entry points or import paths."""

import importlib
from collections.abc import Mapping
from importlib.metadata import entry_points
from typing import Any

from unit_harness.errors import SuiteNotFoundError
from unit_harness.models.suite import TestSuite

ENTRY_POINT_GROUP = "unit_harness.suites"


def load_suite(key: str) -> TestSuite | Mapping[Any, Any]:
    """Load a suite by entry point key or ``module:attribute`` import path.

    Args:
        key: The suite key as registered in pyproject.toml (e.g., "selfcheck")
             or an import path such as "my_tests:suite"

    Returns:
        The suite object, either a ``TestSuite`` or a plain mapping

    Raises:
        SuiteNotFoundError: If no suite matches the key

    """
    entries = entry_points(group=ENTRY_POINT_GROUP)

    for entry in entries:
        if entry.name == key:
            return _check_suite(key, entry.load())

    if ":" in key:
        return _check_suite(key, _import_attribute(key))

    available = [e.name for e in entries]
    raise SuiteNotFoundError(
        f"Suite '{key}' not found. Available suites: {available}"
    )


def _import_attribute(path: str) -> Any:
    module_name, _, attribute = path.partition(":")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise SuiteNotFoundError(f"Cannot import module '{module_name}'") from exc

    try:
        return getattr(module, attribute)
    except AttributeError as exc:
        raise SuiteNotFoundError(
            f"Module '{module_name}' has no attribute '{attribute}'"
        ) from exc


def _check_suite(key: str, suite: Any) -> TestSuite | Mapping[Any, Any]:
    if not isinstance(suite, (TestSuite, Mapping)):
        raise SuiteNotFoundError(
            f"'{key}' is a {type(suite).__name__}, not a suite"
        )
    return suite
