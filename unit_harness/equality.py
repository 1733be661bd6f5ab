"""Structural equality used by test bodies to assert expected values.

Two values are equal when they classify to the same ``TypeTag`` and their
contents match recursively. Fields whose names begin with ``_`` are private
and never compared, so two objects that differ only in private state are
considered equal.
"""

import re
from typing import Any

from unit_harness.classify import TypeTag, classify, read_field, visible_fields
from unit_harness.errors import AssertionFailure

PRIVATE_PREFIX = "_"


def equals(expected: Any, actual: Any) -> bool:
    """Return True if ``expected`` is structurally equal to ``actual``."""
    return _equals(expected, actual, set())


def expect(expected: Any, actual: Any, message: str | None = None) -> None:
    """Raise ``AssertionFailure`` unless ``expected`` equals ``actual``."""
    if not equals(expected, actual):
        raise AssertionFailure(expected, actual, message)


def _equals(expected: Any, actual: Any, active: set[tuple[int, int]]) -> bool:
    tag = classify(actual)
    if classify(expected) is not tag:
        return False

    if tag in (TypeTag.NUMBER, TypeTag.BOOLEAN):
        return expected == actual
    if tag in (TypeTag.FUNCTION, TypeTag.NULL):
        return expected is actual or expected == actual
    if tag in (TypeTag.DATE, TypeTag.REGEXP, TypeTag.STRING):
        return _canonical(expected) == _canonical(actual)
    if tag not in (TypeTag.ARRAY, TypeTag.OBJECT):
        return False

    # A pair already being compared further up the path is a cycle; treat it
    # as equal and let the rest of the walk decide.
    key = (id(expected), id(actual))
    if key in active:
        return True
    active.add(key)
    try:
        if tag is TypeTag.ARRAY:
            return _sequences_equal(expected, actual, active)
        return _objects_equal(expected, actual, active)
    finally:
        active.discard(key)


def _sequences_equal(expected: Any, actual: Any, active: set[tuple[int, int]]) -> bool:
    if len(expected) != len(actual):
        return False
    return all(
        _equals(left, right, active)
        for left, right in zip(expected, actual, strict=True)
    )


def _objects_equal(expected: Any, actual: Any, active: set[tuple[int, int]]) -> bool:
    for source in (actual, expected):
        for name in visible_fields(source):
            if _is_private(name):
                continue
            if not _equals(
                read_field(expected, name), read_field(actual, name), active
            ):
                return False
    return True


def _is_private(name: Any) -> bool:
    return isinstance(name, str) and name.startswith(PRIVATE_PREFIX)


def _canonical(value: Any) -> Any:
    if isinstance(value, re.Pattern):
        return (value.pattern, value.flags)
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)
