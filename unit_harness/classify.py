"""Semantic type tags used by structural comparison and suite building."""

import dataclasses
import datetime
import functools
import inspect
import numbers
import re
from collections.abc import Mapping, Sequence
from enum import StrEnum
from typing import Any, Final

from pydantic import BaseModel


class _Missing:
    """Marker for a field that is absent on one side of a comparison."""

    _instance: "_Missing | None" = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Final = _Missing()


class TypeTag(StrEnum):
    """Classification of an arbitrary value."""

    NUMBER = "number"
    BOOLEAN = "boolean"
    STRING = "string"
    ARRAY = "array"
    REGEXP = "regexp"
    DATE = "date"
    FUNCTION = "function"
    OBJECT = "object"
    NULL = "null"
    UNDEFINED = "undefined"
    OTHER = "other"


def classify(value: Any) -> TypeTag:
    """Map ``value`` to its type tag.

    The order of checks matters: ``None`` is guarded before anything looks at
    the value's type, and ``bool`` is tested before ``numbers.Number`` since
    it subclasses ``int``.
    """
    if value is None:
        return TypeTag.NULL
    if value is MISSING:
        return TypeTag.UNDEFINED
    if isinstance(value, bool):
        return TypeTag.BOOLEAN
    if isinstance(value, numbers.Number):
        return TypeTag.NUMBER
    if isinstance(value, (str, bytes, bytearray)):
        return TypeTag.STRING
    if isinstance(value, re.Pattern):
        return TypeTag.REGEXP
    if isinstance(value, (datetime.date, datetime.time)):
        return TypeTag.DATE
    if (
        inspect.isroutine(value)
        or inspect.isclass(value)
        or isinstance(value, functools.partial)
    ):
        return TypeTag.FUNCTION
    if isinstance(value, Sequence):
        return TypeTag.ARRAY
    if has_visible_fields(value):
        return TypeTag.OBJECT
    return TypeTag.OTHER


def has_visible_fields(value: Any) -> bool:
    """Check if ``value`` exposes named fields that can be compared."""
    return (
        hasattr(value, "__equality_fields__")
        or isinstance(value, (Mapping, BaseModel))
        or dataclasses.is_dataclass(value)
        or hasattr(value, "__dict__")
    )


def visible_fields(value: Any) -> list[Any]:
    """Return the field names of ``value`` that take part in comparison.

    An ``__equality_fields__`` allow-list wins over every other source.
    """
    allow_list = getattr(value, "__equality_fields__", None)
    if allow_list is not None:
        return list(allow_list)
    if isinstance(value, Mapping):
        return list(value.keys())
    if isinstance(value, BaseModel):
        return [*type(value).model_fields, *(value.model_extra or {})]
    if dataclasses.is_dataclass(value):
        return [f.name for f in dataclasses.fields(value)]
    return list(vars(value))


def read_field(value: Any, name: Any) -> Any:
    """Read field ``name`` from ``value``, or ``MISSING`` when absent."""
    if isinstance(value, Mapping):
        return value.get(name, MISSING)
    if not isinstance(name, str):
        return MISSING
    return getattr(value, name, MISSING)
