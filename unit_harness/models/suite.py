"""Models for test suites."""

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any, TypeVar

from pydantic import Field, model_validator

from unit_harness.classify import TypeTag, classify
from unit_harness.config import DEFAULT_TIMEOUT_MS
from unit_harness.models.base import Model

log = logging.getLogger(__name__)

TestFunction = Callable[[], Any]

HOOK_NAMES = frozenset({"initialize", "cleanup"})
TIMEOUT_ATTRIBUTE = "__unit_harness_timeout__"

F = TypeVar("F", bound=Callable[..., Any])


def timeout(milliseconds: float) -> Callable[[F], F]:
    """Override the suite timeout for a single test."""
    if milliseconds <= 0:
        raise ValueError("Timeout must be positive")

    def decorate(test: F) -> F:
        setattr(test, TIMEOUT_ATTRIBUTE, milliseconds)
        return test

    return decorate


def is_hook_name(name: str) -> bool:
    """Check if ``name`` is a lifecycle hook rather than a reported test."""
    return name in HOOK_NAMES


class TestSuite(Model):
    """Named collection of test functions with optional lifecycle hooks."""

    __test__ = False

    name: str | None = Field(default=None, description="Label for reports")
    timeout: float = Field(
        default=DEFAULT_TIMEOUT_MS,
        gt=0,
        description="Timeout for awaitable tests (milliseconds)",
    )
    tests: Mapping[str, TestFunction] = Field(
        default_factory=dict, description="Test functions keyed by name"
    )
    initialize: TestFunction | None = Field(
        default=None, description="Hook run before any test"
    )
    cleanup: TestFunction | None = Field(
        default=None, description="Hook run after every test settled"
    )

    @model_validator(mode="after")
    def _reject_hook_names(self) -> "TestSuite":
        hooks = sorted(HOOK_NAMES.intersection(self.tests))
        if hooks:
            raise ValueError(f"Hook names cannot be used as tests: {hooks}")
        return self

    @classmethod
    def from_mapping(
        cls,
        entries: Mapping[Any, Any],
        *,
        name: str | None = None,
        default_timeout_ms: float = DEFAULT_TIMEOUT_MS,
    ) -> "TestSuite":
        """Build a suite from a plain mapping of names to functions.

        ``initialize`` and ``cleanup`` become hooks, a string ``name`` is the
        label and a positive ``timeout`` the suite timeout. Keys that spell
        their own position (``"0"`` first, ``"1"`` second ...) and values
        that are not functions are left out.
        """
        label = name
        suite_timeout = default_timeout_ms
        tests: dict[str, TestFunction] = {}

        for index, (key, value) in enumerate(entries.items()):
            if key == "name" and classify(value) is TypeTag.STRING:
                label = label or value
                continue
            if key == "timeout" and classify(value) is TypeTag.NUMBER:
                if value > 0:
                    suite_timeout = value
                else:
                    log.warning(
                        "Ignoring non-positive suite timeout %r, using %sms",
                        value,
                        default_timeout_ms,
                    )
                continue
            if not isinstance(key, str) or key == str(index) or is_hook_name(key):
                continue
            if classify(value) is not TypeTag.FUNCTION:
                log.debug("Skipping non-function suite entry %r", key)
                continue
            tests[key] = value

        return cls(
            name=label,
            timeout=suite_timeout,
            tests=tests,
            initialize=entries.get("initialize"),
            cleanup=entries.get("cleanup"),
        )

    @property
    def test_names(self) -> Sequence[str]:
        """Names of the reported tests in declaration order."""
        return list(self.tests)

    def timeout_for(self, name: str) -> float:
        """Timeout in milliseconds for the test or hook called ``name``."""
        test = self.hook(name) if is_hook_name(name) else self.tests.get(name)
        return getattr(test, TIMEOUT_ATTRIBUTE, self.timeout)

    def hook(self, name: str) -> TestFunction | None:
        """Return the ``initialize`` or ``cleanup`` hook, if set."""
        if not is_hook_name(name):
            raise KeyError(name)
        return self.initialize if name == "initialize" else self.cleanup
