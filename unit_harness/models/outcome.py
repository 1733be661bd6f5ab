"""Models for test execution outcomes."""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field

from unit_harness.errors import DuplicateOutcomeError


@dataclass(frozen=True, kw_only=True)
class TestOutcome:
    """Outcome of a single test execution.

    ``error`` holds the exception that failed the test, ``None`` on success.
    """

    __test__ = False

    name: str
    success: bool
    error: BaseException | None = None
    duration: float = 0.0


@dataclass(kw_only=True)
class SuiteResult(Mapping[str, TestOutcome]):
    """Outcomes of one suite run keyed by test name."""

    name: str | None = None
    _outcomes: dict[str, TestOutcome] = field(default_factory=dict, repr=False)

    def record(self, outcome: TestOutcome) -> None:
        """Store ``outcome`` in its test's slot, which must still be empty."""
        if outcome.name in self._outcomes:
            raise DuplicateOutcomeError(
                f"Outcome for test '{outcome.name}' was already recorded"
            )
        self._outcomes[outcome.name] = outcome

    def __getitem__(self, name: str) -> TestOutcome:
        return self._outcomes[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._outcomes)

    def __len__(self) -> int:
        return len(self._outcomes)

    @property
    def passed(self) -> int:
        return sum(1 for outcome in self._outcomes.values() if outcome.success)

    @property
    def failed(self) -> int:
        return len(self._outcomes) - self.passed

    @property
    def succeeded(self) -> bool:
        """True when no recorded test failed."""
        return self.failed == 0
