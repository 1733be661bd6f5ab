"""Suite orchestrator running lifecycle hooks and tests in three phases."""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from unit_harness import runtime
from unit_harness.config import HarnessConfig
from unit_harness.errors import LifecycleHookError
from unit_harness.execution import execute_test
from unit_harness.models.outcome import SuiteResult, TestOutcome
from unit_harness.models.suite import TestSuite

log = logging.getLogger(__name__)

ProgressObserver = Callable[[TestOutcome], object]
SuiteLike = TestSuite | Mapping[Any, Any]


def resolve_suite(
    name_or_suite: str | SuiteLike,
    suite: SuiteLike | None = None,
    config: HarnessConfig | None = None,
) -> tuple[str | None, TestSuite]:
    """Normalise the ``(name, suite)`` / ``(suite,)`` calling conventions."""
    config = config or HarnessConfig()
    if isinstance(name_or_suite, str):
        name: str | None = name_or_suite
        if suite is None:
            raise TypeError("A suite is required when a name is given")
    else:
        name, suite = None, name_or_suite

    if not isinstance(suite, TestSuite):
        suite = TestSuite.from_mapping(
            suite, default_timeout_ms=config.default_timeout_ms
        )
    return name or suite.name, suite


@dataclass(frozen=True, kw_only=True)
class SuiteOrchestrator:
    """Runs one suite: ``initialize``, then every test concurrently, then ``cleanup``."""

    config: HarnessConfig = field(default_factory=HarnessConfig)
    progress: ProgressObserver | None = None

    async def run(self, suite: TestSuite, name: str | None = None) -> SuiteResult:
        """Run all tests in ``suite`` and return their outcomes.

        Args:
            suite: Suite to run
            name: Label for the result, defaults to the suite's own name

        Returns:
            Outcomes keyed by test name; hooks are never included

        Raises:
            LifecycleHookError: If ``initialize`` or ``cleanup`` fails. When
                ``initialize`` fails no test runs, but ``cleanup`` still does and
                its error, if any, is attached as ``cleanup_error``

        """
        results = SuiteResult(name=name or suite.name)

        setup = await self._run_hook(suite, "initialize")
        if not setup.success:
            log.error("Suite initialize failed, skipping %d test(s)", len(suite.tests))
            teardown = await self._run_hook(suite, "cleanup")
            if not teardown.success:
                log.error(
                    "Suite cleanup failed after initialize failure: %s",
                    teardown.error,
                    exc_info=teardown.error,
                )
            raise LifecycleHookError(
                "initialize", setup.error, cleanup_error=teardown.error
            )

        log.info("Running %d test(s)...", len(suite.tests))
        await runtime.combine_all(
            self._run_test(suite, test_name, results) for test_name in suite.test_names
        )
        log.info("Tests completed: %d passed, %d failed", results.passed, results.failed)

        teardown = await self._run_hook(suite, "cleanup")
        if not teardown.success:
            raise LifecycleHookError("cleanup", teardown.error, result=results)

        return results

    async def _run_hook(self, suite: TestSuite, hook: str) -> TestOutcome:
        return await execute_test(
            hook,
            suite.hook(hook),
            timeout_ms=suite.timeout_for(hook),
            timeout_continuations=self.config.timeout_continuations,
        )

    async def _run_test(
        self, suite: TestSuite, test_name: str, results: SuiteResult
    ) -> None:
        outcome = await execute_test(
            test_name,
            suite.tests[test_name],
            timeout_ms=suite.timeout_for(test_name),
            timeout_continuations=self.config.timeout_continuations,
        )
        results.record(outcome)
        self._notify(outcome)

    def _notify(self, outcome: TestOutcome) -> None:
        if self.progress is None:
            return
        try:
            self.progress(outcome)
        except Exception:
            log.exception("Progress observer failed for test %r", outcome.name)


async def run(
    name_or_suite: str | SuiteLike,
    suite: SuiteLike | None = None,
    *,
    progress: ProgressObserver | None = None,
    config: HarnessConfig | None = None,
) -> SuiteResult:
    """Run a suite given as ``run(suite)`` or ``run(name, suite)``.

    The suite may be a ``TestSuite`` or a plain mapping of test names to
    functions, with optional ``initialize``, ``cleanup``, ``name`` and
    ``timeout`` entries.
    """
    config = config or HarnessConfig()
    name, test_suite = resolve_suite(name_or_suite, suite, config)
    orchestrator = SuiteOrchestrator(config=config, progress=progress)
    return await orchestrator.run(test_suite, name=name)
