"""Suite exercising the harness with its own engine.

Registered as the ``selfcheck`` suite, so ``unit-harness selfcheck`` verifies
an installation end to end.
"""

import asyncio

from unit_harness.equality import equals, expect
from unit_harness.errors import TestTimeout
from unit_harness.models.suite import TestSuite
from unit_harness.orchestrator import run


def empty_test() -> None:
    pass


async def resolved_awaitable_test() -> bool:
    return True


async def raising_test() -> None:
    def test() -> None:
        raise RuntimeError("x")

    results = await run({"test": test})
    expect(False, results["test"].success)
    expect("x", str(results["test"].error))


def waiting_test():
    return asyncio.sleep(0.1)


def expect_and_equals_test() -> None:
    expect(0, 0)
    expect(1, 1)
    expect("", "")
    expect("some", "some")
    expect({"a": 1, "b": 2}, {"a": 1, "b": 2})
    expect({"a": 1, "_cache": 1}, {"a": 1, "_cache": 2})
    expect(False, equals(0, 1))
    expect(False, equals("a", "b"))
    expect(False, equals({"a": 1, "b": 2}, {"a": 2, "b": 1}))
    expect(False, equals([1, 2], [1, 2, 3]))


def continuation_test():
    loop = asyncio.get_running_loop()
    return lambda done: loop.call_later(0.001, done, None, 0)


async def failing_continuation_test() -> None:
    def test():
        loop = asyncio.get_running_loop()
        return lambda done: loop.call_later(0.001, done, RuntimeError("failed"))

    results = await run({"test": test})
    expect(False, results["test"].success)


async def timeout_test() -> None:
    def test():
        return asyncio.get_running_loop().create_future()

    results = await run({"timeout": 50, "test": test})
    expect(False, results["test"].success)
    expect(True, isinstance(results["test"].error, TestTimeout))
    expect(True, "0.05" in str(results["test"].error))


selfcheck_suite = TestSuite.from_mapping(
    {
        "Empty should succeed": empty_test,
        "Resolved awaitable should succeed": resolved_awaitable_test,
        "Raising an exception should fail": raising_test,
        "Should wait until all are done": waiting_test,
        "Expect and equals should work": expect_and_equals_test,
        "Returning a continuation function should work": continuation_test,
        "Failing a continuation should fail": failing_continuation_test,
        "Exceeding the timeout should fail": timeout_test,
    },
    name="Harness self-check",
)
