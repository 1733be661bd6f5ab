"""CLI entry point for running a test suite."""

import argparse
import asyncio
import json
import logging
import sys

from pydantic import ValidationError

from unit_harness.config import HarnessConfig
from unit_harness.errors import HarnessError
from unit_harness.loading import load_suite
from unit_harness.orchestrator import SuiteOrchestrator, resolve_suite
from unit_harness.reporter import format_output, write_report

EXIT_SUCCESS = 0
EXIT_FAILURES = 1
EXIT_ERROR = 2


async def run(
    suite_key: str,
    name: str | None = None,
    timeout_ms: float | None = None,
    config: HarnessConfig | None = None,
    output_format: str = "text",
) -> int:
    """Run the suite registered as ``suite_key`` and return an exit code."""
    log = logging.getLogger("unit_harness")
    config = config or HarnessConfig()

    log.info("Loading suite: %s", suite_key)
    label, suite = resolve_suite(load_suite(suite_key), config=config)
    if timeout_ms is not None:
        suite = suite.model_copy(update={"timeout": timeout_ms})

    results = await SuiteOrchestrator(config=config).run(suite, name=name or label)

    if output_format == "json":
        print(json.dumps(format_output(results), indent=2))
        succeeded = results.succeeded
    else:
        succeeded = write_report(print, results, suite.test_names)

    return EXIT_SUCCESS if succeeded else EXIT_FAILURES


def parse_config(config_json: str) -> HarnessConfig:
    """Parse the ``--config`` JSON string."""
    if not config_json.strip():
        return HarnessConfig()
    return HarnessConfig.model_validate_json(config_json)


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Run a unit test suite")
    parser.add_argument(
        "suite",
        help="Suite entry point key (e.g. selfcheck) or module:attribute path",
    )
    parser.add_argument("--name", default=None, help="Label printed with the report")
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-test timeout in milliseconds, overriding the suite's",
    )
    parser.add_argument(
        "--config",
        default="",
        help="JSON configuration for the harness",
    )
    parser.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        help="Report format written to stdout",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level for harness diagnostics on stderr",
    )

    args = parser.parse_args()
    if args.timeout is not None and args.timeout <= 0:
        parser.error("--timeout must be positive")

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    log = logging.getLogger("unit_harness")

    try:
        config = parse_config(args.config)
        exit_code = asyncio.run(
            run(
                suite_key=args.suite,
                name=args.name,
                timeout_ms=args.timeout,
                config=config,
                output_format=args.format,
            )
        )
    except (HarnessError, ValidationError) as exc:
        log.error("ERROR: %s", exc, exc_info=exc)
        exit_code = EXIT_ERROR
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
