"""Configuration for harness runs."""

from pydantic import BaseModel, Field

DEFAULT_TIMEOUT_MS = 10000.0


class HarnessConfig(BaseModel):
    """Configuration shared by the orchestrator and the CLI."""

    default_timeout_ms: float = Field(
        default=DEFAULT_TIMEOUT_MS,
        gt=0,
        description="Timeout for suites that do not declare one (milliseconds)",
    )
    # False waits on callback-style tests without a bound
    timeout_continuations: bool = True
