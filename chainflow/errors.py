"""Shared error types for chainflow."""

from typing import Optional


class ChainflowError(Exception):
    """Base class for errors raised by chainflow itself."""


class PipelineCancelledError(ChainflowError):
    """Raised when a pipeline run is abandoned before it finished.

    Distinct from step failures: the work was abandoned, no step reported an
    error. ``position`` is the 1-based step that was never started.
    """

    def __init__(self, position: int):
        self.position = position
        super().__init__(f"Pipeline cancelled before step {position}")


class ProviderError(ChainflowError):
    """Raised by provider adapters when a remote model call fails."""

    def __init__(
        self, provider_id: str, message: str, status_code: Optional[int] = None
    ):
        self.provider_id = provider_id
        self.status_code = status_code
        prefix = f"{provider_id} HTTP {status_code}" if status_code else provider_id
        super().__init__(f"{prefix}: {message}")


class EmptyResponseError(ProviderError):
    """The provider answered but returned no choices or candidates."""

    def __init__(self, provider_id: str):
        super().__init__(provider_id, "empty completion response")


class ConfigError(ChainflowError):
    """Invalid pipeline definition, provider file or missing provider."""
