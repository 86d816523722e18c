"""Configuration for chainflow, read from the environment (and .env)."""

import logging
import os

from dotenv import load_dotenv

load_dotenv()


def get_float(env_var: str, default: float) -> float:
    """Get a float from environment or return default."""
    try:
        return float(os.getenv(env_var, default))
    except ValueError:
        logging.getLogger(__name__).warning(
            "Invalid %s, using default %s", env_var, default
        )
        return default


def get_int(env_var: str, default: int) -> int:
    """Get an int from environment or return default."""
    try:
        return int(os.getenv(env_var, default))
    except ValueError:
        logging.getLogger(__name__).warning(
            "Invalid %s, using default %s", env_var, default
        )
        return default


# ============================================================================
# Logging
# ============================================================================

LOG_LEVEL = os.getenv("CHAINFLOW_LOG_LEVEL", "INFO")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# ============================================================================
# Providers
# ============================================================================

# YAML file describing which providers to load
PROVIDERS_CONFIG = os.getenv("CHAINFLOW_PROVIDERS_CONFIG", "config/providers.yaml")

# Provider used for model ids without a "provider:" prefix
DEFAULT_PROVIDER = os.getenv("CHAINFLOW_DEFAULT_PROVIDER", "openrouter")

# Request timeout for provider calls, in seconds
HTTP_TIMEOUT = get_float("CHAINFLOW_HTTP_TIMEOUT", 120.0)

# ============================================================================
# Streaming
# ============================================================================

# Generations the producer may hand off before the consumer takes one
STREAM_BUFFER = max(1, get_int("CHAINFLOW_STREAM_BUFFER", 1))


def configure_logging(level: str | None = None) -> None:
    """Set up root logging for command-line use."""
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format=LOG_FORMAT,
    )
