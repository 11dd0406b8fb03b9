"""Client configuration read from environment variables."""

import os
from dataclasses import dataclass

from .errors import ConfigError

API_URL_ENV = "PANELBOARD_API_URL"
TIMEOUT_ENV = "PANELBOARD_TIMEOUT"
DEFAULT_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class ClientConfig:
    """Panel API connection settings. Frozen: fixed once a client is built."""

    api_url: str
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        if not self.api_url or not self.api_url.strip():
            raise ConfigError("api_url must not be empty")
        if self.timeout_seconds <= 0:
            raise ConfigError(f"timeout_seconds must be > 0, got {self.timeout_seconds}")


def load_config() -> ClientConfig:
    """Load configuration from environment variables.

    Required environment variables:
        PANELBOARD_API_URL: base URL of the panel API

    Optional environment variables:
        PANELBOARD_TIMEOUT: request timeout in seconds (default: 10)

    Raises:
        ConfigError: If the URL is missing or the timeout is not a number.
    """
    api_url = os.environ.get(API_URL_ENV)
    if not api_url:
        raise ConfigError(f"Missing required environment variable: {API_URL_ENV}")

    raw_timeout = os.environ.get(TIMEOUT_ENV)
    timeout = DEFAULT_TIMEOUT_SECONDS
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
        except ValueError:
            raise ConfigError(f"{TIMEOUT_ENV} must be a number, got {raw_timeout!r}") from None

    return ClientConfig(api_url=api_url, timeout_seconds=timeout)
