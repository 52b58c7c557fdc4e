"""Configuration management for the Schwab Trader API client."""

import os
from dataclasses import dataclass

from ..oauth.exceptions import ConfigurationError


@dataclass
class SchwabClientConfig:
    """
    Configuration for the Schwab API client.

    Attributes:
        base_url: Base URL for the Schwab API
        timeout: Request timeout in seconds
        max_retries: Maximum number of retry attempts for failed GET requests
        retry_delay: Initial delay between retries (seconds)
    """

    base_url: str = "https://api.schwabapi.com"
    timeout: int = 30
    max_retries: int = 3
    retry_delay: float = 1.0

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.base_url.startswith(("http://", "https://")):
            raise ConfigurationError(f"base_url must be an http(s) URL, got {self.base_url}")

        if self.timeout <= 0:
            raise ConfigurationError("Timeout must be positive")

        if self.max_retries < 0:
            raise ConfigurationError("Max retries cannot be negative")

        if self.retry_delay < 0:
            raise ConfigurationError("Retry delay cannot be negative")

    @classmethod
    def from_env(cls) -> "SchwabClientConfig":
        """
        Load configuration from environment variables.

        Optional environment variables:
            SCHWAB_BASE_URL, SCHWAB_TIMEOUT, SCHWAB_MAX_RETRIES, SCHWAB_RETRY_DELAY

        Raises:
            ConfigurationError: If a variable holds an invalid value
        """
        defaults = cls()
        try:
            return cls(
                base_url=os.getenv("SCHWAB_BASE_URL", defaults.base_url),
                timeout=int(os.getenv("SCHWAB_TIMEOUT", str(defaults.timeout))),
                max_retries=int(os.getenv("SCHWAB_MAX_RETRIES", str(defaults.max_retries))),
                retry_delay=float(os.getenv("SCHWAB_RETRY_DELAY", str(defaults.retry_delay))),
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid Schwab client configuration: {e}") from e
