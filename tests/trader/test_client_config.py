"""Tests for Schwab client configuration."""

import os
from unittest import mock

import pytest

from schwab_api.oauth.exceptions import ConfigurationError
from schwab_api.trader.config import SchwabClientConfig


class TestSchwabClientConfig:
    """Tests for SchwabClientConfig dataclass."""

    def test_defaults(self):
        """Defaults point at the production API."""
        config = SchwabClientConfig()

        assert config.base_url == "https://api.schwabapi.com"
        assert config.timeout == 30
        assert config.max_retries == 3
        assert config.retry_delay == 1.0

    @pytest.mark.parametrize(
        "kwargs, message",
        [
            ({"base_url": "api.schwabapi.com"}, "base_url"),
            ({"timeout": 0}, "Timeout must be positive"),
            ({"max_retries": -1}, "Max retries cannot be negative"),
            ({"retry_delay": -0.5}, "Retry delay cannot be negative"),
        ],
    )
    def test_validation(self, kwargs, message):
        """Invalid values raise ConfigurationError."""
        with pytest.raises(ConfigurationError, match=message):
            SchwabClientConfig(**kwargs)

    def test_from_env(self):
        """from_env reads overrides from the environment."""
        env = {
            "SCHWAB_BASE_URL": "https://sandbox.example.com",
            "SCHWAB_TIMEOUT": "10",
            "SCHWAB_MAX_RETRIES": "0",
            "SCHWAB_RETRY_DELAY": "2.5",
        }
        with mock.patch.dict(os.environ, env, clear=True):
            config = SchwabClientConfig.from_env()

        assert config.base_url == "https://sandbox.example.com"
        assert config.timeout == 10
        assert config.max_retries == 0
        assert config.retry_delay == 2.5

    def test_from_env_defaults(self):
        """from_env falls back to defaults."""
        with mock.patch.dict(os.environ, {}, clear=True):
            assert SchwabClientConfig.from_env() == SchwabClientConfig()

    def test_from_env_invalid_number(self):
        """Non-numeric values raise ConfigurationError."""
        with mock.patch.dict(os.environ, {"SCHWAB_TIMEOUT": "fast"}, clear=True):
            with pytest.raises(ConfigurationError, match="Invalid Schwab client configuration"):
                SchwabClientConfig.from_env()
