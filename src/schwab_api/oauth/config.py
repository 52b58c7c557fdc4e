"""
OAuth configuration for Schwab API integration.

This module provides configuration management for OAuth 2.0 authentication
with Charles Schwab's APIs. Configuration can be loaded from environment
variables or provided programmatically.
"""

import os
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode, urlparse

from .exceptions import ConfigurationError


def mask_secret(value: Optional[str], visible: int = 4) -> str:
    """
    Mask a credential for display.

    Args:
        value: Secret to mask
        visible: Number of leading characters to keep

    Returns:
        Masked string (e.g. "abcd****"), "****" for short values, "None" if unset
    """
    if value is None:
        return "None"
    if len(value) <= visible * 2:
        return "****"
    return f"{value[:visible]}****"


@dataclass
class SchwabOAuthConfig:
    """
    Configuration for Schwab OAuth 2.0.

    Attributes:
        client_id: Schwab App key from the Dev Portal
        client_secret: Schwab App secret from the Dev Portal
        callback_url: Registered redirect URL (e.g. https://127.0.0.1:8182/callback)
        authorization_url: Schwab OAuth authorization endpoint
        token_url: Schwab OAuth token endpoint
        token_file: Path of the token file; None keeps tokens in memory only
        ssl_cert_path: SSL certificate for the local callback server
        ssl_key_path: SSL private key for the local callback server
        refresh_buffer_seconds: Refresh tokens this many seconds before expiry
        timeout: Token endpoint request timeout in seconds
    """

    # Required - from Schwab Dev Portal
    client_id: str
    client_secret: str
    callback_url: str

    # Schwab OAuth endpoints
    authorization_url: str = "https://api.schwabapi.com/v1/oauth/authorize"
    token_url: str = "https://api.schwabapi.com/v1/oauth/token"

    token_file: Optional[str] = None

    ssl_cert_path: Optional[str] = None
    ssl_key_path: Optional[str] = None

    refresh_buffer_seconds: int = 300
    timeout: int = 30

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.client_id:
            raise ConfigurationError("API Key is required and cannot be empty")

        if not self.client_secret:
            raise ConfigurationError("API Secret is required and cannot be empty")

        if not self.callback_url:
            raise ConfigurationError("API Callback URL is required and cannot be empty")

        parsed = urlparse(self.callback_url)
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise ConfigurationError(
                f"API Callback URL must be an absolute http(s) URL, got {self.callback_url}"
            )

        if self.refresh_buffer_seconds < 0:
            raise ConfigurationError("refresh_buffer_seconds cannot be negative")

        if self.timeout <= 0:
            raise ConfigurationError("timeout must be positive")

    def __repr__(self) -> str:
        return (
            f"SchwabOAuthConfig(client_id={mask_secret(self.client_id)}, "
            f"client_secret={mask_secret(self.client_secret)}, "
            f"callback_url={self.callback_url}, token_file={self.token_file})"
        )

    @property
    def callback_host(self) -> str:
        return urlparse(self.callback_url).hostname or ""

    @property
    def callback_port(self) -> int:
        """Port of the callback URL, defaulting to the scheme's port."""
        parsed = urlparse(self.callback_url)
        if parsed.port:
            return parsed.port
        return 443 if parsed.scheme == "https" else 80

    @property
    def callback_path(self) -> str:
        return urlparse(self.callback_url).path or "/"

    @property
    def authorize_url(self) -> str:
        """
        Full authorization URL the user opens to grant access.

        The redirect URI is left readable (``:`` and ``/`` unescaped), which is
        the form Schwab's portal shows for registered callbacks.

        Returns:
            Authorization URL with client_id and redirect_uri query parameters
        """
        params = {"client_id": self.client_id, "redirect_uri": self.callback_url}
        return f"{self.authorization_url}?{urlencode(params, safe=':/')}"

    @classmethod
    def from_env(cls) -> "SchwabOAuthConfig":
        """
        Load configuration from environment variables.

        Required environment variables:
            SCHWAB_API_KEY: Schwab App key
            SCHWAB_API_SECRET: Schwab App secret
            SCHWAB_CALLBACK_URL: Registered callback URL

        Optional environment variables:
            SCHWAB_TOKEN_FILE: Token file path (default: in-memory only)
            SCHWAB_SSL_CERT_PATH: SSL certificate for the callback server
            SCHWAB_SSL_KEY_PATH: SSL private key for the callback server

        Returns:
            SchwabOAuthConfig instance

        Raises:
            ConfigurationError: If required environment variables are missing
        """
        client_id = os.environ.get("SCHWAB_API_KEY")
        client_secret = os.environ.get("SCHWAB_API_SECRET")
        callback_url = os.environ.get("SCHWAB_CALLBACK_URL")

        if not client_id or not client_secret or not callback_url:
            raise ConfigurationError(
                "Missing Schwab OAuth credentials. Set environment variables:\n"
                "  SCHWAB_API_KEY=your_app_key\n"
                "  SCHWAB_API_SECRET=your_app_secret\n"
                "  SCHWAB_CALLBACK_URL=https://127.0.0.1:8182/callback\n"
                "\n"
                "Get credentials from: https://developer.schwab.com"
            )

        return cls(
            client_id=client_id,
            client_secret=client_secret,
            callback_url=callback_url,
            token_file=os.environ.get("SCHWAB_TOKEN_FILE"),
            ssl_cert_path=os.environ.get("SCHWAB_SSL_CERT_PATH"),
            ssl_key_path=os.environ.get("SCHWAB_SSL_KEY_PATH"),
        )
