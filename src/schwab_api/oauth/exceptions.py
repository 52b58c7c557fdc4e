"""
OAuth exception classes for Schwab API integration.

This module defines the exception hierarchy for all OAuth-related errors.
Errors raised from a token endpoint response keep the raw response body and
the parsed error context for diagnostics.
"""

from typing import Optional

from ..error_context import ErrorContext, parse_error_body


class SchwabOAuthError(Exception):
    """Base exception for all Schwab OAuth errors."""

    def __init__(
        self,
        message: str = "",
        status_code: Optional[int] = None,
        response_body: str = "",
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body or ""
        self._context: Optional[ErrorContext] = None

    @property
    def context(self) -> ErrorContext:
        """Error fields parsed from the response body."""
        if self._context is None:
            self._context = parse_error_body(self.response_body)
        return self._context


class ConfigurationError(SchwabOAuthError):
    """OAuth configuration error (missing or invalid configuration)."""

    pass


class AuthorizationError(SchwabOAuthError):
    """OAuth authorization flow error."""

    pass


class TokenRequestError(SchwabOAuthError):
    """A request to the token endpoint failed."""

    pass


class TokenExchangeError(TokenRequestError):
    """Failed to exchange authorization code for tokens."""

    pass


class TokenRefreshError(TokenRequestError):
    """Failed to refresh access token using refresh token."""

    pass


class TokenNotAvailableError(SchwabOAuthError):
    """No valid tokens available (need to authorize first)."""

    pass


class TokenStorageError(SchwabOAuthError):
    """Token storage operation failed (file I/O error)."""

    pass
