"""Exceptions for the Schwab Trader API client."""

from typing import Optional

from ..error_context import ErrorContext, parse_error_body


class SchwabAPIError(Exception):
    """
    Base exception for Schwab API errors.

    Attributes:
        status_code: HTTP status of the failed response, if any
        response_body: Raw response text, if any
        context: Error fields parsed from the response body
    """

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
        if self._context is None:
            self._context = parse_error_body(self.response_body)
        return self._context


class SchwabAuthenticationError(SchwabAPIError):
    """
    Authentication failure with Schwab API.

    The OAuth token is missing, invalid, expired, or revoked and the
    application needs to be re-authorized.
    """

    pass


class SchwabClientError(SchwabAPIError):
    """Request rejected by Schwab (HTTP 4xx)."""

    pass


class SchwabNotFoundError(SchwabClientError):
    """Requested resource (account, order, symbol, ...) does not exist."""

    pass


class SchwabRateLimitError(SchwabClientError):
    """API rate limit exceeded (HTTP 429)."""

    def __init__(
        self,
        message: str = "",
        status_code: Optional[int] = 429,
        response_body: str = "",
        retry_after: Optional[int] = None,
    ):
        super().__init__(message, status_code=status_code, response_body=response_body)
        self.retry_after = retry_after


class SchwabServerError(SchwabAPIError):
    """Schwab API server error (HTTP 5xx)."""

    pass


class SchwabTransportError(SchwabAPIError):
    """Request never produced a response (timeout, connection failure)."""

    pass


class SchwabResponseDecodeError(SchwabAPIError):
    """Response body is not valid JSON."""

    pass
