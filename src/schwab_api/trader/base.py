"""
Request executor for the Schwab API client.

This module provides the authenticated HTTP core shared by every endpoint
method. It handles:

- Bearer token retrieval (with automatic refresh) from the OAuth layer
- Request dispatch through an injectable requests.Session
- Retry with exponential backoff for GET requests on transient errors
- Mapping of HTTP and transport failures onto typed SchwabAPIError subclasses
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import requests

from ..oauth.coordinator import OAuthCoordinator
from ..oauth.exceptions import SchwabOAuthError
from .config import SchwabClientConfig
from .decoder import JSONResult, decode_json
from .exceptions import (
    SchwabAPIError,
    SchwabAuthenticationError,
    SchwabClientError,
    SchwabNotFoundError,
    SchwabRateLimitError,
    SchwabServerError,
    SchwabTransportError,
)

logger = logging.getLogger(__name__)

# Only idempotent requests are retried; a retried POST could duplicate an order
RETRYABLE_METHODS = frozenset({"GET"})


def to_utc(value: datetime) -> datetime:
    """Convert to an aware UTC datetime, naive values taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_datetime(value: datetime) -> str:
    """
    Format a datetime the way the Trader API expects (yyyy-MM-ddTHH:mm:ss.SSSZ).

    Naive datetimes are taken to be UTC.
    """
    value = to_utc(value)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def to_epoch_millis(value: datetime) -> int:
    """Milliseconds since the epoch, naive datetimes taken as UTC."""
    return int(to_utc(value).timestamp() * 1000)


class BaseSchwabClient:
    """
    Authenticated HTTP client core for Schwab APIs.

    The ``oauth`` object only needs a ``get_authorization_header()`` method;
    an OAuthCoordinator or a TokenManager both qualify.
    """

    def __init__(
        self,
        oauth_coordinator: Optional[Any] = None,
        config: Optional[SchwabClientConfig] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the client core.

        Args:
            oauth_coordinator: Source of bearer tokens (creates default if not provided)
            config: Client configuration (defaults if not provided)
            session: HTTP session used for all requests
        """
        self.oauth = oauth_coordinator if oauth_coordinator is not None else OAuthCoordinator()
        self.config = config or SchwabClientConfig()
        self.session = session or requests.Session()

        logger.info(f"{self.__class__.__name__} initialized")

    @property
    def max_retries(self) -> int:
        return self.config.max_retries

    @property
    def retry_delay(self) -> float:
        return self.config.retry_delay

    def _get_full_url(self, endpoint: str) -> str:
        """
        Construct full API URL from endpoint path.

        Args:
            endpoint: API endpoint path (e.g., "/marketdata/v1/quotes")

        Returns:
            Full URL (endpoints already include their API version)
        """
        if not endpoint.startswith("/"):
            endpoint = f"/{endpoint}"
        return f"{self.config.base_url.rstrip('/')}{endpoint}"

    def _auth_headers(self) -> Dict[str, str]:
        try:
            headers = dict(self.oauth.get_authorization_header())
        except SchwabOAuthError as e:
            logger.error(f"Not authorized: {e}")
            raise SchwabAuthenticationError(
                f"No valid OAuth tokens available: {e}",
                status_code=getattr(e, "status_code", None),
                response_body=getattr(e, "response_body", ""),
            ) from e
        headers["Accept"] = "application/json"
        return headers

    def _should_retry(self, method: str, retry_count: int) -> bool:
        return method in RETRYABLE_METHODS and retry_count < self.max_retries

    def _sleep_before_retry(self, retry_count: int, reason: str) -> None:
        delay = self.retry_delay * (2**retry_count)
        logger.warning(
            f"{reason}. Retrying in {delay}s "
            f"(attempt {retry_count + 1}/{self.max_retries})"
        )
        time.sleep(delay)

    def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Any] = None,
        retry_count: int = 0,
    ) -> requests.Response:
        """
        Make authenticated HTTP request to Schwab API.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            endpoint: API endpoint path
            params: Query parameters (None values are dropped)
            json_data: JSON request body
            retry_count: Current retry attempt (for internal use)

        Returns:
            Successful response object

        Raises:
            SchwabAuthenticationError: If no token is available or on 401
            SchwabNotFoundError: On 404
            SchwabRateLimitError: On 429
            SchwabClientError: On other 4xx
            SchwabServerError: On 5xx (after retries for GET)
            SchwabTransportError: On timeouts and connection errors
        """
        method = method.upper()
        headers = self._auth_headers()
        if json_data is not None:
            headers["Content-Type"] = "application/json"

        url = self._get_full_url(endpoint)
        if params:
            params = {key: value for key, value in params.items() if value is not None}

        logger.debug(f"{method} {url}")
        if params:
            logger.debug(f"  Params: {params}")

        try:
            response = self.session.request(
                method,
                url,
                headers=headers,
                params=params or None,
                json=json_data,
                timeout=self.config.timeout,
            )
        except requests.exceptions.Timeout as e:
            if self._should_retry(method, retry_count):
                self._sleep_before_retry(retry_count, "Request timeout")
                return self._request(method, endpoint, params, json_data, retry_count + 1)
            logger.error(f"Request timeout: {method} {url}")
            raise SchwabTransportError(f"Request to Schwab API timed out: {e}") from e
        except requests.exceptions.RequestException as e:
            if self._should_retry(method, retry_count):
                self._sleep_before_retry(retry_count, f"Network error: {e}")
                return self._request(method, endpoint, params, json_data, retry_count + 1)
            logger.error(f"Network error: {e}")
            raise SchwabTransportError(f"Network error: {e}") from e

        status = response.status_code

        if status >= 500 and self._should_retry(method, retry_count):
            self._sleep_before_retry(retry_count, f"Server error ({status})")
            return self._request(method, endpoint, params, json_data, retry_count + 1)

        if status >= 400:
            raise self._error_for_response(response, endpoint)

        logger.debug(f"Response: {status}")
        return response

    def _error_for_response(self, response: requests.Response, endpoint: str) -> SchwabAPIError:
        """Map a failed response onto the matching exception."""
        status = response.status_code
        body = response.text

        if status == 401:
            logger.error(f"Authentication failed (401): {body}")
            return SchwabAuthenticationError(
                "Authentication failed (HTTP 401). Access token may be expired or revoked; "
                "re-authorize the application.",
                status_code=status,
                response_body=body,
            )

        if status == 404:
            logger.warning(f"Resource not found (404): {endpoint}")
            return SchwabNotFoundError(
                f"Resource not found (HTTP 404): {endpoint}",
                status_code=status,
                response_body=body,
            )

        if status == 429:
            retry_after = response.headers.get("Retry-After")
            logger.warning(f"Rate limit exceeded (429), retry after: {retry_after}")
            return SchwabRateLimitError(
                "Schwab API rate limit exceeded (HTTP 429). Please wait before retrying.",
                status_code=status,
                response_body=body,
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
            )

        if status >= 500:
            logger.error(f"Server error ({status}): {body}")
            return SchwabServerError(
                f"Schwab API server error (HTTP {status})",
                status_code=status,
                response_body=body,
            )

        logger.error(f"API error ({status}): {body}")
        return SchwabClientError(
            f"Schwab API client error (HTTP {status})",
            status_code=status,
            response_body=body,
        )

    def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> JSONResult:
        """
        Make authenticated GET request.

        Returns:
            Decoded JSON response
        """
        return decode_json(self._request("GET", endpoint, params=params))

    def post(
        self,
        endpoint: str,
        json_data: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> JSONResult:
        """
        Make authenticated POST request.

        Returns:
            Decoded JSON response
        """
        return decode_json(self._request("POST", endpoint, params=params, json_data=json_data))
