"""
Token manager for Schwab OAuth integration.

This module manages the OAuth token lifecycle including:
- Token exchange (authorization code → access/refresh tokens)
- Token refresh (refresh token → new access token)
- Automatic refresh before expiry
- Token validation and status checks
"""

import logging
import time
from base64 import b64encode
from datetime import datetime, timezone
from typing import Dict, Optional, Type

import requests

from .config import SchwabOAuthConfig, mask_secret
from .exceptions import (
    TokenExchangeError,
    TokenNotAvailableError,
    TokenRefreshError,
    TokenRequestError,
)
from .token_storage import TokenData, TokenStorage

logger = logging.getLogger(__name__)

# Schwab access tokens live for 30 minutes
ACCESS_TOKEN_LIFETIME_SECONDS = 1800

REQUIRED_TOKEN_FIELDS = ("access_token", "refresh_token", "expires_in")


class TokenManager:
    """
    Manages OAuth token lifecycle.

    Holds the app credentials and the current token set, performs the
    authorization-code and refresh-token exchanges against the token
    endpoint, and hands out valid access tokens to API clients.

    Example:
        manager = TokenManager(config, authorization_code=code)
        manager.request_token()
        headers = manager.get_authorization_header()
    """

    def __init__(
        self,
        config: SchwabOAuthConfig,
        storage: Optional[TokenStorage] = None,
        session: Optional[requests.Session] = None,
        access_token: Optional[str] = None,
        refresh_token: Optional[str] = None,
        authorization_code: Optional[str] = None,
        max_retries: int = 3,
        retry_delay: float = 1.0,
    ):
        """
        Initialize token manager.

        Args:
            config: OAuth configuration
            storage: Token storage (defaults to config.token_file when set)
            session: HTTP session used for token requests
            access_token: Previously issued access token to start from
            refresh_token: Previously issued refresh token to start from
            authorization_code: Code received from the OAuth callback
            max_retries: Retry attempts for transient refresh failures
            retry_delay: Base delay between retries in seconds (exponential backoff)
        """
        self.config = config
        if storage is None and config.token_file:
            storage = TokenStorage(config.token_file)
        self.storage = storage
        self.session = session or requests.Session()
        self.authorization_code = authorization_code
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._cached_token: Optional[TokenData] = None

        if access_token or refresh_token:
            self._cached_token = TokenData(
                access_token=access_token or "",
                refresh_token=refresh_token or "",
                expires_in=ACCESS_TOKEN_LIFETIME_SECONDS if access_token else 0,
            )

    def __repr__(self) -> str:
        token = self._cached_token
        return (
            f"TokenManager(client_id={mask_secret(self.config.client_id)}, "
            f"client_secret={mask_secret(self.config.client_secret)}, "
            f"callback_url={self.config.callback_url}, "
            f"access_token={mask_secret(token.access_token if token else None)}, "
            f"refresh_token={mask_secret(token.refresh_token if token else None)})"
        )

    @property
    def access_token(self) -> Optional[str]:
        token = self._get_current_token()
        return token.access_token if token and token.access_token else None

    @property
    def refresh_token(self) -> Optional[str]:
        token = self._get_current_token()
        return token.refresh_token if token and token.refresh_token else None

    @property
    def expires_in(self) -> Optional[int]:
        token = self._get_current_token()
        return token.expires_in if token else None

    def get_authorize_url(self) -> str:
        """Authorization URL the user must visit to obtain a code."""
        return self.config.authorize_url

    def set_authorization_code(self, code: str) -> None:
        """Store a newly received authorization code."""
        self.authorization_code = code

    def request_token(self, refresh: bool = False) -> TokenData:
        """
        Obtain a new token set.

        Args:
            refresh: Use the refresh token instead of the authorization code

        Returns:
            New TokenData
        """
        if refresh:
            return self.refresh_tokens()
        return self.exchange_code_for_tokens()

    def exchange_code_for_tokens(self, authorization_code: Optional[str] = None) -> TokenData:
        """
        Exchange authorization code for access and refresh tokens.

        Args:
            authorization_code: Code received from OAuth callback
                                (defaults to the stored code)

        Returns:
            TokenData with access and refresh tokens

        Raises:
            TokenNotAvailableError: If no authorization code is available
            TokenExchangeError: If exchange fails
        """
        code = authorization_code or self.authorization_code
        if not code:
            raise TokenNotAvailableError(
                "No authorization code available. "
                f"Authorize the application first: {self.get_authorize_url()}"
            )
        self.authorization_code = code

        logger.info("Exchanging authorization code for tokens")

        try:
            response = self._post_token_request(
                {
                    "grant_type": "authorization_code",
                    "code": code,
                    "redirect_uri": self.config.callback_url,
                }
            )
        except requests.RequestException as e:
            logger.error(f"Network error during token exchange: {e}")
            raise TokenExchangeError(f"Network error during token exchange: {e}") from e

        self._raise_for_status(response, TokenExchangeError)
        token_data = self._parse_token_response(response, TokenExchangeError)
        self._store(token_data)

        logger.info("Successfully obtained tokens")
        return token_data

    def refresh_tokens(self, retry_count: int = 0) -> TokenData:
        """
        Refresh access token using refresh token.

        Server errors and network errors are retried with exponential
        backoff; client errors (expired or revoked refresh token) are not.

        Args:
            retry_count: Current retry attempt (used internally)

        Returns:
            New TokenData with fresh access token

        Raises:
            TokenNotAvailableError: If no refresh token available
            TokenRefreshError: If refresh fails after all retries
        """
        current_token = self._get_current_token()
        if not current_token or not current_token.refresh_token:
            raise TokenNotAvailableError(
                "You are asking to refresh the access token, "
                "but you don't have a refresh token."
            )

        logger.info(
            f"Refreshing access token (attempt {retry_count + 1}/{self.max_retries + 1})"
        )

        try:
            response = self._post_token_request(
                {
                    "grant_type": "refresh_token",
                    "refresh_token": current_token.refresh_token,
                }
            )
        except requests.RequestException as e:
            if retry_count < self.max_retries:
                self._backoff(retry_count, f"network error: {e}")
                return self.refresh_tokens(retry_count + 1)

            logger.error(f"Token refresh failed after {self.max_retries + 1} attempts")
            raise TokenRefreshError(
                f"Network error during token refresh after "
                f"{self.max_retries + 1} attempts: {e}"
            ) from e

        if response.status_code >= 500 and retry_count < self.max_retries:
            self._backoff(retry_count, f"server error ({response.status_code})")
            return self.refresh_tokens(retry_count + 1)

        self._raise_for_status(response, TokenRefreshError)
        token_data = self._parse_token_response(response, TokenRefreshError)
        self._store(token_data)

        logger.info("Successfully refreshed tokens")
        return token_data

    def get_valid_access_token(self) -> str:
        """
        Get a valid access token, refreshing if necessary.

        Returns:
            Valid access token string

        Raises:
            TokenNotAvailableError: If no valid token and can't refresh
                                   (need to run authorization flow)
        """
        token = self._get_current_token()

        if not token or not (token.access_token or token.refresh_token):
            raise TokenNotAvailableError(
                "No tokens available. Run authorization flow first."
            )

        if token.expires_within(self.config.refresh_buffer_seconds):
            if token.refresh_token:
                logger.info(
                    f"Token expires soon "
                    f"(within {self.config.refresh_buffer_seconds}s), refreshing..."
                )
                token = self.refresh_tokens()
            elif token.is_expired or not token.access_token:
                raise TokenNotAvailableError(
                    "Access token expired and no refresh token is available. "
                    "Run authorization flow again."
                )

        return token.access_token

    def get_authorization_header(self) -> Dict[str, str]:
        """Authorization header with a valid bearer token."""
        return {"Authorization": f"Bearer {self.get_valid_access_token()}"}

    def is_authorized(self) -> bool:
        """True when tokens are present (valid or refreshable)."""
        token = self._get_current_token()
        return token is not None and bool(token.access_token or token.refresh_token)

    def get_token_status(self) -> dict:
        """
        Get current token status for diagnostics.

        Returns:
            Dictionary with token status information:
            - authorized: Whether we have tokens
            - expired: Whether access token is expired (if authorized)
            - expires_at: When access token expires (if authorized)
            - expires_in_seconds: Seconds until expiry (if authorized)
            - refreshable: Whether a refresh token is held (if authorized)
            - scope: OAuth scopes granted (if authorized)
        """
        if not self.is_authorized():
            return {"authorized": False, "message": "No tokens stored"}

        token = self._get_current_token()
        expires_in = (token.expires_at - datetime.now(timezone.utc)).total_seconds()

        return {
            "authorized": True,
            "expired": token.is_expired,
            "expires_at": token.expires_at.isoformat(),
            "expires_in_seconds": max(0, expires_in),
            "refreshable": bool(token.refresh_token),
            "scope": token.scope,
        }

    def revoke(self) -> None:
        """
        Forget tokens locally (memory and storage).

        Tokens are not revoked on Schwab's servers.
        """
        if self.storage:
            self.storage.delete()
        self._cached_token = None
        logger.info("Tokens revoked (local)")

    def _basic_auth_header(self) -> str:
        credentials = f"{self.config.client_id}:{self.config.client_secret}"
        return f"Basic {b64encode(credentials.encode()).decode()}"

    def _post_token_request(self, form: Dict[str, str]) -> requests.Response:
        return self.session.post(
            self.config.token_url,
            headers={
                "Authorization": self._basic_auth_header(),
                "Content-Type": "application/x-www-form-urlencoded",
            },
            data=form,
            timeout=self.config.timeout,
        )

    def _backoff(self, retry_count: int, reason: str) -> None:
        delay = self.retry_delay * (2**retry_count)
        logger.warning(f"Token refresh {reason}. Retrying in {delay}s")
        time.sleep(delay)

    @staticmethod
    def _raise_for_status(
        response: requests.Response, error_cls: Type[TokenRequestError]
    ) -> None:
        status = response.status_code
        if status < 400:
            return

        kind = "server" if status >= 500 else "client"
        logger.error(f"Token request failed: {status} - {response.text}")
        raise error_cls(
            f"Schwab API {kind} error (HTTP {status})",
            status_code=status,
            response_body=response.text,
        )

    @staticmethod
    def _parse_token_response(
        response: requests.Response, error_cls: Type[TokenRequestError]
    ) -> TokenData:
        """
        Build TokenData from a successful token endpoint response.

        Raises:
            error_cls: If the body is not a JSON object or lacks a required field
        """
        try:
            data = response.json()
        except ValueError as e:
            raise error_cls(
                "Failed to decode JSON response from Schwab API",
                status_code=response.status_code,
                response_body=response.text,
            ) from e

        if not isinstance(data, dict):
            raise error_cls(
                "Failed to decode JSON response from Schwab API: expected an object",
                status_code=response.status_code,
                response_body=response.text,
            )

        for field_name in REQUIRED_TOKEN_FIELDS:
            if data.get(field_name) in (None, ""):
                raise error_cls(
                    f"Missing required field '{field_name}' in token response",
                    status_code=response.status_code,
                    response_body=response.text,
                )

        try:
            expires_in = int(data["expires_in"])
        except (TypeError, ValueError) as e:
            raise error_cls(
                f"Invalid 'expires_in' in token response: {data['expires_in']!r}",
                status_code=response.status_code,
                response_body=response.text,
            ) from e

        return TokenData(
            access_token=data["access_token"],
            refresh_token=data["refresh_token"],
            expires_in=expires_in,
            token_type=data.get("token_type", "Bearer"),
            scope=data.get("scope", ""),
            issued_at=datetime.now(timezone.utc).isoformat(),
            id_token=data.get("id_token"),
        )

    def _store(self, token_data: TokenData) -> None:
        self._cached_token = token_data
        if self.storage:
            self.storage.save(token_data)

    def _get_current_token(self) -> Optional[TokenData]:
        """Current token from memory, falling back to storage."""
        if self._cached_token is None and self.storage:
            self._cached_token = self.storage.load()
        return self._cached_token
