"""
OAuth coordinator for high-level OAuth operations.

This module provides the main interface for OAuth operations in the
application. It coordinates the authorization flow, token management,
and provides simple methods for obtaining valid access tokens.
"""

import logging
from typing import Optional
from urllib.parse import parse_qs, urlparse

from .auth_server import AuthorizationResult, run_authorization_flow
from .config import SchwabOAuthConfig
from .exceptions import AuthorizationError, SchwabOAuthError
from .token_manager import TokenManager
from .token_storage import TokenData

logger = logging.getLogger(__name__)


class OAuthCoordinator:
    """
    High-level coordinator for OAuth operations.

    This is the interface API clients use for OAuth. It handles the complete
    authorization lifecycle and provides simple methods for obtaining valid
    access tokens.

    Example:
        coordinator = OAuthCoordinator()
        if coordinator.ensure_authorized():
            headers = coordinator.get_authorization_header()
    """

    def __init__(
        self,
        config: Optional[SchwabOAuthConfig] = None,
        token_manager: Optional[TokenManager] = None,
    ):
        """
        Initialize OAuth coordinator.

        Args:
            config: OAuth configuration (loads from environment if not provided)
            token_manager: Token manager (built from config if not provided)
        """
        if token_manager is not None:
            config = config or token_manager.config
        self.config = config or SchwabOAuthConfig.from_env()
        self.token_manager = token_manager or TokenManager(self.config)
        self.storage = self.token_manager.storage

    def ensure_authorized(self, auto_open_browser: bool = True) -> bool:
        """
        Ensure we have valid authorization, running flow if needed.

        Args:
            auto_open_browser: Whether to auto-open browser for auth

        Returns:
            True if authorized (or authorization succeeded), False if failed
        """
        if self.token_manager.is_authorized():
            logger.info("Already authorized")
            return True

        logger.info("No valid tokens found, starting authorization flow")
        return self.run_authorization_flow(auto_open_browser)

    def run_authorization_flow(self, open_browser: bool = True, timeout: int = 300) -> bool:
        """
        Run the complete OAuth authorization flow.

        1. Starts the local callback server
        2. Opens browser for user authorization
        3. Receives authorization code from callback
        4. Exchanges code for access and refresh tokens

        Args:
            open_browser: Whether to automatically open browser
            timeout: Seconds to wait for the callback

        Returns:
            True if authorization succeeded, False otherwise
        """
        result: AuthorizationResult = run_authorization_flow(
            self.config, open_browser=open_browser, timeout=timeout
        )

        if not result.success:
            logger.error(
                f"Authorization failed: {result.error} - {result.error_description}"
            )
            return False

        try:
            self.authorize_with_code(result.authorization_code)
        except SchwabOAuthError as e:
            logger.error(f"Token exchange failed: {e}")
            return False

        logger.info("Authorization complete")
        return True

    def authorize_with_code(self, authorization_code: str) -> TokenData:
        """
        Exchange an authorization code obtained out of band.

        Raises:
            TokenExchangeError: If the exchange fails
        """
        self.token_manager.set_authorization_code(authorization_code)
        return self.token_manager.exchange_code_for_tokens()

    def authorize_from_redirect_url(self, redirect_url: str) -> TokenData:
        """
        Complete authorization from the URL the browser was redirected to.

        Useful when no callback server can run: the user copies the address
        of the (possibly failed to load) callback page.

        Args:
            redirect_url: Full callback URL including the query string

        Returns:
            TokenData from the code exchange

        Raises:
            AuthorizationError: If the URL carries an error or no code
            TokenExchangeError: If the exchange fails
        """
        query = parse_qs(urlparse(redirect_url).query)

        if "error" in query:
            error = query["error"][0]
            description = query.get("error_description", ["Unknown error"])[0]
            raise AuthorizationError(f"Authorization denied: {error} - {description}")

        codes = query.get("code")
        if not codes or not codes[0]:
            raise AuthorizationError(f"No authorization code found in URL: {redirect_url}")

        return self.authorize_with_code(codes[0])

    def get_authorize_url(self) -> str:
        return self.token_manager.get_authorize_url()

    def get_access_token(self) -> str:
        """
        Get a valid access token for API calls, refreshing it when needed.

        Raises:
            TokenNotAvailableError: If not authorized (need to run authorization flow)
        """
        return self.token_manager.get_valid_access_token()

    def get_authorization_header(self) -> dict:
        """
        Get Authorization header dict for API requests.

        Returns:
            Dict with Authorization header: {"Authorization": "Bearer <token>"}

        Raises:
            TokenNotAvailableError: If not authorized
        """
        return self.token_manager.get_authorization_header()

    def is_authorized(self) -> bool:
        return self.token_manager.is_authorized()

    def get_status(self) -> dict:
        """
        Get current authorization status for diagnostics.

        Example:
            status = coordinator.get_status()
            if status["authorized"]:
                print(f"Token expires in {status['expires_in_seconds']} seconds")
        """
        return self.token_manager.get_token_status()

    def revoke(self) -> None:
        """Delete the locally held tokens; re-authorization is required afterwards."""
        self.token_manager.revoke()
        logger.info("Authorization revoked locally. Re-authorization required.")
