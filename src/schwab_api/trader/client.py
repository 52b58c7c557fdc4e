"""
Schwab Trader API client.

Combines the endpoint mixins with the authenticated request core.
"""

import logging
from typing import Optional

import requests

from ..oauth.config import SchwabOAuthConfig
from ..oauth.coordinator import OAuthCoordinator
from ..oauth.exceptions import ConfigurationError
from ..oauth.token_manager import TokenManager
from .accounts import AccountsMixin
from .base import BaseSchwabClient
from .config import SchwabClientConfig
from .market_data import MarketDataMixin
from .orders import OrdersMixin
from .transactions import TransactionsMixin
from .user_preference import UserPreferenceMixin

logger = logging.getLogger(__name__)


class SchwabClient(
    AccountsMixin,
    OrdersMixin,
    TransactionsMixin,
    UserPreferenceMixin,
    MarketDataMixin,
    BaseSchwabClient,
):
    """
    Client for the Schwab Trader and Market Data APIs.

    Example:
        client = SchwabClient()  # OAuth settings from the environment
        for entry in client.get_account_numbers():
            print(entry["accountNumber"], entry["hashValue"])
    """

    @classmethod
    def from_credentials(
        cls,
        api_key: str,
        api_secret: str,
        callback_url: str,
        authorization_code: Optional[str] = None,
        access_token: Optional[str] = None,
        refresh_token: Optional[str] = None,
        token_file: Optional[str] = None,
        config: Optional[SchwabClientConfig] = None,
        session: Optional[requests.Session] = None,
    ) -> "SchwabClient":
        """
        Build a client from app credentials and a code or existing tokens.

        With only an authorization code, the code is exchanged for tokens
        right away.

        Args:
            api_key: App key (OAuth client id)
            api_secret: App secret
            callback_url: Callback URL registered with the app
            authorization_code: Code from the OAuth redirect
            access_token: Previously issued access token
            refresh_token: Previously issued refresh token
            token_file: Where to persist tokens (optional)
            config: Client configuration
            session: HTTP session shared by token and API requests

        Raises:
            ConfigurationError: If neither a code nor an access token is given
            TokenExchangeError: If the code exchange fails
        """
        if not authorization_code and not access_token:
            raise ConfigurationError(
                "Either authentication code or access token must be provided"
            )

        oauth_config = SchwabOAuthConfig(
            client_id=api_key,
            client_secret=api_secret,
            callback_url=callback_url,
            token_file=token_file,
        )
        token_manager = TokenManager(
            oauth_config,
            session=session,
            access_token=access_token,
            refresh_token=refresh_token,
            authorization_code=authorization_code,
        )
        if not access_token:
            token_manager.exchange_code_for_tokens()

        coordinator = OAuthCoordinator(oauth_config, token_manager=token_manager)
        logger.info("Schwab client created from credentials")
        return cls(oauth_coordinator=coordinator, config=config, session=session)
