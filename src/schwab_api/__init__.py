"""
Client library for the Charles Schwab Trader API.

Example:
    from schwab_api import SchwabClient

    client = SchwabClient.from_credentials(
        api_key, api_secret, "https://127.0.0.1:8182/callback",
        authorization_code=code,
    )
    accounts = client.get_accounts(positions=True)
"""

from .error_context import ErrorContext, parse_error_body
from .oauth import OAuthCoordinator, SchwabOAuthConfig, TokenManager
from .trader import SchwabClient, SchwabClientConfig

__version__ = "0.1.0"

__all__ = [
    "SchwabClient",
    "SchwabClientConfig",
    "SchwabOAuthConfig",
    "OAuthCoordinator",
    "TokenManager",
    "ErrorContext",
    "parse_error_body",
]
