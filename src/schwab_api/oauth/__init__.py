"""
OAuth 2.0 module for Schwab API integration.

This module provides the OAuth 2.0 Authorization Code flow for
authenticating with Charles Schwab's Trader and Market Data APIs.

Public API:
    SchwabOAuthConfig: OAuth configuration management
    TokenData: Token data structure
    TokenStorage: File-based token persistence
    TokenManager: Token lifecycle management
    OAuthCoordinator: High-level OAuth interface

Exceptions:
    SchwabOAuthError: Base exception
    ConfigurationError: Configuration error
    AuthorizationError: Authorization flow error
    TokenRequestError: Token endpoint request failed
    TokenExchangeError: Token exchange failed
    TokenRefreshError: Token refresh failed
    TokenNotAvailableError: No valid tokens
    TokenStorageError: Storage operation failed
"""

from .auth_server import AuthorizationResult, OAuthCallbackServer, run_authorization_flow
from .config import SchwabOAuthConfig, mask_secret
from .coordinator import OAuthCoordinator
from .exceptions import (
    AuthorizationError,
    ConfigurationError,
    SchwabOAuthError,
    TokenExchangeError,
    TokenNotAvailableError,
    TokenRefreshError,
    TokenRequestError,
    TokenStorageError,
)
from .token_manager import TokenManager
from .token_storage import TokenData, TokenStorage

__all__ = [
    # Configuration
    "SchwabOAuthConfig",
    "mask_secret",
    # Token Storage
    "TokenData",
    "TokenStorage",
    # Token Manager
    "TokenManager",
    # Authorization Server
    "OAuthCallbackServer",
    "AuthorizationResult",
    "run_authorization_flow",
    # Coordinator
    "OAuthCoordinator",
    # Exceptions
    "SchwabOAuthError",
    "ConfigurationError",
    "AuthorizationError",
    "TokenRequestError",
    "TokenExchangeError",
    "TokenRefreshError",
    "TokenNotAvailableError",
    "TokenStorageError",
]
