"""
Schwab Trader API client.

Public API:
    SchwabClient: Accounts, orders, transactions, user preference and market data
    SchwabClientConfig: Request settings (base URL, timeout, retries)
    OrderPlacement: Result of an order mutation
"""

from .client import SchwabClient
from .config import SchwabClientConfig
from .exceptions import (
    SchwabAPIError,
    SchwabAuthenticationError,
    SchwabClientError,
    SchwabNotFoundError,
    SchwabRateLimitError,
    SchwabResponseDecodeError,
    SchwabServerError,
    SchwabTransportError,
)
from .models import OrderPlacement
from .orders import VALID_STATUSES, equity_market_order

__all__ = [
    "SchwabClient",
    "SchwabClientConfig",
    "OrderPlacement",
    "VALID_STATUSES",
    "equity_market_order",
    # Exceptions
    "SchwabAPIError",
    "SchwabAuthenticationError",
    "SchwabClientError",
    "SchwabNotFoundError",
    "SchwabRateLimitError",
    "SchwabServerError",
    "SchwabTransportError",
    "SchwabResponseDecodeError",
]
