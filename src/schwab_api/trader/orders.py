"""Order endpoints for the Schwab Trader API."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Mapping, Optional, Union

from . import endpoints
from .base import format_datetime
from .models import OrderPlacement

logger = logging.getLogger(__name__)

# Order statuses accepted by the order query endpoints
AWAITING_PARENT_ORDER = "AWAITING_PARENT_ORDER"
AWAITING_CONDITION = "AWAITING_CONDITION"
AWAITING_STOP_CONDITION = "AWAITING_STOP_CONDITION"
AWAITING_MANUAL_REVIEW = "AWAITING_MANUAL_REVIEW"
ACCEPTED = "ACCEPTED"
AWAITING_UR_OUT = "AWAITING_UR_OUT"
PENDING_ACTIVATION = "PENDING_ACTIVATION"
QUEUED = "QUEUED"
WORKING = "WORKING"
REJECTED = "REJECTED"
PENDING_CANCEL = "PENDING_CANCEL"
CANCELED = "CANCELED"
PENDING_REPLACE = "PENDING_REPLACE"
REPLACED = "REPLACED"
FILLED = "FILLED"
EXPIRED = "EXPIRED"
NEW = "NEW"
AWAITING_RELEASE_TIME = "AWAITING_RELEASE_TIME"
PENDING_ACKNOWLEDGEMENT = "PENDING_ACKNOWLEDGEMENT"
PENDING_RECALL = "PENDING_RECALL"
UNKNOWN = "UNKNOWN"

VALID_STATUSES = (
    AWAITING_PARENT_ORDER,
    AWAITING_CONDITION,
    AWAITING_STOP_CONDITION,
    AWAITING_MANUAL_REVIEW,
    ACCEPTED,
    AWAITING_UR_OUT,
    PENDING_ACTIVATION,
    QUEUED,
    WORKING,
    REJECTED,
    PENDING_CANCEL,
    CANCELED,
    PENDING_REPLACE,
    REPLACED,
    FILLED,
    EXPIRED,
    NEW,
    AWAITING_RELEASE_TIME,
    PENDING_ACKNOWLEDGEMENT,
    PENDING_RECALL,
    UNKNOWN,
)

DEFAULT_ORDER_LOOKBACK = timedelta(days=60)


def equity_market_order(instruction: str, symbol: str, quantity: Union[int, float]) -> Dict[str, Any]:
    """
    Build a single-leg market order for an equity, good for the day.

    Args:
        instruction: "BUY" or "SELL"
        symbol: Equity symbol
        quantity: Number of shares
    """
    if quantity <= 0:
        raise ValueError(f"quantity must be positive, got {quantity}")

    return {
        "orderType": "MARKET",
        "session": "NORMAL",
        "duration": "DAY",
        "orderStrategyType": "SINGLE",
        "orderLegCollection": [
            {
                "instruction": instruction,
                "quantity": quantity,
                "instrument": {"symbol": symbol.upper(), "assetType": "EQUITY"},
            }
        ],
    }


def _order_query_params(
    from_entered_time: Optional[datetime],
    to_entered_time: Optional[datetime],
    max_results: Optional[int],
    status: Optional[str],
) -> Dict[str, Any]:
    """
    Validate and build order query parameters.

    Raises:
        ValueError: If only one of the two times is set or status is unknown
    """
    if (from_entered_time is None) != (to_entered_time is None):
        raise ValueError(
            "If you set from_entered_time, you are required to set to_entered_time as well."
        )

    if status is not None and status.upper() not in VALID_STATUSES:
        raise ValueError(
            f"Invalid status: {status}. Valid statuses are: {', '.join(VALID_STATUSES)}"
        )

    if from_entered_time is None:
        to_entered_time = datetime.now(timezone.utc)
        from_entered_time = to_entered_time - DEFAULT_ORDER_LOOKBACK

    return {
        "fromEnteredTime": format_datetime(from_entered_time),
        "toEnteredTime": format_datetime(to_entered_time),
        "maxResults": max_results,
        "status": status.upper() if status else None,
    }


class OrdersMixin:
    """Order queries and mutations. Mixed into SchwabClient."""

    def get_orders(
        self,
        from_entered_time: Optional[datetime] = None,
        to_entered_time: Optional[datetime] = None,
        max_results: Optional[int] = None,
        status: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Get orders across all linked accounts.

        Without a time range the last 60 days are queried.

        Args:
            from_entered_time: Start of the entered-time window
            to_entered_time: End of the entered-time window (required with from)
            max_results: Maximum number of orders to return
            status: Only orders in this status (see VALID_STATUSES)

        Raises:
            ValueError: For an incomplete time range or unknown status
        """
        params = _order_query_params(from_entered_time, to_entered_time, max_results, status)
        logger.info("Fetching orders for all accounts")
        return self.get(endpoints.ORDERS_ALL_ACCOUNTS, params=params)

    def get_orders_for_account(
        self,
        account_hash: str,
        max_results: Optional[int] = None,
        from_entered_time: Optional[datetime] = None,
        to_entered_time: Optional[datetime] = None,
        status: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Get orders for one account.

        Raises:
            ValueError: For an incomplete time range or unknown status
        """
        params = _order_query_params(from_entered_time, to_entered_time, max_results, status)
        logger.info(f"Fetching orders for account {account_hash}")
        endpoint = endpoints.ORDERS.format(accountHash=account_hash)
        return self.get(endpoint, params=params)

    def get_order(self, account_hash: str, order_id: Union[int, str]) -> Dict[str, Any]:
        """Get a single order."""
        endpoint = endpoints.ORDER_DETAILS.format(accountHash=account_hash, orderId=order_id)
        return self.get(endpoint)

    def place_order(self, account_hash: str, order: Mapping[str, Any]) -> OrderPlacement:
        """
        Place an order.

        Args:
            account_hash: Encrypted account number
            order: Order payload in Schwab's order schema

        Returns:
            OrderPlacement with the new order id (from the Location header)
        """
        logger.info(f"Placing order for account {account_hash}")
        endpoint = endpoints.ORDERS.format(accountHash=account_hash)
        response = self._request("POST", endpoint, json_data=dict(order))
        placement = OrderPlacement.from_response(response)
        logger.info(f"Order placed ({placement.status_code}), id: {placement.order_id}")
        return placement

    def place_buy_order(
        self, account_hash: str, symbol: str, quantity: Union[int, float]
    ) -> OrderPlacement:
        """Buy shares at market, good for the day."""
        return self.place_order(account_hash, equity_market_order("BUY", symbol, quantity))

    def place_sell_order(
        self, account_hash: str, symbol: str, quantity: Union[int, float]
    ) -> OrderPlacement:
        """Sell shares at market, good for the day."""
        return self.place_order(account_hash, equity_market_order("SELL", symbol, quantity))

    def replace_order(
        self, account_hash: str, order_id: Union[int, str], order: Mapping[str, Any]
    ) -> OrderPlacement:
        """
        Replace an existing order.

        Schwab cancels the original and creates a new order; the new id is
        reported in the Location header.
        """
        logger.info(f"Replacing order {order_id} for account {account_hash}")
        endpoint = endpoints.ORDER_DETAILS.format(accountHash=account_hash, orderId=order_id)
        response = self._request("PUT", endpoint, json_data=dict(order))
        return OrderPlacement.from_response(response)

    def cancel_order(self, account_hash: str, order_id: Union[int, str]) -> OrderPlacement:
        """Cancel an order."""
        logger.info(f"Canceling order {order_id} for account {account_hash}")
        endpoint = endpoints.ORDER_DETAILS.format(accountHash=account_hash, orderId=order_id)
        response = self._request("DELETE", endpoint)
        return OrderPlacement(status_code=response.status_code, order_id=str(order_id))

    def preview_order(self, account_hash: str, order: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Preview an order without placing it.

        Returns:
            Schwab's preview (order balance, projected commission, validation results)
        """
        endpoint = endpoints.ORDER_PREVIEW.format(accountHash=account_hash)
        return self.post(endpoint, json_data=dict(order))
