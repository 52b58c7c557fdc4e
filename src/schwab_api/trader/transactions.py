"""Transaction endpoints for the Schwab Trader API."""

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Union

from . import endpoints
from .base import format_datetime, to_utc

logger = logging.getLogger(__name__)


class TransactionsMixin:
    """Transaction history queries. Mixed into SchwabClient."""

    def get_transactions(
        self,
        account_hash: str,
        start_date: datetime,
        end_date: datetime,
        symbol: Optional[str] = None,
        types: Optional[Union[str, Iterable[str]]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Get transactions for an account within a date range.

        Args:
            account_hash: Encrypted account number
            start_date: Start of the search window
            end_date: End of the search window
            symbol: Only transactions for this symbol (upper-cased)
            types: Transaction type(s), e.g. "TRADE" or ["TRADE", "DIVIDEND_OR_INTEREST"]

        Returns:
            List of transaction dicts
        """
        if to_utc(start_date) > to_utc(end_date):
            raise ValueError("start_date must not be after end_date")

        params: Dict[str, Any] = {
            "startDate": format_datetime(start_date),
            "endDate": format_datetime(end_date),
        }
        if symbol:
            params["symbol"] = symbol.upper()
        if types:
            params["types"] = types if isinstance(types, str) else ",".join(types)

        logger.info(f"Fetching transactions for account {account_hash}")
        endpoint = endpoints.TRANSACTIONS.format(accountHash=account_hash)
        return self.get(endpoint, params=params)

    def get_transaction(self, account_hash: str, transaction_id: Union[int, str]) -> Dict[str, Any]:
        """Get a single transaction."""
        endpoint = endpoints.TRANSACTION_DETAILS.format(
            accountHash=account_hash, transactionId=transaction_id
        )
        return self.get(endpoint)
