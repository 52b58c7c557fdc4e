"""Account endpoints for the Schwab Trader API."""

import logging
from typing import Any, Dict, Iterable, List, Optional, Union

from . import endpoints
from .exceptions import SchwabNotFoundError

logger = logging.getLogger(__name__)


class AccountsMixin:
    """Account queries. Mixed into SchwabClient."""

    def get_account_numbers(self) -> List[Dict[str, Any]]:
        """
        Get account numbers and their encrypted hash values.

        Every other per-account endpoint takes the ``hashValue``, never the
        plain account number.

        Returns:
            List of {"accountNumber": ..., "hashValue": ...} dicts
        """
        logger.info("Fetching account numbers")
        return self.get(endpoints.ACCOUNT_NUMBERS)

    def get_accounts(self, positions: bool = False) -> List[Dict[str, Any]]:
        """
        Get balances (and optionally positions) for all linked accounts.

        Args:
            positions: Include positions in the response

        Returns:
            List of {"securitiesAccount": {...}} dicts
        """
        logger.info("Fetching accounts")
        params = {"fields": "positions"} if positions else None
        return self.get(endpoints.ACCOUNTS, params=params)

    def get_account(
        self, account_hash: str, fields: Optional[Iterable[str]] = None
    ) -> Dict[str, Any]:
        """
        Get a single account by hash value.

        Args:
            account_hash: Encrypted account number from get_account_numbers()
            fields: Extra fields to include (e.g. ["positions"])
        """
        logger.info(f"Fetching account {account_hash}")
        params = {"fields": ",".join(fields)} if fields else None
        endpoint = endpoints.ACCOUNT_DETAILS.format(accountHash=account_hash)
        return self.get(endpoint, params=params)

    def get_accounts_by_number(self, positions: bool = False) -> Dict[str, Dict[str, Any]]:
        """Accounts keyed by their plain account number."""
        accounts = self.get_accounts(positions=positions)
        return {
            str(account.get("securitiesAccount", {}).get("accountNumber")): account
            for account in accounts
        }

    def get_account_by_number(
        self, account_number: Union[int, str], positions: bool = False
    ) -> Dict[str, Any]:
        """
        Find an account by its plain account number.

        Raises:
            SchwabNotFoundError: If no linked account has that number
        """
        accounts = self.get_accounts_by_number(positions=positions)
        try:
            return accounts[str(account_number)]
        except KeyError:
            raise SchwabNotFoundError(
                f"Unable to find account with accountNumber: {account_number}"
            ) from None

    def get_account_hash(self, account_number: Union[int, str]) -> str:
        """
        Translate a plain account number into its hash value.

        Raises:
            SchwabNotFoundError: If no linked account has that number
        """
        for entry in self.get_account_numbers():
            if str(entry.get("accountNumber")) == str(account_number):
                return entry["hashValue"]
        raise SchwabNotFoundError(
            f"Unable to find account with accountNumber: {account_number}"
        )

    def get_long_equity_positions(self, account_hash: str) -> List[Dict[str, Any]]:
        """
        Long equity positions of an account.

        Short positions and non-equity instruments (options, funds, ...) are
        skipped. Each entry is the position's instrument fields plus its
        quantities and valuation.

        Args:
            account_hash: Encrypted account number

        Returns:
            List of flattened position dicts, e.g.
            {"symbol": "AAPL", "assetType": "EQUITY", "cusip": ..., "longQuantity": 10.0}
        """
        account = self.get_account(account_hash, fields=["positions"])
        positions = account.get("securitiesAccount", {}).get("positions", [])

        long_equities = []
        for position in positions:
            instrument = position.get("instrument", {})
            if instrument.get("assetType") != "EQUITY":
                continue
            if position.get("longQuantity", 0) <= 0:
                continue

            entry = dict(instrument)
            for key in ("longQuantity", "averagePrice", "marketValue"):
                if key in position:
                    entry[key] = position[key]
            long_equities.append(entry)

        logger.info(f"Found {len(long_equities)} long equity position(s)")
        return long_equities
