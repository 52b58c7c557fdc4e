"""
Market data endpoints for the Schwab API.

Quotes, option chains, price history, movers, market hours and instrument
lookups. Responses are returned as decoded JSON.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, Optional, Union

from . import endpoints
from .base import to_epoch_millis
from .exceptions import SchwabNotFoundError

logger = logging.getLogger(__name__)

VALID_MARKETS = ("equity", "option", "bond", "future", "forex")

VALID_PROJECTIONS = (
    "symbol-search",
    "symbol-regex",
    "desc-search",
    "desc-regex",
    "search",
    "fundamental",
)

# Longest stretch of closed days to scan past (holiday weekends)
NEXT_OPEN_DATE_MAX_DAYS = 14


def _join(values: Union[str, Iterable[str]]) -> str:
    if isinstance(values, str):
        return values
    return ",".join(values)


def _validate_market(market: str) -> str:
    market = market.lower()
    if market not in VALID_MARKETS:
        raise ValueError(
            f"Invalid market: {market}. Valid markets are: {', '.join(VALID_MARKETS)}"
        )
    return market


def _format_date(value: Optional[Union[date, str]]) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    return value.strftime("%Y-%m-%d")


def _is_open(hours: Dict[str, Any]) -> bool:
    """True if any product in a market hours response trades that day."""
    for market in hours.values():
        if not isinstance(market, dict):
            continue
        for product in market.values():
            if isinstance(product, dict) and product.get("isOpen"):
                return True
    return False


class MarketDataMixin:
    """Market data queries. Mixed into SchwabClient."""

    def get_quotes(
        self,
        symbols: Union[str, Iterable[str]],
        fields: Optional[Union[str, Iterable[str]]] = None,
        indicative: bool = False,
    ) -> Dict[str, Any]:
        """
        Get quotes for one or more symbols.

        Args:
            symbols: Symbol or symbols (e.g. ["AAPL", "MSFT"])
            fields: Root nodes to return (quote, fundamental, extended, reference, regular)
            indicative: Also return indicative quotes for ETF symbols

        Returns:
            Dict keyed by symbol
        """
        params = {
            "symbols": _join(symbols),
            "fields": _join(fields) if fields else None,
            "indicative": str(indicative).lower(),
        }
        logger.info(f"Fetching quotes for {params['symbols']}")
        return self.get(endpoints.MARKETDATA_QUOTES, params=params)

    def get_quote(
        self, symbol: str, fields: Optional[Union[str, Iterable[str]]] = None
    ) -> Dict[str, Any]:
        """Get the quote for a single symbol."""
        params = {"fields": _join(fields)} if fields else None
        endpoint = endpoints.MARKETDATA_QUOTE.format(symbol=symbol)
        return self.get(endpoint, params=params)

    def get_option_chain(
        self,
        symbol: str,
        contract_type: Optional[str] = None,
        strike_count: Optional[int] = None,
        include_underlying_quote: bool = True,
        strategy: Optional[str] = None,
        strike: Optional[float] = None,
        strike_range: Optional[str] = None,
        from_date: Optional[Union[date, str]] = None,
        to_date: Optional[Union[date, str]] = None,
        exp_month: Optional[str] = None,
        option_type: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Get the option chain for an underlying symbol.

        Args:
            symbol: Underlying symbol
            contract_type: "CALL", "PUT" or None for both
            strike_count: Number of strikes above and below at-the-money
            include_underlying_quote: Include the underlying's quote
            strategy: SINGLE, ANALYTICAL, COVERED, VERTICAL, ...
            strike: Only this strike price
            strike_range: ITM, NTM, OTM, ...
            from_date: Earliest expiration (date or YYYY-MM-DD)
            to_date: Latest expiration (date or YYYY-MM-DD)
            exp_month: Expiration month (JAN ... DEC, ALL)
            option_type: Option type filter

        Returns:
            Raw chain with callExpDateMap / putExpDateMap
        """
        params = {
            "symbol": symbol.upper(),
            "contractType": contract_type.upper() if contract_type else None,
            "strikeCount": strike_count,
            "includeUnderlyingQuote": str(include_underlying_quote).lower(),
            "strategy": strategy,
            "strike": strike,
            "range": strike_range,
            "fromDate": _format_date(from_date),
            "toDate": _format_date(to_date),
            "expMonth": exp_month,
            "optionType": option_type,
        }
        logger.info(f"Fetching option chain for {symbol}")
        return self.get(endpoints.MARKETDATA_OPTION_CHAINS, params=params)

    def get_option_expiration_chain(self, symbol: str) -> Dict[str, Any]:
        """Get the option expiration dates for an underlying symbol."""
        return self.get(endpoints.MARKETDATA_OPTION_EXPIRATION, params={"symbol": symbol.upper()})

    def get_price_history(
        self,
        symbol: str,
        period_type: Optional[str] = None,
        period: Optional[int] = None,
        frequency_type: Optional[str] = None,
        frequency: Optional[int] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        need_extended_hours_data: bool = False,
        need_previous_close: bool = False,
    ) -> Dict[str, Any]:
        """
        Get historical candles for a symbol.

        Args:
            symbol: Symbol (e.g. "AAPL")
            period_type: day, month, year or ytd
            period: Number of periods of period_type
            frequency_type: minute, daily, weekly or monthly
            frequency: Frequency interval
            start_date: Start of the range (overrides period)
            end_date: End of the range
            need_extended_hours_data: Include extended hours candles
            need_previous_close: Include the previous close

        Returns:
            {"symbol": ..., "empty": bool, "candles": [...]}
        """
        params = {
            "symbol": symbol.upper(),
            "periodType": period_type,
            "period": period,
            "frequencyType": frequency_type,
            "frequency": frequency,
            "startDate": to_epoch_millis(start_date) if start_date else None,
            "endDate": to_epoch_millis(end_date) if end_date else None,
            "needExtendedHoursData": str(need_extended_hours_data).lower(),
            "needPreviousClose": str(need_previous_close).lower(),
        }
        logger.info(f"Fetching price history for {symbol}")
        return self.get(endpoints.MARKETDATA_PRICE_HISTORY, params=params)

    def get_movers(
        self, index: str, sort: Optional[str] = None, frequency: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Get the top movers of an index.

        Args:
            index: $DJI, $COMPX, $SPX, NYSE, NASDAQ, OTCBB, INDEX_ALL, EQUITY_ALL, ...
            sort: VOLUME, TRADES, PERCENT_CHANGE_UP or PERCENT_CHANGE_DOWN
            frequency: 0, 1, 5, 10, 30 or 60
        """
        endpoint = endpoints.MARKETDATA_MOVERS.format(symbol=index)
        return self.get(endpoint, params={"sort": sort, "frequency": frequency})

    def get_market_hours(
        self, markets: Union[str, Iterable[str]], for_date: Optional[Union[date, str]] = None
    ) -> Dict[str, Any]:
        """
        Get trading hours for one or more markets.

        Args:
            markets: Market ids (equity, option, bond, future, forex)
            for_date: Day to query (defaults to today on Schwab's side)
        """
        names = [markets] if isinstance(markets, str) else list(markets)
        params = {
            "markets": ",".join(_validate_market(name) for name in names),
            "date": _format_date(for_date),
        }
        return self.get(endpoints.MARKETDATA_MARKET_HOURS, params=params)

    def get_market_hour(
        self, market_id: str, for_date: Optional[Union[date, str]] = None
    ) -> Dict[str, Any]:
        """Get trading hours for a single market."""
        endpoint = endpoints.MARKETDATA_MARKET_HOUR.format(marketId=_validate_market(market_id))
        return self.get(endpoint, params={"date": _format_date(for_date)})

    def get_next_open_date_for_market(
        self, market: str, after: Optional[date] = None
    ) -> date:
        """
        Find the next day a market is open.

        Args:
            market: Market id (equity, option, bond, future, forex)
            after: Day to search after (defaults to today)

        Returns:
            First open date strictly after ``after``

        Raises:
            SchwabNotFoundError: If no open day is found within two weeks
        """
        start = after or date.today()
        for offset in range(1, NEXT_OPEN_DATE_MAX_DAYS + 1):
            candidate = start + timedelta(days=offset)
            if _is_open(self.get_market_hour(market, candidate)):
                logger.debug(f"Next open date for {market}: {candidate}")
                return candidate

        raise SchwabNotFoundError(
            f"No open date found for market {market} within "
            f"{NEXT_OPEN_DATE_MAX_DAYS} days after {start}"
        )

    def get_instruments(self, symbol: str, projection: str = "symbol-search") -> Dict[str, Any]:
        """
        Search instruments.

        Args:
            symbol: Symbol, pattern or description to search for
            projection: One of VALID_PROJECTIONS
        """
        if projection not in VALID_PROJECTIONS:
            raise ValueError(
                f"Invalid projection: {projection}. "
                f"Valid projections are: {', '.join(VALID_PROJECTIONS)}"
            )
        return self.get(
            endpoints.MARKETDATA_INSTRUMENTS,
            params={"symbol": symbol, "projection": projection},
        )

    def get_instrument_by_cusip(self, cusip: str) -> Dict[str, Any]:
        """Get an instrument by CUSIP."""
        return self.get(endpoints.MARKETDATA_INSTRUMENT.format(cusip=cusip))
