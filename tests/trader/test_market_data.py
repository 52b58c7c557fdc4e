"""Tests for Schwab market data endpoints."""

from datetime import date, datetime, timezone

import pytest

from schwab_api.trader.exceptions import SchwabNotFoundError

BASE = "https://api.schwabapi.com/marketdata/v1"


def _hours(day, is_open):
    """Market hours payload as returned for a single market."""
    if is_open:
        return {
            "equity": {
                "EQ": {
                    "date": day.isoformat(),
                    "marketType": "EQUITY",
                    "product": "EQ",
                    "isOpen": True,
                }
            }
        }
    return {
        "equity": {
            "equity": {"date": day.isoformat(), "marketType": "EQUITY", "isOpen": False}
        }
    }


class TestQuotes:
    """Tests for quote methods."""

    def test_get_quotes(self, client, respond, last_request):
        """get_quotes joins symbols and fields."""
        respond(200, {"AAPL": {}, "MSFT": {}})

        client.get_quotes(["AAPL", "MSFT"], fields=["quote", "fundamental"])

        _, url, kwargs = last_request()
        assert url == f"{BASE}/quotes"
        assert kwargs["params"] == {
            "symbols": "AAPL,MSFT",
            "fields": "quote,fundamental",
            "indicative": "false",
        }

    def test_get_quotes_single_string(self, client, respond, last_request):
        respond(200, {})

        client.get_quotes("AAPL,MSFT", indicative=True)

        assert last_request()[2]["params"] == {"symbols": "AAPL,MSFT", "indicative": "true"}

    def test_get_quote(self, client, respond, last_request):
        respond(200, {"AAPL": {"quote": {"lastPrice": 190.0}}})

        result = client.get_quote("AAPL", fields="quote")

        assert result["AAPL"]["quote"]["lastPrice"] == 190.0
        _, url, kwargs = last_request()
        assert url == f"{BASE}/AAPL/quotes"
        assert kwargs["params"] == {"fields": "quote"}


class TestOptionChains:
    """Tests for option chain methods."""

    def test_get_option_chain(self, client, respond, last_request):
        """Only provided parameters are sent; dates are formatted."""
        respond(200, {"symbol": "AAPL", "callExpDateMap": {}, "putExpDateMap": {}})

        client.get_option_chain(
            "aapl",
            contract_type="put",
            strike_count=10,
            from_date=date(2024, 1, 1),
            to_date="2024-02-16",
        )

        _, url, kwargs = last_request()
        assert url == f"{BASE}/chains"
        assert kwargs["params"] == {
            "symbol": "AAPL",
            "contractType": "PUT",
            "strikeCount": 10,
            "includeUnderlyingQuote": "true",
            "fromDate": "2024-01-01",
            "toDate": "2024-02-16",
        }

    def test_get_option_expiration_chain(self, client, respond, last_request):
        respond(200, {"expirationList": []})

        client.get_option_expiration_chain("spy")

        _, url, kwargs = last_request()
        assert url == f"{BASE}/expirationchain"
        assert kwargs["params"] == {"symbol": "SPY"}


class TestPriceHistory:
    """Tests for get_price_history()."""

    def test_dates_as_epoch_millis(self, client, respond, last_request):
        """Start and end are sent as epoch milliseconds."""
        respond(200, {"symbol": "AAPL", "empty": False, "candles": []})

        client.get_price_history(
            "AAPL",
            period_type="month",
            frequency_type="daily",
            frequency=1,
            start_date=datetime(2024, 1, 1, tzinfo=timezone.utc),
            end_date=datetime(2024, 1, 2, tzinfo=timezone.utc),
        )

        _, url, kwargs = last_request()
        assert url == f"{BASE}/pricehistory"
        assert kwargs["params"] == {
            "symbol": "AAPL",
            "periodType": "month",
            "frequencyType": "daily",
            "frequency": 1,
            "startDate": 1704067200000,
            "endDate": 1704153600000,
            "needExtendedHoursData": "false",
            "needPreviousClose": "false",
        }


class TestMovers:
    def test_get_movers(self, client, respond, last_request):
        respond(200, {"screeners": []})

        client.get_movers("$SPX", sort="PERCENT_CHANGE_UP", frequency=5)

        _, url, kwargs = last_request()
        assert url == f"{BASE}/movers/$SPX"
        assert kwargs["params"] == {"sort": "PERCENT_CHANGE_UP", "frequency": 5}


class TestMarketHours:
    """Tests for market hours methods."""

    def test_get_market_hours(self, client, respond, last_request):
        respond(200, {})

        client.get_market_hours(["equity", "OPTION"], for_date=date(2024, 7, 4))

        _, url, kwargs = last_request()
        assert url == f"{BASE}/markets"
        assert kwargs["params"] == {"markets": "equity,option", "date": "2024-07-04"}

    def test_get_market_hours_invalid_market(self, client, session):
        """Unknown markets are rejected before any request."""
        with pytest.raises(ValueError, match="Invalid market: crypto"):
            client.get_market_hours("crypto")
        session.request.assert_not_called()

    def test_get_market_hour(self, client, respond, last_request):
        respond(200, {})

        client.get_market_hour("equity")

        _, url, kwargs = last_request()
        assert url == f"{BASE}/markets/equity"
        assert kwargs["params"] is None

    def test_next_open_date_skips_closed_days(self, client, session, make_response):
        """Closed days are skipped until an open one is found."""
        friday = date(2024, 7, 5)
        session.request.side_effect = [
            make_response(200, _hours(date(2024, 7, 6), False)),
            make_response(200, _hours(date(2024, 7, 7), False)),
            make_response(200, _hours(date(2024, 7, 8), True)),
        ]

        assert client.get_next_open_date_for_market("equity", after=friday) == date(2024, 7, 8)

        dates = [call[1]["params"]["date"] for call in session.request.call_args_list]
        assert dates == ["2024-07-06", "2024-07-07", "2024-07-08"]

    def test_next_open_date_not_found(self, client, session, make_response):
        """No open day within two weeks raises SchwabNotFoundError."""
        session.request.return_value = make_response(200, _hours(date(2024, 1, 1), False))

        with pytest.raises(SchwabNotFoundError, match="No open date found for market equity"):
            client.get_next_open_date_for_market("equity", after=date(2024, 1, 1))

        assert session.request.call_count == 14


class TestInstruments:
    """Tests for instrument methods."""

    def test_get_instruments(self, client, respond, last_request):
        respond(200, {"instruments": []})

        client.get_instruments("AAP.*", projection="symbol-regex")

        _, url, kwargs = last_request()
        assert url == f"{BASE}/instruments"
        assert kwargs["params"] == {"symbol": "AAP.*", "projection": "symbol-regex"}

    def test_get_instruments_invalid_projection(self, client, session):
        with pytest.raises(ValueError, match="Invalid projection"):
            client.get_instruments("AAPL", projection="everything")
        session.request.assert_not_called()

    def test_get_instrument_by_cusip(self, client, respond, last_request):
        respond(200, {"instruments": [{"cusip": "037833100"}]})

        client.get_instrument_by_cusip("037833100")

        assert last_request()[1] == f"{BASE}/instruments/037833100"
