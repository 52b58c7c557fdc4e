"""Tests for Schwab transaction endpoints."""

from datetime import datetime, timezone

import pytest


class TestTransactionEndpoints:
    """Tests for transaction methods."""

    def test_get_transactions(self, client, respond, last_request):
        """get_transactions formats dates and upper-cases the symbol."""
        respond(200, [{"activityId": 1}])

        result = client.get_transactions(
            "HASH_A",
            datetime(2024, 1, 1, tzinfo=timezone.utc),
            datetime(2024, 3, 31, 12, 0, 0, 500000, tzinfo=timezone.utc),
            symbol="aapl",
            types=["TRADE", "DIVIDEND_OR_INTEREST"],
        )

        assert result == [{"activityId": 1}]
        _, url, kwargs = last_request()
        assert url == "https://api.schwabapi.com/trader/v1/accounts/HASH_A/transactions"
        assert kwargs["params"] == {
            "startDate": "2024-01-01T00:00:00.000Z",
            "endDate": "2024-03-31T12:00:00.500Z",
            "symbol": "AAPL",
            "types": "TRADE,DIVIDEND_OR_INTEREST",
        }

    def test_get_transactions_minimal(self, client, respond, last_request):
        """Symbol and types are optional."""
        respond(200, [])

        client.get_transactions("HASH_A", datetime(2024, 1, 1), datetime(2024, 1, 2), types="TRADE")

        params = last_request()[2]["params"]
        assert "symbol" not in params
        assert params["types"] == "TRADE"

    def test_get_transactions_rejects_reversed_range(self, client, session):
        with pytest.raises(ValueError, match="start_date must not be after end_date"):
            client.get_transactions("HASH_A", datetime(2024, 2, 1), datetime(2024, 1, 1))
        session.request.assert_not_called()

    def test_get_transactions_mixed_naive_and_aware(self, client, respond, last_request):
        """A naive start is taken as UTC when compared with an aware end."""
        respond(200, [])

        client.get_transactions(
            "HASH_A", datetime(2024, 1, 1), datetime(2024, 2, 1, tzinfo=timezone.utc)
        )

        params = last_request()[2]["params"]
        assert params["startDate"] == "2024-01-01T00:00:00.000Z"
        assert params["endDate"] == "2024-02-01T00:00:00.000Z"

    def test_get_transactions_rejects_reversed_mixed_range(self, client, session):
        with pytest.raises(ValueError, match="start_date must not be after end_date"):
            client.get_transactions(
                "HASH_A",
                datetime(2024, 2, 1, tzinfo=timezone.utc),
                datetime(2024, 1, 1),
            )
        session.request.assert_not_called()

    def test_get_transaction(self, client, respond, last_request):
        respond(200, {"activityId": 99})

        assert client.get_transaction("HASH_A", 99) == {"activityId": 99}
        assert last_request()[1] == (
            "https://api.schwabapi.com/trader/v1/accounts/HASH_A/transactions/99"
        )
