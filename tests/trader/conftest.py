"""Pytest fixtures for Schwab Trader API client tests.

Provides a client wired to a mocked OAuth coordinator and a mocked
requests session, plus a factory for canned HTTP responses.
"""

import json
from typing import Any, Callable, Dict, Optional
from unittest import mock

import pytest
import requests

from schwab_api.oauth.coordinator import OAuthCoordinator
from schwab_api.trader.client import SchwabClient
from schwab_api.trader.config import SchwabClientConfig


@pytest.fixture
def make_response() -> Callable[..., mock.Mock]:
    """Factory for mock HTTP responses.

    Example:
        >>> def test_something(make_response):
        >>>     response = make_response(200, {"key": "value"})
    """

    def _make(
        status_code: int = 200,
        payload: Any = None,
        text: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> mock.Mock:
        response = mock.Mock(spec=requests.Response)
        response.status_code = status_code
        response.text = text if text is not None else json.dumps(payload)
        response.headers = headers or {}
        return response

    return _make


@pytest.fixture
def mock_oauth() -> mock.Mock:
    """Create mock OAuth coordinator."""
    oauth = mock.Mock(spec=OAuthCoordinator)
    oauth.get_authorization_header.return_value = {"Authorization": "Bearer test_token_123"}
    return oauth


@pytest.fixture
def session() -> mock.Mock:
    """Create mock requests session."""
    return mock.Mock(spec=requests.Session)


@pytest.fixture
def client(mock_oauth, session) -> SchwabClient:
    """Create Schwab client with mocked OAuth and session."""
    config = SchwabClientConfig(max_retries=2, retry_delay=0.1)
    return SchwabClient(oauth_coordinator=mock_oauth, config=config, session=session)


@pytest.fixture
def respond(session, make_response) -> Callable[..., mock.Mock]:
    """Make the mock session answer every request with one response."""

    def _respond(*args: Any, **kwargs: Any) -> mock.Mock:
        response = make_response(*args, **kwargs)
        session.request.return_value = response
        return response

    return _respond


@pytest.fixture
def last_request(session) -> Callable[[], tuple]:
    """(method, url, kwargs) of the last request made through the session."""

    def _last() -> tuple:
        args, kwargs = session.request.call_args
        return args[0], args[1], kwargs

    return _last
