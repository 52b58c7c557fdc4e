"""Tests for OAuth authorization server module."""

from unittest import mock

import pytest

from schwab_api.oauth.auth_server import (
    AuthorizationResult,
    OAuthCallbackServer,
    run_authorization_flow,
)
from schwab_api.oauth.config import SchwabOAuthConfig
from schwab_api.oauth.exceptions import ConfigurationError


class TestAuthorizationResult:
    """Tests for AuthorizationResult dataclass."""

    def test_authorization_result_success(self):
        """AuthorizationResult can represent success."""
        result = AuthorizationResult(success=True, authorization_code="code_123")

        assert result.success is True
        assert result.authorization_code == "code_123"
        assert result.error is None

    def test_authorization_result_failure(self):
        """AuthorizationResult can represent failure."""
        result = AuthorizationResult(
            success=False, error="access_denied", error_description="User denied access"
        )

        assert result.success is False
        assert result.authorization_code is None
        assert result.error_description == "User denied access"


class TestOAuthCallbackServer:
    """Tests for OAuthCallbackServer class."""

    @pytest.fixture
    def config(self):
        """Create test OAuth config."""
        return SchwabOAuthConfig(
            client_id="test_client_id",
            client_secret="test_client_secret",
            callback_url="https://127.0.0.1:8182/oauth/callback",
        )

    @pytest.fixture
    def server(self, config):
        return OAuthCallbackServer(config)

    def test_server_initialization(self, server, config):
        """OAuthCallbackServer can be initialized."""
        assert server.config == config
        assert server.app is not None
        assert server.result is None
        assert server.server is None

    def test_generate_authorization_url(self, server):
        """generate_authorization_url returns the configured authorize URL."""
        url = server.generate_authorization_url()

        assert url.startswith("https://api.schwabapi.com/v1/oauth/authorize?")
        assert "client_id=test_client_id" in url
        assert "redirect_uri=https://127.0.0.1:8182/oauth/callback" in url

    def test_callback_success(self, server):
        """A callback with code records success."""
        response = server.app.test_client().get("/oauth/callback?code=auth_code_123")

        assert response.status_code == 200
        assert b"Authorization Successful" in response.data
        assert server.result.success is True
        assert server.result.authorization_code == "auth_code_123"
        assert server._shutdown_event.is_set()

    def test_callback_error(self, server):
        """A callback with error records failure and escapes the message."""
        response = server.app.test_client().get(
            "/oauth/callback",
            query_string={"error": "access_denied", "error_description": "<b>denied</b>"},
        )

        assert response.status_code == 400
        assert b"&lt;b&gt;denied&lt;/b&gt;" in response.data
        assert server.result.success is False
        assert server.result.error == "access_denied"
        assert server.result.error_description == "<b>denied</b>"

    def test_callback_missing_code(self, server):
        """A callback without code records failure."""
        response = server.app.test_client().get("/oauth/callback")

        assert response.status_code == 400
        assert server.result.success is False
        assert server.result.error == "missing_code"

    def test_other_paths_not_handled(self, server):
        """Only the callback path is routed."""
        response = server.app.test_client().get("/other?code=x")

        assert response.status_code == 404
        assert server.result is None

    def test_wait_for_callback_returns_result(self, server):
        """wait_for_callback returns the recorded result."""
        server._finish(AuthorizationResult(success=True, authorization_code="c"))

        result = server.wait_for_callback(timeout=1)

        assert result.authorization_code == "c"

    def test_wait_for_callback_timeout(self, server):
        """wait_for_callback reports a timeout."""
        result = server.wait_for_callback(timeout=0)

        assert result.success is False
        assert result.error == "timeout"

    def test_ssl_context_not_needed_for_http(self):
        """Plain http callbacks run without SSL."""
        config = SchwabOAuthConfig(
            client_id="k", client_secret="s", callback_url="http://localhost:8080/cb"
        )

        assert OAuthCallbackServer(config)._build_ssl_context() is None

    def test_ssl_context_requires_paths(self, server):
        """https callbacks require certificate and key paths."""
        with pytest.raises(ConfigurationError, match="ssl_cert_path"):
            server._build_ssl_context()

    def test_ssl_context_missing_files(self, tmp_path):
        """Missing certificate files raise FileNotFoundError."""
        config = SchwabOAuthConfig(
            client_id="k",
            client_secret="s",
            callback_url="https://127.0.0.1:8182/cb",
            ssl_cert_path=str(tmp_path / "cert.pem"),
            ssl_key_path=str(tmp_path / "key.pem"),
        )

        with pytest.raises(FileNotFoundError, match="SSL certificate not found"):
            OAuthCallbackServer(config)._build_ssl_context()


class TestRunAuthorizationFlow:
    """Tests for run_authorization_flow()."""

    @pytest.fixture
    def config(self):
        return SchwabOAuthConfig(
            client_id="test_client_id",
            client_secret="test_client_secret",
            callback_url="http://localhost:8080/callback",
        )

    @mock.patch("schwab_api.oauth.auth_server.webbrowser.open")
    @mock.patch.object(OAuthCallbackServer, "stop")
    @mock.patch.object(OAuthCallbackServer, "wait_for_callback")
    @mock.patch.object(OAuthCallbackServer, "start")
    def test_flow_opens_browser(self, mock_start, mock_wait, mock_stop, mock_open, config):
        """The flow starts the server, opens the browser and waits."""
        mock_wait.return_value = AuthorizationResult(success=True, authorization_code="abc")

        result = run_authorization_flow(config, open_browser=True, timeout=5)

        assert result.authorization_code == "abc"
        mock_start.assert_called_once()
        mock_open.assert_called_once_with(config.authorize_url)
        mock_wait.assert_called_once_with(5)
        mock_stop.assert_called_once()

    @mock.patch("schwab_api.oauth.auth_server.webbrowser.open")
    @mock.patch.object(OAuthCallbackServer, "stop")
    @mock.patch.object(OAuthCallbackServer, "wait_for_callback")
    @mock.patch.object(OAuthCallbackServer, "start")
    def test_flow_without_browser(self, mock_start, mock_wait, mock_stop, mock_open, config):
        """With open_browser=False the browser is not opened."""
        mock_wait.return_value = AuthorizationResult(success=False, error="timeout")

        result = run_authorization_flow(config, open_browser=False)

        assert result.success is False
        mock_open.assert_not_called()
        mock_stop.assert_called_once()
