"""
OAuth callback server for Schwab API integration.

This module provides a temporary local server that receives the OAuth
redirect during the authorization flow. It binds to the port and path of
the configured callback URL, captures the authorization code (or the
provider's error) and shuts down after the first callback.

Schwab only redirects to HTTPS callbacks, so an SSL certificate and key are
required whenever the callback URL uses https.
"""

import logging
import ssl
import threading
import time
import webbrowser
from dataclasses import dataclass
from html import escape
from pathlib import Path
from typing import Optional

from flask import Flask, Response, request

from .config import SchwabOAuthConfig
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

_PAGE = """<html>
<head><title>{title}</title></head>
<body style="font-family: Arial, sans-serif; max-width: 600px; margin: 50px auto;">
    <h1>{title}</h1>
    {body}
    <p style="margin-top: 30px; color: #666;">You can close this window.</p>
</body>
</html>"""


@dataclass
class AuthorizationResult:
    """
    Result of OAuth authorization flow.

    Attributes:
        success: Whether authorization succeeded
        authorization_code: Authorization code from callback (if successful)
        error: Error code from OAuth provider (if failed)
        error_description: Human-readable error description (if failed)
    """

    success: bool
    authorization_code: Optional[str] = None
    error: Optional[str] = None
    error_description: Optional[str] = None


class OAuthCallbackServer:
    """
    Local server that handles the OAuth callback.

    The server:
    1. Starts a listener on the callback URL's port
    2. Waits for Schwab's redirect to the callback path
    3. Records the authorization code or error
    4. Signals completion so the flow can shut it down
    """

    def __init__(self, config: SchwabOAuthConfig):
        """
        Initialize callback server.

        Args:
            config: OAuth configuration (callback URL and SSL paths)
        """
        self.config = config
        self.app = Flask(__name__)
        self.app.logger.setLevel(logging.WARNING)
        self.server: Optional[threading.Thread] = None
        self.result: Optional[AuthorizationResult] = None
        self._shutdown_event = threading.Event()

        self.app.add_url_rule(
            self.config.callback_path,
            "oauth_callback",
            self._handle_callback,
            methods=["GET"],
        )

    def _finish(self, result: AuthorizationResult) -> None:
        self.result = result
        self._shutdown_event.set()

    def _handle_callback(self) -> Response:
        """Handle OAuth callback from Schwab."""
        logger.info("Received OAuth callback")

        error = request.args.get("error")
        if error:
            error_desc = request.args.get("error_description", "Unknown error")
            logger.error(f"OAuth error: {error} - {error_desc}")
            self._finish(
                AuthorizationResult(success=False, error=error, error_description=error_desc)
            )
            body = (
                f"<p><strong>Error:</strong> {escape(error)}</p>"
                f"<p><strong>Description:</strong> {escape(error_desc)}</p>"
            )
            return Response(
                _PAGE.format(title="Authorization Failed", body=body),
                status=400,
                content_type="text/html",
            )

        code = request.args.get("code")
        if not code:
            logger.error("No authorization code in callback")
            self._finish(
                AuthorizationResult(
                    success=False,
                    error="missing_code",
                    error_description="No authorization code received",
                )
            )
            return Response(
                _PAGE.format(
                    title="Authorization Failed",
                    body="<p>No authorization code received from Schwab.</p>",
                ),
                status=400,
                content_type="text/html",
            )

        logger.info("Authorization code received successfully")
        self._finish(AuthorizationResult(success=True, authorization_code=code))

        return Response(
            _PAGE.format(
                title="Authorization Successful",
                body="<p>Your application has been authorized to access your Schwab account.</p>",
            ),
            status=200,
            content_type="text/html",
        )

    def generate_authorization_url(self) -> str:
        return self.config.authorize_url

    def _build_ssl_context(self) -> Optional[ssl.SSLContext]:
        """
        SSL context for https callbacks, None for plain http.

        Raises:
            ConfigurationError: If https is used without certificate paths
            FileNotFoundError: If certificate files are missing
        """
        if not self.config.callback_url.startswith("https://"):
            return None

        if not self.config.ssl_cert_path or not self.config.ssl_key_path:
            raise ConfigurationError(
                "An https callback URL requires ssl_cert_path and ssl_key_path "
                "(SCHWAB_SSL_CERT_PATH / SCHWAB_SSL_KEY_PATH)"
            )

        cert_path = Path(self.config.ssl_cert_path)
        key_path = Path(self.config.ssl_key_path)

        if not cert_path.exists():
            raise FileNotFoundError(f"SSL certificate not found at {cert_path}")
        if not key_path.exists():
            raise FileNotFoundError(f"SSL key not found at {key_path}")

        ssl_context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
        ssl_context.load_cert_chain(str(cert_path), str(key_path))
        return ssl_context

    def start(self) -> None:
        """
        Start the callback server in a background thread.

        Raises:
            ConfigurationError: If https is used without certificate paths
            FileNotFoundError: If SSL certificate files not found
        """
        ssl_context = self._build_ssl_context()

        logger.info(
            f"Starting OAuth callback server on "
            f"{self.config.callback_host}:{self.config.callback_port}"
        )

        def run_server():
            try:
                self.app.run(
                    host=self.config.callback_host,
                    port=self.config.callback_port,
                    ssl_context=ssl_context,
                    debug=False,
                    use_reloader=False,
                    threaded=True,
                )
            except (OSError, SystemExit) as e:
                logger.error(f"Server error: {e}")
                self._finish(
                    AuthorizationResult(
                        success=False,
                        error="server_error",
                        error_description=f"Server failed to start: {e}",
                    )
                )

        self.server = threading.Thread(target=run_server, daemon=True)
        self.server.start()

        # Give the listener a moment to bind
        time.sleep(1)
        logger.info("OAuth callback server started")

    def wait_for_callback(self, timeout: int = 300) -> AuthorizationResult:
        """
        Wait for OAuth callback.

        Args:
            timeout: Maximum seconds to wait

        Returns:
            AuthorizationResult with code or error
        """
        logger.info(f"Waiting for OAuth callback (timeout: {timeout}s)")

        if self._shutdown_event.wait(timeout=timeout):
            return self.result or AuthorizationResult(
                success=False,
                error="unknown",
                error_description="Server shutdown without result",
            )

        logger.warning(f"Timeout waiting for callback after {timeout}s")
        return AuthorizationResult(
            success=False,
            error="timeout",
            error_description=f"No callback received within {timeout} seconds.",
        )

    def stop(self) -> None:
        """
        Stop waiting for the callback.

        Flask's development server has no graceful shutdown; the daemon
        thread ends with the main process.
        """
        if self.server:
            logger.info("OAuth callback server shutting down")
            self._shutdown_event.set()


def run_authorization_flow(
    config: SchwabOAuthConfig, open_browser: bool = True, timeout: int = 300
) -> AuthorizationResult:
    """
    Run the interactive OAuth authorization flow.

    Starts the callback server, sends the user to Schwab's authorization
    page and waits for the redirect.

    Args:
        config: OAuth configuration
        open_browser: Whether to automatically open browser
        timeout: Seconds to wait for callback

    Returns:
        AuthorizationResult with authorization code or error
    """
    server = OAuthCallbackServer(config)

    try:
        server.start()
        auth_url = server.generate_authorization_url()

        logger.info(f"Authorize the application by visiting: {auth_url}")
        if open_browser:
            try:
                webbrowser.open(auth_url)
            except webbrowser.Error as e:
                logger.warning(f"Could not open browser automatically: {e}")

        result = server.wait_for_callback(timeout)

        if result.success:
            logger.info("Authorization flow completed successfully")
        else:
            logger.error(
                f"Authorization flow failed: {result.error} - {result.error_description}"
            )
        return result

    finally:
        server.stop()
