"""
Click CLI for the Schwab API client.

Commands for authorizing the application, inspecting and revoking the
stored tokens, and a quick account listing to verify API access.

Credentials come from the environment (SCHWAB_API_KEY, SCHWAB_API_SECRET,
SCHWAB_CALLBACK_URL); tokens are kept in the file given by --token-file or
SCHWAB_TOKEN_FILE.
"""

import json
import logging
import sys
from dataclasses import replace
from typing import Optional

import click

from .oauth.config import SchwabOAuthConfig
from .oauth.coordinator import OAuthCoordinator
from .oauth.exceptions import ConfigurationError, SchwabOAuthError
from .trader.client import SchwabClient
from .trader.config import SchwabClientConfig
from .trader.exceptions import SchwabAPIError

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_FILE = "~/.schwab_api/tokens.json"


def _print_error(message: str) -> None:
    """Print error message to stderr."""
    click.secho(f"Error: {message}", fg="red", err=True)


def _print_success(message: str) -> None:
    click.secho(message, fg="green")


def format_time_remaining(seconds: float) -> str:
    """
    Format seconds into human-readable time remaining.

    Returns:
        Formatted string (e.g., "2h 15m", "45m", "expired")
    """
    if seconds <= 0:
        return "expired"

    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)

    if hours > 0:
        return f"{hours}h {minutes}m"
    elif minutes > 0:
        return f"{minutes}m"
    else:
        return f"{int(seconds)}s"


def _get_coordinator(ctx: click.Context) -> OAuthCoordinator:
    """Build the OAuth coordinator from the environment, exiting on bad config."""
    try:
        config = SchwabOAuthConfig.from_env()
        config = replace(config, token_file=ctx.obj["token_file"])
    except ConfigurationError as e:
        _print_error(str(e))
        click.echo(
            "Ensure SCHWAB_API_KEY, SCHWAB_API_SECRET and SCHWAB_CALLBACK_URL are set.",
            err=True,
        )
        sys.exit(2)
    return OAuthCoordinator(config=config)


@click.group()
@click.option(
    "--token-file",
    default=DEFAULT_TOKEN_FILE,
    show_default=True,
    help="Token file path",
    envvar="SCHWAB_TOKEN_FILE",
)
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.pass_context
def cli(ctx: click.Context, token_file: str, verbose: bool) -> None:
    """
    Schwab API - authorize and check access to the Schwab Trader API.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["token_file"] = token_file
    ctx.obj["verbose"] = verbose


@cli.command()
@click.option("--no-browser", is_flag=True, help="Print the authorization URL instead of opening it")
@click.option(
    "--redirect-url",
    help="Complete authorization from a copied callback URL (no local server)",
)
@click.option("--timeout", default=300, type=int, help="Seconds to wait for the callback")
@click.pass_context
def authorize(
    ctx: click.Context, no_browser: bool, redirect_url: Optional[str], timeout: int
) -> None:
    """
    Authorize the application with Schwab.

    Without --redirect-url a local callback server receives the
    authorization code.
    """
    coordinator = _get_coordinator(ctx)

    if redirect_url:
        try:
            coordinator.authorize_from_redirect_url(redirect_url)
        except SchwabOAuthError as e:
            _print_error(str(e))
            sys.exit(1)
        _print_success("Authorization complete")
        return

    if no_browser:
        click.echo("Open this URL in a browser to authorize:")
        click.echo(coordinator.get_authorize_url())

    if not coordinator.run_authorization_flow(open_browser=not no_browser, timeout=timeout):
        _print_error("Authorization failed")
        sys.exit(1)

    _print_success("Authorization complete")
    if coordinator.config.token_file:
        click.echo(f"Tokens saved to {coordinator.config.token_file}")


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the current authorization status."""
    coordinator = _get_coordinator(ctx)
    info = coordinator.get_status()

    if not info.get("authorized", False):
        click.secho("NOT AUTHORIZED", fg="red", bold=True)
        click.echo(f"Reason: {info.get('message', 'Unknown')}")
        click.echo("Run: schwab-api authorize")
        sys.exit(1)

    click.secho("AUTHORIZED", fg="green", bold=True)
    if info.get("expired"):
        click.echo("Access token: expired")
    else:
        click.echo(f"Access token: expires in {format_time_remaining(info['expires_in_seconds'])}")
    click.echo(f"Refreshable:  {'yes' if info.get('refreshable') else 'no'}")

    if ctx.obj["verbose"]:
        click.echo(f"Expires at:   {info.get('expires_at')}")
        click.echo(f"Scope:        {info.get('scope') or 'N/A'}")
        click.echo(f"Token file:   {coordinator.config.token_file}")


@cli.command()
@click.confirmation_option(prompt="Delete the stored Schwab tokens?")
@click.pass_context
def revoke(ctx: click.Context) -> None:
    """Delete the stored tokens (re-authorization required afterwards)."""
    coordinator = _get_coordinator(ctx)
    try:
        coordinator.revoke()
    except SchwabOAuthError as e:
        _print_error(str(e))
        sys.exit(1)
    _print_success("Tokens deleted")


@cli.command()
@click.option("--positions", is_flag=True, help="Include positions")
@click.pass_context
def accounts(ctx: click.Context, positions: bool) -> None:
    """List linked accounts as JSON."""
    coordinator = _get_coordinator(ctx)

    try:
        client = SchwabClient(
            oauth_coordinator=coordinator, config=SchwabClientConfig.from_env()
        )
        result = client.get_accounts(positions=positions)
    except ConfigurationError as e:
        _print_error(str(e))
        sys.exit(2)
    except SchwabAPIError as e:
        _print_error(str(e))
        if ctx.obj["verbose"] and not e.context.is_empty:
            click.echo(json.dumps(e.context.to_dict(), indent=2), err=True)
        sys.exit(1)

    click.echo(json.dumps(result, indent=2))


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
