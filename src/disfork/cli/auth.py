"""Authentication commands for DisFork."""

import sys

import httpx

from disfork.cli.common import (
    AppClientIdOption,
    AppSlugOption,
    console,
    run_async_command,
    show_info,
    show_success,
)
from disfork.config import get_settings
from disfork.github import DeviceAuthorizationPoller
from disfork.schemas import DeviceCode

INSTALL_URL = "https://github.com/apps/{slug}/installations/select_target"


def is_interactive() -> bool:
    """Whether stdin is attached to a terminal."""
    return sys.stdin.isatty()


def show_device_code(code: DeviceCode) -> None:
    """Tell the user where to enter the device code."""
    console.print(f"[bold cyan]→[/bold cyan] Please visit: [bold green]{code.verification_uri}[/]")
    console.print(f"[bold cyan]→[/bold cyan] And enter code: [bold yellow]{code.user_code}[/]")
    console.print()
    console.print("[dim]Waiting for authorization...[/dim]")


async def request_token(client_id: str) -> str:
    """Run the device flow against GitHub and return the access token."""
    async with httpx.AsyncClient(timeout=30.0) as http:
        poller = DeviceAuthorizationPoller(client_id, http_client=http)
        return await poller.authorize(on_code=show_device_code)


def device_login(
    *,
    app_client_id: str | None = None,
    app_slug: str | None = None,
    account: str | None = None,
) -> str:
    """Walk the user through installing the GitHub App and authorizing it.

    Args:
        app_client_id: Client ID override (defaults to settings)
        app_slug: App slug override (defaults to settings)
        account: Account the app should be installed on, if not the user's own

    Returns:
        The access token

    Raises:
        typer.Exit: If the flow fails
    """
    settings = get_settings()
    client_id = app_client_id or settings.app_client_id
    slug = app_slug or settings.app_slug

    if account:
        show_info(f"Please install the GitHub App on user/org {account}:")
    else:
        show_info("Please install the GitHub App on your personal account:")
    show_info(f"Visit: {INSTALL_URL.format(slug=slug)}")

    if is_interactive():
        show_info("After installation, press Enter to continue...")
        input()

    token = run_async_command(request_token(client_id), error_prefix="Authorization failed")
    show_success("Authorization successful!")
    return token


def login(
    app_client_id: AppClientIdOption = None,
    app_slug: AppSlugOption = None,
) -> None:
    """Authorize DisFork through the device flow and print the token.

    Export the printed token as GITHUB_TOKEN to skip the flow next time.

    Examples:
        disfork login
        disfork login --app-slug my-disfork-app --app-client-id Iv1.abc123
    """
    token = device_login(app_client_id=app_client_id, app_slug=app_slug)
    console.print()
    console.print(token, highlight=False, soft_wrap=True)
