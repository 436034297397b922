"""Common CLI option factories and helpers.

This module centralizes the reusable CLI options shared by the scan and
login commands.

It also provides:
- `run_async_command`: Unified async execution with error handling for CLI commands
- `track_progress`: Renders a ProgressTracker as a rich progress bar
- Status line helpers shared by the commands
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine, Iterator
from contextlib import contextmanager
from typing import Annotated, TypeVar

import typer
from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn

from disfork.github.pacing import ProgressTracker, ProgressUpdate
from disfork.github.triage import OutputFormat

# Shared console instance for CLI output
console = Console()

T = TypeVar("T")


def run_async_command(
    coro: Coroutine[object, object, T],
    *,
    error_prefix: str = "Error",
) -> T:
    """Execute async code from synchronous CLI command with unified error handling.

    Uses asyncio.run() for clean event loop management. Catches exceptions,
    prints user-friendly error messages, and exits with code 1.

    Args:
        coro: Async coroutine to execute
        error_prefix: Prefix for error messages (default: "Error")

    Returns:
        Result from the coroutine

    Raises:
        typer.Exit: Re-raised from deliberate exits, or raised with code 1 on error

    Example:
        async def _list() -> list[GitHubRepository]:
            async with GitHubClient(token) as client:
                return await client.list_repositories("octocat")

        repos = run_async_command(_list(), error_prefix="Listing failed")
    """
    try:
        return asyncio.run(coro)
    except typer.Exit:
        # Re-raise deliberate exits (e.g., from validation helpers)
        raise
    except Exception as e:
        console.print(f"[red]{error_prefix}:[/red] {e}")
        raise typer.Exit(1) from None


# -----------------------------------------------------------------------------
# Status Lines
# -----------------------------------------------------------------------------


def show_info(message: str) -> None:
    console.print(f"[cyan]ℹ[/cyan] {message}")


def show_success(message: str) -> None:
    console.print(f"[green]✓[/green] {message}")


def show_error(message: str) -> None:
    console.print(f"[red]✗[/red] {message}")


@contextmanager
def track_progress(
    tracker: ProgressTracker,
    description: str,
    *,
    enabled: bool = True,
) -> Iterator[None]:
    """Render a ProgressTracker as a rich progress bar while the block runs.

    Args:
        tracker: Tracker the service under way advances
        description: Label shown before the bar
        enabled: If False, render nothing (e.g. for JSON output)
    """
    if not enabled:
        yield
        return

    with Progress(
        TextColumn("[bold]{task.description}"),
        BarColumn(bar_width=40, complete_style="cyan", finished_style="green"),
        MofNCompleteColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task(description, total=tracker.total or None)

        def _render(update: ProgressUpdate) -> None:
            progress.update(task, total=update.total or None, completed=update.processed)

        tracker.on_progress(_render)
        yield


# Options shared by the scan and login commands.

OutputFormatOption = Annotated[
    OutputFormat,
    typer.Option(
        "--format",
        "-f",
        help="Output format",
    ),
]
"""Output format option type for CLI commands.

Usage:
    def command(output_format: OutputFormatOption = OutputFormat.TEXT):
"""

DryRunOption = Annotated[
    bool,
    typer.Option(
        "--dry-run",
        help="Don't delete anything, just show what would be deleted",
    ),
]
"""Dry-run option type for CLI commands.

Usage:
    def command(dry_run: DryRunOption = False):
"""

TokenOption = Annotated[
    str | None,
    typer.Option(
        "--token",
        envvar="GITHUB_TOKEN",
        help="GitHub token. If not set, the device authorization flow is used.",
        show_default=False,
    ),
]
"""GitHub token option, read from GITHUB_TOKEN when not given.

Usage:
    def command(token: TokenOption = None):
"""

AppClientIdOption = Annotated[
    str | None,
    typer.Option(
        "--app-client-id",
        help="GitHub App client ID for the device flow",
    ),
]

AppSlugOption = Annotated[
    str | None,
    typer.Option(
        "--app-slug",
        help="GitHub App slug (used in the installation URL)",
    ),
]
