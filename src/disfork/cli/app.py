"""Main CLI application for DisFork."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from disfork import __version__
from disfork.cli import auth as auth_cmd
from disfork.cli import scan as scan_cmd
from disfork.config import get_settings
from disfork.logging import setup_logging

app = typer.Typer(
    name="disfork",
    help="Find and delete GitHub forks that carry no changes of their own.",
    add_completion=False,
)
console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"disfork version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Only log errors.",
        ),
    ] = False,
) -> None:
    """DisFork - clean up useless fork repositories."""
    settings = get_settings()
    log_config = settings.logging

    # Setup logging with CLI overrides
    setup_logging(
        level=settings.log_level,
        verbose=verbose,
        quiet=quiet,
        log_file=Path(log_config.log_file) if log_config.log_file else None,
        rotation=log_config.rotation,
        retention=log_config.retention,
        serialize=log_config.serialize,
    )


# Register commands
app.command("scan")(scan_cmd.scan)
app.command("login")(auth_cmd.login)


if __name__ == "__main__":
    app()
