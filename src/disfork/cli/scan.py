"""Scan command: find useless forks and delete the selected ones."""

import asyncio
import json
import re
from typing import Annotated

import typer
from rich.progress import BarColumn, Progress, TextColumn
from rich.prompt import Confirm, Prompt
from rich.table import Table

from disfork.cli.auth import device_login, is_interactive
from disfork.cli.common import (
    AppClientIdOption,
    AppSlugOption,
    DryRunOption,
    OutputFormatOption,
    TokenOption,
    console,
    run_async_command,
    show_error,
    show_info,
    show_success,
    track_progress,
)
from disfork.config import get_settings
from disfork.github import (
    AdmissionGate,
    BatchAnalysisResult,
    DeletionResult,
    ForkBatchCoordinator,
    ForkClassifier,
    ForkDeletionService,
    ForkInfo,
    GitHubClient,
    OutputFormat,
    ProgressTracker,
    default_selection,
    resolve_selection,
)
from disfork.logging import LogContext, bind_account

_RANGE = re.compile(r"^(\d+)-(\d+)$")


def parse_selection(text: str) -> list[int]:
    """Parse a selection such as ``"0 2 4-6"`` or ``"1,3"`` into indices.

    ``none`` (or an empty string) selects nothing.

    Raises:
        typer.BadParameter: If a token is not an index or a range
    """
    text = text.strip()
    if not text or text.lower() == "none":
        return []

    indices: list[int] = []
    for token in re.split(r"[,\s]+", text):
        if not token:
            continue
        if token.isdigit():
            indices.append(int(token))
            continue
        match = _RANGE.match(token)
        if match is None:
            raise typer.BadParameter(f"Invalid selection: {token}")
        start, end = int(match.group(1)), int(match.group(2))
        if end < start:
            raise typer.BadParameter(f"Invalid range: {token}")
        indices.extend(range(start, end + 1))
    return indices


def _format_indices(indices: list[int]) -> str:
    return " ".join(str(i) for i in indices) if indices else "none"


def _print_analysis(result: BatchAnalysisResult) -> None:
    """Print the classified forks as a numbered table."""
    table = Table(title="Fork Repositories")
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Repository")
    table.add_column("Verdict")
    table.add_column("Reason", style="dim")

    for index, info in enumerate(result.forks):
        verdict = "[red]useless[/red]" if info.is_useless else "[green]keep[/green]"
        table.add_row(str(index), info.full_name, verdict, info.reason.value)

    console.print()
    console.print(table)

    if result.failures:
        console.print()
        console.print(f"[bold]Failed to analyze {len(result.failures)} fork(s):[/bold]")
        for failure in result.failures:
            console.print(f"  {failure.full_name}: {failure.error}")

    console.print()
    show_info(f"Found {len(result.forks)} fork repositories")
    console.print(
        f"[cyan]→[/cyan] [yellow]{len(result.useless)}[/yellow] are useless, "
        f"selected by default ({result.duration_seconds:.1f}s)"
    )


def _prompt_selection(forks: list[ForkInfo]) -> list[ForkInfo]:
    """Ask which forks to delete, defaulting to the useless ones."""
    default = _format_indices(default_selection(forks))
    while True:
        answer = Prompt.ask(
            "Select repositories to delete (indices or ranges, 'none' for nothing)",
            default=default,
            console=console,
        )
        try:
            return resolve_selection(forks, parse_selection(answer))
        except (typer.BadParameter, IndexError) as e:
            show_error(str(e))


async def _cooldown(seconds: int, *, is_batch: bool) -> None:
    """Count down before deleting; Ctrl+C aborts."""
    if seconds <= 0:
        return
    action = "batch deletion" if is_batch else "deletion"
    console.print()
    console.print(f"[bold yellow]⏳[/bold yellow] [bold]{action}[/bold] cooldown period...")
    with Progress(
        TextColumn("Cooling down"),
        BarColumn(bar_width=40, complete_style="yellow", finished_style="yellow"),
        TextColumn("{task.completed:.0f}s/{task.total:.0f}s"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("cooldown", total=seconds)
        for _ in range(seconds):
            await asyncio.sleep(1)
            progress.advance(task)


def scan(
    token: TokenOption = None,
    account: Annotated[
        str | None,
        typer.Option(
            "--account",
            "-a",
            help="User or organization to scan (defaults to the authenticated user)",
        ),
    ] = None,
    auto: Annotated[
        bool,
        typer.Option(
            "--auto",
            help="Skip interactive selection and delete all useless forks",
        ),
    ] = False,
    dry_run: DryRunOption = False,
    parallel: Annotated[
        int | None,
        typer.Option(
            "--parallel",
            "-p",
            min=1,
            help="Maximum in-flight GitHub API requests",
        ),
    ] = None,
    max_concurrent_forks: Annotated[
        int | None,
        typer.Option(
            "--max-concurrent-forks",
            min=1,
            help="Maximum forks analyzed at the same time",
        ),
    ] = None,
    max_branches: Annotated[
        int | None,
        typer.Option(
            "--max-branches",
            min=0,
            help="Keep forks with more branches than this without comparing",
        ),
    ] = None,
    app_client_id: AppClientIdOption = None,
    app_slug: AppSlugOption = None,
    output_format: OutputFormatOption = OutputFormat.TEXT,
    yes: Annotated[
        bool,
        typer.Option(
            "--yes",
            "-y",
            help="Skip the confirmation prompt and the cooldown",
        ),
    ] = False,
) -> None:
    """Find forks with no changes of their own and delete them.

    A fork is useless when it has no branches, its upstream is gone, or
    every branch exists upstream and is 0 commits ahead.

    Examples:
        disfork scan
        disfork scan --account my-org --dry-run
        disfork scan --auto --yes
        disfork scan --auto --dry-run --format json
    """
    settings = get_settings()
    as_json = output_format == OutputFormat.JSON

    if as_json and auto and not (dry_run or yes):
        console.print("[red]Error:[/red] --format json with --auto requires --yes or --dry-run")
        raise typer.Exit(1)

    gate_capacity = parallel or settings.analysis.parallel

    # Authentication
    if token:
        if not as_json:
            show_info("Using GitHub token from the environment")
    else:
        if as_json:
            console.print("[red]Error:[/red] --format json requires --token or GITHUB_TOKEN")
            raise typer.Exit(1)
        token = device_login(app_client_id=app_client_id, app_slug=app_slug, account=account)
    access_token: str = token

    # Analysis
    async def _analyze() -> tuple[str, BatchAnalysisResult]:
        async with GitHubClient(access_token, gate=AdmissionGate(gate_capacity)) as client:
            target = account or await client.get_authenticated_login()
            if not as_json:
                console.print(f"[dim]Fetching repositories of {target}...[/dim]")
            repos = await client.list_repositories(target)

            tracker = ProgressTracker(name="fork analysis")
            coordinator = ForkBatchCoordinator(
                ForkClassifier(client, max_branches=max_branches),
                max_concurrent_forks=max_concurrent_forks,
                progress=tracker,
            )
            bind_account(target).info("Listed {} repositories", len(repos))
            with LogContext(account=target), track_progress(
                tracker, "Analyzing", enabled=not as_json
            ):
                result = await coordinator.analyze(repos)
            return target, result

    target, analysis = run_async_command(_analyze(), error_prefix="Analysis failed")

    if not as_json:
        if analysis.total == 0:
            show_success(f"No fork repositories found for {target}!")
            return
        _print_analysis(analysis)

    # Selection
    if auto:
        selected = resolve_selection(analysis.forks, default_selection(analysis.forks))
    elif as_json or not is_interactive():
        selected = []
    else:
        console.print()
        selected = _prompt_selection(analysis.forks)

    if as_json and not selected:
        console.print_json(json.dumps({"account": target, "analysis": analysis.to_dict()}))
        return

    if not as_json:
        if not selected:
            show_info("No repositories selected for deletion")
            return
        show_info(f"Selected {len(selected)} repositories for deletion:")
        for info in selected:
            console.print(f"  - {info.full_name}")

    is_batch = len(selected) > 1

    if not dry_run and not yes:
        console.print()
        question = (
            f"Are you sure you want to delete {len(selected)} repositories?"
            if is_batch
            else "Are you sure you want to delete this repository?"
        )
        if not Confirm.ask(question, default=False, console=console):
            show_info("Deletion cancelled")
            return

    # Deletion
    async def _delete() -> DeletionResult:
        if not dry_run and not yes:
            cooldown = (
                settings.deletion.batch_cooldown_seconds
                if is_batch
                else settings.deletion.single_cooldown_seconds
            )
            await _cooldown(cooldown, is_batch=is_batch)

        async with GitHubClient(access_token, gate=AdmissionGate(gate_capacity)) as client:
            tracker = ProgressTracker(name="fork deletion")
            service = ForkDeletionService(client, progress=tracker)
            with track_progress(tracker, "Deleting", enabled=not as_json and not dry_run):
                return await service.delete(selected, dry_run=dry_run)

    deletion = run_async_command(_delete(), error_prefix="Deletion failed")

    if as_json:
        console.print_json(
            json.dumps(
                {
                    "account": target,
                    "analysis": analysis.to_dict(),
                    "deletion": deletion.to_dict(),
                }
            )
        )
        if not deletion.all_succeeded:
            raise typer.Exit(1)
        return

    if dry_run:
        show_info("Dry run mode - no repositories will be deleted")
        return

    for name in deletion.deleted:
        show_success(f"Deleted {name}")
    for name in deletion.already_gone:
        show_success(f"{name} was already deleted")
    for name, error in deletion.failed:
        show_error(f"Failed to delete {name}: {error}")

    if not deletion.all_succeeded:
        raise typer.Exit(1)
    show_success("All done!")
