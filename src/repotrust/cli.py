"""CLI entry point for repotrust."""

import asyncio
import json
import logging
import os
from enum import Enum
from pathlib import Path

# Load .env file if it exists
from dotenv import load_dotenv
load_dotenv()

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from repotrust.checker.report import run_checks
from repotrust.checker.runner import DEFAULT_CHECK_TIMEOUT, DEFAULT_CONCURRENCY
from repotrust.checks import build_registry
from repotrust.clients import (
    BestPracticesClient,
    GitHubRepoClient,
    LocalDirClient,
    OSVClient,
    RepoClient,
    parse_repo_url,
)
from repotrust.models.evidence import Platform
from repotrust.models.results import CheckStatus, DetailType, Report

app = typer.Typer(help="Supply-chain trust checks for source repositories.")

console = Console()


class OutputFormat(str, Enum):
    TABLE = "table"
    JSON = "json"


def _env_number(name: str, default: float | None, cast: type = float) -> float | None:
    """Read a numeric setting from the environment."""
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    try:
        return cast(value)
    except ValueError:
        console.print(f"[red]Invalid value for {name}: {value}[/red]")
        raise typer.Exit(2)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _score_style(score: int) -> str:
    if score < 0:
        return "dim"
    if score >= 8:
        return "green"
    if score >= 5:
        return "yellow"
    return "red"


def _make_client(repo: str | None, local: Path | None) -> RepoClient:
    if local is not None:
        try:
            return LocalDirClient(local)
        except NotADirectoryError:
            console.print(f"[red]Not a directory: {local}[/red]")
            raise typer.Exit(1)

    ref = parse_repo_url(repo or "")
    if ref is None:
        console.print(f"[red]Could not parse repository: {repo}[/red]")
        raise typer.Exit(1)
    if ref.platform != Platform.GITHUB:
        console.print(f"[red]Only GitHub repositories are supported: {repo}[/red]")
        raise typer.Exit(1)
    return GitHubRepoClient(ref, token=os.environ.get("GITHUB_TOKEN"))


@app.command()
def scan(
    repo: str | None = typer.Argument(None, help="Repository URL or owner/name"),
    checks: str | None = typer.Option(
        None, "--checks", "-c", help="Comma-separated check names (default: all)"
    ),
    local: Path | None = typer.Option(
        None, "--local", "-l", help="Scan a local checkout instead of a remote repository"
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.TABLE, "--format", "-f", help="Output format"
    ),
    show_details: bool = typer.Option(
        False, "--show-details", "-d", help="Show per-check log messages"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Run checks against one repository."""
    if repo is None and local is None:
        console.print("[red]Provide a repository or --local PATH[/red]")
        raise typer.Exit(1)

    _setup_logging(verbose)
    names = [c.strip() for c in checks.split(",") if c.strip()] if checks else None
    report = asyncio.run(_scan(repo, local, names, output_format))

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(report.model_dump(mode="json")))
    else:
        _print_report(report, show_details)


async def _scan(
    repo: str | None,
    local: Path | None,
    names: list[str] | None,
    output_format: OutputFormat,
) -> Report:
    """Async implementation of scan."""
    # Settings are validated before the client opens a connection pool.
    concurrency = int(_env_number("REPOTRUST_CONCURRENCY", DEFAULT_CONCURRENCY, int))
    check_timeout = _env_number("REPOTRUST_CHECK_TIMEOUT", DEFAULT_CHECK_TIMEOUT)
    run_timeout = _env_number("REPOTRUST_RUN_TIMEOUT", None)
    registry = build_registry()

    client = _make_client(repo, local)
    osv = OSVClient()
    badges = BestPracticesClient()
    try:
        if output_format == OutputFormat.JSON:
            report, _ = await run_checks(
                client,
                registry,
                names,
                vuln_client=osv,
                badge_client=badges,
                concurrency=concurrency,
                check_timeout=check_timeout,
                run_timeout=run_timeout,
            )
            return report

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task(f"Scanning {client.repo.display_name}...", total=None)

            def on_status(name: str, status: CheckStatus) -> None:
                if status == CheckStatus.RUNNING:
                    progress.update(task, description=f"Running {name}...")

            report, _ = await run_checks(
                client,
                registry,
                names,
                vuln_client=osv,
                badge_client=badges,
                concurrency=concurrency,
                check_timeout=check_timeout,
                run_timeout=run_timeout,
                on_status=on_status,
            )
        return report
    finally:
        await client.close()


def _print_report(report: Report, show_details: bool) -> None:
    console.print()
    overall = report.overall_score
    overall_text = f"{overall:.1f}/10" if overall is not None else "n/a"
    console.print(f"[bold]{report.repo.display_name}[/bold]  overall score: [bold]{overall_text}[/bold]")
    console.print()

    table = Table(title="Check Results")
    table.add_column("Check", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Risk", style="dim")
    table.add_column("Reason", style="white", max_width=70)

    for entry in report.checks:
        result = entry.result
        score = "?" if result.is_inconclusive else str(result.score)
        reason = result.reason
        if result.error:
            reason = f"{reason}\n[red]{result.error}[/red]" if reason else f"[red]{result.error}[/red]"
        style = _score_style(result.score)
        table.add_row(result.name, f"[{style}]{score}[/{style}]", entry.risk.value, reason)

    console.print(table)

    if not show_details:
        return

    styles = {DetailType.INFO: "green", DetailType.WARN: "yellow", DetailType.DEBUG: "dim"}
    for entry in report.checks:
        result = entry.result
        if not result.details:
            continue
        console.print()
        console.print(f"[bold]{result.name}[/bold]")
        for detail in result.details:
            msg = detail.msg
            where = ""
            if msg.path:
                where = f" ({msg.path}:{msg.offset})" if msg.offset else f" ({msg.path})"
            style = styles[detail.type]
            console.print(f"  [{style}]{detail.type.value}[/{style}] {msg.text}{where}")


@app.command()
def list_checks() -> None:
    """List the available checks."""
    registry = build_registry()

    table = Table(title=f"{len(registry)} Checks")
    table.add_column("Check", style="cyan")
    table.add_column("Risk", style="dim")
    table.add_column("Modes")
    table.add_column("Description", style="white", max_width=70)

    for name in registry.names():
        reg = registry.get(name)
        modes = ", ".join(sorted(m.value for m in reg.supported_modes))
        table.add_row(name, reg.risk.value, modes, reg.description)

    console.print(table)


if __name__ == "__main__":
    app()
