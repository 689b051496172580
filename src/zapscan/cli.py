"""zapscan CLI - drive a ZAP engine through spider, active scan and results."""

import asyncio
import signal
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from zapscan.config import get_history_path, load_scan_settings
from zapscan.log import setup_logging
from zapscan.modules.history import JsonHistoryStore
from zapscan.modules.scan import (
    CancellationToken,
    EngineUnreachableError,
    ErrorAudience,
    Finding,
    ProgressEvent,
    ScanError,
    ScanMode,
    ScanOrchestrator,
    ScanState,
    probe_engine,
)
from zapscan.modules.scan.orchestrator import client_from_settings

app = typer.Typer(
    name="zapscan",
    help="Run OWASP ZAP spider and active scans through the ZAP API",
    no_args_is_help=True,
)
console = Console()

SEVERITY_STYLES = {"high": "bold red", "medium": "yellow", "low": "cyan"}


@app.command()
def version() -> None:
    """Show the installed zapscan version."""
    from importlib.metadata import PackageNotFoundError, version as pkg_version

    try:
        current_version = pkg_version("zapscan")
    except PackageNotFoundError:
        current_version = "0.0.0+unknown"

    console.print(f"zapscan {current_version}")


class ProgressPrinter:
    """Print progress events, skipping repeats of the same reading."""

    def __init__(self, out: Console):
        self._out = out
        self._last: tuple[str, str, int] | None = None

    def __call__(self, event: ProgressEvent) -> None:
        key = (event.state.value, event.phase, event.progress)
        if key == self._last:
            return
        self._last = key
        if event.state is ScanState.ERROR:
            return
        style = "green" if event.state is ScanState.COMPLETED else "dim"
        if event.state is ScanState.CANCELLED:
            style = "yellow"
        self._out.print(f"[{style}]{escape(f'[{event.phase}] {event.message}')}[/{style}]")


def render_findings(findings: list[Finding]) -> None:
    """Print findings as a table, highest severity first."""
    order = {"high": 0, "medium": 1, "low": 2}
    table = Table(title=f"{len(findings)} finding(s)")
    table.add_column("Severity")
    table.add_column("Title")
    table.add_column("Confidence")
    table.add_column("URL", overflow="fold")
    for finding in sorted(findings, key=lambda item: order.get(item.severity, 3)):
        style = SEVERITY_STYLES.get(finding.severity, "")
        table.add_row(
            f"[{style}]{finding.severity}[/{style}]" if style else finding.severity,
            escape(finding.title),
            finding.confidence or "-",
            escape(finding.url or "-"),
        )
    console.print(table)


async def _run_with_interrupt(
    orchestrator: ScanOrchestrator, target: str, mode: ScanMode, use_cache: bool
) -> list[Finding]:
    token = CancellationToken()
    loop = asyncio.get_running_loop()
    installed = False
    if sys.platform != "win32":
        try:
            loop.add_signal_handler(signal.SIGINT, token.cancel)
            installed = True
        except (RuntimeError, ValueError):
            installed = False
    try:
        return await orchestrator.run(
            target,
            mode=mode,
            on_progress=ProgressPrinter(console),
            is_cancelled=token,
            use_cache=use_cache,
        )
    finally:
        if installed:
            loop.remove_signal_handler(signal.SIGINT)


@app.command()
def scan(
    url: str = typer.Argument(..., help="Target URL (https:// is assumed when missing)"),
    full: bool = typer.Option(False, "--full", help="Spider the site, then scan recursively"),
    no_cache: bool = typer.Option(False, "--no-cache", help="Ignore cached results"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
    project_dir: Path | None = typer.Option(
        None, "--project", help="Directory holding a .zapscan/.env override"
    ),
) -> None:
    """Scan a URL and print the findings."""
    setup_logging(verbose=verbose)
    settings = load_scan_settings(project_dir)
    history = JsonHistoryStore(get_history_path(project_dir))
    orchestrator = ScanOrchestrator(settings=settings, history=history)
    mode = ScanMode.FULL if full else ScanMode.QUICK

    console.print(f"[blue]Starting {mode.value} scan of {escape(url)}...[/blue]")
    try:
        findings = asyncio.run(_run_with_interrupt(orchestrator, url, mode, not no_cache))
    except ScanError as exc:
        color = "yellow" if exc.audience is ErrorAudience.OPERATOR else "red"
        console.print(f"[{color}]{escape(exc.user_message)}[/{color}]")
        raise typer.Exit(1) from exc

    if findings:
        render_findings(findings)
    else:
        console.print("[green]Scan complete! No issues reported.[/green]")


@app.command()
def check(
    project_dir: Path | None = typer.Option(
        None, "--project", help="Directory holding a .zapscan/.env override"
    ),
) -> None:
    """Check that the ZAP API is reachable."""
    settings = load_scan_settings(project_dir)

    async def run_probe() -> str:
        async with client_from_settings(settings) as client:
            return await probe_engine(client, timeout=settings.probe_timeout)

    try:
        engine_version = asyncio.run(run_probe())
    except EngineUnreachableError as exc:
        console.print(f"[red]{escape(exc.user_message)}[/red]")
        raise typer.Exit(1) from exc
    console.print(f"[green]ZAP {engine_version or 'unknown version'} reachable[/green]")


@app.command()
def history(
    limit: int = typer.Option(20, "--limit", "-n", help="Number of entries to show"),
    project_dir: Path | None = typer.Option(
        None, "--project", help="Directory holding a .zapscan/.env override"
    ),
) -> None:
    """List recently completed scans."""
    entries = JsonHistoryStore(get_history_path(project_dir)).load()[: max(0, limit)]
    if not entries:
        console.print("[dim]No scans recorded yet.[/dim]")
        return

    table = Table(title="Scan history")
    table.add_column("When")
    table.add_column("URL", overflow="fold")
    table.add_column("High", justify="right")
    table.add_column("Medium", justify="right")
    table.add_column("Low", justify="right")
    for entry in entries:
        table.add_row(
            entry.timestamp,
            escape(entry.url),
            str(entry.counts.high),
            str(entry.counts.medium),
            str(entry.counts.low),
        )
    console.print(table)


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
