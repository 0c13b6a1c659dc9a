"""Command-line interface for mcpshield."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from mcpshield import __version__
from mcpshield.analysis import ClaudeAnalyzer
from mcpshield.analysis.claude import DEFAULT_MODEL
from mcpshield.errors import ConfigurationError
from mcpshield.models import ScanResult, Severity
from mcpshield.reporters import ConsoleReporter, JSONReporter, ProgressTree, SARIFReporter
from mcpshield.scanner import MCPShieldScanner
from mcpshield.scanner.mcp import MCPConnector, find_mcp_configs, load_config
from mcpshield.scanner.mcp.connector import DEFAULT_CONNECTION_TIMEOUT

app = typer.Typer(
    name="mcpshield",
    help="Security scanner for Model Context Protocol (MCP) servers.",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)
logger = logging.getLogger("mcpshield")


class OutputFormat(str, Enum):
    """Output format options."""

    console = "console"
    json = "json"
    sarif = "sarif"


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _split_list(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


@app.command()
def scan(
    path: Optional[Path] = typer.Option(
        None,
        "--path",
        "-p",
        help="MCP config file to scan (otherwise uses standard locations)",
    ),
    claude_api_key: Optional[str] = typer.Option(
        None,
        "--claude-api-key",
        envvar="ANTHROPIC_API_KEY",
        help="Optional Anthropic API key for a secondary AI analysis",
    ),
    claude_model: str = typer.Option(
        DEFAULT_MODEL,
        "--claude-model",
        help="Claude model used for the secondary analysis",
    ),
    identify_as: Optional[str] = typer.Option(
        None,
        "--identify-as",
        help="Identify as a different client name (e.g., claude-desktop) for testing",
    ),
    safe_list: Optional[str] = typer.Option(
        None,
        "--safe-list",
        help="Comma separated server names that tools may reference",
    ),
    format: OutputFormat = typer.Option(
        OutputFormat.console,
        "--format",
        "-f",
        help="Output format",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file path (for json/sarif formats)",
    ),
    timeout: float = typer.Option(
        DEFAULT_CONNECTION_TIMEOUT,
        "--timeout",
        help="Seconds allowed to connect to each server",
    ),
    fail_on: Optional[str] = typer.Option(
        None,
        "--fail-on",
        help="Fail (exit code 1) if findings at this severity or higher (high, medium, low)",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug logging",
    ),
) -> None:
    """Scan MCP servers for vulnerable tool descriptions.

    Examples:

        mcpshield scan

        mcpshield scan --path ~/.cursor/mcp.json

        mcpshield scan --safe-list github,slack --format json -o results.json

        mcpshield scan --claude-api-key sk-ant-... --fail-on high
    """
    _configure_logging(debug)

    fail_severity = None
    if fail_on:
        try:
            fail_severity = Severity(fail_on.lower())
        except ValueError:
            console.print(
                f"[red]Invalid severity for --fail-on: {fail_on}. Use: high, medium, low[/red]"
            )
            raise typer.Exit(code=2)

    interactive = format == OutputFormat.console
    notices = console if interactive else err_console
    reporter = ConsoleReporter(console)
    if interactive:
        reporter.banner()

    paths = [path] if path else find_mcp_configs()
    if not paths:
        notices.print("[yellow]No MCP server configurations found.[/yellow]")
        return

    connector = MCPConnector(timeout=timeout)
    analyzer = ClaudeAnalyzer(claude_api_key, model=claude_model) if claude_api_key else None
    safe_names = _split_list(safe_list)

    results: List[ScanResult] = []
    for config_path in paths:
        try:
            config = load_config(config_path)
        except ConfigurationError as e:
            logger.error("Error scanning %s: %s", config_path, e)
            notices.print(f"[red]✗ Error scanning {config_path}: {e}[/red]")
            continue

        if not config.servers:
            notices.print(f"[yellow]No MCP servers found in {config_path}[/yellow]")
            continue

        scanner = MCPShieldScanner(
            config,
            connector=connector,
            analyzer=analyzer,
            identify_as=identify_as,
            safe_list=safe_names,
        )
        if interactive:
            console.print(f'[bold]Scanning "{config_path}"[/bold]')
            with ProgressTree(config.servers.keys(), console=console) as progress:
                scanner.sink = progress
                results.append(scanner.scan())
        else:
            results.append(scanner.scan())

    if format == OutputFormat.console:
        reporter.report(results)
    elif format == OutputFormat.json:
        rendered = JSONReporter().report(results, output)
        if not output:
            typer.echo(rendered)
    elif format == OutputFormat.sarif:
        rendered = SARIFReporter().report(results, output)
        if not output:
            typer.echo(rendered)

    if fail_severity is not None:
        for result in results:
            if any(v.severity.rank >= fail_severity.rank for v in result.vulnerabilities):
                raise typer.Exit(code=1)


@app.command()
def locate() -> None:
    """List the MCP client configuration files found on this machine."""
    paths = find_mcp_configs()
    if not paths:
        console.print("[yellow]No MCP server configurations found.[/yellow]")
        return
    for config_path in paths:
        console.print(str(config_path))


@app.command()
def version() -> None:
    """Show the mcpshield version."""
    console.print(f"mcpshield {__version__}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
