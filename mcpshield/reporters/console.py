"""Console reporter with Rich formatting."""

from __future__ import annotations

from collections import Counter
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from mcpshield import __version__
from mcpshield.models import ScanResult, Severity, Vulnerability


class ConsoleReporter:
    """Reporter that outputs scan results to the console with Rich formatting."""

    def __init__(self, console: Optional[Console] = None) -> None:
        """Initialize the console reporter.

        Args:
            console: Rich Console instance (creates new one if not provided)
        """
        self.console = console or Console()

    def banner(self) -> None:
        """Print the tool banner."""
        self.console.print(
            Panel.fit(
                f"[bold blue]MCP-Shield[/bold blue] v{__version__}\n"
                "[blue]Security Scanner for Model Context Protocol Servers[/blue]",
                border_style="blue",
            )
        )

    def report(self, results: List[ScanResult]) -> None:
        """Output every scan result to the console.

        Args:
            results: One scan result per configuration file
        """
        vulnerabilities = [v for r in results for v in r.vulnerabilities]

        for result in results:
            self._print_server_errors(result)

        if not vulnerabilities:
            self.console.print(
                Panel(
                    "[green]No security issues found![/green]",
                    title="Scan Complete",
                    border_style="green",
                )
            )
            return

        self._print_summary(vulnerabilities)

        for result in results:
            if not result.vulnerabilities:
                continue
            self.console.print()
            self.console.print(
                f"[yellow]⚠️  Vulnerabilities Detected in[/yellow] "
                f"[bold]{escape(result.config_path or '-')}[/bold]"
            )
            self.console.print()
            for index, vulnerability in enumerate(result.vulnerabilities, start=1):
                self._print_vulnerability(index, vulnerability)

    def _print_summary(self, vulnerabilities: List[Vulnerability]) -> None:
        """Print summary table of vulnerabilities."""
        counts = Counter(v.severity for v in vulnerabilities)
        table = Table(title="Scan Summary", show_header=True)
        table.add_column("Severity", style="bold")
        table.add_column("Count", justify="right")

        for severity in [Severity.HIGH, Severity.MEDIUM, Severity.LOW]:
            if counts.get(severity):
                table.add_row(Text(severity.label, style=severity.color), str(counts[severity]))

        table.add_row(Text("TOTAL", style="bold"), str(len(vulnerabilities)))

        self.console.print()
        self.console.print(table)

    def _print_server_errors(self, result: ScanResult) -> None:
        for error in result.server_errors:
            self.console.print(
                f"[red]✗[/red] Server [bold]{escape(error.server)}[/bold] "
                f"({error.kind}): [red]{escape(error.message)}[/red]"
            )

    def _print_vulnerability(self, index: int, vulnerability: Vulnerability) -> None:
        """Print a single vulnerability."""
        severity = vulnerability.severity
        risk = f"[{severity.color}]{severity.label}[/{severity.color}]"

        if vulnerability.tool is None and vulnerability.cross_ref_matches:
            self.console.print(f"{index}. [yellow]Cross-Origin Reference Detected[/yellow]")
            self.console.print(
                f"   Risk Level: {risk} (Across Servers: [bold]{escape(vulnerability.server)}[/bold])"
            )
            self.console.print("   Details:")
            for ref in vulnerability.cross_ref_matches:
                self.console.print(
                    f"     – Server [bold]{escape(ref.server)}[/bold], Tool [bold]{escape(ref.tool)}"
                    f'[/bold] references "[bold]{escape(ref.referenced_name)}[/bold]": '
                    f"[dim]{escape(ref.context)}[/dim]"
                )
            self.console.print()
            return

        self.console.print(f"{index}. Server: [bold]{escape(vulnerability.server)}[/bold]")
        if vulnerability.tool:
            self.console.print(f"   Tool: [bold]{escape(vulnerability.tool)}[/bold]")
        self.console.print(f"   Risk Level: {risk}")

        opinion = vulnerability.secondary_opinion
        if opinion and opinion.overall_risk:
            ai = opinion.overall_risk
            self.console.print(f"   AI Risk Level: [{ai.color}]{ai.label}[/{ai.color}]")

        self.console.print("   Issues:")
        details = vulnerability.detection_details
        if details is not None:
            for match in details.hidden_instructions:
                self._print_issue("Hidden instructions", match.match)
            for match in details.shadowing:
                self._print_issue("Shadowing detected", match.match)
            for match in details.sensitive_file_access:
                self._print_issue("Sensitive file access", match.match)
            for match in details.exfiltration_channels:
                self._print_issue("Potential exfiltration", f"{match.param} ({match.param_type})")
        for ref in vulnerability.cross_ref_matches:
            self._print_issue("Cross-origin reference", f"{ref.referenced_name}: {ref.context}")

        if opinion:
            self.console.print()
            self.console.print("   AI Analysis:")
            self.console.print("     " + escape(opinion.analysis).replace("\n", "\n     "))

        self.console.print()

    def _print_issue(self, label: str, text: str) -> None:
        self.console.print(
            f"     – {label}: [dim]{escape(text).replace(chr(10), chr(10) + '       ')}[/dim]"
        )
