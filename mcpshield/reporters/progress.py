"""Live progress tree fed by scan progress events."""

from __future__ import annotations

from typing import Dict, Iterable, Optional

from rich.console import Console
from rich.live import Live
from rich.markup import escape
from rich.tree import Tree

from mcpshield.models import (
    ProgressEvent,
    ServerConnected,
    ServerFailed,
    Severity,
    ToolAnalyzed,
    ToolScanning,
)


class ProgressTree:
    """Render server and tool states as a Rich tree.

    Use as a context manager around the scan and pass the instance as the
    scanner's progress sink.
    """

    def __init__(
        self,
        server_names: Iterable[str],
        console: Optional[Console] = None,
        live: bool = True,
    ) -> None:
        """Initialize the tree with every server pending.

        Args:
            server_names: Configured server names, in display order
            console: Rich Console instance (creates new one if not provided)
            live: Refresh the terminal on each event
        """
        self.console = console or Console()
        names = list(server_names)
        self.tree = Tree(f"Found {len(names)} server{'s' if len(names) != 1 else ''}:")
        self.server_nodes: Dict[str, Tree] = {}
        self.tool_nodes: Dict[str, Tree] = {}
        for name in names:
            self.server_nodes[name] = self.tree.add(f"○ [bold]{escape(name)}[/bold] connecting...")
        self._live = Live(self.tree, console=self.console, auto_refresh=False) if live else None

    def __enter__(self) -> "ProgressTree":
        if self._live is not None:
            self._live.start()
        return self

    def __exit__(self, *exc_info) -> None:
        if self._live is not None:
            self._live.refresh()
            self._live.stop()
        else:
            self.console.print(self.tree)

    def __call__(self, event: ProgressEvent) -> None:
        if isinstance(event, ServerConnected):
            self._server_connected(event)
        elif isinstance(event, ServerFailed):
            node = self.server_nodes.get(event.server_name)
            if node is not None:
                node.label = (
                    f"[red]✗[/red] [bold]{escape(event.server_name)}[/bold] — "
                    f"[red]{escape(event.error)}[/red]"
                )
        elif isinstance(event, ToolScanning):
            node = self.tool_nodes.get(self._key(event.server_name, event.tool_name))
            if node is not None:
                node.label = f"○ [bold]{escape(event.tool_name)}[/bold] — scanning..."
        elif isinstance(event, ToolAnalyzed):
            self._tool_analyzed(event)
        else:
            return

        if self._live is not None:
            self._live.refresh()

    def _server_connected(self, event: ServerConnected) -> None:
        node = self.server_nodes.get(event.server_name)
        if node is None:
            return
        plural = "s" if event.tool_count != 1 else ""
        node.label = f"● [bold]{escape(event.server_name)}[/bold] ({event.tool_count} tool{plural})"
        for tool_name in event.tools:
            self.tool_nodes[self._key(event.server_name, tool_name)] = node.add(
                f"○ [bold]{escape(tool_name)}[/bold] — pending"
            )

    def _tool_analyzed(self, event: ToolAnalyzed) -> None:
        node = self.tool_nodes.get(self._key(event.server_name, event.tool_name))
        if node is None:
            return
        if event.has_issues:
            severity = event.severity or Severity.HIGH
            issue = escape(event.issue_type or "Prompt injection detected")
            node.label = (
                f"[red]✗[/red] [bold]{escape(event.tool_name)}[/bold] — {issue} "
                f"[{severity.color}]\\[{severity.label} Risk][/{severity.color}]"
            )
        else:
            node.label = f"[green]✓[/green] [bold]{escape(event.tool_name)}[/bold] — Verified"

    @staticmethod
    def _key(server_name: str, tool_name: str) -> str:
        return f"{server_name}.{tool_name}"
