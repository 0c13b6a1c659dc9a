"""Scan orchestration across every server of an MCP configuration."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from mcpshield.errors import ServerConnectionError
from mcpshield.models import (
    CrossRefMatch,
    MCPConfig,
    MCPServer,
    MCPTool,
    ProgressEvent,
    ProgressSink,
    ScanResult,
    SecondaryOpinion,
    ServerConnected,
    ServerError,
    ServerFailed,
    ToolAnalyzed,
    ToolScanning,
    Vulnerability,
    null_sink,
)
from mcpshield.scanner.base import BaseScanner
from mcpshield.scanner.mcp.aggregator import (
    build_detection_details,
    build_vulnerability,
    classify_severity,
    describe_issue,
    merge_cross_refs,
)
from mcpshield.scanner.mcp.connector import Connector, MCPConnector
from mcpshield.scanner.mcp.correlation import correlate

_logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENCY = 4


@dataclass
class ServerScan:
    """Outcome of the per-server pass, before correlation."""

    server: MCPServer
    tools: List[MCPTool] = field(default_factory=list)
    vulnerabilities: Dict[str, Vulnerability] = field(default_factory=dict)
    error: Optional[ServerError] = None


class MCPShieldScanner(BaseScanner):
    """Scanner for the tools advertised by the servers of an MCP configuration.

    Each server goes through ``connecting`` and ends ``connected`` or in
    ``error``; tools of a connected server go through ``scanning`` and
    ``analyzed``. One progress event is emitted per transition. Servers are
    scanned concurrently, and cross-origin correlation runs only once every
    server has finished since it needs the complete set of server names.
    """

    name = "mcp"
    description = "Scans MCP server tools for prompt injection and related risks"

    def __init__(
        self,
        config: MCPConfig,
        connector: Optional[Connector] = None,
        analyzer: Optional[Any] = None,
        identify_as: Optional[str] = None,
        safe_list: Optional[Iterable[str]] = None,
        sink: Optional[ProgressSink] = None,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """Initialize the scanner.

        Args:
            config: Parsed MCP configuration
            connector: Tool lister (defaults to the MCP SDK connector)
            analyzer: Optional secondary-opinion analyzer with an async
                ``analyze(description)`` method
            identify_as: Client name announced to servers
            safe_list: Server names tools may reference freely
            sink: Progress event consumer
            max_concurrency: Servers scanned at the same time
            logger: Logger for scan messages
        """
        super().__init__(config)
        self.connector = connector or MCPConnector()
        self.analyzer = analyzer
        self.identify_as = identify_as
        self.safe_list = list(safe_list or [])
        self.sink = sink or null_sink
        self.max_concurrency = max(1, max_concurrency)
        self.logger = logger or _logger

    def scan(self) -> ScanResult:
        """Execute the scan on a fresh event loop.

        Returns:
            Aggregate scan result
        """
        return asyncio.run(self.scan_async())

    async def scan_async(self) -> ScanResult:
        """Execute the scan inside a running event loop."""
        servers = list(self.discover_targets())
        self.logger.info("Scanning %d server(s) from %s", len(servers), self.config.file_path)

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def bounded(server: MCPServer) -> ServerScan:
            async with semaphore:
                return await self._scan_server(server)

        # Correlation below needs every server in a terminal state
        scans = await asyncio.gather(*(bounded(server) for server in servers))

        vulnerabilities = self._correlate(scans)
        errors = [scan.error for scan in scans if scan.error is not None]

        self.logger.info(
            "Scan of %s finished: %d vulnerabilities, %d server error(s)",
            self.config.file_path,
            len(vulnerabilities),
            len(errors),
        )
        return ScanResult(
            vulnerabilities=vulnerabilities,
            server_errors=errors,
            config_path=self.config.file_path,
        )

    async def _scan_server(self, server: MCPServer) -> ServerScan:
        """Connect to one server and analyze each of its tools."""
        self.logger.debug("Connecting to %s (%s)", server.name, server.target)
        try:
            tools = await self.connector.get_tools(server, identify_as=self.identify_as)
        except ServerConnectionError as e:
            self.logger.error("Server %s: %s", server.name, e)
            self._emit(ServerFailed(server_name=server.name, error=str(e), kind=e.kind))
            return ServerScan(
                server=server,
                error=ServerError(server=server.name, kind=e.kind, message=str(e)),
            )

        self._emit(
            ServerConnected(
                server_name=server.name,
                tool_count=len(tools),
                tools=[tool.name for tool in tools],
            )
        )

        scan = ServerScan(server=server, tools=tools)
        for tool in tools:
            vulnerability = await self._scan_tool(server, tool)
            if vulnerability is not None:
                scan.vulnerabilities[tool.name] = vulnerability
        return scan

    async def _scan_tool(self, server: MCPServer, tool: MCPTool) -> Optional[Vulnerability]:
        self._emit(ToolScanning(server_name=server.name, tool_name=tool.name))

        details = build_detection_details(tool)
        opinion = None
        if not details.is_empty and self.analyzer is not None and tool.description:
            opinion = await self._second_opinion(server, tool)

        vulnerability = build_vulnerability(server.name, tool, details, opinion)
        if vulnerability is not None:
            self.logger.debug(
                "%s/%s flagged: %s", server.name, tool.name, ", ".join(details.categories)
            )

        self._emit(
            ToolAnalyzed(
                server_name=server.name,
                tool_name=tool.name,
                has_issues=vulnerability is not None,
                severity=vulnerability.severity if vulnerability else None,
                issue_type=describe_issue(details),
            )
        )
        return vulnerability

    async def _second_opinion(self, server: MCPServer, tool: MCPTool) -> SecondaryOpinion:
        """Ask the analyzer about a flagged tool; failures stay local to the tool."""
        try:
            return await self.analyzer.analyze(tool.description)
        except Exception as e:
            self.logger.warning("Secondary analysis of %s/%s failed: %s", server.name, tool.name, e)
            return SecondaryOpinion(analysis=f"Error using Claude API: {e}", overall_risk=None)

    def _correlate(self, scans: List[ServerScan]) -> List[Vulnerability]:
        """Merge cross-origin references into the per-tool findings."""
        server_names = [scan.server.name for scan in scans]
        results: List[Vulnerability] = []
        cross_origin: List[Vulnerability] = []

        for scan in scans:
            current = scan.server.name
            others = [name for name in server_names if name != current]
            orphan_refs: List[CrossRefMatch] = []

            for tool in scan.tools:
                found = correlate(tool.description, others, current, self.safe_list)
                refs = [
                    CrossRefMatch(
                        server=current,
                        tool=tool.name,
                        referenced_name=match.referenced_server,
                        context=match.context,
                    )
                    for match in found.matches
                ]

                vulnerability = scan.vulnerabilities.get(tool.name)
                if vulnerability is not None:
                    if refs:
                        vulnerability = merge_cross_refs(vulnerability, refs)
                    results.append(vulnerability)
                else:
                    orphan_refs.extend(refs)

            if orphan_refs:
                self.logger.debug(
                    "%s references %d other server(s)", current, len(orphan_refs)
                )
                cross_origin.append(
                    Vulnerability(
                        server=current,
                        severity=classify_severity(None, has_cross_refs=True),
                        cross_ref_matches=orphan_refs,
                    )
                )

        return results + cross_origin

    def _emit(self, event: ProgressEvent) -> None:
        self.sink(event)

