"""Base scanner class for all security scanners."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generator

from mcpshield.models import MCPConfig, MCPServer, ScanResult


class BaseScanner(ABC):
    """Abstract base class for security scanners."""

    name: str = "base"
    description: str = "Base scanner"

    def __init__(self, config: MCPConfig) -> None:
        """Initialize scanner with a parsed configuration.

        Args:
            config: MCP configuration whose servers will be scanned
        """
        self.config = config

    @abstractmethod
    def scan(self) -> ScanResult:
        """Execute the scan and return its result.

        Returns:
            Aggregate scan result
        """
        pass

    def discover_targets(self) -> Generator[MCPServer, None, None]:
        """Yield the servers to scan, in configuration order."""
        yield from self.config.servers.values()
