"""Scanner modules for mcpshield."""

from mcpshield.scanner.base import BaseScanner
from mcpshield.scanner.mcp import MCPShieldScanner

__all__ = ["BaseScanner", "MCPShieldScanner"]
