"""MCP server tool scanner."""

from mcpshield.scanner.mcp.connector import Connector, MCPConnector
from mcpshield.scanner.mcp.discovery import find_mcp_configs, load_config
from mcpshield.scanner.mcp.scanner import MCPShieldScanner

__all__ = [
    "Connector",
    "MCPConnector",
    "MCPShieldScanner",
    "find_mcp_configs",
    "load_config",
]
