"""Exceptions raised by mcpshield."""


class MCPShieldError(Exception):
    """Base class for all mcpshield errors."""


class ConfigurationError(MCPShieldError):
    """An MCP configuration file could not be read or parsed."""


class ServerConnectionError(MCPShieldError, ConnectionError):
    """A connection to an MCP server could not be established."""

    kind = "connection"


class ConnectionTimeoutError(ServerConnectionError, TimeoutError):
    """An MCP server did not answer within the connection timeout."""

    kind = "timeout"


class AnalysisError(MCPShieldError):
    """The secondary AI analysis request failed."""
