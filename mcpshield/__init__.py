"""
mcpshield - Security scanner for MCP (Model Context Protocol) servers.

Connects to the servers listed in an MCP client configuration, lists the
tools they advertise and looks for prompt injection, tool shadowing,
sensitive file access and data exfiltration hidden in tool descriptions and
input schemas.
"""

__version__ = "0.1.0"
__author__ = "mcpshield contributors"
