"""Connect to MCP servers and list the tools they advertise."""

from __future__ import annotations

import asyncio
import logging
import os
from contextlib import AsyncExitStack
from typing import Any, List, Optional, Protocol

from mcp import ClientSession, StdioServerParameters
from mcp.client.sse import sse_client
from mcp.client.stdio import stdio_client
from mcp.client.streamable_http import streamablehttp_client
from mcp.types import Implementation

from mcpshield import __version__
from mcpshield.errors import ConnectionTimeoutError, ServerConnectionError
from mcpshield.models import MCPServer, MCPTool

logger = logging.getLogger(__name__)

DEFAULT_CONNECTION_TIMEOUT = 30.0
DEFAULT_CLIENT_NAME = "mcpshield"

STREAMABLE_HTTP_TRANSPORTS = {"http", "streamable-http", "streamable_http", "streamableHttp"}


class Connector(Protocol):
    """Anything able to list the tools of a configured server."""

    async def get_tools(
        self, server: MCPServer, identify_as: Optional[str] = None
    ) -> List[MCPTool]:
        ...


class MCPConnector:
    """Connector built on the official MCP Python SDK.

    Remote servers are reached over SSE, or streamable HTTP when the entry
    says so; everything else is spawned over stdio with the parent
    environment plus the configured ``env``.
    """

    def __init__(self, timeout: float = DEFAULT_CONNECTION_TIMEOUT) -> None:
        """Initialize the connector.

        Args:
            timeout: Seconds allowed to connect, initialize and list tools
        """
        self.timeout = timeout

    async def get_tools(
        self, server: MCPServer, identify_as: Optional[str] = None
    ) -> List[MCPTool]:
        """Connect to ``server`` and return its tools.

        Args:
            server: Server configuration entry
            identify_as: Client name announced to the server

        Returns:
            Tools advertised by the server

        Raises:
            ServerConnectionError: If the transport cannot be set up or fails
            ConnectionTimeoutError: If the server does not answer in time
        """
        if not server.url and not server.command:
            raise ServerConnectionError("Missing command for STDIO server")

        client_info = Implementation(
            name=identify_as or DEFAULT_CLIENT_NAME, version=__version__
        )

        try:
            # The inner task unwinds its transport contexts when cancelled
            tools = await asyncio.wait_for(
                self._list_tools(server, client_info), timeout=self.timeout
            )
        except asyncio.TimeoutError as e:
            logger.debug("Connection to %s timed out after %ss", server.name, self.timeout)
            raise ConnectionTimeoutError(
                f"Connection to {server.target} timed out after {self.timeout:g} seconds. "
                "Please check if the server is running and accessible."
            ) from e
        except ServerConnectionError:
            raise
        except Exception as e:
            logger.debug("Error connecting to %s", server.name, exc_info=True)
            raise ServerConnectionError(
                f"Failed to connect to {server.target}: {e}"
            ) from e

        return [
            MCPTool(
                name=tool.name,
                description=tool.description,
                input_schema=tool.inputSchema,
            )
            for tool in tools
        ]

    async def _list_tools(self, server: MCPServer, client_info: Implementation) -> List[Any]:
        tools = None
        cancelled = False
        try:
            async with AsyncExitStack() as stack:
                try:
                    streams = await stack.enter_async_context(self._transport(server))
                    read_stream, write_stream = streams[0], streams[1]
                    session = await stack.enter_async_context(
                        ClientSession(read_stream, write_stream, client_info=client_info)
                    )
                    await session.initialize()
                    result = await session.list_tools()
                    tools = list(result.tools or [])
                except asyncio.CancelledError:
                    cancelled = True
                    raise
        except Exception:
            # Errors raised while closing never replace the handshake outcome
            if tools is None and not cancelled:
                raise
            logger.debug("Ignoring error while closing %s", server.name, exc_info=True)
            if cancelled:
                raise asyncio.CancelledError()
        return tools

    def _transport(self, server: MCPServer) -> Any:
        """Return the async context manager opening the server transport."""
        if server.url:
            if server.transport in STREAMABLE_HTTP_TRANSPORTS:
                return streamablehttp_client(server.url)
            return sse_client(server.url)

        env = {key: value for key, value in os.environ.items() if value is not None}
        env.update(server.env)
        return stdio_client(
            StdioServerParameters(command=server.command, args=server.args, env=env)
        )
