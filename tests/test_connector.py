"""Tests for the MCP SDK connector."""

import asyncio
import os
from contextlib import asynccontextmanager
from types import SimpleNamespace

import anyio
import pytest

from mcpshield.errors import ConnectionTimeoutError, ServerConnectionError
from mcpshield.models import MCPServer
from mcpshield.scanner.mcp import connector as connector_module
from mcpshield.scanner.mcp.connector import MCPConnector


class SlowConnector(MCPConnector):
    """Connector whose handshake never finishes."""

    def __init__(self, timeout: float) -> None:
        super().__init__(timeout=timeout)
        self.closed = False

    async def _list_tools(self, server, client_info):
        try:
            await asyncio.sleep(10)
        finally:
            self.closed = True
        return []


class CannedConnector(MCPConnector):
    """Connector returning SDK-shaped tools without a transport."""

    def __init__(self, tools=None, error=None) -> None:
        super().__init__()
        self.tools = tools or []
        self.error = error
        self.client_info = None

    async def _list_tools(self, server, client_info):
        self.client_info = client_info
        if self.error:
            raise self.error
        return self.tools


class SilentTransportConnector(MCPConnector):
    """Connector whose transport accepts requests but never answers."""

    def __init__(self, timeout: float, close_error: Exception = None) -> None:
        super().__init__(timeout=timeout)
        self.close_error = close_error
        self.closed = False

    @asynccontextmanager
    async def _silent_streams(self):
        to_client_send, to_client_receive = anyio.create_memory_object_stream(1)
        to_server_send, to_server_receive = anyio.create_memory_object_stream(1)
        try:
            yield to_client_receive, to_server_send
        finally:
            self.closed = True
            for stream in (to_client_send, to_client_receive, to_server_send, to_server_receive):
                stream.close()
            if self.close_error is not None:
                raise self.close_error

    def _transport(self, server):
        return self._silent_streams()


STDIO_SERVER = MCPServer(name="local", command="node", args=["server.js"], env={"API_MODE": "test"})


class TestMCPConnector:
    """Tests for MCPConnector."""

    def test_missing_command(self) -> None:
        """Test that an entry without command or URL is rejected."""
        with pytest.raises(ServerConnectionError, match="Missing command"):
            asyncio.run(MCPConnector().get_tools(MCPServer(name="empty")))

    def test_timeout_closes_transport(self) -> None:
        """Test that a hung handshake times out and is unwound."""
        connector = SlowConnector(timeout=0.05)
        with pytest.raises(ConnectionTimeoutError) as excinfo:
            asyncio.run(connector.get_tools(STDIO_SERVER))

        assert isinstance(excinfo.value, TimeoutError)
        assert "timed out" in str(excinfo.value)
        assert connector.closed is True

    def test_unanswered_handshake_times_out(self) -> None:
        """Test that a real session over a silent transport times out and closes it."""
        connector = SilentTransportConnector(timeout=0.2)
        with pytest.raises(ConnectionTimeoutError):
            asyncio.run(connector.get_tools(STDIO_SERVER))
        assert connector.closed is True

    def test_close_error_does_not_mask_timeout(self) -> None:
        """Test that a transport failing to close still reports a timeout."""
        connector = SilentTransportConnector(timeout=0.2, close_error=OSError("close failed"))
        with pytest.raises(ConnectionTimeoutError) as excinfo:
            asyncio.run(connector.get_tools(STDIO_SERVER))

        assert excinfo.value.kind == "timeout"
        assert "close failed" not in str(excinfo.value)
        assert connector.closed is True

    def test_wraps_transport_errors(self) -> None:
        """Test that any transport failure becomes a connection error."""
        connector = CannedConnector(error=RuntimeError("boom"))
        with pytest.raises(ServerConnectionError, match="boom") as excinfo:
            asyncio.run(connector.get_tools(STDIO_SERVER))
        assert not isinstance(excinfo.value, ConnectionTimeoutError)
        assert "node server.js" in str(excinfo.value)

    def test_converts_tools(self) -> None:
        """Test conversion of SDK tools to MCPTool."""
        sdk_tool = SimpleNamespace(
            name="add", description="Adds numbers", inputSchema={"type": "object"}
        )
        connector = CannedConnector(tools=[sdk_tool])
        tools = asyncio.run(connector.get_tools(STDIO_SERVER, identify_as="claude-desktop"))

        assert [(t.name, t.description, t.input_schema) for t in tools] == [
            ("add", "Adds numbers", {"type": "object"})
        ]
        assert connector.client_info.name == "claude-desktop"

    def test_default_client_name(self) -> None:
        connector = CannedConnector()
        asyncio.run(connector.get_tools(STDIO_SERVER))
        assert connector.client_info.name == "mcpshield"


class TestTransportSelection:
    """Tests for transport selection."""

    def test_stdio_inherits_environment(self, monkeypatch) -> None:
        """Test that stdio servers get the parent env plus their own."""
        monkeypatch.setattr(connector_module, "stdio_client", lambda params: params)
        monkeypatch.setenv("MCPSHIELD_TEST_VAR", "1")

        params = MCPConnector()._transport(STDIO_SERVER)

        assert params.command == "node"
        assert params.args == ["server.js"]
        assert params.env["API_MODE"] == "test"
        assert params.env["MCPSHIELD_TEST_VAR"] == os.environ["MCPSHIELD_TEST_VAR"]

    def test_url_uses_sse(self, monkeypatch) -> None:
        monkeypatch.setattr(connector_module, "sse_client", lambda url: ("sse", url))
        server = MCPServer(name="remote", url="http://localhost:8080/sse")
        assert MCPConnector()._transport(server) == ("sse", "http://localhost:8080/sse")

    def test_http_transport_uses_streamable_http(self, monkeypatch) -> None:
        monkeypatch.setattr(connector_module, "streamablehttp_client", lambda url: ("http", url))
        server = MCPServer(name="remote", url="https://example.com/mcp", transport="http")
        assert MCPConnector()._transport(server) == ("http", "https://example.com/mcp")
