"""Tests for MCP config discovery and loading."""

import json
from pathlib import Path

import pytest

from mcpshield.errors import ConfigurationError
from mcpshield.scanner.mcp.discovery import (
    candidate_config_paths,
    extract_servers,
    find_mcp_configs,
    load_config,
)


@pytest.fixture
def fixtures_dir() -> Path:
    """Return path to test fixtures directory."""
    return Path(__file__).parent / "fixtures"


def _write(path: Path, data) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(data if isinstance(data, str) else json.dumps(data))
    return path


class TestLoadConfig:
    """Tests for load_config."""

    def test_parses_mcp_servers(self, fixtures_dir: Path) -> None:
        """Test parsing of the mcpServers layout."""
        config = load_config(fixtures_dir / "poisoned_mcp.json")

        assert list(config.servers) == ["calculator", "whatsapp", "remote"]
        assert config.servers["calculator"].command == "node"
        assert config.servers["calculator"].args == ["bad-mcp-server.js"]
        assert config.servers["whatsapp"].env == {"WHATSAPP_SESSION": "${WHATSAPP_SESSION}"}
        assert config.servers["remote"].url == "http://localhost:8080/sse"
        assert config.file_path.endswith("poisoned_mcp.json")

    def test_records_malformed_entries(self, fixtures_dir: Path) -> None:
        """Test that non-object entries are skipped and noted."""
        config = load_config(fixtures_dir / "poisoned_mcp.json")
        assert "broken" not in config.servers
        assert config.parse_errors == ["Server 'broken' is not an object"]

    def test_parses_vscode_layout(self, fixtures_dir: Path) -> None:
        """Test parsing of the mcp.servers layout with a transport type."""
        config = load_config(fixtures_dir / "vscode_settings.json")
        notes = config.servers["notes"]
        assert notes.url == "https://notes.example.com/mcp"
        assert notes.transport == "http"

    def test_invalid_json(self, tmp_path: Path) -> None:
        """Test that invalid JSON is a configuration error."""
        path = _write(tmp_path / "invalid.json", "{ invalid json }")
        with pytest.raises(ConfigurationError, match="not valid JSON"):
            load_config(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError):
            load_config(tmp_path / "missing.json")

    def test_no_servers(self, tmp_path: Path) -> None:
        """Test that a JSON file without servers parses to an empty config."""
        config = load_config(_write(tmp_path / "empty.json", {}))
        assert config.servers == {}


class TestFindConfigs:
    """Tests for config discovery."""

    def test_finds_configs_with_servers(self, tmp_path: Path) -> None:
        """Test that only parseable files declaring servers are returned."""
        cursor = _write(tmp_path / ".cursor" / "mcp.json", {"mcpServers": {"a": {"command": "x"}}})
        _write(tmp_path / ".vscode" / "mcp.json", {"servers": {}})
        _write(tmp_path / ".codeium" / "windsurf" / "mcp_config.json", "not json")

        assert find_mcp_configs(home=tmp_path, platform="linux") == [cursor]

    def test_platform_specific_paths(self, tmp_path: Path) -> None:
        """Test that client locations depend on the platform."""
        darwin = candidate_config_paths(tmp_path, "darwin")
        win = candidate_config_paths(tmp_path, "win32")
        linux = candidate_config_paths(tmp_path, "linux")

        assert (
            tmp_path / "Library" / "Application Support" / "Claude" / "claude_desktop_config.json"
        ) in darwin
        assert tmp_path / "AppData" / "Roaming" / "Claude" / "claude_desktop_config.json" in win
        assert tmp_path / ".config" / "Code" / "User" / "settings.json" in linux

    def test_extract_servers_layouts(self) -> None:
        assert extract_servers({"mcpServers": {"a": {}}}) == {"a": {}}
        assert extract_servers({"mcp": {"servers": {"b": {}}}}) == {"b": {}}
        assert extract_servers({"servers": {"c": {}}}) == {"c": {}}
        assert extract_servers({"other": 1}) is None
        assert extract_servers([]) is None
