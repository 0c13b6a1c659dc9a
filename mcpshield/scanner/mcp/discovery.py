"""Locate and parse MCP client configuration files."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from mcpshield.errors import ConfigurationError
from mcpshield.models import MCPConfig, MCPServer

logger = logging.getLogger(__name__)


def candidate_config_paths(home: Optional[Path] = None, platform: Optional[str] = None) -> List[Path]:
    """Return the well-known MCP client config locations for a platform.

    Args:
        home: Home directory (defaults to the current user's)
        platform: ``sys.platform`` style identifier (defaults to the running one)

    Returns:
        Candidate paths, existing or not
    """
    home = home or Path.home()
    platform = platform or sys.platform

    paths = [
        home / ".cursor" / "mcp.json",
        home / ".vscode" / "mcp.json",
        home / ".codeium" / "windsurf" / "mcp_config.json",
    ]

    if platform == "darwin":
        support = home / "Library" / "Application Support"
        paths.extend([
            support / "Claude" / "claude_desktop_config.json",
            support / "Code" / "User" / "settings.json",
        ])
    elif platform == "win32":
        roaming = home / "AppData" / "Roaming"
        paths.extend([
            roaming / "Claude" / "claude_desktop_config.json",
            roaming / "Code" / "User" / "settings.json",
        ])
    elif platform.startswith("linux"):
        paths.append(home / ".config" / "Code" / "User" / "settings.json")

    return paths


def extract_servers(data: Any) -> Optional[Dict[str, Any]]:
    """Return the server mapping of a parsed config, whatever its layout."""
    if not isinstance(data, dict):
        return None
    if isinstance(data.get("mcpServers"), dict):
        return data["mcpServers"]
    mcp = data.get("mcp")
    if isinstance(mcp, dict) and isinstance(mcp.get("servers"), dict):
        return mcp["servers"]
    if isinstance(data.get("servers"), dict):
        return data["servers"]
    return None


def find_mcp_configs(home: Optional[Path] = None, platform: Optional[str] = None) -> List[Path]:
    """Find existing config files that declare at least one MCP server."""
    found = []
    for path in candidate_config_paths(home, platform):
        if not path.is_file():
            continue
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.debug("Skipping unreadable config %s", path)
            continue
        if extract_servers(data):
            found.append(path)
    return found


def load_config(path: Path) -> MCPConfig:
    """Parse an MCP configuration file.

    Args:
        path: Path to the configuration file

    Returns:
        Parsed configuration; malformed server entries are skipped and noted
        in ``parse_errors``

    Raises:
        ConfigurationError: If the file cannot be read or is not valid JSON
    """
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f'Config file "{path}" could not be read: {e}') from e

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f'Config file "{path}" is not valid JSON: {e}') from e

    servers: Dict[str, MCPServer] = {}
    parse_errors: List[str] = []

    for name, entry in (extract_servers(data) or {}).items():
        if not isinstance(entry, dict):
            parse_errors.append(f"Server '{name}' is not an object")
            continue
        servers[name] = MCPServer(
            name=name,
            command=entry.get("command"),
            args=[str(arg) for arg in entry.get("args") or []],
            env={str(k): str(v) for k, v in (entry.get("env") or {}).items()},
            url=entry.get("url") or entry.get("serverUrl"),
            transport=entry.get("type") or entry.get("transport"),
            raw_config=entry,
        )

    for error in parse_errors:
        logger.warning("%s: %s", path, error)

    return MCPConfig(
        file_path=str(path),
        servers=servers,
        raw_content=content,
        parse_errors=parse_errors,
    )
