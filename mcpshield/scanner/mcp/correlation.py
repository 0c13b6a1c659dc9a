"""Cross-origin correlation of tool descriptions against known server names."""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Optional

from mcpshield.models import CrossOriginMatch, DetectionResult
from mcpshield.scanner.mcp.detectors import extract_context
from mcpshield.scanner.mcp.patterns import POPULAR_MCP_SERVERS

_ENCLOSING_PARENS = re.compile(r"^\((.*)\)$")


def normalize_name(name: str) -> str:
    """Lower-case a server name and turn underscores into hyphens."""
    return name.lower().replace("_", "-")


def normalize_token(token: str) -> str:
    """Normalize a description token for comparison with server names."""
    cleaned = _ENCLOSING_PARENS.sub(r"\1", token.lower())
    return cleaned.replace("_", "-")


def candidate_names(
    other_server_names: Optional[Iterable[str]],
    current_server_name: str,
    safe_list: Optional[Iterable[str]] = None,
) -> List[str]:
    """Server names a description must not reference.

    Other discovered servers come first (minus safe-listed ones), followed by
    the well-known servers other than the current one.
    """
    safe = set(safe_list or [])
    others = [name for name in (other_server_names or []) if name not in safe]
    popular = [name for name in POPULAR_MCP_SERVERS if name != current_server_name]
    return others + popular


def correlate(
    description: Optional[str],
    other_server_names: Optional[Iterable[str]],
    current_server_name: str,
    safe_list: Optional[Iterable[str]] = None,
) -> DetectionResult:
    """Find tokens of ``description`` that name another MCP server.

    Args:
        description: Tool description to inspect
        other_server_names: Names of the other servers of the configuration
        current_server_name: Name of the server owning the tool
        safe_list: Server names allowed to be referenced

    Returns:
        DetectionResult of CrossOriginMatch, at most one per token
    """
    if not description:
        return DetectionResult()

    candidates = candidate_names(other_server_names, current_server_name, safe_list)
    if not candidates:
        return DetectionResult()

    # First candidate wins when two lists share a normalized name
    by_normalized: Dict[str, str] = {}
    for name in candidates:
        by_normalized.setdefault(normalize_name(name), name)

    matches = []
    for token in description.lower().split():
        normalized = normalize_token(token)
        if normalized not in by_normalized:
            continue

        # Locate the raw token; the normalized form may differ in length
        regex = re.compile(rf"(?<!\w){re.escape(token)}(?!\w)", re.IGNORECASE)
        found = regex.search(description)
        if not found:
            continue

        matches.append(
            CrossOriginMatch(
                type="Cross-origin reference",
                pattern=regex.pattern,
                match=found.group(0),
                context=extract_context(description, found.start(), found.end()),
                referenced_server=by_normalized[normalized],
            )
        )

    return DetectionResult(detected=bool(matches), matches=matches)
