"""Category detectors for MCP tool descriptions and input schemas.

Detectors are pure: they never raise and return an empty result for a
missing description or schema.
"""

from __future__ import annotations

import json
from typing import Any, List, Optional

from mcpshield.models import DetectionMatch, DetectionResult, ExfiltrationMatch
from mcpshield.scanner.mcp.patterns import (
    HIDDEN_INSTRUCTION_RULES,
    SENSITIVE_FILE_RULES,
    SUSPICIOUS_PARAMETER_NAMES,
    TOOL_SHADOWING_RULES,
    CompiledRules,
)

CONTEXT_WIDTH = 20
ELLIPSIS = "..."


def extract_context(text: str, start: int, end: int, width: int = CONTEXT_WIDTH) -> str:
    """Return the text around ``text[start:end]``.

    The window is clipped to the bounds of ``text``; an ellipsis marks each
    side where surrounding text was cut off.

    Args:
        text: Full text the match was found in
        start: Match start offset
        end: Match end offset
        width: Characters of context to keep on each side

    Returns:
        Context string that always contains ``text[start:end]``
    """
    left = max(0, start - width)
    right = min(len(text), end + width)
    prefix = ELLIPSIS if left > 0 else ""
    suffix = ELLIPSIS if right < len(text) else ""
    return f"{prefix}{text[left:right]}{suffix}"


def detect_patterns(text: Optional[str], rules: CompiledRules) -> DetectionResult:
    """Apply every rule of a table to ``text``, one match per rule."""
    if not text:
        return DetectionResult()

    matches: List[DetectionMatch] = []
    for pattern, name in rules:
        found = pattern.search(text)
        if found:
            matches.append(
                DetectionMatch(
                    type=name,
                    pattern=pattern.pattern,
                    match=found.group(0),
                    context=extract_context(text, found.start(), found.end()),
                )
            )

    return DetectionResult(detected=bool(matches), matches=matches)


def detect_hidden_instructions(description: Optional[str]) -> DetectionResult:
    """Find concealment directives, instruction tags and override phrasing."""
    return detect_patterns(description, HIDDEN_INSTRUCTION_RULES)


def detect_tool_shadowing(description: Optional[str]) -> DetectionResult:
    """Find attempts to alter how the agent uses other tools."""
    return detect_patterns(description, TOOL_SHADOWING_RULES)


def detect_sensitive_file_access(description: Optional[str]) -> DetectionResult:
    """Find references to credentials, secret files and path traversal."""
    return detect_patterns(description, SENSITIVE_FILE_RULES)


def detect_exfiltration_channels(input_schema: Optional[Any]) -> DetectionResult:
    """Flag schema parameters whose names suggest a covert data channel.

    Parameter names are compared case-insensitively against
    ``SUSPICIOUS_PARAMETER_NAMES``. Matches follow the schema's property
    order.
    """
    if not isinstance(input_schema, dict):
        return DetectionResult()
    properties = input_schema.get("properties")
    if not isinstance(properties, dict) or not properties:
        return DetectionResult()

    matches: List[DetectionMatch] = []
    for param_name, param_details in properties.items():
        lowered = str(param_name).lower()
        if lowered not in SUSPICIOUS_PARAMETER_NAMES:
            continue

        param_type = "unknown"
        if isinstance(param_details, dict) and param_details.get("type"):
            param_type = param_details["type"]
            if isinstance(param_type, list):
                param_type = "|".join(str(t) for t in param_type)

        reason = f"Parameter name '{param_name}' could be used for exfiltration"
        matches.append(
            ExfiltrationMatch(
                type="Suspicious parameter",
                pattern=lowered,
                match=str(param_name),
                context=reason,
                param=str(param_name),
                param_type=str(param_type),
                details=json.dumps(param_details, indent=2, default=str),
            )
        )

    return DetectionResult(detected=bool(matches), matches=matches)
