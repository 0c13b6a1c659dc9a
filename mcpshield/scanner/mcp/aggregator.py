"""Merge detector outputs into a per-tool finding and classify severity."""

from __future__ import annotations

from typing import List, Optional

from mcpshield.models import (
    CrossRefMatch,
    DetectionDetails,
    MCPTool,
    SecondaryOpinion,
    Severity,
    Vulnerability,
)
from mcpshield.scanner.mcp.detectors import (
    detect_exfiltration_channels,
    detect_hidden_instructions,
    detect_sensitive_file_access,
    detect_tool_shadowing,
)
from mcpshield.scanner.mcp.rules import RULES

# Categories that are direct instruction-injection primitives
HIGH_RISK_CATEGORIES = ("hidden_instructions", "shadowing", "sensitive_file_access")


def build_detection_details(tool: MCPTool) -> DetectionDetails:
    """Run every category detector on one tool."""
    return DetectionDetails(
        hidden_instructions=detect_hidden_instructions(tool.description).matches,
        shadowing=detect_tool_shadowing(tool.description).matches,
        sensitive_file_access=detect_sensitive_file_access(tool.description).matches,
        exfiltration_channels=detect_exfiltration_channels(tool.input_schema).matches,
    )


def classify_severity(
    details: Optional[DetectionDetails],
    has_cross_refs: bool = False,
) -> Severity:
    """Map the categories that fired to a severity.

    Instruction-injection categories give HIGH, exfiltration channels or
    cross-origin references alone give MEDIUM, anything else is LOW. A
    secondary opinion is reported next to this value and never feeds it.
    """
    categories = details.categories if details is not None else []
    if any(category in HIGH_RISK_CATEGORIES for category in categories):
        return Severity.HIGH
    if "exfiltration_channels" in categories or has_cross_refs:
        return Severity.MEDIUM
    return Severity.LOW


def describe_issue(details: DetectionDetails) -> Optional[str]:
    """Short label for the most severe category that fired."""
    categories = details.categories
    if not categories:
        return None
    label = RULES[categories[0]]["label"]
    if len(categories) > 1:
        return f"{label} (+{len(categories) - 1} more)"
    return label


def build_vulnerability(
    server_name: str,
    tool: MCPTool,
    details: DetectionDetails,
    secondary_opinion: Optional[SecondaryOpinion] = None,
) -> Optional[Vulnerability]:
    """Create the Vulnerability of a tool, or None when nothing fired."""
    if details.is_empty:
        return None
    return Vulnerability(
        server=server_name,
        tool=tool.name,
        severity=classify_severity(details),
        detection_details=details,
        secondary_opinion=secondary_opinion,
    )


def merge_cross_refs(
    vulnerability: Vulnerability, cross_refs: List[CrossRefMatch]
) -> Vulnerability:
    """Attach cross-origin references to an existing tool finding."""
    merged = list(vulnerability.cross_ref_matches) + list(cross_refs)
    return vulnerability.model_copy(
        update={
            "cross_ref_matches": merged,
            "severity": classify_severity(
                vulnerability.detection_details, has_cross_refs=bool(merged)
            ),
        }
    )
