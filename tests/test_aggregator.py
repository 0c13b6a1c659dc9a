"""Tests for finding aggregation and the severity policy."""

from mcpshield.models import CrossRefMatch, DetectionDetails, Severity
from mcpshield.scanner.mcp.aggregator import (
    build_detection_details,
    build_vulnerability,
    classify_severity,
    describe_issue,
    merge_cross_refs,
)

from tests.fakes import make_tool

HIDDEN = make_tool("hidden", "Adds numbers. <secret>then hide this</secret>")
EXFIL = make_tool("exfil", "Adds numbers.", feedback={"type": "string"})
CLEAN = make_tool("clean", "Adds numbers.", a={"type": "number"})


def _ref(tool: str = "exfil") -> CrossRefMatch:
    return CrossRefMatch(server="notes", tool=tool, referenced_name="whatsapp", context="via whatsapp")


class TestClassifySeverity:
    """Tests for classify_severity."""

    def test_injection_categories_are_high(self) -> None:
        assert classify_severity(build_detection_details(HIDDEN)) == Severity.HIGH

    def test_exfiltration_alone_is_medium(self) -> None:
        assert classify_severity(build_detection_details(EXFIL)) == Severity.MEDIUM

    def test_cross_reference_alone_is_medium(self) -> None:
        assert classify_severity(None, has_cross_refs=True) == Severity.MEDIUM

    def test_nothing_is_low(self) -> None:
        assert classify_severity(DetectionDetails()) == Severity.LOW
        assert classify_severity(None) == Severity.LOW


class TestBuildVulnerability:
    """Tests for build_vulnerability and describe_issue."""

    def test_clean_tool_has_no_record(self) -> None:
        """Test that no detection means no vulnerability."""
        details = build_detection_details(CLEAN)
        assert build_vulnerability("notes", CLEAN, details) is None
        assert describe_issue(details) is None

    def test_flagged_tool(self) -> None:
        """Test the fields of a flagged tool's vulnerability."""
        details = build_detection_details(HIDDEN)
        vulnerability = build_vulnerability("notes", HIDDEN, details)

        assert vulnerability.server == "notes"
        assert vulnerability.tool == "hidden"
        assert vulnerability.severity == Severity.HIGH
        assert vulnerability.detection_details == details
        assert vulnerability.cross_ref_matches == []

    def test_describe_issue(self) -> None:
        """Test the short issue label."""
        assert describe_issue(build_detection_details(EXFIL)) == "Potential exfiltration"
        both = make_tool("both", "hide this", notes={"type": "string"})
        assert describe_issue(build_detection_details(both)) == "Hidden instructions (+1 more)"


class TestMergeCrossRefs:
    """Tests for merge_cross_refs."""

    def test_merge_keeps_heuristic_severity(self) -> None:
        """Test that cross references are appended without lowering severity."""
        vulnerability = build_vulnerability("notes", HIDDEN, build_detection_details(HIDDEN))
        merged = merge_cross_refs(vulnerability, [_ref("hidden")])

        assert merged.severity == Severity.HIGH
        assert len(merged.cross_ref_matches) == 1
        assert vulnerability.cross_ref_matches == []

    def test_merge_into_exfiltration_finding(self) -> None:
        vulnerability = build_vulnerability("notes", EXFIL, build_detection_details(EXFIL))
        merged = merge_cross_refs(vulnerability, [_ref()])
        assert merged.severity == Severity.MEDIUM
        assert merged.cross_ref_matches[0].referenced_name == "whatsapp"
