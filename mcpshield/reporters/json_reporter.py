"""JSON reporter for machine-readable output."""

import json
from datetime import datetime, timezone
from pathlib import Path

from mcpshield import __version__
from mcpshield.models import ScanResult, Vulnerability
from mcpshield.scanner.mcp.rules import RULES


class JSONReporter:
    """Reporter that outputs scan results in JSON format."""

    def report(
        self,
        results: list[ScanResult],
        output_path: Path | None = None,
    ) -> str:
        """Generate JSON report.

        Args:
            results: One scan result per configuration file
            output_path: Optional path to write report file

        Returns:
            JSON string of the report
        """
        report = {
            "version": __version__,
            "scan_timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "summary": self._generate_summary(results),
            "results": [
                {
                    "config_path": result.config_path,
                    "server_errors": [e.model_dump() for e in result.server_errors],
                    "vulnerabilities": [
                        self._vulnerability_to_dict(v) for v in result.vulnerabilities
                    ],
                }
                for result in results
            ],
        }

        json_str = json.dumps(report, indent=2)

        if output_path:
            output_path.write_text(json_str)

        return json_str

    def _generate_summary(self, results: list[ScanResult]) -> dict:
        """Generate summary statistics."""
        summary = {
            "total": 0,
            "by_severity": {},
            "by_category": {},
            "server_errors": 0,
        }

        for result in results:
            summary["server_errors"] += len(result.server_errors)
            for vulnerability in result.vulnerabilities:
                summary["total"] += 1

                sev = vulnerability.severity.value
                summary["by_severity"][sev] = summary["by_severity"].get(sev, 0) + 1

                categories = []
                if vulnerability.detection_details is not None:
                    categories.extend(vulnerability.detection_details.categories)
                if vulnerability.cross_ref_matches:
                    categories.append("cross_origin")
                for category in categories:
                    rule_id = RULES[category]["id"]
                    summary["by_category"][rule_id] = (
                        summary["by_category"].get(rule_id, 0) + 1
                    )

        return summary

    def _vulnerability_to_dict(self, vulnerability: Vulnerability) -> dict:
        """Convert vulnerability to dictionary."""
        details = vulnerability.detection_details
        opinion = vulnerability.secondary_opinion
        return {
            "server": vulnerability.server,
            "tool": vulnerability.tool,
            "severity": vulnerability.severity.value,
            "detection_details": {
                "hidden_instructions": [m.model_dump() for m in details.hidden_instructions],
                "shadowing": [m.model_dump() for m in details.shadowing],
                "sensitive_file_access": [m.model_dump() for m in details.sensitive_file_access],
                "exfiltration_channels": [m.model_dump() for m in details.exfiltration_channels],
            }
            if details is not None
            else None,
            "cross_ref_matches": [m.model_dump() for m in vulnerability.cross_ref_matches],
            "secondary_opinion": {
                "analysis": opinion.analysis,
                "overall_risk": opinion.overall_risk.value if opinion.overall_risk else None,
            }
            if opinion is not None
            else None,
        }
