"""SARIF reporter for CI/CD integration."""

import json
from datetime import datetime, timezone
from pathlib import Path

from mcpshield import __version__
from mcpshield.models import ScanResult, Severity, Vulnerability
from mcpshield.scanner.mcp.rules import RULES


class SARIFReporter:
    """Reporter that outputs scan results in SARIF format for CI/CD integration.

    Each category that fired on a vulnerability becomes one SARIF result,
    located at the configuration file that declared the server.
    """

    SARIF_VERSION = "2.1.0"
    SCHEMA_URL = "https://raw.githubusercontent.com/oasis-tcs/sarif-spec/master/Schemata/sarif-schema-2.1.0.json"

    def report(
        self,
        results: list[ScanResult],
        output_path: Path | None = None,
    ) -> str:
        """Generate SARIF report.

        Args:
            results: One scan result per configuration file
            output_path: Optional path to write report file

        Returns:
            JSON string of the SARIF report
        """
        sarif_results = []
        for result in results:
            for vulnerability in result.vulnerabilities:
                sarif_results.extend(
                    self._vulnerability_to_results(vulnerability, result.config_path or "")
                )

        sarif = {
            "$schema": self.SCHEMA_URL,
            "version": self.SARIF_VERSION,
            "runs": [
                {
                    "tool": self._generate_tool_info(),
                    "results": sarif_results,
                    "invocations": [
                        {
                            "executionSuccessful": True,
                            "endTimeUtc": datetime.now(timezone.utc)
                            .isoformat()
                            .replace("+00:00", "Z"),
                            "toolExecutionNotifications": [
                                {
                                    "level": "error",
                                    "message": {
                                        "text": f"Server '{e.server}' ({e.kind}): {e.message}"
                                    },
                                }
                                for r in results
                                for e in r.server_errors
                            ],
                        }
                    ],
                }
            ],
        }

        json_str = json.dumps(sarif, indent=2)

        if output_path:
            output_path.write_text(json_str)

        return json_str

    def _generate_tool_info(self) -> dict:
        """Generate SARIF tool information."""
        rules = []
        for rule_info in RULES.values():
            rules.append(
                {
                    "id": rule_info["id"],
                    "name": rule_info["title"],
                    "shortDescription": {"text": rule_info["title"]},
                    "fullDescription": {"text": rule_info["description"]},
                    "defaultConfiguration": {
                        "level": self._severity_to_level(rule_info["severity"])
                    },
                    "helpUri": rule_info["references"][0]
                    if rule_info["references"]
                    else None,
                    "properties": {
                        "security-severity": self._severity_to_score(
                            rule_info["severity"]
                        ),
                        "cwe": rule_info["cwe_id"],
                        "owasp-llm": rule_info["owasp_id"],
                        "tags": ["security", "mcp", "ai-security"],
                    },
                }
            )

        return {
            "driver": {
                "name": "mcpshield",
                "version": __version__,
                "rules": rules,
            }
        }

    def _vulnerability_to_results(self, vulnerability: Vulnerability, config_path: str) -> list:
        """Convert a vulnerability to one SARIF result per category."""
        subject = f"Server '{vulnerability.server}'"
        if vulnerability.tool:
            subject += f", tool '{vulnerability.tool}'"

        findings = []
        details = vulnerability.detection_details
        if details is not None:
            for category in details.categories:
                matches = getattr(details, category)
                findings.append((category, [m.match for m in matches]))
        if vulnerability.cross_ref_matches:
            findings.append(
                ("cross_origin", [m.referenced_name for m in vulnerability.cross_ref_matches])
            )

        sarif_results = []
        for category, snippets in findings:
            rule = RULES[category]
            sarif_results.append(
                {
                    "ruleId": rule["id"],
                    "level": self._severity_to_level(vulnerability.severity),
                    "message": {
                        "text": f"{subject}: {rule['description']} ({', '.join(snippets)})"
                    },
                    "locations": [
                        {
                            "physicalLocation": {
                                "artifactLocation": {"uri": config_path},
                            },
                            "logicalLocations": [
                                {
                                    "name": vulnerability.tool or vulnerability.server,
                                    "fullyQualifiedName": ".".join(
                                        p for p in (vulnerability.server, vulnerability.tool) if p
                                    ),
                                }
                            ],
                        }
                    ],
                    "properties": {
                        "severity": vulnerability.severity.value,
                        "cwe": rule["cwe_id"],
                        "owasp-llm": rule["owasp_id"],
                    },
                }
            )
        return sarif_results

    def _severity_to_level(self, severity: Severity) -> str:
        """Convert severity to SARIF level."""
        mapping = {
            Severity.HIGH: "error",
            Severity.MEDIUM: "warning",
            Severity.LOW: "note",
        }
        return mapping[severity]

    def _severity_to_score(self, severity: Severity) -> str:
        """Convert severity to security-severity score (0.0-10.0)."""
        mapping = {
            Severity.HIGH: "8.0",
            Severity.MEDIUM: "5.0",
            Severity.LOW: "3.0",
        }
        return mapping[severity]
