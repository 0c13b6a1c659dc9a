"""Reporting metadata for each detection category."""

from mcpshield.models import Severity

# Keyed by the DetectionDetails field name, plus the cross-origin category
RULES = {
    "hidden_instructions": {
        "id": "MCPS-001",
        "title": "Hidden Instructions",
        "label": "Hidden instructions",
        "severity": Severity.HIGH,
        "description": "Tool description contains instructions aimed at the model "
        "and concealed from the user",
        "cwe_id": "CWE-74",
        "owasp_id": "LLM01",
        "references": [
            "https://invariantlabs.ai/blog/mcp-security-notification-tool-poisoning-attacks",
            "https://genai.owasp.org/llmrisk/llm01-prompt-injection/",
        ],
    },
    "shadowing": {
        "id": "MCPS-002",
        "title": "Tool Shadowing",
        "label": "Shadowing detected",
        "severity": Severity.HIGH,
        "description": "Tool description tries to change how the agent uses other tools",
        "cwe_id": "CWE-441",
        "owasp_id": "LLM01",
        "references": [
            "https://invariantlabs.ai/blog/mcp-security-notification-tool-poisoning-attacks",
        ],
    },
    "sensitive_file_access": {
        "id": "MCPS-003",
        "title": "Sensitive File Access",
        "label": "Sensitive file access",
        "severity": Severity.HIGH,
        "description": "Tool description references credentials, secrets or "
        "sensitive configuration files",
        "cwe_id": "CWE-200",
        "owasp_id": "LLM02",
        "references": [
            "https://cwe.mitre.org/data/definitions/200.html",
        ],
    },
    "exfiltration_channels": {
        "id": "MCPS-004",
        "title": "Potential Exfiltration Channel",
        "label": "Potential exfiltration",
        "severity": Severity.MEDIUM,
        "description": "Tool input schema declares free-form parameters commonly "
        "used to smuggle data out",
        "cwe_id": "CWE-201",
        "owasp_id": "LLM02",
        "references": [
            "https://cwe.mitre.org/data/definitions/201.html",
        ],
    },
    "cross_origin": {
        "id": "MCPS-005",
        "title": "Cross-Origin Reference",
        "label": "Cross-origin reference",
        "severity": Severity.MEDIUM,
        "description": "Tool description names another MCP server, a sign of "
        "cross-server impersonation or hijacking",
        "cwe_id": "CWE-346",
        "owasp_id": "LLM06",
        "references": [
            "https://modelcontextprotocol.io/specification/draft/basic/security_best_practices",
        ],
    },
}
