"""Secondary AI analysis of tool descriptions."""

from mcpshield.analysis.claude import ClaudeAnalyzer, parse_overall_risk

__all__ = ["ClaudeAnalyzer", "parse_overall_risk"]
