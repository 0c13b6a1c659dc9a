"""Reporter modules for mcpshield."""

from mcpshield.reporters.console import ConsoleReporter
from mcpshield.reporters.json_reporter import JSONReporter
from mcpshield.reporters.progress import ProgressTree
from mcpshield.reporters.sarif import SARIFReporter

__all__ = ["ConsoleReporter", "JSONReporter", "ProgressTree", "SARIFReporter"]
