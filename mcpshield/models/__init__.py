"""Data models for mcpshield."""

from mcpshield.models.finding import (
    CrossOriginMatch,
    CrossRefMatch,
    DetectionDetails,
    DetectionMatch,
    DetectionResult,
    ExfiltrationMatch,
    ScanResult,
    SecondaryOpinion,
    ServerError,
    Severity,
    Vulnerability,
)
from mcpshield.models.config import MCPConfig, MCPServer, MCPTool
from mcpshield.models.events import (
    EventRecorder,
    ProgressEvent,
    ProgressSink,
    ServerConnected,
    ServerFailed,
    ToolAnalyzed,
    ToolScanning,
    null_sink,
)

__all__ = [
    "CrossOriginMatch",
    "CrossRefMatch",
    "DetectionDetails",
    "DetectionMatch",
    "DetectionResult",
    "ExfiltrationMatch",
    "ScanResult",
    "SecondaryOpinion",
    "ServerError",
    "Severity",
    "Vulnerability",
    "MCPConfig",
    "MCPServer",
    "MCPTool",
    "EventRecorder",
    "ProgressEvent",
    "ProgressSink",
    "ServerConnected",
    "ServerFailed",
    "ToolAnalyzed",
    "ToolScanning",
    "null_sink",
]
