"""Detection, severity and vulnerability models for scan results."""

from __future__ import annotations

from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field


class Severity(str, Enum):
    """Severity levels for vulnerabilities."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def color(self) -> str:
        """Return Rich color for severity."""
        colors = {
            Severity.HIGH: "red",
            Severity.MEDIUM: "yellow",
            Severity.LOW: "blue",
        }
        return colors[self]

    @property
    def rank(self) -> int:
        """Return a sortable weight, higher is more severe."""
        ranks = {
            Severity.HIGH: 3,
            Severity.MEDIUM: 2,
            Severity.LOW: 1,
        }
        return ranks[self]

    @property
    def label(self) -> str:
        """Return the upper-case label used in reports."""
        return self.value.upper()


class DetectionMatch(BaseModel):
    """A single rule hit inside a tool description or schema."""

    model_config = ConfigDict(frozen=True)

    type: str = Field(..., description="Label of the rule that fired")
    pattern: str = Field(..., description="Rule identifier (regex source or vocabulary word)")
    match: str = Field(..., description="Literal text that matched")
    context: str = Field(..., description="Window of surrounding text containing the match")


class ExfiltrationMatch(DetectionMatch):
    """A suspicious input schema parameter."""

    param: str = Field(..., description="Declared parameter name")
    param_type: str = Field("unknown", description="Declared JSON schema type")
    details: str = Field("", description="Raw parameter schema fragment as JSON")


class CrossOriginMatch(DetectionMatch):
    """A tool description token naming another server."""

    referenced_server: str = Field(..., description="Candidate server name that matched")


class DetectionResult(BaseModel):
    """Outcome of one detector on one input."""

    model_config = ConfigDict(frozen=True)

    detected: bool = False
    matches: List[DetectionMatch] = Field(default_factory=list)


class DetectionDetails(BaseModel):
    """All detector matches for one tool."""

    model_config = ConfigDict(frozen=True)

    hidden_instructions: List[DetectionMatch] = Field(default_factory=list)
    shadowing: List[DetectionMatch] = Field(default_factory=list)
    sensitive_file_access: List[DetectionMatch] = Field(default_factory=list)
    exfiltration_channels: List[ExfiltrationMatch] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """True when no detector fired."""
        return not self.categories

    @property
    def categories(self) -> List[str]:
        """Names of the categories with at least one match, in field order."""
        return [
            name
            for name in (
                "hidden_instructions",
                "shadowing",
                "sensitive_file_access",
                "exfiltration_channels",
            )
            if getattr(self, name)
        ]


class CrossRefMatch(BaseModel):
    """A reference from one server's tool to another known server."""

    model_config = ConfigDict(frozen=True)

    server: str = Field(..., description="Server owning the referencing tool")
    tool: str = Field(..., description="Tool whose description holds the reference")
    referenced_name: str = Field(..., description="Server name that was referenced")
    context: str = Field(..., description="Text surrounding the reference")


class SecondaryOpinion(BaseModel):
    """AI-derived assessment reported alongside the heuristic severity."""

    model_config = ConfigDict(frozen=True)

    analysis: str = Field(..., description="Free-form analysis text")
    overall_risk: Optional[Severity] = Field(None, description="Parsed overall risk, if any")


class Vulnerability(BaseModel):
    """A flagged tool, or a set of cross-origin references of one server."""

    model_config = ConfigDict(frozen=True)

    server: str = Field(..., description="Server name")
    tool: Optional[str] = Field(None, description="Tool name, absent for pure cross references")
    severity: Severity = Field(..., description="Heuristic severity")
    detection_details: Optional[DetectionDetails] = None
    cross_ref_matches: List[CrossRefMatch] = Field(default_factory=list)
    secondary_opinion: Optional[SecondaryOpinion] = None


class ServerError(BaseModel):
    """A server that could not be scanned."""

    model_config = ConfigDict(frozen=True)

    server: str
    kind: str = Field(..., description="Failure kind: connection or timeout")
    message: str


class ScanResult(BaseModel):
    """Aggregate outcome of scanning every server of one configuration."""

    model_config = ConfigDict(frozen=True)

    vulnerabilities: List[Vulnerability] = Field(default_factory=list)
    server_errors: List[ServerError] = Field(default_factory=list)
    config_path: Optional[str] = None
