"""Progress events emitted by the scan orchestrator.

Events describe state transitions only and carry no authority over the scan
result. Per server the order is ``server-connected`` or ``server-error``;
per tool it is ``tool-scanning`` followed by ``tool-analyzed``.
"""

from __future__ import annotations

from typing import Callable, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from mcpshield.models.finding import Severity


class ServerConnected(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["server-connected"] = "server-connected"
    server_name: str
    tool_count: int
    tools: List[str] = Field(default_factory=list)


class ServerFailed(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["server-error"] = "server-error"
    server_name: str
    error: str
    kind: str = "connection"


class ToolScanning(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["tool-scanning"] = "tool-scanning"
    server_name: str
    tool_name: str


class ToolAnalyzed(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["tool-analyzed"] = "tool-analyzed"
    server_name: str
    tool_name: str
    has_issues: bool
    severity: Optional[Severity] = None
    issue_type: Optional[str] = None


ProgressEvent = Union[ServerConnected, ServerFailed, ToolScanning, ToolAnalyzed]

ProgressSink = Callable[[ProgressEvent], None]


def null_sink(event: ProgressEvent) -> None:
    """Discard an event (headless scans)."""


class EventRecorder:
    """Progress sink that keeps every event in arrival order."""

    def __init__(self) -> None:
        self.events: List[ProgressEvent] = []

    def __call__(self, event: ProgressEvent) -> None:
        self.events.append(event)

    def of_type(self, event_type: str) -> List[ProgressEvent]:
        """Return recorded events with the given ``type`` tag."""
        return [e for e in self.events if e.type == event_type]
