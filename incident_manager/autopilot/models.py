"""Domain models for the incident autopilot."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar

from ..errors import UpstreamUnavailable

T = TypeVar("T")


class IncidentStatus(str, Enum):
    OPEN = "open"
    INVESTIGATING = "investigating"
    RESOLVED = "resolved"
    CLOSED = "closed"


class Priority(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RemediationAction(str, Enum):
    RESTART_SERVICE = "restart_service"
    SCALE_UP = "scale_up"
    CLEAR_CACHE = "clear_cache"
    NOTIFY_HUMAN = "notify_human"
    NONE = "none"


class DispatchFailure(str, Enum):
    """Distinct reasons a dispatch attempt did not succeed."""

    MISSING_ANALYSIS = "missing_analysis"
    INVALID_TARGET = "invalid_target"
    UNKNOWN_ACTION = "unknown_action"
    NOT_ACTIONABLE = "not_actionable"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    BACKEND_FAILURE = "backend_failure"


TERMINAL_STATUSES = frozenset({IncidentStatus.RESOLVED, IncidentStatus.CLOSED})


@dataclass(frozen=True)
class StaffMember:
    """Read-only roster entry used for assignment."""

    id: str
    name: str
    specialization: str


@dataclass
class IncidentDraft:
    """Normalized monitoring payload, not yet classified or persisted."""

    title: str
    description: str
    priority: Priority = Priority.MEDIUM
    status: IncidentStatus = IncidentStatus.OPEN

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "priority": self.priority.value,
        }


@dataclass
class AnalysisResult:
    """Classification output attached to an incident."""

    type: str
    priority: Priority
    action: RemediationAction
    target: Optional[str]
    recommendation: str
    assigned_to: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "priority": self.priority.value,
            "action": self.action.value,
            "target": self.target,
            "recommendation": self.recommendation,
            "assignedTo": self.assigned_to,
        }


@dataclass
class Incident:
    """Tracked operational problem with lifecycle status and optional analysis."""

    id: str
    title: str
    description: str
    priority: Priority
    created_at: datetime
    status: IncidentStatus = IncidentStatus.OPEN
    analysis: Optional[AnalysisResult] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "priority": self.priority.value,
            "createdAt": self.created_at.isoformat(),
            "analysis": self.analysis.to_dict() if self.analysis else None,
        }


@dataclass
class ExecutionPayload:
    """Request sent to the execution backend."""

    action: str
    target: Optional[str]
    incident_id: str
    priority: str
    incident_details: Optional[Dict[str, str]] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "action": self.action,
            "target": self.target,
            "incidentId": self.incident_id,
            "priority": self.priority,
        }
        if self.incident_details is not None:
            payload["incidentDetails"] = dict(self.incident_details)
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExecutionPayload":
        details = data.get("incidentDetails")
        return cls(
            action=str(data.get("action", "")),
            target=data.get("target"),
            incident_id=str(data.get("incidentId", "")),
            priority=str(data.get("priority", "")),
            incident_details=dict(details) if isinstance(details, dict) else None,
        )


@dataclass
class ActionResult:
    """Ephemeral outcome of a single dispatch attempt."""

    success: bool
    message: str
    timestamp: datetime
    execution_id: Optional[str] = None
    reason: Optional[DispatchFailure] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "executionId": self.execution_id,
            "timestamp": self.timestamp.isoformat(),
            "reason": self.reason.value if self.reason else None,
        }


@dataclass
class StageResult(Generic[T]):
    """Value produced by a pipeline stage, plus the upstream error it recovered from."""

    value: T
    error: Optional[UpstreamUnavailable] = None

    @property
    def degraded(self) -> bool:
        return self.error is not None
