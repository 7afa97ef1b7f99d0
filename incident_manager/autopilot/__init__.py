"""Incident autopilot: normalization, classification, remediation and lifecycle."""

from .models import (
    ActionResult,
    AnalysisResult,
    DispatchFailure,
    ExecutionPayload,
    Incident,
    IncidentDraft,
    IncidentStatus,
    Priority,
    RemediationAction,
    StaffMember,
    StageResult,
)
from .staff import AI_ASSISTANT, DEFAULT_STAFF, StaffDirectory

__all__ = [
    "AI_ASSISTANT",
    "ActionResult",
    "AnalysisResult",
    "DEFAULT_STAFF",
    "DispatchFailure",
    "ExecutionPayload",
    "Incident",
    "IncidentDraft",
    "IncidentStatus",
    "Priority",
    "RemediationAction",
    "StaffDirectory",
    "StaffMember",
    "StageResult",
]
