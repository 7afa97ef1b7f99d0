"""Incident store: identity and status transitions live here."""

from __future__ import annotations

import logging
from dataclasses import replace
from threading import Lock
from typing import Dict, List, Optional, Protocol

from ..utils import new_incident_id, utcnow
from .lifecycle import ensure_transition
from .models import AnalysisResult, Incident, IncidentDraft, IncidentStatus

logger = logging.getLogger("incident.store")


class IncidentStore(Protocol):
    """Keyed store over a single logical collection of incidents."""

    def create(self, draft: IncidentDraft, analysis: Optional[AnalysisResult] = None) -> Incident:
        ...

    def find_all(self) -> List[Incident]:
        ...

    def find_by_id(self, incident_id: str) -> Optional[Incident]:
        ...

    def update_status(self, incident_id: str, status: IncidentStatus) -> Optional[Incident]:
        ...


class InMemoryIncidentStore:
    """Process-local store; every read-modify-write happens under one lock."""

    def __init__(self) -> None:
        self._incidents: Dict[str, Incident] = {}
        self._lock = Lock()

    def create(self, draft: IncidentDraft, analysis: Optional[AnalysisResult] = None) -> Incident:
        incident = Incident(
            id=new_incident_id(),
            title=draft.title,
            description=draft.description,
            priority=analysis.priority if analysis else draft.priority,
            created_at=utcnow(),
            status=IncidentStatus.OPEN,
            analysis=analysis,
        )
        with self._lock:
            while incident.id in self._incidents:
                incident.id = new_incident_id()
            self._incidents[incident.id] = incident
        logger.info("Created incident %s (%s)", incident.id, incident.priority.value)
        return replace(incident)

    def find_all(self) -> List[Incident]:
        with self._lock:
            incidents = [replace(incident) for incident in self._incidents.values()]
        return sorted(incidents, key=lambda item: item.created_at)

    def find_by_id(self, incident_id: str) -> Optional[Incident]:
        with self._lock:
            incident = self._incidents.get(incident_id)
            return replace(incident) if incident else None

    def update_status(self, incident_id: str, status: IncidentStatus) -> Optional[Incident]:
        """Apply a lifecycle transition; ``None`` when the id is unknown."""

        status = IncidentStatus(status)
        with self._lock:
            incident = self._incidents.get(incident_id)
            if incident is None:
                return None
            ensure_transition(incident.status, status)
            previous = incident.status
            incident.status = status
            snapshot = replace(incident)
        logger.info("Incident %s moved %s -> %s", incident_id, previous.value, status.value)
        return snapshot
