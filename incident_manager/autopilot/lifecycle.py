"""Incident status state machine."""

from __future__ import annotations

from typing import Dict, FrozenSet

from ..errors import InvalidTransition
from .models import IncidentStatus

ALLOWED_TRANSITIONS: Dict[IncidentStatus, FrozenSet[IncidentStatus]] = {
    IncidentStatus.OPEN: frozenset(
        {IncidentStatus.INVESTIGATING, IncidentStatus.RESOLVED, IncidentStatus.CLOSED}
    ),
    IncidentStatus.INVESTIGATING: frozenset({IncidentStatus.RESOLVED, IncidentStatus.CLOSED}),
    IncidentStatus.RESOLVED: frozenset({IncidentStatus.CLOSED}),
    IncidentStatus.CLOSED: frozenset(),
}


def can_transition(current: IncidentStatus, requested: IncidentStatus) -> bool:
    """Forward moves only; re-applying the current status is a no-op."""

    return requested == current or requested in ALLOWED_TRANSITIONS[current]


def ensure_transition(current: IncidentStatus, requested: IncidentStatus) -> None:
    if not can_transition(current, requested):
        raise InvalidTransition(current.value, requested.value)
