"""Service layer running the incident pipeline end to end."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ...config import Settings
from ...errors import UpstreamUnavailable
from ...integrations.llm import OpenAIClassificationCapability
from ...utils import utcnow
from ..actions import (
    ActionDispatcher,
    ExecutionBackend,
    HttpExecutionBackend,
    SimulatedExecutionBackend,
    can_execute,
)
from ..ai import AIClassifier, IncidentClassifier, KeywordClassifier, RawDataNormalizer
from ..models import ActionResult, DispatchFailure, Incident, IncidentStatus
from ..notifications import IncidentNotifier
from ..staff import AI_ASSISTANT, StaffDirectory
from ..store import IncidentStore, InMemoryIncidentStore
from ..validation import AnalysisValidator

logger = logging.getLogger("incident.pipeline")


@dataclass
class PipelineOutcome:
    """Everything one pipeline run produced for a single incident."""

    incident: Incident
    action_result: Optional[ActionResult] = None
    normalization_error: Optional[UpstreamUnavailable] = None
    classification_error: Optional[UpstreamUnavailable] = None
    assignment_notified: bool = False

    @property
    def degraded(self) -> bool:
        return self.normalization_error is not None or self.classification_error is not None

    def to_dict(self) -> Dict[str, Any]:
        data = self.incident.to_dict()
        data["action"] = self.action_result.to_dict() if self.action_result else None
        data["degraded"] = self.degraded
        return data


class IncidentPipeline:
    """Normalize -> classify -> validate -> persist -> dispatch -> notify."""

    def __init__(
        self,
        *,
        store: IncidentStore,
        normalizer: RawDataNormalizer,
        classifier: IncidentClassifier,
        dispatcher: ActionDispatcher,
        notifier: IncidentNotifier | None = None,
        validator: AnalysisValidator | None = None,
        staff: StaffDirectory | None = None,
        auto_remediate: bool = True,
    ) -> None:
        self._store = store
        self._normalizer = normalizer
        self._classifier = classifier
        self._dispatcher = dispatcher
        self._notifier = notifier
        self._validator = validator or AnalysisValidator()
        self._staff = staff if staff is not None else StaffDirectory()
        self._auto_remediate = auto_remediate

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        store: IncidentStore | None = None,
        staff: StaffDirectory | None = None,
        backend: ExecutionBackend | None = None,
    ) -> "IncidentPipeline":
        staff = staff if staff is not None else StaffDirectory()
        capability = OpenAIClassificationCapability.from_settings(settings)
        configured = capability.configured

        classifier: IncidentClassifier
        if settings.use_ai_classifier and configured:
            classifier = AIClassifier(capability, staff=staff, timeout=settings.llm_timeout)
        else:
            logger.info("AI classification unavailable; using keyword policy.")
            classifier = KeywordClassifier(staff)

        if backend is None:
            if settings.execution_backend_url:
                backend = HttpExecutionBackend(
                    base_url=settings.execution_backend_url,
                    timeout=settings.execution_timeout,
                )
            else:
                backend = SimulatedExecutionBackend(delay=settings.execution_delay)

        notifier = IncidentNotifier.from_settings(settings, staff=staff)
        dispatcher = ActionDispatcher(
            backend,
            notifier=notifier,
            timeout=settings.execution_timeout,
        )
        return cls(
            store=store or InMemoryIncidentStore(),
            normalizer=RawDataNormalizer(
                capability if configured else None, timeout=settings.llm_timeout
            ),
            classifier=classifier,
            dispatcher=dispatcher,
            notifier=notifier,
            staff=staff,
            auto_remediate=settings.auto_remediate,
        )

    @property
    def store(self) -> IncidentStore:
        return self._store

    @property
    def staff(self) -> StaffDirectory:
        return self._staff

    async def process(self, raw: Any) -> PipelineOutcome:
        """Run one incident through every stage. Raises SchemaViolation before persisting."""

        normalized = await self._normalizer.normalize(raw)
        draft = normalized.value

        classified = await self._classifier.classify(draft.title, draft.description)
        analysis = self._validator.validate(classified.value)

        incident = self._store.create(draft, analysis)
        outcome = PipelineOutcome(
            incident=incident,
            normalization_error=normalized.error,
            classification_error=classified.error,
        )

        if self._auto_remediate and can_execute(incident):
            outcome.action_result = await self._dispatcher.dispatch(incident)

        if self._notifier is not None and analysis.assigned_to != AI_ASSISTANT:
            outcome.assignment_notified = await self._notifier.notify_assignment(incident, analysis)

        logger.info(
            "Processed %s: type=%s action=%s assignee=%s",
            incident.id,
            analysis.type,
            analysis.action.value,
            analysis.assigned_to,
        )
        return outcome

    async def remediate(self, incident_id: str) -> Optional[ActionResult]:
        """Dispatch on operator request; ``None`` when the incident does not exist."""

        incident = self._store.find_by_id(incident_id)
        if incident is None:
            return None
        if not can_execute(incident):
            return ActionResult(
                success=False,
                message=f"Incident {incident_id} has no executable action in status '{incident.status.value}'",
                timestamp=utcnow(),
                reason=DispatchFailure.NOT_ACTIONABLE,
            )
        return await self._dispatcher.dispatch(incident)

    def list_incidents(self) -> List[Incident]:
        return self._store.find_all()

    def get_incident(self, incident_id: str) -> Optional[Incident]:
        return self._store.find_by_id(incident_id)

    def update_status(self, incident_id: str, status: IncidentStatus | str) -> Optional[Incident]:
        return self._store.update_status(incident_id, IncidentStatus(status))
