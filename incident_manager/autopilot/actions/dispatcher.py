"""Maps an incident's analysis to a remediation call on the execution backend."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from ...errors import UpstreamUnavailable
from ...utils import utcnow
from ..models import (
    ActionResult,
    AnalysisResult,
    DispatchFailure,
    ExecutionPayload,
    Incident,
    RemediationAction,
)
from ..notifications import IncidentNotifier
from ..staff import AI_ASSISTANT
from .base import ExecutionBackend
from .guard import TargetPolicy

logger = logging.getLogger("incident.dispatcher")


@dataclass
class ExecutionSummary:
    total: int = 0
    successful: int = 0
    failed: int = 0
    skipped: int = 0


def can_execute(incident: Incident) -> bool:
    """True when the incident carries an actionable analysis and is still live."""

    if incident.analysis is None:
        return False
    if incident.analysis.action is RemediationAction.NONE:
        return False
    return not incident.is_terminal


def _payload_for(incident: Incident, analysis: AnalysisResult) -> ExecutionPayload:
    payload = ExecutionPayload(
        action=analysis.action.value,
        target=analysis.target,
        incident_id=incident.id,
        priority=analysis.priority.value,
    )
    if analysis.action is RemediationAction.NOTIFY_HUMAN:
        payload.incident_details = {
            "title": incident.title,
            "description": incident.description,
        }
    return payload


def build_execution_payload(incident: Incident) -> Optional[ExecutionPayload]:
    if incident.analysis is None:
        return None
    return _payload_for(incident, incident.analysis)


def summarize(results: Iterable[ActionResult]) -> ExecutionSummary:
    summary = ExecutionSummary()
    for result in results:
        summary.total += 1
        if result.metadata.get("action") == RemediationAction.NONE.value:
            summary.skipped += 1
        elif result.success:
            summary.successful += 1
        else:
            summary.failed += 1
    return summary


def _failure(reason: DispatchFailure, message: str, action: str) -> ActionResult:
    return ActionResult(
        success=False,
        message=message,
        timestamp=utcnow(),
        reason=reason,
        metadata={"action": action},
    )


class ActionDispatcher:
    """Validates and executes remediation actions; reports, never retries."""

    def __init__(
        self,
        backend: ExecutionBackend,
        *,
        policy: TargetPolicy | None = None,
        notifier: IncidentNotifier | None = None,
        timeout: float = 10.0,
        assistant_name: str = AI_ASSISTANT,
    ) -> None:
        self._backend = backend
        self._policy = policy or TargetPolicy()
        self._notifier = notifier
        self._timeout = timeout
        self._assistant_name = assistant_name

    can_execute = staticmethod(can_execute)
    build_execution_payload = staticmethod(build_execution_payload)
    summarize = staticmethod(summarize)

    async def dispatch(self, incident: Incident) -> ActionResult:
        analysis = incident.analysis
        if analysis is None:
            return _failure(
                DispatchFailure.MISSING_ANALYSIS,
                "No analysis available for this incident",
                RemediationAction.NONE.value,
            )

        action = analysis.action
        if action is RemediationAction.NONE:
            return ActionResult(
                success=True,
                message="No action required for this incident",
                timestamp=utcnow(),
                metadata={"action": action.value},
            )

        decision = self._policy.authorize(action, analysis.target)
        if not decision.allowed:
            logger.info("Dispatch for %s rejected: %s", incident.id, decision.reason)
            return _failure(
                decision.failure or DispatchFailure.INVALID_TARGET,
                decision.reason,
                action.value,
            )

        payload = _payload_for(incident, analysis)
        result = await self.dispatch_for_action(incident, payload)
        if not result.success or analysis.assigned_to != self._assistant_name:
            return result

        primary_execution_id = result.execution_id
        result = await self.dispatch_for_autonomous_assistant(incident, payload)
        result.metadata["primary_execution_id"] = primary_execution_id
        if result.success and self._notifier is not None:
            await self._notifier.notify_action(incident, result)
        return result

    async def dispatch_for_action(self, incident: Incident, payload: ExecutionPayload) -> ActionResult:
        """The remediation call every actionable incident receives."""

        logger.info("Executing action %r for incident %s", payload.action, incident.id)
        return await self._invoke(payload, invocation="action")

    async def dispatch_for_autonomous_assistant(
        self, incident: Incident, payload: ExecutionPayload
    ) -> ActionResult:
        """Second, separate call made on the automated assistant's own authority."""

        logger.info(
            "[%s] autonomous %r on %s for incident %s",
            self._assistant_name,
            payload.action,
            payload.target,
            incident.id,
        )
        return await self._invoke(payload, invocation="autonomous_assistant")

    async def dispatch_many(self, incidents: Iterable[Incident]) -> List[ActionResult]:
        results: List[ActionResult] = []
        for incident in incidents:
            results.append(await self.dispatch(incident))
        return results

    async def _invoke(self, payload: ExecutionPayload, *, invocation: str) -> ActionResult:
        try:
            result = await asyncio.wait_for(self._backend.invoke(payload), timeout=self._timeout)
        except asyncio.TimeoutError:
            message = f"Execution backend timed out after {self._timeout:.1f}s"
            logger.warning("%s (action %r)", message, payload.action)
            result = _failure(DispatchFailure.UPSTREAM_UNAVAILABLE, message, payload.action)
        except UpstreamUnavailable as exc:
            logger.warning("Execution backend unavailable: %s", exc)
            result = _failure(DispatchFailure.UPSTREAM_UNAVAILABLE, str(exc), payload.action)
        except Exception as exc:  # noqa: BLE001 - reported as a failed ActionResult
            logger.exception("Execution backend raised for action %r", payload.action)
            result = _failure(
                DispatchFailure.BACKEND_FAILURE,
                f"Failed to execute action: {exc}",
                payload.action,
            )
        else:
            if not result.success:
                result.reason = result.reason or DispatchFailure.BACKEND_FAILURE
                result.message = f'Action "{payload.action}" failed: {result.message}'
                logger.warning("Action %r for %s failed: %s", payload.action, payload.incident_id, result.message)

        result.metadata.setdefault("action", payload.action)
        result.metadata["invocation"] = invocation
        return result
