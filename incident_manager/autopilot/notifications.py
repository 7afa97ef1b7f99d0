"""Human-readable incident notifications delivered to a Slack webhook."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

from ..config import Settings
from ..errors import IntegrationError
from ..integrations.slack import SlackWebhookClient
from ..utils import utcnow
from .models import ActionResult, AnalysisResult, Incident
from .staff import AI_ASSISTANT, StaffDirectory

logger = logging.getLogger("incident.notifier")


def _field(label: str, value: str) -> Dict[str, str]:
    return {"type": "mrkdwn", "text": f"*{label}:*\n{value}"}


def _section(label: str, value: str) -> Dict[str, Any]:
    return {"type": "section", "text": {"type": "mrkdwn", "text": f"*{label}:*\n{value}"}}


class IncidentNotifier:
    """Formats incident summaries and posts them; never fails the caller."""

    def __init__(
        self,
        client: Optional[SlackWebhookClient] = None,
        *,
        staff: Optional[StaffDirectory] = None,
    ) -> None:
        self._client = client
        self._staff = staff if staff is not None else StaffDirectory()

    @classmethod
    def from_settings(
        cls, settings: Settings, *, staff: Optional[StaffDirectory] = None
    ) -> "IncidentNotifier":
        client = None
        if settings.slack_webhook_url:
            client = SlackWebhookClient(settings.slack_webhook_url, timeout=settings.notify_timeout)
        return cls(client, staff=staff)

    @property
    def enabled(self) -> bool:
        return self._client is not None

    async def notify_assignment(
        self, incident: Incident, analysis: Optional[AnalysisResult] = None
    ) -> bool:
        analysis = analysis or incident.analysis
        if analysis is None:
            logger.info("Incident %s has no analysis; assignment notice skipped.", incident.id)
            return False
        message = self.build_assignment_message(incident, analysis)
        return await self._deliver(message, kind="assignment", incident_id=incident.id)

    async def notify_action(
        self,
        incident: Incident,
        result: ActionResult,
        analysis: Optional[AnalysisResult] = None,
    ) -> bool:
        analysis = analysis or incident.analysis
        if analysis is None:
            logger.info("Incident %s has no analysis; action notice skipped.", incident.id)
            return False
        message = self.build_action_message(incident, analysis, result)
        return await self._deliver(message, kind="action", incident_id=incident.id)

    def build_assignment_message(
        self, incident: Incident, analysis: AnalysisResult
    ) -> Dict[str, Any]:
        assignee = analysis.assigned_to or AI_ASSISTANT
        blocks = self._summary_blocks(
            f"New incident assigned to {assignee}: {incident.title}", incident, analysis
        )
        blocks.append({"type": "divider"})
        blocks.append(self._context_block(f"Assigned to {self._assignee_label(assignee)}"))
        return {
            "text": f"[{analysis.priority.value.upper()}] Incident assigned to {assignee}",
            "blocks": blocks,
        }

    def build_action_message(
        self, incident: Incident, analysis: AnalysisResult, result: ActionResult
    ) -> Dict[str, Any]:
        status_label = "Succeeded" if result.success else "Failed"
        blocks = self._summary_blocks(
            f"{AI_ASSISTANT} remediated: {incident.title}", incident, analysis
        )
        execution = f"{status_label} - {result.message}"
        if result.execution_id:
            execution += f" (execution {result.execution_id})"
        blocks.append(_section("Execution status", execution))
        blocks.append({"type": "divider"})
        blocks.append(
            self._context_block(f"Handled by {self._assignee_label(analysis.assigned_to or AI_ASSISTANT)}")
        )
        return {
            "text": f"*{AI_ASSISTANT.upper()} REMEDIATED INCIDENT*",
            "blocks": blocks,
        }

    def _summary_blocks(
        self, header: str, incident: Incident, analysis: AnalysisResult
    ) -> List[Dict[str, Any]]:
        return [
            {
                "type": "header",
                "text": {"type": "plain_text", "text": header[:150], "emoji": False},
            },
            {
                "type": "section",
                "fields": [
                    _field("Incident ID", incident.id),
                    _field("Priority", analysis.priority.value.upper()),
                    _field("Type", analysis.type),
                    _field("Target", analysis.target or "N/A"),
                ],
            },
            _section("Problem", incident.description),
            _section("Recommended action", analysis.action.value),
            _section("Recommendation", analysis.recommendation or "No recommendation"),
        ]

    def _assignee_label(self, name: str) -> str:
        member = self._staff.get(name)
        if member is None:
            return name
        return f"{member.name} ({member.specialization})"

    @staticmethod
    def _context_block(prefix: str) -> Dict[str, Any]:
        stamp = utcnow().strftime("%Y-%m-%d %H:%M:%S UTC")
        return {
            "type": "context",
            "elements": [{"type": "mrkdwn", "text": f"{prefix} - {stamp}"}],
        }

    async def _deliver(self, message: Dict[str, Any], *, kind: str, incident_id: str) -> bool:
        if self._client is None:
            logger.info("Slack webhook not configured; %s notice for %s kept local.", kind, incident_id)
            return False
        try:
            await asyncio.to_thread(self._client.post, message)
        except IntegrationError as exc:
            logger.warning("Failed to deliver %s notice for %s: %s", kind, incident_id, exc)
            return False
        logger.info("Delivered %s notice for %s", kind, incident_id)
        return True
