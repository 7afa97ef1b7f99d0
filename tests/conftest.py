import asyncio
from typing import Dict, List, Optional

import pytest

from incident_manager.autopilot.models import (
    ActionResult,
    AnalysisResult,
    ExecutionPayload,
    Incident,
    IncidentStatus,
    Priority,
    RemediationAction,
)
from incident_manager.autopilot.actions import simulate_execution
from incident_manager.errors import IntegrationError
from incident_manager.utils import utcnow


class FakeCapability:
    """Classification capability returning canned JSON (or raising)."""

    def __init__(self, response: object = None, *, delay: float = 0.0) -> None:
        self.response = response
        self.delay = delay
        self.prompts: List[str] = []

    async def complete_json(self, prompt: str) -> Dict[str, object]:
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if isinstance(self.response, BaseException):
            raise self.response
        return self.response  # type: ignore[return-value]


class RecordingBackend:
    """Execution backend that records payloads and answers like the simulator."""

    def __init__(
        self,
        *,
        success: bool = True,
        error: Optional[BaseException] = None,
        delay: float = 0.0,
    ) -> None:
        self.success = success
        self.error = error
        self.delay = delay
        self.payloads: List[ExecutionPayload] = []

    async def invoke(self, payload: ExecutionPayload) -> ActionResult:
        self.payloads.append(payload)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if not self.success:
            return ActionResult(success=False, message="executor rejected request", timestamp=utcnow())
        return simulate_execution(payload)


class RecordingWebhookClient:
    """Stands in for SlackWebhookClient."""

    webhook_url = "https://hooks.slack.test/services/T000/B000/XXXX"

    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.messages: List[dict] = []

    def post(self, message: dict) -> None:
        if self.fail:
            raise IntegrationError("Slack webhook returned HTTP 500: boom")
        self.messages.append(message)


def make_incident(
    *,
    action: RemediationAction | None = RemediationAction.CLEAR_CACHE,
    target: Optional[str] = "cache",
    assigned_to: Optional[str] = "Lisa",
    status: IncidentStatus = IncidentStatus.OPEN,
    incident_type: str = "memory_leak",
    priority: Priority = Priority.HIGH,
) -> Incident:
    analysis = None
    if action is not None:
        analysis = AnalysisResult(
            type=incident_type,
            priority=priority,
            action=action,
            target=target,
            recommendation="Clear the cache and watch memory usage.",
            assigned_to=assigned_to,
        )
    return Incident(
        id="incident-1730734523000-abc123",
        title="Redis cache memory leak",
        description="Memory usage on the redis cache keeps climbing",
        priority=priority,
        created_at=utcnow(),
        status=status,
        analysis=analysis,
    )


@pytest.fixture
def backend() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture
def webhook() -> RecordingWebhookClient:
    return RecordingWebhookClient()
