"""Execution backend contract and the in-process simulator."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from ...utils import new_execution_id, utcnow
from ..models import ActionResult, ExecutionPayload

logger = logging.getLogger("incident.execution")

_SIMULATED_OUTCOMES = {
    "restart_service": ("restart", "default-service", "Service {target} restart initiated"),
    "scale_up": ("scale", "default-resource", "Resource {target} scaling initiated"),
    "clear_cache": ("cache", "default-cache", "Cache {target} cleared successfully"),
}


class ExecutionBackend(Protocol):
    """Performs a remediation action. At-most-once; callers never retry."""

    async def invoke(self, payload: ExecutionPayload) -> ActionResult:
        """Execute the payload and report the outcome."""


def simulate_execution(payload: ExecutionPayload) -> ActionResult:
    """Deterministic mock outcome for an execution payload."""

    if payload.action in _SIMULATED_OUTCOMES:
        prefix, default_target, template = _SIMULATED_OUTCOMES[payload.action]
        target = payload.target or default_target
        logger.info("[simulator] %s on %s (priority %s)", payload.action, target, payload.priority)
        return ActionResult(
            success=True,
            message=template.format(target=target),
            execution_id=new_execution_id(prefix),
            timestamp=utcnow(),
        )
    if payload.action == "notify_human":
        details = payload.incident_details or {}
        logger.info(
            "[simulator] notifying human for %s: %s",
            payload.incident_id,
            details.get("title", "(no title)"),
        )
        return ActionResult(
            success=True,
            message="Human notification sent successfully",
            execution_id=new_execution_id("notify"),
            timestamp=utcnow(),
        )
    if payload.action == "none":
        return ActionResult(
            success=True,
            message="No action required",
            execution_id=new_execution_id("mock-exec"),
            timestamp=utcnow(),
        )
    return ActionResult(
        success=False,
        message=f"Unknown action: {payload.action}",
        timestamp=utcnow(),
    )


class SimulatedExecutionBackend:
    """Stands in for the production executor with a fixed simulated delay."""

    def __init__(self, *, delay: float = 0.5) -> None:
        self._delay = delay

    async def invoke(self, payload: ExecutionPayload) -> ActionResult:
        if self._delay > 0:
            await asyncio.sleep(self._delay)
        return simulate_execution(payload)
