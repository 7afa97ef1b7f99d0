"""In-process FastAPI app that simulates the remediation execution backend."""

from __future__ import annotations

import asyncio
from typing import Dict, Optional

from fastapi import FastAPI
from pydantic import BaseModel

from incident_manager.autopilot.actions import simulate_execution
from incident_manager.autopilot.models import ExecutionPayload
from incident_manager.config import load_settings

fake_actions_app = FastAPI(title="Execution Backend Simulator", version="1.0.0")


class SimulatedInvocationPayload(BaseModel):
    action: str
    target: Optional[str] = None
    incidentId: str
    priority: str
    incidentDetails: Optional[Dict[str, str]] = None


@fake_actions_app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@fake_actions_app.post("/invoke")
async def invoke(payload: SimulatedInvocationPayload) -> dict[str, object]:
    """Pretend to perform a remediation and return the backend contract."""

    delay = load_settings().execution_delay
    if delay:
        await asyncio.sleep(delay)
    result = simulate_execution(ExecutionPayload.from_dict(payload.model_dump()))
    return {
        "success": result.success,
        "message": result.message,
        "executionId": result.execution_id,
        "timestamp": result.timestamp.isoformat(),
    }
