"""FastAPI application exposing the incident manager backend."""

from __future__ import annotations

import logging
from typing import Any, Literal

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from incident_manager.autopilot.models import DispatchFailure
from incident_manager.autopilot.services import IncidentPipeline
from incident_manager.backend.fake_actions_api import fake_actions_app
from incident_manager.config import Settings, load_settings
from incident_manager.errors import InvalidTransition, SchemaViolation
from incident_manager.utils import configure_logging

logger = logging.getLogger("incident.backend")


class IncidentCreatePayload(BaseModel):
    description: Any = Field(..., description="Raw monitoring payload or free-text alert")


class IncidentStatusPayload(BaseModel):
    status: Literal["open", "investigating", "resolved", "closed"]


def _message(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


def _error(status_code: int, error: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, **extra})


def create_app(
    pipeline: IncidentPipeline | None = None,
    *,
    settings: Settings | None = None,
) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings.log_level)
    pipeline = pipeline or IncidentPipeline.from_settings(settings)

    app = FastAPI(title="AI Incident Manager Backend", version="0.3.0")
    app.state.pipeline = pipeline
    app.mount("/action-simulator", fake_actions_app)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/staff")
    def list_staff() -> dict[str, object]:
        return {
            "data": [
                {"id": member.id, "name": member.name, "specialization": member.specialization}
                for member in pipeline.staff
            ]
        }

    @app.get("/incidents")
    def list_incidents():
        try:
            incidents = pipeline.list_incidents()
        except Exception:
            logger.exception("Incident store read failed")
            return _message(500, "Store error")
        if not incidents:
            return _message(404, "no incidents")
        return {"data": [incident.to_dict() for incident in incidents]}

    @app.get("/incidents/{incident_id}")
    def get_incident(incident_id: str):
        incident = pipeline.get_incident(incident_id)
        if incident is None:
            return _message(404, "Incident not found")
        return {"data": incident.to_dict()}

    @app.post("/incidents", status_code=201)
    async def create_incident(payload: IncidentCreatePayload):
        try:
            outcome = await pipeline.process(payload.description)
        except SchemaViolation as exc:
            logger.warning("Rejected analysis result: %s", exc)
            return _error(500, str(exc), issues=exc.issues)
        except Exception:
            logger.exception("Incident pipeline failed")
            return _error(500, "Incident pipeline failed")
        return {"data": outcome.to_dict()}

    @app.patch("/incidents/{incident_id}")
    def update_incident_status(incident_id: str, payload: IncidentStatusPayload):
        try:
            incident = pipeline.update_status(incident_id, payload.status)
        except InvalidTransition as exc:
            return _message(409, str(exc))
        except Exception:
            logger.exception("Status update failed for %s", incident_id)
            return _error(500, "Internal server error")
        if incident is None:
            return _message(404, "Incident not found")
        return {"incident": incident.to_dict()}

    @app.post("/incidents/{incident_id}/actions")
    async def execute_incident_action(incident_id: str):
        result = await pipeline.remediate(incident_id)
        if result is None:
            return _message(404, "Incident not found")
        if result.reason is DispatchFailure.NOT_ACTIONABLE:
            return _message(409, result.message)
        return {"result": result.to_dict()}

    return app


app = create_app()
