"""Service layer for the incident autopilot."""

from .pipeline import IncidentPipeline, PipelineOutcome

__all__ = ["IncidentPipeline", "PipelineOutcome"]
