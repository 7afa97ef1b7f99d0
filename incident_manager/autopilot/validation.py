"""Contract checks for analysis results coming from untrusted sources."""

from __future__ import annotations

from typing import Any, List, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from ..errors import SchemaViolation
from .models import AnalysisResult, Priority, RemediationAction


class AnalysisSchema(BaseModel):
    """Wire shape of an analysis result. Strict: values are never coerced.

    Whether the target suits the action is decided by the dispatch guard.
    """

    model_config = ConfigDict(strict=True, extra="ignore")

    type: str
    priority: Literal["critical", "high", "medium", "low"]
    action: Literal["restart_service", "scale_up", "clear_cache", "notify_human", "none"]
    target: Optional[str]
    recommendation: str
    assignedTo: Optional[str] = None

    @field_validator("type", "recommendation")
    @classmethod
    def _non_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must be a non-empty string")
        return value


def _describe(exc: ValidationError) -> List[str]:
    issues: List[str] = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "analysis"
        issues.append(f"{location}: {error.get('msg', 'invalid value')}")
    return issues


class AnalysisValidator:
    """Verifies every analysis field before it is trusted downstream."""

    def validate(self, candidate: AnalysisResult | Mapping[str, Any]) -> AnalysisResult:
        if isinstance(candidate, AnalysisResult):
            self._check(candidate.to_dict())
            return candidate
        if not isinstance(candidate, Mapping):
            raise SchemaViolation(["analysis result must be a JSON object"])

        schema = self._check(candidate)
        return AnalysisResult(
            type=schema.type,
            priority=Priority(schema.priority),
            action=RemediationAction(schema.action),
            target=schema.target,
            recommendation=schema.recommendation,
            assigned_to=schema.assignedTo,
        )

    @staticmethod
    def _check(data: Mapping[str, Any]) -> AnalysisSchema:
        try:
            return AnalysisSchema.model_validate(dict(data))
        except ValidationError as exc:
            raise SchemaViolation(_describe(exc)) from exc


def validate_analysis(candidate: AnalysisResult | Mapping[str, Any]) -> AnalysisResult:
    return AnalysisValidator().validate(candidate)
