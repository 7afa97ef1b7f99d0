"""Incident classification and assignment (keyword policy and AI-backed)."""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Dict, List, Optional, Protocol, Sequence, Tuple

from ...errors import UpstreamUnavailable
from ...integrations.llm import ClassificationCapability
from ..models import AnalysisResult, Priority, RemediationAction, StageResult
from ..staff import AI_ASSISTANT, StaffDirectory
from .prompts import build_analysis_prompt

logger = logging.getLogger("incident.classifier")

MANUAL_REVIEW_MESSAGE = "Automatic analysis failed. Manual review required."

# (type, priority, action, trigger words), checked in order.
KEYWORD_RULES: Sequence[Tuple[str, Priority, RemediationAction, Tuple[str, ...]]] = (
    ("server_down", Priority.CRITICAL, RemediationAction.RESTART_SERVICE, ("down", "crashed")),
    ("high_cpu", Priority.HIGH, RemediationAction.SCALE_UP, ("cpu", "slow")),
    ("memory_leak", Priority.HIGH, RemediationAction.CLEAR_CACHE, ("memory", "leak")),
)

RECOMMENDATIONS: Dict[str, str] = {
    "server_down": "Restart the affected service and confirm it reports healthy again.",
    "high_cpu": "Scale up the affected resource and look for runaway workloads.",
    "memory_leak": "Clear the cache and watch memory usage for renewed growth.",
    "unknown": "Route the incident to an engineer for manual investigation.",
}

# Canonical resource names and the patterns that identify them.
TARGET_PATTERNS: Sequence[Tuple[str, re.Pattern[str]]] = (
    ("auth-service", re.compile(r"\bauth(?:-service|entication)?\b")),
    ("cache", re.compile(r"\b(?:cache|redis|memcached)\b")),
    ("database", re.compile(r"\b(?:database|db|postgres(?:ql)?|mysql|mongo(?:db)?)\b")),
    ("api", re.compile(r"\b(?:api|gateway|endpoints?)\b")),
)

TARGET_SPECIALIZATIONS: Dict[str, Tuple[str, ...]] = {
    "database": ("database", "backend"),
    "auth-service": ("backend",),
    "api": ("api", "performance"),
    "cache": ("cache", "infrastructure"),
}

TYPE_SPECIALIZATIONS: Dict[str, Tuple[str, ...]] = {
    "server_down": ("backend",),
    "high_cpu": ("performance",),
    "memory_leak": ("cache", "infrastructure"),
}

_NULL_TARGETS = {"", "null", "none", "n/a", "unknown"}


def infer_target(text: str) -> Optional[str]:
    """Name the affected resource when the text mentions one."""

    lowered = text.lower()
    for name, pattern in TARGET_PATTERNS:
        if pattern.search(lowered):
            return name
    return None


def fallback_analysis() -> AnalysisResult:
    """Fixed safe result used whenever the AI-backed path cannot answer."""

    return AnalysisResult(
        type="unknown",
        priority=Priority.MEDIUM,
        action=RemediationAction.NOTIFY_HUMAN,
        target=None,
        recommendation=MANUAL_REVIEW_MESSAGE,
        assigned_to=AI_ASSISTANT,
    )


class IncidentClassifier(Protocol):
    """Derive an analysis candidate from a normalized incident. Never raises."""

    async def classify(self, title: str, description: str) -> StageResult[Dict[str, object]]:
        ...


class KeywordClassifier:
    """Deterministic keyword policy; the baseline the AI path stays consistent with."""

    def __init__(self, staff: StaffDirectory | None = None) -> None:
        self._staff = staff if staff is not None else StaffDirectory()

    def analyze(self, title: str, description: str) -> AnalysisResult:
        text = f"{title} {description}".lower()
        incident_type, priority, action = "unknown", Priority.MEDIUM, RemediationAction.NOTIFY_HUMAN
        for rule_type, rule_priority, rule_action, words in KEYWORD_RULES:
            if any(word in text for word in words):
                incident_type, priority, action = rule_type, rule_priority, rule_action
                break

        target = infer_target(text)
        return AnalysisResult(
            type=incident_type,
            priority=priority,
            action=action,
            target=target,
            recommendation=RECOMMENDATIONS[incident_type],
            assigned_to=self._assign(incident_type, target),
        )

    def _assign(self, incident_type: str, target: Optional[str]) -> str:
        if incident_type == "unknown" or not self._staff:
            return AI_ASSISTANT
        keywords: List[str] = []
        if target:
            keywords.extend(TARGET_SPECIALIZATIONS.get(target, ()))
        keywords.extend(TYPE_SPECIALIZATIONS.get(incident_type, ()))
        member = self._staff.match(keywords)
        return member.name if member else AI_ASSISTANT

    async def classify(self, title: str, description: str) -> StageResult[Dict[str, object]]:
        return StageResult(value=self.analyze(title, description).to_dict())


class AIClassifier:
    """Asks the classification capability for an analysis and an assignee."""

    def __init__(
        self,
        capability: ClassificationCapability,
        *,
        staff: StaffDirectory | None = None,
        timeout: float = 20.0,
    ) -> None:
        self._capability = capability
        self._staff = staff if staff is not None else StaffDirectory()
        self._timeout = timeout

    async def classify(self, title: str, description: str) -> StageResult[Dict[str, object]]:
        try:
            candidate = await self._request(title, description)
        except asyncio.TimeoutError:
            error = UpstreamUnavailable(
                f"Classification timed out after {self._timeout:.1f}s", source="llm"
            )
            logger.warning("Using fallback analysis: %s", error)
            return StageResult(value=fallback_analysis().to_dict(), error=error)
        except UpstreamUnavailable as exc:
            logger.warning("Using fallback analysis: %s", exc)
            return StageResult(value=fallback_analysis().to_dict(), error=exc)
        except Exception as exc:  # noqa: BLE001 - this stage never raises
            logger.exception("Unexpected classification failure")
            error = UpstreamUnavailable(f"Classification failed: {exc}", source="llm")
            return StageResult(value=fallback_analysis().to_dict(), error=error)
        return StageResult(value=candidate)

    async def _request(self, title: str, description: str) -> Dict[str, object]:
        prompt = build_analysis_prompt(title, description, self._staff.roster_lines())
        data = await asyncio.wait_for(
            self._capability.complete_json(prompt), timeout=self._timeout
        )
        if not isinstance(data, dict):
            raise UpstreamUnavailable("Classification output is not a JSON object", source="llm")

        candidate = dict(data)
        candidate["target"] = self._clean_target(candidate.get("target"))
        candidate["assignedTo"] = self._resolve_assignee(candidate.get("assignedTo"))
        return candidate

    @staticmethod
    def _clean_target(value: object) -> object:
        """Map the model's free-form target onto a known resource name."""

        if value is None:
            return None
        if isinstance(value, str):
            target = infer_target(value)
            if target is None and value.strip().lower() not in _NULL_TARGETS:
                logger.info("Target %r matches no known resource; dropping it", value)
            return target
        return value

    def _resolve_assignee(self, value: object) -> str:
        if not self._staff:
            return AI_ASSISTANT
        member = self._staff.get(value.strip() if isinstance(value, str) else None)
        if member is None:
            logger.info("Assignee %r is not on the roster; using %s", value, AI_ASSISTANT)
            return AI_ASSISTANT
        return member.name
