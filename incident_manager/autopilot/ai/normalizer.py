"""Turns arbitrary monitoring payloads into incident drafts."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from ...errors import UpstreamUnavailable
from ...integrations.llm import ClassificationCapability
from ..models import IncidentDraft, IncidentStatus, Priority, StageResult
from .prompts import build_normalization_prompt

logger = logging.getLogger("incident.normalizer")

DEGRADED_TITLE = "Unrecognized incident (normalization failed)"
RAW_PREVIEW_LIMIT = 200


def serialize_payload(raw: Any, *, indent: int | None = None) -> str:
    """Best-effort JSON rendering of a payload; never raises."""

    try:
        return json.dumps(raw, indent=indent, ensure_ascii=False, default=str)
    except Exception:  # noqa: BLE001 - default=str may call arbitrary __str__
        pass
    try:
        return repr(raw)
    except Exception:  # noqa: BLE001 - arbitrary __repr__ implementations
        return f"<unserializable {type(raw).__name__}>"


def degraded_draft(raw: Any) -> IncidentDraft:
    preview = serialize_payload(raw)[:RAW_PREVIEW_LIMIT]
    return IncidentDraft(
        title=DEGRADED_TITLE,
        description=f"Raw data could not be normalized: {preview}",
        priority=Priority.MEDIUM,
        status=IncidentStatus.OPEN,
    )


def _coerce_priority(value: object) -> Priority:
    if isinstance(value, str):
        try:
            return Priority(value.strip().lower())
        except ValueError:
            pass
    return Priority.MEDIUM


def _required_text(data: dict, key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise UpstreamUnavailable(f"Normalization output has no usable '{key}'", source="llm")
    return value.strip()


class RawDataNormalizer:
    """Delegates summarization to the classification capability with a degraded fallback."""

    def __init__(
        self,
        capability: ClassificationCapability | None,
        *,
        timeout: float = 20.0,
    ) -> None:
        self._capability = capability
        self._timeout = timeout

    async def normalize(self, raw: Any) -> StageResult[IncidentDraft]:
        try:
            draft = await self._normalize_with_capability(raw)
        except UpstreamUnavailable as exc:
            logger.warning("Normalization fell back to degraded incident: %s", exc)
            return StageResult(value=degraded_draft(raw), error=exc)
        except asyncio.TimeoutError:
            error = UpstreamUnavailable(
                f"Normalization timed out after {self._timeout:.1f}s", source="llm"
            )
            logger.warning("Normalization fell back to degraded incident: %s", error)
            return StageResult(value=degraded_draft(raw), error=error)
        except Exception as exc:  # noqa: BLE001 - the fallback must always succeed
            logger.exception("Unexpected normalization failure")
            error = UpstreamUnavailable(f"Normalization failed: {exc}", source="llm")
            return StageResult(value=degraded_draft(raw), error=error)
        return StageResult(value=draft)

    async def _normalize_with_capability(self, raw: Any) -> IncidentDraft:
        if self._capability is None:
            raise UpstreamUnavailable("No classification capability configured", source="llm")

        prompt = build_normalization_prompt(serialize_payload(raw, indent=2))
        data = await asyncio.wait_for(
            self._capability.complete_json(prompt), timeout=self._timeout
        )
        if not isinstance(data, dict):
            raise UpstreamUnavailable("Normalization output is not a JSON object", source="llm")

        return IncidentDraft(
            title=_required_text(data, "title"),
            description=_required_text(data, "description"),
            priority=_coerce_priority(data.get("priority")),
            status=IncidentStatus.OPEN,
        )
