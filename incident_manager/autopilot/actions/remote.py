"""Execution backend reached over HTTP."""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any, Dict, Optional

import requests

from ...errors import UpstreamUnavailable
from ...utils import utcnow
from ..models import ActionResult, ExecutionPayload


def _parse_timestamp(value: object) -> datetime:
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            pass
    return utcnow()


class HttpExecutionBackend:
    """POSTs execution payloads to ``<base_url>/invoke``."""

    def __init__(
        self,
        *,
        base_url: str,
        session: Optional[requests.Session] = None,
        timeout: float = 10.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._session = session or requests.Session()
        self._timeout = timeout

    @property
    def invoke_url(self) -> str:
        return f"{self._base_url}/invoke"

    async def invoke(self, payload: ExecutionPayload) -> ActionResult:
        return await asyncio.to_thread(self._post, payload)

    def _post(self, payload: ExecutionPayload) -> ActionResult:
        try:
            response = self._session.post(
                self.invoke_url,
                json=payload.to_dict(),
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise UpstreamUnavailable(
                f"Execution backend request failed: {exc}", source="execution"
            ) from exc
        if response.status_code >= 500:
            raise UpstreamUnavailable(
                f"Execution backend failed with HTTP {response.status_code}", source="execution"
            )
        try:
            data: Dict[str, Any] = response.json()
        except ValueError as exc:
            raise UpstreamUnavailable(
                "Execution backend returned invalid JSON", source="execution"
            ) from exc
        if not isinstance(data, dict):
            raise UpstreamUnavailable("Execution backend returned invalid JSON", source="execution")

        return ActionResult(
            success=bool(data.get("success")),
            message=str(data.get("message") or f"HTTP {response.status_code}"),
            execution_id=data.get("executionId"),
            timestamp=_parse_timestamp(data.get("timestamp")),
        )
