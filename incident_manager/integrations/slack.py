"""Slack incoming-webhook integration."""

from __future__ import annotations

from typing import Any, Dict, Optional

import requests

from ..errors import IntegrationError


class SlackWebhookClient:
    def __init__(
        self,
        webhook_url: str,
        *,
        session: Optional[requests.Session] = None,
        timeout: float = 10.0,
    ) -> None:
        self._webhook_url = webhook_url
        self._session = session or requests.Session()
        self._timeout = timeout

    @property
    def webhook_url(self) -> str:
        return self._webhook_url

    def post(self, message: Dict[str, Any]) -> None:
        """POST a block-kit message; raise IntegrationError on any failure."""

        try:
            response = self._session.post(
                self._webhook_url,
                json=message,
                headers={"Content-Type": "application/json"},
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise IntegrationError(f"Slack webhook request failed: {exc}") from exc

        if not 200 <= response.status_code < 300:
            raise IntegrationError(
                f"Slack webhook returned HTTP {response.status_code}: {response.text[:200]}"
            )
