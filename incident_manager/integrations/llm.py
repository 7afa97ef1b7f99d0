"""Classification capability backed by an OpenAI-compatible chat model."""

from __future__ import annotations

import json
import logging
from typing import Dict, Protocol

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from ..config import Settings
from ..errors import UpstreamUnavailable

logger = logging.getLogger("incident.llm")

SYSTEM_PROMPT = (
    "You are an SRE assistant inside an incident management system. "
    "Always answer with exactly one JSON object and no other text."
)


class ClassificationCapability(Protocol):
    """Anything that turns a prompt into a single JSON object."""

    async def complete_json(self, prompt: str) -> Dict[str, object]:
        """Return the parsed JSON object or raise UpstreamUnavailable."""


def extract_text(value: object) -> str:
    """Flatten a chat model response (message, dict or list of parts) to text."""

    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if hasattr(value, "content"):
        return extract_text(getattr(value, "content"))
    if isinstance(value, dict):
        for key in ("content", "text", "output"):
            if key in value:
                return extract_text(value[key])
        return ""
    if isinstance(value, list):
        parts = [extract_text(item) for item in value]
        return "\n".join(part for part in parts if part).strip()
    return str(value).strip()


def parse_json_object(output: str) -> Dict[str, object]:
    """Parse model output into a JSON object, tolerating surrounding prose."""

    if not output:
        raise UpstreamUnavailable("Classification capability returned no output", source="llm")
    try:
        parsed = json.loads(output)
    except json.JSONDecodeError:
        start = output.find("{")
        end = output.rfind("}")
        if start == -1 or end == -1 or start >= end:
            raise UpstreamUnavailable("Classification output is not JSON", source="llm")
        try:
            parsed = json.loads(output[start : end + 1])
        except json.JSONDecodeError as exc:
            raise UpstreamUnavailable("Classification output is not JSON", source="llm") from exc
    if not isinstance(parsed, dict):
        raise UpstreamUnavailable("Classification output is not a JSON object", source="llm")
    return parsed


class OpenAIClassificationCapability:
    """Sends prompts to ChatOpenAI and parses the JSON reply."""

    def __init__(
        self,
        *,
        api_key: str | None,
        model: str = "gpt-4o-mini",
        base_url: str | None = None,
        temperature: float = 0.0,
        max_tokens: int = 700,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._base_url = base_url
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._llm = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "OpenAIClassificationCapability":
        return cls(
            api_key=settings.openai_api_key,
            model=settings.llm_model,
            base_url=settings.llm_base_url,
        )

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def _client(self):
        if self._llm is None:
            llm = ChatOpenAI(
                model=self._model,
                temperature=self._temperature,
                max_tokens=self._max_tokens,
                openai_api_key=self._api_key,
                openai_api_base=self._base_url,
                default_headers={"X-Title": "AI Incident Manager"},
            )
            self._llm = llm.bind(response_format={"type": "json_object"})
        return self._llm

    async def complete_json(self, prompt: str) -> Dict[str, object]:
        if not self.configured:
            raise UpstreamUnavailable("No API key configured for the classification model", source="llm")

        logger.debug("Prompt submitted: %s", prompt)
        try:
            message = await self._client().ainvoke(
                [SystemMessage(content=SYSTEM_PROMPT), HumanMessage(content=prompt)]
            )
        except Exception as exc:
            logger.exception("Classification model call failed")
            raise UpstreamUnavailable(f"Classification model call failed: {exc}", source="llm") from exc

        output = extract_text(message)
        logger.debug("Raw model output: %s", output)
        return parse_json_object(output)
