"""Environment / .env settings loader."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

from incident_manager.errors import ConfigurationError

_PROJECT_ROOT = Path(__file__).resolve().parents[1]
_ENV_PATH = _PROJECT_ROOT / ".env"

# Load .env when present; real environment variables win.
load_dotenv(_ENV_PATH, override=False)

_OPENAI_API_KEY_OVERRIDE: str | None = None


@dataclass(frozen=True)
class Settings:
    """Runtime configuration for the incident pipeline and backend."""

    openai_api_key: str | None = None
    llm_model: str = "gpt-4o-mini"
    llm_base_url: str | None = None
    llm_timeout: float = 20.0
    slack_webhook_url: str | None = None
    notify_timeout: float = 10.0
    execution_backend_url: str | None = None
    execution_delay: float = 0.5
    execution_timeout: float = 10.0
    auto_remediate: bool = True
    use_ai_classifier: bool = True
    backend_host: str = "127.0.0.1"
    backend_port: int = 8001
    backend_reload: bool = False
    log_level: str = "info"


def _env_str(name: str) -> str | None:
    value = os.getenv(name, "").strip()
    return value or None


def _env_float(name: str, default: float, *, allow_zero: bool = False) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        parsed = float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc
    if parsed < 0 or (parsed == 0 and not allow_zero):
        floor = "zero or more" if allow_zero else "greater than zero"
        raise ConfigurationError(f"{name} must be {floor}.")
    return parsed


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw not in {"0", "false", "no", "off"}


@lru_cache(maxsize=1)
def _load_env_openai_api_key() -> str | None:
    """Read the OpenAI key from the environment only once."""

    return _env_str("OPENAI_API_KEY") or _env_str("API_KEY")


def get_openai_api_key() -> str | None:
    """Return the API key from the runtime override or the environment."""

    if _OPENAI_API_KEY_OVERRIDE:
        return _OPENAI_API_KEY_OVERRIDE
    return _load_env_openai_api_key()


def set_openai_api_key(value: str | None) -> None:
    """Override the API key at runtime (empty clears the override)."""

    global _OPENAI_API_KEY_OVERRIDE
    sanitized = (value or "").strip()
    _OPENAI_API_KEY_OVERRIDE = sanitized or None


def load_settings() -> Settings:
    """Build a :class:`Settings` snapshot from the current environment."""

    return Settings(
        openai_api_key=get_openai_api_key(),
        llm_model=_env_str("INCIDENT_LLM_MODEL") or "gpt-4o-mini",
        llm_base_url=_env_str("INCIDENT_LLM_BASE_URL"),
        llm_timeout=_env_float("INCIDENT_LLM_TIMEOUT", 20.0),
        slack_webhook_url=_env_str("SLACK_WEBHOOK_URL"),
        notify_timeout=_env_float("INCIDENT_NOTIFY_TIMEOUT", 10.0),
        execution_backend_url=_env_str("INCIDENT_EXECUTION_URL"),
        execution_delay=_env_float("INCIDENT_EXECUTION_DELAY", 0.5, allow_zero=True),
        execution_timeout=_env_float("INCIDENT_EXECUTION_TIMEOUT", 10.0),
        auto_remediate=_env_flag("INCIDENT_AUTO_REMEDIATE", True),
        use_ai_classifier=_env_flag("INCIDENT_USE_AI", True),
        backend_host=_env_str("INCIDENT_BACKEND_HOST") or "127.0.0.1",
        backend_port=_env_int("INCIDENT_BACKEND_PORT", 8001),
        backend_reload=_env_flag("INCIDENT_BACKEND_RELOAD", False),
        log_level=(_env_str("INCIDENT_BACKEND_LOG_LEVEL") or "info").lower(),
    )
