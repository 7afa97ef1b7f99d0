"""Shared utility helpers for incident manager services."""

from __future__ import annotations

import logging
import sys
import time
import uuid
from datetime import datetime, timezone

_LOG_FORMAT = "[%(name)s] %(levelname)s %(message)s"


def utcnow() -> datetime:
    """Return the current timezone-aware UTC time."""
    return datetime.now(timezone.utc)


def utcnow_iso() -> str:
    """Return the current UTC time as ISO 8601 string."""
    return utcnow().replace(microsecond=0).isoformat()


def epoch_millis() -> int:
    return int(time.time() * 1000)


def new_incident_id() -> str:
    """Return an opaque incident id that stays unique across concurrent creates."""
    return f"incident-{epoch_millis()}-{uuid.uuid4().hex[:6]}"


def new_execution_id(prefix: str) -> str:
    return f"{prefix}-{epoch_millis()}"


def configure_logging(level: str | int = "INFO") -> logging.Logger:
    """Attach a single stdout handler to the ``incident`` logger tree."""

    logger = logging.getLogger("incident")
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        logger.addHandler(handler)
    if isinstance(level, str):
        level = level.upper()
    logger.setLevel(level)
    return logger
