"""Shared exception types for the incident manager."""

from __future__ import annotations

from typing import Sequence


class IncidentManagerError(Exception):
    """Base class for all incident manager failures."""


class ConfigurationError(IncidentManagerError):
    """Raised when environment configuration cannot be parsed."""


class IntegrationError(IncidentManagerError, RuntimeError):
    """Raised when an upstream integration call fails."""


class UpstreamUnavailable(IntegrationError):
    """The classification capability or execution backend did not answer usefully."""

    def __init__(self, message: str, *, source: str = "upstream") -> None:
        super().__init__(message)
        self.source = source


class SchemaViolation(IncidentManagerError, ValueError):
    """An analysis result failed the enum/type contract."""

    def __init__(self, issues: Sequence[str]) -> None:
        self.issues = list(issues) or ["analysis result is invalid"]
        super().__init__("Analysis result rejected: " + "; ".join(self.issues))


class InvalidTransition(IncidentManagerError, ValueError):
    """Raised when a status change is not allowed by the lifecycle."""

    def __init__(self, current: str, requested: str) -> None:
        super().__init__(f"Cannot move incident from '{current}' to '{requested}'")
        self.current = current
        self.requested = requested
