"""Action/target compatibility checks applied before dispatch."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional

from ..models import DispatchFailure, RemediationAction

DEFAULT_RESTARTABLE = frozenset({"api", "auth-service"})
DEFAULT_SCALABLE = frozenset({"database", "api", "cache"})
DEFAULT_CACHE_RESOURCE = "cache"


@dataclass
class GuardDecision:
    """Outcome of target policy authorization."""

    allowed: bool
    reason: str = ""
    failure: Optional[DispatchFailure] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


def _deny(failure: DispatchFailure, reason: str, metadata: Dict[str, Any]) -> GuardDecision:
    return GuardDecision(allowed=False, reason=reason, failure=failure, metadata=metadata)


class TargetPolicy:
    """Which resources each remediation action may touch."""

    def __init__(
        self,
        *,
        restartable: Iterable[str] | None = None,
        scalable: Iterable[str] | None = None,
        cache_resource: str = DEFAULT_CACHE_RESOURCE,
    ) -> None:
        self._restartable = frozenset(restartable or DEFAULT_RESTARTABLE)
        self._scalable = frozenset(scalable or DEFAULT_SCALABLE)
        self._cache_resource = cache_resource

    def authorize(self, action: RemediationAction | str, target: Optional[str]) -> GuardDecision:
        metadata: Dict[str, Any] = {"action": str(getattr(action, "value", action)), "target": target}
        try:
            action = RemediationAction(action)
        except ValueError:
            return _deny(DispatchFailure.UNKNOWN_ACTION, f"Unknown action: {action}", metadata)

        if action is RemediationAction.RESTART_SERVICE:
            allowed = self._restartable
        elif action is RemediationAction.SCALE_UP:
            allowed = self._scalable
        elif action is RemediationAction.CLEAR_CACHE:
            allowed = frozenset({self._cache_resource})
        elif action in (RemediationAction.NOTIFY_HUMAN, RemediationAction.NONE):
            return GuardDecision(allowed=True, reason="Authorized", metadata=metadata)
        else:  # pragma: no cover - new enum members must be handled above
            return _deny(DispatchFailure.UNKNOWN_ACTION, f"Unknown action: {action.value}", metadata)

        if not target:
            return _deny(
                DispatchFailure.INVALID_TARGET,
                f"{action.value} action requires a target",
                metadata,
            )
        if target not in allowed:
            return _deny(
                DispatchFailure.INVALID_TARGET,
                f"Invalid target for {action.value}: {target}",
                metadata,
            )
        return GuardDecision(allowed=True, reason="Authorized", metadata=metadata)
