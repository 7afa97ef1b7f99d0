"""Remediation action execution for the incident autopilot."""

from .base import ExecutionBackend, SimulatedExecutionBackend, simulate_execution
from .dispatcher import (
    ActionDispatcher,
    ExecutionSummary,
    build_execution_payload,
    can_execute,
    summarize,
)
from .guard import GuardDecision, TargetPolicy
from .remote import HttpExecutionBackend

__all__ = [
    "ActionDispatcher",
    "ExecutionBackend",
    "ExecutionSummary",
    "GuardDecision",
    "HttpExecutionBackend",
    "SimulatedExecutionBackend",
    "TargetPolicy",
    "build_execution_payload",
    "can_execute",
    "simulate_execution",
    "summarize",
]
