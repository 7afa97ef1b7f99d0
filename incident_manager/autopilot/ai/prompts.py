"""Prompt templates for the classification capability."""

from __future__ import annotations

from textwrap import dedent
from typing import Iterable

NORMALIZATION_SCHEMA = dedent(
    """
    {
      "title": "short descriptive title (max 10 words)",
      "description": "detailed summary of the problem, including relevant log lines and metrics",
      "status": "open",
      "priority": "critical" | "high" | "medium" | "low"
    }
    """
).strip()

ANALYSIS_SCHEMA = dedent(
    """
    {
      "type": "server_down" | "high_cpu" | "memory_leak" | "unknown",
      "priority": "critical" | "high" | "medium" | "low",
      "action": "restart_service" | "scale_up" | "clear_cache" | "notify_human" | "none",
      "target": "api" | "auth-service" | "database" | "cache" | null,
      "recommendation": "one short sentence on what should be done",
      "assignedTo": "name of the staff member best suited, taken from the roster"
    }
    """
).strip()

CLASSIFICATION_RULES = dedent(
    """
    - mentions "down" or "crashed" -> type "server_down", priority "critical", action "restart_service"
    - mentions "cpu" or "slow" -> type "high_cpu", priority "high", action "scale_up"
    - mentions "memory" or "leak" -> type "memory_leak", priority "high", action "clear_cache"
    - otherwise -> type "unknown", priority "medium", action "notify_human"
    """
).strip()


def build_normalization_prompt(serialized_payload: str) -> str:
    return (
        "Normalize the following monitoring data into a structured incident.\n\n"
        "Reply ONLY with a JSON object in this format:\n"
        f"{NORMALIZATION_SCHEMA}\n\n"
        f"Raw data:\n{serialized_payload}"
    )


def build_analysis_prompt(title: str, description: str, roster: Iterable[str]) -> str:
    roster_block = "\n".join(roster) or "- (no staff available)"
    return (
        "Classify the IT incident below using these rules:\n"
        f"{CLASSIFICATION_RULES}\n\n"
        "Pick assignedTo from the staff roster by matching the incident to a "
        "specialization. Use \"AI Assistant\" when nobody fits clearly.\n\n"
        f"Staff roster:\n{roster_block}\n\n"
        "Reply ONLY with a JSON object in this format:\n"
        f"{ANALYSIS_SCHEMA}\n\n"
        f"Incident:\nTitle: {title}\nDescription: {description}"
    )
