"""Clients for the external collaborators of the incident pipeline."""

from .llm import ClassificationCapability, OpenAIClassificationCapability
from .slack import SlackWebhookClient

__all__ = [
    "ClassificationCapability",
    "OpenAIClassificationCapability",
    "SlackWebhookClient",
]
