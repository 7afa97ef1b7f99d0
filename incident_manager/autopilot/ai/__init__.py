"""Normalization and classification stages."""

from .classifier import AIClassifier, IncidentClassifier, KeywordClassifier, fallback_analysis
from .normalizer import RawDataNormalizer

__all__ = [
    "AIClassifier",
    "IncidentClassifier",
    "KeywordClassifier",
    "RawDataNormalizer",
    "fallback_analysis",
]
