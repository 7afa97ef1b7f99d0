"""AI-assisted incident manager: normalize, classify, remediate, notify."""

__version__ = "0.3.0"
