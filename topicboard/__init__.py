"""Read-only pipeline turning record-store topics and viewpoints into display models."""

__version__ = "0.1.0"
