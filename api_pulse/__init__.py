"""API Pulse - periodic HTTP endpoint monitoring engine."""

__version__ = "1.0.0"
