"""Utility modules for API Pulse."""

from api_pulse.utils.clock import utcnow
from api_pulse.utils.logger import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging", "utcnow"]
