"""Database models for API Pulse."""

from api_pulse.models.observation import Observation, ProbeStatus

__all__ = ["Observation", "ProbeStatus"]
