"""Observation model - stores the result of one probe against a target."""

import enum

from sqlalchemy import Column, DateTime, Enum, Index, Integer, String, Text

from api_pulse.database.base import Base
from api_pulse.utils.clock import utcnow


class ProbeStatus(str, enum.Enum):
    """Health classification of a single probe."""

    UP = "UP"
    DOWN = "DOWN"
    SLOW = "SLOW"


class Observation(Base):
    """
    Observation model representing one probe result for a target.

    Rows are append-only: the engine only inserts them, and only the
    retention operations delete them.

    Attributes:
        id: Primary key
        target_name: Name of the probed target
        target_url: URL that was requested
        status_code: HTTP status code received (0 if unreachable)
        response_time_ms: Elapsed wall-clock time in milliseconds
        status: UP, DOWN or SLOW
        error_message: Failure description when status is DOWN
        observed_at: When the probe was performed
        created_at: When the row was written
    """

    __tablename__ = "observations"
    __table_args__ = (
        Index("ix_observations_target_observed", "target_name", "observed_at"),
    )

    id = Column(Integer, primary_key=True, index=True)

    target_name = Column(String(255), nullable=False, index=True)
    target_url = Column(String(2048), nullable=False)

    status_code = Column(Integer, nullable=False, default=0)
    response_time_ms = Column(Integer, nullable=False, default=0)
    status = Column(Enum(ProbeStatus, name="probe_status"), nullable=False)
    error_message = Column(Text, nullable=True)

    observed_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self) -> str:
        """String representation of observation."""
        return (
            f"<Observation(id={self.id}, target_name='{self.target_name}', "
            f"status={self.status}, status_code={self.status_code})>"
        )

    def to_dict(self) -> dict:
        """Convert observation to dictionary."""
        return {
            "id": self.id,
            "target_name": self.target_name,
            "target_url": self.target_url,
            "status_code": self.status_code,
            "response_time_ms": self.response_time_ms,
            "status": self.status.value if self.status else None,
            "error_message": self.error_message,
            "observed_at": self.observed_at.isoformat() if self.observed_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
