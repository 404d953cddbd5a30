"""Pydantic schemas for API request/response validation."""

from api_pulse.schemas.common import HealthResponse, OperationResult
from api_pulse.schemas.probe import BulkProbeRequest, ProbeRequest
from api_pulse.schemas.stats import (
    BulkProbeSummary,
    FleetSummaryResponse,
    ObservationResponse,
    PurgeResponse,
    SchedulerStatusResponse,
    TargetStatsResponse,
    TargetSummary,
)

__all__ = [
    "BulkProbeRequest",
    "BulkProbeSummary",
    "FleetSummaryResponse",
    "HealthResponse",
    "ObservationResponse",
    "OperationResult",
    "ProbeRequest",
    "PurgeResponse",
    "SchedulerStatusResponse",
    "TargetStatsResponse",
    "TargetSummary",
]
