"""Pydantic schemas for observation, statistics and scheduler payloads."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from api_pulse.models.observation import ProbeStatus


class ObservationResponse(BaseModel):
    """Schema for a single stored observation."""
    id: int
    target_name: str
    target_url: str
    status_code: int
    response_time_ms: int
    status: ProbeStatus
    error_message: Optional[str] = None
    observed_at: datetime
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class TargetStatsResponse(BaseModel):
    """Schema for per-target statistics."""
    target_name: str
    total: int
    up_count: int
    down_count: int
    slow_count: int
    avg_response_time_ms: int
    uptime_percent: float


class TargetSummary(BaseModel):
    """Schema for one target in the fleet summary."""
    target_name: str
    current_status: ProbeStatus
    last_checked_at: str
    last_response_time_ms: int
    last_24h_test_count: int
    last_24h_uptime_percent: int


class FleetSummaryResponse(BaseModel):
    """Schema for the fleet-wide summary."""
    total_targets: int
    targets: List[TargetSummary]
    generated_at: str


class PurgeResponse(BaseModel):
    """Schema for retention results."""
    deleted_count: int
    cutoff: Optional[str] = None
    target_name: Optional[str] = None


class BulkProbeSummary(BaseModel):
    """Counts attached to bulk probe and cycle results."""
    total: int
    successful: int
    failed: int


class SchedulerStatusResponse(BaseModel):
    """Schema for scheduler status."""
    is_running: bool
    enabled_target_count: int
    total_target_count: int
    interval_seconds: Optional[float] = None
    last_cycle_at: Optional[str] = None
