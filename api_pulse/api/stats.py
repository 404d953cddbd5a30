"""Statistics API routes."""

from fastapi import APIRouter, Depends, Request

from api_pulse.api.deps import get_monitor_service, to_response
from api_pulse.core.rate_limiter import limiter
from api_pulse.core.service import MonitorService

router = APIRouter()


@router.get("/stats/{target_name}")
@limiter.limit("200/minute")
async def get_target_stats(
    request: Request,
    target_name: str,
    service: MonitorService = Depends(get_monitor_service)
):
    """
    Get statistics over all observations of a target.

    Responds 404 when the target has never been observed.
    """
    return to_response(await service.stats(target_name))


@router.get("/summary")
@limiter.limit("100/minute")
async def get_fleet_summary(
    request: Request,
    service: MonitorService = Depends(get_monitor_service)
):
    """Get the latest status and 24h uptime of every observed target."""
    return to_response(await service.summary())
