"""Probe and observation API routes."""

from typing import Optional

from fastapi import APIRouter, Depends, Request

from api_pulse.api.deps import get_monitor_service, to_response
from api_pulse.core.rate_limiter import limiter
from api_pulse.core.service import MonitorService
from api_pulse.schemas.probe import BulkProbeRequest, ProbeRequest
from api_pulse.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.post("/test")
@limiter.limit("30/minute")
async def probe_single_target(
    request: Request,
    probe_request: ProbeRequest,
    service: MonitorService = Depends(get_monitor_service)
):
    """
    Probe one target and record the observation.

    Args:
        probe_request: Target name and URL
        service: Monitor service
    """
    result = await service.probe_one(probe_request.name, probe_request.url)

    logger.info(
        "Manual probe completed",
        extra={"target_name": probe_request.name, "success": result.success}
    )

    return to_response(result)


@router.post("/test/bulk")
@limiter.limit("10/minute")
async def probe_bulk_targets(
    request: Request,
    bulk_request: BulkProbeRequest,
    service: MonitorService = Depends(get_monitor_service)
):
    """
    Probe several targets at once.

    Args:
        bulk_request: List of target names and URLs
        service: Monitor service
    """
    targets = None
    if bulk_request.targets is not None:
        targets = [t.model_dump() for t in bulk_request.targets]

    return to_response(await service.probe_bulk(targets))


@router.get("/tests")
@limiter.limit("100/minute")
async def get_latest_observations(
    request: Request,
    limit: int = 10,
    service: MonitorService = Depends(get_monitor_service)
):
    """Get the newest observations across all targets."""
    return to_response(await service.latest(limit))


@router.delete("/tests/old")
@limiter.limit("10/minute")
async def purge_old_observations(
    request: Request,
    days: Optional[float] = None,
    service: MonitorService = Depends(get_monitor_service)
):
    """
    Delete observations older than the given number of days.

    Args:
        days: Age in days; the configured retention when omitted
        service: Monitor service
    """
    result = await service.purge_older_than(days)

    logger.info(
        "Purged old observations",
        extra={"days": days, "success": result.success}
    )

    return to_response(result)


@router.get("/tests/{target_name}")
@limiter.limit("200/minute")
async def get_target_history(
    request: Request,
    target_name: str,
    limit: int = 20,
    service: MonitorService = Depends(get_monitor_service)
):
    """Get the newest observations of one target."""
    return to_response(await service.history(target_name, limit))


@router.delete("/tests/{target_name}")
@limiter.limit("20/minute")
async def purge_target_observations(
    request: Request,
    target_name: str,
    service: MonitorService = Depends(get_monitor_service)
):
    """Delete every observation of one target."""
    result = await service.purge_target(target_name)

    logger.info(
        "Purged target observations",
        extra={"target_name": target_name, "success": result.success}
    )

    return to_response(result)
