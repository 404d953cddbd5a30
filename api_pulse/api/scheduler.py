"""Scheduler control API routes."""

from fastapi import APIRouter, Depends, Request

from api_pulse.api.deps import get_monitor_service, to_response
from api_pulse.core.rate_limiter import limiter
from api_pulse.core.service import MonitorService
from api_pulse.utils.logger import get_logger

router = APIRouter(prefix="/scheduler")
logger = get_logger(__name__)


@router.get("/status")
async def get_scheduler_status(service: MonitorService = Depends(get_monitor_service)):
    """Get whether the scheduler is running and how many targets it covers."""
    return to_response(service.scheduler_status())


@router.post("/stop")
@limiter.limit("20/minute")
async def stop_scheduler(
    request: Request,
    service: MonitorService = Depends(get_monitor_service)
):
    """Stop periodic probing. A cycle in flight still completes."""
    result = service.scheduler_stop()
    logger.info("Scheduler stop requested", extra={"success": result.success})
    return to_response(result)


@router.post("/resume")
@limiter.limit("20/minute")
async def resume_scheduler(
    request: Request,
    service: MonitorService = Depends(get_monitor_service)
):
    """Resume periodic probing without an immediate cycle."""
    result = service.scheduler_resume()
    logger.info("Scheduler resume requested", extra={"success": result.success})
    return to_response(result)


@router.post("/trigger")
@limiter.limit("10/minute")
async def trigger_manual_cycle(
    request: Request,
    service: MonitorService = Depends(get_monitor_service)
):
    """Probe every enabled target now; does not change the scheduler state."""
    return to_response(await service.scheduler_trigger_manual())
