"""Health check and metrics endpoints."""

from fastapi import APIRouter, Request, Response

from api_pulse import __version__
from api_pulse.core.metrics import CONTENT_TYPE_LATEST, metrics_collector
from api_pulse.schemas.common import HealthResponse
from api_pulse.utils.clock import utcnow

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """
    Health check endpoint.

    Returns liveness and whether the periodic scheduler is running.
    """
    service = getattr(request.app.state, "monitor_service", None)
    running = service is not None and service.scheduler.is_running

    return HealthResponse(
        status="healthy",
        version=__version__,
        timestamp=utcnow().isoformat(),
        scheduler="running" if running else "stopped"
    )


async def prometheus_metrics() -> Response:
    """Expose Prometheus metrics in text format.

    Mounted by the application at the configured metrics path.
    """
    return Response(
        content=metrics_collector.generate_metrics(),
        media_type=CONTENT_TYPE_LATEST
    )
