"""Shared dependencies and response mapping for the API routers."""

from fastapi import Request
from fastapi.responses import JSONResponse

from api_pulse.core.service import MonitorService
from api_pulse.schemas.common import OperationResult

REASON_STATUS_CODES = {
    "validation_error": 400,
    "no_data": 404,
    "already_running": 409,
    "not_running": 409,
    "never_started": 409,
    "probe_failure": 502,
    "storage_error": 500,
}


def get_monitor_service(request: Request) -> MonitorService:
    """Dependency returning the service built during application startup."""
    return request.app.state.monitor_service


def to_response(result: OperationResult) -> JSONResponse:
    """Render an operation result with the HTTP status matching its outcome."""
    status_code = 200 if result.success else REASON_STATUS_CODES.get(result.reason, 500)
    return JSONResponse(
        status_code=status_code,
        content=result.model_dump(mode="json", exclude_none=True)
    )
