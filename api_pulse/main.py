"""FastAPI application entry point for API Pulse."""

import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from sqlalchemy.engine import make_url

from api_pulse import __version__
from api_pulse.api import health, probes, scheduler, stats
from api_pulse.config import Config, load_config
from api_pulse.core.aggregator import StatsAggregator
from api_pulse.core.prober import Prober
from api_pulse.core.rate_limiter import limiter
from api_pulse.core.recorder import Recorder
from api_pulse.core.retention import RetentionManager
from api_pulse.core.scheduler import MonitoringScheduler
from api_pulse.core.service import MonitorService
from api_pulse.core.store import ObservationStore
from api_pulse.core.timer import APSchedulerTimer
from api_pulse.database import build_database, create_tables
from api_pulse.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

# Loaded at import time so middleware and routes can be configured from it
app_config: Config = load_config()


def ensure_sqlite_directory(database_url: str) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    url = make_url(database_url)
    if not url.drivername.startswith("sqlite") or not url.database or url.database == ":memory:":
        return

    data_dir = Path(url.database).parent
    data_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Ensured data directory exists", extra={"path": str(data_dir.absolute())})


def build_monitor_service(config: Config, session_factory) -> MonitorService:
    """
    Wire the monitoring engine from configuration.

    Args:
        config: Application configuration
        session_factory: Async session factory for the observation store

    Returns:
        MonitorService: Service exposing every monitoring operation
    """
    prober = Prober(
        timeout_ms=config.probe.timeout_ms,
        slow_threshold_ms=config.probe.slow_threshold_ms,
        max_concurrent=config.probe.max_concurrent
    )
    store = ObservationStore(session_factory)
    recorder = Recorder(store)

    monitoring_scheduler = MonitoringScheduler(
        targets=config.targets,
        prober=prober,
        recorder=recorder,
        timer=APSchedulerTimer()
    )

    return MonitorService(
        prober=prober,
        recorder=recorder,
        aggregator=StatsAggregator(store),
        retention=RetentionManager(store, default_days=config.retention.default_days),
        scheduler=monitoring_scheduler
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Lifespan context manager for FastAPI application.

    Handles startup and shutdown events.
    """
    setup_logging(
        level=app_config.logging.level,
        log_format=app_config.logging.format,
        log_file=app_config.logging.file,
        console=app_config.logging.console
    )

    logger.info("Starting API Pulse application")
    app.state.config = app_config

    ensure_sqlite_directory(app_config.database.url)
    engine, session_factory = build_database(
        app_config.database.url,
        echo=app_config.database.echo
    )

    logger.info("Creating database tables")
    await create_tables(engine)

    service = build_monitor_service(app_config, session_factory)
    app.state.monitor_service = service

    if app_config.scheduler.enabled:
        result = await service.scheduler_start(app_config.scheduler.interval_seconds)
        if not result.success:
            logger.error(
                "Failed to start scheduler",
                extra={"error": result.error, "reason": result.reason}
            )
    else:
        logger.info("Scheduler disabled by configuration")

    logger.info(
        "API Pulse started successfully",
        extra={
            "version": __version__,
            "targets": len(app_config.targets),
            "enabled_targets": len(app_config.enabled_targets),
            "scheduler_enabled": app_config.scheduler.enabled,
            "interval_seconds": app_config.scheduler.interval_seconds,
            "api_port": app_config.api.port
        }
    )

    yield

    logger.info("Shutting down API Pulse application")

    await service.scheduler.shutdown()
    await engine.dispose()

    logger.info("API Pulse shut down successfully")


app = FastAPI(
    title="API Pulse",
    description="Periodic API health probing with stored observations, statistics and uptime summaries",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.state.limiter = limiter

if app_config.api.cors.enabled:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_config.api.cors.allow_origins,
        allow_credentials=app_config.api.cors.allow_credentials,
        allow_methods=app_config.api.cors.allow_methods,
        allow_headers=app_config.api.cors.allow_headers,
    )


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Attach a request ID to every request and response."""
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unhandled errors."""
    request_id = getattr(request.state, "request_id", "unknown")

    logger.exception(
        "Unhandled exception",
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method,
            "error": str(exc)
        }
    )

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal server error",
            "reason": "internal_error",
            "request_id": request_id
        },
        headers={"X-Request-ID": request_id}
    )


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """Handle rate limit exceeded errors."""
    request_id = getattr(request.state, "request_id", "unknown")

    logger.warning(
        "Rate limit exceeded",
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "client": get_remote_address(request)
        }
    )

    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "error": "Rate limit exceeded. Please try again later.",
            "reason": "rate_limited",
            "request_id": request_id
        },
        headers={
            "X-Request-ID": request_id,
            "Retry-After": "60"
        }
    )


app.include_router(health.router, tags=["Health"])
app.include_router(probes.router, prefix="/api/v1", tags=["Probes"])
app.include_router(stats.router, prefix="/api/v1", tags=["Statistics"])
app.include_router(scheduler.router, prefix="/api/v1", tags=["Scheduler"])

if app_config.prometheus.enabled:
    app.add_api_route(
        app_config.prometheus.path,
        health.prometheus_metrics,
        methods=["GET"],
        include_in_schema=False
    )


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "API Pulse",
        "version": __version__,
        "status": "running",
        "docs": "/docs",
        "health": "/health",
        "api": "/api/v1"
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api_pulse.main:app",
        host=app_config.api.host,
        port=app_config.api.port,
        reload=app_config.api.reload,
        log_level=app_config.logging.level.lower()
    )
