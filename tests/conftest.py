"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta
from typing import AsyncGenerator, List, Optional

import pytest
from prometheus_client import CollectorRegistry
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from api_pulse.config import ProbeTarget
from api_pulse.core.metrics import MetricsCollector
from api_pulse.core.prober import ProbeResult
from api_pulse.core.store import ObservationStore
from api_pulse.core.timer import RepeatingTimer
from api_pulse.database.base import Base
from api_pulse.models.observation import Observation, ProbeStatus

# Test database URL
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

FIXED_NOW = datetime(2024, 6, 1, 12, 0, 0)


class FakeTimer(RepeatingTimer):
    """In-memory timer; ticks only when the test calls fire()."""

    def __init__(self):
        self.callback = None
        self.interval_seconds: Optional[float] = None
        self.schedule_calls = 0
        self.shut_down = False

    @property
    def armed(self) -> bool:
        return self.callback is not None

    def schedule(self, callback, interval_seconds: float) -> None:
        self.callback = callback
        self.interval_seconds = interval_seconds
        self.schedule_calls += 1

    def cancel(self) -> None:
        self.callback = None

    def shutdown(self) -> None:
        self.cancel()
        self.shut_down = True

    async def fire(self) -> None:
        assert self.callback is not None, "timer is not armed"
        await self.callback()


def make_result(
    name: str = "Test API",
    status_code: int = 200,
    response_time_ms: int = 150,
    status: ProbeStatus = ProbeStatus.UP,
    error_message: Optional[str] = None,
    observed_at: Optional[datetime] = None
) -> ProbeResult:
    """Build a probe result without touching the network."""
    return ProbeResult(
        target_name=name,
        target_url=f"https://{name.lower().replace(' ', '-')}.example.com",
        status_code=status_code,
        response_time_ms=response_time_ms,
        status=status,
        error_message=error_message,
        observed_at=observed_at or FIXED_NOW
    )


@pytest.fixture
async def db_engine():
    """Create a fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(db_engine) -> async_sessionmaker[AsyncSession]:
    """Create session maker for tests."""
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )


@pytest.fixture
def store(session_maker) -> ObservationStore:
    """Observation store over the test database."""
    return ObservationStore(session_maker)


@pytest.fixture
def metrics() -> MetricsCollector:
    """Metrics collector on an isolated registry."""
    return MetricsCollector(registry=CollectorRegistry())


@pytest.fixture
def fake_timer() -> FakeTimer:
    return FakeTimer()


@pytest.fixture
def targets() -> List[ProbeTarget]:
    """Two enabled targets and one disabled."""
    return [
        ProbeTarget(name="GitHub API", url="https://api.github.com"),
        ProbeTarget(name="JSONPlaceholder", url="https://jsonplaceholder.typicode.com/posts/1"),
        ProbeTarget(name="Retired API", url="https://retired.example.com", enabled=False),
    ]


@pytest.fixture
def seed_observations(store):
    """Insert observations directly; returns an async helper."""

    async def _seed(
        name: str,
        statuses: List[ProbeStatus],
        start: datetime = FIXED_NOW,
        step: timedelta = timedelta(minutes=5),
        response_time_ms: int = 100
    ) -> List[Observation]:
        created = []
        for i, status in enumerate(statuses):
            observation = Observation(
                target_name=name,
                target_url=f"https://{name.lower().replace(' ', '-')}.example.com",
                status_code=0 if status is ProbeStatus.DOWN else 200,
                response_time_ms=response_time_ms,
                status=status,
                error_message="Connection error: refused" if status is ProbeStatus.DOWN else None,
                observed_at=start + i * step
            )
            created.append(await store.insert(observation))
        return created

    return _seed


@pytest.fixture
def test_app():
    """FastAPI app with rate limiting off; tests install the service themselves."""
    from api_pulse.core.rate_limiter import limiter
    from api_pulse.main import app

    limiter.enabled = False

    yield app

    app.dependency_overrides.clear()
    if hasattr(app.state, "monitor_service"):
        del app.state.monitor_service
    limiter.enabled = True
