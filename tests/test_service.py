"""Tests for the monitor service facade."""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from api_pulse.core.aggregator import StatsAggregator
from api_pulse.core.exceptions import StorageError
from api_pulse.core.prober import Prober
from api_pulse.core.recorder import Recorder
from api_pulse.core.retention import RetentionManager
from api_pulse.core.scheduler import MonitoringScheduler
from api_pulse.core.service import MonitorService
from api_pulse.models.observation import ProbeStatus

from .conftest import FIXED_NOW, make_result


def unreachable(target):
    return make_result(
        name=target.name,
        status_code=0,
        response_time_ms=12,
        status=ProbeStatus.DOWN,
        error_message="Connection error: refused"
    )


@pytest.fixture
def mock_prober():
    prober = MagicMock(spec=Prober)
    prober.probe = AsyncMock(side_effect=lambda target: make_result(name=target.name))
    prober.close = AsyncMock()
    return prober


@pytest.fixture
def service(store, targets, mock_prober, fake_timer, metrics):
    recorder = Recorder(store)
    clock = lambda: FIXED_NOW  # noqa: E731
    return MonitorService(
        prober=mock_prober,
        recorder=recorder,
        aggregator=StatsAggregator(store, clock=clock),
        retention=RetentionManager(store, clock=clock, metrics=metrics),
        scheduler=MonitoringScheduler(targets, mock_prober, recorder, fake_timer, metrics=metrics)
    )


@pytest.mark.functional
class TestProbeOperations:
    """Test ad-hoc probing."""

    async def test_probe_one_success(self, service, store):
        result = await service.probe_one("GitHub API", "https://api.github.com")

        assert result.success
        assert result.data["target_name"] == "GitHub API"
        assert result.data["status"] == "UP"
        assert result.data["id"] is not None
        assert len(await store.find_all()) == 1

    @pytest.mark.parametrize("name,url", [
        (None, "https://api.github.com"),
        ("GitHub API", None),
        ("   ", "https://api.github.com"),
        ("GitHub API", ""),
    ])
    async def test_probe_one_requires_name_and_url(self, service, store, mock_prober, name, url):
        result = await service.probe_one(name, url)

        assert not result.success
        assert result.reason == "validation_error"
        mock_prober.probe.assert_not_awaited()
        assert await store.find_all() == []

    async def test_probe_one_unreachable_still_recorded(self, service, store, mock_prober):
        mock_prober.probe.side_effect = unreachable

        result = await service.probe_one("Down API", "https://down.example.com")

        assert not result.success
        assert result.reason == "probe_failure"
        assert result.error == "Connection error: refused"
        assert result.data["status"] == "DOWN"
        assert result.data["status_code"] == 0
        assert len(await store.find_all()) == 1

    async def test_probe_one_storage_failure(self, service):
        service.recorder.record = AsyncMock(side_effect=StorageError("disk full"))

        result = await service.probe_one("GitHub API", "https://api.github.com")

        assert not result.success
        assert result.reason == "storage_error"
        assert result.data is None

    async def test_probe_bulk(self, service, mock_prober):
        def probe(target):
            return unreachable(target) if target.name == "B" else make_result(name=target.name)

        mock_prober.probe.side_effect = probe

        result = await service.probe_bulk([
            {"name": "A", "url": "https://a.example.com"},
            {"name": "B", "url": "https://b.example.com"},
        ])

        assert result.success
        assert result.summary == {"total": 2, "successful": 1, "failed": 1}
        assert [item["target_name"] for item in result.data] == ["A", "B"]
        assert result.data[1]["error"] == "Connection error: refused"
        assert "reason" not in result.data[0]

    @pytest.mark.parametrize("payload", [None, []])
    async def test_probe_bulk_requires_targets(self, service, payload):
        result = await service.probe_bulk(payload)

        assert not result.success
        assert result.reason == "validation_error"

    async def test_probe_bulk_rejects_incomplete_item(self, service, mock_prober):
        result = await service.probe_bulk([
            {"name": "A", "url": "https://a.example.com"},
            {"name": "B"},
        ])

        assert not result.success
        assert result.error == "Each target must have name and url"
        mock_prober.probe.assert_not_awaited()


@pytest.mark.functional
class TestReadOperations:
    """Test reads through the service."""

    async def test_latest_and_history(self, service, seed_observations):
        await seed_observations("A", [ProbeStatus.UP] * 3)

        latest = await service.latest(2)
        history = await service.history("A")

        assert latest.success and len(latest.data) == 2
        assert history.success and len(history.data) == 3
        assert isinstance(history.data[0]["observed_at"], str)

    async def test_invalid_limit(self, service):
        result = await service.latest(0)

        assert not result.success
        assert result.reason == "validation_error"

    async def test_stats(self, service, seed_observations):
        await seed_observations("A", [ProbeStatus.UP, ProbeStatus.UP, ProbeStatus.DOWN])

        result = await service.stats("A")

        assert result.success
        assert result.data["uptime_percent"] == 66.67

    async def test_stats_no_data(self, service):
        result = await service.stats("Unknown")

        assert not result.success
        assert result.reason == "no_data"

    async def test_summary(self, service, seed_observations):
        await seed_observations("A", [ProbeStatus.UP], start=FIXED_NOW - timedelta(hours=1))

        result = await service.summary()

        assert result.success
        assert result.data["total_targets"] == 1
        assert result.data["targets"][0]["current_status"] == "UP"


@pytest.mark.functional
class TestRetentionOperations:
    """Test purge operations."""

    async def test_purge_older_than(self, service, seed_observations):
        await seed_observations("A", [ProbeStatus.UP], start=FIXED_NOW - timedelta(days=10))

        result = await service.purge_older_than(7)

        assert result.success
        assert result.data["deleted_count"] == 1
        assert result.data["cutoff"] == (FIXED_NOW - timedelta(days=7)).isoformat()

    async def test_purge_negative_days(self, service):
        result = await service.purge_older_than(-3)

        assert not result.success
        assert result.reason == "validation_error"

    async def test_purge_target(self, service, seed_observations):
        await seed_observations("A", [ProbeStatus.UP] * 2)

        result = await service.purge_target("A")

        assert result.success
        assert result.data == {"deleted_count": 2, "target_name": "A"}


@pytest.mark.unit
class TestSchedulerOperations:
    """Test scheduler control through the service."""

    async def test_start_stop_resume(self, service, fake_timer):
        started = await service.scheduler_start(300)
        assert started.success
        assert len(started.data) == 2

        again = await service.scheduler_start(300)
        assert not again.success
        assert again.reason == "already_running"

        assert service.scheduler_stop().success
        stopped_again = service.scheduler_stop()
        assert stopped_again.reason == "not_running"

        assert service.scheduler_resume().success
        assert fake_timer.armed

    def test_resume_never_started(self, service):
        result = service.scheduler_resume()

        assert not result.success
        assert result.reason == "never_started"
        assert result.error == "Scheduler was never started. Use start instead."

    def test_status(self, service):
        result = service.scheduler_status()

        assert result.success
        assert result.data["is_running"] is False
        assert result.data["enabled_target_count"] == 2

    async def test_trigger_manual(self, service):
        result = await service.scheduler_trigger_manual()

        assert result.success
        assert result.message == "Manual test completed"
        assert result.summary == {"total": 2, "successful": 2, "failed": 0}
        assert result.data[0]["data"]["status"] == "UP"
        assert not service.scheduler.is_running
