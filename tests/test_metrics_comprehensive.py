"""Comprehensive tests for Prometheus metrics collector."""

import pytest
from prometheus_client import CollectorRegistry

from api_pulse.core.metrics import MetricsCollector, metrics_collector


def test_metrics_collector_initialization():
    """Test metrics collector initialization."""
    collector = MetricsCollector()

    assert collector.registry is not None
    assert collector.probes_total is not None
    assert collector.probe_duration is not None
    assert collector.cycles_total is not None
    assert collector.scheduler_running is not None


def test_metrics_collector_custom_registry():
    """Test metrics collector with custom registry."""
    custom_registry = CollectorRegistry()
    collector = MetricsCollector(registry=custom_registry)

    assert collector.registry is custom_registry


def test_record_probe():
    """Test recording probe metrics."""
    collector = MetricsCollector()

    collector.record_probe("GitHub API", "UP", 250)
    collector.record_probe("GitHub API", "UP", 150)

    assert collector.registry.get_sample_value(
        "api_pulse_probes_total", {"target_name": "GitHub API", "status": "UP"}
    ) == 2
    assert collector.registry.get_sample_value(
        "api_pulse_probe_duration_seconds_sum", {"target_name": "GitHub API"}
    ) == pytest.approx(0.4)


def test_record_cycle_and_queue():
    """Test recording cycle metrics."""
    collector = MetricsCollector()

    collector.record_cycle("timer", 1.5)
    collector.record_cycle_queued("manual")

    assert collector.registry.get_sample_value(
        "api_pulse_cycles_total", {"trigger": "timer"}
    ) == 1
    assert collector.registry.get_sample_value(
        "api_pulse_cycles_queued_total", {"trigger": "manual"}
    ) == 1


def test_scheduler_running_gauge():
    """Test scheduler state gauge."""
    collector = MetricsCollector()

    collector.set_scheduler_running(True)
    assert collector.registry.get_sample_value("api_pulse_scheduler_running") == 1

    collector.set_scheduler_running(False)
    assert collector.registry.get_sample_value("api_pulse_scheduler_running") == 0


def test_record_purge_and_failures():
    """Test retention and recording failure counters."""
    collector = MetricsCollector()

    collector.record_purge("age", 5)
    collector.record_purge("age", 0)
    collector.record_recording_failure("CoinGecko API")

    assert collector.registry.get_sample_value(
        "api_pulse_observations_purged_total", {"mode": "age"}
    ) == 5
    assert collector.registry.get_sample_value(
        "api_pulse_recording_failures_total", {"target_name": "CoinGecko API"}
    ) == 1


def test_generate_metrics():
    """Test generating Prometheus text output."""
    collector = MetricsCollector()
    collector.record_probe("JSONPlaceholder", "SLOW", 2500)

    output = collector.generate_metrics()

    assert isinstance(output, bytes)
    assert b"api_pulse_probes_total" in output
    assert b'status="SLOW"' in output


def test_global_metrics_collector():
    """Test global metrics collector instance."""
    assert metrics_collector is not None
    assert isinstance(metrics_collector, MetricsCollector)
