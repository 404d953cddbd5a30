"""Prometheus metrics collection for the monitoring engine."""

from typing import Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

from api_pulse.utils.logger import get_logger

logger = get_logger(__name__)

__all__ = ["CONTENT_TYPE_LATEST", "MetricsCollector", "metrics_collector"]


class MetricsCollector:
    """Prometheus metrics collector for API Pulse."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """
        Initialize metrics collector.

        Args:
            registry: Optional custom registry
        """
        self.registry = registry or CollectorRegistry()
        self._setup_metrics()
        logger.debug("Prometheus metrics collector initialized")

    def _setup_metrics(self) -> None:
        """Setup all Prometheus metrics."""

        # Probe Metrics
        self.probes_total = Counter(
            'api_pulse_probes_total',
            'Total number of probes performed',
            ['target_name', 'status'],
            registry=self.registry
        )

        self.probe_duration = Histogram(
            'api_pulse_probe_duration_seconds',
            'Probe response time in seconds',
            ['target_name'],
            registry=self.registry
        )

        self.recording_failures_total = Counter(
            'api_pulse_recording_failures_total',
            'Probe results that could not be stored',
            ['target_name'],
            registry=self.registry
        )

        # Scheduler Metrics
        self.cycles_total = Counter(
            'api_pulse_cycles_total',
            'Total probe cycles executed',
            ['trigger'],
            registry=self.registry
        )

        self.cycle_duration = Histogram(
            'api_pulse_cycle_duration_seconds',
            'Probe cycle duration in seconds',
            ['trigger'],
            registry=self.registry
        )

        self.cycles_queued_total = Counter(
            'api_pulse_cycles_queued_total',
            'Cycle requests that waited for an in-flight cycle',
            ['trigger'],
            registry=self.registry
        )

        self.scheduler_running = Gauge(
            'api_pulse_scheduler_running',
            'Whether the periodic scheduler is running (1) or stopped (0)',
            registry=self.registry
        )

        # Retention Metrics
        self.observations_purged_total = Counter(
            'api_pulse_observations_purged_total',
            'Observations deleted by retention',
            ['mode'],
            registry=self.registry
        )

    def record_probe(self, target_name: str, status: str, response_time_ms: int) -> None:
        """
        Record probe metrics.

        Args:
            target_name: Target name
            status: UP, DOWN or SLOW
            response_time_ms: Response time in milliseconds
        """
        self.probes_total.labels(target_name=target_name, status=status).inc()
        self.probe_duration.labels(target_name=target_name).observe(response_time_ms / 1000)

    def record_recording_failure(self, target_name: str) -> None:
        self.recording_failures_total.labels(target_name=target_name).inc()

    def record_cycle(self, trigger: str, duration: float) -> None:
        """
        Record probe cycle metrics.

        Args:
            trigger: What started the cycle (startup, timer, manual)
            duration: Cycle duration in seconds
        """
        self.cycles_total.labels(trigger=trigger).inc()
        self.cycle_duration.labels(trigger=trigger).observe(duration)

    def record_cycle_queued(self, trigger: str) -> None:
        self.cycles_queued_total.labels(trigger=trigger).inc()

    def set_scheduler_running(self, running: bool) -> None:
        self.scheduler_running.set(1 if running else 0)

    def record_purge(self, mode: str, deleted: int) -> None:
        self.observations_purged_total.labels(mode=mode).inc(deleted)

    def generate_metrics(self) -> bytes:
        """
        Generate Prometheus metrics output.

        Returns:
            bytes: Prometheus metrics in text format
        """
        return generate_latest(self.registry)


# Global metrics collector instance
metrics_collector = MetricsCollector()
