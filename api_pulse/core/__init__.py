"""Core monitoring engine for API Pulse."""

from api_pulse.core.aggregator import StatsAggregator
from api_pulse.core.classifier import classify
from api_pulse.core.prober import Prober, ProbeResult
from api_pulse.core.recorder import Recorder
from api_pulse.core.retention import RetentionManager
from api_pulse.core.scheduler import MonitoringScheduler, SchedulerState
from api_pulse.core.store import ObservationFilter, ObservationStore

__all__ = [
    "MonitoringScheduler",
    "ObservationFilter",
    "ObservationStore",
    "ProbeResult",
    "Prober",
    "Recorder",
    "RetentionManager",
    "SchedulerState",
    "StatsAggregator",
    "classify",
]
