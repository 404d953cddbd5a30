"""Scheduler owning the periodic probe cycle and its running/stopped state."""

import asyncio
import enum
import time
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from api_pulse.config import ProbeTarget
from api_pulse.core.exceptions import (
    AlreadyRunningError,
    NeverStartedError,
    NotRunningError,
    StorageError,
)
from api_pulse.core.metrics import MetricsCollector, metrics_collector
from api_pulse.core.prober import Prober, ProbeResult
from api_pulse.core.recorder import Recorder
from api_pulse.core.timer import RepeatingTimer
from api_pulse.models.observation import Observation
from api_pulse.utils.clock import utcnow
from api_pulse.utils.logger import get_logger

logger = get_logger(__name__)


class SchedulerState(str, enum.Enum):
    """Lifecycle state of the periodic scheduler."""

    STOPPED = "stopped"
    RUNNING = "running"


class CycleOutcome:
    """Result of probing and recording one target within a cycle."""

    def __init__(
        self,
        target: ProbeTarget,
        result: Optional[ProbeResult] = None,
        observation: Optional[Observation] = None,
        error: Optional[str] = None
    ):
        self.target = target
        self.result = result
        self.observation = observation
        self.error = error

    @property
    def success(self) -> bool:
        """Probe answered and its observation was stored."""
        return (
            self.error is None
            and self.observation is not None
            and self.result is not None
            and self.result.reachable
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "target_name": self.target.name,
            "success": self.success,
            "data": self.observation.to_dict() if self.observation else None,
        }
        if self.error is not None:
            data["error"] = self.error
        elif self.result is not None and not self.result.reachable:
            data["error"] = self.result.error_message
        return data

    def __repr__(self) -> str:
        return (
            f"<CycleOutcome(target_name='{self.target.name}', "
            f"success={self.success}, error={self.error!r})>"
        )


class MonitoringScheduler:
    """
    Scheduler for periodic probe cycles over the configured targets.

    A cycle probes every enabled target concurrently and records each
    result. At most one cycle runs at a time: a tick or manual trigger
    arriving while a cycle is in flight waits for it to finish and then
    runs (queue policy).
    """

    def __init__(
        self,
        targets: Sequence[ProbeTarget],
        prober: Prober,
        recorder: Recorder,
        timer: RepeatingTimer,
        metrics: Optional[MetricsCollector] = None
    ):
        """
        Initialize monitoring scheduler.

        Args:
            targets: Targets loaded at process start
            prober: Prober used for every probe
            recorder: Recorder persisting each result
            timer: Repeating timer driving periodic cycles
            metrics: Metrics collector (defaults to the global one)
        """
        self.targets = tuple(targets)
        self.prober = prober
        self.recorder = recorder
        self.timer = timer
        self.metrics = metrics or metrics_collector

        self.state = SchedulerState.STOPPED
        self.interval_seconds: Optional[float] = None
        self.last_cycle_at: Optional[datetime] = None
        self._cycle_lock = asyncio.Lock()

        logger.info(
            "Monitoring scheduler initialized",
            extra={
                "total_targets": len(self.targets),
                "enabled_targets": len(self.enabled_targets)
            }
        )

    @property
    def enabled_targets(self) -> List[ProbeTarget]:
        return [t for t in self.targets if t.enabled]

    @property
    def is_running(self) -> bool:
        return self.state is SchedulerState.RUNNING

    @property
    def cycle_in_flight(self) -> bool:
        return self._cycle_lock.locked()

    async def start(self, interval_seconds: float) -> List[CycleOutcome]:
        """
        Run one cycle immediately, then arm the repeating timer.

        Args:
            interval_seconds: Period between timer-driven cycles

        Returns:
            list[CycleOutcome]: Outcomes of the initial cycle

        Raises:
            AlreadyRunningError: If the scheduler is already running
        """
        if self.is_running:
            logger.warning("Scheduler is already running")
            raise AlreadyRunningError()

        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")

        self._set_state(SchedulerState.RUNNING)
        self.interval_seconds = interval_seconds

        logger.info(
            "Starting monitoring scheduler",
            extra={
                "interval_seconds": interval_seconds,
                "enabled_targets": len(self.enabled_targets)
            }
        )

        try:
            outcomes = await self.run_cycle(trigger="startup")
        except BaseException:
            self._set_state(SchedulerState.STOPPED)
            self.interval_seconds = None
            raise

        # stop() may have been called while the initial cycle ran
        if self.is_running:
            self.timer.schedule(self._on_tick, interval_seconds)
            logger.info("Monitoring scheduler started")

        return outcomes

    def stop(self) -> None:
        """
        Disarm the timer. A cycle already in flight is allowed to finish.

        Raises:
            NotRunningError: If the scheduler is stopped
        """
        if not self.is_running:
            logger.warning("Scheduler is not running")
            raise NotRunningError()

        logger.info("Stopping monitoring scheduler")
        self.timer.cancel()
        self._set_state(SchedulerState.STOPPED)

    def resume(self) -> None:
        """
        Re-arm the timer without running an extra cycle.

        Raises:
            AlreadyRunningError: If the scheduler is running
            NeverStartedError: If start() was never called
        """
        if self.is_running:
            raise AlreadyRunningError()

        if self.interval_seconds is None:
            raise NeverStartedError()

        logger.info(
            "Resuming monitoring scheduler",
            extra={"interval_seconds": self.interval_seconds}
        )
        self.timer.schedule(self._on_tick, self.interval_seconds)
        self._set_state(SchedulerState.RUNNING)

    def status(self) -> Dict[str, Any]:
        """Current scheduler state; no side effects."""
        return {
            "is_running": self.is_running,
            "enabled_target_count": len(self.enabled_targets),
            "total_target_count": len(self.targets),
            "interval_seconds": self.interval_seconds,
            "last_cycle_at": self.last_cycle_at.isoformat() if self.last_cycle_at else None,
        }

    async def trigger_manual(self) -> List[CycleOutcome]:
        """Run one cycle now, regardless of timer and state."""
        logger.info("Manual probe cycle triggered")
        return await self.run_cycle(trigger="manual")

    async def shutdown(self) -> None:
        """Disarm the timer, release its backend and close the prober session."""
        if self.is_running:
            self._set_state(SchedulerState.STOPPED)
        self.timer.shutdown()
        await self.prober.close()
        logger.info("Monitoring scheduler shut down")

    async def run_cycle(self, trigger: str = "manual") -> List[CycleOutcome]:
        """
        Probe and record every enabled target once.

        Waits for any cycle already in flight before starting.

        Args:
            trigger: What requested the cycle (startup, timer, manual)

        Returns:
            list[CycleOutcome]: One outcome per enabled target, in target order
        """
        if self._cycle_lock.locked():
            logger.info(
                "Probe cycle already in flight, queuing",
                extra={"trigger": trigger}
            )
            self.metrics.record_cycle_queued(trigger)

        async with self._cycle_lock:
            targets = self.enabled_targets
            started = time.monotonic()

            logger.info(
                "Starting probe cycle",
                extra={"trigger": trigger, "target_count": len(targets)}
            )

            results = await asyncio.gather(
                *(self._probe_and_record(target) for target in targets),
                return_exceptions=True
            )

            outcomes = []
            for target, result in zip(targets, results):
                if isinstance(result, Exception):
                    logger.error(
                        "Unexpected error while processing target",
                        exc_info=result,
                        extra={"target_name": target.name, "error": str(result)}
                    )
                    outcomes.append(CycleOutcome(target, error=f"Unexpected error: {result}"))
                else:
                    outcomes.append(result)

            duration = time.monotonic() - started
            self.last_cycle_at = utcnow()
            self.metrics.record_cycle(trigger, duration)

            logger.info(
                "Completed probe cycle",
                extra={
                    "trigger": trigger,
                    "total": len(outcomes),
                    "successful": sum(1 for o in outcomes if o.success),
                    "failed": sum(1 for o in outcomes if not o.success),
                    "duration_seconds": round(duration, 3)
                }
            )

            return outcomes

    async def _probe_and_record(self, target: ProbeTarget) -> CycleOutcome:
        """Probe one target and record the result; storage errors stay local."""
        result = await self.prober.probe(target)
        self.metrics.record_probe(target.name, result.status.value, result.response_time_ms)

        try:
            observation = await self.recorder.record(result)
        except StorageError as e:
            logger.error(
                "Failed to record observation",
                extra={"target_name": target.name, "error": str(e)}
            )
            self.metrics.record_recording_failure(target.name)
            return CycleOutcome(target, result=result, error=str(e))

        return CycleOutcome(target, result=result, observation=observation)

    async def _on_tick(self) -> None:
        """Timer callback; never lets an exception reach the timer backend."""
        try:
            await self.run_cycle(trigger="timer")
        except Exception as e:
            logger.exception(
                "Error during scheduled probe cycle",
                extra={"error": str(e)}
            )

    def _set_state(self, state: SchedulerState) -> None:
        self.state = state
        self.metrics.set_scheduler_running(state is SchedulerState.RUNNING)
