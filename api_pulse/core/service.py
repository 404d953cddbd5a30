"""Monitor service - the function-level operations exposed to callers.

Every operation returns an OperationResult. Engine errors are turned into
failed results carrying the error's reason code; nothing is raised to the
caller except programming errors.
"""

import asyncio
from typing import Any, Dict, Iterable, List, Optional, Sequence

from api_pulse.config import ProbeTarget
from api_pulse.core.aggregator import StatsAggregator
from api_pulse.core.exceptions import MonitorError, ValidationError
from api_pulse.core.prober import Prober, ProbeResult
from api_pulse.core.recorder import Recorder
from api_pulse.core.retention import RetentionManager
from api_pulse.core.scheduler import CycleOutcome, MonitoringScheduler
from api_pulse.models.observation import Observation
from api_pulse.schemas.common import OperationResult
from api_pulse.schemas.stats import (
    BulkProbeSummary,
    FleetSummaryResponse,
    ObservationResponse,
    PurgeResponse,
    SchedulerStatusResponse,
    TargetStatsResponse,
)
from api_pulse.utils.logger import get_logger

logger = get_logger(__name__)


def _failure(error: MonitorError, data: Any = None) -> OperationResult:
    return OperationResult.fail(error=str(error), reason=error.reason, data=data)


def _observation_payload(observation: Observation) -> Dict[str, Any]:
    return ObservationResponse.model_validate(observation).model_dump(mode="json")


def _summarize(outcomes: Sequence[Any]) -> Dict[str, int]:
    successful = sum(1 for o in outcomes if o["success"])
    return BulkProbeSummary(
        total=len(outcomes),
        successful=successful,
        failed=len(outcomes) - successful
    ).model_dump()


def _validate_target(name: Optional[str], url: Optional[str]) -> ProbeTarget:
    if not name or not name.strip() or not url or not url.strip():
        raise ValidationError("Please provide both name and url")
    return ProbeTarget(name=name, url=url)


class MonitorService:
    """Facade over the monitoring engine used by the HTTP API."""

    def __init__(
        self,
        prober: Prober,
        recorder: Recorder,
        aggregator: StatsAggregator,
        retention: RetentionManager,
        scheduler: MonitoringScheduler
    ):
        self.prober = prober
        self.recorder = recorder
        self.aggregator = aggregator
        self.retention = retention
        self.scheduler = scheduler

    # Probing

    async def probe_one(self, name: Optional[str], url: Optional[str]) -> OperationResult:
        """
        Probe one ad-hoc target and record the observation.

        A network failure is still recorded (as DOWN) and reported as a
        failed result carrying the stored observation.
        """
        try:
            target = _validate_target(name, url)
        except ValidationError as e:
            logger.warning("Rejected probe request", extra={"error": str(e)})
            return _failure(e)

        payload = await self._probe_and_record(target)
        if payload["success"]:
            return OperationResult.ok(data=payload["data"])
        return OperationResult.fail(
            error=payload["error"],
            reason=payload["reason"],
            data=payload["data"]
        )

    async def probe_bulk(self, targets: Optional[Iterable[Dict[str, Any]]]) -> OperationResult:
        """Probe several ad-hoc targets concurrently; each is independent."""
        items = list(targets or [])
        if not items:
            return _failure(ValidationError("Please provide a list of targets to test"))

        try:
            validated = [_validate_target(item.get("name"), item.get("url")) for item in items]
        except ValidationError:
            return _failure(ValidationError("Each target must have name and url"))

        payloads = await asyncio.gather(*(self._probe_and_record(t) for t in validated))

        logger.info(
            "Bulk probe completed",
            extra={"total": len(payloads), "successful": sum(1 for p in payloads if p["success"])}
        )

        return OperationResult.ok(
            data=[{k: v for k, v in p.items() if k != "reason"} for p in payloads],
            summary=_summarize(payloads)
        )

    async def _probe_and_record(self, target: ProbeTarget) -> Dict[str, Any]:
        result: ProbeResult = await self.prober.probe(target)
        try:
            observation = await self.recorder.record(result)
        except MonitorError as e:
            return {
                "target_name": target.name,
                "success": False,
                "data": None,
                "error": str(e),
                "reason": e.reason,
            }

        payload = {
            "target_name": target.name,
            "success": result.reachable,
            "data": _observation_payload(observation),
            "error": None,
            "reason": None,
        }
        if not result.reachable:
            payload["error"] = result.error_message
            payload["reason"] = "probe_failure"
        return payload

    # Reads

    async def latest(self, limit: int = 10) -> OperationResult:
        try:
            observations = await self.aggregator.latest(limit)
        except MonitorError as e:
            return _failure(e)
        return OperationResult.ok(data=[_observation_payload(o) for o in observations])

    async def history(self, name: str, limit: int = 20) -> OperationResult:
        try:
            observations = await self.aggregator.history(name, limit)
        except MonitorError as e:
            return _failure(e)
        return OperationResult.ok(data=[_observation_payload(o) for o in observations])

    async def stats(self, name: str) -> OperationResult:
        try:
            stats = await self.aggregator.stats(name)
        except MonitorError as e:
            return _failure(e)
        return OperationResult.ok(data=TargetStatsResponse(**stats).model_dump(mode="json"))

    async def summary(self) -> OperationResult:
        try:
            summary = await self.aggregator.summary()
        except MonitorError as e:
            return _failure(e)
        return OperationResult.ok(data=FleetSummaryResponse(**summary).model_dump(mode="json"))

    # Retention

    async def purge_older_than(self, days: Optional[float] = None) -> OperationResult:
        try:
            cutoff = self.retention.cutoff_for(days)
            deleted = await self.retention.purge_before(cutoff)
        except MonitorError as e:
            return _failure(e)
        return OperationResult.ok(
            data=PurgeResponse(deleted_count=deleted, cutoff=cutoff.isoformat()).model_dump(
                exclude_none=True
            )
        )

    async def purge_target(self, name: str) -> OperationResult:
        try:
            deleted = await self.retention.purge_target(name)
        except MonitorError as e:
            return _failure(e)
        return OperationResult.ok(
            data=PurgeResponse(deleted_count=deleted, target_name=name).model_dump(
                exclude_none=True
            )
        )

    # Scheduler

    async def scheduler_start(self, interval_seconds: float) -> OperationResult:
        try:
            outcomes = await self.scheduler.start(interval_seconds)
        except MonitorError as e:
            return _failure(e)
        return OperationResult.ok(
            message="Scheduler started",
            data=self._cycle_payload(outcomes)
        )

    def scheduler_status(self) -> OperationResult:
        return OperationResult.ok(
            data=SchedulerStatusResponse(**self.scheduler.status()).model_dump()
        )

    def scheduler_stop(self) -> OperationResult:
        try:
            self.scheduler.stop()
        except MonitorError as e:
            return _failure(e)
        return OperationResult.ok(message="Scheduler stopped")

    def scheduler_resume(self) -> OperationResult:
        try:
            self.scheduler.resume()
        except MonitorError as e:
            return _failure(e)
        return OperationResult.ok(message="Scheduler resumed")

    async def scheduler_trigger_manual(self) -> OperationResult:
        outcomes = await self.scheduler.trigger_manual()
        data = self._cycle_payload(outcomes)
        return OperationResult.ok(
            message="Manual test completed",
            data=data,
            summary=_summarize(data)
        )

    @staticmethod
    def _cycle_payload(outcomes: List[CycleOutcome]) -> List[Dict[str, Any]]:
        payload = []
        for outcome in outcomes:
            item = outcome.to_dict()
            if outcome.observation is not None:
                item["data"] = _observation_payload(outcome.observation)
            payload.append(item)
        return payload
