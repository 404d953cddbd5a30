"""Aggregator for per-target statistics and fleet-wide summaries."""

from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable, Dict, List

from api_pulse.core.exceptions import NoDataError, ValidationError
from api_pulse.core.store import ObservationFilter, ObservationStore
from api_pulse.models.observation import Observation, ProbeStatus
from api_pulse.utils.clock import utcnow
from api_pulse.utils.logger import get_logger

logger = get_logger(__name__)

SUMMARY_WINDOW = timedelta(hours=24)


class StatsAggregator:
    """
    Calculator for target availability and performance statistics.

    Reads observations from the store on demand; holds no state of its own.
    """

    def __init__(
        self,
        store: ObservationStore,
        clock: Callable[[], datetime] = utcnow
    ):
        """
        Initialize aggregator.

        Args:
            store: Observation store
            clock: Source of "now" for windowed summaries
        """
        self.store = store
        self.clock = clock

    async def stats(self, target_name: str) -> Dict[str, Any]:
        """
        Get statistics over every stored observation of a target.

        SLOW observations count toward uptime: the target answered, only
        slower than the latency threshold.

        Args:
            target_name: Name of the target

        Returns:
            dict: Counts by status, average response time and uptime percent

        Raises:
            NoDataError: If the target has no observations

        Example:
            ```python
            stats = await aggregator.stats("GitHub API")
            print(f"Uptime: {stats['uptime_percent']}%")
            ```
        """
        observations = await self.store.find_all(ObservationFilter(target_name=target_name))

        if not observations:
            logger.warning(
                "No observations found for stats",
                extra={"target_name": target_name}
            )
            raise NoDataError(target_name)

        total = len(observations)
        counts = _count_by_status(observations)
        up_count = counts[ProbeStatus.UP]
        slow_count = counts[ProbeStatus.SLOW]

        stats = {
            "target_name": target_name,
            "total": total,
            "up_count": up_count,
            "down_count": counts[ProbeStatus.DOWN],
            "slow_count": slow_count,
            "avg_response_time_ms": int(_ratio_half_up(
                sum(o.response_time_ms for o in observations), total
            )),
            "uptime_percent": float(_ratio_half_up(
                100 * (up_count + slow_count), total, places=2
            )),
        }

        logger.info(
            "Generated statistics",
            extra={
                "target_name": target_name,
                "total": total,
                "uptime_percent": stats["uptime_percent"]
            }
        )

        return stats

    async def summary(self) -> Dict[str, Any]:
        """
        Get the current state of every target observed historically.

        For each target reports the latest observation and the share of UP
        observations over the trailing 24 hours. Targets without any
        observation are omitted.

        Returns:
            dict: ``total_targets``, ``targets`` and ``generated_at``
        """
        now = self.clock()
        since = now - SUMMARY_WINDOW

        target_summaries = []
        for target_name in await self.store.distinct_target_names():
            latest = await self.store.find_sorted(
                ObservationFilter(target_name=target_name),
                limit=1
            )
            if not latest:
                continue
            last = latest[0]

            window = await self.store.find_all(
                ObservationFilter(target_name=target_name, observed_since=since)
            )
            window_count = len(window)
            up_in_window = sum(1 for o in window if o.status == ProbeStatus.UP)

            target_summaries.append({
                "target_name": target_name,
                "current_status": last.status.value,
                "last_checked_at": last.observed_at.isoformat(),
                "last_response_time_ms": last.response_time_ms,
                "last_24h_test_count": window_count,
                "last_24h_uptime_percent": (
                    int(_ratio_half_up(100 * up_in_window, window_count))
                    if window_count else 0
                ),
            })

        summary = {
            "total_targets": len(target_summaries),
            "targets": target_summaries,
            "generated_at": now.isoformat(),
        }

        logger.info(
            "Generated fleet summary",
            extra={"total_targets": summary["total_targets"]}
        )

        return summary

    async def latest(self, limit: int = 10) -> List[Observation]:
        """Newest observations across all targets."""
        _check_limit(limit)
        return await self.store.find_sorted(limit=limit)

    async def history(self, target_name: str, limit: int = 20) -> List[Observation]:
        """Newest observations of one target."""
        _check_limit(limit)
        return await self.store.find_sorted(
            ObservationFilter(target_name=target_name),
            limit=limit
        )


def _count_by_status(observations: List[Observation]) -> Dict[ProbeStatus, int]:
    counts = {status: 0 for status in ProbeStatus}
    for observation in observations:
        counts[observation.status] += 1
    return counts


def _check_limit(limit: int) -> None:
    if limit < 1:
        raise ValidationError(f"limit must be at least 1, got {limit}")


def _ratio_half_up(numerator: int, denominator: int, places: int = 0) -> Decimal:
    """``numerator / denominator`` rounded with exact halves going up."""
    exponent = Decimal(1).scaleb(-places)
    return (Decimal(numerator) / Decimal(denominator)).quantize(exponent, rounding=ROUND_HALF_UP)
