"""Retention - purges observations by age or by target."""

import math
from datetime import datetime, timedelta
from typing import Callable, Optional

from api_pulse.core.exceptions import ValidationError
from api_pulse.core.metrics import MetricsCollector, metrics_collector
from api_pulse.core.store import ObservationFilter, ObservationStore
from api_pulse.utils.clock import utcnow
from api_pulse.utils.logger import get_logger

logger = get_logger(__name__)


class RetentionManager:
    """Deletes observations. Both operations are idempotent."""

    def __init__(
        self,
        store: ObservationStore,
        clock: Callable[[], datetime] = utcnow,
        metrics: Optional[MetricsCollector] = None,
        default_days: float = 30
    ):
        self.store = store
        self.clock = clock
        self.metrics = metrics or metrics_collector
        self.default_days = default_days

    def cutoff_for(self, days: Optional[float] = None) -> datetime:
        """Instant before which observations are purged for a given age."""
        if days is None:
            days = self.default_days
        if not math.isfinite(days) or days < 0:
            raise ValidationError(f"days must be a non-negative number, got {days}")
        try:
            return self.clock() - timedelta(days=days)
        except OverflowError:
            # Older than anything storable: nothing qualifies for deletion
            return datetime.min

    async def purge_older_than(self, days: Optional[float] = None) -> int:
        """
        Delete observations strictly older than ``now - days``.

        The observation sitting exactly on the cutoff instant is kept.

        Args:
            days: Age in days (defaults to the configured retention)

        Returns:
            int: Number of observations removed
        """
        return await self.purge_before(self.cutoff_for(days))

    async def purge_before(self, cutoff: datetime) -> int:
        """Delete observations with ``observed_at < cutoff``."""
        deleted = await self.store.delete_where(ObservationFilter(observed_before=cutoff))
        self.metrics.record_purge("age", deleted)

        logger.info(
            "Purged old observations",
            extra={"cutoff": cutoff.isoformat(), "deleted_count": deleted}
        )

        return deleted

    async def purge_target(self, target_name: str) -> int:
        """Delete every observation of a target and return how many were removed."""
        deleted = await self.store.delete_where(ObservationFilter(target_name=target_name))
        self.metrics.record_purge("target", deleted)

        logger.info(
            "Purged target observations",
            extra={"target_name": target_name, "deleted_count": deleted}
        )

        return deleted
