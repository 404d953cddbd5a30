"""Recorder - persists probe results as observations."""

from api_pulse.core.prober import ProbeResult
from api_pulse.core.store import ObservationStore
from api_pulse.models.observation import Observation
from api_pulse.utils.logger import get_logger

logger = get_logger(__name__)


class Recorder:
    """Appends probe results to the observation store, unchanged."""

    def __init__(self, store: ObservationStore):
        self.store = store

    async def record(self, result: ProbeResult) -> Observation:
        """
        Persist a probe result.

        Args:
            result: Draft produced by the prober

        Returns:
            Observation: Stored observation with its id and created_at

        Raises:
            StorageError: If the store rejects the write
        """
        observation = await self.store.insert(Observation(**result.to_dict()))

        logger.info(
            "Observation recorded",
            extra={
                "observation_id": observation.id,
                "target_name": observation.target_name,
                "status": observation.status.value
            }
        )

        return observation
