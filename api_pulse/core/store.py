"""Durable observation store backed by async SQLAlchemy."""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from api_pulse.core.exceptions import StorageError
from api_pulse.models.observation import Observation
from api_pulse.utils.logger import get_logger

logger = get_logger(__name__)


class ObservationFilter:
    """Criteria for selecting observations.

    ``observed_before`` is exclusive, ``observed_since`` is inclusive.
    """

    def __init__(
        self,
        target_name: Optional[str] = None,
        observed_before: Optional[datetime] = None,
        observed_since: Optional[datetime] = None
    ):
        self.target_name = target_name
        self.observed_before = observed_before
        self.observed_since = observed_since

    def clauses(self) -> list:
        conditions = []
        if self.target_name is not None:
            conditions.append(Observation.target_name == self.target_name)
        if self.observed_before is not None:
            conditions.append(Observation.observed_at < self.observed_before)
        if self.observed_since is not None:
            conditions.append(Observation.observed_at >= self.observed_since)
        return conditions

    def __repr__(self) -> str:
        return (
            f"<ObservationFilter(target_name={self.target_name!r}, "
            f"observed_before={self.observed_before}, "
            f"observed_since={self.observed_since})>"
        )


class ObservationStore:
    """
    Append-only store of observations.

    Every operation opens its own session; SQLAlchemy failures are
    re-raised as StorageError.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        """
        Initialize observation store.

        Args:
            session_factory: Factory producing async sessions
        """
        self.session_factory = session_factory

    async def insert(self, observation: Observation) -> Observation:
        """Persist a new observation and return it with its id populated."""
        try:
            async with self.session_factory() as session:
                session.add(observation)
                await session.commit()
                await session.refresh(observation)
                return observation
        except SQLAlchemyError as e:
            logger.error(
                "Failed to insert observation",
                extra={"target_name": observation.target_name, "error": str(e)}
            )
            raise StorageError(f"Failed to store observation: {e}") from e

    async def find_sorted(
        self,
        criteria: Optional[ObservationFilter] = None,
        limit: Optional[int] = None
    ) -> List[Observation]:
        """Observations matching the filter, newest first."""
        criteria = criteria or ObservationFilter()
        query = (
            select(Observation)
            .where(*criteria.clauses())
            .order_by(Observation.observed_at.desc(), Observation.id.desc())
        )
        if limit is not None:
            query = query.limit(limit)
        return await self._fetch(query, criteria)

    async def find_all(
        self,
        criteria: Optional[ObservationFilter] = None
    ) -> List[Observation]:
        """All observations matching the filter, in insertion order."""
        criteria = criteria or ObservationFilter()
        query = select(Observation).where(*criteria.clauses()).order_by(Observation.id)
        return await self._fetch(query, criteria)

    async def delete_where(self, criteria: ObservationFilter) -> int:
        """Delete observations matching the filter and return how many were removed."""
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    delete(Observation).where(*criteria.clauses())
                )
                await session.commit()
                return result.rowcount or 0
        except SQLAlchemyError as e:
            logger.error(
                "Failed to delete observations",
                extra={"filter": repr(criteria), "error": str(e)}
            )
            raise StorageError(f"Failed to delete observations: {e}") from e

    async def distinct_target_names(self) -> List[str]:
        """Names of every target that has at least one stored observation."""
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(Observation.target_name)
                    .distinct()
                    .order_by(Observation.target_name)
                )
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Failed to list target names", extra={"error": str(e)})
            raise StorageError(f"Failed to list target names: {e}") from e

    async def _fetch(self, query, criteria: ObservationFilter) -> List[Observation]:
        try:
            async with self.session_factory() as session:
                result = await session.execute(query)
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(
                "Failed to read observations",
                extra={"filter": repr(criteria), "error": str(e)}
            )
            raise StorageError(f"Failed to read observations: {e}") from e
