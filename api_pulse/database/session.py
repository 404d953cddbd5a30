"""Database engine and session factory construction with async support."""

import os
from typing import Tuple

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import AsyncAdaptedQueuePool, NullPool

from api_pulse.database.base import Base


def create_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine with a pool suited to the database type.

    SQLite connections are opened on demand (NullPool); server databases
    get a bounded queue pool.

    Args:
        database_url: SQLAlchemy async URL
        echo: Whether to log emitted SQL

    Returns:
        AsyncEngine: Configured engine
    """
    if database_url.startswith("sqlite"):
        pool_class = NullPool
        pool_kwargs = {}
    else:
        pool_class = AsyncAdaptedQueuePool
        pool_kwargs = {
            "pool_size": int(os.getenv("DB_POOL_SIZE", "5")),
            "max_overflow": int(os.getenv("DB_MAX_OVERFLOW", "10")),
            "pool_pre_ping": True,
            "pool_recycle": 3600,
        }

    return create_async_engine(
        database_url,
        echo=echo,
        poolclass=pool_class,
        **pool_kwargs
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create the session factory used by the observation store."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def build_database(
    database_url: str,
    echo: bool = False
) -> Tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """Create engine and session factory in one step."""
    engine = create_engine(database_url, echo=echo)
    return engine, create_session_factory(engine)


async def create_tables(engine: AsyncEngine) -> None:
    """Create all tables registered on the declarative base."""
    # Register models with Base.metadata
    from api_pulse.models import Observation  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all, checkfirst=True)
