"""Database-backed health store (Postgres via SQLAlchemy async).

Each save runs in a single transaction, so a failed batch leaves no rows.
"""

from datetime import datetime
from uuid import uuid4

import structlog
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from seeder.domain.models import HealthMetric, HealthSample, StageInterval
from seeder.repository import HealthSampleRepository
from seeder.stores.protocol import StoreUnavailableError, StoreWriteError

logger = structlog.get_logger()


class SqlHealthStore:
    store_name = "database"

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def is_available(self) -> bool:
        try:
            async with self._session_factory() as session:
                await session.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError):
            logger.warning("store_unreachable", store=self.store_name)
            return False
        return True

    async def request_authorization(self) -> bool:
        # Reaching the database is the whole grant
        return await self.is_available()

    async def sum_quantity(
        self, metric: HealthMetric, start: datetime, end: datetime
    ) -> float | None:
        try:
            async with self._session_factory() as session:
                return await HealthSampleRepository(session).sum_quantity(metric, start, end)
        except (SQLAlchemyError, OSError) as exc:
            raise StoreUnavailableError(str(exc)) from exc

    async def sleep_intervals(self, start: datetime, end: datetime) -> list[StageInterval]:
        try:
            async with self._session_factory() as session:
                return await HealthSampleRepository(session).sleep_intervals(start, end)
        except (SQLAlchemyError, OSError) as exc:
            raise StoreUnavailableError(str(exc)) from exc

    async def save(self, samples: list[HealthSample]) -> None:
        batch_id = uuid4()
        try:
            async with self._session_factory() as session, session.begin():
                count = await HealthSampleRepository(session).insert_batch(samples, batch_id)
        except (SQLAlchemyError, OSError) as exc:
            logger.warning("batch_write_failed", batch_id=str(batch_id), error=str(exc))
            raise StoreWriteError(f"Failed to save mocked data: {exc.__class__.__name__}") from exc
        logger.info("batch_written", batch_id=str(batch_id), samples=count)
