"""HealthSample repository: all DB access for the database-backed store.

Encapsulates batch inserts, windowed quantity sums and sleep interval
lookups against the health_samples table.
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import func, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from seeder.domain.models import HealthMetric, HealthSample, StageInterval
from seeder.domain.orm import HealthSampleModel, SampleKind


def _to_row(sample: HealthSample, batch_id: UUID) -> dict[str, Any]:
    kind = SampleKind.CATEGORY if sample.is_category else SampleKind.QUANTITY
    return {
        "metric": sample.metric.value,
        "kind": kind.value,
        "value": sample.value,
        "category_value": sample.category_value,
        "start_at": sample.start,
        "end_at": sample.end,
        "sample_metadata": sample.metadata,
        "batch_id": batch_id,
    }


class HealthSampleRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def insert_batch(self, samples: list[HealthSample], batch_id: UUID) -> int:
        """Insert every sample under one batch id. Returns the row count."""
        if not samples:
            return 0
        rows = [_to_row(s, batch_id) for s in samples]
        await self.session.execute(insert(HealthSampleModel), rows)
        return len(rows)

    async def sum_quantity(
        self, metric: HealthMetric, start: datetime, end: datetime
    ) -> float | None:
        """Sum of values for samples starting in [start, end). None when no rows match."""
        query = (
            select(func.count(), func.sum(HealthSampleModel.value))
            .where(HealthSampleModel.metric == metric.value)
            .where(HealthSampleModel.kind == SampleKind.QUANTITY.value)
            .where(HealthSampleModel.start_at >= start)
            .where(HealthSampleModel.start_at < end)
        )
        result = await self.session.execute(query)
        count, total = result.one()
        if not count:
            return None
        return float(total)

    async def sleep_intervals(self, start: datetime, end: datetime) -> list[StageInterval]:
        """Sleep category rows overlapping [start, end), ordered by start."""
        query = (
            select(
                HealthSampleModel.category_value,
                HealthSampleModel.start_at,
                HealthSampleModel.end_at,
            )
            .where(HealthSampleModel.metric == HealthMetric.SLEEP.value)
            .where(HealthSampleModel.kind == SampleKind.CATEGORY.value)
            .where(HealthSampleModel.start_at < end)
            .where(HealthSampleModel.end_at > start)
            .order_by(HealthSampleModel.start_at.asc(), HealthSampleModel.id.asc())
        )
        result = await self.session.execute(query)
        return [StageInterval(r[0], r[1], r[2]) for r in result.all()]

    async def count_batch(self, batch_id: UUID) -> int:
        query = select(func.count()).where(HealthSampleModel.batch_id == batch_id)
        result = await self.session.execute(query)
        return result.scalar_one()
