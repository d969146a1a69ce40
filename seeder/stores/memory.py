"""In-memory health store.

Stands in for the device health store in development and tests. Switches
simulate an unavailable store, a refused authorization and failing writes.
"""

from datetime import datetime

from seeder.domain.models import HealthMetric, HealthSample, StageInterval
from seeder.stores.protocol import StoreWriteError


class InMemoryHealthStore:
    store_name = "memory"

    def __init__(
        self,
        samples: list[HealthSample] | None = None,
        available: bool = True,
        authorizes: bool = True,
        fail_writes: str | None = None,
    ) -> None:
        self.samples: list[HealthSample] = list(samples or [])
        self.available = available
        self.authorizes = authorizes
        # when set, every save fails with this reason
        self.fail_writes = fail_writes
        self.authorized = False

    async def is_available(self) -> bool:
        return self.available

    async def request_authorization(self) -> bool:
        self.authorized = self.available and self.authorizes
        return self.authorized

    async def sum_quantity(
        self, metric: HealthMetric, start: datetime, end: datetime
    ) -> float | None:
        values = [
            s.value
            for s in self.samples
            if s.metric is metric and s.value is not None and start <= s.start < end
        ]
        if not values:
            return None
        return sum(values)

    async def sleep_intervals(self, start: datetime, end: datetime) -> list[StageInterval]:
        overlapping = [
            s
            for s in self.samples
            if s.metric is HealthMetric.SLEEP
            and s.category_value is not None
            and s.start < end
            and s.end > start
        ]
        overlapping.sort(key=lambda s: s.start)
        return [StageInterval(s.category_value, s.start, s.end) for s in overlapping]

    async def save(self, samples: list[HealthSample]) -> None:
        if self.fail_writes is not None:
            raise StoreWriteError(self.fail_writes)
        self.samples.extend(samples)
