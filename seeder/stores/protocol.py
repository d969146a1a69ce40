"""Health store protocol.

The store is the external collaborator that owns persisted health data:
authorization, windowed queries and batch writes. The generators never talk
to it; the service layer does, and only hands it finished batches.
"""

from datetime import datetime
from typing import Protocol, runtime_checkable

from seeder.domain.models import HealthMetric, HealthSample, StageInterval


class StoreError(Exception):
    """Base class for health store failures."""


class StoreUnavailableError(StoreError):
    """The store cannot be reached or does not exist on this host."""


class StoreWriteError(StoreError):
    """A batch write failed. Nothing from the batch was persisted."""

    def __init__(self, reason: str = ""):
        self.reason = reason
        super().__init__(reason or "batch write failed")


@runtime_checkable
class HealthStore(Protocol):
    """Common interface for all health store backends."""

    store_name: str

    async def is_available(self) -> bool:
        """Whether health data can be stored on this host at all."""
        ...

    async def request_authorization(self) -> bool:
        """Ask for read/write access to every metric. True when granted."""
        ...

    async def sum_quantity(
        self, metric: HealthMetric, start: datetime, end: datetime
    ) -> float | None:
        """Cumulative value of samples starting in [start, end); None if there are none."""
        ...

    async def sleep_intervals(self, start: datetime, end: datetime) -> list[StageInterval]:
        """Sleep samples overlapping [start, end), ordered by start."""
        ...

    async def save(self, samples: list[HealthSample]) -> None:
        """Persist a batch atomically.

        Raises:
            StoreWriteError: the batch was not written.
        """
        ...
