"""Seeder service: authorization, read-back and mock generation for one subject.

Authorization state machine:
    unknown -> authorized | denied | unavailable
Once authorized, readings can be refreshed and mock data generated. The
generators themselves are pure; this layer owns the store calls, the
status message and the loading/generating flags the API reports.

Writes are all-or-nothing and never retried here: a failed batch is logged,
reported through the status message and raised to the caller. Once the
batch is written, a failed read-back is reported only through the status
message.
"""

import asyncio
import random
import time
from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum
from zoneinfo import ZoneInfo

import structlog

from seeder.domain.intervals import day_interval
from seeder.domain.models import DayWindow, HealthMetric, HealthMetricReading, HealthSample
from seeder.domain.validation import validate_sample_batch
from seeder.generation.quantity import mock_quantity_samples
from seeder.generation.sleep import mock_sleep_samples
from seeder.stores.protocol import HealthStore, StoreUnavailableError, StoreWriteError
from seeder.summary import summarize_sleep
from shared.exceptions import (
    AuthorizationDeniedError,
    AuthorizationRequiredError,
    EmptyMockBatchError,
    HealthDataUnavailableError,
    InvalidMockBatchError,
    MockDataWriteError,
)
from shared.metrics import (
    mock_generation_duration_seconds,
    mock_samples_generated_total,
    readings_refresh_duration_seconds,
    store_writes_total,
)

logger = structlog.get_logger()

UNAVAILABLE_MESSAGE = "Health data is not available on this device."
DENIED_MESSAGE = "HealthKit authorization failed."
NOT_AUTHORIZED_MESSAGE = "Request HealthKit access before generating data."
WRITE_FAILED_MESSAGE = "Failed to save mocked data."


class AuthorizationState(StrEnum):
    UNKNOWN = "unknown"
    AUTHORIZED = "authorized"
    DENIED = "denied"
    UNAVAILABLE = "unavailable"


@dataclass
class SeederContext:
    """Per-subject state surrounding the pure generators."""

    selected_date: date
    authorization_state: AuthorizationState = AuthorizationState.UNKNOWN
    status_message: str | None = None
    readings: list[HealthMetricReading] = field(default_factory=list)
    # in-flight operations; requests share one context and may overlap
    loading_count: int = 0
    generating_count: int = 0

    @property
    def is_authorized(self) -> bool:
        return self.authorization_state is AuthorizationState.AUTHORIZED

    @property
    def is_loading(self) -> bool:
        return self.loading_count > 0

    @property
    def is_generating(self) -> bool:
        return self.generating_count > 0


@dataclass
class GenerationResult:
    """Outcome of one successful mock-data write."""

    day: date
    window: DayWindow
    samples_written: int
    counts_by_metric: dict[HealthMetric, int]
    readings: list[HealthMetricReading]


class SeederService:
    def __init__(
        self,
        store: HealthStore,
        rng: random.Random,
        tz: ZoneInfo,
        context: SeederContext | None = None,
    ) -> None:
        self.store = store
        self.rng = rng
        self.tz = tz
        self.context = context or SeederContext(selected_date=date.today())

    async def request_authorization(self) -> AuthorizationState:
        """Negotiate access with the store and refresh the selected day on success.

        Raises:
            HealthDataUnavailableError: the store does not exist on this host.
            AuthorizationDeniedError: the store refused access.
        """
        ctx = self.context
        if not await self.store.is_available():
            ctx.authorization_state = AuthorizationState.UNAVAILABLE
            ctx.status_message = UNAVAILABLE_MESSAGE
            logger.warning("authorization_unavailable", store=self.store.store_name)
            raise HealthDataUnavailableError(UNAVAILABLE_MESSAGE)

        if not await self.store.request_authorization():
            ctx.authorization_state = AuthorizationState.DENIED
            ctx.status_message = DENIED_MESSAGE
            logger.warning("authorization_denied", store=self.store.store_name)
            raise AuthorizationDeniedError(DENIED_MESSAGE)

        ctx.authorization_state = AuthorizationState.AUTHORIZED
        ctx.status_message = None
        logger.info("authorization_granted", store=self.store.store_name)
        await self.refresh_metrics(ctx.selected_date)
        return ctx.authorization_state

    async def refresh_metrics(self, day: date) -> list[HealthMetricReading]:
        """Read every metric back for `day`, sorted by display order."""
        ctx = self.context
        if not ctx.is_authorized:
            raise AuthorizationRequiredError("Request HealthKit access before reading data.")

        start_time = time.monotonic()
        ctx.loading_count += 1
        ctx.status_message = None
        ctx.selected_date = day
        window = day_interval(day, self.tz)
        try:
            readings = await asyncio.gather(
                *(self._read_metric(metric, window) for metric in HealthMetric)
            )
        except StoreUnavailableError as exc:
            ctx.status_message = str(exc) or UNAVAILABLE_MESSAGE
            logger.warning("readings_refresh_failed", day=day.isoformat(), error=str(exc))
            raise HealthDataUnavailableError(ctx.status_message) from exc
        finally:
            ctx.loading_count -= 1

        ctx.readings = sorted(readings, key=lambda r: r.type.display_order)
        readings_refresh_duration_seconds.observe(time.monotonic() - start_time)
        logger.info(
            "readings_refreshed",
            day=day.isoformat(),
            with_data=sum(1 for r in ctx.readings if r.value is not None),
        )
        return ctx.readings

    async def _read_metric(self, metric: HealthMetric, window: DayWindow) -> HealthMetricReading:
        if metric.is_interval_based:
            intervals = await self.store.sleep_intervals(window.start, window.end)
            summary = summarize_sleep(intervals)
            value = summary.asleep_minutes if summary is not None else None
            return HealthMetricReading(type=metric, value=value, sleep_summary=summary)
        value = await self.store.sum_quantity(metric, window.start, window.end)
        return HealthMetricReading(type=metric, value=value)

    def build_mock_batch(self, day: date) -> list[HealthSample]:
        """One night of sleep ending on `day` plus one sample per other metric."""
        window = day_interval(day, self.tz)
        return mock_sleep_samples(window, self.rng) + mock_quantity_samples(window, self.rng)

    async def generate_mock_data(self, day: date) -> GenerationResult:
        """Generate, validate and write one day of mock data, then read it back.

        Raises:
            AuthorizationRequiredError: not authorized yet.
            EmptyMockBatchError: nothing could be generated.
            InvalidMockBatchError: the batch broke a validation rule; nothing written.
            MockDataWriteError: the store rejected the batch.
        """
        ctx = self.context
        if not ctx.is_authorized:
            ctx.status_message = NOT_AUTHORIZED_MESSAGE
            raise AuthorizationRequiredError(NOT_AUTHORIZED_MESSAGE)

        start_time = time.monotonic()
        ctx.generating_count += 1
        ctx.status_message = None
        try:
            samples = self.build_mock_batch(day)
            if not samples:
                ctx.status_message = EmptyMockBatchError().detail
                raise EmptyMockBatchError()

            errors = validate_sample_batch(samples)
            if errors:
                store_writes_total.labels(status="rejected").inc()
                logger.error(
                    "mock_batch_rejected",
                    day=day.isoformat(),
                    reasons=[e.reason for e in errors],
                )
                raise InvalidMockBatchError(
                    [
                        {
                            "field": e.field,
                            "rule": e.rule,
                            "reason": e.reason,
                            "value": str(e.value),
                        }
                        for e in errors
                    ]
                )

            try:
                await self.store.save(samples)
            except StoreWriteError as exc:
                ctx.status_message = exc.reason or WRITE_FAILED_MESSAGE
                store_writes_total.labels(status="failure").inc()
                logger.warning("mock_batch_write_failed", day=day.isoformat(), reason=exc.reason)
                raise MockDataWriteError(ctx.status_message) from exc
        finally:
            ctx.generating_count -= 1

        store_writes_total.labels(status="success").inc()
        counts = Counter(s.metric for s in samples)
        for metric, count in counts.items():
            mock_samples_generated_total.labels(metric=metric.value).inc(count)
        mock_generation_duration_seconds.observe(time.monotonic() - start_time)
        logger.info(
            "mock_data_generated",
            day=day.isoformat(),
            samples=len(samples),
            sleep_samples=counts.get(HealthMetric.SLEEP, 0),
        )

        try:
            readings = await self.refresh_metrics(day)
        except HealthDataUnavailableError:
            # the batch is already committed; only the status message carries the read error
            logger.warning("mock_data_readback_failed", day=day.isoformat())
            readings = []
        return GenerationResult(
            day=day,
            window=day_interval(day, self.tz),
            samples_written=len(samples),
            counts_by_metric=dict(counts),
            readings=readings,
        )
