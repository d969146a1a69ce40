"""Health metric and sleep domain model.

Tagged variants with static metadata tables, plus the plain value types that
flow through generation (write path) and summarisation (read path).

Design principles:
- Lookup tables over dispatch: every per-variant fact lives in one mapping
- Write mapping is one-to-one; read mapping collapses several store codes
  onto one stage and is intentionally lossy
- All timestamps are timezone-aware; the generators work in UTC
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum, StrEnum
from typing import Any


class SleepAnalysisCode(IntEnum):
    """Category codes the health store uses for sleep analysis samples."""

    IN_BED = 0
    ASLEEP_UNSPECIFIED = 1
    AWAKE = 2
    ASLEEP_CORE = 3
    ASLEEP_DEEP = 4
    ASLEEP_REM = 5


class SleepStage(StrEnum):
    AWAKE = "awake"
    REM = "rem"
    CORE = "core"
    DEEP = "deep"

    @property
    def title(self) -> str:
        return _STAGE_TITLES[self]

    @property
    def is_asleep(self) -> bool:
        return self is not SleepStage.AWAKE

    @property
    def category_value(self) -> int:
        """Store code written for this stage."""
        return int(_STAGE_TO_CODE[self])

    @classmethod
    def from_category_value(cls, value: int) -> "SleepStage | None":
        """Map a stored code back to a stage. Unknown codes give None."""
        return _CODE_TO_STAGE.get(value)

    @classmethod
    def legend_order(cls) -> list["SleepStage"]:
        return [cls.DEEP, cls.CORE, cls.REM, cls.AWAKE]


_STAGE_TITLES = {
    SleepStage.AWAKE: "Awake",
    SleepStage.REM: "REM",
    SleepStage.CORE: "Core",
    SleepStage.DEEP: "Deep",
}

_STAGE_TO_CODE = {
    SleepStage.AWAKE: SleepAnalysisCode.AWAKE,
    SleepStage.REM: SleepAnalysisCode.ASLEEP_REM,
    SleepStage.CORE: SleepAnalysisCode.ASLEEP_CORE,
    SleepStage.DEEP: SleepAnalysisCode.ASLEEP_DEEP,
}

# in_bed reads as awake and asleep_unspecified reads as core
_CODE_TO_STAGE: dict[int, SleepStage] = {
    SleepAnalysisCode.IN_BED: SleepStage.AWAKE,
    SleepAnalysisCode.AWAKE: SleepStage.AWAKE,
    SleepAnalysisCode.ASLEEP_REM: SleepStage.REM,
    SleepAnalysisCode.ASLEEP_DEEP: SleepStage.DEEP,
    SleepAnalysisCode.ASLEEP_CORE: SleepStage.CORE,
    SleepAnalysisCode.ASLEEP_UNSPECIFIED: SleepStage.CORE,
}


@dataclass(frozen=True)
class MetricInfo:
    title: str
    unit: str | None
    mock_range: tuple[float, float]
    display_order: int


class HealthMetric(StrEnum):
    SLEEP = "sleep"
    TIME_IN_DAYLIGHT = "time_in_daylight"
    STEPS = "steps"
    DISTANCE_WALKING_RUNNING = "distance_walking_running"
    DISTANCE_CYCLING = "distance_cycling"
    DISTANCE_SWIMMING = "distance_swimming"
    ACTIVE_ENERGY = "active_energy"
    FLIGHTS_CLIMBED = "flights_climbed"

    @property
    def info(self) -> MetricInfo:
        return METRIC_INFO[self]

    @property
    def title(self) -> str:
        return self.info.title

    @property
    def unit(self) -> str | None:
        return self.info.unit

    @property
    def mock_range(self) -> tuple[float, float]:
        return self.info.mock_range

    @property
    def display_order(self) -> int:
        return self.info.display_order

    @property
    def is_interval_based(self) -> bool:
        """Sleep is stored as stage intervals, not as a single quantity."""
        return self is HealthMetric.SLEEP

    @classmethod
    def in_display_order(cls) -> list["HealthMetric"]:
        return sorted(cls, key=lambda m: m.display_order)


METRIC_INFO: dict[HealthMetric, MetricInfo] = {
    # sleep range is in hours
    HealthMetric.SLEEP: MetricInfo("Sleep", None, (6.5, 8.5), 0),
    HealthMetric.TIME_IN_DAYLIGHT: MetricInfo("Time in Daylight", "min", (30.0, 180.0), 1),
    HealthMetric.STEPS: MetricInfo("Steps", "count", (4500.0, 12000.0), 2),
    HealthMetric.DISTANCE_WALKING_RUNNING: MetricInfo("Walk + Run", "m", (2500.0, 9000.0), 3),
    HealthMetric.DISTANCE_CYCLING: MetricInfo("Cycling", "m", (0.0, 15000.0), 4),
    HealthMetric.DISTANCE_SWIMMING: MetricInfo("Swimming", "m", (0.0, 1200.0), 5),
    HealthMetric.ACTIVE_ENERGY: MetricInfo("Active Energy", "kcal", (350.0, 950.0), 6),
    HealthMetric.FLIGHTS_CLIMBED: MetricInfo("Flights Climbed", "count", (4.0, 24.0), 7),
}


@dataclass(frozen=True)
class DayWindow:
    """Half-open [start, end) window, both ends in UTC."""

    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end


@dataclass(frozen=True)
class StageSegment:
    stage: SleepStage
    minutes: float


@dataclass(frozen=True)
class StageInterval:
    """A raw sleep interval as the store returns it."""

    category_value: int
    start: datetime
    end: datetime


@dataclass(frozen=True)
class SleepSummary:
    segments: tuple[StageSegment, ...]
    start_date: datetime
    end_date: datetime

    @property
    def total_minutes(self) -> float:
        return sum(s.minutes for s in self.segments)

    @property
    def stage_totals(self) -> dict[SleepStage, float]:
        totals: dict[SleepStage, float] = {}
        for segment in self.segments:
            totals[segment.stage] = totals.get(segment.stage, 0.0) + segment.minutes
        return totals

    @property
    def asleep_minutes(self) -> float:
        return sum(minutes for stage, minutes in self.stage_totals.items() if stage.is_asleep)


def _user_entered() -> dict[str, Any]:
    return {"was_user_entered": True}


@dataclass(frozen=True)
class HealthSample:
    """One writable record: a quantity (value) or a sleep category (category_value)."""

    metric: HealthMetric
    start: datetime
    end: datetime
    value: float | None = None
    category_value: int | None = None
    metadata: dict[str, Any] = field(default_factory=_user_entered)

    @property
    def is_category(self) -> bool:
        return self.category_value is not None


@dataclass
class HealthMetricReading:
    type: HealthMetric
    value: float | None
    sleep_summary: SleepSummary | None = None

    @property
    def display_text(self) -> str:
        from seeder.domain.formatting import formatted_value

        return formatted_value(self.type, self.value)
