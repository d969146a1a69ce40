"""Synthetic sleep architecture.

generate -> merge -> materialize:

1. Split the night into 3-5 cycles of ~90 minutes. Deep sleep shrinks and
   REM grows as the night progresses; each cycle is emitted as
   Core, Deep, Core, REM and usually a short Awake bout.
2. Collapse neighbouring segments of the same stage.
3. Lay the segments end to end from a sleep onset 2-3.5 hours before the
   day window starts.

Every function takes its randomness from an injected `random.Random`, so a
seeded generator reproduces the same night.
"""

import math
import random
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta

from seeder.domain.models import (
    DayWindow,
    HealthMetric,
    HealthSample,
    SleepStage,
    StageSegment,
)

_CYCLE_MINUTES = 90.0
_MIN_CYCLES = 3
_MAX_CYCLES = 5

_DEEP_JITTER = (0.85, 1.10)
_REM_JITTER = (0.90, 1.15)
_AWAKE_JITTER = (0.60, 1.30)
_AWAKE_SHARE = 0.03

_MIN_DEEP_MINUTES = 6.0
_MIN_REM_MINUTES = 6.0
_MIN_AWAKE_MINUTES = 2.0
_MIN_CORE_MINUTES = 12.0
_AWAKE_FALLBACK_FLOOR = 1.0
_FIRST_CORE_FRACTION = 0.45

_FINAL_WAKE_MINUTES = (4.0, 12.0)
# sleep onset, seconds before the day window starts
_ONSET_OFFSET_SECONDS = (7_200.0, 12_600.0)


class InvalidSleepDurationError(ValueError):
    """Raised when a night is requested with a non-positive duration."""

    def __init__(self, total_minutes: float):
        self.total_minutes = total_minutes
        super().__init__(f"Sleep duration must be positive, got {total_minutes!r} minutes")


@dataclass(frozen=True)
class SleepSample:
    """A stage segment pinned to absolute time."""

    stage: SleepStage
    start: datetime
    end: datetime


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def cycle_count(total_minutes: float) -> int:
    return max(_MIN_CYCLES, min(_MAX_CYCLES, _round_half_away(total_minutes / _CYCLE_MINUTES)))


def _cycle_segments(
    cycle_minutes: float, index: int, count: int, rng: random.Random
) -> list[StageSegment]:
    progress = index / max(count - 1, 1)
    deep_share = max(0.10, 0.24 - 0.10 * progress)
    rem_share = min(0.30, 0.12 + 0.12 * progress)

    deep = cycle_minutes * deep_share * rng.uniform(*_DEEP_JITTER)
    rem = cycle_minutes * rem_share * rng.uniform(*_REM_JITTER)
    awake = cycle_minutes * _AWAKE_SHARE * rng.uniform(*_AWAKE_JITTER)

    deep = max(_MIN_DEEP_MINUTES, deep)
    rem = max(_MIN_REM_MINUTES, rem)
    awake = max(_MIN_AWAKE_MINUTES, awake)

    core = cycle_minutes - deep - rem - awake
    if core < _MIN_CORE_MINUTES:
        core = _MIN_CORE_MINUTES
        overflow = (deep + rem + awake + core) - cycle_minutes
        if overflow > 0:
            adjustable = deep + rem
            if adjustable > 0:
                # tiny cycles can owe more than deep + rem hold; those bouts vanish
                deep, rem = (
                    max(0.0, deep - overflow * (deep / adjustable)),
                    max(0.0, rem - overflow * (rem / adjustable)),
                )
            else:
                awake = max(_AWAKE_FALLBACK_FLOOR, awake - overflow)

    core_first = core * _FIRST_CORE_FRACTION
    segments = [
        StageSegment(SleepStage.CORE, core_first),
        StageSegment(SleepStage.DEEP, deep),
        StageSegment(SleepStage.CORE, core - core_first),
        StageSegment(SleepStage.REM, rem),
    ]
    is_last = index == count - 1
    if not is_last or rng.random() < 0.5:
        segments.append(StageSegment(SleepStage.AWAKE, awake))
    return segments


def generate_sleep_segments(total_minutes: float, rng: random.Random) -> list[StageSegment]:
    """Build a night of `total_minutes` as an ordered list of stage segments.

    The floors and clamps inside each cycle make the raw sum drift from the
    target, so the whole sequence is rescaled at the end and sums to
    `total_minutes` within float tolerance.

    Very short nights still get three cycles; their stages become tiny but
    the result is well formed.
    """
    if not math.isfinite(total_minutes) or total_minutes <= 0:
        raise InvalidSleepDurationError(total_minutes)

    count = cycle_count(total_minutes)
    cycle_minutes = total_minutes / count
    segments: list[StageSegment] = []
    for index in range(count):
        segments.extend(_cycle_segments(cycle_minutes, index, count, rng))

    segments.append(StageSegment(SleepStage.AWAKE, rng.uniform(*_FINAL_WAKE_MINUTES)))

    raw_total = sum(s.minutes for s in segments)
    scale = total_minutes / raw_total
    return [StageSegment(s.stage, s.minutes * scale) for s in segments]


def merge_adjacent_segments(segments: Iterable[StageSegment]) -> list[StageSegment]:
    """Collapse neighbouring segments of the same stage; drop empty ones."""
    merged: list[StageSegment] = []
    for segment in segments:
        if segment.minutes <= 0:
            continue
        if merged and merged[-1].stage == segment.stage:
            merged[-1] = StageSegment(segment.stage, merged[-1].minutes + segment.minutes)
        else:
            merged.append(segment)
    return merged


def materialize_segments(
    segments: Iterable[StageSegment], anchor: datetime
) -> list[SleepSample]:
    """Lay segments end to end starting at `anchor`."""
    samples: list[SleepSample] = []
    cursor = anchor
    for segment in segments:
        if segment.minutes <= 0:
            continue
        end = cursor + timedelta(minutes=segment.minutes)
        samples.append(SleepSample(segment.stage, cursor, end))
        cursor = end
    return samples


def sleep_onset(window: DayWindow, rng: random.Random) -> datetime:
    """Bedtime on the evening before the window starts."""
    low, high = _ONSET_OFFSET_SECONDS
    offset = rng.uniform(low, high)
    # uniform() may return its upper bound; the onset range is half-open
    if offset >= high:
        offset = low
    return window.start - timedelta(seconds=offset)


def mock_sleep_samples(window: DayWindow, rng: random.Random) -> list[HealthSample]:
    """A full mock night ending on the morning of `window`, ready to write."""
    low, high = HealthMetric.SLEEP.mock_range
    total_minutes = rng.uniform(low, high) * 60
    onset = sleep_onset(window, rng)

    segments = merge_adjacent_segments(generate_sleep_segments(total_minutes, rng))
    return [
        HealthSample(
            metric=HealthMetric.SLEEP,
            start=sample.start,
            end=sample.end,
            category_value=sample.stage.category_value,
        )
        for sample in materialize_segments(segments, onset)
    ]
