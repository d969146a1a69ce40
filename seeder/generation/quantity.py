"""Single-value mock samples for the non-sleep metrics."""

import math
import random
from datetime import timedelta

from seeder.domain.models import DayWindow, HealthMetric, HealthSample

_START_OFFSET_SECONDS = (3_600.0, 57_600.0)
_DURATION_SECONDS = (1_200.0, 5_400.0)


def round_value(value: float) -> float:
    """Nearest integer, ties away from zero (2.5 -> 3, not round()'s 2)."""
    return math.copysign(math.floor(abs(value) + 0.5), value)


def mock_quantity_sample(
    metric: HealthMetric, window: DayWindow, rng: random.Random
) -> HealthSample | None:
    """Draw one sample for `metric` inside `window`.

    Returns None for sleep (handled by the sleep generator) and for draws
    that come out non-positive, which the zero-floored ranges allow.
    """
    if metric.is_interval_based:
        return None

    low, high = metric.mock_range
    raw_value = rng.uniform(low, high)
    if raw_value <= 0:
        return None

    value = round_value(raw_value)
    start = window.start + timedelta(seconds=rng.uniform(*_START_OFFSET_SECONDS))
    end = min(start + timedelta(seconds=rng.uniform(*_DURATION_SECONDS)), window.end)
    return HealthSample(metric=metric, start=start, end=end, value=value)


def mock_quantity_samples(window: DayWindow, rng: random.Random) -> list[HealthSample]:
    samples = []
    for metric in HealthMetric.in_display_order():
        sample = mock_quantity_sample(metric, window, rng)
        if sample is not None:
            samples.append(sample)
    return samples
