"""Human-readable values for metric readings."""

import math

from seeder.domain.models import HealthMetric

MISSING_VALUE = "—"


def format_minutes(minutes: float) -> str:
    total = int(math.floor(minutes + 0.5))
    hours, mins = divmod(total, 60)
    if hours > 0:
        return f"{hours}h {mins}m"
    return f"{mins}m"


def _decimal(value: float) -> str:
    """Thousands separators, at most one fractional digit."""
    text = f"{value:,.1f}"
    return text[:-2] if text.endswith(".0") else text


def formatted_value(metric: HealthMetric, value: float | None) -> str:
    if value is None:
        return MISSING_VALUE
    if metric in (HealthMetric.SLEEP, HealthMetric.TIME_IN_DAYLIGHT):
        return format_minutes(value)
    if metric in (HealthMetric.STEPS, HealthMetric.FLIGHTS_CLIMBED):
        return f"{int(value):,}"
    if metric is HealthMetric.ACTIVE_ENERGY:
        return f"{_decimal(value)} kcal"
    return f"{_decimal(value / 1000)} km"
