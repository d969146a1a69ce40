"""Tests for reading display formatting."""

import pytest

from seeder.domain.formatting import MISSING_VALUE, format_minutes, formatted_value
from seeder.domain.models import HealthMetric


@pytest.mark.parametrize(
    "metric,value,expected",
    [
        (HealthMetric.SLEEP, 452.4, "7h 32m"),
        (HealthMetric.SLEEP, 45.0, "45m"),
        (HealthMetric.TIME_IN_DAYLIGHT, 120.0, "2h 0m"),
        (HealthMetric.STEPS, 12345.0, "12,345"),
        (HealthMetric.STEPS, 999.9, "999"),
        (HealthMetric.FLIGHTS_CLIMBED, 12.0, "12"),
        (HealthMetric.ACTIVE_ENERGY, 512.0, "512 kcal"),
        (HealthMetric.ACTIVE_ENERGY, 1512.25, "1,512.2 kcal"),
        (HealthMetric.DISTANCE_WALKING_RUNNING, 6250.0, "6.2 km"),
        (HealthMetric.DISTANCE_CYCLING, 12000.0, "12 km"),
        (HealthMetric.DISTANCE_SWIMMING, 0.0, "0 km"),
    ],
)
def test_formatted_value(metric, value, expected):
    assert formatted_value(metric, value) == expected


@pytest.mark.parametrize("metric", list(HealthMetric))
def test_missing_value(metric):
    assert formatted_value(metric, None) == MISSING_VALUE


def test_minutes_round_half_up():
    assert format_minutes(59.5) == "1h 0m"
    assert format_minutes(0.4) == "0m"
