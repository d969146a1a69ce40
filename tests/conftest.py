"""Shared test fixtures."""

import random
import sys
from datetime import UTC, date, datetime, timedelta
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from seeder.domain.intervals import day_interval  # noqa: E402
from seeder.domain.models import SleepAnalysisCode, StageInterval  # noqa: E402

SEED_DAY = date(2024, 3, 15)
MIDNIGHT = datetime(2024, 3, 15, tzinfo=UTC)


def interval(code: int, start: datetime, minutes: float) -> StageInterval:
    return StageInterval(int(code), start, start + timedelta(minutes=minutes))


@pytest.fixture
def rng():
    return random.Random(20240315)


@pytest.fixture
def seed_day():
    return SEED_DAY


@pytest.fixture
def window():
    return day_interval(SEED_DAY)


@pytest.fixture
def night_intervals():
    """A short stored night, deliberately out of order, with an in_bed prefix."""
    onset = MIDNIGHT - timedelta(hours=2)
    return [
        interval(SleepAnalysisCode.ASLEEP_DEEP, onset + timedelta(minutes=40), 50),
        interval(SleepAnalysisCode.IN_BED, onset, 10),
        interval(SleepAnalysisCode.ASLEEP_UNSPECIFIED, onset + timedelta(minutes=10), 30),
        interval(SleepAnalysisCode.ASLEEP_REM, onset + timedelta(minutes=90), 20),
        interval(SleepAnalysisCode.AWAKE, onset + timedelta(minutes=110), 5),
    ]
