"""Calendar day windows.

A day window runs from local midnight to the next local midnight and is
expressed in UTC so that durations added to it are absolute (DST days are
23 or 25 hours long).
"""

from datetime import UTC, date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from seeder.domain.models import DayWindow


def day_interval(day: date, tz: ZoneInfo | None = None) -> DayWindow:
    """Return the [start, end) window of `day` in `tz` (UTC when omitted)."""
    zone = tz or ZoneInfo("UTC")
    start = datetime.combine(day, time.min, tzinfo=zone)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=zone)
    return DayWindow(start=start.astimezone(UTC), end=end.astimezone(UTC))
