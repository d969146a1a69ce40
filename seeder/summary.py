"""Sleep summary aggregation over stored stage intervals.

The inverse of generate -> merge -> materialize: raw intervals are filtered,
sorted and folded back into stage segments, so a night written by the
generator reads back with the same per-stage totals.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from seeder.domain.models import SleepStage, SleepSummary, StageInterval, StageSegment


@dataclass(frozen=True)
class StageShare:
    stage: SleepStage
    minutes: float
    percentage: float


def summarize_sleep(intervals: Iterable[StageInterval]) -> SleepSummary | None:
    """Fold raw intervals into a SleepSummary.

    Intervals with an unknown code or a non-positive duration are skipped.
    Returns None when nothing survives; that is the "no data" result, not an
    error.
    """
    segments: list[StageSegment] = []
    earliest_start = None
    latest_end = None

    for interval in sorted(intervals, key=lambda i: i.start):
        stage = SleepStage.from_category_value(interval.category_value)
        if stage is None:
            continue
        seconds = (interval.end - interval.start).total_seconds()
        if seconds <= 0:
            continue

        if earliest_start is None or interval.start < earliest_start:
            earliest_start = interval.start
        if latest_end is None or interval.end > latest_end:
            latest_end = interval.end

        minutes = seconds / 60
        if segments and segments[-1].stage == stage:
            segments[-1] = StageSegment(stage, segments[-1].minutes + minutes)
        else:
            segments.append(StageSegment(stage, minutes))

    if not segments or earliest_start is None or latest_end is None:
        return None
    return SleepSummary(segments=tuple(segments), start_date=earliest_start, end_date=latest_end)


def stage_percentage(summary: SleepSummary, stage: SleepStage) -> float:
    """Share of a stage for display.

    Awake is measured against total time in bed; every other stage against
    time asleep.
    """
    minutes = summary.stage_totals.get(stage, 0.0)
    denominator = summary.asleep_minutes if stage.is_asleep else summary.total_minutes
    if denominator <= 0:
        return 0.0
    return minutes / denominator * 100


def stage_breakdown(summary: SleepSummary) -> list[StageShare]:
    totals = summary.stage_totals
    return [
        StageShare(stage, totals.get(stage, 0.0), stage_percentage(summary, stage))
        for stage in SleepStage.legend_order()
    ]
