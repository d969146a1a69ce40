"""Tests for domain models: stage code mapping, metric metadata, summary aggregates."""

from datetime import timedelta

import pytest

from seeder.domain.models import (
    METRIC_INFO,
    HealthMetric,
    HealthMetricReading,
    HealthSample,
    SleepAnalysisCode,
    SleepStage,
    SleepSummary,
    StageSegment,
)
from tests.conftest import MIDNIGHT


class TestSleepStageCodes:
    @pytest.mark.parametrize("stage", list(SleepStage))
    def test_write_code_reads_back_as_same_stage(self, stage):
        assert SleepStage.from_category_value(stage.category_value) is stage

    @pytest.mark.parametrize(
        "code,stage",
        [
            (SleepAnalysisCode.IN_BED, SleepStage.AWAKE),
            (SleepAnalysisCode.AWAKE, SleepStage.AWAKE),
            (SleepAnalysisCode.ASLEEP_UNSPECIFIED, SleepStage.CORE),
            (SleepAnalysisCode.ASLEEP_CORE, SleepStage.CORE),
            (SleepAnalysisCode.ASLEEP_DEEP, SleepStage.DEEP),
            (SleepAnalysisCode.ASLEEP_REM, SleepStage.REM),
        ],
    )
    def test_read_mapping_collapses_codes(self, code, stage):
        assert SleepStage.from_category_value(int(code)) is stage

    def test_write_mapping_is_one_to_one(self):
        codes = [stage.category_value for stage in SleepStage]
        assert len(set(codes)) == len(codes)
        assert SleepStage.AWAKE.category_value == SleepAnalysisCode.AWAKE
        assert SleepStage.CORE.category_value == SleepAnalysisCode.ASLEEP_CORE

    @pytest.mark.parametrize("code", [-1, 6, 99])
    def test_unknown_code_is_none(self, code):
        assert SleepStage.from_category_value(code) is None

    def test_only_awake_is_not_asleep(self):
        assert [s for s in SleepStage if not s.is_asleep] == [SleepStage.AWAKE]

    def test_legend_order(self):
        assert SleepStage.legend_order() == [
            SleepStage.DEEP,
            SleepStage.CORE,
            SleepStage.REM,
            SleepStage.AWAKE,
        ]

    def test_titles(self):
        assert SleepStage.REM.title == "REM"
        assert SleepStage.CORE.title == "Core"


class TestHealthMetric:
    def test_every_metric_has_metadata(self):
        assert set(METRIC_INFO) == set(HealthMetric)

    def test_display_order_is_unique_and_starts_with_sleep(self):
        ordered = HealthMetric.in_display_order()
        assert ordered[0] is HealthMetric.SLEEP
        assert [m.display_order for m in ordered] == list(range(8))

    def test_sleep_has_no_storage_unit(self):
        assert HealthMetric.SLEEP.unit is None
        assert HealthMetric.SLEEP.is_interval_based
        assert all(m.unit for m in HealthMetric if m is not HealthMetric.SLEEP)

    @pytest.mark.parametrize(
        "metric,mock_range",
        [
            (HealthMetric.SLEEP, (6.5, 8.5)),
            (HealthMetric.STEPS, (4500.0, 12000.0)),
            (HealthMetric.DISTANCE_SWIMMING, (0.0, 1200.0)),
            (HealthMetric.FLIGHTS_CLIMBED, (4.0, 24.0)),
        ],
    )
    def test_mock_ranges(self, metric, mock_range):
        assert metric.mock_range == mock_range

    def test_ranges_are_ordered(self):
        for metric in HealthMetric:
            low, high = metric.mock_range
            assert low <= high

    def test_titles(self):
        assert HealthMetric.DISTANCE_WALKING_RUNNING.title == "Walk + Run"
        assert HealthMetric.TIME_IN_DAYLIGHT.title == "Time in Daylight"


class TestSleepSummary:
    def test_non_adjacent_occurrences_are_summed(self):
        summary = SleepSummary(
            (
                StageSegment(SleepStage.CORE, 40),
                StageSegment(SleepStage.DEEP, 30),
                StageSegment(SleepStage.CORE, 20),
                StageSegment(SleepStage.AWAKE, 10),
            ),
            MIDNIGHT,
            MIDNIGHT + timedelta(minutes=100),
        )
        assert summary.stage_totals == {
            SleepStage.CORE: 60,
            SleepStage.DEEP: 30,
            SleepStage.AWAKE: 10,
        }
        assert summary.total_minutes == 100
        assert summary.asleep_minutes == 90
        assert summary.asleep_minutes <= summary.total_minutes


class TestHealthSample:
    def test_default_metadata_is_user_entered_and_not_shared(self):
        a = HealthSample(HealthMetric.STEPS, MIDNIGHT, MIDNIGHT, value=1.0)
        b = HealthSample(HealthMetric.STEPS, MIDNIGHT, MIDNIGHT, value=2.0)
        assert a.metadata == {"was_user_entered": True}
        assert a.metadata is not b.metadata
        assert not a.is_category

    def test_reading_display_text(self):
        reading = HealthMetricReading(type=HealthMetric.STEPS, value=8123.0)
        assert reading.display_text == "8,123"
        assert HealthMetricReading(type=HealthMetric.STEPS, value=None).display_text == "—"
