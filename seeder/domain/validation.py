"""Validation rules for a mock sample batch.

Runs before anything is handed to the store; a batch with any violation is
rejected as a whole. Returns a list of ValidationError; empty list means valid.
"""

from dataclasses import dataclass
from typing import Any

from seeder.domain.models import HealthMetric, HealthSample, SleepStage

_CONTIGUITY_TOLERANCE_SECONDS = 0.001


@dataclass
class ValidationError:
    field: str
    rule: str
    reason: str
    value: Any


def validate_sample_batch(samples: list[HealthSample]) -> list[ValidationError]:
    """Validate every sample plus the ordering of the sleep samples."""
    errors: list[ValidationError] = []

    for index, sample in enumerate(samples):
        prefix = f"samples[{index}]"

        # Rule 1: Timezone on timestamps
        naive = [
            name for name in ("start", "end") if getattr(sample, name).tzinfo is None
        ]
        for name in naive:
            errors.append(
                ValidationError(
                    f"{prefix}.{name}", "timezone", "missing_timezone", str(getattr(sample, name))
                )
            )

        # Rule 2: Positive duration (skipped when timestamps cannot be compared)
        if not naive and sample.end <= sample.start:
            errors.append(
                ValidationError(
                    f"{prefix}.end",
                    "ordering",
                    "end_not_after_start",
                    {"start": str(sample.start), "end": str(sample.end)},
                )
            )

        if sample.metric is HealthMetric.SLEEP:
            # Rule 3: Sleep samples carry a known stage code and no quantity
            if (
                sample.category_value is None
                or SleepStage.from_category_value(sample.category_value) is None
            ):
                errors.append(
                    ValidationError(
                        f"{prefix}.category_value",
                        "known_code",
                        "unknown_sleep_stage_code",
                        sample.category_value,
                    )
                )
            if sample.value is not None:
                errors.append(
                    ValidationError(
                        f"{prefix}.value", "kind", "quantity_on_sleep_sample", sample.value
                    )
                )
            continue

        # Rule 4: Quantity samples carry a value within [0, high] and no stage code
        _, high = sample.metric.mock_range
        if sample.value is None or sample.value < 0 or sample.value > high:
            errors.append(
                ValidationError(f"{prefix}.value", "range", "value_out_of_range", sample.value)
            )
        if sample.category_value is not None:
            errors.append(
                ValidationError(
                    f"{prefix}.category_value",
                    "kind",
                    "category_on_quantity_sample",
                    sample.category_value,
                )
            )

    # Rule 5: Sleep samples form one contiguous night
    sleep = [s for s in samples if s.metric is HealthMetric.SLEEP]
    for previous, current in zip(sleep, sleep[1:]):
        if previous.end.tzinfo is None or current.start.tzinfo is None:
            continue
        gap = abs((current.start - previous.end).total_seconds())
        if gap > _CONTIGUITY_TOLERANCE_SECONDS:
            errors.append(
                ValidationError(
                    "sleep",
                    "contiguity",
                    "sleep_samples_not_contiguous",
                    {"previous_end": str(previous.end), "next_start": str(current.start)},
                )
            )

    return errors
