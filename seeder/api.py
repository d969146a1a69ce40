"""FastAPI router for the seeder.

Endpoints:
- GET  /api/v1/metrics/catalog
- GET  /api/v1/authorization
- POST /api/v1/authorization
- GET  /api/v1/days/{day}/readings
- POST /api/v1/days/{day}/mock-data
"""

from __future__ import annotations

import random
import time
from datetime import UTC, date, datetime
from functools import lru_cache
from typing import Any

from fastapi import APIRouter, Depends, Response

from seeder.domain.models import HealthMetric, HealthMetricReading, SleepSummary
from seeder.service import SeederContext, SeederService
from seeder.stores.factory import get_store
from seeder.summary import stage_breakdown
from shared.config import settings
from shared.metrics import api_requests_total, api_response_duration_seconds
from shared.middleware import request_id_var

router = APIRouter(prefix="/api/v1")


@lru_cache
def get_seeder() -> SeederService:
    """Process-wide service for the single subject this app seeds."""
    context = SeederContext(selected_date=datetime.now(settings.tz).date())
    return SeederService(
        store=get_store(),
        rng=random.Random(settings.random_seed),
        tz=settings.tz,
        context=context,
    )


# --- Response helpers ---


def _meta() -> dict[str, Any]:
    return {
        "request_id": request_id_var.get(""),
        "timestamp": datetime.now(UTC).isoformat(),
        "api_version": settings.api_version,
    }


def _summary_to_dict(summary: SleepSummary) -> dict[str, Any]:
    return {
        "start_date": summary.start_date.isoformat(),
        "end_date": summary.end_date.isoformat(),
        "total_minutes": round(summary.total_minutes, 2),
        "asleep_minutes": round(summary.asleep_minutes, 2),
        "stages": [
            {
                "stage": share.stage.value,
                "title": share.stage.title,
                "minutes": round(share.minutes, 2),
                "percentage": round(share.percentage, 1),
            }
            for share in stage_breakdown(summary)
        ],
        "segments": [
            {"stage": s.stage.value, "minutes": round(s.minutes, 2)} for s in summary.segments
        ],
    }


def _reading_to_dict(reading: HealthMetricReading) -> dict[str, Any]:
    return {
        "metric": reading.type.value,
        "title": reading.type.title,
        "unit": reading.type.unit,
        "value": reading.value,
        "display_text": reading.display_text,
        "sleep": _summary_to_dict(reading.sleep_summary) if reading.sleep_summary else None,
    }


def _context_to_dict(seeder: SeederService) -> dict[str, Any]:
    ctx = seeder.context
    return {
        "authorization_state": ctx.authorization_state.value,
        "selected_date": ctx.selected_date.isoformat(),
        "is_loading": ctx.is_loading,
        "is_generating": ctx.is_generating,
        "status_message": ctx.status_message,
    }


def _observe(endpoint: str, method: str, status_code: int, start_time: float) -> None:
    api_requests_total.labels(endpoint=endpoint, method=method, status_code=str(status_code)).inc()
    api_response_duration_seconds.labels(endpoint=endpoint).observe(time.monotonic() - start_time)


# --- Endpoints ---


@router.get("/metrics/catalog")
async def get_catalog():
    """Static metadata for every metric, in display order."""
    data = [
        {
            "metric": metric.value,
            "title": metric.title,
            "unit": metric.unit,
            "mock_range": list(metric.mock_range),
            "display_order": metric.display_order,
        }
        for metric in HealthMetric.in_display_order()
    ]
    return {"data": data, "meta": _meta()}


@router.get("/authorization")
async def get_authorization(seeder: SeederService = Depends(get_seeder)):
    return {"data": _context_to_dict(seeder), "meta": _meta()}


@router.post("/authorization")
async def request_authorization(seeder: SeederService = Depends(get_seeder)):
    """Ask the store for access.

    HTTP status codes:
    - 200: authorized (readings for the selected day are refreshed)
    - 403: the store refused access
    - 503: no health store on this host
    """
    start_time = time.monotonic()
    await seeder.request_authorization()
    _observe("authorization", "POST", 200, start_time)
    return {"data": _context_to_dict(seeder), "meta": _meta()}


@router.get("/days/{day}/readings")
async def get_readings(day: date, seeder: SeederService = Depends(get_seeder)):
    """Every metric's value for `day`; sleep includes the stage summary."""
    start_time = time.monotonic()
    readings = await seeder.refresh_metrics(day)
    _observe("readings", "GET", 200, start_time)
    return {
        "data": {
            "day": day.isoformat(),
            "readings": [_reading_to_dict(r) for r in readings],
        },
        "meta": _meta(),
    }


@router.post("/days/{day}/mock-data", status_code=201)
async def generate_mock_data(
    day: date,
    response: Response,
    seeder: SeederService = Depends(get_seeder),
):
    """Generate one day of mock data and write it to the store as one batch.

    HTTP status codes:
    - 201: batch written; the response carries the refreshed readings
    - 403: not authorized yet
    - 422: the batch was empty or failed validation (nothing written)
    - 502: the store rejected the write (nothing written)
    """
    start_time = time.monotonic()
    result = await seeder.generate_mock_data(day)
    response.status_code = 201
    _observe("mock_data", "POST", 201, start_time)
    return {
        "data": {
            "day": result.day.isoformat(),
            "window": {
                "start": result.window.start.isoformat(),
                "end": result.window.end.isoformat(),
            },
            "samples_written": result.samples_written,
            "samples_by_metric": {m.value: n for m, n in result.counts_by_metric.items()},
            "readings": [_reading_to_dict(r) for r in result.readings],
        },
        "meta": _meta(),
    }
