"""JSON API endpoints for series processing, health and supported options."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from chartseries.exceptions import ConfigurationError, MissingDatasetList
from chartseries.models import DateRange, DisplayMode, PipelineResult, Study

log = structlog.get_logger(__name__)

router = APIRouter()


def _date_range_to_dict(date_range: DateRange | None) -> dict[str, int] | None:
    if date_range is None:
        return None
    return {"min": date_range.min_x, "max": date_range.max_x}


def _result_to_dict(result: PipelineResult) -> dict[str, Any]:
    """Serialize a PipelineResult for the chart-config collaborator."""
    return {
        "series": [s.to_dict() for s in result.series],
        "rejected": len(result.rejected),
        "rejectedPoints": [
            {"datasetId": r.dataset_id, "reason": r.reason} for r in result.rejected
        ],
        "failures": [
            {"datasetId": f.dataset_id, "error": f.error} for f in result.failures
        ],
        "dateRange": _date_range_to_dict(result.date_range),
    }


def _extract_options(body: dict[str, Any]) -> dict[str, Any] | None:
    """Display options live under displaySettings (chart config) or options."""
    options = body.get("displaySettings", body.get("options"))
    return options if isinstance(options, dict) else None


@router.post("/series")
async def process_series(request: Request) -> JSONResponse:
    """Run raw points and dataset descriptors through the pipeline.

    Expects JSON body with: data (raw points), datasets (descriptors) and
    optional displaySettings {isLogarithmic}.

    Returns:
        JSON with ordered series, rejection diagnostics, failed datasets and
        the overall date range.
    """
    try:
        body = await request.json()
    except Exception:
        return JSONResponse(content={"error": "Invalid JSON body"}, status_code=400)

    if not isinstance(body, dict):
        return JSONResponse(
            content={"error": "Request body must be a JSON object"}, status_code=400
        )

    raw_points = body.get("data", [])
    if not isinstance(raw_points, list) or not all(isinstance(p, dict) for p in raw_points):
        return JSONResponse(
            content={"error": "Field 'data' must be a list of objects"}, status_code=400
        )

    datasets = body.get("datasets")
    if datasets is not None and (
        not isinstance(datasets, list) or not all(isinstance(d, dict) for d in datasets)
    ):
        return JSONResponse(
            content={"error": "Field 'datasets' must be a list of objects"}, status_code=400
        )

    pipeline = request.app.state.pipeline
    try:
        result = pipeline.process(raw_points, datasets, _extract_options(body))
    except MissingDatasetList as e:
        return JSONResponse(content={"error": str(e)}, status_code=400)
    except ConfigurationError as e:
        log.warning("series_request_rejected", error=str(e))
        return JSONResponse(content={"error": str(e)}, status_code=422)

    return JSONResponse(content=_result_to_dict(result))


@router.get("/options")
async def get_options(request: Request) -> JSONResponse:
    """Supported display modes and studies with their configured periods."""
    settings = request.app.state.pipeline.settings
    return JSONResponse(
        content={
            "displayModes": [m.value for m in DisplayMode],
            "studies": [s.value for s in Study],
            "periods": {
                Study.SMA.value: settings.sma_period,
                Study.EMA.value: settings.ema_period,
                Study.RSI.value: settings.rsi_period,
            },
        }
    )


@router.get("/health")
async def health() -> JSONResponse:
    """Liveness check."""
    return JSONResponse(content={"status": "ok"})
