"""FastAPI application factory for the series pipeline service."""

from __future__ import annotations

from fastapi import FastAPI

from chartseries import __version__
from chartseries.api.routes import series
from chartseries.config import PipelineSettings
from chartseries.pipeline.orchestrator import SeriesPipeline


def create_app(settings: PipelineSettings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Pipeline settings shared by every request. None = defaults.

    Returns:
        Configured FastAPI application with the pipeline on ``app.state``.
    """
    app = FastAPI(
        title="Chart Series Pipeline",
        version=__version__,
    )

    app.state.pipeline = SeriesPipeline(settings)

    app.include_router(series.router, prefix="/api")

    return app
