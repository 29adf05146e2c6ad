"""Shared test fixtures for the chart series pipeline."""

import pytest

from chartseries.config import PipelineSettings
from chartseries.models import RawPoint
from chartseries.pipeline.orchestrator import SeriesPipeline


@pytest.fixture
def pipeline_settings() -> PipelineSettings:
    """Pipeline settings with standard periods, lenient and sequential."""
    return PipelineSettings(sma_period=20, ema_period=20, rsi_period=14, strict=False, max_workers=1)


@pytest.fixture
def pipeline(pipeline_settings: PipelineSettings) -> SeriesPipeline:
    """SeriesPipeline built from the standard test settings."""
    return SeriesPipeline(pipeline_settings)


@pytest.fixture
def three_day_raw_points() -> list[RawPoint]:
    """The 100 -> 110 -> 99 sample used throughout the chart adapters."""
    return [
        RawPoint(dataset_id="gdp", date="2020-01-01", value=100),
        RawPoint(dataset_id="gdp", date="2020-01-02", value=110),
        RawPoint(dataset_id="gdp", date="2020-01-03", value=99),
    ]
