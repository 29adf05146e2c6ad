"""Data-transformation pipeline for chart series.

Provides point validation, display-mode transforms, technical indicators
(SMA, EMA, CAGR, RSI) and the SeriesPipeline that chains them for every
dataset of a chart.
"""

from chartseries.pipeline.colors import shift_hue, study_color
from chartseries.pipeline.display_modes import (
    apply_display_mode,
    growth_of_100,
    rate_of_change,
    scale_0_to_100,
)
from chartseries.pipeline.indicators import (
    compute_cagr,
    compute_ema,
    compute_indicator,
    compute_rsi,
    compute_sma,
)
from chartseries.pipeline.orchestrator import (
    SeriesPipeline,
    compute_date_range,
    filter_logarithmic,
)
from chartseries.pipeline.validator import ValidationResult, normalize_points, validate_points

__all__ = [
    "SeriesPipeline",
    "ValidationResult",
    "apply_display_mode",
    "compute_cagr",
    "compute_date_range",
    "compute_ema",
    "compute_indicator",
    "compute_rsi",
    "compute_sma",
    "filter_logarithmic",
    "growth_of_100",
    "normalize_points",
    "rate_of_change",
    "scale_0_to_100",
    "shift_hue",
    "study_color",
    "validate_points",
]
