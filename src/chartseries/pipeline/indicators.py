"""Technical indicators computed from a (display-mode-transformed) series.

Each indicator returns a series of the same length and timestamps as its
input. Slots inside a warm-up window carry ``y=None``. Indicators never
consume each other's output: every study is computed from the same base.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from chartseries.exceptions import EmptySeriesError, UnknownIndicator
from chartseries.models import Point, Study
from chartseries.pipeline.numeric import ieee_divide, ieee_pow

if TYPE_CHECKING:
    from chartseries.config import PipelineSettings

#: Length of a CAGR year in milliseconds (calendar-agnostic, 365 days).
MS_PER_YEAR = 1000 * 60 * 60 * 24 * 365

DEFAULT_SMA_PERIOD = 20
DEFAULT_EMA_PERIOD = 20
DEFAULT_RSI_PERIOD = 14


def _check_period(period: int) -> None:
    if period < 1:
        raise ValueError(f"Indicator period must be >= 1, got {period}")


def compute_sma(points: Sequence[Point], period: int = DEFAULT_SMA_PERIOD) -> list[Point]:
    """Simple Moving Average over a trailing window of ``period`` points.

    Indices below ``period - 1`` are inside the warm-up window (``y=None``).
    """
    _check_period(period)
    result: list[Point] = []
    for i, point in enumerate(points):
        if i < period - 1:
            result.append(Point(x=point.x, y=None))
            continue
        window = points[i - period + 1 : i + 1]
        total = sum(p.y for p in window)
        result.append(Point(x=point.x, y=total / period))
    return result


def compute_ema(points: Sequence[Point], period: int = DEFAULT_EMA_PERIOD) -> list[Point]:
    """Exponential Moving Average with multiplier ``2 / (period + 1)``.

    Seeded with the first value, so there is no warm-up window.

        EMA_0 = value_0
        EMA_t = (value_t - EMA_{t-1}) * k + EMA_{t-1}
    """
    _check_period(period)
    if not points:
        return []

    multiplier = 2 / (period + 1)
    ema = points[0].y
    result = [Point(x=points[0].x, y=ema)]
    for point in points[1:]:
        ema = (point.y - ema) * multiplier + ema
        result.append(Point(x=point.x, y=ema))
    return result


def compute_cagr(points: Sequence[Point]) -> list[Point]:
    """Compound Annual Growth Rate between the first and last point.

    The single CAGR value (in percent) is repeated at every timestamp.
    A zero first value or a zero-length time span produces non-finite
    output rather than an error.

    Raises:
        EmptySeriesError: If ``points`` is empty.
    """
    if not points:
        raise EmptySeriesError("CAGR requires at least one point")

    first, last = points[0], points[-1]
    years = (last.x - first.x) / MS_PER_YEAR
    ratio = ieee_divide(last.y, first.y)
    cagr = (ieee_pow(ratio, ieee_divide(1.0, years)) - 1) * 100
    return [Point(x=p.x, y=cagr) for p in points]


def compute_rsi(points: Sequence[Point], period: int = DEFAULT_RSI_PERIOD) -> list[Point]:
    """Relative Strength Index.

    Average gain/loss are seeded with the plain mean over the first
    ``period`` changes (the first change is defined as 0). The value at
    index ``period`` uses those seeds directly; Wilder smoothing starts at
    ``period + 1``:

        avg_t = (avg_{t-1} * (period - 1) + x_t) / period

    Indices below ``period`` are inside the warm-up window (``y=None``).
    With no losses RS is infinite and RSI is 100.
    """
    _check_period(period)
    changes = [0.0] + [points[i].y - points[i - 1].y for i in range(1, len(points))]
    gains = [c if c > 0 else 0.0 for c in changes]
    losses = [abs(c) if c < 0 else 0.0 for c in changes]

    avg_gain = sum(gains[:period]) / period
    avg_loss = sum(losses[:period]) / period

    result: list[Point] = []
    for i, point in enumerate(points):
        if i < period:
            result.append(Point(x=point.x, y=None))
            continue
        if i > period:
            avg_gain = (avg_gain * (period - 1) + gains[i]) / period
            avg_loss = (avg_loss * (period - 1) + losses[i]) / period

        rs = ieee_divide(avg_gain, avg_loss)
        rsi = 100 - ieee_divide(100.0, 1 + rs)
        result.append(Point(x=point.x, y=rsi))
    return result


def _indicator_table(
    settings: PipelineSettings | None,
) -> dict[Study, Callable[[Sequence[Point]], list[Point]]]:
    sma_period = settings.sma_period if settings else DEFAULT_SMA_PERIOD
    ema_period = settings.ema_period if settings else DEFAULT_EMA_PERIOD
    rsi_period = settings.rsi_period if settings else DEFAULT_RSI_PERIOD
    return {
        Study.SMA: lambda pts: compute_sma(pts, sma_period),
        Study.EMA: lambda pts: compute_ema(pts, ema_period),
        Study.CAGR: compute_cagr,
        Study.RSI: lambda pts: compute_rsi(pts, rsi_period),
    }


def compute_indicator(
    study: Study | str,
    points: Sequence[Point],
    settings: PipelineSettings | None = None,
) -> list[Point]:
    """Compute the indicator named by ``study`` over ``points``.

    Args:
        study: Study enum member or its name.
        points: Base series (already display-mode transformed).
        settings: Source of indicator periods. None = standard periods.

    Raises:
        UnknownIndicator: If ``study`` does not name a supported indicator.
    """
    resolved = Study.parse(study)
    table = _indicator_table(settings)
    try:
        indicator = table[resolved]
    except KeyError:
        raise UnknownIndicator(study) from None
    return indicator(points)
