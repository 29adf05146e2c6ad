"""Display-mode transforms: whole-series rescaling applied before indicators.

Every transform preserves ``x`` and the series length. Degenerate inputs
(a zero previous value, a zero first value, a flat series) yield IEEE
Infinity/NaN and are deliberately not clamped.
"""

import math
from collections.abc import Callable, Sequence

from chartseries.exceptions import UnknownDisplayMode
from chartseries.models import DisplayMode, Point
from chartseries.pipeline.numeric import ieee_divide


def rate_of_change(points: Sequence[Point]) -> list[Point]:
    """Percentage change from the previous point; the first point is 0."""
    result: list[Point] = []
    for i, point in enumerate(points):
        if i == 0:
            result.append(Point(x=point.x, y=0.0))
            continue
        previous = points[i - 1].y
        result.append(
            Point(x=point.x, y=ieee_divide(point.y - previous, previous) * 100)
        )
    return result


def growth_of_100(points: Sequence[Point]) -> list[Point]:
    """Value of $100 invested at the first point."""
    if not points:
        return []
    first = points[0].y
    return [Point(x=p.x, y=ieee_divide(p.y, first) * 100) for p in points]


def scale_0_to_100(points: Sequence[Point]) -> list[Point]:
    """Min-max normalize the series onto 0..100."""
    if not points:
        return []
    values = [p.y for p in points]
    if any(math.isnan(v) for v in values):
        low = high = math.nan
    else:
        low, high = min(values), max(values)
    spread = high - low
    return [Point(x=p.x, y=ieee_divide(p.y - low, spread) * 100) for p in points]


def _identity(points: Sequence[Point]) -> list[Point]:
    return list(points)


_TRANSFORMS: dict[DisplayMode, Callable[[Sequence[Point]], list[Point]]] = {
    DisplayMode.NONE: _identity,
    DisplayMode.ROC: rate_of_change,
    DisplayMode.GROWTH_OF_100: growth_of_100,
    DisplayMode.SCALE_0_TO_100: scale_0_to_100,
}


def apply_display_mode(points: Sequence[Point], mode: DisplayMode | str | None) -> list[Point]:
    """Apply the transform for ``mode`` to a normalized series.

    Raises:
        UnknownDisplayMode: If ``mode`` does not name a supported transform.
    """
    resolved = DisplayMode.parse(mode)
    try:
        transform = _TRANSFORMS[resolved]
    except KeyError:
        raise UnknownDisplayMode(mode) from None
    return transform(points)
