"""Raw point validation and normalization.

Filters untrusted observations, coerces each accepted one into a canonical
``Point(x=epoch_ms, y=float)`` and sorts by time. A malformed point is
logged and dropped; it never fails the batch.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

from chartseries.logging import get_logger
from chartseries.models import Point, RawPoint, RejectedPoint

logger = get_logger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)

# Largest distance from the epoch a JavaScript Date can represent
MAX_TIMESTAMP_MS = 8_640_000_000_000_000


@dataclass
class ValidationResult:
    """Accepted points (sorted by x) and the raw points that were dropped."""

    points: list[Point] = field(default_factory=list)
    rejected: list[RejectedPoint] = field(default_factory=list)


def parse_timestamp_ms(value: Any) -> int | None:
    """Convert a raw date into Unix milliseconds.

    Accepts epoch milliseconds (int/float), ``datetime``/``date`` objects and
    ISO 8601 strings. Date-only values and naive timestamps are taken as UTC.

    Returns:
        Milliseconds since the epoch, or None if the value is missing or
        cannot be parsed.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if abs(value) > MAX_TIMESTAMP_MS or not math.isfinite(value):
            return None
        return int(value)
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return (dt - _EPOCH) // _ONE_MS


def parse_value(value: Any) -> float | None:
    """Convert a raw value into a finite float, or None if it is not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def _rejection_reason(raw: RawPoint) -> tuple[str | None, Point | None]:
    x = parse_timestamp_ms(raw.date)
    if x is None:
        return ("missing date" if raw.date in (None, "") else "unparsable date"), None
    if raw.value is None or raw.value == "":
        return "missing value", None
    y = parse_value(raw.value)
    if y is None:
        return "non-numeric value", None
    return None, Point(x=x, y=y)


def validate_points(
    raw_points: Iterable[RawPoint],
    dataset_id: Any = None,
) -> ValidationResult:
    """Validate, coerce and sort raw observations.

    Args:
        raw_points: Untrusted observations.
        dataset_id: When given, only points for this dataset are considered.

    Returns:
        ValidationResult with points sorted ascending by x (stable for equal
        timestamps) and a RejectedPoint for every dropped observation.
    """
    result = ValidationResult()

    for raw in raw_points:
        if dataset_id is not None and raw.dataset_id != dataset_id:
            continue
        reason, point = _rejection_reason(raw)
        if point is None:
            logger.warning(
                "invalid_point_dropped",
                dataset_id=raw.dataset_id,
                date=repr(raw.date),
                value=repr(raw.value),
                reason=reason,
            )
            result.rejected.append(
                RejectedPoint(dataset_id=raw.dataset_id, raw=raw, reason=reason)
            )
            continue
        result.points.append(point)

    result.points.sort(key=lambda p: p.x)
    return result


def normalize_points(raw_points: Iterable[RawPoint], dataset_id: Any = None) -> list[Point]:
    """Validated, sorted points only (rejections are still logged)."""
    return validate_points(raw_points, dataset_id).points
