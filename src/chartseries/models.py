"""Shared data models for the chart series pipeline.

Raw observations arrive untrusted from the chart-config layer. Everything
downstream of the validator is an immutable, canonical representation:
``Point`` pairs of epoch milliseconds and float values, grouped into
``Series`` that rendering adapters consume independently.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from chartseries.exceptions import InvalidDescriptor, UnknownDisplayMode, UnknownIndicator

#: Colour used by every chart adapter when a dataset does not specify one.
DEFAULT_COLOR = "#1468a8"
DEFAULT_LINE_WIDTH = 2


class DisplayMode(str, Enum):
    """Whole-series rescaling applied before any indicator."""

    NONE = "None"
    ROC = "ROC"
    GROWTH_OF_100 = "Growth of $100"
    SCALE_0_TO_100 = "0-100 Scale"

    @classmethod
    def parse(cls, value: DisplayMode | str | None) -> DisplayMode:
        """Resolve a display mode from any of the labels callers send.

        A missing or empty value means no transform. Unrecognized labels raise
        UnknownDisplayMode rather than silently falling back to identity.
        """
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.NONE
        if not isinstance(value, str):
            raise UnknownDisplayMode(value)
        key = value.strip()
        if not key:
            return cls.NONE
        try:
            return _DISPLAY_MODE_ALIASES[key.lower()]
        except KeyError:
            raise UnknownDisplayMode(value) from None


_DISPLAY_MODE_ALIASES: dict[str, DisplayMode] = {
    "none": DisplayMode.NONE,
    "normal": DisplayMode.NONE,
    "roc": DisplayMode.ROC,
    "growth of $100": DisplayMode.GROWTH_OF_100,
    "growthof100": DisplayMode.GROWTH_OF_100,
    "growth_of_100": DisplayMode.GROWTH_OF_100,
    "0-100 scale": DisplayMode.SCALE_0_TO_100,
    "scale0to100": DisplayMode.SCALE_0_TO_100,
    "scale_0_to_100": DisplayMode.SCALE_0_TO_100,
}


class Study(str, Enum):
    """Technical indicator that can be requested for a dataset."""

    SMA = "SMA"
    EMA = "EMA"
    CAGR = "CAGR"
    RSI = "RSI"

    @classmethod
    def parse(cls, value: Study | str) -> Study:
        """Resolve a study by name (case-insensitive)."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                pass
        raise UnknownIndicator(value)


def parse_studies(value: Any) -> tuple[Study, ...]:
    """Resolve a list of study names; None means no studies.

    Raises:
        InvalidDescriptor: If ``value`` is not a list or tuple.
        UnknownIndicator: If any entry is not a known study.
    """
    if value is None:
        return ()
    if not isinstance(value, (list, tuple)):
        raise InvalidDescriptor("studies", value)
    return tuple(Study.parse(s) for s in value)


def parse_line_width(value: Any) -> int:
    """Coerce a line width to a non-negative int; missing or 0 means the default."""
    if value is None:
        return DEFAULT_LINE_WIDTH
    if isinstance(value, bool):
        raise InvalidDescriptor("lineWidth", value)
    try:
        width = float(value)
    except (TypeError, ValueError, OverflowError):
        raise InvalidDescriptor("lineWidth", value) from None
    if not width.is_integer() or width < 0:
        raise InvalidDescriptor("lineWidth", value)
    return int(width) or DEFAULT_LINE_WIDTH


@dataclass(frozen=True)
class RawPoint:
    """A single untrusted observation as supplied by the caller."""

    dataset_id: Any
    date: Any
    value: Any

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RawPoint:
        """Build from a caller mapping; accepts ``dataset_id`` or ``datasetId``."""
        dataset_id = data.get("dataset_id", data.get("datasetId"))
        return cls(dataset_id=dataset_id, date=data.get("date"), value=data.get("value"))


@dataclass(frozen=True)
class Point:
    """A canonical observation.

    ``y`` is None only inside an indicator warm-up window.
    """

    x: int  # Unix milliseconds
    y: float | None


@dataclass(frozen=True)
class DatasetDescriptor:
    """Caller-owned description of one dataset and how to present it."""

    id: Any
    name: str
    color: str = DEFAULT_COLOR
    display_mode: DisplayMode = DisplayMode.NONE
    studies: tuple[Study, ...] = ()
    line_width: int = DEFAULT_LINE_WIDTH

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DatasetDescriptor:
        """Parse a descriptor mapping (camelCase or snake_case keys).

        Raises:
            UnknownDisplayMode: If ``displayMode`` is not recognized.
            UnknownIndicator: If any entry in ``studies`` is not recognized.
            InvalidDescriptor: If ``studies`` is not a list, ``color`` is not a
                string or ``lineWidth`` is not a whole number.
        """
        mode = data.get("displayMode", data.get("display_mode"))
        color = data.get("color") or DEFAULT_COLOR
        if not isinstance(color, str):
            raise InvalidDescriptor("color", color)
        return cls(
            id=data.get("id"),
            name=str(data.get("name") or data.get("id") or ""),
            color=color,
            display_mode=DisplayMode.parse(mode),
            studies=parse_studies(data.get("studies")),
            line_width=parse_line_width(data.get("lineWidth", data.get("line_width"))),
        )


@dataclass(frozen=True)
class DisplayOptions:
    """Chart-wide options that affect series content."""

    is_logarithmic: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> DisplayOptions:
        if not data:
            return cls()
        flag = data.get("isLogarithmic", data.get("is_logarithmic", False))
        return cls(is_logarithmic=bool(flag))


@dataclass(frozen=True)
class Series:
    """One named, processed line ready for a rendering adapter.

    The main series of a dataset has ``study`` None; every requested study
    produces its own series computed from the display-mode-transformed data.
    """

    name: str
    data: tuple[Point, ...]
    display_mode: DisplayMode
    dataset_id: Any = None
    study: Study | None = None
    color: str = DEFAULT_COLOR
    line_width: int = DEFAULT_LINE_WIDTH

    @property
    def label(self) -> str:
        """Short legend label: the last dot-separated part of the name."""
        return self.name.rsplit(".", 1)[-1]

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe representation; non-finite values become null."""
        return {
            "name": self.name,
            "label": self.label,
            "datasetId": self.dataset_id,
            "study": self.study.value if self.study is not None else None,
            "displayMode": self.display_mode.value,
            "color": self.color,
            "lineWidth": self.line_width,
            "data": [{"x": p.x, "y": _json_number(p.y)} for p in self.data],
        }


def _json_number(value: float | None) -> float | None:
    if value is None or not math.isfinite(value):
        return None
    return value


@dataclass(frozen=True)
class RejectedPoint:
    """A raw point dropped by the validator, kept for diagnostics."""

    dataset_id: Any
    raw: RawPoint
    reason: str


@dataclass(frozen=True)
class DatasetFailure:
    """A dataset whose pipeline was aborted by a configuration error."""

    dataset_id: Any
    error: str


@dataclass(frozen=True)
class DateRange:
    """Overall time extent of a set of series, in Unix milliseconds."""

    min_x: int
    max_x: int


@dataclass
class PipelineResult:
    """Everything produced by one pipeline run."""

    series: list[Series] = field(default_factory=list)
    rejected: list[RejectedPoint] = field(default_factory=list)
    failures: list[DatasetFailure] = field(default_factory=list)
    date_range: DateRange | None = None
