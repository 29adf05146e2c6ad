"""Series pipeline orchestrator.

The SeriesPipeline is the top-level coordinator that, for every dataset
descriptor in order:
1. Selects the dataset's raw points from the shared pool
2. Validates and normalizes them (malformed points are dropped and reported)
3. Applies the dataset's display-mode transform to get the base series
4. Computes one indicator series per requested study from that base
5. Drops non-positive values from every emitted series on a log scale

Output order is always main series, then its studies, then the next
dataset, regardless of whether datasets are processed concurrently.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from typing import Any

from chartseries.config import PipelineSettings
from chartseries.exceptions import ConfigurationError, MissingDatasetList
from chartseries.logging import get_logger
from chartseries.models import (
    DatasetDescriptor,
    DatasetFailure,
    DateRange,
    DisplayMode,
    DisplayOptions,
    PipelineResult,
    Point,
    RawPoint,
    RejectedPoint,
    Series,
    Study,
    parse_line_width,
    parse_studies,
)
from chartseries.pipeline.colors import study_color
from chartseries.pipeline.display_modes import apply_display_mode
from chartseries.pipeline.indicators import compute_indicator
from chartseries.pipeline.validator import validate_points

logger = get_logger(__name__)


@dataclass
class _DatasetOutcome:
    """Result of running one dataset through the pipeline."""

    series: list[Series] = field(default_factory=list)
    rejected: list[RejectedPoint] = field(default_factory=list)
    failure: DatasetFailure | None = None


def filter_logarithmic(points: Iterable[Point]) -> list[Point]:
    """Keep only points a logarithmic axis can show (``y > 0``).

    Warm-up slots (``y=None``) and NaN values are dropped as well.
    """
    return [p for p in points if p.y is not None and p.y > 0]


def compute_date_range(series: Iterable[Series]) -> DateRange | None:
    """Smallest and largest timestamp across all series, or None if empty."""
    xs = [p.x for s in series for p in s.data]
    if not xs:
        return None
    return DateRange(min_x=min(xs), max_x=max(xs))


def _to_descriptor(dataset: DatasetDescriptor | Mapping[str, Any]) -> DatasetDescriptor:
    if isinstance(dataset, DatasetDescriptor):
        return dataset
    return DatasetDescriptor.from_dict(dataset)


def _to_raw_point(point: RawPoint | Mapping[str, Any]) -> RawPoint:
    if isinstance(point, RawPoint):
        return point
    return RawPoint.from_dict(point)


def _dataset_id_of(dataset: DatasetDescriptor | Mapping[str, Any]) -> Any:
    if isinstance(dataset, DatasetDescriptor):
        return dataset.id
    return dataset.get("id")


class SeriesPipeline:
    """Turns a raw point pool and dataset descriptors into processed series.

    Pure and synchronous: no I/O, no shared mutable state between datasets.

    Args:
        settings: Indicator periods, strictness and worker count.
            None = defaults (SMA 20, EMA 20, RSI 14, lenient, sequential).
    """

    def __init__(self, settings: PipelineSettings | None = None) -> None:
        self._settings = settings or PipelineSettings()

    @property
    def settings(self) -> PipelineSettings:
        return self._settings

    def run(
        self,
        raw_points: Iterable[RawPoint | Mapping[str, Any]],
        datasets: Sequence[DatasetDescriptor | Mapping[str, Any]] | None,
        options: DisplayOptions | Mapping[str, Any] | None = None,
    ) -> list[Series]:
        """Run the pipeline and return only the ordered series."""
        return self.process(raw_points, datasets, options).series

    def process(
        self,
        raw_points: Iterable[RawPoint | Mapping[str, Any]],
        datasets: Sequence[DatasetDescriptor | Mapping[str, Any]] | None,
        options: DisplayOptions | Mapping[str, Any] | None = None,
    ) -> PipelineResult:
        """Run the pipeline with full diagnostics.

        Args:
            raw_points: Observation pool shared by all datasets.
            datasets: Dataset descriptors (objects or caller mappings).
            options: Chart-wide display options. None = linear axis.

        Returns:
            PipelineResult with ordered series, rejected points, per-dataset
            failures and the overall date range.

        Raises:
            MissingDatasetList: If ``datasets`` is None or empty.
            ConfigurationError: In strict mode, on the first dataset with an
                unknown display mode or study.
        """
        if not datasets:
            logger.error("missing_dataset_list")
            raise MissingDatasetList("No datasets provided in configuration")

        if not isinstance(options, DisplayOptions):
            options = DisplayOptions.from_dict(options)

        pool = [_to_raw_point(p) for p in raw_points]

        if self._settings.max_workers > 1 and len(datasets) > 1:
            with ThreadPoolExecutor(max_workers=self._settings.max_workers) as executor:
                outcomes = list(
                    executor.map(lambda d: self._run_dataset(pool, d, options), datasets)
                )
        else:
            outcomes = [self._run_dataset(pool, d, options) for d in datasets]

        result = PipelineResult()
        for outcome in outcomes:
            result.series.extend(outcome.series)
            result.rejected.extend(outcome.rejected)
            if outcome.failure is not None:
                result.failures.append(outcome.failure)
        result.date_range = compute_date_range(result.series)

        logger.info(
            "pipeline_complete",
            datasets=len(datasets),
            series=len(result.series),
            rejected_points=len(result.rejected),
            failed_datasets=len(result.failures),
            is_logarithmic=options.is_logarithmic,
        )
        return result

    def _run_dataset(
        self,
        pool: list[RawPoint],
        dataset: DatasetDescriptor | Mapping[str, Any],
        options: DisplayOptions,
    ) -> _DatasetOutcome:
        """Run one dataset, converting configuration errors into a failure record."""
        try:
            descriptor = _to_descriptor(dataset)
            return self._process_descriptor(pool, descriptor, options)
        except ConfigurationError as e:
            dataset_id = _dataset_id_of(dataset)
            logger.error("dataset_failed", dataset_id=dataset_id, error=str(e))
            if self._settings.strict:
                raise
            return _DatasetOutcome(failure=DatasetFailure(dataset_id=dataset_id, error=str(e)))

    def _process_descriptor(
        self,
        pool: list[RawPoint],
        descriptor: DatasetDescriptor,
        options: DisplayOptions,
    ) -> _DatasetOutcome:
        display_mode = DisplayMode.parse(descriptor.display_mode)
        studies = parse_studies(descriptor.studies)
        descriptor = replace(
            descriptor,
            display_mode=display_mode,
            studies=studies,
            line_width=parse_line_width(descriptor.line_width),
        )

        selected = [p for p in pool if p.dataset_id == descriptor.id]
        validation = validate_points(selected)

        base = apply_display_mode(validation.points, display_mode)

        outcome = _DatasetOutcome(rejected=validation.rejected)
        outcome.series.append(self._make_series(descriptor, base, None, options))

        for study in studies:
            # Empty datasets still get one (empty) series per study
            study_points = (
                compute_indicator(study, base, self._settings) if base else []
            )
            outcome.series.append(
                self._make_series(descriptor, study_points, study, options)
            )

        logger.debug(
            "dataset_processed",
            dataset_id=descriptor.id,
            display_mode=descriptor.display_mode.value,
            studies=[s.value for s in descriptor.studies],
            points=len(base),
            rejected_points=len(validation.rejected),
        )
        if not base:
            logger.info("empty_dataset_series", dataset_id=descriptor.id)
        return outcome

    @staticmethod
    def _make_series(
        descriptor: DatasetDescriptor,
        points: list[Point],
        study: Study | None,
        options: DisplayOptions,
    ) -> Series:
        if options.is_logarithmic:
            points = filter_logarithmic(points)
        name = descriptor.name if study is None else f"{descriptor.name} - {study.value}"
        return Series(
            name=name,
            data=tuple(points),
            display_mode=descriptor.display_mode,
            dataset_id=descriptor.id,
            study=study,
            color=descriptor.color if study is None else study_color(study, descriptor.color),
            line_width=descriptor.line_width if study is None else 1,
        )
