"""Tests for the SeriesPipeline orchestrator.

Tests verify:
- End-to-end display-mode examples (ROC, Growth of $100)
- Output order: main series, its studies, then the next dataset
- Studies computed from the transformed base, never from each other
- Logarithmic filtering applied last to every emitted series
- Empty datasets yield empty series rather than errors
- Unknown display modes/studies and malformed descriptors abort only that
  dataset (or raise when strict)
- Study series get hue-shifted colours
- Missing dataset list fails the whole batch
- Concurrent execution preserves order
"""

from datetime import datetime, timezone

import pytest
from structlog.testing import capture_logs

from chartseries.config import PipelineSettings
from chartseries.exceptions import (
    InvalidDescriptor,
    MissingDatasetList,
    UnknownDisplayMode,
    UnknownIndicator,
)
from chartseries.models import (
    DatasetDescriptor,
    DisplayMode,
    DisplayOptions,
    Point,
    RawPoint,
    Study,
)
from chartseries.pipeline.colors import study_color
from chartseries.pipeline.indicators import compute_ema, compute_sma
from chartseries.pipeline.orchestrator import (
    SeriesPipeline,
    compute_date_range,
    filter_logarithmic,
)


def _day(day: int) -> int:
    return int(datetime(2020, 1, day, tzinfo=timezone.utc).timestamp()) * 1000


def _raw_series(dataset_id: str, values: list[float]) -> list[RawPoint]:
    return [
        RawPoint(dataset_id=dataset_id, date=f"2020-01-{i + 1:02d}", value=v)
        for i, v in enumerate(values)
    ]


def _descriptor(
    dataset_id: str = "gdp",
    mode: DisplayMode = DisplayMode.NONE,
    studies: tuple[Study, ...] = (),
) -> DatasetDescriptor:
    return DatasetDescriptor(id=dataset_id, name=f"public.{dataset_id}", display_mode=mode, studies=studies)


class TestEndToEnd:
    """The canonical 100 -> 110 -> 99 examples."""

    def test_roc(self, pipeline: SeriesPipeline, three_day_raw_points: list[RawPoint]) -> None:
        series = pipeline.run(three_day_raw_points, [_descriptor(mode=DisplayMode.ROC)])

        assert len(series) == 1
        assert [p.x for p in series[0].data] == [_day(1), _day(2), _day(3)]
        assert [round(p.y) for p in series[0].data] == [0, 10, -10]

    def test_growth_of_100(self, pipeline: SeriesPipeline, three_day_raw_points: list[RawPoint]) -> None:
        series = pipeline.run(three_day_raw_points, [_descriptor(mode=DisplayMode.GROWTH_OF_100)])
        assert [p.y for p in series[0].data] == pytest.approx([100.0, 110.0, 99.0])

    def test_none_mode_returns_validated_points(
        self, pipeline: SeriesPipeline, three_day_raw_points: list[RawPoint]
    ) -> None:
        series = pipeline.run(three_day_raw_points, [_descriptor()])
        assert [p.y for p in series[0].data] == [100.0, 110.0, 99.0]
        assert series[0].display_mode is DisplayMode.NONE

    def test_accepts_raw_mappings(self, pipeline: SeriesPipeline) -> None:
        raw = [
            {"dataset_id": 7, "date": "2020-01-02", "value": "110"},
            {"dataset_id": 7, "date": "2020-01-01", "value": "100"},
        ]
        datasets = [{"id": 7, "name": "schema.prices", "displayMode": "Growth of $100", "studies": ["EMA"]}]

        series = pipeline.run(raw, datasets, {"isLogarithmic": False})

        assert [s.name for s in series] == ["schema.prices", "schema.prices - EMA"]
        assert [p.y for p in series[0].data] == pytest.approx([100.0, 110.0])


class TestOrdering:
    """Output order and naming."""

    def test_main_then_studies_then_next_dataset(self, pipeline: SeriesPipeline) -> None:
        raw = _raw_series("a", [1.0, 2.0, 3.0]) + _raw_series("b", [4.0, 5.0, 6.0])
        datasets = [
            _descriptor("b", studies=(Study.RSI, Study.SMA)),
            _descriptor("a", studies=(Study.EMA,)),
        ]

        series = pipeline.run(raw, datasets)

        assert [s.name for s in series] == [
            "public.b",
            "public.b - RSI",
            "public.b - SMA",
            "public.a",
            "public.a - EMA",
        ]
        assert [s.study for s in series] == [None, Study.RSI, Study.SMA, None, Study.EMA]
        assert series[0].label == "b"

    def test_each_dataset_sees_only_its_points(self, pipeline: SeriesPipeline) -> None:
        raw = _raw_series("a", [1.0, 2.0]) + _raw_series("b", [10.0])
        series = pipeline.run(raw, [_descriptor("a"), _descriptor("b")])
        assert [len(s.data) for s in series] == [2, 1]

    def test_concurrent_execution_preserves_order(self) -> None:
        pipeline = SeriesPipeline(PipelineSettings(max_workers=4))
        ids = [f"d{i}" for i in range(8)]
        raw = [p for i, d in enumerate(ids) for p in _raw_series(d, [float(i + 1)] * 3)]
        datasets = [_descriptor(d, studies=(Study.SMA,)) for d in ids]

        series = pipeline.run(raw, datasets)

        expected = [name for d in ids for name in (f"public.{d}", f"public.{d} - SMA")]
        assert [s.name for s in series] == expected
        assert [s.data[0].y for s in series if s.study is None] == [float(i + 1) for i in range(8)]


class TestStudies:
    """Indicator series are derived from the display-mode-transformed base."""

    def test_studies_use_transformed_base(self) -> None:
        pipeline = SeriesPipeline(PipelineSettings(ema_period=3, sma_period=2))
        raw = _raw_series("a", [50.0, 55.0, 60.0, 45.0])
        series = pipeline.run(
            raw, [_descriptor("a", mode=DisplayMode.GROWTH_OF_100, studies=(Study.EMA, Study.SMA))]
        )

        main, ema, sma = series
        base = list(main.data)
        assert ema.data[0].y == pytest.approx(100.0)
        assert list(ema.data) == compute_ema(base, 3)
        # SMA is computed from the base, not from the EMA output
        assert list(sma.data) == compute_sma(base, 2)

    def test_study_series_keep_timestamps_and_length(self, pipeline: SeriesPipeline) -> None:
        raw = _raw_series("a", [float(v) for v in range(1, 26)])
        series = pipeline.run(raw, [_descriptor("a", studies=(Study.SMA, Study.RSI, Study.CAGR))])

        main = series[0]
        for study_series in series[1:]:
            assert [p.x for p in study_series.data] == [p.x for p in main.data]
        assert series[1].data[18].y is None
        assert series[1].data[19].y == pytest.approx(10.5)
        assert series[2].data[13].y is None
        assert series[1].color == study_color(Study.SMA, main.color)
        assert series[3].color == study_color(Study.CAGR, main.color)
        assert series[3].color != main.color
        assert series[3].line_width == 1


class TestLogarithmic:
    """Log-scale filtering."""

    def test_filter_keeps_only_positive(self) -> None:
        points = [Point(x=1, y=-5.0), Point(x=2, y=0.0), Point(x=3, y=5.0), Point(x=4, y=None)]
        assert filter_logarithmic(points) == [Point(x=3, y=5.0)]

    def test_applied_to_main_series(self, pipeline: SeriesPipeline) -> None:
        raw = _raw_series("a", [-5.0, 0.0, 5.0])
        series = pipeline.run(raw, [_descriptor("a")], DisplayOptions(is_logarithmic=True))
        assert [p.y for p in series[0].data] == [5.0]

    def test_applied_after_indicators(self) -> None:
        """Indicators see the unfiltered base; only their output is filtered."""
        pipeline = SeriesPipeline(PipelineSettings(sma_period=2))
        raw = _raw_series("a", [100.0, 90.0, 120.0, 132.0])
        datasets = [_descriptor("a", mode=DisplayMode.ROC, studies=(Study.SMA,))]

        linear = pipeline.run(raw, datasets)
        logarithmic = pipeline.run(raw, datasets, {"isLogarithmic": True})

        # ROC: [0, -10, 33.33, 10] -> SMA(2): [None, -5, 11.67, 21.67]
        assert [p.y for p in logarithmic[0].data] == pytest.approx([100 / 3, 10.0])
        assert [p.y for p in logarithmic[1].data] == [p.y for p in linear[1].data[2:]]
        assert logarithmic[1].data[0].y == pytest.approx((-10.0 + 100 / 3) / 2)


class TestEmptyAndErrors:
    """Recoverable and fatal conditions."""

    def test_empty_dataset_yields_empty_series(self, pipeline: SeriesPipeline) -> None:
        raw = _raw_series("a", [1.0])
        datasets = [_descriptor("missing", mode=DisplayMode.GROWTH_OF_100, studies=(Study.CAGR, Study.RSI)), _descriptor("a")]

        series = pipeline.run(raw, datasets)

        assert [s.name for s in series] == [
            "public.missing",
            "public.missing - CAGR",
            "public.missing - RSI",
            "public.a",
        ]
        assert [len(s.data) for s in series] == [0, 0, 0, 1]

    def test_all_points_invalid_yields_empty_series(self, pipeline: SeriesPipeline) -> None:
        raw = [RawPoint("a", "bad-date", 1), RawPoint("a", "2020-01-01", "n/a")]
        result = pipeline.process(raw, [_descriptor("a")])

        assert result.series[0].data == ()
        assert len(result.rejected) == 2
        assert result.date_range is None

    def test_missing_dataset_list(self, pipeline: SeriesPipeline) -> None:
        with pytest.raises(MissingDatasetList):
            pipeline.run([], [])
        with pytest.raises(MissingDatasetList):
            pipeline.run([], None)

    def test_unknown_study_aborts_only_that_dataset(self, pipeline: SeriesPipeline) -> None:
        raw = _raw_series("a", [1.0, 2.0]) + _raw_series("b", [3.0, 4.0])
        datasets = [
            {"id": "a", "name": "a", "studies": ["MACD"]},
            {"id": "b", "name": "b", "displayMode": "ROC"},
        ]

        with capture_logs() as logs:
            result = pipeline.process(raw, datasets)

        assert [s.name for s in result.series] == ["b"]
        assert len(result.failures) == 1
        assert result.failures[0].dataset_id == "a"
        assert "MACD" in result.failures[0].error
        assert any(e["event"] == "dataset_failed" and e["log_level"] == "error" for e in logs)

    def test_unknown_display_mode_aborts_only_that_dataset(self, pipeline: SeriesPipeline) -> None:
        raw = _raw_series("a", [1.0, 2.0])
        datasets = [
            DatasetDescriptor(id="a", name="a", display_mode="Log Returns"),  # type: ignore[arg-type]
            _descriptor("a"),
        ]

        result = pipeline.process(raw, datasets)

        assert [s.name for s in result.series] == ["public.a"]
        assert "Log Returns" in result.failures[0].error

    @pytest.mark.parametrize(
        "bad_fields",
        [{"studies": 5}, {"studies": "SMA"}, {"lineWidth": "thick"}, {"color": 12}],
    )
    def test_malformed_descriptor_aborts_only_that_dataset(
        self, pipeline: SeriesPipeline, bad_fields: dict
    ) -> None:
        raw = _raw_series("a", [1.0, 2.0]) + _raw_series("b", [3.0, 4.0])
        datasets = [{"id": "a", "name": "a", **bad_fields}, {"id": "b", "name": "b"}]

        result = pipeline.process(raw, datasets)

        assert [s.name for s in result.series] == ["b"]
        assert [f.dataset_id for f in result.failures] == ["a"]
        assert "Invalid" in result.failures[0].error

    def test_malformed_studies_on_descriptor_object(self, pipeline: SeriesPipeline) -> None:
        raw = _raw_series("a", [1.0, 2.0])
        datasets = [DatasetDescriptor(id="a", name="a", studies=5)]  # type: ignore[arg-type]

        result = pipeline.process(raw, datasets)

        assert result.series == []
        assert result.failures[0].dataset_id == "a"

    def test_strict_mode_raises(self) -> None:
        pipeline = SeriesPipeline(PipelineSettings(strict=True))
        with pytest.raises(UnknownIndicator):
            pipeline.run([], [{"id": "a", "name": "a", "studies": ["MACD"]}])
        with pytest.raises(UnknownDisplayMode):
            pipeline.run([], [{"id": "a", "name": "a", "displayMode": "Log"}])
        with pytest.raises(InvalidDescriptor):
            pipeline.run([], [{"id": "a", "name": "a", "studies": 5}])

    def test_degenerate_math_propagates(self, pipeline: SeriesPipeline) -> None:
        raw = _raw_series("a", [0.0, 5.0])
        series = pipeline.run(raw, [_descriptor("a", mode=DisplayMode.ROC)])
        assert series[0].data[1].y == float("inf")


class TestDiagnostics:
    """PipelineResult diagnostics."""

    def test_date_range_spans_all_series(self, pipeline: SeriesPipeline) -> None:
        raw = _raw_series("a", [1.0, 2.0]) + [RawPoint("b", "2020-01-09", 3.0)]
        result = pipeline.process(raw, [_descriptor("a"), _descriptor("b")])

        assert result.date_range is not None
        assert result.date_range.min_x == _day(1)
        assert result.date_range.max_x == _day(9)

    def test_compute_date_range_empty(self) -> None:
        assert compute_date_range([]) is None

    def test_rejected_points_reported(self, pipeline: SeriesPipeline) -> None:
        raw = _raw_series("a", [1.0]) + [RawPoint("a", "2020-01-05", "oops")]
        result = pipeline.process(raw, [_descriptor("a")])

        assert len(result.rejected) == 1
        assert result.rejected[0].reason == "non-numeric value"

    def test_pipeline_complete_logged(self, pipeline: SeriesPipeline) -> None:
        with capture_logs() as logs:
            pipeline.run(_raw_series("a", [1.0]), [_descriptor("a")])

        complete = [e for e in logs if e["event"] == "pipeline_complete"]
        assert complete and complete[0]["series"] == 1
