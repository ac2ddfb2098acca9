"""Tests for PacingEngine, PacingService and the statistics cache."""

import json
from datetime import date

import polars as pl
import pytest
from pydantic import ValidationError

from daypace.analytics import MetricKind, PacingEngine, PacingVerdict
from daypace.exceptions import StatisticsBuildError
from daypace.models.pacing_pack import PacingQuery
from daypace.services import PacingService, StatisticsCache, dataset_fingerprint

MONDAYS = ["2024-01-01", "2024-01-08", "2024-01-15", "2024-01-22"]


@pytest.fixture
def history_rows(day_rows) -> list[dict]:
    """Four Mondays with even revenue plus one Tuesday."""
    rows = []
    for i, day in enumerate(MONDAYS):
        rows += day_rows(
            day,
            revenue=[10.0 + i] * 24,
            impressions=[1000.0] * 24,
            clicks=[50.0] * 24,
            sessions=[100.0] * 24,
        )
    rows += day_rows("2024-01-02", revenue=[1.0] * 24)
    return rows


@pytest.fixture
def service(history_rows) -> PacingService:
    svc = PacingService()
    svc.replace_dataset(history_rows)
    return svc


class TestPacingEngine:
    """Tests for PacingEngine."""

    def test_missing_columns(self) -> None:
        """Should fail fast when required columns are absent."""
        df = pl.DataFrame({"date": ["2024-01-01"], "hour": [0]})
        with pytest.raises(ValueError, match="Missing required columns"):
            PacingEngine(df=df)

    def test_invalid_weekday(self, history_rows, to_frame) -> None:
        engine = PacingEngine(df=to_frame(history_rows))
        with pytest.raises(ValueError):
            engine.get_weekday(7)

    def test_dataset_summary(self, history_rows, to_frame) -> None:
        """Summary should count rows, days and days per weekday."""
        engine = PacingEngine(df=to_frame(history_rows))
        summary = engine.get_dataset_summary()

        assert summary["total_rows"] == 5 * 24
        assert summary["total_days"] == 5
        assert summary["date_range"] == (date(2024, 1, 1), date(2024, 1, 22))
        assert summary["days_per_weekday"]["Monday"] == 4
        assert summary["days_per_weekday"]["Tuesday"] == 1
        assert summary["days_per_weekday"]["Sunday"] == 0

    def test_statistics_reused(self, history_rows, to_frame) -> None:
        engine = PacingEngine(df=to_frame(history_rows))
        assert engine.get_weekday_statistics() is engine.get_weekday_statistics()

    def test_input_frame_untouched(self, history_rows, to_frame) -> None:
        df = to_frame(history_rows)
        before = df.clone()
        PacingEngine(df=df).get_weekday_statistics()
        assert df.equals(before)


class TestPacingService:
    """Tests for PacingService.run() and its output."""

    def test_run_forecast(self, service: PacingService) -> None:
        """A half-day on an even Monday should forecast roughly double."""
        pack = service.run(PacingQuery(weekday=1, checkpoint_hour=11, revenue_so_far=150.0))

        assert pack.weekday_name == "Monday"
        assert pack.total_days == 5
        assert pack.weekday_day_count == 4
        assert pack.forecast is not None
        assert pack.forecast.eod == pytest.approx(300.0)
        assert pack.forecast.pacing in set(PacingVerdict)
        assert pack.backtest is not None
        assert pack.backtest.day_count == 4

    def test_forecast_none_without_revenue(self, service: PacingService) -> None:
        """Missing revenue-so-far should leave the forecast empty, backtest intact."""
        pack = service.run(PacingQuery(weekday=1))
        assert pack.forecast is None
        assert pack.backtest is not None
        assert pack.get_headline()["eod"] is None

    def test_backtest_none_for_sparse_weekday(self, service: PacingService) -> None:
        pack = service.run(PacingQuery(weekday=2, revenue_so_far=12.0))
        assert pack.forecast is not None
        assert pack.backtest is None

    def test_json_output(self, service: PacingService) -> None:
        """to_json should be valid JSON with NaN rendered as null."""
        pack = service.run(PacingQuery(weekday=1, checkpoint_hour=11, revenue_so_far=150.0))
        payload = json.loads(pack.to_json())

        assert payload["meta"]["weekday"] == "Monday"
        assert payload["meta"]["date_range"] == {"start": "2024-01-01", "end": "2024-01-22"}
        assert payload["forecast"]["eod"] == pytest.approx(300.0)
        assert len(payload["forecast"]["hours"]) == 24
        assert "NaN" not in pack.to_json()

    def test_summary_dict_has_headline(self, service: PacingService) -> None:
        pack = service.run(PacingQuery(weekday=1, checkpoint_hour=11, revenue_so_far=150.0))
        summary = service.generate_summary_dict(pack)

        assert summary["headline"]["weekday"] == "Monday"
        assert summary["headline"]["eod"] == 300
        assert summary["headline"]["backtest_accuracy"]["checkpoint_hour"] == 12
        assert set(summary) == {"headline", "meta", "query", "forecast", "backtest"}

    def test_no_dataset(self) -> None:
        with pytest.raises(ValueError, match="No dataset loaded"):
            PacingService().run(PacingQuery(weekday=1, revenue_so_far=1.0))

    def test_load_csv(self, tmp_path) -> None:
        path = tmp_path / "export.csv"
        lines = ["dh.date,dh.hour,revenue"]
        lines += [f"2024-01-0{d},{h},5" for d in range(1, 4) for h in range(24)]
        path.write_text("\n".join(lines) + "\n")

        svc = PacingService()
        df = svc.load_dataset(path)
        assert len(df) == 72
        assert svc.dataset is df
        assert svc.get_statistics().total_days == 3

    def test_build_failure_is_wrapped(
        self, service: PacingService, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Unexpected errors while building statistics surface as StatisticsBuildError."""

        def boom(self):
            raise RuntimeError("boom")

        monkeypatch.setattr(PacingEngine, "get_weekday_statistics", boom)
        with pytest.raises(StatisticsBuildError, match="Failed to build stats: boom"):
            service.get_engine()


class TestStatisticsCache:
    """Tests for StatisticsCache."""

    def test_hit_on_same_dataset(self, service: PacingService) -> None:
        first = service.get_engine()
        second = service.get_engine()
        assert first is second
        assert service.cache.misses == 1
        assert service.cache.hits == 1

    def test_replace_invalidates(self, service: PacingService, history_rows) -> None:
        """Swapping the dataset should rebuild even with identical content."""
        first = service.get_engine()
        service.replace_dataset(history_rows)
        second = service.get_engine()
        assert first is not second
        assert service.cache.misses == 2

    def test_different_frame_rebuilds(self, history_rows, to_frame) -> None:
        cache = StatisticsCache()
        df = to_frame(history_rows)
        cache.get_or_build(df)
        cache.get_or_build(df.head(24))
        assert cache.misses == 2
        assert cache.hits == 0

    def test_fingerprint_tracks_content(self, history_rows, to_frame) -> None:
        df = to_frame(history_rows)
        changed = df.with_columns(pl.col("revenue") * 2)
        assert dataset_fingerprint(df) == dataset_fingerprint(df.clone())
        assert dataset_fingerprint(df) != dataset_fingerprint(changed)

    def test_reordered_duplicates_rebuild(self, day_rows, to_frame) -> None:
        """Same rows in another order can change which duplicate wins."""
        base = day_rows("2024-01-01")
        first = {**base[4], "revenue": 10.0}
        second = {**base[4], "revenue": 99.0}
        a = to_frame([first, second])
        b = to_frame([second, first])
        assert dataset_fingerprint(a) != dataset_fingerprint(b)

        cache = StatisticsCache()
        cache.get_or_build(a)
        engine = cache.get_or_build(b)
        assert cache.misses == 2
        assert cache.hits == 0
        monday = engine.get_weekday(1)
        assert monday.metric(MetricKind.REVENUE).daily.mean == pytest.approx(10.0)


class TestPacingQuery:
    """Tests for PacingQuery validation."""

    @pytest.mark.parametrize(
        "kwargs", [{"weekday": 7}, {"weekday": -1}, {"weekday": 1, "checkpoint_hour": 24}]
    )
    def test_out_of_range(self, kwargs: dict) -> None:
        with pytest.raises(ValidationError):
            PacingQuery(**kwargs)

    def test_defaults(self) -> None:
        query = PacingQuery(weekday=3)
        assert query.checkpoint_hour == 12
        assert query.include_current_hour is True
        assert query.revenue_so_far is None
