"""Pacing service - orchestrates ingestion, cached statistics and queries."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, Mapping

import polars as pl
from pydantic import BaseModel

from ..analytics import PacingEngine, WeekdayStatisticsTable
from ..exceptions import PacingError, StatisticsBuildError
from ..ingestion import RecordNormalizer
from ..models.pacing_pack import PacingPack, PacingQuery

logger = logging.getLogger(__name__)


def dataset_fingerprint(df: pl.DataFrame) -> tuple[int, tuple[str, ...], int]:
    """Cheap identity for a frame: shape, column names and a row-hash sum.

    Row positions are hashed in, so reordering rows changes the key. Order
    decides which duplicate (date, hour) row wins.
    """
    row_hash = (
        int(df.with_row_index("_position").hash_rows().sum()) if len(df) else 0
    )
    return (len(df), tuple(df.columns), row_hash)


class StatisticsCache:
    """Holds the PacingEngine (and its built statistics) for one dataset.

    A lookup with a different dataset rebuilds; invalidate() forces the
    next lookup to rebuild even for the same data.
    """

    def __init__(self) -> None:
        self._key: tuple[int, tuple[str, ...], int] | None = None
        self._engine: PacingEngine | None = None
        self.hits = 0
        self.misses = 0

    def get_or_build(self, df: pl.DataFrame) -> PacingEngine:
        key = dataset_fingerprint(df)
        if self._engine is not None and key == self._key:
            self.hits += 1
            logger.debug("Statistics cache hit (%d rows)", len(df))
            return self._engine

        self.misses += 1
        engine = PacingEngine(df=df)
        # Build eagerly so failures surface here, not on the first query
        engine.get_weekday_statistics()

        self._key = key
        self._engine = engine
        return engine

    def invalidate(self) -> None:
        self._key = None
        self._engine = None


class PacingService:
    """Service for forecasting from a day x hour export.

    Orchestrates:
    1. Loading and normalizing the dataset
    2. Building (and caching) weekday statistics
    3. Running forecast and backtest for a query
    4. Returning consolidated output

    Usage:
        service = PacingService()
        service.load_dataset(Path("data/day_hour.csv"))
        pack = service.run(PacingQuery(weekday=1, checkpoint_hour=12, revenue_so_far=18400))
    """

    def __init__(self, schema_path: Path | None = None):
        """Initialize service with schema configuration.

        Args:
            schema_path: Path to schema_registry.yaml. Defaults to bundled config.
        """
        self.normalizer = RecordNormalizer(schema_path)
        self.cache = StatisticsCache()
        self._df: pl.DataFrame | None = None

    @property
    def dataset(self) -> pl.DataFrame | None:
        return self._df

    def load_dataset(self, path: Path, validate: bool = False) -> pl.DataFrame:
        """Load a CSV/Excel export and make it the active dataset."""
        df = self.normalizer.ingest(path, validate=validate)
        self._set_dataset(df)
        return df

    def replace_dataset(
        self, data: pl.DataFrame | Iterable[Mapping[str, Any] | BaseModel]
    ) -> pl.DataFrame:
        """Swap in a raw frame or in-memory records as the active dataset."""
        if isinstance(data, pl.DataFrame):
            df = self.normalizer.normalize(data)
        else:
            df = self.normalizer.records_to_frame(data)
        self._set_dataset(df)
        return df

    def _set_dataset(self, df: pl.DataFrame) -> None:
        self.cache.invalidate()
        self._df = df
        logger.info("Active dataset replaced: %d rows", len(df))

    def get_engine(self) -> PacingEngine:
        """Engine for the active dataset, building statistics if needed.

        Raises:
            ValueError: If no dataset has been loaded
            StatisticsBuildError: If building statistics fails unexpectedly
        """
        if self._df is None:
            raise ValueError("No dataset loaded")

        try:
            return self.cache.get_or_build(self._df)
        except PacingError:
            raise
        except Exception as e:
            logger.exception("Building weekday statistics failed")
            raise StatisticsBuildError(str(e) or type(e).__name__) from e

    def get_statistics(self) -> WeekdayStatisticsTable:
        return self.get_engine().get_weekday_statistics()

    def run(self, query: PacingQuery) -> PacingPack:
        """Forecast and backtest for one query.

        Args:
            query: Weekday, checkpoint hour and observed-so-far values

        Returns:
            PacingPack; forecast/backtest are None when unavailable.
        """
        engine = self.get_engine()
        weekday_stats = engine.get_weekday(query.weekday)

        result = engine.forecast(
            query.weekday,
            checkpoint_hour=query.checkpoint_hour,
            revenue_so_far=query.revenue_so_far,
            include_current_hour=query.include_current_hour,
            impressions=query.impressions_so_far,
            clicks=query.clicks_so_far,
            sessions=query.sessions_so_far,
        )
        accuracy = engine.backtest(
            query.weekday, include_current_hour=query.include_current_hour
        )

        summary = engine.get_dataset_summary()
        return PacingPack(
            generated_at=datetime.now(),
            query=query,
            total_days=summary["total_days"],
            weekday_day_count=weekday_stats.day_count,
            date_range=summary["date_range"],
            forecast=result,
            backtest=accuracy,
        )

    def generate_summary_dict(self, pack: PacingPack) -> dict[str, Any]:
        """Convert PacingPack to JSON-serializable dictionary with a headline.

        Args:
            pack: PacingPack from run()

        Returns:
            Dictionary suitable for JSON serialization
        """
        return {"headline": pack.get_headline(), **pack.to_dict()}
