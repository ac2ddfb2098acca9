"""Pacing Engine - main calculator class for day x hour pacing data."""

from dataclasses import dataclass, field
from typing import Any

import polars as pl

from .backtest import CHECKPOINT_HOURS, backtest
from .expressions import METRIC_COLUMNS, days_per_weekday_expr
from .forecaster import forecast
from .models import (
    WEEKDAY_COUNT,
    WEEKDAY_NAMES,
    BacktestResult,
    DayProfile,
    ForecastResult,
    WeekdayStatistics,
    WeekdayStatisticsTable,
)
from .profiles import build_day_profiles
from .weekday import build_weekday_statistics


@dataclass
class PacingEngine:
    """Forecasting and backtesting over one historical dataset.

    The input DataFrame is never mutated. Day profiles and weekday
    statistics are built on first use and reused by later queries.

    Attributes:
        df: Normalized frame from the ingestion pipeline
            (date, hour, revenue, impressions, clicks, sessions)
    """

    df: pl.DataFrame
    _profiles: list[DayProfile] | None = field(default=None, init=False, repr=False)
    _statistics: WeekdayStatisticsTable | None = field(
        default=None, init=False, repr=False
    )

    def __post_init__(self) -> None:
        """Validate input DataFrame has required columns."""
        required = {"date", "hour", *METRIC_COLUMNS}
        available = set(self.df.columns)
        missing = required - available
        if missing:
            raise ValueError(f"Missing required columns: {missing}")

    # =========================================================================
    # BASELINES
    # =========================================================================

    def get_day_profiles(self) -> list[DayProfile]:
        """24-slot profiles, one per date, sorted by date."""
        if self._profiles is None:
            self._profiles = build_day_profiles(self.df)
        return self._profiles

    def get_weekday_statistics(self) -> WeekdayStatisticsTable:
        """Statistics for all seven weekdays."""
        if self._statistics is None:
            self._statistics = build_weekday_statistics(self.get_day_profiles())
        return self._statistics

    def get_weekday(self, weekday: int) -> WeekdayStatistics:
        """Statistics for one weekday (0=Sunday .. 6=Saturday).

        Raises:
            ValueError: If weekday is outside 0..6.
        """
        return self.get_weekday_statistics().for_weekday(weekday)

    # =========================================================================
    # FORECAST
    # =========================================================================

    def forecast(
        self,
        weekday: int,
        checkpoint_hour: int,
        revenue_so_far: float | None,
        include_current_hour: bool = True,
        impressions: float | None = None,
        clicks: float | None = None,
        sessions: float | None = None,
    ) -> ForecastResult | None:
        """End-of-day revenue forecast for a partial day of `weekday`.

        Returns:
            ForecastResult, or None if no forecast can be made.
        """
        return forecast(
            self.get_weekday(weekday),
            checkpoint_hour=checkpoint_hour,
            revenue_so_far=revenue_so_far,
            include_current_hour=include_current_hour,
            impressions=impressions,
            clicks=clicks,
            sessions=sessions,
        )

    # =========================================================================
    # BACKTEST
    # =========================================================================

    def backtest(
        self,
        weekday: int,
        include_current_hour: bool = True,
        checkpoints: tuple[int, ...] = CHECKPOINT_HOURS,
    ) -> BacktestResult | None:
        """Historical accuracy of the forecast for `weekday`.

        Returns:
            BacktestResult, or None on insufficient data.
        """
        return backtest(
            self.get_weekday(weekday),
            self.get_day_profiles(),
            include_current_hour=include_current_hour,
            checkpoints=checkpoints,
        )

    # =========================================================================
    # DATASET SUMMARY
    # =========================================================================

    def get_dataset_summary(self) -> dict[str, Any]:
        """Row count, day count, date range and days per weekday."""
        profiles = self.get_day_profiles()
        days = pl.DataFrame(
            {
                "date": [p.date for p in profiles],
                "weekday": [p.weekday for p in profiles],
            },
            schema={"date": pl.Date, "weekday": pl.Int8},
        )
        counts = {
            row["weekday"]: row["day_count"]
            for row in days.group_by("weekday").agg(days_per_weekday_expr()).to_dicts()
        }

        return {
            "total_rows": len(self.df),
            "total_days": len(profiles),
            "date_range": (
                (profiles[0].date, profiles[-1].date) if profiles else None
            ),
            "days_per_weekday": {
                WEEKDAY_NAMES[w]: counts.get(w, 0) for w in range(WEEKDAY_COUNT)
            },
        }
