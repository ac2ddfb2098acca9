"""Analytics module for weekday pacing baselines, forecasts and backtests."""

from .backtest import CHECKPOINT_HOURS, MIN_BACKTEST_DAYS, backtest
from .calculator import PacingEngine
from .forecaster import effective_hour, forecast, pacing_verdict
from .models import (
    TRAFFIC_METRICS,
    WEEKDAY_NAMES,
    BacktestResult,
    BacktestRow,
    DayProfile,
    DistributionSummary,
    ForecastResult,
    ForecastWarning,
    HourExpectation,
    HourlyMetrics,
    MetricKind,
    MetricStatistics,
    PacingVerdict,
    WeekdayStatistics,
    WeekdayStatisticsTable,
)
from .profiles import build_day_profiles
from .stats import quantile, summarize
from .weekday import build_weekday_statistics

__all__ = [
    "BacktestResult",
    "BacktestRow",
    "CHECKPOINT_HOURS",
    "DayProfile",
    "DistributionSummary",
    "ForecastResult",
    "ForecastWarning",
    "HourExpectation",
    "HourlyMetrics",
    "MIN_BACKTEST_DAYS",
    "MetricKind",
    "MetricStatistics",
    "PacingEngine",
    "PacingVerdict",
    "TRAFFIC_METRICS",
    "WEEKDAY_NAMES",
    "WeekdayStatistics",
    "WeekdayStatisticsTable",
    "backtest",
    "build_day_profiles",
    "build_weekday_statistics",
    "effective_hour",
    "forecast",
    "pacing_verdict",
    "quantile",
    "summarize",
]
