"""Output models for pacing statistics, forecasts and backtests."""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Literal, Mapping

HOURS_PER_DAY = 24
WEEKDAY_COUNT = 7

WEEKDAY_NAMES = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)


class MetricKind(str, Enum):
    """Hourly measures tracked per day."""

    REVENUE = "revenue"
    IMPRESSIONS = "impressions"
    CLICKS = "clicks"
    SESSIONS = "sessions"


TRAFFIC_METRICS = (MetricKind.IMPRESSIONS, MetricKind.CLICKS, MetricKind.SESSIONS)


class PacingVerdict(str, Enum):
    """Revenue-so-far relative to the weekday baseline."""

    AHEAD = "ahead"
    BEHIND = "behind"
    ON_PACE = "on pace"


@dataclass(frozen=True)
class HourlyMetrics:
    """Measures for a single calendar hour. Missing values are zero."""

    revenue: float = 0.0
    impressions: float = 0.0
    clicks: float = 0.0
    sessions: float = 0.0

    def value(self, metric: MetricKind) -> float:
        return getattr(self, metric.value)


EMPTY_HOUR = HourlyMetrics()


@dataclass(frozen=True)
class DayProfile:
    """One calendar day as 24 hourly slots.

    weekday: 0=Sunday .. 6=Saturday
    """

    date: date
    weekday: int
    hours: tuple[HourlyMetrics, ...]

    def __post_init__(self) -> None:
        if len(self.hours) != HOURS_PER_DAY:
            raise ValueError(
                f"DayProfile needs {HOURS_PER_DAY} hourly slots, got {len(self.hours)}"
            )

    def series(self, metric: MetricKind) -> list[float]:
        """Hourly values for one metric, hour 0 first."""
        return [h.value(metric) for h in self.hours]

    def total(self, metric: MetricKind) -> float:
        return sum(self.series(metric))


@dataclass(frozen=True)
class DistributionSummary:
    """Empirical summary of a sequence of values.

    Quantiles are linearly interpolated; std is population (divisor n).
    All fields are NaN when the sequence was empty or held a NaN.
    """

    p25: float
    p50: float
    p75: float
    mean: float
    std: float


@dataclass(frozen=True)
class MetricStatistics:
    """Per-metric baselines for one weekday."""

    daily: DistributionSummary  # daily totals
    hourly: tuple[DistributionSummary, ...]  # absolute value per hour
    share: tuple[DistributionSummary, ...]  # hour / daily total
    completion: tuple[DistributionSummary, ...]  # cumulative through hour / total


@dataclass(frozen=True)
class WeekdayStatistics:
    """All metric baselines for one weekday bucket."""

    weekday: int
    day_count: int
    metrics: Mapping[MetricKind, MetricStatistics]

    def metric(self, kind: MetricKind) -> MetricStatistics:
        return self.metrics[kind]

    @property
    def weekday_name(self) -> str:
        return WEEKDAY_NAMES[self.weekday]


@dataclass(frozen=True)
class WeekdayStatisticsTable:
    """Statistics for all seven weekdays, indexed 0=Sunday .. 6=Saturday."""

    weekdays: tuple[WeekdayStatistics, ...]

    def for_weekday(self, weekday: int) -> WeekdayStatistics:
        if not 0 <= weekday < WEEKDAY_COUNT:
            raise ValueError(f"weekday must be in 0..6, got {weekday}")
        return self.weekdays[weekday]

    @property
    def total_days(self) -> int:
        return sum(w.day_count for w in self.weekdays)


@dataclass(frozen=True)
class ForecastWarning:
    """Advisory diagnostic raised alongside a forecast."""

    metric: str  # impressions, clicks, sessions, revenue_per_session, revenue_per_click
    kind: Literal["traffic", "efficiency"]
    direction: Literal["above", "below"]
    deviation_pct: float  # (observed - expected) / expected
    message: str


@dataclass(frozen=True)
class HourExpectation:
    """Expected cumulative and per-hour values for one hour of the day."""

    hour: int
    expected_cumulative_revenue: float
    expected_hourly_revenue: float
    cumulative_low: float
    cumulative_high: float
    hourly_low: float
    hourly_high: float
    expected_cumulative_impressions: float
    expected_cumulative_clicks: float
    expected_cumulative_sessions: float


@dataclass(frozen=True)
class ForecastResult:
    """End-of-day revenue estimate for a partial day."""

    weekday: int
    checkpoint_hour: int
    effective_hour: int
    revenue_so_far: float
    eod: float
    low: float  # revenue_so_far / completion p75
    high: float  # revenue_so_far / completion p25
    expected_by_now: float
    delta: float
    delta_pct: float
    pacing: PacingVerdict
    warnings: tuple[ForecastWarning, ...]
    hours: tuple[HourExpectation, ...]


@dataclass(frozen=True)
class BacktestRow:
    """Realized forecast error at one checkpoint hour."""

    checkpoint_hour: int
    effective_hour: int
    sample_count: int
    mape: float  # mean(|error|)
    bias: float  # mean(error), signed


@dataclass(frozen=True)
class BacktestResult:
    """In-sample backtest for one weekday."""

    weekday: int
    include_current_hour: bool
    day_count: int  # days with positive revenue
    rows: tuple[BacktestRow, ...]
