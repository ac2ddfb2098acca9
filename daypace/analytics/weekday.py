"""Per-weekday baselines: daily totals, hourly values, shares and completion curves."""

import logging
from types import MappingProxyType
from typing import Iterable

import numpy as np

from .models import (
    HOURS_PER_DAY,
    WEEKDAY_COUNT,
    DayProfile,
    MetricKind,
    MetricStatistics,
    WeekdayStatistics,
    WeekdayStatisticsTable,
)
from .stats import safe_div_array, summarize, summarize_columns

logger = logging.getLogger(__name__)


def metric_matrix(days: list[DayProfile], metric: MetricKind) -> np.ndarray:
    """Stack one metric into a (days, 24) float matrix."""
    if not days:
        return np.empty((0, HOURS_PER_DAY), dtype=float)
    return np.array([d.series(metric) for d in days], dtype=float)


def build_metric_statistics(matrix: np.ndarray) -> MetricStatistics:
    """Summaries for one metric across the days of a weekday bucket.

    Shares and completion ratios are NaN for days whose total is 0.
    """
    cumulative = np.cumsum(matrix, axis=1)
    # Running sum through hour 23 so completion ends at exactly 1.0
    totals = cumulative[:, -1]
    shares = safe_div_array(matrix, totals[:, None])
    completion = safe_div_array(cumulative, totals[:, None])

    return MetricStatistics(
        daily=summarize(totals),
        hourly=summarize_columns(matrix),
        share=summarize_columns(shares),
        completion=summarize_columns(completion),
    )


def build_weekday(weekday: int, days: list[DayProfile]) -> WeekdayStatistics:
    """Statistics for a single weekday. An empty bucket is valid (all NaN)."""
    metrics = {
        metric: build_metric_statistics(metric_matrix(days, metric))
        for metric in MetricKind
    }
    return WeekdayStatistics(
        weekday=weekday,
        day_count=len(days),
        metrics=MappingProxyType(metrics),
    )


def build_weekday_statistics(profiles: Iterable[DayProfile]) -> WeekdayStatisticsTable:
    """Bucket day profiles by weekday and summarize each bucket.

    Args:
        profiles: DayProfiles, any order

    Returns:
        WeekdayStatisticsTable with exactly seven entries (0=Sunday).
    """
    buckets: list[list[DayProfile]] = [[] for _ in range(WEEKDAY_COUNT)]
    for day in profiles:
        buckets[day.weekday].append(day)

    table = WeekdayStatisticsTable(
        weekdays=tuple(build_weekday(w, buckets[w]) for w in range(WEEKDAY_COUNT))
    )
    logger.debug(
        "Built weekday statistics from %d days: %s",
        table.total_days,
        [w.day_count for w in table.weekdays],
    )
    return table
