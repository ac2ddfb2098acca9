"""In-sample backtest of the completion-ratio forecast for one weekday."""

import logging
import math
from typing import Iterable

import numpy as np

from .forecaster import effective_hour
from .models import BacktestResult, BacktestRow, DayProfile, MetricKind, WeekdayStatistics

logger = logging.getLogger(__name__)

CHECKPOINT_HOURS = (6, 9, 12, 15, 18, 21)
MIN_BACKTEST_DAYS = 3


def relative_errors(
    days: list[DayProfile],
    hour: int,
    cr50: float,
) -> list[float]:
    """(predicted - actual) / actual for each day with revenue by `hour`."""
    errors: list[float] = []
    for day in days:
        revenue = day.series(MetricKind.REVENUE)
        actual = sum(revenue)
        so_far = sum(revenue[: hour + 1])
        if not so_far > 0:
            continue
        predicted = so_far / cr50
        errors.append((predicted - actual) / actual)
    return errors


def backtest(
    stats: WeekdayStatistics,
    profiles: Iterable[DayProfile],
    include_current_hour: bool = True,
    checkpoints: tuple[int, ...] = CHECKPOINT_HOURS,
) -> BacktestResult | None:
    """Replay the forecast at fixed checkpoints against historical days.

    Args:
        stats: Baselines for the weekday under test
        profiles: All day profiles; only those matching stats.weekday are used
        include_current_hour: Same effective-hour rule as the forecaster
        checkpoints: Hours to evaluate

    Returns:
        BacktestResult with one row per checkpoint that had samples, or None
        when fewer than 3 days have positive revenue or no checkpoint
        produced a sample.
    """
    days = [
        d
        for d in profiles
        if d.weekday == stats.weekday and d.total(MetricKind.REVENUE) > 0
    ]
    if len(days) < MIN_BACKTEST_DAYS:
        logger.info(
            "Insufficient data to backtest %s: %d days with revenue",
            stats.weekday_name,
            len(days),
        )
        return None

    completion = stats.metric(MetricKind.REVENUE).completion
    rows: list[BacktestRow] = []

    for checkpoint in checkpoints:
        hour = effective_hour(checkpoint, include_current_hour)
        cr50 = completion[hour].p50
        if not math.isfinite(cr50) or cr50 <= 0:
            continue

        errors = relative_errors(days, hour, cr50)
        if not errors:
            continue

        arr = np.array(errors)
        rows.append(
            BacktestRow(
                checkpoint_hour=checkpoint,
                effective_hour=hour,
                sample_count=len(errors),
                mape=float(np.mean(np.abs(arr))),
                bias=float(np.mean(arr)),
            )
        )

    if not rows:
        return None

    return BacktestResult(
        weekday=stats.weekday,
        include_current_hour=include_current_hour,
        day_count=len(days),
        rows=tuple(rows),
    )
