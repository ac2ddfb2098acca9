"""End-of-day revenue forecast from a partial day's revenue-so-far.

The forecast divides revenue observed so far by the weekday's median
completion ratio at the effective hour. The range uses the p75 ratio for the
low bound and the p25 ratio for the high bound: a larger completed fraction
implies a smaller day.
"""

import logging
import math

from .models import (
    HOURS_PER_DAY,
    TRAFFIC_METRICS,
    ForecastResult,
    ForecastWarning,
    HourExpectation,
    MetricKind,
    PacingVerdict,
    WeekdayStatistics,
)
from .stats import clamp01, finite_or, is_positive_finite, safe_div

logger = logging.getLogger(__name__)

PACING_TOLERANCE = 0.05  # |delta_pct| beyond this is ahead / behind
TRAFFIC_DEVIATION_THRESHOLD = 0.08
EFFICIENCY_DEVIATION_THRESHOLD = 0.10


def effective_hour(checkpoint_hour: int, include_current_hour: bool = True) -> int:
    """Last hour whose data counts as complete.

    With include_current_hour the checkpoint hour itself is complete;
    otherwise revenue runs through the previous hour.
    """
    if include_current_hour:
        return checkpoint_hour
    return max(0, checkpoint_hour - 1)


def pacing_verdict(delta_pct: float) -> PacingVerdict:
    """Classify pacing; exactly +/-5% still counts as on pace."""
    if not math.isfinite(delta_pct):
        return PacingVerdict.ON_PACE
    if delta_pct > PACING_TOLERANCE:
        return PacingVerdict.AHEAD
    if delta_pct < -PACING_TOLERANCE:
        return PacingVerdict.BEHIND
    return PacingVerdict.ON_PACE


def _traffic_warnings(
    stats: WeekdayStatistics,
    hour: int,
    observed: dict[MetricKind, float],
) -> list[ForecastWarning]:
    """Traffic so far vs mean daily total x the metric's own completion median."""
    warnings: list[ForecastWarning] = []

    for metric in TRAFFIC_METRICS:
        if metric not in observed:
            continue

        metric_stats = stats.metric(metric)
        expected = metric_stats.daily.mean * metric_stats.completion[hour].p50
        deviation = safe_div(observed[metric] - expected, expected)

        if math.isfinite(deviation) and abs(deviation) >= TRAFFIC_DEVIATION_THRESHOLD:
            direction = "below" if deviation < 0 else "above"
            warnings.append(
                ForecastWarning(
                    metric=metric.value,
                    kind="traffic",
                    direction=direction,
                    deviation_pct=deviation,
                    message=(
                        f"{metric.value.capitalize()} are {direction} normal by "
                        f"{abs(deviation) * 100:.1f}% for this weekday at hour {hour}."
                    ),
                )
            )

    return warnings


def _efficiency_warnings(
    stats: WeekdayStatistics,
    revenue_so_far: float,
    observed: dict[MetricKind, float],
) -> list[ForecastWarning]:
    """Revenue per session / per click vs the weekday's mean-daily ratio."""
    warnings: list[ForecastWarning] = []
    mean_revenue = stats.metric(MetricKind.REVENUE).daily.mean

    for metric, name, label in (
        (MetricKind.SESSIONS, "revenue_per_session", "Revenue per session"),
        (MetricKind.CLICKS, "revenue_per_click", "Revenue per click"),
    ):
        if metric not in observed:
            continue

        current = revenue_so_far / observed[metric]
        historical = safe_div(mean_revenue, stats.metric(metric).daily.mean)
        diff = safe_div(current - historical, historical)

        if math.isfinite(diff) and abs(diff) >= EFFICIENCY_DEVIATION_THRESHOLD:
            warnings.append(
                ForecastWarning(
                    metric=name,
                    kind="efficiency",
                    direction="below" if diff < 0 else "above",
                    deviation_pct=diff,
                    message=(
                        f"{label} is {'lower' if diff < 0 else 'higher'} than this "
                        f"weekday's average by {abs(diff) * 100:.1f}%."
                    ),
                )
            )

    return warnings


def _hour_expectations(stats: WeekdayStatistics, eod: float) -> tuple[HourExpectation, ...]:
    """Expected revenue curve for the full day plus cumulative mean traffic.

    Bands are eod x clamp01(mean +/- std); clamping happens after the
    std is applied. A non-finite std counts as 0.
    """
    revenue = stats.metric(MetricKind.REVENUE)
    cumulative_traffic = {metric: 0.0 for metric in TRAFFIC_METRICS}
    rows: list[HourExpectation] = []

    for hh in range(HOURS_PER_DAY):
        cum = revenue.completion[hh]
        share = revenue.share[hh]
        cum_std = finite_or(cum.std, 0.0)
        share_std = finite_or(share.std, 0.0)

        for metric in TRAFFIC_METRICS:
            cumulative_traffic[metric] += finite_or(stats.metric(metric).hourly[hh].mean, 0.0)

        rows.append(
            HourExpectation(
                hour=hh,
                expected_cumulative_revenue=eod * cum.p50,
                expected_hourly_revenue=eod * share.p50,
                cumulative_low=eod * clamp01(cum.mean - cum_std),
                cumulative_high=eod * clamp01(cum.mean + cum_std),
                hourly_low=eod * clamp01(share.mean - share_std),
                hourly_high=eod * clamp01(share.mean + share_std),
                expected_cumulative_impressions=cumulative_traffic[MetricKind.IMPRESSIONS],
                expected_cumulative_clicks=cumulative_traffic[MetricKind.CLICKS],
                expected_cumulative_sessions=cumulative_traffic[MetricKind.SESSIONS],
            )
        )

    return tuple(rows)


def forecast(
    stats: WeekdayStatistics,
    checkpoint_hour: int,
    revenue_so_far: float | None,
    include_current_hour: bool = True,
    impressions: float | None = None,
    clicks: float | None = None,
    sessions: float | None = None,
) -> ForecastResult | None:
    """Project end-of-day revenue for a partial day.

    Args:
        stats: Baselines for the weekday being forecast
        checkpoint_hour: Hour slot treated as "now" (clamped to 0..23)
        revenue_so_far: Revenue observed so far; must be positive
        include_current_hour: Whether revenue_so_far includes checkpoint_hour
        impressions: Optional impressions so far (ignored unless positive)
        clicks: Optional clicks so far (ignored unless positive)
        sessions: Optional sessions so far (ignored unless positive)

    Returns:
        ForecastResult, or None when revenue is missing or the weekday has
        no usable completion median at the effective hour.
        The high bound is NaN, not infinity, when the p25 completion ratio is
        0; it serializes as null like every other unavailable number.
    """
    if not is_positive_finite(revenue_so_far):
        return None
    revenue_so_far = float(revenue_so_far)

    checkpoint = max(0, min(HOURS_PER_DAY - 1, int(checkpoint_hour)))
    hour = effective_hour(checkpoint, include_current_hour)

    revenue = stats.metric(MetricKind.REVENUE)
    completion = revenue.completion[hour]
    cr50 = completion.p50
    if not math.isfinite(cr50) or cr50 <= 0:
        logger.warning(
            "No completion baseline for %s at hour %d (%d days)",
            stats.weekday_name,
            hour,
            stats.day_count,
        )
        return None

    eod = revenue_so_far / cr50
    low = revenue_so_far / completion.p75
    high = safe_div(revenue_so_far, completion.p25)

    expected_by_now = revenue.daily.mean * cr50
    delta = revenue_so_far - expected_by_now
    delta_pct = safe_div(delta, expected_by_now)

    observed = {
        metric: float(value)
        for metric, value in (
            (MetricKind.IMPRESSIONS, impressions),
            (MetricKind.CLICKS, clicks),
            (MetricKind.SESSIONS, sessions),
        )
        if is_positive_finite(value)
    }

    warnings = _traffic_warnings(stats, hour, observed)
    warnings.extend(_efficiency_warnings(stats, revenue_so_far, observed))

    return ForecastResult(
        weekday=stats.weekday,
        checkpoint_hour=checkpoint,
        effective_hour=hour,
        revenue_so_far=revenue_so_far,
        eod=eod,
        low=low,
        high=high,
        expected_by_now=expected_by_now,
        delta=delta,
        delta_pct=delta_pct,
        pacing=pacing_verdict(delta_pct),
        warnings=tuple(warnings),
        hours=_hour_expectations(stats, eod),
    )
