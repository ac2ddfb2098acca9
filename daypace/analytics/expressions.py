"""Reusable Polars expressions for day x hour pacing data."""

import polars as pl

from .models import MetricKind

METRIC_COLUMNS = [m.value for m in MetricKind]


def weekday_expr(date_col: str = "date") -> pl.Expr:
    """Day of week with 0=Sunday .. 6=Saturday.

    Polars numbers ISO weekdays Monday=1 .. Sunday=7.
    """
    return (pl.col(date_col).dt.weekday() % 7).cast(pl.Int8).alias("weekday")


def days_per_weekday_expr() -> list[pl.Expr]:
    """Distinct dates per weekday (used with group_by("weekday"))."""
    return [pl.col("date").n_unique().alias("day_count")]
