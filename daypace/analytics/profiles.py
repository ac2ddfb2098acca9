"""Day aggregator: hourly rows -> 24-slot daily profiles."""

import logging
from datetime import date

import polars as pl

from ..ingestion.cleaner import clean_date_column, clean_metric_column, drop_invalid_rows
from .expressions import METRIC_COLUMNS, weekday_expr
from .models import EMPTY_HOUR, HOURS_PER_DAY, DayProfile, HourlyMetrics

logger = logging.getLogger(__name__)


def build_day_profiles(df: pl.DataFrame) -> list[DayProfile]:
    """Group normalized hourly rows into one DayProfile per date.

    Rows without a date or with an hour outside 0..23 are dropped. When a
    (date, hour) pair repeats, the later row wins.

    Args:
        df: Frame with date, hour, revenue, impressions, clicks, sessions

    Returns:
        DayProfiles sorted by date. Hours absent from the input are zero.
    """
    cleaned = df.with_columns(
        clean_date_column("date", df.schema["date"]),
        *[clean_metric_column(m) for m in METRIC_COLUMNS],
    )
    valid = drop_invalid_rows(cleaned, "date", "hour").with_columns(
        weekday_expr("date")
    )

    dropped = len(df) - len(valid)
    if dropped:
        logger.debug("Dropped %d rows with a blank date or invalid hour", dropped)

    slots: dict[date, list[HourlyMetrics]] = {}
    weekdays: dict[date, int] = {}

    # Input order is preserved, so overwriting gives last-write-wins
    for row in valid.select(["date", "weekday", "hour", *METRIC_COLUMNS]).iter_rows(
        named=True
    ):
        day = row["date"]
        if day not in slots:
            slots[day] = [EMPTY_HOUR] * HOURS_PER_DAY
            weekdays[day] = row["weekday"]
        slots[day][row["hour"]] = HourlyMetrics(
            revenue=row["revenue"],
            impressions=row["impressions"],
            clicks=row["clicks"],
            sessions=row["sessions"],
        )

    return [
        DayProfile(date=day, weekday=weekdays[day], hours=tuple(slots[day]))
        for day in sorted(slots)
    ]
