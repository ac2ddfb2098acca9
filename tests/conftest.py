"""Shared fixtures: build day x hour rows without a CSV."""

from typing import Any, Callable

import polars as pl
import pytest

HourValues = dict[int, float] | list[float] | None


def _expand(values: HourValues) -> list[float]:
    if values is None:
        return [0.0] * 24
    if isinstance(values, dict):
        return [float(values.get(h, 0.0)) for h in range(24)]
    assert len(values) == 24
    return [float(v) for v in values]


def _day_rows(
    day: str,
    revenue: HourValues = None,
    impressions: HourValues = None,
    clicks: HourValues = None,
    sessions: HourValues = None,
) -> list[dict[str, Any]]:
    """24 rows for one date; values given per hour as a dict or a full list."""
    series = {
        "revenue": _expand(revenue),
        "impressions": _expand(impressions),
        "clicks": _expand(clicks),
        "sessions": _expand(sessions),
    }
    return [
        {"date": day, "hour": h, **{name: values[h] for name, values in series.items()}}
        for h in range(24)
    ]


@pytest.fixture
def day_rows() -> Callable[..., list[dict[str, Any]]]:
    """Factory for the 24 hourly rows of a single day."""
    return _day_rows


@pytest.fixture
def to_frame() -> Callable[[list[dict[str, Any]]], pl.DataFrame]:
    """Rows -> normalized-layout DataFrame."""

    def build(rows: list[dict[str, Any]]) -> pl.DataFrame:
        return pl.DataFrame(
            rows,
            schema={
                "date": pl.Utf8,
                "hour": pl.Int64,
                "revenue": pl.Float64,
                "impressions": pl.Float64,
                "clicks": pl.Float64,
                "sessions": pl.Float64,
            },
        )

    return build
