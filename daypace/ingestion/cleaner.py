"""Data cleaning functions using Polars expressions."""

import polars as pl

HOURS_PER_DAY = 24


def clean_date_column(col_name: str, dtype: pl.DataType) -> pl.Expr:
    """Convert to date, handling pre-parsed dates from Excel.

    Strings keep their first 10 characters and are parsed as YYYY-MM-DD,
    so '2024-03-05T00:00:00Z' and '2024-03-05 13:00' both work. Blank or
    unparsable values become null.
    """
    col = pl.col(col_name)

    if dtype == pl.Date:
        return col.alias(col_name)
    elif dtype.base_type() == pl.Datetime:
        return col.dt.date().alias(col_name)
    else:
        return (
            col.cast(pl.Utf8)
            .str.strip_chars()
            .str.slice(0, 10)
            .str.to_date("%Y-%m-%d", strict=False)
            .alias(col_name)
        )


def clean_hour_column(col_name: str = "hour") -> pl.Expr:
    """Convert to float; non-numeric values become null.

    Kept as float so fractional hours can be rejected by valid_hour_expr.
    """
    return (
        pl.col(col_name)
        .cast(pl.Utf8)
        .str.strip_chars()
        .cast(pl.Float64, strict=False)
        .alias(col_name)
    )


def clean_metric_column(col_name: str) -> pl.Expr:
    """Convert to float; null, non-numeric and non-finite values become 0."""
    col = pl.col(col_name).cast(pl.Utf8).str.strip_chars().cast(pl.Float64, strict=False)
    return pl.when(col.is_finite()).then(col).otherwise(0.0).alias(col_name)


def valid_hour_expr(col_name: str = "hour") -> pl.Expr:
    """Hour is present, integral and within 0..23."""
    col = pl.col(col_name).cast(pl.Float64, strict=False)
    return (
        col.is_not_null()
        & col.is_between(0, HOURS_PER_DAY - 1)
        & (col.floor() == col)
    )


def valid_row_expr(date_col: str = "date", hour_col: str = "hour") -> pl.Expr:
    """Rows worth keeping: a parsed date and a usable hour."""
    return pl.col(date_col).is_not_null() & valid_hour_expr(hour_col)


def apply_cleaning(
    df: pl.DataFrame,
    date_col: str,
    hour_col: str,
    metric_cols: list[str],
) -> pl.DataFrame:
    """Apply all cleaning transformations to DataFrame.

    Metric columns missing from the frame are added as zeros.
    """
    existing_cols = set(df.columns)
    schema = df.schema
    exprs: list[pl.Expr] = [
        clean_date_column(date_col, schema[date_col]),
        clean_hour_column(hour_col),
    ]

    for col in metric_cols:
        if col in existing_cols:
            exprs.append(clean_metric_column(col))
        else:
            exprs.append(pl.lit(0.0, dtype=pl.Float64).alias(col))

    return df.with_columns(exprs)


def drop_invalid_rows(df: pl.DataFrame, date_col: str, hour_col: str) -> pl.DataFrame:
    """Drop rows without a date or with an unusable hour; hour becomes Int64."""
    return df.filter(valid_row_expr(date_col, hour_col)).with_columns(
        pl.col(hour_col).cast(pl.Float64).cast(pl.Int64)
    )
