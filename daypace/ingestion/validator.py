"""Row-level checks for normalized hourly data."""

from typing import Any

import polars as pl
from pydantic import ValidationError

from ..exceptions import DataValidationError
from ..models.hourly_record import HourlyRecord


def _describe(exc: ValidationError) -> list[str]:
    """Flatten pydantic errors to 'field: message' strings."""
    return [
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
        for err in exc.errors()
    ]


def validate_dataframe(df: pl.DataFrame, max_errors: int | None = None) -> None:
    """Check every normalized row against HourlyRecord.

    Args:
        df: Output of RecordNormalizer.normalize()
        max_errors: Stop collecting after this many failing rows

    Raises:
        DataValidationError: If any row fails, e.g. a negative metric
    """
    failures: list[dict[str, Any]] = []

    for i, row in enumerate(df.iter_rows(named=True)):
        try:
            HourlyRecord.model_validate(row)
        except ValidationError as e:
            failures.append(
                {
                    "row": i,
                    "date": row.get("date"),
                    "hour": row.get("hour"),
                    "errors": _describe(e),
                }
            )
            if max_errors is not None and len(failures) >= max_errors:
                break

    if failures:
        raise DataValidationError(failures, len(df))
