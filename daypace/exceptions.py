"""Exceptions raised while loading hourly data and building statistics."""

from typing import Any


class PacingError(Exception):
    """Root of every error raised by daypace."""


class IngestionError(PacingError):
    """An export could not be turned into normalized hourly rows."""


class SchemaLoadError(IngestionError):
    """The column alias registry is missing or unreadable."""


class UnsupportedFileError(IngestionError):
    """Input file type is not CSV or Excel."""

    def __init__(self, suffix: str):
        self.suffix = suffix
        super().__init__(
            f"Unsupported file type: {suffix or '<none>'} (expected .csv, .xlsx or .xls)"
        )


class DataValidationError(IngestionError):
    """Normalized rows violate the HourlyRecord model."""

    def __init__(self, errors: list[dict[str, Any]], row_count: int):
        self.errors = errors
        self.row_count = row_count
        first = errors[0] if errors else None
        detail = (
            f" First: row {first['row']} ({first.get('date')}, hour {first.get('hour')})"
            f" {'; '.join(first['errors'])}"
            if first
            else ""
        )
        super().__init__(f"{len(errors)} of {row_count} hourly rows are invalid.{detail}")


class ColumnMappingError(IngestionError):
    """No alias matched a required column (date or hour)."""

    def __init__(self, missing_columns: list[str], available_columns: list[str]):
        self.missing_columns = missing_columns
        self.available_columns = available_columns
        shown = ", ".join(available_columns[:10])
        more = "" if len(available_columns) <= 10 else ", ..."
        super().__init__(
            f"Could not find column(s) {', '.join(missing_columns)} in export "
            f"[{shown}{more}]"
        )


class StatisticsBuildError(PacingError):
    """Building weekday statistics failed unexpectedly."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Failed to build stats: {reason}")
