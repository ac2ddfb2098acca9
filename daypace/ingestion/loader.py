"""Main record normalization pipeline."""

import logging
from pathlib import Path
from typing import Any, Iterable, Mapping

import polars as pl
import yaml
from pydantic import BaseModel

from ..exceptions import ColumnMappingError, SchemaLoadError, UnsupportedFileError
from .cleaner import apply_cleaning, drop_invalid_rows
from .validator import validate_dataframe

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA_PATH = Path(__file__).parent.parent / "config" / "schema_registry.yaml"


class RecordNormalizer:
    """Pipeline for loading and normalizing day x hour exports.

    Column names are matched case-insensitively against the aliases in the
    schema registry, numbers are coerced (bad values -> 0) and rows without
    a date or a valid hour are dropped.

    Usage:
        normalizer = RecordNormalizer()
        df = normalizer.ingest(Path("data/day_hour.csv"))
    """

    def __init__(self, schema_path: Path | None = None, schema_name: str = "hourly_report"):
        self.schema_path = schema_path or DEFAULT_SCHEMA_PATH
        self.schema = self._load_schema(self.schema_path)[schema_name]
        self.metric_columns: list[str] = list(self.schema["metric_columns"])

    def _load_schema(self, path: Path) -> dict[str, Any]:
        """Load schema configuration from YAML."""
        try:
            with open(path) as f:
                return yaml.safe_load(f)
        except Exception as e:
            raise SchemaLoadError(f"Failed to load schema from {path}: {e}") from e

    @property
    def output_columns(self) -> list[str]:
        return ["date", "hour", *self.metric_columns]

    def ingest(self, file_path: Path, validate: bool = False) -> pl.DataFrame:
        """Full pipeline: Load -> Resolve columns -> Clean -> Filter -> Validate.

        Args:
            file_path: Path to Excel or CSV file
            validate: Whether to run Pydantic validation (default: False)

        Returns:
            Normalized Polars DataFrame
        """
        df = self.load(file_path)
        normalized = self.normalize(df)

        if validate:
            validate_dataframe(normalized)

        logger.info(
            "Ingested %s: %d of %d rows kept", file_path.name, len(normalized), len(df)
        )
        return normalized

    def load(self, path: Path) -> pl.DataFrame:
        """Load data from Excel or CSV. CSV columns are read as strings."""
        suffix = path.suffix.lower()
        if suffix in (".xlsx", ".xls"):
            return pl.read_excel(path)
        elif suffix == ".csv":
            return pl.read_csv(path, infer_schema=False)
        else:
            raise UnsupportedFileError(suffix)

    def normalize(self, df: pl.DataFrame) -> pl.DataFrame:
        """Rename, clean and filter a raw frame into the internal layout."""
        df = self._resolve_columns(df)
        df = apply_cleaning(df, "date", "hour", self.metric_columns)
        valid = drop_invalid_rows(df, "date", "hour")

        dropped = len(df) - len(valid)
        if dropped:
            logger.debug("Dropped %d rows with a blank date or invalid hour", dropped)

        return valid.select(self.output_columns)

    def records_to_frame(
        self, records: Iterable[Mapping[str, Any] | BaseModel]
    ) -> pl.DataFrame:
        """Normalize in-memory records (dicts or HourlyRecord models).

        Values are stringified first so records go through the same
        coercion as CSV cells.
        """
        rows = [
            {
                key: None if value is None else str(value)
                for key, value in (
                    r.model_dump() if isinstance(r, BaseModel) else r
                ).items()
            }
            for r in records
        ]
        if not rows:
            raw = pl.DataFrame(schema={c: pl.Utf8 for c in self.output_columns})
        else:
            raw = pl.from_dicts(rows, infer_schema_length=None)
        return self.normalize(raw)

    def _resolve_columns(self, df: pl.DataFrame) -> pl.DataFrame:
        """Select and rename columns from aliases to internal names.

        column_aliases: {internal_name: [alias, ...]}, matched case-insensitively
        """
        by_lower: dict[str, str] = {}
        for col in df.columns:
            by_lower.setdefault(col.strip().lower(), col)

        rename_dict: dict[str, str] = {}
        for internal, aliases in self.schema["column_aliases"].items():
            for alias in aliases:
                raw = by_lower.get(alias.lower())
                if raw is not None:
                    rename_dict[raw] = internal
                    break

        missing = [c for c in self.schema["required_columns"] if c not in rename_dict.values()]
        if missing:
            raise ColumnMappingError(missing, df.columns)

        return df.select(list(rename_dict)).rename(rename_dict)
