from .cleaner import apply_cleaning, drop_invalid_rows
from .loader import RecordNormalizer
from .validator import validate_dataframe

__all__ = ["RecordNormalizer", "apply_cleaning", "drop_invalid_rows", "validate_dataframe"]
