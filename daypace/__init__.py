"""Weekday-aware intra-day revenue pacing and end-of-day forecasting."""

__version__ = "0.1.0"
