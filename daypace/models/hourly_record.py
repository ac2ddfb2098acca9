"""Pydantic models for hourly record validation."""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field


class HourlyRecord(BaseModel):
    """Single day x hour row after cleaning.

    Metrics default to 0 when the source omits them.
    """

    model_config = ConfigDict(extra="ignore")

    date: date
    hour: int = Field(ge=0, le=23)

    # Performance metrics
    revenue: float = Field(default=0.0, ge=0)
    impressions: float = Field(default=0.0, ge=0)
    clicks: float = Field(default=0.0, ge=0)
    sessions: float = Field(default=0.0, ge=0)
