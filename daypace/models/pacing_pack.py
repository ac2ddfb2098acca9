"""PacingPack - consolidated forecast and backtest output for one query."""

import json
import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from ..analytics.models import WEEKDAY_NAMES, BacktestResult, ForecastResult


class PacingQuery(BaseModel):
    """Request parameters for a forecast + backtest run."""

    weekday: int = Field(ge=0, le=6)  # 0=Sun .. 6=Sat
    checkpoint_hour: int = Field(12, ge=0, le=23)
    include_current_hour: bool = True
    revenue_so_far: Optional[float] = None
    impressions_so_far: Optional[float] = None
    clicks_so_far: Optional[float] = None
    sessions_so_far: Optional[float] = None


def _num(value: float | None, digits: int | None = None) -> float | None:
    """JSON-safe number: non-finite values become None."""
    if value is None or not math.isfinite(value):
        return None
    return round(value, digits) if digits is not None else value


@dataclass
class PacingPack:
    """Forecast, backtest and dataset context for a single query.

    All data is pre-computed; to_dict() is JSON-serializable.
    """

    # Metadata
    generated_at: datetime
    query: PacingQuery
    total_days: int
    weekday_day_count: int
    date_range: tuple[date, date] | None

    # Results (None when unavailable)
    forecast: ForecastResult | None
    backtest: BacktestResult | None

    @property
    def weekday_name(self) -> str:
        return WEEKDAY_NAMES[self.query.weekday]

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "meta": {
                "generated_at": self.generated_at.isoformat(),
                "weekday": self.weekday_name,
                "total_days": self.total_days,
                "weekday_days": self.weekday_day_count,
                "date_range": (
                    {
                        "start": self.date_range[0].isoformat(),
                        "end": self.date_range[1].isoformat(),
                    }
                    if self.date_range
                    else None
                ),
            },
            "query": self.query.model_dump(),
            "forecast": self._forecast_dict(),
            "backtest": self._backtest_dict(),
        }

    def _forecast_dict(self) -> dict[str, Any] | None:
        f = self.forecast
        if f is None:
            return None
        return {
            "checkpoint_hour": f.checkpoint_hour,
            "effective_hour": f.effective_hour,
            "revenue_so_far": _num(f.revenue_so_far),
            "eod": _num(f.eod, 2),
            "range": {"low": _num(f.low, 2), "high": _num(f.high, 2)},
            "pacing": {
                "verdict": f.pacing.value,
                "expected_by_now": _num(f.expected_by_now, 2),
                "delta": _num(f.delta, 2),
                "delta_pct": _num(f.delta_pct * 100, 2),  # as percentage
            },
            "warnings": [
                {
                    "metric": w.metric,
                    "kind": w.kind,
                    "direction": w.direction,
                    "deviation_pct": _num(w.deviation_pct * 100, 2),
                    "message": w.message,
                }
                for w in f.warnings
            ],
            "hours": [
                {
                    "hour": h.hour,
                    "cumulative_revenue": _num(h.expected_cumulative_revenue, 2),
                    "hourly_revenue": _num(h.expected_hourly_revenue, 2),
                    "cumulative_range": [_num(h.cumulative_low, 2), _num(h.cumulative_high, 2)],
                    "hourly_range": [_num(h.hourly_low, 2), _num(h.hourly_high, 2)],
                    "cumulative_impressions": _num(h.expected_cumulative_impressions, 0),
                    "cumulative_clicks": _num(h.expected_cumulative_clicks, 0),
                    "cumulative_sessions": _num(h.expected_cumulative_sessions, 0),
                }
                for h in f.hours
            ],
        }

    def _backtest_dict(self) -> dict[str, Any] | None:
        b = self.backtest
        if b is None:
            return None
        return {
            "days": b.day_count,
            "include_current_hour": b.include_current_hour,
            "checkpoints": [
                {
                    "hour": r.checkpoint_hour,
                    "effective_hour": r.effective_hour,
                    "samples": r.sample_count,
                    "mape_pct": _num(r.mape * 100, 2),
                    "bias_pct": _num(r.bias * 100, 2),
                }
                for r in b.rows
            ],
        }

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, default=str)

    def get_headline(self) -> dict[str, Any]:
        """Condensed summary: estimate, range, verdict and accuracy at the checkpoint."""
        f = self.forecast
        accuracy = None
        if self.backtest and f:
            nearest = min(
                self.backtest.rows,
                key=lambda r: abs(r.effective_hour - f.effective_hour),
            )
            accuracy = {
                "checkpoint_hour": nearest.checkpoint_hour,
                "mape_pct": _num(nearest.mape * 100, 1),
            }
        return {
            "weekday": self.weekday_name,
            "eod": _num(f.eod, 0) if f else None,
            "low": _num(f.low, 0) if f else None,
            "high": _num(f.high, 0) if f else None,
            "pacing": f.pacing.value if f else None,
            "warning_count": len(f.warnings) if f else 0,
            "backtest_accuracy": accuracy,
        }
