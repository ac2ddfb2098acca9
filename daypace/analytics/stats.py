"""Distribution primitives shared by the statistics builder and forecaster."""

import math

import numpy as np

from .models import DistributionSummary

NAN = float("nan")

EMPTY_SUMMARY = DistributionSummary(p25=NAN, p50=NAN, p75=NAN, mean=NAN, std=NAN)


def safe_div(numerator: float, denominator: float) -> float:
    """Divide, returning NaN instead of raising when the denominator is 0."""
    if not denominator:
        return NAN
    return numerator / denominator


def safe_div_array(numerator: np.ndarray, denominator: np.ndarray) -> np.ndarray:
    """Element-wise safe_div. Zero denominators give NaN, never 0 or inf.

    Args:
        numerator: Array of shape (days, hours)
        denominator: Array broadcastable against numerator (e.g. (days, 1))

    Returns:
        Float array with NaN wherever the denominator is 0.
    """
    num = np.asarray(numerator, dtype=float)
    den = np.broadcast_to(np.asarray(denominator, dtype=float), num.shape)
    out = np.full(num.shape, np.nan)
    np.divide(num, den, out=out, where=den != 0)
    return out


def is_positive_finite(value: float | None) -> bool:
    """True for a real number that is finite and > 0."""
    if value is None:
        return False
    try:
        value = float(value)
    except (TypeError, ValueError):
        return False
    return math.isfinite(value) and value > 0


def finite_or(value: float, default: float) -> float:
    return value if math.isfinite(value) else default


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def quantile(values: list[float] | np.ndarray, q: float) -> float:
    """Empirical quantile with linear interpolation at index (n - 1) * q.

    Args:
        values: Numbers to summarize (any order)
        q: Quantile in [0, 1]

    Returns:
        Interpolated value, or NaN for empty input or input containing NaN.
    """
    arr = np.asarray(values, dtype=float)
    if arr.size == 0 or np.isnan(arr).any():
        return NAN
    return float(np.quantile(arr, q, method="linear"))


def summarize(values: list[float] | np.ndarray) -> DistributionSummary:
    """Collapse a sequence into quartiles, mean and population std.

    Non-finite values are not filtered: a NaN anywhere makes every field NaN.
    """
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        return EMPTY_SUMMARY

    mean = float(np.mean(arr))
    # Population std (ddof=0); nan/inf propagate through the mean
    std = float(np.std(arr)) if math.isfinite(mean) else NAN

    return DistributionSummary(
        p25=quantile(arr, 0.25),
        p50=quantile(arr, 0.50),
        p75=quantile(arr, 0.75),
        mean=mean,
        std=std,
    )


def summarize_columns(matrix: np.ndarray) -> tuple[DistributionSummary, ...]:
    """Summarize each column of a (days, hours) matrix independently."""
    return tuple(summarize(matrix[:, h]) for h in range(matrix.shape[1]))
