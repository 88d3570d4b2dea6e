"""
stats/robust.py — Outlier rejection and robust location estimates
==================================================================
Camera-derived measurements arrive unlabelled and noisy.  The helpers
here down-weight or discard the occasional wild value before it reaches
a mean:

    remove_outliers   — IQR fence (Tukey), order preserving
    trimmed_mean      — drop a percentage from each tail, then average
    robust_mean       — median of the means of consecutive chunks
    robust_statistics — one summary combining all of the above

Quartiles are read directly from the sorted data at positions
floor(n·0.25) and floor(n·0.75) (no interpolation), which keeps the fence
stable for the short series typical of a single screening session.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np

from config import IQR_FACTOR, ROBUST_SUBSET_SIZE, TRIM_PERCENT
from stats.descriptive import (
    ConfidenceInterval,
    coefficient_of_variation,
    confidence_interval,
    median,
    standard_deviation,
)


@dataclass(frozen=True)
class RobustSummary:
    """Result of `robust_statistics`; all fields are 0 for empty input."""
    mean: float = 0.0
    median: float = 0.0
    trimmed_mean: float = 0.0
    robust_mean: float = 0.0
    std_dev: float = 0.0
    cv: float = 0.0
    min: float = 0.0
    max: float = 0.0
    q1: float = 0.0
    q3: float = 0.0
    iqr: float = 0.0
    outlier_count: int = 0
    sample_count: int = 0
    confidence_interval: ConfidenceInterval = field(
        default_factory=lambda: ConfidenceInterval(0.0, 0.0, 0.0, 0.0)
    )


def _quartiles(data: Sequence[float]) -> tuple[float, float]:
    ordered = sorted(data)
    n = len(ordered)
    return float(ordered[int(n * 0.25)]), float(ordered[int(n * 0.75)])


def remove_outliers(data: Sequence[float], factor: float = IQR_FACTOR) -> list[float]:
    """
    Drop values outside [Q1 − factor·IQR, Q3 + factor·IQR].

    Fewer than four points give no meaningful IQR, so the data is returned
    unchanged.  Surviving values keep their original order.
    """
    if len(data) < 4:
        return list(data)

    q1, q3 = _quartiles(data)
    iqr = q3 - q1
    lower = q1 - factor * iqr
    upper = q3 + factor * iqr
    return [x for x in data if lower <= x <= upper]


def trimmed_mean(data: Sequence[float], trim_percent: float = TRIM_PERCENT) -> float:
    """Mean after discarding `trim_percent` % of values from each end."""
    if len(data) == 0:
        return 0.0

    ordered = sorted(data)
    trim = int(len(ordered) * trim_percent / 100.0)
    kept = ordered[trim:len(ordered) - trim]
    if not kept:
        return median(data)
    return float(np.mean(kept))


def robust_mean(data: Sequence[float], subset_size: int = ROBUST_SUBSET_SIZE) -> float:
    """Median of the means of consecutive `subset_size` chunks."""
    if len(data) == 0:
        return 0.0
    if len(data) <= subset_size:
        return median(data)

    means = [
        float(np.mean(data[i:i + subset_size]))
        for i in range(0, len(data), subset_size)
    ]
    return median(means)


def robust_statistics(data: Sequence[float], reject_outliers: bool = True) -> RobustSummary:
    """
    Summarise `data` after dropping non-finite values and (optionally)
    IQR outliers.
    """
    values = np.asarray(data, dtype=np.float64)
    valid = [float(x) for x in values[np.isfinite(values)]]
    if not valid:
        return RobustSummary()

    processed = valid
    outlier_count = 0
    if reject_outliers and len(valid) >= 4:
        processed = remove_outliers(valid)
        outlier_count = len(valid) - len(processed)

    q1, q3 = _quartiles(processed)
    return RobustSummary(
        mean=float(np.mean(processed)),
        median=median(processed),
        trimmed_mean=trimmed_mean(processed),
        robust_mean=robust_mean(processed),
        std_dev=standard_deviation(processed),
        cv=coefficient_of_variation(processed),
        min=min(processed),
        max=max(processed),
        q1=q1,
        q3=q3,
        iqr=q3 - q1,
        outlier_count=outlier_count,
        sample_count=len(processed),
        confidence_interval=confidence_interval(processed),
    )
