"""
stats/descriptive.py — Basic descriptive statistics
====================================================
Small, pure helpers shared by the HRV analyser and the accuracy layer.
All functions accept any sequence of numbers and never mutate it.

Empty input is treated as "no information" rather than an error: the
centre/spread helpers return 0.0 so that callers can score data quality
without special-casing every edge.
"""

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from config import Z_SCORES


@dataclass(frozen=True)
class ConfidenceInterval:
    mean: float
    lower: float
    upper: float
    margin: float


def round_half_up(value: float, decimals: int = 0) -> float:
    """Round halves up (2.5 → 3, −2.5 → −2), unlike the built-in `round()`."""
    scale = 10.0 ** decimals
    return float(np.floor(value * scale + 0.5) / scale)


def median(data: Sequence[float]) -> float:
    """Median of `data`; 0.0 for an empty sequence."""
    if len(data) == 0:
        return 0.0
    return float(np.median(np.asarray(data, dtype=np.float64)))


def standard_deviation(data: Sequence[float], sample: bool = True) -> float:
    """
    Standard deviation of `data`.

    Parameters
    ----------
    data   : sequence of float
    sample : bool   True → sample estimate (n − 1), False → population (n).

    Returns 0.0 when fewer than two values are available.
    """
    if len(data) < 2:
        return 0.0
    return float(np.std(np.asarray(data, dtype=np.float64), ddof=1 if sample else 0))


def coefficient_of_variation(data: Sequence[float]) -> float:
    """Sample standard deviation relative to the mean, as a percentage."""
    if len(data) == 0:
        return 0.0
    mean = float(np.mean(np.asarray(data, dtype=np.float64)))
    if mean == 0:
        return 0.0
    return standard_deviation(data) / mean * 100.0


def confidence_interval(data: Sequence[float], level: float = 0.95) -> ConfidenceInterval:
    """
    Gaussian-approximation confidence interval for the mean.

    Only the 95 % (z = 1.96) and 99 % (z = 2.576) levels are tabulated;
    any other level falls back to 1.96.
    """
    n = len(data)
    if n == 0:
        return ConfidenceInterval(mean=0.0, lower=0.0, upper=0.0, margin=0.0)

    mean = float(np.mean(np.asarray(data, dtype=np.float64)))
    z = Z_SCORES.get(level, 1.96)
    margin = z * standard_deviation(data) / np.sqrt(n)
    return ConfidenceInterval(
        mean=mean,
        lower=mean - margin,
        upper=mean + margin,
        margin=float(margin),
    )


def moving_average(data: Sequence[float], window: int = 5) -> list[float]:
    """
    Centred moving average with a shrinking window at the edges.

    A window at least as long as the data collapses to a single overall mean.
    """
    n = len(data)
    if n == 0:
        return []
    values = np.asarray(data, dtype=np.float64)
    if window >= n:
        return [float(values.mean())]

    half = window // 2
    # Prefix sums give O(n) window means
    csum = np.concatenate(([0.0], np.cumsum(values)))
    idx = np.arange(n)
    start = np.maximum(0, idx - half)
    end = np.minimum(n, idx + half + 1)
    return list((csum[end] - csum[start]) / (end - start))
