"""
features/hrv.py — Heart Rate Variability (HRV) time-domain features
=====================================================================
Computes the standard time-domain HRV metrics from a sequence of RR
intervals (here: intervals between detected PPG peaks, in ms):

    SDNN  — population standard deviation of the intervals
    RMSSD — root mean square of successive differences
    pNN50 — percentage of successive differences with |Δ| > 50 ms

plus mean / min / max RR, and maps RMSSD onto a stress band
(`model.stress.classify_stress`).

Clinical context (for reference only — this system is NOT clinical)
-------------------------------------------------------------------
* RMSSD is dominated by parasympathetic (vagal) tone and is the preferred
  short-term HRV metric.
* SDNN reflects overall variability; very low SDNN earns an additional
  recommendation to have cardiovascular health checked.

⚠️  Peak timing from a webcam is far coarser than an ECG R-wave.  The
    values are suitable for trend comparisons only.

Insufficient data
-----------------
Fewer than `HRV_MIN_INTERVALS` intervals is not an error: a zeroed
sentinel with stress level "very-high" and an explanatory interpretation
is returned instead.
"""

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from config import (
    HRV_MIN_INTERVALS,
    LOW_SDNN_MS,
    NN50_THRESHOLD_MS,
    RR_HISTORY_MAX,
    RR_MAX_MS,
    RR_MIN_MS,
)
from model.stress import StressLevel, classify_stress
from stats.descriptive import round_half_up, standard_deviation
from utils.logger import get_logger

logger = get_logger("features.hrv")

INSUFFICIENT_DATA_INTERPRETATION = (
    f"Insufficient data for HRV analysis. Need at least {HRV_MIN_INTERVALS} heartbeats."
)
LOW_SDNN_RECOMMENDATION = "Low variability detected - consider cardiovascular health check"


@dataclass(frozen=True)
class HRVMetrics:
    rmssd: float
    sdnn: float
    pnn50: float
    mean_rr: float
    min_rr: float
    max_rr: float
    stress_level: StressLevel
    hrv_score: int
    interpretation: str
    recommendations: tuple[str, ...]
    num_intervals: int = 0

    @property
    def valid(self) -> bool:
        return self.num_intervals >= HRV_MIN_INTERVALS


def insufficient_hrv(num_intervals: int = 0) -> HRVMetrics:
    """The documented sentinel returned when too few intervals exist."""
    return HRVMetrics(
        rmssd=0.0,
        sdnn=0.0,
        pnn50=0.0,
        mean_rr=0.0,
        min_rr=0.0,
        max_rr=0.0,
        stress_level="very-high",
        hrv_score=0,
        interpretation=INSUFFICIENT_DATA_INTERPRETATION,
        recommendations=(
            "Record for longer duration",
            "Ensure stable lighting",
            "Keep face still",
        ),
        num_intervals=num_intervals,
    )


def rr_intervals_from_peaks(
    peak_timestamps: Sequence[float],
    min_ms: float = RR_MIN_MS,
    max_ms: float = RR_MAX_MS,
    limit: int = RR_HISTORY_MAX,
) -> list[float]:
    """
    RR intervals (ms) between consecutive peak timestamps.

    Intervals outside the open range (min_ms, max_ms) are discarded as
    detection artefacts and only the most recent `limit` are kept.
    """
    if len(peak_timestamps) < 2:
        return []
    diffs = np.diff(np.asarray(peak_timestamps, dtype=np.float64))
    valid = diffs[(diffs > min_ms) & (diffs < max_ms)]
    return valid[-limit:].tolist()


def compute_hrv(rr_intervals: Sequence[float]) -> HRVMetrics:
    """
    Compute time-domain HRV features from RR intervals.

    Parameters
    ----------
    rr_intervals : sequence of float
        Successive RR intervals in **milliseconds**.

    Returns
    -------
    HRVMetrics
        The insufficient-data sentinel when fewer than HRV_MIN_INTERVALS
        intervals are given.
    """
    n = len(rr_intervals)
    if n < HRV_MIN_INTERVALS:
        logger.warning(
            "Only %d RR intervals available (need %d for HRV). Returning sentinel.",
            n,
            HRV_MIN_INTERVALS,
        )
        return insufficient_hrv(n)

    rr = np.asarray(rr_intervals, dtype=np.float64)
    mean_rr = float(rr.mean())

    # Successive differences: ΔRR_i = RR_{i+1} − RR_i
    successive = np.diff(rr)
    rmssd = float(np.sqrt(np.mean(successive ** 2)))
    sdnn = standard_deviation(rr, sample=False)
    pnn50 = float(np.sum(np.abs(successive) > NN50_THRESHOLD_MS) / successive.size * 100.0)

    band = classify_stress(rmssd)
    recommendations = band.recommendations
    if sdnn < LOW_SDNN_MS:
        recommendations = recommendations + (LOW_SDNN_RECOMMENDATION,)

    logger.info(
        "HRV — RMSSD=%.1f ms, SDNN=%.1f ms, pNN50=%.1f%%, mean_RR=%.1f ms (%d intervals)",
        rmssd, sdnn, pnn50, mean_rr, n,
    )

    return HRVMetrics(
        rmssd=round_half_up(rmssd, 2),
        sdnn=round_half_up(sdnn, 2),
        pnn50=round_half_up(pnn50, 2),
        mean_rr=round_half_up(mean_rr, 2),
        min_rr=float(rr.min()),
        max_rr=float(rr.max()),
        stress_level=band.level,
        hrv_score=band.score,
        interpretation=band.interpretation,
        recommendations=recommendations,
        num_intervals=n,
    )
