"""
features/hr.py — Heart rate & signal confidence
================================================
**BPM from peak timing**
   The intervals between consecutive peak timestamps are averaged and
   converted with BPM = 60000 / mean_interval_ms.  These are pixel-
   intensity peaks rather than ECG R-waves, but downstream code treats
   the intervals exactly like RR intervals.

**Confidence from signal amplitude**
   confidence = min(1, std(signal) / 10).  A flat trace (no visible
   pulsation) scores near zero; larger oscillation raises the score up to
   a fixed ceiling.  This is a heuristic, not a calibrated SNR.

Clipping
--------
BPM is hard-clipped to [30, 200] — physiologically implausible values are
almost certainly artefacts.  A single 10 ms interval therefore reports
200 BPM, never 6000.
"""

from collections.abc import Sequence

import numpy as np

from config import BPM_MAX, BPM_MIN, CONFIDENCE_STD_CEILING
from stats.descriptive import round_half_up
from utils.logger import get_logger

logger = get_logger("features.hr")


def intervals_from_timestamps(timestamps: Sequence[float]) -> list[float]:
    """Successive differences (ms) of ordered peak timestamps."""
    if len(timestamps) < 2:
        return []
    return np.diff(np.asarray(timestamps, dtype=np.float64)).tolist()


def bpm_from_intervals(intervals_ms: Sequence[float]) -> int:
    """
    Mean interval → whole BPM in [BPM_MIN, BPM_MAX]; 0 when no usable
    interval exists.
    """
    if len(intervals_ms) == 0:
        return 0
    mean_interval = float(np.mean(intervals_ms))
    if mean_interval <= 0:
        # Duplicate or unordered timestamps: faster than anything physical
        return BPM_MAX
    bpm = 60000.0 / mean_interval
    return int(np.clip(round_half_up(bpm), BPM_MIN, BPM_MAX))


def estimate_bpm(peak_timestamps: Sequence[float]) -> int:
    """
    Estimate heart rate from the timestamps (ms) of detected peaks.

    Returns 0 when fewer than two peaks are available; callers must not
    emit a reading in that case.
    """
    bpm = bpm_from_intervals(intervals_from_timestamps(peak_timestamps))
    logger.debug("BPM estimate from %d peaks: %d", len(peak_timestamps), bpm)
    return bpm


def estimate_confidence(signal: Sequence[float] | np.ndarray) -> float:
    """Signal-quality confidence in [0, 1], rounded to two decimals."""
    x = np.asarray(signal, dtype=np.float64)
    if x.size == 0:
        return 0.0
    std = float(x.std())   # population std
    if not np.isfinite(std):
        return 0.0
    return round_half_up(min(1.0, std / CONFIDENCE_STD_CEILING), 2)
