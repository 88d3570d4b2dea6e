"""
rppg/peaks.py — Local-maximum peak detection
=============================================
Locates pulse peaks in a raw channel trace without any prior knowledge of
the noise floor:

    1. Subtract the global mean (removes the DC skin-tone level).
    2. threshold = ratio × max |sample|   (ratio = 0.1 by default)
    3. Index i (1 ≤ i ≤ n−2) is a peak iff
           s[i] > s[i−1]  and  s[i] > s[i+1]  and  s[i] > threshold

Strict inequalities mean a flat plateau never yields a peak.  Returned
indices are strictly increasing.
"""

from collections.abc import Sequence

import numpy as np

from config import PEAK_THRESHOLD_RATIO


def detect_peaks(signal: Sequence[float] | np.ndarray, threshold_ratio: float = PEAK_THRESHOLD_RATIO) -> list[int]:
    """
    Parameters
    ----------
    signal          : 1-D sequence of channel intensities.
    threshold_ratio : fraction of the largest absolute de-meaned sample that
                      a peak must exceed.

    Returns
    -------
    peaks : list[int]   Ordered indices into `signal`.
    """
    x = np.asarray(signal, dtype=np.float64)
    if x.size < 3:
        return []

    x = x - x.mean()
    threshold = threshold_ratio * np.abs(x).max()

    centre = x[1:-1]
    is_peak = (centre > x[:-2]) & (centre > x[2:]) & (centre > threshold)
    return (np.flatnonzero(is_peak) + 1).tolist()
