"""
rppg/filters.py — Butterworth bandpass for the display waveform
================================================================
Peak detection runs on the raw, mean-removed channel.  Visualisation
clients, however, want a clean pulse trace, so `PulsePipeline` can hand
out a zero-phase bandpass-filtered copy of the window.

0.7–4.0 Hz covers 42–240 BPM while rejecting slow lighting drift and
fast sensor noise.
"""

import warnings

import numpy as np
from scipy.signal import butter, filtfilt

from config import BP_HIGH_HZ, BP_LOW_HZ, FILTER_ORDER


def design_bandpass(
    fs: float,
    low_hz: float = BP_LOW_HZ,
    high_hz: float = BP_HIGH_HZ,
    order: int = FILTER_ORDER,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Return the (b, a) coefficients of a Butterworth bandpass filter.

    If the sampling rate is too low for `high_hz`, the upper cutoff is
    clamped just below Nyquist with a warning.
    """
    nyq = fs / 2.0
    low = low_hz / nyq
    high = high_hz / nyq

    if high >= 1.0:
        high = 0.95
        warnings.warn(
            f"Sampling rate ({fs} Hz) is too low for the requested upper cutoff "
            f"({high_hz} Hz).  Clamping to {high * nyq:.2f} Hz.",
            stacklevel=2,
        )
    if low >= high:
        raise ValueError(f"Lower cutoff {low_hz} Hz is not below the upper cutoff at fs={fs} Hz.")

    b, a = butter(order, [low, high], btype="band")
    return b, a


def min_filter_length(order: int = FILTER_ORDER) -> int:
    """Shortest signal `filtfilt` accepts for a bandpass of this order."""
    # filtfilt's default padlen is 3·max(len(a), len(b)); a bandpass doubles the order
    return 3 * (2 * order + 1) + 1


def bandpass_filter(signal: np.ndarray, fs: float) -> np.ndarray:
    """
    Apply a zero-phase Butterworth bandpass filter to a 1-D signal.

    Raises
    ------
    ValueError
        If the signal is too short for `filtfilt`.
    """
    x = np.asarray(signal, dtype=np.float64)
    min_samples = min_filter_length()
    if x.size < min_samples:
        raise ValueError(
            f"Signal too short for filtfilt: need >= {min_samples} samples, got {x.size}."
        )

    b, a = design_bandpass(fs)
    return filtfilt(b, a, x - x.mean())
