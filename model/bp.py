"""
model/bp.py — Blood Pressure Estimation (heuristic)
====================================================

⚠️⚠️⚠️  CRITICAL DISCLAIMER ⚠️⚠️⚠️
This module provides an *ESTIMATED* blood pressure, NOT a measured one.
It is a coarse linear screening heuristic on pulse timing and amplitude.
Every estimate carries a fixed confidence of 0.3 to make that explicit.
DO NOT make medical decisions based on these estimates.
⚠️⚠️⚠️

────────────────────────────────────────────────────────────────────────
Model
────────────────────────────────────────────────────────────────────────
    base_sys  = 110 + 0.5·(age − 20)
    base_dia  =  70 + 0.3·(age − 20)
    bpm       = 60000 / mean_RR                       (instantaneous rate)
    bpm_adj   = 0.2·(bpm − 70)                        (faster → higher)
    amp_adj   = 10·(1 − pulse_amplitude)              (weaker pulse → higher)

    systolic  = base_sys + bpm_adj + amp_adj          → round, clip [90, 180]
    diastolic = base_dia + 0.6·bpm_adj + 0.6·amp_adj  → round, clip [60, 120]
────────────────────────────────────────────────────────────────────────
"""

from dataclasses import dataclass

import numpy as np

from config import (
    BP_AGE_SLOPE_DIASTOLIC,
    BP_AGE_SLOPE_SYSTOLIC,
    BP_AMPLITUDE_SCALE,
    BP_BASE_DIASTOLIC,
    BP_BASE_SYSTOLIC,
    BP_BPM_SLOPE,
    BP_CONFIDENCE,
    BP_DIASTOLIC_RANGE,
    BP_DIASTOLIC_RATIO,
    BP_REFERENCE_AGE,
    BP_REFERENCE_BPM,
    BP_SYSTOLIC_RANGE,
    DEFAULT_AGE,
)
from stats.descriptive import round_half_up
from utils.logger import get_logger

logger = get_logger("model.bp")


@dataclass(frozen=True)
class BPEstimate:
    systolic: int
    diastolic: int
    confidence: float
    unit: str = "mmHg"


def estimate_blood_pressure(
    mean_rr: float,
    pulse_amplitude: float,
    age: float = DEFAULT_AGE,
) -> BPEstimate:
    """
    Estimate systolic and diastolic blood pressure.

    Parameters
    ----------
    mean_rr         : float   Mean RR interval in ms (must be > 0).
    pulse_amplitude : float   Normalised pulse amplitude in [0, 1].
    age             : float   Age in years.

    Raises
    ------
    ValueError
        If `mean_rr` is not a positive, finite number.
    """
    if not np.isfinite(mean_rr) or mean_rr <= 0:
        raise ValueError(f"mean_rr must be a positive number of milliseconds, got {mean_rr}.")

    base_systolic = BP_BASE_SYSTOLIC + (age - BP_REFERENCE_AGE) * BP_AGE_SLOPE_SYSTOLIC
    base_diastolic = BP_BASE_DIASTOLIC + (age - BP_REFERENCE_AGE) * BP_AGE_SLOPE_DIASTOLIC

    rr_factor = 60000.0 / mean_rr
    bpm_adjustment = (rr_factor - BP_REFERENCE_BPM) * BP_BPM_SLOPE
    amplitude_factor = (1.0 - pulse_amplitude) * BP_AMPLITUDE_SCALE

    systolic = round_half_up(base_systolic + bpm_adjustment + amplitude_factor)
    diastolic = round_half_up(
        base_diastolic
        + bpm_adjustment * BP_DIASTOLIC_RATIO
        + amplitude_factor * BP_DIASTOLIC_RATIO
    )

    systolic = int(np.clip(systolic, *BP_SYSTOLIC_RANGE))
    diastolic = int(np.clip(diastolic, *BP_DIASTOLIC_RANGE))

    logger.info("BP estimate: %d/%d mmHg (confidence %.1f)", systolic, diastolic, BP_CONFIDENCE)
    return BPEstimate(systolic=systolic, diastolic=diastolic, confidence=BP_CONFIDENCE)
