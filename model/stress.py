"""
model/stress.py — Stress band from RMSSD
=========================================

⚠️  DISCLAIMER: This is a heuristic WELLNESS INDICATOR, not a validated
    clinical stress measure.  A short camera recording cannot capture the
    full picture of autonomic balance.

────────────────────────────────────────────────────────────────────────
Rationale
────────────────────────────────────────────────────────────────────────
Under acute stress the sympathetic branch dominates and suppresses the
beat-to-beat (vagal) variability captured by RMSSD.  We therefore map
RMSSD straight to a stress band and a 0–100 HRV score (higher = better):

    RMSSD ≥ 50 ms        →  low        score 85 + min(15, (RMSSD−50)/2)
    30 ≤ RMSSD < 50 ms   →  moderate   score 60 + (RMSSD−30)/20 · 25
    20 ≤ RMSSD < 30 ms   →  high       score 30 + (RMSSD−20)/10 · 30
    RMSSD < 20 ms        →  very-high  score max(0, RMSSD/20 · 30)

Interpretation text and recommendations are fixed per band.
────────────────────────────────────────────────────────────────────────
"""

from dataclasses import dataclass
from typing import Literal

from config import STRESS_RMSSD_HIGH, STRESS_RMSSD_LOW, STRESS_RMSSD_MODERATE
from stats.descriptive import round_half_up
from utils.logger import get_logger

logger = get_logger("model.stress")

StressLevel = Literal["low", "moderate", "high", "very-high"]


@dataclass(frozen=True)
class StressBand:
    level: StressLevel
    score: int
    interpretation: str
    recommendations: tuple[str, ...]


_INTERPRETATIONS: dict[str, str] = {
    "low": (
        "Excellent HRV. Your autonomic nervous system shows good balance "
        "and recovery capacity."
    ),
    "moderate": "Moderate HRV. Your body shows reasonable stress recovery capacity.",
    "high": (
        "Reduced HRV detected. Your body may be experiencing elevated "
        "stress levels."
    ),
    "very-high": (
        "Very low HRV detected. This may indicate high stress, fatigue, "
        "or health concerns."
    ),
}

_RECOMMENDATIONS: dict[str, tuple[str, ...]] = {
    "low": (
        "Maintain current lifestyle habits",
        "Continue regular exercise",
    ),
    "moderate": (
        "Consider stress management techniques",
        "Ensure adequate sleep (7-9 hours)",
        "Practice deep breathing exercises",
    ),
    "high": (
        "Prioritize stress reduction activities",
        "Improve sleep quality and duration",
        "Consider meditation or mindfulness practices",
        "Review work-life balance",
    ),
    "very-high": (
        "Consult with healthcare provider",
        "Focus on rest and recovery",
        "Reduce stressors where possible",
        "Consider professional stress management support",
    ),
}


def classify_stress(rmssd_ms: float) -> StressBand:
    """
    Map an RMSSD value (ms) to its stress band and HRV score.

    The score is clamped to [0, 100] and rounded to a whole number.
    """
    level: StressLevel
    if rmssd_ms >= STRESS_RMSSD_LOW:
        level = "low"
        score = 85.0 + min(15.0, (rmssd_ms - STRESS_RMSSD_LOW) / 2.0)
    elif rmssd_ms >= STRESS_RMSSD_MODERATE:
        level = "moderate"
        frac = (rmssd_ms - STRESS_RMSSD_MODERATE) / (STRESS_RMSSD_LOW - STRESS_RMSSD_MODERATE)
        score = 60.0 + frac * 25.0
    elif rmssd_ms >= STRESS_RMSSD_HIGH:
        level = "high"
        frac = (rmssd_ms - STRESS_RMSSD_HIGH) / (STRESS_RMSSD_MODERATE - STRESS_RMSSD_HIGH)
        score = 30.0 + frac * 30.0
    else:
        level = "very-high"
        score = max(0.0, rmssd_ms / STRESS_RMSSD_HIGH * 30.0)

    score = int(round_half_up(min(100.0, max(0.0, score))))
    logger.info("Stress band: level=%s, hrv_score=%d (RMSSD=%.1f ms)", level, score, rmssd_ms)

    return StressBand(
        level=level,
        score=score,
        interpretation=_INTERPRETATIONS[level],
        recommendations=_RECOMMENDATIONS[level],
    )
