"""
model/risk.py — Cardiovascular risk score
==========================================
Additive screening score on a 0–100 scale, starting from 50:

    heart rate   > 100 BPM            +15   (tachycardia)
                 < 60 BPM             +5    (bradycardia, often benign)
                 otherwise            −5
    HRV stress   high / very-high     +20
                 low                  −10
    BP           > 140/90             +25
                 > 120/80             +10
    age          > 50                 +10

Buckets: < 30 low, < 50 moderate, < 70 high, else very-high.

⚠️  A screening heuristic, not a diagnosis.
"""

from dataclasses import dataclass
from typing import Literal

from config import (
    DEFAULT_AGE,
    RISK_AGE_THRESHOLD,
    RISK_BASE_SCORE,
    RISK_BRADYCARDIA_BPM,
    RISK_HYPERTENSION,
    RISK_PREHYPERTENSION,
    RISK_TACHYCARDIA_BPM,
)
from features.hrv import HRVMetrics
from model.bp import BPEstimate
from stats.descriptive import round_half_up
from utils.logger import get_logger

logger = get_logger("model.risk")

RiskLevel = Literal["low", "moderate", "high", "very-high"]


@dataclass(frozen=True)
class RiskAssessment:
    risk_score: int
    risk_level: RiskLevel
    factors: tuple[str, ...]
    recommendations: tuple[str, ...]


def risk_level_for(score: float) -> RiskLevel:
    if score < 30:
        return "low"
    if score < 50:
        return "moderate"
    if score < 70:
        return "high"
    return "very-high"


def assess_cardiovascular_risk(
    bpm: float,
    hrv: HRVMetrics,
    bp: BPEstimate,
    age: float = DEFAULT_AGE,
) -> RiskAssessment:
    """Combine heart rate, HRV stress band, estimated BP and age."""
    score = RISK_BASE_SCORE
    factors: list[str] = []
    recommendations: list[str] = []

    # ── Heart rate ────────────────────────────────────────────────────────
    if bpm > RISK_TACHYCARDIA_BPM:
        score += 15
        factors.append("Elevated resting heart rate")
        recommendations.append("Consider cardiovascular exercise to improve heart health")
    elif bpm < RISK_BRADYCARDIA_BPM:
        score += 5
        factors.append("Low resting heart rate (may be normal for athletes)")
    else:
        score -= 5

    # ── HRV ───────────────────────────────────────────────────────────────
    if hrv.stress_level in ("high", "very-high"):
        score += 20
        factors.append("Reduced heart rate variability")
        recommendations.append("Focus on stress management")
    elif hrv.stress_level == "low":
        score -= 10

    # ── Blood pressure ────────────────────────────────────────────────────
    high_sys, high_dia = RISK_HYPERTENSION
    pre_sys, pre_dia = RISK_PREHYPERTENSION
    if bp.systolic > high_sys or bp.diastolic > high_dia:
        score += 25
        factors.append("Elevated blood pressure")
        recommendations.append("Monitor blood pressure regularly")
        recommendations.append("Consider lifestyle modifications")
    elif bp.systolic > pre_sys or bp.diastolic > pre_dia:
        score += 10
        factors.append("Pre-hypertensive range")
        recommendations.append("Maintain healthy lifestyle")

    # ── Age ───────────────────────────────────────────────────────────────
    if age > RISK_AGE_THRESHOLD:
        score += 10
        factors.append("Age-related risk factor")

    level = risk_level_for(score)
    if level in ("high", "very-high"):
        recommendations.append(
            "Consult with healthcare provider for comprehensive cardiovascular assessment"
        )
        recommendations.append("Consider regular cardiovascular monitoring")

    final_score = int(round_half_up(min(100.0, max(0.0, score))))
    logger.info("Risk score %d (%s), %d factors", final_score, level, len(factors))

    return RiskAssessment(
        risk_score=final_score,
        risk_level=level,
        factors=tuple(dict.fromkeys(factors)),
        recommendations=tuple(dict.fromkeys(recommendations)),
    )
