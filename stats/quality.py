"""
stats/quality.py — Data-quality validation and accuracy scoring
================================================================
Quality is scored on a 0–100 scale starting from 100 and subtracting a
fixed penalty per detected issue:

    fewer than `min_samples` values      −30
    non-finite values (NaN / ±inf)       −20
    coefficient of variation > max_cv    −15
    a single repeated value ("stuck")    −25

Screening tools must never crash on bad input, so malformed trial counts
produce a zero-score result that asks the user to retake the test.
"""

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from config import QUALITY_MAX_CV, QUALITY_MIN_SAMPLES
from stats.descriptive import coefficient_of_variation, round_half_up
from stats.robust import RobustSummary
from utils.logger import get_logger

logger = get_logger("stats.quality")

INVALID_TRIAL_MESSAGE = "Invalid test data. Please retake the test."


@dataclass(frozen=True)
class DataQuality:
    is_valid: bool
    quality_score: float
    sample_count: int
    cv: float
    issues: tuple[str, ...] = ()


@dataclass(frozen=True)
class TrialScore:
    score: int
    accuracy: float
    valid: bool
    interpretation: str


def validate_data_quality(
    data: Sequence[float],
    min_samples: int = QUALITY_MIN_SAMPLES,
    max_cv: float = QUALITY_MAX_CV,
) -> DataQuality:
    """Score how trustworthy a series of measurements is."""
    issues: list[str] = []
    score = 100.0

    if len(data) < min_samples:
        issues.append(f"Insufficient samples: {len(data)} < {min_samples}")
        score -= 30

    values = np.asarray(data, dtype=np.float64)
    finite_mask = np.isfinite(values)
    invalid_count = int((~finite_mask).sum())
    if invalid_count > 0:
        issues.append(f"Invalid values detected: {invalid_count}")
        score -= 20

    finite = [float(x) for x in values[finite_mask]]
    cv = coefficient_of_variation(finite)
    if cv > max_cv:
        issues.append(f"High variability detected: CV = {cv:.1f}%")
        score -= 15

    if len(set(finite)) == 1 and len(data) > 1:
        issues.append("No variation in data - possible sensor issue")
        score -= 25

    if issues:
        logger.debug("Data quality issues: %s", "; ".join(issues))

    return DataQuality(
        is_valid=not issues and len(data) >= min_samples,
        quality_score=max(0.0, score),
        sample_count=len(data),
        cv=cv,
        issues=tuple(issues),
    )


def calculate_accuracy_score(summary: RobustSummary, quality: DataQuality) -> float:
    """
    Combine a robust summary and its quality check into one 0–100 score.

    Larger samples and tight confidence intervals earn a small bonus;
    high variability and many rejected outliers cost points.
    """
    score = quality.quality_score

    if summary.sample_count >= 30:
        score += 5
    elif summary.sample_count >= 20:
        score += 3
    elif summary.sample_count >= 10:
        score += 1

    if summary.cv > 30:
        score -= 10
    elif summary.cv > 20:
        score -= 5

    if summary.sample_count > 0:
        outlier_percent = summary.outlier_count / summary.sample_count * 100.0
        if outlier_percent > 20:
            score -= 10
        elif outlier_percent > 10:
            score -= 5

    if summary.mean != 0:
        relative_margin = summary.confidence_interval.margin / abs(summary.mean) * 100.0
        if relative_margin < 5:
            score += 5
        elif relative_margin < 10:
            score += 2

    return float(max(0.0, min(100.0, score)))


def score_trial_counts(correct: int, total: int) -> TrialScore:
    """
    Turn a correct/total count from a screening trial into a 0–100 score.

    Counts that cannot come from a real trial (no questions, negative or
    more correct answers than questions) yield a zero score with a retake
    message instead of raising.
    """
    if total <= 0 or correct < 0 or correct > total:
        logger.warning("Rejected trial counts correct=%s total=%s", correct, total)
        return TrialScore(score=0, accuracy=0.0, valid=False, interpretation=INVALID_TRIAL_MESSAGE)

    accuracy = correct / total * 100.0
    if accuracy >= 90:
        interpretation = "Excellent result, within the expected range."
    elif accuracy >= 75:
        interpretation = "Good result with minor limitations."
    elif accuracy >= 60:
        interpretation = "Moderate result. A professional follow-up is recommended."
    else:
        interpretation = "Low result. A professional assessment is strongly recommended."

    return TrialScore(
        score=int(round_half_up(accuracy)),
        accuracy=accuracy,
        valid=True,
        interpretation=interpretation,
    )
