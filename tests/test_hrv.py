"""
Tests for RR-interval extraction, HRV metrics and stress classification.
"""

import pytest

from features.hrv import (
    INSUFFICIENT_DATA_INTERPRETATION,
    LOW_SDNN_RECOMMENDATION,
    compute_hrv,
    insufficient_hrv,
    rr_intervals_from_peaks,
)
from model.stress import classify_stress
from tests.conftest import alternating_rr

STEADY_RR = [800, 820, 780, 810, 790, 805, 795, 815, 800, 790]


class TestRRIntervals:
    def test_out_of_range_intervals_dropped(self):
        # 200 ms and 2500 ms are artefacts
        assert rr_intervals_from_peaks([0, 800, 1000, 3500, 4300]) == [800, 800]

    def test_bounds_are_exclusive(self):
        assert rr_intervals_from_peaks([0, 300, 2300, 3100]) == [800]

    def test_keeps_latest(self):
        peaks = [i * 1000.0 for i in range(100)]
        rr = rr_intervals_from_peaks(peaks, limit=60)
        assert len(rr) == 60

    def test_too_few_peaks(self):
        assert rr_intervals_from_peaks([100.0]) == []


class TestComputeHRV:
    def test_insufficient_data_sentinel(self):
        hrv = compute_hrv([800] * 9)

        assert hrv.rmssd == 0 and hrv.sdnn == 0 and hrv.pnn50 == 0
        assert hrv.stress_level == "very-high"
        assert hrv.hrv_score == 0
        assert hrv.interpretation == INSUFFICIENT_DATA_INTERPRETATION
        assert hrv.num_intervals == 9
        assert not hrv.valid
        assert hrv == insufficient_hrv(9)

    def test_steady_rhythm_metrics(self):
        hrv = compute_hrv(STEADY_RR)

        assert hrv.valid
        assert hrv.mean_rr == pytest.approx(800.5)
        assert hrv.rmssd == pytest.approx(21.98, abs=0.01)
        assert hrv.sdnn == pytest.approx(11.72, abs=0.01)
        assert hrv.pnn50 == 0
        assert (hrv.min_rr, hrv.max_rr) == (780, 820)
        # RMSSD in [20, 30) ms is the "high" band: 30 + 1.98/10·30 ≈ 36
        assert hrv.stress_level == "high"
        assert hrv.hrv_score == 36
        assert LOW_SDNN_RECOMMENDATION in hrv.recommendations

    def test_near_constant_rr_is_very_high_stress(self):
        hrv = compute_hrv(alternating_rr(1.0))
        assert hrv.rmssd == pytest.approx(1.0)
        assert hrv.stress_level == "very-high"

    def test_large_swings_count_towards_pnn50(self):
        hrv = compute_hrv(alternating_rr(60.0))
        assert hrv.pnn50 == 100
        assert hrv.sdnn == pytest.approx(30.0)
        assert LOW_SDNN_RECOMMENDATION not in hrv.recommendations

    def test_rmssd_uses_successive_differences(self):
        # Ramp: every difference is 10 ms, whatever the spread
        hrv = compute_hrv([700 + 10 * i for i in range(12)])
        assert hrv.rmssd == pytest.approx(10.0)


class TestStressBands:
    @pytest.mark.parametrize(
        "rmssd,level,score",
        [
            (100.0, "low", 100),
            (60.0, "low", 90),
            (50.0, "low", 85),
            (42.0, "moderate", 75),
            (30.0, "moderate", 60),
            (25.0, "high", 45),
            (20.0, "high", 30),
            (10.0, "very-high", 15),
            (0.0, "very-high", 0),
        ],
    )
    def test_band_boundaries_and_scores(self, rmssd, level, score):
        band = classify_stress(rmssd)
        assert band.level == level
        assert band.score == score

    def test_half_scores_round_up(self):
        # 85 + 3/2 = 86.5
        assert classify_stress(53.0).score == 87

    def test_score_always_bounded(self):
        for rmssd in (0, 5, 19.9, 29.9, 49.9, 500, 10_000):
            assert 0 <= classify_stress(rmssd).score <= 100

    def test_band_recommendations(self):
        assert "Consult with healthcare provider" in classify_stress(5).recommendations
        assert classify_stress(80).interpretation.startswith("Excellent HRV")
