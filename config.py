"""
config.py — Centralised configuration & hyper-parameters
=========================================================
Every tunable constant in the project lives here so that the rest of the
codebase can import from a single source of truth.
"""

import os

# ─── Logging ─────────────────────────────────────────────────────────────────
LOG_LEVEL: str = os.environ.get("PULSESCAN_LOG_LEVEL", "INFO").upper()

# ─── Camera ──────────────────────────────────────────────────────────────────
CAMERA_INDEX: int = 0          # Device index passed to cv2.VideoCapture
CAMERA_WIDTH: int = 640
CAMERA_HEIGHT: int = 480
CAMERA_FPS: int = 30           # Assumed sampling rate of the tick loop

# ─── Sampling Region ─────────────────────────────────────────────────────────
# Fractions of the frame size.  The default region is a centred upper strip
# that approximates the forehead when the subject faces the camera.
REGION_X_FRACTION: float = 0.30
REGION_Y_FRACTION: float = 0.10
REGION_WIDTH_FRACTION: float = 0.40
REGION_HEIGHT_FRACTION: float = 0.15

# ─── Signal Window ───────────────────────────────────────────────────────────
WINDOW_CAPACITY: int = 300     # ≈ 10 s at 30 fps
MIN_SAMPLES_FOR_BPM: int = 90  # ≈ 3 s at 30 fps before the first reading
ANALYSIS_CHANNEL: str = "green"   # Most sensitive to blood-volume pulsation

# ─── Peak Detection / BPM ────────────────────────────────────────────────────
PEAK_THRESHOLD_RATIO: float = 0.1   # Fraction of max |sample| a peak must exceed
BPM_MIN: int = 30
BPM_MAX: int = 200

# Standard deviation (intensity units) that maps to full confidence
CONFIDENCE_STD_CEILING: float = 10.0

# ─── RR History ──────────────────────────────────────────────────────────────
# Intervals outside (RR_MIN_MS, RR_MAX_MS) are treated as detection artefacts.
RR_MIN_MS: float = 300.0       # 200 BPM
RR_MAX_MS: float = 2000.0      # 30 BPM
RR_HISTORY_MAX: int = 60       # Most recent intervals kept for HRV
PEAK_HISTORY_MAX: int = 256    # Raw peak timestamps kept per session

# ─── HRV ─────────────────────────────────────────────────────────────────────
HRV_MIN_INTERVALS: int = 10
NN50_THRESHOLD_MS: float = 50.0
LOW_SDNN_MS: float = 20.0      # Below this a cardiovascular check is suggested

# ─── Stress Estimation ───────────────────────────────────────────────────────
# RMSSD (ms) band edges, heuristic and not clinical:
#   ≥ LOW → low  |  ≥ MODERATE → moderate  |  ≥ HIGH → high  |  else very-high
STRESS_RMSSD_LOW: float = 50.0
STRESS_RMSSD_MODERATE: float = 30.0
STRESS_RMSSD_HIGH: float = 20.0

# ─── Blood Pressure Estimation ───────────────────────────────────────────────
DEFAULT_AGE: int = 35
BP_BASE_SYSTOLIC: float = 110.0
BP_BASE_DIASTOLIC: float = 70.0
BP_REFERENCE_AGE: float = 20.0
BP_AGE_SLOPE_SYSTOLIC: float = 0.5
BP_AGE_SLOPE_DIASTOLIC: float = 0.3
BP_REFERENCE_BPM: float = 70.0
BP_BPM_SLOPE: float = 0.2
BP_AMPLITUDE_SCALE: float = 10.0
BP_DIASTOLIC_RATIO: float = 0.6
BP_SYSTOLIC_RANGE: tuple[int, int] = (90, 180)
BP_DIASTOLIC_RANGE: tuple[int, int] = (60, 120)
BP_CONFIDENCE: float = 0.3     # Fixed: this is a screening heuristic

# ─── Cardiovascular Risk ─────────────────────────────────────────────────────
RISK_BASE_SCORE: float = 50.0
RISK_TACHYCARDIA_BPM: float = 100.0
RISK_BRADYCARDIA_BPM: float = 60.0
RISK_HYPERTENSION: tuple[float, float] = (140.0, 90.0)      # systolic, diastolic
RISK_PREHYPERTENSION: tuple[float, float] = (120.0, 80.0)
RISK_AGE_THRESHOLD: int = 50

# ─── Statistics Toolkit ──────────────────────────────────────────────────────
IQR_FACTOR: float = 1.5
TRIM_PERCENT: float = 10.0
ROBUST_SUBSET_SIZE: int = 5
QUALITY_MIN_SAMPLES: int = 10
QUALITY_MAX_CV: float = 50.0
Z_SCORES: dict[float, float] = {0.95: 1.96, 0.99: 2.576}

# ─── Waveform Filtering ──────────────────────────────────────────────────────
# Butterworth bandpass filter band (Hz) used for the visualisation waveform.
# 0.7 Hz  →  42 BPM   (lower physiological limit)
# 4.0 Hz  → 240 BPM   (upper safety margin)
BP_LOW_HZ: float = 0.7
BP_HIGH_HZ: float = 4.0
FILTER_ORDER: int = 4

# ─── API ─────────────────────────────────────────────────────────────────────
API_TITLE = "Pulse-Signal Screening API"
API_VERSION = "0.1.0"
API_HOST = "0.0.0.0"
API_PORT = 8000
