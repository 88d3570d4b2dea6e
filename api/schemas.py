"""
api/schemas.py — Pydantic request & response models
=====================================================
Centralises all data-transfer objects so that FastAPI can auto-generate
OpenAPI docs and perform input validation for free.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from config import DEFAULT_AGE

StressLevelName = Literal["low", "moderate", "high", "very-high"]


# ── Request Models ───────────────────────────────────────────────────────────


class RegionModel(BaseModel):
    x: int = Field(..., ge=0)
    y: int = Field(..., ge=0)
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)


class SessionStartRequest(BaseModel):
    """Open a push-fed screening session."""
    age: int = Field(DEFAULT_AGE, ge=10, le=120, description="Age in years.")
    frame_width: int = Field(640, gt=0)
    frame_height: int = Field(480, gt=0)
    region: Optional[RegionModel] = None


class FrameModel(BaseModel):
    """Average channel intensities of one frame's sampling region."""
    timestamp: Optional[float] = Field(None, description="Capture time in ms.")
    red: float = Field(..., ge=0, le=255)
    green: float = Field(..., ge=0, le=255)
    blue: float = Field(..., ge=0, le=255)


class FramesRequest(BaseModel):
    frames: list[FrameModel] = Field(..., min_length=1, max_length=1000)


class HRVRequest(BaseModel):
    rr_intervals: list[float] = Field(..., description="RR intervals in ms.")


class BloodPressureRequest(BaseModel):
    mean_rr: float = Field(..., gt=0, description="Mean RR interval in ms.")
    pulse_amplitude: float = Field(..., ge=0, le=1)
    age: int = Field(DEFAULT_AGE, ge=10, le=120)


class RiskRequest(BaseModel):
    bpm: float = Field(..., ge=30, le=200)
    rr_intervals: list[float] = Field(default_factory=list)
    systolic: float = Field(..., gt=0)
    diastolic: float = Field(..., gt=0)
    age: int = Field(DEFAULT_AGE, ge=10, le=120)


class StatisticsRequest(BaseModel):
    values: list[float]
    remove_outliers: bool = True


# ── Response Models ──────────────────────────────────────────────────────────


class PulseReadingData(BaseModel):
    bpm: int
    confidence: float
    timestamp: float


class FramesResponse(BaseModel):
    accepted: int
    buffered: int
    readings: int
    latest: Optional[PulseReadingData] = None
    errors: list[str] = Field(default_factory=list)


class WaveformData(BaseModel):
    samples: list[float]
    timestamps: list[float]
    sample_rate: float


class HRVData(BaseModel):
    rmssd: float
    sdnn: float
    pnn50: float
    mean_rr: float
    min_rr: float
    max_rr: float
    stress_level: StressLevelName
    hrv_score: int
    interpretation: str
    recommendations: list[str]
    num_intervals: int


class BPData(BaseModel):
    systolic: int
    diastolic: int
    confidence: float
    unit: str = "mmHg"


class RiskData(BaseModel):
    risk_score: int
    risk_level: StressLevelName
    factors: list[str]
    recommendations: list[str]


class AssessmentResponse(BaseModel):
    """Full screening payload for the current session."""
    disclaimer: str
    reading: PulseReadingData
    hrv: HRVData
    blood_pressure: BPData
    risk: RiskData
    age: float


class ConfidenceIntervalData(BaseModel):
    mean: float
    lower: float
    upper: float
    margin: float


class RobustSummaryData(BaseModel):
    mean: float
    median: float
    trimmed_mean: float
    robust_mean: float
    std_dev: float
    cv: float
    min: float
    max: float
    q1: float
    q3: float
    iqr: float
    outlier_count: int
    sample_count: int
    confidence_interval: ConfidenceIntervalData


class DataQualityData(BaseModel):
    is_valid: bool
    quality_score: float
    sample_count: int
    cv: float
    issues: list[str]


class StatisticsResponse(BaseModel):
    summary: RobustSummaryData
    quality: DataQualityData
    accuracy_score: float


class StatusResponse(BaseModel):
    status: str                          # "idle" | "running" | "stopped"
    message: str
    buffered: int = 0
    readings: int = 0
    recent_errors: list[str] = Field(default_factory=list)
