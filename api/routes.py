"""
api/routes.py — FastAPI route definitions
==========================================
All HTTP endpoints are defined here and wired into the app via
`app.include_router(router)` in `api/app.py`.

Endpoint summary
----------------
    GET  /health                    — Liveness check
    POST /session/start             — Open a push-fed screening session
    GET  /session/status            — Session state, buffer fill, reading count
    POST /session/frames            — Push per-frame channel means (one tick each)
    GET  /session/pulse             — Latest pulse reading
    GET  /session/waveform          — Raw analysis-channel window
    GET  /session/assessment        — HRV + BP + cardiovascular risk
    POST /session/stop              — Stop ticking, keep results
    POST /session/reset             — Discard the session
    POST /analysis/hrv              — HRV metrics for given RR intervals
    POST /analysis/blood-pressure   — Heuristic BP estimate
    POST /analysis/risk             — Cardiovascular risk score
    POST /analysis/statistics       — Robust summary + data quality
    GET  /docs                      — Auto-generated Swagger UI (FastAPI built-in)
"""

from dataclasses import asdict

from fastapi import APIRouter, HTTPException

from api.schemas import (
    AssessmentResponse,
    BloodPressureRequest,
    BPData,
    FramesRequest,
    FramesResponse,
    HRVData,
    HRVRequest,
    PulseReadingData,
    RiskData,
    RiskRequest,
    SessionStartRequest,
    StatisticsRequest,
    StatisticsResponse,
    StatusResponse,
    WaveformData,
)
from api.session import ScreeningSession, SessionNotRunningError
from config import BP_CONFIDENCE
from features.hrv import compute_hrv
from model.bp import BPEstimate, estimate_blood_pressure
from model.risk import assess_cardiovascular_risk
from stats.descriptive import round_half_up
from stats.quality import calculate_accuracy_score, validate_data_quality
from stats.robust import robust_statistics
from utils.logger import get_logger

logger = get_logger("api.routes")

router = APIRouter()

# ── Global session instance ──────────────────────────────────────────────────
# One session for the entire application lifetime.  In a multi-user
# deployment you would key sessions by user/token.
_session = ScreeningSession()


# ── Health ────────────────────────────────────────────────────────────────────

@router.get("/health")
async def health():
    """Simple liveness check."""
    return {"status": "ok", "service": "Pulse-Signal Screening"}


# ── Session ───────────────────────────────────────────────────────────────────

@router.post("/session/start")
def start_session(request: SessionStartRequest = SessionStartRequest()):
    """
    Start (or restart) the screening session.

    Body (JSON, all optional):
        age                       : int    (10–120, default 35)
        frame_width, frame_height : int    size of the client's frames
        region                    : {x, y, width, height}  sampling rectangle;
                                    omitted → forehead heuristic
    """
    region = _session.start(request)
    return {
        "status": "running",
        "region": asdict(region),
        "message": "Session started. POST frames to /session/frames.",
    }


@router.get("/session/status")
def session_status() -> StatusResponse:
    status = _session.status
    messages = {
        "idle":    "No session. POST /session/start to begin.",
        "running": "Session running. Keep pushing frames.",
        "stopped": "Session stopped. Results remain available until reset.",
    }
    return StatusResponse(
        status=status,
        message=messages.get(status, "Unknown state."),
        buffered=_session.buffered,
        readings=_session.readings,
        recent_errors=_session.recent_errors,
    )


@router.post("/session/frames")
def push_frames(request: FramesRequest) -> FramesResponse:
    """
    Push a batch of frames.  Each frame runs one pipeline tick; a reading is
    produced once at least 90 frames are buffered and two peaks are visible.

    Returns 409 if no session is running.
    """
    try:
        accepted, latest, errors = _session.push_frames(request.frames)
    except SessionNotRunningError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return FramesResponse(
        accepted=accepted,
        buffered=_session.buffered,
        readings=_session.readings,
        latest=PulseReadingData(**asdict(latest)) if latest else None,
        errors=errors,
    )


@router.get("/session/pulse")
def latest_pulse() -> PulseReadingData:
    reading = _session.latest_reading()
    if reading is None:
        raise HTTPException(status_code=404, detail="No pulse reading yet.")
    return PulseReadingData(**asdict(reading))


@router.get("/session/waveform")
def session_waveform() -> WaveformData:
    waveform = _session.waveform()
    if waveform is None:
        raise HTTPException(status_code=404, detail="No session has been started.")
    return WaveformData(**asdict(waveform))


@router.get("/session/assessment")
def session_assessment() -> AssessmentResponse:
    """
    Full cardiovascular screening for the current session.

    Returns 404 without a session and 409 before the first pulse reading.
    """
    if _session.status == "idle":
        raise HTTPException(status_code=404, detail="No session has been started.")
    result = _session.assessment()
    if result is None:
        raise HTTPException(
            status_code=409,
            detail="Insufficient data: no pulse reading yet. Keep your face still and well-lit.",
        )
    return AssessmentResponse(**result)


@router.post("/session/stop")
def stop_session():
    _session.stop()
    return {"status": "ok", "message": "Session stopped."}


@router.post("/session/reset")
def reset_session():
    """Reset the session to idle so a new screening can be started."""
    _session.reset()
    return {"status": "ok", "message": "Session reset. Ready for a new screening."}


# ── Stateless analysis ────────────────────────────────────────────────────────

@router.post("/analysis/hrv")
def analyze_hrv(request: HRVRequest) -> HRVData:
    """HRV metrics; fewer than 10 intervals return the insufficient-data sentinel."""
    return HRVData(**asdict(compute_hrv(request.rr_intervals)))


@router.post("/analysis/blood-pressure")
def analyze_blood_pressure(request: BloodPressureRequest) -> BPData:
    try:
        estimate = estimate_blood_pressure(request.mean_rr, request.pulse_amplitude, request.age)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return BPData(**asdict(estimate))


@router.post("/analysis/risk")
def analyze_risk(request: RiskRequest) -> RiskData:
    hrv = compute_hrv(request.rr_intervals)
    bp = BPEstimate(
        systolic=int(round_half_up(request.systolic)),
        diastolic=int(round_half_up(request.diastolic)),
        confidence=BP_CONFIDENCE,
    )
    risk = assess_cardiovascular_risk(request.bpm, hrv, bp, request.age)
    return RiskData(**asdict(risk))


@router.post("/analysis/statistics")
def analyze_statistics(request: StatisticsRequest) -> StatisticsResponse:
    summary = robust_statistics(request.values, reject_outliers=request.remove_outliers)
    quality = validate_data_quality(request.values)
    score = calculate_accuracy_score(summary, quality)
    logger.info("Statistics request: n=%d, accuracy=%.0f", len(request.values), score)
    return StatisticsResponse(
        summary=asdict(summary),
        quality=asdict(quality),
        accuracy_score=score,
    )
