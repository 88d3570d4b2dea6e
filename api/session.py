"""
api/session.py — Push-fed screening session
=============================================
Wraps one `PulsePipeline` whose frames are pushed by HTTP clients instead
of read from a local webcam.  Clients sample their own video surface,
post the per-frame channel means in batches, and the session runs one
pipeline tick per posted frame through a `ManualScheduler`.

Thread safety
-------------
The session routes are plain `def` endpoints, which FastAPI runs in its
worker thread pool, so every public method takes `_lock`.  Within the
lock the pipeline itself stays strictly single-threaded.

Timestamps
----------
Frames posted without a capture time are placed on the nominal
`1000 / CAMERA_FPS` ms time base after the previous sample, since a whole
batch is processed within a few milliseconds of wall-clock time.

Lifecycle
---------
    1. `start(...)`        — new pipeline, region and age.
    2. `push_frames(...)`  — feed samples; readings accumulate.
    3. `assessment()`      — HRV + BP + risk from the accumulated peaks.
    4. `stop()` / `reset()`.
"""

import threading
from dataclasses import asdict

from api.schemas import FrameModel, SessionStartRequest
from camera.source import ChannelMeans, Region
from camera.synthetic import PushFrameSource
from config import CAMERA_FPS
from rppg.pipeline import CardiovascularAssessment, PulsePipeline, PulseReading, PulseWaveform
from rppg.scheduler import ManualScheduler
from utils.logger import get_logger

logger = get_logger("api.session")

# ── Disclaimer string injected into every assessment ────────────────────────
DISCLAIMER = (
    "⚠️ This is a WELLNESS SCREENING tool — NOT a medical device. "
    "Heart rate, HRV, blood pressure and risk values are ESTIMATES derived "
    "from camera-based pulse signals. Blood pressure in particular is a "
    "low-confidence heuristic. Consult a qualified healthcare professional "
    "for diagnosis or treatment."
)

MAX_KEPT_ERRORS = 20
FRAME_INTERVAL_MS = 1000.0 / CAMERA_FPS


class SessionNotRunningError(RuntimeError):
    """Frames were pushed while no session was running."""


class ScreeningSession:
    """
    Manages the lifecycle of one push-fed pulse screening.

    Instantiate once at application startup and reuse across requests.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._pipeline: PulsePipeline | None = None
        self._source: PushFrameSource | None = None
        self._scheduler: ManualScheduler | None = None
        self._readings = 0
        self._last_timestamp: float | None = None
        self._errors: list[str] = []
        self._batch_errors: list[str] = []
        logger.info("ScreeningSession initialised.")

    # ── Status ─────────────────────────────────────────────────────────────

    @property
    def status(self) -> str:
        with self._lock:
            if self._pipeline is None:
                return "idle"
            return "running" if self._pipeline.is_running else "stopped"

    @property
    def buffered(self) -> int:
        with self._lock:
            return self._pipeline.buffer_length if self._pipeline else 0

    @property
    def readings(self) -> int:
        with self._lock:
            return self._readings

    @property
    def recent_errors(self) -> list[str]:
        with self._lock:
            return list(self._errors)

    # ── Public API ─────────────────────────────────────────────────────────

    def start(self, request: SessionStartRequest) -> Region:
        """(Re)start the session; any previous state is discarded."""
        with self._lock:
            if self._pipeline is not None:
                self._pipeline.reset()

            region = Region(**request.region.model_dump()) if request.region else None
            self._source = PushFrameSource(request.frame_width, request.frame_height)
            self._scheduler = ManualScheduler()
            self._pipeline = PulsePipeline(
                self._source,
                self._scheduler,
                region=region,
                age=request.age,
            )
            self._readings = 0
            self._errors = []
            self._last_timestamp = None
            self._pipeline.start(self._on_pulse, self._on_error)
            logger.info("Session started: age=%d, region=%s", request.age, self._pipeline.region)
            return self._pipeline.region

    def push_frames(self, frames: list[FrameModel]) -> tuple[int, PulseReading | None, list[str]]:
        """
        Run one tick per pushed frame.

        Returns (frames accepted, latest reading, errors raised by this batch).
        """
        with self._lock:
            if self._pipeline is None or not self._pipeline.is_running:
                raise SessionNotRunningError("No running session. POST /session/start first.")

            self._batch_errors = []
            accepted = self._source.feed(self._stamp(f) for f in frames)
            while self._source.pending and self._scheduler.run_pending():
                pass
            return accepted, self._pipeline.latest_reading, list(self._batch_errors)

    def latest_reading(self) -> PulseReading | None:
        with self._lock:
            return self._pipeline.latest_reading if self._pipeline else None

    def waveform(self) -> PulseWaveform | None:
        with self._lock:
            return self._pipeline.waveform() if self._pipeline else None

    def assessment(self) -> dict | None:
        """Assessment payload (with disclaimer), or None without a reading."""
        with self._lock:
            if self._pipeline is None:
                return None
            result: CardiovascularAssessment | None = self._pipeline.assess()
        if result is None:
            return None
        return {"disclaimer": DISCLAIMER, **asdict(result)}

    def stop(self) -> None:
        with self._lock:
            if self._pipeline is not None:
                self._pipeline.stop()

    def reset(self) -> None:
        """Return to idle, discarding all session data."""
        with self._lock:
            if self._pipeline is not None:
                self._pipeline.reset()
            self._pipeline = None
            self._source = None
            self._scheduler = None
            self._readings = 0
            self._errors = []
            self._last_timestamp = None
        logger.info("Session reset.")

    # ── Pipeline callbacks (called inside the lock, from a tick) ───────────

    def _on_pulse(self, reading: PulseReading) -> None:
        self._readings += 1

    def _on_error(self, message: str) -> None:
        self._batch_errors.append(message)
        self._errors.append(message)
        del self._errors[:-MAX_KEPT_ERRORS]

    # ── Frame stamping ─────────────────────────────────────────────────────

    def _stamp(self, frame: FrameModel) -> ChannelMeans:
        timestamp = frame.timestamp
        if timestamp is None:
            previous = self._last_timestamp
            timestamp = 0.0 if previous is None else previous + FRAME_INTERVAL_MS
        self._last_timestamp = timestamp
        return ChannelMeans(red=frame.red, green=frame.green, blue=frame.blue, timestamp=timestamp)
