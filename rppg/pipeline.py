"""
rppg/pipeline.py — End-to-end pulse pipeline
=============================================
Orchestrates the full signal-processing chain, one frame per tick:

    FrameSource → region means → SignalWindow → peak detection
                → BPM + confidence → on_pulse(reading)

and, on demand, from the session's accumulated peak timestamps:

    RR intervals → HRV metrics → BP estimate → cardiovascular risk

Tick contract
-------------
`start()` opens the frame source (failure is fatal and raised at once) and
submits the first tick to the scheduler.  Each tick reads one frame,
pushes it into the window and, once `MIN_SAMPLES_FOR_BPM` samples exist,
recomputes peaks, BPM and confidence over the whole window.  The pulse
handler is called synchronously, at most once per tick and only when a
BPM is available.  A failing frame read is reported through the error
handler and the next tick is scheduled as usual.  `stop()` cancels the
run's token, so no further ticks are scheduled; the current tick, if any,
completes.

State
-----
The pipeline owns the window, the raw peak-timestamp history of the
active session and the latest reading.  The pure helpers `analyze_window`
and `accumulate_peak_times` take that state in and return new values, and
every query works on a frozen snapshot, so results handed to callers never
alias the live buffers.
"""

import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from functools import partial

import numpy as np

from camera.source import ChannelMeans, FrameSource, Region
from config import (
    ANALYSIS_CHANNEL,
    CAMERA_FPS,
    DEFAULT_AGE,
    MIN_SAMPLES_FOR_BPM,
    PEAK_HISTORY_MAX,
    RR_MIN_MS,
    WINDOW_CAPACITY,
)
from features.hr import estimate_bpm, estimate_confidence
from features.hrv import HRVMetrics, compute_hrv, rr_intervals_from_peaks
from model.bp import BPEstimate, estimate_blood_pressure
from model.risk import RiskAssessment, assess_cardiovascular_risk
from rppg.filters import bandpass_filter
from rppg.peaks import detect_peaks
from rppg.scheduler import CancellationToken, ManualScheduler, TickScheduler
from rppg.window import FrameSample, SignalWindow
from utils.logger import get_logger

logger = get_logger("rppg.pipeline")

PulseHandler = Callable[["PulseReading"], None]
ErrorHandler = Callable[[str], None]


@dataclass(frozen=True)
class PulseReading:
    bpm: int
    confidence: float
    timestamp: float


@dataclass(frozen=True)
class PulseWaveform:
    samples: tuple[float, ...]
    timestamps: tuple[float, ...]
    sample_rate: float


@dataclass(frozen=True)
class WindowAnalysis:
    peak_indices: tuple[int, ...]
    peak_times: tuple[float, ...]
    bpm: int
    confidence: float


@dataclass(frozen=True)
class CardiovascularAssessment:
    """Everything the screening report needs, computed from one snapshot."""
    reading: PulseReading
    hrv: HRVMetrics
    blood_pressure: BPEstimate
    risk: RiskAssessment
    age: float


# ── Pure state updates ───────────────────────────────────────────────────────


def analyze_window(samples: Sequence[FrameSample], channel: str = ANALYSIS_CHANNEL) -> WindowAnalysis:
    """Peaks, BPM and confidence of one window snapshot (bpm 0 = unavailable)."""
    signal = np.array([getattr(s, channel) for s in samples], dtype=np.float64)
    times = np.array([s.timestamp for s in samples], dtype=np.float64)

    peaks = detect_peaks(signal)
    peak_times = tuple(float(t) for t in times[peaks]) if peaks else ()
    return WindowAnalysis(
        peak_indices=tuple(peaks),
        peak_times=peak_times,
        bpm=estimate_bpm(peak_times),
        confidence=estimate_confidence(signal),
    )


def accumulate_peak_times(
    history: tuple[float, ...],
    new_times: Sequence[float],
    min_gap_ms: float = RR_MIN_MS,
    limit: int = PEAK_HISTORY_MAX,
) -> tuple[float, ...]:
    """
    Merge peak timestamps detected in the current window into the history.

    Consecutive windows overlap, so the same peak is seen on many ticks.
    Only timestamps later than the last accepted one by at least
    `min_gap_ms` are appended; the history keeps the latest `limit`.
    """
    merged = list(history)
    for t in new_times:
        if not merged or t - merged[-1] >= min_gap_ms:
            merged.append(float(t))
    return tuple(merged[-limit:])


# ── Pipeline ─────────────────────────────────────────────────────────────────


class PulsePipeline:
    """
    Stateful pulse pipeline bound to one frame source and one scheduler.

    Parameters
    ----------
    source      : FrameSource      Provides region channel means per tick.
    scheduler   : TickScheduler    Decides when ticks run (default: manual).
    capacity    : int              Window size in samples.
    region      : Region | None    Sampling region; None → forehead heuristic.
    age         : float            Default age for BP / risk estimation.
    clock       : callable         Millisecond clock for unstamped frames.
    sample_rate : float            Nominal sampling rate (Hz) of the tick loop.
    """

    def __init__(
        self,
        source: FrameSource,
        scheduler: TickScheduler | None = None,
        capacity: int = WINDOW_CAPACITY,
        region: Region | None = None,
        age: float = DEFAULT_AGE,
        clock: Callable[[], float] | None = None,
        sample_rate: float = CAMERA_FPS,
    ):
        self._source = source
        self._scheduler = scheduler if scheduler is not None else ManualScheduler()
        self._window = SignalWindow(capacity)
        self._configured_region = region
        self._region = region
        self._age = age
        self._clock = clock or (lambda: time.time() * 1000.0)
        self._sample_rate = sample_rate

        self._peak_times: tuple[float, ...] = ()
        self._latest: PulseReading | None = None
        self._token: CancellationToken | None = None
        self._on_pulse: PulseHandler | None = None
        self._on_error: ErrorHandler | None = None
        self._ticks = 0

        logger.info("PulsePipeline created — capacity=%d, fps=%.1f", capacity, sample_rate)

    # ── Properties ───────────────────────────────────────────────────────────

    @property
    def is_running(self) -> bool:
        return self._token is not None and not self._token.cancelled

    @property
    def scheduler(self) -> TickScheduler:
        return self._scheduler

    @property
    def region(self) -> Region | None:
        return self._region

    @property
    def buffer_length(self) -> int:
        return len(self._window)

    @property
    def latest_reading(self) -> PulseReading | None:
        return self._latest

    @property
    def tick_count(self) -> int:
        return self._ticks

    def set_region(self, region: Region) -> None:
        """Override the sampling region (takes effect on the next tick)."""
        self._configured_region = region
        self._region = region

    # ── Lifecycle ────────────────────────────────────────────────────────────

    def start(self, on_pulse: PulseHandler, on_error: ErrorHandler | None = None) -> None:
        """
        Open the source and schedule the first tick.

        Raises whatever the source raises on open (FrameSourceError for the
        bundled sources); the pipeline is left stopped in that case.
        """
        if self.is_running:
            logger.warning("Pipeline already running — ignoring duplicate start().")
            return

        self._source.open()

        self._window.clear()
        self._peak_times = ()
        self._latest = None
        self._ticks = 0
        self._on_pulse = on_pulse
        self._on_error = on_error
        if self._region is None:
            self._region = Region.default_for(*self._source.frame_size())

        token = CancellationToken()
        self._token = token
        logger.info("Pipeline started — region=%s", self._region)
        self._scheduler.submit(partial(self._run_tick, token), token)

    def stop(self) -> None:
        """Halt scheduling of further ticks and release the source."""
        if self._token is None:
            return
        self._token.cancel()
        self._token = None
        self._source.close()
        logger.info("Pipeline stopped after %d ticks.", self._ticks)

    def reset(self) -> None:
        """Stop and discard all session state."""
        self.stop()
        self._window.clear()
        self._peak_times = ()
        self._latest = None
        self._ticks = 0
        self._region = self._configured_region
        logger.info("Pipeline reset.")

    # ── Tick ─────────────────────────────────────────────────────────────────

    def _run_tick(self, token: CancellationToken) -> None:
        if token.cancelled:
            return
        self._ticks += 1
        try:
            means = self._source.next_frame(self._region)
            reading = self._process_frame(means)
            if reading is not None:
                self._latest = reading
                if self._on_pulse is not None:
                    self._on_pulse(reading)
        except Exception as e:
            # A bad frame must never end the session
            logger.warning("Tick %d failed: %s", self._ticks, e)
            if self._on_error is not None:
                self._on_error(f"Pulse detection error: {e}")
        finally:
            self._scheduler.submit(partial(self._run_tick, token), token)

    def _process_frame(self, means: ChannelMeans) -> PulseReading | None:
        timestamp = means.timestamp if means.timestamp is not None else self._clock()
        self._window.push(
            FrameSample(timestamp=timestamp, red=means.red, green=means.green, blue=means.blue)
        )
        if len(self._window) < MIN_SAMPLES_FOR_BPM:
            return None

        analysis = analyze_window(self._window.snapshot())
        self._peak_times = accumulate_peak_times(self._peak_times, analysis.peak_times)
        if analysis.bpm == 0:
            logger.debug("Tick %d: fewer than 2 peaks, no reading.", self._ticks)
            return None

        logger.debug(
            "Tick %d: %d peaks, BPM=%d, confidence=%.2f",
            self._ticks, len(analysis.peak_indices), analysis.bpm, analysis.confidence,
        )
        return PulseReading(bpm=analysis.bpm, confidence=analysis.confidence, timestamp=timestamp)

    # ── Queries ──────────────────────────────────────────────────────────────

    def peak_timestamps(self) -> tuple[float, ...]:
        return self._peak_times

    def rr_intervals(self) -> list[float]:
        return rr_intervals_from_peaks(self._peak_times)

    def hrv(self) -> HRVMetrics:
        return compute_hrv(self.rr_intervals())

    def blood_pressure(self, age: float | None = None) -> BPEstimate | None:
        """
        BP estimate from the session's mean RR and the latest confidence
        (used as the normalised pulse amplitude).  None when no timing
        information exists yet.
        """
        return self._estimate_bp(self.hrv(), self._latest, self._age if age is None else age)

    def risk(self, age: float | None = None) -> RiskAssessment | None:
        assessment = self.assess(age)
        return assessment.risk if assessment is not None else None

    def assess(self, age: float | None = None) -> CardiovascularAssessment | None:
        """Full screening bundle, or None before the first pulse reading."""
        reading = self._latest
        if reading is None:
            logger.warning("No pulse reading yet — cannot assess cardiovascular risk.")
            return None

        age = self._age if age is None else age
        hrv = self.hrv()
        bp = self._estimate_bp(hrv, reading, age)
        risk = assess_cardiovascular_risk(reading.bpm, hrv, bp, age)
        return CardiovascularAssessment(reading=reading, hrv=hrv, blood_pressure=bp, risk=risk, age=age)

    @staticmethod
    def _estimate_bp(hrv: HRVMetrics, reading: PulseReading | None, age: float) -> BPEstimate | None:
        if hrv.mean_rr > 0:
            mean_rr = hrv.mean_rr
        elif reading is not None:
            mean_rr = 60000.0 / reading.bpm
        else:
            return None
        amplitude = reading.confidence if reading is not None else 0.0
        return estimate_blood_pressure(mean_rr, amplitude, age)

    def waveform(self) -> PulseWaveform:
        """Raw analysis-channel samples of the current window."""
        return PulseWaveform(
            samples=tuple(self._window.values(ANALYSIS_CHANNEL).tolist()),
            timestamps=tuple(self._window.timestamps().tolist()),
            sample_rate=self._sample_rate,
        )

    def filtered_waveform(self) -> PulseWaveform:
        """Bandpass-filtered window; raises ValueError while the window is short."""
        raw = self.waveform()
        filtered = bandpass_filter(np.asarray(raw.samples), self._sample_rate)
        return PulseWaveform(
            samples=tuple(filtered.tolist()),
            timestamps=raw.timestamps,
            sample_rate=raw.sample_rate,
        )
