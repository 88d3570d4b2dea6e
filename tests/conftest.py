"""Shared fixtures and synthetic-signal helpers for the test suite."""

import math

import pytest

from camera.source import ChannelMeans, FrameSourceError, Region
from camera.synthetic import SyntheticFrameSource
from features.hrv import HRVMetrics
from rppg.pipeline import PulsePipeline
from rppg.scheduler import ManualScheduler


def make_hrv(stress_level: str = "moderate", mean_rr: float = 800.0) -> HRVMetrics:
    """HRV metrics with just the fields the risk scorer looks at."""
    return HRVMetrics(
        rmssd=35.0,
        sdnn=30.0,
        pnn50=10.0,
        mean_rr=mean_rr,
        min_rr=mean_rr - 50,
        max_rr=mean_rr + 50,
        stress_level=stress_level,
        hrv_score=70,
        interpretation="test",
        recommendations=(),
        num_intervals=20,
    )


def alternating_rr(delta: float, n: int = 12, base: float = 800.0) -> list[float]:
    """RR series whose successive differences are all ±delta (RMSSD == delta)."""
    return [base + (delta if i % 2 else 0.0) for i in range(n)]


def sinusoid_frames(
    pulse_hz: float = 1.2,
    n: int = 300,
    fps: float = 30.0,
    amplitude: float = 5.0,
    stamped: bool = True,
) -> list[dict]:
    """JSON frame payloads of a green-channel sinusoid (optionally without timestamps)."""
    frames = []
    for i in range(n):
        pulse = amplitude * math.sin(2 * math.pi * pulse_hz * i / fps)
        frame = {
            "red": 120.0 + 0.3 * pulse,
            "green": 120.0 + pulse,
            "blue": 120.0 + 0.1 * pulse,
        }
        if stamped:
            frame["timestamp"] = i * 1000.0 / fps
        frames.append(frame)
    return frames


class FlakySource(SyntheticFrameSource):
    """Synthetic source whose every `fail_every`-th read fails."""

    def __init__(self, fail_every: int = 10, **kwargs):
        super().__init__(**kwargs)
        self.fail_every = fail_every
        self.reads = 0

    def next_frame(self, region: Region) -> ChannelMeans:
        self.reads += 1
        if self.reads % self.fail_every == 0:
            raise FrameSourceError("simulated dropped frame")
        return super().next_frame(region)


class BrokenSource(SyntheticFrameSource):
    def open(self) -> None:
        raise FrameSourceError("no capture surface")


class Recorder:
    """Collects pulse readings and error messages from a pipeline."""

    def __init__(self):
        self.readings = []
        self.errors = []

    def on_pulse(self, reading):
        self.readings.append(reading)

    def on_error(self, message):
        self.errors.append(message)


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def synthetic_pipeline():
    """Pipeline on a noise-free 1.2 Hz (72 BPM) synthetic source."""
    scheduler = ManualScheduler()
    source = SyntheticFrameSource(pulse_hz=1.2)
    return PulsePipeline(source, scheduler)
