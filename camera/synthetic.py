"""
camera/synthetic.py — Deterministic synthetic frame sources
============================================================
`SyntheticFrameSource` emits a green-channel sinusoid at a chosen pulse
frequency on a fixed 30 fps time base, optionally with Gaussian noise.
It stands in for the webcam in the CLI demo and makes pipeline behaviour
reproducible.

`PushFrameSource` is fed externally (e.g. by HTTP clients posting channel
means) and hands the queued samples to the pipeline one per tick.
"""

from collections import deque
from collections.abc import Iterable

import numpy as np

from camera.source import ChannelMeans, FrameSourceError, Region
from config import CAMERA_FPS, CAMERA_HEIGHT, CAMERA_WIDTH


class SyntheticFrameSource:
    """
    Parameters
    ----------
    pulse_hz   : float   Pulse frequency; 1.2 Hz ≈ 72 BPM.
    amplitude  : float   Green-channel oscillation amplitude (intensity units).
    baseline   : float   Mean channel intensity.
    fps        : float   Sampling rate of the generated time base.
    noise_std  : float   Standard deviation of additive Gaussian noise.
    seed       : int     Seed for the noise generator.
    """

    def __init__(
        self,
        pulse_hz: float = 1.2,
        amplitude: float = 5.0,
        baseline: float = 120.0,
        fps: float = CAMERA_FPS,
        noise_std: float = 0.0,
        seed: int = 0,
    ):
        self.pulse_hz = pulse_hz
        self.amplitude = amplitude
        self.baseline = baseline
        self.fps = fps
        self.noise_std = noise_std
        self._rng = np.random.default_rng(seed)
        self._index = 0

    def open(self) -> None:
        self._index = 0

    def frame_size(self) -> tuple[int, int]:
        return CAMERA_WIDTH, CAMERA_HEIGHT

    def next_frame(self, region: Region) -> ChannelMeans:
        t = self._index / self.fps
        timestamp = self._index * 1000.0 / self.fps
        self._index += 1

        pulse = self.amplitude * np.sin(2.0 * np.pi * self.pulse_hz * t)
        if self.noise_std > 0:
            pulse += self._rng.normal(0.0, self.noise_std)

        return ChannelMeans(
            red=self.baseline + 0.3 * pulse,
            green=self.baseline + pulse,
            blue=self.baseline + 0.1 * pulse,
            timestamp=timestamp,
        )

    def close(self) -> None:
        pass


class PushFrameSource:
    """FIFO of externally supplied channel means."""

    def __init__(self, frame_width: int = CAMERA_WIDTH, frame_height: int = CAMERA_HEIGHT):
        self._size = (frame_width, frame_height)
        self._queue: deque[ChannelMeans] = deque()

    def feed(self, frames: Iterable[ChannelMeans]) -> int:
        """Queue frames for consumption; returns the number queued."""
        before = len(self._queue)
        self._queue.extend(frames)
        return len(self._queue) - before

    @property
    def pending(self) -> int:
        return len(self._queue)

    def open(self) -> None:
        self._queue.clear()

    def frame_size(self) -> tuple[int, int]:
        return self._size

    def next_frame(self, region: Region) -> ChannelMeans:
        if not self._queue:
            raise FrameSourceError("No pushed frame available.")
        return self._queue.popleft()

    def close(self) -> None:
        self._queue.clear()
