"""
rppg/window.py — Bounded sample window
=======================================
A fixed-capacity FIFO of per-frame colour samples.  Once full, every push
evicts the oldest sample, so the window always covers the most recent
`capacity` frames (≈ 10 s at 30 fps by default) in arrival order.

The window is owned by a single producer (the pipeline tick).  Accessors
return fresh numpy arrays / tuples, never views into the live buffer.
"""

from collections import deque
from dataclasses import dataclass
from typing import Literal

import numpy as np

from config import WINDOW_CAPACITY

Channel = Literal["red", "green", "blue"]


@dataclass(frozen=True)
class FrameSample:
    """Average channel intensities of one processed frame (timestamp in ms)."""
    timestamp: float
    red: float
    green: float
    blue: float


class SignalWindow:
    def __init__(self, capacity: int = WINDOW_CAPACITY):
        if capacity < 3:
            raise ValueError(f"Window capacity must be at least 3, got {capacity}.")
        self._capacity = capacity
        self._samples: deque[FrameSample] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._samples)

    def push(self, sample: FrameSample) -> None:
        """Append `sample`; the deque drops the oldest entry on overflow."""
        self._samples.append(sample)

    def values(self, channel: Channel = "green") -> np.ndarray:
        """Ordered intensities of one channel."""
        if channel not in ("red", "green", "blue"):
            raise ValueError(f"Unknown channel '{channel}'.")
        return np.array([getattr(s, channel) for s in self._samples], dtype=np.float64)

    def timestamps(self) -> np.ndarray:
        return np.array([s.timestamp for s in self._samples], dtype=np.float64)

    def snapshot(self) -> tuple[FrameSample, ...]:
        return tuple(self._samples)

    def clear(self) -> None:
        self._samples.clear()
