"""
camera/source.py — Frame sources & region sampling
===================================================
The pulse pipeline never touches a capture API directly.  It pulls one
`ChannelMeans` per tick from any object implementing `FrameSource`:

    open()               — acquire the device; raise FrameSourceError on failure
    frame_size()         — (width, height) in pixels, used for the default region
    next_frame(region)   — mean R, G, B over `region` of the current frame
    close()              — release the device

`CameraFrameSource` is the OpenCV webcam implementation.  Reads are
synchronous: the pipeline's tick loop is the only consumer, so there is no
background capture thread to coordinate with.

Region sampling
---------------
`region_means()` averages each colour channel over a rectangular crop.
Frames follow the OpenCV BGR convention.  The default region is a centred
upper strip (x 30 %, y 10 %, 40 % × 15 % of the frame) that lands on the
forehead when the subject faces the camera.
"""

from dataclasses import dataclass
from typing import Protocol

import cv2
import numpy as np

from config import (
    CAMERA_FPS,
    CAMERA_HEIGHT,
    CAMERA_INDEX,
    CAMERA_WIDTH,
    REGION_HEIGHT_FRACTION,
    REGION_WIDTH_FRACTION,
    REGION_X_FRACTION,
    REGION_Y_FRACTION,
)
from utils.logger import get_logger

logger = get_logger("camera.source")


class FrameSourceError(RuntimeError):
    """Raised when a frame source cannot be opened or read."""


@dataclass(frozen=True)
class Region:
    """Rectangular sampling region in pixel coordinates."""
    x: int
    y: int
    width: int
    height: int

    @classmethod
    def default_for(cls, frame_width: int, frame_height: int) -> "Region":
        """Heuristic forehead region for a frame of the given size."""
        return cls(
            x=int(frame_width * REGION_X_FRACTION),
            y=int(frame_height * REGION_Y_FRACTION),
            width=max(1, int(frame_width * REGION_WIDTH_FRACTION)),
            height=max(1, int(frame_height * REGION_HEIGHT_FRACTION)),
        )


@dataclass(frozen=True)
class ChannelMeans:
    """
    Average channel intensities of one frame's sampling region.

    `timestamp` (ms) is set by sources that know the capture time; when it
    is None the pipeline stamps the sample with its own clock.
    """
    red: float
    green: float
    blue: float
    timestamp: float | None = None


class FrameSource(Protocol):
    def open(self) -> None: ...

    def frame_size(self) -> tuple[int, int]: ...

    def next_frame(self, region: Region) -> ChannelMeans: ...

    def close(self) -> None: ...


def region_means(frame: np.ndarray, region: Region) -> ChannelMeans:
    """
    Return the spatial mean of R, G, B over `region` of a BGR frame.

    The region is clipped to the frame; a region that falls entirely
    outside it is an error.
    """
    if frame.ndim != 3 or frame.shape[2] < 3:
        raise ValueError(f"Expected an (H, W, 3) colour frame, got shape {frame.shape}.")

    h, w = frame.shape[:2]
    x0, y0 = max(0, region.x), max(0, region.y)
    x1, y1 = min(w, region.x + region.width), min(h, region.y + region.height)
    if x1 <= x0 or y1 <= y0:
        raise ValueError(f"Sampling region {region} lies outside the {w}x{h} frame.")

    crop = frame[y0:y1, x0:x1]
    # OpenCV uses BGR order
    b_mean = crop[:, :, 0].mean()
    g_mean = crop[:, :, 1].mean()
    r_mean = crop[:, :, 2].mean()
    return ChannelMeans(red=float(r_mean), green=float(g_mean), blue=float(b_mean))


class CameraFrameSource:
    """Webcam frame source backed by `cv2.VideoCapture`."""

    def __init__(self, device_index: int = CAMERA_INDEX):
        self._device_index = device_index
        self._cap: cv2.VideoCapture | None = None
        self._size = (CAMERA_WIDTH, CAMERA_HEIGHT)

    # ── FrameSource ──────────────────────────────────────────────────────────

    def open(self) -> None:
        if self._cap is not None:
            logger.warning("Camera already open — ignoring duplicate open().")
            return

        cap = cv2.VideoCapture(self._device_index)
        # Backend may ignore these
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, CAMERA_WIDTH)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, CAMERA_HEIGHT)
        cap.set(cv2.CAP_PROP_FPS, CAMERA_FPS)

        if not cap.isOpened():
            cap.release()
            logger.error(
                "Failed to open camera at index %d. "
                "Check that a webcam is connected and not in use.",
                self._device_index,
            )
            raise FrameSourceError(f"Could not open camera at index {self._device_index}.")

        actual_w = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH)) or CAMERA_WIDTH
        actual_h = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT)) or CAMERA_HEIGHT
        self._size = (actual_w, actual_h)
        self._cap = cap
        logger.info("Camera opened — %dx%d @ %.1f FPS", actual_w, actual_h, cap.get(cv2.CAP_PROP_FPS))

    def frame_size(self) -> tuple[int, int]:
        return self._size

    def next_frame(self, region: Region) -> ChannelMeans:
        if self._cap is None:
            raise FrameSourceError("Camera is not open.")
        ret, frame = self._cap.read()
        if not ret or frame is None:
            raise FrameSourceError("Frame grab returned no image — camera may have been disconnected.")
        return region_means(frame, region)

    def close(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            logger.info("Camera released.")
