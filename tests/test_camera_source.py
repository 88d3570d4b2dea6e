"""Tests for region sampling, the OpenCV camera source and the synthetic sources."""

import cv2
import numpy as np
import pytest

import camera.source as source_module
from camera.source import CameraFrameSource, ChannelMeans, FrameSourceError, Region, region_means
from camera.synthetic import PushFrameSource, SyntheticFrameSource
from utils.logger import get_logger, set_level


def bgr_frame(width=64, height=48, bgr=(10, 20, 30)) -> np.ndarray:
    frame = np.zeros((height, width, 3), dtype=np.uint8)
    frame[:, :] = bgr
    return frame


class FakeCapture:
    """Stand-in for cv2.VideoCapture returning solid frames."""

    def __init__(self, index, opened=True, frames=3):
        self.index = index
        self.opened = opened
        self.frames = frames
        self.released = False

    def set(self, prop, value):
        return True

    def get(self, prop):
        return 0.0

    def isOpened(self):
        return self.opened

    def read(self):
        if self.frames <= 0:
            return False, None
        self.frames -= 1
        return True, bgr_frame()

    def release(self):
        self.released = True


class TestRegion:
    def test_default_region_is_forehead_strip(self):
        assert Region.default_for(640, 480) == Region(192, 48, 256, 72)

    def test_tiny_frame_still_has_area(self):
        region = Region.default_for(2, 2)
        assert region.width >= 1 and region.height >= 1


class TestRegionMeans:
    def test_channels_follow_bgr_order(self):
        means = region_means(bgr_frame(), Region(0, 0, 10, 10))
        assert (means.red, means.green, means.blue) == (30.0, 20.0, 10.0)
        assert means.timestamp is None

    def test_only_region_pixels_averaged(self):
        frame = bgr_frame(bgr=(0, 0, 0))
        frame[10:20, 10:20] = (0, 200, 0)
        assert region_means(frame, Region(10, 10, 10, 10)).green == 200.0

    def test_region_clipped_to_frame(self):
        means = region_means(bgr_frame(), Region(60, 40, 100, 100))
        assert means.green == 20.0

    def test_region_outside_frame(self):
        with pytest.raises(ValueError):
            region_means(bgr_frame(), Region(100, 100, 10, 10))

    def test_grayscale_frame_rejected(self):
        with pytest.raises(ValueError):
            region_means(np.zeros((48, 64), dtype=np.uint8), Region(0, 0, 5, 5))


class TestCameraFrameSource:
    def test_reads_region_means(self, monkeypatch):
        monkeypatch.setattr(source_module.cv2, "VideoCapture", FakeCapture)
        camera = CameraFrameSource(device_index=2)
        camera.open()

        assert camera.frame_size() == (640, 480)
        means = camera.next_frame(Region(0, 0, 8, 8))
        assert means.green == 20.0
        camera.close()

    def test_open_failure(self, monkeypatch):
        monkeypatch.setattr(cv2, "VideoCapture", lambda index: FakeCapture(index, opened=False))
        with pytest.raises(FrameSourceError):
            CameraFrameSource().open()

    def test_read_failure(self, monkeypatch):
        monkeypatch.setattr(cv2, "VideoCapture", lambda index: FakeCapture(index, frames=0))
        camera = CameraFrameSource()
        camera.open()
        with pytest.raises(FrameSourceError):
            camera.next_frame(Region(0, 0, 8, 8))

    def test_read_before_open(self):
        with pytest.raises(FrameSourceError):
            CameraFrameSource().next_frame(Region(0, 0, 8, 8))


class TestSyntheticSources:
    def test_synthetic_is_deterministic(self):
        region = Region(0, 0, 1, 1)
        a = SyntheticFrameSource(noise_std=1.0, seed=5)
        b = SyntheticFrameSource(noise_std=1.0, seed=5)
        assert [a.next_frame(region) for _ in range(20)] == [b.next_frame(region) for _ in range(20)]

    def test_synthetic_time_base(self):
        source = SyntheticFrameSource(fps=30)
        region = Region(0, 0, 1, 1)
        stamps = [source.next_frame(region).timestamp for _ in range(3)]
        assert stamps == pytest.approx([0.0, 1000 / 30, 2000 / 30])

    def test_push_source_fifo(self):
        source = PushFrameSource()
        source.open()
        frames = [ChannelMeans(1.0, float(i), 1.0, timestamp=float(i)) for i in range(3)]
        assert source.feed(frames) == 3
        assert source.pending == 3
        assert source.next_frame(Region(0, 0, 1, 1)).green == 0.0
        assert source.pending == 2

    def test_push_source_empty(self):
        with pytest.raises(FrameSourceError):
            PushFrameSource().next_frame(Region(0, 0, 1, 1))


def test_logger_registry_and_level():
    first = get_logger("tests.camera")
    assert get_logger("tests.camera") is first
    assert not first.propagate

    set_level("DEBUG")
    assert first.level == 10
    set_level("INFO")
    assert first.level == 20
