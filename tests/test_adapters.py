import cv2
import numpy as np
import pytest

from face_identity.camera import CameraStream
from face_identity.detector import HaarFaceDetector
from face_identity.exceptions import CameraError, DetectorError


def test_default_cascade_finds_nothing_in_blank_frame():
    detector = HaarFaceDetector()
    assert detector.detect(np.zeros((120, 160, 3), dtype=np.uint8)) == []


def test_missing_cascade_fails(tmp_path):
    with pytest.raises(DetectorError):
        HaarFaceDetector(cascade_path=tmp_path / "missing.xml")


def test_camera_read_requires_open():
    with pytest.raises(CameraError, match="not initialized"):
        CameraStream(camera_index=0).read()


def test_opencv_without_cascade_api_fails(monkeypatch):
    monkeypatch.delattr(cv2, "CascadeClassifier", raising=False)
    with pytest.raises(DetectorError, match="CascadeClassifier"):
        HaarFaceDetector()


class _FakeCapture:
    def __init__(self, reads, opened=True):
        self._reads = list(reads)
        self._opened = opened
        self.released = False
        self.props = {}

    def isOpened(self):
        return self._opened

    def set(self, prop, value):
        self.props[prop] = value
        return True

    def get(self, prop):
        return self.props.get(prop, 0)

    def read(self):
        if not self._reads:
            return False, None
        return self._reads.pop(0)

    def release(self):
        self.released = True


def test_camera_skips_dropped_reads(monkeypatch):
    frame = np.zeros((4, 4, 3), dtype=np.uint8)
    capture = _FakeCapture([(False, None), (True, frame)])
    monkeypatch.setattr(cv2, "VideoCapture", lambda index: capture)

    with CameraStream(camera_index=3, max_failed_reads=3) as cam:
        assert cam.read() is frame
        assert cam.frame_size == (cam.requested_size[0], cam.requested_size[1])

    assert capture.released
    assert not cam.is_open


def test_camera_gives_up_after_repeated_failures(monkeypatch):
    monkeypatch.setattr(cv2, "VideoCapture", lambda index: _FakeCapture([]))

    with CameraStream(camera_index=0, max_failed_reads=2) as cam:
        with pytest.raises(CameraError, match="2 attempts"):
            next(cam.frames())


def test_camera_that_does_not_open(monkeypatch):
    capture = _FakeCapture([], opened=False)
    monkeypatch.setattr(cv2, "VideoCapture", lambda index: capture)

    with pytest.raises(CameraError, match="Unable to open"):
        CameraStream(camera_index=7).open()
    assert capture.released
