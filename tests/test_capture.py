import time
from pathlib import Path
from unittest.mock import MagicMock

import numpy as np
import pytest

from asciicam.errors import DeviceUnavailableError, PermissionDeniedError
from asciicam.vision.capture import CaptureConstraints, OpenCVCaptureSource
from asciicam.vision.frames import RasterFrame


def _wait_for_frame(source, handle, timeout: float = 2.0) -> RasterFrame | None:
    deadline = time.time() + timeout
    while time.time() < deadline:
        frame = source.latest_frame(handle)
        if frame is not None:
            return frame
        time.sleep(0.01)
    return None


@pytest.fixture
def video_capture(mocker):
    capture = MagicMock()
    capture.isOpened.return_value = True
    bgr = np.zeros((4, 6, 3), dtype=np.uint8)
    bgr[..., 0] = 10
    bgr[..., 1] = 20
    bgr[..., 2] = 30
    capture.read.return_value = (True, bgr)
    mocker.patch("asciicam.vision.capture.cv2.VideoCapture", return_value=capture)
    mocker.patch.object(OpenCVCaptureSource, "_check_device_permissions")
    return capture


def test_acquire_reads_frames_in_background(video_capture):
    source = OpenCVCaptureSource()
    handle = source.acquire(CaptureConstraints(camera_index=0, width=320, height=240))

    frame = _wait_for_frame(source, handle)
    source.release(handle)

    assert frame is not None
    assert (frame.width, frame.height) == (6, 4)
    assert frame.pixels[0, 0].tolist() == [30, 20, 10, 255]
    video_capture.set.assert_any_call(3, 320)
    video_capture.set.assert_any_call(4, 240)


def test_release_is_idempotent(video_capture, caplog):
    source = OpenCVCaptureSource()
    handle = source.acquire(CaptureConstraints())

    source.release(handle)
    source.release(handle)

    video_capture.release.assert_called_once()
    assert source.latest_frame(handle) is None
    assert not handle.thread.is_alive()
    assert "released" in caplog.text


def test_failed_reads_leave_frame_unset(video_capture):
    video_capture.read.return_value = (False, None)
    source = OpenCVCaptureSource(read_backoff=0.001)
    handle = source.acquire(CaptureConstraints())

    time.sleep(0.05)
    frame = source.latest_frame(handle)
    source.release(handle)

    assert frame is None


def test_unopened_camera_is_unavailable(mocker):
    capture = MagicMock()
    capture.isOpened.return_value = False
    mocker.patch("asciicam.vision.capture.cv2.VideoCapture", return_value=capture)
    mocker.patch.object(OpenCVCaptureSource, "_check_device_permissions")

    with pytest.raises(DeviceUnavailableError):
        OpenCVCaptureSource().acquire(CaptureConstraints(camera_index=3))

    capture.release.assert_called_once()


def test_inaccessible_device_node_is_permission_denied(mocker):
    video_capture = mocker.patch("asciicam.vision.capture.cv2.VideoCapture")
    mocker.patch("asciicam.vision.capture.sys.platform", "linux")
    mocker.patch.object(Path, "exists", return_value=True)
    mocker.patch("asciicam.vision.capture.os.access", return_value=False)

    with pytest.raises(PermissionDeniedError):
        OpenCVCaptureSource().acquire(CaptureConstraints(camera_index=0))

    video_capture.assert_not_called()
