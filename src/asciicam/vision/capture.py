"""Camera capture sources feeding the render loop."""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
import sys
import threading
from typing import Protocol

import cv2
from loguru import logger

from ..errors import DeviceUnavailableError, PermissionDeniedError
from .frames import RasterFrame


@dataclass(frozen=True, slots=True)
class CaptureConstraints:
    """Device selection and the frame size to ask the driver for."""

    camera_index: int = 0
    width: int = 640
    height: int = 480


class CaptureSource(Protocol):
    def acquire(self, constraints: CaptureConstraints) -> object: ...

    def latest_frame(self, handle: object) -> RasterFrame | None: ...

    def release(self, handle: object) -> None: ...


@dataclass(slots=True, eq=False)
class OpenCVHandle:
    """An open camera plus the reader thread keeping its newest frame."""

    capture: cv2.VideoCapture
    camera_index: int
    shutdown: threading.Event = field(default_factory=threading.Event)
    lock: threading.Lock = field(default_factory=threading.Lock)
    frame: RasterFrame | None = None
    thread: threading.Thread | None = None
    released: bool = False


class OpenCVCaptureSource:
    """Captures frames from a local camera through OpenCV.

    ``cv2.VideoCapture.read`` blocks until the driver delivers a frame, so a
    daemon thread reads continuously and keeps only the newest frame.
    ``latest_frame`` then returns immediately and never stalls a display tick.
    """

    def __init__(self, read_backoff: float = 0.01) -> None:
        self._read_backoff = read_backoff

    def acquire(self, constraints: CaptureConstraints) -> OpenCVHandle:
        """Open the camera described by ``constraints`` and start reading.

        Raises:
            PermissionDeniedError: The device node exists but is not accessible
            DeviceUnavailableError: The camera could not be opened
        """
        self._check_device_permissions(constraints.camera_index)

        capture = cv2.VideoCapture(constraints.camera_index)
        if not capture.isOpened():
            capture.release()
            raise DeviceUnavailableError(f"Unable to open camera {constraints.camera_index}")

        capture.set(cv2.CAP_PROP_FRAME_WIDTH, constraints.width)
        capture.set(cv2.CAP_PROP_FRAME_HEIGHT, constraints.height)

        handle = OpenCVHandle(capture=capture, camera_index=constraints.camera_index)
        handle.thread = threading.Thread(
            target=self._read_frames,
            args=(handle,),
            daemon=True,
            name=f"CameraReader-{constraints.camera_index}",
        )
        handle.thread.start()
        logger.success("OpenCVCaptureSource: Camera {} opened.", constraints.camera_index)
        return handle

    def latest_frame(self, handle: OpenCVHandle) -> RasterFrame | None:
        with handle.lock:
            return handle.frame

    def release(self, handle: OpenCVHandle) -> None:
        if handle.released:
            return
        handle.released = True
        handle.shutdown.set()
        if handle.thread is not None and handle.thread is not threading.current_thread():
            handle.thread.join(timeout=2.0)
        handle.capture.release()
        with handle.lock:
            handle.frame = None
        logger.info("OpenCVCaptureSource: Camera {} released.", handle.camera_index)

    def _read_frames(self, handle: OpenCVHandle) -> None:
        """Reader thread body."""
        warned = False
        while not handle.shutdown.is_set():
            ret, frame = handle.capture.read()
            if not ret or frame is None:
                if not warned:
                    logger.warning("OpenCVCaptureSource: No frame from camera {}.", handle.camera_index)
                    warned = True
                handle.shutdown.wait(timeout=self._read_backoff)
                continue

            warned = False
            raster = RasterFrame.from_bgr(frame)
            with handle.lock:
                handle.frame = raster

    @staticmethod
    def _check_device_permissions(camera_index: int) -> None:
        # Only V4L2 exposes a device node we can inspect before opening
        if not sys.platform.startswith("linux"):
            return
        device = Path(f"/dev/video{camera_index}")
        if device.exists() and not os.access(device, os.R_OK | os.W_OK):
            raise PermissionDeniedError(f"Permission denied for camera device {device}")
