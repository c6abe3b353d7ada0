from __future__ import annotations

import contextlib

from loguru import logger
import numpy as np
import pytest

from asciicam.vision.capture import CaptureConstraints
from asciicam.vision.frames import RasterFrame, RenderedFrame


@pytest.fixture
def caplog(caplog):
    """Forward loguru records to pytest's caplog."""
    handler_id = logger.add(
        caplog.handler,
        format="{message}",
        level=0,
        filter=lambda record: record["level"].no >= caplog.handler.level,
        enqueue=False,
    )
    yield caplog
    # The TUI replaces every loguru sink on load
    with contextlib.suppress(ValueError):
        logger.remove(handler_id)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


def solid_frame(width: int, height: int, value: int) -> RasterFrame:
    pixels = np.full((height, width, 4), value, dtype=np.uint8)
    pixels[..., 3] = 255
    return RasterFrame(pixels)


class FakeCaptureSource:
    """Capture source handing out a fixed frame, or failing to acquire."""

    def __init__(self, frame: RasterFrame | None = None, error: Exception | None = None) -> None:
        self.frame = frame
        self.error = error
        self.acquired: list[CaptureConstraints] = []
        self.released: list[object] = []
        self.frame_requests = 0

    def acquire(self, constraints: CaptureConstraints) -> object:
        if self.error is not None:
            raise self.error
        self.acquired.append(constraints)
        return object()

    def latest_frame(self, handle: object) -> RasterFrame | None:
        self.frame_requests += 1
        return self.frame

    def release(self, handle: object) -> None:
        self.released.append(handle)


class RecordingSink:
    def __init__(self) -> None:
        self.frames: list[RenderedFrame] = []

    def publish(self, frame: RenderedFrame) -> None:
        self.frames.append(frame)


class FakeClock:
    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def white_frame() -> RasterFrame:
    return solid_frame(4, 4, 255)


@pytest.fixture
def fake_source(white_frame: RasterFrame) -> FakeCaptureSource:
    return FakeCaptureSource(frame=white_frame)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
