from __future__ import annotations

from dataclasses import dataclass

import cv2
import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True, slots=True)
class RasterFrame:
    """Read-only RGBA snapshot of one captured image.

    Pixels are stored as a ``(height, width, 4)`` uint8 array addressed by
    ``pixels[row, col]``. Three-channel RGB input gets an opaque alpha plane.
    """

    pixels: NDArray[np.uint8]

    def __post_init__(self) -> None:
        # Detach from the caller's buffer
        pixels = np.array(self.pixels, copy=True)
        if pixels.ndim != 3 or pixels.shape[2] not in (3, 4):
            raise ValueError(f"RasterFrame expects (height, width, 3|4) pixels, got shape {pixels.shape}")
        if pixels.shape[0] < 1 or pixels.shape[1] < 1:
            raise ValueError("RasterFrame must be at least 1x1 pixels")
        if pixels.dtype != np.uint8:
            pixels = np.clip(pixels, 0, 255).astype(np.uint8)
        if pixels.shape[2] == 3:
            alpha = np.full(pixels.shape[:2] + (1,), 255, dtype=np.uint8)
            pixels = np.concatenate([pixels, alpha], axis=2)
        view = pixels.view()
        view.flags.writeable = False
        object.__setattr__(self, "pixels", view)

    @classmethod
    def from_bgr(cls, frame: NDArray[np.uint8]) -> RasterFrame:
        """Build a frame from an OpenCV BGR image."""
        return cls(cv2.cvtColor(frame, cv2.COLOR_BGR2RGBA))

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])


@dataclass(frozen=True, slots=True)
class SampleGrid:
    """Per-block luminance values, indexed ``luminance[row, col]``."""

    luminance: NDArray[np.float64]

    @property
    def cols(self) -> int:
        return int(self.luminance.shape[1])

    @property
    def rows(self) -> int:
        return int(self.luminance.shape[0])


@dataclass(frozen=True, slots=True)
class RenderedFrame:
    """One published tick: the text frame, its grid size and the current rate."""

    text: str
    cols: int
    rows: int
    fps: int

    @classmethod
    def empty(cls) -> RenderedFrame:
        return cls(text="", cols=0, rows=0, fps=0)

    @property
    def characters(self) -> int:
        return self.cols * self.rows
