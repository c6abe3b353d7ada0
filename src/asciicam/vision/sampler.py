"""Block sampler turning a raster frame into a grid of luminance values."""

from __future__ import annotations

import numpy as np

from .frames import RasterFrame, SampleGrid

# Upper bound of an 8-bit colour channel
CHANNEL_MAX = 255.0


def grid_shape(width: int, height: int, block_width: int, block_height: int) -> tuple[int, int]:
    """Return ``(cols, rows)`` covered by whole blocks; partial edge blocks are dropped."""
    if block_width < 1 or block_height < 1:
        raise ValueError(f"Block size must be at least 1x1, got {block_width}x{block_height}")
    return width // block_width, height // block_height


def sample(
    frame: RasterFrame,
    block_width: int,
    block_height: int,
    invert: bool = False,
) -> SampleGrid:
    """Average the brightness of each block of a frame.

    Brightness of a pixel is the unweighted mean of its red, green and blue
    channels; alpha is ignored. Pixels to the right of the last whole column of
    blocks and below the last whole row are never read.

    Args:
        frame: Source raster
        block_width: Block width in pixels
        block_height: Block height in pixels
        invert: Replace each luminance ``v`` with ``255 - v``

    Returns:
        Grid of ``floor(width / block_width)`` by ``floor(height / block_height)``
        luminance values in ``[0, 255]``
    """
    cols, rows = grid_shape(frame.width, frame.height, block_width, block_height)
    if cols == 0 or rows == 0:
        return SampleGrid(np.zeros((rows, cols), dtype=np.float64))

    covered = frame.pixels[: rows * block_height, : cols * block_width, :3].astype(np.float64)
    brightness = covered.sum(axis=2) / 3.0

    # (rows, block_height, cols, block_width) -> mean over the in-block axes
    blocks = brightness.reshape(rows, block_height, cols, block_width)
    luminance = np.clip(blocks.mean(axis=(1, 3)), 0.0, CHANNEL_MAX)

    if invert:
        luminance = CHANNEL_MAX - luminance

    return SampleGrid(luminance)
