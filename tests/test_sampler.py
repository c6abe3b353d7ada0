import numpy as np
import pytest

from asciicam.vision.frames import RasterFrame
from asciicam.vision.sampler import grid_shape, sample

from conftest import solid_frame


def _random_frame(width: int, height: int, seed: int = 0) -> RasterFrame:
    rng = np.random.default_rng(seed)
    return RasterFrame(rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8))


@pytest.mark.parametrize(
    ("width", "height", "block_width", "block_height"),
    [(4, 4, 2, 2), (10, 7, 3, 2), (640, 480, 6, 12), (5, 5, 1, 1), (9, 3, 4, 3)],
)
def test_grid_has_floor_dimensions_and_channel_range(width, height, block_width, block_height):
    grid = sample(_random_frame(width, height), block_width, block_height)

    assert grid.cols == width // block_width
    assert grid.rows == height // block_height
    assert grid.luminance.shape == (height // block_height, width // block_width)
    assert grid.luminance.min() >= 0.0
    assert grid.luminance.max() <= 255.0


def test_white_frame_samples_to_full_brightness(white_frame):
    grid = sample(white_frame, 2, 2)

    assert grid.luminance.tolist() == [[255.0, 255.0], [255.0, 255.0]]


def test_inverted_white_frame_samples_to_zero(white_frame):
    grid = sample(white_frame, 2, 2, invert=True)

    assert grid.luminance.tolist() == [[0.0, 0.0], [0.0, 0.0]]


def test_sampling_is_repeatable():
    frame = _random_frame(37, 23, seed=7)

    first = sample(frame, 3, 5, invert=True)
    second = sample(frame, 3, 5, invert=True)

    np.testing.assert_array_equal(first.luminance, second.luminance)


def test_inversion_mirrors_every_block():
    frame = _random_frame(64, 48, seed=3)

    plain = sample(frame, 4, 8)
    inverted = sample(frame, 4, 8, invert=True)

    np.testing.assert_allclose(inverted.luminance, 255.0 - plain.luminance)


def test_brightness_is_unweighted_channel_mean_ignoring_alpha():
    pixels = np.zeros((2, 2, 4), dtype=np.uint8)
    pixels[..., 0] = 30
    pixels[..., 1] = 60
    pixels[..., 2] = 90
    pixels[..., 3] = 0

    grid = sample(RasterFrame(pixels), 2, 2)

    assert grid.luminance.tolist() == [[60.0]]


def test_block_value_is_mean_of_its_pixels():
    pixels = np.zeros((2, 4, 4), dtype=np.uint8)
    pixels[0, 0, :3] = 255
    pixels[1, 3, :3] = 120

    grid = sample(RasterFrame(pixels), 2, 2)

    assert grid.luminance.tolist() == [[63.75, 30.0]]


def test_partial_edge_blocks_are_discarded():
    # Right column and bottom row are white; they do not fill a whole block
    pixels = np.zeros((5, 5, 4), dtype=np.uint8)
    pixels[:, 4, :3] = 255
    pixels[4, :, :3] = 255

    grid = sample(RasterFrame(pixels), 2, 2)

    assert (grid.cols, grid.rows) == (2, 2)
    assert not grid.luminance.any()


def test_block_larger_than_frame_gives_empty_grid():
    grid = sample(solid_frame(4, 4, 128), 5, 2)

    assert (grid.cols, grid.rows) == (0, 2)
    assert grid.luminance.size == 0


def test_block_same_size_as_frame_gives_single_cell():
    grid = sample(solid_frame(3, 2, 90), 3, 2)

    assert grid.luminance.tolist() == [[90.0]]


@pytest.mark.parametrize(("block_width", "block_height"), [(0, 1), (1, 0), (-2, 2)])
def test_invalid_block_size_rejected(block_width, block_height):
    with pytest.raises(ValueError):
        sample(solid_frame(4, 4, 0), block_width, block_height)


def test_grid_shape_matches_floor_division():
    assert grid_shape(640, 480, 6, 12) == (106, 40)
