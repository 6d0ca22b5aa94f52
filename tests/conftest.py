"""Shared fixtures: synthetic RGBA images with known LSB patterns."""

import numpy as np
import pytest

from photo_trng.lsb import PixelBuffer

# red-channel LSBs of the two 4x4 test images, row-major
PATTERN_A = "0110100111000011"
PATTERN_B = "1100101001100101"


def rgba_with_red_lsbs(pattern: str, width: int, height: int) -> np.ndarray:
    """RGBA array whose red LSBs spell *pattern*; green and blue carry the inverse."""
    bits = np.array([int(c) for c in pattern], dtype=np.uint8).reshape(height, width)
    rgba = np.empty((height, width, 4), dtype=np.uint8)
    rgba[..., 0] = 200 + bits
    rgba[..., 1] = 101 - bits
    rgba[..., 2] = 51 - bits
    rgba[..., 3] = 255
    return rgba


def random_pixels(width: int, height: int, seed: int) -> PixelBuffer:
    rng = np.random.default_rng(seed)
    return PixelBuffer.from_array(rng.integers(0, 256, (height, width, 4), dtype=np.uint8))


@pytest.fixture
def image_a() -> PixelBuffer:
    return PixelBuffer.from_array(rgba_with_red_lsbs(PATTERN_A, 4, 4))


@pytest.fixture
def image_b() -> PixelBuffer:
    return PixelBuffer.from_array(rgba_with_red_lsbs(PATTERN_B, 4, 4))
