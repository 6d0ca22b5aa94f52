"""Least-significant-bit extraction from RGBA pixel data.

Image sensor pixels accumulate charge from photon arrivals (a Poisson
process) and thermal dark current. The LSB of each channel byte is
dominated by that noise, so one bit per pixel is tapped as raw entropy.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from photo_trng.config import BYTES_PER_PIXEL, LSB_CHANNEL_OFFSET


@dataclass(frozen=True)
class PixelBuffer:
    """Decoded image: ``width * height`` pixels of 4 bytes (R, G, B, A), row-major."""

    data: bytes
    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError(f"invalid dimensions {self.width}x{self.height}")
        expected = self.width * self.height * BYTES_PER_PIXEL
        if len(self.data) != expected:
            raise ValueError(
                f"pixel buffer holds {len(self.data)} bytes, "
                f"expected {expected} for {self.width}x{self.height} RGBA"
            )

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    @property
    def dimensions(self) -> tuple[int, int]:
        return (self.width, self.height)

    @classmethod
    def from_array(cls, rgba: np.ndarray) -> PixelBuffer:
        """Build from a ``(height, width, 4)`` uint8 array."""
        rgba = np.asarray(rgba)
        if rgba.ndim != 3 or rgba.shape[2] != BYTES_PER_PIXEL:
            raise ValueError(f"expected (height, width, 4) array, got shape {rgba.shape}")
        height, width = rgba.shape[:2]
        return cls(data=rgba.astype(np.uint8).tobytes(), width=width, height=height)


def extract_lsb(pixels: PixelBuffer) -> np.ndarray:
    """Return one bit per pixel: the LSB of the red byte, in row-major order."""
    flat = np.frombuffer(pixels.data, dtype=np.uint8)
    channel = flat[LSB_CHANNEL_OFFSET::BYTES_PER_PIXEL]
    bits = (channel & 1).astype(np.uint8)
    bits.flags.writeable = False
    return bits
