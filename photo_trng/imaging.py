"""Decode image files into RGBA pixel buffers (requires Pillow)."""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
from PIL import Image

from photo_trng.lsb import PixelBuffer

logger = logging.getLogger(__name__)

_LOSSY_FORMATS = {"JPEG", "MPO", "WEBP"}


def load_pixels(path: str | Path) -> PixelBuffer:
    """Open *path*, convert to RGBA and return its pixels in row-major order.

    Lossy formats smooth away the sensor noise in the low bits; a warning is
    logged for them but they are still decoded.
    """
    with Image.open(path) as img:
        if img.format in _LOSSY_FORMATS:
            logger.warning(
                "%s is %s; for best results use RAW files converted to PNG or BMP",
                Path(path).name, img.format,
            )
        rgba = np.array(img.convert("RGBA"))
    return PixelBuffer.from_array(rgba)
