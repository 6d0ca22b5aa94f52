"""
photo-trng: true random numbers from the sensor noise in two photographs.

Taps the least significant bit of every pixel, XORs the two images'
streams together, removes bias with a Von Neumann extractor and checks
every stage against the FIPS 140-2 statistical test battery.
"""

__version__ = "0.1.0"

from photo_trng.errors import (
    InvalidBitCharacter,
    LengthMismatch,
    MismatchedImageDimensions,
    TRNGError,
)
from photo_trng.fips import OverallResult, validate
from photo_trng.lsb import PixelBuffer, extract_lsb
from photo_trng.pipeline import PipelineResult, run_pipeline

__all__ = [
    "InvalidBitCharacter",
    "LengthMismatch",
    "MismatchedImageDimensions",
    "OverallResult",
    "PipelineResult",
    "PixelBuffer",
    "TRNGError",
    "extract_lsb",
    "run_pipeline",
    "validate",
    "__version__",
]
