"""Exception hierarchy for the extraction pipeline.

All fatal input errors derive from ``TRNGError``. Too few bits for the
randomness battery is not an error; see ``OverallResult.insufficient``.
"""

from __future__ import annotations


class TRNGError(Exception):
    """Base class for fatal pipeline errors."""


class LengthMismatch(TRNGError):
    """Raised when two bitstreams of different lengths are XORed."""

    def __init__(self, len_a: int, len_b: int) -> None:
        super().__init__(
            f"Cannot XOR bitstreams of different lengths ({len_a} vs {len_b} bits)"
        )
        self.len_a = len_a
        self.len_b = len_b


class MismatchedImageDimensions(TRNGError):
    """Raised when the two source images do not have the same pixel count."""

    def __init__(self, dims_a: tuple[int, int], dims_b: tuple[int, int]) -> None:
        super().__init__(
            f"Images must have identical dimensions: "
            f"{dims_a[0]}x{dims_a[1]} vs {dims_b[0]}x{dims_b[1]}"
        )
        self.dims_a = dims_a
        self.dims_b = dims_b


class InvalidBitCharacter(TRNGError):
    """Raised when a bitstream contains something other than 0 or 1."""

    def __init__(self, character: str, position: int) -> None:
        super().__init__(f"Invalid bit character {character!r} at position {position}")
        self.character = character
        self.position = position
