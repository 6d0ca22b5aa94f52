"""Bitstream conversions and bitwise XOR.

A bitstream is a 1-D ``uint8`` numpy array holding only 0 and 1, marked
read-only once produced. The canonical text form is a string of ``'0'`` and
``'1'`` characters; the export form is lowercase hexadecimal.
"""

from __future__ import annotations

from typing import Sequence, Union

import numpy as np

from photo_trng.errors import InvalidBitCharacter, LengthMismatch

BitsLike = Union[str, Sequence[int], np.ndarray]

_HEX_DIGITS = np.frombuffer(b"0123456789abcdef", dtype=np.uint8)
_NIBBLE_WEIGHTS = np.array([8, 4, 2, 1], dtype=np.uint8)

# ASCII code -> nibble value, 255 marks an invalid character
_HEX_LOOKUP = np.full(128, 255, dtype=np.uint8)
_HEX_LOOKUP[ord("0"):ord("9") + 1] = np.arange(10)
_HEX_LOOKUP[ord("a"):ord("f") + 1] = np.arange(10, 16)
_HEX_LOOKUP[ord("A"):ord("F") + 1] = np.arange(10, 16)


def _freeze(bits: np.ndarray) -> np.ndarray:
    bits.flags.writeable = False
    return bits


def _codepoints(text: str) -> np.ndarray:
    return np.frombuffer(text.encode("utf-32-le"), dtype="<u4")


def parse_bits(text: str) -> np.ndarray:
    """Parse a ``'0'``/``'1'`` string into a read-only bit array.

    Raises :class:`InvalidBitCharacter` on the first character that is not
    a binary digit, positioned within *text* as given. Surrounding
    whitespace is ignored.
    """
    stripped = text.strip()
    lead = len(text) - len(text.lstrip())
    # Code points below '0' wrap around and land above 1 as well.
    values = _codepoints(stripped) - np.uint32(ord("0"))
    bad = np.flatnonzero(values > 1)
    if bad.size:
        pos = int(bad[0])
        raise InvalidBitCharacter(text[pos + lead], pos + lead)
    return _freeze(values.astype(np.uint8))


def as_bits(value: BitsLike) -> np.ndarray:
    """Normalise a string, sequence or array into a read-only bit array."""
    if isinstance(value, str):
        return parse_bits(value)
    arr = np.asarray(value).ravel()
    if arr.dtype == np.uint8 and not arr.flags.writeable:
        # Already produced by a pipeline stage.
        if arr.size and arr.max() > 1:
            pos = int(np.flatnonzero(arr > 1)[0])
            raise InvalidBitCharacter(str(arr[pos]), pos)
        return arr
    bad = np.flatnonzero((arr != 0) & (arr != 1))
    if bad.size:
        pos = int(bad[0])
        raise InvalidBitCharacter(str(arr[pos]), pos)
    return _freeze(arr.astype(np.uint8))


def to_binary(bits: BitsLike) -> str:
    """Render bits as a canonical ``'0'``/``'1'`` string."""
    bits = as_bits(bits)
    return (bits + np.uint8(ord("0"))).tobytes().decode("ascii")


def xor_bits(bits_a: BitsLike, bits_b: BitsLike) -> np.ndarray:
    """Bitwise XOR of two bitstreams of the same length."""
    a = as_bits(bits_a)
    b = as_bits(bits_b)
    if len(a) != len(b):
        raise LengthMismatch(len(a), len(b))
    return _freeze(np.bitwise_xor(a, b))


def to_hex(bits: BitsLike) -> str:
    """Convert bits to lowercase hex, one digit per 4 bits, left to right.

    A trailing group of fewer than 4 bits is read as a number on its own and
    still emits one digit (``'101'`` -> ``'5'``), so the output always has
    ``ceil(len(bits) / 4)`` digits.
    """
    bits = as_bits(bits)
    full = len(bits) - len(bits) % 4
    nibbles = bits[:full].reshape(-1, 4) @ _NIBBLE_WEIGHTS
    out = _HEX_DIGITS[nibbles].tobytes().decode("ascii")
    tail = bits[full:]
    if tail.size:
        out += format(int(to_binary(tail), 2), "x")
    return out


def from_hex(text: str) -> np.ndarray:
    """Expand a hex string into bits, 4 per digit."""
    stripped = text.strip()
    lead = len(text) - len(text.lstrip())
    codes = _codepoints(stripped)
    values = np.where(codes < 128, _HEX_LOOKUP[np.minimum(codes, 127)], 255)
    bad = np.flatnonzero(values == 255)
    if bad.size:
        pos = int(bad[0]) + lead
        raise InvalidBitCharacter(text[pos], pos)
    nibbles = np.unpackbits(values.astype(np.uint8)[:, None], axis=1)[:, 4:]
    return _freeze(nibbles.ravel())


def pad_binary(value: int, width: int) -> str:
    """Base-2 representation of *value*, left-padded with zeros to *width*."""
    if value < 0:
        raise ValueError(f"value must be non-negative, got {value}")
    return format(value, "b").zfill(width)


def pad_hex_byte(value: int) -> str:
    """Two-digit lowercase hex for a single byte value (0-255)."""
    if not 0 <= value <= 255:
        raise ValueError(f"byte value out of range: {value}")
    return f"{value:02x}"
