"""Entropy conditioning: XOR combination and Von Neumann debiasing.

Transforms two raw, potentially biased LSB streams into one stream with
any fixed bias removed.
"""

from __future__ import annotations

import numpy as np

from photo_trng.bitstream import BitsLike, as_bits, xor_bits


def combine(bits_a: BitsLike, bits_b: BitsLike) -> np.ndarray:
    """XOR two independent streams of equal length into one.

    The result is unbiased if at least one input bit is unbiased and
    independent of the other.
    """
    return xor_bits(bits_a, bits_b)


def von_neumann_debias(bits: BitsLike) -> tuple[np.ndarray, dict]:
    """Von Neumann debiasing — remove fixed bias from a bit stream.

    Disjoint pairs left to right: (0,1)→0, (1,0)→1; equal pairs discarded,
    as is a trailing unpaired bit. Output rate ~25 % for unbiased input.
    Correlation between neighbouring bits is not removed.
    """
    bits = as_bits(bits)
    n = len(bits) - (len(bits) % 2)
    pairs = bits[:n].reshape(-1, 2)
    mask = pairs[:, 0] != pairs[:, 1]
    output = pairs[mask, 0].astype(np.uint8)
    output.flags.writeable = False
    return output, {
        "input_bits": len(bits),
        "output_bits": len(output),
        "efficiency": len(output) / max(len(bits), 1),
    }
