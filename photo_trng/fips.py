"""FIPS 140-2 Power-Up statistical test battery.

Each consecutive 20,000-bit window of a bitstream is subjected to the
monobit, poker, runs and long runs tests using the intervals from
FIPS 140-2 Section 4.9.1 as updated by Change Notice 1. A stream passes
only if every window passes all four tests; leftover bits past the last
full window are not tested.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from math import erfc, sqrt

import numpy as np
from scipy import stats as sp_stats

from photo_trng.bitstream import BitsLike, as_bits

logger = logging.getLogger(__name__)

TEST_VERSION = "FIPS-140-2"
WINDOW_BITS = 20000

MONOBIT_LOW = 9725
MONOBIT_HIGH = 10275

POKER_SEGMENTS = 5000
POKER_LOW = 2.16
POKER_HIGH = 46.17

# bucket -> inclusive interval; zeros and ones share a bucket, see run_length_counts
RUN_INTERVALS: dict[int, tuple[int, int]] = {
    1: (2315, 2685),
    2: (1114, 1386),
    3: (527, 723),
    4: (240, 384),
    5: (103, 209),
    6: (103, 209),
}
MAX_RUN_BUCKET = 6

LONG_RUN_LIMIT = 26

_NIBBLE_WEIGHTS = np.array([8, 4, 2, 1], dtype=np.int64)


@dataclass
class TestResult:
    """Result of a single test on one window."""

    __test__ = False

    name: str
    passed: bool
    statistic: float
    details: str
    counts: tuple[int, ...] | None = None
    p_value: float | None = None


@dataclass
class BlockResult:
    """The four test results for one 20,000-bit window."""

    index: int
    start_bit: int
    end_bit: int
    results: list[TestResult]

    @property
    def passed(self) -> bool:
        return all(r.passed for r in self.results)

    def result(self, name: str) -> TestResult:
        for r in self.results:
            if r.name == name:
                return r
        raise KeyError(name)

    def summary(self) -> str:
        lines = [
            f"Test results {self.start_bit + 1} to {self.end_bit} bits. "
            f"Tests passed: {self.passed}"
        ]
        lines.extend(r.details for r in self.results)
        return "\n".join(lines)


@dataclass
class OverallResult:
    """Verdict for one bitstream across all of its windows."""

    passed: bool
    log: str
    bits_supplied: int
    blocks: list[BlockResult] = field(default_factory=list)
    message: str = ""

    @property
    def bits_tested(self) -> int:
        return len(self.blocks) * WINDOW_BITS

    @property
    def insufficient(self) -> bool:
        """True when the stream was too short to run any test."""
        return self.bits_supplied < WINDOW_BITS


def run_lengths(bits: np.ndarray) -> np.ndarray:
    """Lengths of the maximal runs of identical bits, in order."""
    if len(bits) == 0:
        return np.array([], dtype=np.int64)
    edges = np.flatnonzero(bits[1:] != bits[:-1]) + 1
    bounds = np.concatenate(([0], edges, [len(bits)]))
    return np.diff(bounds)


def run_length_counts(bits: np.ndarray) -> tuple[int, ...]:
    """Tally runs into the six FIPS buckets, zeros and ones together.

    A run of length L is filed under bucket L - 1, so bucket k holds runs
    of length k + 1 and bucket 6 holds runs of 7 or more. Runs of length 1
    land in bucket 0 and are not reported. The window's final run is never
    closed by a bit change and is left out of the tally.
    """
    buckets = np.minimum(run_lengths(bits)[:-1] - 1, MAX_RUN_BUCKET)
    tally = np.bincount(buckets, minlength=MAX_RUN_BUCKET + 1)
    return tuple(int(c) for c in tally[1:])


# ═══════════════════════ THE FOUR TESTS ═══════════════════════

def monobit_test(window: np.ndarray) -> TestResult:
    """Count the ones; X must lie strictly inside (9725, 10275)."""
    name = "Monobit"
    n = len(window)
    x = int(np.sum(window, dtype=np.int64))
    passed = MONOBIT_LOW < x < MONOBIT_HIGH
    p = erfc(abs(2 * x - n) / sqrt(n) / sqrt(2)) if n else None
    return TestResult(
        name=name, passed=passed, statistic=float(x), p_value=p,
        details=f"The Monobit Test: passed if {MONOBIT_LOW} < X < {MONOBIT_HIGH}. "
                f"Test passed: {passed}. X = {x}",
    )


def poker_test(window: np.ndarray) -> TestResult:
    """Frequencies of the 16 possible 4-bit values over 5,000 segments.

    X = (16/5000) * sum(f(i)^2) - 5000 must lie strictly inside (2.16, 46.17).
    Values near zero mean the nibbles are too evenly spread.
    """
    name = "Poker"
    nibbles = window[:POKER_SEGMENTS * 4].reshape(-1, 4).astype(np.int64) @ _NIBBLE_WEIGHTS
    freq = np.bincount(nibbles, minlength=16)
    x = (16 / POKER_SEGMENTS) * int(np.sum(freq ** 2)) - POKER_SEGMENTS
    passed = POKER_LOW < x < POKER_HIGH
    p = float(sp_stats.chi2.sf(x, 15))
    return TestResult(
        name=name, passed=passed, statistic=float(x), p_value=p,
        counts=tuple(int(f) for f in freq),
        details=f"The Poker Test: passed if {POKER_LOW} < X < {POKER_HIGH}. "
                f"Test passed: {passed}. X = {x:.2f}",
    )


def runs_test(window: np.ndarray) -> TestResult:
    """Every run bucket must fall inside its interval."""
    name = "Runs"
    counts = run_length_counts(window)
    passed = all(
        lo <= count <= hi
        for count, (lo, hi) in zip(counts, RUN_INTERVALS.values())
    )
    lines = [
        "The Runs Test: passed if the number of runs (consecutive zeros or ones "
        "for lengths 1 through 6) is each within the specified interval."
    ]
    for (length, (lo, hi)), count in zip(RUN_INTERVALS.items(), counts):
        label = f"{length}+" if length == MAX_RUN_BUCKET else str(length)
        lines.append(f"Run length {label}: {lo} - {hi}. Test result: {count}")
    lines.append(f"Test passed: {passed}.")
    return TestResult(
        name=name, passed=passed, statistic=float(sum(counts)),
        counts=counts, details="\n".join(lines),
    )


def long_runs_test(window: np.ndarray) -> TestResult:
    """No run of 26 or more identical bits is allowed."""
    name = "Long Runs"
    lengths = run_lengths(window)
    longest = int(lengths.max()) if lengths.size else 0
    passed = longest < LONG_RUN_LIMIT
    return TestResult(
        name=name, passed=passed, statistic=float(longest),
        details=f"The Long Runs Test: passed if there are no runs of length "
                f"{LONG_RUN_LIMIT} or more. Length of longest run: {longest}. "
                f"Test passed: {passed}.",
    )


ALL_TESTS = [monobit_test, poker_test, runs_test, long_runs_test]


# ═══════════════════════ WINDOWED BATTERY ═══════════════════════

def evaluate_window(window: np.ndarray, index: int = 0) -> BlockResult:
    """Run all four tests on one 20,000-bit window."""
    if len(window) != WINDOW_BITS:
        raise ValueError(f"window must be {WINDOW_BITS} bits, got {len(window)}")
    start = index * WINDOW_BITS
    return BlockResult(
        index=index,
        start_bit=start,
        end_bit=start + WINDOW_BITS,
        results=[test_fn(window) for test_fn in ALL_TESTS],
    )


def _verdict(passed: bool) -> str:
    return f"All {TEST_VERSION} tests passed: {passed}"


def validate(bits: BitsLike) -> OverallResult:
    """Run the battery over every full 20,000-bit window of *bits*."""
    bits = as_bits(bits)
    n = len(bits)
    if n < WINDOW_BITS:
        message = (
            f"Not enough entropy for randomness tests - {n} bits out of "
            f"{WINDOW_BITS} bits required."
        )
        logger.info(message)
        return OverallResult(
            passed=False, bits_supplied=n, message=message,
            log=f"{_verdict(False)}\n\n{message}",
        )

    num_windows = n // WINDOW_BITS
    windows = bits[:num_windows * WINDOW_BITS].reshape(num_windows, WINDOW_BITS)
    blocks = []
    for i, window in enumerate(windows):
        block = evaluate_window(window, i)
        logger.debug("window %d (bits %d-%d) passed=%s",
                     i, block.start_bit + 1, block.end_bit, block.passed)
        blocks.append(block)

    passed = all(b.passed for b in blocks)
    message = (
        f"{sum(b.passed for b in blocks)}/{num_windows} windows passed, "
        f"{n - num_windows * WINDOW_BITS} trailing bits not tested"
    )
    log = _verdict(passed) + "\n\n" + "\n\n".join(b.summary() for b in blocks)
    return OverallResult(passed=passed, log=log, bits_supplied=n, blocks=blocks, message=message)
