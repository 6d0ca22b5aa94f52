"""Pinned constants and pipeline settings."""

from __future__ import annotations

from dataclasses import dataclass

# RGBA, row-major
BYTES_PER_PIXEL = 4

# LSB tap is the red byte of every pixel. Changing it changes the
# statistical character of the raw streams.
LSB_CHANNEL_OFFSET = 0

STREAM_NAMES: tuple[str, ...] = ("raw_a", "raw_b", "xored", "extracted")

STREAM_LABELS: dict[str, str] = {
    "raw_a": "Image A least significant bits",
    "raw_b": "Image B least significant bits",
    "xored": "Image A XOR Image B",
    "extracted": "Von Neumann extracted",
}


@dataclass(frozen=True)
class PipelineConfig:
    """Settings for one pipeline run.

    Attributes:
        parallel: Validate the four streams on a thread pool (default True).
            Results are identical either way.
        max_workers: Thread pool size when ``parallel`` is set.
    """

    parallel: bool = True
    max_workers: int = 4

    def __post_init__(self) -> None:
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
