"""Pipeline report: aggregation of the four validator outcomes and Markdown rendering."""

from __future__ import annotations

import platform
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Mapping

import numpy as np

from photo_trng import __version__
from photo_trng.config import STREAM_LABELS, STREAM_NAMES
from photo_trng.fips import TEST_VERSION, WINDOW_BITS, OverallResult


@dataclass(frozen=True)
class PipelineReport:
    """Per-stream verdicts plus the bit count at each stage."""

    results: Mapping[str, OverallResult]
    raw_a_bits: int
    raw_b_bits: int
    xored_bits: int
    extracted_bits: int

    @property
    def passed(self) -> bool:
        return all(r.passed for r in self.results.values())

    @property
    def efficiency(self) -> float:
        """Fraction of XORed bits that survived Von Neumann extraction."""
        return self.extracted_bits / max(self.xored_bits, 1)

    def bit_counts(self) -> dict[str, int]:
        return {
            "raw_a": self.raw_a_bits,
            "raw_b": self.raw_b_bits,
            "xored": self.xored_bits,
            "extracted": self.extracted_bits,
        }

    def to_dict(self) -> dict:
        counts = self.bit_counts()
        return {
            "test_version": TEST_VERSION,
            "passed": self.passed,
            "efficiency": round(self.efficiency, 4),
            "streams": {
                name: {
                    "bits": counts[name],
                    "passed": result.passed,
                    "windows": len(result.blocks),
                    "windows_passed": sum(b.passed for b in result.blocks),
                    "message": result.message,
                    "tests": [
                        {
                            "window": block.index,
                            "name": r.name,
                            "passed": r.passed,
                            "statistic": r.statistic,
                            "p_value": r.p_value,
                            "counts": list(r.counts) if r.counts is not None else None,
                        }
                        for block in result.blocks
                        for r in block.results
                    ],
                }
                for name, result in self.results.items()
            },
        }


def aggregate(
    outcomes: Mapping[str, OverallResult],
    bitstreams: Mapping[str, np.ndarray],
) -> PipelineReport:
    """Merge the four per-stream outcomes into one report.

    Both mappings must hold every name in ``STREAM_NAMES``.
    """
    missing = [n for n in STREAM_NAMES if n not in outcomes or n not in bitstreams]
    if missing:
        raise KeyError(f"missing streams: {', '.join(missing)}")
    return PipelineReport(
        results={name: outcomes[name] for name in STREAM_NAMES},
        raw_a_bits=len(bitstreams["raw_a"]),
        raw_b_bits=len(bitstreams["raw_b"]),
        xored_bits=len(bitstreams["xored"]),
        extracted_bits=len(bitstreams["extracted"]),
    )


def _pass_icon(passed: bool) -> str:
    return "✅" if passed else "❌"


def generate_stream_report(name: str, bits: int, result: OverallResult) -> str:
    """Generate markdown section for a single stream."""
    label = STREAM_LABELS.get(name, name)
    windows = len(result.blocks)
    passed = sum(1 for b in result.blocks if b.passed)
    lines = [
        f"### {label}",
        f"**Result: {_pass_icon(result.passed)}** | **Windows passed: {passed}/{windows}** "
        f"| **Bits: {bits:,}**\n",
    ]
    if result.insufficient:
        lines.append(f"_{result.message}_\n")
        return "\n".join(lines)

    lines += [
        "| Window | Test | Result | Statistic | P-Value |",
        "|--------|------|--------|-----------|---------|",
    ]
    for block in result.blocks:
        span = f"{block.start_bit + 1:,}–{block.end_bit:,}"
        for r in block.results:
            p_str = f"{r.p_value:.6f}" if r.p_value is not None else "N/A"
            lines.append(
                f"| {span} | {r.name} | {_pass_icon(r.passed)} | {r.statistic:.2f} | {p_str} |"
            )
    lines.append("")
    lines.append("```")
    lines.append(result.log)
    lines.append("```")
    lines.append("")
    return "\n".join(lines)


def generate_markdown_report(
    report: PipelineReport,
    output_path: str | Path | None = None,
) -> str:
    """Generate complete markdown report for all four streams."""
    now = datetime.now()
    counts = report.bit_counts()

    lines = [
        "# Photo TRNG — Randomness Test Report",
        "",
        f"**Generated:** {now.strftime('%Y-%m-%d %H:%M:%S')}",
        f"**Machine:** {platform.node()} ({platform.machine()}, {platform.system()} {platform.release()})",
        f"**photo-trng:** {__version__} | **Battery:** {TEST_VERSION}, {WINDOW_BITS:,}-bit windows",
        f"**Overall:** {_pass_icon(report.passed)} | "
        f"**Extraction efficiency:** {report.efficiency:.2%}",
        "",
        "## Summary",
        "",
        "| Stream | Bits | Windows | Passed |",
        "|--------|------|---------|--------|",
    ]
    for name, result in report.results.items():
        lines.append(
            f"| {STREAM_LABELS.get(name, name)} | {counts[name]:,} "
            f"| {len(result.blocks)} | {_pass_icon(result.passed)} |"
        )

    lines += ["", "---", "", "## Detailed Results", ""]
    for name, result in report.results.items():
        lines.append(generate_stream_report(name, counts[name], result))
        lines.append("---\n")

    text = "\n".join(lines)

    if output_path:
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text)

    return text
