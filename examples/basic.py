#!/usr/bin/env python3
"""Extract random bits from two photographs and print the verdicts.

Take two photos with the lens covered (or of a dark, featureless scene) at
the same resolution, convert them to PNG and pass both paths.

Usage:
    pip install -e .
    python examples/basic.py dark1.png dark2.png
"""

import sys

from photo_trng import run_pipeline
from photo_trng.imaging import load_pixels

if len(sys.argv) != 3:
    sys.exit(__doc__)

result = run_pipeline(load_pixels(sys.argv[1]), load_pixels(sys.argv[2]))
report = result.report

print(f"Raw bits per image: {report.raw_a_bits:,}")
print(f"Extracted bits:     {report.extracted_bits:,} ({report.efficiency:.1%} of XORed)")

for name, outcome in report.results.items():
    status = "✓" if outcome.passed else "✗"
    print(f"  {status} {name:<10} {outcome.message}")

print(f"\nFirst 64 extracted bits (hex): {result.hex('extracted')[:16]}")
