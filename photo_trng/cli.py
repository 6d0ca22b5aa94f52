"""CLI for photo-trng."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table
from rich.text import Text

from photo_trng import __version__
from photo_trng.config import STREAM_LABELS, STREAM_NAMES, PipelineConfig
from photo_trng.errors import TRNGError


@click.group()
@click.version_option(__version__)
def main() -> None:
    """photo-trng — true random bits from the sensor noise in two photographs."""


# ────────────────────────────────────────────────────────────
# Extraction
# ────────────────────────────────────────────────────────────


@main.command()
@click.argument("image_a", type=click.Path(exists=True, dir_okay=False))
@click.argument("image_b", type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "output_path", default=None, help="Write the Markdown report to this path.")
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON instead of a table.")
@click.option("--sequential", is_flag=True, help="Validate the four streams one after another.")
@click.option("--dump-dir", default=None, type=click.Path(file_okay=False),
              help="Write every stream as <name>.bin.txt and <name>.hex.txt.")
@click.option("-v", "--verbose", count=True, help="Log progress (-vv for per-window detail).")
def extract(
    image_a: str,
    image_b: str,
    output_path: str | None,
    as_json: bool,
    sequential: bool,
    dump_dir: str | None,
    verbose: int,
) -> None:
    """Extract, debias and test random bits from IMAGE_A and IMAGE_B.

    Both images must have the same resolution. Lossless formats (PNG, BMP)
    give the best results.

    Examples:

        photo-trng extract dark1.png dark2.png

        photo-trng extract a.png b.png --output report.md --dump-dir out/
    """
    from photo_trng.imaging import load_pixels
    from photo_trng.pipeline import run_pipeline
    from photo_trng.report import generate_markdown_report

    _setup_logging(verbose)
    config = PipelineConfig(parallel=not sequential)

    try:
        result = run_pipeline(load_pixels(image_a), load_pixels(image_b), config)
    except (TRNGError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)

    report = result.report
    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        _print_summary(report, result.elapsed)

    if output_path:
        generate_markdown_report(report, output_path)
        click.echo(f"Report saved to: {output_path}")

    if dump_dir:
        out = Path(dump_dir)
        out.mkdir(parents=True, exist_ok=True)
        for name in STREAM_NAMES:
            (out / f"{name}.bin.txt").write_text(result.binary(name))
            (out / f"{name}.hex.txt").write_text(result.hex(name))
        click.echo(f"Bitstreams written to: {out}")

    sys.exit(0 if report.passed else 1)


# ────────────────────────────────────────────────────────────
# Validation of existing data
# ────────────────────────────────────────────────────────────


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--format", "fmt", type=click.Choice(["binary", "hex"]), default="binary",
              help="Text encoding of the input file.")
@click.option("-v", "--verbose", count=True, help="Log progress.")
def validate(path: str, fmt: str, verbose: int) -> None:
    """Run the FIPS 140-2 battery on a text file of bits or hex digits."""
    from photo_trng.bitstream import from_hex, parse_bits
    from photo_trng.fips import validate as run_battery

    _setup_logging(verbose)
    try:
        text = Path(path).read_text()
    except UnicodeDecodeError:
        click.echo(f"Error: {path} is not a text file", err=True)
        sys.exit(2)
    try:
        bits = from_hex(text) if fmt == "hex" else parse_bits(text)
    except TRNGError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)

    result = run_battery(bits)
    click.echo(result.log)
    if result.message and not result.insufficient:
        click.echo(f"\n{result.message}")
    sys.exit(0 if result.passed else 1)


# ────────────────────────────────────────────────────────────
# Helpers
# ────────────────────────────────────────────────────────────


def _setup_logging(verbose: int) -> None:
    level = logging.WARNING if verbose == 0 else logging.INFO if verbose == 1 else logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _print_summary(report, elapsed: float) -> None:
    """Render the per-stream verdicts as a table."""
    console = Console()
    table = Table(title=f"FIPS 140-2 results ({elapsed:.2f}s)")
    table.add_column("Stream")
    table.add_column("Bits", justify="right")
    table.add_column("Windows", justify="right")
    table.add_column("Result")

    counts = report.bit_counts()
    for name in STREAM_NAMES:
        result = report.results[name]
        windows = f"{sum(b.passed for b in result.blocks)}/{len(result.blocks)}"
        verdict = Text("PASS", style="green") if result.passed else Text("FAIL", style="red")
        table.add_row(name, f"{counts[name]:,}", windows, verdict)

    console.print(table)
    for name in STREAM_NAMES:
        result = report.results[name]
        if result.insufficient:
            console.print(f"  {STREAM_LABELS[name]}: {result.message}")
    console.print(f"Extraction efficiency: {report.efficiency:.1%}")
