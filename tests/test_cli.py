"""Tests for the CLI."""

import json

import numpy as np
import pytest
from click.testing import CliRunner
from PIL import Image

from photo_trng import __version__
from photo_trng.bitstream import to_binary, to_hex
from photo_trng.cli import main

from conftest import PATTERN_A, PATTERN_B, rgba_with_red_lsbs


@pytest.fixture
def images(tmp_path):
    paths = []
    for name, pattern in (("a.png", PATTERN_A), ("b.png", PATTERN_B)):
        path = tmp_path / name
        Image.fromarray(rgba_with_red_lsbs(pattern, 4, 4)).save(path)
        paths.append(str(path))
    return paths


class TestCLI:
    def test_version(self):
        r = CliRunner().invoke(main, ["--version"])
        assert r.exit_code == 0
        assert __version__ in r.output

    def test_extract_summary(self, images):
        r = CliRunner().invoke(main, ["extract", *images])
        assert r.exit_code == 1
        assert "xored" in r.output
        assert "FAIL" in r.output
        assert "Not enough entropy" in r.output

    def test_extract_json(self, images):
        r = CliRunner().invoke(main, ["extract", *images, "--json", "--sequential"])
        data = json.loads(r.output)
        assert data["streams"]["xored"]["bits"] == 16
        assert data["streams"]["extracted"]["bits"] == 6

    def test_extract_dump_and_report(self, images, tmp_path):
        out = tmp_path / "out"
        report = tmp_path / "report.md"
        r = CliRunner().invoke(main, ["extract", *images, "--dump-dir", str(out), "--output", str(report)])
        assert r.exit_code == 1
        assert (out / "xored.bin.txt").read_text() == "1010001110100110"
        assert (out / "xored.hex.txt").read_text() == "a3a6"
        assert (out / "raw_a.bin.txt").read_text() == PATTERN_A
        assert report.exists()

    def test_extract_mismatched(self, tmp_path, images):
        small = tmp_path / "small.png"
        Image.fromarray(rgba_with_red_lsbs("0101", 2, 2)).save(small)
        r = CliRunner().invoke(main, ["extract", images[0], str(small)])
        assert r.exit_code == 2
        assert "identical dimensions" in r.output

    def test_extract_not_an_image(self, tmp_path, images):
        bogus = tmp_path / "bogus.png"
        bogus.write_text("not an image")
        r = CliRunner().invoke(main, ["extract", images[0], str(bogus)])
        assert r.exit_code == 2


class TestValidateCommand:
    def test_binary_file(self, tmp_path):
        bits = np.random.default_rng(5).integers(0, 2, 20000, dtype=np.uint8)
        path = tmp_path / "bits.txt"
        path.write_text(to_binary(bits))
        r = CliRunner().invoke(main, ["validate", str(path)])
        assert r.exit_code == 0
        assert "All FIPS-140-2 tests passed: True" in r.output
        assert "Test results 1 to 20000 bits." in r.output

    def test_hex_file(self, tmp_path):
        bits = np.random.default_rng(6).integers(0, 2, 40000, dtype=np.uint8)
        path = tmp_path / "bits.hex"
        path.write_text(to_hex(bits))
        r = CliRunner().invoke(main, ["validate", str(path), "--format", "hex"])
        assert "Test results 20001 to 40000 bits." in r.output

    def test_short_file(self, tmp_path):
        path = tmp_path / "short.txt"
        path.write_text("01" * 7500)
        r = CliRunner().invoke(main, ["validate", str(path)])
        assert r.exit_code == 1
        assert "15000 bits out of 20000" in r.output

    def test_bad_characters(self, tmp_path):
        path = tmp_path / "bad.txt"
        path.write_text("0102")
        r = CliRunner().invoke(main, ["validate", str(path)])
        assert r.exit_code == 2
        assert "Invalid bit character" in r.output

    def test_binary_garbage_file(self, tmp_path):
        path = tmp_path / "noise.bin"
        path.write_bytes(bytes([0xFF, 0xFE, 0x80, 0x81]) * 64)
        r = CliRunner().invoke(main, ["validate", str(path)])
        assert r.exit_code == 2
        assert "Error:" in r.output
        assert "Traceback" not in r.output
