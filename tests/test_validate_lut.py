"""Tests for LUT text validation."""
import subprocess
import sys
from pathlib import Path

import pytest

from generate_lut import LUTConfig, generate_3dl, generate_cube
from validate_lut import main, validate_lut

ROOT = Path(__file__).resolve().parent.parent


@pytest.fixture
def cube4():
    return generate_cube({}, LUTConfig(size=4, name='Check'))


@pytest.fixture
def dl4():
    return generate_3dl({}, LUTConfig(size=4))


def drop_last(text: str, count: int) -> str:
    return "\n".join(text.splitlines()[:-count]) + "\n"


class TestValidateLUT:
    """Tests for structural and numeric checks."""

    @pytest.mark.parametrize("content", ['', '   \n\n'])
    def test_empty(self, content):
        result = validate_lut(content)
        assert not result.is_valid
        assert result.errors == ['LUT content is empty']

    def test_valid_cube(self, cube4):
        result = validate_lut(cube4, 4)
        assert result.is_valid
        assert result.errors == []

    def test_valid_3dl(self, dl4):
        assert validate_lut(dl4, 4).is_valid

    def test_missing_lines(self, cube4):
        result = validate_lut(drop_last(cube4, 5), 4)
        assert not result.is_valid
        assert result.errors == ['Expected 64 data lines, found 59']

    def test_full_size_missing_lines(self):
        full = generate_cube({})
        result = validate_lut(drop_last(full, 5))
        assert result.errors == ['Expected 32768 data lines, found 32763']

    def test_declared_size_is_used(self):
        text = generate_cube({}, LUTConfig(size=2))
        assert validate_lut(text).is_valid

    def test_explicit_size_overrides_header(self):
        text = generate_cube({}, LUTConfig(size=2))
        assert validate_lut(text, 3).errors == ['Expected 27 data lines, found 8']

    def test_out_of_range_cube(self, cube4):
        text = cube4.replace("1.000000 1.000000 1.000000", "1.500000 1.000000 1.000000")
        result = validate_lut(text, 4)
        assert result.errors == ['Color values out of range (0-1): 1.500000 1.000000 1.000000']

    def test_negative_cube(self, cube4):
        text = cube4.replace("0.000000 0.000000 0.000000", "-0.100000 0.000000 0.000000")
        assert not validate_lut(text, 4).is_valid

    def test_non_numeric(self, cube4):
        text = cube4.replace("0.000000 0.000000 0.000000", "abc 0 0")
        result = validate_lut(text, 4)
        assert result.errors == ['Invalid color values: abc 0 0']

    def test_errors_accumulate(self, cube4):
        text = drop_last(cube4.replace("0.000000 0.000000 0.000000", "abc 0 0"), 2)
        result = validate_lut(text, 4)
        assert result.errors == [
            'Invalid color values: abc 0 0',
            'Expected 64 data lines, found 62',
        ]

    def test_3dl_integers_are_in_range(self, dl4):
        # 4095 would be out of range for .cube content
        assert '4095 4095 4095' in dl4
        assert validate_lut(dl4, 4).errors == []

    def test_3dl_out_of_range(self, dl4):
        text = dl4.replace("4095 4095 4095", "5000 4095 4095")
        result = validate_lut(text, 4)
        assert result.errors == ['Color values out of range (0-4095): 5000 4095 4095']

    def test_3dl_values_must_be_integers(self):
        text = drop_last(generate_3dl({}, LUTConfig(size=2)), 1) + "12.5 0.25 1e3\n"
        result = validate_lut(text)
        assert not result.is_valid
        assert result.errors == ['Invalid color values: 12.5 0.25 1e3']

    def test_3dl_integral_exponent_is_accepted(self):
        text = drop_last(generate_3dl({}, LUTConfig(size=2)), 1) + "4095 0 1e3\n"
        assert validate_lut(text).is_valid

    def test_cube_fractions_are_accepted(self, cube4):
        assert validate_lut(cube4.replace("0.333333 0.000000", "0.250000 0.000000"), 4).is_valid

    def test_comments_and_domain_lines(self):
        lines = ['# made by hand', 'TITLE "Hand"', 'LUT_3D_SIZE 2',
                 'DOMAIN_MIN 0.0 0.0 0.0', 'DOMAIN_MAX 1.0 1.0 1.0', '']
        lines += ['0.5 0.5 0.5'] * 8
        assert validate_lut("\n".join(lines)).is_valid

    def test_short_lines_are_ignored(self):
        lines = ['LUT_3D_SIZE 2', 'junk', '0.1 0.2'] + ['0 0 0'] * 8
        assert validate_lut("\n".join(lines)).is_valid


class TestCLI:
    """Tests for the validate_lut command line."""

    def test_valid_file(self, tmp_path, cube4, capsys):
        path = tmp_path / 'look.cube'
        path.write_text(cube4)
        assert main([str(path)]) == 0
        assert 'valid' in capsys.readouterr().out

    def test_invalid_file(self, tmp_path, cube4, capsys):
        path = tmp_path / 'broken.cube'
        path.write_text(drop_last(cube4, 1))
        assert main([str(path)]) == 1
        assert 'Expected 64 data lines, found 63' in capsys.readouterr().out

    def test_missing_file(self, tmp_path):
        assert main([str(tmp_path / 'none.cube')]) == 1


class TestImports:
    """The validator stands alone and owns the shared LUT constants."""

    def test_constants_shared_with_generator(self):
        import generate_lut
        import validate_lut as validator

        assert generate_lut.DEFAULT_LUT_SIZE is validator.DEFAULT_LUT_SIZE
        assert generate_lut.MESH_MAX is validator.MESH_MAX

    def test_import_does_not_load_generator(self):
        code = ("import sys, validate_lut; "
                "sys.exit(int('generate_lut' in sys.modules or 'scipy' in sys.modules))")
        result = subprocess.run([sys.executable, '-c', code], cwd=ROOT)
        assert result.returncode == 0
