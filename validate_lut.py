#!/usr/bin/env python3
"""
Check .cube and .3dl LUT text for structural and numeric problems.

Every problem found is reported; validation never stops at the first one
and never raises for bad content.
"""

import math
from dataclasses import dataclass, field

DEFAULT_LUT_SIZE = 32
MESH_MAX = 4095  # 12-bit output range of .3dl files

HEADER_KEYWORDS = {'TITLE', 'LUT_3D_SIZE', '3DMESH', 'MESH', 'DOMAIN_MIN', 'DOMAIN_MAX'}


@dataclass
class ValidationResult:
    is_valid: bool
    errors: list = field(default_factory=list)


def _parse_values(tokens: list):
    """Parse the first three tokens as finite floats, or None."""
    try:
        values = [float(t) for t in tokens[:3]]
    except ValueError:
        return None
    if not all(math.isfinite(v) for v in values):
        return None
    return values


def _declared_size(tokens: list):
    try:
        return int(tokens[-1])
    except (ValueError, IndexError):
        return None


def validate_lut(content: str, size: int = None) -> ValidationResult:
    """
    Validate LUT text in either format.

    Blank lines, '#' comments and header lines are skipped, as is the mesh
    breakpoint line that follows a 'Mesh' header. Any other line with at
    least three tokens is a data line: its first three values must be
    numbers in [0, 1] for .cube content or integers in [0, 4095] for .3dl
    content (recognized by its 3DMESH/Mesh header).

    Args:
        content: LUT text
        size: Expected grid size; defaults to the size declared in the
            header, or DEFAULT_LUT_SIZE when none is declared

    Returns:
        ValidationResult with every error in the order found
    """
    errors = []

    if not content or not content.strip():
        errors.append('LUT content is empty')
        return ValidationResult(is_valid=False, errors=errors)

    declared = None
    is_3dl = False
    expect_breakpoints = False
    data_lines = 0

    for line in content.splitlines():
        s = line.strip()
        if not s or s.startswith('#'):
            continue

        tokens = s.split()
        key = tokens[0].upper()
        if key in HEADER_KEYWORDS:
            if key == 'LUT_3D_SIZE':
                declared = _declared_size(tokens)
            elif key in ('3DMESH', 'MESH'):
                is_3dl = True
                if key == 'MESH':
                    declared = _declared_size(tokens)
                    expect_breakpoints = True
            continue

        if expect_breakpoints:
            expect_breakpoints = False
            continue

        if len(tokens) < 3:
            continue

        data_lines += 1
        values = _parse_values(tokens)
        upper = MESH_MAX if is_3dl else 1
        # .3dl values are 12-bit integers
        if values is None or (is_3dl and not all(v.is_integer() for v in values)):
            errors.append(f'Invalid color values: {s}')
        elif any(v < 0 or v > upper for v in values):
            errors.append(f'Color values out of range (0-{upper}): {s}')

    if size is None:
        size = declared or DEFAULT_LUT_SIZE
    expected_lines = size ** 3
    if data_lines != expected_lines:
        errors.append(f'Expected {expected_lines} data lines, found {data_lines}')

    return ValidationResult(is_valid=not errors, errors=errors)


# =============================================================================
# CLI
# =============================================================================

def main(argv=None):
    import argparse
    import sys
    from pathlib import Path

    parser = argparse.ArgumentParser(description='Validate a .cube or .3dl LUT file.')
    parser.add_argument('path', help='LUT file to check')
    parser.add_argument(
        '--size', '-s',
        type=int,
        default=None,
        help='Expected grid size (defaults to the size declared in the file)'
    )
    args = parser.parse_args(argv)

    try:
        content = Path(args.path).read_text()
    except OSError as e:
        print(f"Error reading LUT: {e}", file=sys.stderr)
        return 1

    result = validate_lut(content, args.size)
    if result.is_valid:
        print(f"{args.path}: valid")
        return 0

    print(f"{args.path}: invalid ({len(result.errors)} errors)")
    for error in result.errors:
        print(f"  - {error}")
    return 1


if __name__ == '__main__':
    raise SystemExit(main())
