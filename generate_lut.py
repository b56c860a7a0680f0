#!/usr/bin/env python3
"""
Synthesize 3D LUTs from sparse color mappings.

A mapping holds only a handful of source → target pairs. Every cell of the
N³ grid takes the target of its nearest mapping source, optionally followed
by a global brightness/contrast correction, and the grid is written as
.cube (floats 0-1) or .3dl (12-bit integers) text.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np
from scipy.spatial.distance import cdist

from color_mapping import create_color_mapping, map_to_color
from validate_lut import DEFAULT_LUT_SIZE, MESH_MAX, validate_lut

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

DEFAULT_LUT_NAME = 'AI_Generated_LUT'

BRIGHTNESS_REFERENCE = 128
BRIGHTNESS_FACTOR_RANGE = (0.5, 1.5)
CONTRAST_REFERENCE = 100
CONTRAST_FACTOR_RANGE = (0.8, 1.2)
MIDPOINT = 0.5

FORMATS = ('cube', '3dl')


@dataclass(frozen=True)
class LUTConfig:
    """Per-call LUT settings."""
    size: int = DEFAULT_LUT_SIZE
    name: str = DEFAULT_LUT_NAME
    description: Optional[str] = None

    def __post_init__(self):
        if self.size < 2:
            raise ValueError(f"LUT size must be at least 2, got {self.size}")
        for label, text in (('name', self.name), ('description', self.description)):
            if text and ("\n" in text or "\r" in text):
                raise ValueError(f"LUT {label} must be a single line, got {text!r}")


# =============================================================================
# Grid
# =============================================================================

def _round_half_up(values: np.ndarray) -> np.ndarray:
    return np.floor(values + 0.5)


def grid_indices(size: int) -> np.ndarray:
    """
    Integer (r, g, b) coordinates of every grid cell, shape (size³, 3).

    Rows follow file order: blue is the outer loop, red the inner loop.
    """
    steps = np.arange(size)
    b, g, r = np.meshgrid(steps, steps, steps, indexing='ij')
    return np.column_stack([r.ravel(), g.ravel(), b.ravel()])


def grid_inputs(size: int) -> np.ndarray:
    """Normalized (r, g, b) inputs for every grid cell, in file order."""
    return grid_indices(size) / (size - 1)


def grid_keys(size: int) -> np.ndarray:
    """Grid inputs on the 0-255 scale, rounded half up."""
    span = size - 1
    return (grid_indices(size) * 510 + span) // (2 * span)


def adjustment_factors(analysis) -> tuple:
    """(brightness_factor, contrast_factor) derived from an ImageAnalysis."""
    brightness = float(np.clip(analysis.brightness / BRIGHTNESS_REFERENCE, *BRIGHTNESS_FACTOR_RANGE))
    contrast = float(np.clip(analysis.contrast / CONTRAST_REFERENCE, *CONTRAST_FACTOR_RANGE))
    return brightness, contrast


def build_lut_table(mapping: dict, config: LUTConfig = LUTConfig(), analysis=None) -> np.ndarray:
    """
    Densify a sparse mapping into an (size³, 3) table of values in [0, 1].

    Each grid cell is looked up by its input color rounded to 0-255. A cell
    whose rounded color is a mapping source takes that entry directly;
    any other cell takes the entry of the closest source (first listed wins
    ties). With an empty mapping the grid is the identity.

    When `analysis` is given, the result is scaled by its brightness factor
    (capped at 1), stretched around 0.5 by its contrast factor and clamped.
    """
    inputs = grid_inputs(config.size)

    if mapping:
        sources = np.array(list(mapping.keys()), dtype=np.float64)
        targets = np.array(list(mapping.values()), dtype=np.float64) / 255
        keys = grid_keys(config.size).astype(np.float64)
        # Exact matches are at distance zero, so they always win the search
        nearest = np.argmin(cdist(keys, sources), axis=1)
        table = targets[nearest]
    else:
        table = inputs.copy()

    if analysis is not None:
        brightness_factor, contrast_factor = adjustment_factors(analysis)
        table = np.minimum(1.0, table * brightness_factor)
        table = MIDPOINT + (table - MIDPOINT) * contrast_factor

    logger.debug("Built %d³ LUT from %d mapping entries", config.size, len(mapping))
    return np.clip(table, 0.0, 1.0)


# =============================================================================
# Serialization
# =============================================================================

def format_cube(table: np.ndarray, config: LUTConfig) -> str:
    lines = [f'TITLE "{config.name}"', '']
    if config.description:
        lines.append(f'# {config.description}')
    lines.append(f'LUT_3D_SIZE {config.size}')
    lines.append('')
    lines.extend(f"{r:.6f} {g:.6f} {b:.6f}" for r, g, b in np.clip(table, 0.0, 1.0))
    return "\n".join(lines) + "\n"


def format_3dl(table: np.ndarray, config: LUTConfig) -> str:
    size = config.size
    span = size - 1
    mesh = (np.arange(size) * 2 * MESH_MAX + span) // (2 * span)
    values = np.clip(_round_half_up(table * MESH_MAX), 0, MESH_MAX).astype(int)

    lines = ['3DMESH', f'Mesh 0 {size}', ' '.join(str(v) for v in mesh)]
    lines.extend(f"{r} {g} {b}" for r, g, b in values)
    return "\n".join(lines) + "\n"


def generate_cube(mapping: dict, config: LUTConfig = LUTConfig(), analysis=None) -> str:
    return format_cube(build_lut_table(mapping, config, analysis), config)


def generate_3dl(mapping: dict, config: LUTConfig = LUTConfig(), analysis=None) -> str:
    return format_3dl(build_lut_table(mapping, config, analysis), config)


def generate_lut(mapping: dict, config: LUTConfig = LUTConfig(), analysis=None,
                 formats=FORMATS) -> dict:
    """Build the table once and serialize it in each requested format."""
    table = build_lut_table(mapping, config, analysis)
    writers = {'cube': format_cube, '3dl': format_3dl}
    return {fmt: writers[fmt](table, config) for fmt in formats}


def generate_lut_from_analysis(reference, target, name: str = None,
                               size: int = DEFAULT_LUT_SIZE) -> dict:
    """
    Build a LUT that moves the reference image's palette toward the target's.

    Returns:
        dict with 'cube' and '3dl' LUT text
    """
    config = LUTConfig(size=size, name=name or DEFAULT_LUT_NAME)
    mapping = create_color_mapping(reference, target)
    return generate_lut(mapping, config)


# =============================================================================
# CLI
# =============================================================================

def main(argv=None):
    import argparse
    import sys
    from pathlib import Path

    from analyze import analyze_image
    from extract_colors import hex_to_rgb

    parser = argparse.ArgumentParser(
        description='Generate a 3D LUT that moves one image toward another look.'
    )
    parser.add_argument(
        '--reference', '-r',
        required=True,
        help='Image whose colors the LUT transforms'
    )
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument(
        '--target', '-t',
        help='Image whose look the LUT moves toward'
    )
    target.add_argument(
        '--color', '-c',
        help='Single target color as #rrggbb'
    )
    parser.add_argument('--name', '-n', default=DEFAULT_LUT_NAME, help='LUT title and file stem')
    parser.add_argument('--description', default=None, help='Comment written into .cube files')
    parser.add_argument('--size', '-s', type=int, default=DEFAULT_LUT_SIZE, help='Grid size per axis')
    parser.add_argument(
        '--format', '-f',
        choices=FORMATS + ('both',),
        default='both',
        help='Output format'
    )
    parser.add_argument('--output-dir', '-o', default='.', help='Directory for LUT files')
    parser.add_argument(
        '--no-adjust',
        action='store_true',
        help="Skip the brightness/contrast correction from the reference analysis"
    )
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        config = LUTConfig(size=args.size, name=args.name, description=args.description)
        reference = analyze_image(args.reference)
        if args.target:
            mapping = create_color_mapping(reference, analyze_image(args.target))
        else:
            mapping = map_to_color(reference.dominant_colors, hex_to_rgb(args.color))
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error building color mapping: {e}", file=sys.stderr)
        return 1

    formats = FORMATS if args.format == 'both' else (args.format,)
    documents = generate_lut(mapping, config, None if args.no_adjust else reference, formats)

    output_dir = Path(args.output_dir)
    status = 0
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        for fmt, text in documents.items():
            output_path = output_dir / f"{config.name}.{fmt}"
            output_path.write_text(text)
            result = validate_lut(text, config.size)
            print(f"Wrote: {output_path} ({'valid' if result.is_valid else 'INVALID'})")
            for error in result.errors:
                print(f"  - {error}", file=sys.stderr)
                status = 1
    except OSError as e:
        print(f"Error writing output: {e}", file=sys.stderr)
        return 1

    return status


if __name__ == '__main__':
    raise SystemExit(main())
