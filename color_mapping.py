"""
Sparse color mappings between palettes.

A mapping pairs exact source colors (0-255 integer triples) with transformed
target colors (0-255 floats). It only holds one entry per source dominant
color; the LUT generator densifies it.
"""

import logging
import math

import numpy as np
from scipy.spatial.distance import cdist

logger = logging.getLogger(__name__)


# =============================================================================
# Compatibility Tables
# =============================================================================

DEFAULT_COMPATIBILITY = 0.5  # Any pair not listed below

# reference label -> target label -> blend factor
MOOD_COMPATIBILITY = {
    'Misterioso': {'Misterioso': 1.0, 'Dramático': 0.8, 'Vibrante': 0.3},
    'Vibrante': {'Vibrante': 1.0, 'Cálido': 0.7, 'Misterioso': 0.2},
    'Cálido': {'Cálido': 1.0, 'Vibrante': 0.6, 'Frío': 0.3},
    'Frío': {'Frío': 1.0, 'Misterioso': 0.7, 'Cálido': 0.2},
    'Dramático': {'Dramático': 1.0, 'Misterioso': 0.8, 'Vibrante': 0.5},
}

STYLE_COMPATIBILITY = {
    'Film Noir': {'Film Noir': 1.0, 'Vintage': 0.8, 'Cyberpunk': 0.4},
    'Cyberpunk': {'Cyberpunk': 1.0, 'Vibrante': 0.7, 'Film Noir': 0.3},
    'Vintage': {'Vintage': 1.0, 'Film Noir': 0.8, 'Natural': 0.6},
    'Natural': {'Natural': 1.0, 'Vintage': 0.6, 'Minimalista': 0.8},
}

SAME_TEMPERATURE = 1.0
OPPOSITE_TEMPERATURE = 0.3  # warm <-> cool
MIXED_TEMPERATURE = 0.7  # one side neutral

SINGLE_TARGET_STRENGTH = 0.8
MAX_RGB_DISTANCE = 255 * math.sqrt(3)


def compatibility(table: dict, reference: str, target: str) -> float:
    return table.get(reference, {}).get(target, DEFAULT_COMPATIBILITY)


def temperature_factor(reference: str, target: str) -> float:
    if reference == target:
        return SAME_TEMPERATURE
    if {reference, target} == {'warm', 'cool'}:
        return OPPOSITE_TEMPERATURE
    return MIXED_TEMPERATURE


# =============================================================================
# Mapping
# =============================================================================

def _rgb_array(colors) -> np.ndarray:
    return np.array([[c.r, c.g, c.b] for c in colors], dtype=np.float64).reshape(-1, 3)


def _clamp(value: float) -> float:
    return min(255.0, max(0.0, value))


def nearest_colors(colors, candidates) -> list:
    """
    For each color, the closest candidate by Euclidean RGB distance.

    Ties go to the candidate listed first.
    """
    distances = cdist(_rgb_array(colors), _rgb_array(candidates))
    return [candidates[i] for i in np.argmin(distances, axis=1)]


def create_color_mapping(reference, target) -> dict:
    """
    Map each reference dominant color toward its closest target color.

    Red and green move by the mood and style compatibility of the two
    analyses; blue moves by their color temperature compatibility.

    Args:
        reference: ImageAnalysis of the image whose look is being changed
        target: ImageAnalysis of the image whose look is wanted

    Returns:
        dict mapping (r, g, b) ints -> (r, g, b) floats in [0, 255]
    """
    if not reference.dominant_colors:
        return {}
    if not target.dominant_colors:
        logger.warning("Target analysis has no dominant colors, mapping is empty")
        return {}

    channel_factor = (compatibility(MOOD_COMPATIBILITY, reference.mood, target.mood)
                      * compatibility(STYLE_COMPATIBILITY, reference.style, target.style))
    blue_factor = temperature_factor(reference.color_temperature, target.color_temperature)

    matches = nearest_colors(reference.dominant_colors, target.dominant_colors)

    mapping = {}
    for source, match in zip(reference.dominant_colors, matches):
        mapping[(source.r, source.g, source.b)] = (
            _clamp(source.r + (match.r - source.r) * channel_factor),
            _clamp(source.g + (match.g - source.g) * channel_factor),
            _clamp(source.b + (match.b - source.b) * blue_factor),
        )

    logger.debug("Built color mapping with %d entries (rg=%.3f, b=%.3f)",
                 len(mapping), channel_factor, blue_factor)
    return mapping


def color_similarity(color, other: tuple) -> float:
    """1 for identical colors, 0 for opposite corners of the RGB cube."""
    distance = math.sqrt((color.r - other[0]) ** 2
                         + (color.g - other[1]) ** 2
                         + (color.b - other[2]) ** 2)
    return 1 - distance / MAX_RGB_DISTANCE


def map_to_color(colors, target_rgb: tuple) -> dict:
    """
    Pull every color toward a single target color.

    Colors already close to the target move further toward it; strength is
    0.8 x similarity.
    """
    mapping = {}
    for color in colors:
        strength = min(color_similarity(color, target_rgb) * SINGLE_TARGET_STRENGTH, 1)
        mapping[(color.r, color.g, color.b)] = (
            _clamp(color.r + (target_rgb[0] - color.r) * strength),
            _clamp(color.g + (target_rgb[1] - color.g) * strength),
            _clamp(color.b + (target_rgb[2] - color.b) * strength),
        )
    return mapping


# =============================================================================
# Preview
# =============================================================================

def apply_mapping(pixels: np.ndarray, mapping: dict) -> np.ndarray:
    """
    Recolor pixels whose exact RGB value is a mapping source.

    Works on an HxWx4 (or Nx4) uint8 buffer and returns a new array; alpha
    and unmapped pixels are left untouched.
    """
    out = np.array(pixels, dtype=np.uint8, copy=True)
    rgb = out[..., :3]
    for source, transformed in mapping.items():
        mask = np.all(rgb == np.array(source, dtype=np.uint8), axis=-1)
        if mask.any():
            rgb[mask] = np.clip(np.round(transformed), 0, 255).astype(np.uint8)
    return out
