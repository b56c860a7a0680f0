#!/usr/bin/env python3
"""
Color analysis pipeline.

Derives a statistical color profile from a decoded RGBA image and classifies
it into mood, style, temperature, exposure and composition labels.
Three stages: Sampling → Statistics → Classification
"""

import logging
import math
from dataclasses import dataclass, asdict

from extract_colors import (
    PixelSample,
    sample_pixels,
    dominant_colors,
    color_distribution,
    load_rgba,
)
from presets import suggest_presets

logger = logging.getLogger(__name__)


# =============================================================================
# Records
# =============================================================================

@dataclass(frozen=True)
class ImageStatistics:
    """Output of Stage 2: scalar metrics over the accepted samples."""
    dominant_colors: tuple  # DominantColor, descending frequency
    average_color: tuple  # (r, g, b) means, 0-255
    brightness: float  # Mean luma, 0-255
    contrast: float  # Spread of dominant-color luma around brightness
    saturation: float  # Mean per-pixel saturation, 0-1


@dataclass(frozen=True)
class ImageAnalysis:
    """Complete color profile of one image."""
    dominant_colors: tuple
    average_color: tuple
    color_distribution: tuple  # (bucket hex, count) pairs, first-seen order
    brightness: float
    contrast: float
    saturation: float
    mood: str
    style: str
    color_temperature: str  # 'warm', 'cool', 'neutral'
    exposure: str  # 'underexposed', 'well-exposed', 'overexposed'
    composition: tuple
    suggested_luts: tuple
    sample_rate: int = 1
    sampled_pixels: int = 0
    accepted_pixels: int = 0

    def to_dict(self) -> dict:
        data = asdict(self)
        data['color_distribution'] = dict(self.color_distribution)
        return data


# =============================================================================
# Stage 2: Statistics
# =============================================================================

def compute_statistics(sample: PixelSample) -> ImageStatistics:
    """
    Reduce a pixel sample to brightness, contrast, saturation and averages.

    Contrast is the frequency-weighted standard deviation of the dominant
    colors' luma around the image brightness; only the retained dominant
    colors take part.

    An image with no opaque samples yields all-zero statistics.
    """
    count = sample.accepted_pixels
    if count == 0:
        logger.warning("No opaque pixels in sample, falling back to zeroed statistics")
        return ImageStatistics(
            dominant_colors=(),
            average_color=(0.0, 0.0, 0.0),
            brightness=0.0,
            contrast=0.0,
            saturation=0.0,
        )

    colors = tuple(dominant_colors(sample))
    brightness = sample.sum_luma / count
    variance = sum(c.frequency * (c.luma - brightness) ** 2 for c in colors)

    return ImageStatistics(
        dominant_colors=colors,
        average_color=tuple(s / count for s in sample.sum_rgb),
        brightness=brightness,
        contrast=math.sqrt(variance),
        saturation=sample.sum_saturation / count,
    )


# =============================================================================
# Stage 3: Classification
# =============================================================================

def classify_mood(colors, brightness: float, contrast: float, saturation: float) -> str:
    """First matching rule wins."""
    warm = sum(1 for c in colors if c.r > c.b and c.g > c.b)
    cool = sum(1 for c in colors if c.b > c.r and c.b > c.g)

    if brightness < 80 and contrast > 60:
        return "Misterioso"
    elif brightness > 180 and saturation > 0.7:
        return "Vibrante"
    elif warm > cool and brightness > 120:
        return "Cálido"
    elif cool > warm and brightness < 150:
        return "Frío"
    elif contrast > 70:
        return "Dramático"
    elif saturation < 0.3:
        return "Minimalista"
    elif brightness > 160:
        return "Luminoso"
    return "Equilibrado"


def classify_style(colors, brightness: float, contrast: float) -> str:
    """First matching rule wins. Saturation here is averaged per dominant color."""
    distinct = len(colors)
    avg_saturation = sum(c.saturation for c in colors) / distinct if distinct else 0.0

    if contrast > 80 and brightness < 100:
        return "Film Noir"
    elif avg_saturation > 0.8 and distinct > 6:
        return "Cyberpunk"
    elif brightness > 150 and avg_saturation < 0.4:
        return "Minimalista"
    elif distinct < 4 and contrast > 60:
        return "Monocromático"
    elif avg_saturation > 0.6 and brightness > 120:
        return "Vintage"
    return "Natural"


def classify_temperature(average_color: tuple) -> str:
    temperature = (average_color[0] - average_color[2]) / 255
    if temperature > 0.1:
        return "warm"
    elif temperature < -0.1:
        return "cool"
    return "neutral"


def classify_exposure(brightness: float) -> str:
    if brightness < 80:
        return "underexposed"
    elif brightness > 200:
        return "overexposed"
    return "well-exposed"


def classify_composition(colors, brightness: float, contrast: float) -> list:
    """Every matching tag is reported."""
    tags = []
    if contrast > 70:
        tags.append("high contrast")
    if brightness < 100:
        tags.append("deep shadows")
    if brightness > 180:
        tags.append("bright lighting")
    if len(colors) < 4:
        tags.append("limited palette")
    if len(colors) > 8:
        tags.append("rich palette")
    return tags


def classify(stats: ImageStatistics) -> dict:
    """Stage 3: Map statistics onto categorical labels and preset suggestions."""
    colors = stats.dominant_colors
    mood = classify_mood(colors, stats.brightness, stats.contrast, stats.saturation)
    style = classify_style(colors, stats.brightness, stats.contrast)
    temperature = classify_temperature(stats.average_color)

    return {
        'mood': mood,
        'style': style,
        'color_temperature': temperature,
        'exposure': classify_exposure(stats.brightness),
        'composition': tuple(classify_composition(colors, stats.brightness, stats.contrast)),
        'suggested_luts': tuple(suggest_presets(mood, style, temperature)),
    }


# =============================================================================
# Main Pipeline
# =============================================================================

def analyze_pixels(pixels, width: int = None, height: int = None) -> ImageAnalysis:
    """Run the full analysis on a decoded RGBA buffer."""
    # Stage 1: Sampling
    sample = sample_pixels(pixels, width, height)

    # Stage 2: Statistics
    stats = compute_statistics(sample)

    # Stage 3: Classification
    labels = classify(stats)

    return ImageAnalysis(
        dominant_colors=stats.dominant_colors,
        average_color=stats.average_color,
        color_distribution=tuple(color_distribution(sample).items()),
        brightness=stats.brightness,
        contrast=stats.contrast,
        saturation=stats.saturation,
        sample_rate=sample.sample_rate,
        sampled_pixels=sample.sampled_pixels,
        accepted_pixels=sample.accepted_pixels,
        **labels,
    )


def analyze_image(image_path: str, decoder=load_rgba) -> ImageAnalysis:
    """Decode an image with `decoder` and analyze it.

    Raises:
        FileNotFoundError, ValueError: Propagated from the decoder
    """
    return analyze_pixels(decoder(image_path))


# =============================================================================
# Render
# =============================================================================

def render(analysis: ImageAnalysis) -> str:
    """Render an analysis as a plain-text report."""
    lines = []
    r, g, b = analysis.average_color

    lines.append(f"Mood: {analysis.mood}")
    lines.append(f"Style: {analysis.style}")
    lines.append(f"Color temperature: {analysis.color_temperature}")
    lines.append(f"Exposure: {analysis.exposure}")
    lines.append("")
    lines.append(f"Brightness: {analysis.brightness:.1f}")
    lines.append(f"Contrast: {analysis.contrast:.1f}")
    lines.append(f"Saturation: {analysis.saturation:.2f}")
    lines.append(f"Average color: ({r:.0f}, {g:.0f}, {b:.0f})")

    if analysis.composition:
        lines.append(f"Composition: {', '.join(analysis.composition)}")

    lines.append("")
    lines.append("Dominant colors:")
    if not analysis.dominant_colors:
        lines.append("  (none: no opaque pixels)")
    for color in analysis.dominant_colors:
        lines.append(f"  {color.hex}  {color.frequency * 100:5.1f}%  {color.name}")

    if analysis.suggested_luts:
        lines.append("")
        lines.append(f"Suggested LUTs: {', '.join(analysis.suggested_luts)}")

    return "\n".join(lines)


# =============================================================================
# CLI
# =============================================================================

def main(argv=None):
    import argparse
    import json
    import sys

    parser = argparse.ArgumentParser(
        description='Analyze an image and describe its color profile.'
    )
    parser.add_argument(
        '--input', '-i',
        required=True,
        help='Path to the image file'
    )
    parser.add_argument(
        '--json',
        action='store_true',
        help='Print the analysis as JSON instead of a text report'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable debug logging'
    )

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        analysis = analyze_image(args.input)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error analyzing image: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(analysis.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(render(analysis))
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
