"""Shared pytest fixtures for palette-lut tests."""
import numpy as np
import pytest
from PIL import Image

from analyze import ImageAnalysis
from extract_colors import DominantColor, color_name, rgb_to_hex


def solid_pixels(rgb, height: int = 10, width: int = 10, alpha: int = 255) -> np.ndarray:
    """HxWx4 uint8 buffer filled with one color."""
    pixels = np.empty((height, width, 4), dtype=np.uint8)
    pixels[..., :3] = rgb
    pixels[..., 3] = alpha
    return pixels


def dominant(r: int, g: int, b: int, frequency: float = 0.1) -> DominantColor:
    return DominantColor(r=r, g=g, b=b, frequency=frequency,
                         hex=rgb_to_hex(r, g, b), name=color_name(r, g, b))


@pytest.fixture
def solid_image():
    """Factory for single-color RGBA buffers."""
    return solid_pixels


@pytest.fixture
def make_color():
    """Factory for DominantColor records."""
    return dominant


@pytest.fixture
def make_analysis():
    """Factory for hand-built ImageAnalysis records."""
    def _make(colors=(), mood='Equilibrado', style='Natural', temperature='neutral',
              brightness=128.0, contrast=0.0):
        share = 1 / len(colors) if colors else 0.0
        return ImageAnalysis(
            dominant_colors=tuple(dominant(*rgb, frequency=share) for rgb in colors),
            average_color=(128.0, 128.0, 128.0),
            color_distribution=(),
            brightness=brightness,
            contrast=contrast,
            saturation=0.0,
            mood=mood,
            style=style,
            color_temperature=temperature,
            exposure='well-exposed',
            composition=(),
            suggested_luts=(),
        )
    return _make


@pytest.fixture
def write_image(tmp_path):
    """Save an RGB(A) array as a PNG under tmp_path and return its path."""
    def _write(name: str, pixels: np.ndarray):
        path = tmp_path / name
        Image.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8)).save(path)
        return path
    return _write
