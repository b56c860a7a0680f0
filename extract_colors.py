#!/usr/bin/env python3
"""
Sample a decoded RGBA image and quantize it into dominant colors.

Pixels are inspected with a fixed stride so that at most ~10,000 samples are
read regardless of resolution. Accepted (opaque) samples are bucketed by the
high 4 bits of each channel and ranked by frequency.
"""

import logging
import string
from dataclasses import dataclass, field

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

ALPHA_THRESHOLD = 128  # Pixels with alpha below this are ignored
MAX_SAMPLES = 10_000  # Target number of inspected pixels per image
BUCKET_SHIFT = 4  # Keep the high 4 bits per channel (16 levels)
BUCKET_SCALE = 1 << BUCKET_SHIFT  # Bucket index -> channel value
MAX_DOMINANT_COLORS = 10

LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114])

# Image size limits (security: prevent decompression bombs)
MAX_IMAGE_PIXELS = 50_000_000  # 50 megapixels
MAX_IMAGE_DIMENSION = 10_000  # 10k pixels per side


# =============================================================================
# Color Helpers
# =============================================================================

def luma(r: float, g: float, b: float) -> float:
    """Perceptual brightness of an RGB triple (0-255)."""
    return 0.299 * r + 0.587 * g + 0.114 * b


def rgb_to_hex(r: int, g: int, b: int) -> str:
    return f"#{int(r):02x}{int(g):02x}{int(b):02x}"


def hex_to_rgb(value: str) -> tuple:
    """Parse '#rrggbb' (or 'rrggbb') into an (r, g, b) tuple."""
    digits = value.strip().lstrip('#')
    if len(digits) != 6:
        raise ValueError(f"Expected a 6-digit hex color, got: {value!r}")
    # int(..., 16) alone would accept signs, underscores and spaces
    if not all(c in string.hexdigits for c in digits):
        raise ValueError(f"Invalid hex color: {value!r}")
    return tuple(int(digits[i:i + 2], 16) for i in (0, 2, 4))


def color_name(r: int, g: int, b: int) -> str:
    """Coarse human-readable name for an RGB color."""
    if r > 200 and g > 200 and b > 200:
        return "Blanco"
    elif r < 50 and g < 50 and b < 50:
        return "Negro"
    elif r > g and r > b:
        return "Rojo"
    elif g > r and g > b:
        return "Verde"
    elif b > r and b > g:
        return "Azul"
    elif r > 200 and g > 150 and b < 100:
        return "Naranja"
    elif r > 150 and g > 150 and b < 100:
        return "Amarillo"
    elif r > 100 and g < 100 and b > 150:
        return "Púrpura"
    elif r < 100 and g > 150 and b > 150:
        return "Cian"
    elif r > 150 and g < 100 and b < 100:
        return "Rosa"
    return "Gris"


def color_saturation(r: float, g: float, b: float) -> float:
    """HSV-style saturation (max - min) / max, 0 for black."""
    high = max(r, g, b)
    if high == 0:
        return 0.0
    return (high - min(r, g, b)) / high


# =============================================================================
# Pixel Buffers
# =============================================================================

def as_rgba_array(pixels, width: int = None, height: int = None) -> np.ndarray:
    """
    Normalize a decoded image into an (n_pixels, 4) uint8 array.

    Accepts an HxWx4 array, an (n, 4) array, or a flat RGBA byte buffer
    (bytes, bytearray or 1-D array) together with width and height.

    Raises:
        ValueError: If the buffer does not hold whole RGBA quadruplets,
            does not match the given dimensions, or has channel values
            outside 0-255
    """
    if isinstance(pixels, (bytes, bytearray, memoryview)):
        arr = np.frombuffer(pixels, dtype=np.uint8)
    else:
        arr = np.asarray(pixels)

    if arr.ndim == 3:
        if arr.shape[-1] != 4:
            raise ValueError(f"Expected 4 channels (RGBA), got shape {arr.shape}")
        arr = arr.reshape(-1, 4)
    elif arr.ndim == 1:
        if arr.size % 4 != 0:
            raise ValueError(f"Buffer length {arr.size} is not a multiple of 4")
        arr = arr.reshape(-1, 4)
    elif arr.ndim != 2 or arr.shape[-1] != 4:
        raise ValueError(f"Unsupported pixel buffer shape: {arr.shape}")

    if width is not None and height is not None and arr.shape[0] != width * height:
        raise ValueError(
            f"Buffer holds {arr.shape[0]} pixels, expected {width}x{height}"
        )

    # Casting would silently wrap values such as 300 or -1
    if arr.dtype != np.uint8 and arr.size and (arr.min() < 0 or arr.max() > 255):
        raise ValueError(
            f"Channel values must be in 0-255, got {arr.min()}..{arr.max()}"
        )

    return arr.astype(np.uint8, copy=False)


def load_rgba(image_path: str) -> np.ndarray:
    """
    Decode an image file into an HxWx4 uint8 array.

    This is the default image decoder used by the command-line tools; the
    analysis pipeline itself only sees the returned buffer.

    Raises:
        FileNotFoundError: If image file doesn't exist
        ValueError: If file is not a valid image or exceeds size limits
    """
    try:
        img = Image.open(image_path)
    except FileNotFoundError:
        raise FileNotFoundError(f"Image not found: {image_path}")
    except Exception as e:
        raise ValueError(f"Could not open image: {e}")

    width, height = img.size
    if width > MAX_IMAGE_DIMENSION or height > MAX_IMAGE_DIMENSION:
        raise ValueError(
            f"Image dimensions {width}x{height} exceed maximum "
            f"{MAX_IMAGE_DIMENSION}x{MAX_IMAGE_DIMENSION}"
        )
    if width * height > MAX_IMAGE_PIXELS:
        raise ValueError(
            f"Image has {width * height:,} pixels, exceeding maximum {MAX_IMAGE_PIXELS:,}"
        )

    return np.array(img.convert('RGBA'))


# =============================================================================
# Sampling
# =============================================================================

@dataclass
class PixelSample:
    """Aggregates collected in a single strided pass over an image."""
    sample_rate: int
    total_pixels: int
    sampled_pixels: int  # Pixels inspected, opaque or not
    accepted_pixels: int  # Inspected pixels with alpha >= ALPHA_THRESHOLD
    sum_rgb: tuple  # (sum R, sum G, sum B)
    sum_luma: float
    sum_saturation: float
    bucket_counts: dict = field(default_factory=dict)  # (ri, gi, bi) -> count


def compute_sample_rate(total_pixels: int) -> int:
    return max(1, total_pixels // MAX_SAMPLES)


def sample_pixels(pixels, width: int = None, height: int = None) -> PixelSample:
    """
    Inspect every n-th pixel and accumulate color statistics.

    The stride is chosen so that roughly MAX_SAMPLES pixels are read. Bucket
    counts keep the order in which each bucket was first encountered.
    """
    flat = as_rgba_array(pixels, width, height)
    total = flat.shape[0]
    sample_rate = compute_sample_rate(total)

    sampled = flat[::sample_rate]
    opaque = sampled[sampled[:, 3] >= ALPHA_THRESHOLD]
    rgb = opaque[:, :3].astype(np.int64)

    high = rgb.max(axis=1)
    low = rgb.min(axis=1)
    saturation = np.divide(
        (high - low).astype(np.float64), high.astype(np.float64),
        out=np.zeros(len(rgb)), where=high > 0
    )
    brightness = rgb.astype(np.float64) @ LUMA_WEIGHTS

    # Bucket codes in first-encounter order
    buckets = rgb >> BUCKET_SHIFT
    codes = (buckets[:, 0] << 8) | (buckets[:, 1] << 4) | buckets[:, 2]
    unique, first_index, counts = np.unique(codes, return_index=True, return_counts=True)
    order = np.argsort(first_index, kind='stable')

    bucket_counts = {}
    for code, count in zip(unique[order], counts[order]):
        code = int(code)
        bucket_counts[(code >> 8, (code >> 4) & 0xF, code & 0xF)] = int(count)

    logger.debug(
        "Sampled %d of %d pixels (stride %d), %d accepted, %d buckets",
        len(sampled), total, sample_rate, len(rgb), len(bucket_counts)
    )

    return PixelSample(
        sample_rate=sample_rate,
        total_pixels=total,
        sampled_pixels=len(sampled),
        accepted_pixels=len(rgb),
        sum_rgb=tuple(float(s) for s in rgb.sum(axis=0)) if len(rgb) else (0.0, 0.0, 0.0),
        sum_luma=float(brightness.sum()),
        sum_saturation=float(saturation.sum()),
        bucket_counts=bucket_counts,
    )


# =============================================================================
# Histogram
# =============================================================================

@dataclass(frozen=True)
class DominantColor:
    """A frequently occurring quantized color."""
    r: int
    g: int
    b: int
    frequency: float  # Share of accepted pixels, 0-1
    hex: str
    name: str

    @property
    def luma(self) -> float:
        return luma(self.r, self.g, self.b)

    @property
    def saturation(self) -> float:
        return color_saturation(self.r, self.g, self.b)


def bucket_color(bucket: tuple) -> tuple:
    """Representative channel values for a bucket key."""
    return tuple(index * BUCKET_SCALE for index in bucket)


def dominant_colors(sample: PixelSample, limit: int = MAX_DOMINANT_COLORS) -> list:
    """
    Rank buckets by count and return the top `limit` as DominantColors.

    Sorting is stable, so equal counts keep first-encounter order.
    """
    if sample.accepted_pixels == 0:
        return []

    ranked = sorted(sample.bucket_counts.items(), key=lambda item: -item[1])

    colors = []
    for bucket, count in ranked[:limit]:
        r, g, b = bucket_color(bucket)
        colors.append(DominantColor(
            r=r, g=g, b=b,
            frequency=count / sample.accepted_pixels,
            hex=rgb_to_hex(r, g, b),
            name=color_name(r, g, b),
        ))
    return colors


def color_distribution(sample: PixelSample) -> dict:
    """Bucket counts keyed by the hex of each bucket's representative color."""
    return {rgb_to_hex(*bucket_color(bucket)): count
            for bucket, count in sample.bucket_counts.items()}
