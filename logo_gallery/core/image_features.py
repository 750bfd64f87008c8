"""Image feature extraction: average hash, perceptual hash, dominant colors.

All descriptors are pure functions of the decoded, sRGB-normalized pixel
buffer, so re-extracting identical bytes always yields identical features.
"""

from __future__ import annotations

from collections import Counter

import numpy as np
from PIL import Image

from logo_gallery.errors import ExtractionError
from logo_gallery.models.image_features import (
    HASH_LENGTH,
    MAX_DOMINANT_COLORS,
    DominantColor,
    ImageFeatures,
)
from logo_gallery.utils.image_utils import get_image_dimensions, image_from_bytes, to_srgb

AVERAGE_HASH_SIZE = 8
PERCEPTUAL_HASH_SIZE = 32
PERCEPTUAL_GRID_SIZE = 8
COLOR_SAMPLE_SIZE = 50


def _downscale(image: Image.Image, size: int) -> Image.Image:
    return image.resize((size, size), Image.Resampling.LANCZOS)


def _grayscale_pixels(image: Image.Image, size: int) -> list[int]:
    gray = _downscale(image, size).convert("L")
    return np.asarray(gray, dtype=np.int32).flatten().tolist()


def compute_average_hash(image: Image.Image) -> str:
    """Brightness-threshold fingerprint over an 8x8 grayscale grid.

    Each bit is ``1`` when the pixel is at or above the grid mean.
    """
    pixels = _grayscale_pixels(image, AVERAGE_HASH_SIZE)
    mean = sum(pixels) / len(pixels)
    return "".join("1" if value >= mean else "0" for value in pixels)


def compute_perceptual_hash(image: Image.Image) -> str:
    """Gradient-direction fingerprint sampled from a 32x32 grayscale buffer.

    For each cell of an 8x8 grid, emits ``1`` when the pixel is brighter than
    its right-hand raster neighbor. Encodes relative rather than absolute
    intensity, so uniform brightness or contrast shifts barely move it.
    """
    pixels = _grayscale_pixels(image, PERCEPTUAL_HASH_SIZE)
    bits: list[str] = []

    for y in range(PERCEPTUAL_GRID_SIZE):
        for x in range(PERCEPTUAL_GRID_SIZE):
            if len(bits) == HASH_LENGTH:
                break
            index = y * PERCEPTUAL_HASH_SIZE + x
            if index + 1 >= len(pixels):
                bits.append("0")
            else:
                bits.append("1" if pixels[index] > pixels[index + 1] else "0")

    return "".join(bits).ljust(HASH_LENGTH, "0")


def extract_dominant_colors(
    image: Image.Image, limit: int = MAX_DOMINANT_COLORS
) -> list[DominantColor]:
    """Most prevalent exact RGB colors of a 50x50 downscale, largest coverage first.

    Ties keep first-seen raster order.
    """
    sample = _downscale(image, COLOR_SAMPLE_SIZE).convert("RGB")
    pixels = np.asarray(sample, dtype=np.uint8).reshape(-1, 3).tolist()
    total = len(pixels)
    if total == 0:
        return []

    counts = Counter(tuple(pixel) for pixel in pixels)
    return [
        DominantColor(hex=f"#{r:02X}{g:02X}{b:02X}", coverage=count / total)
        for (r, g, b), count in counts.most_common(limit)
    ]


def extract_features(data: bytes) -> ImageFeatures:
    """Decode *data* and compute its full feature record.

    Raises ExtractionError (chained to the underlying cause) when the bytes
    cannot be decoded or decode to non-positive dimensions. Never returns a
    partially populated record.
    """
    if not data:
        msg = "Image data is empty"
        raise ExtractionError(msg)

    try:
        decoded = image_from_bytes(data)
    except Exception as exc:
        msg = f"Failed to decode image: {exc}"
        raise ExtractionError(msg, {"cause": type(exc).__name__}) from exc

    width, height = get_image_dimensions(decoded)
    if width <= 0 or height <= 0:
        msg = f"Invalid image dimensions: {width}x{height}"
        raise ExtractionError(msg, {"width": width, "height": height})

    try:
        image = to_srgb(decoded)
        return ImageFeatures(
            width=width,
            height=height,
            average_hash=compute_average_hash(image),
            perceptual_hash=compute_perceptual_hash(image),
            dominant_colors=extract_dominant_colors(image),
        )
    except Exception as exc:
        msg = f"Failed to extract image features: {exc}"
        raise ExtractionError(msg, {"cause": type(exc).__name__}) from exc
