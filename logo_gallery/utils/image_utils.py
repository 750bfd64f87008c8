"""Image decoding utilities for logo feature extraction."""

from __future__ import annotations

import io

from PIL import Image, ImageCms

from logo_gallery.utils.logger import get_logger

logger = get_logger(__name__)

_SRGB_PROFILE = ImageCms.createProfile("sRGB")
_PROFILE_CONVERTIBLE_MODES = {"RGB", "CMYK", "L"}


def looks_like_svg(data: bytes) -> bool:
    """Check whether raw bytes look like an SVG document."""
    snippet = data[:1024].lstrip().lower()
    return snippet.startswith(b"<svg") or (
        snippet.startswith(b"<?xml") and b"<svg" in snippet
    )


def rasterize_svg(data: bytes) -> bytes:
    """Render SVG bytes to PNG bytes."""
    import cairosvg

    return cairosvg.svg2png(bytestring=data)


def image_from_bytes(data: bytes) -> Image.Image:
    """Create a fully decoded PIL Image from raw bytes, rasterizing SVG input."""
    if looks_like_svg(data):
        data = rasterize_svg(data)
    image = Image.open(io.BytesIO(data))
    # Image.open is lazy; force the decode so truncated files fail here.
    image.load()
    return image


def to_srgb(image: Image.Image) -> Image.Image:
    """Return an RGB copy of *image* in the sRGB color space, alpha dropped.

    Images carrying an ICC profile are converted through it; images without
    one are assumed to already be sRGB.
    """
    icc_profile = image.info.get("icc_profile")
    if icc_profile and image.mode in _PROFILE_CONVERTIBLE_MODES:
        try:
            source = ImageCms.ImageCmsProfile(io.BytesIO(icc_profile))
            converted = ImageCms.profileToProfile(
                image, source, _SRGB_PROFILE, outputMode="RGB"
            )
            if converted is not None:
                return converted
        except (ImageCms.PyCMSError, OSError, ValueError) as exc:
            logger.debug("icc_profile_conversion_skipped", mode=image.mode, error=str(exc))

    if image.mode in ("RGBA", "LA", "PA"):
        return image.convert("RGBA").convert("RGB")
    return image.convert("RGB")


def get_image_dimensions(image: Image.Image) -> tuple[int, int]:
    """Get width and height of an image."""
    return image.size
