"""Image feature models used for duplicate and similarity detection."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

HASH_LENGTH = 64
MAX_DOMINANT_COLORS = 5


class DominantColor(BaseModel):
    """One bucket of the dominant color palette.

    ``hex`` is not validated here: stored palettes are loaded as-is and a
    malformed value only surfaces when the comparator parses it.
    """

    model_config = ConfigDict(strict=True, frozen=True)

    hex: str
    coverage: float


class ImageFeatures(BaseModel):
    """Structural descriptors computed once per uploaded image."""

    model_config = ConfigDict(strict=True, frozen=True)

    width: int
    height: int
    average_hash: str
    perceptual_hash: str
    dominant_colors: list[DominantColor]

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.width / self.height
