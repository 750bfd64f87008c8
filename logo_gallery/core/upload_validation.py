"""Upload field validation pure functions.

Each check raises ValidationError with its own reason so the endpoint can
render a distinct message per failure.
"""

from __future__ import annotations

from typing import Any

from logo_gallery.errors import ValidationError
from logo_gallery.models.upload import RejectionReason


def validate_content_type(content_type: str, allowed_types: list[str]) -> str:
    """Declared MIME type must be one of the allowed image types."""
    normalized = (content_type or "").split(";")[0].strip().lower()
    if normalized not in allowed_types:
        msg = "Invalid file type"
        raise ValidationError(
            RejectionReason.INVALID_TYPE,
            msg,
            {"content_type": content_type, "allowed": allowed_types},
        )
    return normalized


def validate_file_size(size: int, max_bytes: int) -> int:
    """File must be non-empty and no larger than the configured cap."""
    if size <= 0:
        msg = "File is empty"
        raise ValidationError(RejectionReason.INVALID_SIZE, msg, {"size": size})
    if size > max_bytes:
        msg = "File size exceeds limit"
        raise ValidationError(
            RejectionReason.INVALID_SIZE,
            msg,
            {"size": size, "max_bytes": max_bytes},
        )
    return size


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_metadata(
    width: Any,
    height: Any,
    min_dimension: int = 1,
    max_dimension: int = 10_000,
) -> tuple[int, int]:
    """Declared width/height must be integers within the allowed range."""
    if not _is_integer(width) or not _is_integer(height):
        msg = "Invalid image metadata"
        raise ValidationError(
            RejectionReason.INVALID_METADATA,
            msg,
            {"width": repr(width), "height": repr(height)},
        )
    if not (
        min_dimension <= width <= max_dimension and min_dimension <= height <= max_dimension
    ):
        msg = "Invalid image dimensions"
        raise ValidationError(
            RejectionReason.INVALID_DIMENSIONS,
            msg,
            {
                "width": width,
                "height": height,
                "min_dimension": min_dimension,
                "max_dimension": max_dimension,
            },
        )
    return width, height


def validate_title(title: str) -> str:
    """Title is required; surrounding whitespace is stripped."""
    stripped = (title or "").strip()
    if not stripped:
        msg = "Title is required"
        raise ValidationError(RejectionReason.INVALID_METADATA, msg, {"field": "title"})
    if len(stripped) > 200:
        msg = "Title must not exceed 200 characters"
        raise ValidationError(RejectionReason.INVALID_METADATA, msg, {"field": "title"})
    return stripped
