"""Error taxonomy for the logo upload pipeline.

Every error carries the HTTP status the upload endpoint should answer with,
so callers never need to inspect exception types ad hoc.
"""

from __future__ import annotations

from typing import Any

from logo_gallery.models.upload import RejectionReason

_REASON_STATUS: dict[RejectionReason, int] = {
    RejectionReason.DUPLICATE: 409,
    RejectionReason.SIMILAR: 409,
    RejectionReason.INVALID_TYPE: 415,
    RejectionReason.INVALID_SIZE: 413,
    RejectionReason.INVALID_METADATA: 400,
    RejectionReason.INVALID_DIMENSIONS: 400,
}

ACCEPTED_STATUS = 201


def status_for_reason(reason: RejectionReason) -> int:
    """Map a rejection reason to the HTTP status returned to the client."""
    return _REASON_STATUS.get(reason, 400)


class LogoGalleryError(Exception):
    """Base class for all errors raised by the upload pipeline."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the JSON error body returned by the endpoint."""
        body: dict[str, Any] = {
            "error": self.message,
            "code": self.code,
            "status_code": self.status_code,
        }
        if self.details:
            body["details"] = self.details
        return body


class ExtractionError(LogoGalleryError):
    """Image bytes could not be decoded or decoded to invalid dimensions."""

    status_code = 400
    code = "EXTRACTION_ERROR"


class InvalidColorError(LogoGalleryError):
    """A stored dominant color is not a valid #RRGGBB string."""

    status_code = 500
    code = "INVALID_COLOR"


class ValidationError(LogoGalleryError):
    """Client-correctable upload rejection with a machine-checkable reason."""

    code = "VALIDATION_ERROR"

    def __init__(
        self,
        reason: RejectionReason,
        message: str,
        details: dict[str, Any] | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, details)
        self.reason = reason
        self.status_code = status_code or status_for_reason(reason)

    def to_dict(self) -> dict[str, Any]:
        body = super().to_dict()
        body["reason"] = self.reason.value
        return body


class StorageError(LogoGalleryError):
    """Persistence failure while writing an accepted logo."""

    status_code = 500
    code = "STORAGE_ERROR"
