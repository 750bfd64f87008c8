"""Upload request, policy and decision models."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from logo_gallery.models.image_features import ImageFeatures
from logo_gallery.models.similarity import MatchType


class RejectionReason(StrEnum):
    """Machine-checkable reason attached to every upload rejection."""

    DUPLICATE = "duplicate"
    SIMILAR = "similar"
    INVALID_TYPE = "invalid-type"
    INVALID_SIZE = "invalid-size"
    INVALID_METADATA = "invalid-metadata"
    INVALID_DIMENSIONS = "invalid-dimensions"


class UploadPolicy(BaseModel):
    """Duplicate policy toggles applied per upload attempt."""

    model_config = ConfigDict(strict=True, frozen=True)

    allow_system_duplicates: bool = True
    allow_similar_images: bool = False


class SimilarMatch(BaseModel):
    """A stored logo that scored above the similarity threshold."""

    logo_id: int
    similarity: float
    match_type: MatchType


class SimilarityInfo(BaseModel):
    """Similarity metadata attached to a ``similar`` rejection."""

    similarity: float
    match_type: MatchType
    similar_logos: list[SimilarMatch] = Field(default_factory=list)


class LogoUpload(BaseModel):
    """Fields received by the upload endpoint.

    Declared width and height are kept exactly as submitted; they are checked
    by ``validate_metadata`` so a bad value is reported as a rejection reason
    rather than a model error.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    file_bytes: bytes
    file_name: str
    content_type: str
    title: str
    description: str | None = None
    tags: list[str] = Field(default_factory=list)
    width: Any = None
    height: Any = None

    @property
    def file_size(self) -> int:
        return len(self.file_bytes)


class Decision(BaseModel):
    """Accept/reject outcome of the duplicate guard for one upload attempt."""

    accepted: bool
    content_hash: str
    features: ImageFeatures
    reason: RejectionReason | None = None
    message: str | None = None
    existing_logo_id: int | None = None
    similarity_info: SimilarityInfo | None = None

    @property
    def status_code(self) -> int:
        """HTTP status the endpoint answers with for this decision."""
        from logo_gallery.errors import ACCEPTED_STATUS, status_for_reason

        if self.accepted or self.reason is None:
            return ACCEPTED_STATUS
        return status_for_reason(self.reason)

    def raise_for_rejection(self) -> None:
        """Raise ``ValidationError`` when the upload was rejected."""
        from logo_gallery.errors import ValidationError

        if self.accepted or self.reason is None:
            return

        details: dict[str, Any] = {}
        if self.existing_logo_id is not None:
            details["existing_logo_id"] = self.existing_logo_id
        if self.similarity_info is not None:
            details["similarity_info"] = self.similarity_info.model_dump(mode="json")
        raise ValidationError(self.reason, self.message or self.reason.value, details)
