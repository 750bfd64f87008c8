"""Persisted logo record with its content hash and image features."""

from __future__ import annotations

import json
import re
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from logo_gallery.models.image_features import ImageFeatures


def _utc_now() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(UTC)


class Logo(BaseModel):
    """A stored logo. Content hash and features are immutable once written."""

    model_config = ConfigDict(strict=True, frozen=True)

    id: int | None = None
    owner_id: str
    title: str
    description: str | None = None
    tags: list[str] = Field(default_factory=list)
    file_name: str
    content_type: str
    file_size: int
    width: int
    height: int
    content_hash: str
    image_features: ImageFeatures
    created_at: datetime = Field(default_factory=_utc_now)

    @field_validator("owner_id")
    @classmethod
    def validate_owner_id(cls, value: str) -> str:
        """Owner ID must be non-empty."""
        if not value.strip():
            msg = "owner_id must not be empty"
            raise ValueError(msg)
        return value

    @field_validator("content_hash")
    @classmethod
    def validate_content_hash(cls, value: str) -> str:
        """Content hash must be a 64-character lowercase hex SHA-256 digest."""
        lowered = value.lower()
        if not re.fullmatch(r"[0-9a-f]{64}", lowered):
            msg = "content_hash must be a valid 64-character hex SHA-256 string"
            raise ValueError(msg)
        return lowered

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Logo:
        """Build a Logo from a ``logos`` table row."""
        return cls(
            id=row["id"],
            owner_id=row["owner_id"],
            title=row["title"],
            description=row["description"],
            tags=json.loads(row["tags"]) if row["tags"] else [],
            file_name=row["file_name"],
            content_type=row["content_type"],
            file_size=row["file_size"],
            width=row["width"],
            height=row["height"],
            content_hash=row["content_hash"],
            image_features=ImageFeatures.model_validate_json(row["image_features"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )
