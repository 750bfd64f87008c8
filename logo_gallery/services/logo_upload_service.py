"""Logo upload orchestration: field validation, duplicate guard, similarity search."""

from __future__ import annotations

import sqlite3
from typing import TYPE_CHECKING

import structlog

from logo_gallery.core.image_features import extract_features
from logo_gallery.core.similarity import compare_features
from logo_gallery.core.upload_validation import (
    validate_content_type,
    validate_file_size,
    validate_metadata,
    validate_title,
)
from logo_gallery.errors import StorageError
from logo_gallery.models.similarity import MatchType
from logo_gallery.models.upload import SimilarMatch
from logo_gallery.services.upload_guard import UploadDuplicateGuard, load_stored_features

if TYPE_CHECKING:
    from logo_gallery.models.config import Config
    from logo_gallery.models.logo import Logo
    from logo_gallery.models.similarity import SimilarityResult
    from logo_gallery.models.upload import LogoUpload, UploadPolicy
    from logo_gallery.repositories.logo_repository import LogoRepository

logger = structlog.get_logger(__name__)


class LogoUploadService:
    """Runs the checks the upload endpoint performs before storing a logo."""

    def __init__(self, logo_repo: LogoRepository, config: Config) -> None:
        self.logo_repo = logo_repo
        self.config = config
        self.guard = UploadDuplicateGuard(
            logo_repo, similarity_threshold=config.similarity_threshold
        )

    def upload(
        self,
        upload: LogoUpload,
        owner_id: str,
        policy: UploadPolicy | None = None,
    ) -> Logo:
        """Validate and store a logo upload.

        Checks run cheapest first: type, size, declared metadata, title,
        then content hash and similarity. Raises ValidationError,
        ExtractionError or StorageError.
        """
        content_type = validate_content_type(
            upload.content_type, self.config.allowed_content_types
        )
        validate_file_size(upload.file_size, self.config.max_upload_bytes)
        validate_metadata(
            upload.width,
            upload.height,
            min_dimension=self.config.min_dimension,
            max_dimension=self.config.max_dimension,
        )
        title = validate_title(upload.title)

        normalized = upload.model_copy(update={"content_type": content_type, "title": title})
        return self.guard.admit(normalized, owner_id, policy or self.config.upload_policy())

    def find_similar(
        self,
        file_bytes: bytes,
        owner_id: str | None = None,
        min_similarity: float = 0.55,
        limit: int = 10,
    ) -> list[SimilarMatch]:
        """Rank stored logos by similarity to an image, best first.

        Restricted to one owner's logos when *owner_id* is given.
        """
        if limit <= 0:
            return []

        features = extract_features(file_bytes)
        try:
            records = self.logo_repo.get_feature_records()
        except sqlite3.Error as exc:
            msg = "Failed to read existing logos"
            raise StorageError(msg, {"cause": str(exc)}) from exc

        matches: list[SimilarMatch] = []
        for record in records:
            if owner_id is not None and str(record.get("owner_id")) != owner_id:
                continue
            stored = load_stored_features(record)
            if stored is None:
                continue
            result = compare_features(features, stored)
            if result.match_type is MatchType.ERROR or result.similarity < min_similarity:
                continue
            matches.append(
                SimilarMatch(
                    logo_id=record["id"],
                    similarity=result.similarity,
                    match_type=result.match_type,
                )
            )

        matches.sort(key=lambda match: match.similarity, reverse=True)
        logger.debug("similarity_search_complete", candidates=len(matches), limit=limit)
        return matches[:limit]

    @staticmethod
    def compare_images(file_bytes1: bytes, file_bytes2: bytes) -> SimilarityResult:
        """Compare two raw images directly."""
        return compare_features(extract_features(file_bytes1), extract_features(file_bytes2))
