"""Duplicate and near-duplicate guard applied to every logo upload."""

from __future__ import annotations

import sqlite3
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError as ModelValidationError

from logo_gallery.core.checksum import compute_content_hash
from logo_gallery.core.image_features import extract_features
from logo_gallery.core.similarity import compare_features
from logo_gallery.errors import StorageError, ValidationError
from logo_gallery.models.image_features import ImageFeatures
from logo_gallery.models.logo import Logo
from logo_gallery.models.similarity import MatchType
from logo_gallery.models.upload import (
    Decision,
    RejectionReason,
    SimilarityInfo,
    SimilarMatch,
    UploadPolicy,
)

if TYPE_CHECKING:
    from logo_gallery.models.upload import LogoUpload
    from logo_gallery.repositories.logo_repository import LogoRepository

logger = structlog.get_logger(__name__)

DEFAULT_SIMILARITY_THRESHOLD = 0.85


def load_stored_features(record: dict[str, Any]) -> ImageFeatures | None:
    """Deserialize the features column of a stored record.

    Returns None when the record carries no usable features.
    """
    raw = record.get("image_features")
    if raw is None:
        return None
    if isinstance(raw, ImageFeatures):
        return raw
    try:
        if isinstance(raw, (str, bytes)):
            return ImageFeatures.model_validate_json(raw)
        return ImageFeatures.model_validate(raw)
    except (ModelValidationError, ValueError) as exc:
        logger.warning(
            "stored_features_unreadable",
            logo_id=record.get("id"),
            error=str(exc),
        )
        return None


class UploadDuplicateGuard:
    """Decides whether an upload is a duplicate, a near-duplicate, or new.

    Exact content matches are checked across all owners; perceptual
    similarity is only checked against the uploader's own logos, since
    different owners may legitimately share visually similar logos.
    """

    def __init__(
        self,
        logo_repo: LogoRepository,
        similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    ) -> None:
        self.logo_repo = logo_repo
        self.similarity_threshold = similarity_threshold

    def evaluate(
        self,
        file_bytes: bytes,
        owner_id: str,
        existing_records: list[dict[str, Any]],
        policy: UploadPolicy | None = None,
    ) -> Decision:
        """Compute hash and features for *file_bytes* and apply duplicate policy.

        Raises ExtractionError when the bytes are not a decodable image.
        """
        policy = policy or UploadPolicy()
        content_hash = compute_content_hash(file_bytes)
        features = extract_features(file_bytes)

        if not existing_records:
            logger.debug("duplicate_check_bootstrap", owner_id=owner_id)
            return Decision(accepted=True, content_hash=content_hash, features=features)

        for record in existing_records:
            if record.get("content_hash") != content_hash:
                continue
            if str(record.get("owner_id")) == owner_id:
                return self._reject(
                    content_hash,
                    features,
                    RejectionReason.DUPLICATE,
                    "Duplicate file detected",
                    existing_logo_id=record.get("id"),
                )
            if not policy.allow_system_duplicates:
                return self._reject(
                    content_hash,
                    features,
                    RejectionReason.DUPLICATE,
                    "This logo has already been uploaded by another user",
                    existing_logo_id=record.get("id"),
                )

        if not policy.allow_similar_images:
            matches = self._find_similar_owned(features, owner_id, existing_records)
            if matches:
                best = matches[0]
                return self._reject(
                    content_hash,
                    features,
                    RejectionReason.SIMILAR,
                    "Similar logo already exists in your collection",
                    existing_logo_id=best.logo_id,
                    similarity_info=SimilarityInfo(
                        similarity=best.similarity,
                        match_type=best.match_type,
                        similar_logos=matches,
                    ),
                )

        return Decision(accepted=True, content_hash=content_hash, features=features)

    def admit(
        self,
        upload: LogoUpload,
        owner_id: str,
        policy: UploadPolicy | None = None,
    ) -> Logo:
        """Evaluate an upload against all stored logos and persist it if accepted.

        Raises ValidationError on rejection (including a write-time conflict
        on the content_hash/owner uniqueness constraint) and StorageError when
        the store itself fails.
        """
        if not owner_id or not owner_id.strip():
            msg = "Owner ID is required"
            raise ValidationError(
                RejectionReason.INVALID_METADATA, msg, {"field": "owner_id"}
            )

        try:
            records = self.logo_repo.get_feature_records()
        except sqlite3.Error as exc:
            msg = "Failed to read existing logos"
            raise StorageError(msg, {"cause": str(exc)}) from exc

        decision = self.evaluate(upload.file_bytes, owner_id, records, policy)
        if not decision.accepted:
            logger.info(
                "logo_upload_rejected",
                owner_id=owner_id,
                reason=decision.reason,
                existing_logo_id=decision.existing_logo_id,
            )
            decision.raise_for_rejection()

        logo = Logo(
            owner_id=owner_id,
            title=upload.title,
            description=upload.description,
            tags=list(upload.tags),
            file_name=upload.file_name,
            content_type=upload.content_type,
            file_size=upload.file_size,
            width=decision.features.width,
            height=decision.features.height,
            content_hash=decision.content_hash,
            image_features=decision.features,
            created_at=datetime.now(UTC),
        )

        try:
            logo_id = self.logo_repo.store_logo(
                {
                    "owner_id": logo.owner_id,
                    "title": logo.title,
                    "description": logo.description,
                    "tags": logo.tags,
                    "file_name": logo.file_name,
                    "content_type": logo.content_type,
                    "file_size": logo.file_size,
                    "width": logo.width,
                    "height": logo.height,
                    "content_hash": logo.content_hash,
                    "image_features": logo.image_features.model_dump_json(),
                    "file_data": upload.file_bytes,
                    "created_at": logo.created_at.isoformat(),
                }
            )
        except sqlite3.IntegrityError as exc:
            logger.info("logo_upload_conflict", owner_id=owner_id, content_hash=logo.content_hash)
            msg = "You have already uploaded this logo"
            raise ValidationError(
                RejectionReason.DUPLICATE,
                msg,
                {"content_hash": logo.content_hash},
                status_code=409,
            ) from exc
        except sqlite3.Error as exc:
            logger.error("logo_store_failed", owner_id=owner_id, error=str(exc))
            msg = "Failed to store logo"
            raise StorageError(msg, {"cause": str(exc)}) from exc

        logger.info(
            "logo_upload_accepted",
            logo_id=logo_id,
            owner_id=owner_id,
            content_hash=logo.content_hash,
        )
        return logo.model_copy(update={"id": logo_id})

    def _find_similar_owned(
        self,
        features: ImageFeatures,
        owner_id: str,
        existing_records: list[dict[str, Any]],
    ) -> list[SimilarMatch]:
        """Same-owner records scoring above the threshold, best first."""
        matches: list[SimilarMatch] = []
        for record in existing_records:
            if str(record.get("owner_id")) != owner_id:
                continue
            stored = load_stored_features(record)
            if stored is None:
                continue
            result = compare_features(features, stored)
            if result.match_type is MatchType.ERROR:
                continue
            if result.similarity > self.similarity_threshold:
                matches.append(
                    SimilarMatch(
                        logo_id=record.get("id") or 0,
                        similarity=result.similarity,
                        match_type=result.match_type,
                    )
                )

        matches.sort(key=lambda match: match.similarity, reverse=True)
        return matches

    @staticmethod
    def _reject(
        content_hash: str,
        features: ImageFeatures,
        reason: RejectionReason,
        message: str,
        existing_logo_id: int | None = None,
        similarity_info: SimilarityInfo | None = None,
    ) -> Decision:
        return Decision(
            accepted=False,
            content_hash=content_hash,
            features=features,
            reason=reason,
            message=message,
            existing_logo_id=existing_logo_id,
            similarity_info=similarity_info,
        )
