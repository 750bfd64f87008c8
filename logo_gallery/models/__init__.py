"""Pydantic data models for the logo gallery upload pipeline."""

from logo_gallery.models.config import Config
from logo_gallery.models.image_features import DominantColor, ImageFeatures
from logo_gallery.models.logo import Logo
from logo_gallery.models.similarity import MatchType, SimilarityResult
from logo_gallery.models.upload import (
    Decision,
    LogoUpload,
    RejectionReason,
    SimilarityInfo,
    SimilarMatch,
    UploadPolicy,
)

__all__ = [
    "Config",
    "Decision",
    "DominantColor",
    "ImageFeatures",
    "Logo",
    "LogoUpload",
    "MatchType",
    "RejectionReason",
    "SimilarMatch",
    "SimilarityInfo",
    "SimilarityResult",
    "UploadPolicy",
]
