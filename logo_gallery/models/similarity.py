"""Similarity comparison result model."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, field_validator


class MatchType(StrEnum):
    """Match strength label derived from the composite similarity score."""

    EXACT = "exact"  # > 0.98
    VERY_SIMILAR = "very similar"  # > 0.85
    SIMILAR = "similar"  # > 0.70
    SOMEWHAT_SIMILAR = "somewhat similar"  # > 0.55
    DIFFERENT = "different"
    ERROR = "error"


class SimilarityResult(BaseModel):
    """Outcome of comparing two feature sets. Never persisted."""

    model_config = ConfigDict(frozen=True)

    similarity: float
    match_type: MatchType

    @field_validator("similarity")
    @classmethod
    def validate_similarity(cls, value: float) -> float:
        """Similarity must be within [0, 1]."""
        if not 0.0 <= value <= 1.0:
            msg = "similarity must be between 0.0 and 1.0"
            raise ValueError(msg)
        return value
