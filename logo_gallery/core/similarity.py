"""Weighted similarity scoring between two image feature sets."""

from __future__ import annotations

import math
import re
from typing import TYPE_CHECKING

import structlog

from logo_gallery.errors import InvalidColorError
from logo_gallery.models.similarity import MatchType, SimilarityResult

if TYPE_CHECKING:
    from logo_gallery.models.image_features import DominantColor, ImageFeatures

logger = structlog.get_logger(__name__)

HASH_WEIGHT = 0.3
ASPECT_RATIO_WEIGHT = 0.2
COLOR_WEIGHT = 0.5

# Euclidean distance between black and white in RGB space, ~441.67
MAX_COLOR_DISTANCE = math.sqrt(3 * 255**2)

# Lower edges are exclusive: a score must be strictly greater to qualify.
_MATCH_THRESHOLDS: list[tuple[float, MatchType]] = [
    (0.98, MatchType.EXACT),
    (0.85, MatchType.VERY_SIMILAR),
    (0.70, MatchType.SIMILAR),
    (0.55, MatchType.SOMEWHAT_SIMILAR),
]

_HEX_COLOR_PATTERN = re.compile(r"#?([0-9a-fA-F]{6})")


def parse_hex_color(value: str) -> tuple[int, int, int]:
    """Parse ``#RRGGBB`` into an (r, g, b) tuple."""
    if not isinstance(value, str):
        msg = f"Color must be a string, got {type(value).__name__}"
        raise InvalidColorError(msg, {"value": repr(value)})
    match = _HEX_COLOR_PATTERN.fullmatch(value.strip())
    if match is None:
        msg = f"Invalid hex color: {value!r}"
        raise InvalidColorError(msg, {"value": value})
    digits = match.group(1)
    return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)


def color_distance(rgb1: tuple[int, int, int], rgb2: tuple[int, int, int]) -> float:
    """Euclidean distance between two RGB triples."""
    return math.sqrt(sum((c1 - c2) ** 2 for c1, c2 in zip(rgb1, rgb2, strict=True)))


def hash_similarity(hash1: str, hash2: str) -> float:
    """Fraction of matching positions over the shorter of the two hashes."""
    length = min(len(hash1), len(hash2))
    if length == 0:
        return 0.0
    matches = sum(1 for i in range(length) if hash1[i] == hash2[i])
    return matches / length


def aspect_ratio_similarity(ratio1: float, ratio2: float) -> float:
    """Symmetric ratio agreement: 1.0 when equal, toward 0 as they diverge."""
    larger = max(ratio1, ratio2)
    if larger <= 0:
        return 0.0
    return min(ratio1, ratio2) / larger


def _directed_color_similarity(
    colors1: list[DominantColor], colors2: list[DominantColor]
) -> float:
    parsed2 = [(parse_hex_color(color.hex), color.coverage) for color in colors2]
    total_similarity = 0.0
    total_weight = 0.0

    for color in colors1:
        rgb = parse_hex_color(color.hex)
        best_similarity = -1.0
        best_coverage = 0.0
        for other_rgb, other_coverage in parsed2:
            similarity = 1.0 - color_distance(rgb, other_rgb) / MAX_COLOR_DISTANCE
            if similarity > best_similarity:
                best_similarity = similarity
                best_coverage = other_coverage
        if best_similarity < 0:
            continue

        weight = min(color.coverage, best_coverage)
        total_similarity += best_similarity * weight
        total_weight += weight

    return total_similarity / total_weight if total_weight > 0 else 0.0


def color_similarity(colors1: list[DominantColor], colors2: list[DominantColor]) -> float:
    """Coverage-weighted palette agreement.

    Every color is matched to its nearest counterpart in the other palette
    and weighted by the smaller of the two coverages. The directed score is
    computed both ways and averaged so the result does not depend on
    argument order.
    """
    forward = _directed_color_similarity(colors1, colors2)
    backward = _directed_color_similarity(colors2, colors1)
    return (forward + backward) / 2


def classify_similarity(similarity: float) -> MatchType:
    """Map a composite score to its match type label."""
    for threshold, match_type in _MATCH_THRESHOLDS:
        if similarity > threshold:
            return match_type
    return MatchType.DIFFERENT


def compare_features(features1: ImageFeatures, features2: ImageFeatures) -> SimilarityResult:
    """Compute the composite similarity between two feature sets.

    Never raises: any internal failure, such as a corrupt stored color,
    degrades to a zero-similarity ``error`` result so one bad record cannot
    block comparison against the rest.
    """
    try:
        hash_score = hash_similarity(features1.perceptual_hash, features2.perceptual_hash)
        aspect_score = aspect_ratio_similarity(features1.aspect_ratio, features2.aspect_ratio)
        color_score = color_similarity(features1.dominant_colors, features2.dominant_colors)
    except Exception as exc:
        logger.warning(
            "similarity_comparison_failed",
            error_type=type(exc).__name__,
            error=str(exc),
        )
        return SimilarityResult(similarity=0.0, match_type=MatchType.ERROR)

    total = (
        HASH_WEIGHT * hash_score
        + ASPECT_RATIO_WEIGHT * aspect_score
        + COLOR_WEIGHT * color_score
    )
    total = max(0.0, min(1.0, total))
    return SimilarityResult(similarity=total, match_type=classify_similarity(total))
