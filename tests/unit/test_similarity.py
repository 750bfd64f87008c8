"""Unit tests for the similarity comparator (pure functions, no I/O)."""

from __future__ import annotations

import pytest

from logo_gallery.core.similarity import (
    MAX_COLOR_DISTANCE,
    aspect_ratio_similarity,
    classify_similarity,
    color_distance,
    color_similarity,
    compare_features,
    hash_similarity,
    parse_hex_color,
)
from logo_gallery.errors import InvalidColorError
from logo_gallery.models.image_features import DominantColor, ImageFeatures
from logo_gallery.models.similarity import MatchType

ALTERNATING = "01" * 32


def _features(
    width: int = 100,
    height: int = 50,
    perceptual_hash: str = ALTERNATING,
    colors: list[tuple[str, float]] | None = None,
) -> ImageFeatures:
    palette = colors if colors is not None else [("#FFFFFF", 0.7), ("#DC143C", 0.3)]
    return ImageFeatures(
        width=width,
        height=height,
        average_hash="1" * 64,
        perceptual_hash=perceptual_hash,
        dominant_colors=[DominantColor(hex=hex_value, coverage=cov) for hex_value, cov in palette],
    )


class TestParseHexColor:
    """Tests for parse_hex_color."""

    def test_uppercase(self) -> None:
        assert parse_hex_color("#FF8000") == (255, 128, 0)

    def test_lowercase_without_hash(self) -> None:
        assert parse_hex_color("0a0b0c") == (10, 11, 12)

    @pytest.mark.parametrize("value", ["#FFF", "#GGGGGG", "", "#12345678", "red"])
    def test_malformed_raises(self, value: str) -> None:
        with pytest.raises(InvalidColorError):
            parse_hex_color(value)

    def test_non_string_raises(self) -> None:
        with pytest.raises(InvalidColorError):
            parse_hex_color(None)  # type: ignore[arg-type]


class TestComponentScores:
    """Tests for the individual similarity components."""

    def test_hash_similarity_identical(self) -> None:
        assert hash_similarity(ALTERNATING, ALTERNATING) == 1.0

    def test_hash_similarity_inverse(self) -> None:
        assert hash_similarity("0" * 64, "1" * 64) == 0.0

    def test_hash_similarity_half(self) -> None:
        assert hash_similarity("0" * 64, "0" * 32 + "1" * 32) == 0.5

    def test_hash_similarity_uses_shorter_length(self) -> None:
        assert hash_similarity("1010", "10101111") == 1.0

    def test_hash_similarity_empty(self) -> None:
        assert hash_similarity("", "1" * 64) == 0.0

    def test_aspect_ratio_identical(self) -> None:
        assert aspect_ratio_similarity(2.0, 2.0) == 1.0

    def test_aspect_ratio_symmetric(self) -> None:
        assert aspect_ratio_similarity(1.0, 4.0) == aspect_ratio_similarity(4.0, 1.0) == 0.25

    def test_color_distance_extremes(self) -> None:
        assert color_distance((0, 0, 0), (255, 255, 255)) == pytest.approx(MAX_COLOR_DISTANCE)
        assert MAX_COLOR_DISTANCE == pytest.approx(441.67, abs=0.01)

    def test_color_similarity_identical_palettes(self) -> None:
        palette = [DominantColor(hex="#102030", coverage=0.5)]
        assert color_similarity(palette, palette) == 1.0

    def test_color_similarity_opposite_palettes(self) -> None:
        white = [DominantColor(hex="#FFFFFF", coverage=1.0)]
        black = [DominantColor(hex="#000000", coverage=1.0)]
        assert color_similarity(white, black) == pytest.approx(0.0)

    def test_color_similarity_empty_palette_is_zero(self) -> None:
        palette = [DominantColor(hex="#102030", coverage=0.5)]
        assert color_similarity([], palette) == 0.0
        assert color_similarity([], []) == 0.0

    def test_color_similarity_low_coverage_barely_counts(self) -> None:
        """A tiny off-palette speck moves the score far less than a large one."""
        base = [DominantColor(hex="#FFFFFF", coverage=0.95)]
        speck = base + [DominantColor(hex="#000000", coverage=0.05)]
        blob = [DominantColor(hex="#FFFFFF", coverage=0.5), DominantColor(hex="#000000", coverage=0.5)]
        assert color_similarity(base, speck) > color_similarity(base, blob)


class TestClassifySimilarity:
    """Tests for classify_similarity thresholds (exclusive lower edges)."""

    @pytest.mark.parametrize(
        ("score", "expected"),
        [
            (1.0, MatchType.EXACT),
            (0.981, MatchType.EXACT),
            (0.98, MatchType.VERY_SIMILAR),
            (0.86, MatchType.VERY_SIMILAR),
            (0.85, MatchType.SIMILAR),
            (0.71, MatchType.SIMILAR),
            (0.70, MatchType.SOMEWHAT_SIMILAR),
            (0.56, MatchType.SOMEWHAT_SIMILAR),
            (0.55, MatchType.DIFFERENT),
            (0.0, MatchType.DIFFERENT),
        ],
    )
    def test_thresholds(self, score: float, expected: MatchType) -> None:
        assert classify_similarity(score) == expected


class TestCompareFeatures:
    """Tests for compare_features."""

    def test_self_similarity_is_exact(self) -> None:
        features = _features()
        result = compare_features(features, features)
        assert result.similarity == 1.0
        assert result.match_type == MatchType.EXACT

    def test_symmetric(self) -> None:
        a = _features(width=120, height=40, colors=[("#FFFFFF", 0.6), ("#0000FF", 0.4)])
        b = _features(
            width=80,
            height=80,
            perceptual_hash="1" * 64,
            colors=[("#F0F0F0", 0.5), ("#00008B", 0.3), ("#FF0000", 0.2)],
        )
        assert compare_features(a, b).similarity == compare_features(b, a).similarity

    def test_bounds(self) -> None:
        a = _features(perceptual_hash="0" * 64, colors=[("#000000", 1.0)])
        b = _features(width=10, height=1000, perceptual_hash="1" * 64, colors=[("#FFFFFF", 1.0)])
        result = compare_features(a, b)
        assert 0.0 <= result.similarity <= 1.0
        assert result.match_type == MatchType.DIFFERENT

    def test_weights_hash_and_aspect_only(self) -> None:
        """Same structure and shape but opposite palettes scores 0.3 + 0.2."""
        a = _features(colors=[("#FFFFFF", 1.0)])
        b = _features(colors=[("#000000", 1.0)])
        result = compare_features(a, b)
        assert result.similarity == pytest.approx(0.5)
        assert result.match_type == MatchType.DIFFERENT

    def test_weights_color_and_aspect_only(self) -> None:
        a = _features(perceptual_hash="0" * 64)
        b = _features(perceptual_hash="1" * 64)
        result = compare_features(a, b)
        assert result.similarity == pytest.approx(0.7)
        assert result.match_type == MatchType.SOMEWHAT_SIMILAR

    def test_recolored_logo_is_not_very_similar(self) -> None:
        original = _features(colors=[("#FFFFFF", 0.7), ("#DC143C", 0.3)])
        recolored = _features(colors=[("#000080", 0.7), ("#FFD700", 0.3)])
        result = compare_features(original, recolored)
        assert result.similarity <= 0.85

    def test_corrupt_color_degrades_to_error(self) -> None:
        good = _features()
        corrupt = _features(colors=[("not-a-color", 1.0)])
        result = compare_features(good, corrupt)
        assert result.similarity == 0.0
        assert result.match_type == MatchType.ERROR

    def test_mismatched_hash_lengths_compare_prefix(self) -> None:
        a = _features(perceptual_hash=ALTERNATING)
        b = _features(perceptual_hash=ALTERNATING[:16])
        assert compare_features(a, b).similarity == 1.0
