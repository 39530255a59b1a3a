"""
Unit tests for color harmony classification and look analysis.
"""

import pytest

from wardrobe.services.colors.harmony import (
    HARMONY_TYPES, analyze_color_harmony, analyze_colors, calculate_contrast,
    color_to_hsl, harmony_display_name,
)
from wardrobe.services.colors.harmony.detectors import (
    DETECTORS, consecutive_hue_differences, detect_complementary,
    detect_split_complementary, detect_tetradic, detect_triadic, hue_bin,
)


class TestAnalyzeColorHarmony:

    def test_empty(self):
        result = analyze_color_harmony([])
        assert result.type == "neutral"
        assert result.confidence == 0.0
        assert result.description == "No colors to analyze"
        assert len(result.suggestions) == 1

    def test_identical_colors_are_monochromatic(self):
        result = analyze_color_harmony(["#3366cc", "#3366cc"])
        assert result.type == "monochromatic"
        assert result.confidence == pytest.approx(0.9)
        assert len(result.suggestions) == 3

    def test_primaries_are_triadic(self):
        # split-complementary also scores 0.75; triadic is evaluated first
        result = analyze_color_harmony(["#ff0000", "#00ff00", "#0000ff"])
        assert result.type == "triadic"
        assert result.confidence == pytest.approx(0.75)

    def test_complementary(self):
        result = analyze_color_harmony(["#ff0000", "#00ffff"])
        assert result.type == "complementary"
        assert result.confidence == pytest.approx(0.8)

    def test_analogous(self):
        result = analyze_color_harmony(["#ff0000", "#ff8000", "#ffff00"])
        assert result.type == "analogous"
        assert result.confidence == pytest.approx(0.85)

    def test_achromatic_only_is_neutral(self):
        result = analyze_color_harmony(["#000000", "#ffffff", "#808080"])
        assert result.type == "neutral"
        assert result.confidence == pytest.approx(0.8)

    def test_achromatic_colors_are_ignored(self):
        result = analyze_color_harmony(["#ff0000", "#ffffff", "#000000"])
        assert result.type == "monochromatic"

    def test_no_pattern_is_mixed(self):
        # hues 0 and 100
        result = analyze_color_harmony(["#ff0000", "#55ff00"])
        assert result.type == "mixed"
        assert result.confidence == 0.0
        assert result.suggestions == []

    def test_unparseable_color_counts_as_hue_zero(self):
        assert color_to_hsl("not-a-color") == (0.0, 0.0, 0.5)
        result = analyze_color_harmony(["not-a-color", "#ff0000"])
        assert result.type == "monochromatic"

    def test_colors_are_echoed(self):
        colors = ["#FF0000", "#00ffff"]
        assert analyze_color_harmony(colors).colors == colors

    def test_idempotent(self):
        colors = ["#1f4e79", "#d3b58f", "#2d7560"]
        assert analyze_color_harmony(colors) == analyze_color_harmony(colors)

    def test_result_is_known_type(self):
        for colors in (["#123456"], ["#ff0000", "#00ff00"], ["#abcdef", "#fedcba", "#0f0f0f"]):
            result = analyze_color_harmony(colors)
            assert result.type in HARMONY_TYPES
            assert 0.0 <= result.confidence <= 1.0


class TestDetectors:

    def test_hue_bin_rounds_half_up(self):
        assert hue_bin(14.9) == 0.0
        assert hue_bin(15.0) == 30.0
        assert hue_bin(345.0) == 0.0
        assert hue_bin(350.0) == 0.0

    def test_consecutive_differences_fold(self):
        assert consecutive_hue_differences([10, 350]) == [20.0]
        assert consecutive_hue_differences([240, 0, 120]) == [120.0, 120.0]

    def test_complementary_needs_two_hues(self):
        assert detect_complementary([0.0]).type == "mixed"
        assert detect_complementary([10.0, 200.0]).type == "complementary"

    def test_triadic_needs_three_hues(self):
        assert detect_triadic([0.0, 120.0]).type == "mixed"

    def test_tetradic(self):
        result = detect_tetradic([0.0, 90.0, 180.0, 270.0])
        assert result.type == "tetradic"
        assert result.confidence == pytest.approx(0.7)
        assert detect_tetradic([0.0, 90.0, 180.0]).type == "mixed"

    def test_split_complementary(self):
        assert detect_split_complementary([0.0, 150.0, 75.0]).type == "split-complementary"
        assert detect_split_complementary([0.0, 150.0]).type == "mixed"

    def test_detector_order(self):
        names = [d.__name__ for d in DETECTORS]
        assert names == [
            "detect_monochromatic", "detect_analogous", "detect_complementary",
            "detect_triadic", "detect_tetradic", "detect_split_complementary",
        ]


class TestAnalyzeColors:

    def test_empty(self):
        analysis = analyze_colors([])
        assert analysis.primary == "#000000"
        assert analysis.secondary == []
        assert analysis.contrast == 0.0
        assert analysis.saturation == 0.0
        assert analysis.brightness == 0.0
        assert analysis.harmony.type == "neutral"

    def test_most_saturated_is_primary(self):
        analysis = analyze_colors(["#808080", "#ff0000"])
        assert analysis.primary == "#ff0000"
        assert analysis.secondary == ["#808080"]
        assert analysis.saturation == pytest.approx(0.5)
        assert analysis.brightness == pytest.approx((128 / 255 + 0.5) / 2)

    def test_first_wins_saturation_ties(self):
        assert analyze_colors(["#ff0000", "#00ff00"]).primary == "#ff0000"

    def test_primary_duplicates_excluded_from_secondary(self):
        analysis = analyze_colors(["#FF0000", "#ff0000", "#00f"])
        assert analysis.primary == "#ff0000"
        assert analysis.secondary == ["#0000ff"]

    def test_malformed_colors_become_black(self):
        analysis = analyze_colors(["garbage", "#ffffff"])
        assert analysis.primary == "#000000"
        assert analysis.secondary == ["#ffffff"]
        assert analysis.contrast == pytest.approx(21.0)

    def test_single_color_has_no_contrast(self):
        assert analyze_colors(["#123456"]).contrast == 0.0

    def test_to_dict(self):
        data = analyze_colors(["#ff0000", "#00ffff"]).to_dict()
        assert data["harmony"]["type"] == "complementary"


class TestContrastAndNames:

    def test_black_white_contrast(self):
        assert calculate_contrast("#000000", "#ffffff") == pytest.approx(21.0)

    def test_unparseable_contrast(self):
        assert calculate_contrast("#000000", "nope") == 1.0

    def test_display_names(self):
        assert harmony_display_name("split-complementary") == "Split-Complementary"
        assert harmony_display_name("mixed") == "Mixed"
        assert harmony_display_name("custom") == "custom"
