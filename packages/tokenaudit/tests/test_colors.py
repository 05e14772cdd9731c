"""Tests for color normalization and similarity."""

import pytest

from tokenaudit.colors import (
    color_distance_similarity,
    color_similarity,
    hex_to_rgba,
    normalize_color,
    rgb_to_hex,
)


class TestNormalizeColor:
    def test_shorthand_hex_expanded(self):
        assert normalize_color("#FFF") == "#ffffff"
        assert normalize_color("#0f08") == "#00ff0088"

    def test_opaque_alpha_dropped(self):
        assert normalize_color("#FFFFFFFF") == "#ffffff"
        assert normalize_color("#000f") == "#000000"

    def test_translucent_alpha_kept(self):
        assert normalize_color("#00000080") == "#00000080"

    def test_rgb_function(self):
        assert normalize_color("rgb(255, 0, 0)") == "#ff0000"
        assert normalize_color("RGB(0 128 255)") == "#0080ff"

    def test_rgba_function(self):
        assert normalize_color("rgba(0, 0, 0, 0.5)") == "#00000080"
        assert normalize_color("rgba(0, 0, 0, 1)") == "#000000"
        assert normalize_color("rgba(0, 0, 0, 50%)") == "#00000080"

    def test_unknown_format_lowercased(self):
        assert normalize_color("  Transparent ") == "transparent"
        assert normalize_color("rgb(a, b, c)") == "rgb(a, b, c)"


def test_rgb_to_hex():
    assert rgb_to_hex({"r": 1, "g": 1, "b": 1}) == "#ffffff"
    assert rgb_to_hex({"r": 1, "g": 0.5, "b": 0}) == "#ff8000"
    assert rgb_to_hex({"r": 1, "g": 0.5, "b": 0, "a": 0.5}) == "#ff800080"
    assert rgb_to_hex({"r": 0, "g": 0, "b": 0, "a": 1}) == "#000000"


def test_hex_to_rgba():
    assert hex_to_rgba("#ff8000") == (255, 128, 0, 255)
    assert hex_to_rgba("#ff800080") == (255, 128, 0, 128)
    assert hex_to_rgba("#fff") is None
    assert hex_to_rgba("red") is None


class TestColorSimilarity:
    def test_identical_after_normalization(self):
        assert color_similarity("#FFF", "#ffffff") == 1.0
        assert color_similarity("rgb(255, 255, 255)", "#FFFFFF") == 1.0

    def test_close_color_above_threshold(self):
        assert color_similarity("#ffffff", "#e8e8e8") == pytest.approx(0.91, abs=0.005)

    def test_distant_color_below_threshold(self):
        assert color_similarity("#ffffff", "#e3e3e3") == 0.0
        assert color_similarity("#ffffff", "#000000") == 0.0

    def test_differing_alpha_never_similar(self):
        assert color_distance_similarity("#ffffff", "#ffffff80") == 0.0
        assert color_similarity("#ffffff", "#ffffff80") == 0.0

    def test_same_alpha_compares_rgb(self):
        assert color_distance_similarity("#ffffff80", "#fefefe80") > 0.99

    def test_unparseable_colors(self):
        assert color_similarity("#ffffff", "not-a-color") == 0.0

    def test_custom_threshold(self):
        assert color_similarity("#ffffff", "#e3e3e3", min_similarity=0.8) == pytest.approx(0.89, abs=0.005)


def test_out_of_range_channels_left_unparsed():
    assert normalize_color("rgb(1e400, 0, 0)") == "rgb(1e400, 0, 0)"
    assert normalize_color("rgba(0, 0, 0, 1e400%)") == "rgba(0, 0, 0, 1e400%)"
    assert normalize_color("rgb(nan, 0, 0)") == "rgb(nan, 0, 0)"
    assert color_similarity("#ffffff", "rgb(1e400, 0, 0)") == 0.0
