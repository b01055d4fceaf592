"""Tests for color conversion, contrast and hue math."""

import itertools

import numpy as np
import pytest

from color_model import (
    BLACK,
    WHITE,
    Color,
    circular_mean,
    color_name,
    contrast_ratio,
    hsl_to_rgb,
    hue_distance,
    hue_distance_array,
    parse_hex,
    relative_luminance,
    rgb_to_hsl,
    wcag_level,
)

CHANNEL_SAMPLES = list(range(0, 256, 15)) + [1, 127, 128, 254, 255]


class TestConversion:

    @pytest.mark.unit
    def test_round_trip_within_one_step(self):
        for r, g, b in itertools.product(CHANNEL_SAMPLES, repeat=3):
            back = hsl_to_rgb(*rgb_to_hsl(r, g, b))
            assert max(abs(x - y) for x, y in zip(back, (r, g, b))) <= 1, (r, g, b, back)

    @pytest.mark.unit
    def test_hsl_ranges(self):
        for r, g, b in itertools.product(CHANNEL_SAMPLES, repeat=3):
            h, s, l = rgb_to_hsl(r, g, b)
            assert 0 <= h < 360
            assert 0 <= s <= 1
            assert 0 <= l <= 1

    @pytest.mark.unit
    def test_primaries(self):
        assert rgb_to_hsl(255, 0, 0) == (0.0, 1.0, 0.5)
        assert rgb_to_hsl(0, 255, 0)[0] == pytest.approx(120)
        assert rgb_to_hsl(0, 0, 255)[0] == pytest.approx(240)
        assert hsl_to_rgb(60, 1.0, 0.5) == (255, 255, 0)

    @pytest.mark.unit
    def test_grays_have_no_hue(self):
        assert rgb_to_hsl(128, 128, 128)[:2] == (0.0, 0.0)
        assert hsl_to_rgb(200, 0.0, 0.5) == (128, 128, 128)

    @pytest.mark.unit
    def test_parse_hex(self):
        assert parse_hex("#abc") == (0xaa, 0xbb, 0xcc)
        assert parse_hex("1a2B3c") == (0x1a, 0x2b, 0x3c)
        for bad in ("#12345", "zzz", "#gggggg", ""):
            with pytest.raises(ValueError):
                parse_hex(bad)


class TestContrast:

    @pytest.mark.unit
    def test_luminance_extremes(self):
        assert relative_luminance(0, 0, 0) == 0
        assert relative_luminance(255, 255, 255) == pytest.approx(1.0)

    @pytest.mark.unit
    def test_self_contrast_is_one(self):
        for rgb in [(0, 0, 0), (12, 200, 99), (255, 255, 255)]:
            assert contrast_ratio(Color(*rgb), Color(*rgb)) == 1.0

    @pytest.mark.unit
    def test_black_white_is_21(self):
        assert contrast_ratio(BLACK, WHITE) == pytest.approx(21.0)

    @pytest.mark.unit
    def test_symmetric_and_bounded(self):
        colors = [Color(*rgb) for rgb in itertools.product((0, 90, 180, 255), repeat=3)]
        for a, b in itertools.combinations(colors, 2):
            ratio = contrast_ratio(a, b)
            assert ratio == contrast_ratio(b, a)
            assert 1.0 <= ratio <= 21.0

    @pytest.mark.unit
    @pytest.mark.parametrize("ratio, level", [
        (21, "AAA"), (7, "AAA"), (6.9, "AA"), (4.5, "AA"), (3, "AA-large"), (2.9, "fail"),
    ])
    def test_wcag_level(self, ratio, level):
        assert wcag_level(ratio) == level


class TestHue:

    @pytest.mark.unit
    def test_hue_distance_wraps(self):
        assert hue_distance(350, 10) == 20
        assert hue_distance(10, 350) == 20
        assert hue_distance(0, 180) == 180
        assert hue_distance(90, 90) == 0

    @pytest.mark.unit
    def test_hue_distance_array_matches_scalar(self):
        hues = np.array([0.0, 15.0, 200.0, 359.0])
        expected = [hue_distance(h, 350.0) for h in hues]
        assert hue_distance_array(hues, 350.0).tolist() == pytest.approx(expected)

    @pytest.mark.unit
    def test_circular_mean_across_zero(self):
        mean, resultant = circular_mean(np.array([350.0, 10.0]), np.array([1.0, 1.0]))
        assert hue_distance(mean, 0) < 1e-6
        assert resultant == pytest.approx(np.cos(np.radians(10)))

    @pytest.mark.unit
    def test_circular_mean_balanced(self):
        _, resultant = circular_mean(np.array([0.0, 120.0, 240.0]), np.ones(3))
        assert resultant < 1e-9


class TestColor:

    @pytest.mark.unit
    def test_derived_values(self):
        red = Color.from_hex("#ff0000")
        assert red.hsl == (0.0, 1.0, 0.5)
        assert red.hex == "#ff0000"
        assert str(red) == "#ff0000"
        assert red.rgb == (255, 0, 0)

    @pytest.mark.unit
    def test_value_semantics(self):
        assert Color(1, 2, 3) == Color(1, 2, 3)
        assert len({Color(1, 2, 3), Color(1, 2, 3)}) == 1
        assert Color(0, 0, 1) < Color(0, 1, 0) < Color(1, 0, 0)

    @pytest.mark.unit
    def test_rejects_out_of_range(self):
        with pytest.raises(ValueError):
            Color(256, 0, 0)
        with pytest.raises(ValueError):
            Color(0, -1, 0)

    @pytest.mark.unit
    def test_names(self):
        assert color_name(BLACK) == "Near-Black"
        assert color_name(WHITE) == "Near-White"
        assert color_name(Color(128, 128, 128)) == "Gray"
        assert color_name(Color(255, 0, 0)) == "Vivid Red"
        assert color_name(Color(30, 60, 120)) == "Dark Blue"
