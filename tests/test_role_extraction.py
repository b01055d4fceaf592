"""Tests for role candidate filtering, scoring and fallback."""

import logging

import pytest

from color_model import WHITE, Color, contrast_ratio
from color_profile import analyze_profile
from extract_colors import ColorPool, build_pool
from role_categories import RESOLUTION_ORDER, Role, ThemeMode
from role_extraction import (
    extract_roles,
    hue_fit,
    passes_window,
    score_candidate,
    select_best,
    triangular_fit,
)
from theme_errors import MissingCategoryError
from theme_settings import (
    CategoryCharacteristics,
    CategoryScoringWeights,
    CategoryTables,
    settings_from_dict,
)

DARK_BG = Color(26, 26, 26)
LIGHT_TEXT = Color(230, 230, 230)


def _extract(pool, settings):
    return extract_roles(pool, analyze_profile(pool, settings), settings)


class TestScoring:

    @pytest.mark.unit
    def test_triangular_fit(self):
        assert triangular_fit(0.5, 0.0, 1.0) == 1.0
        assert triangular_fit(0.0, 0.0, 1.0) == 0.0
        assert triangular_fit(0.25, 0.0, 1.0) == 0.5
        assert triangular_fit(0.4, 0.4, 0.4) == 1.0

    @pytest.mark.unit
    def test_hue_fit(self):
        red = CategoryCharacteristics(hue_center=0.0, hue_tolerance=30.0)
        assert hue_fit(15, red) == 0.5
        assert hue_fit(350, red) == pytest.approx(2 / 3)
        assert hue_fit(90, red) == 0.0
        assert hue_fit(90, CategoryCharacteristics()) == 1.0

    @pytest.mark.unit
    def test_passes_window(self):
        window = CategoryCharacteristics(min_lightness=0.2, max_lightness=0.6, min_saturation=0.5,
                                         hue_center=120.0, hue_tolerance=20.0)
        assert passes_window(Color.from_hsl(120, 0.8, 0.4), window)
        assert not passes_window(Color.from_hsl(150, 0.8, 0.4), window)
        assert not passes_window(Color.from_hsl(120, 0.3, 0.4), window)
        assert not passes_window(Color.from_hsl(120, 0.8, 0.8), window)

    @pytest.mark.unit
    def test_background_contrast_term_is_zero(self):
        weights = CategoryScoringWeights(frequency=0, contrast=1, saturation=0, hue_alignment=0, lightness=0)
        window = CategoryCharacteristics()
        assert score_candidate(WHITE, 1, 1, window, weights, None) == 0
        assert score_candidate(WHITE, 1, 1, window, weights, Color(0, 0, 0)) == pytest.approx(1.0)

    @pytest.mark.unit
    def test_score_is_weighted_sum(self):
        weights = CategoryScoringWeights()
        window = CategoryCharacteristics()
        gray = Color(128, 128, 128)
        expected = (0.25 * 0.5
                    + 0.25 * contrast_ratio(gray, DARK_BG) / 21
                    + 0.20 * 0.0
                    + 0.15 * 1.0
                    + 0.15 * triangular_fit(gray.lightness, 0, 1))
        assert score_candidate(gray, 5, 10, window, weights, DARK_BG) == pytest.approx(expected)

    @pytest.mark.unit
    def test_ties_prefer_count_then_smaller_rgb(self):
        window = CategoryCharacteristics()
        flat = CategoryScoringWeights(frequency=0, contrast=1, saturation=0, hue_alignment=0, lightness=0)
        a, b = Color(155, 155, 155), Color(100, 100, 100)

        assert select_best([(a, 5), (b, 9)], window, flat, None)[0] == b
        assert select_best([(a, 9), (b, 5)], window, flat, None)[0] == a
        assert select_best([(a, 7), (b, 7)], window, flat, None)[0] == b


class TestExtraction:

    @pytest.mark.unit
    def test_dark_background_and_text(self, settings):
        pool = ColorPool.from_counts({DARK_BG: 1000, LIGHT_TEXT: 100})
        assignment = _extract(pool, settings)

        assert assignment.mode == ThemeMode.DARK
        assert list(assignment.colors) == list(RESOLUTION_ORDER)
        assert assignment[Role.BACKGROUND] == DARK_BG
        assert assignment[Role.FOREGROUND] == LIGHT_TEXT
        assert Role.BACKGROUND not in assignment.fallbacks
        assert Role.FOREGROUND not in assignment.fallbacks

    @pytest.mark.unit
    def test_cursor_may_reuse_foreground(self, settings):
        pool = ColorPool.from_counts({DARK_BG: 1000, LIGHT_TEXT: 100})
        assignment = _extract(pool, settings)
        assert assignment[Role.CURSOR] == LIGHT_TEXT
        assert not assignment.is_fallback(Role.CURSOR)
        # bright_white fits the same window but may not reuse
        assert assignment.is_fallback(Role.BRIGHT_WHITE)

    @pytest.mark.unit
    def test_missing_roles_fall_back(self, settings, caplog):
        caplog.set_level(logging.DEBUG, logger="role_extraction")
        pool = ColorPool.from_counts({DARK_BG: 1000, LIGHT_TEXT: 100})
        assignment = _extract(pool, settings)

        assert assignment.is_fallback(Role.NORMAL_RED)
        assert assignment[Role.NORMAL_RED] == settings.fallbacks.color(Role.NORMAL_RED, ThemeMode.DARK)
        assert assignment.diagnostics[Role.NORMAL_RED].survivors == 0
        assert assignment.diagnostics[Role.NORMAL_RED].score is None
        assert "normal_red" in caplog.text and "fallback" in caplog.text

    @pytest.mark.unit
    def test_light_mode_uses_light_table(self, settings):
        pool = ColorPool.from_counts({(245, 245, 245): 1000, (30, 30, 30): 100})
        assignment = _extract(pool, settings)
        assert assignment.mode == ThemeMode.LIGHT
        assert assignment[Role.BACKGROUND] == Color(245, 245, 245)
        assert assignment[Role.FOREGROUND] == Color(30, 30, 30)

    @pytest.mark.unit
    def test_rare_colors_are_not_candidates(self, settings):
        pool = ColorPool.from_counts({DARK_BG: 100000, LIGHT_TEXT: 1})
        assignment = _extract(pool, settings)
        assert assignment.is_fallback(Role.FOREGROUND)
        assert assignment.diagnostics[Role.FOREGROUND].candidates == 0

    @pytest.mark.unit
    def test_candidates_limited_to_top_k(self):
        settings = settings_from_dict({'extraction': {'max_candidates_per_category': 1}})
        pool = ColorPool.from_counts({DARK_BG: 1000, LIGHT_TEXT: 100})
        assignment = _extract(pool, settings)
        assert assignment[Role.BACKGROUND] == DARK_BG
        assert assignment.is_fallback(Role.FOREGROUND)

    @pytest.mark.unit
    def test_colored_background_needs_opt_in(self, settings):
        navy = Color.from_hsl(230, 0.35, 0.15)
        gray = Color(30, 30, 30)
        assert settings.saturation_muted_max <= navy.saturation < 0.4
        pool = ColorPool.from_counts({navy: 1000, gray: 10})

        assert _extract(pool, settings)[Role.BACKGROUND] == gray
        permissive = settings_from_dict({'extraction': {'allow_colored_backgrounds': True}})
        assert _extract(pool, permissive)[Role.BACKGROUND] == navy

    @pytest.mark.unit
    def test_hue_roles_pick_matching_colors(self, settings, hsl_pool):
        pool = hsl_pool({
            (0, 0.0, 0.08): 5000,
            (0, 0.0, 0.88): 800,
            (0, 0.8, 0.5): 200,
            (120, 0.6, 0.45): 200,
            (225, 0.7, 0.5): 200,
        })
        assignment = _extract(pool, settings)
        assert assignment[Role.NORMAL_RED] == Color.from_hsl(0, 0.8, 0.5)
        assert assignment[Role.NORMAL_GREEN] == Color.from_hsl(120, 0.6, 0.45)
        assert assignment[Role.NORMAL_BLUE] == Color.from_hsl(225, 0.7, 0.5)


class TestInvariants:

    @pytest.mark.unit
    def test_assigned_roles_meet_contrast(self, settings, theme_pixels):
        pool = build_pool(theme_pixels, 5)
        profile = analyze_profile(pool, settings)
        assignment = extract_roles(pool, profile, settings)
        table = settings.categories.for_mode(profile.mode)
        background = assignment[Role.BACKGROUND]

        assert len(assignment) == len(RESOLUTION_ORDER)
        assert len(assignment.fallbacks) < len(RESOLUTION_ORDER)
        for role in RESOLUTION_ORDER[1:]:
            if not assignment.is_fallback(role):
                color = assignment[role]
                assert contrast_ratio(color, background) >= table[role].min_contrast
                assert passes_window(color, table[role])
                assert color in pool

    @pytest.mark.unit
    def test_no_reuse_outside_reusable_roles(self, settings, theme_pixels):
        pool = build_pool(theme_pixels, 5)
        assignment = _extract(pool, settings)
        picked = [assignment[role] for role in RESOLUTION_ORDER
                  if not assignment.is_fallback(role) and not settings.categories.dark[role].allow_reuse]
        assert len(picked) == len(set(picked))

    @pytest.mark.unit
    def test_deterministic(self, settings, theme_pixels):
        pool = build_pool(theme_pixels, 5)
        first = _extract(pool, settings)
        second = _extract(build_pool(theme_pixels, 5), settings)
        assert first.to_hex_dict() == second.to_hex_dict()
        assert first.fallbacks == second.fallbacks

    @pytest.mark.unit
    def test_missing_category_is_a_configuration_fault(self, settings):
        broken = settings.model_copy(update={
            'categories': CategoryTables.model_construct(dark={}, light={}),
        })
        pool = ColorPool.from_counts({DARK_BG: 10})
        with pytest.raises(MissingCategoryError):
            _extract(pool, broken)

    @pytest.mark.unit
    def test_hex_dict_uses_role_names(self, settings):
        pool = ColorPool.from_counts({DARK_BG: 1000, LIGHT_TEXT: 100})
        hex_dict = _extract(pool, settings).to_hex_dict()
        assert hex_dict["background"] == "#1a1a1a"
        assert len(hex_dict) == 27
