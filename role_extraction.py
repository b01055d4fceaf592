"""
Assign pool colors to UI roles.

Roles are resolved one at a time in RESOLUTION_ORDER. For each role the most
frequent pool colors are filtered through the role's acceptance window for
the active theme mode, scored, and the best survivor wins. A role with no
survivor takes its configured fallback color; that is recorded, not raised.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Optional

from color_model import Color, contrast_ratio, hue_distance
from color_profile import ImageProfile
from extract_colors import ColorPool
from role_categories import RESOLUTION_ORDER, Role, ThemeMode
from theme_errors import MissingCategoryError
from theme_settings import CategoryCharacteristics, CategoryScoringWeights, ThemeSettings

logger = logging.getLogger(__name__)

MAX_CONTRAST = 21.0


# =============================================================================
# Data Structures
# =============================================================================

@dataclass(frozen=True)
class RoleDiagnostics:
    candidates: int  # colors considered after frequency and reuse exclusion
    survivors: int  # colors that passed every hard filter
    score: Optional[float]  # winning score, None when the fallback was used


@dataclass(frozen=True)
class RoleAssignment:
    """Role -> Color for one extraction run, in resolution order."""
    mode: ThemeMode
    colors: MappingProxyType
    fallbacks: frozenset
    diagnostics: MappingProxyType = field(repr=False)

    def __getitem__(self, role: Role) -> Color:
        return self.colors[role]

    def __len__(self) -> int:
        return len(self.colors)

    def is_fallback(self, role: Role) -> bool:
        return role in self.fallbacks

    def to_hex_dict(self) -> dict:
        return {role.value: color.hex for role, color in self.colors.items()}


# =============================================================================
# Filtering and Scoring
# =============================================================================

def triangular_fit(value: float, low: float, high: float) -> float:
    """1 at the window midpoint falling linearly to 0 at the edges."""
    half_width = (high - low) / 2.0
    if half_width <= 0:
        return 1.0
    midpoint = (low + high) / 2.0
    return max(0.0, 1.0 - abs(value - midpoint) / half_width)


def hue_fit(hue: float, characteristics: CategoryCharacteristics) -> float:
    if not characteristics.has_hue:
        return 1.0
    distance = hue_distance(hue, characteristics.hue_center)
    return max(0.0, 1.0 - distance / characteristics.hue_tolerance)


def passes_window(color: Color, characteristics: CategoryCharacteristics) -> bool:
    """Lightness, saturation and hue checks; contrast is checked separately."""
    if not characteristics.min_lightness <= color.lightness <= characteristics.max_lightness:
        return False
    if not characteristics.min_saturation <= color.saturation <= characteristics.max_saturation:
        return False
    if characteristics.has_hue:
        if hue_distance(color.hue, characteristics.hue_center) > characteristics.hue_tolerance:
            return False
    return True


def score_candidate(color: Color, count: int, max_count: int,
                    characteristics: CategoryCharacteristics,
                    weights: CategoryScoringWeights,
                    background: Optional[Color]) -> float:
    freq_norm = count / max_count if max_count > 0 else 0.0
    if background is None:
        contrast_norm = 0.0
    else:
        contrast_norm = min(1.0, contrast_ratio(color, background) / MAX_CONTRAST)
    sat_fit = triangular_fit(color.saturation, characteristics.min_saturation, characteristics.max_saturation)
    light_fit = triangular_fit(color.lightness, characteristics.min_lightness, characteristics.max_lightness)

    return (weights.frequency * freq_norm
            + weights.contrast * contrast_norm
            + weights.saturation * sat_fit
            + weights.hue_alignment * hue_fit(color.hue, characteristics)
            + weights.lightness * light_fit)


# =============================================================================
# Extraction
# =============================================================================

def _check_tables(settings: ThemeSettings, mode: ThemeMode):
    table = settings.categories.for_mode(mode)
    for role in RESOLUTION_ORDER:
        if role not in table:
            raise MissingCategoryError(role.value, mode.value, "categories")
        settings.fallbacks.color(role, mode)


def _candidates(pool: ColorPool, settings: ThemeSettings, used: set, allow_reuse: bool) -> list:
    extraction = settings.extraction
    min_count = extraction.minimum_color_frequency * pool.total_pixels
    return [
        (color, count)
        for color, count in pool.dominant(extraction.max_candidates_per_category)
        if count >= min_count and (allow_reuse or color not in used)
    ]


def _survivors(candidates: list, role: Role, characteristics: CategoryCharacteristics,
               background: Optional[Color], settings: ThemeSettings) -> list:
    survivors = []
    for color, count in candidates:
        if not passes_window(color, characteristics):
            continue
        if role == Role.BACKGROUND:
            if (not settings.extraction.allow_colored_backgrounds
                    and color.saturation >= settings.saturation_muted_max):
                continue
        elif contrast_ratio(color, background) < characteristics.min_contrast:
            continue
        survivors.append((color, count))
    return survivors


def select_best(survivors: list, characteristics: CategoryCharacteristics,
                weights: CategoryScoringWeights, background: Optional[Color]) -> tuple:
    """
    Highest-scoring survivor.

    Ties go to the higher count, then to the smaller RGB triplet.

    Returns:
        (color, score)
    """
    max_count = max(count for _, count in survivors)
    scored = [
        (score_candidate(color, count, max_count, characteristics, weights, background), count, color)
        for color, count in survivors
    ]
    score, _, color = min(scored, key=lambda entry: (-entry[0], -entry[1], entry[2].rgb))
    return color, score


def extract_roles(pool: ColorPool, profile: ImageProfile, settings: ThemeSettings) -> RoleAssignment:
    """Resolve every role for the profile's theme mode."""
    mode = profile.mode
    _check_tables(settings, mode)
    table = settings.categories.for_mode(mode)
    weights = settings.category_scoring

    colors = {}
    diagnostics = {}
    fallbacks = set()
    used = set()
    background = None

    for role in RESOLUTION_ORDER:
        characteristics = table[role]
        candidates = _candidates(pool, settings, used, characteristics.allow_reuse)
        survivors = _survivors(candidates, role, characteristics, background, settings)

        if survivors:
            color, score = select_best(survivors, characteristics, weights, background)
            logger.debug(f"{role.value}: {color.hex} (score {score:.3f}, {len(survivors)}/{len(candidates)} survived)")
        else:
            color, score = settings.fallbacks.color(role, mode), None
            fallbacks.add(role)
            logger.debug(f"{role.value}: no candidate survived of {len(candidates)}, using fallback {color.hex}")

        colors[role] = color
        diagnostics[role] = RoleDiagnostics(len(candidates), len(survivors), score)
        used.add(color)
        if role == Role.BACKGROUND:
            background = color

    logger.debug(f"Assigned {len(colors)} roles in {mode.value} mode, {len(fallbacks)} from fallbacks")
    return RoleAssignment(
        mode=mode,
        colors=MappingProxyType(colors),
        fallbacks=frozenset(fallbacks),
        diagnostics=MappingProxyType(diagnostics),
    )
