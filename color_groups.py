"""
Partition a color pool by lightness, saturation and hue sector.

Every pool color lands in exactly one bucket of each partition. Buckets hold
(Color, weight) pairs in descending weight order, with weight = count / total
pixels.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Optional

import numpy as np
from scipy.stats import entropy

from color_profile import achromatic_mask
from extract_colors import ColorPool
from theme_settings import ThemeSettings

logger = logging.getLogger(__name__)

LIGHTNESS_LABELS = ("Dark", "Mid", "Light")
SATURATION_LABELS = ("Gray", "Muted", "Normal", "Vibrant")
LIGHTNESS_HISTOGRAM_BUCKETS = 10


# =============================================================================
# Data Structures
# =============================================================================

@dataclass(frozen=True)
class ColorStatistics:
    """Distribution statistics derived from the groupings."""
    hue_histogram: tuple  # chromatic mass per sector, sums to 1 (or all 0)
    lightness_histogram: tuple  # 10 buckets of HSL lightness, sums to 1
    saturation_fractions: dict  # saturation label -> mass fraction
    primary_hue: Optional[float]  # sector centers, heaviest first
    secondary_hue: Optional[float]
    tertiary_hue: Optional[float]
    hue_entropy: float  # normalized to [0, 1]
    contrast_range: float  # max - min relative luminance
    lightness_spread: float  # 1 = even Dark/Mid/Light mass
    saturation_spread: float  # occupied saturation buckets / 4


@dataclass(frozen=True)
class Groupings:
    by_lightness: dict  # label -> ((Color, weight), ...)
    by_saturation: dict  # label -> ((Color, weight), ...)
    by_hue: dict  # sector index -> ((Color, weight), ...)
    chromatic_diversity: float
    statistics: ColorStatistics = field(repr=False)
    sector_count: int = 12


# =============================================================================
# Bucket Assignment
# =============================================================================

def lightness_label(lightness: float, settings: ThemeSettings) -> str:
    if lightness < settings.lightness_dark_max:
        return "Dark"
    if lightness >= settings.lightness_light_min:
        return "Light"
    return "Mid"


def saturation_label(saturation: float, settings: ThemeSettings) -> str:
    if saturation < settings.saturation_gray_max:
        return "Gray"
    if saturation < settings.saturation_muted_max:
        return "Muted"
    if saturation < settings.saturation_normal_max:
        return "Normal"
    return "Vibrant"


def hue_sector(hue: float, sector_count: int) -> int:
    size = 360.0 / sector_count
    return int(math.floor(hue / size)) % sector_count


# =============================================================================
# Statistics
# =============================================================================

def _lightness_histogram(lightness: np.ndarray, weights: np.ndarray) -> tuple:
    buckets = np.clip((lightness * LIGHTNESS_HISTOGRAM_BUCKETS).astype(int),
                      0, LIGHTNESS_HISTOGRAM_BUCKETS - 1)
    histogram = np.bincount(buckets, weights=weights, minlength=LIGHTNESS_HISTOGRAM_BUCKETS)
    total = histogram.sum()
    if total > 0:
        histogram = histogram / total
    return tuple(float(v) for v in histogram)


def _top_hues(hue_histogram: np.ndarray, sector_count: int) -> list:
    size = 360.0 / sector_count
    ranked = sorted((i for i in range(sector_count) if hue_histogram[i] > 0),
                    key=lambda i: (-hue_histogram[i], i))
    centers = [(i + 0.5) * size for i in ranked[:3]]
    return centers + [None] * (3 - len(centers))


def _hue_entropy(hue_histogram: np.ndarray) -> float:
    if hue_histogram.sum() <= 0 or len(hue_histogram) < 2:
        return 0.0
    return float(entropy(hue_histogram, base=2) / math.log2(len(hue_histogram)))


def _lightness_spread(masses: dict) -> float:
    total = sum(masses.values())
    if total <= 0:
        return 0.0
    ideal = 1.0 / len(masses)
    deviation = sum(abs(mass / total - ideal) for mass in masses.values())
    return 1.0 - deviation / 2.0


def compute_statistics(pool: ColorPool, groups: dict, hue_histogram: np.ndarray,
                       settings: ThemeSettings) -> ColorStatistics:
    hsl = pool.hsl_array()
    weights = pool.weights
    luminances = [c.luminance for c in pool.colors]

    def mass(buckets):
        return {label: sum(w for _, w in members) for label, members in buckets.items()}

    saturation_mass = mass(groups['saturation'])
    primary, secondary, tertiary = _top_hues(hue_histogram, settings.hue_sector_count)

    return ColorStatistics(
        hue_histogram=tuple(float(v) for v in hue_histogram),
        lightness_histogram=_lightness_histogram(hsl[:, 2], weights),
        saturation_fractions=saturation_mass,
        primary_hue=primary,
        secondary_hue=secondary,
        tertiary_hue=tertiary,
        hue_entropy=_hue_entropy(hue_histogram),
        contrast_range=max(luminances) - min(luminances) if luminances else 0.0,
        lightness_spread=_lightness_spread(mass(groups['lightness'])),
        saturation_spread=sum(1 for members in groups['saturation'].values() if members) / len(SATURATION_LABELS),
    )


# =============================================================================
# Grouping
# =============================================================================

def _freeze(buckets: dict) -> dict:
    return {key: tuple(members) for key, members in buckets.items()}


def group_colors(pool: ColorPool, settings: ThemeSettings) -> Groupings:
    """Partition the pool and measure how widely its hues are spread."""
    sector_count = settings.hue_sector_count
    by_lightness = {label: [] for label in LIGHTNESS_LABELS}
    by_saturation = {label: [] for label in SATURATION_LABELS}
    by_hue = {sector: [] for sector in range(sector_count)}

    chromatic = ~achromatic_mask(pool.hsl_array(), settings.grayscale_threshold)
    sector_mass = np.zeros(sector_count)

    # Pool order is already descending weight, so appends keep buckets sorted
    for (color, count), is_chromatic in zip(pool, chromatic):
        weight = count / pool.total_pixels
        sector = hue_sector(color.hue, sector_count)
        by_lightness[lightness_label(color.lightness, settings)].append((color, weight))
        by_saturation[saturation_label(color.saturation, settings)].append((color, weight))
        by_hue[sector].append((color, weight))
        if is_chromatic:
            sector_mass[sector] += weight

    chromatic_mass = sector_mass.sum()
    if chromatic_mass > 0:
        hue_histogram = sector_mass / chromatic_mass
        occupied = int(np.sum(hue_histogram > settings.diversity_mass_floor))
        diversity = min(1.0, max(0.0, occupied / sector_count))
    else:
        hue_histogram = sector_mass
        diversity = 0.0

    groups = {
        'lightness': _freeze(by_lightness),
        'saturation': _freeze(by_saturation),
        'hue': _freeze(by_hue),
    }
    statistics = compute_statistics(pool, groups, hue_histogram, settings)

    logger.debug(
        f"Grouped {len(pool)} colors: diversity {diversity:.2f}, "
        f"hue entropy {statistics.hue_entropy:.2f}"
    )
    return Groupings(
        by_lightness=groups['lightness'],
        by_saturation=groups['saturation'],
        by_hue=groups['hue'],
        chromatic_diversity=diversity,
        statistics=statistics,
        sector_count=sector_count,
    )
