"""
Image-level color profile: averages, chromatic character and theme mode.

An image is grayscale when nearly all of its pixels are achromatic,
monochromatic when its chromatic pixels crowd around one 10-degree hue bin,
and full-color otherwise.
"""

import logging
from dataclasses import dataclass, field

import numpy as np

from color_model import circular_mean, hue_distance, hue_distance_array
from extract_colors import ColorPool
from role_categories import ThemeMode
from theme_settings import ThemeSettings

logger = logging.getLogger(__name__)

# Lightness beyond these limits carries no usable hue
ACHROMATIC_LIGHTNESS_MIN = 0.02
ACHROMATIC_LIGHTNESS_MAX = 0.98

HUE_BIN_WIDTH = 10.0
RESULTANT_EPSILON = 1e-9


@dataclass(frozen=True)
class ImageProfile:
    """Read-only summary of an image's color character."""
    mode: ThemeMode
    dominant_hue: float  # degrees, 0 for grayscale images
    hue_variance: float  # weighted RMS hue distance from dominant_hue, degrees
    average_luminance: float  # count-weighted mean HSL lightness
    average_saturation: float
    is_grayscale: bool
    is_monochromatic: bool
    chromatic_fraction: float
    pool: ColorPool = field(repr=False, compare=False)

    @property
    def classification(self) -> str:
        if self.is_grayscale:
            return "grayscale"
        if self.is_monochromatic:
            return "monochromatic"
        return "full-color"


def achromatic_mask(hsl: np.ndarray, threshold: float) -> np.ndarray:
    """True where a color has negligible hue information."""
    saturation = hsl[:, 1]
    lightness = hsl[:, 2]
    return ((saturation < threshold)
            | (lightness < ACHROMATIC_LIGHTNESS_MIN)
            | (lightness > ACHROMATIC_LIGHTNESS_MAX))


def hue_bins(hues: np.ndarray) -> np.ndarray:
    """Snap hues to the nearest 10-degree bin (half up), wrapping 360 to 0."""
    return (np.floor(hues / HUE_BIN_WIDTH + 0.5) * HUE_BIN_WIDTH) % 360.0


def dominant_hue_bin(hues: np.ndarray, weights: np.ndarray) -> tuple:
    """
    Heaviest 10-degree bin and the per-bin masses.

    Returns:
        (bin_angle, {bin_angle: mass}); ties go to the smallest angle
    """
    masses = {}
    for angle, weight in zip(hue_bins(hues), weights):
        masses[float(angle)] = masses.get(float(angle), 0.0) + float(weight)
    best = min(masses, key=lambda angle: (-masses[angle], angle))
    return best, masses


def _monochromatic(masses: dict, dominant_bin: float, chromatic_mass: float,
                   settings: ThemeSettings) -> bool:
    near = sum(mass for angle, mass in masses.items()
               if hue_distance(angle, dominant_bin) <= settings.monochromatic_tolerance)
    return near / chromatic_mass >= settings.monochromatic_weight_threshold


def analyze_profile(pool: ColorPool, settings: ThemeSettings) -> ImageProfile:
    """Classify the pool's chromatic character and theme mode."""
    hsl = pool.hsl_array()
    weights = pool.weights

    average_luminance = float(np.sum(weights * hsl[:, 2]))
    average_saturation = float(np.sum(weights * hsl[:, 1]))
    mode = ThemeMode.DARK if average_luminance < settings.theme_mode_threshold else ThemeMode.LIGHT

    achromatic = achromatic_mask(hsl, settings.grayscale_threshold)
    achromatic_fraction = float(weights[achromatic].sum())
    chromatic_fraction = max(0.0, 1.0 - achromatic_fraction)

    is_grayscale = achromatic_fraction >= settings.grayscale_image_threshold
    is_monochromatic = False
    dominant_hue = 0.0
    hue_variance = 0.0

    chromatic_hues = hsl[~achromatic, 0]
    chromatic_weights = weights[~achromatic]
    chromatic_mass = float(chromatic_weights.sum())

    if not is_grayscale and chromatic_mass > 0:
        dominant_bin, masses = dominant_hue_bin(chromatic_hues, chromatic_weights)
        is_monochromatic = _monochromatic(masses, dominant_bin, chromatic_mass, settings)

        mean, resultant = circular_mean(chromatic_hues, chromatic_weights)
        dominant_hue = mean if resultant > RESULTANT_EPSILON else dominant_bin

        distances = hue_distance_array(chromatic_hues, dominant_hue)
        hue_variance = float(np.sqrt(np.sum(chromatic_weights * distances ** 2) / chromatic_mass))

    profile = ImageProfile(
        mode=mode,
        dominant_hue=dominant_hue,
        hue_variance=hue_variance,
        average_luminance=average_luminance,
        average_saturation=average_saturation,
        is_grayscale=is_grayscale,
        is_monochromatic=is_monochromatic,
        chromatic_fraction=chromatic_fraction,
        pool=pool,
    )
    logger.debug(
        f"Profile: {profile.classification}, {mode.value} mode, "
        f"hue {dominant_hue:.0f}° ±{hue_variance:.0f}°, luminance {average_luminance:.3f}"
    )
    return profile
