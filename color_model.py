#!/usr/bin/env python3
"""
Color model: RGB <-> HSL conversion, WCAG luminance and contrast, hue math.

`Color` is the immutable value passed through the whole pipeline; its HSL
and luminance are computed once on construction.
"""

import math
from dataclasses import dataclass, field

import numpy as np


# =============================================================================
# Color Conversion
# =============================================================================

def rgb_to_hsl(r: int, g: int, b: int) -> tuple:
    """Convert 8-bit RGB to (hue 0-360, saturation 0-1, lightness 0-1)."""
    rf, gf, bf = r / 255.0, g / 255.0, b / 255.0
    c_max = max(rf, gf, bf)
    c_min = min(rf, gf, bf)
    delta = c_max - c_min

    lightness = (c_max + c_min) / 2.0
    if delta == 0:
        return 0.0, 0.0, lightness

    if lightness < 0.5:
        saturation = delta / (c_max + c_min)
    else:
        saturation = delta / (2.0 - c_max - c_min)

    if c_max == rf:
        hue = (gf - bf) / delta
        if gf < bf:
            hue += 6
    elif c_max == gf:
        hue = (bf - rf) / delta + 2
    else:
        hue = (rf - gf) / delta + 4

    hue = (hue * 60.0) % 360.0
    return hue, min(1.0, max(0.0, saturation)), lightness


def _hue_to_channel(p: float, q: float, t: float) -> float:
    t = t % 1.0
    if t < 1 / 6:
        return p + (q - p) * 6 * t
    if t < 1 / 2:
        return q
    if t < 2 / 3:
        return p + (q - p) * (2 / 3 - t) * 6
    return p


def hsl_to_rgb(h: float, s: float, l: float) -> tuple:
    """Convert HSL back to an 8-bit RGB tuple (round half up)."""
    h = h % 360.0
    s = min(1.0, max(0.0, s))
    l = min(1.0, max(0.0, l))

    if s == 0:
        gray = int(l * 255 + 0.5)
        return gray, gray, gray

    q = l * (1 + s) if l < 0.5 else l + s - l * s
    p = 2 * l - q
    hk = h / 360.0

    channels = (
        _hue_to_channel(p, q, hk + 1 / 3),
        _hue_to_channel(p, q, hk),
        _hue_to_channel(p, q, hk - 1 / 3),
    )
    return tuple(min(255, max(0, int(c * 255 + 0.5))) for c in channels)


def parse_hex(value: str) -> tuple:
    """Parse '#rgb' or '#rrggbb' (leading '#' optional) into an RGB tuple."""
    text = value.strip().lstrip('#')
    if len(text) == 3:
        text = ''.join(ch * 2 for ch in text)
    if len(text) != 6:
        raise ValueError(f"Invalid hex color: {value!r}")
    try:
        return int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16)
    except ValueError:
        raise ValueError(f"Invalid hex color: {value!r}") from None


# =============================================================================
# Luminance and Contrast
# =============================================================================

def _linear_channel(v: float) -> float:
    return v / 12.92 if v <= 0.03928 else ((v + 0.055) / 1.055) ** 2.4


def relative_luminance(r: int, g: int, b: int) -> float:
    """WCAG 2.1 relative luminance of an 8-bit RGB triple."""
    return (0.2126 * _linear_channel(r / 255.0)
            + 0.7152 * _linear_channel(g / 255.0)
            + 0.0722 * _linear_channel(b / 255.0))


def contrast_ratio(a: "Color", b: "Color") -> float:
    """WCAG contrast ratio between two colors, in [1, 21]."""
    lighter = max(a.luminance, b.luminance)
    darker = min(a.luminance, b.luminance)
    return (lighter + 0.05) / (darker + 0.05)


def wcag_level(ratio: float) -> str:
    if ratio >= 7:
        return "AAA"
    elif ratio >= 4.5:
        return "AA"
    elif ratio >= 3:
        return "AA-large"
    return "fail"


# =============================================================================
# Hue Utilities
# =============================================================================

def hue_distance(hue1: float, hue2: float) -> float:
    """Minimum angular distance between two hues (0-180)."""
    diff = abs(hue1 - hue2) % 360.0
    return min(diff, 360.0 - diff)


def hue_distance_array(hues: np.ndarray, center: float) -> np.ndarray:
    diff = np.abs(hues - center) % 360.0
    return np.minimum(diff, 360.0 - diff)


# =============================================================================
# Color Value
# =============================================================================

@dataclass(frozen=True, order=True)
class Color:
    """An 8-bit RGB color with its derived HSL and luminance.

    Equality, hashing and ordering use only the RGB triplet, so ordering is
    the lexicographic RGB order used for deterministic tie-breaking.
    """
    r: int
    g: int
    b: int
    hue: float = field(init=False, compare=False, repr=False)
    saturation: float = field(init=False, compare=False, repr=False)
    lightness: float = field(init=False, compare=False, repr=False)
    luminance: float = field(init=False, compare=False, repr=False)

    def __post_init__(self):
        for channel in (self.r, self.g, self.b):
            if not 0 <= channel <= 255:
                raise ValueError(f"RGB channel out of range: {(self.r, self.g, self.b)}")
        h, s, l = rgb_to_hsl(self.r, self.g, self.b)
        object.__setattr__(self, 'hue', h)
        object.__setattr__(self, 'saturation', s)
        object.__setattr__(self, 'lightness', l)
        object.__setattr__(self, 'luminance', relative_luminance(self.r, self.g, self.b))

    @classmethod
    def from_hex(cls, value: str) -> "Color":
        return cls(*parse_hex(value))

    @classmethod
    def from_hsl(cls, h: float, s: float, l: float) -> "Color":
        return cls(*hsl_to_rgb(h, s, l))

    @property
    def rgb(self) -> tuple:
        return (self.r, self.g, self.b)

    @property
    def hsl(self) -> tuple:
        return (self.hue, self.saturation, self.lightness)

    @property
    def hex(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"

    def __str__(self) -> str:
        return self.hex


BLACK = Color(0, 0, 0)
WHITE = Color(255, 255, 255)


def color_name(color: Color) -> str:
    """Generate a descriptive name from HSL coordinates."""
    h, s, l = color.hsl

    # Neutral colors
    if s < 0.08 or l < 0.03 or l > 0.97:
        if l < 0.12:
            return "Near-Black"
        elif l < 0.35:
            return "Dark Gray"
        elif l < 0.65:
            return "Gray"
        elif l < 0.88:
            return "Light Gray"
        else:
            return "Near-White"

    if h < 15 or h >= 345:
        hue_name = "Red"
    elif h < 45:
        hue_name = "Orange"
    elif h < 70:
        hue_name = "Yellow"
    elif h < 160:
        hue_name = "Green"
    elif h < 200:
        hue_name = "Cyan"
    elif h < 260:
        hue_name = "Blue"
    elif h < 290:
        hue_name = "Purple"
    else:
        hue_name = "Magenta"

    if l < 0.2:
        lightness_mod = "Deep "
    elif l < 0.4:
        lightness_mod = "Dark "
    elif l < 0.6:
        lightness_mod = ""
    elif l < 0.8:
        lightness_mod = "Light "
    else:
        lightness_mod = "Pale "

    if s < 0.2:
        saturation_mod = "Grayish "
    elif s < 0.4:
        saturation_mod = "Muted "
    elif s > 0.8:
        saturation_mod = "Vivid "
    else:
        saturation_mod = ""

    return f"{lightness_mod}{saturation_mod}{hue_name}".strip()


def circular_mean(hues: np.ndarray, weights: np.ndarray) -> tuple:
    """Weighted circular mean of hues in degrees.

    Returns (mean_hue, resultant_length); the resultant length is 0 when the
    hues cancel out and the mean is undefined.
    """
    radians = np.radians(hues)
    total = weights.sum()
    if total <= 0:
        return 0.0, 0.0
    sin_sum = float(np.sum(weights * np.sin(radians)) / total)
    cos_sum = float(np.sum(weights * np.cos(radians)) / total)
    resultant = math.hypot(sin_sum, cos_sum)
    mean = math.degrees(math.atan2(sin_sum, cos_sum)) % 360
    if mean >= 360.0:
        mean = 0.0
    return mean, resultant
