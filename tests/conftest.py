"""Pytest fixtures for tests."""

import numpy as np
import pytest
from PIL import Image

from color_model import Color
from extract_colors import ColorPool
from theme_settings import default_settings

# HSL of the stripes painted over the dark background of `theme_pixels`
ACCENT_STRIPES = [
    (0, 0.75, 0.50), (120, 0.60, 0.45), (55, 0.80, 0.55), (225, 0.70, 0.50),
    (300, 0.55, 0.50), (185, 0.65, 0.45), (0, 0.85, 0.65), (130, 0.70, 0.60),
    (35, 0.90, 0.55), (210, 0.75, 0.62),
]


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keep the user's real settings and environment out of every test."""
    import os

    for name in list(os.environ):
        if name.startswith("THEME_PROFILE_"):
            monkeypatch.delenv(name)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))


@pytest.fixture
def settings():
    return default_settings()


@pytest.fixture
def hsl_pool():
    """Build a pool from {(h, s, l): count}."""

    def _make(entries: dict) -> ColorPool:
        return ColorPool.from_counts([(Color.from_hsl(*hsl), count) for hsl, count in entries.items()])

    return _make


@pytest.fixture
def theme_pixels():
    """60x80 dark image: background, light text rows, gray rows, colored stripes."""
    pixels = np.zeros((60, 80, 3), dtype=np.uint8)
    pixels[:, :] = (22, 24, 30)
    pixels[0:6, :] = (226, 226, 222)
    pixels[6:9, :] = (128, 128, 132)
    pixels[9:11, :] = (70, 72, 78)
    for i, hsl in enumerate(ACCENT_STRIPES):
        row = 12 + i * 2
        pixels[row, :40 + i * 4] = Color.from_hsl(*hsl).rgb
    return pixels


@pytest.fixture
def theme_image(tmp_path, theme_pixels):
    path = tmp_path / "theme.png"
    Image.fromarray(theme_pixels).save(path)
    return path
