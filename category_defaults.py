"""
Default acceptance windows and fallback colors for every UI role.

Window columns: (min_lightness, max_lightness, min_saturation,
max_saturation, min_contrast, hue_center, hue_tolerance). Hue columns are
None for roles without a fixed hue identity.
"""

from role_categories import Role

# Roles allowed to take a color already assigned to an earlier role
REUSABLE_ROLES = frozenset({Role.CURSOR})

DARK_WINDOWS = {
    # Core UI elements
    Role.BACKGROUND:       (0.00, 0.25, 0.00, 0.40, 0.0, None, None),
    Role.FOREGROUND:       (0.70, 1.00, 0.00, 0.30, 3.0, None, None),
    Role.DIM_FOREGROUND:   (0.35, 0.65, 0.00, 0.50, 2.0, None, None),
    Role.CURSOR:           (0.60, 1.00, 0.00, 0.70, 4.5, None, None),

    # Terminal normal colors
    Role.NORMAL_BLACK:     (0.10, 0.30, 0.00, 0.20, 1.2, None, None),
    Role.NORMAL_RED:       (0.25, 0.65, 0.30, 1.00, 1.5, 0.0, 35.0),
    Role.NORMAL_GREEN:     (0.25, 0.65, 0.30, 1.00, 1.5, 120.0, 50.0),
    Role.NORMAL_YELLOW:    (0.35, 0.75, 0.40, 1.00, 2.0, 60.0, 30.0),
    Role.NORMAL_BLUE:      (0.25, 0.65, 0.30, 1.00, 1.5, 240.0, 40.0),
    Role.NORMAL_MAGENTA:   (0.25, 0.65, 0.30, 1.00, 1.5, 300.0, 40.0),
    Role.NORMAL_CYAN:      (0.25, 0.65, 0.30, 1.00, 1.5, 180.0, 40.0),
    Role.NORMAL_WHITE:     (0.50, 0.85, 0.00, 0.20, 3.0, None, None),

    # Terminal bright colors
    Role.BRIGHT_BLACK:     (0.20, 0.40, 0.00, 0.20, 1.5, None, None),
    Role.BRIGHT_RED:       (0.40, 0.80, 0.50, 1.00, 2.5, 0.0, 35.0),
    Role.BRIGHT_GREEN:     (0.40, 0.80, 0.40, 1.00, 2.5, 120.0, 50.0),
    Role.BRIGHT_YELLOW:    (0.50, 0.90, 0.50, 1.00, 3.0, 60.0, 30.0),
    Role.BRIGHT_BLUE:      (0.40, 0.80, 0.50, 1.00, 2.5, 240.0, 40.0),
    Role.BRIGHT_MAGENTA:   (0.40, 0.80, 0.40, 1.00, 2.5, 300.0, 40.0),
    Role.BRIGHT_CYAN:      (0.40, 0.80, 0.40, 1.00, 2.5, 180.0, 40.0),
    Role.BRIGHT_WHITE:     (0.70, 1.00, 0.00, 0.20, 3.5, None, None),

    # Accents
    Role.ACCENT_PRIMARY:   (0.30, 0.80, 0.40, 1.00, 2.5, None, None),
    Role.ACCENT_SECONDARY: (0.25, 0.75, 0.30, 0.95, 2.0, None, None),
    Role.ACCENT_TERTIARY:  (0.20, 0.70, 0.25, 0.90, 1.5, None, None),

    # Semantic colors
    Role.ERROR:            (0.30, 0.70, 0.50, 1.00, 2.5, 0.0, 30.0),
    Role.WARNING:          (0.35, 0.75, 0.50, 1.00, 2.5, 45.0, 25.0),
    Role.SUCCESS:          (0.25, 0.65, 0.30, 1.00, 2.5, 120.0, 40.0),
    Role.INFO:             (0.25, 0.65, 0.30, 1.00, 2.5, 210.0, 40.0),
}

LIGHT_WINDOWS = {
    Role.BACKGROUND:       (0.85, 1.00, 0.00, 0.25, 0.0, None, None),
    Role.FOREGROUND:       (0.00, 0.30, 0.00, 0.20, 3.0, None, None),
    Role.DIM_FOREGROUND:   (0.25, 0.55, 0.00, 0.40, 2.0, None, None),
    Role.CURSOR:           (0.00, 0.40, 0.00, 0.70, 4.5, None, None),

    Role.NORMAL_BLACK:     (0.00, 0.20, 0.00, 0.20, 4.5, None, None),
    Role.NORMAL_RED:       (0.20, 0.50, 0.40, 1.00, 3.0, 0.0, 35.0),
    Role.NORMAL_GREEN:     (0.20, 0.50, 0.30, 1.00, 3.0, 120.0, 50.0),
    Role.NORMAL_YELLOW:    (0.25, 0.55, 0.50, 1.00, 3.0, 60.0, 30.0),
    Role.NORMAL_BLUE:      (0.20, 0.50, 0.40, 1.00, 3.0, 240.0, 40.0),
    Role.NORMAL_MAGENTA:   (0.20, 0.50, 0.30, 1.00, 3.0, 300.0, 40.0),
    Role.NORMAL_CYAN:      (0.20, 0.50, 0.30, 1.00, 3.0, 180.0, 40.0),
    Role.NORMAL_WHITE:     (0.35, 0.65, 0.00, 0.20, 3.0, None, None),

    Role.BRIGHT_BLACK:     (0.10, 0.30, 0.00, 0.20, 3.5, None, None),
    Role.BRIGHT_RED:       (0.10, 0.40, 0.60, 1.00, 5.0, 0.0, 35.0),
    Role.BRIGHT_GREEN:     (0.10, 0.40, 0.50, 1.00, 5.0, 120.0, 50.0),
    Role.BRIGHT_YELLOW:    (0.15, 0.45, 0.60, 1.00, 5.0, 60.0, 30.0),
    Role.BRIGHT_BLUE:      (0.10, 0.40, 0.60, 1.00, 5.0, 240.0, 40.0),
    Role.BRIGHT_MAGENTA:   (0.10, 0.40, 0.50, 1.00, 5.0, 300.0, 40.0),
    Role.BRIGHT_CYAN:      (0.10, 0.40, 0.50, 1.00, 5.0, 180.0, 40.0),
    Role.BRIGHT_WHITE:     (0.15, 0.45, 0.00, 0.20, 5.0, None, None),

    Role.ACCENT_PRIMARY:   (0.25, 0.65, 0.40, 1.00, 2.5, None, None),
    Role.ACCENT_SECONDARY: (0.30, 0.70, 0.30, 0.95, 2.0, None, None),
    Role.ACCENT_TERTIARY:  (0.35, 0.75, 0.25, 0.90, 1.5, None, None),

    Role.ERROR:            (0.25, 0.55, 0.50, 1.00, 3.0, 0.0, 30.0),
    Role.WARNING:          (0.30, 0.60, 0.50, 1.00, 3.0, 45.0, 25.0),
    Role.SUCCESS:          (0.20, 0.50, 0.30, 1.00, 3.0, 120.0, 40.0),
    Role.INFO:             (0.20, 0.50, 0.30, 1.00, 3.0, 210.0, 40.0),
}

DARK_FALLBACKS = {
    Role.BACKGROUND: "#1a1a1a",
    Role.FOREGROUND: "#e0e0e0",
    Role.DIM_FOREGROUND: "#8a8a8a",
    Role.CURSOR: "#f0f0f0",
    Role.NORMAL_BLACK: "#2e2e2e",
    Role.NORMAL_RED: "#cc4444",
    Role.NORMAL_GREEN: "#55aa55",
    Role.NORMAL_YELLOW: "#ccaa33",
    Role.NORMAL_BLUE: "#4477cc",
    Role.NORMAL_MAGENTA: "#aa55aa",
    Role.NORMAL_CYAN: "#44aaaa",
    Role.NORMAL_WHITE: "#c8c8c8",
    Role.BRIGHT_BLACK: "#555555",
    Role.BRIGHT_RED: "#ff6666",
    Role.BRIGHT_GREEN: "#77dd77",
    Role.BRIGHT_YELLOW: "#ffdd55",
    Role.BRIGHT_BLUE: "#6699ff",
    Role.BRIGHT_MAGENTA: "#dd77dd",
    Role.BRIGHT_CYAN: "#66dddd",
    Role.BRIGHT_WHITE: "#f0f0f0",
    Role.ACCENT_PRIMARY: "#5c9ded",
    Role.ACCENT_SECONDARY: "#b48ead",
    Role.ACCENT_TERTIARY: "#88c0d0",
    Role.ERROR: "#e06c75",
    Role.WARNING: "#e5c07b",
    Role.SUCCESS: "#98c379",
    Role.INFO: "#61afef",
}

LIGHT_FALLBACKS = {
    Role.BACKGROUND: "#f0f0f0",
    Role.FOREGROUND: "#202020",
    Role.DIM_FOREGROUND: "#5a5a5a",
    Role.CURSOR: "#202020",
    Role.NORMAL_BLACK: "#1a1a1a",
    Role.NORMAL_RED: "#b22222",
    Role.NORMAL_GREEN: "#2e7d32",
    Role.NORMAL_YELLOW: "#8d6e00",
    Role.NORMAL_BLUE: "#1e4fa3",
    Role.NORMAL_MAGENTA: "#8e24aa",
    Role.NORMAL_CYAN: "#00796b",
    Role.NORMAL_WHITE: "#6e6e6e",
    Role.BRIGHT_BLACK: "#3c3c3c",
    Role.BRIGHT_RED: "#8b0000",
    Role.BRIGHT_GREEN: "#1b5e20",
    Role.BRIGHT_YELLOW: "#6b5300",
    Role.BRIGHT_BLUE: "#0d2f6e",
    Role.BRIGHT_MAGENTA: "#6a1b9a",
    Role.BRIGHT_CYAN: "#004d40",
    Role.BRIGHT_WHITE: "#4a4a4a",
    Role.ACCENT_PRIMARY: "#1565c0",
    Role.ACCENT_SECONDARY: "#6a1b9a",
    Role.ACCENT_TERTIARY: "#00897b",
    Role.ERROR: "#c62828",
    Role.WARNING: "#b26a00",
    Role.SUCCESS: "#2e7d32",
    Role.INFO: "#1565c0",
}


def window_dict(window: tuple, reusable: bool = False) -> dict:
    """Expand a window tuple into CategoryCharacteristics fields."""
    min_l, max_l, min_s, max_s, min_contrast, hue_center, hue_tolerance = window
    return {
        'min_lightness': min_l,
        'max_lightness': max_l,
        'min_saturation': min_s,
        'max_saturation': max_s,
        'min_contrast': min_contrast,
        'hue_center': hue_center,
        'hue_tolerance': hue_tolerance,
        'allow_reuse': reusable,
    }


def default_category_tables() -> dict:
    return {
        mode: {role.value: window_dict(window, role in REUSABLE_ROLES) for role, window in windows.items()}
        for mode, windows in (('dark', DARK_WINDOWS), ('light', LIGHT_WINDOWS))
    }


def default_fallback_tables() -> dict:
    return {
        'dark': {role.value: hex_value for role, hex_value in DARK_FALLBACKS.items()},
        'light': {role.value: hex_value for role, hex_value in LIGHT_FALLBACKS.items()},
    }
