"""
UI roles and the order they are resolved in.

The role set is closed: settings tables are keyed by `Role`, so a missing
role is caught when settings load rather than when a lookup fails.
"""

from enum import Enum


class ThemeMode(str, Enum):
    DARK = "Dark"
    LIGHT = "Light"

    @property
    def key(self) -> str:
        """Settings table key for this mode ('dark' / 'light')."""
        return self.value.lower()


class Role(str, Enum):
    # Core UI elements
    BACKGROUND = "background"
    FOREGROUND = "foreground"
    DIM_FOREGROUND = "dim_foreground"
    CURSOR = "cursor"

    # Terminal normal colors (ANSI 0-7)
    NORMAL_BLACK = "normal_black"
    NORMAL_RED = "normal_red"
    NORMAL_GREEN = "normal_green"
    NORMAL_YELLOW = "normal_yellow"
    NORMAL_BLUE = "normal_blue"
    NORMAL_MAGENTA = "normal_magenta"
    NORMAL_CYAN = "normal_cyan"
    NORMAL_WHITE = "normal_white"

    # Terminal bright colors (ANSI 8-15)
    BRIGHT_BLACK = "bright_black"
    BRIGHT_RED = "bright_red"
    BRIGHT_GREEN = "bright_green"
    BRIGHT_YELLOW = "bright_yellow"
    BRIGHT_BLUE = "bright_blue"
    BRIGHT_MAGENTA = "bright_magenta"
    BRIGHT_CYAN = "bright_cyan"
    BRIGHT_WHITE = "bright_white"

    # Accents
    ACCENT_PRIMARY = "accent_primary"
    ACCENT_SECONDARY = "accent_secondary"
    ACCENT_TERTIARY = "accent_tertiary"

    # Semantic colors
    ERROR = "error"
    WARNING = "warning"
    SUCCESS = "success"
    INFO = "info"


CORE_ROLES = (Role.FOREGROUND, Role.DIM_FOREGROUND, Role.CURSOR)

TERMINAL_ROLES = (
    Role.NORMAL_BLACK, Role.NORMAL_RED, Role.NORMAL_GREEN, Role.NORMAL_YELLOW,
    Role.NORMAL_BLUE, Role.NORMAL_MAGENTA, Role.NORMAL_CYAN, Role.NORMAL_WHITE,
    Role.BRIGHT_BLACK, Role.BRIGHT_RED, Role.BRIGHT_GREEN, Role.BRIGHT_YELLOW,
    Role.BRIGHT_BLUE, Role.BRIGHT_MAGENTA, Role.BRIGHT_CYAN, Role.BRIGHT_WHITE,
)

ACCENT_ROLES = (Role.ACCENT_PRIMARY, Role.ACCENT_SECONDARY, Role.ACCENT_TERTIARY)

SEMANTIC_ROLES = (Role.ERROR, Role.WARNING, Role.SUCCESS, Role.INFO)

# Background first: every later role scores contrast against it.
RESOLUTION_ORDER = (Role.BACKGROUND,) + CORE_ROLES + TERMINAL_ROLES + ACCENT_ROLES + SEMANTIC_ROLES


def ansi_index(role: Role):
    """Terminal palette slot (0-15) for an ANSI role, else None."""
    try:
        return TERMINAL_ROLES.index(role)
    except ValueError:
        return None
