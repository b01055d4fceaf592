"""
Settings snapshot for theme profile extraction.

All thresholds, acceptance windows, scoring weights and fallback colors live
in one frozen pydantic model. The pipeline takes a `ThemeSettings` as an
explicit argument; nothing reads settings from global state.

Load order for `load_settings()`:
    1. built-in defaults (category_defaults.py)
    2. a JSON file: the explicit path, else $THEME_PROFILE_CONFIG, else
       $XDG_CONFIG_HOME/theme-profile/settings.json if it exists
    3. THEME_PROFILE_<FIELD> environment variables; nested fields use a
       double underscore, e.g. THEME_PROFILE_EXTRACTION__QUANTIZATION_BITS=6
"""

import copy
import json
import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from category_defaults import default_category_tables, default_fallback_tables
from color_model import Color, parse_hex
from role_categories import RESOLUTION_ORDER, Role, ThemeMode
from theme_errors import (
    ConfigFileInvalidError,
    ConfigFileReadError,
    ConfigValidationError,
    MissingCategoryError,
    wrap_validation_error,
)

logger = logging.getLogger(__name__)

CONFIG_ENV = "THEME_PROFILE_CONFIG"
ENV_PREFIX = "THEME_PROFILE_"
CONFIG_DIR = "theme-profile"
CONFIG_FILE = "settings.json"

WEIGHT_SUM_TOLERANCE = 0.001


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra='forbid')


# =============================================================================
# Category Characteristics
# =============================================================================

class CategoryCharacteristics(_Frozen):
    """Acceptance window for one role in one theme mode."""

    min_lightness: float = Field(default=0.0, ge=0.0, le=1.0)
    max_lightness: float = Field(default=1.0, ge=0.0, le=1.0)
    min_saturation: float = Field(default=0.0, ge=0.0, le=1.0)
    max_saturation: float = Field(default=1.0, ge=0.0, le=1.0)
    min_contrast: float = Field(default=0.0, ge=0.0, le=21.0)
    hue_center: Optional[float] = Field(default=None, ge=0.0, lt=360.0)
    hue_tolerance: Optional[float] = Field(default=None, gt=0.0, le=180.0)
    allow_reuse: bool = False

    @model_validator(mode='after')
    def _check_window(self):
        if self.min_lightness > self.max_lightness:
            raise ValueError("min_lightness must not exceed max_lightness")
        if self.min_saturation > self.max_saturation:
            raise ValueError("min_saturation must not exceed max_saturation")
        if (self.hue_center is None) != (self.hue_tolerance is None):
            raise ValueError("hue_center and hue_tolerance must be set together")
        return self

    @property
    def has_hue(self) -> bool:
        return self.hue_center is not None


class CategoryScoringWeights(_Frozen):
    """Weights of the five scoring terms; they must sum to 1.0."""

    frequency: float = Field(default=0.25, ge=0.0)
    contrast: float = Field(default=0.25, ge=0.0)
    saturation: float = Field(default=0.20, ge=0.0)
    hue_alignment: float = Field(default=0.15, ge=0.0)
    lightness: float = Field(default=0.15, ge=0.0)

    @model_validator(mode='after')
    def _check_sum(self):
        total = self.frequency + self.contrast + self.saturation + self.hue_alignment + self.lightness
        if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
            raise ValueError(f"scoring weights sum to {total:.4f}, expected 1.0 (±{WEIGHT_SUM_TOLERANCE})")
        return self


def _check_complete(table: dict, mode: str, table_name: str):
    for role in RESOLUTION_ORDER:
        if role not in table:
            raise MissingCategoryError(role.value, mode, table_name)


class CategoryTables(_Frozen):
    dark: dict[Role, CategoryCharacteristics]
    light: dict[Role, CategoryCharacteristics]

    @model_validator(mode='after')
    def _check_roles(self):
        _check_complete(self.dark, ThemeMode.DARK.value, "categories")
        _check_complete(self.light, ThemeMode.LIGHT.value, "categories")
        return self

    def for_mode(self, mode: ThemeMode) -> dict:
        return getattr(self, mode.key)


class FallbackTables(_Frozen):
    dark: dict[Role, str]
    light: dict[Role, str]

    @field_validator('dark', 'light')
    @classmethod
    def _check_hex(cls, table: dict) -> dict:
        for role, value in table.items():
            parse_hex(value)
        return table

    @model_validator(mode='after')
    def _check_roles(self):
        _check_complete(self.dark, ThemeMode.DARK.value, "fallbacks")
        _check_complete(self.light, ThemeMode.LIGHT.value, "fallbacks")
        return self

    def color(self, role: Role, mode: ThemeMode) -> Color:
        table = getattr(self, mode.key)
        if role not in table:
            raise MissingCategoryError(role.value, mode.value, "fallbacks")
        return Color.from_hex(table[role])


# =============================================================================
# Stage Settings
# =============================================================================

class LoaderSettings(_Frozen):
    max_width: int = Field(default=8192, gt=0)
    max_height: int = Field(default=8192, gt=0)
    allowed_formats: tuple[str, ...] = ("jpeg", "jpg", "png", "webp")

    @field_validator('allowed_formats')
    @classmethod
    def _lower_formats(cls, formats: tuple) -> tuple:
        return tuple(f.lower().lstrip('.') for f in formats)


class ExtractionSettings(_Frozen):
    quantization_bits: int = Field(default=5, ge=1, le=8)
    max_candidates_per_category: int = Field(default=64, ge=1)
    minimum_color_frequency: float = Field(default=0.0001, ge=0.0, le=1.0)
    allow_colored_backgrounds: bool = False
    pool_chunk_rows: Optional[int] = Field(default=None, gt=0)
    pool_workers: int = Field(default=1, ge=1)


class ThemeSettings(_Frozen):
    """Immutable, validated settings snapshot."""

    # Profile classification
    grayscale_threshold: float = Field(default=0.05, ge=0.0, le=1.0)
    grayscale_image_threshold: float = Field(default=0.95, ge=0.0, le=1.0)
    monochromatic_tolerance: float = Field(default=10.0, ge=0.0, le=180.0)
    monochromatic_weight_threshold: float = Field(default=0.90, ge=0.0, le=1.0)
    theme_mode_threshold: float = Field(default=0.5, ge=0.0, le=1.0)

    # Grouping boundaries
    lightness_dark_max: float = Field(default=0.3, ge=0.0, le=1.0)
    lightness_light_min: float = Field(default=0.7, ge=0.0, le=1.0)
    saturation_gray_max: float = Field(default=0.1, ge=0.0, le=1.0)
    saturation_muted_max: float = Field(default=0.3, ge=0.0, le=1.0)
    saturation_normal_max: float = Field(default=0.7, ge=0.0, le=1.0)
    hue_sector_count: int = Field(default=12, ge=1, le=360)
    diversity_mass_floor: float = Field(default=0.01, ge=0.0, le=1.0)

    loader: LoaderSettings = Field(default_factory=LoaderSettings)
    extraction: ExtractionSettings = Field(default_factory=ExtractionSettings)
    category_scoring: CategoryScoringWeights = Field(default_factory=CategoryScoringWeights)
    categories: CategoryTables = Field(default_factory=lambda: CategoryTables(**default_category_tables()))
    fallbacks: FallbackTables = Field(default_factory=lambda: FallbackTables(**default_fallback_tables()))

    @model_validator(mode='after')
    def _check_boundaries(self):
        if self.lightness_dark_max >= self.lightness_light_min:
            raise ValueError("lightness_dark_max must be below lightness_light_min")
        if not self.saturation_gray_max <= self.saturation_muted_max <= self.saturation_normal_max:
            raise ValueError("saturation boundaries must satisfy gray_max <= muted_max <= normal_max")
        return self

    @property
    def hue_sector_size(self) -> float:
        return 360.0 / self.hue_sector_count


# =============================================================================
# Loading
# =============================================================================

@lru_cache(maxsize=1)
def default_settings() -> ThemeSettings:
    return ThemeSettings()


def _deep_merge(base: dict, override: dict) -> dict:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def env_overrides(environ=None) -> dict:
    """Collect THEME_PROFILE_* variables into a nested override dict."""
    environ = os.environ if environ is None else environ
    overrides = {}
    for name, value in environ.items():
        if not name.startswith(ENV_PREFIX) or name == CONFIG_ENV:
            continue
        path = name[len(ENV_PREFIX):].lower().split('__')
        node = overrides
        for part in path[:-1]:
            node = node.setdefault(part, {})
            if not isinstance(node, dict):
                raise ConfigValidationError(name, value, "conflicts with a nested override")
        if isinstance(node.get(path[-1]), dict):
            raise ConfigValidationError(name, value, "conflicts with a nested override")
        node[path[-1]] = value
    return overrides


def resolve_config_path(path=None, environ=None) -> tuple:
    """Return (path, explicit) for the config file to read, or (None, False)."""
    environ = os.environ if environ is None else environ
    if path is not None:
        return Path(path), True
    if environ.get(CONFIG_ENV):
        return Path(environ[CONFIG_ENV]), True

    xdg = environ.get("XDG_CONFIG_HOME")
    base = Path(xdg) if xdg else Path.home() / ".config"
    candidate = base / CONFIG_DIR / CONFIG_FILE
    if candidate.is_file():
        return candidate, False
    return None, False


def read_config_file(path: Path) -> dict:
    try:
        text = path.read_text()
    except FileNotFoundError:
        raise ConfigFileReadError(str(path), "file not found", missing=True) from None
    except OSError as e:
        raise ConfigFileReadError(str(path), str(e)) from e

    if not text.strip():
        raise ConfigFileInvalidError(str(path), "file is empty")

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in {path}: {e}")
        raise ConfigFileInvalidError(str(path), str(e)) from e

    if not isinstance(data, dict):
        raise ConfigFileInvalidError(str(path), "top-level value must be an object")
    return data


def settings_from_dict(data: dict, file_path: Optional[str] = None) -> ThemeSettings:
    """Validate a (partial) settings document merged over the defaults."""
    merged = _deep_merge(default_settings().model_dump(mode='json'), data)
    try:
        return ThemeSettings.model_validate(merged)
    except ValidationError as e:
        raise wrap_validation_error(e, file_path) from e


def load_settings(path=None, environ=None) -> ThemeSettings:
    """Load settings from defaults, an optional JSON file and the environment."""
    config_path, explicit = resolve_config_path(path, environ)

    document = {}
    if config_path is not None:
        document = read_config_file(config_path)
        logger.debug(f"Loaded settings from {config_path} (explicit={explicit})")

    overrides = env_overrides(environ)
    if overrides:
        logger.debug(f"Applying environment overrides: {sorted(overrides)}")
        document = _deep_merge(document, overrides)

    if not document:
        return default_settings()
    return settings_from_dict(document, str(config_path) if config_path else None)


def save_settings(settings: ThemeSettings, path) -> Path:
    """Write a full settings document, e.g. as a starting point for edits."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(settings.model_dump_json(indent=2))
    return path
