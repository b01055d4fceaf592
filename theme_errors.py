"""
Exception hierarchy for theme profile extraction.

ThemeProfileError
├── ImageLoadError
│   ├── UnsupportedFormatError
│   ├── DimensionExceededError
│   ├── EmptyImageError
│   └── ImageIOError
└── ConfigurationError
    ├── ConfigFileReadError
    ├── ConfigFileInvalidError
    ├── ConfigValidationError
    └── MissingCategoryError

Every error carries a `user_message` for display, a `technical_message` for
logs and an optional `recovery_hint`. "No suitable candidate" for a role is
not an error; it resolves to the role's fallback color.
"""

from typing import Optional


class ThemeProfileError(Exception):
    """Base class for all theme profile errors."""

    def __init__(
        self,
        user_message: str,
        technical_message: Optional[str] = None,
        recovery_hint: Optional[str] = None,
    ):
        super().__init__(user_message)
        self.user_message = user_message
        self.technical_message = technical_message or user_message
        self.recovery_hint = recovery_hint

    def __str__(self) -> str:
        return self.user_message

    def get_full_message(self) -> str:
        """Message with the recovery hint appended, for the CLI."""
        msg = self.user_message
        if self.recovery_hint:
            msg += f"\n\nSuggestion: {self.recovery_hint}"
        return msg


# =============================================================================
# Input faults
# =============================================================================

class ImageLoadError(ThemeProfileError):
    """The image could not be turned into a pixel grid."""


class UnsupportedFormatError(ImageLoadError):
    def __init__(self, path: str, image_format: str, supported: list):
        if image_format:
            user_msg = f"Unsupported image format '{image_format}' for {path}"
        else:
            user_msg = f"No file extension found for {path}"
        super().__init__(
            user_message=user_msg,
            technical_message=f"{user_msg}: supported formats are {supported}",
            recovery_hint=f"Convert the image to one of: {', '.join(supported)}",
        )
        self.path = path
        self.image_format = image_format
        self.supported = list(supported)


class DimensionExceededError(ImageLoadError):
    def __init__(self, width: int, height: int, max_width: int, max_height: int):
        super().__init__(
            user_message=(
                f"Image dimensions {width}x{height} exceed maximum "
                f"{max_width}x{max_height}"
            ),
            recovery_hint="Downscale the image or raise loader.max_width / loader.max_height",
        )
        self.width = width
        self.height = height
        self.max_width = max_width
        self.max_height = max_height


class EmptyImageError(ImageLoadError):
    def __init__(self, path: str = ""):
        where = f": {path}" if path else ""
        super().__init__(user_message=f"Image has no pixels{where}")
        self.path = path


class ImageIOError(ImageLoadError):
    def __init__(self, path: str, operation: str, error: Exception):
        super().__init__(
            user_message=f"Failed to {operation} image {path}",
            technical_message=f"Failed to {operation} image {path}: {error}",
        )
        self.path = path
        self.operation = operation
        self.error = error


# =============================================================================
# Configuration faults
# =============================================================================

class ConfigurationError(ThemeProfileError):
    """Settings are invalid or cannot be loaded."""


class ConfigFileReadError(ConfigurationError):
    def __init__(self, file_path: str, reason: str, missing: bool = False):
        if missing:
            user_message = f"Configuration file not found: {file_path}"
            recovery = "Check the --config path or THEME_PROFILE_CONFIG"
        else:
            user_message = f"Configuration file cannot be read: {file_path}"
            recovery = "Check that the path is a readable file"
        super().__init__(
            user_message=user_message,
            technical_message=f"Cannot read {file_path}: {reason}",
            recovery_hint=recovery,
        )
        self.file_path = file_path
        self.missing = missing


class ConfigFileInvalidError(ConfigurationError):
    def __init__(self, file_path: str, parse_error: str):
        super().__init__(
            user_message="Configuration file has invalid syntax",
            technical_message=f"JSON parse error in {file_path}: {parse_error}",
            recovery_hint=(
                "Check for trailing commas, missing quotes and unclosed braces\n"
                f"  - Edit: {file_path}"
            ),
        )
        self.file_path = file_path
        self.parse_error = parse_error


class ConfigValidationError(ConfigurationError):
    def __init__(self, field: str, value, error_msg: str, file_path: Optional[str] = None):
        recovery = f"Update the '{field}' value in your configuration"
        if file_path:
            recovery += f"\nConfig file: {file_path}"
        if "category_scoring" in field:
            recovery += "\nThe five scoring weights must sum to 1.0"

        super().__init__(
            user_message=f"Invalid configuration value for '{field}': {error_msg}",
            technical_message=f"Config validation failed for {field}={value!r}: {error_msg}",
            recovery_hint=recovery,
        )
        self.field = field
        self.value = value
        self.file_path = file_path


class MissingCategoryError(ConfigurationError):
    def __init__(self, role: str, mode: str, table: str = "categories"):
        super().__init__(
            user_message=f"No {table} entry for role '{role}' in {mode} mode",
            recovery_hint=f"Add '{table}.{mode.lower()}.{role}' to your configuration",
        )
        self.role = role
        self.mode = mode
        self.table = table


def wrap_validation_error(error, file_path: Optional[str] = None) -> ConfigurationError:
    """Convert a pydantic ValidationError into a ConfigValidationError."""
    errors = error.errors()
    if not errors:
        return ConfigValidationError("settings", None, str(error), file_path)

    first = errors[0]
    field = ".".join(str(loc) for loc in first.get("loc", ())) or "settings"
    reason = first.get("msg", "validation failed")
    if len(errors) > 1:
        reason += f" (and {len(errors) - 1} more error(s))"
    return ConfigValidationError(field, first.get("input"), reason, file_path)
