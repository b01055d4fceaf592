"""
Decode an image file into an RGB pixel grid.

Checks run cheapest first: file extension, then the decoded format and the
header dimensions, and only then the full pixel decode.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np
from PIL import Image

from theme_errors import DimensionExceededError, EmptyImageError, ImageIOError, UnsupportedFormatError
from theme_settings import LoaderSettings, ThemeSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadedImage:
    pixels: np.ndarray = field(repr=False)  # uint8, (height, width, 3)
    width: int
    height: int
    format: str  # lowercase, e.g. 'png'
    path: str

    @property
    def pixel_count(self) -> int:
        return self.width * self.height


def validate_extension(path: Path, loader: LoaderSettings):
    extension = path.suffix.lower().lstrip('.')
    if extension not in loader.allowed_formats:
        raise UnsupportedFormatError(str(path), extension, list(loader.allowed_formats))


def validate_dimensions(width: int, height: int, loader: LoaderSettings, path: str = ""):
    if width <= 0 or height <= 0:
        raise EmptyImageError(path)
    if width > loader.max_width or height > loader.max_height:
        raise DimensionExceededError(width, height, loader.max_width, loader.max_height)


def load_image(path, settings: ThemeSettings) -> LoadedImage:
    """
    Load and validate an image file.

    Raises:
        UnsupportedFormatError: Extension or decoded format not allowed
        DimensionExceededError: Width or height above the configured maximum
        EmptyImageError: Image has no pixels
        ImageIOError: File missing, unreadable or undecodable
    """
    path = Path(path)
    loader = settings.loader
    validate_extension(path, loader)

    try:
        img = Image.open(path)
    except (OSError, Image.DecompressionBombError) as e:
        raise ImageIOError(str(path), "open", e) from e

    with img:
        image_format = (img.format or "").lower()
        if image_format not in loader.allowed_formats:
            raise UnsupportedFormatError(str(path), image_format, list(loader.allowed_formats))

        width, height = img.size
        validate_dimensions(width, height, loader, str(path))

        try:
            pixels = np.asarray(img.convert('RGB'), dtype=np.uint8)
        except (OSError, ValueError) as e:
            raise ImageIOError(str(path), "decode", e) from e

    logger.debug(f"Loaded {path.name}: {width}x{height} {image_format}")
    return LoadedImage(pixels=pixels, width=width, height=height, format=image_format, path=str(path))
