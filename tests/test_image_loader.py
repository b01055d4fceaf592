"""Tests for image decoding and validation."""

import numpy as np
import pytest
from PIL import Image

from image_loader import load_image, validate_dimensions
from theme_errors import (
    DimensionExceededError,
    EmptyImageError,
    ImageIOError,
    ImageLoadError,
    UnsupportedFormatError,
)
from theme_settings import settings_from_dict


@pytest.fixture
def png_path(tmp_path):
    path = tmp_path / "swatch.png"
    Image.new("RGB", (8, 6), (200, 30, 40)).save(path)
    return path


class TestLoadImage:

    @pytest.mark.unit
    def test_png(self, settings, png_path):
        image = load_image(png_path, settings)
        assert image.pixels.shape == (6, 8, 3)
        assert image.pixels.dtype == np.uint8
        assert (image.width, image.height, image.format) == (8, 6, "png")
        assert image.pixel_count == 48
        assert image.pixels[0, 0].tolist() == [200, 30, 40]

    @pytest.mark.unit
    def test_rgba_is_flattened_to_rgb(self, settings, tmp_path):
        path = tmp_path / "alpha.png"
        Image.new("RGBA", (3, 3), (10, 20, 30, 0)).save(path)
        assert load_image(path, settings).pixels.shape == (3, 3, 3)

    @pytest.mark.unit
    def test_jpg_extension(self, settings, tmp_path):
        path = tmp_path / "photo.jpg"
        Image.new("RGB", (4, 4), (128, 128, 128)).save(path)
        assert load_image(path, settings).format == "jpeg"

    @pytest.mark.unit
    def test_unsupported_extension(self, settings, tmp_path):
        path = tmp_path / "image.bmp"
        Image.new("RGB", (2, 2)).save(path)
        with pytest.raises(UnsupportedFormatError) as excinfo:
            load_image(path, settings)
        assert excinfo.value.image_format == "bmp"
        assert "png" in excinfo.value.recovery_hint

    @pytest.mark.unit
    def test_missing_extension(self, settings, tmp_path):
        with pytest.raises(UnsupportedFormatError) as excinfo:
            load_image(tmp_path / "noext", settings)
        assert "No file extension" in excinfo.value.user_message

    @pytest.mark.unit
    def test_content_must_match_allowed_format(self, settings, tmp_path):
        path = tmp_path / "disguised.png"
        Image.new("RGB", (2, 2)).save(path, format="BMP")
        with pytest.raises(UnsupportedFormatError):
            load_image(path, settings)

    @pytest.mark.unit
    def test_missing_file(self, settings, tmp_path):
        with pytest.raises(ImageIOError) as excinfo:
            load_image(tmp_path / "missing.png", settings)
        assert excinfo.value.operation == "open"

    @pytest.mark.unit
    def test_garbage_file(self, settings, tmp_path):
        path = tmp_path / "broken.png"
        path.write_bytes(b"definitely not an image")
        with pytest.raises(ImageLoadError):
            load_image(path, settings)

    @pytest.mark.unit
    def test_decompression_bomb(self, settings, png_path, monkeypatch):
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 10)
        with pytest.raises(ImageIOError) as excinfo:
            load_image(png_path, settings)
        assert excinfo.value.operation == "open"
        assert isinstance(excinfo.value.error, Image.DecompressionBombError)

    @pytest.mark.unit
    def test_name_too_long(self, settings, tmp_path):
        with pytest.raises(ImageIOError) as excinfo:
            load_image(tmp_path / ("x" * 300 + ".png"), settings)
        assert isinstance(excinfo.value.error, OSError)

    @pytest.mark.unit
    def test_dimension_limit(self, png_path):
        small = settings_from_dict({'loader': {'max_width': 4}})
        with pytest.raises(DimensionExceededError) as excinfo:
            load_image(png_path, small)
        assert (excinfo.value.width, excinfo.value.height) == (8, 6)

    @pytest.mark.unit
    def test_allowed_formats_configurable(self, tmp_path):
        path = tmp_path / "image.bmp"
        Image.new("RGB", (2, 2)).save(path)
        settings = settings_from_dict({'loader': {'allowed_formats': ['BMP', 'png']}})
        assert load_image(path, settings).format == "bmp"


class TestValidateDimensions:

    @pytest.mark.unit
    def test_empty(self, settings):
        with pytest.raises(EmptyImageError):
            validate_dimensions(0, 5, settings.loader)

    @pytest.mark.unit
    def test_height_limit(self, settings):
        with pytest.raises(DimensionExceededError):
            validate_dimensions(10, 8193, settings.loader)
        validate_dimensions(8192, 8192, settings.loader)
