"""Tests for request validation."""

import pytest

from imagecache.application.validation import (
    validate_filename,
    validate_params,
    validate_template_name,
)
from imagecache.config import ImageCacheConfig
from imagecache.domain.entities.params import GeometryParams
from imagecache.domain.exceptions import InvalidInputError, TemplateNotFoundError


class TestValidateFilename:
    @pytest.mark.parametrize(
        "filename", ["photo.jpg", "PHOTO.JPEG", "dir/sub/a_b-c.png", "x.gif", "y.webp"]
    )
    def test_accepts_valid_names(self, filename: str) -> None:
        assert validate_filename(filename) == filename

    @pytest.mark.parametrize(
        "filename",
        [
            "",
            "../../etc/passwd",
            "dir/../photo.jpg",
            "/etc/photo.jpg",
            "photo with space.jpg",
            "photo.jpg?x=1",
            "photo.txt",
            "photo",
            "photo.jpg.exe",
            "photo.jpg\n",
        ],
    )
    def test_rejects_invalid_names(self, filename: str) -> None:
        with pytest.raises(InvalidInputError):
            validate_filename(filename)


class TestValidateTemplateName:
    def test_accepts_registered(self) -> None:
        assert validate_template_name("large", {"large", "crop"}) == "large"

    @pytest.mark.parametrize("template", ["", "lar ge", "large/..", "crop:1", "large\n"])
    def test_rejects_malformed(self, template: str) -> None:
        with pytest.raises(InvalidInputError):
            validate_template_name(template)

    def test_unregistered_template(self) -> None:
        with pytest.raises(TemplateNotFoundError):
            validate_template_name("huge", {"large"})


class TestValidateParams:
    def test_none_is_empty(self, app_config: ImageCacheConfig) -> None:
        assert validate_params(None, app_config).is_empty()

    def test_camel_case_aliases(self, app_config: ImageCacheConfig) -> None:
        params = validate_params({"maxSize": 100, "maxWidth": 200, "maxHeight": 300}, app_config)
        assert params.canonical() == {"max_size": 100, "max_width": 200, "max_height": 300}

    def test_model_passes_through(self, app_config: ImageCacheConfig) -> None:
        params = GeometryParams(coords="1,2,3,4")
        assert validate_params(params, app_config) is params

    @pytest.mark.parametrize(
        "params",
        [
            {"max_size": 0},
            {"max_size": -5},
            {"max_size": "big"},
            {"unknown": 1},
        ],
    )
    def test_rejects_malformed(self, app_config: ImageCacheConfig, params: dict) -> None:
        with pytest.raises(InvalidInputError):
            validate_params(params, app_config)

    @pytest.mark.parametrize(
        "params",
        [{"max_size": 2401}, {"max_width": 2401}, {"max_height": 1601}],
    )
    def test_rejects_values_above_configured_ceiling(
        self, app_config: ImageCacheConfig, params: dict
    ) -> None:
        with pytest.raises(InvalidInputError, match="exceeds allowed value"):
            validate_params(params, app_config)

    def test_malformed_geometry_strings_are_accepted(self, app_config: ImageCacheConfig) -> None:
        """Test that coordinate and ratio strings are checked later, by the crop template."""
        params = validate_params({"coords": "invalid", "ratio": "wide"}, app_config)
        assert params.coords == "invalid"
