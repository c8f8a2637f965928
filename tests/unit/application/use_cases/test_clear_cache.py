"""Tests for cache maintenance."""

from collections.abc import Callable
from pathlib import Path

import pytest

from imagecache.application.use_cases.clear_cache import CacheMaintenance
from imagecache.application.use_cases.get_cached_image import ImageCacheService
from imagecache.domain.exceptions import InvalidInputError, TemplateNotFoundError


@pytest.fixture
def maintenance(service: ImageCacheService) -> CacheMaintenance:
    return CacheMaintenance(store=service.store, templates=service.registry)


@pytest.fixture
def populated(
    service: ImageCacheService, write_image: Callable[..., Path]
) -> dict[str, Path]:
    write_image("a.jpg")
    write_image("b.jpg")
    return {
        "large_a": service.get_cached_image("large", "a.jpg"),
        "large_b": service.get_cached_image("large", "b.jpg"),
        "small_a": service.get_cached_image("small", "a.jpg"),
        "crop_a": service.get_cached_image("crop", "a.jpg", {"maxSize": 100}),
    }


class TestClearTemplate:
    def test_only_that_template_is_cleared(
        self, maintenance: CacheMaintenance, populated: dict[str, Path]
    ) -> None:
        assert maintenance.clear_template("large") == 1

        assert populated["large_a"].parent.is_dir()
        assert not populated["large_a"].exists()
        assert not populated["large_b"].exists()
        assert populated["small_a"].exists()
        assert populated["crop_a"].exists()

    def test_next_request_rebuilds(
        self,
        maintenance: CacheMaintenance,
        service: ImageCacheService,
        populated: dict[str, Path],
    ) -> None:
        maintenance.clear_template("large")
        assert service.get_cached_image("large", "a.jpg") == populated["large_a"]
        assert populated["large_a"].exists()

    def test_unknown_template(self, maintenance: CacheMaintenance) -> None:
        with pytest.raises(TemplateNotFoundError):
            maintenance.clear_template("gigantic")

    def test_malformed_template(self, maintenance: CacheMaintenance) -> None:
        with pytest.raises(InvalidInputError):
            maintenance.clear_template("../large")

    def test_trailing_newline_is_rejected_without_registry(
        self, service: ImageCacheService, populated: dict[str, Path]
    ) -> None:
        unchecked = CacheMaintenance(store=service.store)
        with pytest.raises(InvalidInputError):
            unchecked.clear_template("large\n")
        assert populated["large_a"].exists()


class TestClearAll:
    def test_everything_is_cleared(
        self,
        maintenance: CacheMaintenance,
        service: ImageCacheService,
        populated: dict[str, Path],
    ) -> None:
        assert maintenance.clear_all() == 3
        assert not any(path.exists() for path in populated.values())
        assert service.store.cache_root.is_dir()

    def test_empty_cache(self, maintenance: CacheMaintenance) -> None:
        assert maintenance.clear_all() == 0


class TestClearFilename:
    def test_removes_every_variant_of_one_file(
        self, maintenance: CacheMaintenance, populated: dict[str, Path]
    ) -> None:
        assert maintenance.clear_filename("a.jpg") == 3
        assert populated["large_b"].exists()
        assert not populated["large_a"].exists()
        assert not populated["small_a"].exists()
        assert not populated["crop_a"].exists()

    def test_rejects_traversal(self, maintenance: CacheMaintenance) -> None:
        with pytest.raises(InvalidInputError):
            maintenance.clear_filename("../a.jpg")
