from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from PIL import Image

from imagecache.application.use_cases.get_cached_image import ImageCacheService
from imagecache.config import ImageCacheConfig
from imagecache.infrastructure.cache.leases import LeaseManager
from imagecache.infrastructure.cache.store import FileCacheStore
from imagecache.infrastructure.imaging.pillow_operations import PillowImageOperations
from imagecache.infrastructure.persistence.source_locator import FilesystemSourceLocator
from imagecache.infrastructure.templates.registry import build_default_registry

type ImageWriter = Callable[..., Path]


@pytest.fixture
def cache_root(tmp_path: Path) -> Path:
    return tmp_path / "cache"


@pytest.fixture
def source_root(tmp_path: Path) -> Path:
    root = tmp_path / "uploads"
    root.mkdir()
    return root


@pytest.fixture
def app_config(cache_root: Path, source_root: Path) -> ImageCacheConfig:
    return ImageCacheConfig(
        _env_file=None,  # pyright: ignore[reportCallIssue]
        cache_root=cache_root,
        source_roots=[source_root],
        lease_wait_seconds=5.0,
    )


@pytest.fixture
def operations() -> PillowImageOperations:
    return PillowImageOperations()


@pytest.fixture
def sample_image() -> Image.Image:
    """Create a synthetic 500x500 image."""
    return Image.new("RGB", (500, 500), color="white")


@pytest.fixture
def write_image(source_root: Path) -> ImageWriter:
    """Write a synthetic image into the source root and return its path."""

    def _write(
        filename: str = "photo.jpg",
        size: tuple[int, int] = (500, 500),
        color: str = "white",
        root: Path | None = None,
    ) -> Path:
        path = (root or source_root) / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.new("RGB", size, color=color).save(path)
        return path

    return _write


@pytest.fixture
def leases(app_config: ImageCacheConfig) -> Iterator[LeaseManager]:
    manager = LeaseManager.from_config(app_config)
    yield manager
    manager.close()


@pytest.fixture
def store(app_config: ImageCacheConfig, leases: LeaseManager) -> FileCacheStore:
    return FileCacheStore.from_config(app_config, leases=leases)


@pytest.fixture
def service(
    app_config: ImageCacheConfig,
    operations: PillowImageOperations,
    store: FileCacheStore,
    leases: LeaseManager,
) -> ImageCacheService:
    return ImageCacheService(
        app_config=app_config,
        registry=build_default_registry(app_config, operations),
        store=store,
        locator=FilesystemSourceLocator.from_config(app_config),
        operations=operations,
        leases=leases,
    )
