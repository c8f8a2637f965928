"""Get-or-build flow for cached images."""

from collections.abc import Mapping
from contextlib import nullcontext
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any, Self, final, override

import structlog

from imagecache import config
from imagecache.application.ports.outbound.cache import CacheStore
from imagecache.application.ports.outbound.imaging import ImageOperations
from imagecache.application.ports.outbound.storage import SourceLocator
from imagecache.application.use_cases.base import BaseRequest, BaseResponse, BaseUseCase
from imagecache.application.validation import (
    validate_filename,
    validate_params,
    validate_template_name,
)
from imagecache.domain.entities.params import GeometryParams
from imagecache.domain.exceptions import (
    ImageCacheError,
    ProcessingError,
    SourceImageNotFoundError,
    StorageError,
)
from imagecache.infrastructure.cache.addressing import compute_key, compute_path
from imagecache.infrastructure.cache.leases import Lease, LeaseManager
from imagecache.infrastructure.cache.store import FileCacheStore
from imagecache.infrastructure.imaging.pillow_operations import PillowImageOperations
from imagecache.infrastructure.persistence.source_locator import FilesystemSourceLocator
from imagecache.infrastructure.templates.registry import (
    TemplateRegistry,
    build_default_registry,
)
from imagecache.shared.logger import Logger, get_logger

logger: Logger = get_logger(__name__)


@dataclass(frozen=True)
class GetCachedImageRequest(BaseRequest):
    template: str
    filename: str
    params: GeometryParams | Mapping[str, Any] | None = field(default=None)


@dataclass(frozen=True)
class GetCachedImageResponse(BaseResponse):
    path: Path
    key: str
    cache_hit: bool


@final
class ImageCacheService(BaseUseCase[GetCachedImageRequest, GetCachedImageResponse]):
    """
    Serve transformed images from the cache, regenerating them when missing or expired.

    Per call: validate inputs, look up the cache, locate the source image,
    apply the template, persist the result. Validation failures raise
    ``InvalidInputError`` and a missing source raises
    ``SourceImageNotFoundError``; neither writes anything. Transform and
    write failures are logged with full context and raised as
    ``ProcessingError`` / ``StorageError``.

    Regeneration of one cache key is serialized through a ``LeaseManager``
    when one is given.
    """

    def __init__(
        self,
        app_config: config.ImageCacheConfig,
        registry: TemplateRegistry,
        store: CacheStore,
        locator: SourceLocator,
        operations: ImageOperations,
        leases: LeaseManager | None = None,
    ):
        self.config = app_config
        self.registry = registry
        self.store = store
        self.locator = locator
        self.operations = operations
        self.leases = leases

    @classmethod
    def from_config(cls, app_config: config.ImageCacheConfig) -> Self:
        """Wire the filesystem, Pillow and diskcache adapters from configuration."""
        operations = PillowImageOperations()
        leases = LeaseManager.from_config(app_config)
        return cls(
            app_config=app_config,
            registry=build_default_registry(app_config, operations),
            store=FileCacheStore.from_config(app_config, leases=leases),
            locator=FilesystemSourceLocator.from_config(app_config),
            operations=operations,
            leases=leases,
        )

    def get_cached_image(
        self,
        template: str,
        filename: str,
        params: GeometryParams | Mapping[str, Any] | None = None,
    ) -> Path:
        """Path of a fresh artifact for ``(template, filename, params)``."""
        response = self.execute(
            GetCachedImageRequest(template=template, filename=filename, params=params)
        )
        return response.path

    def get_original_image(self, filename: str) -> Path:
        """Path of the untouched source image.

        Raises:
            InvalidInputError: If the filename is rejected
            SourceImageNotFoundError: If no source root holds the file
        """
        validate_filename(filename)
        source = self.locator.find(filename)
        if source is None:
            logger.warning("source_image_not_found", filename=filename)
            raise SourceImageNotFoundError(f"Original image not found: {filename}")
        return source

    @override
    def execute(self, request: GetCachedImageRequest) -> GetCachedImageResponse:
        template = validate_template_name(request.template, self.registry)
        filename = validate_filename(request.filename)
        params = validate_params(request.params, self.config)

        key = compute_key(template, filename, params)
        path = compute_path(self.store.cache_root, template, filename, params)

        with structlog.contextvars.bound_contextvars(
            template=template, filename=filename, key=key[:16]
        ):
            if self.store.is_fresh(path, self.config.lifetime_seconds):
                logger.debug("cache_hit")
                return GetCachedImageResponse(path=path, key=key, cache_hit=True)

            logger.debug("cache_miss")
            with self._regeneration_lease(key) as lease:
                # Another caller may have finished between the check above and the lease.
                if self.store.is_fresh(path, self.config.lifetime_seconds):
                    logger.debug("cache_hit_after_wait", waited=lease.waited)
                    return GetCachedImageResponse(path=path, key=key, cache_hit=True)

                self._regenerate(template, filename, params, path)

        return GetCachedImageResponse(path=path, key=key, cache_hit=False)

    def _regeneration_lease(self, key: str):
        if self.leases is None:
            return nullcontext(Lease(acquired=True, waited=False))
        return self.leases.regeneration(key)

    def _regenerate(
        self, template: str, filename: str, params: GeometryParams, path: Path
    ) -> None:
        source = self.locator.find(filename)
        if source is None:
            logger.warning("source_image_not_found")
            raise SourceImageNotFoundError(f"Original image not found: {filename}")

        data = self._render(template, source, params)

        try:
            self.store.persist(path, data)
        except StorageError as e:
            logger.error(
                "cache_persist_failed",
                params=params.canonical(),
                path=str(path),
                error=str(e),
            )
            raise

    def _render(self, template: str, source: Path, params: GeometryParams) -> bytes:
        factory = self.registry.resolve(template)
        try:
            modifier = factory(params)
            image = self.operations.decode(source)
            result = modifier.apply(image)
            return self.operations.encode(result, PurePosixPath(source.name).suffix)
        except ImageCacheError:
            raise
        except Exception as e:
            logger.error(
                "template_apply_failed",
                params=params.canonical(),
                source=str(source),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise ProcessingError(f"Failed to apply template '{template}' to {source}: {e}") from e
