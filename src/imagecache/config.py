from functools import cache
from pathlib import Path
from typing import Literal

from pydantic import Field, PositiveFloat, PositiveInt
from pydantic_settings import BaseSettings, SettingsConfigDict

from imagecache.domain.entities.geometry import CoordsOrder
from imagecache.shared.constants import DEFAULT_LIFETIME_SECONDS, LEASES_DIR_NAME


class CacheConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="IMAGE_CACHE_", env_file=".env", extra="ignore"
    )

    cache_root: Path
    lifetime_seconds: PositiveInt = DEFAULT_LIFETIME_SECONDS
    source_roots: list[Path] = Field(default_factory=list)

    lease_ttl_seconds: PositiveFloat = 120.0
    lease_wait_seconds: PositiveFloat = 30.0


class ImageCacheConfig(CacheConfig):
    model_config = SettingsConfigDict(
        env_prefix="IMAGE_CACHE_", env_file=".env", extra="ignore"
    )

    # Upper bounds accepted for request ceilings.
    max_size: PositiveInt = 2400
    max_width: PositiveInt = 2400
    max_height: PositiveInt = 1600

    # Ceiling used by crop requests that carry none of their own.
    crop_default_max_size: PositiveInt = 1600

    coords_order: CoordsOrder = CoordsOrder.XYWH

    # Which crop parameter shape a route layer exposes; the core accepts both.
    crop_filter_type: Literal["max_size", "dimensions"] = "max_size"

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    logs_dir: Path | None = None

    @property
    def leases_dir(self) -> Path:
        return self.cache_root / LEASES_DIR_NAME


@cache
def get_config() -> ImageCacheConfig:
    """Load the configuration from the environment once per process."""
    return ImageCacheConfig()  # pyright: ignore[reportCallIssue]
