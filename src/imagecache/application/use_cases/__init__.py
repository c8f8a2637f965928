from imagecache.application.use_cases.clear_cache import CacheMaintenance
from imagecache.application.use_cases.get_cached_image import (
    GetCachedImageRequest,
    GetCachedImageResponse,
    ImageCacheService,
)

__all__ = [
    "CacheMaintenance",
    "GetCachedImageRequest",
    "GetCachedImageResponse",
    "ImageCacheService",
]
