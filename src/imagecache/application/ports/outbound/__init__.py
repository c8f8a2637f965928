from imagecache.application.ports.outbound.cache import CacheStore
from imagecache.application.ports.outbound.imaging import ImageOperations
from imagecache.application.ports.outbound.storage import SourceLocator

__all__ = ["CacheStore", "ImageOperations", "SourceLocator"]
