import abc
from pathlib import Path

from imagecache.domain.entities.cache import InvalidationScope


class CacheStore(abc.ABC):
    """Owner of the cache tree."""

    cache_root: Path

    @abc.abstractmethod
    def is_fresh(self, path: Path, lifetime_seconds: int) -> bool:
        raise NotImplementedError

    @abc.abstractmethod
    def persist(self, path: Path, data: bytes) -> Path:
        raise NotImplementedError

    @abc.abstractmethod
    def invalidate(self, scope: InvalidationScope) -> int:
        raise NotImplementedError
