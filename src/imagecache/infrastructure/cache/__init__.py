"""Filesystem cache for transformed images.

- ``addressing``: cache keys and paths derived from (template, filename, params)
- ``store``: freshness checks, atomic writes and scoped invalidation
- ``leases``: per-key regeneration leases and invalidation scope locks
"""

from imagecache.infrastructure.cache.addressing import (
    canonicalize_params,
    compute_key,
    compute_path,
    params_digest,
    split_key,
)
from imagecache.infrastructure.cache.leases import Lease, LeaseManager
from imagecache.infrastructure.cache.store import FileCacheStore

__all__ = [
    "FileCacheStore",
    "Lease",
    "LeaseManager",
    "canonicalize_params",
    "compute_key",
    "compute_path",
    "params_digest",
    "split_key",
]
