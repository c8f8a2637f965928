"""Regeneration leases and invalidation scope locks.

Both are expiring entries in a diskcache ``Cache``, whose ``add`` is atomic
across threads and processes. A lease names what it guards:

- ``regen:<cache key>``: one caller is regenerating that artifact;
- ``scope:<template>`` / ``scope:*``: a template directory (or all of them)
  is being deleted and recreated.

A regenerating caller registers its lease first and only then checks for a
scope lock, while an invalidation takes its scope lock first and then waits
for regeneration leases inside the scope to drain. Whichever side comes
second backs off, so the two never overlap; when its wait runs out it
raises ``StorageError`` rather than proceeding.
"""

import time
import uuid
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Self, final

from diskcache import Cache

from imagecache import config
from imagecache.domain.exceptions import StorageError
from imagecache.infrastructure.cache.addressing import split_key
from imagecache.shared.logger import Logger, get_logger

logger: Logger = get_logger(__name__)

REGEN_PREFIX = "regen:"
SCOPE_PREFIX = "scope:"
ALL_SCOPE = "*"


@dataclass(frozen=True)
class Lease:
    """Outcome of waiting for a regeneration lease.

    Attributes:
        acquired: This caller holds the lease; False means it gave up waiting
            and regenerates without one
        waited: Someone else held the lease or a scope lock at some point,
            so the artifact may have been produced meanwhile
    """

    acquired: bool
    waited: bool


@final
class LeaseManager:
    def __init__(
        self,
        directory: Path,
        ttl_seconds: float = 120.0,
        wait_seconds: float = 30.0,
        poll_interval: float = 0.01,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        directory.mkdir(parents=True, exist_ok=True)
        self.directory = directory
        self.ttl_seconds = ttl_seconds
        self.wait_seconds = wait_seconds
        self.poll_interval = poll_interval
        self._clock = clock
        self._sleep = sleep
        self.cache = Cache(directory=str(directory))

    @classmethod
    def from_config(cls, app_config: config.ImageCacheConfig) -> Self:
        return cls(
            directory=app_config.leases_dir,
            ttl_seconds=app_config.lease_ttl_seconds,
            wait_seconds=app_config.lease_wait_seconds,
        )

    def try_acquire(self, name: str) -> str | None:
        """Take the lease ``name`` if it is free; return its release token."""
        token = uuid.uuid4().hex
        if self.cache.add(name, token, expire=self.ttl_seconds):
            return token
        return None

    def release(self, name: str, token: str) -> None:
        """Release ``name`` if ``token`` still owns it; an expired lease may have moved on."""
        with self.cache.transact():
            if self.cache.get(name) == token:
                self.cache.delete(name)

    def is_held(self, name: str) -> bool:
        return self.cache.get(name) is not None

    @contextmanager
    def regeneration(self, key: str) -> Iterator[Lease]:
        """Hold the regeneration lease for ``key`` for the duration of the block.

        Waits up to ``wait_seconds`` for another holder to finish; after that
        the block runs without a lease (``Lease.acquired`` is False).

        Raises:
            StorageError: If the key's template is still being invalidated
                when ``wait_seconds`` run out.
        """
        template, _, _ = split_key(key)
        name = REGEN_PREFIX + key
        scopes = (SCOPE_PREFIX + ALL_SCOPE, SCOPE_PREFIX + template)
        deadline = self._clock() + self.wait_seconds
        waited = False

        while True:
            blocked_by_scope = False
            token = self.try_acquire(name)
            if token is not None:
                if not any(self.is_held(scope) for scope in scopes):
                    break
                self.release(name, token)
                blocked_by_scope = True
            waited = True

            if self._clock() >= deadline:
                if blocked_by_scope:
                    raise StorageError(
                        f"Cache scope of template '{template}' is being invalidated"
                    )
                logger.warning("lease_unavailable", key=key[:16], wait_seconds=self.wait_seconds)
                yield Lease(acquired=False, waited=waited)
                return
            self._sleep(self.poll_interval)

        try:
            yield Lease(acquired=True, waited=waited)
        finally:
            self.release(name, token)

    @contextmanager
    def scope(self, template: str | None = None) -> Iterator[None]:
        """Lock a template directory, or the whole tree when ``template`` is None.

        Raises:
            StorageError: If another invalidation of the same scope holds the
                lock, or regenerations inside the scope are still running,
                after ``wait_seconds``.
        """
        label = ALL_SCOPE if template is None else template
        name = SCOPE_PREFIX + label
        deadline = self._clock() + self.wait_seconds

        token = self.try_acquire(name)
        while token is None:
            if self._clock() >= deadline:
                raise StorageError(f"Cache scope '{label}' is locked by another invalidation")
            self._sleep(self.poll_interval)
            token = self.try_acquire(name)

        try:
            prefix = REGEN_PREFIX if template is None else f"{REGEN_PREFIX}{template}:"
            self._drain(prefix, deadline)
            yield
        finally:
            self.release(name, token)

    def _drain(self, prefix: str, deadline: float) -> None:
        while self._has_live(prefix):
            if self._clock() >= deadline:
                logger.warning("lease_drain_timeout", prefix=prefix)
                raise StorageError(f"Regenerations under '{prefix}' did not finish in time")
            self._sleep(self.poll_interval)

    def _has_live(self, prefix: str) -> bool:
        for name in list(self.cache.iterkeys()):
            if isinstance(name, str) and name.startswith(prefix) and self.is_held(name):
                return True
        return False

    def close(self) -> None:
        self.cache.close()
