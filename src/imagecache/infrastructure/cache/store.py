"""Filesystem cache tree.

Layout: ``cache_root/<template>/[<2 hex>/<62 hex>/]<filename>``. The store
owns everything under ``cache_root`` except dot-prefixed entries, which hold
bookkeeping such as regeneration leases and in-flight temporary files.
"""

import os
import re
import shutil
import stat
import tempfile
import time
from collections.abc import Callable, Iterator
from contextlib import nullcontext
from pathlib import Path
from typing import Self, final, override

from imagecache import config
from imagecache.application.ports.outbound.cache import CacheStore
from imagecache.domain.entities.cache import (
    AllTemplates,
    FilenameScope,
    InvalidationScope,
    TemplateScope,
)
from imagecache.domain.exceptions import StorageError
from imagecache.infrastructure.cache.leases import LeaseManager
from imagecache.shared.constants import (
    ARTIFACT_FILE_MODE,
    HASH_HEX_LENGTH,
    HASH_PREFIX_LENGTH,
    TEMP_FILE_PREFIX,
)
from imagecache.shared.logger import Logger, get_logger

logger: Logger = get_logger(__name__)

_PREFIX_DIR = re.compile(rf"^[0-9a-f]{{{HASH_PREFIX_LENGTH}}}$")
_REST_DIR = re.compile(rf"^[0-9a-f]{{{HASH_HEX_LENGTH - HASH_PREFIX_LENGTH}}}$")


@final
class FileCacheStore(CacheStore):
    def __init__(
        self,
        cache_root: Path,
        leases: LeaseManager | None = None,
        clock: Callable[[], float] = time.time,
    ):
        if not cache_root.is_absolute():
            raise ValueError("Cache directory path must be absolute")

        self.cache_root = cache_root
        self.leases = leases
        self._clock = clock

        try:
            self.cache_root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to create cache root {cache_root}: {e}") from e

    @classmethod
    def from_config(cls, app_config: config.ImageCacheConfig, leases: LeaseManager | None = None) -> Self:
        return cls(cache_root=app_config.cache_root, leases=leases)

    @override
    def is_fresh(self, path: Path, lifetime_seconds: int) -> bool:
        """True iff ``path`` is a regular file modified less than ``lifetime_seconds`` ago."""
        try:
            info = path.stat()
        except OSError:
            return False
        if not stat.S_ISREG(info.st_mode):
            return False
        return self._clock() - info.st_mtime < lifetime_seconds

    @override
    def persist(self, path: Path, data: bytes) -> Path:
        """Atomically write ``data`` to ``path``.

        The bytes go to a temporary file in the destination directory, which
        is then renamed over ``path``; readers see either the old artifact or
        the new one, never a partial file. The artifact gets
        ``ARTIFACT_FILE_MODE`` rather than the 0600 of a temporary file.

        Raises:
            StorageError: If the directory or file cannot be written. No
                temporary file is left behind.
        """
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to create cache directory {path.parent}: {e}") from e

        tmp_path: Path | None = None
        try:
            with tempfile.NamedTemporaryFile(
                dir=path.parent, prefix=TEMP_FILE_PREFIX, suffix=".part", delete=False
            ) as tmp:
                tmp_path = Path(tmp.name)
                tmp.write(data)
                tmp.flush()
                os.fchmod(tmp.fileno(), ARTIFACT_FILE_MODE)
                os.fsync(tmp.fileno())
            os.replace(tmp_path, path)
        except OSError as e:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise StorageError(f"Failed to write cache file {path}: {e}") from e

        logger.debug("cache_persisted", path=str(path), size=len(data))
        return path

    @override
    def invalidate(self, scope: InvalidationScope) -> int:
        """Remove cached artifacts.

        Returns:
            Number of template directories recreated, or of files removed for
            a ``FilenameScope``.
        """
        match scope:
            case AllTemplates():
                with self._scope_lock(None):
                    removed = 0
                    for directory in self._template_dirs():
                        self._recreate(directory)
                        removed += 1
            case TemplateScope(name=name):
                directory = self.cache_root / name
                with self._scope_lock(name):
                    removed = 0
                    if directory.is_dir():
                        self._recreate(directory)
                        removed = 1
            case FilenameScope(name=name):
                removed = self._remove_filename(name)

        logger.info("cache_invalidated", scope=type(scope).__name__, removed=removed)
        return removed

    def _scope_lock(self, template: str | None):
        if self.leases is None:
            return nullcontext()
        return self.leases.scope(template)

    def _template_dirs(self) -> list[Path]:
        return sorted(
            entry
            for entry in self.cache_root.iterdir()
            if entry.is_dir() and not entry.name.startswith(".")
        )

    def _recreate(self, directory: Path) -> None:
        try:
            shutil.rmtree(directory)
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to clear cache directory {directory}: {e}") from e

    def _remove_filename(self, filename: str) -> int:
        # Full scan of the tree; clearing by filename is rare and not indexed.
        removed = 0
        for template_dir in self._template_dirs():
            for file_path in _iter_files(template_dir):
                if _artifact_filename(file_path.relative_to(template_dir)) != filename:
                    continue
                try:
                    file_path.unlink()
                except FileNotFoundError:
                    continue
                except OSError as e:
                    raise StorageError(f"Failed to remove cache file {file_path}: {e}") from e
                removed += 1
        return removed


def _iter_files(directory: Path) -> Iterator[Path]:
    for root, _, files in os.walk(directory):
        for name in files:
            if not name.startswith(TEMP_FILE_PREFIX):
                yield Path(root) / name


def _artifact_filename(relative: Path) -> str:
    """Source filename of an artifact, given its path below the template directory."""
    parts = relative.parts
    if len(parts) > 2 and _PREFIX_DIR.fullmatch(parts[0]) and _REST_DIR.fullmatch(parts[1]):
        return "/".join(parts[2:])
    return relative.as_posix()
