from collections.abc import Sequence
from pathlib import Path
from typing import Self, final, override

from imagecache import config
from imagecache.application.ports.outbound.storage import SourceLocator
from imagecache.shared.logger import Logger, get_logger

logger: Logger = get_logger(__name__)


@final
class FilesystemSourceLocator(SourceLocator):
    """Scan source roots in order; the first existing ``root/filename`` wins."""

    def __init__(self, roots: Sequence[Path]):
        self.roots = tuple(roots)

    @classmethod
    def from_config(cls, app_config: config.ImageCacheConfig) -> Self:
        return cls(roots=app_config.source_roots)

    @override
    def find(self, filename: str) -> Path | None:
        for root in self.roots:
            candidate = root / filename
            if candidate.is_file():
                logger.debug("source_image_found", filename=filename, root=str(root))
                return candidate
        return None
