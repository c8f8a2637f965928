import abc
from collections.abc import Sequence
from pathlib import Path


class SourceLocator(abc.ABC):
    """Find original images by filename."""

    roots: Sequence[Path]

    @abc.abstractmethod
    def find(self, filename: str) -> Path | None:
        raise NotImplementedError
