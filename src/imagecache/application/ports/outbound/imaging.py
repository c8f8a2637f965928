import abc
from pathlib import Path

from PIL.Image import Image

from imagecache.domain.entities.geometry import Rect, ScaleTarget


class ImageOperations(abc.ABC):
    """Codec and pixel operations the templates are built from."""

    @abc.abstractmethod
    def decode(self, path: Path) -> Image:
        raise NotImplementedError

    @abc.abstractmethod
    def encode(self, image: Image, extension: str) -> bytes:
        raise NotImplementedError

    @abc.abstractmethod
    def crop(self, image: Image, rect: Rect) -> Image:
        raise NotImplementedError

    @abc.abstractmethod
    def scale_down(self, image: Image, target: ScaleTarget) -> Image:
        raise NotImplementedError

    @abc.abstractmethod
    def cover(self, image: Image, width: int, height: int) -> Image:
        raise NotImplementedError
