from typing import TYPE_CHECKING, Protocol, runtime_checkable

from PIL.Image import Image

if TYPE_CHECKING:
    from imagecache.domain.entities.params import GeometryParams


@runtime_checkable
class ImageModifier(Protocol):
    """Executable behaviour bound to a template."""

    def apply(self, image: Image) -> Image: ...


class ModifierFactory(Protocol):
    """Build a fresh modifier for one request."""

    def __call__(self, params: "GeometryParams") -> ImageModifier: ...
