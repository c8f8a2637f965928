from typing import final

from PIL.Image import Image

from imagecache.application.ports.outbound.imaging import ImageOperations
from imagecache.domain.entities.geometry import Orientation, ScaleConstraints
from imagecache.domain.services.geometry import scale_target


@final
class FixedScaleModifier:
    """Scale landscape images to ``max_width`` and portrait images to ``max_height``."""

    def __init__(self, operations: ImageOperations, max_width: int, max_height: int):
        self.operations = operations
        self.constraints = ScaleConstraints(max_width=max_width, max_height=max_height)

    def apply(self, image: Image) -> Image:
        target = scale_target(
            image.width,
            image.height,
            Orientation.of(image.width, image.height),
            self.constraints,
        )
        if target is None:
            return image
        return self.operations.scale_down(image, target)


@final
class CoverModifier:
    """Crop and resize to exactly ``width`` x ``height``, centered."""

    def __init__(self, operations: ImageOperations, width: int, height: int):
        self.operations = operations
        self.width = width
        self.height = height

    def apply(self, image: Image) -> Image:
        return self.operations.cover(image, self.width, self.height)
