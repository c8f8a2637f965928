"""Parametric crop template.

Runs up to three steps on the source image:

1. crop to explicit coordinates, unless absent or ``0,0,0,0``;
2. otherwise crop to an aspect ratio, centered, if one is given;
3. scale down to the requested ceilings.

A malformed coordinate or ratio string skips its own step with a
``geometry_step_skipped`` warning and the image continues unmodified to the
next step. Errors raised by the image operations themselves propagate.
"""

from typing import Self, final

from PIL.Image import Image

from imagecache.application.ports.outbound.imaging import ImageOperations
from imagecache.domain.entities.geometry import (
    CoordsOrder,
    Orientation,
    ScaleConstraints,
)
from imagecache.domain.entities.params import GeometryParams
from imagecache.domain.exceptions import InvalidGeometryError
from imagecache.domain.services.geometry import (
    clamp_rect,
    crop_to_ratio,
    parse_coords,
    parse_ratio,
    scale_target,
)
from imagecache.shared.logger import Logger, get_logger

logger: Logger = get_logger(__name__)


@final
class CropModifier:
    def __init__(
        self,
        operations: ImageOperations,
        constraints: ScaleConstraints,
        coords: str | None = None,
        ratio: str | None = None,
        coords_order: CoordsOrder = CoordsOrder.XYWH,
    ):
        self.operations = operations
        self.constraints = constraints
        self.coords = coords
        self.ratio = ratio
        self.coords_order = coords_order

    @classmethod
    def from_params(
        cls,
        operations: ImageOperations,
        params: GeometryParams,
        default_max_size: int | None = None,
        coords_order: CoordsOrder = CoordsOrder.XYWH,
    ) -> Self:
        """Build a modifier for one request.

        Args:
            operations: Image operations used for cropping and scaling
            params: Geometry requested by the caller
            default_max_size: Ceiling used when ``params`` carries none
            coords_order: Field order of ``params.coords``
        """
        constraints = ScaleConstraints(
            max_size=params.max_size,
            max_width=params.max_width,
            max_height=params.max_height,
        )
        if constraints.is_empty() and default_max_size is not None:
            constraints = ScaleConstraints(max_size=default_max_size)

        return cls(
            operations=operations,
            constraints=constraints,
            coords=params.coords,
            ratio=params.ratio,
            coords_order=coords_order,
        )

    def apply(self, image: Image) -> Image:
        cropped = False
        if self.coords:
            image, cropped = self._crop_to_coords(image, self.coords)

        if not cropped and self.ratio:
            image = self._crop_to_ratio(image, self.ratio)

        return self._scale_down(image)

    def _crop_to_coords(self, image: Image, coords: str) -> tuple[Image, bool]:
        try:
            rect = clamp_rect(
                parse_coords(coords, self.coords_order), image.width, image.height
            )
        except InvalidGeometryError as e:
            self._skip("coords", coords, e)
            return image, False

        if rect is None:
            return image, False

        logger.debug(
            "cropping_to_coords",
            x=rect.x,
            y=rect.y,
            width=rect.width,
            height=rect.height,
        )
        return self.operations.crop(image, rect), True

    def _crop_to_ratio(self, image: Image, ratio: str) -> Image:
        try:
            rect = crop_to_ratio(image.width, image.height, parse_ratio(ratio))
        except InvalidGeometryError as e:
            self._skip("ratio", ratio, e)
            return image

        if rect is None:
            return image
        return self.operations.crop(image, rect)

    def _scale_down(self, image: Image) -> Image:
        target = scale_target(
            image.width,
            image.height,
            Orientation.of(image.width, image.height),
            self.constraints,
        )
        if target is None:
            return image
        return self.operations.scale_down(image, target)

    def _skip(self, step: str, value: str, error: InvalidGeometryError) -> None:
        logger.warning(
            "geometry_step_skipped",
            step=step,
            value=value,
            error=str(error),
        )
