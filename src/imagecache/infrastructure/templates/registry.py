"""Template name to modifier factory bindings.

The registry is filled once at startup and frozen; afterwards it is only
read, so it can be shared between threads without locking.
"""

from collections.abc import Iterator, Mapping
from functools import partial
from types import MappingProxyType
from typing import final

from imagecache import config
from imagecache.application.ports.outbound.imaging import ImageOperations
from imagecache.domain.entities.params import GeometryParams
from imagecache.domain.exceptions import TemplateNotFoundError
from imagecache.domain.protocols import ImageModifier, ModifierFactory
from imagecache.infrastructure.templates.crop import CropModifier
from imagecache.infrastructure.templates.fixed_scale import (
    CoverModifier,
    FixedScaleModifier,
)
from imagecache.shared.logger import Logger, get_logger

logger: Logger = get_logger(__name__)

# name -> (max_width, max_height)
FIXED_SCALE_TEMPLATES: Mapping[str, tuple[int, int]] = MappingProxyType(
    {
        "xsmall": (240, 240),
        "small": (800, 600),
        "medium": (1200, 675),
        "large": (1600, 900),
        "xlarge": (2000, 1125),
        "xxlarge": (2400, 1350),
        "huge": (3000, 1688),
    }
)
THUMBNAIL_SIZE = 300
CROP_TEMPLATE = "crop"


@final
class TemplateRegistry:
    def __init__(self) -> None:
        self._factories: dict[str, ModifierFactory] = {}
        self._frozen = False

    def register(self, name: str, factory: ModifierFactory) -> None:
        if self._frozen:
            raise RuntimeError(f"Cannot register template '{name}' on a frozen registry")
        if name in self._factories:
            logger.warning("template_overwritten", template=name)
        self._factories[name] = factory

    def resolve(self, name: str) -> ModifierFactory:
        try:
            return self._factories[name]
        except KeyError:
            raise TemplateNotFoundError(
                f"Template '{name}' is not registered. "
                f"Registered templates: {sorted(self._factories)}"
            ) from None

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def names(self) -> list[str]:
        return sorted(self._factories)

    def __contains__(self, name: object) -> bool:
        return name in self._factories

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self._factories)


def _fixed_scale(
    operations: ImageOperations, max_width: int, max_height: int, params: GeometryParams
) -> ImageModifier:
    return FixedScaleModifier(operations, max_width=max_width, max_height=max_height)


def _cover(operations: ImageOperations, size: int, params: GeometryParams) -> ImageModifier:
    return CoverModifier(operations, width=size, height=size)


def _crop(
    operations: ImageOperations,
    app_config: config.ImageCacheConfig,
    params: GeometryParams,
) -> ImageModifier:
    return CropModifier.from_params(
        operations,
        params,
        default_max_size=app_config.crop_default_max_size,
        coords_order=app_config.coords_order,
    )


def build_default_registry(
    app_config: config.ImageCacheConfig,
    operations: ImageOperations,
    freeze: bool = True,
) -> TemplateRegistry:
    """Register the built-in templates.

    Args:
        app_config: Supplies the crop template's default ceiling and
            coordinate order
        operations: Image operations shared by every modifier
        freeze: Freeze the registry before returning it

    Returns:
        Registry with the fixed-scale templates, ``thumbnail`` and ``crop``
    """
    registry = TemplateRegistry()
    for name, (max_width, max_height) in FIXED_SCALE_TEMPLATES.items():
        registry.register(name, partial(_fixed_scale, operations, max_width, max_height))
    registry.register("thumbnail", partial(_cover, operations, THUMBNAIL_SIZE))
    registry.register(CROP_TEMPLATE, partial(_crop, operations, app_config))

    if freeze:
        registry.freeze()
    return registry
