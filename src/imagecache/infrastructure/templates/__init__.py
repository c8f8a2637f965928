from imagecache.infrastructure.templates.crop import CropModifier
from imagecache.infrastructure.templates.fixed_scale import CoverModifier, FixedScaleModifier
from imagecache.infrastructure.templates.registry import (
    TemplateRegistry,
    build_default_registry,
)

__all__ = [
    "CoverModifier",
    "CropModifier",
    "FixedScaleModifier",
    "TemplateRegistry",
    "build_default_registry",
]
