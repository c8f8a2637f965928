"""Pillow implementation of the image operations port."""

import io
from pathlib import Path
from typing import final, override

from PIL import Image, ImageOps

from imagecache.application.ports.outbound.imaging import ImageOperations
from imagecache.domain.entities.geometry import Rect, ScaleTarget
from imagecache.domain.services.geometry import scaled_size

_FORMATS: dict[str, str] = {
    "jpg": "JPEG",
    "jpeg": "JPEG",
    "png": "PNG",
    "gif": "GIF",
    "webp": "WEBP",
}


@final
class PillowImageOperations(ImageOperations):
    def __init__(
        self,
        resample: Image.Resampling = Image.Resampling.LANCZOS,
        save_kwargs: dict[str, dict[str, int | bool]] | None = None,
    ):
        self.resample = resample
        self.save_kwargs = save_kwargs or {"JPEG": {"quality": 90}, "WEBP": {"quality": 90}}

    @override
    def decode(self, path: Path) -> Image.Image:
        """Load ``path`` fully, upright according to its EXIF orientation."""
        with Image.open(path) as image:
            image.load()
            return ImageOps.exif_transpose(image)

    @override
    def encode(self, image: Image.Image, extension: str) -> bytes:
        image_format = _FORMATS.get(extension.lower().lstrip("."))
        if image_format is None:
            raise ValueError(f"Unsupported output extension: {extension}")

        image_to_save = image
        if image_format == "JPEG" and image.mode not in ("RGB", "L"):
            image_to_save = image.convert("RGB")

        buffer = io.BytesIO()
        try:
            image_to_save.save(buffer, format=image_format, **self.save_kwargs.get(image_format, {}))
            return buffer.getvalue()
        finally:
            if image_to_save is not image:
                image_to_save.close()
            buffer.close()

    @override
    def crop(self, image: Image.Image, rect: Rect) -> Image.Image:
        return image.crop(rect.box)

    @override
    def scale_down(self, image: Image.Image, target: ScaleTarget) -> Image.Image:
        size = scaled_size(image.width, image.height, target)
        if size == image.size:
            return image
        return image.resize(size, self.resample)

    @override
    def cover(self, image: Image.Image, width: int, height: int) -> Image.Image:
        return ImageOps.fit(image, (width, height), method=self.resample)
