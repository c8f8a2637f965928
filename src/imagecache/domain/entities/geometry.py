"""Geometry value types used by the crop and scale steps."""

from dataclasses import dataclass
from enum import Enum
from typing import Literal


class Orientation(Enum):
    LANDSCAPE = "landscape"
    PORTRAIT = "portrait"

    @classmethod
    def of(cls, width: int, height: int) -> "Orientation":
        """Portrait iff the image is taller than wide; squares are landscape."""
        return cls.PORTRAIT if height > width else cls.LANDSCAPE


class CoordsOrder(Enum):
    """Field order of a crop coordinate string."""

    XYWH = "xywh"
    WHXY = "whxy"


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    width: int
    height: int

    @property
    def box(self) -> tuple[int, int, int, int]:
        """Pillow style ``(left, upper, right, lower)`` box."""
        return (self.x, self.y, self.x + self.width, self.y + self.height)

    def is_empty(self) -> bool:
        return self.x == 0 and self.y == 0 and self.width == 0 and self.height == 0


@dataclass(frozen=True)
class Ratio:
    numerator: int
    denominator: int

    @property
    def value(self) -> float:
        return self.numerator / self.denominator


@dataclass(frozen=True)
class ScaleConstraints:
    max_size: int | None = None
    max_width: int | None = None
    max_height: int | None = None

    def is_empty(self) -> bool:
        return self.max_size is None and self.max_width is None and self.max_height is None


@dataclass(frozen=True)
class ScaleTarget:
    """Scale the ``axis`` side down to ``size`` pixels, keeping the aspect ratio."""

    axis: Literal["width", "height"]
    size: int
