"""Pure geometry used by the crop template.

Coordinate strings use the ``x,y,width,height`` field order unless a
deployment explicitly configures ``width,height,x,y``; one order is active at
a time and the other is never tried as a fallback.

All functions here are free of I/O and raise ``InvalidGeometryError`` on bad
input. Callers decide whether that aborts or merely skips a step.
"""

import re

from imagecache.domain.entities.geometry import (
    CoordsOrder,
    Orientation,
    Ratio,
    Rect,
    ScaleConstraints,
    ScaleTarget,
)
from imagecache.domain.exceptions import InvalidGeometryError
from imagecache.shared.constants import RATIO_TOLERANCE

_COORDS_PATTERN = re.compile(r"^(\d+),(\d+),(\d+),(\d+)$")
_RATIO_PATTERN = re.compile(r"^(\d+)\s*[:xX]\s*(\d+)$")


def parse_coords(value: str, order: CoordsOrder = CoordsOrder.XYWH) -> Rect:
    """Parse a four field coordinate string into a ``Rect``.

    Args:
        value: Comma separated non-negative integers, e.g. ``"100,150,200,300"``.
        order: Field order of ``value``.

    Returns:
        The parsed rectangle, not yet clamped to any image.

    Raises:
        InvalidGeometryError: If ``value`` is not exactly four integers.
    """
    match = _COORDS_PATTERN.match(value.strip())
    if match is None:
        raise InvalidGeometryError(
            f"Invalid coordinates '{value}', expected {_describe_order(order)}"
        )

    first, second, third, fourth = (int(group) for group in match.groups())
    if order is CoordsOrder.XYWH:
        return Rect(x=first, y=second, width=third, height=fourth)
    return Rect(x=third, y=fourth, width=first, height=second)


def _describe_order(order: CoordsOrder) -> str:
    if order is CoordsOrder.XYWH:
        return "x,y,width,height"
    return "width,height,x,y"


def clamp_rect(rect: Rect, image_width: int, image_height: int) -> Rect | None:
    """Fit a crop rectangle inside an image.

    Returns ``None`` for the ``0,0,0,0`` sentinel, meaning no crop was
    requested. Non-positive sizes are raised to one pixel and sizes that run
    past the right or bottom edge are shortened to end on it.

    Raises:
        InvalidGeometryError: If the origin lies outside the image.
    """
    if rect.is_empty():
        return None

    if image_width < 1 or image_height < 1:
        raise InvalidGeometryError(f"Cannot crop an image of {image_width}x{image_height}")

    if rect.x >= image_width or rect.y >= image_height:
        raise InvalidGeometryError(
            f"Crop origin ({rect.x}, {rect.y}) lies outside a "
            f"{image_width}x{image_height} image"
        )

    width = max(rect.width, 1)
    height = max(rect.height, 1)

    if rect.x + width > image_width:
        width = image_width - rect.x
    if rect.y + height > image_height:
        height = image_height - rect.y

    return Rect(x=rect.x, y=rect.y, width=width, height=height)


def parse_ratio(value: str) -> Ratio:
    """Parse ``"16:9"`` or ``"16x9"`` into a ``Ratio``.

    Raises:
        InvalidGeometryError: If the string is malformed or a side is zero.
    """
    match = _RATIO_PATTERN.match(value.strip())
    if match is None:
        raise InvalidGeometryError(
            f"Invalid ratio '{value}', expected width:height or width x height"
        )

    numerator, denominator = int(match.group(1)), int(match.group(2))
    if numerator <= 0 or denominator <= 0:
        raise InvalidGeometryError(f"Ratio sides must be positive: '{value}'")

    return Ratio(numerator=numerator, denominator=denominator)


def crop_to_ratio(image_width: int, image_height: int, ratio: Ratio) -> Rect | None:
    """Compute the centered crop that gives an image the target ratio.

    The side that is too long is shortened and the crop is centered along
    it. Returns ``None`` when the image already has the ratio, either within
    ``RATIO_TOLERANCE`` or because rounding would reproduce the current size,
    so applying the result twice never crops twice.
    """
    if image_width < 1 or image_height < 1:
        raise InvalidGeometryError(f"Cannot crop an image of {image_width}x{image_height}")

    target = ratio.value
    current = image_width / image_height

    if abs(current - target) <= RATIO_TOLERANCE:
        return None
    if round(image_height * target) == image_width or round(image_width / target) == image_height:
        return None

    if current > target:
        new_width = max(1, round(image_height * target))
        if new_width >= image_width:
            return None
        return Rect(
            x=(image_width - new_width) // 2,
            y=0,
            width=new_width,
            height=image_height,
        )

    new_height = max(1, round(image_width / target))
    if new_height >= image_height:
        return None
    return Rect(
        x=0,
        y=(image_height - new_height) // 2,
        width=image_width,
        height=new_height,
    )


def scale_target(
    width: int,
    height: int,
    orientation: Orientation,
    constraints: ScaleConstraints,
) -> ScaleTarget | None:
    """Pick the side to scale down and its target size.

    ``max_size`` wins when set and bounds the longer side. Otherwise
    landscape images are bounded by ``max_width`` and portrait images by
    ``max_height``, each falling back to the other ceiling when unset.

    Returns ``None`` when no ceiling applies or the image already fits; images
    are never scaled up.
    """
    if constraints.max_size is not None:
        if width >= height:
            target = ScaleTarget(axis="width", size=constraints.max_size)
        else:
            target = ScaleTarget(axis="height", size=constraints.max_size)
    elif orientation is Orientation.LANDSCAPE:
        target = _first_target(
            ("width", constraints.max_width), ("height", constraints.max_height)
        )
    else:
        target = _first_target(
            ("height", constraints.max_height), ("width", constraints.max_width)
        )

    if target is None:
        return None

    current = width if target.axis == "width" else height
    if current <= target.size:
        return None
    return target


def _first_target(*candidates: tuple[str, int | None]) -> ScaleTarget | None:
    for axis, size in candidates:
        if size is not None:
            return ScaleTarget(axis="width" if axis == "width" else "height", size=size)
    return None


def scaled_size(width: int, height: int, target: ScaleTarget) -> tuple[int, int]:
    """Size of an image after scaling ``target.axis`` to ``target.size``."""
    if target.axis == "width":
        return target.size, max(1, round(height * target.size / width))
    return max(1, round(width * target.size / height)), target.size
