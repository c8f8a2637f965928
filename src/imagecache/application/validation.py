"""Request validation shared by the use cases.

Everything here runs before any filesystem or image work.
"""

from collections.abc import Container, Mapping
from pathlib import PurePosixPath
from typing import Any

from pydantic import ValidationError

from imagecache import config
from imagecache.domain.entities.params import GeometryParams
from imagecache.domain.exceptions import InvalidInputError, TemplateNotFoundError
from imagecache.shared.constants import (
    ALLOWED_EXTENSIONS,
    FILENAME_PATTERN,
    PARENT_DIR_TOKEN,
    TEMPLATE_PATTERN,
)


def validate_filename(filename: str) -> str:
    if not filename:
        raise InvalidInputError("Filename cannot be empty")
    if not FILENAME_PATTERN.fullmatch(filename):
        raise InvalidInputError(f"Filename contains invalid characters: {filename}")
    if PARENT_DIR_TOKEN in filename:
        raise InvalidInputError(f"Directory traversal attempt detected in filename: {filename}")
    if filename.startswith("/"):
        raise InvalidInputError(f"Filename must be relative: {filename}")

    extension = PurePosixPath(filename).suffix.lower().lstrip(".")
    if extension not in ALLOWED_EXTENSIONS:
        raise InvalidInputError(
            f"Invalid file extension: '{extension}'. "
            f"Allowed extensions: {', '.join(ALLOWED_EXTENSIONS)}"
        )
    return filename


def validate_template_name(template: str, registered: Container[str] | None = None) -> str:
    if not template:
        raise InvalidInputError("Template cannot be empty")
    if not TEMPLATE_PATTERN.fullmatch(template):
        raise InvalidInputError(f"Template contains invalid characters: {template}")
    if registered is not None and template not in registered:
        raise TemplateNotFoundError(f"Template not found in configuration: {template}")
    return template


def validate_params(
    params: GeometryParams | Mapping[str, Any] | None,
    app_config: config.ImageCacheConfig,
) -> GeometryParams:
    """Parse request parameters and check them against the configured ceilings."""
    if params is None:
        return GeometryParams()

    if isinstance(params, GeometryParams):
        parsed = params
    else:
        try:
            parsed = GeometryParams.model_validate(dict(params))
        except ValidationError as e:
            raise InvalidInputError(f"Invalid geometry parameters: {e}") from e

    ceilings = (
        ("max_size", parsed.max_size, app_config.max_size),
        ("max_width", parsed.max_width, app_config.max_width),
        ("max_height", parsed.max_height, app_config.max_height),
    )
    for name, value, allowed in ceilings:
        if value is not None and value > allowed:
            raise InvalidInputError(f"{name} exceeds allowed value ({allowed}): {value}")

    return parsed
