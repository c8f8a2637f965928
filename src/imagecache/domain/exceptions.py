"""Error taxonomy of the image cache.

Every public error carries an HTTP-like ``status_code`` and a
``public_message`` that a front-end can show without leaking internals.
"""


class ImageCacheError(Exception):
    """Base class for all image cache failures."""

    status_code: int = 500
    public_message: str = "Internal server error"


class InvalidInputError(ImageCacheError):
    """Raise when a filename, template name or geometry parameter is rejected."""

    status_code = 400
    public_message = "Invalid input"


class TemplateNotFoundError(InvalidInputError):
    """Raise when a template name is not registered."""

    pass


class SourceImageNotFoundError(ImageCacheError):
    """Raise when the source image is absent from every source root."""

    status_code = 404
    public_message = "Image not found"


class ProcessingError(ImageCacheError):
    """Raise when decoding, transforming or encoding an image fails."""

    pass


class StorageError(ImageCacheError):
    """Raise when the cache tree cannot be written."""

    pass


class InvalidGeometryError(ValueError):
    """Raise when a coordinate or ratio string cannot be used.

    Never escapes a modifier: the affected geometry step is skipped instead.
    """

    pass
