"""Runtime parameters of a cached image request."""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, PositiveInt


class GeometryParams(BaseModel):
    """Geometry requested for one image.

    Accepts both snake_case names and the camelCase names used in URLs
    (``maxSize``, ``maxWidth``, ``maxHeight``). Ceiling limits are checked
    against the configuration by the request validator, not here.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    max_size: PositiveInt | None = Field(
        default=None, validation_alias=AliasChoices("max_size", "maxSize")
    )
    max_width: PositiveInt | None = Field(
        default=None, validation_alias=AliasChoices("max_width", "maxWidth")
    )
    max_height: PositiveInt | None = Field(
        default=None, validation_alias=AliasChoices("max_height", "maxHeight")
    )
    coords: str | None = None
    ratio: str | None = None

    def canonical(self) -> dict[str, Any]:
        """Parameters that were actually supplied, keyed by field name."""
        return self.model_dump(exclude_none=True)

    def is_empty(self) -> bool:
        return not self.canonical()
