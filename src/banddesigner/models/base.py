"""Base class for design models."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class DesignModel(BaseModel):
    """
    Immutable model serialized with camelCase keys.

    Unknown keys (font, colour and other styling the canvas owns) are kept
    so a design round-trips unchanged.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_payload(self) -> dict:
        """Serialize to the camelCase JSON-compatible shape."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
