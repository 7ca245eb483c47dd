"""Data field declarations."""

from typing import Literal

from pydantic import Field

from banddesigner.models.base import DesignModel

FieldSource = Literal["master", "detail"]
FieldType = Literal["string", "number", "currency", "date"]


class DataField(DesignModel):
    """
    A field the host application can supply.

    Detail fields are usually named ``collection.field``: ``collection`` is the
    key of the row list in the dataset and ``field`` the key inside each row.
    """

    name: str = Field(..., min_length=1, description="Field name used in {name} references")
    label: str = Field(default="", description="Human-readable label")
    source: FieldSource = Field(default="master", description="Master record or detail rows")
    field_type: FieldType = Field(default="string", alias="type", description="Value type")

    @property
    def collection(self) -> str | None:
        """Detail collection key of a dotted detail field."""
        if self.source == "detail" and "." in self.name:
            return self.name.split(".", 1)[0]
        return None


def detail_collection_key(fields: list[DataField]) -> str | None:
    """Key of the detail row list, inferred from the first detail field."""
    for data_field in fields:
        if data_field.source == "detail":
            return data_field.collection
    return None
