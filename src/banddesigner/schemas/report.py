"""Report rendering schemas for request/response validation."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from banddesigner.models.data_field import DataField
from banddesigner.models.design import DesignDocument
from banddesigner.models.page import PageSettings


class RenderRequest(BaseModel):
    """Schema for rendering a design against a dataset."""

    design: DesignDocument
    data: dict[str, Any] = Field(
        default_factory=dict, description="Master record holding the detail row list"
    )
    fields: list[DataField] = Field(default_factory=list, description="Declared data fields")
    page: Optional[PageSettings] = Field(None, description="Page size; A4 when omitted")


class RenderedObjectSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    type: str
    x: float
    y: float
    width: float
    height: float
    z_index: int
    text: str


class RenderedRowSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    row_index: int
    top: float
    height: float
    background: Optional[str] = None
    objects: list[RenderedObjectSchema]


class RenderedSectionSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    band_id: str
    band_type: str
    top: float
    height: float
    background: Optional[str] = None
    objects: list[RenderedObjectSchema]
    rows: list[RenderedRowSchema]


class RenderedPageSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    page_number: int
    total_pages: int
    sections: list[RenderedSectionSchema]


class RenderResponse(BaseModel):
    """Schema for a rendered report."""

    total_pages: int
    rows_per_page: int
    detail_key: str = Field(..., description="Key of the detail row list in the data")
    pages: list[RenderedPageSchema]
    warnings: list[str] = Field(default_factory=list)
