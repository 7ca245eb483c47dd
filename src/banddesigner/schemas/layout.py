"""Layout schemas for request/response validation."""

from typing import Optional

from pydantic import BaseModel, Field

from banddesigner.geometry.alignment import AlignMode, DistributeAxis, SizeDimension
from banddesigner.models.band import Band


class LayoutRequest(BaseModel):
    """Base schema for requests that operate on a set of bands."""

    bands: list[Band] = Field(..., description="Bands in display order")


class SelectionRequest(LayoutRequest):
    """Base schema for requests that operate on selected controls."""

    selection: list[str] = Field(
        ..., min_length=1, description="Selected control IDs; the first is the reference"
    )


class BoundaryDragRequest(LayoutRequest):
    """Schema for dragging a band's bottom boundary."""

    band_id: str = Field(..., description="Band whose boundary is dragged")
    delta: float = Field(..., description="Total pointer movement in px")
    spacing: Optional[float] = Field(None, ge=0, description="Minimum gap between bands")


class AlignRequest(SelectionRequest):
    mode: AlignMode


class DistributeRequest(SelectionRequest):
    axis: DistributeAxis


class SameSizeRequest(SelectionRequest):
    dimension: SizeDimension


class ReorderRequest(LayoutRequest):
    """Schema for a drag-and-drop in the layer list."""

    band_id: str
    moved_id: str = Field(..., description="Control being dragged")
    target_id: str = Field(..., description="Control whose slot it is dropped on")


class MarqueeRequest(LayoutRequest):
    """Schema for a marquee selection."""

    x: float
    y: float
    width: float = Field(..., description="May be negative when dragging left")
    height: float = Field(..., description="May be negative when dragging up")
    existing: list[str] = Field(default_factory=list, description="Current selection")
    additive: bool = Field(default=False, description="Shift/Ctrl held")
    offset_x: float = Field(default=0, description="Added to every control's x")
    offset_y: float = Field(default=0, description="Added to every control's y")


class LayoutResponse(BaseModel):
    """Schema for the resulting bands."""

    bands: list[Band]


class MarqueeResponse(BaseModel):
    selection: list[str]
