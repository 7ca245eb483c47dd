"""Band model.

A band is a horizontal strip of the page. Bands are stacked top to bottom
in list order; ``actual_bottom`` is the draggable boundary and ``bottom``
mirrors it for older documents.
"""

from typing import Any, Literal

from pydantic import Field, model_validator

from banddesigner.models.base import DesignModel
from banddesigner.models.controls import ControlObject

BandType = Literal["header", "detail", "summary", "footer"]
SummaryDisplayMode = Literal["atEnd", "perPage", "perGroup"]


class Band(DesignModel):
    """A band and the controls it holds."""

    id: str = Field(..., min_length=1, description="Band ID")
    name: str = Field(default="", description="Display name")
    type: BandType = Field(..., description="Band type")
    top: float = Field(default=0, description="Top edge on the design surface")
    bottom: float = Field(default=0, description="Legacy copy of actual_bottom")
    actual_bottom: float = Field(default=0, description="Draggable bottom boundary")
    visible: bool = True
    objects: tuple[ControlObject, ...] = ()
    row_height_formula: str | None = Field(None, description="Per-row height formula")
    background_color_formula: str | None = Field(None, description="Per-row background formula")
    background_color: str | None = None
    summary_display_mode: SummaryDisplayMode = "atEnd"

    @model_validator(mode="before")
    @classmethod
    def default_actual_bottom(cls, data: Any) -> Any:
        """Older documents only carry ``bottom``."""
        if isinstance(data, dict) and "actualBottom" not in data and "actual_bottom" not in data:
            if "bottom" in data:
                data = {**data, "actualBottom": data["bottom"]}
        return data

    @property
    def height(self) -> float:
        return self.actual_bottom - self.top

    def find_object(self, object_id: str) -> ControlObject | None:
        return next((obj for obj in self.objects if obj.id == object_id), None)


def default_bands(spacing: float = 20) -> tuple[Band, ...]:
    """The four empty bands of a new design."""
    layout = (
        ("header", "Header", 50),
        ("detail", "Detail", 60),
        ("summary", "Summary", 70),
        ("footer", "Footer", 60),
    )
    bands = []
    top = 0.0
    for band_type, name, height in layout:
        bands.append(
            Band(
                id=band_type,
                name=name,
                type=band_type,
                top=top,
                bottom=top + height,
                actual_bottom=top + height,
            )
        )
        top += height + spacing
    return tuple(bands)
