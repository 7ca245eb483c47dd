"""Control objects placed inside bands.

A control is one variant of a discriminated union keyed on ``type``. Boxed
controls share a rectangle (x, y, width, height); lines are described by
their two endpoints instead.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import Field, TypeAdapter, model_validator

from banddesigner.models.base import DesignModel

FormatType = Literal["number", "currency", "percent", "text"]


class BorderStyle(DesignModel):
    """Border of a boxed control."""

    width: float | None = Field(None, ge=0, description="Border width in px")
    style: Literal["solid", "dashed", "dotted", "none"] | None = None
    color: str | None = None


# =============================================================================
# Boxed Controls
# =============================================================================


class BoxedControl(DesignModel):
    """Fields shared by every rectangular control."""

    id: str = Field(..., min_length=1, description="Control ID, unique within the design")
    x: float = Field(default=0, description="Left edge on the design surface")
    y: float = Field(default=0, description="Top edge on the design surface")
    width: float = Field(default=100, description="Content width in px")
    height: float = Field(default=30, description="Content height in px")
    z_index: int = Field(default=1, description="Paint order, higher is on top")
    print_visible: bool = Field(default=True, description="Whether the control is printed")
    border: BorderStyle | None = None


class TextControl(BoxedControl):
    type: Literal["text", "multiline_text"]
    text: str = ""


class FieldControl(BoxedControl):
    type: Literal["field"]
    field_name: str | None = None
    text: str = Field(default="", description="Fallback text when the field has no value")
    format_type: FormatType = "text"
    decimal_places: int = Field(default=2, ge=0)


class CalculatedControl(BoxedControl):
    type: Literal["calculated"]
    formula: str = ""
    text: str = Field(default="", description="Fallback text when a referenced field is missing")
    format_type: FormatType = "text"
    decimal_places: int = Field(default=2, ge=0)


class ImageControl(BoxedControl):
    type: Literal["image"]
    src: str | None = None
    object_fit: Literal["contain", "cover", "fill", "none", "repeat"] = "contain"


class ShapeControl(BoxedControl):
    type: Literal["rectangle", "ellipse", "star", "triangle", "diamond"]
    background: str | None = None


class PageNumberControl(BoxedControl):
    type: Literal["page_number"]
    text: str = Field(default="{page}/{total}", description="Format with {page} and {total}")


class CurrentDateControl(BoxedControl):
    type: Literal["current_date"]
    text: str = Field(default="yyyy-MM-dd", description="Date format")


class BarcodeControl(BoxedControl):
    type: Literal["barcode", "qrcode"]
    field_name: str | None = None
    text: str = ""
    barcode_type: str | None = None


# =============================================================================
# Line Control
# =============================================================================


class LineControl(DesignModel):
    """A straight line between two points."""

    id: str = Field(..., min_length=1)
    type: Literal["line"]
    x1: float = 0
    y1: float = 0
    x2: float = 100
    y2: float = 0
    z_index: int = 1
    print_visible: bool = True
    stroke_width: float = Field(default=1, ge=0)
    line_style: Literal["solid", "dashed", "dotted"] = "solid"
    color: str = "#000000"

    @model_validator(mode="before")
    @classmethod
    def upgrade_legacy_box(cls, data: Any) -> Any:
        """Derive missing endpoints from a legacy x/y/width/height box."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        x = data.pop("x", None)
        y = data.pop("y", None)
        width = data.pop("width", None)
        data.pop("height", None)
        if x is not None:
            data.setdefault("x1", x)
            data.setdefault("x2", x + (width or 0))
        if y is not None:
            data.setdefault("y1", y)
            data.setdefault("y2", y)
        return data

    @property
    def x(self) -> float:
        return min(self.x1, self.x2)

    @property
    def y(self) -> float:
        return min(self.y1, self.y2)

    @property
    def is_horizontal(self) -> bool:
        return self.y1 == self.y2

    @property
    def is_vertical(self) -> bool:
        return self.x1 == self.x2


ControlObject = Annotated[
    Union[
        TextControl,
        FieldControl,
        CalculatedControl,
        ImageControl,
        ShapeControl,
        PageNumberControl,
        CurrentDateControl,
        BarcodeControl,
        LineControl,
    ],
    Field(discriminator="type"),
]

BOXED_CONTROL_TYPES = (
    TextControl,
    FieldControl,
    CalculatedControl,
    ImageControl,
    ShapeControl,
    PageNumberControl,
    CurrentDateControl,
    BarcodeControl,
)

control_adapter: TypeAdapter[ControlObject] = TypeAdapter(ControlObject)


def parse_control(data: Any) -> ControlObject:
    """Validate a control payload into its variant."""
    return control_adapter.validate_python(data)
