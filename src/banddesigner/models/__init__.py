"""Design models for BandDesigner."""

from banddesigner.models.band import Band, BandType, SummaryDisplayMode, default_bands
from banddesigner.models.controls import (
    BarcodeControl,
    BorderStyle,
    BoxedControl,
    CalculatedControl,
    ControlObject,
    CurrentDateControl,
    FieldControl,
    ImageControl,
    LineControl,
    PageNumberControl,
    ShapeControl,
    TextControl,
    parse_control,
)
from banddesigner.models.data_field import DataField, detail_collection_key
from banddesigner.models.design import DesignDocument
from banddesigner.models.page import PageSettings

__all__ = [
    "Band",
    "BandType",
    "BarcodeControl",
    "BorderStyle",
    "BoxedControl",
    "CalculatedControl",
    "ControlObject",
    "CurrentDateControl",
    "DataField",
    "DesignDocument",
    "FieldControl",
    "ImageControl",
    "LineControl",
    "PageNumberControl",
    "PageSettings",
    "ShapeControl",
    "SummaryDisplayMode",
    "TextControl",
    "default_bands",
    "detail_collection_key",
    "parse_control",
]
