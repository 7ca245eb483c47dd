"""Unit tests for control models."""

import pytest
from pydantic import ValidationError

from banddesigner.models.controls import (
    CalculatedControl,
    FieldControl,
    LineControl,
    ShapeControl,
    TextControl,
    parse_control,
)


class TestParseControl:
    """Tests for discriminated control parsing."""

    def test_parse_by_type(self):
        assert isinstance(parse_control({"id": "t", "type": "text", "text": "Hi"}), TextControl)
        assert isinstance(parse_control({"id": "c", "type": "calculated", "formula": "1+1"}), CalculatedControl)
        assert isinstance(parse_control({"id": "s", "type": "ellipse"}), ShapeControl)

    def test_camel_case_payload(self):
        """Test that camelCase keys from saved designs are accepted."""
        control = parse_control(
            {"id": "f", "type": "field", "fieldName": "customer", "zIndex": 3, "printVisible": False}
        )
        assert isinstance(control, FieldControl)
        assert control.field_name == "customer"
        assert control.z_index == 3
        assert control.print_visible is False

    def test_dump_uses_camel_case(self):
        control = FieldControl(id="f", type="field", field_name="customer")
        payload = control.model_dump(by_alias=True)
        assert payload["fieldName"] == "customer"
        assert payload["zIndex"] == 1

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            parse_control({"id": "x", "type": "hologram"})

    def test_unknown_keys_preserved(self):
        """Test that style keys the model does not know survive a round trip."""
        control = parse_control({"id": "t", "type": "text", "fontSize": 14})
        assert control.model_dump(by_alias=True)["fontSize"] == 14

    def test_controls_are_immutable(self):
        control = TextControl(id="t", type="text")
        with pytest.raises(ValidationError):
            control.x = 5


class TestLineControl:
    """Tests for line controls."""

    def test_legacy_box_upgraded(self):
        """Test that an x/y/width/height line loads with endpoints."""
        line = parse_control({"id": "l", "type": "line", "x": 10, "y": 40, "width": 100, "height": 2})
        assert isinstance(line, LineControl)
        assert (line.x1, line.y1, line.x2, line.y2) == (10, 40, 110, 40)

    def test_explicit_endpoints_win(self):
        line = parse_control({"id": "l", "type": "line", "x": 0, "y": 0, "x1": 5, "y1": 5, "x2": 5, "y2": 50})
        assert (line.x1, line.y1, line.x2, line.y2) == (5, 5, 5, 50)

    def test_orientation(self):
        horizontal = LineControl(id="h", type="line", x1=0, y1=10, x2=50, y2=10)
        vertical = LineControl(id="v", type="line", x1=30, y1=0, x2=30, y2=40)
        assert horizontal.is_horizontal and not horizontal.is_vertical
        assert vertical.is_vertical and not vertical.is_horizontal

    def test_position_is_min_endpoint(self):
        line = LineControl(id="l", type="line", x1=50, y1=20, x2=10, y2=5)
        assert (line.x, line.y) == (10, 5)
