"""Unit tests for bands and design documents."""

from banddesigner.models.band import Band, default_bands
from banddesigner.models.controls import LineControl, TextControl
from banddesigner.models.data_field import DataField, detail_collection_key
from banddesigner.models.design import DesignDocument
from banddesigner.models.page import PageSettings


class TestBand:
    """Tests for Band."""

    def test_actual_bottom_defaults_to_bottom(self):
        band = Band.model_validate({"id": "b", "type": "detail", "top": 10, "bottom": 60})
        assert band.actual_bottom == 60
        assert band.height == 50

    def test_find_object(self):
        band = Band(id="b", type="header", objects=(TextControl(id="t", type="text"),))
        assert band.find_object("t").id == "t"
        assert band.find_object("missing") is None

    def test_default_bands(self):
        bands = default_bands(spacing=20)
        assert [b.type for b in bands] == ["header", "detail", "summary", "footer"]
        assert [(b.top, b.actual_bottom) for b in bands] == [(0, 50), (70, 130), (150, 220), (240, 300)]


class TestDataField:
    """Tests for DataField."""

    def test_collection(self):
        assert DataField(name="products.qty", source="detail").collection == "products"
        assert DataField(name="qty", source="detail").collection is None
        assert DataField(name="a.b", source="master").collection is None

    def test_detail_collection_key(self, sample_fields):
        assert detail_collection_key(sample_fields) == "products"
        assert detail_collection_key([DataField(name="x")]) is None


class TestPageSettings:
    def test_usable_area(self):
        page = PageSettings(width=800, height=1000, margin_top=40, margin_bottom=60, margin_left=10, margin_right=10)
        assert page.usable_height == 900
        assert page.usable_width == 780

    def test_default_is_a4(self):
        page = PageSettings.default()
        assert (page.width, page.height) == (794, 1123)


class TestDesignDocument:
    """Tests for saving and loading designs."""

    def test_json_round_trip(self, sample_bands):
        document = DesignDocument(bands=tuple(sample_bands))
        loaded = DesignDocument.from_json(document.to_json())
        assert loaded == document
        assert isinstance(loaded.find_band("detail").objects[2], LineControl)

    def test_saved_json_is_camel_case(self):
        document = DesignDocument()
        text = document.to_json().decode()
        assert '"actualBottom"' in text
        assert '"createdAt"' in text

    def test_legacy_design_loads(self):
        """Test a design saved before lines had endpoints and bands had actualBottom."""
        payload = {
            "version": "1.0",
            "bands": [
                {
                    "id": "header",
                    "type": "header",
                    "top": 0,
                    "bottom": 50,
                    "objects": [{"id": "l1", "type": "line", "x": 0, "y": 25, "width": 200, "height": 1}],
                }
            ],
        }
        document = DesignDocument.model_validate(payload)
        band = document.find_band("header")
        assert band.actual_bottom == 50
        assert band.objects[0].x2 == 200
