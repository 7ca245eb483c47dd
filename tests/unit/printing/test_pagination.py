"""Unit tests for page breaking."""

import pytest

from banddesigner.core.config import get_settings
from banddesigner.models.band import Band
from banddesigner.models.controls import TextControl
from banddesigner.models.page import PageSettings
from banddesigner.printing.pagination import Pagination, detail_row_metrics, find_band, paginate


def _page(height: float) -> PageSettings:
    return PageSettings(width=500, height=height)


class TestDetailRowMetrics:
    """Tests for detail_row_metrics."""

    def test_offset_trimmed_from_row(self, sample_bands):
        # first detail control sits 5px below the band top
        assert detail_row_metrics(sample_bands[1]) == (25, 5)

    def test_controls_outside_band_ignored(self):
        band = Band(
            id="detail",
            type="detail",
            top=100,
            bottom=140,
            objects=(
                TextControl(id="in", type="text", y=110),
                TextControl(id="out", type="text", y=90),
            ),
        )
        assert detail_row_metrics(band) == (30, 10)

    def test_empty_band(self):
        band = Band(id="detail", type="detail", top=0, bottom=30)
        assert detail_row_metrics(band) == (30, 0)

    def test_zero_height_band_uses_default_row_height(self):
        band = Band(id="detail", type="detail", top=100, bottom=100)
        assert detail_row_metrics(band) == (get_settings().default_band_height, 0)


class TestPaginate:
    """Tests for paginate."""

    def test_single_page(self, sample_bands):
        result = paginate(sample_bands, 3, _page(300))
        assert result.rows_per_page == 10
        assert result.total_pages == 1
        assert not result.has_footer_only_page

    def test_rows_fill_pages(self, sample_bands):
        result = paginate(sample_bands, 25, _page(300))
        assert result.total_pages == 3
        assert result.row_range(3) == range(20, 25)

    def test_summary_and_footer_spill_together(self, sample_bands):
        # a full last page leaves no room for either band
        result = paginate(sample_bands, 10, _page(300))
        assert result.total_pages == 2
        assert not result.has_footer_only_page
        assert result.summary_page() == 2
        assert result.row_range(2) == range(0)

    def test_footer_only_page(self, sample_bands):
        # 75px left: the 40px summary fits, summary plus footer does not
        result = paginate(sample_bands, 7, _page(300))
        assert result.total_pages == 2
        assert result.has_footer_only_page
        assert result.is_footer_only(2)
        assert result.summary_page() == 1
        assert result.pages_with_detail == 1

    def test_per_page_summary_reserves_space(self, sample_bands):
        bands = list(sample_bands)
        bands[2] = bands[2].model_copy(update={"summary_display_mode": "perPage"})
        assert paginate(bands, 3, _page(300)).rows_per_page == 8

    def test_no_rows(self, sample_bands):
        result = paginate(sample_bands, 0, _page(300))
        assert result.total_pages == 1
        assert result.row_range(1) == range(0)

    def test_at_least_one_row_per_page(self, sample_bands):
        assert paginate(sample_bands, 3, _page(60)).rows_per_page == 1

    def test_without_detail_band(self, sample_bands):
        bands = [band for band in sample_bands if band.type != "detail"]
        result = paginate(bands, 4, _page(300))
        assert result == Pagination(4, 0, 1, 0, 0)
        assert result.row_range(1) == range(4)

    def test_hidden_bands_ignored(self, sample_bands):
        bands = list(sample_bands)
        bands[0] = bands[0].model_copy(update={"visible": False})
        assert find_band(bands, "header") is None
        assert paginate(bands, 3, _page(300)).rows_per_page == 12


class TestPagination:
    @pytest.mark.parametrize("row_index,page", [(0, 1), (9, 1), (10, 2), (24, 3)])
    def test_page_of_row(self, row_index, page):
        assert Pagination(25, 10, 3, 25, 5).page_of_row(row_index) == page
