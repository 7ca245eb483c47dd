"""Page breaking for printed reports.

Every page repeats the header band (and a per-page summary). Detail rows
fill the remaining height; the end-of-report summary and the footer follow
the last row, spilling onto one extra page when they do not fit.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass

from banddesigner.core.config import get_settings
from banddesigner.models.band import Band, BandType
from banddesigner.models.page import PageSettings


@dataclass(frozen=True)
class Pagination:
    """
    Result of page breaking.

    Attributes:
        row_count: Number of detail rows in the dataset
        rows_per_page: Detail rows printed on a full page, 0 without a detail band
        total_pages: Number of printed pages, at least 1
        single_row_height: Height of one printed detail row
        min_top_offset: Empty space above the first control of the detail band,
            dropped when rows are printed
        has_footer_only_page: Whether the last page holds only the footer
    """

    row_count: int
    rows_per_page: int
    total_pages: int
    single_row_height: float
    min_top_offset: float
    has_footer_only_page: bool = False

    @property
    def pages_with_detail(self) -> int:
        if self.has_footer_only_page:
            return max(self.total_pages - 1, 1)
        return self.total_pages

    def row_range(self, page_number: int) -> range:
        """Global indexes of the detail rows printed on a page."""
        if self.rows_per_page <= 0:
            return range(self.row_count) if page_number == 1 else range(0)
        if page_number > self.pages_with_detail:
            return range(0)
        start = (page_number - 1) * self.rows_per_page
        return range(min(start, self.row_count), min(start + self.rows_per_page, self.row_count))

    def page_of_row(self, row_index: int) -> int:
        """1-based page that prints a global row index."""
        if self.rows_per_page <= 0:
            return 1
        return row_index // self.rows_per_page + 1

    def is_footer_only(self, page_number: int) -> bool:
        return self.has_footer_only_page and page_number == self.total_pages

    def summary_page(self) -> int:
        """Page that prints an end-of-report summary."""
        if self.has_footer_only_page:
            return max(self.total_pages - 1, 1)
        return self.total_pages


def find_band(bands: Sequence[Band], band_type: BandType) -> Band | None:
    """First visible band of a type."""
    return next((band for band in bands if band.type == band_type and band.visible), None)


def detail_row_metrics(detail: Band) -> tuple[float, float]:
    """
    Height of one printed detail row and the offset trimmed above it.

    Only controls whose top lies inside the band count towards the offset.
    """
    inside = [obj.y - detail.top for obj in detail.objects if detail.top <= obj.y < detail.actual_bottom]
    min_top_offset = min(inside) if inside else 0
    row_height = detail.height - min_top_offset
    if row_height <= 0:
        row_height = detail.height if detail.height > 0 else get_settings().default_band_height
    return row_height, min_top_offset


def paginate(bands: Sequence[Band], row_count: int, page: PageSettings | None = None) -> Pagination:
    """
    Split ``row_count`` detail rows into pages.

    Args:
        bands: Design bands
        row_count: Number of detail rows to print
        page: Page size and margins, defaults to settings

    Returns:
        Pagination
    """
    if page is None:
        page = PageSettings.default()
    header = find_band(bands, "header")
    detail = find_band(bands, "detail")
    summary = find_band(bands, "summary")
    footer = find_band(bands, "footer")

    if detail is None:
        return Pagination(row_count, 0, 1, 0, 0)

    row_height, min_top_offset = detail_row_metrics(detail)
    usable = page.usable_height

    fixed = header.height if header else 0
    if summary and summary.summary_display_mode == "perPage":
        fixed += summary.height

    rows_per_page = max(1, math.floor((usable - fixed) / row_height))
    total_pages = max(1, math.ceil(row_count / rows_per_page))
    footer_only = False

    summary_height = summary.height if summary and summary.summary_display_mode != "perPage" else 0
    footer_height = footer.height if footer else 0

    if footer_height > 0 and row_count > 0:
        last_rows = row_count - (total_pages - 1) * rows_per_page
        remaining = usable - fixed - last_rows * row_height
        if remaining < summary_height + footer_height:
            total_pages += 1
            # The summary stays with the last rows when it fits there
            footer_only = summary_height <= 0 or remaining >= summary_height

    return Pagination(
        row_count=row_count,
        rows_per_page=rows_per_page,
        total_pages=total_pages,
        single_row_height=row_height,
        min_top_offset=min_top_offset,
        has_footer_only_page=footer_only,
    )
