"""
Print service.

Turns a design and a dataset into a paginated print model: for each page,
the bands it shows and the printed text and position of every control.
The model is output-agnostic; HTML, PDF or canvas writers consume it.
"""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from banddesigner.core.config import Settings, get_settings
from banddesigner.core.exceptions import MissingFieldError
from banddesigner.core.logging import LoggerMixin
from banddesigner.formula.context import EvaluationContext
from banddesigner.formula.engine import FormulaEngine
from banddesigner.formula.formatting import format_date, format_value
from banddesigner.formula.functions import to_number, to_text
from banddesigner.formula.variables import VariableResolver
from banddesigner.geometry.normalize import bounding_box
from banddesigner.models.band import Band
from banddesigner.models.controls import (
    BarcodeControl,
    CalculatedControl,
    ControlObject,
    CurrentDateControl,
    FieldControl,
    PageNumberControl,
    TextControl,
)
from banddesigner.models.data_field import DataField, detail_collection_key
from banddesigner.models.design import DesignDocument
from banddesigner.models.page import PageSettings
from banddesigner.printing.aggregates import AggregateContextProvider
from banddesigner.printing.pagination import Pagination, find_band, paginate

DEFAULT_DETAIL_KEY = "products"

_MISSING = object()

# Declared field type -> display format for bound fields left on "text"
FIELD_TYPE_FORMATS = {"number": "number", "currency": "currency"}


# =============================================================================
# Print Model
# =============================================================================


@dataclass(frozen=True)
class RenderedObject:
    """A printed control; coordinates are relative to its section or row."""

    id: str
    type: str
    x: float
    y: float
    width: float
    height: float
    z_index: int
    text: str = ""


@dataclass(frozen=True)
class RenderedRow:
    """One printed detail row."""

    row_index: int
    top: float
    height: float
    background: str | None = None
    objects: tuple[RenderedObject, ...] = ()


@dataclass(frozen=True)
class RenderedSection:
    """A band as printed on one page; ``top`` is in page coordinates."""

    band_id: str
    band_type: str
    top: float
    height: float
    background: str | None = None
    objects: tuple[RenderedObject, ...] = ()
    rows: tuple[RenderedRow, ...] = ()


@dataclass(frozen=True)
class RenderedPage:
    page_number: int
    total_pages: int
    sections: tuple[RenderedSection, ...] = ()

    def section(self, band_type: str) -> RenderedSection | None:
        return next((s for s in self.sections if s.band_type == band_type), None)


@dataclass(frozen=True)
class RenderedReport:
    pages: tuple[RenderedPage, ...]
    pagination: Pagination
    page: PageSettings
    detail_key: str
    warnings: tuple[str, ...] = field(default_factory=tuple)

    @property
    def total_pages(self) -> int:
        return self.pagination.total_pages


# =============================================================================
# Print Service
# =============================================================================


class PrintService(LoggerMixin):
    """Service for rendering a design against a dataset."""

    def __init__(self, engine: FormulaEngine | None = None, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.engine = engine or FormulaEngine(settings=self.settings)
        self.resolver = VariableResolver()
        self._fields: dict[str, DataField] = {}
        self._warnings: list[str] = []

    def render(
        self,
        design: DesignDocument | Sequence[Band],
        data: Mapping[str, Any],
        fields: Sequence[DataField] = (),
        page: PageSettings | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> RenderedReport:
        """
        Render every page of a report.

        Args:
            design: Design document or its bands
            data: Master record; the detail rows live under the detail key
            fields: Declared data fields, used for the detail key and labels
            page: Page size and margins, defaults to settings
            clock: Time source for dates printed on the report

        Returns:
            RenderedReport with one RenderedPage per printed page
        """
        bands = design.bands if isinstance(design, DesignDocument) else tuple(design)
        page = page or PageSettings.default()
        detail_key = detail_collection_key(list(fields)) or DEFAULT_DETAIL_KEY
        rows = data.get(detail_key)
        if not isinstance(rows, (list, tuple)):
            rows = ()

        pagination = paginate(bands, len(rows), page)
        provider = AggregateContextProvider(data, rows, pagination, clock)
        self._fields = {f.name: f for f in fields}
        self._warnings = []

        self.logger.debug(
            "Rendering report",
            extra={
                "rows": len(rows),
                "total_pages": pagination.total_pages,
                "rows_per_page": pagination.rows_per_page,
            },
        )
        pages = tuple(
            self._render_page(bands, number, pagination, provider, page)
            for number in range(1, pagination.total_pages + 1)
        )
        return RenderedReport(pages, pagination, page, detail_key, tuple(self._warnings))

    # ==========================================================================
    # Pages and Bands
    # ==========================================================================

    def _render_page(
        self,
        bands: Sequence[Band],
        number: int,
        pagination: Pagination,
        provider: AggregateContextProvider,
        page: PageSettings,
    ) -> RenderedPage:
        header = find_band(bands, "header")
        detail = find_band(bands, "detail")
        summary = find_band(bands, "summary")
        footer = find_band(bands, "footer")
        ctx = provider.page_context(number)
        top = page.margin_top
        sections: list[RenderedSection] = []

        if pagination.is_footer_only(number):
            if footer:
                sections.append(self._render_band(footer, ctx, top))
            return RenderedPage(number, pagination.total_pages, tuple(sections))

        if header:
            sections.append(self._render_band(header, ctx, top))
            top += header.height

        row_range = pagination.row_range(number)
        if detail and len(row_range):
            section = self._render_detail(detail, row_range, pagination, provider, top)
            sections.append(section)
            top += section.height

        if summary and (
            summary.summary_display_mode == "perPage" or number == pagination.summary_page()
        ):
            sections.append(self._render_band(summary, ctx, top))
            top += summary.height

        if footer and number == pagination.total_pages:
            sections.append(self._render_band(footer, ctx, top))

        return RenderedPage(number, pagination.total_pages, tuple(sections))

    def _render_band(self, band: Band, ctx: EvaluationContext, top: float) -> RenderedSection:
        return RenderedSection(
            band_id=band.id,
            band_type=band.type,
            top=top,
            height=band.height,
            background=band.background_color,
            objects=self._render_objects(band, ctx, band.top),
        )

    def _render_detail(
        self,
        band: Band,
        row_range: range,
        pagination: Pagination,
        provider: AggregateContextProvider,
        top: float,
    ) -> RenderedSection:
        rows: list[RenderedRow] = []
        offset = 0.0
        origin = band.top + pagination.min_top_offset
        for row_index in row_range:
            ctx = provider.row_context(row_index)
            height = self._row_height(band, ctx, pagination.single_row_height)
            rows.append(
                RenderedRow(
                    row_index=row_index,
                    top=offset,
                    height=height,
                    background=self._row_background(band, ctx),
                    objects=self._render_objects(band, ctx, origin),
                )
            )
            offset += height
        return RenderedSection(
            band_id=band.id,
            band_type=band.type,
            top=top,
            height=offset,
            background=band.background_color,
            rows=tuple(rows),
        )

    def _row_height(self, band: Band, ctx: EvaluationContext, default: float) -> float:
        """Formula height when it yields a positive number, else ``default``."""
        if not band.row_height_formula:
            return default
        outcome = self.engine.evaluate_formula(band.row_height_formula, ctx)
        height = to_number(outcome.result) if outcome.valid else None
        if height is None or height <= 0:
            if not outcome.valid:
                self._warn("Row height formula failed", band.id, band.row_height_formula, outcome.message)
            return default
        return height

    def _row_background(self, band: Band, ctx: EvaluationContext) -> str | None:
        if not band.background_color_formula:
            return band.background_color
        outcome = self.engine.evaluate_formula(band.background_color_formula, ctx)
        if not outcome.valid:
            self._warn("Background formula failed", band.id, band.background_color_formula, outcome.message)
            return band.background_color
        color = outcome.text.strip().strip("'\"")
        return color or band.background_color

    # ==========================================================================
    # Controls
    # ==========================================================================

    def _render_objects(self, band: Band, ctx: EvaluationContext, origin_y: float) -> tuple[RenderedObject, ...]:
        rendered = []
        for obj in band.objects:
            if not obj.print_visible:
                continue
            try:
                text = self.object_text(obj, ctx)
            except Exception as e:
                self.logger.warning(
                    "Control failed during rendering",
                    extra={"band_id": band.id, "object_id": obj.id, "error": str(e)},
                )
                self._warnings.append(f"{obj.id}: {e}")
                text = ""
            box = bounding_box(obj)
            rendered.append(
                RenderedObject(
                    id=obj.id,
                    type=obj.type,
                    x=box.x,
                    y=box.y - origin_y,
                    width=box.width,
                    height=box.height,
                    z_index=obj.z_index,
                    text=text,
                )
            )
        return tuple(rendered)

    def object_text(self, obj: ControlObject, ctx: EvaluationContext) -> str:
        """Printed text of one control."""
        if isinstance(obj, TextControl):
            return obj.text
        if isinstance(obj, FieldControl):
            return self._field_text(obj, ctx)
        if isinstance(obj, CalculatedControl):
            return self.engine.evaluate_for_display(
                obj.formula,
                ctx,
                fallback_text=obj.text,
                format_type=obj.format_type,
                decimal_places=obj.decimal_places,
            )
        if isinstance(obj, PageNumberControl):
            return obj.text.replace("{page}", str(ctx.page_number)).replace("{total}", str(ctx.total_pages))
        if isinstance(obj, CurrentDateControl):
            return format_date(ctx.now(), obj.text)
        if isinstance(obj, BarcodeControl):
            if obj.field_name:
                value = self._field_value(obj.field_name, ctx)
                if value is not _MISSING and value is not None:
                    return to_text(value)
            return obj.text
        return ""

    def _field_value(self, name: str, ctx: EvaluationContext) -> Any:
        try:
            return self.resolver.resolve(name, ctx)
        except MissingFieldError:
            pass
        # Outside the detail band a detail field prints the first row
        prefix, dot, suffix = name.partition(".")
        if dot and ctx.all_detail_rows and suffix in ctx.all_detail_rows[0]:
            return ctx.all_detail_rows[0][suffix]
        return _MISSING

    def _field_text(self, obj: FieldControl, ctx: EvaluationContext) -> str:
        if not obj.field_name:
            return obj.text
        value = self._field_value(obj.field_name, ctx)
        declared = self._fields.get(obj.field_name)
        if value is _MISSING:
            if obj.text:
                return obj.text
            label = declared.label if declared and declared.label else obj.field_name
            return "{" + label + "}"
        format_type = obj.format_type
        if format_type == "text" and declared is not None:
            format_type = FIELD_TYPE_FORMATS.get(declared.field_type, "text")
        return format_value(value, format_type, obj.decimal_places, self.settings.currency_symbol)

    def _warn(self, message: str, band_id: str, formula: str, error: str | None) -> None:
        self.logger.warning(message, extra={"band_id": band_id, "formula": formula, "error": error})
        self._warnings.append(f"{band_id}: {error}")

