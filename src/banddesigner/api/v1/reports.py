"""
Report endpoints.

Renders a design against a dataset into a paginated print model.
"""

from fastapi import APIRouter

from banddesigner.api.deps import Printer
from banddesigner.schemas.report import RenderedPageSchema, RenderRequest, RenderResponse

router = APIRouter()


@router.post(
    "/render",
    response_model=RenderResponse,
    summary="Render a report",
)
def render_report(request: RenderRequest, printer: Printer) -> RenderResponse:
    """
    Paginate a design and print every control.

    A failing formula prints as an empty string and is logged; it never
    fails the request. Failing row formulas and controls are listed in
    ``warnings``.
    """
    report = printer.render(request.design, request.data, request.fields, request.page)
    return RenderResponse(
        total_pages=report.total_pages,
        rows_per_page=report.pagination.rows_per_page,
        detail_key=report.detail_key,
        pages=[RenderedPageSchema.model_validate(page) for page in report.pages],
        warnings=list(report.warnings),
    )
