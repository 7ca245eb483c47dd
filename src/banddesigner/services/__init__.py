"""Services for BandDesigner."""

from banddesigner.services.print_service import (
    PrintService,
    RenderedObject,
    RenderedPage,
    RenderedReport,
    RenderedRow,
    RenderedSection,
)

__all__ = [
    "PrintService",
    "RenderedObject",
    "RenderedPage",
    "RenderedReport",
    "RenderedRow",
    "RenderedSection",
]
