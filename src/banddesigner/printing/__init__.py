"""Print layout: page breaking and per-page evaluation contexts."""

from banddesigner.printing.aggregates import AggregateContextProvider
from banddesigner.printing.pagination import Pagination, detail_row_metrics, find_band, paginate

__all__ = [
    "AggregateContextProvider",
    "Pagination",
    "detail_row_metrics",
    "find_band",
    "paginate",
]
