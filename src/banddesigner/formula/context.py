"""Evaluation context for formulas.

Carries everything a formula may read: the master record, the current
detail row, the row collections used by aggregate functions, the row and
page position, and the clock used by NOW(), TODAY() and {currentDate}.
"""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

Row = Mapping[str, Any]


@dataclass(frozen=True)
class EvaluationContext:
    """
    Read-only inputs for one formula evaluation.

    Attributes:
        record: Master record fields
        detail_row: The detail row being printed, if any
        all_detail_rows: Every detail row of the dataset
        page_detail_rows: Detail rows of the current page. When None, the
            whole dataset is treated as a single page.
        row_index: 0-based global index of ``detail_row``
        page_number: 1-based page number
        total_pages: Total number of printed pages
        clock: Returns the current time
    """

    record: Row = field(default_factory=dict)
    detail_row: Row | None = None
    all_detail_rows: Sequence[Row] = ()
    page_detail_rows: Sequence[Row] | None = None
    row_index: int = 0
    page_number: int = 1
    total_pages: int = 1
    clock: Callable[[], datetime] = datetime.now

    def __post_init__(self) -> None:
        # Row collections are stored as tuples so nothing can append to them
        object.__setattr__(self, "all_detail_rows", tuple(self.all_detail_rows))
        if self.page_detail_rows is not None:
            object.__setattr__(self, "page_detail_rows", tuple(self.page_detail_rows))

    @property
    def page_rows(self) -> Sequence[Row]:
        """Rows visible to PAGE-prefixed aggregates."""
        if self.page_detail_rows is None:
            return self.all_detail_rows
        return self.page_detail_rows

    def now(self) -> datetime:
        """Read the context clock."""
        return self.clock()

    def with_detail_row(self, row: Row | None, row_index: int | None = None) -> "EvaluationContext":
        """Return a copy bound to another detail row."""
        if row_index is None:
            row_index = self.row_index
        return replace(self, detail_row=row, row_index=row_index)
