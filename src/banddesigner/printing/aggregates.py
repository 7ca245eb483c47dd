"""Evaluation contexts for a paginated report."""

from collections.abc import Callable, Mapping, Sequence
from datetime import datetime
from typing import Any

from banddesigner.formula.context import EvaluationContext, Row
from banddesigner.printing.pagination import Pagination


class AggregateContextProvider:
    """
    Builds evaluation contexts once pages are known.

    Rows are split into per-page tuples up front, so PAGE-prefixed
    aggregates always see the finished page partition.
    """

    def __init__(
        self,
        record: Mapping[str, Any],
        rows: Sequence[Row],
        pagination: Pagination,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.record = record
        self.rows: tuple[Row, ...] = tuple(rows)
        self.pagination = pagination
        self.clock = clock
        self._pages: dict[int, tuple[Row, ...]] = {
            number: tuple(self.rows[i] for i in pagination.row_range(number))
            for number in range(1, pagination.total_pages + 1)
        }

    def page_rows(self, page_number: int) -> tuple[Row, ...]:
        """Detail rows printed on a page; empty for unknown pages."""
        return self._pages.get(page_number, ())

    def row_context(self, row_index: int) -> EvaluationContext:
        """
        Context for one detail row.

        Args:
            row_index: 0-based global row index

        Raises:
            IndexError: If the row does not exist
        """
        row = self.rows[row_index]
        page_number = self.pagination.page_of_row(row_index)
        return EvaluationContext(
            record=self.record,
            detail_row=row,
            all_detail_rows=self.rows,
            page_detail_rows=self.page_rows(page_number),
            row_index=row_index,
            page_number=page_number,
            total_pages=self.pagination.total_pages,
            clock=self.clock,
        )

    def page_context(self, page_number: int) -> EvaluationContext:
        """Context for header, summary and footer controls of a page."""
        rows = self.page_rows(page_number)
        first = self.pagination.row_range(page_number)
        return EvaluationContext(
            record=self.record,
            detail_row=None,
            all_detail_rows=self.rows,
            page_detail_rows=rows,
            row_index=first.start if len(first) else 0,
            page_number=page_number,
            total_pages=self.pagination.total_pages,
            clock=self.clock,
        )
