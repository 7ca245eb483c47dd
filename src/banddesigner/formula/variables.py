"""Variable resolution for formulas.

Maps ``{name}`` references to system variables, detail-row fields or
master-record fields.
"""

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from banddesigner.core.exceptions import MissingFieldError
from banddesigner.formula.context import EvaluationContext

_MISSING = object()


def _current_date(ctx: EvaluationContext) -> Any:
    return ctx.now().date()


def _current_time(ctx: EvaluationContext) -> str:
    return ctx.now().strftime("%H:%M:%S")


def _page_number(ctx: EvaluationContext) -> int:
    return ctx.page_number


def _total_pages(ctx: EvaluationContext) -> int:
    return ctx.total_pages


def _row_index(ctx: EvaluationContext) -> int:
    # Displayed row numbers start at 1
    return ctx.row_index + 1


SYSTEM_VARIABLES: dict[str, Callable[[EvaluationContext], Any]] = {
    "currentDate": _current_date,
    "currentTime": _current_time,
    "pageNumber": _page_number,
    "totalPages": _total_pages,
    "rowIndex": _row_index,
}


def known_variable_names(fields: Iterable[Any] = ()) -> frozenset[str]:
    """
    Names a formula may reference.

    Args:
        fields: Declared data fields, as DataField objects or plain names

    Returns:
        System variable names plus every declared field name
    """
    names = set(SYSTEM_VARIABLES)
    for item in fields:
        names.add(item if isinstance(item, str) else item.name)
    return frozenset(names)


def _lookup(row: Mapping[str, Any] | None, name: str) -> Any:
    if row is None:
        return _MISSING
    return row.get(name, _MISSING)


class VariableResolver:
    """
    Resolves variable references against an evaluation context.

    Lookup order: system variable, detail row, detail row by the field part
    of a dotted name (``products.amount`` -> ``amount``), master record,
    then a nested mapping in the master record for dotted names.
    """

    def __init__(self, system_variables: Mapping[str, Callable[[EvaluationContext], Any]] | None = None):
        self._system = dict(SYSTEM_VARIABLES if system_variables is None else system_variables)

    @property
    def system_names(self) -> frozenset[str]:
        return frozenset(self._system)

    def resolve(self, name: str, ctx: EvaluationContext) -> Any:
        """
        Resolve one variable.

        Raises:
            MissingFieldError: If the name is not bound anywhere
        """
        getter = self._system.get(name)
        if getter is not None:
            return getter(ctx)

        value = _lookup(ctx.detail_row, name)
        if value is not _MISSING:
            return value

        prefix, dot, suffix = name.partition(".")
        if dot:
            value = _lookup(ctx.detail_row, suffix)
            if value is not _MISSING:
                return value

        value = _lookup(ctx.record, name)
        if value is not _MISSING:
            return value

        if dot:
            nested = ctx.record.get(prefix)
            if isinstance(nested, Mapping):
                value = nested.get(suffix, _MISSING)
                if value is not _MISSING:
                    return value

        raise MissingFieldError(name)
