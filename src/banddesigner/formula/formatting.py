"""Display formatting for formula results and bound field values."""

import re
from datetime import date, datetime
from typing import Any

from banddesigner.formula.functions import (
    group_thousands,
    round_half_up,
    to_number,
    to_text,
)

FORMAT_TYPES = ("number", "currency", "percent", "text")

# Designer date patterns (yyyy-MM-dd HH:mm:ss) to strftime directives
_DATE_TOKENS = {
    "yyyy": "%Y",
    "YYYY": "%Y",
    "yy": "%y",
    "MM": "%m",
    "dd": "%d",
    "DD": "%d",
    "HH": "%H",
    "hh": "%I",
    "mm": "%M",
    "ss": "%S",
}
_DATE_TOKEN_RE = re.compile("|".join(sorted(_DATE_TOKENS, key=len, reverse=True)))


def format_value(
    value: Any,
    format_type: str = "text",
    decimal_places: int = 2,
    currency_symbol: str = "¥",
) -> str:
    """
    Format a value for printing.

    Args:
        value: Formula result or field value
        format_type: number, currency, percent or text
        decimal_places: Digits after the decimal point
        currency_symbol: Prefix for currency values

    Returns:
        Display text. Non-numeric values are rendered as plain text.
    """
    if format_type == "text" or isinstance(value, bool):
        return to_text(value)
    number = to_number(value)
    if number is None:
        return to_text(value)

    decimals = max(decimal_places, 0)
    if format_type == "currency":
        text = group_thousands(round_half_up(abs(number), decimals), decimals)
        return ("-" if number < 0 else "") + currency_symbol + text
    if format_type == "percent":
        return f"{round_half_up(round_half_up(number, 12) * 100, decimals):.{decimals}f}%"
    if format_type == "number":
        return group_thousands(round_half_up(number, decimals), decimals)
    return to_text(value)


def format_date(value: date | datetime, pattern: str | None = None) -> str:
    """
    Format a date with a designer pattern such as ``yyyy-MM-dd``.

    Text outside the recognised tokens is kept as is.
    """
    if not pattern:
        pattern = "yyyy-MM-dd"
    literal = pattern.replace("%", "%%")
    return value.strftime(_DATE_TOKEN_RE.sub(lambda m: _DATE_TOKENS[m.group()], literal))
