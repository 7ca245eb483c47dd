"""Formula functions for BandDesigner.

Implements the function registry and all built-in functions available in
formulas.

Every function receives ``(args, ctx)``: the evaluated argument list and the
EvaluationContext. Two kinds of function receive something else in ``args``:

- aggregate functions (``scope`` set) get a single argument, the list of
  per-row values of their argument expression over the scoped rows;
- lazy functions get zero-argument thunks and evaluate only what they need.
"""

import math
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from banddesigner.core.exceptions import (
    ArityError,
    DivideByZeroError,
    TypeMismatchError,
)
from banddesigner.core.logging import LoggerMixin
from banddesigner.formula.context import EvaluationContext

# Type alias for formula functions
FormulaFunction = Callable[[list[Any], EvaluationContext], Any]

AGGREGATE_SCOPES = ("all", "page")


@dataclass(frozen=True)
class FunctionDef:
    """A registered formula function."""

    name: str
    min_args: int
    max_args: int | None
    evaluate: FormulaFunction
    category: str = "custom"
    description: str = ""
    lazy: bool = False
    scope: str | None = None

    @property
    def is_aggregate(self) -> bool:
        return self.scope is not None

    @property
    def arity_text(self) -> str:
        if self.max_args is None:
            return f"at least {self.min_args}"
        if self.min_args == self.max_args:
            return str(self.min_args)
        return f"{self.min_args} to {self.max_args}"

    def accepts(self, count: int) -> bool:
        if count < self.min_args:
            return False
        return self.max_args is None or count <= self.max_args

    def check_arity(self, count: int) -> None:
        """Raise ArityError when ``count`` arguments are not accepted."""
        if not self.accepts(count):
            raise ArityError(self.name, self.arity_text, count)


def _normalize_arity(arity: int | tuple[int, int | None]) -> tuple[int, int | None]:
    if isinstance(arity, int):
        return arity, arity
    min_args, max_args = arity
    if min_args < 0 or (max_args is not None and max_args < min_args):
        raise ValueError(f"Invalid arity: {arity!r}")
    return min_args, max_args


class FunctionRegistry(LoggerMixin):
    """
    Mapping from function name to FunctionDef.

    Names are case-sensitive. Registering an existing name replaces it.
    """

    def __init__(self, definitions: Iterable[FunctionDef] = ()):
        self._functions: dict[str, FunctionDef] = {}
        for definition in definitions:
            self._functions[definition.name] = definition

    def __contains__(self, name: str) -> bool:
        return name in self._functions

    def __len__(self) -> int:
        return len(self._functions)

    def register(
        self,
        name: str,
        arity: int | tuple[int, int | None],
        evaluate: FormulaFunction,
        *,
        category: str = "custom",
        description: str = "",
        lazy: bool = False,
        scope: str | None = None,
    ) -> FunctionDef:
        """
        Register a function.

        Args:
            name: Function name as written in formulas
            arity: Exact argument count, or ``(min, max)`` with ``max=None``
                for variadic functions
            evaluate: Implementation taking ``(args, ctx)``
            category: Grouping shown in the function list
            description: One-line help text
            lazy: Pass arguments as thunks instead of values
            scope: ``"all"`` or ``"page"`` for aggregate functions

        Returns:
            The stored definition
        """
        if not name or not re.fullmatch(r"[A-Za-z_][A-Za-z0-9_]*", name):
            raise ValueError(f"Invalid function name: {name!r}")
        if scope is not None and scope not in AGGREGATE_SCOPES:
            raise ValueError(f"Invalid aggregate scope: {scope!r}")
        min_args, max_args = _normalize_arity(arity)
        definition = FunctionDef(
            name=name,
            min_args=min_args,
            max_args=max_args,
            evaluate=evaluate,
            category=category,
            description=description,
            lazy=lazy,
            scope=scope,
        )
        if name in self._functions:
            self.logger.info("Overriding formula function", extra={"function": name})
        self._functions[name] = definition
        return definition

    def function(
        self,
        name: str,
        arity: int | tuple[int, int | None],
        **options: Any,
    ) -> Callable[[FormulaFunction], FormulaFunction]:
        """Decorator form of :meth:`register`."""

        def decorator(func: FormulaFunction) -> FormulaFunction:
            self.register(name, arity, func, **options)
            return func

        return decorator

    def resolve(self, name: str) -> FunctionDef | None:
        return self._functions.get(name)

    def names(self) -> list[str]:
        return list(self._functions)

    def definitions(self) -> list[FunctionDef]:
        return list(self._functions.values())

    def zero_arg_names(self) -> frozenset[str]:
        """Functions that may be called as ``NAME()``."""
        return frozenset(d.name for d in self._functions.values() if d.min_args == 0)

    def copy(self) -> "FunctionRegistry":
        return FunctionRegistry(self._functions.values())


# Built-ins collected at import time; create_default_registry() copies them
_BUILTINS: list[FunctionDef] = []


def builtin(
    name: str,
    arity: int | tuple[int, int | None],
    category: str,
    description: str = "",
    *,
    lazy: bool = False,
    scope: str | None = None,
) -> Callable[[FormulaFunction], FormulaFunction]:
    """Decorator to declare a built-in formula function."""

    def decorator(func: FormulaFunction) -> FormulaFunction:
        min_args, max_args = _normalize_arity(arity)
        _BUILTINS.append(
            FunctionDef(
                name=name,
                min_args=min_args,
                max_args=max_args,
                evaluate=func,
                category=category,
                description=description,
                lazy=lazy,
                scope=scope,
            )
        )
        return func

    return decorator


def create_default_registry() -> FunctionRegistry:
    """Create a new registry populated with every built-in function."""
    return FunctionRegistry(_BUILTINS)


# =============================================================================
# Value Coercion
# =============================================================================


def to_number(value: Any) -> int | float | None:
    """
    Coerce a value to a number.

    Returns None for values that are not numeric, including blank strings
    and the textual forms of NaN and infinity.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, str):
        text = value.strip().replace(",", "")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
        if not math.isfinite(number):
            return None
        if number.is_integer() and re.fullmatch(r"[+-]?\d+", text):
            return int(number)
        return number
    return None


def require_number(function: str, value: Any) -> int | float:
    """Coerce a value to a number or raise TypeMismatchError."""
    number = to_number(value)
    if number is None:
        raise TypeMismatchError(function, value)
    return number


def to_text(value: Any) -> str:
    """Render a value as formula text: integral floats lose their ``.0``."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def is_truthy(value: Any) -> bool:
    """Falsy values are 0, "", None and False."""
    if value is None or value == "":
        return False
    if isinstance(value, (int, float, Decimal)):
        return value != 0
    return bool(value)


def round_half_up(value: Any, decimals: int = 0) -> Decimal:
    """Round away from zero on ties, working on the shortest decimal repr."""
    try:
        exact = Decimal(repr(value) if isinstance(value, float) else str(value))
    except InvalidOperation as e:
        raise TypeMismatchError("ROUND", value) from e
    return exact.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)


def _decimal_result(value: Decimal, decimals: int) -> int | float:
    return float(value) if decimals > 0 else int(value)


def group_thousands(value: Decimal, decimals: int) -> str:
    """Format with thousands separators and a fixed number of decimals."""
    return f"{value:,.{max(decimals, 0)}f}"


def _parse_date(value: Any) -> date | None:
    """Parse various date representations."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        # Try common formats
        for fmt in ("%Y-%m-%d", "%Y/%m/%d", "%Y-%m-%d %H:%M:%S", "%Y/%m/%d %H:%M:%S"):
            try:
                return datetime.strptime(text, fmt).date()
            except ValueError:
                continue
        # Try ISO format with time
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        except ValueError:
            pass
    return None


def _require_date(function: str, value: Any) -> date:
    parsed = _parse_date(value)
    if parsed is None:
        raise TypeMismatchError(function, value)
    return parsed


# =============================================================================
# Aggregate Functions
# =============================================================================


@builtin("COUNT", 1, "aggregate", "Number of detail rows", scope="all")
@builtin("PAGECOUNT", 1, "aggregate", "Number of detail rows on the current page", scope="page")
def func_count(args: list[Any], ctx: EvaluationContext) -> int:
    """Count rows; COUNT(*) and COUNT({field}) both count every row."""
    return len(args[0])


@builtin("SUM", 1, "aggregate", "Sum over all detail rows", scope="all")
@builtin("PAGESUM", 1, "aggregate", "Sum over the current page's rows", scope="page")
def func_sum(args: list[Any], ctx: EvaluationContext) -> int | float:
    """Sum numeric values, treating anything else as 0."""
    return sum(to_number(v) or 0 for v in args[0])


@builtin("AVG", 1, "aggregate", "Average over all detail rows", scope="all")
@builtin("PAGEAVG", 1, "aggregate", "Average over the current page's rows", scope="page")
def func_avg(args: list[Any], ctx: EvaluationContext) -> int | float:
    """Average of the values; an empty collection averages to 0."""
    values = args[0]
    if not values:
        return 0
    return sum(to_number(v) or 0 for v in values) / len(values)


@builtin("MAX", 1, "aggregate", "Largest value over all detail rows", scope="all")
@builtin("PAGEMAX", 1, "aggregate", "Largest value on the current page", scope="page")
def func_max(args: list[Any], ctx: EvaluationContext) -> int | float:
    values = args[0]
    if not values:
        return 0
    return max(to_number(v) or 0 for v in values)


@builtin("MIN", 1, "aggregate", "Smallest value over all detail rows", scope="all")
@builtin("PAGEMIN", 1, "aggregate", "Smallest value on the current page", scope="page")
def func_min(args: list[Any], ctx: EvaluationContext) -> int | float:
    values = args[0]
    if not values:
        return 0
    return min(to_number(v) or 0 for v in values)


@builtin("ROWID", 0, "aggregate", "1-based number of the current detail row; COUNT(ROWID()) counts rows")
def func_rowid(args: list[Any], ctx: EvaluationContext) -> int:
    return ctx.row_index + 1


# =============================================================================
# Math Functions
# =============================================================================


@builtin("ROUND", (1, 2), "math", "Round half away from zero to d decimals")
def func_round(args: list[Any], ctx: EvaluationContext) -> int | float:
    value = require_number("ROUND", args[0])
    decimals = int(require_number("ROUND", args[1])) if len(args) > 1 else 0
    return _decimal_result(round_half_up(value, decimals), decimals)


@builtin("FLOOR", 1, "math", "Round down to an integer")
def func_floor(args: list[Any], ctx: EvaluationContext) -> int:
    return math.floor(require_number("FLOOR", args[0]))


@builtin("CEIL", 1, "math", "Round up to an integer")
def func_ceil(args: list[Any], ctx: EvaluationContext) -> int:
    return math.ceil(require_number("CEIL", args[0]))


@builtin("ABS", 1, "math", "Absolute value")
def func_abs(args: list[Any], ctx: EvaluationContext) -> int | float:
    return abs(require_number("ABS", args[0]))


@builtin("MOD", 2, "math", "Remainder; the sign follows the dividend")
def func_mod(args: list[Any], ctx: EvaluationContext) -> int | float:
    a = require_number("MOD", args[0])
    b = require_number("MOD", args[1])
    if b == 0:
        raise DivideByZeroError("MOD")
    result = math.fmod(a, b)
    if isinstance(a, int) and isinstance(b, int):
        return int(result)
    return result


# =============================================================================
# Text Functions
# =============================================================================


@builtin("CONCAT", (0, None), "string", "Join values as text")
def func_concat(args: list[Any], ctx: EvaluationContext) -> str:
    """Concatenate values into a string."""
    return "".join(to_text(a) for a in args)


def _clamped_count(function: str, text: str, count: Any) -> int:
    return max(0, min(int(require_number(function, count)), len(text)))


@builtin("LEFT", 2, "string", "Leftmost n characters")
def func_left(args: list[Any], ctx: EvaluationContext) -> str:
    text = to_text(args[0])
    return text[: _clamped_count("LEFT", text, args[1])]


@builtin("RIGHT", 2, "string", "Rightmost n characters")
def func_right(args: list[Any], ctx: EvaluationContext) -> str:
    text = to_text(args[0])
    count = _clamped_count("RIGHT", text, args[1])
    return text[len(text) - count :]


@builtin("LEN", 1, "string", "Length of text")
def func_len(args: list[Any], ctx: EvaluationContext) -> int:
    return len(to_text(args[0]))


@builtin("TRIM", 1, "string", "Remove leading and trailing whitespace")
def func_trim(args: list[Any], ctx: EvaluationContext) -> str:
    return to_text(args[0]).strip()


@builtin("UPPER", 1, "string", "Convert to uppercase")
def func_upper(args: list[Any], ctx: EvaluationContext) -> str:
    return to_text(args[0]).upper()


@builtin("LOWER", 1, "string", "Convert to lowercase")
def func_lower(args: list[Any], ctx: EvaluationContext) -> str:
    return to_text(args[0]).lower()


# =============================================================================
# Date Functions
# =============================================================================


@builtin("NOW", 0, "date", "Current date and time")
def func_now(args: list[Any], ctx: EvaluationContext) -> datetime:
    return ctx.now()


@builtin("TODAY", 0, "date", "Current date")
def func_today(args: list[Any], ctx: EvaluationContext) -> date:
    return ctx.now().date()


@builtin("YEAR", 1, "date", "Year of a date")
def func_year(args: list[Any], ctx: EvaluationContext) -> int:
    return _require_date("YEAR", args[0]).year


@builtin("MONTH", 1, "date", "Month of a date (1-12)")
def func_month(args: list[Any], ctx: EvaluationContext) -> int:
    return _require_date("MONTH", args[0]).month


@builtin("DAY", 1, "date", "Day of the month")
def func_day(args: list[Any], ctx: EvaluationContext) -> int:
    return _require_date("DAY", args[0]).day


# =============================================================================
# Logical Functions
# =============================================================================


@builtin("IF", (2, 3), "logic", "IF(condition, value_if_true, value_if_false)", lazy=True)
@builtin("IIF", (2, 3), "logic", "Same as IF", lazy=True)
def func_if(args: list[Any], ctx: EvaluationContext) -> Any:
    """Conditional; only the selected branch is evaluated."""
    if is_truthy(args[0]()):
        return args[1]()
    if len(args) > 2:
        return args[2]()
    return None


@builtin("ISNULL", 2, "logic", "Default when the value is null or empty")
def func_isnull(args: list[Any], ctx: EvaluationContext) -> Any:
    value, default = args
    if value is None or value == "":
        return default
    return value


# =============================================================================
# Format Functions
# =============================================================================


@builtin("FORMAT", 2, "format", 'FORMAT(value, "currency" | "percent")')
def func_format(args: list[Any], ctx: EvaluationContext) -> str:
    value, kind = args
    if kind == "currency":
        number = require_number("FORMAT", value)
        text = group_thousands(round_half_up(abs(number), 2), 2)
        return ("-" if number < 0 else "") + "¥" + text
    if kind == "percent":
        number = require_number("FORMAT", value)
        return f"{round_half_up(Decimal(str(number)) * 100, 2):.2f}%"
    return to_text(value)


@builtin("FIXED", (1, 2), "format", "Fixed-point text with d decimals")
def func_fixed(args: list[Any], ctx: EvaluationContext) -> str:
    number = require_number("FIXED", args[0])
    decimals = max(int(require_number("FIXED", args[1])), 0) if len(args) > 1 else 2
    return f"{round_half_up(number, decimals):.{decimals}f}"


def _pad(text: str, length: int, fill: str, left: bool) -> str:
    if not fill or len(text) >= length:
        return text
    padding = (fill * length)[: length - len(text)]
    return padding + text if left else text + padding


@builtin("PADLEFT", (2, 3), "format", "Pad on the left to a length")
def func_padleft(args: list[Any], ctx: EvaluationContext) -> str:
    fill = to_text(args[2]) if len(args) > 2 else "0"
    return _pad(to_text(args[0]), int(require_number("PADLEFT", args[1])), fill, left=True)


@builtin("PADRIGHT", (2, 3), "format", "Pad on the right to a length")
def func_padright(args: list[Any], ctx: EvaluationContext) -> str:
    fill = to_text(args[2]) if len(args) > 2 else " "
    return _pad(to_text(args[0]), int(require_number("PADRIGHT", args[1])), fill, left=False)


# =============================================================================
# Finance Functions
# =============================================================================

_CN_DIGITS = "零壹贰叁肆伍陆柒捌玖"
_CN_FRACTION_UNITS = ("角", "分")
_CN_SMALL_UNITS = ("", "拾", "佰", "仟")
_CN_GROUP_UNITS = ("元", "万", "亿", "兆")


def amount_to_chinese(value: int | float) -> str:
    """
    Write an amount in Chinese financial capitals.

    10001 becomes 壹万零壹元整 and 0.5 becomes 伍角.
    """
    if value == 0:
        return "零元整"
    head = "负" if value < 0 else ""
    int_part, _, dec_part = f"{round_half_up(abs(value), 2):.2f}".partition(".")

    result = "".join(
        _CN_DIGITS[int(d)] + _CN_FRACTION_UNITS[i] for i, d in enumerate(dec_part) if d != "0"
    )
    result = result or "整"

    n = int(int_part)
    for group_unit in _CN_GROUP_UNITS:
        if n <= 0:
            break
        group = ""
        for small_unit in _CN_SMALL_UNITS:
            if n <= 0:
                break
            group = _CN_DIGITS[n % 10] + small_unit + group
            n //= 10
        group = re.sub(r"(零.)*零$", "", group) or "零"
        result = group + group_unit + result

    result = re.sub(r"(零.)*零元", "元", result)
    result = re.sub(r"(零.)+", "零", result)
    if result == "整":
        result = "零元整"
    return head + result


@builtin("TOCHINESE", 1, "finance", "Amount in Chinese financial capitals")
def func_tochinese(args: list[Any], ctx: EvaluationContext) -> str:
    number = to_number(args[0])
    if number is None:
        return ""
    return amount_to_chinese(number)


@builtin("CURRENCY", (1, 3), "finance", "CURRENCY(num, symbol, decimals)")
def func_currency(args: list[Any], ctx: EvaluationContext) -> str:
    number = to_number(args[0])
    if number is None:
        return ""
    symbol = to_text(args[1]) if len(args) > 1 else "￥"
    decimals = max(int(require_number("CURRENCY", args[2])), 0) if len(args) > 2 else 2
    text = group_thousands(round_half_up(abs(number), decimals), decimals)
    return ("-" if number < 0 else "") + symbol + text


@builtin("DISCOUNT", 2, "finance", "Amount after a percentage discount")
def func_discount(args: list[Any], ctx: EvaluationContext) -> float:
    amount = require_number("DISCOUNT", args[0])
    rate = require_number("DISCOUNT", args[1])
    return amount * (1 - rate / 100)


@builtin("TAX", 2, "finance", "Tax on an amount at a percentage rate")
def func_tax(args: list[Any], ctx: EvaluationContext) -> float:
    amount = require_number("TAX", args[0])
    rate = require_number("TAX", args[1])
    return amount * rate / 100


@builtin("WITHTAX", 2, "finance", "Amount including tax at a percentage rate")
def func_withtax(args: list[Any], ctx: EvaluationContext) -> float:
    amount = require_number("WITHTAX", args[0])
    rate = require_number("WITHTAX", args[1])
    return amount * (1 + rate / 100)


@builtin("EXTRACTTAX", 2, "finance", "Tax contained in a tax-inclusive amount")
def func_extracttax(args: list[Any], ctx: EvaluationContext) -> float:
    amount = require_number("EXTRACTTAX", args[0])
    rate = require_number("EXTRACTTAX", args[1])
    divisor = 1 + rate / 100
    if divisor == 0:
        raise DivideByZeroError("EXTRACTTAX")
    return amount - amount / divisor
