"""Unit tests for the function registry and built-in functions."""

from datetime import date

import pytest

from banddesigner.core.exceptions import ArityError, DivideByZeroError
from banddesigner.formula.context import EvaluationContext
from banddesigner.formula.functions import (
    FunctionRegistry,
    amount_to_chinese,
    create_default_registry,
    round_half_up,
    to_number,
    to_text,
)


def call(name, *args, ctx=None):
    """Call a built-in directly with already evaluated arguments."""
    definition = create_default_registry().resolve(name)
    return definition.evaluate(list(args), ctx or EvaluationContext())


class TestFunctionRegistry:
    """Tests for FunctionRegistry."""

    def test_default_registry_has_builtins(self):
        """Test that the default registry holds every category."""
        registry = create_default_registry()
        for name in ("SUM", "PAGESUM", "ROUND", "CONCAT", "NOW", "IF", "FORMAT", "TOCHINESE"):
            assert name in registry
        categories = {d.category for d in registry.definitions()}
        assert {"aggregate", "math", "string", "date", "logic", "format", "finance"} <= categories

    def test_registries_are_independent(self):
        """Test that registering on one registry does not leak into another."""
        first = create_default_registry()
        second = create_default_registry()
        first.register("DOUBLE", 1, lambda args, ctx: args[0] * 2)
        assert "DOUBLE" in first
        assert "DOUBLE" not in second

    def test_register_replaces_existing(self, caplog):
        """Test that a later registration wins and is logged."""
        registry = create_default_registry()
        with caplog.at_level("INFO"):
            registry.register("SUM", 1, lambda args, ctx: -1)
        assert registry.resolve("SUM").evaluate([[1, 2]], EvaluationContext()) == -1
        assert "Overriding formula function" in caplog.text

    def test_names_are_case_sensitive(self):
        """Test that lookups do not fold case."""
        registry = create_default_registry()
        assert registry.resolve("sum") is None

    @pytest.mark.parametrize("name", ["", "1ABC", "A-B", "A B"])
    def test_invalid_names_rejected(self, name):
        """Test that names must be identifiers."""
        with pytest.raises(ValueError):
            FunctionRegistry().register(name, 1, lambda args, ctx: None)

    def test_invalid_scope_rejected(self):
        """Test that aggregate scopes are limited to all/page."""
        with pytest.raises(ValueError):
            FunctionRegistry().register("X", 1, lambda args, ctx: None, scope="group")

    def test_decorator_registration(self):
        """Test the decorator form."""
        registry = FunctionRegistry()

        @registry.function("HALF", 1, category="math")
        def half(args, ctx):
            return args[0] / 2

        assert registry.resolve("HALF").category == "math"
        assert half([4], None) == 2

    def test_arity(self):
        """Test arity descriptions and checks."""
        registry = create_default_registry()
        round_def = registry.resolve("ROUND")
        assert round_def.arity_text == "1 to 2"
        assert round_def.accepts(1) and round_def.accepts(2)
        assert not round_def.accepts(3)
        assert registry.resolve("CONCAT").arity_text == "at least 0"
        with pytest.raises(ArityError):
            round_def.check_arity(0)

    def test_zero_arg_names(self):
        """Test the names that may be called with no arguments."""
        names = create_default_registry().zero_arg_names()
        assert {"NOW", "TODAY", "CONCAT"} <= names
        assert "SUM" not in names


class TestAggregates:
    """Tests for aggregate functions; they receive per-row values."""

    def test_sum_skips_non_numeric(self):
        """Test that non-numeric values count as 0."""
        assert call("SUM", [5, "x", 10]) == 15

    def test_sum_of_numeric_strings(self):
        """Test that numeric text is summed."""
        assert call("SUM", ["1.5", "2", None]) == 3.5

    def test_avg_of_empty_is_zero(self):
        """Test that an empty collection averages to 0."""
        assert call("AVG", []) == 0

    def test_avg(self):
        assert call("AVG", [2, 4, "x"]) == 2

    def test_count(self):
        assert call("COUNT", [None, None, 1]) == 3

    def test_max_min(self):
        assert call("MAX", [3, 9, 1]) == 9
        assert call("MIN", [3, 9, 1]) == 1
        assert call("MAX", []) == 0


class TestMathFunctions:
    """Tests for math functions."""

    def test_round_half_up(self):
        """Test rounding of ties away from zero."""
        assert call("ROUND", 2.345, 2) == 2.35
        assert call("ROUND", 2.5) == 3
        assert call("ROUND", -2.5) == -3

    def test_round_without_decimals_is_integer(self):
        assert call("ROUND", 7.2) == 7
        assert isinstance(call("ROUND", 7.2), int)

    def test_floor_ceil_abs(self):
        assert call("FLOOR", 2.7) == 2
        assert call("CEIL", 2.1) == 3
        assert call("ABS", -4) == 4

    def test_mod(self):
        """Test that the remainder keeps the dividend's sign."""
        assert call("MOD", 7, 3) == 1
        assert call("MOD", -7, 3) == -1

    def test_mod_by_zero(self):
        with pytest.raises(DivideByZeroError):
            call("MOD", 1, 0)


class TestStringFunctions:
    """Tests for text functions."""

    def test_concat(self):
        assert call("CONCAT", "a", 1, 2.0, None) == "a12"

    def test_left_right_clamp(self):
        """Test that counts beyond the text length are clamped."""
        assert call("LEFT", "hello", 2) == "he"
        assert call("RIGHT", "hello", 3) == "llo"
        assert call("LEFT", "hi", 10) == "hi"
        assert call("RIGHT", "hi", -1) == ""

    def test_len_trim_case(self):
        assert call("LEN", "abc") == 3
        assert call("TRIM", "  x ") == "x"
        assert call("UPPER", "ab") == "AB"
        assert call("LOWER", "AB") == "ab"


class TestDateFunctions:
    """Tests for date functions."""

    def test_now_and_today_use_context_clock(self, clock):
        ctx = EvaluationContext(clock=clock)
        assert call("NOW", ctx=ctx) == clock()
        assert call("TODAY", ctx=ctx) == date(2024, 3, 15)

    def test_date_parts(self):
        assert call("YEAR", "2023-12-31") == 2023
        assert call("MONTH", "2023/12/31") == 12
        assert call("DAY", date(2023, 12, 31)) == 31


class TestLogicFunctions:
    """Tests for IF and ISNULL."""

    def test_if_is_lazy(self):
        """Test that only the chosen branch is evaluated."""

        def boom():
            raise AssertionError("evaluated the wrong branch")

        assert call("IF", lambda: 1, lambda: "yes", boom) == "yes"
        assert call("IF", lambda: 0, boom, lambda: "no") == "no"

    def test_if_without_else(self):
        assert call("IF", lambda: "", lambda: "yes") is None

    def test_isnull(self):
        assert call("ISNULL", None, "n/a") == "n/a"
        assert call("ISNULL", "", 0) == 0
        assert call("ISNULL", "v", 0) == "v"


class TestFormatFunctions:
    """Tests for formatting functions."""

    def test_format_currency(self):
        assert call("FORMAT", 1234.5, "currency") == "¥1,234.50"
        assert call("FORMAT", -3, "currency") == "-¥3.00"

    def test_format_percent(self):
        assert call("FORMAT", 0.125, "percent") == "12.50%"

    def test_fixed(self):
        assert call("FIXED", 1.005, 2) == "1.01"
        assert call("FIXED", 3) == "3.00"

    def test_padding(self):
        assert call("PADLEFT", 7, 3) == "007"
        assert call("PADRIGHT", "ab", 4, "*") == "ab**"
        assert call("PADLEFT", "abcd", 2) == "abcd"


class TestFinanceFunctions:
    """Tests for finance functions."""

    @pytest.mark.parametrize(
        "amount,expected",
        [
            (0, "零元整"),
            (10001, "壹万零壹元整"),
            (100, "壹佰元整"),
            (1000000, "壹佰万元整"),
            (0.5, "伍角"),
            (12.34, "壹拾贰元叁角肆分"),
            (-1, "负壹元整"),
        ],
    )
    def test_amount_to_chinese(self, amount, expected):
        """Test Chinese financial capitals."""
        assert amount_to_chinese(amount) == expected

    def test_tochinese_non_numeric(self):
        assert call("TOCHINESE", "abc") == ""

    def test_currency(self):
        assert call("CURRENCY", 1234.5) == "￥1,234.50"
        assert call("CURRENCY", 1234.5, "$", 0) == "$1,235"

    def test_tax_helpers(self):
        assert call("DISCOUNT", 200, 10) == 180
        assert call("TAX", 200, 10) == 20
        assert call("WITHTAX", 200, 10) == pytest.approx(220)
        assert call("EXTRACTTAX", 110, 10) == pytest.approx(10)


class TestCoercion:
    """Tests for value coercion helpers."""

    def test_to_number(self):
        assert to_number("1,234") == 1234
        assert to_number(" 2.5 ") == 2.5
        assert to_number("") is None
        assert to_number("nan") is None
        assert to_number(True) == 1

    def test_to_text(self):
        assert to_text(5.0) == "5"
        assert to_text(None) == ""
        assert to_text(True) == "true"
        assert to_text(date(2024, 1, 2)) == "2024-01-02"

    def test_round_half_up_uses_shortest_repr(self):
        assert str(round_half_up(1.005, 2)) == "1.01"
