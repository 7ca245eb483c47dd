"""Unit tests for the FormulaEngine facade."""

from datetime import date

import pytest

from banddesigner.core.config import Settings
from banddesigner.core.exceptions import ArityError, FormulaSyntaxError, UnknownFunctionError
from banddesigner.formula.context import EvaluationContext
from banddesigner.formula.engine import FormulaEngine, build_mock_data
from banddesigner.models.data_field import DataField


class TestValidateFormula:
    """Tests for validate_formula."""

    def test_valid_formula(self, engine, sample_fields):
        result = engine.validate_formula("SUM({products.amount}) * 2", sample_fields)
        assert result.valid is True
        assert result.unknown_variables == ()

    def test_unknown_variables_listed_together(self, engine):
        """Test that every unknown variable is reported at once."""
        result = engine.validate_formula("{a}+{b}", [])
        assert result.valid is False
        assert result.unknown_variables == ("a", "b")
        assert result.code == "UNKNOWN_VARIABLE"

    def test_system_variables_are_known(self, engine):
        result = engine.validate_formula("{pageNumber} + '/' + {totalPages}")
        assert result.valid is True

    def test_plain_field_names(self, engine):
        """Test that declared fields may be given as names."""
        assert engine.validate_formula("{x} * 2", ["x"]).valid is True

    def test_empty_formula(self, engine):
        result = engine.validate_formula("  ")
        assert result.valid is False
        assert result.code == "EMPTY_FORMULA"

    @pytest.mark.parametrize("formula", ["COUNT(ROWID())", "PAGECOUNT(ROWID())", "ROWID() + 1"])
    def test_rowid_accepted(self, engine, formula):
        result = engine.validate_formula(formula)
        assert result.valid is True, result.message

    def test_unknown_function(self, engine):
        result = engine.validate_formula("NOPE(1)")
        assert result.valid is False
        assert result.code == "UNKNOWN_FUNCTION"

    def test_wrong_argument_count(self, engine):
        result = engine.validate_formula("ROUND(1, 2, 3)")
        assert result.valid is False
        assert "ROUND" in result.message

    def test_wildcard_outside_aggregate(self, engine):
        result = engine.validate_formula("ROUND(*)")
        assert result.valid is False

    def test_unbalanced(self, engine):
        result = engine.validate_formula("(1 + 2")
        assert result.valid is False
        assert result.code == "UNBALANCED_DELIMITER"


class TestEvaluateFormula:
    """Tests for evaluate and evaluate_formula."""

    def test_evaluate(self, engine, sample_context):
        assert engine.evaluate("{a}+{b}", sample_context) == 5

    def test_evaluate_raises(self, engine):
        with pytest.raises(FormulaSyntaxError):
            engine.evaluate("1 +")
        with pytest.raises(UnknownFunctionError):
            engine.evaluate("NOPE(1)")
        with pytest.raises(ArityError):
            engine.evaluate("LEN(1, 2)")

    def test_evaluate_formula_reports_errors(self, engine):
        result = engine.evaluate_formula("1 / 0")
        assert result.valid is False
        assert result.code == "DIVIDE_BY_ZERO"
        assert result.message

    def test_evaluate_formula_reports_date_overflow(self, engine, clock):
        """Test that a date pushed past year 9999 is an error result, not an exception."""
        result = engine.evaluate_formula("TODAY() + 3000000", EvaluationContext(clock=clock))
        assert result.valid is False
        assert result.code == "DATE_OUT_OF_RANGE"

    def test_evaluate_formula_reports_text_arithmetic(self, engine):
        result = engine.evaluate_formula("'3' * 2")
        assert result.valid is False
        assert result.code == "TYPE_MISMATCH"

    def test_evaluate_formula_success(self, engine, sample_context):
        result = engine.evaluate_formula("SUM({products.amount})", sample_context)
        assert result.valid is True
        assert result.result == 15
        assert result.text == "15"

    def test_compile_is_cached(self, engine):
        assert engine.compile("1 + 2") is engine.compile("1 + 2")

    def test_cache_can_be_disabled(self):
        engine = FormulaEngine(settings=Settings(formula_cache_size=0))
        assert engine.compile("1 + 2") is not engine.compile("1 + 2")


class TestRegisterFunction:
    """Tests for custom function registration."""

    def test_register_and_list(self, engine):
        engine.register_function("DOUBLE", 1, lambda args, ctx: args[0] * 2, category="math")
        assert "DOUBLE" in engine.get_registered_functions()
        assert engine.evaluate("DOUBLE(21)") == 42

    def test_register_clears_cached_compile_errors(self, engine):
        """Test that a formula rejected before registration compiles afterwards."""
        assert engine.validate_formula("TRIPLE(1)").valid is False
        engine.register_function("TRIPLE", 1, lambda args, ctx: args[0] * 3)
        assert engine.evaluate("TRIPLE(2)") == 6

    def test_later_registration_wins(self, engine):
        engine.register_function("UPPER", 1, lambda args, ctx: "custom")
        assert engine.evaluate("UPPER('a')") == "custom"

    def test_custom_aggregate(self, engine):
        engine.register_function(
            "SUMSQ",
            1,
            lambda args, ctx: sum((v or 0) ** 2 for v in args[0]),
            scope="all",
        )
        ctx = EvaluationContext(all_detail_rows=[{"v": 1}, {"v": 2}])
        assert engine.evaluate("SUMSQ({v})", ctx) == 5

    def test_describe_functions(self, engine):
        definitions = {d.name: d for d in engine.describe_functions()}
        assert definitions["SUM"].is_aggregate
        assert not definitions["ROUND"].is_aggregate


class TestPreviewFormula:
    """Tests for preview_formula."""

    def test_mock_data_from_fields(self, engine, sample_fields, clock):
        result = engine.preview_formula("{products.qty} * {products.amount}", sample_fields, clock=clock)
        assert result.valid is True
        assert result.result == 1000
        assert "1000" in result.message
        assert result.mock_detail_row["qty"] == 10
        assert result.mock_record["orderDate"] == "2024-03-15"

    def test_preview_aggregate_uses_one_row(self, engine, sample_fields):
        result = engine.preview_formula("SUM({products.amount})", sample_fields)
        assert result.result == 100

    def test_preview_invalid(self, engine, sample_fields):
        result = engine.preview_formula("{unknown} + 1", sample_fields)
        assert result.valid is False
        assert result.unknown_variables == ("unknown",)

    def test_preview_with_supplied_mocks(self, engine):
        fields = [DataField(name="price", type="number")]
        result = engine.preview_formula("{price} * 2", fields, mock_record={"price": 4})
        assert result.result == 8

    def test_build_mock_data(self, sample_fields, clock):
        record, row = build_mock_data(sample_fields, EvaluationContext(clock=clock))
        assert record == {"customer": "Customer", "orderDate": "2024-03-15", "total": 100}
        assert row == {"name": "Product", "qty": 10, "amount": 100}


class TestEvaluateForDisplay:
    """Tests for evaluate_for_display."""

    def test_formatted_result(self, engine, sample_context):
        text = engine.evaluate_for_display(
            "SUM({products.amount}) * 100", sample_context, format_type="currency"
        )
        assert text == "¥1,500.00"

    def test_missing_field_uses_fallback(self, engine):
        assert engine.evaluate_for_display("{nope}", EvaluationContext(), fallback_text="-") == "-"

    def test_other_errors_print_empty_and_warn(self, engine, caplog):
        with caplog.at_level("WARNING"):
            assert engine.evaluate_for_display("1 / 0", EvaluationContext()) == ""
        assert "Formula failed during rendering" in caplog.text

    def test_date_result(self, engine, sample_context):
        assert engine.evaluate_for_display("TODAY()", sample_context) == date(2024, 3, 15).isoformat()
