"""Unit tests for the fast formula syntax checks."""

import pytest

from banddesigner.core.exceptions import (
    ConsecutiveOperatorError,
    EmptyArgumentError,
    EmptyFormulaError,
    TrailingOperatorError,
    UnbalancedDelimiterError,
    UnknownVariableError,
    UnterminatedStringError,
)
from banddesigner.formula.validation import tokenize, validate_syntax


class TestTokenize:
    """Tests for the coarse tokenizer."""

    def test_token_kinds(self):
        """Test that each token kind is recognised."""
        tokens = tokenize("ROUND({a}, 2) >= 'x'")
        assert [t.kind for t in tokens] == ["NAME", "LPAREN", "VAR", "COMMA", "NUMBER", "RPAREN", "OP", "STRING"]
        assert tokens[2].text == "a"
        assert tokens[6].text == ">="

    def test_unterminated_string(self):
        """Test that an open quote is reported."""
        with pytest.raises(UnterminatedStringError):
            tokenize('"abc')


class TestEmptyFormula:
    """Tests for empty input."""

    @pytest.mark.parametrize("formula", ["", "   ", "\t\n"])
    def test_empty_formula(self, formula):
        """Test that empty and blank formulas are rejected."""
        with pytest.raises(EmptyFormulaError):
            validate_syntax(formula)


class TestDelimiters:
    """Tests for parenthesis and brace balance."""

    def test_missing_close_paren(self):
        """Test an unclosed parenthesis."""
        with pytest.raises(UnbalancedDelimiterError) as exc_info:
            validate_syntax("(1 + 2")
        assert exc_info.value.char == "("
        assert exc_info.value.position == 0

    def test_extra_close_paren(self):
        """Test a closing parenthesis without an opener."""
        with pytest.raises(UnbalancedDelimiterError) as exc_info:
            validate_syntax("1 + 2)")
        assert exc_info.value.char == ")"
        assert exc_info.value.position == 5

    def test_unclosed_brace(self):
        """Test an unclosed field reference."""
        with pytest.raises(UnbalancedDelimiterError) as exc_info:
            validate_syntax("{price * 2")
        assert exc_info.value.char == "{"

    def test_mismatched_pair(self):
        """Test a parenthesis closed by a brace."""
        with pytest.raises(UnbalancedDelimiterError) as exc_info:
            validate_syntax("(1 + 2}")
        assert exc_info.value.char == "}"

    def test_brackets_inside_braces(self):
        """Test that braces cannot contain parentheses."""
        with pytest.raises(UnbalancedDelimiterError):
            validate_syntax("{a(b)}")

    def test_delimiters_inside_strings_are_ignored(self):
        """Test that quoted text is not counted."""
        validate_syntax("'(' + \"}\"")


class TestArguments:
    """Tests for empty calls and argument slots."""

    def test_empty_call(self):
        """Test that SUM() is rejected and names the function."""
        with pytest.raises(EmptyArgumentError) as exc_info:
            validate_syntax("SUM()")
        assert exc_info.value.function == "SUM"

    def test_zero_argument_functions_allowed(self):
        """Test that NOW(), TODAY() and ROWID() are accepted."""
        validate_syntax("NOW()")
        validate_syntax("TODAY()")
        validate_syntax("COUNT(ROWID())")

    def test_custom_zero_argument_functions(self):
        """Test passing the zero-argument names explicitly."""
        validate_syntax("PI()", zero_arg_functions={"PI"})
        with pytest.raises(EmptyArgumentError):
            validate_syntax("PI()", zero_arg_functions=set())

    @pytest.mark.parametrize("formula", ["CONCAT(1,,2)", "ROUND(1,)", "ROUND(,1)"])
    def test_empty_argument_slot(self, formula):
        """Test that empty argument slots are rejected."""
        with pytest.raises(EmptyArgumentError):
            validate_syntax(formula)


class TestOperators:
    """Tests for operator sequences."""

    def test_consecutive_operators(self):
        """Test that two binary operators in a row are rejected."""
        with pytest.raises(ConsecutiveOperatorError) as exc_info:
            validate_syntax("1 +* 2")
        assert exc_info.value.details["operators"] == "+*"

    def test_unary_minus_after_operator(self):
        """Test that unary minus may follow an operator."""
        validate_syntax("1 * -2")
        validate_syntax("{a} > -1")

    def test_trailing_operator(self):
        """Test an operator at the end of the formula."""
        with pytest.raises(TrailingOperatorError):
            validate_syntax("1 +")

    def test_trailing_operator_in_argument(self):
        """Test an operator at the end of an argument."""
        with pytest.raises(TrailingOperatorError):
            validate_syntax("ROUND(1 +, 2)")

    def test_wildcard_argument(self):
        """Test that COUNT(*) is not an operator problem."""
        validate_syntax("COUNT(*)")


class TestUnknownVariables:
    """Tests for variable name checks."""

    def test_all_unknown_variables_listed(self):
        """Test that every unknown name is reported once, in order."""
        with pytest.raises(UnknownVariableError) as exc_info:
            validate_syntax("{a} + {b} + {a} + {c}", known_variables={"c"})
        assert exc_info.value.names == ["a", "b"]

    def test_names_not_checked_without_known_set(self):
        """Test that variable names are only checked when a set is given."""
        tokens = validate_syntax("{anything} + 1")
        assert tokens[0].text == "anything"

    def test_syntax_errors_win_over_unknown_variables(self):
        """Test the order of checks: delimiters before variables."""
        with pytest.raises(UnbalancedDelimiterError):
            validate_syntax("({a} + 1", known_variables=set())
