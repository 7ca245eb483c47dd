"""
Tests for the exception hierarchy.
"""

from banddesigner.core.exceptions import (
    BandDesignerException,
    DivideByZeroError,
    FormulaError,
    FormulaEvaluationError,
    UnbalancedDelimiterError,
    UnknownVariableError,
)


def test_default_code_is_class_name():
    exc = BandDesignerException("boom")
    assert exc.code == "BandDesignerException"
    assert exc.status_code == 500
    assert exc.to_dict() == {
        "error": {"code": "BandDesignerException", "message": "boom", "details": {}}
    }


def test_syntax_error_details():
    exc = UnbalancedDelimiterError("(", 3, "never closed")
    assert isinstance(exc, FormulaError)
    assert exc.status_code == 400
    assert exc.code == "UNBALANCED_DELIMITER"
    assert exc.details == {"position": 3, "char": "("}


def test_unknown_variables_listed():
    exc = UnknownVariableError(["a", "b"])
    assert exc.message == "Unknown variables: a, b"
    assert exc.to_dict()["error"]["details"] == {"names": ["a", "b"]}


def test_evaluation_errors_are_unprocessable():
    exc = DivideByZeroError("1 / 0")
    assert isinstance(exc, FormulaEvaluationError)
    assert exc.status_code == 422
    assert exc.code == "DIVIDE_BY_ZERO"
