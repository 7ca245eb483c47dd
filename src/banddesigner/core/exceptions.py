"""
Custom exceptions for BandDesigner.

Provides a hierarchy of exceptions that map to HTTP status codes
and include structured error information.
"""

from typing import Any


class BandDesignerException(Exception):
    """
    Base exception for all BandDesigner errors.

    All custom exceptions should inherit from this class.
    """

    # Default status code for base exception
    status_code = 500

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code
            details: Additional error details
        """
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
            }
        }


# =============================================================================
# HTTP 400 - Formula Definition Errors
# =============================================================================


class FormulaError(BandDesignerException):
    """A formula cannot be accepted by the editor."""

    status_code = 400


class FormulaSyntaxError(FormulaError):
    """Malformed formula text."""

    def __init__(
        self,
        message: str,
        position: int | None = None,
        code: str = "FORMULA_SYNTAX_ERROR",
    ) -> None:
        self.position = position
        super().__init__(
            message=message,
            code=code,
            details={"position": position},
        )


class EmptyFormulaError(FormulaSyntaxError):
    """Formula is empty or whitespace."""

    def __init__(self) -> None:
        super().__init__("Formula cannot be empty", code="EMPTY_FORMULA")


class UnbalancedDelimiterError(FormulaSyntaxError):
    """Unmatched parenthesis or brace."""

    def __init__(self, char: str, position: int, reason: str) -> None:
        self.char = char
        super().__init__(
            f"Unbalanced '{char}' at position {position}: {reason}",
            position=position,
            code="UNBALANCED_DELIMITER",
        )
        self.details["char"] = char


class UnterminatedStringError(FormulaSyntaxError):
    """String literal without closing quote."""

    def __init__(self, position: int) -> None:
        super().__init__(
            f"Unterminated string literal starting at position {position}",
            position=position,
            code="UNTERMINATED_STRING",
        )


class EmptyArgumentError(FormulaSyntaxError):
    """Function called without a required argument."""

    def __init__(self, function: str | None, position: int) -> None:
        self.function = function
        if function:
            message = f"Function {function}() requires at least one argument"
        else:
            message = f"Empty function argument at position {position}"
        super().__init__(message, position=position, code="EMPTY_ARGUMENT")
        self.details["function"] = function


class ConsecutiveOperatorError(FormulaSyntaxError):
    """Two binary operators in a row."""

    def __init__(self, operators: str, position: int) -> None:
        super().__init__(
            f"Unexpected operator sequence '{operators}' at position {position}",
            position=position,
            code="CONSECUTIVE_OPERATORS",
        )
        self.details["operators"] = operators


class TrailingOperatorError(FormulaSyntaxError):
    """Formula or argument ends with an operator."""

    def __init__(self, operator: str, position: int) -> None:
        super().__init__(
            f"Operator '{operator}' at position {position} has no right operand",
            position=position,
            code="TRAILING_OPERATOR",
        )


class UnknownVariableError(FormulaError):
    """One or more {name} references match no known variable."""

    def __init__(self, names: list[str]) -> None:
        self.names = list(names)
        super().__init__(
            message=f"Unknown variables: {', '.join(self.names)}",
            code="UNKNOWN_VARIABLE",
            details={"names": self.names},
        )


class UnknownFunctionError(FormulaError):
    """Function name is not registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            message=f"Unknown function: {name}",
            code="UNKNOWN_FUNCTION",
            details={"function": name},
        )


# =============================================================================
# HTTP 404 - Not Found Errors
# =============================================================================


class NotFoundError(BandDesignerException):
    """Requested resource not found."""

    status_code = 404

    def __init__(
        self,
        resource: str,
        identifier: str | None = None,
    ) -> None:
        message = f"{resource} not found"
        if identifier:
            message = f"{resource} with ID '{identifier}' not found"

        super().__init__(
            message=message,
            code="NOT_FOUND",
            details={"resource": resource, "identifier": identifier},
        )


class BandNotFoundError(NotFoundError):
    """Band not found."""

    def __init__(self, band_id: str | None = None) -> None:
        super().__init__(resource="Band", identifier=band_id)


class ControlNotFoundError(NotFoundError):
    """Control object not found."""

    def __init__(self, object_id: str | None = None) -> None:
        super().__init__(resource="Control", identifier=object_id)


# =============================================================================
# HTTP 422 - Formula Evaluation Errors
# =============================================================================


class FormulaEvaluationError(BandDesignerException):
    """Formula parsed but could not be evaluated."""

    status_code = 422


class ArityError(FormulaEvaluationError):
    """Wrong number of arguments for a function."""

    def __init__(self, function: str, expected: str, received: int) -> None:
        super().__init__(
            message=f"{function}() expects {expected} argument(s), got {received}",
            code="ARITY_ERROR",
            details={"function": function, "expected": expected, "received": received},
        )


class TypeMismatchError(FormulaEvaluationError):
    """Operand types are not valid for an operator or function."""

    def __init__(self, operator: str, left: Any, right: Any = None) -> None:
        super().__init__(
            message=(
                f"Cannot apply '{operator}' to {type(left).__name__}"
                + (f" and {type(right).__name__}" if right is not None else "")
            ),
            code="TYPE_MISMATCH",
            details={
                "operator": operator,
                "left": str(left)[:100],
                "right": None if right is None else str(right)[:100],
            },
        )


class DivideByZeroError(FormulaEvaluationError):
    """Division by zero or non-finite arithmetic result."""

    def __init__(self, expression: str = "/") -> None:
        super().__init__(
            message=f"Division by zero in '{expression}'",
            code="DIVIDE_BY_ZERO",
            details={"expression": expression},
        )


class MissingFieldError(FormulaEvaluationError):
    """Referenced field is absent from the evaluated record."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            message=f"Field '{name}' has no value in the current record",
            code="MISSING_FIELD",
            details={"field": name},
        )
