"""Formula evaluator for BandDesigner.

Evaluates parsed formula ASTs against an EvaluationContext.
"""

import math
from datetime import date, datetime, timedelta
from functools import partial
from typing import Any

from banddesigner.core.exceptions import (
    BandDesignerException,
    DivideByZeroError,
    FormulaEvaluationError,
    MissingFieldError,
    TypeMismatchError,
    UnknownFunctionError,
)
from banddesigner.formula.context import EvaluationContext
from banddesigner.formula.functions import (
    FunctionDef,
    FunctionRegistry,
    to_number,
    to_text,
)
from banddesigner.formula.parser import (
    BinaryOpNode,
    FunctionCallNode,
    LiteralNode,
    UnaryOpNode,
    VariableRefNode,
    WildcardNode,
    is_row_marker,
)
from banddesigner.formula.variables import VariableResolver


def _is_date(value: Any) -> bool:
    return isinstance(value, (date, datetime))


def _as_date(value: date) -> date:
    return value.date() if isinstance(value, datetime) else value


def _check_finite(value: Any, expression: str) -> Any:
    """Turn infinities and NaN into DivideByZeroError."""
    if isinstance(value, float) and not math.isfinite(value):
        raise DivideByZeroError(expression)
    return value


class FormulaEvaluator:
    """
    Evaluates formula ASTs against an evaluation context.

    The evaluator holds no per-call state: the result depends only on the
    AST and the context, so one instance can serve every evaluation.
    """

    def __init__(
        self,
        registry: FunctionRegistry,
        resolver: VariableResolver | None = None,
    ):
        """
        Initialize evaluator.

        Args:
            registry: Functions available to formulas
            resolver: Variable resolver, defaults to the standard system variables
        """
        self._registry = registry
        self._resolver = resolver or VariableResolver()

    def evaluate(self, ast: Any, ctx: EvaluationContext) -> Any:
        """
        Evaluate an AST node.

        Args:
            ast: AST node to evaluate
            ctx: Evaluation context

        Returns:
            Evaluation result: number, string, boolean, date or None

        Raises:
            FormulaEvaluationError: If the formula cannot be evaluated
            UnknownFunctionError: If a function is not registered
        """
        try:
            return self._eval(ast, ctx)
        except ZeroDivisionError as e:
            raise DivideByZeroError() from e
        except ArithmeticError as e:
            # Overflow from operators; function calls wrap their own errors
            raise FormulaEvaluationError(
                f"Arithmetic error: {e}",
                code="ARITHMETIC_ERROR",
            ) from e

    def _eval(self, node: Any, ctx: EvaluationContext) -> Any:
        """Recursively evaluate an AST node."""
        if isinstance(node, LiteralNode):
            return node.value

        if isinstance(node, VariableRefNode):
            return self._resolver.resolve(node.name, ctx)

        if isinstance(node, FunctionCallNode):
            return self._eval_function(node, ctx)

        if isinstance(node, BinaryOpNode):
            return self._eval_binary(node, ctx)

        if isinstance(node, UnaryOpNode):
            return self._eval_unary(node, ctx)

        if isinstance(node, WildcardNode):
            raise TypeMismatchError("*", "wildcard outside an aggregate function")

        raise FormulaEvaluationError(f"Unknown node type: {type(node).__name__}")

    def _eval_function(self, node: FunctionCallNode, ctx: EvaluationContext) -> Any:
        """Evaluate a function call."""
        definition = self._registry.resolve(node.name)
        if definition is None:
            raise UnknownFunctionError(node.name)
        definition.check_arity(len(node.arguments))

        if definition.is_aggregate:
            args = [self._row_values(definition, node.arguments[0], ctx)]
        elif definition.lazy:
            args = [partial(self._eval, arg, ctx) for arg in node.arguments]
        else:
            args = [self._eval(arg, ctx) for arg in node.arguments]

        try:
            result = definition.evaluate(args, ctx)
        except BandDesignerException:
            raise
        except ZeroDivisionError as e:
            raise DivideByZeroError(node.name) from e
        except (ArithmeticError, ValueError, TypeError) as e:
            raise FormulaEvaluationError(
                f"{node.name}() failed: {e}",
                code="FUNCTION_ERROR",
                details={"function": node.name},
            ) from e
        return _check_finite(result, node.name)

    def _row_values(self, definition: FunctionDef, argument: Any, ctx: EvaluationContext) -> list[Any]:
        """Evaluate an aggregate's argument once per row in its scope."""
        rows = ctx.page_rows if definition.scope == "page" else ctx.all_detail_rows
        if is_row_marker(argument):
            return list(rows)

        values: list[Any] = []
        for row in rows:
            try:
                values.append(self._eval(argument, ctx.with_detail_row(row)))
            except MissingFieldError:
                # Rows lacking the field count as empty
                values.append(None)
        return values

    def _eval_binary(self, node: BinaryOpNode, ctx: EvaluationContext) -> Any:
        """Evaluate a binary operation."""
        left = self._eval(node.left, ctx)
        right = self._eval(node.right, ctx)
        op = node.operator

        # Arithmetic operators
        if op == "+":
            return self._add(left, right)
        if op == "-":
            return self._subtract(left, right)
        if op == "*":
            return self._multiply(left, right)
        if op == "/":
            return self._divide(left, right)

        # Comparison operators
        if op == "=":
            return self._compare(left, right) == 0
        if op == "!=":
            return self._compare(left, right) != 0
        if op == "<":
            return self._compare(left, right) < 0
        if op == ">":
            return self._compare(left, right) > 0
        if op == "<=":
            return self._compare(left, right) <= 0
        if op == ">=":
            return self._compare(left, right) >= 0

        raise FormulaEvaluationError(f"Unknown operator: {op}")

    def _eval_unary(self, node: UnaryOpNode, ctx: EvaluationContext) -> Any:
        """Evaluate a unary operation."""
        operand = self._eval(node.operand, ctx)
        if node.operator == "-":
            number = to_number(operand)
            if number is None or isinstance(operand, (bool, str)):
                raise TypeMismatchError("-", operand)
            return -number

        raise FormulaEvaluationError(f"Unknown unary operator: {node.operator}")

    # ==========================================================================
    # Operator Implementations
    # ==========================================================================

    def _numbers(self, op: str, left: Any, right: Any) -> tuple[int | float, int | float]:
        """Coerce both operands to numbers or raise TypeMismatchError; text never coerces."""
        if isinstance(left, str) or isinstance(right, str):
            raise TypeMismatchError(op, left, right)
        a = to_number(left)
        b = to_number(right)
        if a is None or b is None:
            raise TypeMismatchError(op, left, right)
        return a, b

    def _shift_date(self, value: date, days: int | float, op: str) -> date:
        """Offset a date by a day count, reporting calendar overflow as an evaluation error."""
        try:
            return value + timedelta(days=days)
        except OverflowError as e:
            raise FormulaEvaluationError(
                f"Date out of range: {to_text(value)} {op} {to_text(abs(days))}",
                code="DATE_OUT_OF_RANGE",
                details={"operator": op, "days": days},
            ) from e

    def _add(self, left: Any, right: Any) -> Any:
        """Addition, or concatenation when either side is text."""
        if isinstance(left, str) or isinstance(right, str):
            return to_text(left) + to_text(right)

        # Date + number = date offset
        if _is_date(left) and not _is_date(right) and to_number(right) is not None:
            return self._shift_date(left, to_number(right), "+")
        if _is_date(right) and not _is_date(left) and to_number(left) is not None:
            return self._shift_date(right, to_number(left), "+")

        a, b = self._numbers("+", left, right)
        return _check_finite(a + b, "+")

    def _subtract(self, left: Any, right: Any) -> Any:
        """Subtraction; dates subtract to a day count."""
        # Date - date = days difference
        if _is_date(left) and _is_date(right):
            return (_as_date(left) - _as_date(right)).days

        # Date - number = date offset
        if _is_date(left) and not isinstance(right, str) and to_number(right) is not None:
            return self._shift_date(left, -to_number(right), "-")

        a, b = self._numbers("-", left, right)
        return _check_finite(a - b, "-")

    def _multiply(self, left: Any, right: Any) -> Any:
        a, b = self._numbers("*", left, right)
        return _check_finite(a * b, "*")

    def _divide(self, left: Any, right: Any) -> Any:
        a, b = self._numbers("/", left, right)
        if b == 0:
            raise DivideByZeroError(f"{to_text(left)} / {to_text(right)}")
        return _check_finite(a / b, "/")

    def _compare(self, left: Any, right: Any) -> int:
        """Three-way comparison: numeric when both sides are numeric, else textual."""
        if _is_date(left) and _is_date(right):
            a, b = left, right
            if isinstance(a, datetime) != isinstance(b, datetime):
                a = a.date() if isinstance(a, datetime) else a
                b = b.date() if isinstance(b, datetime) else b
        else:
            a = to_number(left)
            b = to_number(right)
            if a is None or b is None:
                a, b = to_text(left), to_text(right)
        return (a > b) - (a < b)
