"""Formula parser for BandDesigner.

Parses formula strings into an AST using Lark parser.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from lark import Lark, Transformer, v_args
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedInput

from banddesigner.core.exceptions import FormulaSyntaxError
from banddesigner.formula.grammar import FORMULA_GRAMMAR, normalize_formula


# AST Node types
@dataclass(frozen=True)
class LiteralNode:
    value: float | int | str


@dataclass(frozen=True)
class VariableRefNode:
    name: str


@dataclass(frozen=True)
class FunctionCallNode:
    name: str
    arguments: tuple[Any, ...]


@dataclass(frozen=True)
class BinaryOpNode:
    operator: str
    left: Any
    right: Any


@dataclass(frozen=True)
class UnaryOpNode:
    operator: str
    operand: Any


@dataclass(frozen=True)
class WildcardNode:
    """The ``*`` placeholder in ``COUNT(*)``."""


# Spelling variants folded onto one operator
_OPERATOR_ALIASES = {"==": "=", "<>": "!="}


class FormulaTransformer(Transformer):
    """Transform Lark parse tree into AST nodes."""

    @v_args(inline=True)
    def number(self, token):
        text = str(token)
        if "." not in text:
            return LiteralNode(int(text))
        return LiteralNode(float(text))

    @v_args(inline=True)
    def string(self, token):
        # Remove quotes
        return LiteralNode(str(token)[1:-1])

    @v_args(inline=True)
    def variable(self, token):
        # Extract name from {name}
        return VariableRefNode(str(token)[1:-1].strip())

    def function_call(self, items):
        name = str(items[0])
        args = tuple(items[1]) if len(items) > 1 and items[1] is not None else ()
        return FunctionCallNode(name, args)

    def arguments(self, items):
        return list(items)

    def wildcard(self, _items):
        return WildcardNode()

    # Binary operators
    @v_args(inline=True)
    def add(self, left, right):
        return BinaryOpNode("+", left, right)

    @v_args(inline=True)
    def sub(self, left, right):
        return BinaryOpNode("-", left, right)

    @v_args(inline=True)
    def mul(self, left, right):
        return BinaryOpNode("*", left, right)

    @v_args(inline=True)
    def div(self, left, right):
        return BinaryOpNode("/", left, right)

    @v_args(inline=True)
    def compare(self, left, op, right):
        op = str(op)
        return BinaryOpNode(_OPERATOR_ALIASES.get(op, op), left, right)

    # Unary operators
    @v_args(inline=True)
    def neg(self, operand):
        return UnaryOpNode("-", operand)


class FormulaParser:
    """
    Parser for BandDesigner formulas.

    Parses formula strings into an AST that can be evaluated.
    """

    def __init__(self):
        self._parser = Lark(
            FORMULA_GRAMMAR,
            parser="lalr",
            transformer=FormulaTransformer(),
        )

    def parse(self, formula: str) -> Any:
        """
        Parse a formula string into an AST.

        Args:
            formula: Formula string to parse

        Returns:
            AST root node

        Raises:
            FormulaSyntaxError: If formula syntax is invalid
        """
        text = normalize_formula(formula)
        try:
            return self._parser.parse(text)
        except UnexpectedEOF as e:
            raise FormulaSyntaxError("Formula ends unexpectedly", position=len(text)) from e
        except UnexpectedCharacters as e:
            raise FormulaSyntaxError(
                f"Unexpected character {text[e.pos_in_stream]!r} at position {e.pos_in_stream}",
                position=e.pos_in_stream,
            ) from e
        except UnexpectedInput as e:
            position = getattr(getattr(e, "token", None), "start_pos", None)
            if position is None:
                position = len(text)
            raise FormulaSyntaxError(
                f"Unexpected token at position {position}",
                position=position,
            ) from e

    def validate(self, formula: str) -> tuple[bool, str | None]:
        """
        Validate formula syntax by parsing it.

        Args:
            formula: Formula string to validate

        Returns:
            Tuple of (is_valid, error_message)
        """
        try:
            self.parse(formula)
            return True, None
        except FormulaSyntaxError as e:
            return False, e.message

    def get_variable_references(self, formula: str) -> list[str]:
        """
        Extract all variable references from a formula.

        Args:
            formula: Formula string

        Returns:
            Variable names in order of first appearance
        """
        names: list[str] = []
        for node in walk(self.parse(formula)):
            if isinstance(node, VariableRefNode) and node.name not in names:
                names.append(node.name)
        return names


def walk(node: Any) -> Iterator[Any]:
    """Yield every node of an AST, depth first, parents before children."""
    yield node
    if isinstance(node, BinaryOpNode):
        yield from walk(node.left)
        yield from walk(node.right)
    elif isinstance(node, UnaryOpNode):
        yield from walk(node.operand)
    elif isinstance(node, FunctionCallNode):
        for arg in node.arguments:
            yield from walk(arg)


def is_row_marker(node: Any) -> bool:
    """True for ``*`` and ``ROWID()``, which both stand for "every row" in an aggregate."""
    if isinstance(node, WildcardNode):
        return True
    return isinstance(node, FunctionCallNode) and node.name == "ROWID" and not node.arguments
