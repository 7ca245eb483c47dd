"""Fast syntax checks for formulas.

These checks run before the full Lark parse so the editor can report
precise, human-readable problems (which bracket, which function, which
variables) instead of a generic parse failure.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass

from banddesigner.core.exceptions import (
    ConsecutiveOperatorError,
    EmptyArgumentError,
    EmptyFormulaError,
    TrailingOperatorError,
    UnbalancedDelimiterError,
    UnknownVariableError,
    UnterminatedStringError,
)
from banddesigner.formula.grammar import normalize_formula

# Functions that may legitimately be called with no arguments
DEFAULT_ZERO_ARG_FUNCTIONS = frozenset({"NOW", "TODAY", "ROWID"})

BINARY_OPERATORS = ("==", "!=", "<>", "<=", ">=", "=", "<", ">", "+", "-", "*", "/")

_NUMBER_RE = re.compile(r"\d+(\.\d*)?|\.\d+")
_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

_OPENERS = {"(": ")", "{": "}"}
_CLOSERS = {")": "(", "}": "{"}


@dataclass(frozen=True)
class Token:
    kind: str  # STRING, NUMBER, NAME, VAR, OP, LPAREN, RPAREN, COMMA, OTHER
    text: str
    pos: int


def tokenize(formula: str) -> list[Token]:
    """
    Split a formula into coarse tokens.

    Raises:
        UnterminatedStringError: If a string literal is never closed
    """
    tokens: list[Token] = []
    i = 0
    length = len(formula)
    while i < length:
        ch = formula[i]
        if ch.isspace():
            i += 1
        elif ch in "\"'":
            end = formula.find(ch, i + 1)
            if end == -1:
                raise UnterminatedStringError(i)
            tokens.append(Token("STRING", formula[i : end + 1], i))
            i = end + 1
        elif ch == "{":
            end = formula.find("}", i + 1)
            if end == -1:
                end = length - 1
            tokens.append(Token("VAR", formula[i + 1 : end].strip(), i))
            i = end + 1
        elif ch == "(":
            tokens.append(Token("LPAREN", ch, i))
            i += 1
        elif ch == ")":
            tokens.append(Token("RPAREN", ch, i))
            i += 1
        elif ch == ",":
            tokens.append(Token("COMMA", ch, i))
            i += 1
        elif (number := _NUMBER_RE.match(formula, i)) is not None:
            tokens.append(Token("NUMBER", number.group(), i))
            i = number.end()
        elif (name := _NAME_RE.match(formula, i)) is not None:
            tokens.append(Token("NAME", name.group(), i))
            i = name.end()
        else:
            op = next((op for op in BINARY_OPERATORS if formula.startswith(op, i)), None)
            if op is not None:
                tokens.append(Token("OP", op, i))
                i += len(op)
            else:
                tokens.append(Token("OTHER", ch, i))
                i += 1
    return tokens


def check_string_literals(formula: str) -> None:
    """Raise UnterminatedStringError for an unclosed quote."""
    quote: str | None = None
    start = 0
    for i, ch in enumerate(formula):
        if quote is None:
            if ch in "\"'":
                quote, start = ch, i
        elif ch == quote:
            quote = None
    if quote is not None:
        raise UnterminatedStringError(start)


def check_delimiters(formula: str) -> None:
    """
    Check that parentheses and braces are balanced.

    String literal contents are ignored. Braces may not nest.

    Raises:
        UnbalancedDelimiterError: With the offending character and position
    """
    stack: list[tuple[str, int]] = []
    quote: str | None = None
    for i, ch in enumerate(formula):
        if quote is not None:
            if ch == quote:
                quote = None
            continue
        if ch in "\"'":
            quote = ch
        elif ch in _OPENERS:
            if stack and stack[-1][0] == "{":
                raise UnbalancedDelimiterError(ch, i, "not allowed inside a field reference")
            stack.append((ch, i))
        elif ch in _CLOSERS:
            if not stack:
                raise UnbalancedDelimiterError(ch, i, f"no matching '{_CLOSERS[ch]}'")
            opener, _ = stack[-1]
            if opener != _CLOSERS[ch]:
                raise UnbalancedDelimiterError(ch, i, f"expected '{_OPENERS[opener]}'")
            stack.pop()
    if stack:
        opener, pos = stack[-1]
        raise UnbalancedDelimiterError(opener, pos, f"missing '{_OPENERS[opener]}'")


def _is_wildcard(tokens: list[Token], index: int) -> bool:
    """A ``*`` standing alone as a function argument, as in COUNT(*)."""
    token = tokens[index]
    if token.kind != "OP" or token.text != "*":
        return False
    before = tokens[index - 1].kind if index > 0 else None
    after = tokens[index + 1].kind if index + 1 < len(tokens) else None
    return before in ("LPAREN", "COMMA") and after in ("RPAREN", "COMMA")


def check_arguments(tokens: list[Token], zero_arg_functions: Iterable[str]) -> None:
    """
    Reject empty function calls and empty argument slots.

    Raises:
        EmptyArgumentError: For ``SUM()`` or ``CONCAT(1,,2)``
    """
    allowed = set(zero_arg_functions)
    for index, token in enumerate(tokens):
        nxt = tokens[index + 1] if index + 1 < len(tokens) else None
        if token.kind == "LPAREN" and nxt is not None and nxt.kind == "RPAREN":
            prev = tokens[index - 1] if index > 0 else None
            if prev is not None and prev.kind == "NAME":
                if prev.text not in allowed:
                    raise EmptyArgumentError(prev.text, token.pos)
            else:
                raise EmptyArgumentError(None, nxt.pos)
        elif token.kind == "COMMA":
            prev = tokens[index - 1] if index > 0 else None
            if prev is None or prev.kind in ("LPAREN", "COMMA"):
                raise EmptyArgumentError(None, token.pos)
            if nxt is None or nxt.kind == "RPAREN":
                raise EmptyArgumentError(None, token.pos + 1)


def check_operators(tokens: list[Token]) -> None:
    """
    Reject operator sequences that cannot form an expression.

    A ``-`` following another operator is unary minus and is allowed.

    Raises:
        ConsecutiveOperatorError: For ``1 +* 2``
        TrailingOperatorError: For ``1 +`` or ``ROUND(1 +, 2)``
    """
    for index, token in enumerate(tokens):
        if token.kind != "OP" or _is_wildcard(tokens, index):
            continue
        prev = tokens[index - 1] if index > 0 else None
        if prev is not None and prev.kind == "OP" and token.text != "-":
            raise ConsecutiveOperatorError(prev.text + token.text, prev.pos)

    for index, token in enumerate(tokens):
        if token.kind != "OP" or _is_wildcard(tokens, index):
            continue
        nxt = tokens[index + 1] if index + 1 < len(tokens) else None
        if nxt is None or nxt.kind in ("RPAREN", "COMMA"):
            raise TrailingOperatorError(token.text, token.pos)


def find_unknown_variables(tokens: list[Token], known_variables: Iterable[str]) -> list[str]:
    """Return every referenced name not in ``known_variables``, in order of appearance."""
    known = set(known_variables)
    unknown: list[str] = []
    for token in tokens:
        if token.kind == "VAR" and token.text not in known and token.text not in unknown:
            unknown.append(token.text)
    return unknown


def validate_syntax(
    formula: str,
    known_variables: Iterable[str] | None = None,
    zero_arg_functions: Iterable[str] = DEFAULT_ZERO_ARG_FUNCTIONS,
) -> list[Token]:
    """
    Run the fast syntax checks in order; the first failure wins.

    Args:
        formula: Formula text
        known_variables: System variables and declared field names. When
            None, variable names are not checked.
        zero_arg_functions: Function names that accept an empty call

    Returns:
        The formula's tokens

    Raises:
        FormulaError: The first problem found
    """
    if formula is None or not formula.strip():
        raise EmptyFormulaError()

    text = normalize_formula(formula)
    check_string_literals(text)
    check_delimiters(text)

    tokens = tokenize(text)
    check_arguments(tokens, zero_arg_functions)
    check_operators(tokens)

    if known_variables is not None:
        unknown = find_unknown_variables(tokens, known_variables)
        if unknown:
            raise UnknownVariableError(unknown)

    return tokens
