"""Lark grammar definition for BandDesigner formulas.

This grammar supports the designer's formula syntax:
- Arithmetic: +, -, *, / and unary minus
- Comparison: =, ==, !=, <>, <, >, <=, >=
- Variable references: {fieldName}, {products.amount}, {pageNumber}
- Function calls: FUNCTION(arg1, arg2, ...), with COUNT(*) style placeholders
- Literals: decimal numbers, single or double quoted strings
"""

# Lark grammar for formula parsing
FORMULA_GRAMMAR = r"""
    ?start: comparison

    ?comparison: sum
        | sum COMP_OP sum -> compare

    ?sum: product
        | sum "+" product -> add
        | sum "-" product -> sub

    ?product: unary
        | product "*" unary -> mul
        | product "/" unary -> div

    ?unary: atom
        | "-" unary -> neg

    ?atom: NUMBER -> number
        | STRING -> string
        | VARIABLE -> variable
        | function_call
        | "(" comparison ")"

    function_call: FUNCTION_NAME "(" [arguments] ")"

    arguments: argument ("," argument)*

    ?argument: comparison
        | "*" -> wildcard

    // Longest operators first so "<=" never lexes as "<" followed by "="
    COMP_OP: /==|!=|<>|<=|>=|=|<|>/

    // Variable reference: {name} or {collection.field}
    VARIABLE: /\{[^{}]+\}/

    FUNCTION_NAME: /[A-Za-z_][A-Za-z0-9_]*/

    // String literals (single or double quotes)
    STRING: /"[^"]*"/ | /'[^']*'/

    // Decimal number literals, no exponent
    // Note: negative sign is handled by unary operator, not here
    NUMBER: /\d+(\.\d*)?|\.\d+/

    // Whitespace handling
    %import common.WS
    %ignore WS
"""

# Full-width punctuation typed with a Chinese IME, mapped to ASCII
FULL_WIDTH_PUNCTUATION = str.maketrans(
    {
        "，": ",",
        "（": "(",
        "）": ")",
        "“": '"',
        "”": '"',
        "‘": "'",
        "’": "'",
        "；": ";",
        "：": ":",
    }
)


def normalize_formula(formula: str) -> str:
    """Replace full-width punctuation with its ASCII counterpart."""
    return formula.translate(FULL_WIDTH_PUNCTUATION)
