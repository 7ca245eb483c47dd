"""Formula engine for BandDesigner.

This module provides the formula language used by calculated fields,
row-height formulas and background-colour formulas:
- Arithmetic operations (+, -, *, /) and unary minus
- Comparison operations (=, !=, <, >, <=, >=)
- Variable references ({fieldName}, {products.amount}, {pageNumber})
- Aggregate functions (SUM, COUNT, AVG, MAX, MIN and PAGE variants)
- Math, string, date, logic, format and finance functions
"""

from banddesigner.formula.context import EvaluationContext
from banddesigner.formula.engine import (
    EvaluationResult,
    FormulaEngine,
    PreviewResult,
    ValidationResult,
)
from banddesigner.formula.evaluator import FormulaEvaluator
from banddesigner.formula.functions import (
    FunctionDef,
    FunctionRegistry,
    create_default_registry,
)
from banddesigner.formula.parser import FormulaParser
from banddesigner.formula.validation import validate_syntax
from banddesigner.formula.variables import SYSTEM_VARIABLES, known_variable_names

__all__ = [
    "EvaluationContext",
    "EvaluationResult",
    "FormulaEngine",
    "FormulaEvaluator",
    "FormulaParser",
    "FunctionDef",
    "FunctionRegistry",
    "PreviewResult",
    "SYSTEM_VARIABLES",
    "ValidationResult",
    "create_default_registry",
    "known_variable_names",
    "validate_syntax",
]
