"""Formula engine facade.

Ties parser, fast validation, function registry and evaluator together
behind the operations the designer and the print service call.
"""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any

from banddesigner.core.config import Settings, get_settings
from banddesigner.core.exceptions import (
    BandDesignerException,
    FormulaError,
    FormulaEvaluationError,
    FormulaSyntaxError,
    MissingFieldError,
    UnknownFunctionError,
    UnknownVariableError,
)
from banddesigner.core.logging import LoggerMixin
from banddesigner.formula.context import EvaluationContext
from banddesigner.formula.evaluator import FormulaEvaluator
from banddesigner.formula.formatting import format_value
from banddesigner.formula.functions import (
    FormulaFunction,
    FunctionDef,
    FunctionRegistry,
    create_default_registry,
    to_text,
)
from banddesigner.formula.grammar import normalize_formula
from banddesigner.formula.parser import FormulaParser, FunctionCallNode, WildcardNode, walk
from banddesigner.formula.validation import validate_syntax
from banddesigner.formula.variables import known_variable_names
from banddesigner.models.data_field import DataField

# Sample values used when previewing against declared fields
MOCK_VALUES = {
    "string": None,  # the field's label
    "number": 10,
    "currency": 100,
    "date": None,  # today's date
}


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    message: str
    unknown_variables: tuple[str, ...] = ()
    code: str | None = None


@dataclass(frozen=True)
class EvaluationResult:
    valid: bool
    result: Any = None
    message: str | None = None
    code: str | None = None

    @property
    def text(self) -> str:
        return to_text(self.result)


@dataclass(frozen=True)
class PreviewResult:
    valid: bool
    message: str
    result: Any = None
    unknown_variables: tuple[str, ...] = ()
    mock_record: Mapping[str, Any] = field(default_factory=dict)
    mock_detail_row: Mapping[str, Any] = field(default_factory=dict)

    @property
    def text(self) -> str:
        return to_text(self.result)


def build_mock_data(
    fields: Iterable[DataField],
    ctx: EvaluationContext | None = None,
) -> tuple[dict[str, Any], dict[str, Any]]:
    """
    Generate a sample master record and detail row from declared fields.

    Detail fields named ``collection.field`` are stored under ``field``.

    Returns:
        Tuple of (record, detail_row)
    """
    today = (ctx or EvaluationContext()).now().date().isoformat()
    record: dict[str, Any] = {}
    detail_row: dict[str, Any] = {}
    for data_field in fields:
        if data_field.field_type == "string":
            value: Any = data_field.label or data_field.name
        elif data_field.field_type == "date":
            value = today
        else:
            value = MOCK_VALUES[data_field.field_type]
        if data_field.source == "detail":
            detail_row[data_field.name.rpartition(".")[2]] = value
        else:
            record[data_field.name] = value
    return record, detail_row


class FormulaEngine(LoggerMixin):
    """
    Validates, evaluates and previews formulas.

    Each engine owns its function registry. Parsed formulas are cached by
    formula text; registering a function clears the cache.
    """

    def __init__(
        self,
        registry: FunctionRegistry | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.registry = registry if registry is not None else create_default_registry()
        self._parser = FormulaParser()
        self._evaluator = FormulaEvaluator(self.registry)
        self._compile_cached = lru_cache(maxsize=self.settings.formula_cache_size)(self._compile)

    # ==========================================================================
    # Compilation
    # ==========================================================================

    def _compile(self, formula: str) -> Any:
        text = normalize_formula(formula)
        validate_syntax(text, zero_arg_functions=self.registry.zero_arg_names())
        ast = self._parser.parse(text)
        self._check_calls(ast)
        return ast

    def _check_calls(self, ast: Any) -> None:
        """Check function names, argument counts and ``*`` placement."""
        aggregate_args: set[int] = set()
        for node in walk(ast):
            if isinstance(node, FunctionCallNode):
                definition = self.registry.resolve(node.name)
                if definition is None:
                    raise UnknownFunctionError(node.name)
                definition.check_arity(len(node.arguments))
                if definition.is_aggregate:
                    aggregate_args.update(id(arg) for arg in node.arguments)
            elif isinstance(node, WildcardNode) and id(node) not in aggregate_args:
                raise FormulaSyntaxError("'*' is only allowed as the argument of an aggregate function")

    def compile(self, formula: str) -> Any:
        """
        Parse and statically check a formula, using the cache.

        Raises:
            FormulaError: For syntax problems and unknown functions
            ArityError: For wrong argument counts
        """
        if formula is None or not formula.strip():
            # Not cached so the error is raised every time
            return self._compile(formula or "")
        return self._compile_cached(formula)

    def clear_cache(self) -> None:
        self._compile_cached.cache_clear()

    def cache_info(self):
        """Hit/miss statistics of the parse cache (``functools`` ``CacheInfo``)."""
        return self._compile_cached.cache_info()

    # ==========================================================================
    # Validation
    # ==========================================================================

    def check_formula(self, formula: str, declared_fields: Iterable[DataField | str] = ()) -> Any:
        """
        Validate a formula, raising on the first problem.

        Returns:
            The parsed AST
        """
        known = known_variable_names(declared_fields)
        validate_syntax(
            formula,
            known_variables=known,
            zero_arg_functions=self.registry.zero_arg_names(),
        )
        return self.compile(formula)

    def validate_formula(
        self,
        formula: str,
        declared_fields: Iterable[DataField | str] = (),
    ) -> ValidationResult:
        """
        Validate a formula against the declared fields.

        Args:
            formula: Formula text
            declared_fields: Fields the formula may reference

        Returns:
            ValidationResult; every unknown variable is listed together
        """
        try:
            self.check_formula(formula, declared_fields)
        except UnknownVariableError as e:
            return ValidationResult(False, e.message, tuple(e.names), e.code)
        except (FormulaError, FormulaEvaluationError) as e:
            return ValidationResult(False, e.message, code=e.code)
        return ValidationResult(True, "Formula is valid")

    # ==========================================================================
    # Evaluation
    # ==========================================================================

    def evaluate(self, formula: str, context: EvaluationContext | None = None) -> Any:
        """
        Evaluate a formula, raising on failure.

        Raises:
            FormulaError: If the formula does not compile
            FormulaEvaluationError: If evaluation fails
        """
        ast = self.compile(formula)
        return self._evaluator.evaluate(ast, context or EvaluationContext())

    def evaluate_formula(
        self,
        formula: str,
        context: EvaluationContext | None = None,
    ) -> EvaluationResult:
        """
        Evaluate a formula without raising for formula errors.

        Args:
            formula: Formula text
            context: Evaluation context

        Returns:
            EvaluationResult with the value or the error message
        """
        try:
            value = self.evaluate(formula, context)
        except BandDesignerException as e:
            return EvaluationResult(False, None, e.message, e.code)
        return EvaluationResult(True, value)

    def preview_formula(
        self,
        formula: str,
        declared_fields: Iterable[DataField] = (),
        mock_record: Mapping[str, Any] | None = None,
        mock_detail_row: Mapping[str, Any] | None = None,
        clock: Callable[[], Any] | None = None,
    ) -> PreviewResult:
        """
        Validate a formula, then run it against mock data.

        Mock data not supplied is generated from the declared fields. The
        detail row also forms the one-row detail collection seen by
        aggregate functions.
        """
        fields = list(declared_fields)
        validation = self.validate_formula(formula, fields)
        if not validation.valid:
            return PreviewResult(False, validation.message, unknown_variables=validation.unknown_variables)

        base = EvaluationContext(clock=clock) if clock is not None else EvaluationContext()
        generated_record, generated_row = build_mock_data(fields, base)
        record = dict(mock_record) if mock_record is not None else generated_record
        detail_row = dict(mock_detail_row) if mock_detail_row is not None else generated_row
        ctx = EvaluationContext(
            record=record,
            detail_row=detail_row,
            all_detail_rows=(detail_row,),
            page_detail_rows=(detail_row,),
            row_index=0,
            page_number=1,
            total_pages=1,
            clock=base.clock,
        )
        outcome = self.evaluate_formula(formula, ctx)
        if not outcome.valid:
            return PreviewResult(
                False,
                outcome.message or "Evaluation failed",
                mock_record=record,
                mock_detail_row=detail_row,
            )
        return PreviewResult(
            True,
            f"Validation passed, preview result: {outcome.text}",
            outcome.result,
            mock_record=record,
            mock_detail_row=detail_row,
        )

    def evaluate_for_display(
        self,
        formula: str,
        context: EvaluationContext,
        fallback_text: str = "",
        format_type: str = "text",
        decimal_places: int = 2,
    ) -> str:
        """
        Evaluate a formula into printable text.

        A missing field yields ``fallback_text``; any other failure yields
        an empty string and a warning, so one bad formula never stops a
        print run.
        """
        if not formula or not formula.strip():
            return fallback_text
        try:
            value = self.evaluate(formula, context)
        except MissingFieldError:
            return fallback_text
        except BandDesignerException as e:
            self.logger.warning(
                "Formula failed during rendering",
                extra={"formula": formula, "error_code": e.code, "error": e.message},
            )
            return ""
        return format_value(value, format_type, decimal_places, self.settings.currency_symbol)

    # ==========================================================================
    # Function Registry
    # ==========================================================================

    def register_function(
        self,
        name: str,
        arity: int | tuple[int, int | None],
        evaluate: FormulaFunction,
        **options: Any,
    ) -> FunctionDef:
        """Register a custom function; later registrations win."""
        definition = self.registry.register(name, arity, evaluate, **options)
        self.clear_cache()
        return definition

    def get_registered_functions(self) -> list[str]:
        return self.registry.names()

    def describe_functions(self) -> list[FunctionDef]:
        return self.registry.definitions()
