"""
Formula endpoints.

Handles formula validation, evaluation, preview and the function catalogue.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Query

from banddesigner.api.deps import Engine
from banddesigner.formula.context import EvaluationContext
from banddesigner.formula.formatting import format_value
from banddesigner.schemas.formula import (
    FormulaEvaluateRequest,
    FormulaEvaluateResponse,
    FormulaPreviewRequest,
    FormulaPreviewResponse,
    FormulaValidateRequest,
    FormulaValidateResponse,
    FunctionInfo,
    FunctionListResponse,
)

router = APIRouter()


@router.post(
    "/validate",
    response_model=FormulaValidateResponse,
    summary="Validate a formula",
)
def validate_formula(request: FormulaValidateRequest, engine: Engine) -> FormulaValidateResponse:
    """
    Validate a formula against the declared fields.

    Invalid formulas are reported in the body, not as an error status.
    Every unknown variable is listed.
    """
    result = engine.validate_formula(request.formula, request.fields)
    return FormulaValidateResponse(
        valid=result.valid,
        message=result.message,
        unknown_variables=list(result.unknown_variables),
        code=result.code,
    )


@router.post(
    "/evaluate",
    response_model=FormulaEvaluateResponse,
    summary="Evaluate a formula",
)
def evaluate_formula(request: FormulaEvaluateRequest, engine: Engine) -> FormulaEvaluateResponse:
    """Evaluate a formula against a record, a detail row and the detail rows."""
    context = EvaluationContext(
        record=request.record,
        detail_row=request.detail_row,
        all_detail_rows=request.detail_rows,
        page_detail_rows=request.page_detail_rows,
        row_index=request.row_index,
        page_number=request.page_number,
        total_pages=request.total_pages,
    )
    result = engine.evaluate_formula(request.formula, context)
    if not result.valid:
        return FormulaEvaluateResponse(valid=False, message=result.message, code=result.code)

    text = result.text
    if request.format_type:
        text = format_value(
            result.result,
            request.format_type,
            request.decimal_places,
            engine.settings.currency_symbol,
        )
    return FormulaEvaluateResponse(valid=True, result=result.result, text=text)


@router.post(
    "/preview",
    response_model=FormulaPreviewResponse,
    summary="Preview a formula with mock data",
)
def preview_formula(request: FormulaPreviewRequest, engine: Engine) -> FormulaPreviewResponse:
    """Validate a formula, then run it against mock data built from the fields."""
    result = engine.preview_formula(
        request.formula,
        request.fields,
        mock_record=request.mock_record,
        mock_detail_row=request.mock_detail_row,
    )
    return FormulaPreviewResponse(
        valid=result.valid,
        message=result.message,
        result=result.result,
        text=result.text,
        unknown_variables=list(result.unknown_variables),
        mock_record=dict(result.mock_record),
        mock_detail_row=dict(result.mock_detail_row),
    )


@router.get(
    "/functions",
    response_model=FunctionListResponse,
    summary="List formula functions",
)
async def list_functions(
    engine: Engine,
    category: Annotated[
        Optional[str],
        Query(description="Only functions of this category"),
    ] = None,
) -> FunctionListResponse:
    """List the registered functions with their arity."""
    functions = [
        FunctionInfo(
            name=definition.name,
            category=definition.category,
            description=definition.description,
            min_args=definition.min_args,
            max_args=definition.max_args,
            aggregate=definition.is_aggregate,
        )
        for definition in engine.describe_functions()
        if category is None or definition.category == category
    ]
    return FunctionListResponse(functions=functions, total=len(functions))
