"""Formula schemas for request/response validation."""

from typing import Any, Optional

from pydantic import BaseModel, Field

from banddesigner.models.controls import FormatType
from banddesigner.models.data_field import DataField


class FormulaValidateRequest(BaseModel):
    """Schema for validating a formula."""

    formula: str = Field(..., description="Formula text")
    fields: list[DataField] = Field(
        default_factory=list, description="Declared fields the formula may reference"
    )


class FormulaValidateResponse(BaseModel):
    """Schema for formula validation result."""

    valid: bool
    message: str
    unknown_variables: list[str] = Field(default_factory=list)
    code: Optional[str] = None


class FormulaEvaluateRequest(BaseModel):
    """Schema for evaluating a formula against supplied data."""

    formula: str = Field(..., description="Formula text")
    record: dict[str, Any] = Field(default_factory=dict, description="Master record fields")
    detail_row: Optional[dict[str, Any]] = Field(None, description="Current detail row")
    detail_rows: list[dict[str, Any]] = Field(
        default_factory=list, description="All detail rows, used by aggregates"
    )
    page_detail_rows: Optional[list[dict[str, Any]]] = Field(
        None, description="Detail rows of the current page; all rows when omitted"
    )
    row_index: int = Field(default=0, ge=0, description="0-based global row index")
    page_number: int = Field(default=1, ge=1)
    total_pages: int = Field(default=1, ge=1)
    format_type: Optional[FormatType] = Field(None, description="Display format of the result")
    decimal_places: int = Field(default=2, ge=0)


class FormulaEvaluateResponse(BaseModel):
    """Schema for formula evaluation result."""

    valid: bool
    result: Any = None
    text: str = Field(default="", description="Result as printed text")
    message: Optional[str] = None
    code: Optional[str] = None


class FormulaPreviewRequest(BaseModel):
    """Schema for previewing a formula with mock data."""

    formula: str = Field(..., description="Formula text")
    fields: list[DataField] = Field(default_factory=list)
    mock_record: Optional[dict[str, Any]] = Field(
        None, description="Master record; generated from fields when omitted"
    )
    mock_detail_row: Optional[dict[str, Any]] = Field(
        None, description="Detail row; generated from fields when omitted"
    )


class FormulaPreviewResponse(BaseModel):
    """Schema for formula preview result."""

    valid: bool
    message: str
    result: Any = None
    text: str = ""
    unknown_variables: list[str] = Field(default_factory=list)
    mock_record: dict[str, Any] = Field(default_factory=dict)
    mock_detail_row: dict[str, Any] = Field(default_factory=dict)


class FunctionInfo(BaseModel):
    """Schema for a registered formula function."""

    name: str
    category: str
    description: str = ""
    min_args: int
    max_args: Optional[int] = Field(None, description="None when the function is variadic")
    aggregate: bool = False


class FunctionListResponse(BaseModel):
    """Schema for the function catalogue."""

    functions: list[FunctionInfo]
    total: int
