"""
Benefit form API models.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from .models import CompilationWarning, FinalSchema


# =============================================================================
# Request Models
# =============================================================================

class CompileRequest(BaseModel):
    """Request body for /compile"""
    application_fields: Union[List[Dict[str, Any]], Dict[str, Dict[str, Any]]] = Field(
        default_factory=list
    )
    rules: List[Any] = Field(default_factory=list)
    wallet: List[Dict[str, Any]] = Field(default_factory=list)
    title: str = ""
    benefit_id: Optional[str] = None


class CatalogCompileRequest(BaseModel):
    """Request body for /compile/catalog"""
    catalog: Dict[str, Any]
    prefill: Optional[Union[Dict[str, Any], str]] = None
    benefit_id: Optional[str] = None


class ReclassifyRequest(BaseModel):
    """Request body for /reclassify"""
    benefit_id: str
    form_data: Dict[str, Any]
    form_schema: Dict[str, Any]  # schema object or its properties
    wallet: List[Dict[str, Any]] = Field(default_factory=list)
    document_field_names: Optional[List[str]] = None


class ValidateRequest(BaseModel):
    """Request body for /validate"""
    form_data: Dict[str, Any]
    form_schema: Dict[str, Any]


# =============================================================================
# Response Models
# =============================================================================

class WarningDetail(BaseModel):
    code: str
    message: str
    field_name: Optional[str] = None
    rule_index: Optional[int] = None


class ErrorDetail(BaseModel):
    code: str
    message: str


class CompileResponse(BaseModel):
    """Compiled form schema plus side-channels"""
    form_schema: Dict[str, Any]
    ui_schema: Dict[str, Any]
    document_field_names: List[str] = Field(default_factory=list)
    missing_documents: List[str] = Field(default_factory=list)
    extra_errors: Dict[str, Dict[str, List[str]]] = Field(default_factory=dict)
    warnings: List[WarningDetail] = Field(default_factory=list)


class CatalogCompileResponse(CompileResponse):
    form_data: Dict[str, str] = Field(default_factory=dict)
    remark: Optional[str] = None


class ReclassifyResponse(BaseModel):
    payload: Dict[str, Any]
    file_count: int
    vc_document_count: int


class ValidateResponse(BaseModel):
    valid: bool
    errors: List[str] = Field(default_factory=list)


def warning_details(warnings: List[CompilationWarning]) -> List[WarningDetail]:
    return [WarningDetail(**w.to_dict()) for w in warnings]


def compile_response_fields(
    final: FinalSchema,
    extra_errors: Dict[str, Dict[str, List[str]]],
) -> Dict[str, Any]:
    """Common CompileResponse fields for a FinalSchema."""
    return {
        "form_schema": final.schema,
        "ui_schema": final.ui_schema,
        "document_field_names": final.document_field_names,
        "missing_documents": final.missing_documents,
        "extra_errors": extra_errors,
        "warnings": warning_details(final.warnings),
    }
