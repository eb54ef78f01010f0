"""Benefit application form compilation package.

Turns a benefit's declared application fields and its eligibility /
required-document rules, together with the applicant's document wallet,
into a renderable form schema, and turns filled values back into a
submission payload.

Components:
- models: Field, rule, wallet and schema dataclasses
- rules: Rule feed partitioning and proof -> document type indexes
- grouping: Proof-set grouping and document field planning
- documents: Document field construction against the wallet
- fields: Application field normalization and validation templates
- assembler: Final schema + uiSchema assembly
- submission: Post-submit reclassification and base64 encoding
- catalog / prefill / fetch: Catalog response and pre-fill inputs
- exceptions: BenefitFormError hierarchy

Usage:
    from app.benefits import (
        compile_application_form,
        reclassify,
        build_submission_payload,
        FinalSchema,
        BenefitFormError,
    )
"""

from .assembler import assemble, build_ui_schema, get_missing_documents
from .compiler import CompiledForm, compile_application_form, compile_from_catalog
from .documents import build_document_schema
from .exceptions import (
    BenefitFormError,
    CatalogFetchError,
    CatalogParseError,
    DocumentEncodingError,
    ErrorCode,
    MalformedRuleError,
)
from .fields import build_application_schema, group_fields_by_group
from .models import (
    CompilationWarning,
    CompilationWarningCode,
    FieldSchema,
    FinalSchema,
    SchemaFragment,
    WalletDocument,
)
from .rules import normalize
from .submission import (
    VCDocument,
    build_submission_payload,
    encode_to_base64,
    reclassify,
)

__all__ = [
    # Models
    "CompilationWarning",
    "CompilationWarningCode",
    "FieldSchema",
    "FinalSchema",
    "SchemaFragment",
    "WalletDocument",
    "VCDocument",
    "CompiledForm",
    # Compilation
    "normalize",
    "build_application_schema",
    "build_document_schema",
    "group_fields_by_group",
    "assemble",
    "build_ui_schema",
    "get_missing_documents",
    "compile_application_form",
    "compile_from_catalog",
    # Submission
    "reclassify",
    "build_submission_payload",
    "encode_to_base64",
    # Exceptions
    "ErrorCode",
    "BenefitFormError",
    "MalformedRuleError",
    "DocumentEncodingError",
    "CatalogParseError",
    "CatalogFetchError",
]
