"""Top-level compile entry points.

compile_application_form() runs one full compilation pass:

    application fields -> build_application_schema ┐
                                                   ├-> assemble -> FinalSchema
    rules + wallet     -> build_document_schema   ┘

Each call owns its accumulators, so concurrent compilations for different
benefits or applicants need no coordination.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .assembler import assemble
from .catalog import parse_catalog_response
from .documents import build_document_schema
from .fields import FieldInput, build_application_schema, group_fields_by_group
from .matcher import load_wallet
from .models import FinalSchema, WalletDocument
from .prefill import extract_user_data_for_schema, parse_prefill

log = logging.getLogger(__name__)


@dataclass
class CompiledForm:
    """Everything a renderer needs to show one application form.

    Attributes:
        final: Compiled schema and uiSchema.
        form_data: Initial values seeded from the pre-fill payload.
        wallet: Applicant's documents, kept for reclassification.
        remark: Reviewer comment to show above the form.
        benefit_id: Benefit the form belongs to.
    """
    final: FinalSchema
    form_data: Dict[str, str] = field(default_factory=dict)
    wallet: List[WalletDocument] = field(default_factory=list)
    remark: Optional[str] = None
    benefit_id: Optional[str] = None


def compile_application_form(
    application_fields: Optional[FieldInput],
    rules: Optional[Sequence[Any]],
    wallet: Optional[Iterable[Any]] = None,
    title: str = "",
    benefit_id: Optional[str] = None,
) -> FinalSchema:
    """Compile declared fields, rules and the wallet into the final schema.

    Args:
        application_fields: Flat list or grouped mapping of application fields.
        rules: Mixed eligibility/document rule feed.
        wallet: Applicant's documents.
        title: Root schema title.
        benefit_id: Only used for log context.

    Returns:
        FinalSchema. Identical inputs always give identical output.
    """
    app_fragment = build_application_schema(application_fields or [])
    doc_fragment = build_document_schema(rules, wallet)
    final = assemble(app_fragment, doc_fragment, title=title)

    log.info(
        f"compiled form fields={len(final.properties)} required={len(final.required)} "
        f"documents={len(final.document_field_names)} missing={len(final.missing_documents)} "
        f"warnings={len(final.warnings)}",
        extra={"benefit_id": benefit_id or "-"},
    )
    return final


def compile_from_catalog(
    catalog_response: Dict[str, Any],
    prefill: Any = None,
    benefit_id: Optional[str] = None,
) -> CompiledForm:
    """Compile the form for a catalog response and an optional pre-fill payload.

    Application fields are grouped by their declared fieldset; the wallet and
    reviewer remark come from the pre-fill payload.

    Raises:
        CatalogParseError: If the catalog response lacks the item path.
    """
    item = parse_catalog_response(catalog_response)
    payload = parse_prefill(prefill)

    final = compile_application_form(
        group_fields_by_group(item.application_fields),
        item.rules,
        payload.wallet,
        benefit_id=benefit_id,
    )

    documents = set(final.document_field_names)
    personal_properties = {
        name: prop for name, prop in final.properties.items() if name not in documents
    }

    return CompiledForm(
        final=final,
        form_data=extract_user_data_for_schema(payload.values, personal_properties),
        wallet=load_wallet(payload.wallet),
        remark=payload.remark,
        benefit_id=benefit_id,
    )
