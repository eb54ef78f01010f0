"""Document field schema builder.

Drives the normalizer, the proof-group merger and the document matcher for
one compilation pass and materializes the resulting document fields.
"""

import logging
from typing import Any, Iterable, Optional, Sequence, Union

from app.core.config import (
    DEFAULT_DOCUMENT_ISSUER,
    DOCUMENT_FORMAT,
    DOCUMENTS_GROUP_LABEL,
    DOCUMENTS_GROUP_NAME,
)

from .classification import is_file_upload_field
from .grouping import (
    DocumentFieldPlan,
    group_by_proof_set,
    plan_group_fields,
    plan_required_document_fields,
)
from .matcher import humanize_proof_label, load_wallet, match_documents
from .models import (
    CompilationWarningCode,
    FieldSchema,
    SchemaFragment,
    VCMeta,
    WalletDocument,
)
from .registry import FieldRegistry
from .rules import NormalizedRules, normalize

log = logging.getLogger(__name__)


def build_document_field(
    plan: DocumentFieldPlan,
    wallet: Sequence[WalletDocument],
) -> FieldSchema:
    """Materialize a planned document field against the wallet.

    With no matching wallet entry the selector still exists with a single
    empty option so it can be flagged as missing.
    """
    options = match_documents(plan.proofs, wallet)

    title = plan.title
    if plan.proof_label:
        title = f"{title} ({humanize_proof_label(plan.proof_label)})"

    return FieldSchema(
        name=plan.name,
        title=title,
        required=plan.required,
        enum=options.values if options else [""],
        enum_names=options.names,
        default=options.values[0] if options else "",
        group_name=DOCUMENTS_GROUP_NAME,
        group_label=DOCUMENTS_GROUP_LABEL,
        vc_meta=VCMeta(
            submission_reasons=list(plan.submission_reasons),
            document_type=plan.document_type,
            document_subtype=plan.document_subtype,
            format=DOCUMENT_FORMAT,
            issuer=DEFAULT_DOCUMENT_ISSUER,
            is_file_upload=is_file_upload_field(plan.name),
        ),
    )


def build_document_schema(
    rules: Union[NormalizedRules, Sequence[Any], None],
    wallet: Optional[Iterable[Any]] = None,
    registry: Optional[FieldRegistry] = None,
) -> SchemaFragment:
    """Compile eligibility and document rules into document fields.

    Args:
        rules: Raw rule feed, or rules already normalized.
        wallet: Applicant's documents (records or WalletDocument).
        registry: Accumulator to add into; a fresh one is used when omitted.

    Returns:
        SchemaFragment of document fields, all tagged with the documents group.
    """
    registry = registry if registry is not None else FieldRegistry()
    normalized = rules if isinstance(rules, NormalizedRules) else normalize(rules)
    registry.extend_warnings(normalized.warnings)
    documents = load_wallet(wallet)

    groups = group_by_proof_set(normalized.criteria)
    plans = []
    for group in groups:
        plans.extend(plan_group_fields(group, normalized))
    plans.extend(plan_required_document_fields(normalized, groups))

    for plan in plans:
        document_field = build_document_field(plan, documents)
        if registry.add(document_field) and not document_field.enum_names:
            registry.warn(
                CompilationWarningCode.UNMATCHED_DOCUMENT,
                f"{plan.name} does not have a document",
                field_name=plan.name,
            )

    log.debug(f"built {len(registry)} document fields from {len(plans)} plans")
    return registry.fragment()
