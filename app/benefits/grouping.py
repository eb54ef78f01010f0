"""Proof-group merger.

Groups eligibility criteria with set-equal allowed proofs and decides how
many document fields each group becomes. Tie-break order, coarsest first:

1. Group: every proof of the group is backed by a mandatory or optional
   document rule -> one required selector `name1_name2_doc`.
2. Criterion: the criterion accepts several proofs -> `criterion_doc`.
3. Proof: the criterion accepts exactly one proof -> `criterion_proof_doc`.

Required-document rules then add one field per proof that no group has
already absorbed.

The field names produced here feed the required list and the reclassifier's
document-field set, so groups are always processed in feed order.
"""

import json
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from app.core.config import ELIGIBILITY_DOCUMENT_TYPE

from .models import EligibilityCriterion, ProofGroup, ProofType
from .rules import NormalizedRules


@dataclass
class DocumentFieldPlan:
    """A document field decided by the merger, before wallet matching.

    Attributes:
        name: Generated field name.
        title: Field title without the proof suffix.
        proofs: Proof types the wallet is filtered by.
        proof_label: Raw proof text appended to the title.
        required: Whether the field goes into the root required list.
        submission_reasons: Criteria or document types the field satisfies.
        document_type: Document type recorded in vcMeta.
        document_subtype: Default subtype recorded in vcMeta.
    """
    name: str
    title: str
    proofs: List[ProofType]
    proof_label: str
    required: bool
    submission_reasons: List[str] = field(default_factory=list)
    document_type: str = ELIGIBILITY_DOCUMENT_TYPE
    document_subtype: Optional[str] = None


def proof_set_key(proofs: Iterable[ProofType]) -> str:
    """Canonical, order-insensitive key for a proof set."""
    return json.dumps(sorted(set(proofs)))


def group_by_proof_set(criteria: Iterable[EligibilityCriterion]) -> List[ProofGroup]:
    """Merge criteria whose allowed proofs are set-equal.

    Returns:
        Groups in order of first appearance; criterion names within a group
        keep feed order.
    """
    groups: Dict[str, ProofGroup] = {}
    for criterion in criteria:
        key = proof_set_key(criterion.allowed_proofs)
        group = groups.get(key)
        if group is None:
            group = ProofGroup(
                allowed_proofs_key=key,
                allowed_proofs=list(dict.fromkeys(criterion.allowed_proofs)),
            )
            groups[key] = group
        group.criterion_names.append(criterion.criterion_name)
        group.criteria.append(criterion)
    return list(groups.values())


def resolve_group_coverage(group: ProofGroup, rules: NormalizedRules) -> Optional[List[str]]:
    """Check that every proof of a group is backed by a document rule.

    Returns:
        The backing document type per proof, or None if any proof is unbacked.
    """
    matched = []
    for proof in group.allowed_proofs:
        document_type = rules.lookup_document_type(proof)
        if document_type is None:
            return None
        matched.append(document_type)
    return matched


def _plan_merged_field(group: ProofGroup, matched_types: List[str]) -> DocumentFieldPlan:
    names = group.criterion_names
    document_types = list(dict.fromkeys(t for t in matched_types if t))
    document_type = document_types[0] if len(document_types) == 1 else ELIGIBILITY_DOCUMENT_TYPE

    title = f"Choose document for {', '.join(names)}"
    if document_type != ELIGIBILITY_DOCUMENT_TYPE:
        title = f"{title}, {document_type}"

    return DocumentFieldPlan(
        name="_".join(names) + "_doc",
        title=title,
        proofs=list(group.allowed_proofs),
        proof_label=" / ".join(group.allowed_proofs),
        required=True,
        submission_reasons=list(names),
        document_type=document_type,
        document_subtype=group.allowed_proofs[0],
    )


def _plan_criterion_fields(criterion: EligibilityCriterion) -> List[DocumentFieldPlan]:
    name = criterion.criterion_name
    proofs = list(dict.fromkeys(criterion.allowed_proofs))

    if len(proofs) > 1:
        return [
            DocumentFieldPlan(
                name=f"{name}_doc",
                title=f"Choose document for {name}",
                proofs=list(proofs),
                proof_label=" / ".join(proofs),
                required=True,
                submission_reasons=[name],
                document_subtype=proofs[0],
            )
        ]

    return [
        DocumentFieldPlan(
            name=f"{name}_{proof}_doc",
            title=f"Choose document for {name}",
            proofs=[proof],
            proof_label=proof,
            required=True,
            submission_reasons=[name],
            document_subtype=proof,
        )
        for proof in proofs
    ]


def plan_group_fields(group: ProofGroup, rules: NormalizedRules) -> List[DocumentFieldPlan]:
    """Decide the document fields for one proof group."""
    matched_types = resolve_group_coverage(group, rules)
    if matched_types is not None and group.criterion_names:
        return [_plan_merged_field(group, matched_types)]

    plans: List[DocumentFieldPlan] = []
    for criterion in group.criteria:
        plans.extend(_plan_criterion_fields(criterion))
    return plans


def plan_required_document_fields(
    rules: NormalizedRules,
    groups: List[ProofGroup],
) -> List[DocumentFieldPlan]:
    """Decide the fields for standalone document rules.

    Mandatory rules come first (stable otherwise). A proof already covered by
    an eligibility group is skipped, unless that group accepts several proofs,
    in which case the proof still gets its own field.
    """
    covered = set()
    multi_proof = set()
    for group in groups:
        covered.update(group.allowed_proofs)
        if len(group.allowed_proofs) > 1:
            multi_proof.update(group.allowed_proofs)

    plans: List[DocumentFieldPlan] = []
    for doc in sorted(rules.required_docs, key=lambda d: not d.is_required):
        for proof in doc.allowed_proofs:
            if proof in covered and proof not in multi_proof:
                continue
            plans.append(
                DocumentFieldPlan(
                    name=proof,
                    title=f"Choose document for {doc.document_type}",
                    proofs=[proof],
                    proof_label=proof,
                    required=doc.is_required,
                    submission_reasons=[doc.document_type],
                    document_type=doc.document_type,
                    document_subtype=proof,
                )
            )
    return plans
