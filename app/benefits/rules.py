"""Requirement normalizer.

Splits the mixed rule feed into eligibility criteria and required-document
rules, and indexes the document rules by proof type.

Partition:
- criteria/criterionName/name + allowedProofs  -> EligibilityCriterion
- documentType + allowedProofs (no criteria) -> RequiredDocument

Malformed entries are skipped with a warning; they never abort the
compilation of the remaining rules.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

from .exceptions import MalformedRuleError
from .models import (
    CompilationWarning,
    CompilationWarningCode,
    EligibilityCriterion,
    ProofType,
    RequiredDocument,
)

log = logging.getLogger(__name__)


@dataclass
class NormalizedRules:
    """Partitioned rule feed plus proof-type indexes.

    Attributes:
        criteria: Eligibility criteria in feed order.
        required_docs: Required-document rules in feed order.
        mandatory_index: ProofType -> documentType for mandatory rules.
        optional_index: ProofType -> documentType for optional rules.
        warnings: MALFORMED_RULE warnings for skipped entries.
    """
    criteria: List[EligibilityCriterion] = field(default_factory=list)
    required_docs: List[RequiredDocument] = field(default_factory=list)
    mandatory_index: Dict[ProofType, str] = field(default_factory=dict)
    optional_index: Dict[ProofType, str] = field(default_factory=dict)
    warnings: List[CompilationWarning] = field(default_factory=list)

    def lookup_document_type(self, proof: ProofType) -> Optional[str]:
        """Find the document type backing a proof (optional rules first)."""
        if proof in self.optional_index:
            return self.optional_index[proof]
        return self.mandatory_index.get(proof)

    def is_backed(self, proof: ProofType) -> bool:
        return proof in self.optional_index or proof in self.mandatory_index


def _parse_allowed_proofs(rule: Dict[str, Any]) -> List[ProofType]:
    proofs = rule.get("allowedProofs")
    if not isinstance(proofs, list) or not proofs:
        raise MalformedRuleError("Rule 'allowedProofs' must be a non-empty list")
    if not all(isinstance(p, str) and p for p in proofs):
        raise MalformedRuleError("Rule 'allowedProofs' must contain only non-empty strings")
    return list(proofs)


def _criterion_name(rule: Dict[str, Any]) -> Optional[str]:
    criteria = rule.get("criteria")
    if isinstance(criteria, dict):
        name = criteria.get("name")
    elif isinstance(criteria, str):
        name = criteria
    else:
        name = rule.get("criterionName") or rule.get("name")
    return name if isinstance(name, str) and name else None


def is_criterion_rule(rule: Dict[str, Any]) -> bool:
    if rule.get("criteria") is not None or rule.get("criterionName") is not None:
        return True
    # Shorthand {name, allowedProofs} without a documentType
    return rule.get("name") is not None and rule.get("documentType") is None


def parse_rule(rule: Any) -> Union[EligibilityCriterion, RequiredDocument]:
    """Parse one rule feed entry.

    Raises:
        MalformedRuleError: If the entry is not a recognizable rule.
    """
    if not isinstance(rule, dict):
        raise MalformedRuleError(f"Rule entry is not an object: {rule!r}")

    if is_criterion_rule(rule):
        name = _criterion_name(rule)
        if name is None:
            raise MalformedRuleError("Eligibility rule missing criterion name")
        is_required = rule.get("isRequired")
        return EligibilityCriterion(
            criterion_name=name,
            allowed_proofs=_parse_allowed_proofs(rule),
            is_required=is_required if isinstance(is_required, bool) else None,
        )

    document_type = rule.get("documentType")
    if not isinstance(document_type, str) or not document_type:
        raise MalformedRuleError("Document rule missing 'documentType'")
    return RequiredDocument(
        document_type=document_type,
        allowed_proofs=_parse_allowed_proofs(rule),
        is_required=rule.get("isRequired") is True,
    )


def _index_document(index: Dict[ProofType, str], doc: RequiredDocument) -> None:
    # First-seen wins; repeated proof/type pairs are ignored
    for proof in doc.allowed_proofs:
        index.setdefault(proof, doc.document_type)


def normalize(rules: Optional[Sequence[Any]]) -> NormalizedRules:
    """Partition a raw rule feed and build proof-type indexes.

    Args:
        rules: Mixed array of eligibility and document rule records.

    Returns:
        NormalizedRules. Malformed entries are omitted and reported in
        `warnings`; a non-list input yields empty results.
    """
    result = NormalizedRules()
    if not isinstance(rules, (list, tuple)):
        if rules is not None:
            message = f"Rule feed is not a list: {type(rules).__name__}"
            log.warning(message)
            result.warnings.append(
                CompilationWarning(code=CompilationWarningCode.MALFORMED_RULE, message=message)
            )
        return result

    for index, raw in enumerate(rules):
        try:
            rule = parse_rule(raw)
        except MalformedRuleError as e:
            message = f"Skipped malformed rule at index {index}: {e.message}"
            log.warning(message)
            result.warnings.append(
                CompilationWarning(
                    code=CompilationWarningCode.MALFORMED_RULE,
                    message=message,
                    rule_index=index,
                )
            )
            continue

        if isinstance(rule, EligibilityCriterion):
            result.criteria.append(rule)
        else:
            result.required_docs.append(rule)
            target = result.mandatory_index if rule.is_required else result.optional_index
            _index_document(target, rule)

    log.debug(
        f"normalized rules criteria={len(result.criteria)} "
        f"required_docs={len(result.required_docs)} skipped={len(result.warnings)}"
    )
    return result
