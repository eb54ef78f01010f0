"""Document matcher.

Selects wallet entries satisfying a set of proof types and turns them into
selector options (value = doc_data, label = doc_subtype).
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional

from .models import ProofType, WalletDocument

log = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"([a-z])([A-Z])")
_WORD_START = re.compile(r"\b\w", re.ASCII)


@dataclass
class DocumentOptions:
    """Parallel option arrays for a document selector."""
    values: List[str] = field(default_factory=list)
    names: List[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.values)


def load_wallet(wallet: Optional[Iterable[Any]]) -> List[WalletDocument]:
    """Coerce wallet records (dicts or WalletDocument) into WalletDocument.

    Entries that are neither are dropped.
    """
    documents: List[WalletDocument] = []
    for entry in wallet or []:
        if isinstance(entry, WalletDocument):
            documents.append(entry)
        elif isinstance(entry, dict):
            documents.append(WalletDocument.from_dict(entry))
        else:
            log.debug(f"ignoring wallet entry of type {type(entry).__name__}")
    return documents


def filter_documents(
    proof_types: Iterable[ProofType],
    wallet: Optional[Iterable[WalletDocument]],
) -> List[WalletDocument]:
    """Return wallet entries whose subtype is one of proof_types, in wallet order."""
    if not wallet:
        return []
    wanted = set(proof_types)
    return [doc for doc in wallet if doc.doc_subtype in wanted]


def match_documents(
    proof_types: Iterable[ProofType],
    wallet: Optional[Iterable[WalletDocument]],
) -> DocumentOptions:
    """Build selector options for the given proof types.

    Args:
        proof_types: Acceptable proof types.
        wallet: Applicant's documents.

    Returns:
        DocumentOptions; both lists are empty (never None) when nothing matches.
    """
    options = DocumentOptions()
    for doc in filter_documents(proof_types, wallet):
        options.values.append(doc.doc_data)
        options.names.append(doc.doc_subtype)
    return options


def humanize_proof_label(label: str) -> str:
    """Make a proof label readable.

    'incomeCertificate/otherProof' -> 'Income Certificate / Other Proof'
    """
    segments = []
    for segment in label.split("/"):
        segment = _CAMEL_BOUNDARY.sub(r"\1 \2", segment.strip())
        segments.append(_WORD_START.sub(lambda m: m.group(0).upper(), segment))
    return " / ".join(segments)
