"""Submission reclassifier.

Walks the filled form values and splits them into personal fields, raw file
uploads and VC-style document records. For VC documents the real document
type and issuer are recovered from the wallet entry the applicant selected.

Encoding failures are fatal: the whole submission is aborted rather than
sending a payload with a silently missing document.
"""

import base64
import json
import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union
from urllib.parse import quote

from app.core.config import (
    DEFAULT_DOCUMENT_ISSUER,
    DOCUMENT_FORMAT,
    ENCODED_CONTENT_PREFIX,
    UNKNOWN_DOCUMENT_TYPE,
)

from .assembler import get_document_field_names, get_personal_field_names
from .classification import field_is_file_upload
from .exceptions import DocumentEncodingError
from .matcher import load_wallet
from .models import FinalSchema, WalletDocument

log = logging.getLogger(__name__)

# Characters encodeURIComponent leaves unescaped besides alphanumerics
_URI_COMPONENT_SAFE = "-_.!~*'()"

FileUpload = Dict[str, str]


@dataclass
class VCDocument:
    """Document record submitted alongside the personal fields."""
    document_submission_reason: str
    document_type: str
    document_subtype: str
    document_format: str
    document_imported_from: str
    document_content: str


@dataclass
class DocumentMetadata:
    """Metadata recovered from the selected wallet entry."""
    document_type: str
    document_issuer: str
    selected_doc: Optional[WalletDocument] = None

    @property
    def resolved(self) -> bool:
        return self.selected_doc is not None


@dataclass
class ReclassifiedSubmission:
    """Filled values split by destination."""
    personal_fields: Dict[str, Any] = field(default_factory=dict)
    files: List[FileUpload] = field(default_factory=list)
    vc_documents: List[VCDocument] = field(default_factory=list)


def encode_to_base64(value: Any) -> str:
    """Encode a form value for submission.

    The value is percent-encoded as a URI component, base64-encoded and
    prefixed with 'base64,'.

    Raises:
        DocumentEncodingError: If the value cannot be encoded (e.g. lone
            surrogates that have no UTF-8 form).
    """
    text = value if isinstance(value, str) else str(value)
    try:
        escaped = quote(text, safe=_URI_COMPONENT_SAFE, encoding="utf-8", errors="strict")
        encoded = base64.b64encode(escaped.encode("ascii")).decode("ascii")
    except (UnicodeEncodeError, UnicodeDecodeError) as e:
        log.error(f"Failed to encode string to base64: {e}")
        raise DocumentEncodingError("Failed to encode string to base64") from e
    return f"{ENCODED_CONTENT_PREFIX}{encoded}"


def _find_selected_document(
    selected: str,
    wallet: List[WalletDocument],
) -> Optional[WalletDocument]:
    for doc in wallet:
        if doc.doc_data == selected or doc.doc_id == selected:
            return doc
    return None


def extract_document_metadata(
    selected: Any,
    wallet: Optional[Iterable[Any]],
) -> DocumentMetadata:
    """Recover document type and issuer for a selected option.

    The selection is matched against doc_data, then doc_id. A selection that
    no longer exists in the wallet falls back to the unknown type and the
    placeholder issuer.
    """
    documents = load_wallet(wallet)
    if not selected or not documents:
        return DocumentMetadata(UNKNOWN_DOCUMENT_TYPE, DEFAULT_DOCUMENT_ISSUER)

    selected_doc = _find_selected_document(str(selected), documents)
    if selected_doc is None:
        return DocumentMetadata(UNKNOWN_DOCUMENT_TYPE, DEFAULT_DOCUMENT_ISSUER)

    return DocumentMetadata(
        document_type=selected_doc.doc_type or UNKNOWN_DOCUMENT_TYPE,
        document_issuer=selected_doc.imported_from or DEFAULT_DOCUMENT_ISSUER,
        selected_doc=selected_doc,
    )


def extract_document_subtype(value: Any, field_schema: Optional[Mapping[str, Any]]) -> str:
    """Resolve the subtype of a selected option via the field's enumNames."""
    field_schema = field_schema or {}
    vc_meta = field_schema.get("vcMeta") or {}
    fallback = vc_meta.get("documentSubtype") or UNKNOWN_DOCUMENT_TYPE

    options = field_schema.get("enum")
    names = field_schema.get("enumNames")
    if not value or not options or not names:
        return fallback

    try:
        index = options.index(value)
    except ValueError:
        return fallback
    if index < len(names) and names[index]:
        return names[index]
    return fallback


def create_vc_document(
    field_name: str,
    value: Any,
    encoded_content: str,
    field_schema: Optional[Mapping[str, Any]],
    wallet: Optional[Iterable[Any]],
) -> VCDocument:
    """Build the VC document record for one document field."""
    vc_meta = (field_schema or {}).get("vcMeta") or {}
    metadata = extract_document_metadata(value, wallet)
    if not metadata.resolved:
        log.warning(
            f"document type/issuer for {field_name} not recovered, submitted as "
            f"{metadata.document_type}",
            extra={"field_name": field_name},
        )

    return VCDocument(
        document_submission_reason=json.dumps(vc_meta.get("submissionReasons") or [field_name]),
        document_type=metadata.document_type,
        document_subtype=extract_document_subtype(value, field_schema),
        document_format=vc_meta.get("format") or DOCUMENT_FORMAT,
        document_imported_from=metadata.document_issuer,
        document_content=encoded_content,
    )


def _resolve_field_schemas(
    field_schemas: Union[FinalSchema, Mapping[str, Any]],
) -> Tuple[Dict[str, Any], Optional[List[str]]]:
    if isinstance(field_schemas, FinalSchema):
        return dict(field_schemas.properties), list(field_schemas.document_field_names)
    if "properties" in field_schemas and isinstance(field_schemas.get("properties"), dict):
        return dict(field_schemas["properties"]), None
    return dict(field_schemas), None


def reclassify(
    filled_values: Mapping[str, Any],
    field_schemas: Union[FinalSchema, Mapping[str, Any]],
    wallet: Optional[Iterable[Any]] = None,
    document_field_names: Optional[List[str]] = None,
) -> ReclassifiedSubmission:
    """Split filled values into personal fields, files and VC documents.

    Args:
        filled_values: Form data keyed by field name.
        field_schemas: FinalSchema, a schema object with 'properties', or the
            properties mapping itself.
        wallet: Applicant's documents, used to recover type and issuer.
        document_field_names: Document field names computed at assembly;
            derived from the schemas when omitted.

    Returns:
        ReclassifiedSubmission.

    Raises:
        DocumentEncodingError: If any document value fails to encode.
    """
    properties, assembled_names = _resolve_field_schemas(field_schemas)
    if document_field_names is None:
        document_field_names = assembled_names
    if document_field_names is None:
        document_field_names = get_document_field_names(properties)

    result = ReclassifiedSubmission()
    documents = load_wallet(wallet)

    for name in get_personal_field_names(list(filled_values), document_field_names):
        value = filled_values[name]
        if value is not None:
            result.personal_fields[name] = value

    for name in document_field_names:
        value = filled_values.get(name)
        if not value:
            log.debug(f"{name} is missing from form data", extra={"field_name": name})
            continue

        field_schema = properties.get(name)
        encoded_content = encode_to_base64(value)

        if field_is_file_upload(name, field_schema):
            result.files.append({name: encoded_content})
        else:
            result.vc_documents.append(
                create_vc_document(name, value, encoded_content, field_schema, documents)
            )

    return result


def build_submission_payload(
    result: ReclassifiedSubmission,
    benefit_id: str,
) -> Dict[str, Any]:
    """Shape the reclassified values into the submission payload.

    'files' and 'vc_documents' are only present when non-empty.
    """
    payload: Dict[str, Any] = {"benefitId": benefit_id}
    payload.update(result.personal_fields)
    if result.files:
        payload["files"] = list(result.files)
    if result.vc_documents:
        payload["vc_documents"] = [asdict(doc) for doc in result.vc_documents]
    return payload
