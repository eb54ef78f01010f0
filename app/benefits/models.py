"""Benefit form compiler models.

Input records (application fields, eligibility criteria, required documents,
wallet documents) and the compiler's output units (field schemas, schema
fragments, the final schema).
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .exceptions import MalformedRuleError

ProofType = str


def _pick(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present key's value (snake_case or camelCase input)."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


# =============================================================================
# Compilation warnings
# =============================================================================


class CompilationWarningCode(str, Enum):
    """Non-fatal conditions found while compiling a form schema."""

    MALFORMED_RULE = "MALFORMED_RULE"  # Rule entry skipped
    MALFORMED_FIELD = "MALFORMED_FIELD"  # Application field entry skipped
    DUPLICATE_FIELD = "DUPLICATE_FIELD"  # Second field with same name discarded
    UNMATCHED_DOCUMENT = "UNMATCHED_DOCUMENT"  # No wallet entry satisfies the field


@dataclass(frozen=True)
class CompilationWarning:
    """Warning that does not stop compilation.

    Attributes:
        code: Warning code from CompilationWarningCode.
        message: Human-readable warning message.
        field_name: Generated field the warning refers to (optional).
        rule_index: Position of the offending entry in its input array (optional).
    """

    code: CompilationWarningCode
    message: str
    field_name: Optional[str] = None
    rule_index: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "field_name": self.field_name,
            "rule_index": self.rule_index,
        }


# =============================================================================
# Input records
# =============================================================================


@dataclass(frozen=True)
class FieldOption:
    value: str
    label: str


@dataclass
class ApplicationField:
    """Application-form field declared by the benefit definition.

    Attributes:
        name: Property name in the generated schema.
        label: Display title.
        type: Declared widget type (text, radio, select, date, ...).
        required: Whether the applicant must fill it.
        options: Choices for radio/select fields, in display order.
        multiple: Whether several options may be chosen.
        group_name: Fieldset the field belongs to, if any.
        group_label: Display label of that fieldset.
    """
    name: str
    label: str = ""
    type: str = "string"
    required: bool = False
    options: List[FieldOption] = field(default_factory=list)
    multiple: bool = False
    group_name: Optional[str] = None
    group_label: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "ApplicationField":
        """Build from a catalog field record.

        Raises:
            MalformedRuleError: If the record is not a mapping or has no name.
        """
        if not isinstance(data, dict):
            raise MalformedRuleError(f"Field entry is not an object: {data!r}")
        name = data.get("name")
        if not isinstance(name, str) or not name:
            raise MalformedRuleError("Field entry missing 'name'")

        options = []
        for option in data.get("options") or []:
            if isinstance(option, dict) and "value" in option:
                value = str(option["value"])
                options.append(FieldOption(value=value, label=str(option.get("label", value))))
            elif isinstance(option, str):
                options.append(FieldOption(value=option, label=option))

        return cls(
            name=name,
            label=str(data.get("label") or ""),
            type=str(data.get("type") or "string"),
            required=data.get("required") is True,
            options=options,
            multiple=bool(data.get("multiple", False)),
            group_name=_pick(data, "groupName", "fieldsGroupName"),
            group_label=_pick(data, "groupLabel", "fieldsGroupLabel"),
        )


@dataclass
class FieldGroup:
    """Pre-grouped application fields sharing one fieldset."""
    name: str
    label: str
    fields: List[ApplicationField] = field(default_factory=list)


@dataclass
class EligibilityCriterion:
    """Named eligibility condition satisfiable by any of its allowed proofs."""
    criterion_name: str
    allowed_proofs: List[ProofType]
    is_required: Optional[bool] = None


@dataclass
class RequiredDocument:
    """Standalone mandatory/optional document rule."""
    document_type: str
    allowed_proofs: List[ProofType]
    is_required: bool = False


@dataclass
class WalletDocument:
    """Document already held by the applicant.

    Attributes:
        doc_id: Wallet identifier.
        doc_type: Document category (e.g. 'incomeProof').
        doc_subtype: Proof type this document satisfies.
        doc_data: Document content; also the option value in selectors.
        imported_from: Issuer/source the document was imported from.
    """
    doc_id: str
    doc_type: str
    doc_subtype: ProofType
    doc_data: str
    imported_from: str = ""
    doc_name: str = ""
    doc_datatype: str = ""
    doc_path: str = ""
    doc_verified: bool = False
    is_uploaded: bool = False
    uploaded_at: str = ""
    user_id: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WalletDocument":
        """Build from a wallet record (snake_case or camelCase keys)."""
        doc_data = _pick(data, "doc_data", "docData", default="")
        if not isinstance(doc_data, str):
            doc_data = json.dumps(doc_data, separators=(",", ":"), ensure_ascii=False)
        return cls(
            doc_id=str(_pick(data, "doc_id", "docId", default="")),
            doc_type=str(_pick(data, "doc_type", "docType", default="")),
            doc_subtype=str(_pick(data, "doc_subtype", "docSubtype", default="")),
            doc_data=doc_data,
            imported_from=str(_pick(data, "imported_from", "importedFrom", default="")),
            doc_name=str(_pick(data, "doc_name", "docName", default="")),
            doc_datatype=str(_pick(data, "doc_datatype", "docDatatype", default="")),
            doc_path=str(_pick(data, "doc_path", "docPath", default="")),
            doc_verified=bool(_pick(data, "doc_verified", "docVerified", default=False)),
            is_uploaded=bool(_pick(data, "is_uploaded", "isUploaded", default=False)),
            uploaded_at=str(_pick(data, "uploaded_at", "uploadedAt", default="")),
            user_id=str(_pick(data, "user_id", "userId", default="")),
        )


@dataclass
class ProofGroup:
    """Eligibility criteria sharing one allowed-proof set.

    Exists only while a form is being compiled.

    Attributes:
        allowed_proofs_key: Canonical sorted JSON of the proof set.
        criterion_names: Names of the merged criteria, in feed order.
        allowed_proofs: Proof list as declared by the first criterion.
        criteria: The merged criteria themselves.
    """
    allowed_proofs_key: str
    criterion_names: List[str] = field(default_factory=list)
    allowed_proofs: List[ProofType] = field(default_factory=list)
    criteria: List[EligibilityCriterion] = field(default_factory=list)


# =============================================================================
# Output units
# =============================================================================


@dataclass
class VCMeta:
    """Submission-time metadata attached to document fields.

    Invisible to the renderer; read back by the reclassifier.
    """
    submission_reasons: List[str]
    document_type: str
    document_subtype: Optional[str]
    format: str
    issuer: str
    is_file_upload: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "submissionReasons": list(self.submission_reasons),
            "documentType": self.document_type,
            "documentSubtype": self.document_subtype,
            "format": self.format,
            "issuer": self.issuer,
            "isFileUpload": self.is_file_upload,
        }


@dataclass
class FieldSchema:
    """One property of the generated form schema."""
    name: str
    title: str
    type: str = "string"
    required: bool = False
    enum: Optional[List[str]] = None
    enum_names: Optional[List[str]] = None
    default: Optional[str] = None
    group_name: Optional[str] = None
    group_label: Optional[str] = None
    vc_meta: Optional[VCMeta] = None
    pattern: Optional[str] = None
    format: Optional[str] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None

    @property
    def is_document(self) -> bool:
        return self.vc_meta is not None

    def to_property(self) -> Dict[str, Any]:
        """Serialize to an RJSF property.

        The per-property 'required' marker is only emitted when True; the
        assembler moves it to the root 'required' list.
        """
        prop: Dict[str, Any] = {"type": self.type, "title": self.title}
        if self.format is not None:
            prop["format"] = self.format
        if self.pattern is not None:
            prop["pattern"] = self.pattern
        if self.min_length is not None:
            prop["minLength"] = self.min_length
        if self.max_length is not None:
            prop["maxLength"] = self.max_length
        if self.enum is not None:
            prop["enum"] = list(self.enum)
        if self.enum_names is not None:
            prop["enumNames"] = list(self.enum_names)
        if self.default is not None:
            prop["default"] = self.default
        if self.required:
            prop["required"] = True
        if self.group_name:
            prop["fieldGroup"] = {
                "groupName": self.group_name,
                "groupLabel": self.group_label,
            }
        if self.vc_meta is not None:
            prop["vcMeta"] = self.vc_meta.to_dict()
        return prop


@dataclass
class SchemaFragment:
    """Partial object schema produced by one builder.

    Attributes:
        properties: Field schemas keyed by name, in creation order.
        required: Names of required fields, in creation order.
        warnings: Non-fatal issues found while building the fragment.
    """
    properties: Dict[str, FieldSchema] = field(default_factory=dict)
    required: List[str] = field(default_factory=list)
    warnings: List[CompilationWarning] = field(default_factory=list)

    def to_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {name: f.to_property() for name, f in self.properties.items()},
            "required": list(self.required),
        }


@dataclass
class FinalSchema:
    """Assembled form schema plus its rendering side-channel.

    Attributes:
        schema: JSON-Schema (draft-07 compatible) object consumed by the renderer.
        ui_schema: Ordering/grouping hints ('ui:order', 'ui:group*').
        document_field_names: Properties submitted as documents.
        missing_documents: Document fields with no matching wallet entry.
        warnings: Non-fatal compilation issues.
    """
    schema: Dict[str, Any]
    ui_schema: Dict[str, Any]
    document_field_names: List[str] = field(default_factory=list)
    missing_documents: List[str] = field(default_factory=list)
    warnings: List[CompilationWarning] = field(default_factory=list)

    @property
    def properties(self) -> Dict[str, Dict[str, Any]]:
        return self.schema.get("properties", {})

    @property
    def required(self) -> List[str]:
        return self.schema.get("required", [])

    def to_dict(self) -> Dict[str, Any]:
        return {"schema": self.schema, "uiSchema": self.ui_schema}
