"""Application field schema builder.

Converts the benefit's declared application-form fields into a schema
fragment. Input arrives either as a flat list or pre-grouped by fieldset;
both shapes are normalized into one tagged list before any field is built.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from app.core.config import DEFAULT_GROUP_LABEL, DEFAULT_GROUP_NAME

from .exceptions import MalformedRuleError
from .models import (
    ApplicationField,
    CompilationWarningCode,
    FieldGroup,
    FieldSchema,
    SchemaFragment,
)
from .registry import FieldRegistry

log = logging.getLogger(__name__)

FieldInput = Union[
    Sequence[Union[ApplicationField, Dict[str, Any]]],
    Mapping[str, Union[FieldGroup, Dict[str, Any]]],
]


# =============================================================================
# Validation templates
# =============================================================================


@dataclass(frozen=True)
class ValidationTemplate:
    """Fixed constraints for a well-known field name.

    Attributes:
        title: Title used when the field declares no label.
        pattern: Regular expression the value must match.
        format: JSON-Schema format keyword.
        min_length: Minimum string length.
        max_length: Maximum string length.
    """

    title: str
    pattern: Optional[str] = None
    format: Optional[str] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None


_PHONE = ValidationTemplate(
    title="Enter valid phone number (+91XXXXXXXXXX)",
    pattern=r"^\+91[6-9]\d{9}$",
)
_AADHAAR = ValidationTemplate(
    title="Enter valid Aadhar number (12 digits)",
    pattern=r"^[0-9]{12}$",
)
_PIN_CODE = ValidationTemplate(
    title="Enter valid PIN code (6 digits)",
    pattern=r"^[0-9]{6}$",
)

VALIDATION_TEMPLATES: Dict[str, ValidationTemplate] = {
    "bankAccountNumber": ValidationTemplate(
        title="Enter valid bank account number (9-18 digits)",
        pattern=r"^[0-9]+$",
        min_length=9,
        max_length=18,
    ),
    "bankIfscCode": ValidationTemplate(
        title="Enter valid IFSC code (e.g., SBIN0001234)",
        pattern=r"^[A-Z]{4}0[A-Z0-9]{6}$",
    ),
    "email": ValidationTemplate(
        title="Enter valid email address",
        pattern=r"^[^\s@]+@[^\s@]+\.[^\s@]+$",
    ),
    "phone": _PHONE,
    "mobileNumber": _PHONE,
    "dateOfBirth": ValidationTemplate(title="Date of Birth", format="date"),
    "panCard": ValidationTemplate(
        title="Enter valid PAN card (e.g., ABCDE1234F)",
        pattern=r"^[A-Z]{5}[0-9]{4}[A-Z]{1}$",
    ),
    "aadharCard": _AADHAAR,
    "uidai": _AADHAAR,
    "pincode": _PIN_CODE,
    "postalCode": _PIN_CODE,
}

CHOICE_FIELD_TYPES = frozenset({"radio", "select"})


# =============================================================================
# Input normalization
# =============================================================================


def group_fields_by_group(raw_fields: Sequence[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    """Group catalog field records by their fieldsGroupName.

    Fields without a group land in the default group.

    Args:
        raw_fields: Field records as decoded from the catalog.

    Returns:
        {group_name: {"label": str, "fields": [record, ...]}} in first-seen order.
    """
    groups: Dict[str, Dict[str, Any]] = {}
    for raw in raw_fields:
        if not isinstance(raw, dict):
            continue
        group_name = raw.get("fieldsGroupName") or DEFAULT_GROUP_NAME
        group_label = raw.get("fieldsGroupLabel") or DEFAULT_GROUP_LABEL
        if group_name not in groups:
            groups[group_name] = {"label": group_label, "fields": []}
        groups[group_name]["fields"].append(raw)
    return groups


def _coerce_field(entry: Any) -> ApplicationField:
    if isinstance(entry, ApplicationField):
        return entry
    return ApplicationField.from_dict(entry)


def normalize_field_input(
    fields: FieldInput,
    registry: Optional[FieldRegistry] = None,
) -> List[ApplicationField]:
    """Resolve flat or grouped field input into one tagged list.

    Flat entries keep any group metadata they declare themselves. Grouped
    entries are tagged with their group key and label.

    Malformed entries are skipped; when a registry is given a
    MALFORMED_FIELD warning is recorded for each.
    """
    result: List[ApplicationField] = []

    def _skip(exc: MalformedRuleError, index: int) -> None:
        if registry is not None:
            registry.warn(CompilationWarningCode.MALFORMED_FIELD, exc.message, rule_index=index)
        else:
            log.warning(exc.message)

    if isinstance(fields, Mapping):
        index = 0
        for group_name, group in fields.items():
            if isinstance(group, FieldGroup):
                label, entries = group.label, group.fields
            elif isinstance(group, dict):
                label, entries = group.get("label", ""), group.get("fields") or []
            else:
                continue
            for entry in entries:
                try:
                    app_field = _coerce_field(entry)
                except MalformedRuleError as e:
                    _skip(e, index)
                else:
                    result.append(
                        replace(app_field, group_name=group_name, group_label=label)
                    )
                index += 1
        return result

    for index, entry in enumerate(fields or []):
        try:
            result.append(_coerce_field(entry))
        except MalformedRuleError as e:
            _skip(e, index)
    return result


# =============================================================================
# Field construction
# =============================================================================


def build_field_schema(app_field: ApplicationField) -> FieldSchema:
    """Build the schema for one declared field.

    Well-known names get their validation template; radio/select fields get
    enum/enumNames from their options in declaration order.
    """
    field_schema = FieldSchema(
        name=app_field.name,
        title=app_field.label,
        required=app_field.required,
        group_name=app_field.group_name,
        group_label=app_field.group_label,
    )

    template = VALIDATION_TEMPLATES.get(app_field.name)
    if template is not None:
        field_schema.title = app_field.label or template.title
        field_schema.pattern = template.pattern
        field_schema.format = template.format
        field_schema.min_length = template.min_length
        field_schema.max_length = template.max_length

    if app_field.type in CHOICE_FIELD_TYPES and app_field.options:
        field_schema.enum = [option.value for option in app_field.options]
        field_schema.enum_names = [option.label for option in app_field.options]

    return field_schema


def build_application_schema(
    fields: FieldInput,
    registry: Optional[FieldRegistry] = None,
) -> SchemaFragment:
    """Convert declared application fields into a schema fragment.

    Args:
        fields: Flat list or grouped mapping of fields (records or dataclasses).
        registry: Accumulator to add into; a fresh one is used when omitted.

    Returns:
        SchemaFragment with one property per distinct field name.
    """
    registry = registry if registry is not None else FieldRegistry()
    for app_field in normalize_field_input(fields, registry):
        registry.add(build_field_schema(app_field))
    return registry.fragment()
