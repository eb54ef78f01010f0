"""Schema assembler.

Merges the application and document fragments into the final form schema:
- properties app-first, first-seen wins on name collisions
- per-property 'required' markers hoisted to the root 'required' list
- a uiSchema side-channel ordering personal groups, ungrouped personal
  fields, the documents group, then ungrouped document fields
"""

import copy
import logging
from typing import Any, Dict, List, Mapping, Union

from app.core.config import DOCUMENTS_GROUP_NAME, SYSTEM_FIELDS

from .models import (
    CompilationWarning,
    CompilationWarningCode,
    FinalSchema,
    SchemaFragment,
)

log = logging.getLogger(__name__)

Fragment = Union[SchemaFragment, Mapping[str, Any]]


def _fragment_properties(fragment: Fragment) -> Dict[str, Dict[str, Any]]:
    """Serialize a fragment's properties to independent dicts."""
    if isinstance(fragment, SchemaFragment):
        return {name: f.to_property() for name, f in fragment.properties.items()}
    return copy.deepcopy(dict(fragment.get("properties") or {}))


def _fragment_warnings(fragment: Fragment) -> List[CompilationWarning]:
    if isinstance(fragment, SchemaFragment):
        return list(fragment.warnings)
    return []


def get_document_field_names(properties: Mapping[str, Any]) -> List[str]:
    """Names of properties submitted as documents.

    A property is a document field if it carries vcMeta or is tagged with the
    documents group.
    """
    names = []
    for name, prop in properties.items():
        if not isinstance(prop, dict):
            continue
        group = prop.get("fieldGroup") or {}
        if prop.get("vcMeta") or group.get("groupName") == DOCUMENTS_GROUP_NAME:
            names.append(name)
    return names


def get_personal_field_names(
    all_field_names: List[str],
    document_field_names: List[str],
    system_fields=None,
) -> List[str]:
    """Names that are neither document fields nor system fields."""
    system = SYSTEM_FIELDS if system_fields is None else system_fields
    documents = set(document_field_names)
    return [
        name for name in all_field_names
        if name not in documents and name not in system
    ]


def get_missing_documents(
    properties: Mapping[str, Any],
    document_field_names: List[str],
) -> List[str]:
    """Document fields whose selector has no real option."""
    missing = []
    for name in document_field_names:
        options = properties.get(name, {}).get("enum")
        if options is not None and not any(options):
            missing.append(name)
    return missing


def build_ui_schema(
    properties: Mapping[str, Any],
    document_field_names: List[str],
) -> Dict[str, Any]:
    """Build the ordering/grouping side-channel.

    Groups are consolidated in order of first appearance. The order is a
    stable partition: personal groups, ungrouped personal fields, the
    documents group, ungrouped document fields.
    """
    documents = set(document_field_names)
    groups: Dict[str, Dict[str, Any]] = {}
    ungrouped: List[str] = []

    for name, prop in properties.items():
        group = prop.get("fieldGroup") if isinstance(prop, dict) else None
        if group:
            group_name = group.get("groupName")
            if group_name not in groups:
                groups[group_name] = {"label": group.get("groupLabel"), "fields": []}
            groups[group_name]["fields"].append(name)
        else:
            ungrouped.append(name)

    order: List[str] = []
    for group_name, group in groups.items():
        if group_name != DOCUMENTS_GROUP_NAME:
            order.extend(group["fields"])
    order.extend(name for name in ungrouped if name not in documents)
    if DOCUMENTS_GROUP_NAME in groups:
        order.extend(groups[DOCUMENTS_GROUP_NAME]["fields"])
    order.extend(name for name in ungrouped if name in documents)

    ui_schema: Dict[str, Any] = {"ui:order": order}
    for group_name, group in groups.items():
        for index, name in enumerate(group["fields"]):
            ui_schema[name] = {
                "ui:group": group_name,
                "ui:groupLabel": group["label"],
                "ui:groupFirst": index == 0,
            }
    return ui_schema


def assemble(app_schema: Fragment, doc_schema: Fragment, title: str = "") -> FinalSchema:
    """Merge application and document fragments into the final schema.

    Args:
        app_schema: Application field fragment.
        doc_schema: Document field fragment.
        title: Root schema title.

    Returns:
        FinalSchema. Collisions are reported as DUPLICATE_FIELD warnings and
        the application field is kept.
    """
    warnings = _fragment_warnings(app_schema) + _fragment_warnings(doc_schema)

    properties = _fragment_properties(app_schema)
    for name, prop in _fragment_properties(doc_schema).items():
        if name in properties:
            message = f"Skipped duplicate field creation: {name}"
            log.warning(message, extra={"field_name": name})
            warnings.append(
                CompilationWarning(
                    code=CompilationWarningCode.DUPLICATE_FIELD,
                    message=message,
                    field_name=name,
                )
            )
            continue
        properties[name] = prop

    required = []
    for name, prop in properties.items():
        if prop.pop("required", None) is True:
            required.append(name)

    document_field_names = get_document_field_names(properties)

    schema = {
        "title": title,
        "type": "object",
        "required": required,
        "properties": properties,
    }

    return FinalSchema(
        schema=schema,
        ui_schema=build_ui_schema(properties, document_field_names),
        document_field_names=document_field_names,
        missing_documents=get_missing_documents(properties, document_field_names),
        warnings=warnings,
    )
