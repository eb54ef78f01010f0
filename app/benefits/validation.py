"""Form data validation against the compiled schema.

Uses JSON Schema Draft 7 validation. Renderer-only keywords (enumNames,
fieldGroup, vcMeta) are ignored by the validator.

Document selectors without a wallet match still accept the empty option, so
missing documents are reported separately by build_missing_document_errors.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Union

import jsonschema
from jsonschema import Draft7Validator

from app.core.config import MAX_VALIDATION_ERRORS

from .models import FinalSchema

log = logging.getLogger(__name__)


def _schema_of(final: Union[FinalSchema, Mapping[str, Any]]) -> Dict[str, Any]:
    if isinstance(final, FinalSchema):
        return final.schema
    return dict(final)


def check_final_schema(final: Union[FinalSchema, Mapping[str, Any]]) -> List[str]:
    """Check the compiled schema against the Draft 7 meta-schema.

    Returns:
        List of problems (empty if the schema is valid).
    """
    try:
        Draft7Validator.check_schema(_schema_of(final))
    except jsonschema.SchemaError as e:
        return [f"Invalid schema: {e.message}"]
    return []


def validate_form_data(
    form_data: Mapping[str, Any],
    final: Union[FinalSchema, Mapping[str, Any]],
    max_errors: Optional[int] = None,
) -> List[str]:
    """Validate filled values against the compiled schema.

    Args:
        form_data: Filled values keyed by field name.
        final: FinalSchema or the schema dict.
        max_errors: Maximum errors to collect; defaults to MAX_VALIDATION_ERRORS.

    Returns:
        List of "<path>: <message>" strings (empty if valid).
    """
    limit = MAX_VALIDATION_ERRORS if max_errors is None else max_errors
    schema = _schema_of(final)

    problems = check_final_schema(schema)
    if problems:
        return problems

    errors: List[str] = []
    validator = Draft7Validator(schema)
    found = sorted(
        validator.iter_errors(dict(form_data)),
        key=lambda e: (".".join(str(p) for p in e.absolute_path), e.message),
    )
    for error in found:
        if len(errors) >= limit:
            errors.append(f"... and more errors (stopped at {limit})")
            break
        path = ".".join(str(p) for p in error.absolute_path) if error.absolute_path else "(root)"
        errors.append(f"{path}: {error.message}")

    if errors:
        log.debug(f"form data failed validation with {len(errors)} errors")
    return errors


def build_missing_document_errors(
    final: FinalSchema,
    required_only: bool = True,
) -> Dict[str, Dict[str, List[str]]]:
    """Build renderer 'extraErrors' for document fields with no wallet match.

    Args:
        final: Compiled schema.
        required_only: Only report fields in the root required list.

    Returns:
        {field_name: {"__errors": ["<field_name> does not have a document"]}}
    """
    required = set(final.required)
    errors: Dict[str, Dict[str, List[str]]] = {}
    for name in final.missing_documents:
        if required_only and name not in required:
            continue
        errors[name] = {"__errors": [f"{name} does not have a document"]}
    return errors
