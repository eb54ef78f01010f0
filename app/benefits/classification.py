"""File-upload vs. VC document classification.

The same predicate is evaluated when a document field is generated (stored
as vcMeta.isFileUpload) and when a submission is reclassified, so both
sides always agree.
"""

from typing import Any, Dict, Iterable, Optional

from app.core.config import FILE_UPLOAD_NAME_PATTERNS


def is_file_upload_field(
    field_name: str,
    patterns: Optional[Iterable[str]] = None,
) -> bool:
    """Check whether a field name denotes a raw file upload.

    Args:
        field_name: Generated or declared field name.
        patterns: Substrings to look for; defaults to FILE_UPLOAD_NAME_PATTERNS.

    Returns:
        True if any pattern occurs in the lowercased name.
    """
    if not field_name:
        return False
    lower_name = field_name.lower()
    table = FILE_UPLOAD_NAME_PATTERNS if patterns is None else patterns
    return any(pattern in lower_name for pattern in table)


def field_is_file_upload(field_name: str, field_schema: Optional[Dict[str, Any]]) -> bool:
    """Resolve the file-upload flag for a schema property.

    Uses the flag stored in vcMeta when present, otherwise evaluates the
    name predicate (for document-group fields generated without vcMeta).
    """
    vc_meta = (field_schema or {}).get("vcMeta")
    if isinstance(vc_meta, dict) and "isFileUpload" in vc_meta:
        return bool(vc_meta["isFileUpload"])
    return is_file_upload_field(field_name)
