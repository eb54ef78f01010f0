"""
Benefit form compiler configuration constants.

Constants are organized into:
- NORMATIVE: Fixed by the form/submission contract, changing them breaks consumers
- CONFIGURABLE: Defaults that a deployment may override via environment
- OPERATIONAL: Deployment-specific settings (env vars)
"""

import os

# =============================================================================
# NORMATIVE CONSTANTS
# =============================================================================

# Group tag carried by every generated document field. The assembler uses it
# to order documents last and the reclassifier uses it to find document fields.
DOCUMENTS_GROUP_NAME: str = "documents"
DOCUMENTS_GROUP_LABEL: str = "Documents"

# Group applied to catalog fields that declare no fieldsGroupName
DEFAULT_GROUP_NAME: str = "default"
DEFAULT_GROUP_LABEL: str = "Form Fields"

# Document type used when a field is not backed by a single document rule
ELIGIBILITY_DOCUMENT_TYPE: str = "eligibilityCriteria"

# Fallback document type/subtype when a selection cannot be resolved
UNKNOWN_DOCUMENT_TYPE: str = "unknown"

# Format recorded on every VC document
DOCUMENT_FORMAT: str = "json"

# Prefix prepended to every encoded document/file value
ENCODED_CONTENT_PREFIX: str = "base64,"

# Form keys that are never treated as personal data
SYSTEM_FIELDS: frozenset[str] = frozenset({"benefitId", "docs", "orderId"})

# =============================================================================
# CONFIGURABLE DEFAULTS
# =============================================================================

# Placeholder issuer used when the selected wallet entry cannot be found
DEFAULT_DOCUMENT_ISSUER: str = os.getenv(
    "BENEFIT_FORM_DEFAULT_ISSUER", "https://provider.example.org"
)


def _parse_file_upload_patterns() -> tuple[str, ...]:
    """Parse comma-separated file-upload name patterns from environment.

    A document field whose name contains any of these substrings (case
    insensitive) is submitted as a raw file upload instead of a VC document.

    Environment variable format:
        BENEFIT_FORM_FILE_UPLOAD_PATTERNS=photo,signature,selfie

    Returns:
        tuple of lowercase patterns, in declaration order.
    """
    env_value = os.getenv("BENEFIT_FORM_FILE_UPLOAD_PATTERNS", "")
    if env_value:
        return tuple(p.strip().lower() for p in env_value.split(",") if p.strip())
    return (
        "photo",
        "image",
        "picture",
        "pic",
        "icard",
        "passport",
        "signature",
        "selfie",
        "upload",
    )


FILE_UPLOAD_NAME_PATTERNS: tuple[str, ...] = _parse_file_upload_patterns()

# Upper bound on collected jsonschema errors per validation run
MAX_VALIDATION_ERRORS: int = int(os.getenv("BENEFIT_FORM_MAX_VALIDATION_ERRORS", "20"))

# =============================================================================
# OPERATIONAL SETTINGS (deployment-specific, via environment variables)
# =============================================================================

# Catalog lookup endpoint. {benefit_id} is substituted per request.
CATALOG_URL_TEMPLATE: str = os.getenv(
    "BENEFIT_FORM_CATALOG_URL", "http://localhost:3000/content/{benefit_id}"
)

# Catalog fetch constraints
CATALOG_FETCH_TIMEOUT_SECONDS: int = int(os.getenv("BENEFIT_FORM_CATALOG_TIMEOUT", "10"))
CATALOG_MAX_SIZE_BYTES: int = 2_097_152  # 2 MB
CATALOG_MAX_REDIRECTS: int = 3


def get_config_summary() -> dict:
    """Return the effective configuration for the /healthz and CLI views."""
    return {
        "default_document_issuer": DEFAULT_DOCUMENT_ISSUER,
        "document_format": DOCUMENT_FORMAT,
        "file_upload_name_patterns": list(FILE_UPLOAD_NAME_PATTERNS),
        "system_fields": sorted(SYSTEM_FIELDS),
        "catalog_url_template": CATALOG_URL_TEMPLATE,
        "catalog_fetch_timeout_seconds": CATALOG_FETCH_TIMEOUT_SECONDS,
        "max_validation_errors": MAX_VALIDATION_ERRORS,
    }
