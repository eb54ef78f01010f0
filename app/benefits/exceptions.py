"""Benefit form exceptions mapped to error codes.

Propagation policy:
- Compile-time problems (malformed rules, duplicate fields) are recovered
  locally and reported as CompilationWarning, never raised to the caller.
- Submission-time encoding failures are fatal and abort the submission.
- Catalog fetch/parse failures are raised to the caller.
"""


class ErrorCode:
    """Error code registry for BenefitFormError subclasses."""
    MALFORMED_RULE = "MALFORMED_RULE"
    ENCODING_FAILED = "ENCODING_FAILED"
    CATALOG_PARSE_FAILED = "CATALOG_PARSE_FAILED"
    CATALOG_FETCH_FAILED = "CATALOG_FETCH_FAILED"


class BenefitFormError(Exception):
    """Base exception for benefit form compilation and submission.

    Carries an error code from ErrorCode.
    """

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(message)


class MalformedRuleError(BenefitFormError):
    """A declared rule or field is missing expected keys.

    Raised by the per-entry parsers and caught by their callers, which skip
    the entry and record a warning.
    """

    def __init__(self, message: str = "Malformed rule"):
        super().__init__(ErrorCode.MALFORMED_RULE, message)


class DocumentEncodingError(BenefitFormError):
    """A document value could not be encoded for submission.

    Fatal for the whole submission: a document required for eligibility
    must never be silently dropped.
    """

    def __init__(self, message: str = "Failed to encode document content"):
        super().__init__(ErrorCode.ENCODING_FAILED, message)


class CatalogParseError(BenefitFormError):
    """Catalog response does not have the expected item structure."""

    def __init__(self, message: str = "Invalid catalog response structure"):
        super().__init__(ErrorCode.CATALOG_PARSE_FAILED, message)


class CatalogFetchError(BenefitFormError):
    """HTTP fetch of the catalog failed.

    Used when:
    - Network timeout
    - HTTP error status
    - Too many redirects
    - Response too large
    - Invalid content-type or body
    """

    def __init__(self, message: str = "Catalog fetch failed"):
        super().__init__(ErrorCode.CATALOG_FETCH_FAILED, message)
