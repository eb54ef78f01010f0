"""Tests for submission reclassification.

Tests cover:
- Personal / file / VC document split
- File-upload flag honored over the VC path
- Type/issuer recovery from the wallet, including stale selections
- base64 encoding and fatal encoding failures
- Payload shape
"""

import base64
import json
from urllib.parse import unquote

import pytest

from app.benefits.compiler import compile_application_form
from app.benefits.exceptions import DocumentEncodingError, ErrorCode
from app.benefits.submission import (
    build_submission_payload,
    encode_to_base64,
    extract_document_metadata,
    extract_document_subtype,
    reclassify,
)


INCOME_DATA = '{"income":"120000"}'

INCOME_DOC_SCHEMA = {
    "type": "string",
    "title": "Choose document for income",
    "enum": [INCOME_DATA],
    "enumNames": ["incomeCert"],
    "vcMeta": {
        "submissionReasons": ["income"],
        "documentType": "eligibilityCriteria",
        "documentSubtype": "incomeCert",
        "format": "json",
        "issuer": "https://provider.example.org",
        "isFileUpload": False,
    },
}


def _decode(encoded):
    assert encoded.startswith("base64,")
    return unquote(base64.b64decode(encoded[len("base64,"):]).decode("ascii"))


class TestEncodeToBase64:
    """Tests for document value encoding."""

    def test_ascii(self):
        """Plain text is prefixed base64."""
        assert encode_to_base64("abc") == "base64,YWJj"

    def test_round_trip_unicode(self):
        """Non-ASCII text survives percent-encoding and base64."""
        value = 'नमस्ते {"a": 1}'
        assert _decode(encode_to_base64(value)) == value

    def test_uri_component_escaping(self):
        """Spaces are percent-encoded before base64."""
        raw = base64.b64decode(encode_to_base64("a b")[len("base64,"):]).decode("ascii")
        assert raw == "a%20b"

    def test_lone_surrogate_raises(self):
        """Text with no UTF-8 form raises DocumentEncodingError."""
        with pytest.raises(DocumentEncodingError) as exc:
            encode_to_base64("bad \ud800")
        assert exc.value.code == ErrorCode.ENCODING_FAILED
        assert exc.value.message == "Failed to encode string to base64"


class TestReclassify:
    """Tests for splitting filled values."""

    def test_file_upload_goes_to_files(self):
        """A vcMeta.isFileUpload field lands in files, never vc_documents."""
        properties = {
            "fullName": {"type": "string", "title": "Name"},
            "photoUpload": {
                "type": "string",
                "title": "Photo",
                "vcMeta": {"isFileUpload": True, "format": "json"},
            },
        }
        result = reclassify({"fullName": "Asha", "photoUpload": "<base64>"}, properties)

        assert result.personal_fields == {"fullName": "Asha"}
        assert result.files == [{"photoUpload": encode_to_base64("<base64>")}]
        assert result.vc_documents == []

    def test_vc_document_metadata(self, income_wallet):
        """Type and issuer come from the selected wallet entry."""
        result = reclassify(
            {"income_doc": INCOME_DATA},
            {"income_doc": INCOME_DOC_SCHEMA},
            income_wallet,
        )

        assert result.files == []
        assert len(result.vc_documents) == 1
        doc = result.vc_documents[0]
        assert doc.document_submission_reason == '["income"]'
        assert doc.document_type == "incomeProof"
        assert doc.document_subtype == "incomeCert"
        assert doc.document_format == "json"
        assert doc.document_imported_from == "Revenue Department"
        assert _decode(doc.document_content) == INCOME_DATA

    def test_stale_selection_falls_back(self, income_wallet):
        """A selection no longer in the wallet is submitted as unknown."""
        result = reclassify(
            {"income_doc": '{"income":"999"}'},
            {"income_doc": INCOME_DOC_SCHEMA},
            income_wallet,
        )
        doc = result.vc_documents[0]
        assert doc.document_type == "unknown"
        assert doc.document_imported_from == "https://provider.example.org"
        assert doc.document_subtype == "incomeCert"

    def test_empty_document_value_skipped(self):
        """Unfilled document fields produce nothing."""
        result = reclassify({"income_doc": ""}, {"income_doc": INCOME_DOC_SCHEMA})
        assert result.vc_documents == []
        assert result.files == []

    def test_system_fields_and_none_excluded(self):
        """System fields and None values are not personal data."""
        result = reclassify(
            {"fullName": "Asha", "benefitId": "b-1", "docs": [], "orderId": "o-1", "age": None},
            {"properties": {"fullName": {"type": "string"}}},
        )
        assert result.personal_fields == {"fullName": "Asha"}

    def test_encoding_failure_aborts(self):
        """An encoding failure aborts the whole reclassification."""
        with pytest.raises(DocumentEncodingError):
            reclassify({"income_doc": "bad \ud800"}, {"income_doc": INCOME_DOC_SCHEMA})

    def test_uses_final_schema_document_names(self, income_wallet):
        """A FinalSchema supplies its own document field names."""
        final = compile_application_form(
            [{"name": "fullName", "label": "Name"}],
            [{"documentType": "casteCertificate", "allowedProofs": ["casteCert"]}],
            income_wallet,
        )
        result = reclassify(
            {"fullName": "Asha", "casteCert": '{"caste":"OBC"}'},
            final,
            income_wallet,
        )
        assert result.personal_fields == {"fullName": "Asha"}
        doc = result.vc_documents[0]
        assert doc.document_type == "casteProof"
        assert doc.document_subtype == "casteCert"
        assert json.loads(doc.document_submission_reason) == ["casteCertificate"]


class TestMetadataHelpers:
    """Tests for metadata and subtype recovery."""

    def test_match_by_doc_id(self, income_wallet):
        """A selection equal to a doc_id resolves too."""
        metadata = extract_document_metadata("doc-2", income_wallet)
        assert metadata.resolved
        assert metadata.document_type == "casteProof"

    def test_no_wallet(self):
        """Without a wallet the fallback is used."""
        metadata = extract_document_metadata("anything", [])
        assert not metadata.resolved
        assert metadata.document_type == "unknown"

    def test_subtype_fallback_without_enum_names(self):
        """Missing enumNames falls back to vcMeta, then unknown."""
        assert extract_document_subtype("x", {"vcMeta": {"documentSubtype": "p"}}) == "p"
        assert extract_document_subtype("x", {}) == "unknown"


class TestBuildSubmissionPayload:
    """Tests for payload shaping."""

    def test_empty_sections_omitted(self):
        """files and vc_documents are only present when non-empty."""
        result = reclassify({"fullName": "Asha"}, {"fullName": {"type": "string"}})
        assert build_submission_payload(result, "benefit-1") == {
            "benefitId": "benefit-1",
            "fullName": "Asha",
        }

    def test_vc_documents_serialized(self, income_wallet):
        """VC documents are plain dicts in the payload."""
        result = reclassify(
            {"income_doc": INCOME_DATA},
            {"income_doc": INCOME_DOC_SCHEMA},
            income_wallet,
        )
        payload = build_submission_payload(result, "benefit-1")
        assert payload["benefitId"] == "benefit-1"
        assert payload["vc_documents"][0]["document_type"] == "incomeProof"
        assert "files" not in payload
