"""Root conftest for all tests - provides shared fixtures."""

import json
import os
import tempfile

# Keep the request log out of the working tree (must be set before app.main import)
os.environ.setdefault(
    "BENEFIT_FORM_LOG_FILE",
    os.path.join(tempfile.gettempdir(), "benefit_form_test.log"),
)

import pytest


@pytest.fixture
def income_wallet():
    """Wallet with one income certificate and one caste certificate."""
    return [
        {
            "doc_id": "doc-1",
            "doc_type": "incomeProof",
            "doc_subtype": "incomeCert",
            "doc_data": '{"income":"120000"}',
            "imported_from": "Revenue Department",
        },
        {
            "doc_id": "doc-2",
            "doc_type": "casteProof",
            "doc_subtype": "casteCert",
            "doc_data": '{"caste":"OBC"}',
            "imported_from": "Social Welfare Department",
        },
    ]


@pytest.fixture
def shared_proof_rules():
    """Two criteria sharing one proof, backed by a mandatory document rule."""
    return [
        {"name": "income", "allowedProofs": ["incomeCert"]},
        {"name": "residency", "allowedProofs": ["incomeCert"]},
        {"documentType": "incomeCert", "allowedProofs": ["incomeCert"], "isRequired": True},
    ]


def _tag(code, items):
    return {"descriptor": {"code": code}, "list": items}


@pytest.fixture
def catalog_response():
    """Catalog search response with application form, eligibility and document tags."""
    application_form = [
        {
            "name": "firstName",
            "label": "First Name",
            "type": "text",
            "required": True,
            "fieldsGroupName": "personal",
            "fieldsGroupLabel": "Personal Details",
        },
        {
            "name": "gender",
            "label": "Gender",
            "type": "radio",
            "required": True,
            "options": [{"value": "F", "label": "Female"}, {"value": "M", "label": "Male"}],
            "fieldsGroupName": "personal",
            "fieldsGroupLabel": "Personal Details",
        },
        {"name": "bankAccountNumber", "label": "", "type": "text", "required": True},
    ]
    eligibility = [
        {"criteria": {"name": "annualIncome"}, "allowedProofs": ["incomeCert"]},
    ]
    tags = [
        _tag("applicationForm", [{"value": json.dumps(f)} for f in application_form]),
        _tag("eligibility", [{"value": json.dumps(e)} for e in eligibility]),
        _tag(
            "required-docs",
            [
                {
                    "descriptor": {"code": "mandatory-doc"},
                    "value": json.dumps({
                        "documentType": "incomeCertificate",
                        "allowedProofs": ["incomeCert"],
                        "isRequired": True,
                    }),
                },
                {
                    "descriptor": {"code": "optional-doc"},
                    "value": json.dumps({
                        "documentType": "casteCertificate",
                        "allowedProofs": ["casteCert"],
                        "isRequired": False,
                    }),
                },
                {
                    "descriptor": {"code": "note"},
                    "value": json.dumps({"documentType": "ignored", "allowedProofs": ["x"]}),
                },
            ],
        ),
    ]
    return {
        "responses": [
            {
                "message": {
                    "catalog": {
                        "providers": [{"items": [{"id": "benefit-1", "tags": tags}]}],
                    }
                }
            }
        ]
    }
