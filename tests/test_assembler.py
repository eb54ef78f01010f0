"""Tests for final schema assembly and the uiSchema side-channel."""

from app.benefits.assembler import (
    assemble,
    build_ui_schema,
    get_document_field_names,
    get_missing_documents,
    get_personal_field_names,
)
from app.benefits.compiler import compile_application_form
from app.benefits.documents import build_document_schema
from app.benefits.fields import build_application_schema
from app.benefits.models import CompilationWarningCode


PERSONAL_FIELDS = {
    "personal": {
        "label": "Personal Details",
        "fields": [
            {"name": "firstName", "label": "First Name", "required": True},
            {"name": "lastName", "label": "Last Name"},
        ],
    },
}


class TestAssemble:
    """Tests for fragment merging."""

    def test_app_fields_first_and_required_hoisted(self, shared_proof_rules, income_wallet):
        """Application properties precede document properties; markers move to root."""
        final = assemble(
            build_application_schema(PERSONAL_FIELDS),
            build_document_schema(shared_proof_rules, income_wallet),
            title="Scholarship",
        )

        assert final.schema["title"] == "Scholarship"
        assert final.schema["type"] == "object"
        assert list(final.properties) == ["firstName", "lastName", "income_residency_doc"]
        assert final.required == ["firstName", "income_residency_doc"]
        assert all("required" not in prop for prop in final.properties.values())
        assert final.document_field_names == ["income_residency_doc"]
        assert final.missing_documents == []

    def test_collision_keeps_application_field(self):
        """A document field colliding with an application field is dropped."""
        final = assemble(
            build_application_schema([{"name": "casteCert", "label": "Caste"}]),
            build_document_schema(
                [{"documentType": "casteCertificate", "allowedProofs": ["casteCert"], "isRequired": True}]
            ),
        )
        assert final.properties["casteCert"] == {"type": "string", "title": "Caste"}
        assert final.required == []
        assert CompilationWarningCode.DUPLICATE_FIELD in [w.code for w in final.warnings]

    def test_accepts_plain_dict_fragments(self):
        """Already-serialized fragments are merged without mutation."""
        doc_fragment = {
            "properties": {
                "incomeCert": {
                    "type": "string",
                    "title": "Income",
                    "enum": [""],
                    "required": True,
                    "vcMeta": {"isFileUpload": False},
                },
            }
        }
        final = assemble({"properties": {"name": {"type": "string", "title": "Name"}}}, doc_fragment)

        assert final.required == ["incomeCert"]
        assert final.missing_documents == ["incomeCert"]
        assert doc_fragment["properties"]["incomeCert"]["required"] is True

    def test_idempotent(self, shared_proof_rules, income_wallet):
        """Identical inputs give identical schema and uiSchema."""
        first = compile_application_form(PERSONAL_FIELDS, shared_proof_rules, income_wallet)
        second = compile_application_form(PERSONAL_FIELDS, shared_proof_rules, income_wallet)
        assert first.to_dict() == second.to_dict()
        assert first.document_field_names == second.document_field_names


class TestUiSchema:
    """Tests for the ordering/grouping side-channel."""

    def test_order_partition(self):
        """Personal groups, ungrouped personal, documents group, ungrouped documents."""
        properties = {
            "orphanDoc": {"type": "string", "vcMeta": {}},
            "firstName": {"fieldGroup": {"groupName": "personal", "groupLabel": "Personal"}},
            "incomeCert": {"fieldGroup": {"groupName": "documents", "groupLabel": "Documents"}},
            "notes": {"type": "string"},
            "city": {"fieldGroup": {"groupName": "address", "groupLabel": "Address"}},
            "lastName": {"fieldGroup": {"groupName": "personal", "groupLabel": "Personal"}},
        }
        ui = build_ui_schema(properties, ["orphanDoc", "incomeCert"])

        assert ui["ui:order"] == [
            "firstName", "lastName", "city", "notes", "incomeCert", "orphanDoc",
        ]

    def test_group_hints(self):
        """Grouped fields get group name, label and a first-member flag."""
        properties = {
            "firstName": {"fieldGroup": {"groupName": "personal", "groupLabel": "Personal"}},
            "lastName": {"fieldGroup": {"groupName": "personal", "groupLabel": "Personal"}},
            "notes": {"type": "string"},
        }
        ui = build_ui_schema(properties, [])

        assert ui["firstName"] == {
            "ui:group": "personal",
            "ui:groupLabel": "Personal",
            "ui:groupFirst": True,
        }
        assert ui["lastName"]["ui:groupFirst"] is False
        assert "notes" not in ui


class TestFieldNameHelpers:
    """Tests for document/personal/missing helpers."""

    def test_document_field_names(self):
        """vcMeta or the documents group marks a document field."""
        properties = {
            "a": {"vcMeta": {"format": "json"}},
            "b": {"fieldGroup": {"groupName": "documents"}},
            "c": {"fieldGroup": {"groupName": "personal"}},
        }
        assert get_document_field_names(properties) == ["a", "b"]

    def test_personal_field_names_exclude_system(self):
        """System fields and documents are not personal."""
        names = get_personal_field_names(
            ["firstName", "benefitId", "docs", "orderId", "incomeCert"],
            ["incomeCert"],
        )
        assert names == ["firstName"]

    def test_missing_documents(self):
        """Only selectors with no truthy option are missing."""
        properties = {"a": {"enum": [""]}, "b": {"enum": ["x"]}, "c": {}}
        assert get_missing_documents(properties, ["a", "b", "c"]) == ["a"]
