"""Catalog response parsing.

Extracts the rule feed for one benefit from a catalog search response:

    responses[0].message.catalog.providers[0].items[0].tags[]

Relevant tags (by descriptor.code):
- applicationForm: application-form field records
- eligibility: eligibility criteria
- required-docs: document rules; only items coded mandatory-doc/optional-doc

Every tag list item carries its record as a JSON string in 'value'.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .exceptions import CatalogParseError

log = logging.getLogger(__name__)

APPLICATION_FORM_TAG = "applicationForm"
ELIGIBILITY_TAG = "eligibility"
REQUIRED_DOCS_TAG = "required-docs"
DOCUMENT_ITEM_CODES = frozenset({"mandatory-doc", "optional-doc"})


@dataclass
class BenefitCatalogItem:
    """Rule feed for one benefit.

    Attributes:
        application_fields: Application-form field records.
        eligibility_rules: Eligibility criterion records.
        document_rules: Mandatory/optional document rule records.
        raw_item: The catalog item the feed was read from.
    """
    application_fields: List[Dict[str, Any]] = field(default_factory=list)
    eligibility_rules: List[Any] = field(default_factory=list)
    document_rules: List[Any] = field(default_factory=list)
    raw_item: Dict[str, Any] = field(default_factory=dict)

    @property
    def rules(self) -> List[Any]:
        """Eligibility rules followed by document rules."""
        return [*self.eligibility_rules, *self.document_rules]


def _first(value: Any, what: str) -> Any:
    if not isinstance(value, list) or not value:
        raise CatalogParseError(f"Catalog response missing {what}")
    return value[0]


def extract_catalog_item(response: Dict[str, Any]) -> Dict[str, Any]:
    """Locate the first provider item of a catalog response.

    Raises:
        CatalogParseError: If any level of the path is missing.
    """
    if not isinstance(response, dict):
        raise CatalogParseError("Catalog response is not an object")

    first_response = _first(response.get("responses"), "responses")
    try:
        catalog = first_response["message"]["catalog"]
    except (KeyError, TypeError):
        raise CatalogParseError("Catalog response missing message.catalog")
    if not isinstance(catalog, dict):
        raise CatalogParseError("Catalog response missing message.catalog")

    provider = _first(catalog.get("providers"), "catalog.providers")
    if not isinstance(provider, dict):
        raise CatalogParseError("Catalog provider is not an object")
    item = _first(provider.get("items"), "provider.items")
    if not isinstance(item, dict):
        raise CatalogParseError("Catalog item is not an object")
    return item


def descriptor_code(node: Any) -> Optional[str]:
    """Return node.descriptor.code, or None when the shape is off."""
    descriptor = node.get("descriptor") if isinstance(node, dict) else None
    if not isinstance(descriptor, dict):
        return None
    code = descriptor.get("code")
    return code if isinstance(code, str) else None


def find_tag(item: Dict[str, Any], code: str) -> Optional[Dict[str, Any]]:
    """Return the first tag whose descriptor code matches."""
    tags = item.get("tags")
    if not isinstance(tags, list):
        return None
    for tag in tags:
        if descriptor_code(tag) == code:
            return tag
    return None


def decode_tag_values(tag: Optional[Dict[str, Any]], item_codes=None) -> List[Any]:
    """JSON-decode the 'value' of each tag list item.

    Args:
        tag: Catalog tag, or None.
        item_codes: If given, only items whose descriptor code is in this set.

    Returns:
        Decoded records in list order. Items that fail to decode are skipped.
    """
    if not tag:
        return []

    tag_code = descriptor_code(tag)
    entries = tag.get("list")
    if not isinstance(entries, list):
        return []

    values = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            continue
        if item_codes is not None and descriptor_code(entry) not in item_codes:
            continue
        raw = entry.get("value")
        if not isinstance(raw, str):
            log.warning(f"tag {tag_code} item {index} has no value")
            continue
        try:
            values.append(json.loads(raw))
        except json.JSONDecodeError as e:
            log.warning(f"tag {tag_code} item {index} is not valid JSON: {e}")
    return values


def parse_catalog_response(response: Dict[str, Any]) -> BenefitCatalogItem:
    """Extract the application fields and rule feed from a catalog response.

    Raises:
        CatalogParseError: If the response lacks the provider item path.
    """
    item = extract_catalog_item(response)
    return BenefitCatalogItem(
        application_fields=[
            f for f in decode_tag_values(find_tag(item, APPLICATION_FORM_TAG))
            if isinstance(f, dict)
        ],
        eligibility_rules=decode_tag_values(find_tag(item, ELIGIBILITY_TAG)),
        document_rules=decode_tag_values(
            find_tag(item, REQUIRED_DOCS_TAG), item_codes=DOCUMENT_ITEM_CODES
        ),
        raw_item=item,
    )
