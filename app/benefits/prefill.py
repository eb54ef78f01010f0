"""Pre-fill payload handling.

The surrounding layer hands the form a pre-fill payload: previously entered
personal values plus the applicant's document wallet ('docs') and an
optional reviewer comment ('remark').
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from .matcher import load_wallet
from .models import WalletDocument

log = logging.getLogger(__name__)


@dataclass
class PrefillPayload:
    """Decoded pre-fill payload.

    Attributes:
        values: All pre-fill key/values as received.
        wallet: Applicant's documents from 'docs'.
        remark: Reviewer comment, if any.
    """
    values: Dict[str, Any] = field(default_factory=dict)
    wallet: List[WalletDocument] = field(default_factory=list)
    remark: Optional[str] = None


def parse_prefill(raw: Union[str, Mapping[str, Any], None]) -> PrefillPayload:
    """Decode a pre-fill payload from a dict or JSON string.

    An empty or undecodable payload yields an empty PrefillPayload.
    """
    if raw is None or raw == "":
        return PrefillPayload()

    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            log.warning(f"pre-fill payload is not valid JSON: {e}")
            return PrefillPayload()

    if not isinstance(raw, Mapping):
        log.warning(f"pre-fill payload is not an object: {type(raw).__name__}")
        return PrefillPayload()

    docs = raw.get("docs")
    remark = raw.get("remark")
    return PrefillPayload(
        values=dict(raw),
        wallet=load_wallet(docs) if isinstance(docs, list) else [],
        remark=(remark.strip() or None) if isinstance(remark, str) else None,
    )


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


def extract_user_data_for_schema(
    form_data: Optional[Mapping[str, Any]],
    properties: Optional[Mapping[str, Any]],
) -> Dict[str, str]:
    """Seed form values from pre-fill data.

    Keeps only keys that are schema properties, stringified. An
    'external_application_id' is carried over as 'orderId'.
    """
    result: Dict[str, str] = {}
    if not form_data or not properties:
        return result

    for key in properties:
        if key in form_data:
            result[key] = _stringify(form_data[key])

    if "external_application_id" in form_data:
        result["orderId"] = _stringify(form_data["external_application_id"])

    return result
