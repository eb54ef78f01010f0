"""Catalog lookup for a benefit id.

A benefit's application form is driven by the catalog item the discovery
service returns for it. fetch_catalog resolves the benefit id against
CATALOG_URL_TEMPLATE, GETs the catalog, and hands back the decoded
response for parse_catalog_response. Every failure surfaces as
CatalogFetchError, which the API maps to a 502.
"""

import json
from typing import Any, Dict, Optional

import httpx

from app.core.config import (
    CATALOG_FETCH_TIMEOUT_SECONDS,
    CATALOG_MAX_REDIRECTS,
    CATALOG_MAX_SIZE_BYTES,
    CATALOG_URL_TEMPLATE,
)

from .exceptions import CatalogFetchError

ACCEPTED_CONTENT_TYPES = frozenset({"application/json"})


def catalog_url(benefit_id: str, url_template: Optional[str] = None) -> str:
    """Catalog endpoint for benefit_id."""
    return (url_template or CATALOG_URL_TEMPLATE).format(benefit_id=benefit_id)


async def fetch_catalog(benefit_id: str, url_template: Optional[str] = None) -> Dict[str, Any]:
    """Look up the catalog entry for a benefit.

    Args:
        benefit_id: Benefit whose catalog item carries the form rules.
        url_template: Overrides CATALOG_URL_TEMPLATE, e.g. for a staging catalog.

    Returns:
        The decoded catalog response object.

    Raises:
        CatalogFetchError: The catalog was unreachable or did not return
            a usable JSON object.
    """
    url = catalog_url(benefit_id, url_template)
    try:
        async with httpx.AsyncClient(
            timeout=CATALOG_FETCH_TIMEOUT_SECONDS,
            max_redirects=CATALOG_MAX_REDIRECTS,
            follow_redirects=True,
        ) as client:
            response = await client.get(url)
            response.raise_for_status()

            content_type = response.headers.get("content-type", "")
            base_type = content_type.split(";")[0].strip().lower()
            if base_type not in ACCEPTED_CONTENT_TYPES:
                raise CatalogFetchError(
                    f"Catalog for {benefit_id} returned content-type {content_type!r}, "
                    f"not JSON"
                )

            content = response.content
            if len(content) > CATALOG_MAX_SIZE_BYTES:
                raise CatalogFetchError(
                    f"Catalog for {benefit_id} is {len(content)} bytes, which exceeds "
                    f"the {CATALOG_MAX_SIZE_BYTES} byte limit"
                )

            try:
                data = json.loads(content)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise CatalogFetchError(f"Catalog for {benefit_id} is not valid JSON: {e}")
            if not isinstance(data, dict):
                raise CatalogFetchError(f"Catalog for {benefit_id} is not a JSON object")
            return data

    except CatalogFetchError:
        raise
    except httpx.TimeoutException:
        raise CatalogFetchError(
            f"Timeout: catalog service did not answer for {benefit_id} "
            f"within {CATALOG_FETCH_TIMEOUT_SECONDS}s"
        )
    except httpx.TooManyRedirects:
        raise CatalogFetchError(
            f"Catalog lookup for {benefit_id} followed more than "
            f"{CATALOG_MAX_REDIRECTS} redirects"
        )
    except httpx.HTTPStatusError as e:
        raise CatalogFetchError(
            f"Catalog service answered {e.response.status_code} "
            f"{e.response.reason_phrase} for {benefit_id}"
        )
    except httpx.RequestError as e:
        raise CatalogFetchError(f"Request failed: catalog service unreachable for {benefit_id}: {e}")
