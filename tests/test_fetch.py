"""Tests for catalog HTTP fetch constraints."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from app.benefits.exceptions import CatalogFetchError, ErrorCode
from app.benefits.fetch import catalog_url, fetch_catalog


def _mock_client(response=None, side_effect=None):
    mock_client = AsyncMock()
    if side_effect is not None:
        mock_client.get = AsyncMock(side_effect=side_effect)
    else:
        mock_client.get = AsyncMock(return_value=response)
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=None)
    return mock_client


def _mock_response(content, content_type="application/json"):
    mock_response = MagicMock()
    mock_response.headers = {"content-type": content_type}
    mock_response.content = content
    mock_response.raise_for_status = MagicMock()
    return mock_response


class TestCatalogUrl:
    """Tests for URL templating."""

    def test_default_template(self):
        """The benefit id is substituted into the configured template."""
        assert catalog_url("b-1").endswith("/b-1")

    def test_custom_template(self):
        """An explicit template overrides the default."""
        assert catalog_url("b-1", "https://catalog.test/items/{benefit_id}") == (
            "https://catalog.test/items/b-1"
        )


class TestFetchCatalog:
    """Tests for fetch_catalog."""

    @pytest.mark.asyncio
    async def test_fetch_success(self, catalog_response):
        """Successful fetch returns the decoded catalog."""
        mock_client = _mock_client(
            _mock_response(json.dumps(catalog_response).encode(), "application/json; charset=utf-8")
        )

        with patch("app.benefits.fetch.httpx.AsyncClient", return_value=mock_client):
            data = await fetch_catalog("benefit-1")

        assert data == catalog_response
        mock_client.get.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_invalid_content_type_raises(self):
        """Non-JSON content-type raises CatalogFetchError."""
        mock_client = _mock_client(_mock_response(b"<html></html>", "text/html"))

        with patch("app.benefits.fetch.httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(CatalogFetchError) as exc:
                await fetch_catalog("benefit-1")
            assert "content-type" in str(exc.value).lower()
            assert exc.value.code == ErrorCode.CATALOG_FETCH_FAILED

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self):
        """A body that is not JSON raises CatalogFetchError."""
        mock_client = _mock_client(_mock_response(b"{broken"))

        with patch("app.benefits.fetch.httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(CatalogFetchError) as exc:
                await fetch_catalog("benefit-1")
            assert "not valid JSON" in str(exc.value)

    @pytest.mark.asyncio
    async def test_non_object_raises(self):
        """A JSON array body raises CatalogFetchError."""
        mock_client = _mock_client(_mock_response(b"[]"))

        with patch("app.benefits.fetch.httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(CatalogFetchError) as exc:
                await fetch_catalog("benefit-1")
            assert "not a JSON object" in str(exc.value)

    @pytest.mark.asyncio
    async def test_size_limit_raises(self):
        """Response exceeding the size limit raises CatalogFetchError."""
        from app.core.config import CATALOG_MAX_SIZE_BYTES

        mock_client = _mock_client(_mock_response(b"x" * (CATALOG_MAX_SIZE_BYTES + 1)))

        with patch("app.benefits.fetch.httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(CatalogFetchError) as exc:
                await fetch_catalog("benefit-1")
            assert "exceeds" in str(exc.value).lower()

    @pytest.mark.asyncio
    async def test_timeout_raises(self):
        """Timeout raises CatalogFetchError."""
        mock_client = _mock_client(side_effect=httpx.TimeoutException("Timeout"))

        with patch("app.benefits.fetch.httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(CatalogFetchError) as exc:
                await fetch_catalog("benefit-1")
            assert "Timeout" in str(exc.value)

    @pytest.mark.asyncio
    async def test_too_many_redirects_raises(self):
        """Too many redirects raises CatalogFetchError."""
        mock_client = _mock_client(side_effect=httpx.TooManyRedirects("Too many"))

        with patch("app.benefits.fetch.httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(CatalogFetchError) as exc:
                await fetch_catalog("benefit-1")
            assert "redirect" in str(exc.value).lower()

    @pytest.mark.asyncio
    async def test_http_error_raises(self):
        """HTTP error status raises CatalogFetchError."""
        mock_response = MagicMock()
        mock_response.status_code = 404
        mock_response.reason_phrase = "Not Found"
        mock_response.raise_for_status = MagicMock(
            side_effect=httpx.HTTPStatusError(
                "Not Found",
                request=MagicMock(),
                response=mock_response,
            )
        )
        mock_client = _mock_client(mock_response)

        with patch("app.benefits.fetch.httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(CatalogFetchError) as exc:
                await fetch_catalog("benefit-1")
            assert "404" in str(exc.value)
            assert "benefit-1" in str(exc.value)

    @pytest.mark.asyncio
    async def test_connection_error_raises(self):
        """Network failures raise CatalogFetchError."""
        mock_client = _mock_client(
            side_effect=httpx.ConnectError("refused", request=MagicMock())
        )

        with patch("app.benefits.fetch.httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(CatalogFetchError) as exc:
                await fetch_catalog("benefit-1")
            assert "Request failed" in str(exc.value)
