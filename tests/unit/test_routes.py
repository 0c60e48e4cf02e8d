"""Unit tests for base URL resolution and endpoint paths."""

from __future__ import annotations

import pytest

from pdfgate_client.config import ConfigurationError
from pdfgate_client.pdfgate import routes
from pdfgate_client.pdfgate.routes import (
    PRODUCTION_BASE_URL,
    SANDBOX_BASE_URL,
    document_path,
    file_path,
    resolve_base_url,
)


class TestResolveBaseUrl:
    """Tests for resolve_base_url."""

    def test_live_key_selects_production(self) -> None:
        assert resolve_base_url("live_abc") == "https://api.pdfgate.com/"

    def test_test_key_selects_sandbox(self) -> None:
        assert resolve_base_url("test_abc") == "https://api-sandbox.pdfgate.com/"

    def test_bare_prefixes_are_accepted(self) -> None:
        assert resolve_base_url("live_") == PRODUCTION_BASE_URL
        assert resolve_base_url("test_") == SANDBOX_BASE_URL

    @pytest.mark.parametrize("api_key", ["", "   ", "\t\n"])
    def test_blank_key_raises(self, api_key: str) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            resolve_base_url(api_key)

        assert exc_info.value.field == "api_key"

    @pytest.mark.parametrize("api_key", ["bad", "LIVE_abc", "Test_abc", "prod_abc"])
    def test_unknown_prefix_names_the_key(self, api_key: str) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            resolve_base_url(api_key)

        assert f"'{api_key}'" in str(exc_info.value)
        assert "live_" in str(exc_info.value)
        assert "test_" in str(exc_info.value)


class TestEndpointPaths:
    """Tests for the endpoint path table."""

    def test_fixed_endpoints(self) -> None:
        assert routes.GENERATE_PDF == "v1/generate/pdf"
        assert routes.FLATTEN_PDF == "forms/flatten"
        assert routes.EXTRACT_PDF_FORM_DATA == "forms/extract-data"
        assert routes.WATERMARK_PDF == "watermark/pdf"
        assert routes.PROTECT_PDF == "protect/pdf"
        assert routes.COMPRESS_PDF == "compress/pdf"
        assert routes.UPLOAD_FILE == "upload"

    def test_document_path(self) -> None:
        assert document_path("abc123") == "document/abc123"

    def test_document_path_with_expiry(self) -> None:
        assert (
            document_path("abc123", 3600)
            == "document/abc123?preSignedUrlExpiresIn=3600"
        )

    def test_file_path(self) -> None:
        assert file_path("abc123") == "file/abc123"

    def test_ids_are_escaped(self) -> None:
        assert file_path("a/b c") == "file/a%2Fb%20c"
        assert document_path("x?y=1") == "document/x%3Fy%3D1"

    def test_unreserved_characters_are_kept(self) -> None:
        assert file_path("A-z_0.9~") == "file/A-z_0.9~"
