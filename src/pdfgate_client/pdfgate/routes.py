"""Base URLs and endpoint paths of the PDFGate API."""

from __future__ import annotations

from urllib.parse import quote, urlencode

from pdfgate_client.config.exceptions import ConfigurationError


__all__ = [
    "COMPRESS_PDF",
    "EXTRACT_PDF_FORM_DATA",
    "FLATTEN_PDF",
    "GENERATE_PDF",
    "PRODUCTION_BASE_URL",
    "PROTECT_PDF",
    "SANDBOX_BASE_URL",
    "UPLOAD_FILE",
    "WATERMARK_PDF",
    "document_path",
    "file_path",
    "resolve_base_url",
]


PRODUCTION_BASE_URL = "https://api.pdfgate.com/"
SANDBOX_BASE_URL = "https://api-sandbox.pdfgate.com/"

PRODUCTION_KEY_PREFIX = "live_"
SANDBOX_KEY_PREFIX = "test_"

GENERATE_PDF = "v1/generate/pdf"
FLATTEN_PDF = "forms/flatten"
EXTRACT_PDF_FORM_DATA = "forms/extract-data"
WATERMARK_PDF = "watermark/pdf"
PROTECT_PDF = "protect/pdf"
COMPRESS_PDF = "compress/pdf"
UPLOAD_FILE = "upload"


def resolve_base_url(api_key: str) -> str:
    """Pick the API environment from the shape of an API key.

    Args:
        api_key: A PDFGate API key.

    Returns:
        The production base URL for ``live_`` keys, the sandbox base URL
        for ``test_`` keys.

    Raises:
        ConfigurationError: If the key is blank or has an unknown prefix.
    """
    if not api_key or not api_key.strip():
        msg = "An API key is required."
        raise ConfigurationError(msg, field="api_key")

    if api_key.startswith(PRODUCTION_KEY_PREFIX):
        return PRODUCTION_BASE_URL
    if api_key.startswith(SANDBOX_KEY_PREFIX):
        return SANDBOX_BASE_URL

    msg = (
        f"Invalid API key format. Expected to start with "
        f"'{PRODUCTION_KEY_PREFIX}' or '{SANDBOX_KEY_PREFIX}', got '{api_key}'."
    )
    raise ConfigurationError(msg, field="api_key")


def _escape(document_id: str) -> str:
    # Only RFC 3986 unreserved characters survive, "/" included.
    return quote(document_id, safe="")


def document_path(
    document_id: str,
    pre_signed_url_expires_in: int | None = None,
) -> str:
    """Path of the document metadata endpoint."""
    path = f"document/{_escape(document_id)}"
    if pre_signed_url_expires_in is None:
        return path
    query = urlencode({"preSignedUrlExpiresIn": pre_signed_url_expires_in})
    return f"{path}?{query}"


def file_path(document_id: str) -> str:
    """Path of the binary file download endpoint."""
    return f"file/{_escape(document_id)}"
