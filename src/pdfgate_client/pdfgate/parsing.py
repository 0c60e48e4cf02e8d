"""Response parsing: API response bodies to typed models or JSON objects."""

from __future__ import annotations

import json
from typing import Any

from pdfgate_client.pdfgate.exceptions import ApiError
from pdfgate_client.pdfgate.models import PdfGateDocument


__all__ = ["parse_document", "parse_object"]


def _invalid_response(endpoint: str, cause: Exception | None = None) -> ApiError:
    return ApiError(
        f"The API returned an invalid response for endpoint '{endpoint}'.",
        endpoint=endpoint,
        cause=cause,
    )


def parse_document(content: str, endpoint: str) -> PdfGateDocument:
    """Parse a document metadata response.

    Args:
        content: Response body text.
        endpoint: The endpoint that produced the body, used in errors.

    Returns:
        The parsed document metadata.

    Raises:
        ApiError: If the body is not valid JSON, does not match the
            document shape, or has no status.
    """
    try:
        document = PdfGateDocument.model_validate_json(content)
        if document.status is None:
            raise _invalid_response(endpoint)
    except ApiError:
        raise
    except Exception as exc:
        raise _invalid_response(endpoint, exc) from exc
    return document


def parse_object(content: str, endpoint: str) -> dict[str, Any]:
    """Parse a response whose body must be a JSON object.

    Args:
        content: Response body text.
        endpoint: The endpoint that produced the body, used in errors.

    Returns:
        The decoded JSON object.

    Raises:
        ApiError: If the body is not valid JSON or its root is not an object.
    """
    try:
        data = json.loads(content)
        if not isinstance(data, dict):
            raise _invalid_response(endpoint)
    except ApiError:
        raise
    except Exception as exc:
        raise _invalid_response(endpoint, exc) from exc
    return data
