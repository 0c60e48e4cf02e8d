"""Unit tests for response parsing."""

from __future__ import annotations

import json
from datetime import UTC, datetime

import pytest

from pdfgate_client.pdfgate import (
    ApiError,
    DocumentStatus,
    DocumentType,
    PdfGateDocument,
)
from pdfgate_client.pdfgate.parsing import parse_document, parse_object


class TestParseDocument:
    """Tests for parse_document."""

    def test_full_document(self) -> None:
        body = json.dumps(
            {
                "id": "abc",
                "status": "completed",
                "type": "flattened",
                "fileUrl": "https://files.pdfgate.com/abc.pdf",
                "size": 2048,
                "createdAt": "2024-02-13T15:56:12Z",
                "expiresAt": "2024-02-14T15:56:12Z",
                "derivedFrom": "parent",
            },
        )

        document = parse_document(body, "forms/flatten")

        assert isinstance(document, PdfGateDocument)
        assert document.id == "abc"
        assert document.status is DocumentStatus.COMPLETED
        assert document.type is DocumentType.FLATTENED
        assert document.file_url == "https://files.pdfgate.com/abc.pdf"
        assert document.size == 2048
        assert document.created_at == datetime(2024, 2, 13, 15, 56, 12, tzinfo=UTC)
        assert document.derived_from == "parent"

    def test_uploaded_type(self) -> None:
        document = parse_document(
            '{"id":"u1","status":"processing","type":"uploaded"}',
            "upload",
        )

        assert document.type is DocumentType.UPLOADED
        assert document.status is DocumentStatus.PROCESSING

    def test_unknown_fields_are_ignored(self) -> None:
        document = parse_document('{"status":"completed","extra":1}', "upload")

        assert document.id == ""

    @pytest.mark.parametrize("body", ["{", "", "not json", "[]"])
    def test_malformed_body(self, body: str) -> None:
        with pytest.raises(ApiError) as exc_info:
            parse_document(body, "v1/generate/pdf")

        assert exc_info.value.endpoint == "v1/generate/pdf"
        assert "invalid response" in str(exc_info.value)
        assert "'v1/generate/pdf'" in str(exc_info.value)
        assert exc_info.value.__cause__ is not None

    def test_missing_status(self) -> None:
        with pytest.raises(ApiError) as exc_info:
            parse_document("{}", "upload")

        assert exc_info.value.status_code is None
        assert exc_info.value.__cause__ is None

    def test_unknown_status_token(self) -> None:
        with pytest.raises(ApiError):
            parse_document('{"status":"archived"}', "upload")


class TestParseObject:
    """Tests for parse_object."""

    def test_object(self) -> None:
        data = parse_object('{"first_name":"John","age":30}', "forms/extract-data")

        assert data == {"first_name": "John", "age": 30}

    def test_empty_object(self) -> None:
        assert parse_object("{}", "forms/extract-data") == {}

    @pytest.mark.parametrize("body", ["[]", "[1, 2]", "42", '"text"', "null", "{"])
    def test_non_object_root(self, body: str) -> None:
        with pytest.raises(ApiError) as exc_info:
            parse_object(body, "forms/extract-data")

        assert "forms/extract-data" in str(exc_info.value)
