"""Request encoding: typed request models to JSON or multipart wire payloads.

JSON payloads are compact, use camelCase keys, and leave out every field
that was not set. Multipart payloads are ordered lists of parts in the
shape httpx accepts for its ``files=`` argument; plain string parts carry
no file name and no content type.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import TYPE_CHECKING, Any, BinaryIO

from pydantic import BaseModel
from pydantic_core import to_json


if TYPE_CHECKING:
    from pdfgate_client.pdfgate.models import (
        FlattenPdfRequest,
        PdfGateFile,
        PdfGateRequest,
        UploadFileRequest,
        WatermarkPdfRequest,
    )


__all__ = [
    "MultipartBody",
    "MultipartBuilder",
    "encode_flatten",
    "encode_json",
    "encode_upload",
    "encode_watermark",
    "format_form_value",
]


type PartContent = str | bytes | BinaryIO
type MultipartPart = tuple[str, tuple[str | None, PartContent, str | None]]
type MultipartBody = list[MultipartPart]

# Name and type of the file part when the request carries raw PDF bytes.
UPLOAD_FILE_NAME = "input.pdf"
UPLOAD_CONTENT_TYPE = "application/pdf"


def encode_json(request: PdfGateRequest) -> str:
    """Serialize a request to a compact JSON object.

    Unset fields are omitted, never sent as ``null``. Requests that store a
    new document always carry ``"jsonResponse": true``.

    Args:
        request: The request model.

    Returns:
        The JSON document as a string.
    """
    payload = request.model_dump(mode="json", by_alias=True, exclude_none=True)
    if request.returns_document:
        payload["jsonResponse"] = True
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def format_form_value(value: object) -> str:
    """Render a scalar as a multipart string value.

    Booleans become ``true``/``false``, enums their wire token, and floats
    use ``.`` as the decimal separator with no trailing ``.0``.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, float):
        return repr(value).removesuffix(".0")
    return str(value)


class MultipartBuilder:
    """Collects multipart parts in the order they are added."""

    def __init__(self) -> None:
        self.parts: MultipartBody = []

    def add_string(self, name: str, value: str) -> None:
        """Add a required string part."""
        self.parts.append((name, (None, value, None)))

    def add_value(self, name: str, value: object) -> None:
        """Add a string part for ``value`` unless it is None."""
        if value is None:
            return
        self.add_string(name, format_form_value(value))

    def add_file(
        self,
        name: str,
        file_name: str,
        content: bytes | bytearray | BinaryIO,
        content_type: str,
    ) -> None:
        """Add a file part.

        Streams are handed to httpx as-is, so they are read in chunks while
        the request is sent and left open afterwards.
        """
        if isinstance(content, bytearray):
            content = bytes(content)
        self.parts.append((name, (file_name, content, content_type)))

    def add_pdf_file(self, file: PdfGateFile | None, name: str) -> None:
        """Add a file part for an optional attachment."""
        if file is None:
            return
        self.add_file(name, file.name, file.content, file.content_type)

    def add_json(self, name: str, value: Any) -> None:  # noqa: ANN401
        """Add a JSON-serialized string part unless ``value`` is None."""
        if value is None:
            return
        if isinstance(value, BaseModel):
            value = value.model_dump(mode="json", by_alias=True, exclude_none=True)
        self.add_string(name, to_json(value).decode())


def encode_upload(request: UploadFileRequest) -> MultipartBody:
    """Build the multipart body for the upload endpoint.

    The primary part is ``url`` when a URL is given, otherwise a ``file``
    part named ``input.pdf``.
    """
    builder = MultipartBuilder()

    if request.url is not None:
        builder.add_string("url", str(request.url))
    else:
        builder.add_file("file", UPLOAD_FILE_NAME, request.content, UPLOAD_CONTENT_TYPE)

    builder.add_json("metadata", request.metadata)
    builder.add_value("preSignedUrlExpiresIn", request.pre_signed_url_expires_in)
    return builder.parts


def encode_flatten(request: FlattenPdfRequest) -> MultipartBody:
    """Build the multipart body for the flatten endpoint.

    A stored document is referenced by ``documentId``; otherwise the raw
    file is sent as ``input.pdf``.
    """
    builder = MultipartBuilder()

    if request.document_id and request.document_id.strip():
        builder.add_string("documentId", request.document_id)
    else:
        builder.add_file("file", UPLOAD_FILE_NAME, request.file, UPLOAD_CONTENT_TYPE)

    builder.add_string("jsonResponse", "true")
    builder.add_value("preSignedUrlExpiresIn", request.pre_signed_url_expires_in)
    builder.add_json("metadata", request.metadata)
    return builder.parts


def encode_watermark(request: WatermarkPdfRequest) -> MultipartBody:
    """Build the multipart body for the watermark endpoint."""
    builder = MultipartBuilder()

    builder.add_string("documentId", request.document_id)
    builder.add_string("type", request.type.value.lower())
    builder.add_string("jsonResponse", "true")

    builder.add_pdf_file(request.watermark, "watermark")
    builder.add_pdf_file(request.font_file, "fontFile")
    builder.add_value("text", request.text)
    builder.add_value("font", request.font)
    builder.add_value("fontSize", request.font_size)
    builder.add_value("fontColor", request.font_color)
    builder.add_value("opacity", request.opacity)
    builder.add_value("xPosition", request.x_position)
    builder.add_value("yPosition", request.y_position)
    builder.add_value("imageWidth", request.image_width)
    builder.add_value("imageHeight", request.image_height)
    builder.add_value("rotate", request.rotate)
    builder.add_value("preSignedUrlExpiresIn", request.pre_signed_url_expires_in)
    builder.add_json("metadata", request.metadata)
    return builder.parts
