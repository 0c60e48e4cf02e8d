"""Pydantic models for PDFGate API requests and responses.

Field names are snake_case in Python and lower-camel-case on the wire.
Enum values are the exact wire tokens the API expects; a few enums do not
follow the camel-case convention (``EncryptionAlgorithm`` is upper-case,
``DocumentType`` is snake_case), so every table is spelled out in full.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime  # noqa: TC003
from enum import StrEnum
from pathlib import PurePath
from typing import Annotated, Any, BinaryIO, ClassVar, Self

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    HttpUrl,
    InstanceOf,
    model_validator,
)
from pydantic.alias_generators import to_camel


__all__ = [
    "Authentication",
    "ClickSelectorChain",
    "ClickSelectorChainSetup",
    "CompressPdfRequest",
    "DocumentStatus",
    "DocumentType",
    "EmulateMediaType",
    "EncryptionAlgorithm",
    "ExtractPdfFormDataRequest",
    "FileOrientation",
    "FlattenPdfRequest",
    "GeneratePdfRequest",
    "GetDocumentRequest",
    "GetFileRequest",
    "PageMargin",
    "PageSizeType",
    "PdfGateDocument",
    "PdfGateFile",
    "ProtectPdfRequest",
    "UploadFileRequest",
    "Viewport",
    "WatermarkFont",
    "WatermarkPdfRequest",
    "WatermarkType",
    "infer_mime_type",
]


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class PageSizeType(StrEnum):
    """Paper sizes for generated PDFs."""

    A0 = "a0"
    A1 = "a1"
    A2 = "a2"
    A3 = "a3"
    A4 = "a4"
    A5 = "a5"
    A6 = "a6"
    LEDGER = "ledger"
    TABLOID = "tabloid"
    LEGAL = "legal"
    LETTER = "letter"


class FileOrientation(StrEnum):
    """Page orientation for generated PDFs."""

    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"


class EmulateMediaType(StrEnum):
    """CSS media type emulated while rendering HTML."""

    SCREEN = "screen"
    PRINT = "print"


class WatermarkType(StrEnum):
    """Kind of watermark applied to a document."""

    TEXT = "text"
    IMAGE = "image"


class WatermarkFont(StrEnum):
    """Standard PDF fonts available for text watermarks."""

    TIMES_ROMAN = "times-roman"
    TIMES_BOLD = "times-bold"
    TIMES_ITALIC = "times-italic"
    TIMES_BOLD_ITALIC = "times-bolditalic"
    HELVETICA = "helvetica"
    HELVETICA_BOLD = "helvetica-bold"
    HELVETICA_OBLIQUE = "helvetica-oblique"
    HELVETICA_BOLD_OBLIQUE = "helvetica-boldoblique"
    COURIER = "courier"
    COURIER_BOLD = "courier-bold"
    COURIER_OBLIQUE = "courier-oblique"
    COURIER_BOLD_OBLIQUE = "courier-boldoblique"


class EncryptionAlgorithm(StrEnum):
    """Encryption algorithms for protected PDFs."""

    AES256 = "AES256"
    AES128 = "AES128"


class DocumentStatus(StrEnum):
    """Processing status of a stored document."""

    COMPLETED = "completed"
    PROCESSING = "processing"
    EXPIRED = "expired"
    FAILED = "failed"


class DocumentType(StrEnum):
    """How a stored document was produced."""

    FROM_HTML = "from_html"
    FLATTENED = "flattened"
    WATERMARKED = "watermarked"
    ENCRYPTED = "encrypted"
    COMPRESSED = "compressed"
    SIGNED = "signed"
    UPLOADED = "uploaded"


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------

DEFAULT_MIME_TYPE = "application/octet-stream"

_MIME_TYPES_BY_EXTENSION = {
    ".pdf": "application/pdf",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".ttf": "font/ttf",
    ".otf": "font/otf",
}


def infer_mime_type(file_name: str) -> str:
    """Infer a MIME type from a file name's extension (case-insensitive)."""
    extension = PurePath(file_name).suffix.lower()
    return _MIME_TYPES_BY_EXTENSION.get(extension, DEFAULT_MIME_TYPE)


@dataclass(frozen=True, slots=True)
class PdfGateFile:
    """A named binary attachment sent as a multipart file part.

    The content may be raw bytes or a binary stream. Streams belong to the
    caller: the client reads them while sending but never closes them.

    Attributes:
        name: File name sent in the part's Content-Disposition.
        content: File bytes or an open binary stream.
        type: Explicit MIME type; inferred from ``name`` when omitted.
    """

    name: str
    content: bytes | BinaryIO
    type: str | None = None

    @property
    def content_type(self) -> str:
        """The explicit MIME type, or the one inferred from the file name."""
        return self.type or infer_mime_type(self.name)


def _check_binary(value: Any) -> Any:  # noqa: ANN401
    if value is None or isinstance(value, bytes | bytearray) or hasattr(value, "read"):
        return value
    msg = "content must be bytes or a binary stream"
    raise ValueError(msg)


BinaryContent = Annotated[Any, AfterValidator(_check_binary)]


# ---------------------------------------------------------------------------
# Base Models
# ---------------------------------------------------------------------------


class PdfGateBaseModel(BaseModel):
    """Base model with common configuration for all PDFGate models."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",  # Ignore unknown fields from API
    )


class PdfGateRequest(PdfGateBaseModel):
    """Base class for request payloads.

    ``returns_document`` marks operations that store a new document; their
    payloads always ask the API for a JSON response.
    """

    model_config = ConfigDict(extra="forbid")

    returns_document: ClassVar[bool] = True


# ---------------------------------------------------------------------------
# Generate
# ---------------------------------------------------------------------------


class PageMargin(PdfGateBaseModel):
    """Page margins as CSS lengths (e.g. ``"10mm"``)."""

    top: str | None = None
    bottom: str | None = None
    left: str | None = None
    right: str | None = None


class ClickSelectorChain(PdfGateBaseModel):
    """A sequence of selectors clicked in order."""

    selectors: list[str] | None = None


class ClickSelectorChainSetup(PdfGateBaseModel):
    """Click chains executed before rendering."""

    ignore_failing_chains: bool | None = None
    chains: list[ClickSelectorChain] | None = None


class Authentication(PdfGateBaseModel):
    """HTTP basic authentication for the page being rendered."""

    username: str | None = None
    password: str | None = None


class Viewport(PdfGateBaseModel):
    """Browser viewport used while rendering."""

    width: int | None = None
    height: int | None = None


class GeneratePdfRequest(PdfGateRequest):
    """Generate a PDF from HTML markup or from a URL."""

    html: str | None = None
    url: str | None = None
    pre_signed_url_expires_in: int | None = None
    page_size_type: PageSizeType | None = None
    width: int | None = None
    height: int | None = None
    orientation: FileOrientation | None = None
    header: str | None = None
    footer: str | None = None
    margin: PageMargin | None = None
    timeout: int | None = None
    javascript: str | None = None
    css: str | None = None
    emulate_media_type: EmulateMediaType | None = None
    http_headers: dict[str, str] | None = None
    metadata: Any = None
    wait_for_selector: str | None = None
    click_selector: str | None = None
    click_selector_chain_setup: ClickSelectorChainSetup | None = None
    wait_for_network_idle: bool | None = None
    enable_form_fields: bool | None = None
    delay: int | None = None
    load_images: bool | None = None
    scale: float | None = None
    page_ranges: str | None = None
    print_background: bool | None = None
    user_agent: str | None = None
    authentication: Authentication | None = None
    viewport: Viewport | None = None


# ---------------------------------------------------------------------------
# Document Operations
# ---------------------------------------------------------------------------


class FlattenPdfRequest(PdfGateRequest):
    """Flatten the form fields of a stored document or of an uploaded file."""

    document_id: str | None = None
    file: BinaryContent = None
    pre_signed_url_expires_in: int | None = None
    metadata: Any = None

    @model_validator(mode="after")
    def require_source(self) -> Self:
        """Require a document ID or file content."""
        if not (self.document_id and self.document_id.strip()) and self.file is None:
            msg = "Either document_id or file is required"
            raise ValueError(msg)
        return self


class WatermarkPdfRequest(PdfGateRequest):
    """Apply a text or image watermark to a stored document."""

    # PdfGateFile.content may be a stream
    model_config = ConfigDict(arbitrary_types_allowed=True)

    document_id: str
    type: WatermarkType
    watermark: InstanceOf[PdfGateFile] | None = None
    font_file: InstanceOf[PdfGateFile] | None = None
    text: str | None = None
    font: WatermarkFont | None = None
    font_size: int | None = None
    font_color: str | None = None
    opacity: float | None = None
    x_position: int | None = None
    y_position: int | None = None
    image_width: int | None = None
    image_height: int | None = None
    rotate: float | None = None
    pre_signed_url_expires_in: int | None = None
    metadata: Any = None


class ProtectPdfRequest(PdfGateRequest):
    """Encrypt a stored document and restrict what readers may do with it."""

    document_id: str
    algorithm: EncryptionAlgorithm | None = None
    user_password: str | None = None
    owner_password: str | None = None
    disable_print: bool | None = None
    disable_copy: bool | None = None
    disable_editing: bool | None = None
    encrypt_metadata: bool | None = None
    pre_signed_url_expires_in: int | None = None
    metadata: Any = None


class CompressPdfRequest(PdfGateRequest):
    """Compress a stored document."""

    document_id: str
    linearize: bool | None = None
    pre_signed_url_expires_in: int | None = None
    metadata: Any = None


class ExtractPdfFormDataRequest(PdfGateRequest):
    """Read the form fields of a stored document."""

    returns_document: ClassVar[bool] = False

    document_id: str


class GetDocumentRequest(PdfGateRequest):
    """Fetch the metadata of a stored document."""

    returns_document: ClassVar[bool] = False

    document_id: str
    pre_signed_url_expires_in: int | None = None


class GetFileRequest(PdfGateRequest):
    """Download the binary content of a stored document."""

    returns_document: ClassVar[bool] = False

    document_id: str


class UploadFileRequest(PdfGateRequest):
    """Upload a PDF, from bytes, a caller-owned stream, or a public URL.

    When both ``url`` and ``content`` are set, the URL is sent.
    """

    content: BinaryContent = None
    url: HttpUrl | None = None
    metadata: Any = None
    pre_signed_url_expires_in: int | None = None

    @model_validator(mode="after")
    def require_source(self) -> Self:
        """Require file content or a URL."""
        if self.url is None and self.content is None:
            msg = "Either content or url is required"
            raise ValueError(msg)
        return self


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class PdfGateDocument(PdfGateBaseModel):
    """Metadata of a document stored by PDFGate.

    Returned by every operation that produces or looks up a document.
    ``derived_from`` points at the document this one was produced from.
    """

    id: str = ""
    status: DocumentStatus | None = None
    type: DocumentType | None = None
    file_url: str | None = None
    size: int | None = None
    created_at: datetime | None = None
    expires_at: datetime | None = None
    derived_from: str | None = None
