"""PDFGate API client module.

Two facades share one pipeline: :class:`AsyncPdfGateClient` for asyncio code
and :class:`PdfGateClient` for blocking code. Each call encodes a typed
request, performs one HTTP exchange under the operation's timeout, and
parses the response into a typed result.

Example:
    ```python
    from pdfgate_client.pdfgate import (
        AsyncPdfGateClient,
        GeneratePdfRequest,
        GetFileRequest,
        ProtectPdfRequest,
    )

    async with AsyncPdfGateClient("test_...") as client:
        document = await client.generate_pdf(
            GeneratePdfRequest(html="<h1>Invoice</h1>", page_size_type="a4"),
        )
        protected = await client.protect_pdf(
            ProtectPdfRequest(document_id=document.id, user_password="s3cret"),
        )
        pdf = await client.get_file(GetFileRequest(document_id=protected.id))
    ```
"""

from __future__ import annotations

from pdfgate_client.pdfgate.client import AsyncPdfGateClient, PdfGateClient
from pdfgate_client.pdfgate.exceptions import (
    ApiError,
    ConfigurationError,
    OperationCancelledError,
    RequestTimeoutError,
)
from pdfgate_client.pdfgate.models import (
    Authentication,
    ClickSelectorChain,
    ClickSelectorChainSetup,
    CompressPdfRequest,
    DocumentStatus,
    DocumentType,
    EmulateMediaType,
    EncryptionAlgorithm,
    ExtractPdfFormDataRequest,
    FileOrientation,
    FlattenPdfRequest,
    GeneratePdfRequest,
    GetDocumentRequest,
    GetFileRequest,
    PageMargin,
    PageSizeType,
    PdfGateDocument,
    PdfGateFile,
    ProtectPdfRequest,
    UploadFileRequest,
    Viewport,
    WatermarkFont,
    WatermarkPdfRequest,
    WatermarkType,
)
from pdfgate_client.pdfgate.routes import resolve_base_url
from pdfgate_client.pdfgate.timeouts import (
    CancellationToken,
    OperationFamily,
    RequestTimeouts,
)


__all__ = [
    "ApiError",
    "AsyncPdfGateClient",
    "Authentication",
    "CancellationToken",
    "ClickSelectorChain",
    "ClickSelectorChainSetup",
    "CompressPdfRequest",
    "ConfigurationError",
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
    "OperationCancelledError",
    "OperationFamily",
    "PageMargin",
    "PageSizeType",
    "PdfGateClient",
    "PdfGateDocument",
    "PdfGateFile",
    "ProtectPdfRequest",
    "RequestTimeoutError",
    "UploadFileRequest",
    "Viewport",
    "WatermarkFont",
    "WatermarkPdfRequest",
    "WatermarkType",
    "resolve_base_url",
]
