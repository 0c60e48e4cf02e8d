"""Client facades for the PDFGate API."""

from __future__ import annotations

import asyncio
import threading
from typing import TYPE_CHECKING, Any, Self

import structlog

from pdfgate_client.config.exceptions import ConfigurationError
from pdfgate_client.pdfgate import routes
from pdfgate_client.pdfgate.encoding import (
    encode_flatten,
    encode_json,
    encode_upload,
    encode_watermark,
)
from pdfgate_client.pdfgate.parsing import parse_document, parse_object
from pdfgate_client.pdfgate.timeouts import (
    OperationFamily,
    RequestTimeouts,
    TimeoutPolicy,
)
from pdfgate_client.pdfgate.transport import Transport


if TYPE_CHECKING:
    import io
    from collections.abc import Coroutine

    import httpx

    from pdfgate_client.config.settings import Settings
    from pdfgate_client.pdfgate.models import (
        CompressPdfRequest,
        ExtractPdfFormDataRequest,
        FlattenPdfRequest,
        GeneratePdfRequest,
        GetDocumentRequest,
        GetFileRequest,
        PdfGateDocument,
        ProtectPdfRequest,
        UploadFileRequest,
        WatermarkPdfRequest,
    )
    from pdfgate_client.pdfgate.timeouts import CancellationToken


__all__ = ["AsyncPdfGateClient", "PdfGateClient"]


class AsyncPdfGateClient:
    """Async client for the PDFGate document-processing API.

    The environment (production or sandbox) is picked from the API key
    prefix. Every argument is validated here, so a misconfigured client
    fails before any network traffic. One instance may serve any number of
    concurrent calls; each call performs exactly one HTTP exchange.

    Example:
        ```python
        async with AsyncPdfGateClient("live_...") as client:
            document = await client.generate_pdf(
                GeneratePdfRequest(html="<h1>Hello</h1>"),
            )
            pdf = await client.get_file(GetFileRequest(document_id=document.id))
        ```

    Attributes:
        base_url: The API base URL resolved from the key.
        timeouts: The per-family timeouts in effect.
    """

    def __init__(
        self,
        api_key: str,
        *,
        timeouts: RequestTimeouts | None = None,
        max_connections: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: PDFGate API key, starting with ``live_`` or ``test_``.
            timeouts: Per-family timeouts (defaults apply when omitted).
            max_connections: Upper bound on pooled connections.
            transport: Optional custom httpx transport for testing.

        Raises:
            ConfigurationError: If the key is blank or malformed, or
                ``max_connections`` is not positive.
        """
        self.base_url = routes.resolve_base_url(api_key)
        if max_connections is not None and max_connections <= 0:
            msg = "max_connections must be greater than zero."
            raise ConfigurationError(msg, field="max_connections")

        self.timeouts = timeouts or RequestTimeouts()
        self._timeout_policy = TimeoutPolicy(self.timeouts)
        self._transport = Transport(
            api_key,
            self.base_url,
            timeouts=self.timeouts,
            max_connections=max_connections,
            transport=transport,
        )
        self._logger = structlog.get_logger(__name__)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> Self:
        """Create a client from loaded application settings."""
        return cls(
            settings.api_key.get_secret_value(),
            timeouts=settings.timeouts,
            max_connections=settings.max_connections,
            transport=transport,
        )

    async def __aenter__(self) -> Self:
        """Enter async context."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Exit async context and release the connection pool."""
        await self.aclose()

    async def aclose(self) -> None:
        """Release the connection pool."""
        await self._transport.aclose()

    # -------------------------------------------------------------------------
    # Document-producing Operations
    # -------------------------------------------------------------------------

    async def generate_pdf(
        self,
        request: GeneratePdfRequest,
        *,
        cancellation: CancellationToken | None = None,
    ) -> PdfGateDocument:
        """Render HTML or a URL to a new PDF document."""
        endpoint = routes.GENERATE_PDF
        body = encode_json(request)
        with self._timeout_policy.link(
            OperationFamily.GENERATE_PDF,
            cancellation,
        ) as token:
            content = await self._transport.post_json(endpoint, body, token)
        return parse_document(content, endpoint)

    async def flatten_pdf(
        self,
        request: FlattenPdfRequest,
        *,
        cancellation: CancellationToken | None = None,
    ) -> PdfGateDocument:
        """Flatten the form fields of a document into static content."""
        endpoint = routes.FLATTEN_PDF
        parts = encode_flatten(request)
        with self._timeout_policy.link(
            OperationFamily.FLATTEN_PDF,
            cancellation,
        ) as token:
            content = await self._transport.post_multipart(endpoint, parts, token)
        return parse_document(content, endpoint)

    async def watermark_pdf(
        self,
        request: WatermarkPdfRequest,
        *,
        cancellation: CancellationToken | None = None,
    ) -> PdfGateDocument:
        """Apply a text or image watermark to a document."""
        endpoint = routes.WATERMARK_PDF
        parts = encode_watermark(request)
        with self._timeout_policy.link(
            OperationFamily.WATERMARK_PDF,
            cancellation,
        ) as token:
            content = await self._transport.post_multipart(endpoint, parts, token)
        return parse_document(content, endpoint)

    async def protect_pdf(
        self,
        request: ProtectPdfRequest,
        *,
        cancellation: CancellationToken | None = None,
    ) -> PdfGateDocument:
        """Encrypt a document and restrict its permissions."""
        endpoint = routes.PROTECT_PDF
        body = encode_json(request)
        with self._timeout_policy.link(
            OperationFamily.PROTECT_PDF,
            cancellation,
        ) as token:
            content = await self._transport.post_json(endpoint, body, token)
        return parse_document(content, endpoint)

    async def compress_pdf(
        self,
        request: CompressPdfRequest,
        *,
        cancellation: CancellationToken | None = None,
    ) -> PdfGateDocument:
        """Compress a document, optionally linearizing it for web viewing."""
        endpoint = routes.COMPRESS_PDF
        body = encode_json(request)
        with self._timeout_policy.link(
            OperationFamily.COMPRESS_PDF,
            cancellation,
        ) as token:
            content = await self._transport.post_json(endpoint, body, token)
        return parse_document(content, endpoint)

    async def upload_file(
        self,
        request: UploadFileRequest,
        *,
        cancellation: CancellationToken | None = None,
    ) -> PdfGateDocument:
        """Store a PDF from bytes, a stream, or a public URL.

        Streams are read while the request is sent and are left open.
        """
        endpoint = routes.UPLOAD_FILE
        parts = encode_upload(request)
        with self._timeout_policy.link(OperationFamily.DEFAULT, cancellation) as token:
            content = await self._transport.post_multipart(endpoint, parts, token)
        return parse_document(content, endpoint)

    # -------------------------------------------------------------------------
    # Read Operations
    # -------------------------------------------------------------------------

    async def extract_pdf_form_data(
        self,
        request: ExtractPdfFormDataRequest,
        *,
        cancellation: CancellationToken | None = None,
    ) -> dict[str, Any]:
        """Read the form field values of a document.

        Returns:
            The field values keyed by field name, exactly as the API sent them.
        """
        endpoint = routes.EXTRACT_PDF_FORM_DATA
        body = encode_json(request)
        with self._timeout_policy.link(OperationFamily.DEFAULT, cancellation) as token:
            content = await self._transport.post_json(endpoint, body, token)
        return parse_object(content, endpoint)

    async def get_document(
        self,
        request: GetDocumentRequest,
        *,
        cancellation: CancellationToken | None = None,
    ) -> PdfGateDocument:
        """Fetch the metadata of a stored document."""
        endpoint = routes.document_path(
            request.document_id,
            request.pre_signed_url_expires_in,
        )
        with self._timeout_policy.link(OperationFamily.DEFAULT, cancellation) as token:
            content = await self._transport.get_text(endpoint, token)
        return parse_document(content, endpoint)

    async def get_file(
        self,
        request: GetFileRequest,
        *,
        cancellation: CancellationToken | None = None,
    ) -> io.BytesIO:
        """Download the content of a stored document.

        The whole body is buffered before this returns; the stream is
        positioned at the start and owned by the caller.
        """
        endpoint = routes.file_path(request.document_id)
        with self._timeout_policy.link(OperationFamily.DEFAULT, cancellation) as token:
            return await self._transport.get_bytes(endpoint, token)


class PdfGateClient:
    """Blocking client for the PDFGate API.

    Wraps an :class:`AsyncPdfGateClient` and drives it on a private event
    loop that runs in a daemon thread owned by this instance. Calls from
    several threads run concurrently on that loop and share one connection
    pool; each call's timeout starts as soon as the call is made.
    A :class:`CancellationToken` cancelled from another thread aborts the
    waiting call. Calls block the calling thread; inside a running event
    loop use :class:`AsyncPdfGateClient` instead.

    Example:
        ```python
        with PdfGateClient("test_...") as client:
            document = client.upload_file(UploadFileRequest(content=pdf_bytes))
            print(document.id, document.status)
        ```
    """

    def __init__(
        self,
        api_key: str,
        *,
        timeouts: RequestTimeouts | None = None,
        max_connections: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: PDFGate API key, starting with ``live_`` or ``test_``.
            timeouts: Per-family timeouts (defaults apply when omitted).
            max_connections: Upper bound on pooled connections.
            transport: Optional custom httpx transport for testing.

        Raises:
            ConfigurationError: If any argument is invalid.
        """
        self._client = AsyncPdfGateClient(
            api_key,
            timeouts=timeouts,
            max_connections=max_connections,
            transport=transport,
        )
        self._lock = threading.Lock()
        self._closed = False
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._run_loop,
            name="pdfgate-client",
            daemon=True,
        )
        self._thread.start()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> Self:
        """Create a client from loaded application settings."""
        return cls(
            settings.api_key.get_secret_value(),
            timeouts=settings.timeouts,
            max_connections=settings.max_connections,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        """The API base URL resolved from the key."""
        return self._client.base_url

    @property
    def timeouts(self) -> RequestTimeouts:
        """The per-family timeouts in effect."""
        return self._client.timeouts

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Release the connection pool and stop the private event loop."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        try:
            asyncio.run_coroutine_threadsafe(self._client.aclose(), self._loop).result()
        finally:
            self._loop.call_soon_threadsafe(self._loop.stop)
            self._thread.join()
            self._loop.close()

    def _run_loop(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._loop.run_forever()

    def _run[T](self, operation: Coroutine[Any, Any, T]) -> T:
        # Submission is serialised with close(); waiting is not.
        with self._lock:
            if self._closed:
                operation.close()
                msg = "Client is closed."
                raise RuntimeError(msg)
            future = asyncio.run_coroutine_threadsafe(operation, self._loop)
        try:
            return future.result()
        except BaseException:
            future.cancel()
            raise

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def generate_pdf(
        self,
        request: GeneratePdfRequest,
        *,
        cancellation: CancellationToken | None = None,
    ) -> PdfGateDocument:
        """Render HTML or a URL to a new PDF document."""
        return self._run(self._client.generate_pdf(request, cancellation=cancellation))

    def flatten_pdf(
        self,
        request: FlattenPdfRequest,
        *,
        cancellation: CancellationToken | None = None,
    ) -> PdfGateDocument:
        """Flatten the form fields of a document into static content."""
        return self._run(self._client.flatten_pdf(request, cancellation=cancellation))

    def watermark_pdf(
        self,
        request: WatermarkPdfRequest,
        *,
        cancellation: CancellationToken | None = None,
    ) -> PdfGateDocument:
        """Apply a text or image watermark to a document."""
        return self._run(self._client.watermark_pdf(request, cancellation=cancellation))

    def protect_pdf(
        self,
        request: ProtectPdfRequest,
        *,
        cancellation: CancellationToken | None = None,
    ) -> PdfGateDocument:
        """Encrypt a document and restrict its permissions."""
        return self._run(self._client.protect_pdf(request, cancellation=cancellation))

    def compress_pdf(
        self,
        request: CompressPdfRequest,
        *,
        cancellation: CancellationToken | None = None,
    ) -> PdfGateDocument:
        """Compress a document."""
        return self._run(self._client.compress_pdf(request, cancellation=cancellation))

    def upload_file(
        self,
        request: UploadFileRequest,
        *,
        cancellation: CancellationToken | None = None,
    ) -> PdfGateDocument:
        """Store a PDF from bytes, a stream, or a public URL."""
        return self._run(self._client.upload_file(request, cancellation=cancellation))

    def extract_pdf_form_data(
        self,
        request: ExtractPdfFormDataRequest,
        *,
        cancellation: CancellationToken | None = None,
    ) -> dict[str, Any]:
        """Read the form field values of a document."""
        return self._run(
            self._client.extract_pdf_form_data(request, cancellation=cancellation),
        )

    def get_document(
        self,
        request: GetDocumentRequest,
        *,
        cancellation: CancellationToken | None = None,
    ) -> PdfGateDocument:
        """Fetch the metadata of a stored document."""
        return self._run(self._client.get_document(request, cancellation=cancellation))

    def get_file(
        self,
        request: GetFileRequest,
        *,
        cancellation: CancellationToken | None = None,
    ) -> io.BytesIO:
        """Download the content of a stored document."""
        return self._run(self._client.get_file(request, cancellation=cancellation))
