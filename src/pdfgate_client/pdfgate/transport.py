"""HTTP transport for the PDFGate API.

One :class:`Transport` owns one pooled ``httpx.AsyncClient`` and performs
exactly one HTTP exchange per call. Failures come out as one of two
exception families: :class:`ApiError` when the API rejected the request or
could not be reached, :class:`OperationCancelledError` when the call's
cancellation token fired first.
"""

from __future__ import annotations

import asyncio
import io
from typing import TYPE_CHECKING, Any

import httpx
import structlog

from pdfgate_client.pdfgate.exceptions import ApiError, OperationCancelledError
from pdfgate_client.pdfgate.timeouts import RequestTimeouts, transport_timeout


if TYPE_CHECKING:
    from collections.abc import Coroutine, Mapping

    from pdfgate_client.pdfgate.encoding import MultipartBody
    from pdfgate_client.pdfgate.timeouts import CancellationToken


__all__ = ["ReadOnlyBytesIO", "Transport"]


USER_AGENT = "pdfgate-client-python"
JSON_CONTENT_TYPE = "application/json; charset=utf-8"


class ReadOnlyBytesIO(io.BytesIO):
    """In-memory stream over a downloaded body that rejects writes."""

    def writable(self) -> bool:
        return False

    def write(self, buffer: Any, /) -> int:
        msg = "stream is read-only"
        raise io.UnsupportedOperation(msg)

    def writelines(self, lines: Any, /) -> None:
        msg = "stream is read-only"
        raise io.UnsupportedOperation(msg)

    def truncate(self, size: int | None = None, /) -> int:
        msg = "stream is read-only"
        raise io.UnsupportedOperation(msg)


class Transport:
    """Executes single HTTP exchanges against one PDFGate base URL.

    The connection pool is created here, shared by every in-flight call,
    and released by :meth:`aclose`.

    Attributes:
        base_url: The API base URL all endpoint paths are relative to.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        *,
        timeouts: RequestTimeouts | None = None,
        max_connections: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            api_key: API key sent as a bearer token on every request.
            base_url: Base URL of the API environment.
            timeouts: Family timeouts; the connection-level timeout is set
                above the longest of them.
            max_connections: Upper bound on concurrent connections.
            transport: Optional custom httpx transport for testing.
        """
        self.base_url = base_url
        limits = (
            httpx.Limits(max_connections=max_connections)
            if max_connections is not None
            else httpx.Limits()
        )
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={
                "Authorization": f"Bearer {api_key}",
                "User-Agent": USER_AGENT,
            },
            timeout=transport_timeout(timeouts or RequestTimeouts()),
            limits=limits,
            transport=transport,
        )
        self._logger = structlog.get_logger(__name__)

    @property
    def is_closed(self) -> bool:
        """Whether the connection pool has been released."""
        return self._client.is_closed

    async def aclose(self) -> None:
        """Release the connection pool."""
        if not self._client.is_closed:
            await self._client.aclose()

    # -------------------------------------------------------------------------
    # Public Request Methods
    # -------------------------------------------------------------------------

    async def get_text(self, endpoint: str, cancellation: CancellationToken) -> str:
        """GET an endpoint and return the response body as text."""
        response = await self._send("GET", endpoint, cancellation)
        return response.text

    async def get_bytes(
        self,
        endpoint: str,
        cancellation: CancellationToken,
    ) -> io.BytesIO:
        """GET an endpoint and return the fully buffered body as a stream."""
        response = await self._send("GET", endpoint, cancellation)
        return ReadOnlyBytesIO(response.content)

    async def post_json(
        self,
        endpoint: str,
        body: str,
        cancellation: CancellationToken,
    ) -> str:
        """POST a JSON document and return the response body as text."""
        response = await self._send(
            "POST",
            endpoint,
            cancellation,
            content=body.encode("utf-8"),
            headers={"Content-Type": JSON_CONTENT_TYPE},
        )
        return response.text

    async def post_multipart(
        self,
        endpoint: str,
        parts: MultipartBody,
        cancellation: CancellationToken,
    ) -> str:
        """POST a multipart form and return the response body as text."""
        response = await self._send("POST", endpoint, cancellation, files=parts)
        return response.text

    # -------------------------------------------------------------------------
    # Core Request Method
    # -------------------------------------------------------------------------

    async def _send(
        self,
        method: str,
        endpoint: str,
        cancellation: CancellationToken,
        *,
        content: bytes | None = None,
        files: MultipartBody | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        """Execute one HTTP exchange.

        Args:
            method: HTTP method.
            endpoint: Endpoint path relative to the base URL.
            cancellation: Token that aborts the exchange when it fires.
            content: Raw request body.
            files: Multipart parts.
            headers: Additional request headers.

        Returns:
            The response, with its body fully read.

        Raises:
            ApiError: For non-success responses and transport failures.
            OperationCancelledError: If ``cancellation`` fired first.
        """
        log = self._logger.bind(method=method, endpoint=endpoint)
        cancellation.raise_if_cancelled(endpoint)

        log.debug("api_request")
        try:
            response = await self._run_cancellable(
                self._client.request(
                    method,
                    endpoint,
                    content=content,
                    files=files,
                    headers=headers,
                ),
                endpoint,
                cancellation,
            )
        except OperationCancelledError:
            log.info("api_request_cancelled")
            raise
        except Exception as exc:
            log.warning("api_request_failed", error=str(exc))
            msg = f"Failed to call endpoint '{endpoint}'."
            raise ApiError(msg, endpoint=endpoint, cause=exc) from exc

        log.debug(
            "api_response",
            status_code=response.status_code,
            elapsed_ms=response.elapsed.total_seconds() * 1000,
        )

        if not response.is_success:
            log.warning("api_error_response", status_code=response.status_code)
            raise ApiError.from_http_error(
                response.status_code,
                endpoint,
                response.text,
            )
        return response

    async def _run_cancellable(
        self,
        exchange: Coroutine[Any, Any, httpx.Response],
        endpoint: str,
        cancellation: CancellationToken,
    ) -> httpx.Response:
        """Await ``exchange``, aborting it when ``cancellation`` fires.

        The token may fire from any thread; the abort is handed to the
        event loop that runs the exchange.
        """
        loop = asyncio.get_running_loop()
        task = loop.create_task(exchange)
        unregister = cancellation.register(
            lambda: loop.call_soon_threadsafe(task.cancel),
        )
        try:
            return await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            # The caller's own task being cancelled propagates as-is.
            caller_cancelled = current is not None and current.cancelling() > 0
            if cancellation.is_cancelled and not caller_cancelled:
                cancellation.raise_if_cancelled(endpoint)
            raise
        finally:
            unregister()
