"""Unit tests for the HTTP transport."""

from __future__ import annotations

import asyncio
import io
from collections.abc import AsyncGenerator  # noqa: TC003
from collections.abc import Callable  # noqa: TC003
from datetime import timedelta

import httpx
import pytest
import respx  # noqa: TC002

from pdfgate_client.pdfgate import (
    ApiError,
    OperationCancelledError,
    RequestTimeoutError,
)
from pdfgate_client.pdfgate.exceptions import MAX_BODY_LENGTH
from pdfgate_client.pdfgate.timeouts import (
    CancellationToken,
    OperationFamily,
    RequestTimeouts,
    TimeoutPolicy,
)
from pdfgate_client.pdfgate.transport import Transport


BASE_URL = "https://api-sandbox.pdfgate.com/"


@pytest.fixture
async def transport(api_key: str) -> AsyncGenerator[Transport, None]:
    """Transport against the sandbox, mocked by respx."""
    transport = Transport(api_key, BASE_URL)
    yield transport
    await transport.aclose()


@pytest.fixture
def token() -> CancellationToken:
    """A cancellation token that never fires."""
    return CancellationToken.none()


class TestSuccessfulExchanges:
    """Tests for successful requests."""

    @pytest.mark.respx(base_url="https://api-sandbox.pdfgate.com")
    async def test_post_json(
        self,
        transport: Transport,
        token: CancellationToken,
        respx_mock: respx.MockRouter,
        api_key: str,
    ) -> None:
        route = respx_mock.post("/v1/generate/pdf").mock(
            return_value=httpx.Response(200, text='{"status":"completed"}'),
        )

        body = await transport.post_json("v1/generate/pdf", '{"html":"x"}', token)

        assert body == '{"status":"completed"}'
        request = route.calls.last.request
        assert request.content == b'{"html":"x"}'
        assert request.headers["Content-Type"] == "application/json; charset=utf-8"
        assert request.headers["Authorization"] == f"Bearer {api_key}"

    async def test_post_multipart(
        self,
        api_key: str,
        token: CancellationToken,
    ) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, text="{}")

        transport = Transport(api_key, BASE_URL, transport=httpx.MockTransport(handler))
        stream = io.BytesIO(b"%PDF-1.7 content")

        await transport.post_multipart(
            "upload",
            [
                ("file", ("input.pdf", stream, "application/pdf")),
                ("metadata", (None, '{"a":1}', None)),
            ],
            token,
        )
        await transport.aclose()

        (request,) = requests
        assert request.url == "https://api-sandbox.pdfgate.com/upload"
        assert request.headers["Content-Type"].startswith("multipart/form-data")
        assert b'name="file"; filename="input.pdf"' in request.content
        assert b"%PDF-1.7 content" in request.content
        assert b'name="metadata"' in request.content
        assert not stream.closed

    @pytest.mark.respx(base_url="https://api-sandbox.pdfgate.com")
    async def test_get_bytes_is_buffered(
        self,
        transport: Transport,
        token: CancellationToken,
        respx_mock: respx.MockRouter,
    ) -> None:
        respx_mock.get("/file/abc").mock(
            return_value=httpx.Response(200, content=b"%PDF-1.7 bytes"),
        )

        content = await transport.get_bytes("file/abc", token)

        assert isinstance(content, io.BytesIO)
        assert content.tell() == 0
        assert content.read() == b"%PDF-1.7 bytes"

    @pytest.mark.respx(base_url="https://api-sandbox.pdfgate.com")
    async def test_get_bytes_is_read_only(
        self,
        transport: Transport,
        token: CancellationToken,
        respx_mock: respx.MockRouter,
    ) -> None:
        respx_mock.get("/file/abc").mock(
            return_value=httpx.Response(200, content=b"%PDF-1.7 bytes"),
        )

        content = await transport.get_bytes("file/abc", token)

        assert content.readable()
        assert not content.writable()
        with pytest.raises(io.UnsupportedOperation):
            content.write(b"x")
        with pytest.raises(io.UnsupportedOperation):
            content.truncate(0)
        assert content.getvalue() == b"%PDF-1.7 bytes"

    async def test_close_is_idempotent(self, api_key: str) -> None:
        transport = Transport(api_key, BASE_URL)

        await transport.aclose()
        await transport.aclose()

        assert transport.is_closed


class TestHttpErrors:
    """Tests for non-success responses."""

    def test_custom_message_gets_status_suffix(self) -> None:
        error = ApiError(
            "Upstream rejected the file.",
            endpoint="upload",
            status_code=413,
        )

        assert str(error) == "Upstream rejected the file. (status=413)"

    @pytest.mark.respx(base_url="https://api-sandbox.pdfgate.com")
    async def test_error_status(
        self,
        transport: Transport,
        token: CancellationToken,
        respx_mock: respx.MockRouter,
    ) -> None:
        respx_mock.post("/v1/generate/pdf").mock(
            return_value=httpx.Response(422, text="invalid html"),
        )

        with pytest.raises(ApiError) as exc_info:
            await transport.post_json("v1/generate/pdf", "{}", token)

        error = exc_info.value
        assert error.status_code == 422
        assert error.response_body == "invalid html"
        assert error.endpoint == "v1/generate/pdf"
        assert "v1/generate/pdf" in str(error)
        assert "invalid html" in str(error)
        assert "status code 422" in str(error)
        assert "status=" not in str(error)

    @pytest.mark.respx(base_url="https://api-sandbox.pdfgate.com")
    async def test_long_body_is_truncated(
        self,
        transport: Transport,
        token: CancellationToken,
        respx_mock: respx.MockRouter,
    ) -> None:
        respx_mock.get("/document/abc").mock(
            return_value=httpx.Response(500, text="x" * 5000),
        )

        with pytest.raises(ApiError) as exc_info:
            await transport.get_text("document/abc", token)

        assert exc_info.value.response_body == "x" * MAX_BODY_LENGTH

    @pytest.mark.respx(base_url="https://api-sandbox.pdfgate.com")
    async def test_error_is_not_retried(
        self,
        transport: Transport,
        token: CancellationToken,
        respx_mock: respx.MockRouter,
    ) -> None:
        route = respx_mock.post("/compress/pdf").mock(
            return_value=httpx.Response(503, text="busy"),
        )

        with pytest.raises(ApiError):
            await transport.post_json("compress/pdf", "{}", token)

        assert route.call_count == 1


class TestTransportFaults:
    """Tests for failures before any response arrives."""

    async def test_fault_is_wrapped_with_identity(
        self,
        api_key: str,
        token: CancellationToken,
        failing_transport: Callable[[Exception], httpx.MockTransport],
    ) -> None:
        fault = RuntimeError("send failed")
        transport = Transport(api_key, BASE_URL, transport=failing_transport(fault))

        with pytest.raises(ApiError) as exc_info:
            await transport.get_text("document/abc", token)
        await transport.aclose()

        assert exc_info.value.__cause__ is fault
        assert exc_info.value.status_code is None
        assert str(exc_info.value) == "Failed to call endpoint 'document/abc'."

    async def test_connect_error_is_wrapped(
        self,
        api_key: str,
        token: CancellationToken,
        failing_transport: Callable[[Exception], httpx.MockTransport],
    ) -> None:
        fault = httpx.ConnectError("Connection refused")
        transport = Transport(api_key, BASE_URL, transport=failing_transport(fault))

        with pytest.raises(ApiError) as exc_info:
            await transport.post_json("upload", "{}", token)
        await transport.aclose()

        assert exc_info.value.__cause__ is fault


class TestCancellation:
    """Tests for cancellation and timeouts."""

    async def test_pre_cancelled_token(
        self,
        api_key: str,
        failing_transport: Callable[[Exception], httpx.MockTransport],
    ) -> None:
        fault = RuntimeError("must not be sent")
        transport = Transport(api_key, BASE_URL, transport=failing_transport(fault))
        token = CancellationToken()
        token.cancel()

        with pytest.raises(OperationCancelledError) as exc_info:
            await transport.get_text("document/abc", token)
        await transport.aclose()

        assert not isinstance(exc_info.value, ApiError)
        assert exc_info.value.endpoint == "document/abc"

    async def test_cancel_during_exchange(
        self,
        api_key: str,
        slow_transport: Callable[[float], httpx.MockTransport],
    ) -> None:
        transport = Transport(api_key, BASE_URL, transport=slow_transport(10.0))
        token = CancellationToken()
        asyncio.get_running_loop().call_later(0.05, token.cancel)

        with pytest.raises(OperationCancelledError) as exc_info:
            await transport.get_text("document/abc", token)
        await transport.aclose()

        assert not isinstance(exc_info.value, RequestTimeoutError)

    async def test_cancel_from_another_thread(
        self,
        api_key: str,
        slow_transport: Callable[[float], httpx.MockTransport],
    ) -> None:
        transport = Transport(api_key, BASE_URL, transport=slow_transport(10.0))
        token = CancellationToken()
        loop = asyncio.get_running_loop()
        loop.call_later(0.05, lambda: loop.run_in_executor(None, token.cancel))

        with pytest.raises(OperationCancelledError):
            await asyncio.wait_for(transport.get_text("document/abc", token), 5)
        await transport.aclose()

    async def test_family_timeout(
        self,
        api_key: str,
        slow_transport: Callable[[float], httpx.MockTransport],
    ) -> None:
        transport = Transport(api_key, BASE_URL, transport=slow_transport(10.0))
        policy = TimeoutPolicy(RequestTimeouts(default=timedelta(milliseconds=50)))

        with (
            pytest.raises(RequestTimeoutError) as exc_info,
            policy.link(OperationFamily.DEFAULT) as token,
        ):
            await transport.get_text("document/abc", token)
        await transport.aclose()

        assert isinstance(exc_info.value, OperationCancelledError)
        assert exc_info.value.timeout == timedelta(milliseconds=50)

    async def test_linked_token_is_cancellable_without_caller_token(self) -> None:
        policy = TimeoutPolicy(RequestTimeouts())

        with policy.link(OperationFamily.DEFAULT, None) as token:
            assert token.can_be_cancelled is True

    async def test_caller_task_cancellation_propagates(
        self,
        api_key: str,
        slow_transport: Callable[[float], httpx.MockTransport],
    ) -> None:
        transport = Transport(api_key, BASE_URL, transport=slow_transport(10.0))
        task = asyncio.create_task(
            transport.get_text("document/abc", CancellationToken()),
        )
        await asyncio.sleep(0.05)

        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        await transport.aclose()
