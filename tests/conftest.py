"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import httpx
import pytest

from pdfgate_client.config import clear_settings_cache


if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


@pytest.fixture(autouse=True)
def _reset_settings_cache() -> Iterator[None]:
    """Start and finish every test with no cached settings."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def api_key() -> str:
    """Sandbox API key for test clients."""
    return "test_abc123"


@pytest.fixture
def sandbox_url() -> str:
    """Base URL selected by the sandbox key."""
    return "https://api-sandbox.pdfgate.com"


@pytest.fixture
def document_json() -> dict[str, Any]:
    """Document metadata as returned by the API."""
    return {
        "id": "6642381c5c61",
        "status": "completed",
        "type": "from_html",
        "fileUrl": "https://files.pdfgate.com/6642381c5c61.pdf",
        "size": 1620006,
        "createdAt": "2024-02-13T15:56:12.607Z",
    }


@pytest.fixture
def slow_transport() -> Callable[[float], httpx.MockTransport]:
    """Factory for transports whose responses take a while to arrive."""

    def factory(delay: float = 10.0) -> httpx.MockTransport:
        async def handler(request: httpx.Request) -> httpx.Response:
            del request
            await asyncio.sleep(delay)
            return httpx.Response(200, json={"id": "late", "status": "completed"})

        return httpx.MockTransport(handler)

    return factory


@pytest.fixture
def failing_transport() -> Callable[[Exception], httpx.MockTransport]:
    """Factory for transports that raise the given error on every request."""

    def factory(error: Exception) -> httpx.MockTransport:
        def handler(request: httpx.Request) -> httpx.Response:
            del request
            raise error

        return httpx.MockTransport(handler)

    return factory
