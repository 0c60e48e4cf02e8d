"""Observability module (structured logging)."""

from __future__ import annotations

from pdfgate_client.observability.logging import (
    LogLevel,
    configure_logging,
    get_logger,
    mask_api_keys,
)


__all__ = [
    "LogLevel",
    "configure_logging",
    "get_logger",
    "mask_api_keys",
]
