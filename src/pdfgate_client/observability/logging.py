"""Structured logging configuration for pdfgate-client.

The library modules only ever call ``structlog.get_logger(__name__)`` and
emit events such as ``api_request`` and ``api_response``. Whether and how
those events are rendered is decided by the application through
:func:`configure_logging`; the bundled CLI calls it once at startup.
"""

from __future__ import annotations

import logging
import re
import sys
from enum import StrEnum

import structlog
from structlog.contextvars import merge_contextvars
from structlog.processors import TimeStamper, add_log_level


__all__ = [
    "LogLevel",
    "configure_logging",
    "get_logger",
    "mask_api_keys",
]


class LogLevel(StrEnum):
    """Supported log levels."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    def to_stdlib_level(self) -> int:
        """Convert to the stdlib logging level constant."""
        level: int = getattr(logging, self.name)
        return level


# PDFGate keys are "live_" or "test_" followed by the secret.
_API_KEY_PATTERN = re.compile(r"\b(live|test)_[A-Za-z0-9]{6,}\b")


def mask_api_keys(
    logger: structlog.typing.WrappedLogger,
    method_name: str,
    event_dict: structlog.typing.EventDict,
) -> structlog.typing.EventDict:
    """Replace PDFGate API keys in string values, keeping only the prefix.

    The event name itself is left alone. Error messages and response
    bodies may echo a key back.
    """
    del logger, method_name
    for key, value in event_dict.items():
        if key != "event" and isinstance(value, str):
            event_dict[key] = _API_KEY_PATTERN.sub(r"\1_***", value)
    return event_dict


def _create_renderer(
    *,
    colors: bool,
) -> structlog.dev.ConsoleRenderer | structlog.processors.LogfmtRenderer:
    """Pick the console renderer on a TTY, logfmt otherwise."""
    if colors:
        return structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.plain_traceback,
        )
    return structlog.processors.LogfmtRenderer(
        key_order=["timestamp", "level", "event", "method", "endpoint"],
        drop_missing=True,
        bool_as_flag=False,
    )


def configure_logging(
    level: LogLevel | str = LogLevel.INFO,
    *,
    force_colors: bool | None = None,
) -> None:
    """Configure structlog for an application using the client.

    Output goes to stderr with ISO 8601 UTC timestamps, colorized when
    stderr is a terminal.

    Args:
        level: Minimum log level, as a LogLevel or its string value.
        force_colors: Force color output on/off. If None, auto-detect from TTY.

    Example:
        >>> from pdfgate_client.observability import configure_logging
        >>> configure_logging("debug")
    """
    if isinstance(level, str):
        level = LogLevel(level.lower())

    if force_colors is not None:
        use_colors = force_colors
    else:
        use_colors = sys.stderr is not None and sys.stderr.isatty()

    processors: list[structlog.typing.Processor] = [
        merge_contextvars,
        add_log_level,
        mask_api_keys,
        TimeStamper(fmt="iso", utc=True, key="timestamp"),
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _create_renderer(colors=use_colors),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level.to_stdlib_level()),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    # httpx logs through the stdlib
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level.to_stdlib_level(),
        force=True,
    )


def get_logger(
    name: str | None = None,
    **initial_context: object,
) -> structlog.BoundLogger:
    """Get a structured logger, optionally bound to initial context.

    Example:
        >>> logger = get_logger(__name__, command="upload")
        >>> logger.info("upload_started", path="invoice.pdf")
    """
    log: structlog.BoundLogger = structlog.get_logger(name)
    if initial_context:
        log = log.bind(**initial_context)
    return log
