"""Per-operation timeouts and cancellation tokens.

Every call made by the client runs under a :class:`LinkedCancellationToken`
that fires at whichever comes first: the caller's own
:class:`CancellationToken` or the timeout configured for the operation's
family in :class:`RequestTimeouts`. The linked token is always created,
even when the caller passes no token, so the transport sees one uniform,
cancellable signal on every call.
"""

from __future__ import annotations

import asyncio
import threading
from datetime import timedelta
from enum import StrEnum
from typing import TYPE_CHECKING, Self

import httpx
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from pdfgate_client.config.exceptions import ConfigurationError
from pdfgate_client.pdfgate.exceptions import (
    OperationCancelledError,
    RequestTimeoutError,
)


if TYPE_CHECKING:
    from collections.abc import Callable


__all__ = [
    "CancellationToken",
    "LinkedCancellationToken",
    "OperationFamily",
    "RequestTimeouts",
    "TimeoutPolicy",
    "transport_timeout",
]


# Floor for the connection-level timeout handed to httpx.
MIN_TRANSPORT_TIMEOUT = timedelta(minutes=30)


class OperationFamily(StrEnum):
    """Groups of operations sharing one timeout."""

    GENERATE_PDF = "generate_pdf"
    FLATTEN_PDF = "flatten_pdf"
    WATERMARK_PDF = "watermark_pdf"
    PROTECT_PDF = "protect_pdf"
    COMPRESS_PDF = "compress_pdf"
    DEFAULT = "default"


class RequestTimeouts(BaseModel):
    """Timeout per operation family.

    Numbers are accepted as seconds. Every duration must be strictly
    positive; this is checked when the instance is created, not on the
    first call.

    Attributes:
        generate_pdf: Timeout for PDF generation (HTML rendering is slow).
        flatten_pdf: Timeout for form flattening.
        watermark_pdf: Timeout for watermarking.
        protect_pdf: Timeout for encryption.
        compress_pdf: Timeout for compression.
        default: Timeout for every other endpoint.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    generate_pdf: timedelta = timedelta(minutes=15)
    flatten_pdf: timedelta = timedelta(minutes=3)
    watermark_pdf: timedelta = timedelta(minutes=3)
    protect_pdf: timedelta = timedelta(minutes=3)
    compress_pdf: timedelta = timedelta(minutes=3)
    default: timedelta = timedelta(seconds=60)

    @field_validator("*", mode="before")
    @classmethod
    def parse_seconds(cls, value: object) -> object:
        """Accept plain numeric strings (e.g. from environment variables)."""
        if isinstance(value, str):
            try:
                return float(value)
            except ValueError:
                return value
        return value

    @model_validator(mode="after")
    def check_positive(self) -> Self:
        """Reject zero and negative durations.

        Raises:
            ConfigurationError: Naming the first non-positive field.
        """
        for family in OperationFamily:
            if self.for_family(family) <= timedelta(0):
                msg = f"Timeout '{family.value}' must be greater than zero."
                raise ConfigurationError(msg, field=family.value)
        return self

    def for_family(self, family: OperationFamily) -> timedelta:
        """Return the timeout for an operation family."""
        value: timedelta = getattr(self, family.value)
        return value

    @property
    def longest(self) -> timedelta:
        """The longest configured timeout."""
        return max(self.for_family(family) for family in OperationFamily)


def transport_timeout(timeouts: RequestTimeouts) -> httpx.Timeout:
    """Build the connection-level httpx timeout.

    The value is kept strictly above the longest family timeout so the
    family timeouts are always the ones that fire.

    Args:
        timeouts: The configured family timeouts.

    Returns:
        An ``httpx.Timeout`` applied to connect, read, write and pool waits.
    """
    seconds = max(
        MIN_TRANSPORT_TIMEOUT,
        timeouts.longest + timedelta(minutes=1),
    ).total_seconds()
    return httpx.Timeout(seconds)


class CancellationToken:
    """A thread-safe, one-shot cancellation signal owned by the caller.

    ``cancel()`` may be called from any thread; registered callbacks run on
    the cancelling thread, exactly once.

    Example:
        ```python
        token = CancellationToken()
        task = asyncio.create_task(client.generate_pdf(request, cancellation=token))
        ...
        token.cancel()  # the call raises OperationCancelledError
        ```
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._cancelled = False
        self._callbacks: list[Callable[[], None]] = []

    @classmethod
    def none(cls) -> CancellationToken:
        """Return a token that can never be cancelled."""
        return _NeverCancelledToken()

    @property
    def is_cancelled(self) -> bool:
        """Whether the token has fired."""
        return self._cancelled

    @property
    def can_be_cancelled(self) -> bool:
        """Whether the token is able to fire at all."""
        return True

    def cancel(self) -> None:
        """Fire the token. Subsequent calls are no-ops."""
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    def register(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Run ``callback`` when the token fires.

        If the token has already fired, the callback runs immediately.

        Args:
            callback: Zero-argument callable.

        Returns:
            A function that unregisters the callback.
        """
        with self._lock:
            if not self._cancelled:
                self._callbacks.append(callback)
                return lambda: self._unregister(callback)
        callback()
        return lambda: None

    def _unregister(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def raise_if_cancelled(self, endpoint: str) -> None:
        """Raise if the token has fired.

        Raises:
            OperationCancelledError: If the token has fired.
        """
        if self._cancelled:
            raise OperationCancelledError(endpoint)


class _NeverCancelledToken(CancellationToken):
    """Stand-in for "no cancellation requested"."""

    @property
    def can_be_cancelled(self) -> bool:
        return False

    def cancel(self) -> None:
        pass

    def register(self, callback: Callable[[], None]) -> Callable[[], None]:
        del callback
        return lambda: None


class LinkedCancellationToken(CancellationToken):
    """Child token that fires with its parent or when its deadline elapses.

    Use as a context manager inside a running event loop: entering arms the
    deadline timer, leaving disarms it and detaches from the parent.
    """

    def __init__(self, parent: CancellationToken, timeout: timedelta) -> None:
        super().__init__()
        self.parent = parent
        self.timeout = timeout
        self._timed_out = False
        self._timer: asyncio.TimerHandle | None = None
        self._unlink = parent.register(self.cancel)

    @property
    def timed_out(self) -> bool:
        """Whether the token fired because its deadline elapsed."""
        return self._timed_out

    def __enter__(self) -> Self:
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.timeout.total_seconds(), self._expire)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Disarm the deadline and detach from the parent token."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._unlink()

    def _expire(self) -> None:
        if not self.is_cancelled:
            self._timed_out = True
            self.cancel()

    def raise_if_cancelled(self, endpoint: str) -> None:
        """Raise if the token has fired, telling timeouts apart.

        Raises:
            RequestTimeoutError: If the deadline elapsed.
            OperationCancelledError: If the parent token fired.
        """
        if self._timed_out:
            raise RequestTimeoutError(endpoint, self.timeout)
        super().raise_if_cancelled(endpoint)


class TimeoutPolicy:
    """Derives the per-call cancellation token from the family timeouts."""

    def __init__(self, timeouts: RequestTimeouts) -> None:
        self.timeouts = timeouts

    def link(
        self,
        family: OperationFamily,
        cancellation: CancellationToken | None = None,
    ) -> LinkedCancellationToken:
        """Create the token for one call.

        Args:
            family: The operation family being called.
            cancellation: The caller's token, if any.

        Returns:
            A token linked to ``cancellation`` with the family's deadline.
        """
        parent = cancellation if cancellation is not None else CancellationToken.none()
        return LinkedCancellationToken(parent, self.timeouts.for_family(family))
