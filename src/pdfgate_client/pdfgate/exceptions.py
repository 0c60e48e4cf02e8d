"""Exceptions raised by the PDFGate API client."""

from __future__ import annotations

from datetime import timedelta  # noqa: TC003

import httpx

from pdfgate_client.config.exceptions import ConfigurationError


__all__ = [
    "MAX_BODY_LENGTH",
    "ApiError",
    "ConfigurationError",
    "OperationCancelledError",
    "RequestTimeoutError",
]


MAX_BODY_LENGTH = 1024


class ApiError(Exception):
    """Error returned by, or encountered while calling, the PDFGate API.

    Covers non-success HTTP responses, transport faults (wrapped, with the
    original exception as ``__cause__``) and structurally invalid response
    bodies. Cancellation is reported separately through
    :class:`OperationCancelledError`.

    Attributes:
        message: Human-readable error description, always naming the endpoint.
        endpoint: The endpoint path that was called.
        status_code: HTTP status code, when a response was received.
        response_body: Response body truncated to ``MAX_BODY_LENGTH``
            characters, when a response was received.
    """

    def __init__(
        self,
        message: str,
        *,
        endpoint: str,
        status_code: int | None = None,
        response_body: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            endpoint: The endpoint path that was called.
            status_code: HTTP status code, if available.
            response_body: Response body excerpt, if available.
            cause: The underlying exception that caused this error.
        """
        super().__init__(message)
        self.message = message
        self.endpoint = endpoint
        self.status_code = status_code
        self.response_body = response_body
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        """Return the message, adding the status code if it is not named yet."""
        if self.status_code is None:
            return self.message
        if f"status code {self.status_code}" in self.message:
            return self.message
        return f"{self.message} (status={self.status_code})"

    @classmethod
    def from_http_error(cls, status_code: int, endpoint: str, body: str) -> ApiError:
        """Build an error from a non-success HTTP response.

        Args:
            status_code: HTTP status code of the response.
            endpoint: The endpoint path that was called.
            body: Full response body text.

        Returns:
            A populated ``ApiError`` with the body truncated to
            ``MAX_BODY_LENGTH`` characters.
        """
        truncated = body[:MAX_BODY_LENGTH]
        reason = httpx.codes.get_reason_phrase(status_code) or "Unknown"
        message = (
            f"PDFGate request to '{endpoint}' failed with status code "
            f"{status_code} ({reason}). Response body: {truncated}"
        )
        return cls(
            message,
            endpoint=endpoint,
            status_code=status_code,
            response_body=truncated,
        )


class OperationCancelledError(Exception):
    """Raised when a call is cancelled before the exchange completed.

    Not an :class:`ApiError`: the API never rejected
    the request, the caller's cancellation token (or the operation's
    timeout) fired first.

    Attributes:
        endpoint: The endpoint path that was being called.
    """

    def __init__(self, endpoint: str, message: str | None = None) -> None:
        super().__init__(message or f"Request to endpoint '{endpoint}' was cancelled.")
        self.endpoint = endpoint


class RequestTimeoutError(OperationCancelledError, TimeoutError):
    """Raised when an operation exceeds its family timeout.

    Attributes:
        timeout: The timeout that elapsed.
    """

    def __init__(self, endpoint: str, timeout: timedelta) -> None:
        super().__init__(
            endpoint,
            f"Request to endpoint '{endpoint}' timed out after "
            f"{timeout.total_seconds():g}s.",
        )
        self.timeout = timeout
