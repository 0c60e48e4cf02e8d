"""Configuration-specific exceptions for pdfgate-client."""

from __future__ import annotations


__all__ = [
    "ConfigurationError",
    "ConfigurationFileNotFoundError",
    "ConfigurationValidationError",
]


class ConfigurationError(Exception):
    """Base exception for configuration errors.

    Raised synchronously while a client or its settings are being built,
    before any network activity, so a misconfiguration is never confused
    with a failed API call.

    Attributes:
        message: Human-readable error description.
        field: Name of the offending setting, if a single one is at fault.
    """

    def __init__(self, message: str, *, field: str | None = None) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            field: Name of the offending setting.
        """
        super().__init__(message)
        self.message = message
        self.field = field


class ConfigurationFileNotFoundError(ConfigurationError):
    """Raised when a configuration file cannot be found.

    Attributes:
        path: The path that was requested (may be None if searching defaults).
        searched_paths: List of paths that were searched.
    """

    def __init__(
        self,
        path: str | None = None,
        searched_paths: list[str] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            path: The specific path requested, or None if searching defaults.
            searched_paths: List of paths that were searched.
        """
        self.path = path
        self.searched_paths = searched_paths or []

        if self.searched_paths:
            message = (
                "Configuration file not found. Searched: "
                f"{', '.join(self.searched_paths)}"
            )
        elif path:
            message = f"Configuration file not found: {path}"
        else:
            message = "Configuration file not found"

        super().__init__(message)


class ConfigurationValidationError(ConfigurationError):
    """Raised when loaded settings fail validation.

    Attributes:
        errors: Validation error details reported by Pydantic.
    """

    def __init__(
        self,
        message: str,
        errors: list[dict[str, object]] | None = None,
    ) -> None:
        super().__init__(message)
        self.errors = errors or []
