"""Configuration module for pdfgate-client.

Settings come from a YAML file and ``PDFGATE_*`` environment variables,
validated with pydantic-settings. YAML values support ``${VAR}`` and
``${VAR:-default}`` interpolation.

Example:
    >>> from pdfgate_client.config import load_settings
    >>> from pdfgate_client.pdfgate import AsyncPdfGateClient
    >>>
    >>> settings = load_settings()
    >>> client = AsyncPdfGateClient.from_settings(settings)
"""

from __future__ import annotations

from pdfgate_client.config.exceptions import (
    ConfigurationError,
    ConfigurationFileNotFoundError,
    ConfigurationValidationError,
)
from pdfgate_client.config.settings import (
    Settings,
    clear_settings_cache,
    find_config_file,
    get_settings,
    load_settings,
)


__all__ = [
    "ConfigurationError",
    "ConfigurationFileNotFoundError",
    "ConfigurationValidationError",
    "Settings",
    "clear_settings_cache",
    "find_config_file",
    "get_settings",
    "load_settings",
]
