"""Settings for applications built on pdfgate-client.

The client classes never read the environment on their own. Applications
(the bundled CLI among them) load a :class:`Settings` instance here and pass
it to ``AsyncPdfGateClient.from_settings``.

Example:
    >>> from pdfgate_client.config import load_settings
    >>> settings = load_settings()
    >>> settings.timeouts.generate_pdf
    datetime.timedelta(seconds=900)
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import SecretStr, ValidationError
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from pdfgate_client.config.exceptions import (
    ConfigurationError,
    ConfigurationFileNotFoundError,
    ConfigurationValidationError,
)
from pdfgate_client.observability import LogLevel
from pdfgate_client.pdfgate.timeouts import RequestTimeouts


if TYPE_CHECKING:
    from collections.abc import Sequence


__all__ = [
    "Settings",
    "clear_settings_cache",
    "find_config_file",
    "get_settings",
    "load_settings",
]


# ---------------------------------------------------------------------------
# Environment Variable Interpolation
# ---------------------------------------------------------------------------

# ${VAR} and ${VAR:-default}
_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


def _interpolate_env_vars(value: object) -> object:
    """Recursively substitute ``${VAR}`` references in YAML values.

    Example:
        >>> os.environ["PDFGATE_LIVE_KEY"] = "live_abc"
        >>> _interpolate_env_vars({"api_key": "${PDFGATE_LIVE_KEY}"})
        {'api_key': 'live_abc'}
    """
    if isinstance(value, str):

        def replace(match: re.Match[str]) -> str:
            env_value = os.environ.get(match.group(1))
            if env_value is not None:
                return env_value
            return match.group(2) or ""

        return _ENV_VAR_PATTERN.sub(replace, value)

    if isinstance(value, dict):
        return {k: _interpolate_env_vars(v) for k, v in value.items()}

    if isinstance(value, list):
        return [_interpolate_env_vars(item) for item in value]

    return value


class _InterpolatingYamlConfigSettingsSource(YamlConfigSettingsSource):
    """YAML settings source that expands ``${VAR}`` references."""

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        yaml_file: Path | str | None = None,
    ) -> None:
        if yaml_file is not None:
            super().__init__(settings_cls, yaml_file=yaml_file)
        else:
            super().__init__(settings_cls)

    def _read_files(
        self,
        files: Path | str | Sequence[Path | str] | None,
    ) -> dict[str, Any]:
        interpolated = _interpolate_env_vars(super()._read_files(files))
        if not isinstance(interpolated, dict):  # pragma: no cover
            return {}
        return interpolated


# ---------------------------------------------------------------------------
# Settings Class
# ---------------------------------------------------------------------------


class Settings(BaseSettings):
    """Client settings loaded from a YAML file and environment variables.

    Priority (highest first): constructor arguments, ``PDFGATE_*``
    environment variables, the YAML file, defaults. Nested values use
    ``__`` in variable names, e.g. ``PDFGATE_TIMEOUTS__GENERATE_PDF=600``.

    Attributes:
        api_key: PDFGATE API key; ``live_`` selects production, ``test_``
            the sandbox.
        max_connections: Upper bound on pooled connections, or None for the
            httpx default.
        timeouts: Per-family request timeouts.
        log_level: Log level used by the CLI.
    """

    model_config = SettingsConfigDict(
        yaml_file=None,
        yaml_file_encoding="utf-8",
        env_prefix="PDFGATE_",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    CONFIG_SEARCH_PATHS: ClassVar[list[Path]] = [
        Path("pdfgate.yaml"),
        Path("pdfgate.yml"),
        Path.home() / ".config" / "pdfgate" / "config.yaml",
    ]

    # Set by load_settings() for the duration of one instantiation
    _yaml_file_override: ClassVar[Path | str | None] = None

    api_key: SecretStr = SecretStr("")
    max_connections: int | None = None
    timeouts: RequestTimeouts = RequestTimeouts()
    log_level: LogLevel = LogLevel.INFO

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Order sources: init, environment, YAML, file secrets."""
        return (
            init_settings,
            env_settings,
            _InterpolatingYamlConfigSettingsSource(
                settings_cls,
                yaml_file=cls._yaml_file_override,
            ),
            file_secret_settings,
        )


# ---------------------------------------------------------------------------
# Settings Loading Functions
# ---------------------------------------------------------------------------

_cached_settings: Settings | None = None


def find_config_file(config_path: Path | str | None = None) -> Path | None:
    """Find the configuration file.

    Args:
        config_path: Explicit path to a config file, or None to search the
            default locations.

    Returns:
        Path to the config file if found, None otherwise.
    """
    if config_path is not None:
        path = Path(config_path)
        return path if path.is_file() else None

    for search_path in Settings.CONFIG_SEARCH_PATHS:
        if search_path.is_file():
            return search_path

    return None


def load_settings(
    config_path: Path | str | None = None,
    *,
    require_config_file: bool = False,
) -> Settings:
    """Load and validate settings, caching them for :func:`get_settings`.

    Args:
        config_path: Path to a YAML config file. If None, searches
            ./pdfgate.yaml, ./pdfgate.yml and ~/.config/pdfgate/config.yaml.
        require_config_file: Raise when no config file is found instead of
            falling back to environment variables and defaults.

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationFileNotFoundError: When ``require_config_file`` is set
            and no config file is found.
        ConfigurationValidationError: When validation fails.
        ConfigurationError: When a timeout is not positive.
    """
    global _cached_settings  # noqa: PLW0603

    config_file = find_config_file(config_path)

    if config_file is None and require_config_file:
        raise ConfigurationFileNotFoundError(
            path=str(config_path) if config_path else None,
            searched_paths=[str(p) for p in Settings.CONFIG_SEARCH_PATHS],
        )

    try:
        Settings._yaml_file_override = config_file  # noqa: SLF001
        try:
            settings = Settings()
        finally:
            Settings._yaml_file_override = None  # noqa: SLF001
    except ConfigurationError:
        raise
    except ValidationError as exc:
        msg = f"Failed to load configuration: {exc}"
        raise ConfigurationValidationError(
            msg,
            errors=[dict(error) for error in exc.errors()],
        ) from exc
    except Exception as exc:
        msg = f"Failed to load configuration: {exc}"
        raise ConfigurationValidationError(msg) from exc

    _cached_settings = settings
    return settings


def get_settings() -> Settings:
    """Return the cached settings, loading them on first use."""
    global _cached_settings  # noqa: PLW0603

    if _cached_settings is None:
        _cached_settings = load_settings()

    return _cached_settings


def clear_settings_cache() -> None:
    """Forget the cached settings so the next call reloads them."""
    global _cached_settings  # noqa: PLW0603
    _cached_settings = None
