"""Configuration management for the Lending Library.

Settings are read from ``LENDING_LIBRARY_*`` environment variables (or a
``.env`` file) and validated with Pydantic v2. The database URL is
not a setting: the CLI takes it as an argument and uses these settings only
for the engine options, logging and logfire.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LibraryConfig(BaseSettings):
    """Lending library settings."""

    model_config = SettingsConfigDict(
        # LENDING_LIBRARY_BUSY_TIMEOUT, LENDING_LIBRARY_LOG_LEVEL, ...
        env_prefix="LENDING_LIBRARY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Database Configuration ===

    busy_timeout: float = Field(
        default=5.0,
        description="Seconds a writer waits for the SQLite write lock",
        gt=0,
        le=300,
    )

    echo_sql: bool = Field(
        default=False,
        description="Echo SQL statements through the sqlalchemy.engine logger",
    )

    # === Logging and Observability ===

    debug: bool = Field(
        default=False,
        description="Enable debug logging",
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
        pattern=r"^(DEBUG|INFO|WARNING|ERROR)$",
    )

    environment: str = Field(
        default="development",
        description="Deployment environment reported to logfire",
    )

    logfire_enabled: bool = Field(
        default=True,
        description="Configure logfire spans and metrics",
    )

    logfire_send: bool = Field(
        default=False,
        description="Ship spans to the logfire backend (requires a token)",
    )

    logfire_console: bool = Field(
        default=False,
        description="Print logfire spans to the console",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: object) -> object:
        """Accept log levels in any case."""
        return v.upper() if isinstance(v, str) else v

    @property
    def effective_log_level(self) -> str:
        """Log level after applying the debug flag."""
        return "DEBUG" if self.debug else self.log_level


class _ConfigStore:
    """Internal storage for configuration singleton."""

    _instance: LibraryConfig | None = None


def get_config() -> LibraryConfig:
    """Get or create the process-wide configuration."""
    if _ConfigStore._instance is None:  # type: ignore[reportPrivateUsage]
        _ConfigStore._instance = LibraryConfig()  # type: ignore[reportPrivateUsage]
    return _ConfigStore._instance  # type: ignore[reportPrivateUsage]


def reset_config() -> None:
    """Drop the cached configuration (used by tests)."""
    _ConfigStore._instance = None  # type: ignore[reportPrivateUsage]
