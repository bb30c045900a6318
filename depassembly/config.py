"""Configuration management with Pydantic and XDG base directory support."""

import os
import sys
from pathlib import Path
from typing import Literal

from pydantic import Field, PrivateAttr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from depassembly.app.templates import DEFAULT_FILE_NAME_MAPPING
from depassembly.utils.modes import mode_to_int


def get_xdg_data_home() -> Path:
    """Get XDG_DATA_HOME directory, defaulting to ~/.local/share."""
    xdg_data = os.getenv("XDG_DATA_HOME")
    if xdg_data:
        return Path(xdg_data)
    return Path.home() / ".local" / "share"


LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


class Settings(BaseSettings):
    """depassembly configuration settings.

    Precedence: CLI flag > environment variable > .env file > defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="DEPASSEMBLY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Data directories
    data_dir: Path | None = Field(
        default=None,
        description="Override data directory (defaults to XDG_DATA_HOME/depassembly)",
    )

    # Repositories
    local_repository: Path | None = Field(
        default=None,
        description="Local Maven-layout repository (defaults to <data_dir>/repository)",
    )

    remote_repositories: list[str] = Field(
        default_factory=list,
        description="Additional filesystem repositories, as paths or file:// URLs",
    )

    # Placement defaults
    default_output_directory: str = Field(
        default="",
        description="Output directory template used when a rule sets none",
    )

    default_file_name_mapping: str = Field(
        default=DEFAULT_FILE_NAME_MAPPING,
        description="File name template used when a rule sets none",
    )

    default_file_mode: int = Field(
        default=0o644,
        description="Permission bits for files placed without an explicit mode",
    )

    default_directory_mode: int = Field(
        default=0o755,
        description="Permission bits for directories created without an explicit mode",
    )

    log_level: LogLevel = Field(
        default="WARNING",
        description="Root log level for the CLI",
    )

    _resolved_data_dir: Path | None = PrivateAttr(default=None)
    _data_dir_warning_emitted: bool = PrivateAttr(default=False)

    @field_validator("default_file_mode", "default_directory_mode", mode="before")
    @classmethod
    def _parse_mode(cls, value: object) -> object:
        if isinstance(value, str):
            return mode_to_int(value)
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value

    def get_data_dir(self) -> Path:
        """Get the data directory, creating if necessary."""
        if self._resolved_data_dir is not None:
            return self._resolved_data_dir

        if self.data_dir:
            data_dir = self.data_dir
            data_dir.mkdir(parents=True, exist_ok=True)
            self._resolved_data_dir = data_dir
            return data_dir

        primary_dir = get_xdg_data_home() / "depassembly"
        try:
            primary_dir.mkdir(parents=True, exist_ok=True)
            self._resolved_data_dir = primary_dir
            return primary_dir
        except PermissionError as exc:
            fallback = Path.cwd() / ".depassembly-data"
            fallback.mkdir(parents=True, exist_ok=True)
            self._resolved_data_dir = fallback
            if not self._data_dir_warning_emitted:
                print(
                    f"Warning: cannot create data directory at {primary_dir} ({exc}). "
                    f"Using local '{fallback}' instead. Pass --data-dir to override.",
                    file=sys.stderr,
                )
                self._data_dir_warning_emitted = True
            return fallback

    def get_local_repository(self) -> Path:
        """Get the local repository directory."""
        if self.local_repository:
            return self.local_repository
        return self.get_data_dir() / "repository"


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Set the global settings instance (useful for testing)."""
    global _settings
    _settings = settings
