"""Application configuration using pydantic-settings."""

import logging
import os
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

APP_DIRNAME = "qullqa"


def resolve_data_dir(
    environ: Mapping[str, str] | None = None,
    platform: str | None = None,
    home: Path | None = None,
) -> Path:
    """Resolve the platform data directory.

    ``$XDG_DATA_HOME`` wins everywhere; otherwise macOS uses
    ``~/Library/Application Support``, Windows uses ``%APPDATA%`` and
    everything else follows the XDG default ``~/.local/share``.
    """
    environ = os.environ if environ is None else environ
    platform = sys.platform if platform is None else platform
    home = Path.home() if home is None else home

    if environ.get("XDG_DATA_HOME"):
        return Path(environ["XDG_DATA_HOME"]) / APP_DIRNAME
    if platform == "darwin":
        return home / "Library" / "Application Support" / APP_DIRNAME
    if platform == "win32":
        appdata = environ.get("APPDATA")
        base = Path(appdata) if appdata else home / "AppData" / "Roaming"
        return base / APP_DIRNAME
    return home / ".local" / "share" / APP_DIRNAME


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = "Qullqa"
    debug: bool = False
    host: str = "127.0.0.1"
    port: int = 1337
    public_base_url: str = ""

    # Directories (resolved once at startup)
    data_dir: Path | None = None
    artifacts_dir: Path = Path("artifacts")
    logs_dir: Path = Path("logs")

    # Artifacts
    max_content_size_mb: int = 10

    # Logging
    log_level: str = "INFO"
    log_format: Literal["pretty", "json"] = "pretty"
    log_to_file: bool = True

    @model_validator(mode="after")
    def resolve_paths(self) -> "Settings":
        """Resolve the data directory and make relative paths absolute under it."""
        if self.data_dir is None:
            self.data_dir = resolve_data_dir()
        if not self.artifacts_dir.is_absolute():
            self.artifacts_dir = self.data_dir / self.artifacts_dir
        if not self.logs_dir.is_absolute():
            self.logs_dir = self.data_dir / self.logs_dir
        if not self.public_base_url:
            self.public_base_url = f"http://localhost:{self.port}"
        self.public_base_url = self.public_base_url.rstrip("/")
        return self

    @property
    def max_content_size_bytes(self) -> int:
        return self.max_content_size_mb * 1024 * 1024

    def ensure_directories(self) -> None:
        """Create required directories if they don't exist."""
        logger = logging.getLogger(__name__)

        for dir_path in [self.data_dir, self.artifacts_dir, self.logs_dir]:
            try:
                dir_path.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                # Directories might be provisioned externally
                logger.warning(
                    f"Could not create directory {dir_path}: {e}. "
                    "The directory may already exist or have permission issues."
                )


_settings_cache: Settings | None = None


def get_settings(reload: bool = False) -> Settings:
    """Get settings instance with optional reload."""
    global _settings_cache
    if _settings_cache is None or reload:
        _settings_cache = Settings()
    return _settings_cache
