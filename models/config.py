"""Application configuration using Pydantic v2.

Centralized settings for quanires including:
- Remote catalog endpoint and request timeouts
- Watch-history file name
- External player binary
- OS-specific data paths

Configuration can be overridden via environment variables:
    QUANIRES__SCRAPER__TIMEOUT=30
    QUANIRES__TRACKER__ENABLED=false
    QUANIRES__PLAYER__BINARY=/usr/local/bin/mpv
"""

import os
import platform
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.exceptions import SavePathError, UnsupportedPlatformError


def get_data_path() -> Path:
    """Get OS-specific state directory for quanires (logs).

    Returns:
        Path: ~/.local/state/quanires (Linux/macOS) or %LOCALAPPDATA%\\quanires (Windows)
    """
    if os.name == "nt":
        return Path(os.environ.get("LOCALAPPDATA", Path.home())) / "quanires"
    return Path.home() / ".local" / "state" / "quanires"


def get_save_dir() -> Path:
    """Get the conventional per-user directory holding the watch-history file.

    Windows keeps it in the user's Documents folder, Linux and macOS in the home
    directory.

    Raises:
        UnsupportedPlatformError: On any other operating system
        SavePathError: If the directory cannot be determined
    """
    system = platform.system()
    if system not in ("Windows", "Linux", "Darwin"):
        raise UnsupportedPlatformError(f"Sistema operativo no soportado: {system}")

    try:
        home = Path.home()
    except RuntimeError as e:
        raise SavePathError("No se pudo obtener la carpeta de guardado.") from e

    if system == "Windows":
        return home / "Documents"
    return home


class ScraperSettings(BaseModel):
    """Remote catalog (monoschinos2) configuration."""

    base_url: str = Field(
        "https://monoschinos2.com",
        description="Catalog site root, without trailing slash",
    )
    timeout: float = Field(
        15,
        ge=1,
        le=120,
        description="Per-request timeout in seconds",
    )
    page_size: int = Field(
        50,
        gt=0,
        description="Chapters returned by a full chapter-list page",
    )
    user_agent: str = Field(
        "Mozilla/5.0 (X11; Linux x86_64; rv:128.0) Gecko/20100101 Firefox/128.0",
        description="User-Agent sent on every request",
    )


class TrackerSettings(BaseModel):
    """Watch-history configuration."""

    enabled: bool = Field(True, description="Remember watched episodes")
    file_name: str = Field(
        ".quanires.watched",
        min_length=1,
        description="History file name inside the save directory",
    )


class PlayerSettings(BaseModel):
    """External player configuration."""

    binary: str = Field("mpv", min_length=1, description="Player executable")


class AppSettings(BaseSettings):
    """Root application settings with environment variable support.

    Environment variables use the prefix QUANIRES__ with nested delimiters:
    - QUANIRES__SCRAPER__TIMEOUT=30
    - QUANIRES__TRACKER__FILE_NAME=.other.watched

    Can also be configured via .env file in project root.
    """

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",  # QUANIRES__SCRAPER__TIMEOUT
        env_prefix="QUANIRES__",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    scraper: ScraperSettings = Field(default_factory=ScraperSettings)
    tracker: TrackerSettings = Field(default_factory=TrackerSettings)
    player: PlayerSettings = Field(default_factory=PlayerSettings)


# Singleton instance - import and use throughout the app
settings = AppSettings()
