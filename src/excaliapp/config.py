"""Configuration management for excaliapp."""

import logging
import os
import platform
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from .storage.drawing_store import DrawingStore, StorageUnavailableError

logger = logging.getLogger(__name__)

APP_DIR_NAME = "excaliapp"


def user_config_dir() -> Path:
    """Platform default per-user configuration directory."""
    system = platform.system()
    try:
        if system == "Windows":
            appdata = os.environ.get("APPDATA")
            if not appdata:
                raise StorageUnavailableError("%APPDATA% is not defined")
            return Path(appdata)
        if system == "Darwin":
            return Path.home() / "Library" / "Application Support"
        xdg_config = os.environ.get("XDG_CONFIG_HOME")
        if xdg_config:
            return Path(xdg_config)
        return Path.home() / ".config"
    except RuntimeError as e:
        # Path.home() could not work out a home directory
        raise StorageUnavailableError(f"Cannot determine user config directory: {e}") from e


def user_data_dir() -> Path:
    """``$XDG_DATA_HOME`` when set, otherwise the user config directory."""
    xdg_data = os.environ.get("XDG_DATA_HOME")
    if xdg_data:
        return Path(xdg_data)
    return user_config_dir()


class Settings(BaseSettings):
    """Application settings loaded from ``EXCALIAPP_*`` environment variables."""

    # Explicit storage directory; skips platform resolution entirely
    data_dir: Optional[Path] = None
    app_dir_name: str = APP_DIR_NAME

    # Listing leniency for malformed metadata files
    skip_invalid_metadata: bool = False

    # Logging
    log_level: str = "WARNING"
    log_file: Optional[Path] = None

    model_config = SettingsConfigDict(
        env_prefix="EXCALIAPP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def storage_dir(self) -> Path:
        """Directory holding every drawing's file pair."""
        if self.data_dir:
            return Path(self.data_dir).expanduser()
        return user_data_dir() / self.app_dir_name

    def setup_logging(self, debug: bool = False):
        """Configure logging based on settings."""
        level_name = "DEBUG" if debug else self.log_level.upper()
        level = getattr(logging, level_name, logging.WARNING)

        root_logger = logging.getLogger()
        root_logger.setLevel(level)

        # Clear existing handlers
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        if self.log_file:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.FileHandler(self.log_file)
            file_handler.setLevel(level)
            file_handler.setFormatter(
                logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
            )
            root_logger.addHandler(file_handler)

        # Console only shows warnings and errors unless debugging
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.DEBUG if debug else logging.WARNING)
        console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
        root_logger.addHandler(console_handler)

        if self.log_file:
            logger.info(f"Logging to file: {self.log_file}")


# Create global settings instance
settings = Settings()


def get_drawing_store(config: Optional[Settings] = None) -> DrawingStore:
    """Create the drawing store for the configured storage directory."""
    config = config or settings
    storage_dir = config.storage_dir
    logger.info(f"Storage directory: {storage_dir}")
    return DrawingStore(storage_dir, skip_invalid=config.skip_invalid_metadata)
