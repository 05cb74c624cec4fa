# -*- coding: utf-8 -*-
"""
src/fontalike/config.py

Module for handling application configuration.

This module defines default settings for FontAlike, such as the location of
the reference font catalog, matching parameters and the politeness settings of
the offline catalog builder. It provides functionality to load user-defined
settings from a configuration file (config.ini), creating one with default
values on the first run.
"""

import configparser
import logging
import os
import platform
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

# --- Constants ---
APP_NAME = "FontAlike"
APP_HOME_ENV = "FONTALIKE_HOME"
DEFAULT_CONFIG_FILENAME = "config.ini"
DEFAULT_CATALOG_FILENAME = "font-features.json"
DEFAULT_PROGRESS_FILENAME = "font-features-progress.json"
DEFAULT_API_URL = "https://www.googleapis.com/webfonts/v1/webfonts"
DEFAULT_USER_AGENT = "FontFeatureBuilder/1.0"


def get_app_dir() -> Path:
    """
    Gets the application's data directory in a cross-platform way.

    This directory is used to store the configuration file and the
    pre-computed font catalog. The FONTALIKE_HOME environment variable, when
    set, takes precedence over the platform default.

    - Windows: %APPDATA%/FontAlike
    - macOS: ~/Library/Application Support/FontAlike
    - Linux: ~/.config/FontAlike

    Returns:
        Path: A Path object to the application's data directory.
    """
    override = os.environ.get(APP_HOME_ENV)
    if override:
        app_dir = Path(override).expanduser()
    elif platform.system() == "Windows":
        app_dir = Path.home() / "AppData" / "Roaming" / APP_NAME
    elif platform.system() == "Darwin":  # macOS
        app_dir = Path.home() / "Library" / "Application Support" / APP_NAME
    else:  # Linux and other Unix-like
        app_dir = Path.home() / ".config" / APP_NAME

    # Create the directory if it doesn't exist
    app_dir.mkdir(parents=True, exist_ok=True)
    return app_dir


class Config:
    """
    Manages application configuration by loading defaults and overriding
    them with settings from a user-specific config file.
    """

    def __init__(self, app_dir: Optional[Path] = None):
        """
        Initializes the configuration manager.

        Args:
            app_dir (Optional[Path]): Directory holding config.ini and the
                                      catalog. Defaults to get_app_dir().
        """
        self.parser = configparser.ConfigParser()
        self.app_dir = Path(app_dir) if app_dir is not None else get_app_dir()
        self.config_file_path = self.app_dir / DEFAULT_CONFIG_FILENAME

        self._load_defaults()
        self._load_from_file()

    def _load_defaults(self):
        """Sets the default configuration values in the parser object."""
        self.parser["Catalog"] = {
            "catalog_filename": DEFAULT_CATALOG_FILENAME,
            "progress_filename": DEFAULT_PROGRESS_FILENAME,
        }
        self.parser["Matching"] = {
            "top_k": "5",
            "fallback_count": "5",
            "max_workers": "4",
            "fetch_timeout": "10.0",
        }
        self.parser["Builder"] = {
            "api_url": DEFAULT_API_URL,
            "delay_seconds": "0.08",
            "checkpoint_every": "50",
            "user_agent": DEFAULT_USER_AGENT,
        }
        self.parser["Logging"] = {
            "level": "INFO",
        }

    def _load_from_file(self):
        """
        Loads settings from the config.ini file, overriding defaults.
        If the file doesn't exist, it will be created with default values.
        """
        if not self.config_file_path.exists():
            self._save_defaults()
        else:
            # Read the existing file, which may override some or all defaults
            self.parser.read(self.config_file_path)

    def _save_defaults(self):
        """Saves the current (default) configuration to the config file."""
        try:
            self.app_dir.mkdir(parents=True, exist_ok=True)
            with open(self.config_file_path, 'w') as configfile:
                configfile.write(f"# {APP_NAME} Configuration File\n")
                configfile.write("# You can edit these values. Restart the app for changes to take effect.\n\n")
                self.parser.write(configfile)
        except OSError as e:
            # Non-critical: the defaults stay in effect for this process
            logger.warning(f"Could not write to config file at {self.config_file_path}: {e}")

    # --- Properties to access settings easily and with correct types ---

    @property
    def catalog_path(self) -> Path:
        """The full path to the reference font catalog (JSON)."""
        filename = self.parser.get("Catalog", "catalog_filename", fallback=DEFAULT_CATALOG_FILENAME)
        return self.app_dir / filename

    @property
    def progress_path(self) -> Path:
        """The resumable progress file written by the catalog builder."""
        filename = self.parser.get("Catalog", "progress_filename", fallback=DEFAULT_PROGRESS_FILENAME)
        return self.app_dir / filename

    @property
    def top_k(self) -> int:
        """The number of feature-similarity alternatives to return."""
        return self.parser.getint("Matching", "top_k", fallback=5)

    @property
    def fallback_count(self) -> int:
        """The number of category-fallback alternatives to return."""
        return self.parser.getint("Matching", "fallback_count", fallback=5)

    @property
    def max_workers(self) -> int:
        """Size of the worker pool used for decoding and matching."""
        return max(1, self.parser.getint("Matching", "max_workers", fallback=4))

    @property
    def fetch_timeout(self) -> float:
        """Seconds to wait for a query font download before going name-only."""
        return self.parser.getfloat("Matching", "fetch_timeout", fallback=10.0)

    @property
    def api_url(self) -> str:
        """The Google Fonts Developer API endpoint listing catalog families."""
        return self.parser.get("Builder", "api_url", fallback=DEFAULT_API_URL)

    @property
    def delay_seconds(self) -> float:
        """Pause between catalog downloads."""
        return self.parser.getfloat("Builder", "delay_seconds", fallback=0.08)

    @property
    def checkpoint_every(self) -> int:
        """Number of successful fonts between progress checkpoints."""
        return max(1, self.parser.getint("Builder", "checkpoint_every", fallback=50))

    @property
    def user_agent(self) -> str:
        return self.parser.get("Builder", "user_agent", fallback=DEFAULT_USER_AGENT)

    @property
    def log_level(self) -> int:
        """The logging level name from the config, resolved to its numeric value."""
        name = self.parser.get("Logging", "level", fallback="INFO").upper()
        level = logging.getLevelName(name)
        return level if isinstance(level, int) else logging.INFO


# --- Singleton Instance ---
# Other modules can import this instance directly.
# e.g., from fontalike.config import config
config = Config()


if __name__ == '__main__':
    print(f"--- {APP_NAME} Configuration ---")
    print(f"Application Data Directory: {config.app_dir}")
    print(f"Config file path: {config.config_file_path}")
    print(f"Catalog path: {config.catalog_path}")

    print("\n--- Loaded Settings ---")
    print(f"Top K: {config.top_k}")
    print(f"Fallback count: {config.fallback_count}")
    print(f"Workers: {config.max_workers}")
    print(f"Fetch timeout: {config.fetch_timeout}s")
    print(f"Builder delay: {config.delay_seconds}s, checkpoint every {config.checkpoint_every}")
