"""
Locate and validate the mailtrace JSON configuration.

One file configures three areas:

- storage: sqlite database and JSON-lines audit log locations
- ingestion: subject/sender filters and duplicate skipping for `process`
- display: hop and summary line templates used by reports

Search order is an explicit path (``--config``), then
``~/.mailtrace/app_config.json``, then ``config/app_config.json``. With no
file present the built-in defaults apply; a file that exists but does not
validate is an error, never silently replaced by defaults.
"""

import json
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from .app_config import AppConfig


class ConfigError(Exception):
    """Raised when a configuration file exists but cannot be used."""

    pass


class ConfigLoader:
    """Find, parse and cache the mailtrace `AppConfig`."""

    DEFAULT_CONFIG_PATHS = [
        Path("~/.mailtrace/app_config.json"),
        Path("config/app_config.json"),
    ]

    def __init__(self, config_path: Optional[Path] = None):
        """
        Args:
            config_path: File given with --config; disables the default search
        """
        self.config_path = config_path
        self._config: Optional[AppConfig] = None

    def find_config_file(self) -> Optional[Path]:
        """First existing candidate file, or None to use defaults."""
        candidates = [self.config_path] if self.config_path else self.DEFAULT_CONFIG_PATHS
        for candidate in candidates:
            path = Path(candidate).expanduser()
            if path.is_file():
                return path
        return None

    def load_app_config(self) -> AppConfig:
        """
        Return the cached config, reading it on first use.

        Raises:
            ConfigError: If the chosen file is not JSON or fails validation
        """
        if self._config is None:
            path = self.find_config_file()
            self._config = AppConfig() if path is None else self._read(path)
        return self._config

    def reload(self) -> AppConfig:
        """Drop the cached config and read it again."""
        self._config = None
        return self.load_app_config()

    @staticmethod
    def _read(path: Path) -> AppConfig:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return AppConfig.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as e:
            raise ConfigError(f"Invalid mailtrace config {path}: {e}") from e
