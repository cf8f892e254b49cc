"""Configuration management"""

from .app_config import AppConfig, DisplayConfig, IngestionConfig, StorageConfig
from .config_loader import ConfigError, ConfigLoader

__all__ = [
    "AppConfig",
    "ConfigError",
    "ConfigLoader",
    "DisplayConfig",
    "IngestionConfig",
    "StorageConfig",
]
