"""Module de configuration."""

from exeq.config.loader import ConfigLoader, FileConfigLoader
from exeq.config.settings import ExeqSettings, LoggingSettings, load_settings

__all__ = [
    "ConfigLoader",
    "FileConfigLoader",
    "ExeqSettings",
    "LoggingSettings",
    "load_settings",
]
