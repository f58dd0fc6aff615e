"""Configuration module."""

from catalog.config.configuration import (
    AppConfig,
    CatalogConfig,
    ConfigurationError,
    DatabaseConfig,
    LoggingConfig,
    get_config,
    load_config,
    reset_config,
)

__all__ = [
    "AppConfig",
    "CatalogConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "LoggingConfig",
    "get_config",
    "load_config",
    "reset_config",
]
