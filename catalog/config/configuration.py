"""Configuration module for the catalog tool.

Loads settings from environment-specific config files:
- APP_ENV=dev  → config_dev.yaml (SQLite backend, local development)
- APP_ENV=test → config_test.yaml
- Default      → config.yaml

Database credentials and overrides are loaded from the .env file.
Every setting is optional; invalid values fail fast with clear messages.
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

import yaml
from dotenv import load_dotenv


class ConfigurationError(Exception):
    """Raised when configuration is invalid."""
    pass


SUPPORTED_BACKENDS = ("postgres", "sqlite")

_LANGUAGE_CODE = re.compile(r"^[a-z]{2}$")
_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def _get_project_root() -> Path:
    """Get the project root directory (where config.yaml lives)."""
    # Navigate from catalog/config/ up to project root
    return Path(__file__).parent.parent.parent


def _get_config_filename() -> str:
    """Get config filename based on APP_ENV environment variable."""
    app_env = os.environ.get("APP_ENV", "").lower()

    if app_env == "dev":
        return "config_dev.yaml"
    elif app_env == "test":
        return "config_test.yaml"
    else:
        return "config.yaml"


def _load_yaml_config() -> dict:
    """Load configuration from environment-specific config file.

    A missing file is not an error: every setting has a default.
    """
    config_path = _get_project_root() / _get_config_filename()

    if not config_path.exists():
        return {}

    with open(config_path, "r") as f:
        return yaml.safe_load(f) or {}


def _get_optional_env(key: str, default: Optional[str] = None) -> Optional[str]:
    """Get optional environment variable with default."""
    value = os.environ.get(key)
    if value is None or value == "":
        return default
    return value


def _parse_bool(key: str, value) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"'{key}' must be a boolean, got {value!r}")


def _parse_int(key: str, value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"'{key}' must be an integer, got {value!r}") from None


@dataclass(frozen=True)
class DatabaseConfig:
    """Catalog database configuration."""
    backend: str  # "postgres" or "sqlite"
    host: str
    port: int
    user: str
    password: str = field(repr=False)
    name: str
    tls_verify: bool
    connect_timeout: int
    sqlite_path: str


@dataclass(frozen=True)
class CatalogConfig:
    """Catalog table conventions."""
    languages: Tuple[str, ...]
    default_language: str
    placeholder_patterns: Tuple[str, ...]


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""
    level: str


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration container."""
    database: DatabaseConfig
    catalog: CatalogConfig
    logging: LoggingConfig


def _build_database_config(section: dict) -> DatabaseConfig:
    backend = _get_optional_env("DB_BACKEND", section.get("backend", "postgres"))
    if backend not in SUPPORTED_BACKENDS:
        raise ConfigurationError(
            f"Unknown database backend '{backend}'. "
            f"Expected one of: {', '.join(SUPPORTED_BACKENDS)}"
        )

    return DatabaseConfig(
        backend=backend,
        host=_get_optional_env("DB_HOST", section.get("host", "localhost")),
        port=_parse_int("DB_PORT", _get_optional_env("DB_PORT", section.get("port", 5432))),
        user=_get_optional_env("DB_USER", section.get("user", "postgres")),
        password=_get_optional_env("DB_PASSWORD", ""),
        name=_get_optional_env("DB_NAME", section.get("name", "catalog")),
        tls_verify=_parse_bool(
            "DB_TLS_VERIFY", _get_optional_env("DB_TLS_VERIFY", section.get("tls_verify", True))
        ),
        connect_timeout=_parse_int(
            "DB_CONNECT_TIMEOUT",
            _get_optional_env("DB_CONNECT_TIMEOUT", section.get("connect_timeout", 10)),
        ),
        sqlite_path=_get_optional_env("DB_SQLITE_PATH", section.get("sqlite_path", "catalog.db")),
    )


def _build_catalog_config(section: dict) -> CatalogConfig:
    languages = tuple(section.get("languages", ["en", "pt"]))
    for lang in languages:
        if not isinstance(lang, str) or not _LANGUAGE_CODE.match(lang):
            raise ConfigurationError(f"Invalid language code in catalog.languages: {lang!r}")

    default_language = section.get("default_language", "pt")
    if default_language not in languages:
        raise ConfigurationError(
            f"catalog.default_language '{default_language}' is not listed in catalog.languages"
        )

    return CatalogConfig(
        languages=languages,
        default_language=default_language,
        placeholder_patterns=tuple(section.get("placeholder_patterns", [])),
    )


def load_config() -> AppConfig:
    """
    Load and validate all application configuration.

    Loads the YAML file selected by APP_ENV, then applies overrides from the
    environment (.env included). Environment values win over YAML values.

    Returns:
        AppConfig: Validated application configuration.

    Raises:
        ConfigurationError: If a configured value is invalid.
    """
    # Load environment variables from .env file
    load_dotenv()

    yaml_config = _load_yaml_config()

    logging_section = yaml_config.get("logging", {})

    return AppConfig(
        database=_build_database_config(yaml_config.get("database", {})),
        catalog=_build_catalog_config(yaml_config.get("catalog", {})),
        logging=LoggingConfig(level=logging_section.get("level", "INFO")),
    )


# Module-level singleton for convenience
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """
    Get the application configuration singleton.

    Lazy-loads configuration on first access.
    Config file is selected based on APP_ENV environment variable.
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Reset the config singleton. Useful for testing."""
    global _config
    _config = None
