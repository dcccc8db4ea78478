"""
Configuration Management.

Loads secrets from config/.env and settings from config/settings/*.yaml.
No hardcoded values in code; all configuration comes from these sources.

Secrets (.env):
    JWT_SECRET

Settings (YAML):
    application.yaml   - App identity, server, cors, timeouts
    database.yaml      - SQLAlchemy connection URL
    logging.yaml       - Logging configuration
    security.yaml      - JWT settings, bcrypt cost
    storage.yaml       - Upload directory and attachment limits
    concurrency.yaml   - Thread pool size
    client.yaml        - Notepad client: base URL, auto-save interval, fallback cache
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from modules.backend.core.config_schema import (
    ApplicationSchema,
    ClientSchema,
    ConcurrencySchema,
    DatabaseSchema,
    LoggingSchema,
    SecuritySchema,
    StorageSchema,
)


def find_project_root() -> Path:
    """Find project root by looking for .project_root marker file."""
    current = Path.cwd()
    while current != current.parent:
        if (current / ".project_root").exists():
            return current
        current = current.parent
    raise RuntimeError("Project root not found. Ensure .project_root file exists.")


def validate_project_root() -> Path:
    """
    Validate that the project root can be found.

    Raises SystemExit with a clear message if .project_root is not found.
    Use this in entry scripts before any configuration loading.
    """
    try:
        return find_project_root()
    except RuntimeError as e:
        raise SystemExit(f"Error: {e}") from e


def load_yaml_config(filename: str) -> dict[str, Any]:
    """Load a YAML configuration file from config/settings/."""
    project_root = find_project_root()
    config_path = project_root / "config" / "settings" / filename

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


def resolve_project_path(configured_path: str) -> Path:
    """Resolve a configured path relative to the project root (absolute paths pass through)."""
    path = Path(configured_path)
    if path.is_absolute():
        return path
    return find_project_root() / path


class Settings(BaseSettings):
    """Secrets loaded from config/.env. Only passwords, tokens, and keys."""

    jwt_secret: str

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


def _load_validated(schema_cls: type, filename: str) -> Any:
    """Load YAML and validate against schema. Returns typed model instance."""
    raw = load_yaml_config(filename)
    try:
        return schema_cls(**raw)
    except ValidationError as e:
        raise ValueError(
            f"Invalid configuration in {filename}:\n{e}"
        ) from e


_SETTINGS_FILES: dict[str, tuple[type, str]] = {
    "application": (ApplicationSchema, "application.yaml"),
    "database": (DatabaseSchema, "database.yaml"),
    "logging": (LoggingSchema, "logging.yaml"),
    "security": (SecuritySchema, "security.yaml"),
    "storage": (StorageSchema, "storage.yaml"),
    "concurrency": (ConcurrencySchema, "concurrency.yaml"),
    "client": (ClientSchema, "client.yaml"),
}


class AppConfig:
    """
    Every settings file, validated at construction.

    A missing file, a wrong type or an unknown key fails here with the
    file name in the message instead of surfacing later as a KeyError.
    """

    application: ApplicationSchema
    database: DatabaseSchema
    logging: LoggingSchema
    security: SecuritySchema
    storage: StorageSchema
    concurrency: ConcurrencySchema
    client: ClientSchema

    def __init__(self) -> None:
        for section, (schema_cls, filename) in _SETTINGS_FILES.items():
            setattr(self, section, _load_validated(schema_cls, filename))


@lru_cache
def get_settings() -> Settings:
    """Get cached secrets instance. Resolves .env path from project root."""
    env_path = find_project_root() / "config" / ".env"
    return Settings(_env_file=str(env_path))


@lru_cache
def get_app_config() -> AppConfig:
    """Get cached application configuration."""
    return AppConfig()


def get_database_url() -> str:
    """
    Get the SQLAlchemy database URL from database.yaml.

    Relative SQLite file paths are anchored at the project root so the
    database location does not depend on the working directory.

    Returns:
        Database connection URL string.
    """
    url = get_app_config().database.url
    prefix = "sqlite+aiosqlite:///"
    if url.startswith(prefix):
        path = url[len(prefix):]
        if path and path != ":memory:" and not Path(path).is_absolute():
            return f"{prefix}{find_project_root() / path}"
    return url
