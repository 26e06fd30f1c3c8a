"""
Configuration Management.

Loads secrets from config/.env and settings from config/settings/*.yaml.

Secrets (.env):
    DB_PASSWORD    - Password for the user named in database.yaml
    DATABASE_URL   - Optional full connection URL, overrides database.yaml

Settings (YAML):
    application.yaml   - App identity, server, cors, pagination, timeouts
    database.yaml      - Database connection and pool settings
    logging.yaml       - Logging configuration
    features.yaml      - Feature flags
    observability.yaml - Health check configuration
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from notes_api.core.config_schema import (
    ApplicationSchema,
    DatabaseSchema,
    FeaturesSchema,
    LoggingSchema,
    ObservabilitySchema,
)

ASYNC_DRIVER = "postgresql+asyncpg"


def find_project_root() -> Path:
    """Find project root by looking for .project_root marker file."""
    current = Path.cwd()
    while current != current.parent:
        if (current / ".project_root").exists():
            return current
        current = current.parent
    raise RuntimeError("Project root not found. Ensure .project_root file exists.")


def load_yaml_config(filename: str) -> dict[str, Any]:
    """Load a YAML configuration file from config/settings/."""
    project_root = find_project_root()
    config_path = project_root / "config" / "settings" / filename

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


class Settings(BaseSettings):
    """Secrets loaded from config/.env or the process environment."""

    db_password: str = ""
    database_url: str | None = None

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


class AppConfig:
    """
    Application configuration loaded from YAML files.

    Each YAML file is validated against its Pydantic schema at load time.
    Properties return typed Pydantic model instances with attribute access.
    """

    def __init__(self) -> None:
        self._application = _load_validated(ApplicationSchema, "application.yaml")
        self._database = _load_validated(DatabaseSchema, "database.yaml")
        self._logging = _load_validated(LoggingSchema, "logging.yaml")
        self._features = _load_validated(FeaturesSchema, "features.yaml")
        self._observability = _load_validated(ObservabilitySchema, "observability.yaml")

        pagination = self._application.pagination
        if pagination.default_limit > pagination.max_limit:
            raise ValueError(
                "Invalid configuration in application.yaml: "
                "pagination.default_limit exceeds pagination.max_limit"
            )

    @property
    def application(self) -> ApplicationSchema:
        """Application settings."""
        return self._application

    @property
    def database(self) -> DatabaseSchema:
        """Database settings."""
        return self._database

    @property
    def logging(self) -> LoggingSchema:
        """Logging settings."""
        return self._logging

    @property
    def features(self) -> FeaturesSchema:
        """Feature flags."""
        return self._features

    @property
    def observability(self) -> ObservabilitySchema:
        """Observability settings (health checks)."""
        return self._observability


@lru_cache
def get_settings() -> Settings:
    """Get cached secrets instance. Resolves .env path from project root."""
    env_path = find_project_root() / "config" / ".env"
    return Settings(_env_file=str(env_path))


@lru_cache
def get_app_config() -> AppConfig:
    """Get cached application configuration."""
    return AppConfig()


def normalize_database_url(url: str) -> str:
    """
    Rewrite a postgres URL to name the driver SQLAlchemy should use.

    URLs that already name a driver (postgresql+asyncpg://, sqlite+aiosqlite://)
    are returned unchanged.
    """
    for prefix in ("postgres://", "postgresql://"):
        if url.startswith(prefix):
            return f"{ASYNC_DRIVER}://{url[len(prefix):]}"
    return url


def get_database_url() -> str:
    """
    Construct database URL from YAML config and secrets.

    DATABASE_URL, when set, takes precedence over database.yaml.

    Returns:
        Database connection URL string.
    """
    settings = get_settings()
    if settings.database_url:
        return normalize_database_url(settings.database_url)

    db = get_app_config().database
    return f"{ASYNC_DRIVER}://{db.user}:{settings.db_password}@{db.host}:{db.port}/{db.name}"

