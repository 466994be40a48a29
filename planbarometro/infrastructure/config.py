"""
Centralized configuration management for the Planbarómetro service.

Environment-driven settings sections built on pydantic-settings, grouped
behind a lazily-populated ``Settings`` container.
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings
from sqlalchemy.pool import StaticPool

from .exceptions import ConfigurationError


class DatabaseConfig(BaseSettings):
    """
    Database configuration settings for the evaluation snapshot store.

    Example:
        >>> DatabaseConfig(backend="sqlite", sqlite_path="./test.db").get_connection_url()
        'sqlite:///./test.db'
    """

    backend: Literal["sqlite", "mysql"] = Field("sqlite", description="Database backend type")

    sqlite_path: str | None = Field("./planbarometro.db", description="SQLite database file path")

    mysql_host: str | None = Field("localhost", description="MySQL host")
    mysql_port: int | None = Field(3306, ge=1, le=65535, description="MySQL port")
    mysql_user: str | None = Field("root", description="MySQL username")
    mysql_password: str | None = Field("", description="MySQL password")
    mysql_database: str | None = Field("planbarometro", description="MySQL database name")
    mysql_charset: str = Field("utf8mb4", description="MySQL character set")

    pool_pre_ping: bool = Field(True, description="Enable connection pool pre-ping")
    pool_recycle: int = Field(3600, ge=60, description="Connection pool recycle time (seconds)")
    echo: bool = Field(False, description="Enable SQL query logging")

    model_config = {"env_prefix": "DB_", "case_sensitive": False}

    @field_validator("sqlite_path")
    def validate_sqlite_path(cls, v):
        """Ensure the SQLite directory exists and the file has a suffix."""
        if v and v != ":memory:":
            path = Path(v)
            path.parent.mkdir(parents=True, exist_ok=True)
            if not path.suffix:
                v = str(path.with_suffix(".db"))
        return v

    @model_validator(mode="after")
    def validate_mysql_config(self):
        if self.backend == "mysql":
            missing = []
            if not self.mysql_host:
                missing.append("mysql_host")
            if not self.mysql_user:
                missing.append("mysql_user")
            if not self.mysql_database:
                missing.append("mysql_database")
            if missing:
                raise ValueError(f"MySQL backend requires: {', '.join(missing)}")
        return self

    def get_connection_url(self) -> str:
        if self.backend == "sqlite":
            return f"sqlite:///{self.sqlite_path}"
        elif self.backend == "mysql":
            password_part = f":{self.mysql_password}" if self.mysql_password else ""
            return (
                f"mysql+pymysql://{self.mysql_user}{password_part}@{self.mysql_host}:"
                f"{self.mysql_port}/{self.mysql_database}?charset={self.mysql_charset}"
            )
        else:
            raise ConfigurationError(
                f"Unsupported database backend: {self.backend}", config_key="backend"
            )

    def get_engine_options(self) -> dict[str, Any]:
        options: dict[str, Any] = {
            "echo": self.echo,
            "future": True,
            "pool_pre_ping": self.pool_pre_ping,
        }
        if self.backend == "mysql":
            options["pool_recycle"] = self.pool_recycle
        else:
            options["connect_args"] = {"check_same_thread": False}
            if self.sqlite_path == ":memory:":
                # in-memory databases live on a single shared connection
                options["poolclass"] = StaticPool
        return options


class LoggingConfig(BaseSettings):
    """Logging levels, output format and file destination."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        "INFO", description="Minimum logging level"
    )
    file_path: str | None = Field("./logs/planbarometro.log", description="Log file path")
    max_bytes: int = Field(10 * 1024 * 1024, ge=1024, description="Max log file size in bytes")
    backup_count: int = Field(5, ge=1, description="Number of backup log files")
    structured: bool = Field(True, description="Use structured JSON logging")
    console_enabled: bool = Field(True, description="Enable console output")

    model_config = {"env_prefix": "LOG_", "case_sensitive": False}


class ApplicationConfig(BaseSettings):
    """
    Main application configuration.

    Example:
        >>> config = get_settings()
        >>> config.app.default_locale
        'es'
    """

    environment: Literal["development", "testing", "production"] = Field(
        "development", description="Application environment"
    )
    debug: bool = Field(False, description="Enable debug mode")
    title: str = Field("Planbarómetro", description="API title")
    version: str = Field("0.1.0", description="Application version")

    default_locale: Literal["es", "en"] = Field("es", description="Locale for alert texts")
    default_model: str = Field("topp", description="Capability model used when none is given")

    host: str = Field("0.0.0.0", description="Bind address for the API server")
    port: int = Field(8000, ge=1, le=65535, description="Port for the API server")
    cors_origins: list[str] = Field(["*"], description="Allowed CORS origins")

    enable_data_export: bool = Field(True, description="Enable evaluation export endpoints")

    model_config = {"env_prefix": "APP_", "case_sensitive": False}

    @model_validator(mode="after")
    def debug_implies_development(self):
        if self.debug and self.environment == "production":
            raise ValueError("Debug mode cannot be enabled in production")
        return self


class Settings:
    """
    Complete application settings container with lazily-built sections.

    Example:
        >>> settings = get_settings()
        >>> settings.database.get_connection_url()
        'sqlite:///./planbarometro.db'
    """

    def __init__(self):
        self._app: ApplicationConfig | None = None
        self._database: DatabaseConfig | None = None
        self._logging: LoggingConfig | None = None

    @property
    def app(self) -> ApplicationConfig:
        if self._app is None:
            self._app = ApplicationConfig()
        return self._app

    @property
    def database(self) -> DatabaseConfig:
        if self._database is None:
            self._database = DatabaseConfig()
        return self._database

    @property
    def logging(self) -> LoggingConfig:
        if self._logging is None:
            config = LoggingConfig()
            defaults: dict[str, Any] = {"level": "DEBUG" if self.app.debug else "INFO"}
            if self.app.environment == "production":
                defaults["level"] = "WARNING"
            elif self.app.environment == "testing":
                defaults["file_path"] = None
            # explicit LOG_* values win over the environment defaults
            updates = {k: v for k, v in defaults.items() if k not in config.model_fields_set}
            self._logging = config.model_copy(update=updates)
        return self._logging

    def is_development(self) -> bool:
        return self.app.environment == "development"

    def is_production(self) -> bool:
        return self.app.environment == "production"

    def is_testing(self) -> bool:
        return self.app.environment == "testing"

    def get_environment_info(self) -> dict[str, Any]:
        return {
            "environment": self.app.environment,
            "version": self.app.version,
            "debug": self.app.debug,
            "database_backend": self.database.backend,
            "logging_level": self.logging.level,
            "default_locale": self.app.default_locale,
            "default_model": self.app.default_model,
            "features": {"data_export": self.app.enable_data_export},
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def load_settings_from_file(file_path: str) -> Settings:
    """
    Load settings from a JSON file of ``{section: {key: value}}`` objects.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigurationError: If the format is unsupported

    Example:
        >>> settings = load_settings_from_file("config/production.json")
    """
    config_path = Path(file_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    if config_path.suffix.lower() != ".json":
        raise ConfigurationError(
            f"Unsupported configuration file format: {config_path.suffix}",
            config_key="file_path",
        )

    with open(config_path, encoding="utf-8") as f:
        config_data = json.load(f)

    for section, values in config_data.items():
        if isinstance(values, dict):
            for key, value in values.items():
                os.environ[f"{section.upper()}_{key.upper()}"] = str(value)

    get_settings.cache_clear()
    return get_settings()


def override_settings(**kwargs) -> Settings:
    """
    Override settings through environment variables, e.g. ``app_default_locale="en"``.

    Example:
        >>> settings = override_settings(db_backend="sqlite", db_sqlite_path=":memory:")
    """
    for key, value in kwargs.items():
        os.environ[key.upper()] = str(value)

    get_settings.cache_clear()
    return get_settings()


def reset_settings() -> None:
    get_settings.cache_clear()
