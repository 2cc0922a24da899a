"""Configuration module for the Invoice Tracker application."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from urllib.parse import urlparse

from dotenv import load_dotenv

from app.core.exceptions import ConfigurationError

load_dotenv()


def _as_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Config:
    """Runtime configuration with validation."""

    APP_NAME: str
    APP_VERSION: str
    ENV: str
    DEBUG: bool
    DATABASE_URL: str
    DB_POOL_SIZE: int
    DB_MAX_OVERFLOW: int
    DB_STATEMENT_TIMEOUT_MS: int
    DB_CONNECTIVITY_REQUIRED: bool
    PDF_DIR: str
    DELETED_PDF_DIR: str
    MAX_UPLOAD_BYTES: int
    EXCHANGE_RATE_URL: str
    EXCHANGE_RATE_TIMEOUT_SECONDS: int
    EXCHANGE_RATE_REFRESH_SECONDS: int
    EXPECTED_INVOICE_SWEEP_SECONDS: int
    ACKNOWLEDGED_CLEANUP_SECONDS: int
    ACKNOWLEDGED_RETENTION_DAYS: int
    EXPECTED_MATCH_TOLERANCE_DAYS: int
    CELERY_BROKER_URL: str
    CELERY_RESULT_BACKEND: str
    API_HOST: str
    API_PORT: int
    API_PREFIX: str
    LOG_LEVEL: str
    LOG_FILE: str

    @property
    def is_production(self) -> bool:
        return self.ENV == "production"

    @property
    def is_postgres(self) -> bool:
        return self.DATABASE_URL.startswith("postgresql")


def _build_config(env: str | None = None) -> Config:
    resolved_env = (env or os.getenv("ENV", "development")).strip().lower()
    debug = _as_bool(os.getenv("DEBUG"), default=(resolved_env != "production"))
    pdf_dir = os.getenv("PDF_DIR", "./invoice_pdfs")

    config = Config(
        APP_NAME="Invoice Tracker",
        APP_VERSION=os.getenv("APP_VERSION", "1.0.0"),
        ENV=resolved_env,
        DEBUG=debug if resolved_env != "production" else False,
        DATABASE_URL=os.getenv("DATABASE_URL", "sqlite:///./invoice_tracker.db"),
        DB_POOL_SIZE=int(os.getenv("DB_POOL_SIZE", "10")),
        DB_MAX_OVERFLOW=int(os.getenv("DB_MAX_OVERFLOW", "10")),
        DB_STATEMENT_TIMEOUT_MS=int(os.getenv("DB_STATEMENT_TIMEOUT_MS", "30000")),
        DB_CONNECTIVITY_REQUIRED=_as_bool(
            os.getenv("DB_CONNECTIVITY_REQUIRED"), default=(resolved_env == "production")
        ),
        PDF_DIR=pdf_dir,
        DELETED_PDF_DIR=os.getenv("DELETED_PDF_DIR", os.path.join(pdf_dir, "deleted")),
        MAX_UPLOAD_BYTES=int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024))),
        EXCHANGE_RATE_URL=os.getenv("EXCHANGE_RATE_URL", "https://api.exchangerate-api.com/v4/latest/USD"),
        EXCHANGE_RATE_TIMEOUT_SECONDS=int(os.getenv("EXCHANGE_RATE_TIMEOUT_SECONDS", "10")),
        EXCHANGE_RATE_REFRESH_SECONDS=int(os.getenv("EXCHANGE_RATE_REFRESH_SECONDS", str(6 * 60 * 60))),
        EXPECTED_INVOICE_SWEEP_SECONDS=int(os.getenv("EXPECTED_INVOICE_SWEEP_SECONDS", str(24 * 60 * 60))),
        ACKNOWLEDGED_CLEANUP_SECONDS=int(os.getenv("ACKNOWLEDGED_CLEANUP_SECONDS", str(7 * 24 * 60 * 60))),
        ACKNOWLEDGED_RETENTION_DAYS=int(os.getenv("ACKNOWLEDGED_RETENTION_DAYS", "7")),
        EXPECTED_MATCH_TOLERANCE_DAYS=int(os.getenv("EXPECTED_MATCH_TOLERANCE_DAYS", "45")),
        CELERY_BROKER_URL=os.getenv("CELERY_BROKER_URL", os.getenv("REDIS_URL", "redis://localhost:6379/0")),
        CELERY_RESULT_BACKEND=os.getenv("CELERY_RESULT_BACKEND", os.getenv("REDIS_URL", "redis://localhost:6379/0")),
        API_HOST=os.getenv("API_HOST", "0.0.0.0"),
        API_PORT=int(os.getenv("API_PORT", "3001")),
        API_PREFIX=os.getenv("API_PREFIX", "/api/v1"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO").upper(),
        LOG_FILE=os.getenv("LOG_FILE", "invoice_tracker.log"),
    )
    _validate_config(config)
    return config


def _validate_database_url(database_url: str) -> None:
    parsed = urlparse(database_url)
    if parsed.scheme not in {"sqlite", "postgresql", "postgresql+psycopg2"}:
        raise ConfigurationError(
            "DATABASE_URL must use sqlite:// or postgresql:// style URL."
        )
    if parsed.scheme.startswith("postgresql") and not parsed.hostname:
        raise ConfigurationError("PostgreSQL DATABASE_URL is missing hostname.")


def _validate_config(config: Config) -> None:
    _validate_database_url(config.DATABASE_URL)

    if config.DB_POOL_SIZE < 1:
        raise ConfigurationError("DB_POOL_SIZE must be >= 1.")
    if config.DB_MAX_OVERFLOW < 0:
        raise ConfigurationError("DB_MAX_OVERFLOW must be >= 0.")
    if config.DB_STATEMENT_TIMEOUT_MS < 0:
        raise ConfigurationError("DB_STATEMENT_TIMEOUT_MS must be >= 0.")
    if config.MAX_UPLOAD_BYTES < 1:
        raise ConfigurationError("MAX_UPLOAD_BYTES must be >= 1.")
    if config.EXCHANGE_RATE_TIMEOUT_SECONDS < 1:
        raise ConfigurationError("EXCHANGE_RATE_TIMEOUT_SECONDS must be >= 1.")
    if config.EXPECTED_MATCH_TOLERANCE_DAYS < 0:
        raise ConfigurationError("EXPECTED_MATCH_TOLERANCE_DAYS must be >= 0.")
    if config.ACKNOWLEDGED_RETENTION_DAYS < 0:
        raise ConfigurationError("ACKNOWLEDGED_RETENTION_DAYS must be >= 0.")
    for name in ("EXCHANGE_RATE_REFRESH_SECONDS", "EXPECTED_INVOICE_SWEEP_SECONDS", "ACKNOWLEDGED_CLEANUP_SECONDS"):
        if getattr(config, name) < 1:
            raise ConfigurationError(f"{name} must be >= 1.")
    if config.LOG_LEVEL not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        raise ConfigurationError("LOG_LEVEL must be one of DEBUG/INFO/WARNING/ERROR/CRITICAL.")
    if config.is_production and "change_me" in config.DATABASE_URL.lower():
        raise ConfigurationError("Production DATABASE_URL uses placeholder credentials.")


@lru_cache(maxsize=8)
def get_config(env: str | None = None) -> Config:
    """Get validated configuration for the requested environment."""
    return _build_config(env)
