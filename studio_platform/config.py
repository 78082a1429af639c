"""Application configuration objects."""

from __future__ import annotations

import os
from datetime import timedelta
from functools import lru_cache
from typing import Any, Type

from sqlalchemy.pool import NullPool


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


class BaseConfig:
    """Shared defaults across all environments."""

    APP_NAME = "HEA Studio"
    SECRET_KEY = os.getenv("SECRET_KEY", "change_me")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite+pysqlite:///studio_dev.db",
    )
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change_me")
    JWT_TOKEN_LOCATION = ("headers",)
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(
        seconds=int(os.getenv("JWT_ACCESS_TOKEN_EXPIRES_SEC", "43200"))
    )
    APP_URL = os.getenv("APP_URL", "http://localhost:8080")
    HTTP_TIMEOUT_SECONDS = int(os.getenv("HTTP_TIMEOUT_SECONDS", "20"))

    # Stripe / pricing
    STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY", "")
    STRIPE_CURRENCY = os.getenv("STRIPE_CURRENCY", "usd")
    PLATFORM_FEE_PERCENT = int(os.getenv("PLATFORM_FEE_PERCENT", "15"))
    ACCEPTANCE_DEADLINE_HOURS = int(os.getenv("ACCEPTANCE_DEADLINE_HOURS", "48"))
    # Orders still waiting for a producer are swept by these statuses. The
    # accept handler reopens on "paid"; the sweep has always matched "pending".
    EXPIRY_SWEEP_STATUSES = tuple(
        status.strip()
        for status in os.getenv("EXPIRY_SWEEP_STATUSES", "pending").split(",")
        if status.strip()
    )
    DEFAULT_REFUND_PERCENT = int(os.getenv("DEFAULT_REFUND_PERCENT", "100"))

    # Email (Resend)
    MAIL_ENABLED = _env_flag("MAIL_ENABLED", "true")
    RESEND_API_KEY = os.getenv("RESEND_API_KEY", "")
    RESEND_API_BASE = os.getenv("RESEND_API_BASE", "https://api.resend.com")
    MAIL_TIMEOUT = int(os.getenv("MAIL_TIMEOUT", "30"))
    MAIL_DEFAULT_SENDER = os.getenv("MAIL_DEFAULT_SENDER", "noreply@example.com")
    MAIL_DEFAULT_NAME = os.getenv("MAIL_DEFAULT_NAME", "HEA Studio")
    MAIL_REPLY_TO = os.getenv("MAIL_REPLY_TO", "")
    BUSINESS_NOTIFICATION_EMAIL = os.getenv("BUSINESS_NOTIFICATION_EMAIL", "")
    FILES_NOTIFICATION_EMAIL = os.getenv("FILES_NOTIFICATION_EMAIL", "")

    # Discord
    DISCORD_ENABLED = _env_flag("DISCORD_ENABLED", "true")
    DISCORD_PUBLIC_KEY = os.getenv("DISCORD_PUBLIC_KEY", "")
    DISCORD_APPLICATION_ID = os.getenv("DISCORD_APPLICATION_ID", "")
    DISCORD_WEBHOOK_URL = os.getenv("DISCORD_WEBHOOK_URL", "")
    DISCORD_API_BASE = os.getenv("DISCORD_API_BASE", "https://discord.com/api/v10")

    # Google Drive
    GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID", "")
    GOOGLE_CLIENT_SECRET = os.getenv("GOOGLE_CLIENT_SECRET", "")
    GOOGLE_REDIRECT_URI = os.getenv(
        "GOOGLE_REDIRECT_URI", "http://localhost:8080/google-auth-callback"
    )
    GOOGLE_TOKEN_REFRESH_MARGIN_SECONDS = int(
        os.getenv("GOOGLE_TOKEN_REFRESH_MARGIN_SECONDS", "300")
    )
    DRIVE_STATE_SALT = os.getenv("DRIVE_STATE_SALT", "drive-oauth-state")
    DRIVE_STATE_MAX_AGE = int(os.getenv("DRIVE_STATE_MAX_AGE", "900"))

    BACKGROUND_TASKS_INLINE = _env_flag("BACKGROUND_TASKS_INLINE", "false")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    RATE_LIMIT_DEFAULTS = [limit.strip() for limit in os.getenv("RATE_LIMIT_DEFAULTS", "200 per minute;1000 per day").split(";") if limit.strip()]
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    JSON_SORT_KEYS = False
    ADMIN_DEFAULT_EMAIL = os.getenv("ADMIN_DEFAULT_EMAIL", "admin@example.com")
    ADMIN_DEFAULT_PASSWORD = os.getenv("ADMIN_DEFAULT_PASSWORD", "AdminPass123!")
    SQLITE_TIMEOUT_SEC = int(os.getenv("SQLITE_TIMEOUT_SEC", "15"))
    SQLITE_BUSY_TIMEOUT_MS = int(os.getenv("SQLITE_BUSY_TIMEOUT_MS", "15000"))
    if SQLALCHEMY_DATABASE_URI.startswith("sqlite"):
        SQLALCHEMY_ENGINE_OPTIONS = {
            "poolclass": NullPool,
            "connect_args": {"timeout": SQLITE_TIMEOUT_SEC, "check_same_thread": False},
        }
    else:
        SQLALCHEMY_ENGINE_OPTIONS = {
            "pool_pre_ping": True,
            "pool_size": int(os.getenv("DB_POOL_SIZE", "5")),
            "max_overflow": int(os.getenv("DB_MAX_OVERFLOW", "10")),
            "pool_timeout": int(os.getenv("DB_POOL_TIMEOUT", "30")),
        }


class DevConfig(BaseConfig):
    DEBUG = True


class ProdConfig(BaseConfig):
    DEBUG = False


class TestConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite+pysqlite:///:memory:"
    SQLALCHEMY_ENGINE_OPTIONS: dict[str, Any] = {}
    JWT_SECRET_KEY = "test-secret"
    SECRET_KEY = "test-secret"
    APP_URL = "https://studio.test"
    STRIPE_SECRET_KEY = "sk_test_dummy"
    MAIL_ENABLED = False
    DISCORD_ENABLED = True
    DISCORD_WEBHOOK_URL = "https://discord.test/webhook"
    DISCORD_APPLICATION_ID = "app-123"
    BUSINESS_NOTIFICATION_EMAIL = "team@studio.test"
    FILES_NOTIFICATION_EMAIL = "files@studio.test"
    GOOGLE_CLIENT_ID = "google-client"
    GOOGLE_CLIENT_SECRET = "google-secret"
    EXPIRY_SWEEP_STATUSES = ("pending",)
    BACKGROUND_TASKS_INLINE = True
    RATELIMIT_ENABLED = False


CONFIG_ALIASES: dict[str, Type[BaseConfig]] = {
    "dev": DevConfig,
    "development": DevConfig,
    "prod": ProdConfig,
    "production": ProdConfig,
    "test": TestConfig,
    "testing": TestConfig,
}


@lru_cache
def resolve_config(name_or_class: Any) -> Any:
    """Resolve config argument to the object expected by `app.config.from_object`."""

    if name_or_class is None:
        return DevConfig
    if isinstance(name_or_class, str):
        return CONFIG_ALIASES.get(name_or_class, name_or_class)
    return name_or_class
