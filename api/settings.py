"""
Application settings from the environment.

`.env` is loaded first (python-dotenv); secrets then resolve through
clients.vault_client (environment variable, else Vault when VAULT_ADDR is
set).
"""

import logging
import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from auth.config import AuthConfig
from clients import vault_client

logger = logging.getLogger(__name__)

# Only ever used outside production; startup logs a warning when it is
_DEV_JWT_SECRET = "dev-only-insecure-jwt-secret-change-me-0000"
_DEFAULT_DATABASE_URL = "sqlite:///./data/crm.db"


class SettingsError(RuntimeError):
    """Configuration is missing or invalid. Raised at startup."""


class EmailSettings(BaseModel):
    gateway_url: str
    api_key: str
    hmac_secret: str


class AppSettings(BaseModel):
    """Everything create_app needs, resolved once at startup."""

    app_env: str = "development"
    port: int = Field(default=8080, ge=1, le=65535)
    log_level: str = "INFO"
    log_format: str = Field(default="text", pattern="^(text|json)$")
    database_url: str = _DEFAULT_DATABASE_URL
    db_timeout_seconds: int = Field(default=10, ge=1)
    jwt_secret: str = Field(..., min_length=1, repr=False)
    valkey_url: str | None = Field(default=None, repr=False)
    email: EmailSettings | None = Field(default=None, repr=False)
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000", "http://localhost:5173"])
    auth: AuthConfig = Field(default_factory=AuthConfig)

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


def _split(value: str | None) -> list[str]:
    return [item.strip() for item in (value or "").split(",") if item.strip()]


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_settings(env_file: str | None = ".env") -> AppSettings:
    """
    Build settings from the environment.

    Raises:
        SettingsError: JWT_SECRET missing in production
    """
    if env_file:
        load_dotenv(env_file, override=False)

    app_env = os.getenv("APP_ENV", "development").strip().lower()
    production = app_env == "production"

    jwt_secret = vault_client.get_jwt_secret()
    if not jwt_secret:
        if production:
            raise SettingsError("JWT_SECRET is required when APP_ENV=production")
        logger.warning("JWT_SECRET not set; using the development signing key")
        jwt_secret = _DEV_JWT_SECRET

    email_config = vault_client.get_email_config()

    auth_overrides = {
        "admin_emails": _split(os.getenv("ADMIN_EMAILS")),
        "legacy_admin_email_match": _env_bool("LEGACY_ADMIN_EMAIL_MATCH", True),
        "cookie_secure": _env_bool("COOKIE_SECURE", production),
    }
    if os.getenv("SESSION_EXPIRY_DAYS"):
        auth_overrides["session_expiry_days"] = int(os.environ["SESSION_EXPIRY_DAYS"])
    if os.getenv("APP_BASE_URL"):
        auth_overrides["app_base_url"] = os.environ["APP_BASE_URL"]

    cors = _split(os.getenv("CORS_ORIGINS"))

    settings = AppSettings(
        app_env=app_env,
        port=int(os.getenv("PORT", "8080")),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_format=os.getenv("LOG_FORMAT", "text").strip().lower(),
        database_url=vault_client.get_database_url() or _DEFAULT_DATABASE_URL,
        db_timeout_seconds=int(os.getenv("DB_TIMEOUT_SECONDS", "10")),
        jwt_secret=jwt_secret,
        valkey_url=vault_client.get_valkey_url(),
        email=EmailSettings(**email_config) if email_config else None,
        auth=AuthConfig(**auth_overrides),
        **({"cors_origins": cors} if cors else {}),
    )
    return settings
