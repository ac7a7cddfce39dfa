"""Authentication configuration."""

from pydantic import BaseModel, Field


class AuthConfig(BaseModel):
    """
    Authentication configuration.

    Durations are in their natural units (days for session lifetime,
    minutes for throttling windows).
    """

    # Token signing
    jwt_algorithm: str = Field(
        default="HS256",
        description="JWS algorithm for session tokens",
    )

    # Session settings
    session_expiry_days: int = Field(
        default=7,
        description="Session lifetime in days",
        ge=1,
        le=90,
    )
    single_session: bool = Field(
        default=True,
        description="Deactivate a user's other sessions on sign-in",
    )

    # Password hashing
    bcrypt_rounds: int = Field(
        default=12,
        description="bcrypt cost factor (lowered only in tests)",
        ge=4,
        le=16,
    )
    min_password_length: int = Field(
        default=8,
        description="Minimum accepted password length",
        ge=6,
    )

    # Cookie
    cookie_name: str = Field(default="auth_token")
    cookie_secure: bool = Field(
        default=False,
        description="Send the session cookie over HTTPS only (on in production)",
    )
    cookie_samesite: str = Field(default="lax")

    # Rate limiting
    rate_limit_attempts: int = Field(
        default=5,
        description="Max failed sign-in attempts per email per window",
        ge=1,
        le=50,
    )
    rate_limit_window_minutes: int = Field(
        default=15,
        description="Rate limit window duration",
        ge=1,
        le=60,
    )

    # Roles
    admin_emails: list[str] = Field(
        default_factory=list,
        description="Emails that are always provisioned as administrators",
    )
    legacy_admin_email_match: bool = Field(
        default=True,
        description="Treat emails containing 'admin' as administrators",
    )

    # Application
    app_base_url: str = Field(
        default="http://localhost:3000",
        description="Base URL used in notification emails",
    )
    app_name: str = Field(
        default="SalesCRM",
        description="Application name for emails",
    )
