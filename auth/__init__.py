"""Authentication and authorization modules."""

from auth.exceptions import (
    AuthError,
    DuplicateAccountError,
    InvalidCredentialsError,
    InvalidTokenError,
    SessionRevokedError,
    RateLimitedError,
    PermissionDeniedError,
)
from auth.types import (
    Role,
    User,
    Session,
    TokenClaims,
    AuthResult,
    ProvisionedUser,
)
from auth.config import AuthConfig
