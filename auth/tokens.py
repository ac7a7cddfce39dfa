"""
Signed session tokens.

A token is a compact HS256 JWT. Its `sid` claim carries a random session
secret; the server stores only the SHA-256 of that secret, so a leaked
sessions table cannot be replayed as tokens.
"""

import hashlib
import logging
import secrets
from datetime import datetime
from uuid import UUID

import jwt
from pydantic import ValidationError as PydanticValidationError

from auth.exceptions import InvalidTokenError
from auth.types import Role, TokenClaims
from utils.timezone import to_epoch_seconds

logger = logging.getLogger(__name__)

_REQUIRED_CLAIMS = ["sub", "email", "role", "sid", "iat", "exp"]


def new_session_secret() -> str:
    """32 random bytes, URL-safe."""
    return secrets.token_urlsafe(32)


def hash_token(secret: str) -> str:
    """SHA-256 hex digest of a session secret."""
    return hashlib.sha256(secret.encode("utf-8")).hexdigest()


class TokenSigner:
    """Issues and verifies session tokens with a shared secret key."""

    def __init__(self, secret_key: str, algorithm: str = "HS256"):
        if not secret_key:
            raise ValueError("Token signing key is required")
        self._secret_key = secret_key
        self._algorithm = algorithm

    def issue(
        self,
        user_id: UUID,
        email: str,
        role: Role,
        session_secret: str,
        issued_at: datetime,
        expires_at: datetime,
    ) -> str:
        payload = {
            "sub": str(user_id),
            "email": email,
            "role": role.value,
            "sid": session_secret,
            "iat": to_epoch_seconds(issued_at),
            "exp": to_epoch_seconds(expires_at),
        }
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def verify(self, raw_token: str, now: datetime) -> TokenClaims:
        """
        Check signature, structure and expiry.

        Expiry is strict: a token whose `exp` equals `now` is rejected.

        Raises:
            InvalidTokenError: On any failure
        """
        if not raw_token:
            raise InvalidTokenError()

        try:
            payload = jwt.decode(
                raw_token,
                self._secret_key,
                algorithms=[self._algorithm],
                # Expiry checked below against the injected clock
                options={"verify_exp": False, "require": _REQUIRED_CLAIMS},
            )
        except jwt.PyJWTError as e:
            logger.info("Token rejected: %s", e)
            raise InvalidTokenError() from e

        try:
            claims = TokenClaims.model_validate(payload)
        except PydanticValidationError as e:
            logger.info("Token rejected: malformed claims")
            raise InvalidTokenError() from e

        if to_epoch_seconds(now) >= claims.exp:
            raise InvalidTokenError("Token has expired")

        return claims
