"""Authentication service - password sign-in, signed session tokens, revocable sessions."""

import logging
from datetime import datetime, timedelta
from typing import Callable
from uuid import UUID, uuid4

from auth.config import AuthConfig
from auth.exceptions import (
    DuplicateAccountError,
    InvalidCredentialsError,
    PermissionDeniedError,
    RateLimitedError,
    SessionRevokedError,
)
from auth.passwords import burn_verify, generate_password, hash_password, verify_password
from auth.rate_limiter import RateLimiter
from auth.roles import RolePolicy
from auth.security_logger import SecurityEvent, SecurityLogger
from auth.store import CredentialStore
from auth.tokens import TokenSigner, hash_token, new_session_secret
from auth.types import AuthResult, ProvisionedUser, Role, Session, TokenClaims, User, UserRecord
from clients.email_client import EmailGatewayClient, EmailGatewayError
from core.exceptions import NotFoundError, ValidationError
from utils.timezone import now_utc
from utils.user_context import Identity

logger = logging.getLogger(__name__)


class AuthService:
    """Orchestrates password authentication and session lifecycle.

    Handles:
    - Sign-up and sign-in (single active session per user)
    - Token validation against the stored session
    - Sign-out and password change (both revoke sessions)
    - Administrator user management
    """

    def __init__(
        self,
        config: AuthConfig,
        store: CredentialStore,
        signer: TokenSigner,
        security_logger: SecurityLogger,
        rate_limiter: RateLimiter | None = None,
        email_client: EmailGatewayClient | None = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._config = config
        self._store = store
        self._signer = signer
        self._security_logger = security_logger
        self._rate_limiter = rate_limiter
        self._email_client = email_client
        self._clock = clock
        self._role_policy = RolePolicy(config.admin_emails, config.legacy_admin_email_match)

    # Helpers

    def _check_password_strength(self, password: str) -> None:
        if len(password) < self._config.min_password_length:
            raise ValidationError(
                f"Password must be at least {self._config.min_password_length} characters"
            )

    def _start_session(
        self,
        user: UserRecord,
        ip_address: str | None,
        user_agent: str | None,
    ) -> AuthResult:
        """Persist a new session for the user and sign a token for it."""
        now = self._clock()
        # Whole seconds so the token exp and stored expiry are the same instant
        expires_at = (now + timedelta(days=self._config.session_expiry_days)).replace(microsecond=0)
        secret = new_session_secret()

        session = Session(
            id=uuid4(),
            user_id=user.id,
            token_hash=hash_token(secret),
            expires_at=expires_at,
            is_active=True,
            created_at=now,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        self._store.create_session(session, supersede=self._config.single_session)

        updated = self._store.update_user(user.id, last_login_at=now) or user
        token = self._signer.issue(
            user_id=user.id,
            email=user.email,
            role=user.role,
            session_secret=secret,
            issued_at=now,
            expires_at=expires_at,
        )

        self._security_logger.log(
            SecurityEvent.SESSION_CREATED,
            email=user.email,
            user_id=user.id,
            ip_address=ip_address,
            user_agent=user_agent,
            details={"session_id": str(session.id), "superseding": self._config.single_session},
        )
        return AuthResult(user=updated.to_public(), token=token, expires_at=expires_at)

    def _notify(self, send: Callable[[], None], what: str) -> None:
        """Send a notification email; failures are logged, never raised."""
        if self._email_client is None:
            return
        try:
            send()
        except EmailGatewayError as e:
            logger.warning("Could not send %s email: %s", what, e)

    def _require_user(self, user_id: UUID) -> UserRecord:
        record = self._store.get_user_by_id(user_id)
        if record is None:
            raise NotFoundError("User not found")
        return record

    def _require_admin(self, actor: Identity) -> None:
        if not actor.is_admin:
            raise PermissionDeniedError()

    # Account flows

    def sign_up(
        self,
        email: str,
        password: str,
        display_name: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuthResult:
        """Register a new account and sign it in.

        Raises:
            DuplicateAccountError: If the email is already registered.
            ValidationError: If the password is too short.
        """
        email = email.strip().lower()
        display_name = display_name.strip()
        if not display_name:
            raise ValidationError("Display name is required")
        self._check_password_strength(password)

        if self._store.find_user_by_email(email) is not None:
            raise DuplicateAccountError()

        now = self._clock()
        role = self._role_policy.role_for(email)
        user = self._store.create_user(
            UserRecord(
                id=uuid4(),
                email=email,
                display_name=display_name,
                password_hash=hash_password(password, rounds=self._config.bcrypt_rounds),
                role=role,
                is_active=True,
                email_verified=True,
                created_at=now,
                updated_at=now,
            )
        )

        self._security_logger.log(
            SecurityEvent.USER_SIGNED_UP,
            email=email,
            user_id=user.id,
            ip_address=ip_address,
            user_agent=user_agent,
            details={"role": role.value},
        )

        self._notify(
            lambda: self._email_client.send_welcome(email, display_name, self._config.app_base_url),
            "welcome",
        )
        return self._start_session(user, ip_address, user_agent)

    def sign_in(
        self,
        email: str,
        password: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuthResult:
        """Check credentials and issue a session token.

        Flow:
        1. Per-email rate limit (when configured)
        2. Look up user; unknown email still pays for a bcrypt check
        3. Verify password, then the active flag
        4. Supersede prior sessions and store the new one atomically
        5. Best-effort login notification

        Raises:
            InvalidCredentialsError: Unknown email, wrong password, or inactive account.
            RateLimitedError: If too many attempts for this email.
        """
        email = email.strip().lower()

        if self._rate_limiter is not None:
            try:
                self._rate_limiter.record_attempt(email)
            except RateLimitedError:
                self._security_logger.log(
                    SecurityEvent.RATE_LIMITED,
                    email=email,
                    ip_address=ip_address,
                    user_agent=user_agent,
                )
                raise

        user = self._store.find_user_by_email(email)

        if user is None:
            burn_verify(password)
            reason = "unknown_email"
        elif not verify_password(password, user.password_hash):
            reason = "wrong_password"
        elif not user.is_active:
            reason = "user_inactive"
        else:
            reason = None

        if reason is not None:
            self._security_logger.log(
                SecurityEvent.SIGNIN_FAILED,
                email=email,
                user_id=user.id if user else None,
                ip_address=ip_address,
                user_agent=user_agent,
                details={"reason": reason},
            )
            raise InvalidCredentialsError()

        if self._rate_limiter is not None:
            self._rate_limiter.clear(email)

        result = self._start_session(user, ip_address, user_agent)

        self._security_logger.log(
            SecurityEvent.SIGNIN_SUCCEEDED,
            email=email,
            user_id=user.id,
            ip_address=ip_address,
            user_agent=user_agent,
        )

        self._notify(
            lambda: self._email_client.send_login_notification(
                email=email,
                display_name=user.display_name,
                ip_address=ip_address,
                user_agent=user_agent,
                signed_in_at=self._clock(),
            ),
            "login notification",
        )
        return result

    def validate_token(self, raw_token: str) -> TokenClaims:
        """Verify a token and the server-side session behind it.

        Raises:
            InvalidTokenError: Bad signature, missing claims, or past exp.
            SessionRevokedError: Session signed out, superseded, or expired.
        """
        now = self._clock()
        claims = self._signer.verify(raw_token, now)

        session = self._store.find_active_session(hash_token(claims.sid), now)
        if session is None or session.user_id != claims.sub:
            self._security_logger.log(
                SecurityEvent.TOKEN_REJECTED,
                email=claims.email,
                user_id=claims.sub,
                details={"reason": "session_inactive"},
            )
            raise SessionRevokedError()
        return claims

    def identity_for(self, raw_token: str) -> Identity:
        """validate_token, reduced to what request handlers need."""
        claims = self.validate_token(raw_token)
        return Identity(user_id=claims.sub, email=claims.email, role=claims.role.value)

    def sign_out(self, user_id: UUID, ip_address: str | None = None) -> None:
        """Deactivate every active session of the user. Idempotent."""
        count = self._store.deactivate_sessions(user_id)
        self._security_logger.log(
            SecurityEvent.SESSION_REVOKED,
            user_id=user_id,
            ip_address=ip_address,
            details={"reason": "sign_out", "sessions": count},
        )

    def get_user(self, user_id: UUID) -> User:
        """Raises NotFoundError if the user does not exist."""
        return self._require_user(user_id).to_public()

    def change_password(self, user_id: UUID, current_password: str, new_password: str) -> None:
        """Replace the password and revoke all sessions.

        Raises:
            InvalidCredentialsError: If current_password is wrong.
            ValidationError: If new_password is too short.
        """
        user = self._require_user(user_id)
        if not verify_password(current_password, user.password_hash):
            self._security_logger.log(
                SecurityEvent.SIGNIN_FAILED,
                email=user.email,
                user_id=user.id,
                details={"reason": "wrong_current_password"},
            )
            raise InvalidCredentialsError("Current password is incorrect")
        self._check_password_strength(new_password)

        self._store.update_user(
            user_id, password_hash=hash_password(new_password, rounds=self._config.bcrypt_rounds)
        )
        count = self._store.deactivate_sessions(user_id)
        self._security_logger.log(
            SecurityEvent.PASSWORD_CHANGED,
            email=user.email,
            user_id=user_id,
            details={"sessions_revoked": count},
        )

    # Administration

    def list_users(self, actor: Identity) -> list[User]:
        self._require_admin(actor)
        return [record.to_public() for record in self._store.list_users()]

    def provision_user(
        self,
        actor: Identity,
        email: str,
        display_name: str,
        role: Role | None = None,
        password: str | None = None,
    ) -> ProvisionedUser:
        """Create an account on someone's behalf.

        When no password is given a random one is generated and returned
        once in `initial_password`.
        """
        self._require_admin(actor)
        email = email.strip().lower()

        generated = None
        if password:
            self._check_password_strength(password)
        else:
            generated = password = generate_password()

        if self._store.find_user_by_email(email) is not None:
            raise DuplicateAccountError()

        now = self._clock()
        role = role or self._role_policy.role_for(email)
        record = self._store.create_user(
            UserRecord(
                id=uuid4(),
                email=email,
                display_name=display_name.strip(),
                password_hash=hash_password(password, rounds=self._config.bcrypt_rounds),
                role=role,
                is_active=True,
                email_verified=False,
                created_at=now,
                updated_at=now,
            )
        )
        self._security_logger.log(
            SecurityEvent.USER_PROVISIONED,
            email=email,
            user_id=record.id,
            details={"by": str(actor.user_id), "role": role.value},
        )
        return ProvisionedUser(user=record.to_public(), initial_password=generated)

    def set_role(self, actor: Identity, user_id: UUID, role: Role) -> User:
        self._require_admin(actor)
        if user_id == actor.user_id and role is not Role.ADMIN:
            raise ValidationError("Administrators cannot remove their own admin role")

        previous = self._require_user(user_id)
        updated = self._store.update_user(user_id, role=role)
        if updated is None:
            raise NotFoundError("User not found")

        details = {"by": str(actor.user_id), "from": previous.role.value, "to": role.value}
        # Tokens carry the role claim, so outstanding ones must not outlive the change
        if previous.role is not role:
            details["sessions_revoked"] = self._store.deactivate_sessions(user_id)

        self._security_logger.log(
            SecurityEvent.ROLE_CHANGED,
            email=updated.email,
            user_id=user_id,
            details=details,
        )
        return updated.to_public()

    def set_active(self, actor: Identity, user_id: UUID, active: bool) -> User:
        """Activate or deactivate an account. Deactivation revokes its sessions."""
        self._require_admin(actor)
        if user_id == actor.user_id and not active:
            raise ValidationError("Administrators cannot deactivate themselves")

        updated = self._store.update_user(user_id, is_active=active)
        if updated is None:
            raise NotFoundError("User not found")

        details = {"by": str(actor.user_id)}
        if not active:
            details["sessions_revoked"] = self._store.deactivate_sessions(user_id)

        self._security_logger.log(
            SecurityEvent.USER_ACTIVATED if active else SecurityEvent.USER_DEACTIVATED,
            email=updated.email,
            user_id=user_id,
            details=details,
        )
        return updated.to_public()
