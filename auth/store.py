"""
Credential and session persistence.

Two implementations of CredentialStore exist: OrmCredentialStore (SQLAlchemy)
and SqlCredentialStore (raw SQL client). FallbackCredentialStore puts the raw
SQL store behind the ORM store so an ORM-level outage degrades to the simpler
path instead of failing sign-in.
"""

import logging
from datetime import datetime
from typing import Any, Protocol
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from auth.types import Session, UserRecord
from clients.database import SQLClient, create_orm_engine
from core.exceptions import StorageUnavailableError

logger = logging.getLogger(__name__)


class CredentialStore(Protocol):
    """Persistence operations the auth service needs."""

    def find_user_by_email(self, email: str) -> UserRecord | None: ...

    def get_user_by_id(self, user_id: UUID) -> UserRecord | None: ...

    def list_users(self) -> list[UserRecord]: ...

    def create_user(self, user: UserRecord) -> UserRecord:
        """Insert a user. Raises DuplicateAccountError if the email is taken."""
        ...

    def update_user(self, user_id: UUID, **fields: Any) -> UserRecord | None:
        """Update the given columns plus updated_at. None if the user is missing."""
        ...

    def create_session(self, session: Session, supersede: bool) -> None:
        """
        Insert a session. With supersede, the user's other active sessions
        are deactivated in the same transaction.
        """
        ...

    def find_active_session(self, token_hash: str, now: datetime) -> Session | None:
        """The session for this hash if it is active and now < expires_at."""
        ...

    def deactivate_sessions(self, user_id: UUID) -> int:
        """Deactivate every active session of the user. Returns how many."""
        ...


class FallbackCredentialStore:
    """
    Tries the primary store; on StorageUnavailableError retries the same call
    once on the secondary.

    Only storage outages fall through. Domain errors (duplicate account)
    propagate from whichever store raised them.
    """

    def __init__(self, primary: CredentialStore, secondary: CredentialStore):
        self._primary = primary
        self._secondary = secondary

    def _call(self, method: str, *args, **kwargs):
        try:
            return getattr(self._primary, method)(*args, **kwargs)
        except StorageUnavailableError as e:
            logger.warning("Primary credential store failed on %s, using fallback: %s", method, e)
        try:
            return getattr(self._secondary, method)(*args, **kwargs)
        except StorageUnavailableError:
            logger.error("Fallback credential store also failed on %s", method)
            raise

    def find_user_by_email(self, email: str) -> UserRecord | None:
        return self._call("find_user_by_email", email)

    def get_user_by_id(self, user_id: UUID) -> UserRecord | None:
        return self._call("get_user_by_id", user_id)

    def list_users(self) -> list[UserRecord]:
        return self._call("list_users")

    def create_user(self, user: UserRecord) -> UserRecord:
        return self._call("create_user", user)

    def update_user(self, user_id: UUID, **fields: Any) -> UserRecord | None:
        return self._call("update_user", user_id, **fields)

    def create_session(self, session: Session, supersede: bool) -> None:
        return self._call("create_session", session, supersede)

    def find_active_session(self, token_hash: str, now: datetime) -> Session | None:
        return self._call("find_active_session", token_hash, now)

    def deactivate_sessions(self, user_id: UUID) -> int:
        return self._call("deactivate_sessions", user_id)


def build_credential_store(database_url: str, sql_client: SQLClient, timeout_seconds: int = 10) -> CredentialStore:
    """
    ORM store backed by the raw SQL store, or the raw SQL store alone when
    the ORM engine cannot be built.
    """
    from auth.orm_store import OrmCredentialStore
    from auth.sql_store import SqlCredentialStore

    secondary = SqlCredentialStore(sql_client)
    try:
        primary = OrmCredentialStore(create_orm_engine(database_url, timeout_seconds=timeout_seconds))
    except (SQLAlchemyError, ImportError) as e:
        logger.warning("ORM credential store unavailable, using raw SQL store only: %s", e)
        return secondary
    return FallbackCredentialStore(primary, secondary)
