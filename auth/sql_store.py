"""CredentialStore over the raw SQL client (PostgreSQL or SQLite)."""

from datetime import datetime
from typing import Any
from uuid import UUID

from auth.exceptions import DuplicateAccountError
from auth.types import Session, UserRecord
from clients.database import SQLClient
from core.exceptions import ConflictError
from utils.timezone import now_utc

_USER_FIELDS = """id, email, display_name, password_hash, role, is_active,
                  email_verified, created_at, updated_at, last_login_at"""

_SESSION_FIELDS = """id, user_id, token_hash, expires_at, is_active,
                     created_at, ip_address, user_agent"""

# Columns update_user may touch; keys are interpolated into SQL so this is a hard allow-list
_UPDATABLE_USER_COLUMNS = (
    "email",
    "display_name",
    "password_hash",
    "role",
    "is_active",
    "email_verified",
    "last_login_at",
)


def _user_from_row(row: dict) -> UserRecord:
    return UserRecord.model_validate(row)


def _session_from_row(row: dict) -> Session:
    return Session.model_validate(row)


class SqlCredentialStore:
    """Users and sessions with hand-written SQL."""

    def __init__(self, db: SQLClient):
        self._db = db

    def find_user_by_email(self, email: str) -> UserRecord | None:
        """Find user by email (case-insensitive)."""
        row = self._db.execute_single(
            f"SELECT {_USER_FIELDS} FROM auth_users WHERE email = %s",
            (email.strip().lower(),),
        )
        return _user_from_row(row) if row else None

    def get_user_by_id(self, user_id: UUID) -> UserRecord | None:
        row = self._db.execute_single(
            f"SELECT {_USER_FIELDS} FROM auth_users WHERE id = %s",
            (user_id,),
        )
        return _user_from_row(row) if row else None

    def list_users(self) -> list[UserRecord]:
        rows = self._db.execute(f"SELECT {_USER_FIELDS} FROM auth_users ORDER BY created_at")
        return [_user_from_row(row) for row in rows]

    def create_user(self, user: UserRecord) -> UserRecord:
        try:
            rows = self._db.execute_returning(
                f"""INSERT INTO auth_users ({_USER_FIELDS})
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                    RETURNING {_USER_FIELDS}""",
                (
                    user.id,
                    user.email.strip().lower(),
                    user.display_name,
                    user.password_hash,
                    user.role.value,
                    user.is_active,
                    user.email_verified,
                    user.created_at,
                    user.updated_at,
                    user.last_login_at,
                ),
            )
        except ConflictError as e:
            raise DuplicateAccountError() from e
        return _user_from_row(rows[0])

    def update_user(self, user_id: UUID, **fields: Any) -> UserRecord | None:
        unknown = set(fields) - set(_UPDATABLE_USER_COLUMNS)
        if unknown:
            raise ValueError(f"Unknown user fields: {', '.join(sorted(unknown))}")

        assignments = []
        params: list[Any] = []
        for name in _UPDATABLE_USER_COLUMNS:
            if name in fields:
                value = fields[name]
                if name == "role" and hasattr(value, "value"):
                    value = value.value
                assignments.append(f"{name} = %s")
                params.append(value)
        assignments.append("updated_at = %s")
        params.extend([now_utc(), user_id])

        rows = self._db.execute_returning(
            f"""UPDATE auth_users SET {', '.join(assignments)}
                WHERE id = %s
                RETURNING {_USER_FIELDS}""",
            tuple(params),
        )
        return _user_from_row(rows[0]) if rows else None

    def create_session(self, session: Session, supersede: bool) -> None:
        with self._db.transaction() as tx:
            if supersede:
                # Concurrent sign-ins for one user queue on the user row. SQLite
                # needs no row lock: its transactions take the write lock up front.
                if self._db.dialect == "postgresql":
                    tx.execute("SELECT id FROM auth_users WHERE id = %s FOR UPDATE", (session.user_id,))
                tx.execute(
                    "UPDATE auth_sessions SET is_active = %s WHERE user_id = %s AND is_active = %s",
                    (False, session.user_id, True),
                )
            tx.execute(
                f"""INSERT INTO auth_sessions ({_SESSION_FIELDS})
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s)""",
                (
                    session.id,
                    session.user_id,
                    session.token_hash,
                    session.expires_at,
                    session.is_active,
                    session.created_at,
                    session.ip_address,
                    session.user_agent,
                ),
            )

    def find_active_session(self, token_hash: str, now: datetime) -> Session | None:
        row = self._db.execute_single(
            f"""SELECT {_SESSION_FIELDS} FROM auth_sessions
                WHERE token_hash = %s AND is_active = %s AND expires_at > %s""",
            (token_hash, True, now),
        )
        return _session_from_row(row) if row else None

    def deactivate_sessions(self, user_id: UUID) -> int:
        rows = self._db.execute_returning(
            """UPDATE auth_sessions SET is_active = %s
               WHERE user_id = %s AND is_active = %s
               RETURNING id""",
            (False, user_id, True),
        )
        return len(rows)
