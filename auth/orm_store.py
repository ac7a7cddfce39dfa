"""CredentialStore over SQLAlchemy 2.0 ORM sessions."""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy import exc as sa_exc
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from auth.exceptions import DuplicateAccountError
from auth.orm_models import SessionRow, UserRow
from auth.types import Session, UserRecord
from core.exceptions import ConflictError, StorageUnavailableError
from utils.timezone import now_utc, to_utc

logger = logging.getLogger(__name__)

_USER_COLUMNS = {
    "email",
    "display_name",
    "password_hash",
    "role",
    "is_active",
    "email_verified",
    "last_login_at",
}


def _to_record(row: UserRow) -> UserRecord:
    return UserRecord(
        id=UUID(row.id),
        email=row.email,
        display_name=row.display_name,
        password_hash=row.password_hash,
        role=row.role,
        is_active=row.is_active,
        email_verified=row.email_verified,
        created_at=row.created_at,
        updated_at=row.updated_at,
        last_login_at=row.last_login_at,
    )


def _lock_user(user_id: UUID):
    """Row lock on the owning user; the SQLite dialect renders no FOR UPDATE."""
    return select(UserRow.id).where(UserRow.id == str(user_id)).with_for_update()


def _to_session(row: SessionRow) -> Session:
    return Session(
        id=UUID(row.id),
        user_id=UUID(row.user_id),
        token_hash=row.token_hash,
        expires_at=row.expires_at,
        is_active=row.is_active,
        created_at=row.created_at,
        ip_address=row.ip_address,
        user_agent=row.user_agent,
    )


class OrmCredentialStore:
    """Users and sessions through the SQLAlchemy mapping."""

    def __init__(self, engine: Engine):
        self._engine = engine
        self._sessions = sessionmaker(engine, expire_on_commit=False)

    @contextmanager
    def _unit_of_work(self):
        """ORM session that commits on success and translates driver errors."""
        try:
            with self._sessions.begin() as db:
                yield db
        except sa_exc.IntegrityError as e:
            logger.warning("Integrity violation: %s", e.orig)
            raise ConflictError(str(e.orig)) from e
        except (sa_exc.OperationalError, sa_exc.InterfaceError, sa_exc.TimeoutError, sa_exc.DisconnectionError) as e:
            logger.error("ORM store unavailable: %s", e)
            raise StorageUnavailableError() from e

    def find_user_by_email(self, email: str) -> UserRecord | None:
        with self._unit_of_work() as db:
            row = db.scalar(select(UserRow).where(UserRow.email == email.strip().lower()))
            return _to_record(row) if row else None

    def get_user_by_id(self, user_id: UUID) -> UserRecord | None:
        with self._unit_of_work() as db:
            row = db.get(UserRow, str(user_id))
            return _to_record(row) if row else None

    def list_users(self) -> list[UserRecord]:
        with self._unit_of_work() as db:
            rows = db.scalars(select(UserRow).order_by(UserRow.created_at)).all()
            return [_to_record(row) for row in rows]

    def create_user(self, user: UserRecord) -> UserRecord:
        row = UserRow(
            id=str(user.id),
            email=user.email.strip().lower(),
            display_name=user.display_name,
            password_hash=user.password_hash,
            role=user.role.value,
            is_active=user.is_active,
            email_verified=user.email_verified,
            created_at=user.created_at,
            updated_at=user.updated_at,
            last_login_at=user.last_login_at,
        )
        try:
            with self._unit_of_work() as db:
                db.add(row)
        except ConflictError as e:
            raise DuplicateAccountError() from e
        return _to_record(row)

    def update_user(self, user_id: UUID, **fields: Any) -> UserRecord | None:
        unknown = set(fields) - _USER_COLUMNS
        if unknown:
            raise ValueError(f"Unknown user fields: {', '.join(sorted(unknown))}")

        with self._unit_of_work() as db:
            row = db.get(UserRow, str(user_id))
            if row is None:
                return None
            for name, value in fields.items():
                if name == "role" and hasattr(value, "value"):
                    value = value.value
                setattr(row, name, value)
            row.updated_at = now_utc()
            db.flush()
            return _to_record(row)

    def create_session(self, session: Session, supersede: bool) -> None:
        with self._unit_of_work() as db:
            if supersede:
                db.execute(_lock_user(session.user_id))
                db.execute(
                    update(SessionRow)
                    .where(SessionRow.user_id == str(session.user_id), SessionRow.is_active.is_(True))
                    .values(is_active=False)
                )
            db.add(
                SessionRow(
                    id=str(session.id),
                    user_id=str(session.user_id),
                    token_hash=session.token_hash,
                    expires_at=session.expires_at,
                    is_active=session.is_active,
                    created_at=session.created_at,
                    ip_address=session.ip_address,
                    user_agent=session.user_agent,
                )
            )

    def find_active_session(self, token_hash: str, now: datetime) -> Session | None:
        with self._unit_of_work() as db:
            row = db.scalar(
                select(SessionRow).where(
                    SessionRow.token_hash == token_hash,
                    SessionRow.is_active.is_(True),
                    SessionRow.expires_at > to_utc(now),
                )
            )
            return _to_session(row) if row else None

    def deactivate_sessions(self, user_id: UUID) -> int:
        with self._unit_of_work() as db:
            result = db.execute(
                update(SessionRow)
                .where(SessionRow.user_id == str(user_id), SessionRow.is_active.is_(True))
                .values(is_active=False)
            )
            return result.rowcount
