"""Security event trail for authentication.

Every event becomes one append-only row in security_events and one log line.
Passwords and tokens are never part of an event.
"""

import json
import logging
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from pydantic import field_validator

from clients.database import SQLClient
from core.models.base import CRMModel
from utils.timezone import now_utc

logger = logging.getLogger(__name__)

_COLUMNS = "id, event_type, email, user_id, ip_address, user_agent, details, created_at"


class SecurityEvent(Enum):
    USER_SIGNED_UP = "user_signed_up"
    SIGNIN_SUCCEEDED = "signin_succeeded"
    SIGNIN_FAILED = "signin_failed"
    SESSION_CREATED = "session_created"
    SESSION_REVOKED = "session_revoked"
    TOKEN_REJECTED = "token_rejected"
    RATE_LIMITED = "rate_limited"
    PASSWORD_CHANGED = "password_changed"
    USER_PROVISIONED = "user_provisioned"
    ROLE_CHANGED = "role_changed"
    USER_DEACTIVATED = "user_deactivated"
    USER_ACTIVATED = "user_activated"

    @property
    def is_failure(self) -> bool:
        return self in {SecurityEvent.SIGNIN_FAILED, SecurityEvent.TOKEN_REJECTED, SecurityEvent.RATE_LIMITED}


class SecurityRecord(CRMModel):
    """One security_events row."""

    id: UUID
    event_type: SecurityEvent
    email: str | None = None
    user_id: UUID | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    details: dict[str, Any] | None = None
    created_at: datetime

    @field_validator("details", mode="before")
    @classmethod
    def decode_details(cls, value):
        if isinstance(value, str):
            return json.loads(value)
        return value


class SecurityLogger:
    def __init__(self, db: SQLClient):
        self._db = db

    def log(
        self,
        event: SecurityEvent,
        email: str | None = None,
        user_id: UUID | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> SecurityRecord:
        """Record an event; failures are logged at WARNING, everything else at INFO."""
        record = SecurityRecord(
            id=uuid4(),
            event_type=event,
            email=email,
            user_id=user_id,
            ip_address=ip_address,
            user_agent=user_agent,
            details=details or None,
            created_at=now_utc(),
        )
        logger.log(
            logging.WARNING if event.is_failure else logging.INFO,
            "security event=%s email=%s user_id=%s ip=%s details=%s",
            event.value, email, user_id, ip_address, record.details,
        )
        self._db.execute(
            f"INSERT INTO security_events ({_COLUMNS}) VALUES (%s, %s, %s, %s, %s, %s, %s, %s)",
            (
                record.id,
                event.value,
                email,
                user_id,
                ip_address,
                user_agent,
                json.dumps(record.details) if record.details else None,
                record.created_at,
            ),
        )
        return record

    def events_for(
        self,
        email: str | None = None,
        event: SecurityEvent | None = None,
        limit: int = 100,
    ) -> list[SecurityRecord]:
        """Most recent events, newest first, optionally narrowed by email and type."""
        clauses = {"email": email, "event_type": event.value if event else None}
        active = {column: value for column, value in clauses.items() if value is not None}
        where = " AND ".join(f"{column} = %s" for column in active) or "1=1"

        rows = self._db.execute(
            f"SELECT {_COLUMNS} FROM security_events WHERE {where} ORDER BY created_at DESC LIMIT %s",
            (*active.values(), limit),
        )
        return [SecurityRecord.model_validate(row) for row in rows]
