"""
Audit trail for CRM entity writes.

Each create, update and soft delete appends one row to audit_log naming the
entity, the acting user and what changed. Rows are never updated or removed.
The trail is shared by every user; it is not scoped to whoever made the
change.
"""

import json
from enum import Enum
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from pydantic import field_validator

from clients.database import SQLClient
from core.models.base import CRMModel
from utils.timezone import now_utc
from utils.user_context import get_current_user_id

# Bookkeeping columns that change on every write and say nothing useful
_UNTRACKED = frozenset({"updated_at", "updated_by"})

_COLUMNS = "id, user_id, entity_type, entity_id, action, changes, created_at"


class AuditAction(Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class AuditEntry(CRMModel):
    """One audit_log row."""

    id: UUID
    user_id: UUID | None
    entity_type: str
    entity_id: UUID
    action: AuditAction
    changes: dict[str, Any]
    created_at: datetime

    @field_validator("changes", mode="before")
    @classmethod
    def decode_changes(cls, value):
        # TEXT on SQLite, JSONB (already decoded) on PostgreSQL
        if isinstance(value, str):
            return json.loads(value)
        return value or {}


def compute_changes(
    old: dict[str, Any],
    new: dict[str, Any],
    exclude_fields: set[str] | None = None
) -> dict[str, dict[str, Any]]:
    """
    Field-level diff of two JSON-ready entity snapshots.

    Returns {field: {"old": ..., "new": ...}} for every field whose value
    differs. A field missing on one side counts as None there.
    """
    skip = _UNTRACKED if exclude_fields is None else exclude_fields
    return {
        key: {"old": old.get(key), "new": new.get(key)}
        for key in sorted(old.keys() | new.keys())
        if key not in skip and old.get(key) != new.get(key)
    }


class AuditLogger:
    """
    Writes and reads the audit trail.

    Callers pass snapshots produced by model_dump(mode="json"), so values are
    already JSON-compatible:
        CREATE  {"created": {...}}
        UPDATE  compute_changes(before, after)
        DELETE  {"deleted": {...}}
    """

    def __init__(self, db: SQLClient):
        self.db = db

    def log_change(
        self,
        entity_type: str,
        entity_id: UUID,
        action: AuditAction,
        changes: dict[str, Any],
        user_id: UUID | None = None
    ) -> AuditEntry:
        """
        Append an entry. The acting user defaults to the request identity.

        Raises:
            RuntimeError: No user_id given and no identity in context
        """
        entry = AuditEntry(
            id=uuid4(),
            user_id=user_id or get_current_user_id(),
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            changes=changes,
            created_at=now_utc(),
        )
        self.db.execute(
            f"INSERT INTO audit_log ({_COLUMNS}) VALUES (%s, %s, %s, %s, %s, %s, %s)",
            (
                entry.id,
                entry.user_id,
                entry.entity_type,
                entry.entity_id,
                entry.action.value,
                json.dumps(entry.changes),
                entry.created_at,
            )
        )
        return entry

    def get_entity_history(self, entity_type: str, entity_id: UUID) -> list[AuditEntry]:
        """Every entry for one entity, newest first."""
        rows = self.db.execute(
            f"""
            SELECT {_COLUMNS} FROM audit_log
            WHERE entity_type = %s AND entity_id = %s
            ORDER BY created_at DESC
            """,
            (entity_type, entity_id)
        )
        return [AuditEntry.model_validate(row) for row in rows]

