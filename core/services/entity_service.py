"""
CRUD service shared by every CRM entity.

Each entity is described by an EntityDefinition (table, models, searchable
and filterable columns). Rows are soft-deleted, attributed to the current
user, and every mutation is written to the audit trail.
"""

import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel

from clients.database import SQLClient
from core.audit import AuditAction, AuditEntry, AuditLogger, compute_changes
from core.exceptions import NotFoundError, ValidationError
from utils.timezone import now_utc
from utils.user_context import get_current_user_id

logger = logging.getLogger(__name__)

_SORT_DIRECTIONS = {"asc": "ASC", "desc": "DESC"}


@dataclass(frozen=True)
class EntityDefinition:
    """How one CRM entity maps onto its table."""

    name: str
    table: str
    model: type[BaseModel]
    create_model: type[BaseModel]
    update_model: type[BaseModel]
    required: tuple[str, ...]
    searchable: tuple[str, ...]
    filterable: tuple[str, ...] = ()
    sortable: tuple[str, ...] = field(default=("created_at", "updated_at"))

    @property
    def columns(self) -> tuple[str, ...]:
        """Writable business columns, in model order."""
        return tuple(self.create_model.model_fields)


@dataclass
class Page:
    """One page of a list query."""

    items: list[Any]
    total: int
    page: int
    limit: int


def _like_pattern(query: str) -> str:
    escaped = query.replace("!", "!!").replace("%", "!%").replace("_", "!_")
    return f"%{escaped}%"


def _db_value(value: Any) -> Any:
    # Enums are stored by value
    return value.value if isinstance(value, Enum) else value


class EntityService:
    """Service for one CRM entity's operations."""

    def __init__(self, db: SQLClient, audit: AuditLogger, definition: EntityDefinition):
        self.db = db
        self.audit = audit
        self.definition = definition

    @property
    def _table(self) -> str:
        return self.definition.table

    def _to_model(self, row: dict[str, Any]):
        return self.definition.model.model_validate(row)

    def create(self, data: BaseModel):
        """
        Create a new entity attributed to the current user.

        Args:
            data: Instance of the definition's create model

        Returns:
            Created entity
        """
        user_id = get_current_user_id()
        entity_id = uuid4()
        now = now_utc()

        values = data.model_dump()
        columns = list(self.definition.columns)
        params = [_db_value(values.get(c)) for c in columns]

        all_columns = ["id", *columns, "created_by", "updated_by", "created_at", "updated_at"]
        placeholders = ", ".join(["%s"] * len(all_columns))

        row = self.db.execute_returning(
            f"""
            INSERT INTO {self._table} ({', '.join(all_columns)})
            VALUES ({placeholders})
            RETURNING *
            """,
            (entity_id, *params, user_id, user_id, now, now)
        )[0]

        entity = self._to_model(row)

        self.audit.log_change(
            entity_type=self.definition.name,
            entity_id=entity.id,
            action=AuditAction.CREATE,
            changes={"created": data.model_dump(mode="json", exclude_none=True)},
            user_id=user_id,
        )
        logger.info("Created %s %s", self.definition.name, entity.id)
        return entity

    def get_by_id(self, entity_id: UUID):
        """Entity if found and not deleted, None otherwise."""
        row = self.db.execute_single(
            f"SELECT * FROM {self._table} WHERE id = %s AND deleted_at IS NULL",
            (entity_id,)
        )
        return self._to_model(row) if row else None

    def get(self, entity_id: UUID):
        """
        Raises:
            NotFoundError: If missing or soft-deleted
        """
        entity = self.get_by_id(entity_id)
        if entity is None:
            raise NotFoundError(f"{self.definition.name.capitalize()} not found")
        return entity

    def update(self, entity_id: UUID, data: BaseModel):
        """
        Update the fields present in the request body.

        A field sent as null clears it, except required fields, which
        cannot be cleared.

        Raises:
            NotFoundError: If entity not found
            ValidationError: If a required field is cleared
        """
        current = self.get(entity_id)

        updates = {
            k: v for k, v in data.model_dump(exclude_unset=True).items()
            if k in self.definition.columns
        }
        for name in self.definition.required:
            if name in updates and updates[name] is None:
                raise ValidationError(f"{name} cannot be empty")
        if not updates:
            return current

        user_id = get_current_user_id()
        set_parts = [f"{name} = %s" for name in updates]
        params = [_db_value(v) for v in updates.values()]
        set_parts += ["updated_by = %s", "updated_at = %s"]
        params += [user_id, now_utc(), entity_id]

        row = self.db.execute_returning(
            f"""
            UPDATE {self._table}
            SET {', '.join(set_parts)}
            WHERE id = %s AND deleted_at IS NULL
            RETURNING *
            """,
            tuple(params)
        )
        if not row:
            raise NotFoundError(f"{self.definition.name.capitalize()} not found")

        updated = self._to_model(row[0])

        changes = compute_changes(
            current.model_dump(mode="json"),
            updated.model_dump(mode="json")
        )
        if changes:
            self.audit.log_change(
                entity_type=self.definition.name,
                entity_id=entity_id,
                action=AuditAction.UPDATE,
                changes=changes,
                user_id=user_id,
            )

        return updated

    def delete(self, entity_id: UUID) -> None:
        """
        Soft delete an entity.

        Raises:
            NotFoundError: If entity not found (or already deleted)
        """
        current = self.get(entity_id)
        user_id = get_current_user_id()
        now = now_utc()

        self.db.execute_returning(
            f"""
            UPDATE {self._table}
            SET deleted_at = %s, updated_at = %s, updated_by = %s
            WHERE id = %s
            RETURNING id
            """,
            (now, now, user_id, entity_id)
        )

        self.audit.log_change(
            entity_type=self.definition.name,
            entity_id=entity_id,
            action=AuditAction.DELETE,
            changes={"deleted": current.model_dump(mode="json")},
            user_id=user_id,
        )
        logger.info("Deleted %s %s", self.definition.name, entity_id)

    def history(self, entity_id: UUID) -> list[AuditEntry]:
        """Audit entries for one entity, newest first. Soft-deleted entities keep theirs."""
        return self.audit.get_entity_history(self.definition.name, entity_id)

    def list_all(
        self,
        page: int = 1,
        limit: int = 50,
        search: str | None = None,
        filters: dict[str, str] | None = None,
        sort: str = "created_at",
        order: str = "desc",
    ) -> Page:
        """
        One page of live entities.

        Args:
            page: 1-based page number
            limit: Page size
            search: Case-insensitive substring matched against searchable columns
            filters: Exact matches on filterable columns
            sort: A sortable column
            order: "asc" or "desc"

        Raises:
            ValidationError: Unknown filter/sort column or bad paging values
        """
        if page < 1 or limit < 1:
            raise ValidationError("page and limit must be positive")
        if sort not in self.definition.sortable:
            raise ValidationError(
                f"Cannot sort by '{sort}'. Valid: {', '.join(self.definition.sortable)}"
            )
        direction = _SORT_DIRECTIONS.get(order.lower())
        if direction is None:
            raise ValidationError("order must be 'asc' or 'desc'")

        conditions = ["deleted_at IS NULL"]
        params: list[Any] = []

        for name, value in (filters or {}).items():
            if name not in self.definition.filterable:
                raise ValidationError(
                    f"Cannot filter by '{name}'. Valid: {', '.join(self.definition.filterable)}"
                )
            conditions.append(f"{name} = %s")
            params.append(value)

        if search:
            pattern = _like_pattern(search.strip())
            matches = [f"lower({c}) LIKE lower(%s) ESCAPE '!'" for c in self.definition.searchable]
            conditions.append(f"({' OR '.join(matches)})")
            params.extend([pattern] * len(matches))

        where = " AND ".join(conditions)

        total = self.db.execute_scalar(
            f"SELECT COUNT(*) AS total FROM {self._table} WHERE {where}",
            tuple(params)
        ) or 0

        rows = self.db.execute(
            f"""
            SELECT * FROM {self._table}
            WHERE {where}
            ORDER BY {sort} {direction}, id {direction}
            LIMIT %s OFFSET %s
            """,
            (*params, limit, (page - 1) * limit)
        )

        return Page(
            items=[self._to_model(row) for row in rows],
            total=int(total),
            page=page,
            limit=limit,
        )
