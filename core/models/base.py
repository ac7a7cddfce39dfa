"""Shared model configuration for CRM entities."""

from datetime import datetime, timezone
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CRMModel(BaseModel):
    """
    Base for CRM payloads and entities.

    The browser UI speaks camelCase; services and SQL use snake_case.
    Both spellings are accepted on input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        str_strip_whitespace=True,
    )


class EntityRecord(CRMModel):
    """Columns every CRM table carries."""

    id: UUID
    created_by: UUID | None = None
    updated_by: UUID | None = None
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None


def assume_utc(value: datetime | None) -> datetime | None:
    """Naive datetimes from the UI are taken to be UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
