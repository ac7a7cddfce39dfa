"""Contact domain models."""

from enum import Enum

from pydantic import EmailStr, Field

from core.models.base import CRMModel, EntityRecord


class ContactSource(str, Enum):
    """How the contact was found."""

    DATA_RESEARCH = "Data Research"
    REFERRAL = "Referral"
    EVENT = "Event"


class ContactStatus(str, Enum):
    SUSPECT = "Suspect"
    PROSPECT = "Prospect"
    ACTIVE_DEAL = "Active Deal"
    DO_NOT_CALL = "Do Not Call"


class ContactCreate(CRMModel):
    """Data required to create a contact."""

    first_name: str = Field(..., min_length=1, max_length=255)
    last_name: str = Field(..., min_length=1, max_length=255)
    title: str | None = Field(None, max_length=255)
    associated_account: str | None = Field(None, max_length=255)
    email_address: EmailStr | None = None
    desk_phone: str | None = Field(None, max_length=50)
    mobile_phone: str | None = Field(None, max_length=50)
    city: str | None = Field(None, max_length=100)
    state: str | None = Field(None, max_length=100)
    country: str | None = Field(None, max_length=100)
    time_zone: str | None = Field(None, max_length=50)
    source: ContactSource | None = None
    owner: str | None = Field(None, max_length=255)
    status: ContactStatus | None = None


class ContactUpdate(CRMModel):
    """Data that can be updated on a contact. All fields optional."""

    first_name: str | None = Field(None, min_length=1, max_length=255)
    last_name: str | None = Field(None, min_length=1, max_length=255)
    title: str | None = Field(None, max_length=255)
    associated_account: str | None = Field(None, max_length=255)
    email_address: EmailStr | None = None
    desk_phone: str | None = Field(None, max_length=50)
    mobile_phone: str | None = Field(None, max_length=50)
    city: str | None = Field(None, max_length=100)
    state: str | None = Field(None, max_length=100)
    country: str | None = Field(None, max_length=100)
    time_zone: str | None = Field(None, max_length=50)
    source: ContactSource | None = None
    owner: str | None = Field(None, max_length=255)
    status: ContactStatus | None = None


class Contact(EntityRecord):
    """Full contact entity as stored."""

    first_name: str
    last_name: str
    title: str | None = None
    associated_account: str | None = None
    email_address: str | None = None
    desk_phone: str | None = None
    mobile_phone: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    time_zone: str | None = None
    source: str | None = None
    owner: str | None = None
    status: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
