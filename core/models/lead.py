"""Lead domain models."""

from enum import Enum

from pydantic import EmailStr, Field

from core.models.base import CRMModel, EntityRecord


class LeadStatus(str, Enum):
    """Lead lifecycle status."""

    NEW = "New"
    WORKING = "Working"
    QUALIFIED = "Qualified"
    UNQUALIFIED = "Unqualified"


class LeadSource(str, Enum):
    """How the lead was acquired."""

    WEBSITE = "Website"
    REFERRAL = "Referral"
    TRADE_SHOW = "Trade Show"
    COLD_CALL = "Cold Call"
    EMAIL = "Email"
    PARTNER = "Partner"


class LeadRating(str, Enum):
    HOT = "Hot"
    WARM = "Warm"
    COLD = "Cold"


class LeadCreate(CRMModel):
    """Data required to create a lead."""

    first_name: str = Field(..., min_length=1, max_length=255)
    last_name: str = Field(..., min_length=1, max_length=255)
    company: str = Field(..., min_length=1, max_length=255)
    title: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=50)
    email: EmailStr | None = None
    lead_source: LeadSource | None = None
    status: LeadStatus = LeadStatus.NEW
    rating: LeadRating | None = None
    owner: str | None = Field(None, max_length=255)


class LeadUpdate(CRMModel):
    """Data that can be updated on a lead. All fields optional."""

    first_name: str | None = Field(None, min_length=1, max_length=255)
    last_name: str | None = Field(None, min_length=1, max_length=255)
    company: str | None = Field(None, min_length=1, max_length=255)
    title: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=50)
    email: EmailStr | None = None
    lead_source: LeadSource | None = None
    status: LeadStatus | None = None
    rating: LeadRating | None = None
    owner: str | None = Field(None, max_length=255)


class Lead(EntityRecord):
    """Full lead entity as stored."""

    first_name: str
    last_name: str
    company: str
    title: str | None = None
    phone: str | None = None
    email: str | None = None
    lead_source: str | None = None
    status: str | None = None
    rating: str | None = None
    owner: str | None = None
