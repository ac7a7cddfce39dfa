"""Account (company) domain models."""

from enum import Enum

from pydantic import Field

from core.models.base import CRMModel, EntityRecord


class AccountRating(str, Enum):
    PLATINUM = "Platinum (Must Have)"
    GOLD = "Gold (High Priority)"
    SILVER = "Silver (Medium Priority)"
    BRONZE = "Bronze (Low Priority)"


class Geo(str, Enum):
    """Sales regions."""

    AMERICAS = "Americas"
    INDIA = "India"
    PHILIPPINES = "Philippines"
    EMEA = "EMEA"
    ANZ = "ANZ"


class AccountCreate(CRMModel):
    """Data required to create an account."""

    account_name: str = Field(..., min_length=1, max_length=255)
    account_rating: AccountRating | None = None
    account_owner: str | None = Field(None, max_length=255)
    status: str | None = Field(None, max_length=50)
    industry: str | None = Field(None, max_length=255)
    revenue: str | None = Field(None, max_length=100)
    number_of_employees: str | None = Field(None, max_length=50)
    address_line1: str | None = Field(None, max_length=255)
    address_line2: str | None = Field(None, max_length=255)
    city: str | None = Field(None, max_length=100)
    state: str | None = Field(None, max_length=100)
    country: str | None = Field(None, max_length=100)
    zip_post_code: str | None = Field(None, max_length=20)
    time_zone: str | None = Field(None, max_length=50)
    board_number: str | None = Field(None, max_length=50)
    website: str | None = Field(None, max_length=255)
    geo: Geo | None = None


class AccountUpdate(CRMModel):
    """Data that can be updated on an account. All fields optional."""

    account_name: str | None = Field(None, min_length=1, max_length=255)
    account_rating: AccountRating | None = None
    account_owner: str | None = Field(None, max_length=255)
    status: str | None = Field(None, max_length=50)
    industry: str | None = Field(None, max_length=255)
    revenue: str | None = Field(None, max_length=100)
    number_of_employees: str | None = Field(None, max_length=50)
    address_line1: str | None = Field(None, max_length=255)
    address_line2: str | None = Field(None, max_length=255)
    city: str | None = Field(None, max_length=100)
    state: str | None = Field(None, max_length=100)
    country: str | None = Field(None, max_length=100)
    zip_post_code: str | None = Field(None, max_length=20)
    time_zone: str | None = Field(None, max_length=50)
    board_number: str | None = Field(None, max_length=50)
    website: str | None = Field(None, max_length=255)
    geo: Geo | None = None


class Account(EntityRecord):
    """Full account entity as stored."""

    account_name: str
    account_rating: str | None = None
    account_owner: str | None = None
    status: str | None = None
    industry: str | None = None
    revenue: str | None = None
    number_of_employees: str | None = None
    address_line1: str | None = None
    address_line2: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    zip_post_code: str | None = None
    time_zone: str | None = None
    board_number: str | None = None
    website: str | None = None
    geo: str | None = None
