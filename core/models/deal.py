"""Deal (opportunity) domain models."""

from datetime import date
from decimal import Decimal
from enum import Enum

from pydantic import Field, field_serializer

from core.models.account import Geo
from core.models.base import CRMModel, EntityRecord


class BusinessLine(str, Enum):
    HUMAN_CAPITAL = "Human Capital"
    MANAGED_SERVICES = "Managed Services"
    GCC = "GCC"
    AUTOMATION = "Automation"
    SUPPORT = "Support"
    PRODUCT = "Product"
    SOLUTION = "Solution"
    RCM = "RCM"


class DealStage(str, Enum):
    """Pipeline stage, in order."""

    OPPORTUNITY_IDENTIFIED = "Opportunity Identified"
    PROPOSAL_SUBMITTED = "Proposal Submitted"
    NEGOTIATING = "Negotiating"
    CLOSING = "Closing"
    ORDER_WON = "Order Won"
    ORDER_LOST = "Order Lost"


class DealCreate(CRMModel):
    """Data required to create a deal."""

    deal_name: str = Field(..., min_length=1, max_length=255)
    deal_owner: str | None = Field(None, max_length=255)
    business_line: BusinessLine | None = None
    associated_account: str | None = Field(None, max_length=255)
    associated_contact: str | None = Field(None, max_length=255)
    closing_date: date | None = None
    probability: str | None = Field(None, max_length=20)
    deal_value: Decimal | None = Field(None, ge=0, max_digits=14, decimal_places=2)
    approved_by: str | None = Field(None, max_length=255)
    description: str | None = Field(None, max_length=10000)
    next_step: str | None = Field(None, max_length=10000)
    geo: Geo | None = None
    entity: str | None = Field(None, max_length=50)
    stage: DealStage = DealStage.OPPORTUNITY_IDENTIFIED


class DealUpdate(CRMModel):
    """Data that can be updated on a deal. All fields optional."""

    deal_name: str | None = Field(None, min_length=1, max_length=255)
    deal_owner: str | None = Field(None, max_length=255)
    business_line: BusinessLine | None = None
    associated_account: str | None = Field(None, max_length=255)
    associated_contact: str | None = Field(None, max_length=255)
    closing_date: date | None = None
    probability: str | None = Field(None, max_length=20)
    deal_value: Decimal | None = Field(None, ge=0, max_digits=14, decimal_places=2)
    approved_by: str | None = Field(None, max_length=255)
    description: str | None = Field(None, max_length=10000)
    next_step: str | None = Field(None, max_length=10000)
    geo: Geo | None = None
    entity: str | None = Field(None, max_length=50)
    stage: DealStage | None = None


class Deal(EntityRecord):
    """Full deal entity as stored."""

    deal_name: str
    deal_owner: str | None = None
    business_line: str | None = None
    associated_account: str | None = None
    associated_contact: str | None = None
    closing_date: date | None = None
    probability: str | None = None
    deal_value: Decimal | None = None
    approved_by: str | None = None
    description: str | None = None
    next_step: str | None = None
    geo: str | None = None
    entity: str | None = None
    stage: str | None = None

    @field_serializer("deal_value")
    def serialize_deal_value(self, value: Decimal | None) -> float | None:
        return float(value) if value is not None else None
