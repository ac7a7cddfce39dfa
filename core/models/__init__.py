"""Core domain models."""

from core.models.base import CRMModel, EntityRecord
from core.models.contact import Contact, ContactCreate, ContactUpdate, ContactSource, ContactStatus
from core.models.account import Account, AccountCreate, AccountUpdate, AccountRating, Geo
from core.models.deal import Deal, DealCreate, DealUpdate, DealStage, BusinessLine
from core.models.activity import Activity, ActivityCreate, ActivityUpdate, ActivityType, OutcomeDisposition
from core.models.lead import Lead, LeadCreate, LeadUpdate, LeadStatus, LeadSource, LeadRating
from core.models.report import (
    ReportRequest, ReportData, ReportMetrics, ReportType, ReportPeriod,
    AdminStatistics, StatisticsSummary, RecentActivity, UserStat,
)

__all__ = [
    # Base
    "CRMModel", "EntityRecord",
    # Contact
    "Contact", "ContactCreate", "ContactUpdate", "ContactSource", "ContactStatus",
    # Account
    "Account", "AccountCreate", "AccountUpdate", "AccountRating", "Geo",
    # Deal
    "Deal", "DealCreate", "DealUpdate", "DealStage", "BusinessLine",
    # Activity
    "Activity", "ActivityCreate", "ActivityUpdate", "ActivityType", "OutcomeDisposition",
    # Lead
    "Lead", "LeadCreate", "LeadUpdate", "LeadStatus", "LeadSource", "LeadRating",
    # Report
    "ReportRequest", "ReportData", "ReportMetrics", "ReportType", "ReportPeriod",
    "AdminStatistics", "StatisticsSummary", "RecentActivity", "UserStat",
]
