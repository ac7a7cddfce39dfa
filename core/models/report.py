"""Sales report request and result models."""

from datetime import date, datetime
from enum import Enum
from uuid import UUID

from pydantic import Field, model_validator

from core.models.base import CRMModel


class ReportType(str, Enum):
    SALES_PERFORMANCE = "sales-performance"
    ACTIVITY_SUMMARY = "activity-summary"
    PIPELINE_ANALYSIS = "pipeline-analysis"


class ReportPeriod(str, Enum):
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"


class ReportRequest(CRMModel):
    """Filter criteria for a report."""

    report_type: ReportType = ReportType.SALES_PERFORMANCE
    period: ReportPeriod = ReportPeriod.MONTH
    start_date: date | None = None
    end_date: date | None = None
    sales_rep: str | None = Field(None, max_length=255)
    geo: str | None = Field(None, max_length=50)
    business_line: str | None = Field(None, max_length=50)
    org: str | None = Field(None, max_length=255)
    format: str = Field("json", pattern="^json$")

    @model_validator(mode="after")
    def check_range(self) -> "ReportRequest":
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("endDate must not be before startDate")
        return self


class ReportMetrics(CRMModel):
    """Actuals for the period, and each as a percentage of its target."""

    meetings_fixed: int = 0
    meetings_completed: int = 0
    opportunity_created_nos: int = 0
    opportunity_created_value: float = 0
    proposal_submitted_nos: int = 0
    proposal_submitted_value: float = 0
    order_won_nos: int = 0
    order_won_value: float = 0
    order_lost_nos: int = 0
    order_lost_value: float = 0

    meetings_fixed_vs_target: int = 0
    meetings_completed_vs_target: int = 0
    opportunity_created_vs_target: int = 0
    opportunity_created_value_vs_target: int = 0
    proposal_submitted_vs_target: int = 0
    proposal_submitted_value_vs_target: int = 0
    order_won_vs_target: int = 0
    order_won_value_vs_target: int = 0


class ReportData(CRMModel):
    """A generated report."""

    id: UUID
    report_type: ReportType
    period: ReportPeriod
    period_start: datetime
    period_end: datetime
    sales_rep: str | None = None
    geo: str | None = None
    business_line: str | None = None
    org: str | None = None
    metrics: ReportMetrics
    generated_at: datetime
    generated_by: UUID | None = None


class StatisticsSummary(CRMModel):
    total_users: int = 0
    total_contacts: int = 0
    total_accounts: int = 0
    total_leads: int = 0
    total_deals: int = 0
    total_activities: int = 0
    won_deals: int = 0
    total_deal_value: float = 0


class RecentActivity(CRMModel):
    id: UUID
    activity_type: str
    summary: str | None = None
    date_time: datetime
    contact: str | None = None
    account: str | None = None
    outcome: str | None = None


class UserStat(CRMModel):
    id: UUID
    name: str
    email: str
    role: str
    joined_at: datetime


class AdminStatistics(CRMModel):
    """Organisation-wide counts for the admin dashboard.

    total_deal_value is the value of won deals only.
    """

    summary: StatisticsSummary
    recent_activities: list[RecentActivity] = []
    user_stats: list[UserStat] = []
