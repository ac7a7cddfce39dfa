"""
Sales report generation.

Reports are a fixed aggregation of stored rows for a period:
- meetings come from activities by outcome, within the period (date_time)
- pipeline numbers come from deals by stage, created within the period,
  narrowed by sales rep (deal_owner), geo and business line

Each actual is also expressed as a percentage of a fixed per-period target.
Admin statistics are plain all-time counts with no period or target.
"""

import logging
from calendar import monthrange
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Callable
from uuid import uuid4

from clients.database import SQLClient
from core.models import (
    AdminStatistics,
    DealStage,
    OutcomeDisposition,
    RecentActivity,
    ReportData,
    ReportMetrics,
    ReportPeriod,
    ReportRequest,
    StatisticsSummary,
    UserStat,
)
from utils.timezone import now_utc
from utils.user_context import get_current_identity

logger = logging.getLogger(__name__)

# Monthly targets; quarter and year scale by 3 and 12
MONTHLY_TARGETS = {
    "meetings_fixed": 40,
    "meetings_completed": 30,
    "opportunity_created": 15,
    "opportunity_created_value": 100000,
    "proposal_submitted": 10,
    "proposal_submitted_value": 75000,
    "order_won": 5,
    "order_won_value": 50000,
}

RECENT_ACTIVITY_LIMIT = 10

_PERIOD_MULTIPLIER = {ReportPeriod.MONTH: 1, ReportPeriod.QUARTER: 3, ReportPeriod.YEAR: 12}


def period_bounds(period: ReportPeriod, today: date) -> tuple[date, date]:
    """First day of the period containing today, and the first day after it."""
    if period is ReportPeriod.MONTH:
        start = today.replace(day=1)
        end = start + timedelta(days=monthrange(start.year, start.month)[1])
    elif period is ReportPeriod.QUARTER:
        first_month = 3 * ((today.month - 1) // 3) + 1
        start = date(today.year, first_month, 1)
        end = date(today.year + 1, 1, 1) if first_month == 10 else date(today.year, first_month + 3, 1)
    else:
        start = date(today.year, 1, 1)
        end = date(today.year + 1, 1, 1)
    return start, end


def _start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def percent_of_target(actual: float, target: float) -> int:
    if target <= 0:
        return 0
    return round(actual / target * 100)


class ReportService:
    """Builds sales reports from stored deals and activities."""

    def __init__(self, db: SQLClient, clock: Callable[[], datetime] = now_utc):
        self.db = db
        self._clock = clock

    def _window(self, request: ReportRequest) -> tuple[datetime, datetime]:
        """Half-open [start, end) UTC window for the request."""
        default_start, default_end = period_bounds(request.period, self._clock().date())
        start = request.start_date or default_start
        # end_date is inclusive in the request
        end = request.end_date + timedelta(days=1) if request.end_date else default_end
        return _start_of_day(start), _start_of_day(end)

    def _meeting_counts(self, start: datetime, end: datetime) -> dict[str, int]:
        rows = self.db.execute(
            """
            SELECT outcome_disposition, COUNT(*) AS n
            FROM activities
            WHERE deleted_at IS NULL
              AND date_time >= %s AND date_time < %s
            GROUP BY outcome_disposition
            """,
            (start, end)
        )
        return {row["outcome_disposition"]: int(row["n"]) for row in rows if row["outcome_disposition"]}

    def _deal_totals(self, request: ReportRequest, start: datetime, end: datetime) -> dict[str, tuple[int, Decimal]]:
        conditions = ["deleted_at IS NULL", "created_at >= %s", "created_at < %s"]
        params: list = [start, end]

        for column, value in (
            ("deal_owner", request.sales_rep),
            ("geo", request.geo),
            ("business_line", request.business_line),
        ):
            if value:
                conditions.append(f"{column} = %s")
                params.append(value)

        rows = self.db.execute(
            f"""
            SELECT stage, COUNT(*) AS n, SUM(deal_value) AS total
            FROM deals
            WHERE {' AND '.join(conditions)}
            GROUP BY stage
            """,
            tuple(params)
        )
        return {
            row["stage"]: (int(row["n"]), Decimal(str(row["total"] or 0)))
            for row in rows
        }

    def generate(self, request: ReportRequest) -> ReportData:
        """Aggregate the metric set for the requested period and filters."""
        start, end = self._window(request)

        meetings = self._meeting_counts(start, end)
        by_stage = self._deal_totals(request, start, end)

        def stage(name: DealStage) -> tuple[int, Decimal]:
            return by_stage.get(name.value, (0, Decimal(0)))

        created_nos = sum(n for n, _ in by_stage.values())
        created_value = sum((v for _, v in by_stage.values()), Decimal(0))
        proposal_nos, proposal_value = stage(DealStage.PROPOSAL_SUBMITTED)
        won_nos, won_value = stage(DealStage.ORDER_WON)
        lost_nos, lost_value = stage(DealStage.ORDER_LOST)
        fixed = meetings.get(OutcomeDisposition.MEETING_FIXED.value, 0)
        completed = meetings.get(OutcomeDisposition.MEETING_COMPLETED.value, 0)

        scale = _PERIOD_MULTIPLIER[request.period]
        targets = {k: v * scale for k, v in MONTHLY_TARGETS.items()}

        metrics = ReportMetrics(
            meetings_fixed=fixed,
            meetings_completed=completed,
            opportunity_created_nos=created_nos,
            opportunity_created_value=float(created_value),
            proposal_submitted_nos=proposal_nos,
            proposal_submitted_value=float(proposal_value),
            order_won_nos=won_nos,
            order_won_value=float(won_value),
            order_lost_nos=lost_nos,
            order_lost_value=float(lost_value),
            meetings_fixed_vs_target=percent_of_target(fixed, targets["meetings_fixed"]),
            meetings_completed_vs_target=percent_of_target(completed, targets["meetings_completed"]),
            opportunity_created_vs_target=percent_of_target(created_nos, targets["opportunity_created"]),
            opportunity_created_value_vs_target=percent_of_target(
                float(created_value), targets["opportunity_created_value"]
            ),
            proposal_submitted_vs_target=percent_of_target(proposal_nos, targets["proposal_submitted"]),
            proposal_submitted_value_vs_target=percent_of_target(
                float(proposal_value), targets["proposal_submitted_value"]
            ),
            order_won_vs_target=percent_of_target(won_nos, targets["order_won"]),
            order_won_value_vs_target=percent_of_target(float(won_value), targets["order_won_value"]),
        )

        identity = get_current_identity()
        report = ReportData(
            id=uuid4(),
            report_type=request.report_type,
            period=request.period,
            period_start=start,
            period_end=end,
            sales_rep=request.sales_rep,
            geo=request.geo,
            business_line=request.business_line,
            org=request.org,
            metrics=metrics,
            generated_at=self._clock(),
            generated_by=identity.user_id if identity else None,
        )
        logger.info(
            "Generated %s report for %s..%s (%d deals, %d meetings)",
            request.report_type.value, start.date(), end.date(), created_nos, fixed + completed,
        )
        return report

    def statistics(self, users: list[UserStat]) -> AdminStatistics:
        """Record counts across the CRM, the ten latest activities, and the given users.

        Soft-deleted rows are not counted.
        """
        counts = self.db.execute_single(
            """
            SELECT
                (SELECT COUNT(*) FROM contacts WHERE deleted_at IS NULL) AS contacts,
                (SELECT COUNT(*) FROM accounts WHERE deleted_at IS NULL) AS accounts,
                (SELECT COUNT(*) FROM leads WHERE deleted_at IS NULL) AS leads,
                (SELECT COUNT(*) FROM deals WHERE deleted_at IS NULL) AS deals,
                (SELECT COUNT(*) FROM activities WHERE deleted_at IS NULL) AS activities,
                (SELECT COUNT(*) FROM deals WHERE deleted_at IS NULL AND stage = %s) AS won,
                (SELECT SUM(deal_value) FROM deals WHERE deleted_at IS NULL AND stage = %s) AS won_value
            """,
            (DealStage.ORDER_WON.value, DealStage.ORDER_WON.value)
        )
        recent = self.db.execute(
            """
            SELECT id, activity_type, summary, date_time,
                   associated_contact AS contact, associated_account AS account,
                   outcome_disposition AS outcome
            FROM activities
            WHERE deleted_at IS NULL
            ORDER BY date_time DESC
            LIMIT %s
            """,
            (RECENT_ACTIVITY_LIMIT,)
        )

        summary = StatisticsSummary(
            total_users=len(users),
            total_contacts=int(counts["contacts"]),
            total_accounts=int(counts["accounts"]),
            total_leads=int(counts["leads"]),
            total_deals=int(counts["deals"]),
            total_activities=int(counts["activities"]),
            won_deals=int(counts["won"]),
            total_deal_value=float(Decimal(str(counts["won_value"] or 0))),
        )
        return AdminStatistics(
            summary=summary,
            recent_activities=[RecentActivity.model_validate(row) for row in recent],
            user_stats=users,
        )
