"""Tests for core domain models - custom validators and serialization only."""

from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest
from pydantic import ValidationError

NOW = datetime(2025, 3, 15, 12, 0, tzinfo=timezone.utc)


class TestCaseConventions:
    """UI sends camelCase, services use snake_case."""

    def test_accepts_both_spellings(self):
        from core.models import ContactCreate

        camel = ContactCreate.model_validate({"firstName": "Ada", "lastName": "Lovelace"})
        snake = ContactCreate.model_validate({"first_name": "Ada", "last_name": "Lovelace"})

        assert camel == snake

    def test_strips_whitespace(self):
        from core.models import AccountCreate

        assert AccountCreate(account_name="  Acme  ").account_name == "Acme"

    def test_blank_required_rejected(self):
        from core.models import AccountCreate

        with pytest.raises(ValidationError):
            AccountCreate(account_name="   ")


class TestDeal:
    def test_stage_defaults_to_opportunity_identified(self):
        from core.models import DealCreate, DealStage

        assert DealCreate(deal_name="X").stage is DealStage.OPPORTUNITY_IDENTIFIED

    def test_deal_value_serializes_as_number(self):
        from core.models import Deal

        deal = Deal(
            id=uuid4(), deal_name="X", deal_value=Decimal("1250.50"),
            closing_date=date(2025, 6, 30), created_at=NOW, updated_at=NOW,
        )
        dumped = deal.model_dump(mode="json", by_alias=True)

        assert dumped["dealValue"] == 1250.5
        assert dumped["closingDate"] == "2025-06-30"

    def test_negative_value_rejected(self):
        from core.models import DealCreate

        with pytest.raises(ValidationError):
            DealCreate(deal_name="X", deal_value=Decimal("-1"))

    def test_unknown_business_line_rejected(self):
        from core.models import DealCreate

        with pytest.raises(ValidationError):
            DealCreate(deal_name="X", business_line="Space Tourism")


class TestActivity:
    def test_naive_time_assumed_utc(self):
        from core.models import ActivityCreate

        activity = ActivityCreate(activity_type="Call", date_time=datetime(2025, 3, 10, 9, 30))

        assert activity.date_time.tzinfo == timezone.utc

    def test_aware_time_kept(self):
        from core.models import ActivityUpdate

        aware = datetime(2025, 3, 10, 9, 30, tzinfo=timezone.utc)
        assert ActivityUpdate(date_time=aware).date_time == aware


class TestLead:
    def test_status_defaults_to_new(self):
        from core.models import LeadCreate, LeadStatus

        lead = LeadCreate(first_name="A", last_name="B", company="C")
        assert lead.status is LeadStatus.NEW

    def test_update_tracks_unset_fields(self):
        from core.models import LeadUpdate

        update = LeadUpdate.model_validate({"rating": None})
        assert update.model_dump(exclude_unset=True) == {"rating": None}


class TestReportRequest:
    def test_defaults(self):
        from core.models import ReportPeriod, ReportRequest, ReportType

        request = ReportRequest()
        assert request.report_type is ReportType.SALES_PERFORMANCE
        assert request.period is ReportPeriod.MONTH

    def test_end_before_start_rejected(self):
        from core.models import ReportRequest

        with pytest.raises(ValidationError, match="endDate"):
            ReportRequest(start_date=date(2025, 3, 10), end_date=date(2025, 3, 1))

    def test_same_day_range_allowed(self):
        from core.models import ReportRequest

        request = ReportRequest(start_date=date(2025, 3, 1), end_date=date(2025, 3, 1))
        assert request.end_date == request.start_date

    def test_only_json_format(self):
        from core.models import ReportRequest

        with pytest.raises(ValidationError):
            ReportRequest(format="csv")


def test_contact_full_name():
    from core.models import Contact

    contact = Contact(id=uuid4(), first_name="Ada", last_name="Lovelace", created_at=NOW, updated_at=NOW)
    assert contact.full_name == "Ada Lovelace"
