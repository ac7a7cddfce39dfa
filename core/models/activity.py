"""Activity log domain models."""

from datetime import datetime
from enum import Enum

from pydantic import Field, field_validator

from core.models.base import CRMModel, EntityRecord, assume_utc


class ActivityType(str, Enum):
    CALL = "Call"
    EMAIL = "Email"
    LINKEDIN_MSG = "LinkedIn Msg"
    SMS = "SMS"
    OTHER = "Other"


class OutcomeDisposition(str, Enum):
    VOICEMAIL = "Voicemail"
    RNR = "RNR"
    MEETING_FIXED = "Meeting Fixed"
    MEETING_COMPLETED = "Meeting Completed"
    MEETING_RESCHEDULED = "Meeting Rescheduled"
    NOT_INTERESTED = "Not Interested"
    DO_NOT_CALL = "Do not Call"
    CALLBACK_REQUESTED = "Callback requested"
    EMAIL_SENT = "Email sent"
    EMAIL_RECEIVED = "Email Received"


class ActivityCreate(CRMModel):
    """Data required to log an activity."""

    activity_type: ActivityType
    associated_contact: str | None = Field(None, max_length=255)
    associated_account: str | None = Field(None, max_length=255)
    date_time: datetime
    follow_up_schedule: str | None = Field(None, max_length=255)
    summary: str | None = Field(None, max_length=10000)
    outcome_disposition: OutcomeDisposition | None = None

    @field_validator("date_time")
    @classmethod
    def date_time_utc(cls, value):
        return assume_utc(value)


class ActivityUpdate(CRMModel):
    """Data that can be updated on an activity. All fields optional."""

    activity_type: ActivityType | None = None
    associated_contact: str | None = Field(None, max_length=255)
    associated_account: str | None = Field(None, max_length=255)
    date_time: datetime | None = None
    follow_up_schedule: str | None = Field(None, max_length=255)
    summary: str | None = Field(None, max_length=10000)
    outcome_disposition: OutcomeDisposition | None = None

    @field_validator("date_time")
    @classmethod
    def date_time_utc(cls, value):
        return assume_utc(value)


class Activity(EntityRecord):
    """Full activity entity as stored."""

    activity_type: str
    associated_contact: str | None = None
    associated_account: str | None = None
    date_time: datetime
    follow_up_schedule: str | None = None
    summary: str | None = None
    outcome_disposition: str | None = None
