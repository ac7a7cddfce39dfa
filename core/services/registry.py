"""Table mappings for the CRM entities served under /api/<name>."""

from core.models import (
    Account, AccountCreate, AccountUpdate,
    Activity, ActivityCreate, ActivityUpdate,
    Contact, ContactCreate, ContactUpdate,
    Deal, DealCreate, DealUpdate,
    Lead, LeadCreate, LeadUpdate,
)
from core.services.entity_service import EntityDefinition

CONTACTS = EntityDefinition(
    name="contact",
    table="contacts",
    model=Contact,
    create_model=ContactCreate,
    update_model=ContactUpdate,
    required=("first_name", "last_name"),
    searchable=("first_name", "last_name", "email_address", "associated_account", "title"),
    filterable=("status", "source", "owner", "associated_account", "country"),
    sortable=("created_at", "updated_at", "first_name", "last_name"),
)

ACCOUNTS = EntityDefinition(
    name="account",
    table="accounts",
    model=Account,
    create_model=AccountCreate,
    update_model=AccountUpdate,
    required=("account_name",),
    searchable=("account_name", "industry", "website", "city", "country"),
    filterable=("account_rating", "account_owner", "status", "geo", "industry"),
    sortable=("created_at", "updated_at", "account_name"),
)

DEALS = EntityDefinition(
    name="deal",
    table="deals",
    model=Deal,
    create_model=DealCreate,
    update_model=DealUpdate,
    required=("deal_name", "stage"),
    searchable=("deal_name", "associated_account", "associated_contact", "description"),
    filterable=("stage", "geo", "business_line", "deal_owner", "associated_account"),
    sortable=("created_at", "updated_at", "deal_name", "closing_date", "deal_value"),
)

ACTIVITIES = EntityDefinition(
    name="activity",
    table="activities",
    model=Activity,
    create_model=ActivityCreate,
    update_model=ActivityUpdate,
    required=("activity_type", "date_time"),
    searchable=("summary", "associated_contact", "associated_account"),
    filterable=("activity_type", "outcome_disposition", "associated_account", "associated_contact"),
    sortable=("created_at", "updated_at", "date_time"),
)

LEADS = EntityDefinition(
    name="lead",
    table="leads",
    model=Lead,
    create_model=LeadCreate,
    update_model=LeadUpdate,
    required=("first_name", "last_name", "company", "status"),
    searchable=("first_name", "last_name", "company", "email", "title"),
    filterable=("status", "rating", "lead_source", "owner"),
    sortable=("created_at", "updated_at", "company", "last_name"),
)

# URL segment -> definition
ENTITY_DEFINITIONS = {
    "contacts": CONTACTS,
    "accounts": ACCOUNTS,
    "deals": DEALS,
    "activities": ACTIVITIES,
    "leads": LEADS,
}
