"""Tests for EntityService against a real SQLite database."""

from uuid import UUID, uuid4

import pytest

from core.audit import AuditAction, AuditLogger
from core.exceptions import NotFoundError, ValidationError
from core.models import ContactCreate, ContactUpdate, DealCreate, DealUpdate
from core.services.entity_service import EntityService
from core.services.registry import CONTACTS, DEALS


@pytest.fixture
def audit(db):
    return AuditLogger(db)


@pytest.fixture
def contacts(db, audit):
    return EntityService(db, audit, CONTACTS)


@pytest.fixture
def deals(db, audit):
    return EntityService(db, audit, DEALS)


@pytest.mark.usefixtures("authenticated_context")
class TestCreate:
    def test_create_attributes_current_user(self, contacts, test_user_id):
        contact = contacts.create(ContactCreate(first_name="Ada", last_name="Lovelace"))

        assert isinstance(contact.id, UUID)
        assert contact.created_by == test_user_id
        assert contact.updated_by == test_user_id
        assert contact.created_at == contact.updated_at
        assert contact.deleted_at is None

    def test_enum_stored_by_value(self, deals, db):
        deal = deals.create(DealCreate(deal_name="X", business_line="Automation"))

        stored = db.execute_scalar("SELECT business_line FROM deals WHERE id = %s", (deal.id,))
        assert stored == "Automation"
        assert deal.stage == "Opportunity Identified"

    def test_create_is_audited(self, contacts, audit):
        contact = contacts.create(ContactCreate(first_name="Ada", last_name="Lovelace"))

        history = audit.get_entity_history("contact", contact.id)
        assert len(history) == 1
        assert history[0].action is AuditAction.CREATE
        assert history[0].changes["created"]["first_name"] == "Ada"

    def test_requires_identity(self, contacts):
        from utils.user_context import clear_current_identity

        clear_current_identity()
        with pytest.raises(RuntimeError):
            contacts.create(ContactCreate(first_name="A", last_name="B"))


@pytest.mark.usefixtures("authenticated_context")
class TestGetUpdateDelete:
    def test_get_missing(self, contacts):
        assert contacts.get_by_id(uuid4()) is None
        with pytest.raises(NotFoundError, match="Contact not found"):
            contacts.get(uuid4())

    def test_update_only_sent_fields(self, contacts):
        contact = contacts.create(ContactCreate(first_name="Ada", last_name="Lovelace", city="London"))

        updated = contacts.update(contact.id, ContactUpdate(title="Countess"))

        assert updated.title == "Countess"
        assert updated.city == "London"
        assert updated.updated_at >= contact.updated_at

    def test_update_clears_optional_field(self, contacts):
        contact = contacts.create(ContactCreate(first_name="Ada", last_name="Lovelace", city="London"))

        updated = contacts.update(contact.id, ContactUpdate.model_validate({"city": None}))

        assert updated.city is None

    def test_update_cannot_clear_required(self, deals):
        deal = deals.create(DealCreate(deal_name="X"))

        with pytest.raises(ValidationError, match="stage"):
            deals.update(deal.id, DealUpdate.model_validate({"stage": None}))

    def test_noop_update_writes_nothing(self, contacts, audit):
        contact = contacts.create(ContactCreate(first_name="Ada", last_name="Lovelace"))

        same = contacts.update(contact.id, ContactUpdate())

        assert same == contact
        assert len(audit.get_entity_history("contact", contact.id)) == 1

    def test_update_audits_field_diff(self, deals, audit):
        deal = deals.create(DealCreate(deal_name="X"))

        deals.update(deal.id, DealUpdate(stage="Order Won"))

        latest = audit.get_entity_history("deal", deal.id)[0]
        assert latest.action is AuditAction.UPDATE
        assert latest.changes["stage"] == {"old": "Opportunity Identified", "new": "Order Won"}

    def test_delete_is_soft(self, contacts, db):
        contact = contacts.create(ContactCreate(first_name="Ada", last_name="Lovelace"))

        contacts.delete(contact.id)

        assert contacts.get_by_id(contact.id) is None
        assert db.execute_scalar(
            "SELECT deleted_at FROM contacts WHERE id = %s", (contact.id,)
        ) is not None

    def test_delete_twice(self, contacts):
        contact = contacts.create(ContactCreate(first_name="Ada", last_name="Lovelace"))
        contacts.delete(contact.id)

        with pytest.raises(NotFoundError):
            contacts.delete(contact.id)

    def test_update_deleted(self, contacts):
        contact = contacts.create(ContactCreate(first_name="Ada", last_name="Lovelace"))
        contacts.delete(contact.id)

        with pytest.raises(NotFoundError):
            contacts.update(contact.id, ContactUpdate(title="x"))


@pytest.mark.usefixtures("authenticated_context")
class TestListAll:
    @pytest.fixture
    def seeded(self, contacts):
        for first, last, status in [
            ("Ada", "Lovelace", "Prospect"),
            ("Grace", "Hopper", "Suspect"),
            ("Alan", "Turing", "Prospect"),
        ]:
            contacts.create(ContactCreate(first_name=first, last_name=last, status=status))
        return contacts

    def test_paging(self, seeded):
        page = seeded.list_all(page=2, limit=2, sort="last_name", order="asc")

        assert page.total == 3
        assert [c.last_name for c in page.items] == ["Turing"]

    def test_filter(self, seeded):
        page = seeded.list_all(filters={"status": "Prospect"}, sort="first_name", order="asc")
        assert [c.first_name for c in page.items] == ["Ada", "Alan"]

    def test_search(self, seeded):
        page = seeded.list_all(search="hop")
        assert [c.last_name for c in page.items] == ["Hopper"]

    def test_search_combined_with_filter(self, seeded):
        page = seeded.list_all(search="a", filters={"status": "Suspect"})
        assert [c.first_name for c in page.items] == ["Grace"]

    def test_excludes_deleted(self, seeded):
        first = seeded.list_all().items[0]
        seeded.delete(first.id)

        assert seeded.list_all().total == 2

    @pytest.mark.parametrize("kwargs,message", [
        ({"sort": "email_address"}, "Cannot sort"),
        ({"order": "up"}, "order must be"),
        ({"filters": {"title": "x"}}, "Cannot filter"),
        ({"page": 0}, "positive"),
    ])
    def test_rejects_bad_arguments(self, seeded, kwargs, message):
        with pytest.raises(ValidationError, match=message):
            seeded.list_all(**kwargs)
