"""Tests for the audit trail."""

from uuid import UUID, uuid4

import pytest

from core.audit import AuditAction, AuditLogger, compute_changes


class TestComputeChanges:
    def test_detects_changed_fields(self):
        old = {"name": "Alice", "email": "alice@test.com"}
        new = {"name": "Alice", "email": "alice@new.com"}

        changes = compute_changes(old, new)

        assert changes == {"email": {"old": "alice@test.com", "new": "alice@new.com"}}

    def test_detects_added_and_removed_fields(self):
        changes = compute_changes({"phone": "555-1234"}, {"city": "Austin"})

        assert changes["phone"] == {"old": "555-1234", "new": None}
        assert changes["city"] == {"old": None, "new": "Austin"}

    def test_ignores_update_bookkeeping(self):
        old = {"name": "Alice", "updated_at": "2025-01-01", "updated_by": "a"}
        new = {"name": "Alice", "updated_at": "2025-01-02", "updated_by": "b"}

        assert compute_changes(old, new) == {}

    def test_custom_exclude_fields(self):
        changes = compute_changes(
            {"name": "Alice", "internal_id": 1},
            {"name": "Bob", "internal_id": 2},
            exclude_fields={"internal_id"},
        )

        assert set(changes) == {"name"}


class TestAuditLogger:
    @pytest.fixture
    def audit(self, db):
        return AuditLogger(db)

    def test_log_change_creates_entry(self, audit, db, authenticated_context):
        entity_id = uuid4()

        audit.log_change("contact", entity_id, AuditAction.CREATE, {"created": {"first_name": "Ada"}})

        entries = db.execute("SELECT * FROM audit_log WHERE entity_id = %s", (entity_id,))
        assert len(entries) == 1
        assert entries[0]["entity_type"] == "contact"
        assert entries[0]["action"] == "create"

    def test_defaults_to_context_user(self, audit, db, authenticated_context, test_user_id):
        entity_id = uuid4()

        audit.log_change("deal", entity_id, AuditAction.CREATE, {"created": {}})

        user_id = db.execute_scalar("SELECT user_id FROM audit_log WHERE entity_id = %s", (entity_id,))
        assert UUID(user_id) == test_user_id

    def test_explicit_user_overrides_context(self, audit, db, authenticated_context):
        other = uuid4()
        entity_id = uuid4()

        audit.log_change("deal", entity_id, AuditAction.UPDATE, {}, user_id=other)

        user_id = db.execute_scalar("SELECT user_id FROM audit_log WHERE entity_id = %s", (entity_id,))
        assert UUID(user_id) == other

    def test_requires_identity(self, audit):
        with pytest.raises(RuntimeError, match="No user context"):
            audit.log_change("deal", uuid4(), AuditAction.CREATE, {})

    def test_history_newest_first_with_decoded_changes(self, audit, authenticated_context):
        entity_id = uuid4()
        audit.log_change("lead", entity_id, AuditAction.CREATE, {"created": {"company": "V1"}})
        audit.log_change("lead", entity_id, AuditAction.UPDATE, {"company": {"old": "V1", "new": "V2"}})
        audit.log_change("lead", uuid4(), AuditAction.CREATE, {"created": {}})

        history = audit.get_entity_history("lead", entity_id)

        assert [h.action for h in history] == [AuditAction.UPDATE, AuditAction.CREATE]
        assert history[0].changes == {"company": {"old": "V1", "new": "V2"}}

    def test_log_change_returns_entry(self, audit, authenticated_context, test_user_id):
        entity_id = uuid4()

        entry = audit.log_change("account", entity_id, AuditAction.DELETE, {"deleted": {"account_name": "X"}})

        assert entry.user_id == test_user_id
        assert entry.entity_id == entity_id
        assert audit.get_entity_history("account", entity_id) == [entry]
