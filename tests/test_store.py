"""Tests for the notification store."""

import threading

import pytest

from conftest import NOW, expense, finance, ids, life, make_notification

from household_alerts.audit import AuditLogger
from household_alerts.models import AuditEventType
from household_alerts.services.storage import (
    InMemoryAuditStorage,
    InMemoryNotificationStorage,
    NotificationStorageInterface,
    StorageError,
)
from household_alerts.store import NotificationStore


@pytest.fixture
def store():
    return NotificationStore()


class TestInsertion:

    def test_new_notifications_are_prepended(self, store):
        store.add_notifications([make_notification("a"), make_notification("b")])
        store.add_notifications([make_notification("c")])
        assert ids(store.all_notifications()) == ["c", "a", "b"]

    def test_duplicate_id_is_ignored(self, store):
        assert store.add_notification(make_notification("a", title="first")) is True
        assert store.add_notification(make_notification("a", title="second")) is False
        assert len(store) == 1
        assert store.get("a").title == "first"

    def test_duplicates_inside_one_batch(self, store):
        inserted = store.add_notifications([
            make_notification("a", title="first"),
            make_notification("a", title="second"),
            make_notification("b"),
        ])
        assert ids(inserted) == ["a", "b"]
        assert store.get("a").title == "first"

    def test_existing_entry_keeps_its_state(self, store):
        store.add_notification(make_notification("a"))
        store.mark_as_read("a")
        store.add_notification(make_notification("a"))
        assert store.get("a").read is True

    def test_store_keeps_its_own_copies(self, store):
        original = make_notification("a")
        store.add_notification(original)
        store.mark_as_read("a")
        assert original.read is False

        returned = store.get("a")
        returned_list = store.all_notifications()
        assert returned is not store.get("a")
        assert returned_list[0] == returned


class TestReadAndDismiss:

    def test_mark_as_read(self, store):
        store.add_notifications([make_notification("a"), make_notification("b")])
        assert store.unread_count() == 2
        assert store.mark_as_read("a") is True
        assert store.unread_count() == 1
        assert store.get("a").dismissed_at is None

    def test_mark_as_read_never_clears_dismissal(self, store):
        store.add_notification(make_notification("a"))
        store.dismiss("a")
        store.mark_as_read("a")
        assert store.get("a").dismissed_at is not None

    def test_unknown_id(self, store):
        assert store.mark_as_read("missing") is False
        assert store.dismiss("missing") is False
        assert store.get("missing") is None

    def test_mark_all_as_read(self, store):
        store.add_notifications([make_notification("a"), make_notification("b")])
        store.mark_as_read("a")
        assert store.mark_all_as_read() == 1
        assert store.unread_count() == 0
        assert store.mark_all_as_read() == 0

    def test_dismiss_hides_and_reads(self, store):
        store.add_notifications([make_notification("a"), make_notification("b")])
        assert store.dismiss("a") is True

        dismissed = store.get("a")
        assert dismissed.read is True
        assert dismissed.dismissed_at is not None
        assert ids(store.active_notifications()) == ["b"]
        assert store.unread_count() == 1
        # Still present for the audit trail.
        assert "a" in store
        assert len(store) == 2

    def test_dismiss_is_idempotent(self, store):
        store.add_notification(make_notification("a"))
        store.dismiss("a")
        first = store.get("a").dismissed_at
        store.dismiss("a")
        assert store.get("a").dismissed_at == first

    def test_dismiss_all(self, store):
        store.add_notifications([make_notification(i) for i in ("a", "b", "c")])
        store.dismiss("b")
        assert store.dismiss_all() == 2
        assert store.active_notifications() == []
        assert store.unread_count() == 0

    def test_dismissed_id_not_reinserted_until_cleared(self, store):
        store.add_notification(make_notification("a"))
        store.dismiss("a")
        assert store.add_notification(make_notification("a")) is False

        assert store.clear_dismissed() == 1
        assert "a" not in store
        assert store.add_notification(make_notification("a")) is True
        assert store.get("a").is_active is True

    def test_clear_dismissed_keeps_active(self, store):
        store.add_notifications([make_notification("a"), make_notification("b")])
        store.dismiss("b")
        store.clear_dismissed()
        assert ids(store.all_notifications()) == ["a"]
        assert store.clear_dismissed() == 0


class TestPersistence:

    def test_loaded_on_construction(self):
        storage = InMemoryNotificationStorage([make_notification("a"), make_notification("a")])
        store = NotificationStore(storage=storage)
        assert ids(store.all_notifications()) == ["a"]

    def test_saved_only_when_something_changed(self):
        storage = InMemoryNotificationStorage()
        store = NotificationStore(storage=storage)

        store.add_notification(make_notification("a"))
        assert storage.save_count == 1
        store.add_notification(make_notification("a"))
        store.mark_as_read("missing")
        assert storage.save_count == 1

        store.mark_as_read("a")
        store.mark_as_read("a")
        assert storage.save_count == 2

    def test_state_survives_reload(self):
        storage = InMemoryNotificationStorage()
        store = NotificationStore(storage=storage)
        store.add_notifications([make_notification("a"), make_notification("b")])
        store.dismiss("a")

        reloaded = NotificationStore(storage=storage)
        assert ids(reloaded.all_notifications()) == ["a", "b"]
        assert reloaded.get("a").dismissed_at is not None
        assert reloaded.add_notification(make_notification("a")) is False

    def test_storage_failure_propagates(self):
        class BrokenStorage(NotificationStorageInterface):
            def load(self):
                return []

            def save(self, notifications):
                raise StorageError("disk full")

        audit_storage = InMemoryAuditStorage()
        store = NotificationStore(storage=BrokenStorage(), audit_logger=AuditLogger(audit_storage))

        with pytest.raises(StorageError):
            store.add_notification(make_notification("a"))
        event_types = [e.event_type for e in audit_storage.get_recent_events()]
        assert AuditEventType.STORAGE_ERROR in event_types


class TestAuditTrail:

    def test_empty_audit_sink_receives_events(self):
        """A sink with no events yet still gets the first one."""
        audit_storage = InMemoryAuditStorage()
        assert len(audit_storage) == 0

        AuditLogger(audit_storage).log_engine_stopped()

        assert len(audit_storage) == 1
        assert audit_storage.get_recent_events()[0].event_type == AuditEventType.ENGINE_STOPPED

    def test_store_operations_are_audited(self):
        audit_storage = InMemoryAuditStorage()
        store = NotificationStore(audit_logger=AuditLogger(audit_storage))

        store.add_notifications([make_notification("a"), make_notification("b")])
        store.mark_as_read("a")
        store.dismiss("b")
        store.clear_dismissed()

        event_types = [e.event_type for e in reversed(audit_storage.get_recent_events())]
        assert event_types == [
            AuditEventType.NOTIFICATIONS_CREATED,
            AuditEventType.NOTIFICATION_READ,
            AuditEventType.NOTIFICATION_DISMISSED,
            AuditEventType.DISMISSED_CLEARED,
        ]
        history = audit_storage.get_events_by_entity("notification", "b")
        assert [e.event_type for e in history] == [
            AuditEventType.NOTIFICATIONS_CREATED,
            AuditEventType.NOTIFICATION_DISMISSED,
        ]


class TestConcurrency:

    def test_concurrent_inserts_store_each_id_once(self, store):
        batch = [make_notification(f"n{i}") for i in range(50)]
        inserted_counts = []

        def worker():
            inserted_counts.append(len(store.add_notifications(batch)))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(store) == 50
        assert sum(inserted_counts) == 50


class TestEvaluationIdempotence:
    """Evaluator output merged into the store, pass after pass."""

    def test_second_pass_inserts_nothing(self, store, evaluator):
        f = finance(budgets=[{"id": "b1", "category": "Alimentación", "limit": 500}],
                    transactions=[expense("t1", 520)])
        l = life(shoppingList=[{"id": "s1", "name": "Pan"}])

        first = store.add_notifications(evaluator.evaluate(f, l, now=NOW))
        second = store.add_notifications(evaluator.evaluate(f, l, now=NOW))

        assert ids(first) == ["budget-exceeded-b1-2026-10", "shopping-pending-1"]
        assert second == []
        assert store.unread_count() == 2

    def test_completed_goal_notifies_once(self, store, evaluator):
        f = finance(goals=[{"id": "g1", "name": "Coche", "targetAmount": 500, "currentAmount": 500}])

        store.add_notifications(evaluator.evaluate(f, life(), now=NOW))
        store.dismiss("goal-completed-g1")
        store.add_notifications(evaluator.evaluate(f, life(), now=NOW))

        assert ids(store.all_notifications()) == ["goal-completed-g1"]
        assert store.active_notifications() == []

    def test_warning_step_adds_a_new_notification(self, store, evaluator):
        budgets = [{"id": "b1", "category": "Alimentación", "limit": 500}]

        store.add_notifications(evaluator.evaluate(
            finance(budgets=budgets, transactions=[expense("t1", 410)]), life(), now=NOW,
        ))
        store.add_notifications(evaluator.evaluate(
            finance(budgets=budgets, transactions=[expense("t1", 430)]), life(), now=NOW,
        ))

        assert ids(store.all_notifications()) == [
            "budget-warning-b1-2026-10-85",
            "budget-warning-b1-2026-10-80",
        ]
