"""
Tests for alert reconciliation and dispatch.
"""

import pytest
from datetime import datetime, timezone
from unittest.mock import Mock

from sentinel.schemas.alert import Alert, AlertSeverity
from sentinel.schemas.tiers import STANDARD_TIERS
from sentinel.services import notifications
from sentinel.services.urgency import evaluate, evaluate_all
from conftest import TODAY, make_order


NOW = datetime(2024, 6, 3, 10, 0, tzinfo=timezone.utc)
CRITICAL = STANDARD_TIERS.critical


def _alert(i: int) -> Alert:
    return Alert(id=f"Action-{i}", po_id=str(i), po_number=f"PO-{i}", title="t", message="m")


class TestReconcile:

    def test_creates_alert_for_critical_order(self):
        record = evaluate(make_order(95), TODAY)
        alerts = notifications.reconcile([record], [], CRITICAL, now=NOW)

        assert len(alerts) == 1
        alert = alerts[0]
        assert alert.id == f"Double Action-{record.id}"
        assert alert.title == "Critical Alert: Double Action"
        assert alert.message == "Acme Corp's order requires immediate double action. Age: 95 days."
        assert alert.type == AlertSeverity.CRITICAL
        assert alert.is_read is False
        assert alert.timestamp == NOW

    def test_overdue_non_critical_order_is_a_warning(self):
        record = evaluate(make_order(40), TODAY)
        alerts = notifications.reconcile([record], [], CRITICAL, now=NOW)

        assert [a.id for a in alerts] == [f"Overdue-{record.id}"]
        assert alerts[0].type == AlertSeverity.WARNING

    def test_young_orders_raise_nothing(self):
        records = evaluate_all([make_order(3), make_order(25)], TODAY)
        existing = []
        assert notifications.reconcile(records, existing, CRITICAL) is existing

    def test_second_run_returns_same_object(self):
        records = evaluate_all([make_order(95), make_order(200)], TODAY)
        first = notifications.reconcile(records, [], CRITICAL, now=NOW)
        second = notifications.reconcile(records, first, CRITICAL, now=NOW)

        assert second is first
        assert len({a.id for a in first}) == len(first) == 2

    def test_tier_change_creates_new_alert(self):
        order = make_order(70)
        first = notifications.reconcile([evaluate(order, TODAY)], [], CRITICAL, now=NOW)

        later = TODAY.replace(month=7)
        second = notifications.reconcile([evaluate(order, later)], first, CRITICAL, now=NOW)

        assert [a.id for a in second] == [f"Double Action-{order.id}", f"Action-{order.id}"]

    def test_history_is_bounded_and_keeps_most_recent(self):
        existing = [_alert(i) for i in range(50)]
        record = evaluate(make_order(95), TODAY)

        merged = notifications.reconcile([record], existing, CRITICAL, now=NOW)

        assert len(merged) == 50
        assert merged[0].po_id == record.id
        assert merged[1].id == "Action-0"
        assert "Action-49" not in {a.id for a in merged}

    def test_history_over_many_rounds_keeps_newest_fifty(self):
        history = []
        created = []
        for _ in range(75):
            record = evaluate(make_order(95), TODAY)
            history = notifications.reconcile([record], history, CRITICAL, now=NOW)
            created.append(f"Double Action-{record.id}")
            assert len(history) <= 50

        assert [a.id for a in history] == list(reversed(created))[:50]

    def test_accepts_plain_string_tiers(self):
        record = evaluate(make_order(95), TODAY)
        alerts = notifications.reconcile([record], [], {"Double Action"}, now=NOW)
        assert alerts[0].type == AlertSeverity.CRITICAL


class TestDispatch:

    def test_notifies_once_per_new_alert(self):
        notifier = Mock()
        records = evaluate_all([make_order(95), make_order(200)], TODAY)
        before = []
        after = notifications.reconcile(records, before, CRITICAL, now=NOW)

        assert notifications.dispatch_new(before, after, notifier) == 2
        assert notifier.notify.call_count == 2

        again = notifications.reconcile(records, after, CRITICAL, now=NOW)
        assert notifications.dispatch_new(after, again, notifier) == 0
        assert notifier.notify.call_count == 2

    def test_without_permission_nothing_is_sent(self):
        after = [_alert(1)]
        assert notifications.dispatch_new([], after, None) == 0

    def test_notifier_failure_is_contained(self):
        notifier = Mock()
        notifier.notify.side_effect = RuntimeError("denied")
        assert notifications.dispatch_new([], [_alert(1), _alert(2)], notifier) == 0

    def test_log_notifier_records_messages(self):
        notifier = notifications.LogNotifier()
        notifier.notify("Title", "Body")
        assert notifier.sent == [("Title", "Body")]


def test_read_state_helpers():
    alerts = [_alert(1), _alert(2), _alert(3)]

    marked = notifications.mark_read(alerts, "Action-2")
    assert notifications.unread_count(marked) == 2
    assert alerts[1].is_read is False

    assert notifications.unread_count(notifications.mark_all_read(marked)) == 0


@pytest.mark.parametrize("age, expected", [(95, True), (40, True), (20, False)])
def test_is_alertable(age, expected):
    assert notifications.is_alertable(evaluate(make_order(age), TODAY), CRITICAL) is expected
