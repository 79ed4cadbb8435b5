"""
Tests for dashboard summaries.
"""

from sentinel.schemas.order import POPriority, POStatus
from sentinel.schemas.tiers import STANDARD_TIERS
from sentinel.services.summary import oldest_active, summarize
from sentinel.services.urgency import evaluate_all
from conftest import TODAY, make_order


def test_summarize_counts_and_totals():
    records = evaluate_all([
        make_order(5, total_amount=100.0, priority=POPriority.HIGH),
        make_order(40, total_amount=200.0),
        make_order(95, total_amount=300.0, priority=POPriority.HIGH),
        make_order(200, total_amount=400.0, status=POStatus.DELIVERED),
    ], TODAY)

    summary = summarize(records, STANDARD_TIERS)

    assert summary.total_orders == 4
    assert summary.total_amount == 1000.0
    assert summary.overdue_count == 2
    assert summary.high_priority_count == 2
    assert summary.average_age == 85.0
    assert summary.by_status == {"Pending": 1, "Delivered": 1, "Overdue": 2}
    assert summary.by_priority == {"Medium": 2, "High": 2}
    assert list(summary.by_tier) == ["Three Action", "Double Action", "Overdue", "New"]


def test_oldest_active_skips_terminal_orders():
    records = evaluate_all(
        [make_order(age) for age in range(1, 15)]
        + [make_order(500, status=POStatus.CANCELLED)],
        TODAY,
    )
    result = oldest_active(records)

    assert len(result) == 10
    assert result[0].age == 14
    assert all(r.status != POStatus.CANCELLED for r in result)


def test_empty_summary():
    summary = summarize([], STANDARD_TIERS)
    assert summary.total_orders == 0
    assert summary.average_age == 0.0
    assert summary.by_tier == {}
