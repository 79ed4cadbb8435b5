"""
Dashboard summaries: headline metrics and chart series.
"""

from collections import Counter
from typing import Dict, List, Sequence

from pydantic import BaseModel, Field

from sentinel.schemas.order import AugmentedOrder, POPriority, POStatus
from sentinel.schemas.tiers import TierTable
from sentinel.utils import safe_divide


OLDEST_ACTIVE_LIMIT = 10


class DashboardSummary(BaseModel):
    """Headline metrics for the dashboard cards and charts."""
    total_orders: int
    total_amount: float
    overdue_count: int
    high_priority_count: int
    average_age: float
    oldest_active: List[AugmentedOrder] = Field(default_factory=list)
    by_status: Dict[str, int] = Field(default_factory=dict)
    by_priority: Dict[str, int] = Field(default_factory=dict)
    by_tier: Dict[str, int] = Field(default_factory=dict)


def oldest_active(records: Sequence[AugmentedOrder], limit: int = OLDEST_ACTIVE_LIMIT) -> List[AugmentedOrder]:
    """The `limit` oldest orders that are neither delivered nor cancelled."""
    active = [r for r in records if r.is_active]
    return sorted(active, key=lambda r: r.age, reverse=True)[:limit]


def _counts(values, order) -> Dict[str, int]:
    # Enumeration order, zero buckets omitted
    counter = Counter(v.value for v in values)
    return {member.value: counter[member.value] for member in order if counter[member.value] > 0}


def summarize(records: Sequence[AugmentedOrder], tier_table: TierTable) -> DashboardSummary:
    return DashboardSummary(
        total_orders=len(records),
        total_amount=sum(r.total_amount for r in records),
        overdue_count=sum(1 for r in records if r.status == POStatus.OVERDUE),
        high_priority_count=sum(1 for r in records if r.priority == POPriority.HIGH),
        average_age=safe_divide(sum(r.age for r in records), len(records)),
        oldest_active=oldest_active(records),
        by_status=_counts((r.status for r in records), list(POStatus)),
        by_priority=_counts((r.priority for r in records), list(POPriority)),
        by_tier=_counts((r.urgency_tier for r in records), tier_table.labels),
    )
