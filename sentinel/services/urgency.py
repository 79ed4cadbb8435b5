"""
Urgency Engine
Derives order age, urgency tier and effective status from creation date.

`evaluate` is a pure function of (order, today, tier table, policy): the
alert identity scheme relies on identical inputs producing identical output.
Delivery and approval dates never feed the age; the approval date only
drives the optional stuck-pending escalation.
"""

from datetime import date, datetime
from typing import Iterable, List, Union

from pydantic import BaseModel, ConfigDict

from sentinel.schemas.order import AugmentedOrder, POStatus, PurchaseOrder, TERMINAL_STATUSES
from sentinel.schemas.tiers import STANDARD_TIERS, TierTable, UrgencyLabel, get_tier_table
from sentinel.config import Config


class EscalationPolicy(BaseModel):
    """Status and tier escalation rules applied after the tier scan."""
    model_config = ConfigDict(frozen=True)

    overdue_after_days: int = 30
    stuck_pending_enabled: bool = True
    stuck_pending_after_days: int = 7

    @classmethod
    def from_config(cls, config: Config) -> "EscalationPolicy":
        return cls(
            overdue_after_days=config.OVERDUE_AFTER_DAYS,
            stuck_pending_enabled=config.STUCK_PENDING_ESCALATION,
            stuck_pending_after_days=config.STUCK_PENDING_AFTER_DAYS,
        )


DEFAULT_POLICY = EscalationPolicy()


def _as_date(value: Union[date, datetime]) -> date:
    # Strip time-of-day so day counts are exact
    if isinstance(value, datetime):
        return value.date()
    return value


def order_age(creation_date: date, today: Union[date, datetime]) -> int:
    """Whole days between creation date and today. Negative for future orders."""
    return (_as_date(today) - _as_date(creation_date)).days


def classify_tier(
    age: int,
    is_approved: bool,
    tier_table: TierTable,
    policy: EscalationPolicy = DEFAULT_POLICY,
) -> UrgencyLabel:
    """
    Tier for an age, including the stuck-pending bump.

    An unapproved order older than `stuck_pending_after_days` that would
    otherwise land in the least severe tier moves one tier up.
    """
    tier = tier_table.classify(age)

    if (
        policy.stuck_pending_enabled
        and not is_approved
        and age > policy.stuck_pending_after_days
        and tier == tier_table.least_severe
    ):
        tier = tier_table.next_more_severe(tier)

    return tier


def effective_status(status: POStatus, age: int, policy: EscalationPolicy = DEFAULT_POLICY) -> POStatus:
    """Force Overdue past the threshold; terminal statuses are never overridden."""
    if status in TERMINAL_STATUSES:
        return status
    if age > policy.overdue_after_days:
        return POStatus.OVERDUE
    return status


def evaluate(
    order: PurchaseOrder,
    today: Union[date, datetime],
    tier_table: TierTable = STANDARD_TIERS,
    policy: EscalationPolicy = DEFAULT_POLICY,
) -> AugmentedOrder:
    """
    Augment one order with age, urgency tier and effective status.

    Args:
        order: Stored order record
        today: Current calendar date (time of day is ignored)
        tier_table: Active tier table
        policy: Escalation rules

    Returns:
        AugmentedOrder (a new object; the input is not modified)
    """
    age = order_age(order.creation_date, today)
    tier = classify_tier(age, order.is_approved, tier_table, policy)
    status = effective_status(order.status, age, policy)

    data = order.model_dump()
    data.update(status=status, age=age, urgency_tier=tier)
    return AugmentedOrder(**data)


def evaluate_all(
    orders: Iterable[PurchaseOrder],
    today: Union[date, datetime],
    tier_table: TierTable = STANDARD_TIERS,
    policy: EscalationPolicy = DEFAULT_POLICY,
) -> List[AugmentedOrder]:
    """Augment a whole collection, preserving order."""
    return [evaluate(order, today, tier_table, policy) for order in orders]


def engine_from_config(config: Config):
    """(tier_table, policy) pair for the configured engine."""
    return get_tier_table(config.URGENCY_TIER_TABLE), EscalationPolicy.from_config(config)
