"""
Filter/Sort Pipeline
Applies search, status, urgency, item-code and date-range predicates to the
augmented order set and orders the result oldest-first.
"""

from datetime import date
from enum import Enum
from typing import Any, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, field_validator

from sentinel.schemas.order import AugmentedOrder, POStatus
from sentinel.schemas.tiers import UrgencyLabel
from sentinel.utils.dates import parse_date


ALL = "All"


class DateField(str, Enum):
    """Which order date the range filter tests."""
    CREATION = "creation_date"
    APPROVAL = "approve_date"
    DELIVERY = "delivery_date"


class FilterSpec(BaseModel):
    """
    Table filter state. `None` (or "All") means no constraint.
    Both date bounds are inclusive; the end bound covers the whole end day.
    """
    model_config = ConfigDict(frozen=True)

    search: str = ""
    status: Optional[POStatus] = None
    urgency: Optional[UrgencyLabel] = None
    item_code: Optional[str] = None
    date_field: DateField = DateField.CREATION
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @field_validator("status", "urgency", "item_code", mode="before")
    @classmethod
    def all_means_unconstrained(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and value.strip().lower() in ("", ALL.lower())):
            return None
        return value

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def resolve_bound(cls, value: Any) -> Optional[date]:
        return parse_date(value)

    @property
    def has_date_range(self) -> bool:
        return self.start_date is not None or self.end_date is not None


def matches_search(order: AugmentedOrder, term: str) -> bool:
    """Case-insensitive substring match on vendor, PO number or item code."""
    needle = term.strip().lower()
    if not needle:
        return True
    haystacks = (order.vendor, order.po_number, order.item_code or "")
    return any(needle in h.lower() for h in haystacks)


def matches_date_range(order: AugmentedOrder, spec: FilterSpec) -> bool:
    """Orders missing the selected date fail whenever a bound is set."""
    if not spec.has_date_range:
        return True

    target: Optional[date] = getattr(order, spec.date_field.value)
    if target is None:
        return False
    if spec.start_date is not None and target < spec.start_date:
        return False
    # Calendar dates compare by day, so the end bound includes the entire day
    if spec.end_date is not None and target > spec.end_date:
        return False
    return True


def matches(order: AugmentedOrder, spec: FilterSpec) -> bool:
    if not matches_search(order, spec.search):
        return False
    if spec.status is not None and order.status != spec.status:
        return False
    if spec.urgency is not None and order.urgency_tier != spec.urgency:
        return False
    if spec.item_code is not None and order.item_code != spec.item_code:
        return False
    return matches_date_range(order, spec)


def query(records: Sequence[AugmentedOrder], spec: Optional[FilterSpec] = None) -> List[AugmentedOrder]:
    """
    Filter the augmented set and sort by age, oldest first.

    The sort is stable, so equal ages keep their collection order.
    """
    spec = spec or FilterSpec()
    selected = [r for r in records if matches(r, spec)]
    return sorted(selected, key=lambda r: r.age, reverse=True)


def item_code_options(records: Sequence[AugmentedOrder]) -> List[str]:
    """Distinct, non-empty item codes for the item-code dropdown."""
    return sorted({r.item_code for r in records if r.item_code})
