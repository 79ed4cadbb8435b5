"""
Urgency tier tables.
An ordered list of (threshold-in-days, label) pairs, evaluated most-severe-first.
"""

from enum import Enum
from typing import FrozenSet, List, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator


class UrgencyLabel(str, Enum):
    """Every urgency label used by the built-in tier tables."""
    # Standard table
    THREE_ACTION = "Three Action"
    DOUBLE_ACTION = "Double Action"
    ACTION = "Action"
    # Extended table
    PO_1Y_DUE = "PO 1Y Due"
    PO_8M_DUE = "PO 8M Due"
    PO_6M_DUE = "PO 6M Due"
    PO_4M_DUE_ACTIONS = "PO 4M Due Actions"
    PO_3M_DUE_ACTION = "PO 3M Due Action"
    PO_1_5M_DUE_ACTION_MEDIUM = "PO 1.5M Due Action Medium"
    # Shared
    OVERDUE = "Overdue"
    DUE = "Due"
    MEDIUM_DUE = "Medium Due"
    LATEST = "Latest"
    NEW = "New"


class Tier(BaseModel):
    """One row of a tier table. `threshold=None` marks the catch-all tier."""
    model_config = ConfigDict(frozen=True)

    label: UrgencyLabel
    threshold: Optional[int] = None


class TierTable(BaseModel):
    """
    Ordered urgency tiers, most severe first.

    With `inclusive=False` a tier matches when age > threshold, with
    `inclusive=True` when age >= threshold. Thresholds must be strictly
    descending and the table must end in exactly one catch-all tier, so
    every integer age maps to exactly one tier.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    tiers: List[Tier]
    inclusive: bool = False
    critical: FrozenSet[UrgencyLabel] = Field(default_factory=frozenset)
    reminder: FrozenSet[UrgencyLabel] = Field(default_factory=frozenset)

    @model_validator(mode="after")
    def check_partition(self) -> "TierTable":
        if len(self.tiers) < 2:
            raise ValueError("A tier table needs at least two tiers")

        *bounded, catch_all = self.tiers
        if catch_all.threshold is not None:
            raise ValueError("The least severe tier must be a catch-all (threshold=None)")
        if any(t.threshold is None for t in bounded):
            raise ValueError("Only the last tier may be a catch-all")

        thresholds = [t.threshold for t in bounded]
        if any(a <= b for a, b in zip(thresholds, thresholds[1:])):
            raise ValueError(f"Thresholds must be strictly descending: {thresholds}")

        labels = [t.label for t in self.tiers]
        if len(set(labels)) != len(labels):
            raise ValueError("Tier labels must be unique")

        unknown = (self.critical | self.reminder) - set(labels)
        if unknown:
            raise ValueError(f"Critical/reminder labels not in table: {sorted(unknown)}")
        return self

    def matches(self, tier: Tier, age: int) -> bool:
        if tier.threshold is None:
            return True
        if self.inclusive:
            return age >= tier.threshold
        return age > tier.threshold

    def classify(self, age: int) -> UrgencyLabel:
        """First tier (most severe first) whose threshold predicate matches."""
        for tier in self.tiers:
            if self.matches(tier, age):
                return tier.label
        # Unreachable: the validator guarantees a trailing catch-all
        raise AssertionError(f"No tier matched age {age}")

    @property
    def labels(self) -> List[UrgencyLabel]:
        return [t.label for t in self.tiers]

    @property
    def least_severe(self) -> UrgencyLabel:
        return self.tiers[-1].label

    def next_more_severe(self, label: UrgencyLabel) -> UrgencyLabel:
        """The tier directly above `label`; the most severe tier maps to itself."""
        idx = self.labels.index(label)
        return self.tiers[max(0, idx - 1)].label


STANDARD_TIERS = TierTable(
    name="standard",
    inclusive=False,
    tiers=[
        Tier(label=UrgencyLabel.THREE_ACTION, threshold=180),
        Tier(label=UrgencyLabel.DOUBLE_ACTION, threshold=90),
        Tier(label=UrgencyLabel.ACTION, threshold=60),
        Tier(label=UrgencyLabel.OVERDUE, threshold=30),
        Tier(label=UrgencyLabel.DUE, threshold=20),
        Tier(label=UrgencyLabel.MEDIUM_DUE, threshold=10),
        Tier(label=UrgencyLabel.LATEST, threshold=8),
        Tier(label=UrgencyLabel.NEW),
    ],
    critical=frozenset({
        UrgencyLabel.ACTION,
        UrgencyLabel.DOUBLE_ACTION,
        UrgencyLabel.THREE_ACTION,
    }),
    reminder=frozenset({
        UrgencyLabel.THREE_ACTION,
        UrgencyLabel.DOUBLE_ACTION,
        UrgencyLabel.ACTION,
        UrgencyLabel.OVERDUE,
    }),
)


EXTENDED_TIERS = TierTable(
    name="extended",
    inclusive=True,
    tiers=[
        Tier(label=UrgencyLabel.PO_1Y_DUE, threshold=365),
        Tier(label=UrgencyLabel.PO_8M_DUE, threshold=240),
        Tier(label=UrgencyLabel.PO_6M_DUE, threshold=180),
        Tier(label=UrgencyLabel.PO_4M_DUE_ACTIONS, threshold=120),
        Tier(label=UrgencyLabel.PO_3M_DUE_ACTION, threshold=90),
        Tier(label=UrgencyLabel.PO_1_5M_DUE_ACTION_MEDIUM, threshold=45),
        Tier(label=UrgencyLabel.OVERDUE, threshold=31),
        Tier(label=UrgencyLabel.DUE, threshold=21),
        Tier(label=UrgencyLabel.MEDIUM_DUE, threshold=11),
        Tier(label=UrgencyLabel.LATEST, threshold=9),
        Tier(label=UrgencyLabel.NEW),
    ],
    critical=frozenset({
        UrgencyLabel.PO_1Y_DUE,
        UrgencyLabel.PO_8M_DUE,
        UrgencyLabel.PO_6M_DUE,
        UrgencyLabel.PO_4M_DUE_ACTIONS,
        UrgencyLabel.PO_3M_DUE_ACTION,
        UrgencyLabel.PO_1_5M_DUE_ACTION_MEDIUM,
    }),
    reminder=frozenset({
        UrgencyLabel.PO_1Y_DUE,
        UrgencyLabel.PO_8M_DUE,
        UrgencyLabel.PO_6M_DUE,
        UrgencyLabel.PO_4M_DUE_ACTIONS,
        UrgencyLabel.PO_3M_DUE_ACTION,
        UrgencyLabel.PO_1_5M_DUE_ACTION_MEDIUM,
        UrgencyLabel.OVERDUE,
    }),
)


TIER_TABLES = {
    STANDARD_TIERS.name: STANDARD_TIERS,
    EXTENDED_TIERS.name: EXTENDED_TIERS,
}


def get_tier_table(name: str) -> TierTable:
    """Look up a built-in tier table by name."""
    try:
        return TIER_TABLES[name]
    except KeyError:
        raise ValueError(f"Unknown tier table: {name}. Expected one of {sorted(TIER_TABLES)}")
