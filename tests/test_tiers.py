"""
Tests for tier tables.
"""

import pytest

from sentinel.schemas.tiers import (
    EXTENDED_TIERS,
    STANDARD_TIERS,
    Tier,
    TierTable,
    UrgencyLabel,
    get_tier_table,
)


@pytest.mark.parametrize("table", [STANDARD_TIERS, EXTENDED_TIERS], ids=lambda t: t.name)
def test_every_age_maps_to_exactly_one_tier(table):
    for age in range(-10, 1001):
        hits = [
            t.label for i, t in enumerate(table.tiers)
            if table.matches(t, age) and not any(table.matches(p, age) for p in table.tiers[:i])
        ]
        assert len(hits) == 1
        assert table.classify(age) == hits[0]


@pytest.mark.parametrize("age, expected", [
    (181, UrgencyLabel.THREE_ACTION),
    (180, UrgencyLabel.DOUBLE_ACTION),
    (91, UrgencyLabel.DOUBLE_ACTION),
    (90, UrgencyLabel.ACTION),
    (61, UrgencyLabel.ACTION),
    (31, UrgencyLabel.OVERDUE),
    (30, UrgencyLabel.DUE),
    (21, UrgencyLabel.DUE),
    (11, UrgencyLabel.MEDIUM_DUE),
    (9, UrgencyLabel.LATEST),
    (8, UrgencyLabel.NEW),
    (0, UrgencyLabel.NEW),
    (-5, UrgencyLabel.NEW),
])
def test_standard_boundaries_are_exclusive(age, expected):
    assert STANDARD_TIERS.classify(age) == expected


@pytest.mark.parametrize("age, expected", [
    (365, UrgencyLabel.PO_1Y_DUE),
    (364, UrgencyLabel.PO_8M_DUE),
    (240, UrgencyLabel.PO_8M_DUE),
    (180, UrgencyLabel.PO_6M_DUE),
    (120, UrgencyLabel.PO_4M_DUE_ACTIONS),
    (90, UrgencyLabel.PO_3M_DUE_ACTION),
    (45, UrgencyLabel.PO_1_5M_DUE_ACTION_MEDIUM),
    (44, UrgencyLabel.OVERDUE),
    (31, UrgencyLabel.OVERDUE),
    (30, UrgencyLabel.DUE),
    (11, UrgencyLabel.MEDIUM_DUE),
    (9, UrgencyLabel.LATEST),
    (8, UrgencyLabel.NEW),
])
def test_extended_boundaries_are_inclusive(age, expected):
    assert EXTENDED_TIERS.classify(age) == expected


def test_tier_navigation():
    assert STANDARD_TIERS.least_severe == UrgencyLabel.NEW
    assert STANDARD_TIERS.next_more_severe(UrgencyLabel.NEW) == UrgencyLabel.LATEST
    assert STANDARD_TIERS.next_more_severe(UrgencyLabel.THREE_ACTION) == UrgencyLabel.THREE_ACTION
    assert len(STANDARD_TIERS.labels) == 8
    assert len(EXTENDED_TIERS.labels) == 11


class TestTableValidation:

    def test_rejects_non_descending_thresholds(self):
        with pytest.raises(ValueError):
            TierTable(name="bad", tiers=[
                Tier(label=UrgencyLabel.ACTION, threshold=10),
                Tier(label=UrgencyLabel.DUE, threshold=20),
                Tier(label=UrgencyLabel.NEW),
            ])

    def test_requires_trailing_catch_all(self):
        with pytest.raises(ValueError):
            TierTable(name="bad", tiers=[
                Tier(label=UrgencyLabel.ACTION, threshold=10),
                Tier(label=UrgencyLabel.DUE, threshold=5),
            ])

    def test_critical_labels_must_exist(self):
        with pytest.raises(ValueError):
            TierTable(
                name="bad",
                tiers=[Tier(label=UrgencyLabel.DUE, threshold=5), Tier(label=UrgencyLabel.NEW)],
                critical=frozenset({UrgencyLabel.THREE_ACTION}),
            )


def test_lookup_by_name():
    assert get_tier_table("standard") is STANDARD_TIERS
    assert get_tier_table("extended") is EXTENDED_TIERS
    with pytest.raises(ValueError):
        get_tier_table("weekly")
