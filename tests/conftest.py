"""
Shared fixtures.
"""

import os
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

# Select TestConfig (mock LLM mode) before any sentinel module reads the environment
os.environ.setdefault("ENV", "test")

from datetime import date, timedelta

import pytest

from sentinel.schemas.order import POPriority, POStatus, PurchaseOrder


TODAY = date(2024, 6, 3)  # a Monday


def make_order(age: int, today: date = TODAY, **overrides) -> PurchaseOrder:
    """An approved pending order created `age` days before `today`."""
    creation = today - timedelta(days=age)
    fields = dict(
        po_number=f"PO-{age:04d}",
        vendor="Acme Corp",
        creation_date=creation,
        approve_date=creation,
        delivery_date=creation + timedelta(days=45),
        status=POStatus.PENDING,
        priority=POPriority.MEDIUM,
        total_amount=1000.0,
        item_code="WID-001",
    )
    fields.update(overrides)
    return PurchaseOrder(**fields)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def store_path(tmp_path):
    return str(tmp_path / "store.json")
