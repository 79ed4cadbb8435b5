"""
Tests for the order store and its persistence.
"""

import json
import pytest
from datetime import date

from sentinel.store import (
    LAST_REMINDER_KEY,
    ORDERS_KEY,
    ConfirmationRequired,
    OrderStore,
)
from conftest import make_order


def test_missing_file_loads_seed_orders(store_path):
    store = OrderStore(store_path).load()
    assert [o.po_number for o in store.orders] == ["PO-2023-001", "PO-2023-002"]
    assert store.last_reminder_date is None


def test_seed_can_be_disabled(store_path):
    assert OrderStore(store_path, seed=False).load().orders == ()


def test_corrupt_file_falls_back_to_defaults(store_path):
    with open(store_path, "w") as f:
        f.write("{not json")
    store = OrderStore(store_path).load()
    assert len(store.orders) == 2


def test_invalid_records_fall_back_to_defaults(store_path):
    with open(store_path, "w") as f:
        json.dump({ORDERS_KEY: [{"poNumber": "x"}], LAST_REMINDER_KEY: "2024-06-01"}, f)
    store = OrderStore(store_path).load()
    assert len(store.orders) == 2
    assert store.last_reminder_date == "2024-06-01"


def test_add_prepends_persists_and_assigns_id(store_path):
    store = OrderStore(store_path, seed=False).load()
    first = store.add(make_order(3, po_number="PO-1"))
    second = store.add(make_order(3, po_number="PO-2"))

    assert first.id != second.id
    assert len(first.id) == 9
    assert [o.po_number for o in store.orders] == ["PO-2", "PO-1"]

    reloaded = OrderStore(store_path).load()
    assert [o.id for o in reloaded.orders] == [second.id, first.id]


def test_persisted_blob_uses_record_keys(store_path):
    store = OrderStore(store_path, seed=False).load()
    store.add(make_order(3, po_number="PO-1"))

    with open(store_path) as f:
        blob = json.load(f)
    record = blob[ORDERS_KEY][0]
    assert record["poNumber"] == "PO-1"
    assert "creationDate" in record
    assert "age" not in record


def test_mutations_are_copy_on_write(store_path):
    store = OrderStore(store_path, seed=False).load()
    store.add(make_order(3))
    snapshot = store.orders
    store.add(make_order(4))

    assert len(snapshot) == 1
    assert len(store.orders) == 2


def test_update_keeps_identifier(store_path):
    store = OrderStore(store_path, seed=False).load()
    created = store.add(make_order(3, po_number="PO-1"))

    edited = store.update(created.id, make_order(3, po_number="PO-1B"))

    assert edited.id == created.id
    assert store.get(created.id).po_number == "PO-1B"
    with pytest.raises(KeyError):
        store.update("missing", make_order(3))


def test_delete_requires_confirmation(store_path):
    store = OrderStore(store_path, seed=False).load()
    created = store.add(make_order(3))

    with pytest.raises(ConfirmationRequired):
        store.delete(created.id)
    assert len(store.orders) == 1

    store.delete(created.id, confirm=True)
    assert store.orders == ()
    with pytest.raises(KeyError):
        store.delete(created.id, confirm=True)


def test_import_gives_fresh_ids(store_path):
    store = OrderStore(store_path, seed=False).load()
    order = make_order(3)
    imported = store.import_orders([order, order])

    assert len({o.id for o in imported}) == 2
    assert order.id not in {o.id for o in imported}


def test_reset_persists_empty_collection(store_path):
    store = OrderStore(store_path).load()
    with pytest.raises(ConfirmationRequired):
        store.reset()

    store.reset(confirm=True)
    assert store.orders == ()
    assert OrderStore(store_path).load().orders == ()


def test_last_reminder_is_persisted(store_path):
    store = OrderStore(store_path).load()
    store.set_last_reminder(date(2024, 6, 3))
    assert OrderStore(store_path).load().last_reminder_date == "2024-06-03"


def test_memory_only_store():
    store = OrderStore().load()
    store.add(make_order(1))
    assert len(store.orders) == 3
