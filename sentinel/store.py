"""
Order store: the in-memory order collection plus its persisted blob.

The collection is copy-on-write: every mutation builds a new tuple, so
readers holding the previous collection never observe a partial update.
Persistence is a single JSON file with two keys, overwritten wholesale.
"""

import json
from datetime import date
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from pydantic import ValidationError

from sentinel.schemas.order import POPriority, POStatus, PurchaseOrder, new_order_id
from sentinel.utils.logging import setup_logging


logger = setup_logging(__name__)

ORDERS_KEY = "sentinel_pos"
LAST_REMINDER_KEY = "sentinel_last_reminder"


class ConfirmationRequired(RuntimeError):
    """A destructive action was requested without explicit confirmation."""


SEED_ORDERS = [
    {
        "id": "1",
        "poNumber": "PO-2023-001",
        "vendor": "Global Tech Solutions",
        "creationDate": "2024-01-01",
        "approveDate": "2024-01-05",
        "deliveryDate": "2024-02-15",
        "status": POStatus.DELIVERED.value,
        "priority": POPriority.HIGH.value,
        "totalAmount": 4500.00,
        "itemCode": "LAP-001",
        "unitPrice": 1500,
        "currency": "USD",
        "quantity": 3,
        "uom": "PCS",
        "itemDescription": "High-end developer laptops",
        "pendingQuantity": 0,
    },
    {
        "id": "2",
        "poNumber": "PO-2023-002",
        "vendor": "Office Depot Prime",
        "creationDate": "2024-02-10",
        "approveDate": "2024-02-12",
        "deliveryDate": "2024-03-25",
        "status": POStatus.SHIPPED.value,
        "priority": POPriority.MEDIUM.value,
        "totalAmount": 1200.50,
        "itemCode": "CHR-442",
        "unitPrice": 240.10,
        "currency": "USD",
        "quantity": 5,
        "uom": "PCS",
        "itemDescription": "Ergonomic task chairs",
        "pendingQuantity": 2,
    },
]


def seed_orders() -> Tuple[PurchaseOrder, ...]:
    return tuple(PurchaseOrder(**o) for o in SEED_ORDERS)


class OrderStore:
    """
    Owns the order collection and the last-reminder date.

    A missing or corrupt blob is treated as "no data": the store falls back
    to the seed orders and no reminder date.
    """

    def __init__(self, path: Optional[str] = None, seed: bool = True):
        self.path = Path(path) if path else None
        self._seed = seed
        self._orders: Tuple[PurchaseOrder, ...] = ()
        self._last_reminder: Optional[str] = None

    @property
    def orders(self) -> Tuple[PurchaseOrder, ...]:
        return self._orders

    @property
    def last_reminder_date(self) -> Optional[str]:
        return self._last_reminder

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _read_blob(self) -> dict:
        if self.path is None or not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                blob = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Store file unreadable ({self.path}): {e}. Using defaults.")
            return {}
        if not isinstance(blob, dict):
            logger.warning(f"Store file has unexpected shape ({type(blob).__name__}). Using defaults.")
            return {}
        return blob

    def load(self) -> "OrderStore":
        blob = self._read_blob()

        orders = None
        raw_orders = blob.get(ORDERS_KEY)
        if isinstance(raw_orders, list):
            try:
                orders = tuple(PurchaseOrder(**o) for o in raw_orders)
            except (TypeError, ValidationError) as e:
                logger.warning(f"Stored orders are corrupt: {e}. Using defaults.")

        if orders is None:
            orders = seed_orders() if self._seed else ()

        last = blob.get(LAST_REMINDER_KEY)
        self._orders = orders
        self._last_reminder = last if isinstance(last, str) and last else None

        logger.info(f"Loaded {len(self._orders)} purchase orders")
        return self

    def save(self) -> None:
        if self.path is None:
            return
        blob = {
            ORDERS_KEY: [o.to_record() for o in self._orders],
            LAST_REMINDER_KEY: self._last_reminder,
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(blob, f, indent=2)
        tmp_path.replace(self.path)

    def replace(self, orders: Iterable[PurchaseOrder]) -> Tuple[PurchaseOrder, ...]:
        """Swap in a new collection and persist it."""
        self._orders = tuple(orders)
        self.save()
        return self._orders

    # ------------------------------------------------------------------
    # Mutations (each produces a new collection)
    # ------------------------------------------------------------------

    def add(self, order: PurchaseOrder) -> PurchaseOrder:
        """Insert as the newest order with a fresh identifier."""
        created = order.model_copy(update={"id": new_order_id()})
        self.replace((created,) + self._orders)
        logger.info(f"Added order {created.po_number} ({created.id})")
        return created

    def update(self, order_id: str, order: PurchaseOrder) -> PurchaseOrder:
        """Replace the order with `order_id`; the identifier is preserved."""
        if not any(o.id == order_id for o in self._orders):
            raise KeyError(f"No order with id {order_id}")
        edited = order.model_copy(update={"id": order_id})
        self.replace(edited if o.id == order_id else o for o in self._orders)
        logger.info(f"Updated order {edited.po_number} ({order_id})")
        return edited

    def delete(self, order_id: str, confirm: bool = False) -> None:
        if not confirm:
            raise ConfirmationRequired("Are you sure you want to delete this purchase order?")
        remaining = tuple(o for o in self._orders if o.id != order_id)
        if len(remaining) == len(self._orders):
            raise KeyError(f"No order with id {order_id}")
        self.replace(remaining)
        logger.info(f"Deleted order {order_id}")

    def import_orders(self, orders: Iterable[PurchaseOrder]) -> List[PurchaseOrder]:
        """Prepend imported orders, each with a fresh identifier."""
        imported = [o.model_copy(update={"id": new_order_id()}) for o in orders]
        self.replace(tuple(imported) + self._orders)
        logger.info(f"Imported {len(imported)} purchase orders")
        return imported

    def reset(self, confirm: bool = False) -> None:
        """Delete every record. The empty collection is persisted, so seeds do not return."""
        if not confirm:
            raise ConfirmationRequired(
                "This will permanently delete all records and reset the system."
            )
        self.replace(())
        logger.warning("All purchase orders were reset")

    def set_last_reminder(self, value: date) -> None:
        self._last_reminder = value.isoformat() if isinstance(value, date) else str(value)
        self.save()

    def get(self, order_id: str) -> Optional[PurchaseOrder]:
        return next((o for o in self._orders if o.id == order_id), None)
