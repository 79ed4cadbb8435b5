"""
Purchase Order schema and data models.
Field aliases keep the camelCase keys used by persisted order blobs.
"""

import secrets
import string
from datetime import date
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from sentinel.schemas.tiers import UrgencyLabel
from sentinel.utils import to_float
from sentinel.utils.dates import parse_date


class POStatus(str, Enum):
    """Lifecycle status of a purchase order."""
    DRAFT = "Draft"
    PENDING = "Pending"
    APPROVED = "Approved"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    OVERDUE = "Overdue"
    CANCELLED = "Cancelled"


class POPriority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


TERMINAL_STATUSES = frozenset({POStatus.DELIVERED, POStatus.CANCELLED})

_ID_ALPHABET = string.ascii_lowercase + string.digits


def new_order_id() -> str:
    """Opaque 9-character base36 identifier."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))


class PurchaseOrder(BaseModel):
    """A Purchase Order record."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(default_factory=new_order_id)
    po_number: str = Field(alias="poNumber")
    vendor: str
    creation_date: date = Field(alias="creationDate")
    approve_date: Optional[date] = Field(default=None, alias="approveDate")
    delivery_date: Optional[date] = Field(default=None, alias="deliveryDate")
    status: POStatus = POStatus.PENDING
    priority: POPriority = POPriority.MEDIUM
    total_amount: float = Field(default=0.0, alias="totalAmount")

    # Line item metadata
    item_code: str = Field(default="", alias="itemCode")
    unit_price: float = Field(default=0.0, alias="unitPrice")
    currency: str = ""
    quantity: float = 0.0
    uom: str = ""
    item_description: str = Field(default="", alias="itemDescription")
    pending_quantity: float = Field(default=0.0, alias="pendingQuantity")
    notes: str = ""

    @field_validator("creation_date", mode="before")
    @classmethod
    def resolve_creation_date(cls, value: Any) -> date:
        resolved = parse_date(value)
        if resolved is None:
            raise ValueError(f"Unresolvable creation date: {value!r}")
        return resolved

    @field_validator("approve_date", "delivery_date", mode="before")
    @classmethod
    def resolve_optional_date(cls, value: Any) -> Optional[date]:
        # Advisory dates: anything unresolvable is treated as absent
        return parse_date(value)

    @field_validator("total_amount", "unit_price", "quantity", "pending_quantity", mode="before")
    @classmethod
    def coerce_number(cls, value: Any) -> float:
        return to_float(value)

    @field_validator("item_code", "currency", "uom", "item_description", "notes", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @property
    def is_approved(self) -> bool:
        return self.approve_date is not None

    def to_record(self) -> dict:
        """JSON-ready dict with the persisted (camelCase) keys."""
        return self.model_dump(mode="json", by_alias=True)


class AugmentedOrder(PurchaseOrder):
    """
    A purchase order plus derived, never-persisted fields.

    `status` holds the effective status (possibly forced to Overdue).
    """
    age: int
    urgency_tier: UrgencyLabel = Field(alias="calculatedUrgency")

    @property
    def is_active(self) -> bool:
        return self.status not in TERMINAL_STATUSES
