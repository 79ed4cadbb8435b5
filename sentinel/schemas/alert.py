"""
Alert schema for the notification center.
"""

from datetime import datetime, timezone
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field


class AlertSeverity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


def alert_id_for(tier: str, order_id: str) -> str:
    """Deterministic alert identity: one alert per (tier, order) pair."""
    return f"{tier}-{order_id}"


class Alert(BaseModel):
    """A single notification surfaced to the user."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str  # tier + "-" + order id, never random
    po_id: str = Field(alias="poId")
    po_number: str = Field(alias="poNumber")
    title: str
    message: str
    type: AlertSeverity = AlertSeverity.CRITICAL
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    is_read: bool = Field(default=False, alias="isRead")
