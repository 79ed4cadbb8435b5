"""
PO Sentinel: purchase order urgency tracking
"""

__version__ = "1.0.0"
__description__ = "Purchase order ageing, urgency alerts and daily reminders"

from sentinel.main import SentinelDashboard
from sentinel.state import DashboardState
from sentinel.schemas.order import AugmentedOrder, PurchaseOrder

__all__ = [
    "SentinelDashboard",
    "DashboardState",
    "AugmentedOrder",
    "PurchaseOrder",
]
