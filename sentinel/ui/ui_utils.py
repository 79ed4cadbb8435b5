"""
UI Utility Functions

Helper functions for Streamlit visualization.
These are purely for presentation - no business logic.
"""

from typing import Any, Dict, List, Sequence
from enum import Enum

import pandas as pd

from sentinel.schemas.order import AugmentedOrder
from sentinel.utils.dates import format_display_date


class BadgeColor(str, Enum):
    """Badge palette used by the order table."""
    RED = "#dc3545"
    ORANGE = "#fd7e14"
    YELLOW = "#ffc107"
    BLUE = "#0d6efd"
    GREEN = "#28a745"
    GREY = "#6c757d"


URGENCY_EMOJI = {
    "Three Action": "🚨",
    "Double Action": "🔴",
    "Action": "🟠",
    "PO 1Y Due": "🚨",
    "PO 8M Due": "🚨",
    "PO 6M Due": "🔴",
    "PO 4M Due Actions": "🔴",
    "PO 3M Due Action": "🟠",
    "PO 1.5M Due Action Medium": "🟠",
    "Overdue": "🟡",
    "Due": "🟡",
    "Medium Due": "🔵",
    "Latest": "🟢",
    "New": "🟢",
}

STATUS_COLORS = {
    "Draft": BadgeColor.GREY,
    "Pending": BadgeColor.YELLOW,
    "Approved": BadgeColor.BLUE,
    "Shipped": BadgeColor.BLUE,
    "Delivered": BadgeColor.GREEN,
    "Overdue": BadgeColor.RED,
    "Cancelled": BadgeColor.GREY,
}

ALERT_EMOJI = {
    "critical": "🔴",
    "warning": "🟡",
    "info": "🔵",
}


def get_urgency_emoji(tier: str) -> str:
    """Get emoji for an urgency tier label."""
    return URGENCY_EMOJI.get(getattr(tier, "value", tier), "⚪")


def get_status_color(status: str) -> str:
    """Get badge color for an order status."""
    return STATUS_COLORS.get(getattr(status, "value", status), BadgeColor.GREY).value


def status_cell_style(status: str) -> str:
    """CSS for one Status cell of the order table."""
    return f"color: {get_status_color(status)}; font-weight: 600"


def get_alert_emoji(severity: str) -> str:
    return ALERT_EMOJI.get(getattr(severity, "value", severity), "⚪")


def format_urgency_display(tier: str) -> str:
    label = getattr(tier, "value", tier)
    return f"{get_urgency_emoji(label)} {label}"


def format_amount(amount: float, currency: str = "") -> str:
    """Format a money amount with thousands separators."""
    return f"{currency or 'USD'} {amount:,.2f}"


def format_age(age: int) -> str:
    if age < 0:
        return f"in {-age} days"
    if age == 1:
        return "1 day"
    return f"{age} days"


def format_order_for_display(order: AugmentedOrder) -> Dict[str, Any]:
    """
    Format one augmented order as a table row.

    Args:
        order: Augmented order record

    Returns:
        Dict keyed by column header
    """
    return {
        "PO Number": order.po_number,
        "Vendor": order.vendor,
        "Urgency": format_urgency_display(order.urgency_tier),
        "Status": order.status.value,
        "Priority": order.priority.value,
        "Order Date": format_display_date(order.creation_date),
        "Due Date": format_display_date(order.delivery_date),
        "Item Code": order.item_code or "-",
        "Amount": format_amount(order.total_amount, order.currency),
        "Age": format_age(order.age),
    }


def format_orders_for_display(orders: Sequence[AugmentedOrder]) -> List[Dict[str, Any]]:
    return [format_order_for_display(o) for o in orders]


def chart_rows(counts: Dict[str, int], label: str) -> List[Dict[str, Any]]:
    """Turn a {name: count} mapping into rows for st.bar_chart."""
    return [{label: name, "Orders": count} for name, count in counts.items()]


def style_order_table(rows: List[Dict[str, Any]]) -> "pd.io.formats.style.Styler":
    """DataFrame of display rows with the Status column colored by badge."""
    return pd.DataFrame(rows).style.map(status_cell_style, subset=["Status"])
