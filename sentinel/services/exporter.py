"""
Spreadsheet Export
Writes the current filtered view to a flat table with a fixed column order.
"""

from datetime import date
from io import BytesIO
from typing import Any, Sequence

import pandas as pd

from sentinel.schemas.order import AugmentedOrder
from sentinel.utils.dates import to_iso
from sentinel.utils.logging import setup_logging


logger = setup_logging(__name__)

SHEET_NAME = "Filtered_POs"

# (header, width) in export order
EXPORT_COLUMNS = [
    ("PO Number", 15),
    ("Urgency", 15),
    ("Status", 12),
    ("Order Date", 12),
    ("Due Date", 12),
    ("Vendor Name", 25),
    ("Item Code", 15),
    ("Quantity", 10),
    ("Pending Qty", 10),
    ("Unit Price", 10),
    ("Currency", 8),
    ("Total Amount", 12),
    ("Description", 40),
    ("Age (Days)", 10),
]


class ExportError(ValueError):
    """Nothing to export."""


def export_filename(today: date) -> str:
    return f"PO_Sentinel_Export_{today.isoformat()}.xlsx"


def build_export_frame(records: Sequence[AugmentedOrder]) -> pd.DataFrame:
    rows = [
        {
            "PO Number": r.po_number,
            "Urgency": r.urgency_tier.value,
            "Status": r.status.value,
            "Order Date": to_iso(r.creation_date),
            "Due Date": to_iso(r.delivery_date),
            "Vendor Name": r.vendor,
            "Item Code": r.item_code,
            "Quantity": r.quantity,
            "Pending Qty": r.pending_quantity,
            "Unit Price": r.unit_price,
            "Currency": r.currency or "USD",
            "Total Amount": r.total_amount,
            "Description": r.item_description,
            "Age (Days)": r.age,
        }
        for r in records
    ]
    return pd.DataFrame(rows, columns=[name for name, _ in EXPORT_COLUMNS])


def write_xlsx(records: Sequence[AugmentedOrder], target: Any) -> None:
    """Write the view to an .xlsx path or binary buffer."""
    if not records:
        raise ExportError("No data available to export with current filters.")

    df = build_export_frame(records)
    with pd.ExcelWriter(target, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=SHEET_NAME, index=False)
        worksheet = writer.sheets[SHEET_NAME]
        for idx, (_, width) in enumerate(EXPORT_COLUMNS):
            worksheet.column_dimensions[chr(ord("A") + idx)].width = width

    logger.info(f"Exported {len(records)} purchase orders")


def to_xlsx_bytes(records: Sequence[AugmentedOrder]) -> bytes:
    buffer = BytesIO()
    write_xlsx(records, buffer)
    return buffer.getvalue()


def to_csv(records: Sequence[AugmentedOrder]) -> str:
    if not records:
        raise ExportError("No data available to export with current filters.")
    return build_export_frame(records).to_csv(index=False)
