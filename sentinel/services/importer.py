"""
Spreadsheet Import
Maps rows of an uploaded Excel/CSV file onto purchase orders.

Column headers are matched against an alias table, first exactly (after
lower-casing and stripping punctuation) and then fuzzily for near misses.
Imports are atomic: any format failure aborts the whole file.
"""

import pathlib
import random
import re
from datetime import date
from typing import Any, Dict, List, Optional

import pandas as pd
from rapidfuzz import fuzz, process

from sentinel.schemas.order import POPriority, POStatus, PurchaseOrder
from sentinel.utils import to_float
from sentinel.utils.dates import add_days, is_blank, parse_date
from sentinel.utils.logging import setup_logging, log_service_action
from sentinel.config import get_config


logger = setup_logging(__name__)
config = get_config()

SUPPORTED_EXTENSIONS = {".xlsx", ".xlsm", ".csv"}
FUZZY_HEADER_THRESHOLD = 90

COLUMN_ALIASES: Dict[str, List[str]] = {
    "po_number": ["PONumber", "PO Number", "PO_Number", "OrderNumber", "Order_No"],
    "vendor": ["VendorName", "Vendor Name", "Vendor", "Supplier", "Supplier Name"],
    "creation_date": [
        "PODate", "Order Date", "PO Date", "OrderDate", "PO_Date",
        "CreationDate", "Creation Date", "DateCreated",
    ],
    "approve_date": ["ApproveDate", "Approve Date", "Approval Date"],
    "delivery_date": ["DeliveryDate", "Delivery Date", "DueDate", "Due Date"],
    "item_code": ["ItemCode", "Item Code", "PartNumber", "Code"],
    "unit_price": ["UnitPrice", "Unit Price", "Rate"],
    "currency": ["Currency", "Curr"],
    "quantity": ["Quantity", "Qty"],
    "uom": ["UOM", "Unit", "Unit of Measure"],
    "item_description": ["ItemDescription", "Item Description", "Description"],
    "pending_quantity": ["PendingQuantity", "Pending Quantity", "Pending", "Pending Qty"],
    "status": ["Status", "State"],
    "priority": ["Priority", "Urgency"],
    "notes": ["Notes", "Remarks"],
    "total_amount": ["Total", "Total Amount", "Amount"],
}

REQUIRED_FIELDS = ("po_number",)

# Substring -> status, checked in this order
STATUS_KEYWORDS = [
    ("draft", POStatus.DRAFT),
    ("pending", POStatus.PENDING),
    ("approved", POStatus.APPROVED),
    ("shipped", POStatus.SHIPPED),
    ("delivered", POStatus.DELIVERED),
    ("overdue", POStatus.OVERDUE),
    ("cancelled", POStatus.CANCELLED),
]


class ImportFormatError(ValueError):
    """The file cannot be imported; nothing was imported."""


def normalize_header(header: Any) -> str:
    return re.sub(r"[^a-z0-9]", "", str(header).lower())


_ALIAS_LOOKUP = {
    normalize_header(alias): field
    for field, aliases in COLUMN_ALIASES.items()
    for alias in aliases
}


def map_columns(columns: List[Any]) -> Dict[str, Any]:
    """
    Map canonical field names to the file's column labels.

    The first column claiming a field wins.
    """
    mapping: Dict[str, Any] = {}
    unmatched = []

    for col in columns:
        field = _ALIAS_LOOKUP.get(normalize_header(col))
        if field is None:
            unmatched.append(col)
        elif field not in mapping:
            mapping[field] = col

    choices = list(_ALIAS_LOOKUP.keys())
    for col in unmatched:
        normalized = normalize_header(col)
        if not normalized:
            continue
        best = process.extractOne(normalized, choices, scorer=fuzz.ratio)
        if best and best[1] >= FUZZY_HEADER_THRESHOLD:
            field = _ALIAS_LOOKUP[best[0]]
            if field not in mapping:
                logger.debug(f"Fuzzy header match: '{col}' -> {field} (score {best[1]:.0f})")
                mapping[field] = col

    return mapping


def parse_status(value: Any) -> POStatus:
    raw = "" if is_blank(value) else str(value).lower()
    for keyword, status in STATUS_KEYWORDS:
        if keyword in raw:
            return status
    return POStatus.PENDING


def parse_priority(value: Any) -> POPriority:
    raw = "" if is_blank(value) else str(value).lower()
    if "high" in raw:
        return POPriority.HIGH
    if "low" in raw:
        return POPriority.LOW
    return POPriority.MEDIUM


def _text(value: Any, default: str = "") -> str:
    if is_blank(value):
        return default
    if isinstance(value, float) and value.is_integer():
        # Spreadsheet engines hand back "1001" as 1001.0
        return str(int(value))
    return str(value).strip()


def row_to_order(row: Dict[str, Any], mapping: Dict[str, Any], today: date, row_number: int) -> PurchaseOrder:
    """Build one order from a spreadsheet row. Raises ImportFormatError on a bad creation date."""

    def cell(field: str) -> Any:
        col = mapping.get(field)
        return row.get(col) if col is not None else None

    raw_created = cell("creation_date")
    if is_blank(raw_created):
        creation_date = today
    else:
        creation_date = parse_date(raw_created)
        if creation_date is None:
            raise ImportFormatError(f"Row {row_number}: unresolvable order date {raw_created!r}")

    delivery_date = parse_date(cell("delivery_date"))
    if delivery_date is None:
        delivery_date = add_days(creation_date, config.IMPORT_DEFAULT_LEAD_DAYS)

    unit_price = to_float(cell("unit_price"))
    quantity = to_float(cell("quantity"))
    total_amount = unit_price * quantity
    if total_amount == 0:
        total_amount = to_float(cell("total_amount"))

    return PurchaseOrder(
        po_number=_text(cell("po_number"), f"PO-{random.randint(0, 9999)}"),
        vendor=_text(cell("vendor"), "Unknown Vendor"),
        creation_date=creation_date,
        approve_date=parse_date(cell("approve_date")),
        delivery_date=delivery_date,
        status=parse_status(cell("status")),
        priority=parse_priority(cell("priority")),
        total_amount=total_amount,
        item_code=_text(cell("item_code")),
        unit_price=unit_price,
        currency=_text(cell("currency")),
        quantity=quantity,
        uom=_text(cell("uom")),
        item_description=_text(cell("item_description")),
        pending_quantity=to_float(cell("pending_quantity")),
        notes=_text(cell("notes")),
    )


def _source_name(source: Any) -> str:
    if isinstance(source, (str, pathlib.Path)):
        return str(source)
    return str(getattr(source, "name", ""))


def read_table(source: Any) -> pd.DataFrame:
    """
    Read the first sheet of an Excel workbook or a CSV file.
    Accepts a path or a file-like object with a `name` (e.g. an upload).
    """
    suffix = pathlib.Path(_source_name(source)).suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        raise ImportFormatError(f"Unsupported file type: {suffix or 'unknown'}")

    try:
        if suffix == ".csv":
            return pd.read_csv(source)
        return pd.read_excel(source, sheet_name=0, engine="openpyxl")
    except Exception as e:
        raise ImportFormatError(f"Failed to read {suffix} file: {e}") from e


def frame_to_orders(df: pd.DataFrame, today: Optional[date] = None) -> List[PurchaseOrder]:
    """Convert a whole table. Either every row converts or ImportFormatError is raised."""
    today = today or date.today()

    if df is None or df.empty:
        raise ImportFormatError("The file contains no rows")

    mapping = map_columns(list(df.columns))
    missing = [f for f in REQUIRED_FIELDS if f not in mapping]
    if missing:
        raise ImportFormatError(
            f"Missing required columns: {', '.join(missing)}. Please check column headers."
        )

    orders = []
    for idx, row in enumerate(df.to_dict(orient="records"), start=1):
        orders.append(row_to_order(row, mapping, today, idx))
    return orders


def import_file(source: Any, today: Optional[date] = None) -> List[PurchaseOrder]:
    """Read and convert an uploaded file. Raises ImportFormatError on any failure."""
    df = read_table(source)
    orders = frame_to_orders(df, today)
    log_service_action(logger, "Importer", "file_imported", {
        "source": _source_name(source),
        "rows": len(orders),
    })
    return orders
