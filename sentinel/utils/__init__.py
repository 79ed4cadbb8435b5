"""
Shared utilities and helpers.
"""

import json
import math
import re
from typing import Any, Dict
from datetime import date, datetime


def serialize_for_json(obj: Any) -> Any:
    """Serialize objects that aren't JSON-serializable by default."""
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    elif hasattr(obj, 'model_dump'):  # Pydantic model
        return obj.model_dump(mode="json", by_alias=True)
    elif hasattr(obj, '__dict__'):
        return obj.__dict__
    return str(obj)


def dict_to_json_string(data: Any) -> str:
    """Convert dict to JSON string, handling non-serializable types."""
    return json.dumps(data, default=serialize_for_json, indent=2)


def to_float(value: Any, default: float = 0.0) -> float:
    """
    Lenient numeric coercion for spreadsheet cells.

    Strips currency symbols, thousands separators and other non-numeric
    characters ("$1,200.50" -> 1200.5). Anything unparseable, empty or NaN
    becomes `default`.
    """
    if value is None or isinstance(value, bool):
        return float(default)

    if isinstance(value, (int, float)):
        if isinstance(value, float) and math.isnan(value):
            return float(default)
        return float(value)

    cleaned = re.sub(r"[^0-9.\-]+", "", str(value))
    try:
        result = float(cleaned)
    except ValueError:
        return float(default)

    if math.isnan(result):
        return float(default)
    return result


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Safe division with default value."""
    if denominator == 0:
        return default
    return numerator / denominator
