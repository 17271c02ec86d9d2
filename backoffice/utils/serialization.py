import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any


def make_json_safe(value: Any) -> Any:
    """
    Convert stored record values into JSON-serialisable structures.

    Numeric columns come back from the database as ``Decimal``; clients expect
    plain JSON numbers, so whole values become ints and the rest floats.
    """
    if isinstance(value, dict):
        return {key: make_json_safe(val) for key, val in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [make_json_safe(item) for item in value]
    if isinstance(value, Decimal):
        if value == value.to_integral_value():
            return int(value)
        return float(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, bytes):
        return value.decode(errors="ignore")
    if isinstance(value, (int, float, str, bool)) or value is None:
        return value
    return str(value)
