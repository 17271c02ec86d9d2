import json
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Sequence, Tuple


def _key_part(value: Any) -> str:
    if isinstance(value, Decimal):
        # 1.50 and 1.5 are the same stored value
        value = str(value.normalize())
    return json.dumps(value, default=str)


def composite_key(record: Mapping[str, Any], unique_key: Sequence[str]) -> str:
    """Stable text key built from the unique-key values; missing values count as null."""
    return "|".join(_key_part(record.get(name)) for name in unique_key)


def dedupe_records(records: Sequence[Dict[str, Any]],
                   unique_key: Sequence[str]) -> Tuple[List[Dict[str, Any]], int]:
    """
    Collapse records sharing a unique key, keeping the last occurrence.

    A batch upsert may not touch the same row twice, so this runs before the
    records reach the database.

    Returns:
        The surviving records and how many were overwritten.
    """
    if not unique_key:
        return list(records), 0

    survivors: Dict[str, Dict[str, Any]] = {}
    duplicates = 0
    for record in records:
        key = composite_key(record, unique_key)
        if key in survivors:
            duplicates += 1
        survivors[key] = record
    return list(survivors.values()), duplicates
