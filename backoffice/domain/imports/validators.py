"""
Schema-driven record validation.

``validate_record`` is the single gate every catalog write passes through:
single creates and updates from the API, and every spreadsheet row during an
import. It turns a loosely typed payload (JSON body or spreadsheet cells) into
a record whose values match the column types of the catalog table.
"""
import logging
import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, Mapping

from backoffice.core.exceptions import RecordValidationError
from backoffice.domain.catalogs.fields import CatalogDefinition, FieldSchema, FieldType

logger = logging.getLogger(__name__)


def is_empty(value: Any) -> bool:
    """None, blank strings and NaN cells all count as an absent value."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, float):
        return math.isnan(value)
    return False


def parse_decimal(value: Any, field_name: str = "value") -> Decimal:
    """
    Parse a number from a JSON value or spreadsheet cell.

    Strings accept a comma as the decimal separator ("12,5" is 12.5).
    Infinite and NaN values are rejected.
    """
    if isinstance(value, bool):
        raise RecordValidationError(f"Field '{field_name}' must be a number", field=field_name)

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        # repr keeps the shortest round-tripping form (0.1 stays 0.1)
        result = Decimal(repr(value))
    else:
        text = str(value).strip().replace(",", ".")
        try:
            result = Decimal(text)
        except InvalidOperation:
            raise RecordValidationError(
                f"Field '{field_name}' must be a number, got '{value}'", field=field_name
            )

    if not result.is_finite():
        raise RecordValidationError(f"Field '{field_name}' must be a finite number", field=field_name)
    return result


def _coerce_text(schema: FieldSchema, value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        # Excel stores codes typed as numbers as floats
        text = str(int(value))
    else:
        text = str(value).strip()

    if len(text) > schema.effective_max_length:
        raise RecordValidationError(
            f"Field '{schema.name}' exceeds {schema.effective_max_length} characters",
            field=schema.name,
        )
    return text


# Range of the signed 32-bit INTEGER columns the catalog tables are created with
INTEGER_MIN = -(2 ** 31)
INTEGER_MAX = 2 ** 31 - 1


def _coerce_integer(schema: FieldSchema, value: Any) -> int:
    number = parse_decimal(value, schema.name)
    if number != number.to_integral_value():
        raise RecordValidationError(f"Field '{schema.name}' must be an integer", field=schema.name)
    if not INTEGER_MIN <= number <= INTEGER_MAX:
        raise RecordValidationError(
            f"Field '{schema.name}' must be between {INTEGER_MIN} and {INTEGER_MAX}",
            field=schema.name,
        )
    return int(number)


def _check_decimal_range(schema: FieldSchema, number: Decimal) -> None:
    scale = schema.effective_scale
    if number != 0 and number.adjusted() + 1 > schema.effective_precision - scale:
        raise RecordValidationError(
            f"Field '{schema.name}' is out of range for precision "
            f"{schema.effective_precision} and scale {scale}",
            field=schema.name,
        )


def _coerce_decimal(schema: FieldSchema, value: Any) -> Decimal:
    number = parse_decimal(value, schema.name)
    # quantize fails outright on values wider than the decimal context
    _check_decimal_range(schema, number)
    number = number.quantize(Decimal(1).scaleb(-schema.effective_scale), rounding=ROUND_HALF_UP)
    # rounding up can carry into one more integer digit (99.995 -> 100.00)
    _check_decimal_range(schema, number)
    return number


_COERCERS = {
    FieldType.TEXT: _coerce_text,
    FieldType.INTEGER: _coerce_integer,
    FieldType.DECIMAL: _coerce_decimal,
}


def validate_record(definition: CatalogDefinition, payload: Mapping[str, Any],
                    partial: bool = False) -> Dict[str, Any]:
    """
    Validate and coerce ``payload`` against the catalog's field schemas.

    Args:
        definition: Catalog the payload belongs to
        payload: Field name to raw value mapping
        partial: Update mode; absent required fields are allowed

    Returns:
        Record holding only the fields that were present and non-empty, with
        derived fields left out.

    Raises:
        RecordValidationError: On unknown keys, missing required fields or
            values that cannot be coerced to the field type.
    """
    if not isinstance(payload, Mapping):
        raise RecordValidationError("Record payload must be an object")

    known = set(definition.field_names)
    for key in payload:
        if key not in known:
            raise RecordValidationError(f"Field '{key}' is not allowed", field=key)

    record: Dict[str, Any] = {}
    for schema in definition.fields:
        if schema.derived or schema.name not in payload:
            continue
        value = payload[schema.name]
        if is_empty(value):
            continue
        record[schema.name] = _COERCERS[schema.type](schema, value)

    if not partial:
        missing = [
            schema.name for schema in definition.required_fields
            if not schema.derived and schema.name not in record
        ]
        if missing:
            raise RecordValidationError(
                f"Field '{missing[0]}' is required" if len(missing) == 1
                else f"Fields {', '.join(missing)} are required",
                field=missing[0],
            )

    return record
