"""
Spreadsheet ingestion: header mapping, cell extraction and per-row validation.

The pipeline never aborts on a bad data row. Rows that fail validation are
collected as ``RowError`` entries so one import reports every problem in the
file; only a missing header or missing required column rejects the whole file.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from openpyxl.cell.rich_text import CellRichText

from backoffice.core.exceptions import ImportFormatError, RecordValidationError
from backoffice.domain.catalogs.fields import CatalogDefinition, FieldSchema
from backoffice.domain.imports.validators import is_empty, validate_record
from backoffice.utils.text import normalize_header

logger = logging.getLogger(__name__)


@dataclass
class RowError:
    """Problem attached to a spreadsheet row; row 0 means the whole file."""
    row: int
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"row": self.row, "message": self.message}


@dataclass
class IngestedRow:
    row_number: int
    record: Dict[str, Any]


@dataclass
class IngestResult:
    rows: List[IngestedRow] = field(default_factory=list)
    errors: List[RowError] = field(default_factory=list)

    @property
    def records(self) -> List[Dict[str, Any]]:
        return [row.record for row in self.rows]


def extract_cell_value(value: Any) -> Any:
    """
    Reduce a raw cell to a plain value.

    Handles openpyxl rich text and NaN placeholders from pandas. Everything
    else is returned unchanged.
    """
    if value is None:
        return None
    if isinstance(value, CellRichText):
        return str(value)
    if isinstance(value, float) and math.isnan(value):
        return None
    return value


def map_header_row(definition: CatalogDefinition, header: Sequence[Any]) -> Dict[int, FieldSchema]:
    """Map column positions to fields; the first column claiming a field wins."""
    column_map: Dict[int, FieldSchema] = {}
    claimed = set()
    for position, cell in enumerate(header):
        value = extract_cell_value(cell)
        if is_empty(value):
            continue
        schema = definition.header_lookup.get(normalize_header(str(value)))
        if schema is None or schema.name in claimed:
            continue
        column_map[position] = schema
        claimed.add(schema.name)
    return column_map


def _cell(row: Sequence[Any], position: int) -> Optional[Any]:
    if position >= len(row):
        return None
    return extract_cell_value(row[position])


def ingest_grid(definition: CatalogDefinition, grid: Sequence[Sequence[Any]]) -> IngestResult:
    """
    Turn a spreadsheet grid into validated records and row errors.

    Args:
        definition: Catalog the spreadsheet is imported into
        grid: Rows of raw cell values; the first row holds the headers

    Returns:
        IngestResult with the valid records (tagged with their 1-based sheet
        row) and one error per rejected row.

    Raises:
        ImportFormatError: If the header row is empty or a required field has
            no matching column.
    """
    header = grid[0] if grid else []
    if all(is_empty(extract_cell_value(cell)) for cell in header):
        raise ImportFormatError("The first row must contain the column headers")

    column_map = map_header_row(definition, header)
    mapped_fields = {schema.name for schema in column_map.values()}
    missing = [
        schema.name for schema in definition.required_fields
        if not schema.derived and schema.name not in mapped_fields
    ]
    if missing:
        raise ImportFormatError(f"Missing required columns: {', '.join(missing)}", missing_fields=missing)

    result = IngestResult()
    for row_number, row in enumerate(grid[1:], start=2):
        raw: Dict[str, Any] = {}
        for position, schema in column_map.items():
            value = _cell(row, position)
            if not is_empty(value):
                raw[schema.name] = value
        if not raw:
            continue

        try:
            record = validate_record(definition, raw)
        except RecordValidationError as e:
            result.errors.append(RowError(row_number, e.message))
            continue
        result.rows.append(IngestedRow(row_number, record))

    logger.info(
        "Ingested %d valid rows and %d invalid rows for %s",
        len(result.rows), len(result.errors), definition.key,
    )
    return result
