"""
Spreadsheet import orchestration: ingest, enrich, de-duplicate, upsert.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from sqlalchemy import Table
from sqlalchemy.orm import Session

from backoffice.core.exceptions import BackofficeError
from backoffice.domain.catalogs.fields import CatalogDefinition
from backoffice.domain.imports.dedupe import dedupe_records
from backoffice.domain.imports.ingestion import RowError, ingest_grid
from backoffice.domain.imports.upsert import ImportMode, commit_records
from backoffice.domain.records.store import record_to_row, unique_columns
from backoffice.utils.locks import TableLockManager

logger = logging.getLogger(__name__)

Enricher = Callable[[Session, Dict[str, Any]], Dict[str, Any]]


@dataclass
class ImportResult:
    imported: int
    errors: List[RowError] = field(default_factory=list)
    records: List[Dict[str, Any]] = field(default_factory=list)


def execute_import(
    db: Session,
    definition: CatalogDefinition,
    table: Table,
    grid: Sequence[Sequence[Any]],
    mode: ImportMode = ImportMode.APPEND,
    enrich: Optional[Enricher] = None,
) -> ImportResult:
    """
    Import a spreadsheet grid into ``table``.

    Invalid rows and rows whose enrichment fails are reported as errors and
    skipped; the remaining records are de-duplicated (last occurrence wins)
    and written in one transaction. A file with no valid rows writes nothing,
    even in replace mode.

    Raises:
        ImportFormatError: If the header row is unusable
        ImportStorageError: If the write transaction fails
    """
    with TableLockManager.acquire(table.name):
        ingested = ingest_grid(definition, grid)
        errors = list(ingested.errors)

        records: List[Dict[str, Any]] = []
        for row in ingested.rows:
            if enrich is None:
                records.append(row.record)
                continue
            try:
                records.append(enrich(db, row.record))
            except BackofficeError as e:
                errors.append(RowError(row.row_number, e.message))
        errors.sort(key=lambda error: error.row)

        records, duplicates = dedupe_records(records, definition.unique_key)
        if duplicates:
            errors.insert(0, RowError(
                0,
                f"{duplicates} duplicate rows share a unique key with a later row; "
                f"the last occurrence was kept",
            ))

        imported = commit_records(
            db,
            table,
            [record_to_row(definition, record) for record in records],
            mode,
            unique_columns(definition),
        )

    logger.info(
        "Import into %s finished: %d imported, %d errors, %d duplicates",
        definition.key, imported, len(errors), duplicates,
    )
    return ImportResult(imported=imported, errors=errors, records=records)
