"""
Transactional bulk upsert used by every spreadsheet import.

Rows are written with ``INSERT ... ON CONFLICT (<unique key>) DO UPDATE`` in
batches, inside a single transaction. Either every batch lands (plus the
replace-mode delete) or the transaction is rolled back and nothing changes.
"""
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import Table, delete
from sqlalchemy.orm import Session

from backoffice.core.config import settings
from backoffice.core.exceptions import ImportStorageError

logger = logging.getLogger(__name__)

SYSTEM_COLUMNS = ("id", "created_at", "updated_at")


class ImportMode(str, Enum):
    APPEND = "append"
    REPLACE = "replace"


def _dialect_insert(dialect_name: str, table: Table):
    if dialect_name == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect_name == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        raise ImportStorageError(f"Bulk upsert is not supported on '{dialect_name}' databases")
    return insert(table)


def data_columns(table: Table) -> List[str]:
    return [column.name for column in table.columns if column.name not in SYSTEM_COLUMNS]


def build_upsert_statement(dialect_name: str, table: Table, unique_columns: Sequence[str]):
    """INSERT for every data column that updates the non-key columns on conflict."""
    stmt = _dialect_insert(dialect_name, table)
    update_set: Dict[str, Any] = {
        name: stmt.excluded[name]
        for name in data_columns(table)
        if name not in unique_columns
    }
    update_set["updated_at"] = datetime.now(timezone.utc)
    return stmt.on_conflict_do_update(index_elements=list(unique_columns), set_=update_set)


def commit_records(
    db: Session,
    table: Table,
    rows: Sequence[Dict[str, Any]],
    mode: ImportMode,
    unique_columns: Sequence[str],
    batch_size: Optional[int] = None,
) -> int:
    """
    Write import rows atomically.

    Args:
        db: Session whose transaction the writes run in
        table: Target table
        rows: Column-keyed, already de-duplicated rows
        mode: ``replace`` deletes every existing row first
        unique_columns: Conflict target of the upsert
        batch_size: Rows per statement, defaults to the configured size

    Returns:
        Number of rows written.

    Raises:
        ImportStorageError: If any statement fails; the transaction is rolled
            back, so the table is left exactly as it was.
    """
    if not rows:
        # An empty file must never wipe a table, even in replace mode
        logger.info("No rows to import into '%s'; leaving the table untouched", table.name)
        return 0

    batch_size = batch_size or settings.upsert_batch_size
    columns = data_columns(table)
    # executemany needs every parameter set to carry the same keys
    params = [{name: row.get(name) for name in columns} for row in rows]
    stmt = build_upsert_statement(db.get_bind().dialect.name, table, unique_columns)

    try:
        if mode == ImportMode.REPLACE:
            deleted = db.execute(delete(table)).rowcount
            logger.info("Replace import removed %s existing rows from '%s'", deleted, table.name)

        for start in range(0, len(params), batch_size):
            db.execute(stmt, params[start:start + batch_size])

        db.commit()
    except Exception as e:
        # Driver errors such as OverflowError are not SQLAlchemyErrors
        db.rollback()
        logger.error("Import into '%s' failed and was rolled back: %s", table.name, e)
        raise ImportStorageError(
            f"Import into '{table.name}' failed; no rows were written", original_error=e
        ) from e

    logger.info("Upserted %d rows into '%s' (%s mode)", len(params), table.name, mode.value)
    return len(params)
