"""
Single-record persistence shared by catalogs and geography levels.

Every function works on a ``CatalogDefinition`` plus the SQLAlchemy ``Table``
backing it, so the same code serves generated catalog tables and the ORM
geography tables.
"""
import logging
import uuid
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy import Table, and_, delete, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from backoffice.core.exceptions import RecordConflictError, RecordNotFoundError
from backoffice.domain.catalogs.fields import CatalogDefinition
from backoffice.domain.queries.pagination import PageQuery, build_page_query, fetch_page

logger = logging.getLogger(__name__)


def record_to_row(definition: CatalogDefinition, record: Mapping[str, Any]) -> Dict[str, Any]:
    """Field-keyed record to column-keyed row; unknown keys are dropped."""
    row = {}
    for schema in definition.fields:
        if schema.name in record:
            row[schema.column_name] = record[schema.name]
    return row


def row_to_record(definition: CatalogDefinition, row: Mapping[str, Any]) -> Dict[str, Any]:
    """Stored row to API record: id, every field and the timestamps."""
    record = {"id": row["id"]}
    for schema in definition.fields:
        record[schema.name] = row.get(schema.column_name)
    record["created_at"] = row.get("created_at")
    record["updated_at"] = row.get("updated_at")
    return record


def unique_columns(definition: CatalogDefinition) -> List[str]:
    return [definition.get_field(name).column_name for name in definition.unique_key]


def searchable_columns(definition: CatalogDefinition) -> List[str]:
    return [definition.get_field(name).column_name for name in definition.searchable_fields]


def list_records(
    db: Session,
    definition: CatalogDefinition,
    table: Table,
    page: Optional[int],
    limit: Optional[int],
    search: Optional[str] = None,
    order_by: Optional[Sequence[Any]] = None,
    filters: Sequence[ColumnElement] = (),
    default_limit: int = 50,
    max_limit: int = 200,
) -> Tuple[List[Dict[str, Any]], int, PageQuery]:
    query = build_page_query(
        table,
        searchable_columns(definition),
        page=page,
        limit=limit,
        search=search,
        order_by=order_by,
        filters=filters,
        default_limit=default_limit,
        max_limit=max_limit,
    )
    rows, total = fetch_page(db, table, query)
    return [row_to_record(definition, row) for row in rows], total, query


def get_record(db: Session, definition: CatalogDefinition, table: Table, record_id: uuid.UUID) -> Dict[str, Any]:
    row = db.execute(select(table).where(table.c.id == record_id)).mappings().first()
    if row is None:
        raise RecordNotFoundError(definition.label, record_id)
    return row_to_record(definition, row)


def find_by_unique_key(db: Session, definition: CatalogDefinition, table: Table,
                       record: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    conditions = []
    for name in definition.unique_key:
        column = table.c[definition.get_field(name).column_name]
        value = record.get(name)
        conditions.append(column.is_(None) if value is None else column == value)
    row = db.execute(select(table).where(and_(*conditions))).mappings().first()
    return row_to_record(definition, row) if row is not None else None


def _describe_key(definition: CatalogDefinition, record: Mapping[str, Any]) -> str:
    return ", ".join(f"{name}={record.get(name)}" for name in definition.unique_key)


def _ensure_unique(db: Session, definition: CatalogDefinition, table: Table,
                   record: Mapping[str, Any], exclude_id: Optional[uuid.UUID] = None) -> None:
    existing = find_by_unique_key(db, definition, table, record)
    if existing is not None and existing["id"] != exclude_id:
        raise RecordConflictError(
            f"A record with {_describe_key(definition, record)} already exists in {definition.label}"
        )


def _flush_write(db: Session, definition: CatalogDefinition, record: Mapping[str, Any], stmt):
    try:
        result = db.execute(stmt)
        db.commit()
    except IntegrityError as e:
        # Lost a race with a concurrent writer of the same key
        db.rollback()
        raise RecordConflictError(
            f"A record with {_describe_key(definition, record)} already exists in {definition.label}",
            original_error=e,
        ) from e
    return result


def insert_record(db: Session, definition: CatalogDefinition, table: Table,
                  record: Mapping[str, Any]) -> Dict[str, Any]:
    """Insert a validated record; the unique key must not be taken."""
    _ensure_unique(db, definition, table, record)
    result = _flush_write(db, definition, record, insert(table).values(**record_to_row(definition, record)))
    record_id = result.inserted_primary_key[0]
    logger.info("Created %s record %s", definition.key, record_id)
    return get_record(db, definition, table, record_id)


def update_record(db: Session, definition: CatalogDefinition, table: Table,
                  record_id: uuid.UUID, changes: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Apply validated changes to an existing record.

    If the changes touch the unique key, the resulting key must not belong to
    another record.
    """
    current = get_record(db, definition, table, record_id)
    if not changes:
        return current

    if any(name in changes for name in definition.unique_key):
        merged = {**current, **changes}
        _ensure_unique(db, definition, table, merged, exclude_id=current["id"])

    stmt = update(table).where(table.c.id == current["id"]).values(**record_to_row(definition, changes))
    _flush_write(db, definition, {**current, **changes}, stmt)
    logger.info("Updated %s record %s", definition.key, record_id)
    return get_record(db, definition, table, record_id)


def delete_record(db: Session, definition: CatalogDefinition, table: Table, record_id: uuid.UUID) -> None:
    result = db.execute(delete(table).where(table.c.id == record_id))
    if result.rowcount == 0:
        db.rollback()
        raise RecordNotFoundError(definition.label, record_id)
    db.commit()
    logger.info("Deleted %s record %s", definition.key, record_id)
