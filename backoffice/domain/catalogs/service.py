import logging
import uuid
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from backoffice.core.config import settings
from backoffice.db.catalog_tables import get_catalog_table
from backoffice.domain.catalogs.registry import get_catalog
from backoffice.domain.imports.orchestrator import ImportResult, execute_import
from backoffice.domain.imports.upsert import ImportMode
from backoffice.domain.imports.validators import validate_record
from backoffice.domain.queries.pagination import PageQuery
from backoffice.domain.records import store

logger = logging.getLogger(__name__)


def list_catalog_records(
    db: Session,
    key: str,
    page: Optional[int] = None,
    limit: Optional[int] = None,
    search: Optional[str] = None,
) -> Tuple[List[Dict[str, Any]], int, PageQuery]:
    definition = get_catalog(key)
    return store.list_records(
        db,
        definition,
        get_catalog_table(key),
        page=page,
        limit=limit,
        search=search,
        default_limit=settings.catalog_page_size_default,
        max_limit=settings.catalog_page_size_max,
    )


def get_catalog_record(db: Session, key: str, record_id: uuid.UUID) -> Dict[str, Any]:
    return store.get_record(db, get_catalog(key), get_catalog_table(key), record_id)


def create_catalog_record(db: Session, key: str, payload: Mapping[str, Any]) -> Dict[str, Any]:
    definition = get_catalog(key)
    record = validate_record(definition, payload)
    return store.insert_record(db, definition, get_catalog_table(key), record)


def update_catalog_record(db: Session, key: str, record_id: uuid.UUID,
                          payload: Mapping[str, Any]) -> Dict[str, Any]:
    definition = get_catalog(key)
    changes = validate_record(definition, payload, partial=True)
    return store.update_record(db, definition, get_catalog_table(key), record_id, changes)


def delete_catalog_record(db: Session, key: str, record_id: uuid.UUID) -> None:
    store.delete_record(db, get_catalog(key), get_catalog_table(key), record_id)


def import_catalog(db: Session, key: str, grid: Sequence[Sequence[Any]],
                   mode: ImportMode = ImportMode.APPEND) -> ImportResult:
    definition = get_catalog(key)
    logger.info("Importing catalog %s in %s mode (%d grid rows)", key, mode.value, len(grid))
    return execute_import(db, definition, get_catalog_table(key), grid, mode)
