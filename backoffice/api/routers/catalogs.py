"""
Catalog endpoints: listing, single-record CRUD and spreadsheet import.
"""
import logging
import uuid
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, File, HTTPException, Query, UploadFile, status
from sqlalchemy.orm import Session

from backoffice.api.dependencies import domain_errors, read_upload_grid, serialize_records
from backoffice.api.schemas.shared import (
    CatalogSummary,
    ImportResponse,
    PaginationMeta,
    RecordListResponse,
    RowErrorSchema,
)
from backoffice.core.config import settings
from backoffice.core.security import User, get_current_user, require_admin
from backoffice.db.session import get_db
from backoffice.domain.catalogs import service
from backoffice.domain.catalogs.registry import list_catalogs
from backoffice.domain.imports.upsert import ImportMode
from backoffice.domain.queries.pagination import page_meta
from backoffice.utils.serialization import make_json_safe

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/catalogs", tags=["catalogs"])


@router.get("", response_model=List[CatalogSummary])
async def list_catalog_definitions(current_user: User = Depends(get_current_user)):
    """Every registered catalog as ``{key, label}``, in registry order."""
    return list_catalogs()


@router.get("/{catalog_key}", response_model=RecordListResponse)
async def list_catalog_entries(
    catalog_key: str,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, description="Page size, clamped to the configured maximum"),
    search: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    One page of catalog records, newest changes first.

    ``search`` matches any searchable field as a case-insensitive substring.
    """
    with domain_errors():
        records, total, query = service.list_catalog_records(db, catalog_key, page, limit, search)
    return RecordListResponse(
        data=serialize_records(records),
        meta=PaginationMeta(**page_meta(query, total)),
    )


@router.get("/{catalog_key}/{record_id}")
async def get_catalog_entry(
    catalog_key: str,
    record_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    with domain_errors():
        return make_json_safe(service.get_catalog_record(db, catalog_key, record_id))


@router.post("/{catalog_key}", status_code=status.HTTP_201_CREATED)
async def create_catalog_entry(
    catalog_key: str,
    payload: Dict[str, Any] = Body(...),
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    with domain_errors():
        return make_json_safe(service.create_catalog_record(db, catalog_key, payload))


@router.put("/{catalog_key}/{record_id}")
async def update_catalog_entry(
    catalog_key: str,
    record_id: uuid.UUID,
    payload: Dict[str, Any] = Body(...),
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """Partial update: fields left out of the payload keep their value."""
    with domain_errors():
        return make_json_safe(service.update_catalog_record(db, catalog_key, record_id, payload))


@router.delete("/{catalog_key}/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_catalog_entry(
    catalog_key: str,
    record_id: uuid.UUID,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    with domain_errors():
        service.delete_catalog_record(db, catalog_key, record_id)


@router.post("/{catalog_key}/import", response_model=ImportResponse)
async def import_catalog_entries(
    catalog_key: str,
    file: UploadFile = File(...),
    mode: ImportMode = Query(ImportMode.APPEND),
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Import a spreadsheet into a catalog.

    Invalid rows are reported in ``errors`` and skipped; the request still
    succeeds. ``replace`` mode deletes the existing rows first, unless the
    file has no valid rows at all.
    """
    try:
        with domain_errors():
            grid = await read_upload_grid(file, settings.catalog_import_max_bytes)
            result = service.import_catalog(db, catalog_key, grid, mode)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Import into catalog %s failed", catalog_key)
        raise HTTPException(status_code=500, detail=f"Import failed: {str(e)}")

    return ImportResponse(
        imported=result.imported,
        errors=[RowErrorSchema(**error.to_dict()) for error in result.errors],
    )
