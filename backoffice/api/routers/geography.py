"""
Geography endpoints for the province -> canton -> district -> barrio hierarchy.

All four levels share one set of routes parameterised by ``level``; filters a
level does not support are ignored.
"""
import logging
import uuid
from enum import Enum
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, File, HTTPException, Query, UploadFile, status
from sqlalchemy.orm import Session

from backoffice.api.dependencies import domain_errors, read_upload_grid, serialize_records
from backoffice.api.schemas.shared import (
    GeographyImportResponse,
    PaginationMeta,
    RecordListResponse,
    RowErrorSchema,
)
from backoffice.core.config import settings
from backoffice.core.security import User, get_current_user, require_admin
from backoffice.db.session import get_db
from backoffice.domain.geography import service
from backoffice.domain.imports.upsert import ImportMode
from backoffice.domain.queries.pagination import page_meta
from backoffice.utils.serialization import make_json_safe

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/geography", tags=["geography"])


class GeographyLevelKey(str, Enum):
    PROVINCES = "provinces"
    CANTONS = "cantons"
    DISTRICTS = "districts"
    BARRIOS = "barrios"


@router.get("/{level}", response_model=RecordListResponse)
async def list_geography(
    level: GeographyLevelKey,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None),
    search: Optional[str] = Query(None),
    province_code: Optional[int] = Query(None),
    canton_code: Optional[int] = Query(None),
    district_name: Optional[str] = Query(None),
    province_key: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """One page of a geography level in hierarchy order."""
    filters = {
        "province_code": province_code,
        "canton_code": canton_code,
        "district_name": district_name,
        "province_key": province_key,
    }
    with domain_errors():
        records, total, query = service.list_geography(db, level.value, page, limit, search, filters)
    return RecordListResponse(
        data=serialize_records(records),
        meta=PaginationMeta(**page_meta(query, total)),
    )


@router.get("/{level}/{record_id}")
async def get_geography_record(
    level: GeographyLevelKey,
    record_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    with domain_errors():
        return make_json_safe(service.get_geography_record(db, level.value, record_id))


@router.post("/{level}", status_code=status.HTTP_201_CREATED)
async def create_geography_record(
    level: GeographyLevelKey,
    payload: Dict[str, Any] = Body(...),
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """Create a record; parent codes must reference stored parents."""
    with domain_errors():
        return make_json_safe(service.create_geography_record(db, level.value, payload))


@router.put("/{level}/{record_id}")
async def update_geography_record(
    level: GeographyLevelKey,
    record_id: uuid.UUID,
    payload: Dict[str, Any] = Body(...),
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    with domain_errors():
        return make_json_safe(service.update_geography_record(db, level.value, record_id, payload))


@router.delete("/{level}/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_geography_record(
    level: GeographyLevelKey,
    record_id: uuid.UUID,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Delete a record; children are removed by the database cascade."""
    with domain_errors():
        service.delete_geography_record(db, level.value, record_id)


@router.post("/{level}/import", response_model=GeographyImportResponse)
async def import_geography(
    level: GeographyLevelKey,
    file: UploadFile = File(...),
    mode: ImportMode = Query(ImportMode.APPEND),
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Import a level from a spreadsheet.

    Rows referencing a missing parent are reported in ``errors``; ``rows``
    holds the enriched records that were written, without the
    internal ``province_key`` lookup column.
    """
    try:
        with domain_errors():
            grid = await read_upload_grid(file, settings.geography_import_max_bytes)
            result = service.import_geography(db, level.value, grid, mode)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Import into %s failed", level.value)
        raise HTTPException(status_code=500, detail=f"Import failed: {str(e)}")

    return GeographyImportResponse(
        imported=result.imported,
        errors=[RowErrorSchema(**error.to_dict()) for error in result.errors],
        rows=serialize_records(
            [{k: v for k, v in record.items() if k != "province_key"} for record in result.records]
        ),
    )
