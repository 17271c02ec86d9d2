"""
Geography service: the generic record engine plus hierarchy enrichment.

Every write to a canton, district or barrio runs through the level's enricher,
so denormalised parent names are recomputed from the live parents each time.
"""
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy import Table, func
from sqlalchemy.orm import Session

from backoffice.core.config import settings
from backoffice.core.exceptions import BackofficeError
from backoffice.db.models import Barrio, Canton, District, Province
from backoffice.domain.catalogs.fields import CatalogDefinition
from backoffice.domain.geography.definitions import BARRIOS, CANTONS, DISTRICTS, PROVINCES
from backoffice.domain.geography.enrichment import enrich_barrio, enrich_canton, enrich_district
from backoffice.domain.imports.orchestrator import Enricher, ImportResult, execute_import
from backoffice.domain.imports.upsert import ImportMode
from backoffice.domain.imports.validators import validate_record
from backoffice.domain.queries.pagination import PageQuery
from backoffice.domain.records import store

logger = logging.getLogger(__name__)


class UnknownGeographyLevelError(BackofficeError):
    status_code = 404

    def __init__(self, level: str):
        super().__init__(f"Unknown geography level '{level}'")


def _filter_equals(column_name: str) -> Callable[[Table, Any], Any]:
    return lambda table, value: table.c[column_name] == value


def _filter_name(column_name: str) -> Callable[[Table, Any], Any]:
    return lambda table, value: func.lower(table.c[column_name]) == str(value).strip().lower()


@dataclass(frozen=True)
class GeographyLevel:
    definition: CatalogDefinition
    table: Table
    order_by: Tuple[str, ...]
    enrich: Optional[Enricher] = None
    filters: Dict[str, Callable[[Table, Any], Any]] = field(default_factory=dict)

    def ordering(self) -> List[Any]:
        # Hierarchy order, id as the final tie-breaker for stable pages
        return [self.table.c[name].asc() for name in self.order_by] + [self.table.c.id.asc()]

    def build_filters(self, values: Mapping[str, Any]) -> List[Any]:
        conditions = []
        for name, build in self.filters.items():
            value = values.get(name)
            if value is None or (isinstance(value, str) and not value.strip()):
                continue
            conditions.append(build(self.table, value))
        return conditions


GEOGRAPHY_LEVELS: Dict[str, GeographyLevel] = {
    "provinces": GeographyLevel(
        definition=PROVINCES,
        table=Province.__table__,
        order_by=("code",),
    ),
    "cantons": GeographyLevel(
        definition=CANTONS,
        table=Canton.__table__,
        order_by=("province_code", "code"),
        enrich=enrich_canton,
        filters={"province_code": _filter_equals("province_code")},
    ),
    "districts": GeographyLevel(
        definition=DISTRICTS,
        table=District.__table__,
        order_by=("province_code", "canton_code", "name"),
        enrich=enrich_district,
        filters={
            "province_code": _filter_equals("province_code"),
            "canton_code": _filter_equals("canton_code"),
        },
    ),
    "barrios": GeographyLevel(
        definition=BARRIOS,
        table=Barrio.__table__,
        order_by=("province_code", "canton_code", "district_name", "name"),
        enrich=enrich_barrio,
        filters={
            "province_code": _filter_equals("province_code"),
            "canton_code": _filter_equals("canton_code"),
            "district_name": _filter_name("district_name"),
            "province_key": _filter_equals("province_key"),
        },
    ),
}


def get_level(level: str) -> GeographyLevel:
    geography_level = GEOGRAPHY_LEVELS.get(level)
    if geography_level is None:
        raise UnknownGeographyLevelError(level)
    return geography_level


def _enrich(db: Session, level: GeographyLevel, record: Dict[str, Any]) -> Dict[str, Any]:
    if level.enrich is None:
        return record
    return level.enrich(db, record)


def list_geography(
    db: Session,
    level_key: str,
    page: Optional[int] = None,
    limit: Optional[int] = None,
    search: Optional[str] = None,
    filters: Optional[Mapping[str, Any]] = None,
) -> Tuple[List[Dict[str, Any]], int, PageQuery]:
    level = get_level(level_key)
    return store.list_records(
        db,
        level.definition,
        level.table,
        page=page,
        limit=limit,
        search=search,
        order_by=level.ordering(),
        filters=level.build_filters(filters or {}),
        default_limit=settings.catalog_page_size_default,
        max_limit=settings.catalog_page_size_max,
    )


def get_geography_record(db: Session, level_key: str, record_id: uuid.UUID) -> Dict[str, Any]:
    level = get_level(level_key)
    return store.get_record(db, level.definition, level.table, record_id)


def create_geography_record(db: Session, level_key: str, payload: Mapping[str, Any]) -> Dict[str, Any]:
    level = get_level(level_key)
    record = _enrich(db, level, validate_record(level.definition, payload))
    return store.insert_record(db, level.definition, level.table, record)


def update_geography_record(db: Session, level_key: str, record_id: uuid.UUID,
                            payload: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Partially update a geography record.

    The stored record is merged with the changes and re-enriched, so parent
    names are refreshed even when only an unrelated field changed.
    """
    level = get_level(level_key)
    changes = validate_record(level.definition, payload, partial=True)
    current = store.get_record(db, level.definition, level.table, record_id)

    merged = {name: current[name] for name in level.definition.field_names}
    merged.update(changes)
    if "district_name" in changes and "district_code" not in changes and "district_code" in merged:
        # A new district name must not be overridden by the old district code
        merged["district_code"] = None

    enriched = _enrich(db, level, merged)
    return store.update_record(db, level.definition, level.table, record_id, enriched)


def delete_geography_record(db: Session, level_key: str, record_id: uuid.UUID) -> None:
    level = get_level(level_key)
    store.delete_record(db, level.definition, level.table, record_id)


def import_geography(db: Session, level_key: str, grid: Sequence[Sequence[Any]],
                     mode: ImportMode = ImportMode.APPEND) -> ImportResult:
    level = get_level(level_key)
    logger.info("Importing %s in %s mode (%d grid rows)", level_key, mode.value, len(grid))
    return execute_import(db, level.definition, level.table, grid, mode, enrich=level.enrich)
