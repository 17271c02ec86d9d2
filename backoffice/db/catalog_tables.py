"""
SQLAlchemy Core tables generated from the catalog registry.

Each catalog gets one table whose columns are its fields plus a generated UUID
primary key and created/updated timestamps. The unique key becomes a unique
constraint and every searchable field gets a secondary index.
"""
import uuid
from datetime import datetime, timezone
from typing import Dict

from sqlalchemy import (
    Column,
    DateTime,
    Index,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.types import TypeEngine

from backoffice.core.exceptions import CatalogNotFoundError
from backoffice.db.session import Base
from backoffice.domain.catalogs.fields import CatalogDefinition, FieldSchema, FieldType
from backoffice.domain.catalogs.registry import CATALOG_DEFINITIONS


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def column_type(schema: FieldSchema) -> TypeEngine:
    if schema.type == FieldType.TEXT:
        return String(schema.effective_max_length)
    if schema.type == FieldType.INTEGER:
        return Integer()
    return Numeric(schema.effective_precision, schema.effective_scale, asdecimal=True)


def build_record_table(definition: CatalogDefinition, metadata: MetaData = Base.metadata) -> Table:
    unique_columns = [definition.get_field(name).column_name for name in definition.unique_key]
    search_columns = [definition.get_field(name).column_name for name in definition.searchable_fields]

    return Table(
        definition.table_name,
        metadata,
        Column("id", Uuid, primary_key=True, default=uuid.uuid4),
        *[
            Column(schema.column_name, column_type(schema), nullable=not schema.required)
            for schema in definition.fields
        ],
        Column("created_at", DateTime(timezone=True), nullable=False, default=_utcnow),
        Column("updated_at", DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow),
        UniqueConstraint(*unique_columns, name=f"{definition.table_name}_uq_key"),
        *[Index(f"{definition.table_name}_{column}_idx", column) for column in search_columns],
    )


CATALOG_TABLES: Dict[str, Table] = {
    definition.key: build_record_table(definition) for definition in CATALOG_DEFINITIONS
}


def get_catalog_table(key: str) -> Table:
    table = CATALOG_TABLES.get(key)
    if table is None:
        raise CatalogNotFoundError(key)
    return table
