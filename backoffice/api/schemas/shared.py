"""
Schemas shared by the catalog and geography endpoints.

Records are schema-driven, so they travel as plain dictionaries; only the
envelope around them is typed.
"""
from typing import Any, Dict, List

from pydantic import BaseModel


class PaginationMeta(BaseModel):
    """Window actually served; ``limit`` is the clamped page size."""
    total: int
    page: int
    limit: int


class RecordListResponse(BaseModel):
    data: List[Dict[str, Any]]
    meta: PaginationMeta


class CatalogSummary(BaseModel):
    key: str
    label: str


class RowErrorSchema(BaseModel):
    """A rejected spreadsheet row; row 0 refers to the file as a whole."""
    row: int
    message: str


class ImportResponse(BaseModel):
    imported: int
    errors: List[RowErrorSchema]


class GeographyImportResponse(ImportResponse):
    rows: List[Dict[str, Any]]
