"""
Paginated, searchable listing over any table.

Search is a case-insensitive substring match OR-ed across the searchable
columns; every column is cast to text so numeric codes are searchable too.
The user's term is always treated literally: LIKE wildcards are escaped.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import String, Table, and_, cast, func, or_, select
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

LIKE_ESCAPE = "\\"


@dataclass(frozen=True)
class PageQuery:
    page: int
    limit: int
    offset: int
    order_by: Tuple[Any, ...]
    conditions: Tuple[ColumnElement, ...] = field(default_factory=tuple)

    @property
    def where(self) -> Optional[ColumnElement]:
        if not self.conditions:
            return None
        return and_(*self.conditions)


def clamp_limit(limit: Optional[int], default: int, maximum: int) -> int:
    """Out-of-range page sizes are clamped into [1, maximum], never rejected."""
    if limit is None:
        limit = default
    return max(1, min(limit, maximum))


def escape_like(term: str) -> str:
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def search_condition(columns: Sequence[Any], term: Optional[str]) -> Optional[ColumnElement]:
    trimmed = (term or "").strip()
    if not trimmed or not columns:
        return None
    pattern = f"%{escape_like(trimmed)}%"
    return or_(*[cast(column, String).ilike(pattern, escape=LIKE_ESCAPE) for column in columns])


def build_page_query(
    table: Table,
    searchable_columns: Sequence[str],
    page: Optional[int] = None,
    limit: Optional[int] = None,
    search: Optional[str] = None,
    order_by: Optional[Sequence[Any]] = None,
    filters: Sequence[ColumnElement] = (),
    default_limit: int = 50,
    max_limit: int = 200,
) -> PageQuery:
    """
    Build the filter, ordering and window for one page of ``table``.

    Without an explicit ordering, the most recently updated rows come first
    with the id as tie-breaker so pages are stable.
    """
    page = max(page or 1, 1)
    limit = clamp_limit(limit, default_limit, max_limit)

    conditions = list(filters)
    condition = search_condition([table.c[name] for name in searchable_columns], search)
    if condition is not None:
        conditions.append(condition)

    if order_by is None:
        order_by = (table.c.updated_at.desc(), table.c.id.desc())

    return PageQuery(
        page=page,
        limit=limit,
        offset=(page - 1) * limit,
        order_by=tuple(order_by),
        conditions=tuple(conditions),
    )


def fetch_page(db: Session, table: Table, query: PageQuery) -> Tuple[List[Dict[str, Any]], int]:
    """Run the page query; returns the rows as dictionaries and the total match count."""
    count_stmt = select(func.count()).select_from(table)
    stmt = select(table)
    where = query.where
    if where is not None:
        count_stmt = count_stmt.where(where)
        stmt = stmt.where(where)

    total = db.execute(count_stmt).scalar_one()
    rows = db.execute(
        stmt.order_by(*query.order_by).offset(query.offset).limit(query.limit)
    ).mappings().all()
    return [dict(row) for row in rows], total


def page_meta(query: PageQuery, total: int) -> Dict[str, int]:
    return {"total": total, "page": query.page, "limit": query.limit}
