# This file composes parameterized WHERE / ORDER BY / LIMIT fragments for list queries.
# It exists so the resource list and the feed share one predicate builder instead of ad hoc SQL strings.
# Filter values always travel as bound parameters; only allow-listed column names and directions
# are ever interpolated into the query text.

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from src.api.pagination import SORT_ORDERS, ListQuery

SORT_COLUMN_MAP: dict[str, str] = {
    "title": "title",
    "created_at": "created_at",
    "updated_at": "updated_at",
}
PAGE_SQL = "LIMIT :limit OFFSET :offset"

_ALIAS_RE = re.compile(r"^[a-z_][a-z0-9_]*$")


class QueryCompositionError(ValueError):
    """Raised when a sort field or order falls outside the allow-list."""


@dataclass(frozen=True)
class ComposedQuery:
    where_sql: str
    order_sql: str
    params: dict[str, Any] = field(default_factory=dict)

    @property
    def page_sql(self) -> str:
        return PAGE_SQL


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so a search term only ever matches literally."""

    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def order_by_clause(list_query: ListQuery, *, alias: str) -> str:
    column = SORT_COLUMN_MAP.get(list_query.sort.field)
    if column is None:
        raise QueryCompositionError(f"Unsupported sort field: {list_query.sort.field!r}")
    if list_query.sort.order not in SORT_ORDERS:
        raise QueryCompositionError(f"Unsupported sort order: {list_query.sort.order!r}")
    direction = list_query.sort.order.upper()
    return f"{alias}.{column} {direction}, {alias}.id {direction}"


def compose_list_query(
    list_query: ListQuery,
    *,
    alias: str,
    base_clauses: Sequence[str] = (),
    base_params: Mapping[str, Any] | None = None,
    include_completed: bool = True,
) -> ComposedQuery:
    """Combine the fixed scoping clauses with the optional filters of `list_query`."""

    if not _ALIAS_RE.match(alias):
        raise QueryCompositionError(f"Unsafe table alias: {alias!r}")

    where_clauses: list[str] = list(base_clauses) or ["1 = 1"]
    params: dict[str, Any] = dict(base_params or {})

    if include_completed and list_query.completed is not None:
        where_clauses.append(f"{alias}.completed = :completed")
        params["completed"] = list_query.completed
    if list_query.search:
        where_clauses.append(
            f"({alias}.title ILIKE :search ESCAPE '\\' OR {alias}.body ILIKE :search ESCAPE '\\')"
        )
        params["search"] = f"%{escape_like(list_query.search)}%"
    if list_query.tags:
        where_clauses.append(f"{alias}.tags @> CAST(:tags AS TEXT[])")
        params["tags"] = list(list_query.tags)
    if list_query.since is not None:
        where_clauses.append(f"{alias}.created_at >= :since")
        params["since"] = list_query.since
    if list_query.until is not None:
        where_clauses.append(f"{alias}.created_at <= :until")
        params["until"] = list_query.until

    params["limit"] = list_query.limit
    params["offset"] = list_query.offset

    return ComposedQuery(
        where_sql=" AND ".join(where_clauses),
        order_sql=order_by_clause(list_query, alias=alias),
        params=params,
    )
