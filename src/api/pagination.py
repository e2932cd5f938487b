# This file handles pagination, sort, and filter parsing for list endpoints.
# It exists so the resource list and the feed use the same rules for page size, ordering, and filters.
# The helpers validate raw query values and produce one immutable `ListQuery` per request.
# Only allow-listed sort names leave this module; SQL rendering lives in the query composer.

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

SORT_FIELD_ALIASES: dict[str, str] = {
    "title": "title",
    "created_at": "created_at",
    "createdat": "created_at",
    "updated_at": "updated_at",
    "updatedat": "updated_at",
}
SORT_ORDERS = {"asc", "desc"}
MAX_TAGS = 5
MAX_SEARCH_LENGTH = 100
MAX_OFFSET = 2**63 - 1
_TIME_FORMATS = ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d")


@dataclass(frozen=True)
class SortSpec:
    field: str
    order: str


@dataclass(frozen=True)
class ListQuery:
    limit: int
    offset: int
    sort: SortSpec
    completed: bool | None = None
    search: str | None = None
    tags: tuple[str, ...] = ()
    since: datetime | None = None
    until: datetime | None = None

    def pagination_block(self, *, count: int) -> dict[str, object]:
        return {
            "limit": self.limit,
            "offset": self.offset,
            "count": count,
            "sort": self.sort.field,
            "order": self.sort.order,
        }


def normalize_limit_offset(
    *,
    limit: int | None,
    offset: int | None,
    default_limit: int,
    max_limit: int,
) -> tuple[int, int]:
    """Validate and normalize limit/offset values."""

    resolved_limit = default_limit if limit is None else limit
    resolved_offset = 0 if offset is None else offset
    if resolved_limit < 1:
        raise ValueError("limit must be >= 1")
    if resolved_limit > max_limit:
        raise ValueError(f"limit must be <= {max_limit}")
    if resolved_offset < 0:
        raise ValueError("offset must be >= 0")
    if resolved_offset > MAX_OFFSET:
        raise ValueError(f"offset must be <= {MAX_OFFSET}")
    return resolved_limit, resolved_offset


def parse_sort(
    *,
    requested_sort: str | None,
    requested_order: str | None,
    default_sort: str,
    default_order: str,
) -> SortSpec:
    """Parse `sort` and `order` inputs; `sort=field:order` is also accepted."""

    raw_sort = (requested_sort or default_sort).strip().lower()
    raw_order = (requested_order or "").strip().lower()
    if not raw_sort:
        raise ValueError("sort cannot be empty")

    if ":" in raw_sort:
        raw_sort, inline_order = raw_sort.split(":", 1)
        raw_order = raw_order or inline_order

    field = SORT_FIELD_ALIASES.get(raw_sort)
    if field is None:
        raise ValueError(
            f"Invalid 'sort' parameter '{raw_sort}' - must be title, created_at, or updated_at"
        )

    order = raw_order or default_order
    if order not in SORT_ORDERS:
        raise ValueError("Invalid 'order' parameter - must be asc or desc")
    return SortSpec(field=field, order=order)


def parse_tags(raw_tags: str | None) -> tuple[str, ...]:
    if raw_tags is None or raw_tags.strip() == "":
        return ()
    tags = tuple(dict.fromkeys(tag.strip() for tag in raw_tags.split(",") if tag.strip()))
    if len(tags) > MAX_TAGS:
        raise ValueError(f"at most {MAX_TAGS} tags may be requested")
    return tags


def parse_search(raw_search: str | None) -> str | None:
    if raw_search is None or raw_search.strip() == "":
        return None
    if len(raw_search) > MAX_SEARCH_LENGTH:
        raise ValueError(f"search must be at most {MAX_SEARCH_LENGTH} characters")
    return raw_search


def parse_timestamp(name: str, raw_value: str | None) -> datetime | None:
    if raw_value is None or raw_value.strip() == "":
        return None
    value = raw_value.strip()
    for time_format in _TIME_FORMATS:
        try:
            return datetime.strptime(value, time_format).replace(tzinfo=UTC)
        except ValueError:
            continue
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as exc:
        raise ValueError(f"{name} must look like 'YYYY-MM-DD HH:MM:SS'") from exc
    # naive values are read as UTC
    return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=UTC)


def build_list_query(
    *,
    limit: int | None,
    offset: int | None,
    sort: str | None,
    order: str | None,
    default_limit: int,
    max_limit: int,
    default_sort: str = "created_at",
    default_order: str = "asc",
    completed: bool | None = None,
    search: str | None = None,
    tags: str | None = None,
    since: str | None = None,
    until: str | None = None,
) -> ListQuery:
    """Build a validated `ListQuery`; raises `ValueError` on any bad input."""

    resolved_limit, resolved_offset = normalize_limit_offset(
        limit=limit,
        offset=offset,
        default_limit=default_limit,
        max_limit=max_limit,
    )
    sort_spec = parse_sort(
        requested_sort=sort,
        requested_order=order,
        default_sort=default_sort,
        default_order=default_order,
    )
    since_ts = parse_timestamp("since", since)
    until_ts = parse_timestamp("until", until)
    if since_ts is not None and until_ts is not None and since_ts > until_ts:
        raise ValueError("since must be less than or equal to until")

    return ListQuery(
        limit=resolved_limit,
        offset=resolved_offset,
        sort=sort_spec,
        completed=completed,
        search=parse_search(search),
        tags=parse_tags(tags),
        since=since_ts,
        until=until_ts,
    )
