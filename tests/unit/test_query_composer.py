"""
Unit tests for list query composition.
It asserts expected behavior and guards against regressions in the corresponding component.
These tests are executed by `pytest` locally and in CI and should remain deterministic.
"""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from src.api.pagination import ListQuery, SortSpec
from src.api.query_composer import (
    QueryCompositionError,
    compose_list_query,
    escape_like,
    order_by_clause,
)


def _query(**overrides: object) -> ListQuery:
    values: dict[str, object] = {"limit": 10, "offset": 0, "sort": SortSpec(field="created_at", order="asc")}
    values.update(overrides)
    return ListQuery(**values)  # type: ignore[arg-type]


def test_base_clauses_only_when_no_filters() -> None:
    composed = compose_list_query(
        _query(),
        alias="r",
        base_clauses=["r.owner_id = :owner_id"],
        base_params={"owner_id": 7},
    )

    assert composed.where_sql == "r.owner_id = :owner_id"
    assert composed.order_sql == "r.created_at ASC, r.id ASC"
    assert composed.page_sql == "LIMIT :limit OFFSET :offset"
    assert composed.params == {"owner_id": 7, "limit": 10, "offset": 0}


def test_filters_are_joined_with_and_and_bound() -> None:
    since = datetime(2026, 1, 1, tzinfo=UTC)
    composed = compose_list_query(
        _query(completed=True, search="milk", tags=("home", "errand"), since=since, offset=20),
        alias="r",
        base_clauses=["r.owner_id = :owner_id"],
        base_params={"owner_id": 7},
    )

    clauses = composed.where_sql.split(" AND ")
    assert clauses[0] == "r.owner_id = :owner_id"
    assert "r.completed = :completed" in clauses
    assert "r.tags @> CAST(:tags AS TEXT[])" in clauses
    assert "r.created_at >= :since" in clauses
    assert any("r.title ILIKE :search" in clause and "r.body ILIKE :search" in clause for clause in clauses)
    assert composed.params["completed"] is True
    assert composed.params["search"] == "%milk%"
    assert composed.params["tags"] == ["home", "errand"]
    assert composed.params["since"] == since
    assert composed.params["offset"] == 20


def test_values_never_reach_query_text() -> None:
    hostile = "x'; DROP TABLE resources; --"
    composed = compose_list_query(_query(search=hostile, tags=(hostile,)), alias="r")

    assert hostile not in composed.where_sql
    assert "DROP" not in composed.where_sql
    assert composed.params["tags"] == [hostile]


def test_completed_filter_can_be_disabled_for_feed() -> None:
    composed = compose_list_query(_query(completed=False), alias="p", include_completed=False)

    assert "completed" not in composed.where_sql
    assert "completed" not in composed.params


def test_search_term_wildcards_are_escaped() -> None:
    assert escape_like("50%_off\\") == "50\\%\\_off\\\\"
    composed = compose_list_query(_query(search="100%"), alias="r")
    assert composed.params["search"] == "%100\\%%"


def test_order_by_rejects_unknown_field_and_direction() -> None:
    with pytest.raises(QueryCompositionError):
        order_by_clause(_query(sort=SortSpec(field="owner_id; DROP", order="asc")), alias="r")
    with pytest.raises(QueryCompositionError):
        order_by_clause(_query(sort=SortSpec(field="title", order="sideways")), alias="r")


def test_order_by_desc_breaks_ties_by_id() -> None:
    clause = order_by_clause(_query(sort=SortSpec(field="title", order="desc")), alias="p")
    assert clause == "p.title DESC, p.id DESC"


def test_unsafe_alias_is_rejected() -> None:
    with pytest.raises(QueryCompositionError):
        compose_list_query(_query(), alias="r; --")
