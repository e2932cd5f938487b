# This file builds success envelopes for API endpoints in a consistent format.
# It exists so clients always receive `status`, `data`, and the request trace id in the same shape.
# The helpers return plain dictionaries that Pydantic response models validate at runtime.

from __future__ import annotations

from typing import Any


def build_object_envelope(
    *,
    request_id: str,
    data: dict[str, Any] | None,
) -> dict[str, Any]:
    """Build standard non-list response envelope."""

    return {
        "status": "success",
        "data": data,
        "request_id": request_id,
    }


def build_list_envelope(
    *,
    request_id: str,
    data: list[dict[str, Any]],
    pagination: dict[str, Any],
) -> dict[str, Any]:
    """Build standard list response envelope."""

    return {
        "status": "success",
        "data": data,
        "pagination": pagination,
        "request_id": request_id,
    }
