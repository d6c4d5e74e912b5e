from __future__ import annotations

from typing import Any, Iterable, Mapping

from ..database import Database
from .filters import FilterSpec, build_pagination, build_where


class EntityModel:
    """Query class bound to an injected Database."""

    def __init__(self, database: Database):
        self.db = database

    def _list(
        self,
        select: str,
        filters: Mapping[str, Any],
        specs: Iterable[FilterSpec],
        *,
        order_by: str,
        base: Iterable[str] = (),
        group_by: str = "",
    ) -> list[dict]:
        where, params = build_where(filters, specs, base=base)
        query = f"{select} {where} {group_by} ORDER BY {order_by}"
        query += build_pagination(filters, params)
        return self.db.all(query, params)


def as_float(value: Any) -> float:
    """Aggregate coercion: NULL sums/averages become 0.0."""
    return float(value or 0)


def as_int(value: Any) -> int:
    return int(value or 0)
