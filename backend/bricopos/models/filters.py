# Overview: Filter-to-clause mapping used by every entity listing.

"""
Typed filter mapping.

Each listing declares a tuple of FilterSpec entries. build_where() walks the
specs, skips every key absent from the caller's filter dict (None or ""),
and joins the predicates of the present ones with AND. Values are always
bound parameters; only the static predicate text reaches the SQL string.

    SALE_FILTERS = (
        exact("category"),
        search("search", "productName"),
        date_range("startDate", "endDate", "date"),
    )
    where, params = build_where(filters, SALE_FILTERS, base=["1=1"])
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping

# Used when an OFFSET is requested without a LIMIT (both engines need a LIMIT)
MAX_LIMIT = 2**63 - 1


@dataclass(frozen=True)
class FilterSpec:
    """
    A single optional predicate.

    keys:   filter keys that must all be present for the predicate to apply
    clause: SQL fragment using ":<param>" placeholders
    params: builds the bound-parameter mapping from the key values
    """
    keys: tuple[str, ...]
    clause: str
    params: Callable[..., dict[str, Any]] = field(compare=False)
    truthy: bool = False


def _present(value: Any) -> bool:
    return value is not None and value != ""


def exact(key: str, column: str | None = None) -> FilterSpec:
    column = column or key
    param = f"f_{key}"
    return FilterSpec(
        keys=(key,),
        clause=f"{column} = :{param}",
        params=lambda value: {param: value},
    )


def search(key: str, *columns: str) -> FilterSpec:
    """Case-insensitive substring match across one or more text columns."""
    param = f"f_{key}"
    clause = " OR ".join(f"LOWER({col}) LIKE :{param}" for col in columns)
    return FilterSpec(
        keys=(key,),
        clause=f"({clause})",
        params=lambda value: {param: f"%{str(value).lower()}%"},
    )


def date_range(start_key: str, end_key: str, column: str) -> FilterSpec:
    """Inclusive range; applied only when both bounds are supplied."""
    start_param, end_param = f"f_{start_key}", f"f_{end_key}"
    return FilterSpec(
        keys=(start_key, end_key),
        clause=f"{column} BETWEEN :{start_param} AND :{end_param}",
        params=lambda start, end: {start_param: start, end_param: end},
    )


def flag(key: str, clause: str) -> FilterSpec:
    """Static predicate switched on by a truthy filter value."""
    return FilterSpec(keys=(key,), clause=clause, params=lambda value: {}, truthy=True)


def build_where(
    filters: Mapping[str, Any],
    specs: Iterable[FilterSpec],
    *,
    base: Iterable[str] = (),
) -> tuple[str, dict[str, Any]]:
    clauses = list(base)
    params: dict[str, Any] = {}

    for spec in specs:
        values = [filters.get(key) for key in spec.keys]
        if not all(_present(v) for v in values):
            continue
        if spec.truthy and not values[0]:
            continue
        clauses.append(spec.clause)
        params.update(spec.params(*values))

    if not clauses:
        return "", params
    return "WHERE " + " AND ".join(clauses), params


def build_pagination(filters: Mapping[str, Any], params: dict[str, Any]) -> str:
    """
    LIMIT/OFFSET fragment, emitted only for supplied values.

    A limit below 1 or a negative offset is ignored.
    """
    limit = filters.get("limit")
    offset = filters.get("offset")
    sql = ""

    if _present(limit) and int(limit) >= 1:
        sql += " LIMIT :limit"
        params["limit"] = int(limit)
    if _present(offset) and int(offset) >= 0:
        if "limit" not in params:
            sql += " LIMIT :limit"
            params["limit"] = MAX_LIMIT
        sql += " OFFSET :offset"
        params["offset"] = int(offset)
    return sql
