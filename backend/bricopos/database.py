# Overview: Query helpers over the pooled SQLAlchemy engine (get / all / run).

# backend/bricopos/database.py
"""
Query helpers.

Every entity model talks to the store through a Database instance:

- get(query, params)  -> first row as a dict, or None
- all(query, params)  -> every row as a list of dicts, in result order
- run(query, params)  -> RunResult(last_id, changes) for INSERT/UPDATE/DELETE

Queries use named bind parameters (":name") only; values never reach the SQL
text. A Database is created per application and connected to that app's engine
during create_app(); calling any helper before connect() raises
DatabaseNotInitializedError.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping

from sqlalchemy import text
from sqlalchemy.engine import Engine

from .time_utils import to_utc_z


class DatabaseNotInitializedError(RuntimeError):
    """Raised when a query helper is used before the pool is established."""

    def __init__(self, message: str = "Database not initialized"):
        super().__init__(message)


@dataclass(frozen=True)
class RunResult:
    last_id: int | None
    changes: int


# SQLite hands DateTime columns back as "YYYY-MM-DD HH:MM:SS" text through text() queries
TIMESTAMP_COLUMNS = frozenset({"created_at", "updated_at", "last_login"})


def _shape_timestamp(value: str) -> str:
    try:
        return to_utc_z(datetime.fromisoformat(value))
    except ValueError:
        return value


def _shape_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, datetime):
        return to_utc_z(value)
    if isinstance(value, date):
        return value.isoformat()
    return value


def shape_row(row) -> dict:
    shaped = {}
    for key, value in row._mapping.items():
        if key in TIMESTAMP_COLUMNS and isinstance(value, str):
            shaped[key] = _shape_timestamp(value)
        else:
            shaped[key] = _shape_value(value)
    return shaped


class Database:
    def __init__(self, engine: Engine | None = None):
        self._engine = engine

    @property
    def initialized(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise DatabaseNotInitializedError()
        return self._engine

    @property
    def dialect(self) -> str:
        return self.engine.dialect.name

    def connect(self, engine: Engine) -> None:
        self._engine = engine

    def get(self, query: str, params: Mapping[str, Any] | None = None) -> dict | None:
        with self.engine.connect() as conn:
            row = conn.execute(text(query), dict(params or {})).first()
        return shape_row(row) if row is not None else None

    def all(self, query: str, params: Mapping[str, Any] | None = None) -> list[dict]:
        with self.engine.connect() as conn:
            rows = conn.execute(text(query), dict(params or {})).fetchall()
        return [shape_row(row) for row in rows]

    def run(self, query: str, params: Mapping[str, Any] | None = None) -> RunResult:
        with self.engine.begin() as conn:
            result = conn.execute(text(query), dict(params or {}))
            last_id = result.lastrowid if query.lstrip().upper().startswith("INSERT") else None
            return RunResult(last_id=last_id or None, changes=result.rowcount)
