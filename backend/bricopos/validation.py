# Overview: Request payload validation and coercion shared by the API routes.

from __future__ import annotations

from typing import Any, Iterable, Mapping

from .time_utils import parse_iso_date


class ValidationError(ValueError):
    """400-level input problem."""


class ConflictError(ValueError):
    """Duplicate unique key (email, sku, barcode); reported as 400."""


class NotFoundError(LookupError):
    """Referenced row does not exist."""


def _blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def require_fields(payload: Mapping[str, Any], fields: Iterable[str]) -> None:
    """
    Reject payloads missing any of `fields`.

    Zero and empty strings count as missing, so a price of 0 fails here the
    same way an absent price does.
    """
    fields = list(fields)
    missing = [f for f in fields if _blank(payload.get(f)) or payload.get(f) == 0]
    if not missing:
        return
    if len(missing) == 1 and len(fields) == 1:
        raise ValidationError(f"Missing required field: {missing[0]}")
    raise ValidationError(f"Missing required fields: {', '.join(fields)}")


def strip_or_none(value: Any) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def coerce_float(value: Any, field: str) -> float:
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a number")


def coerce_int(value: Any, field: str) -> int:
    """Integer coercion that rejects decimals and booleans."""
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        raise ValidationError(f"{field} must be an integer")
    if isinstance(value, str):
        stripped = value.strip()
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{field} must be an integer")
    raise ValidationError(f"{field} must be an integer")


def optional_int(value: Any, field: str) -> int | None:
    if _blank(value):
        return None
    return coerce_int(value, field)


def non_negative_float(value: Any, field: str, default: float = 0.0) -> float:
    if _blank(value):
        return default
    number = coerce_float(value, field)
    if number < 0:
        raise ValidationError(f"{field} must be greater than or equal to 0")
    return number


def validate_date(value: Any, field: str) -> str | None:
    """Normalize to YYYY-MM-DD; None passes through."""
    try:
        parsed = parse_iso_date(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a date (YYYY-MM-DD)")
    return parsed.isoformat() if parsed else None


def validate_choice(value: Any, field: str, choices: Iterable[str], default: str | None = None) -> str | None:
    if _blank(value):
        return default
    choices = tuple(choices)
    if value not in choices:
        raise ValidationError(f"{field} must be one of: {', '.join(choices)}")
    return value


def drop_absent(filters: Mapping[str, Any]) -> dict:
    """Remove filter keys the caller did not supply."""
    return {k: v for k, v in filters.items() if v is not None}


def json_object(payload: Any) -> dict:
    """Request body as a dict; a missing body is empty, any other JSON value is rejected."""
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def positive_limit(value: int | None, default: int) -> int:
    """Row cap from a query string; absent or below 1 falls back to `default`."""
    if value is None or value < 1:
        return default
    return value
