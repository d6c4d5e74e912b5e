# Overview: Flask API routes for customers; parses input and returns JSON responses.

# backend/bricopos/routes/customers.py
"""
Customer API routes.

Deletion is soft (is_active = 0). Duplicate emails are rejected with 400,
both by the explicit pre-insert check and by the table's unique constraint
when two creates race past that check.
"""

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import IntegrityError

from ..extensions import get_database
from ..models import Customer
from ..schema import CUSTOMER_TYPES
from ..validation import (
    ConflictError,
    ValidationError,
    drop_absent,
    json_object,
    non_negative_float,
    positive_limit,
    require_fields,
    strip_or_none,
    validate_choice,
)

customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")

DUPLICATE_EMAIL = "Customer with this email already exists"
TEXT_FIELDS = ("email", "phone", "address", "city", "postal_code", "notes")
MIN_SEARCH_LENGTH = 2


def _customers() -> Customer:
    return Customer(get_database())


def parse_customer_payload(payload: dict, existing: dict | None = None) -> dict:
    """
    Validate a customer body.

    On update, `existing` supplies the stored value for every optional field
    the body leaves out.
    """
    require_fields(payload, ["name"])
    existing = existing or {}

    data = {"name": str(payload["name"]).strip()}
    for field in TEXT_FIELDS:
        if field in payload:
            data[field] = strip_or_none(payload[field])
        else:
            data[field] = existing.get(field)

    data["customer_type"] = validate_choice(
        payload.get("customer_type"),
        "customer_type",
        CUSTOMER_TYPES,
        default=existing.get("customer_type", "retail"),
    )
    data["credit_limit"] = non_negative_float(
        payload.get("credit_limit"),
        "credit_limit",
        default=float(existing.get("credit_limit") or 0),
    )
    if existing:
        is_active = payload.get("is_active")
        data["is_active"] = existing.get("is_active") if is_active is None else int(bool(is_active))
    return data


def ensure_unique_email(customers: Customer, email: str | None, current_email: str | None = None) -> None:
    if email and email != current_email and customers.get_by_email(email):
        raise ConflictError(DUPLICATE_EMAIL)


@customers_bp.get("")
def list_customers_route():
    """
    List active customers by name.

    Query params (all optional): search, customer_type, city, limit, offset
    """
    filters = drop_absent({
        "search": request.args.get("search"),
        "customer_type": request.args.get("customer_type"),
        "city": request.args.get("city"),
        "limit": request.args.get("limit", type=int),
        "offset": request.args.get("offset", type=int),
    })

    try:
        return jsonify(_customers().get_all(filters))
    except Exception:
        current_app.logger.exception("Failed to list customers")
        return jsonify([])


@customers_bp.get("/search")
def search_customers_route():
    term = (request.args.get("q") or "").strip()
    if len(term) < MIN_SEARCH_LENGTH:
        return {"error": "Search term must be at least 2 characters long"}, 400

    try:
        return jsonify(_customers().search(term))
    except Exception:
        current_app.logger.exception("Failed to search customers")
        return {"error": "Failed to search customers"}, 500


@customers_bp.get("/types")
def customer_types_route():
    try:
        return jsonify(_customers().get_customer_types())
    except Exception:
        current_app.logger.exception("Failed to fetch customer types")
        return {"error": "Failed to fetch customer types"}, 500


@customers_bp.get("/top")
def top_customers_route():
    limit = positive_limit(request.args.get("limit", type=int), 10)
    try:
        return jsonify(_customers().get_top_customers(limit))
    except Exception:
        current_app.logger.exception("Failed to fetch top customers")
        return {"error": "Failed to fetch top customers"}, 500


@customers_bp.get("/inactive")
def inactive_customers_route():
    days = request.args.get("days", 90, type=int)
    try:
        return jsonify(_customers().get_inactive_customers(days))
    except Exception:
        current_app.logger.exception("Failed to fetch inactive customers")
        return {"error": "Failed to fetch inactive customers"}, 500


@customers_bp.get("/<int:customer_id>")
def get_customer_route(customer_id: int):
    try:
        customer = _customers().get_by_id(customer_id)
    except Exception:
        current_app.logger.exception("Failed to fetch customer")
        return {"error": "Failed to fetch customer"}, 500

    if not customer:
        return {"error": "Customer not found"}, 404
    return customer, 200


@customers_bp.get("/<int:customer_id>/stats")
def customer_stats_route(customer_id: int):
    try:
        return _customers().get_customer_stats(customer_id), 200
    except Exception:
        current_app.logger.exception("Failed to fetch customer statistics")
        return {"error": "Failed to fetch customer statistics"}, 500


@customers_bp.get("/<int:customer_id>/history")
def customer_history_route(customer_id: int):
    limit = positive_limit(request.args.get("limit", type=int), 10)
    try:
        return jsonify(_customers().get_purchase_history(customer_id, limit))
    except Exception:
        current_app.logger.exception("Failed to fetch customer purchase history")
        return {"error": "Failed to fetch customer purchase history"}, 500


@customers_bp.post("")
def create_customer_route():
    try:
        payload = json_object(request.get_json(silent=True))
        data = parse_customer_payload(payload)
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        customers = _customers()
        ensure_unique_email(customers, data["email"])
        created = customers.create(data)
    except ConflictError as e:
        return {"error": str(e)}, 400
    except IntegrityError:
        return {"error": DUPLICATE_EMAIL}, 400
    except Exception:
        current_app.logger.exception("Failed to create customer")
        return {"error": "Failed to create customer"}, 500

    return created, 201


@customers_bp.put("/<int:customer_id>")
def update_customer_route(customer_id: int):
    try:
        payload = json_object(request.get_json(silent=True))
        customers = _customers()
        existing = customers.get_by_id(customer_id)
        if not existing:
            return {"error": "Customer not found"}, 404

        data = parse_customer_payload(payload, existing)
        ensure_unique_email(customers, data["email"], existing.get("email"))
        updated = customers.update(customer_id, data)
    except (ValidationError, ConflictError) as e:
        return {"error": str(e)}, 400
    except IntegrityError:
        return {"error": DUPLICATE_EMAIL}, 400
    except Exception:
        current_app.logger.exception("Failed to update customer")
        return {"error": "Failed to update customer"}, 500

    return updated, 200


@customers_bp.delete("/<int:customer_id>")
def delete_customer_route(customer_id: int):
    try:
        deleted = _customers().delete(customer_id)
    except Exception:
        current_app.logger.exception("Failed to delete customer")
        return {"error": "Failed to delete customer"}, 500

    if not deleted:
        return {"error": "Customer not found"}, 404
    return {"message": "Customer deleted successfully"}, 200
