# Overview: Flask API routes for suppliers; parses input and returns JSON responses.

from flask import Blueprint, current_app, jsonify, request

from ..extensions import get_database
from ..models import Supplier
from ..validation import ValidationError, drop_absent, json_object, require_fields, strip_or_none

suppliers_bp = Blueprint("suppliers", __name__, url_prefix="/api/suppliers")

TEXT_FIELDS = (
    "contact_person", "email", "phone", "address", "city",
    "postal_code", "payment_terms", "notes",
)


def _suppliers() -> Supplier:
    return Supplier(get_database())


def parse_supplier_payload(payload: dict, existing: dict | None = None) -> dict:
    require_fields(payload, ["name"])
    existing = existing or {}

    data = {"name": str(payload["name"]).strip()}
    for field in TEXT_FIELDS:
        data[field] = strip_or_none(payload[field]) if field in payload else existing.get(field)

    if existing:
        is_active = payload.get("is_active")
        data["is_active"] = existing.get("is_active") if is_active is None else int(bool(is_active))
    return data


@suppliers_bp.get("")
def list_suppliers_route():
    filters = drop_absent({
        "search": request.args.get("search"),
        "city": request.args.get("city"),
        "limit": request.args.get("limit", type=int),
        "offset": request.args.get("offset", type=int),
    })

    try:
        return jsonify(_suppliers().get_all(filters))
    except Exception:
        current_app.logger.exception("Failed to list suppliers")
        return jsonify([])


@suppliers_bp.get("/<int:supplier_id>")
def get_supplier_route(supplier_id: int):
    try:
        supplier = _suppliers().get_by_id(supplier_id)
    except Exception:
        current_app.logger.exception("Failed to fetch supplier")
        return {"error": "Failed to fetch supplier"}, 500

    if not supplier:
        return {"error": "Supplier not found"}, 404
    return supplier, 200


@suppliers_bp.get("/<int:supplier_id>/products")
def supplier_products_route(supplier_id: int):
    try:
        suppliers = _suppliers()
        if not suppliers.get_by_id(supplier_id):
            return {"error": "Supplier not found"}, 404
        return jsonify(suppliers.get_products(supplier_id))
    except Exception:
        current_app.logger.exception("Failed to fetch supplier products")
        return {"error": "Failed to fetch supplier products"}, 500


@suppliers_bp.post("")
def create_supplier_route():
    try:
        payload = json_object(request.get_json(silent=True))
        data = parse_supplier_payload(payload)
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        created = _suppliers().create(data)
    except Exception:
        current_app.logger.exception("Failed to create supplier")
        return {"error": "Failed to create supplier"}, 500

    return created, 201


@suppliers_bp.put("/<int:supplier_id>")
def update_supplier_route(supplier_id: int):
    try:
        payload = json_object(request.get_json(silent=True))
        suppliers = _suppliers()
        existing = suppliers.get_by_id(supplier_id)
        if not existing:
            return {"error": "Supplier not found"}, 404

        data = parse_supplier_payload(payload, existing)
        updated = suppliers.update(supplier_id, data)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except Exception:
        current_app.logger.exception("Failed to update supplier")
        return {"error": "Failed to update supplier"}, 500

    return updated, 200


@suppliers_bp.delete("/<int:supplier_id>")
def delete_supplier_route(supplier_id: int):
    try:
        deleted = _suppliers().delete(supplier_id)
    except Exception:
        current_app.logger.exception("Failed to delete supplier")
        return {"error": "Failed to delete supplier"}, 500

    if not deleted:
        return {"error": "Supplier not found"}, 404
    return {"message": "Supplier deleted successfully"}, 200
