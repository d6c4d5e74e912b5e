# Overview: Flask API routes for purchase orders; parses input and returns JSON responses.

# backend/bricopos/routes/purchase_orders.py
"""
Purchase order routes.

Status is set directly through PUT /<id>/status (any listed status is
accepted). POST /<id>/receive books goods in, raises product stock and moves
the order to partial or received.
"""

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import IntegrityError

from ..extensions import get_database
from ..models import Product, PurchaseOrder, Supplier
from ..schema import PURCHASE_ORDER_STATUSES
from ..validation import (
    NotFoundError,
    ValidationError,
    coerce_int,
    drop_absent,
    json_object,
    non_negative_float,
    require_fields,
    strip_or_none,
    validate_choice,
    validate_date,
)

purchase_orders_bp = Blueprint("purchase_orders", __name__, url_prefix="/api/purchase-orders")


def _orders() -> PurchaseOrder:
    return PurchaseOrder(get_database())


def parse_items(raw_items) -> list[dict]:
    if not isinstance(raw_items, list) or not raw_items:
        raise ValidationError("Missing required field: items")

    items = []
    for index, raw in enumerate(raw_items):
        if not isinstance(raw, dict):
            raise ValidationError(f"items[{index}] must be an object")
        require_fields(raw, ["product_id", "quantity"])
        quantity = coerce_int(raw["quantity"], f"items[{index}].quantity")
        if quantity <= 0:
            raise ValidationError(f"items[{index}].quantity must be greater than 0")
        items.append({
            "product_id": coerce_int(raw["product_id"], f"items[{index}].product_id"),
            "quantity": quantity,
            "unit_cost": non_negative_float(raw.get("unit_cost"), f"items[{index}].unit_cost"),
        })
    return items


def parse_receipts(raw_receipts) -> list[dict]:
    if not raw_receipts:
        return []
    if not isinstance(raw_receipts, list):
        raise ValidationError("items must be a list")

    receipts = []
    for index, raw in enumerate(raw_receipts):
        if not isinstance(raw, dict):
            raise ValidationError(f"items[{index}] must be an object")
        receipts.append({
            "item_id": coerce_int(raw.get("item_id"), f"items[{index}].item_id"),
            "quantity": coerce_int(raw.get("quantity"), f"items[{index}].quantity"),
        })
    return receipts


def parse_header(payload: dict, existing: dict | None = None) -> dict:
    existing = existing or {}
    merged = {**existing, **payload}
    require_fields(merged, ["supplier_id", "order_date"])

    def pick(field):
        return payload[field] if field in payload else existing.get(field)

    return {
        "supplier_id": coerce_int(merged["supplier_id"], "supplier_id"),
        "order_date": validate_date(merged["order_date"], "order_date"),
        "expected_date": validate_date(pick("expected_date"), "expected_date"),
        "po_number": strip_or_none(pick("po_number")),
        "notes": strip_or_none(pick("notes")),
    }


def check_references(header: dict, items: list[dict] | None = None) -> None:
    database = get_database()
    if not Supplier(database).get_by_id(header["supplier_id"]):
        raise ValidationError("Supplier not found")
    products = Product(database)
    for item in items or []:
        if not products.get_by_id(item["product_id"]):
            raise ValidationError(f"Product {item['product_id']} not found")


@purchase_orders_bp.get("")
def list_purchase_orders_route():
    """
    List purchase orders, newest order date first.

    Query params (all optional): status, supplier_id, startDate + endDate,
    limit, offset
    """
    filters = drop_absent({
        "status": request.args.get("status"),
        "supplier_id": request.args.get("supplier_id", type=int),
        "startDate": request.args.get("startDate"),
        "endDate": request.args.get("endDate"),
        "limit": request.args.get("limit", type=int),
        "offset": request.args.get("offset", type=int),
    })

    try:
        return jsonify(_orders().get_all(filters))
    except Exception:
        current_app.logger.exception("Failed to list purchase orders")
        return jsonify([])


@purchase_orders_bp.get("/<int:po_id>")
def get_purchase_order_route(po_id: int):
    try:
        order = _orders().get_by_id(po_id)
    except Exception:
        current_app.logger.exception("Failed to fetch purchase order")
        return {"error": "Failed to fetch purchase order"}, 500

    if not order:
        return {"error": "Purchase order not found"}, 404
    return order, 200


@purchase_orders_bp.post("")
def create_purchase_order_route():
    try:
        payload = json_object(request.get_json(silent=True))
        header = parse_header(payload)
        header["status"] = validate_choice(
            payload.get("status"), "status", PURCHASE_ORDER_STATUSES, default="pending"
        )
        items = parse_items(payload.get("items"))
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        orders = _orders()
        check_references(header, items)
        if header["po_number"] and orders.get_by_number(header["po_number"]):
            raise ValidationError("Purchase order with this number already exists")
        created = orders.create({**header, "items": items})
    except ValidationError as e:
        return {"error": str(e)}, 400
    except IntegrityError:
        return {"error": "Purchase order with this number already exists"}, 400
    except Exception:
        current_app.logger.exception("Failed to create purchase order")
        return {"error": "Failed to create purchase order"}, 500

    return created, 201


@purchase_orders_bp.put("/<int:po_id>")
def update_purchase_order_route(po_id: int):
    try:
        payload = json_object(request.get_json(silent=True))
        orders = _orders()
        existing = orders.get_by_id(po_id)
        if not existing:
            return {"error": "Purchase order not found"}, 404

        header = parse_header(payload, existing)
        check_references(header)
        header["po_number"] = header["po_number"] or existing["po_number"]
        if header["po_number"] != existing["po_number"] and orders.get_by_number(header["po_number"]):
            raise ValidationError("Purchase order with this number already exists")
        updated = orders.update(po_id, header)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except IntegrityError:
        return {"error": "Purchase order with this number already exists"}, 400
    except Exception:
        current_app.logger.exception("Failed to update purchase order")
        return {"error": "Failed to update purchase order"}, 500

    return updated, 200


@purchase_orders_bp.put("/<int:po_id>/status")
def set_purchase_order_status_route(po_id: int):
    try:
        payload = json_object(request.get_json(silent=True))
        require_fields(payload, ["status"])
        updated = _orders().set_status(po_id, payload["status"])
    except ValidationError as e:
        return {"error": str(e)}, 400
    except Exception:
        current_app.logger.exception("Failed to update purchase order status")
        return {"error": "Failed to update purchase order status"}, 500

    if not updated:
        return {"error": "Purchase order not found"}, 404
    return {"id": po_id, "status": payload["status"]}, 200


@purchase_orders_bp.post("/<int:po_id>/receive")
def receive_purchase_order_route(po_id: int):
    """
    Receive goods.

    Body: {"items": [{"item_id": int, "quantity": int}, ...]}; an empty or
    missing list receives everything still outstanding.
    """
    try:
        payload = json_object(request.get_json(silent=True))
        order = _orders().receive(po_id, parse_receipts(payload.get("items")))
    except ValidationError as e:
        return {"error": str(e)}, 400
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except Exception:
        current_app.logger.exception("Failed to receive purchase order")
        return {"error": "Failed to receive purchase order"}, 500

    return order, 200


@purchase_orders_bp.delete("/<int:po_id>")
def delete_purchase_order_route(po_id: int):
    try:
        deleted = _orders().delete(po_id)
    except Exception:
        current_app.logger.exception("Failed to delete purchase order")
        return {"error": "Failed to delete purchase order"}, 500

    if not deleted:
        return {"error": "Purchase order not found"}, 404
    return {"message": "Purchase order deleted successfully"}, 200
