# Overview: Flask API routes for the stock movement audit trail (read-only).

from flask import Blueprint, current_app, jsonify, request

from ..extensions import get_database
from ..models import StockMovement
from ..validation import drop_absent

stock_movements_bp = Blueprint("stock_movements", __name__, url_prefix="/api/stock-movements")


@stock_movements_bp.get("")
def list_stock_movements_route():
    """
    List movements, newest first.

    Query params (all optional): product_id, movement_type, reference_type,
    limit, offset
    """
    filters = drop_absent({
        "product_id": request.args.get("product_id", type=int),
        "movement_type": request.args.get("movement_type"),
        "reference_type": request.args.get("reference_type"),
        "limit": request.args.get("limit", type=int),
        "offset": request.args.get("offset", type=int),
    })

    try:
        return jsonify(StockMovement(get_database()).get_all(filters))
    except Exception:
        current_app.logger.exception("Failed to list stock movements")
        return jsonify([])


@stock_movements_bp.get("/<int:movement_id>")
def get_stock_movement_route(movement_id: int):
    try:
        movement = StockMovement(get_database()).get_by_id(movement_id)
    except Exception:
        current_app.logger.exception("Failed to fetch stock movement")
        return {"error": "Failed to fetch stock movement"}, 500

    if not movement:
        return {"error": "Stock movement not found"}, 404
    return movement, 200
