# Overview: Flask API routes for sales; parses input and returns JSON responses.

# backend/bricopos/routes/sales.py
"""
Sales API routes.

Listing, categories and the dashboard stats degrade to empty results when the
database fails; single-sale reads and all mutations answer 500.
"""

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import IntegrityError

from ..extensions import get_database
from ..models import Customer, Product, Sale
from ..schema import PAYMENT_METHODS
from ..validation import (
    ValidationError,
    coerce_float,
    coerce_int,
    drop_absent,
    json_object,
    non_negative_float,
    optional_int,
    require_fields,
    strip_or_none,
    validate_choice,
    validate_date,
)

sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")

REQUIRED_FIELDS = ("date", "productName", "price", "quantity", "category")
SALE_CONSTRAINT_ERROR = "Sale conflicts with an existing sale_number or references a missing record"

EMPTY_STATS = {
    "totalSales": 0,
    "totalRevenue": 0,
    "totalProducts": 0,
    "averageSale": 0,
    "topCategories": [],
    "recentSales": [],
    "dailyRevenue": [],
}


def _sales() -> Sale:
    return Sale(get_database())


def parse_sale_payload(payload: dict, existing: dict | None = None) -> dict:
    """
    Validate a create/update body and compute totalPrice = price * quantity.

    On update, `existing` supplies the stored value for every optional field
    the body leaves out. Raises ValidationError naming the missing or invalid
    field.
    """
    require_fields(payload, REQUIRED_FIELDS)
    existing = existing or {}

    def pick(field):
        return payload[field] if field in payload else existing.get(field)

    price = coerce_float(payload["price"], "price")
    quantity = coerce_int(payload["quantity"], "quantity")
    if price <= 0 or quantity <= 0:
        raise ValidationError("Price and quantity must be greater than 0")

    return {
        "date": validate_date(payload["date"], "date"),
        "productName": str(payload["productName"]).strip(),
        "price": price,
        "quantity": quantity,
        "category": str(payload["category"]).strip(),
        "totalPrice": round(price * quantity, 2),
        "customer_id": optional_int(pick("customer_id"), "customer_id"),
        "product_id": optional_int(pick("product_id"), "product_id"),
        "payment_method": validate_choice(
            pick("payment_method"), "payment_method", PAYMENT_METHODS, default="cash"
        ),
        "discount": non_negative_float(pick("discount"), "discount"),
        "tax_amount": non_negative_float(pick("tax_amount"), "tax_amount"),
        "sale_number": strip_or_none(pick("sale_number")),
        "notes": strip_or_none(pick("notes")),
    }


def check_sale_references(data: dict) -> None:
    database = get_database()
    if data["customer_id"] is not None and not Customer(database).get_by_id(data["customer_id"]):
        raise ValidationError(f"customer_id {data['customer_id']} does not match any customer")
    if data["product_id"] is not None and not Product(database).get_by_id(data["product_id"]):
        raise ValidationError(f"product_id {data['product_id']} does not match any product")


@sales_bp.get("")
def list_sales_route():
    """
    List sales, most recent first.

    Query params (all optional): category, date, startDate + endDate, search,
    customer_id, product_id, payment_method, limit, offset
    """
    filters = drop_absent({
        "category": request.args.get("category"),
        "date": request.args.get("date"),
        "startDate": request.args.get("startDate"),
        "endDate": request.args.get("endDate"),
        "search": request.args.get("search"),
        "customer_id": request.args.get("customer_id", type=int),
        "product_id": request.args.get("product_id", type=int),
        "payment_method": request.args.get("payment_method"),
        "limit": request.args.get("limit", type=int),
        "offset": request.args.get("offset", type=int),
    })

    try:
        return jsonify(_sales().get_all(filters))
    except Exception:
        current_app.logger.exception("Failed to list sales")
        return jsonify([])


@sales_bp.get("/stats")
def sales_stats_route():
    """Dashboard totals plus top categories, recent sales and 7-day revenue."""
    try:
        sales = _sales()
        stats = sales.get_stats()
        return jsonify({
            **stats,
            "topCategories": sales.get_top_categories(5),
            "recentSales": sales.get_recent_sales(5),
            "dailyRevenue": sales.get_daily_revenue(7),
        })
    except Exception:
        current_app.logger.exception("Failed to compute sales statistics")
        return jsonify(EMPTY_STATS)


@sales_bp.get("/categories")
def sales_categories_route():
    try:
        return jsonify(_sales().get_categories())
    except Exception:
        current_app.logger.exception("Failed to list sale categories")
        return jsonify([])


@sales_bp.get("/<int:sale_id>")
def get_sale_route(sale_id: int):
    try:
        sale = _sales().get_by_id(sale_id)
    except Exception:
        current_app.logger.exception("Failed to fetch sale")
        return {"error": "Failed to fetch sale"}, 500

    if not sale:
        return {"error": "Sale not found"}, 404
    return sale, 200


@sales_bp.post("")
def create_sale_route():
    try:
        data = parse_sale_payload(json_object(request.get_json(silent=True)))
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        check_sale_references(data)
        created = _sales().create(data)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except IntegrityError:
        return {"error": SALE_CONSTRAINT_ERROR}, 400
    except Exception:
        current_app.logger.exception("Failed to create sale")
        return {"error": "Database not available - sale not saved"}, 500

    return created, 201


@sales_bp.put("/<int:sale_id>")
def update_sale_route(sale_id: int):
    try:
        payload = json_object(request.get_json(silent=True))
        sales = _sales()
        existing = sales.get_by_id(sale_id)
        if not existing:
            return {"error": "Sale not found"}, 404

        data = parse_sale_payload(payload, existing)
        check_sale_references(data)
        updated = sales.update(sale_id, data)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except IntegrityError:
        return {"error": SALE_CONSTRAINT_ERROR}, 400
    except Exception:
        current_app.logger.exception("Failed to update sale")
        return {"error": "Database not available - sale not updated"}, 500

    return updated, 200


@sales_bp.delete("/<int:sale_id>")
def delete_sale_route(sale_id: int):
    try:
        deleted = _sales().delete(sale_id)
    except Exception:
        current_app.logger.exception("Failed to delete sale")
        return {"error": "Database not available - sale not deleted"}, 500

    if not deleted:
        return {"error": "Sale not found"}, 404
    return {"message": "Sale deleted successfully"}, 200
