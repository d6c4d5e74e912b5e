# Overview: Flask API routes for products; parses input and returns JSON responses.

# backend/bricopos/routes/products.py
"""
Product catalogue routes.

SKU and barcode are unique; duplicates are reported as 400 like customer
emails. Deletion is soft. stock_quantity is set once on create; after that
it only changes through adjust-stock and purchase-order receipts, both of
which write a stock movement (PUT ignores it).
"""
from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import IntegrityError

from ..extensions import get_database
from ..models import Product, Supplier
from ..validation import (
    ConflictError,
    NotFoundError,
    ValidationError,
    coerce_float,
    coerce_int,
    drop_absent,
    json_object,
    non_negative_float,
    optional_int,
    positive_limit,
    require_fields,
    strip_or_none,
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")

TEXT_FIELDS = ("description", "sku", "barcode", "unit", "image_url")
INT_FIELDS = ("min_stock_level", "max_stock_level")


def _products() -> Product:
    return Product(get_database())


def _non_negative_int(value, field: str) -> int | None:
    number = optional_int(value, field)
    if number is not None and number < 0:
        raise ValidationError(f"{field} must be greater than or equal to 0")
    return number


def parse_product_payload(payload: dict, existing: dict | None = None) -> dict:
    """Validate a product body; on update, omitted optional fields keep their stored value."""
    existing = existing or {}
    if existing:
        require_fields({**existing, **payload}, ["name", "category"])
    else:
        require_fields(payload, ["name", "category"])
        if payload.get("price") is None:
            raise ValidationError("Missing required field: price")

    def pick(field):
        return payload[field] if field in payload else existing.get(field)

    data = {
        "name": str(pick("name")).strip(),
        "category": str(pick("category")).strip(),
    }
    for field in TEXT_FIELDS:
        data[field] = strip_or_none(pick(field))

    price = coerce_float(pick("price"), "price")
    if price < 0:
        raise ValidationError("price must be greater than or equal to 0")
    data["price"] = price
    data["cost"] = non_negative_float(pick("cost"), "cost")

    for field in INT_FIELDS:
        data[field] = _non_negative_int(pick(field), field)

    if existing:
        # Stock after creation moves only through adjust-stock and receipts
        data["stock_quantity"] = existing.get("stock_quantity")
    else:
        data["stock_quantity"] = _non_negative_int(payload.get("stock_quantity"), "stock_quantity")

    data["supplier_id"] = optional_int(pick("supplier_id"), "supplier_id")

    if existing:
        is_active = payload.get("is_active")
        data["is_active"] = existing.get("is_active") if is_active is None else int(bool(is_active))
    return data


def ensure_unique_codes(products: Product, data: dict, product_id: int | None = None) -> None:
    for field, lookup in (("sku", products.get_by_sku), ("barcode", products.get_by_barcode)):
        value = data.get(field)
        if not value:
            continue
        found = lookup(value)
        if found and found["id"] != product_id:
            raise ConflictError(f"Product with this {field} already exists")


def check_product_references(data: dict) -> None:
    supplier_id = data.get("supplier_id")
    if supplier_id is not None and not Supplier(get_database()).get_by_id(supplier_id):
        raise ValidationError(f"supplier_id {supplier_id} does not match any supplier")


@products_bp.get("")
def list_products_route():
    """
    List active products by name.

    Query params (all optional): search, category, supplier_id,
    low_stock=true, limit, offset
    """
    filters = drop_absent({
        "search": request.args.get("search"),
        "category": request.args.get("category"),
        "supplier_id": request.args.get("supplier_id", type=int),
        "low_stock": request.args.get("low_stock", "").lower() in ("1", "true", "yes") or None,
        "limit": request.args.get("limit", type=int),
        "offset": request.args.get("offset", type=int),
    })

    try:
        return jsonify(_products().get_all(filters))
    except Exception:
        current_app.logger.exception("Failed to list products")
        return jsonify([])


@products_bp.get("/categories")
def product_categories_route():
    try:
        return jsonify(_products().get_categories())
    except Exception:
        current_app.logger.exception("Failed to list product categories")
        return jsonify([])


@products_bp.get("/low-stock")
def low_stock_route():
    limit = positive_limit(request.args.get("limit", type=int), 20)
    try:
        return jsonify(_products().get_low_stock(limit))
    except Exception:
        current_app.logger.exception("Failed to fetch low stock products")
        return {"error": "Failed to fetch low stock products"}, 500


@products_bp.get("/<int:product_id>")
def get_product_route(product_id: int):
    try:
        product = _products().get_by_id(product_id)
    except Exception:
        current_app.logger.exception("Failed to fetch product")
        return {"error": "Failed to fetch product"}, 500

    if not product:
        return {"error": "Product not found"}, 404
    return product, 200


@products_bp.post("")
def create_product_route():
    try:
        payload = json_object(request.get_json(silent=True))
        data = parse_product_payload(payload)
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        products = _products()
        check_product_references(data)
        ensure_unique_codes(products, data)
        created = products.create(data)
    except (ValidationError, ConflictError) as e:
        return {"error": str(e)}, 400
    except IntegrityError:
        return {"error": "Product with this sku or barcode already exists"}, 400
    except Exception:
        current_app.logger.exception("Failed to create product")
        return {"error": "Failed to create product"}, 500

    return created, 201


@products_bp.put("/<int:product_id>")
def update_product_route(product_id: int):
    try:
        payload = json_object(request.get_json(silent=True))
        products = _products()
        existing = products.get_by_id(product_id)
        if not existing:
            return {"error": "Product not found"}, 404

        data = parse_product_payload(payload, existing)
        check_product_references(data)
        ensure_unique_codes(products, data, product_id)
        updated = products.update(product_id, data)
    except (ValidationError, ConflictError) as e:
        return {"error": str(e)}, 400
    except IntegrityError:
        return {"error": "Product with this sku or barcode already exists"}, 400
    except Exception:
        current_app.logger.exception("Failed to update product")
        return {"error": "Failed to update product"}, 500

    return updated, 200


@products_bp.delete("/<int:product_id>")
def delete_product_route(product_id: int):
    try:
        deleted = _products().delete(product_id)
    except Exception:
        current_app.logger.exception("Failed to delete product")
        return {"error": "Failed to delete product"}, 500

    if not deleted:
        return {"error": "Product not found"}, 404
    return {"message": "Product deleted successfully"}, 200


@products_bp.post("/<int:product_id>/adjust-stock")
def adjust_stock_route(product_id: int):
    """
    Apply a stock movement.

    Body: {"quantity": int, "movement_type": "in"|"out"|"adjustment", "notes": str}
    Adjustments take a signed quantity; in/out take a positive one.
    """
    try:
        payload = json_object(request.get_json(silent=True))
        if payload.get("quantity") is None:
            raise ValidationError("Missing required field: quantity")
        quantity = coerce_int(payload["quantity"], "quantity")
        result = _products().adjust_stock(
            product_id,
            quantity,
            payload.get("movement_type") or "adjustment",
            reference_type=strip_or_none(payload.get("reference_type")),
            reference_id=optional_int(payload.get("reference_id"), "reference_id"),
            notes=strip_or_none(payload.get("notes")),
        )
    except ValidationError as e:
        return {"error": str(e)}, 400
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except Exception:
        current_app.logger.exception("Failed to adjust stock")
        return {"error": "Failed to adjust stock"}, 500

    return result, 200
