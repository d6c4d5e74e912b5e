# Overview: Product catalogue queries; listing, CRUD (soft delete) and stock adjustments.

from __future__ import annotations

from typing import Any, Mapping

from ..schema import MOVEMENT_TYPES
from ..validation import NotFoundError, ValidationError
from .base import EntityModel
from .filters import exact, flag, search
from .stock_movement import StockMovement

PRODUCT_FILTERS = (
    search("search", "p.name", "p.sku", "p.barcode"),
    exact("category", "p.category"),
    exact("supplier_id", "p.supplier_id"),
    flag("low_stock", "p.stock_quantity <= p.min_stock_level"),
)

PRODUCT_SELECT = """
    SELECT p.*, s.name AS supplier_name
    FROM products p
    LEFT JOIN suppliers s ON p.supplier_id = s.id
"""

PRODUCT_COLUMNS = (
    "name", "description", "sku", "barcode", "category", "price", "cost",
    "stock_quantity", "min_stock_level", "max_stock_level", "unit",
    "supplier_id", "image_url",
)

PRODUCT_DEFAULTS = {
    "cost": 0,
    "stock_quantity": 0,
    "min_stock_level": 5,
    "max_stock_level": 100,
    "unit": "unité",
}


def stock_delta(movement_type: str, quantity: int) -> int:
    """Signed change in stock for a movement."""
    if movement_type == "in":
        return quantity
    if movement_type == "out":
        return -quantity
    return quantity


class Product(EntityModel):

    def get_all(self, filters: Mapping[str, Any] | None = None) -> list[dict]:
        return self._list(
            PRODUCT_SELECT,
            filters or {},
            PRODUCT_FILTERS,
            base=["p.is_active = 1"],
            order_by="p.name ASC, p.id ASC",
        )

    def get_by_id(self, product_id: int) -> dict | None:
        return self.db.get(PRODUCT_SELECT + " WHERE p.id = :id", {"id": product_id})

    def get_by_sku(self, sku: str) -> dict | None:
        return self.db.get("SELECT * FROM products WHERE sku = :sku", {"sku": sku})

    def get_by_barcode(self, barcode: str) -> dict | None:
        return self.db.get("SELECT * FROM products WHERE barcode = :barcode", {"barcode": barcode})

    def _params(self, data: Mapping[str, Any]) -> dict:
        params = {col: data.get(col) for col in PRODUCT_COLUMNS}
        for col, default in PRODUCT_DEFAULTS.items():
            if params[col] is None:
                params[col] = default
        return params

    def create(self, data: Mapping[str, Any]) -> dict:
        result = self.db.run(
            """
            INSERT INTO products (
                name, description, sku, barcode, category, price, cost,
                stock_quantity, min_stock_level, max_stock_level, unit,
                supplier_id, image_url
            )
            VALUES (
                :name, :description, :sku, :barcode, :category, :price, :cost,
                :stock_quantity, :min_stock_level, :max_stock_level, :unit,
                :supplier_id, :image_url
            )
            """,
            self._params(data),
        )
        return {"id": result.last_id, **data}

    def update(self, product_id: int, data: Mapping[str, Any]) -> dict:
        params = self._params(data)
        is_active = data.get("is_active")
        params["is_active"] = 1 if is_active is None else int(bool(is_active))
        params["id"] = product_id
        self.db.run(
            """
            UPDATE products
            SET name = :name, description = :description, sku = :sku, barcode = :barcode,
                category = :category, price = :price, cost = :cost,
                stock_quantity = :stock_quantity, min_stock_level = :min_stock_level,
                max_stock_level = :max_stock_level, unit = :unit,
                supplier_id = :supplier_id, image_url = :image_url,
                is_active = :is_active, updated_at = CURRENT_TIMESTAMP
            WHERE id = :id
            """,
            params,
        )
        return {"id": product_id, **data}

    def delete(self, product_id: int) -> bool:
        result = self.db.run(
            "UPDATE products SET is_active = 0, updated_at = CURRENT_TIMESTAMP WHERE id = :id",
            {"id": product_id},
        )
        return result.changes > 0

    def get_categories(self) -> list[str]:
        rows = self.db.all(
            "SELECT DISTINCT category FROM products WHERE is_active = 1 ORDER BY category"
        )
        return [r["category"] for r in rows]

    def get_low_stock(self, limit: int = 20) -> list[dict]:
        return self.db.all(
            PRODUCT_SELECT
            + """
            WHERE p.is_active = 1 AND p.stock_quantity <= p.min_stock_level
            ORDER BY p.stock_quantity ASC, p.name ASC
            LIMIT :limit
            """,
            {"limit": limit},
        )

    def adjust_stock(
        self,
        product_id: int,
        quantity: int,
        movement_type: str = "adjustment",
        *,
        reference_type: str | None = None,
        reference_id: int | None = None,
        notes: str | None = None,
    ) -> dict:
        """
        Apply a stock movement and record it in the audit trail.

        Raises:
            ValidationError: unknown movement type, zero/invalid quantity, or
                the movement would take stock below zero
            NotFoundError: no such product
        """
        if movement_type not in MOVEMENT_TYPES:
            raise ValidationError(f"movement_type must be one of: {', '.join(MOVEMENT_TYPES)}")
        if quantity == 0 or (movement_type != "adjustment" and quantity < 0):
            raise ValidationError("quantity must be greater than 0")

        if self.get_by_id(product_id) is None:
            raise NotFoundError("Product not found")

        delta = stock_delta(movement_type, quantity)
        result = self.db.run(
            """
            UPDATE products
            SET stock_quantity = stock_quantity + :delta, updated_at = CURRENT_TIMESTAMP
            WHERE id = :id AND stock_quantity + :delta >= 0
            """,
            {"id": product_id, "delta": delta},
        )
        if result.changes == 0:
            raise ValidationError("Insufficient stock for this movement")

        movement = StockMovement(self.db).create({
            "product_id": product_id,
            "movement_type": movement_type,
            "quantity": quantity,
            "reference_type": reference_type,
            "reference_id": reference_id,
            "notes": notes,
        })
        return {"product": self.get_by_id(product_id), "movement": movement}
