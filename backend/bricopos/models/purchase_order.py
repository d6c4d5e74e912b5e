# Overview: Purchase order queries; header/line items, status and goods receipt.

from __future__ import annotations

import secrets
from typing import Any, Iterable, Mapping

from ..schema import PURCHASE_ORDER_STATUSES
from ..time_utils import today
from ..validation import NotFoundError, ValidationError
from .base import EntityModel
from .filters import date_range, exact
from .product import Product

PURCHASE_ORDER_FILTERS = (
    exact("status", "po.status"),
    exact("supplier_id", "po.supplier_id"),
    date_range("startDate", "endDate", "po.order_date"),
)

PURCHASE_ORDER_SELECT = """
    SELECT po.*, s.name AS supplier_name
    FROM purchase_orders po
    LEFT JOIN suppliers s ON po.supplier_id = s.id
"""

CLOSED_STATUSES = ("received", "cancelled")


def generate_po_number(order_date: str | None = None) -> str:
    stamp = (order_date or today().isoformat()).replace("-", "")
    return f"PO-{stamp}-{secrets.token_hex(3).upper()}"


def line_total(quantity: int, unit_cost: float) -> float:
    return round(quantity * unit_cost, 2)


class PurchaseOrder(EntityModel):
    """
    Purchase order header plus line items.

    Status is stored as given (pending, ordered, partial, received,
    cancelled); set_status() does not enforce transitions. receive() is the
    only operation that derives a status: partial while any line is still
    outstanding, received once every line is complete.
    """

    def get_all(self, filters: Mapping[str, Any] | None = None) -> list[dict]:
        return self._list(
            PURCHASE_ORDER_SELECT,
            filters or {},
            PURCHASE_ORDER_FILTERS,
            order_by="po.order_date DESC, po.created_at DESC, po.id DESC",
        )

    def get_items(self, po_id: int) -> list[dict]:
        return self.db.all(
            """
            SELECT i.*, p.name AS product_name
            FROM purchase_order_items i
            LEFT JOIN products p ON i.product_id = p.id
            WHERE i.purchase_order_id = :id
            ORDER BY i.id ASC
            """,
            {"id": po_id},
        )

    def get_by_id(self, po_id: int) -> dict | None:
        order = self.db.get(PURCHASE_ORDER_SELECT + " WHERE po.id = :id", {"id": po_id})
        if order is None:
            return None
        order["items"] = self.get_items(po_id)
        return order

    def get_by_number(self, po_number: str) -> dict | None:
        return self.db.get(
            "SELECT * FROM purchase_orders WHERE po_number = :po_number",
            {"po_number": po_number},
        )

    def create(self, data: Mapping[str, Any]) -> dict:
        items = [dict(item) for item in data.get("items") or []]
        for item in items:
            item["total_cost"] = line_total(item["quantity"], item["unit_cost"])
        total_amount = round(sum(item["total_cost"] for item in items), 2)
        po_number = data.get("po_number") or generate_po_number(data.get("order_date"))

        result = self.db.run(
            """
            INSERT INTO purchase_orders (
                po_number, supplier_id, order_date, expected_date, status, total_amount, notes
            )
            VALUES (
                :po_number, :supplier_id, :order_date, :expected_date, :status, :total_amount, :notes
            )
            """,
            {
                "po_number": po_number,
                "supplier_id": data.get("supplier_id"),
                "order_date": data.get("order_date"),
                "expected_date": data.get("expected_date"),
                "status": data.get("status") or "pending",
                "total_amount": total_amount,
                "notes": data.get("notes"),
            },
        )
        po_id = result.last_id

        for item in items:
            item_result = self.db.run(
                """
                INSERT INTO purchase_order_items (
                    purchase_order_id, product_id, quantity, unit_cost, total_cost
                )
                VALUES (:po_id, :product_id, :quantity, :unit_cost, :total_cost)
                """,
                {
                    "po_id": po_id,
                    "product_id": item["product_id"],
                    "quantity": item["quantity"],
                    "unit_cost": item["unit_cost"],
                    "total_cost": item["total_cost"],
                },
            )
            item["id"] = item_result.last_id

        return {
            "id": po_id,
            **data,
            "po_number": po_number,
            "total_amount": total_amount,
            "items": items,
        }

    def update(self, po_id: int, data: Mapping[str, Any]) -> dict:
        self.db.run(
            """
            UPDATE purchase_orders
            SET po_number = :po_number, supplier_id = :supplier_id, order_date = :order_date,
                expected_date = :expected_date, notes = :notes, updated_at = CURRENT_TIMESTAMP
            WHERE id = :id
            """,
            {
                "id": po_id,
                "po_number": data.get("po_number"),
                "supplier_id": data.get("supplier_id"),
                "order_date": data.get("order_date"),
                "expected_date": data.get("expected_date"),
                "notes": data.get("notes"),
            },
        )
        return {"id": po_id, **data}

    def set_status(self, po_id: int, status: str) -> bool:
        if status not in PURCHASE_ORDER_STATUSES:
            raise ValidationError(f"status must be one of: {', '.join(PURCHASE_ORDER_STATUSES)}")
        result = self.db.run(
            "UPDATE purchase_orders SET status = :status, updated_at = CURRENT_TIMESTAMP WHERE id = :id",
            {"id": po_id, "status": status},
        )
        return result.changes > 0

    def delete(self, po_id: int) -> bool:
        self.db.run("DELETE FROM purchase_order_items WHERE purchase_order_id = :id", {"id": po_id})
        result = self.db.run("DELETE FROM purchase_orders WHERE id = :id", {"id": po_id})
        return result.changes > 0

    def receive(self, po_id: int, receipts: Iterable[Mapping[str, Any]] | None = None) -> dict:
        """
        Book received goods against a purchase order.

        receipts: [{"item_id": int, "quantity": int}, ...]; when empty, every
        outstanding quantity is received. Each receipt raises stock through
        Product.adjust_stock() with an "in" movement referencing the order.
        """
        order = self.get_by_id(po_id)
        if order is None:
            raise NotFoundError("Purchase order not found")
        if order["status"] in CLOSED_STATUSES:
            raise ValidationError(f"Purchase order is already {order['status']}")

        items = {item["id"]: item for item in order["items"]}
        receipts = list(receipts or [])
        if not receipts:
            receipts = [
                {"item_id": item_id, "quantity": item["quantity"] - item["received_quantity"]}
                for item_id, item in items.items()
                if item["quantity"] > item["received_quantity"]
            ]
        if not receipts:
            raise ValidationError("Nothing left to receive on this purchase order")

        # Lines naming the same item are summed before the outstanding check
        requested: dict[int, int] = {}
        for receipt in receipts:
            if receipt["item_id"] not in items:
                raise ValidationError(f"Item {receipt['item_id']} is not on this purchase order")
            if receipt["quantity"] <= 0:
                raise ValidationError(f"Received quantity for item {receipt['item_id']} must be greater than 0")
            requested[receipt["item_id"]] = requested.get(receipt["item_id"], 0) + receipt["quantity"]

        for item_id, quantity in requested.items():
            item = items[item_id]
            outstanding = item["quantity"] - item["received_quantity"]
            if quantity > outstanding:
                raise ValidationError(
                    f"Received quantity for item {item_id} must be between 1 and {outstanding}"
                )

        products = Product(self.db)
        for item_id, quantity in requested.items():
            item = items[item_id]
            self.db.run(
                """
                UPDATE purchase_order_items
                SET received_quantity = received_quantity + :quantity
                WHERE id = :id
                """,
                {"id": item_id, "quantity": quantity},
            )
            item["received_quantity"] += quantity
            products.adjust_stock(
                item["product_id"],
                quantity,
                "in",
                reference_type="purchase_order",
                reference_id=po_id,
                notes=f"Received on {order['po_number']}",
            )

        complete = all(i["received_quantity"] >= i["quantity"] for i in items.values())
        self.db.run(
            """
            UPDATE purchase_orders
            SET status = :status, received_date = :received_date, updated_at = CURRENT_TIMESTAMP
            WHERE id = :id
            """,
            {
                "id": po_id,
                "status": "received" if complete else "partial",
                "received_date": today().isoformat(),
            },
        )
        return self.get_by_id(po_id)
