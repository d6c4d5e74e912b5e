# Overview: Sale queries; listing, CRUD (hard delete) and dashboard aggregates.

from __future__ import annotations

from typing import Any, Mapping

from ..time_utils import days_ago, today
from .base import EntityModel, as_float, as_int
from .filters import date_range, exact, search

SALE_FILTERS = (
    exact("category"),
    exact("date"),
    date_range("startDate", "endDate", "date"),
    search("search", "productName"),
    exact("customer_id"),
    exact("product_id"),
    exact("payment_method"),
)

SALE_SELECT = """
    SELECT id, sale_number, date, customer_id, product_id, productName, price,
           quantity, category, totalPrice, discount, tax_amount, payment_method,
           notes, created_at, updated_at
    FROM sales
"""

SALE_COLUMNS = (
    "sale_number", "date", "customer_id", "product_id", "productName", "price",
    "quantity", "category", "totalPrice", "discount", "tax_amount",
    "payment_method", "notes",
)


class Sale(EntityModel):
    """
    Sales ledger.

    totalPrice is always price * quantity; callers compute it before create()
    or update() and the table rejects non-positive values. Unlike customers,
    delete() removes the row.
    """

    def get_all(self, filters: Mapping[str, Any] | None = None) -> list[dict]:
        return self._list(
            SALE_SELECT,
            filters or {},
            SALE_FILTERS,
            order_by="date DESC, created_at DESC, id DESC",
        )

    def get_by_id(self, sale_id: int) -> dict | None:
        return self.db.get(SALE_SELECT + " WHERE id = :id", {"id": sale_id})

    def _params(self, data: Mapping[str, Any]) -> dict:
        params = {col: data.get(col) for col in SALE_COLUMNS}
        params["discount"] = params["discount"] or 0
        params["tax_amount"] = params["tax_amount"] or 0
        params["payment_method"] = params["payment_method"] or "cash"
        return params

    def create(self, data: Mapping[str, Any]) -> dict:
        result = self.db.run(
            """
            INSERT INTO sales (
                sale_number, date, customer_id, product_id, productName, price,
                quantity, category, totalPrice, discount, tax_amount,
                payment_method, notes
            )
            VALUES (
                :sale_number, :date, :customer_id, :product_id, :productName, :price,
                :quantity, :category, :totalPrice, :discount, :tax_amount,
                :payment_method, :notes
            )
            """,
            self._params(data),
        )
        return {"id": result.last_id, **data}

    def update(self, sale_id: int, data: Mapping[str, Any]) -> dict:
        params = self._params(data)
        params["id"] = sale_id
        self.db.run(
            """
            UPDATE sales
            SET sale_number = :sale_number, date = :date, customer_id = :customer_id,
                product_id = :product_id, productName = :productName, price = :price,
                quantity = :quantity, category = :category, totalPrice = :totalPrice,
                discount = :discount, tax_amount = :tax_amount,
                payment_method = :payment_method, notes = :notes,
                updated_at = CURRENT_TIMESTAMP
            WHERE id = :id
            """,
            params,
        )
        return {"id": sale_id, **data}

    def delete(self, sale_id: int) -> bool:
        result = self.db.run("DELETE FROM sales WHERE id = :id", {"id": sale_id})
        return result.changes > 0

    # ------------------------------------------------------------------
    # Dashboard aggregates
    # ------------------------------------------------------------------

    def get_stats(self) -> dict:
        row = self.db.get(
            """
            SELECT COUNT(*) AS count,
                   SUM(totalPrice) AS revenue,
                   SUM(quantity) AS products,
                   AVG(totalPrice) AS average
            FROM sales
            """
        ) or {}
        return {
            "totalSales": as_int(row.get("count")),
            "totalRevenue": as_float(row.get("revenue")),
            "totalProducts": as_int(row.get("products")),
            "averageSale": as_float(row.get("average")),
        }

    def get_top_categories(self, limit: int = 5) -> list[dict]:
        rows = self.db.all(
            """
            SELECT category, COUNT(*) AS sales, SUM(totalPrice) AS revenue
            FROM sales
            GROUP BY category
            ORDER BY revenue DESC
            LIMIT :limit
            """,
            {"limit": limit},
        )
        return [
            {"name": r["category"], "sales": as_int(r["sales"]), "revenue": as_float(r["revenue"])}
            for r in rows
        ]

    def get_recent_sales(self, limit: int = 5) -> list[dict]:
        rows = self.db.all(
            """
            SELECT id, productName, totalPrice, date
            FROM sales
            ORDER BY created_at DESC, id DESC
            LIMIT :limit
            """,
            {"limit": limit},
        )
        return [
            {
                "id": r["id"],
                "productName": r["productName"],
                "totalPrice": as_float(r["totalPrice"]),
                "date": r["date"],
            }
            for r in rows
        ]

    def get_daily_revenue(self, days: int = 7) -> list[dict]:
        """One row per sale date in the trailing `days`-day window ending today."""
        if days < 1:
            return []
        rows = self.db.all(
            """
            SELECT date, SUM(totalPrice) AS revenue
            FROM sales
            WHERE date BETWEEN :start AND :end
            GROUP BY date
            ORDER BY date ASC
            """,
            {"start": days_ago(days - 1).isoformat(), "end": today().isoformat()},
        )
        return [{"date": r["date"], "revenue": as_float(r["revenue"])} for r in rows]

    def get_categories(self) -> list[str]:
        rows = self.db.all("SELECT DISTINCT category FROM sales ORDER BY category")
        return [r["category"] for r in rows]
