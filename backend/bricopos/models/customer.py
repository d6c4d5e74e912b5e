# Overview: Customer queries; listing, lookups, soft delete and customer reports.

from __future__ import annotations

from typing import Any, Mapping

from ..time_utils import days_ago
from .base import EntityModel, as_float, as_int
from .filters import exact, search

CUSTOMER_FILTERS = (
    search("search", "name", "email", "phone"),
    exact("customer_type"),
    exact("city"),
)

CUSTOMER_COLUMNS = (
    "name", "email", "phone", "address", "city", "postal_code",
    "customer_type", "credit_limit", "notes",
)

SEARCH_RESULT_LIMIT = 20


class Customer(EntityModel):
    """
    Customer master data.

    Deletion is soft: delete() clears is_active, so the row disappears from
    listings and search but stays readable through get_by_id().
    """

    def get_all(self, filters: Mapping[str, Any] | None = None) -> list[dict]:
        return self._list(
            "SELECT * FROM customers",
            filters or {},
            CUSTOMER_FILTERS,
            base=["is_active = 1"],
            order_by="name ASC, id ASC",
        )

    def get_by_id(self, customer_id: int) -> dict | None:
        return self.db.get("SELECT * FROM customers WHERE id = :id", {"id": customer_id})

    def get_by_email(self, email: str) -> dict | None:
        return self.db.get(
            "SELECT * FROM customers WHERE email = :email AND is_active = 1",
            {"email": email},
        )

    def create(self, data: Mapping[str, Any]) -> dict:
        params = {col: data.get(col) for col in CUSTOMER_COLUMNS}
        params["customer_type"] = params["customer_type"] or "retail"
        params["credit_limit"] = params["credit_limit"] or 0

        result = self.db.run(
            """
            INSERT INTO customers (
                name, email, phone, address, city, postal_code,
                customer_type, credit_limit, notes
            )
            VALUES (
                :name, :email, :phone, :address, :city, :postal_code,
                :customer_type, :credit_limit, :notes
            )
            """,
            params,
        )
        return {"id": result.last_id, **data}

    def update(self, customer_id: int, data: Mapping[str, Any]) -> dict:
        params = {col: data.get(col) for col in CUSTOMER_COLUMNS}
        is_active = data.get("is_active")
        params["is_active"] = 1 if is_active is None else int(bool(is_active))
        params["id"] = customer_id

        self.db.run(
            """
            UPDATE customers
            SET name = :name, email = :email, phone = :phone, address = :address,
                city = :city, postal_code = :postal_code, customer_type = :customer_type,
                credit_limit = :credit_limit, notes = :notes, is_active = :is_active,
                updated_at = CURRENT_TIMESTAMP
            WHERE id = :id
            """,
            params,
        )
        return {"id": customer_id, **data}

    def delete(self, customer_id: int) -> bool:
        result = self.db.run(
            "UPDATE customers SET is_active = 0, updated_at = CURRENT_TIMESTAMP WHERE id = :id",
            {"id": customer_id},
        )
        return result.changes > 0

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    def get_customer_stats(self, customer_id: int) -> dict:
        params = {"id": customer_id}
        totals = self.db.get(
            """
            SELECT COUNT(*) AS count, SUM(totalPrice) AS total, AVG(totalPrice) AS average
            FROM sales
            WHERE customer_id = :id
            """,
            params,
        )
        last_sale = self.db.get(
            """
            SELECT date, totalPrice
            FROM sales
            WHERE customer_id = :id
            ORDER BY date DESC, created_at DESC, id DESC
            LIMIT 1
            """,
            params,
        )
        return {
            "totalSales": as_int(totals and totals["count"]),
            "totalRevenue": as_float(totals and totals["total"]),
            "averageSale": as_float(totals and totals["average"]),
            "lastSaleDate": last_sale["date"] if last_sale else None,
            "lastSaleAmount": as_float(last_sale and last_sale["totalPrice"]),
        }

    def get_purchase_history(self, customer_id: int, limit: int = 10) -> list[dict]:
        return self.db.all(
            """
            SELECT s.*, p.name AS product_name
            FROM sales s
            LEFT JOIN products p ON s.product_id = p.id
            WHERE s.customer_id = :id
            ORDER BY s.date DESC, s.created_at DESC, s.id DESC
            LIMIT :limit
            """,
            {"id": customer_id, "limit": limit},
        )

    def search(self, term: str) -> list[dict]:
        pattern = f"%{term.lower()}%"
        return self.db.all(
            """
            SELECT *
            FROM customers
            WHERE (LOWER(name) LIKE :term OR LOWER(email) LIKE :term OR LOWER(phone) LIKE :term)
              AND is_active = 1
            ORDER BY name ASC, id ASC
            LIMIT :limit
            """,
            {"term": pattern, "limit": SEARCH_RESULT_LIMIT},
        )

    def get_customer_types(self) -> list[dict]:
        rows = self.db.all(
            """
            SELECT customer_type, COUNT(*) AS count
            FROM customers
            WHERE is_active = 1
            GROUP BY customer_type
            ORDER BY customer_type
            """
        )
        return [{"customer_type": r["customer_type"], "count": as_int(r["count"])} for r in rows]

    def get_top_customers(self, limit: int = 10) -> list[dict]:
        rows = self.db.all(
            """
            SELECT c.*,
                   COUNT(s.id) AS total_orders,
                   SUM(s.totalPrice) AS total_revenue,
                   AVG(s.totalPrice) AS avg_order_value,
                   MAX(s.date) AS last_order_date
            FROM customers c
            LEFT JOIN sales s ON c.id = s.customer_id
            WHERE c.is_active = 1
            GROUP BY c.id
            HAVING SUM(s.totalPrice) > 0
            ORDER BY total_revenue DESC
            LIMIT :limit
            """,
            {"limit": limit},
        )
        return [
            {
                **row,
                "total_orders": as_int(row["total_orders"]),
                "total_revenue": as_float(row["total_revenue"]),
                "avg_order_value": as_float(row["avg_order_value"]),
            }
            for row in rows
        ]

    def get_inactive_customers(self, days_inactive: int = 90) -> list[dict]:
        """Active customers with no sale at all, or none since the cutoff date."""
        cutoff = days_ago(days_inactive).isoformat()
        return self.db.all(
            """
            SELECT c.*, MAX(s.date) AS last_purchase_date
            FROM customers c
            LEFT JOIN sales s ON c.id = s.customer_id
            WHERE c.is_active = 1
            GROUP BY c.id
            HAVING MAX(s.date) IS NULL OR MAX(s.date) < :cutoff
            ORDER BY last_purchase_date ASC, c.name ASC
            """,
            {"cutoff": cutoff},
        )
