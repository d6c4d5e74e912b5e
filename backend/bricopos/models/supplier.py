# Overview: Supplier queries; listing, CRUD (soft delete) and supplied products.

from __future__ import annotations

from typing import Any, Mapping

from .base import EntityModel
from .filters import exact, search

SUPPLIER_FILTERS = (
    search("search", "name", "contact_person", "email"),
    exact("city"),
)

SUPPLIER_COLUMNS = (
    "name", "contact_person", "email", "phone", "address", "city",
    "postal_code", "payment_terms", "notes",
)

DEFAULT_PAYMENT_TERMS = "Net 30"


class Supplier(EntityModel):

    def get_all(self, filters: Mapping[str, Any] | None = None) -> list[dict]:
        return self._list(
            "SELECT * FROM suppliers",
            filters or {},
            SUPPLIER_FILTERS,
            base=["is_active = 1"],
            order_by="name ASC, id ASC",
        )

    def get_by_id(self, supplier_id: int) -> dict | None:
        return self.db.get("SELECT * FROM suppliers WHERE id = :id", {"id": supplier_id})

    def create(self, data: Mapping[str, Any]) -> dict:
        params = {col: data.get(col) for col in SUPPLIER_COLUMNS}
        params["payment_terms"] = params["payment_terms"] or DEFAULT_PAYMENT_TERMS
        result = self.db.run(
            """
            INSERT INTO suppliers (
                name, contact_person, email, phone, address, city,
                postal_code, payment_terms, notes
            )
            VALUES (
                :name, :contact_person, :email, :phone, :address, :city,
                :postal_code, :payment_terms, :notes
            )
            """,
            params,
        )
        return {"id": result.last_id, **data}

    def update(self, supplier_id: int, data: Mapping[str, Any]) -> dict:
        params = {col: data.get(col) for col in SUPPLIER_COLUMNS}
        params["payment_terms"] = params["payment_terms"] or DEFAULT_PAYMENT_TERMS
        is_active = data.get("is_active")
        params["is_active"] = 1 if is_active is None else int(bool(is_active))
        params["id"] = supplier_id
        self.db.run(
            """
            UPDATE suppliers
            SET name = :name, contact_person = :contact_person, email = :email,
                phone = :phone, address = :address, city = :city,
                postal_code = :postal_code, payment_terms = :payment_terms,
                notes = :notes, is_active = :is_active, updated_at = CURRENT_TIMESTAMP
            WHERE id = :id
            """,
            params,
        )
        return {"id": supplier_id, **data}

    def delete(self, supplier_id: int) -> bool:
        result = self.db.run(
            "UPDATE suppliers SET is_active = 0, updated_at = CURRENT_TIMESTAMP WHERE id = :id",
            {"id": supplier_id},
        )
        return result.changes > 0

    def get_products(self, supplier_id: int) -> list[dict]:
        return self.db.all(
            """
            SELECT *
            FROM products
            WHERE supplier_id = :id AND is_active = 1
            ORDER BY name ASC, id ASC
            """,
            {"id": supplier_id},
        )
