# Overview: Stock movement audit trail queries.

from __future__ import annotations

from typing import Any, Mapping

from .base import EntityModel
from .filters import exact

STOCK_MOVEMENT_FILTERS = (
    exact("product_id", "m.product_id"),
    exact("movement_type", "m.movement_type"),
    exact("reference_type", "m.reference_type"),
)

STOCK_MOVEMENT_SELECT = """
    SELECT m.*, p.name AS product_name
    FROM stock_movements m
    LEFT JOIN products p ON m.product_id = p.id
"""


class StockMovement(EntityModel):
    """
    Append-only record of inventory changes.

    quantity is signed for adjustments (negative removes stock); for "in"
    and "out" movements it is the positive amount moved.
    """

    def get_all(self, filters: Mapping[str, Any] | None = None) -> list[dict]:
        return self._list(
            STOCK_MOVEMENT_SELECT,
            filters or {},
            STOCK_MOVEMENT_FILTERS,
            order_by="m.created_at DESC, m.id DESC",
        )

    def get_by_id(self, movement_id: int) -> dict | None:
        return self.db.get(STOCK_MOVEMENT_SELECT + " WHERE m.id = :id", {"id": movement_id})

    def create(self, data: Mapping[str, Any]) -> dict:
        result = self.db.run(
            """
            INSERT INTO stock_movements (
                product_id, movement_type, quantity, reference_type, reference_id, notes
            )
            VALUES (
                :product_id, :movement_type, :quantity, :reference_type, :reference_id, :notes
            )
            """,
            {
                "product_id": data.get("product_id"),
                "movement_type": data.get("movement_type"),
                "quantity": data.get("quantity"),
                "reference_type": data.get("reference_type"),
                "reference_id": data.get("reference_id"),
                "notes": data.get("notes"),
            },
        )
        return {"id": result.last_id, **data}
