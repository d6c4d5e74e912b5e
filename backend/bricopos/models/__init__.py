from .customer import Customer
from .product import Product
from .purchase_order import PurchaseOrder
from .sale import Sale
from .stock_movement import StockMovement
from .supplier import Supplier

__all__ = [
    "Customer",
    "Product",
    "PurchaseOrder",
    "Sale",
    "StockMovement",
    "Supplier",
]
