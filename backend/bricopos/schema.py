# Overview: Table definitions for the store; created idempotently at startup.

# backend/bricopos/schema.py
"""
Relational schema.

Tables are declared on the Flask-SQLAlchemy metadata and created with
create_all() (checkfirst), so startup only creates what is missing. Entity
models never go through an ORM mapper: they issue parameterized SQL against
these tables through the query helpers in database.py.

Constraints carry the storage-level invariants:
- non-negative prices, costs, credit limits and stock
- strictly positive sale price, quantity and total
- unique customer email, product sku/barcode, sale number, PO number,
  username and user email
- foreign keys between sales/customers/products/suppliers/purchase orders
"""
from __future__ import annotations

from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url

from .extensions import db

CUSTOMER_TYPES = ("retail", "wholesale", "commercial")
PAYMENT_METHODS = ("cash", "credit", "check", "bank_transfer")
PURCHASE_ORDER_STATUSES = ("pending", "ordered", "partial", "received", "cancelled")
MOVEMENT_TYPES = ("in", "out", "adjustment")
USER_ROLES = ("admin", "manager", "employee")


def _timestamps(with_updated: bool = True) -> list:
    columns = [db.Column("created_at", db.DateTime, nullable=False, server_default=db.func.now())]
    if with_updated:
        columns.append(db.Column("updated_at", db.DateTime, nullable=False, server_default=db.func.now()))
    return columns


def _active_flag():
    return db.Column("is_active", db.Boolean, nullable=False, server_default=db.text("1"))


suppliers = db.Table(
    "suppliers",
    db.Column("id", db.Integer, primary_key=True, autoincrement=True),
    db.Column("name", db.String(255), nullable=False),
    db.Column("contact_person", db.String(255)),
    db.Column("email", db.String(255)),
    db.Column("phone", db.String(50)),
    db.Column("address", db.Text),
    db.Column("city", db.String(100)),
    db.Column("postal_code", db.String(20)),
    db.Column("payment_terms", db.String(100), server_default="Net 30"),
    db.Column("notes", db.Text),
    _active_flag(),
    *_timestamps(),
    db.Index("idx_suppliers_name", "name"),
    sqlite_autoincrement=True,
)


customers = db.Table(
    "customers",
    db.Column("id", db.Integer, primary_key=True, autoincrement=True),
    db.Column("name", db.String(255), nullable=False),
    db.Column("email", db.String(255), unique=True),
    db.Column("phone", db.String(50)),
    db.Column("address", db.Text),
    db.Column("city", db.String(100)),
    db.Column("postal_code", db.String(20)),
    db.Column(
        "customer_type",
        db.Enum(*CUSTOMER_TYPES, name="customer_type", create_constraint=True),
        nullable=False,
        server_default="retail",
    ),
    db.Column("credit_limit", db.Numeric(12, 2), nullable=False, server_default=db.text("0")),
    db.Column("notes", db.Text),
    _active_flag(),
    *_timestamps(),
    db.CheckConstraint("credit_limit >= 0", name="ck_customers_credit_limit"),
    db.Index("idx_customers_name", "name"),
    sqlite_autoincrement=True,
)


products = db.Table(
    "products",
    db.Column("id", db.Integer, primary_key=True, autoincrement=True),
    db.Column("name", db.String(255), nullable=False),
    db.Column("description", db.Text),
    db.Column("sku", db.String(100), unique=True),
    db.Column("barcode", db.String(100), unique=True),
    db.Column("category", db.String(100), nullable=False),
    db.Column("price", db.Numeric(10, 2), nullable=False),
    db.Column("cost", db.Numeric(10, 2), nullable=False, server_default=db.text("0")),
    db.Column("stock_quantity", db.Integer, nullable=False, server_default=db.text("0")),
    db.Column("min_stock_level", db.Integer, nullable=False, server_default=db.text("5")),
    db.Column("max_stock_level", db.Integer, nullable=False, server_default=db.text("100")),
    db.Column("unit", db.String(50), server_default="unité"),
    db.Column("supplier_id", db.Integer, db.ForeignKey("suppliers.id")),
    db.Column("image_url", db.String(500)),
    _active_flag(),
    *_timestamps(),
    db.CheckConstraint("price >= 0", name="ck_products_price"),
    db.CheckConstraint("cost >= 0", name="ck_products_cost"),
    db.CheckConstraint("stock_quantity >= 0", name="ck_products_stock"),
    db.Index("idx_products_category", "category"),
    db.Index("idx_products_stock", "stock_quantity"),
    sqlite_autoincrement=True,
)


sales = db.Table(
    "sales",
    db.Column("id", db.Integer, primary_key=True, autoincrement=True),
    db.Column("sale_number", db.String(100), unique=True),
    db.Column("date", db.Date, nullable=False),
    db.Column("customer_id", db.Integer, db.ForeignKey("customers.id")),
    db.Column("product_id", db.Integer, db.ForeignKey("products.id")),
    db.Column("productName", db.String(255), nullable=False),
    db.Column("price", db.Numeric(10, 2), nullable=False),
    db.Column("quantity", db.Integer, nullable=False),
    db.Column("category", db.String(100), nullable=False),
    db.Column("totalPrice", db.Numeric(12, 2), nullable=False),
    db.Column("discount", db.Numeric(10, 2), nullable=False, server_default=db.text("0")),
    db.Column("tax_amount", db.Numeric(10, 2), nullable=False, server_default=db.text("0")),
    db.Column(
        "payment_method",
        db.Enum(*PAYMENT_METHODS, name="payment_method", create_constraint=True),
        nullable=False,
        server_default="cash",
    ),
    db.Column("notes", db.Text),
    *_timestamps(),
    db.CheckConstraint("price > 0", name="ck_sales_price"),
    db.CheckConstraint("quantity > 0", name="ck_sales_quantity"),
    db.CheckConstraint("totalPrice > 0", name="ck_sales_total"),
    db.Index("idx_sales_date", "date"),
    db.Index("idx_sales_category", "category"),
    db.Index("idx_sales_product_name", "productName"),
    db.Index("idx_sales_customer", "customer_id"),
    sqlite_autoincrement=True,
)


purchase_orders = db.Table(
    "purchase_orders",
    db.Column("id", db.Integer, primary_key=True, autoincrement=True),
    db.Column("po_number", db.String(100), unique=True, nullable=False),
    db.Column("supplier_id", db.Integer, db.ForeignKey("suppliers.id"), nullable=False),
    db.Column("order_date", db.Date, nullable=False),
    db.Column("expected_date", db.Date),
    db.Column("received_date", db.Date),
    db.Column(
        "status",
        db.Enum(*PURCHASE_ORDER_STATUSES, name="purchase_order_status", create_constraint=True),
        nullable=False,
        server_default="pending",
    ),
    db.Column("total_amount", db.Numeric(12, 2), nullable=False, server_default=db.text("0")),
    db.Column("notes", db.Text),
    *_timestamps(),
    sqlite_autoincrement=True,
)


purchase_order_items = db.Table(
    "purchase_order_items",
    db.Column("id", db.Integer, primary_key=True, autoincrement=True),
    db.Column(
        "purchase_order_id",
        db.Integer,
        db.ForeignKey("purchase_orders.id", ondelete="CASCADE"),
        nullable=False,
    ),
    db.Column("product_id", db.Integer, db.ForeignKey("products.id"), nullable=False),
    db.Column("quantity", db.Integer, nullable=False),
    db.Column("unit_cost", db.Numeric(10, 2), nullable=False),
    db.Column("total_cost", db.Numeric(12, 2), nullable=False),
    db.Column("received_quantity", db.Integer, nullable=False, server_default=db.text("0")),
    *_timestamps(with_updated=False),
    db.CheckConstraint("quantity > 0", name="ck_po_items_quantity"),
    db.CheckConstraint("unit_cost >= 0", name="ck_po_items_unit_cost"),
    db.CheckConstraint("total_cost >= 0", name="ck_po_items_total_cost"),
    sqlite_autoincrement=True,
)


stock_movements = db.Table(
    "stock_movements",
    db.Column("id", db.Integer, primary_key=True, autoincrement=True),
    db.Column("product_id", db.Integer, db.ForeignKey("products.id"), nullable=False),
    db.Column(
        "movement_type",
        db.Enum(*MOVEMENT_TYPES, name="movement_type", create_constraint=True),
        nullable=False,
    ),
    db.Column("quantity", db.Integer, nullable=False),
    db.Column("reference_type", db.String(50)),
    db.Column("reference_id", db.Integer),
    db.Column("notes", db.Text),
    *_timestamps(with_updated=False),
    db.Index("idx_stock_movements_product", "product_id"),
    db.Index("idx_stock_movements_type", "movement_type"),
    sqlite_autoincrement=True,
)


users = db.Table(
    "users",
    db.Column("id", db.Integer, primary_key=True, autoincrement=True),
    db.Column("username", db.String(100), unique=True, nullable=False),
    db.Column("email", db.String(255), unique=True, nullable=False),
    db.Column("password_hash", db.String(255), nullable=False),
    db.Column("first_name", db.String(100)),
    db.Column("last_name", db.String(100)),
    db.Column(
        "role",
        db.Enum(*USER_ROLES, name="user_role", create_constraint=True),
        nullable=False,
        server_default="employee",
    ),
    _active_flag(),
    db.Column("last_login", db.DateTime),
    *_timestamps(),
    sqlite_autoincrement=True,
)


def create_tables() -> None:
    """Create any missing table; existing tables are left untouched."""
    db.create_all()


def drop_tables() -> None:
    db.drop_all()


def create_database_if_missing(database_uri: str) -> None:
    """
    MySQL only: create the target database (utf8mb4) before the pool opens.

    Other backends are left alone; SQLite creates its file on first connect.
    """
    url = make_url(database_uri)
    if url.get_backend_name() != "mysql" or not url.database:
        return

    server = create_engine(url.set(database=None))
    try:
        with server.begin() as conn:
            conn.execute(text(
                f"CREATE DATABASE IF NOT EXISTS `{url.database}` "
                "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
            ))
    finally:
        server.dispose()
