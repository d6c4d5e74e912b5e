# Overview: Flask CLI command groups for schema bootstrap, demo data and users.

# backend/bricopos/cli.py
# Commands Legend (run from the repository root):
# Prereqs:
# - Activate your virtualenv and `pip install -e .`.
# - Set FLASK_APP (PowerShell: $env:FLASK_APP="bricopos:create_app").
# - Use: python -m flask <group> <command> [options]
#
# Schema:
# - python -m flask db init
#   Create any missing table (idempotent).
# - python -m flask db reset --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask db seed
#   Insert a small demo catalogue: supplier, products, customers, sales.
#
# Users:
# - python -m flask users create --username admin --email admin@brico.local --password "Password123!" --role admin
#   Create a back-office user (prompts if options are omitted).
# - python -m flask users list

from datetime import timedelta

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db, get_database
from .models import Customer, Product, Sale, Supplier
from .schema import USER_ROLES, create_tables, drop_tables
from .services.auth_service import PasswordValidationError, create_user, list_users
from .time_utils import today


def _connected_database():
    database = get_database()
    if not database.initialized:
        database.connect(db.engine)
    return database


# =============================================================================
# SCHEMA COMMANDS
# =============================================================================

@click.group('db')
def db_group():
    """Schema bootstrap and demo data commands."""


@db_group.command('init')
@with_appcontext
def init_db():
    """Create missing tables (existing tables are left untouched)."""
    create_tables()
    _connected_database()
    click.echo(f"PASS Tables ready on {db.engine.url.render_as_string(hide_password=True)}")


@db_group.command('reset')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    drop_tables()

    click.echo("BUILD  Creating all tables...")
    create_tables()
    _connected_database()

    click.echo("PASS Database reset complete. Run 'python -m flask db seed' for demo data.")


DEMO_PRODUCTS = [
    ("Marteau 500g", "MAR-500", "Outils manuels", 50.0, 32.0, 40),
    ("Tournevis cruciforme", "TRN-PH2", "Outils manuels", 18.5, 9.0, 60),
    ("Perceuse sans fil 18V", "PRC-18V", "Outillage électrique", 890.0, 610.0, 8),
    ("Vis à bois 4x40 (boîte)", "VIS-440", "Quincaillerie", 25.0, 12.0, 3),
]

DEMO_CUSTOMERS = [
    ("Atelier Benali", "contact@benali.ma", "wholesale", "Casablanca"),
    ("Karim El Idrissi", "karim@example.com", "retail", "Rabat"),
]


@db_group.command('seed')
@with_appcontext
def seed_db():
    """Insert demo data unless sales already exist."""
    database = _connected_database()
    sales = Sale(database)
    if sales.get_stats()["totalSales"] > 0:
        click.echo("WARN  Sales already present, skipping seed.")
        return

    supplier = Supplier(database).create({
        "name": "Quincaillerie du Nord",
        "contact_person": "Youssef",
        "city": "Tanger",
        "payment_terms": "Net 30",
    })
    click.echo(f"PASS Created supplier: {supplier['name']} (ID: {supplier['id']})")

    products = Product(database)
    created_products = []
    for name, sku, category, price, cost, stock in DEMO_PRODUCTS:
        created_products.append(products.create({
            "name": name,
            "sku": sku,
            "category": category,
            "price": price,
            "cost": cost,
            "stock_quantity": stock,
            "supplier_id": supplier["id"],
        }))
    click.echo(f"PASS Created {len(created_products)} products")

    customers = Customer(database)
    created_customers = [
        customers.create({"name": name, "email": email, "customer_type": kind, "city": city})
        for name, email, kind, city in DEMO_CUSTOMERS
    ]
    click.echo(f"PASS Created {len(created_customers)} customers")

    start = today()
    for offset, (product, customer) in enumerate(zip(created_products * 2, created_customers * 4)):
        quantity = offset % 3 + 1
        sales.create({
            "date": (start - timedelta(days=offset)).isoformat(),
            "productName": product["name"],
            "price": product["price"],
            "quantity": quantity,
            "category": product["category"],
            "totalPrice": round(product["price"] * quantity, 2),
            "customer_id": customer["id"],
            "product_id": product["id"],
        })
    click.echo("PASS Created demo sales for the last week")


# =============================================================================
# USER MANAGEMENT COMMANDS
# =============================================================================

@click.group('users')
def users_group():
    """Back-office user commands."""


@users_group.command('create')
@click.option('--username', prompt=True, help='Username')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(list(USER_ROLES)), default='employee', show_default=True, help='Role')
@click.option('--first-name', default=None, help='First name')
@click.option('--last-name', default=None, help='Last name')
@with_appcontext
def create_user_cli(username, email, password, role, first_name, last_name):
    """
    Create a back-office user.

    Password must meet strength requirements:
    - Minimum 8 characters
    - At least one uppercase letter, one lowercase letter and one digit
    - At least one special character
    """
    try:
        user = create_user(
            _connected_database(),
            username=username,
            email=email,
            password=password,
            role=role,
            first_name=first_name,
            last_name=last_name,
        )
    except PasswordValidationError as e:
        raise click.ClickException(f"Password validation failed: {e}")
    except ValueError as e:
        raise click.ClickException(str(e))

    current_app.logger.info("Created user %s with role %s", user["username"], user["role"])
    click.echo(f"PASS Created user: {user['username']} ({user['email']}) with role '{user['role']}'")


@users_group.command('list')
@with_appcontext
def list_users_cli():
    """List all users with role and active status."""
    users = list_users(_connected_database())

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*70)
    click.echo(f"{'ID':<5} {'Username':<20} {'Email':<30} {'Role':<10} {'Active'}")
    click.echo("="*70)
    for user in users:
        active_str = "Yes" if user["is_active"] else "No"
        click.echo(f"{user['id']:<5} {user['username']:<20} {user['email']:<30} {user['role']:<10} {active_str}")
    click.echo("="*70 + "\n")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(db_group)
    app.cli.add_command(users_group)
