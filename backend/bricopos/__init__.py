# backend/bricopos/__init__.py
from __future__ import annotations

from typing import Any, Mapping

from flask import Flask, request

from .config import Config, engine_options
from .database import Database
from .extensions import DATABASE_EXTENSION_KEY, db


def create_app(config_overrides: Mapping[str, Any] | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    app.config.setdefault(
        "SQLALCHEMY_ENGINE_OPTIONS",
        engine_options(
            app.config["SQLALCHEMY_DATABASE_URI"],
            app.config["DB_POOL_SIZE"],
            app.config["DB_POOL_TIMEOUT"],
        ),
    )

    # Initialize extensions
    db.init_app(app)
    database = Database()
    app.extensions[DATABASE_EXTENSION_KEY] = database

    # Register table definitions on the metadata
    from . import schema

    if app.config.get("DB_BOOTSTRAP", True):
        with app.app_context():
            try:
                schema.create_database_if_missing(app.config["SQLALCHEMY_DATABASE_URI"])
                schema.create_tables()
                database.connect(db.engine)
                app.logger.info("Database connected: %s", db.engine.url.render_as_string(hide_password=True))
            except Exception:
                # Requests still run; the query helpers raise "Database not initialized"
                app.logger.exception("Database bootstrap failed")

    # Register blueprints
    from .routes.system import system_bp
    from .routes.sales import sales_bp
    from .routes.customers import customers_bp
    from .routes.products import products_bp
    from .routes.suppliers import suppliers_bp
    from .routes.purchase_orders import purchase_orders_bp
    from .routes.stock_movements import stock_movements_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(sales_bp)
    app.register_blueprint(customers_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(suppliers_bp)
    app.register_blueprint(purchase_orders_bp)
    app.register_blueprint(stock_movements_bp)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin in app.config["CORS_ORIGINS"]:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
