# Overview: Flask extension instances and the per-app query helper lookup.

import sqlite3

from flask import current_app
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event
from sqlalchemy.engine import Engine

db = SQLAlchemy()

DATABASE_EXTENSION_KEY = "bricopos.database"


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite leaves FOREIGN KEY clauses unenforced unless asked per connection
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def get_database():
    """Return the query helper attached to the running application."""
    return current_app.extensions[DATABASE_EXTENSION_KEY]
