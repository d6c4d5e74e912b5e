"""
Pytest fixtures for the Brico POS backend tests.

Each test gets its own application bound to a fresh in-memory SQLite
database, so tables are created by the same bootstrap path as production.
"""

import pytest

from bricopos import create_app
from bricopos.extensions import DATABASE_EXTENSION_KEY, db


@pytest.fixture(scope='function')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    })

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def database(app):
    """Query helpers connected to the test database."""
    return app.extensions[DATABASE_EXTENSION_KEY]


@pytest.fixture(scope='function')
def offline_app():
    """Application whose database bootstrap never ran (pool not established)."""
    return create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'DB_BOOTSTRAP': False,
    })


@pytest.fixture(scope='function')
def offline_client(offline_app):
    return offline_app.test_client()
