# Overview: Back-office user records; bcrypt password hashing and user creation.

"""
User Service

Back-office users (admin, manager, employee) are created from the CLI. The
HTTP API carries no login or session handling; this module only owns the
credential records.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor 12)
- Minimum 8 characters, with upper/lower case, a digit and a special char
- Username and email are unique (checked here and by the table)
"""

import re

import bcrypt

from ..database import Database
from ..schema import USER_ROLES


class PasswordValidationError(Exception):
    """Raised when password doesn't meet strength requirements."""
    pass


def validate_password_strength(password: str) -> None:
    """
    Validate password meets strength requirements.

    Raises PasswordValidationError if requirements not met.
    """
    if len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Z]', password):
        raise PasswordValidationError("Password must contain at least one uppercase letter")

    if not re.search(r'[a-z]', password):
        raise PasswordValidationError("Password must contain at least one lowercase letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")

    if not re.search(r"[!@#$%^&*(),.'\":{}|<>?_\-]", password):
        raise PasswordValidationError("Password must contain at least one special character")


def hash_password(password: str) -> str:
    """Hash password using bcrypt with cost factor 12 (strength-checked first)."""
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=12)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """Timing-safe check of a password against its stored bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def create_user(
    database: Database,
    *,
    username: str,
    email: str,
    password: str,
    role: str = "employee",
    first_name: str | None = None,
    last_name: str | None = None,
) -> dict:
    """
    Create a back-office user.

    Raises:
        ValueError: unknown role, or username/email already taken
        PasswordValidationError: password doesn't meet requirements
    """
    if role not in USER_ROLES:
        raise ValueError(f"Role must be one of: {', '.join(USER_ROLES)}")

    existing = database.get(
        "SELECT id FROM users WHERE username = :username OR email = :email",
        {"username": username, "email": email},
    )
    if existing:
        raise ValueError("Username or email already exists")

    password_hash = hash_password(password)

    result = database.run(
        """
        INSERT INTO users (username, email, password_hash, first_name, last_name, role)
        VALUES (:username, :email, :password_hash, :first_name, :last_name, :role)
        """,
        {
            "username": username,
            "email": email,
            "password_hash": password_hash,
            "first_name": first_name,
            "last_name": last_name,
            "role": role,
        },
    )
    return {
        "id": result.last_id,
        "username": username,
        "email": email,
        "first_name": first_name,
        "last_name": last_name,
        "role": role,
    }


def list_users(database: Database) -> list[dict]:
    return database.all(
        """
        SELECT id, username, email, first_name, last_name, role, is_active, last_login, created_at
        FROM users
        ORDER BY username ASC
        """
    )


def get_user_by_username(database: Database, username: str) -> dict | None:
    return database.get("SELECT * FROM users WHERE username = :username", {"username": username})
