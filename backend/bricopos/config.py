# backend/bricopos/config.py
from __future__ import annotations
import os

from dotenv import load_dotenv

# Pick up DB_* / PORT / CORS_ORIGINS from a local .env before Config is built
load_dotenv()


def _mysql_url() -> str:
    host = os.environ.get("DB_HOST", "localhost")
    port = os.environ.get("DB_PORT", "3306")
    user = os.environ.get("DB_USER", "root")
    password = os.environ.get("DB_PASSWORD", "")
    name = os.environ.get("DB_NAME", "jamalbrico")
    auth = f"{user}:{password}" if password else user
    return f"mysql+pymysql://{auth}@{host}:{port}/{name}?charset=utf8mb4"


class Config:
    # Optional full URL; otherwise composed from the DB_* variables
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL") or _mysql_url()
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Bounded pool: waiters queue up to DB_POOL_TIMEOUT seconds
    DB_POOL_SIZE = int(os.environ.get("DB_POOL_SIZE", "10"))
    DB_POOL_TIMEOUT = int(os.environ.get("DB_POOL_TIMEOUT", "30"))

    CORS_ORIGINS = [
        origin.strip()
        for origin in os.environ.get(
            "CORS_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173",
        ).split(",")
        if origin.strip()
    ]

    PORT = int(os.environ.get("PORT", "3001"))


def engine_options(database_uri: str, pool_size: int, pool_timeout: int) -> dict:
    """SQLAlchemy engine options for the configured URL (SQLite manages its own pool)."""
    if database_uri.startswith("sqlite"):
        return {}
    return {
        "pool_size": pool_size,
        "max_overflow": 0,
        "pool_timeout": pool_timeout,
        "pool_pre_ping": True,
    }
