# backend/facturador/config.py
from __future__ import annotations
import os


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/facturador.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional remote document database
        "sqlite:///facturador.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # "auto" probes the database once at startup and falls back to the
    # in-process store when it is unreachable; "sql" and "memory" force one.
    STORAGE_BACKEND = os.environ.get("FACTURADOR_STORAGE", "auto")
    # Schema comes from `flask db upgrade`; set to create tables at startup instead.
    AUTO_CREATE_TABLES = _env_flag("FACTURADOR_AUTO_CREATE_TABLES", "false")

    # "absolute" writes stock = snapshot - qty on sale; "increment" uses the
    # store's relative increment primitive instead.
    LEDGER_STOCK_WRITES = os.environ.get("FACTURADOR_STOCK_WRITES", "absolute")

    LOW_STOCK_THRESHOLD = int(os.environ.get("FACTURADOR_LOW_STOCK_THRESHOLD", "5"))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    DEMO_SEED_ENABLED = False


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    STORAGE_BACKEND = "sql"
    AUTO_CREATE_TABLES = True
    LOG_LEVEL = "WARNING"
