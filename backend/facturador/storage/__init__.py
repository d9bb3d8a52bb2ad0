"""
Document storage selection.

The app resolves one gateway at startup and keeps it in
app.extensions[GATEWAY_EXTENSION_KEY]; services receive it as a parameter.
"""

from __future__ import annotations

import logging

from flask import Flask, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from .base import (
    BatchOperation,
    DocumentGateway,
    DocumentNotFoundError,
    Increment,
    PersistenceError,
    Update,
    Upsert,
)
from .memory_store import MemoryDocumentStore
from .sql_store import SqlDocumentStore

logger = logging.getLogger(__name__)

GATEWAY_EXTENSION_KEY = "facturador.gateway"
STORAGE_BACKENDS = ("auto", "sql", "memory")


def _database_available(app: Flask) -> bool:
    with app.app_context():
        try:
            if app.config.get("AUTO_CREATE_TABLES"):
                db.create_all()
            db.session.execute(text("SELECT 1"))
            db.session.commit()
            return True
        except SQLAlchemyError:
            db.session.rollback()
            logger.warning("Document database unreachable at startup", exc_info=True)
            return False


def select_gateway(app: Flask) -> DocumentGateway:
    """
    Resolve the document store once for this app.

    "auto" uses the SQL store when the database answers and falls back to
    the in-process store otherwise; "sql" fails hard instead of falling back.
    """
    backend = str(app.config.get("STORAGE_BACKEND", "auto")).strip().lower()
    if backend not in STORAGE_BACKENDS:
        raise ValueError(f"STORAGE_BACKEND must be one of: {', '.join(STORAGE_BACKENDS)}")

    if backend == "memory":
        return MemoryDocumentStore()

    if _database_available(app):
        return SqlDocumentStore()

    if backend == "sql":
        raise PersistenceError("STORAGE_BACKEND=sql but the database is unreachable")

    logger.warning("Falling back to the in-memory document store")
    return MemoryDocumentStore()


def init_gateway(app: Flask) -> DocumentGateway:
    gateway = select_gateway(app)
    app.extensions[GATEWAY_EXTENSION_KEY] = gateway
    app.logger.info("Document store: %s", gateway.backend_name)
    return gateway


def get_gateway() -> DocumentGateway:
    return current_app.extensions[GATEWAY_EXTENSION_KEY]


__all__ = [
    "BatchOperation", "DocumentGateway", "DocumentNotFoundError", "Increment",
    "PersistenceError", "Update", "Upsert", "MemoryDocumentStore", "SqlDocumentStore",
    "GATEWAY_EXTENSION_KEY", "select_gateway", "init_gateway", "get_gateway",
]
