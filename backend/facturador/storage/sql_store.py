from __future__ import annotations

from typing import Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import DocumentRecord
from .base import (
    BatchOperation,
    DocumentGateway,
    DocumentNotFoundError,
    PersistenceError,
    apply_operation,
)


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    """
    return query.with_for_update()


class SqlDocumentStore(DocumentGateway):
    """
    Document store over the "documents" table.

    A batch runs inside one database transaction: rows are locked, rewritten
    and committed together, or rolled back together.
    """

    backend_name = "sql"

    def __init__(self, session=None):
        self._session = session

    @property
    def session(self):
        # db.session needs an application context, so resolve it lazily
        return self._session if self._session is not None else db.session

    def _query(self, collection: str, doc_id: Optional[str] = None):
        # Rows may have been rewritten by another session since they were loaded
        query = self.session.query(DocumentRecord).populate_existing().filter_by(collection=collection)
        if doc_id is not None:
            query = query.filter_by(doc_id=doc_id)
        return query

    def list_all(self, collection: str) -> list[dict]:
        try:
            rows = self._query(collection).order_by(DocumentRecord.id.asc()).all()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise PersistenceError(f"Failed to list {collection}") from exc
        return [row.to_record() for row in rows]

    def get_one(self, collection: str, doc_id: str) -> Optional[dict]:
        try:
            row = self._query(collection, doc_id).first()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise PersistenceError(f"Failed to read {collection}/{doc_id}") from exc
        return row.to_record() if row else None

    def delete(self, collection: str, doc_id: str) -> None:
        session = self.session
        try:
            row = self._query(collection, doc_id).first()
            if row is not None:
                session.delete(row)
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            raise PersistenceError(f"Failed to delete {collection}/{doc_id}") from exc

    def run_atomic_batch(self, operations: Iterable[BatchOperation]) -> None:
        session = self.session
        ops = list(operations)
        try:
            for op in ops:
                row = lock_for_update(self._query(op.collection, op.doc_id)).first()
                current = dict(row.data or {}) if row is not None else None
                body = apply_operation(current, op)

                if row is None:
                    session.add(DocumentRecord(collection=op.collection, doc_id=op.doc_id, data=body))
                    # Later operations in the same batch may target this record
                    session.flush()
                else:
                    # Assign a new dict so the JSON column is marked dirty
                    row.data = body

            session.commit()
        except DocumentNotFoundError:
            session.rollback()
            raise
        except SQLAlchemyError as exc:
            session.rollback()
            raise PersistenceError(
                "Atomic batch commit failed",
                details={"operations": len(ops)},
            ) from exc
