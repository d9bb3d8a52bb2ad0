from __future__ import annotations

import copy

from ..extensions import db
from ..time_utils import to_utc_z


class DocumentRecord(db.Model):
    """
    One JSON document of the SQL-backed document store.

    (collection, doc_id) is the document key; data holds the record body
    without its id.
    """
    __tablename__ = "documents"
    __table_args__ = (
        db.UniqueConstraint("collection", "doc_id", name="uq_documents_collection_doc_id"),
        db.Index("ix_documents_collection", "collection"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    collection = db.Column(db.String(64), nullable=False)
    doc_id = db.Column(db.String(128), nullable=False)
    data = db.Column(db.JSON, nullable=False, default=dict)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_record(self) -> dict:
        record = copy.deepcopy(self.data or {})
        record["id"] = self.doc_id
        return record

    def to_dict(self) -> dict:
        return {
            "collection": self.collection,
            "doc_id": self.doc_id,
            "data": self.to_record(),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
