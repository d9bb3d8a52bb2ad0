"""
Document gateway contract.

Every store holds JSON-like records grouped by collection and keyed by id.
Records handed out always carry their "id"; record bodies are stored without
it. run_atomic_batch is the only multi-record write: every operation of a
batch commits, or none does.

Batch operations:
- Upsert: replace the record (or merge fields into it when merge=True).
- Update: merge fields into an existing record; fails when the record is absent.
- Increment: add amount to a numeric field; an absent record is created with
  field = amount.
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterable, Optional, Union


class PersistenceError(Exception):
    """Raised when a store cannot read or commit."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class DocumentNotFoundError(PersistenceError):
    """Raised when an Update targets a record that does not exist."""


@dataclass(frozen=True)
class Upsert:
    collection: str
    doc_id: str
    record: dict = field(default_factory=dict)
    merge: bool = False


@dataclass(frozen=True)
class Update:
    collection: str
    doc_id: str
    fields: dict = field(default_factory=dict)


@dataclass(frozen=True)
class Increment:
    collection: str
    doc_id: str
    field: str
    amount: Union[int, float] = 1


BatchOperation = Union[Upsert, Update, Increment]


def strip_id(record: dict) -> dict:
    body = copy.deepcopy(dict(record))
    body.pop("id", None)
    return body


def with_id(doc_id: str, body: dict) -> dict:
    record = copy.deepcopy(body)
    record["id"] = doc_id
    return record


def apply_operation(current: Optional[dict], op: BatchOperation) -> dict:
    """Return the new record body after applying op to current (None when absent)."""
    if isinstance(op, Upsert):
        if op.merge and current is not None:
            merged = copy.deepcopy(current)
            merged.update(strip_id(op.record))
            return merged
        return strip_id(op.record)

    if isinstance(op, Update):
        if current is None:
            raise DocumentNotFoundError(
                f"No document {op.collection}/{op.doc_id} to update",
                details={"collection": op.collection, "doc_id": op.doc_id},
            )
        updated = copy.deepcopy(current)
        updated.update(strip_id(op.fields))
        return updated

    if isinstance(op, Increment):
        updated = copy.deepcopy(current) if current is not None else {}
        existing = updated.get(op.field)
        if isinstance(existing, bool) or not isinstance(existing, (int, float)):
            existing = 0
        updated[op.field] = existing + op.amount
        return updated

    raise TypeError(f"Unsupported batch operation: {op!r}")


class DocumentGateway(ABC):
    """Storage contract consumed by the ledger and catalog services."""

    backend_name = "abstract"

    @abstractmethod
    def list_all(self, collection: str) -> list[dict]:
        ...

    @abstractmethod
    def get_one(self, collection: str, doc_id: str) -> Optional[dict]:
        ...

    @abstractmethod
    def run_atomic_batch(self, operations: Iterable[BatchOperation]) -> None:
        ...

    @abstractmethod
    def delete(self, collection: str, doc_id: str) -> None:
        ...

    def upsert(self, collection: str, doc_id: str, record: dict, *, merge: bool = False) -> None:
        self.run_atomic_batch([Upsert(collection, doc_id, record, merge=merge)])
