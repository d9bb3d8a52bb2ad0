from __future__ import annotations

import copy
import threading
from typing import Iterable, Optional

from .base import BatchOperation, DocumentGateway, apply_operation, with_id


class MemoryDocumentStore(DocumentGateway):
    """
    In-process document store.

    Batches are applied to a staged copy and swapped in only when every
    operation succeeded, so a failing batch leaves no trace.
    """

    backend_name = "memory"

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._collections: dict[str, dict[str, dict]] = {}

    def list_all(self, collection: str) -> list[dict]:
        with self._lock:
            docs = self._collections.get(collection, {})
            return [with_id(doc_id, body) for doc_id, body in docs.items()]

    def get_one(self, collection: str, doc_id: str) -> Optional[dict]:
        with self._lock:
            body = self._collections.get(collection, {}).get(doc_id)
            return with_id(doc_id, body) if body is not None else None

    def delete(self, collection: str, doc_id: str) -> None:
        with self._lock:
            self._collections.get(collection, {}).pop(doc_id, None)

    def run_atomic_batch(self, operations: Iterable[BatchOperation]) -> None:
        ops = list(operations)
        with self._lock:
            staged = copy.deepcopy(self._collections)
            for op in ops:
                docs = staged.setdefault(op.collection, {})
                docs[op.doc_id] = apply_operation(docs.get(op.doc_id), op)
            self._collections = staged
