"""
Document gateway contract, run against the in-memory and SQL stores.
"""

import pytest

from facturador.models import INVOICES, PRODUCTS
from facturador.storage import DocumentNotFoundError, Increment, PersistenceError, Update, Upsert


class TestSingleRecordOperations:
    def test_missing_record_reads_as_none(self, store):
        assert store.get_one(PRODUCTS, "nope") is None
        assert store.list_all(PRODUCTS) == []

    def test_upsert_then_read_carries_id(self, store):
        store.upsert(PRODUCTS, "A", {"id": "ignored", "name": "Widget", "stock": 3})

        assert store.get_one(PRODUCTS, "A") == {"id": "A", "name": "Widget", "stock": 3}
        assert store.list_all(PRODUCTS) == [{"id": "A", "name": "Widget", "stock": 3}]

    def test_upsert_replaces_without_merge(self, store):
        store.upsert(PRODUCTS, "A", {"name": "Widget", "stock": 3})
        store.upsert(PRODUCTS, "A", {"name": "Gadget"})
        assert store.get_one(PRODUCTS, "A") == {"id": "A", "name": "Gadget"}

    def test_upsert_merge_keeps_other_fields(self, store):
        store.upsert(PRODUCTS, "A", {"name": "Widget", "stock": 3})
        store.upsert(PRODUCTS, "A", {"name": "Gadget"}, merge=True)
        assert store.get_one(PRODUCTS, "A") == {"id": "A", "name": "Gadget", "stock": 3}

    def test_collections_are_separate(self, store):
        store.upsert(PRODUCTS, "1", {"name": "Widget"})
        store.upsert(INVOICES, "1", {"number": "FAC-1"})

        assert store.get_one(PRODUCTS, "1")["name"] == "Widget"
        assert store.get_one(INVOICES, "1")["number"] == "FAC-1"

    def test_delete(self, store):
        store.upsert(PRODUCTS, "A", {"name": "Widget"})
        store.delete(PRODUCTS, "A")
        store.delete(PRODUCTS, "never-existed")
        assert store.get_one(PRODUCTS, "A") is None

    def test_returned_records_are_copies(self, store):
        store.upsert(PRODUCTS, "A", {"name": "Widget", "tags": ["x"]})

        record = store.get_one(PRODUCTS, "A")
        record["name"] = "Changed"
        record["tags"].append("y")

        assert store.get_one(PRODUCTS, "A") == {"id": "A", "name": "Widget", "tags": ["x"]}


class TestAtomicBatch:
    def test_all_operations_commit_together(self, store):
        store.upsert(PRODUCTS, "A", {"stock": 10})

        store.run_atomic_batch([
            Upsert(INVOICES, "inv-1", {"number": "FAC-1"}),
            Update(PRODUCTS, "A", {"stock": 7}),
        ])

        assert store.get_one(INVOICES, "inv-1")["number"] == "FAC-1"
        assert store.get_one(PRODUCTS, "A")["stock"] == 7

    def test_update_of_missing_record_fails_whole_batch(self, store):
        store.upsert(PRODUCTS, "A", {"stock": 10})

        with pytest.raises(DocumentNotFoundError) as exc_info:
            store.run_atomic_batch([
                Upsert(INVOICES, "inv-1", {"number": "FAC-1"}),
                Update(PRODUCTS, "A", {"stock": 7}),
                Update(PRODUCTS, "missing", {"stock": 1}),
            ])

        assert isinstance(exc_info.value, PersistenceError)
        assert exc_info.value.details == {"collection": PRODUCTS, "doc_id": "missing"}
        assert store.get_one(INVOICES, "inv-1") is None
        assert store.get_one(PRODUCTS, "A")["stock"] == 10
        assert store.get_one(PRODUCTS, "missing") is None

    def test_update_merges_fields(self, store):
        store.upsert(INVOICES, "inv-1", {"number": "FAC-1", "status": "paid"})
        store.run_atomic_batch([Update(INVOICES, "inv-1", {"status": "cancelled"})])
        assert store.get_one(INVOICES, "inv-1") == {"id": "inv-1", "number": "FAC-1", "status": "cancelled"}

    def test_increment_existing_field(self, store):
        store.upsert(PRODUCTS, "A", {"name": "Widget", "stock": 7})
        store.run_atomic_batch([Increment(PRODUCTS, "A", "stock", 3)])
        assert store.get_one(PRODUCTS, "A") == {"id": "A", "name": "Widget", "stock": 10}

    def test_increment_creates_absent_record(self, store):
        store.run_atomic_batch([Increment(PRODUCTS, "ghost", "stock", 3)])
        assert store.get_one(PRODUCTS, "ghost") == {"id": "ghost", "stock": 3}

    def test_increments_in_one_batch_accumulate(self, store):
        store.run_atomic_batch([
            Increment(PRODUCTS, "ghost", "stock", 3),
            Increment(PRODUCTS, "ghost", "stock", 3),
            Increment(PRODUCTS, "ghost", "stock", -1),
        ])
        assert store.get_one(PRODUCTS, "ghost")["stock"] == 5

    def test_increment_treats_non_numeric_field_as_zero(self, store):
        store.upsert(PRODUCTS, "A", {"stock": "many"})
        store.run_atomic_batch([Increment(PRODUCTS, "A", "stock", 2)])
        assert store.get_one(PRODUCTS, "A")["stock"] == 2

    def test_empty_batch_is_a_no_op(self, store):
        store.run_atomic_batch([])
        assert store.list_all(PRODUCTS) == []
