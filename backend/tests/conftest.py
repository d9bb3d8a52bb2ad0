"""
Pytest fixtures for facturador backend tests.

Provides the test app (SQL document store on in-memory SQLite), a test
client, and document stores parametrised over both implementations.
"""

import pytest

from facturador import create_app
from facturador.config import TestConfig
from facturador.extensions import db
from facturador.models import (
    CUSTOMERS,
    PRODUCTS,
    AppSettings,
    Customer,
    DocumentRecord,
    Invoice,
    InvoiceItem,
    Product,
)
from facturador.storage import MemoryDocumentStore, PersistenceError, SqlDocumentStore


class FailingStore(MemoryDocumentStore):
    """Memory store whose batch commits are always rejected."""

    backend_name = "failing"

    def run_atomic_batch(self, operations):
        raise PersistenceError("backend unavailable", details={"simulated": True})


def _clear_documents():
    db.session.rollback()
    db.session.query(DocumentRecord).delete()
    db.session.commit()


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TestConfig)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client on an empty document store."""
    _clear_documents()
    return app.test_client()


@pytest.fixture(scope='function', params=["memory", "sql"])
def store(request, app):
    """Fresh, empty document store (memory and SQL variants)."""
    if request.param == "memory":
        yield MemoryDocumentStore()
        return

    _clear_documents()
    yield SqlDocumentStore()
    db.session.rollback()


@pytest.fixture
def settings():
    return AppSettings(exchange_rate=500, tax_rate=13)


def make_product(**overrides) -> Product:
    data = dict(id="A", name="Producto A", price=100.0, currency="USD", cost=60.0, stock=10, sku="A-001")
    data.update(overrides)
    return Product(**data)


def make_item(product_id="A", quantity=1, price=10.0, cost=None, discount=0.0, is_service=False) -> InvoiceItem:
    return InvoiceItem(
        product_id=product_id,
        product_name=f"Producto {product_id}",
        quantity=quantity,
        price=price,
        cost=cost,
        discount=discount,
        total=price * quantity * (1 - discount / 100),
        is_service=is_service,
    )


def make_invoice(items, *, invoice_id="inv-1", number="FAC-000001", currency="CRC", date="2026-10-01") -> Invoice:
    return Invoice(
        id=invoice_id,
        number=number,
        customer_id="1",
        customer_name="Juan Pérez",
        date=date,
        due_date="2026-10-08",
        currency=currency,
        items=list(items),
    )


def put_product(store, product: Product) -> Product:
    store.upsert(PRODUCTS, product.id, product.to_dict())
    return product


def put_customer(store, customer_id="1", name="Juan Pérez") -> Customer:
    customer = Customer(id=customer_id, name=name, tax_id="1-1111-1111")
    store.upsert(CUSTOMERS, customer.id, customer.to_dict())
    return customer


def stock_of(store, product_id: str) -> int:
    return store.get_one(PRODUCTS, product_id)["stock"]
