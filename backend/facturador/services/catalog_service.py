# backend/facturador/services/catalog_service.py
"""
Products and customers.

Product stock is set once, when the product is created. Afterwards it only
moves through the ledger (invoice creation and cancellation), so product
edits keep the stored stock whatever the payload says.
"""
from __future__ import annotations

import uuid
from typing import Optional

from ..models import CUSTOMERS, PRODUCTS, Customer, Product
from ..storage import DocumentGateway
from ..validation import ConflictError, NotFoundError, ValidationError

PRODUCT_MUTABLE_FIELDS = {"sku", "name", "description", "price", "cost", "currency", "category"}


def list_products(gateway: DocumentGateway, search: Optional[str] = None) -> list[Product]:
    products = [Product.from_dict(r) for r in gateway.list_all(PRODUCTS)]
    if search:
        term = search.strip().lower()
        products = [
            p for p in products
            if term in p.name.lower() or term in p.sku.lower() or term in p.category.lower()
        ]
    return sorted(products, key=lambda p: (p.name.lower(), p.id))


def get_product(gateway: DocumentGateway, product_id: str) -> Product:
    record = gateway.get_one(PRODUCTS, product_id)
    if record is None:
        raise NotFoundError(f"Product {product_id} not found")
    return Product.from_dict(record)


def create_product(gateway: DocumentGateway, payload: dict) -> Product:
    data = dict(payload)
    data["id"] = str(data.get("id") or uuid.uuid4())
    if not str(data.get("name") or "").strip():
        raise ValidationError("name is required")

    product = Product.from_dict(data)
    if product.stock < 0:
        raise ValidationError("stock cannot be negative")
    if gateway.get_one(PRODUCTS, product.id) is not None:
        raise ConflictError(f"Product {product.id} already exists")

    gateway.upsert(PRODUCTS, product.id, product.to_dict())
    return product


def update_product(gateway: DocumentGateway, product_id: str, patch: dict) -> Product:
    current = get_product(gateway, product_id)
    merged = current.to_dict()
    for key, value in patch.items():
        if key in PRODUCT_MUTABLE_FIELDS:
            merged[key] = value

    product = Product.from_dict(merged)
    fields = {k: v for k, v in product.to_dict().items() if k in PRODUCT_MUTABLE_FIELDS}
    gateway.upsert(PRODUCTS, product_id, fields, merge=True)
    return product


def delete_product(gateway: DocumentGateway, product_id: str) -> None:
    get_product(gateway, product_id)
    gateway.delete(PRODUCTS, product_id)


def list_customers(gateway: DocumentGateway) -> list[Customer]:
    customers = [Customer.from_dict(r) for r in gateway.list_all(CUSTOMERS)]
    return sorted(customers, key=lambda c: (c.name.lower(), c.id))


def get_customer(gateway: DocumentGateway, customer_id: str) -> Customer:
    record = gateway.get_one(CUSTOMERS, customer_id)
    if record is None:
        raise NotFoundError(f"Customer {customer_id} not found")
    return Customer.from_dict(record)


def add_customer(gateway: DocumentGateway, payload: dict) -> Customer:
    data = dict(payload)
    data["id"] = str(data.get("id") or uuid.uuid4())
    customer = Customer.from_dict(data)
    if gateway.get_one(CUSTOMERS, customer.id) is not None:
        raise ConflictError(f"Customer {customer.id} already exists")

    gateway.upsert(CUSTOMERS, customer.id, customer.to_dict())
    return customer
