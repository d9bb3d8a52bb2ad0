from __future__ import annotations

from ..models import CUSTOMERS, PRODUCTS, Customer, Product
from ..storage import DocumentGateway


DEMO_PRODUCTS = [
    Product(id="1", name="Laptop Pro X", description="Laptop de alto rendimiento", sku="LPX-001",
            price=650000, cost=450000, currency="CRC", stock=10, category="Electrónica"),
    Product(id="2", name='Monitor 27"', description="Monitor 4K UHD", sku="MON-002",
            price=185000, cost=120000, currency="CRC", stock=25, category="Electrónica"),
    Product(id="3", name="Silla Ergonómica", description="Silla de oficina premium", sku="CHR-003",
            price=150, cost=90, currency="USD", stock=5, category="Muebles"),
]

DEMO_CUSTOMERS = [
    Customer(
        id="1", name="Juan Pérez", commercial_name="Juan Pérez", email="juan@example.com",
        tax_id="1-1111-1111", identification_type="01 Cédula Física", tax_regime="Simplificado",
        country="Costa Rica", province="San José", canton="San José", district="Pavas",
        zip_code="10109", address="De la Embajada Americana 200m Oeste", phone="8888-8888",
    ),
    Customer(
        id="2", name="Corporación ABC S.A.", commercial_name="ABC Corp", email="facturacion@abccorp.com",
        tax_id="3-101-654321", identification_type="02 Cédula Jurídica", tax_regime="Tradicional",
        country="Costa Rica", province="Heredia", canton="Belén", district="La Asunción",
        zip_code="40701", address="Centro Corporativo El Cafetal, Edificio A", phone="2299-9999",
    ),
]


def seed_demo_data(gateway: DocumentGateway) -> dict:
    """Insert demo products and customers into empty collections. Idempotent."""
    seeded = {"products": 0, "customers": 0}

    if not gateway.list_all(PRODUCTS):
        for product in DEMO_PRODUCTS:
            gateway.upsert(PRODUCTS, product.id, product.to_dict())
        seeded["products"] = len(DEMO_PRODUCTS)

    if not gateway.list_all(CUSTOMERS):
        for customer in DEMO_CUSTOMERS:
            gateway.upsert(CUSTOMERS, customer.id, customer.to_dict())
        seeded["customers"] = len(DEMO_CUSTOMERS)

    return seeded
