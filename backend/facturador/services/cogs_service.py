# Overview: Derives the automatic cost-of-sales expense for an invoice.

from __future__ import annotations

import uuid
from typing import Iterable, Optional

from ..models import COST_OF_SALES_CATEGORY, Expense, Invoice, InvoiceItem, Product

COST_OF_SALES_PROVIDER = "Inventario Interno"


def resolve_unit_cost(item: InvoiceItem, products_by_id: dict[str, Product]) -> float:
    """Item cost snapshot, else the product's current cost, else 0."""
    if item.cost is not None:
        return item.cost
    product = products_by_id.get(item.product_id)
    if product is not None and product.cost:
        return product.cost
    return 0.0


def total_cost_of_items(items: Iterable[InvoiceItem], products: Iterable[Product] = ()) -> float:
    products_by_id = {p.id: p for p in products}
    return sum((resolve_unit_cost(item, products_by_id) * item.quantity for item in items), 0.0)


def derive_cost_of_sales(
    invoice: Invoice,
    products: Iterable[Product] = (),
    *,
    expense_id: Optional[str] = None,
) -> Optional[Expense]:
    """
    Build the "Costo de Ventas" expense for invoice, or None when the items
    carry no cost.

    The amount keeps the cost figures as stored and is labelled with the
    invoice currency; costs are not converted between currencies.
    """
    total_cost = total_cost_of_items(invoice.items, products)
    if total_cost <= 0:
        return None

    return Expense(
        id=expense_id or str(uuid.uuid4()),
        date=invoice.date,
        provider=COST_OF_SALES_PROVIDER,
        category=COST_OF_SALES_CATEGORY,
        description=f"Costo de mercadería vendida - Fac #{invoice.number}",
        amount=total_cost,
        currency=invoice.currency,
        reference=invoice.number,
    )
