# Overview: Invoice ledger transactions; keeps invoices, stock and cost-of-sales expenses consistent.

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from ..models import (
    EXPENSES,
    HACIENDA_VOIDED,
    INVOICES,
    PRODUCTS,
    STATUS_CANCELLED,
    Expense,
    Invoice,
    InvoiceItem,
    Product,
)
from ..storage import DocumentGateway, Increment, PersistenceError, Update, Upsert
from .cogs_service import derive_cost_of_sales

"""
Ledger invariants (authoritative)

- Invoice states: paid|pending -> cancelled. Nothing leaves cancelled.
- create_invoice writes the invoice, the stock decrements and the derived
  cost-of-sales expense in ONE atomic batch. cancel_invoice writes the status
  change and the stock restorations in ONE atomic batch.
- Service lines never move stock, neither on sale nor on cancellation.
- Stock sufficiency is checked when lines are priced (pricing_service), not
  here: create_invoice trusts the caller's item list.
- Absolute stock writes are computed from the caller's product snapshot. Two
  sales priced from the same stale snapshot overwrite each other's decrement;
  STOCK_WRITES_INCREMENT avoids this by using the store's relative increment.
- cancel_invoice is not idempotent: a second call restores stock again.
  Callers must not cancel an invoice that is already cancelled.
- Cancellation never removes or reverses the cost-of-sales expense.
- Nothing is retried. A failed batch raises LedgerError and leaves storage
  untouched; callers mirror results locally only after a successful return.
"""

logger = logging.getLogger(__name__)

STOCK_WRITES_ABSOLUTE = "absolute"
STOCK_WRITES_INCREMENT = "increment"
STOCK_WRITE_MODES = (STOCK_WRITES_ABSOLUTE, STOCK_WRITES_INCREMENT)


class LedgerError(Exception):
    """Raised when a ledger transaction could not be committed."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


@dataclass(frozen=True)
class StockChange:
    product_id: str
    quantity_delta: int
    # Expected stock after the change, computed from the caller's snapshot
    new_stock: Optional[int] = None


@dataclass
class InvoiceCommit:
    """Everything create_invoice persisted."""
    invoice: Invoice
    stock_changes: list[StockChange] = field(default_factory=list)
    expense: Optional[Expense] = None

    def mirror_products(self, products: Iterable[Product]) -> list[Product]:
        """Apply the committed stock changes to a local product list."""
        deltas = {c.product_id: c.quantity_delta for c in self.stock_changes}
        return [_with_stock_delta(p, deltas.get(p.id, 0)) for p in products]

    def to_dict(self) -> dict:
        return {
            "invoice": self.invoice.to_dict(),
            "stock_changes": [
                {"product_id": c.product_id, "quantity_delta": c.quantity_delta, "new_stock": c.new_stock}
                for c in self.stock_changes
            ],
            "expense": self.expense.to_dict() if self.expense else None,
        }


@dataclass
class InvoiceCancellation:
    """Everything cancel_invoice persisted."""
    invoice_id: str
    restored: dict[str, int] = field(default_factory=dict)

    def mirror_invoice(self, invoice: Invoice) -> Invoice:
        return invoice.as_cancelled() if invoice.id == self.invoice_id else invoice

    def mirror_products(self, products: Iterable[Product]) -> list[Product]:
        return [_with_stock_delta(p, self.restored.get(p.id, 0)) for p in products]

    def to_dict(self) -> dict:
        return {
            "invoice_id": self.invoice_id,
            "status": STATUS_CANCELLED,
            "hacienda_status": HACIENDA_VOIDED,
            "restored": dict(self.restored),
        }


def _with_stock_delta(product: Product, delta: int) -> Product:
    if not delta:
        return product
    return Product.from_dict({**product.to_dict(), "stock": product.stock + delta})


def stock_quantities(items: Iterable[InvoiceItem]) -> dict[str, int]:
    """Units per product for lines that move stock (non-service, with a product id)."""
    quantities: dict[str, int] = {}
    for item in items:
        if item.is_service or not item.product_id:
            continue
        quantities[item.product_id] = quantities.get(item.product_id, 0) + item.quantity
    return quantities


def create_invoice(
    gateway: DocumentGateway,
    invoice: Invoice,
    products: Iterable[Product],
    *,
    stock_writes: str = STOCK_WRITES_ABSOLUTE,
    expense_id: Optional[str] = None,
) -> InvoiceCommit:
    """
    Persist a new invoice with its stock decrements and cost-of-sales expense.

    products is the caller's current product snapshot. Only products present
    in it are decremented.

    Raises:
        ValueError: unknown stock_writes mode
        LedgerError: the batch was rejected; nothing was written
    """
    if stock_writes not in STOCK_WRITE_MODES:
        raise ValueError(f"stock_writes must be one of: {', '.join(STOCK_WRITE_MODES)}")

    snapshot = list(products)
    by_id = {p.id: p for p in snapshot}

    operations = [Upsert(INVOICES, invoice.id, invoice.to_dict())]
    stock_changes: list[StockChange] = []

    for product_id, quantity in stock_quantities(invoice.items).items():
        product = by_id.get(product_id)
        if product is None:
            continue
        new_stock = product.stock - quantity
        if stock_writes == STOCK_WRITES_ABSOLUTE:
            operations.append(Update(PRODUCTS, product_id, {"stock": new_stock}))
        else:
            operations.append(Increment(PRODUCTS, product_id, "stock", -quantity))
        stock_changes.append(StockChange(product_id, -quantity, new_stock))

    expense = derive_cost_of_sales(invoice, snapshot, expense_id=expense_id)
    if expense is not None:
        operations.append(Upsert(EXPENSES, expense.id, expense.to_dict()))

    try:
        gateway.run_atomic_batch(operations)
    except PersistenceError as exc:
        raise LedgerError(
            "Failed to commit invoice",
            details={"invoice_id": invoice.id, "number": invoice.number, **exc.details},
        ) from exc

    logger.info(
        "Invoice %s committed (%d stock changes, cost of sales %s)",
        invoice.number, len(stock_changes), expense.amount if expense else 0,
    )
    return InvoiceCommit(invoice=invoice, stock_changes=stock_changes, expense=expense)


def cancel_invoice(
    gateway: DocumentGateway,
    invoice_id: str,
    items: Iterable[InvoiceItem],
) -> InvoiceCancellation:
    """
    Mark an invoice cancelled and give its units back to stock.

    Restorations are atomic increments, so they are safe against concurrent
    restorations and recreate a product record that no longer exists.

    Raises:
        LedgerError: the batch was rejected (including a missing invoice);
            nothing was written
    """
    restored = stock_quantities(items)

    operations = [
        Update(INVOICES, invoice_id, {"status": STATUS_CANCELLED, "hacienda_status": HACIENDA_VOIDED}),
    ]
    operations.extend(
        Increment(PRODUCTS, product_id, "stock", quantity)
        for product_id, quantity in restored.items()
    )

    try:
        gateway.run_atomic_batch(operations)
    except PersistenceError as exc:
        raise LedgerError(
            "Failed to cancel invoice",
            details={"invoice_id": invoice_id, **exc.details},
        ) from exc

    logger.info("Invoice %s cancelled (%d products restocked)", invoice_id, len(restored))
    return InvoiceCancellation(invoice_id=invoice_id, restored=restored)
