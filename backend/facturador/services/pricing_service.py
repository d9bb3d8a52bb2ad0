"""
Line-item pricing and invoice totals.

Settings are passed in explicitly; nothing here reads global state.

- line total = unit price * quantity * (1 - discount / 100)
- subtotal = sum of line totals (invoice currency)
- tax = subtotal * tax_rate / 100, flat for every line
- total = subtotal + tax
"""

from __future__ import annotations

from typing import Iterable, NamedTuple, Optional

from ..models import AppSettings, InvoiceItem, Product
from ..validation import (
    ValidationError,
    coerce_float,
    coerce_int,
    require_non_negative,
    require_percentage,
    validate_currency,
)
from .currency_service import Conversion, convert_with_info


class InsufficientStockError(ValidationError):
    """Raised when a non-service line asks for more units than are on hand."""
    def __init__(self, product: Product, requested: int):
        super().__init__(f"Stock insuficiente. Solo hay {product.stock} unidades.")
        self.details = {
            "product_id": product.id,
            "requested_quantity": requested,
            "on_hand": product.stock,
        }


class InvoiceTotals(NamedTuple):
    subtotal: float
    tax: float
    total: float

    def to_dict(self) -> dict:
        return {"subtotal": self.subtotal, "tax": self.tax, "total": self.total}


def line_total(unit_price: float, quantity: int, discount: float = 0.0) -> float:
    return unit_price * quantity * (1 - discount / 100)


def quote_unit_price(product: Product, invoice_currency: str, settings: AppSettings) -> Conversion:
    """
    Product price expressed in the invoice currency, rounded to cents the way
    the price entry shows it.
    """
    conversion = convert_with_info(product.price, product.currency, invoice_currency, settings.exchange_rate)
    return Conversion(round(conversion.amount, 2), conversion.description)


def build_line_item(
    product: Product,
    quantity,
    *,
    invoice_currency: str,
    settings: AppSettings,
    discount=0.0,
    is_service: bool = False,
    description: Optional[str] = None,
    unit_price=None,
) -> InvoiceItem:
    """
    Price one line for product.

    unit_price overrides the converted catalog price (already in the invoice
    currency). The cost snapshot is the product's cost as stored, never
    converted to the invoice currency.

    Raises:
        ValidationError: quantity below 1 or discount outside 0-100
        InsufficientStockError: non-service line exceeding stock on hand
    """
    qty = coerce_int("quantity", quantity)
    if qty < 1:
        raise ValidationError("quantity must be at least 1")
    pct = require_percentage("discount", coerce_float("discount", discount, default=0.0))
    currency = validate_currency(invoice_currency)

    if not is_service and product.stock < qty:
        raise InsufficientStockError(product, qty)

    if unit_price is None:
        price = quote_unit_price(product, currency, settings).amount
    else:
        price = require_non_negative("unit_price", coerce_float("unit_price", unit_price))

    return InvoiceItem(
        product_id=product.id,
        product_name=product.name,
        quantity=qty,
        price=price,
        cost=product.cost or 0.0,
        discount=pct,
        description=description if description is not None else (product.description or product.name),
        total=line_total(price, qty, pct),
        is_service=is_service,
    )


def calculate_totals(items: Iterable[InvoiceItem], tax_rate: float) -> InvoiceTotals:
    subtotal = sum((item.total for item in items), 0.0)
    tax = subtotal * tax_rate / 100
    return InvoiceTotals(subtotal=subtotal, tax=tax, total=subtotal + tax)
