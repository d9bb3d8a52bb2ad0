"""
Invoice composition and submission.

This is the caller side of the ledger: it prices lines against the current
catalog, composes the invoice header (numbers, simulated electronic-document
acceptance, totals, exchange-rate snapshot) and hands the result to
ledger_service in one call. It also guards cancellation, since
ledger_service.cancel_invoice is not idempotent.
"""

from __future__ import annotations

import uuid
from dataclasses import replace
from typing import Iterable, Optional

from ..models import (
    HACIENDA_ACCEPTED,
    INVOICES,
    STATUS_PAID,
    STATUS_PENDING,
    AppSettings,
    Customer,
    Invoice,
    InvoiceItem,
    Product,
)
from ..storage import DocumentGateway
from ..time_utils import add_days_iso, epoch_millis, parse_iso_date, today_iso, utcnow
from ..validation import (
    ConflictError,
    NotFoundError,
    ValidationError,
    coerce_bool,
    coerce_optional_str,
    coerce_str,
    require_choice,
    validate_currency,
)
from . import catalog_service, ledger_service, settings_service
from .currency_service import resolve_exchange_rate
from .pricing_service import InvoiceTotals, build_line_item, calculate_totals, quote_unit_price

DEFAULT_PAYMENT_METHOD = "Efectivo"
DEFAULT_SALE_CONDITION = "Contado"
DEFAULT_DUE_DAYS = 7

# Prefix of the simulated consecutive number
CONSECUTIVE_PREFIX = "001000010100000"


def price_lines(
    lines: Iterable[dict],
    products: Iterable[Product],
    *,
    invoice_currency: str,
    settings: AppSettings,
) -> list[InvoiceItem]:
    """
    Build invoice items from line requests
    ({product_id, quantity, discount?, is_service?, description?, unit_price?}).

    Lines for the same product are checked against the stock still available
    after the earlier lines.
    """
    by_id = {p.id: p for p in products}
    reserved: dict[str, int] = {}
    items: list[InvoiceItem] = []

    for index, line in enumerate(lines):
        if not isinstance(line, dict):
            raise ValidationError(f"items[{index}] must be an object")
        product_id = coerce_str("product_id", line.get("product_id"))
        product = by_id.get(product_id)
        if product is None:
            raise ValidationError(f"items[{index}]: product {product_id or '?'} not found")

        is_service = coerce_bool("is_service", line.get("is_service"))
        available = replace(product, stock=product.stock - reserved.get(product.id, 0))
        item = build_line_item(
            available,
            line.get("quantity", 1),
            invoice_currency=invoice_currency,
            settings=settings,
            discount=line.get("discount", 0),
            is_service=is_service,
            description=coerce_optional_str("description", line.get("description")),
            unit_price=line.get("unit_price"),
        )
        if not is_service:
            reserved[product.id] = reserved.get(product.id, 0) + item.quantity
        items.append(item)

    return items


def compose_invoice(
    *,
    customer: Customer,
    items: list[InvoiceItem],
    settings: AppSettings,
    currency: str,
    date: Optional[str] = None,
    due_date: Optional[str] = None,
    status: str = STATUS_PAID,
    payment_method: str = DEFAULT_PAYMENT_METHOD,
    sale_condition: str = DEFAULT_SALE_CONDITION,
    notes: str = "",
    reference: str = "",
    invoice_id: Optional[str] = None,
    now_millis: Optional[int] = None,
) -> Invoice:
    if customer is None or not items:
        raise ValidationError("Seleccione un cliente y agregue al menos un producto.")
    require_choice("status", status, (STATUS_PAID, STATUS_PENDING))

    invoice_date = date or today_iso()
    try:
        parse_iso_date(invoice_date)
        resolved_due = due_date or add_days_iso(invoice_date, DEFAULT_DUE_DAYS)
        parse_iso_date(resolved_due)
    except ValueError:
        raise ValidationError("date and due_date must be ISO-8601 dates")

    millis = now_millis if now_millis is not None else epoch_millis()
    suffix = str(millis)[-6:]
    totals: InvoiceTotals = calculate_totals(items, settings.tax_rate)

    return Invoice(
        id=invoice_id or str(uuid.uuid4()),
        number=f"FAC-{suffix}",
        consecutive=f"{CONSECUTIVE_PREFIX}{suffix}",
        electronic_key=f"506{millis}12345678",
        # Acceptance by the tax authority is simulated
        hacienda_status=HACIENDA_ACCEPTED,
        customer_id=customer.id,
        customer_name=customer.name or "Desconocido",
        date=invoice_date,
        time=utcnow().strftime("%H:%M:%S"),
        due_date=resolved_due,
        items=list(items),
        subtotal=totals.subtotal,
        tax=totals.tax,
        total=totals.total,
        status=status,
        payment_method=payment_method,
        sale_condition=sale_condition,
        notes=notes,
        reference=reference,
        currency=validate_currency(currency),
        exchange_rate=resolve_exchange_rate(settings.exchange_rate),
    )


def _load_customer(gateway: DocumentGateway, customer_id) -> Customer:
    customer_id = coerce_str("customer_id", customer_id)
    if not customer_id:
        raise ValidationError("Seleccione un cliente y agregue al menos un producto.")
    try:
        return catalog_service.get_customer(gateway, customer_id)
    except NotFoundError:
        raise ValidationError(f"Customer {customer_id} not found")


def quote_invoice(gateway: DocumentGateway, payload: dict) -> dict:
    """Price lines and totals without persisting anything."""
    settings = settings_service.get_settings(gateway)
    currency = validate_currency(payload.get("currency") or settings.currency)
    products = catalog_service.list_products(gateway)
    items = price_lines(payload.get("items") or [], products, invoice_currency=currency, settings=settings)

    by_id = {p.id: p for p in products}
    notes = [quote_unit_price(by_id[item.product_id], currency, settings).description for item in items]

    return {
        "currency": currency,
        "exchange_rate": resolve_exchange_rate(settings.exchange_rate),
        "tax_rate": settings.tax_rate,
        "items": [{**item.to_dict(), "conversion": note} for item, note in zip(items, notes)],
        **calculate_totals(items, settings.tax_rate).to_dict(),
    }


def submit_invoice(
    gateway: DocumentGateway,
    payload: dict,
    *,
    stock_writes: str = ledger_service.STOCK_WRITES_ABSOLUTE,
    now_millis: Optional[int] = None,
) -> ledger_service.InvoiceCommit:
    """
    Price, compose and commit an invoice from a request payload.

    Raises:
        ValidationError: bad payload, unknown customer/product, insufficient stock
        LedgerError: the ledger batch was rejected
    """
    settings = settings_service.get_settings(gateway)
    currency = validate_currency(payload.get("currency") or settings.currency)
    customer = _load_customer(gateway, payload.get("customer_id"))
    products = catalog_service.list_products(gateway)

    items = price_lines(payload.get("items") or [], products, invoice_currency=currency, settings=settings)
    invoice = compose_invoice(
        customer=customer,
        items=items,
        settings=settings,
        currency=currency,
        date=coerce_optional_str("date", payload.get("date")),
        due_date=coerce_optional_str("due_date", payload.get("due_date")),
        status=coerce_str("status", payload.get("status"), default=STATUS_PAID) or STATUS_PAID,
        payment_method=coerce_str("payment_method", payload.get("payment_method")) or DEFAULT_PAYMENT_METHOD,
        sale_condition=coerce_str("sale_condition", payload.get("sale_condition")) or DEFAULT_SALE_CONDITION,
        notes=coerce_str("notes", payload.get("notes")),
        reference=coerce_str("reference", payload.get("reference")),
        now_millis=now_millis,
    )
    return ledger_service.create_invoice(gateway, invoice, products, stock_writes=stock_writes)


def list_invoices(gateway: DocumentGateway, status: Optional[str] = None) -> list[Invoice]:
    """Invoices newest first."""
    invoices = [Invoice.from_dict(r) for r in gateway.list_all(INVOICES)]
    if status:
        invoices = [i for i in invoices if i.status == status]
    return sorted(invoices, key=lambda i: (i.date, i.time), reverse=True)


def get_invoice(gateway: DocumentGateway, invoice_id: str) -> Invoice:
    record = gateway.get_one(INVOICES, invoice_id)
    if record is None:
        raise NotFoundError(f"Invoice {invoice_id} not found")
    return Invoice.from_dict(record)


def void_invoice(gateway: DocumentGateway, invoice_id: str) -> ledger_service.InvoiceCancellation:
    """
    Cancel a stored invoice once.

    Raises:
        NotFoundError: unknown invoice
        ConflictError: the invoice is already cancelled
        LedgerError: the ledger batch was rejected
    """
    invoice = get_invoice(gateway, invoice_id)
    if invoice.is_cancelled:
        raise ConflictError(f"Invoice {invoice.number} is already cancelled")
    return ledger_service.cancel_invoice(gateway, invoice.id, invoice.items)
