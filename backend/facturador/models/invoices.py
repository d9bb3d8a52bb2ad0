from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional

from ..validation import (
    ValidationError,
    coerce_bool,
    coerce_float,
    coerce_int,
    coerce_optional_float,
    coerce_optional_str,
    coerce_str,
    require_choice,
    require_percentage,
    validate_currency,
)


STATUS_PAID = "paid"
STATUS_PENDING = "pending"
STATUS_CANCELLED = "cancelled"
INVOICE_STATUSES = (STATUS_PAID, STATUS_PENDING, STATUS_CANCELLED)

# Electronic-document status as reported by the (simulated) tax authority.
HACIENDA_ACCEPTED = "aceptado"
HACIENDA_REJECTED = "rechazado"
HACIENDA_PROCESSING = "procesando"
HACIENDA_ERROR = "error"
HACIENDA_NOT_SENT = "no_enviado"
HACIENDA_VOIDED = "anulado"
HACIENDA_STATUSES = (
    HACIENDA_ACCEPTED,
    HACIENDA_REJECTED,
    HACIENDA_PROCESSING,
    HACIENDA_ERROR,
    HACIENDA_NOT_SENT,
    HACIENDA_VOIDED,
)


@dataclass
class InvoiceItem:
    """
    One line on an invoice.

    price is already denominated in the invoice currency. cost is the
    product's acquisition cost at sale time and is never converted.
    """
    product_id: str
    product_name: str
    quantity: int
    price: float
    total: float
    discount: float = 0.0
    cost: Optional[float] = None
    description: str = ""
    is_service: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "InvoiceItem":
        quantity = coerce_int("quantity", data.get("quantity"))
        if quantity < 1:
            raise ValidationError("quantity must be at least 1")

        return cls(
            product_id=coerce_str("product_id", data.get("product_id")),
            product_name=coerce_str("product_name", data.get("product_name")),
            quantity=quantity,
            price=coerce_float("price", data.get("price")),
            total=coerce_float("total", data.get("total")),
            discount=require_percentage("discount", coerce_float("discount", data.get("discount"), default=0.0)),
            cost=coerce_optional_float("cost", data.get("cost")),
            description=coerce_str("description", data.get("description")),
            is_service=coerce_bool("is_service", data.get("is_service")),
        )

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "price": self.price,
            "cost": self.cost,
            "discount": self.discount,
            "description": self.description,
            "total": self.total,
            "is_service": self.is_service,
        }


@dataclass
class Invoice:
    """
    Sales invoice stored in the "invoices" collection.

    Status only moves paid|pending -> cancelled. Items are fixed once the
    invoice has been committed.
    """
    id: str
    number: str
    customer_id: str
    customer_name: str
    date: str
    due_date: str
    currency: str
    items: list[InvoiceItem] = field(default_factory=list)
    subtotal: float = 0.0
    tax: float = 0.0
    total: float = 0.0
    status: str = STATUS_PAID
    hacienda_status: Optional[str] = None
    exchange_rate: Optional[float] = None
    time: str = ""
    consecutive: str = ""
    electronic_key: str = ""
    payment_method: str = ""
    sale_condition: str = ""
    notes: str = ""
    reference: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "Invoice":
        invoice_id = coerce_str("id", data.get("id"))
        if not invoice_id:
            raise ValidationError("id is required")

        raw_items = data.get("items") or []
        if not isinstance(raw_items, list):
            raise ValidationError("items must be a list")

        status = require_choice("status", coerce_str("status", data.get("status"), default=STATUS_PAID), INVOICE_STATUSES)
        hacienda_status = coerce_optional_str("hacienda_status", data.get("hacienda_status"))
        if hacienda_status is not None:
            require_choice("hacienda_status", hacienda_status, HACIENDA_STATUSES)

        return cls(
            id=invoice_id,
            number=coerce_str("number", data.get("number")),
            customer_id=coerce_str("customer_id", data.get("customer_id")),
            customer_name=coerce_str("customer_name", data.get("customer_name")),
            date=coerce_str("date", data.get("date")),
            due_date=coerce_str("due_date", data.get("due_date")),
            currency=validate_currency(data.get("currency")),
            items=[InvoiceItem.from_dict(item) for item in raw_items],
            subtotal=coerce_float("subtotal", data.get("subtotal"), default=0.0),
            tax=coerce_float("tax", data.get("tax"), default=0.0),
            total=coerce_float("total", data.get("total"), default=0.0),
            status=status,
            hacienda_status=hacienda_status,
            exchange_rate=coerce_optional_float("exchange_rate", data.get("exchange_rate")),
            time=coerce_str("time", data.get("time")),
            consecutive=coerce_str("consecutive", data.get("consecutive")),
            electronic_key=coerce_str("electronic_key", data.get("electronic_key")),
            payment_method=coerce_str("payment_method", data.get("payment_method")),
            sale_condition=coerce_str("sale_condition", data.get("sale_condition")),
            notes=coerce_str("notes", data.get("notes")),
            reference=coerce_str("reference", data.get("reference")),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "number": self.number,
            "consecutive": self.consecutive,
            "electronic_key": self.electronic_key,
            "hacienda_status": self.hacienda_status,
            "customer_id": self.customer_id,
            "customer_name": self.customer_name,
            "date": self.date,
            "time": self.time,
            "due_date": self.due_date,
            "items": [item.to_dict() for item in self.items],
            "subtotal": self.subtotal,
            "tax": self.tax,
            "total": self.total,
            "status": self.status,
            "payment_method": self.payment_method,
            "sale_condition": self.sale_condition,
            "notes": self.notes,
            "reference": self.reference,
            "currency": self.currency,
            "exchange_rate": self.exchange_rate,
        }

    @property
    def is_cancelled(self) -> bool:
        return self.status == STATUS_CANCELLED

    def as_cancelled(self) -> "Invoice":
        """Copy of this invoice with the cancellation status fields applied."""
        return replace(self, status=STATUS_CANCELLED, hacienda_status=HACIENDA_VOIDED)
