from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..validation import (
    ValidationError,
    coerce_float,
    coerce_optional_str,
    coerce_str,
    require_non_negative,
    validate_currency,
)

# Reserved for expenses derived from invoices; manual entries use the others.
COST_OF_SALES_CATEGORY = "Costo de Ventas"

EXPENSE_CATEGORIES = (
    "Inventario",
    "Servicios",
    "Salarios",
    "Alquiler",
    "Impuestos",
    "Otros",
    COST_OF_SALES_CATEGORY,
)


@dataclass
class Expense:
    id: str
    date: str
    amount: float
    currency: str = "CRC"
    category: str = "Otros"
    provider: str = ""
    description: str = ""
    reference: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Expense":
        expense_id = coerce_str("id", data.get("id"))
        if not expense_id:
            raise ValidationError("id is required")
        expense_date = coerce_str("date", data.get("date"))
        if not expense_date:
            raise ValidationError("date is required")

        return cls(
            id=expense_id,
            date=expense_date,
            amount=require_non_negative("amount", coerce_float("amount", data.get("amount"))),
            currency=validate_currency(data.get("currency")),
            category=coerce_str("category", data.get("category"), default="Otros") or "Otros",
            provider=coerce_str("provider", data.get("provider")),
            description=coerce_str("description", data.get("description")),
            reference=coerce_optional_str("reference", data.get("reference")),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date,
            "provider": self.provider,
            "category": self.category,
            "description": self.description,
            "amount": self.amount,
            "currency": self.currency,
            "reference": self.reference,
        }

    @property
    def is_cost_of_sales(self) -> bool:
        return self.category == COST_OF_SALES_CATEGORY
