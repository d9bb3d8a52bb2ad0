from __future__ import annotations

from dataclasses import dataclass

from ..validation import (
    ValidationError,
    coerce_float,
    coerce_int,
    coerce_str,
    require_non_negative,
    validate_currency,
)


@dataclass
class Product:
    """
    Catalog product stored in the "products" collection.

    stock is the quantity on hand; it only moves through invoice creation
    (decrement) and invoice cancellation (increment).
    """
    id: str
    name: str
    price: float
    currency: str = "CRC"
    cost: float = 0.0
    stock: int = 0
    sku: str = ""
    category: str = ""
    description: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "Product":
        product_id = coerce_str("id", data.get("id"))
        if not product_id:
            raise ValidationError("id is required")

        return cls(
            id=product_id,
            name=coerce_str("name", data.get("name")),
            price=require_non_negative("price", coerce_float("price", data.get("price"), default=0.0)),
            currency=validate_currency(data.get("currency")),
            # Missing acquisition cost is treated as zero
            cost=require_non_negative("cost", coerce_float("cost", data.get("cost"), default=0.0)),
            stock=coerce_int("stock", data.get("stock"), default=0),
            sku=coerce_str("sku", data.get("sku")),
            category=coerce_str("category", data.get("category")),
            description=coerce_str("description", data.get("description")),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "sku": self.sku,
            "price": self.price,
            "cost": self.cost,
            "currency": self.currency,
            "stock": self.stock,
            "category": self.category,
        }
