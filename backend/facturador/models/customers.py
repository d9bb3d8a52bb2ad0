from __future__ import annotations

from dataclasses import dataclass

from ..validation import ValidationError, coerce_str


@dataclass
class Customer:
    """Billing party; address fields follow the province/canton/district layout."""
    id: str
    name: str
    email: str = ""
    identification_type: str = ""
    tax_id: str = ""
    commercial_name: str = ""
    tax_regime: str = ""
    economic_activity: str = ""
    country: str = ""
    province: str = ""
    canton: str = ""
    district: str = ""
    zip_code: str = ""
    address: str = ""
    phone: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "Customer":
        customer_id = coerce_str("id", data.get("id"))
        if not customer_id:
            raise ValidationError("id is required")
        name = coerce_str("name", data.get("name"))
        if not name:
            raise ValidationError("name is required")

        kwargs = {
            key: coerce_str(key, data.get(key))
            for key in (
                "email", "identification_type", "tax_id", "commercial_name",
                "tax_regime", "economic_activity", "country", "province",
                "canton", "district", "zip_code", "address", "phone",
            )
        }
        return cls(id=customer_id, name=name, **kwargs)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "commercial_name": self.commercial_name,
            "email": self.email,
            "identification_type": self.identification_type,
            "tax_id": self.tax_id,
            "tax_regime": self.tax_regime,
            "economic_activity": self.economic_activity,
            "country": self.country,
            "province": self.province,
            "canton": self.canton,
            "district": self.district,
            "zip_code": self.zip_code,
            "address": self.address,
            "phone": self.phone,
        }
