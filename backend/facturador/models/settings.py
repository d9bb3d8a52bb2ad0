from __future__ import annotations

from dataclasses import dataclass, field

from ..validation import (
    ValidationError,
    coerce_bool,
    coerce_float,
    coerce_str,
    require_choice,
    require_non_negative,
    validate_currency,
)

SETTINGS_RECORD_ID = "general"

# CRC per USD used whenever the configured rate is missing or unusable.
FALLBACK_EXCHANGE_RATE = 520.0
DEFAULT_TAX_RATE = 13.0

HACIENDA_ENVIRONMENTS = ("staging", "production")


def _coerce_rate(value) -> float:
    # Non-numeric rates are stored as the fallback; zero and negative rates
    # are kept as entered and resolved at conversion time.
    try:
        return coerce_float("exchange_rate", value, default=FALLBACK_EXCHANGE_RATE)
    except ValidationError:
        return FALLBACK_EXCHANGE_RATE


@dataclass
class HaciendaConfig:
    """Credentials for the electronic-invoicing API (stored, never used for real calls)."""
    environment: str = "staging"
    username: str = ""
    password: str = ""
    pin: str = ""
    certificate_uploaded: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "HaciendaConfig":
        return cls(
            environment=require_choice(
                "hacienda.environment",
                coerce_str("environment", data.get("environment"), default="staging") or "staging",
                HACIENDA_ENVIRONMENTS,
            ),
            username=coerce_str("username", data.get("username")),
            password=coerce_str("password", data.get("password")),
            pin=coerce_str("pin", data.get("pin")),
            certificate_uploaded=coerce_bool("certificate_uploaded", data.get("certificate_uploaded")),
        )

    def to_dict(self) -> dict:
        return {
            "environment": self.environment,
            "username": self.username,
            "password": self.password,
            "pin": self.pin,
            "certificate_uploaded": self.certificate_uploaded,
        }


@dataclass
class AppSettings:
    """
    Company-wide settings, stored as settings/general.

    tax_rate is a flat percentage applied to every line; exchange_rate is the
    CRC-per-USD rate used when items are priced.
    """
    company_name: str = "Mi Empresa S.A."
    company_tax_id: str = "3-101-123456"
    commercial_name: str = "Tecnología y Más"
    company_email: str = "facturacion@miempresa.com"
    company_phone: str = "2222-0000"
    company_website: str = "www.miempresa.cr"
    footer_message: str = "Autorizado mediante resolución DGT-R-033-2019. Gracias por su preferencia."
    currency: str = "CRC"
    exchange_rate: float = FALLBACK_EXCHANGE_RATE
    tax_rate: float = DEFAULT_TAX_RATE
    address: str = "San José, Mata Redonda, Sabana Norte, Edificio Principal"
    province: str = "San José"
    canton: str = "San José"
    district: str = "Mata Redonda"
    hacienda: HaciendaConfig = field(default_factory=HaciendaConfig)

    @classmethod
    def from_dict(cls, data: dict) -> "AppSettings":
        defaults = cls()
        hacienda_data = data.get("hacienda")
        text_fields = {
            key: coerce_str(key, data.get(key), default=getattr(defaults, key))
            for key in (
                "company_name", "company_tax_id", "commercial_name", "company_email",
                "company_phone", "company_website", "footer_message", "address",
                "province", "canton", "district",
            )
        }
        return cls(
            currency=validate_currency(data.get("currency")),
            exchange_rate=_coerce_rate(data.get("exchange_rate")),
            tax_rate=require_non_negative("tax_rate", coerce_float("tax_rate", data.get("tax_rate"), default=DEFAULT_TAX_RATE)),
            # Legacy records may predate the hacienda block
            hacienda=HaciendaConfig.from_dict(hacienda_data) if isinstance(hacienda_data, dict) else HaciendaConfig(),
            **text_fields,
        )

    def to_dict(self) -> dict:
        return {
            "company_name": self.company_name,
            "commercial_name": self.commercial_name,
            "company_tax_id": self.company_tax_id,
            "company_email": self.company_email,
            "company_phone": self.company_phone,
            "company_website": self.company_website,
            "footer_message": self.footer_message,
            "currency": self.currency,
            "exchange_rate": self.exchange_rate,
            "tax_rate": self.tax_rate,
            "address": self.address,
            "province": self.province,
            "canton": self.canton,
            "district": self.district,
            "hacienda": self.hacienda.to_dict(),
        }
