from __future__ import annotations

import math
from typing import Any, Iterable


SUPPORTED_CURRENCIES = ("CRC", "USD")


class ValidationError(ValueError):
    """400-level input problem."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., cancelling a cancelled invoice)."""


class NotFoundError(LookupError):
    """404-level missing record."""


def coerce_str(key: str, value: Any, *, default: str = "") -> str:
    if value is None:
        return default
    return str(value).strip()


def coerce_optional_str(key: str, value: Any) -> str | None:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def coerce_int(key: str, value: Any, *, default: int | None = None) -> int:
    """
    Strict integer coercion: rejects floats with a fractional part, scientific
    notation and booleans.
    """
    if value is None:
        if default is None:
            raise ValidationError(f"{key} is required")
        return default

    if isinstance(value, bool):
        raise ValidationError(f"{key} must be an integer")

    if isinstance(value, int):
        return value

    # JSON numbers like 3.0 arrive as floats
    if isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            raise ValidationError(f"{key} must be an integer, not a decimal")
        return int(value)

    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{key} must be an integer")
        # Reject scientific notation (e.g., "1e15", "1E10")
        if "e" in stripped.lower():
            raise ValidationError(f"{key} must be a plain integer (scientific notation not allowed)")
        if "." in stripped:
            raise ValidationError(f"{key} must be an integer (no decimals)")
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{key} must be an integer")

    raise ValidationError(f"{key} must be an integer")


def coerce_float(key: str, value: Any, *, default: float | None = None) -> float:
    if value is None or (isinstance(value, str) and not value.strip()):
        if default is None:
            raise ValidationError(f"{key} is required")
        return default

    if isinstance(value, bool):
        raise ValidationError(f"{key} must be a number")

    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{key} must be a number")

    if not math.isfinite(number):
        raise ValidationError(f"{key} must be a finite number")
    return number


def coerce_optional_float(key: str, value: Any) -> float | None:
    if value is None:
        return None
    return coerce_float(key, value)


def coerce_bool(key: str, value: Any, *, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    # fallback: truthiness
    return bool(value)


def require_non_negative(key: str, value: float) -> float:
    if value < 0:
        raise ValidationError(f"{key} cannot be negative")
    return value


def require_percentage(key: str, value: float) -> float:
    if value < 0 or value > 100:
        raise ValidationError(f"{key} must be between 0 and 100")
    return value


def require_choice(key: str, value: str, choices: Iterable[str]) -> str:
    allowed = tuple(choices)
    if value not in allowed:
        raise ValidationError(f"{key} must be one of: {', '.join(allowed)}")
    return value


def normalize_currency_code(value: Any, *, default: str = "CRC") -> str:
    """Upper-cased, trimmed currency code; blank falls back to default."""
    code = coerce_str("currency", value).upper()
    return code or default


def validate_currency(value: Any, *, default: str = "CRC") -> str:
    code = normalize_currency_code(value, default=default)
    return require_choice("currency", code, SUPPORTED_CURRENCIES)
