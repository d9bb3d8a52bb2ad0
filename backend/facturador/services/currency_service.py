"""
Currency conversion between colones (CRC) and dollars (USD).

One global exchange rate (CRC per USD) drives every conversion. The rate is
always resolved through resolve_exchange_rate, so zero, negative, missing or
non-numeric rates fall back to FALLBACK_EXCHANGE_RATE instead of failing.
"""

from __future__ import annotations

import math
from typing import Any, NamedTuple

from ..models.settings import FALLBACK_EXCHANGE_RATE
from ..validation import normalize_currency_code

CURRENCY_SYMBOLS = {"CRC": "₡", "USD": "$"}


class Conversion(NamedTuple):
    amount: float
    # Human-readable note for display; empty when nothing was converted
    description: str


def resolve_exchange_rate(value: Any) -> float:
    try:
        rate = float(value)
    except (TypeError, ValueError):
        return FALLBACK_EXCHANGE_RATE
    if not math.isfinite(rate) or rate <= 0:
        return FALLBACK_EXCHANGE_RATE
    return rate


def currency_symbol(code: Any) -> str:
    return CURRENCY_SYMBOLS.get(normalize_currency_code(code), "$")


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def convert_with_info(amount: float, from_currency: Any, to_currency: Any, rate: Any) -> Conversion:
    source = normalize_currency_code(from_currency)
    target = normalize_currency_code(to_currency)
    resolved = resolve_exchange_rate(rate)

    if source == target:
        return Conversion(amount, "")

    if source == "USD" and target == "CRC":
        return Conversion(
            amount * resolved,
            f"Conversión: {currency_symbol(source)}{_format_number(amount)} x {_format_number(resolved)}",
        )

    if source == "CRC" and target == "USD":
        return Conversion(
            amount / resolved,
            f"Conversión: {currency_symbol(source)}{_format_number(amount)} / {_format_number(resolved)}",
        )

    # Unknown pairs pass through unchanged
    return Conversion(amount, "")


def convert(amount: float, from_currency: Any, to_currency: Any, rate: Any) -> float:
    return convert_with_info(amount, from_currency, to_currency, rate).amount
