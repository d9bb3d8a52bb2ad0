"""
Company settings (single record settings/general).

A missing record yields the defaults; a stored record without the hacienda
block gets the default block.
"""

from __future__ import annotations

from ..models import SETTINGS, SETTINGS_RECORD_ID, AppSettings
from ..storage import DocumentGateway


def get_settings(gateway: DocumentGateway) -> AppSettings:
    record = gateway.get_one(SETTINGS, SETTINGS_RECORD_ID)
    if record is None:
        return AppSettings()
    return AppSettings.from_dict(record)


def save_settings(gateway: DocumentGateway, payload: dict) -> AppSettings:
    settings = AppSettings.from_dict(payload)
    gateway.upsert(SETTINGS, SETTINGS_RECORD_ID, settings.to_dict())
    return settings


def update_settings(gateway: DocumentGateway, patch: dict) -> AppSettings:
    """Merge patch into the current settings and save the result."""
    merged = get_settings(gateway).to_dict()
    for key, value in patch.items():
        if key == "hacienda" and isinstance(value, dict):
            merged["hacienda"] = {**merged["hacienda"], **value}
        elif key in merged:
            merged[key] = value
    return save_settings(gateway, merged)
