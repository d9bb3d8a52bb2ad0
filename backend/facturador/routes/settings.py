from __future__ import annotations

from flask import Blueprint, jsonify

from ..services import settings_service
from ..storage import get_gateway
from .errors import json_error, json_payload

settings_bp = Blueprint("settings", __name__, url_prefix="/api")


@settings_bp.get("/settings")
def get_settings_route():
    try:
        return jsonify({"settings": settings_service.get_settings(get_gateway()).to_dict()}), 200
    except Exception as e:
        return json_error(e, "load settings")


@settings_bp.put("/settings")
def update_settings_route():
    """Partial update; omitted fields keep their stored value."""
    try:
        settings = settings_service.update_settings(get_gateway(), json_payload())
        return jsonify({"settings": settings.to_dict()}), 200
    except Exception as e:
        return json_error(e, "save settings")
