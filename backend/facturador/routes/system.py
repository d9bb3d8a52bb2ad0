# backend/facturador/routes/system.py
"""
System health endpoint.

Reports which document store was selected at startup and whether it answers.
"""

import time
from flask import Blueprint, current_app

from ..models import SETTINGS
from ..storage import PersistenceError, get_gateway
from ..time_utils import utcnow, to_utc_z

system_bp = Blueprint("system", __name__)


def check_storage_health() -> dict:
    """
    Check document store connectivity with a cheap read.

    Returns dict with status and details.
    """
    gateway = get_gateway()
    start_time = time.time()
    try:
        gateway.list_all(SETTINGS)
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "backend": gateway.backend_name,
            "latency_ms": round(elapsed_ms, 2),
        }
    except PersistenceError:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Storage health check failed")
        return {
            "status": "unhealthy",
            "backend": gateway.backend_name,
            "latency_ms": round(elapsed_ms, 2),
            "error": "Storage error",
        }


@system_bp.get("/api/health")
def health():
    storage = check_storage_health()
    status_code = 200 if storage["status"] == "healthy" else 503
    return {
        "status": storage["status"],
        "timestamp": to_utc_z(utcnow()),
        "storage": storage,
    }, status_code
