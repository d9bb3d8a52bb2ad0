# Overview: Reads JSON request bodies and maps service exceptions to JSON error responses.

from flask import current_app, jsonify, request

from ..services.ledger_service import LedgerError
from ..services.pricing_service import InsufficientStockError
from ..storage import PersistenceError
from ..validation import ConflictError, NotFoundError, ValidationError


def json_payload() -> dict:
    """Request body as a JSON object; a missing or unparsable body reads as {}."""
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def json_error(exc: Exception, action: str):
    """
    Response for an exception raised while performing action.

    Unexpected exceptions are logged with a traceback and reported as 500.
    """
    if isinstance(exc, InsufficientStockError):
        return jsonify({"error": str(exc), "details": exc.details}), 400
    if isinstance(exc, ValidationError):
        return jsonify({"error": str(exc)}), 400
    if isinstance(exc, NotFoundError):
        return jsonify({"error": str(exc)}), 404
    if isinstance(exc, ConflictError):
        return jsonify({"error": str(exc)}), 409
    if isinstance(exc, (LedgerError, PersistenceError)):
        current_app.logger.exception("Failed to %s", action)
        return jsonify({"error": str(exc), "details": exc.details}), 503

    current_app.logger.exception("Failed to %s", action)
    return jsonify({"error": "Internal server error"}), 500
