# Overview: Flask API routes for expenses; parses input and returns JSON responses.

from flask import Blueprint, jsonify, request

from ..services import expense_service
from ..storage import get_gateway
from .errors import json_error, json_payload

expenses_bp = Blueprint("expenses", __name__, url_prefix="/api/expenses")


@expenses_bp.get("")
def list_expenses_route():
    """
    List expenses, newest first.

    Query params:
    - q: str (optional) - match on provider or description
    """
    try:
        expenses = expense_service.list_expenses(get_gateway(), search=request.args.get("q"))
        return jsonify({
            "items": [e.to_dict() for e in expenses],
            "count": len(expenses),
            "total_amount": expense_service.total_amount(expenses),
        }), 200
    except Exception as e:
        return json_error(e, "list expenses")


@expenses_bp.post("")
def add_expense_route():
    try:
        expense = expense_service.add_expense(get_gateway(), json_payload())
        return jsonify({"expense": expense.to_dict()}), 201
    except Exception as e:
        return json_error(e, "add expense")


@expenses_bp.delete("/<expense_id>")
def delete_expense_route(expense_id: str):
    try:
        expense_service.delete_expense(get_gateway(), expense_id)
        return jsonify({"deleted": expense_id}), 200
    except Exception as e:
        return json_error(e, "delete expense")
