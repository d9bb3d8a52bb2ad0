# Overview: Flask API routes for invoices; parses input and returns JSON responses.

# backend/facturador/routes/invoices.py
"""Invoice API routes: quote, submit, list and cancel."""

from flask import Blueprint, current_app, jsonify, request

from ..services import invoice_service
from ..storage import get_gateway
from .errors import json_error, json_payload

invoices_bp = Blueprint("invoices", __name__, url_prefix="/api/invoices")


@invoices_bp.get("")
def list_invoices_route():
    """
    List invoices, newest first.

    Query params:
    - status: paid | pending | cancelled (optional)
    """
    try:
        invoices = invoice_service.list_invoices(get_gateway(), status=request.args.get("status"))
        return jsonify({"items": [i.to_dict() for i in invoices], "count": len(invoices)}), 200
    except Exception as e:
        return json_error(e, "list invoices")


@invoices_bp.get("/<invoice_id>")
def get_invoice_route(invoice_id: str):
    try:
        invoice = invoice_service.get_invoice(get_gateway(), invoice_id)
        return jsonify({"invoice": invoice.to_dict()}), 200
    except Exception as e:
        return json_error(e, "load invoice")


@invoices_bp.post("/quote")
def quote_invoice_route():
    """
    Price lines and totals for a draft without saving anything.

    Body: {currency?, items: [{product_id, quantity, discount?, is_service?, unit_price?}]}
    """
    try:
        quote = invoice_service.quote_invoice(get_gateway(), json_payload())
        return jsonify(quote), 200
    except Exception as e:
        return json_error(e, "quote invoice")


@invoices_bp.post("")
def create_invoice_route():
    """
    Create an invoice, decrement stock and record its cost of sales in one
    atomic write.

    Body: {customer_id, currency?, date?, due_date?, status?, payment_method?,
           sale_condition?, notes?, reference?, items: [...]}
    """
    try:
        commit = invoice_service.submit_invoice(
            get_gateway(),
            json_payload(),
            stock_writes=current_app.config.get("LEDGER_STOCK_WRITES", "absolute"),
        )
        return jsonify(commit.to_dict()), 201
    except Exception as e:
        return json_error(e, "create invoice")


@invoices_bp.post("/<invoice_id>/cancel")
def cancel_invoice_route(invoice_id: str):
    """
    Cancel an invoice and restore its stock.

    Cancelling twice is refused with 409; the cost-of-sales expense stays.
    """
    try:
        cancellation = invoice_service.void_invoice(get_gateway(), invoice_id)
        return jsonify(cancellation.to_dict()), 200
    except Exception as e:
        return json_error(e, "cancel invoice")
